# Copyright 2026 azmp Authors. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Checks a local VHD file against the Azure Marketplace image requirements.

Only the VHD footer (the last 512 bytes of the file) and, for dynamic disks,
the dynamic disk header are read. Partition layout, generalization and
credential checks need the disk contents and are reported as skipped.

The footer layout is described in the Virtual Hard Disk Image Format
Specification. All fields are big-endian.
"""

import dataclasses
import logging
import os
import struct
from typing import Any, Dict, List, Optional

from azmp import errors

FOOTER_SIZE = 512
DYNAMIC_HEADER_SIZE = 1024

MIN_SIZE_GB = 30
MAX_SIZE_GB = 2040
SECTOR_SIZE = 512
ALIGNMENT_BOUNDARY = 1024 * 1024
MAX_PARTITIONS = 4
COOKIE = 'conectix'
DYNAMIC_HEADER_COOKIE = 'cxsparse'

GB = 1024 ** 3

FIXED = 'fixed'
DYNAMIC = 'dynamic'
DIFFERENCING = 'differencing'
_DISK_TYPES = {2: FIXED, 3: DYNAMIC, 4: DIFFERENCING}

PASS = 'pass'
FAIL = 'fail'
WARNING = 'warning'
SKIPPED = 'skipped'

VHD_FORMAT = 'vhd-format'
VHD_SIZE_MIN = 'vhd-size-min'
VHD_SIZE_MAX = 'vhd-size-max'
VHD_TYPE = 'vhd-type'
VHD_ALIGNMENT = 'vhd-alignment'
PARTITION_COUNT = 'partition-count'
PARTITION_TYPE = 'partition-type'
GENERALIZATION = 'generalization'
SECURITY_CREDENTIALS = 'security-credentials'

# cookie, features, format version, data offset, timestamp, creator
# application, creator version, creator host OS, original size, current size,
# cylinders, heads, sectors per track, disk type, checksum, unique id, saved
# state.
_FOOTER_FORMAT = struct.Struct('>8sIIQI4sI4sQQHBBII16sB')
# cookie, data offset, table offset, header version, max table entries, block
# size, checksum, parent unique id, parent timestamp, reserved, parent name.
_DYNAMIC_HEADER_FORMAT = struct.Struct('>8sQQIIII16sI4s512s')

_STATUS_ICONS = {PASS: '✓', FAIL: '✗', WARNING: '⚠'}
_SKIPPED_ICON = '○'
_HEAVY_RULE = '═' * 80
_LIGHT_RULE = '─' * 80


@dataclasses.dataclass
class ValidationCheck:
  name: str
  category: str
  status: str
  message: str
  details: Optional[str] = None


@dataclasses.dataclass
class VhdValidationResult:
  valid: bool
  file_path: str
  checks: List[ValidationCheck]
  errors: List[str]
  warnings: List[str]
  metadata: Dict[str, Any]
  summary: str

  def ToDict(self) -> Dict[str, Any]:
    return {
        'valid': self.valid,
        'vhdPath': self.file_path,
        'checks': [_CheckToDict(c) for c in self.checks],
        'errors': list(self.errors),
        'warnings': list(self.warnings),
        'metadata': self.metadata,
        'summary': self.summary,
    }


def _CheckToDict(check):
  result = {
      'name': check.name,
      'category': check.category,
      'status': check.status,
      'message': check.message,
  }
  if check.details:
    result['details'] = check.details
  return result


def FormatVersion(version: int) -> str:
  """Formats a packed major.minor version, 0x00010000 being '1.0'."""
  if not version:
    return '0.0'
  return '{}.{}'.format((version >> 16) & 0xFFFF, version & 0xFFFF)


def _DecodeAscii(raw):
  return raw.decode('ascii', errors='replace').rstrip('\x00')


def ParseFooter(raw: bytes) -> Dict[str, Any]:
  """Decodes a 512-byte VHD footer.

  Raises:
    errors.Vhd.VhdReadError: if 'raw' is shorter than a footer.
  """
  if len(raw) < FOOTER_SIZE:
    raise errors.Vhd.VhdReadError(
        'VHD footer not found or invalid: file is smaller than {} bytes'
        .format(FOOTER_SIZE))
  (cookie, features, version, data_offset, timestamp, creator_app,
   creator_version, creator_os, original_size, current_size, cylinders,
   heads, sectors, disk_type, checksum, unique_id,
   saved_state) = _FOOTER_FORMAT.unpack_from(raw[-FOOTER_SIZE:])
  return {
      'cookie': _DecodeAscii(cookie),
      'features': features,
      'version': FormatVersion(version),
      'dataOffset': data_offset,
      'timestamp': timestamp,
      'creatorApplication': _DecodeAscii(creator_app),
      'creatorVersion': FormatVersion(creator_version),
      'creatorHostOS': _DecodeAscii(creator_os),
      'originalSize': original_size,
      'currentSize': current_size,
      'diskGeometry': {
          'cylinders': cylinders,
          'heads': heads,
          'sectorsPerTrack': sectors,
      },
      'diskType': disk_type,
      'checksum': checksum,
      'uniqueId': unique_id.hex(),
      'savedState': bool(saved_state),
  }


def ParseDynamicHeader(raw: bytes) -> Dict[str, Any]:
  """Decodes the 1024-byte header of a dynamic or differencing disk."""
  if len(raw) < DYNAMIC_HEADER_SIZE:
    raise errors.Vhd.VhdReadError('VHD dynamic disk header is truncated')
  (cookie, data_offset, table_offset, version, max_table_entries,
   block_size, checksum, parent_id, parent_timestamp, _,
   parent_name) = _DYNAMIC_HEADER_FORMAT.unpack_from(raw)
  return {
      'cookie': _DecodeAscii(cookie),
      'dataOffset': data_offset,
      'tableOffset': table_offset,
      'version': FormatVersion(version),
      'maxTableEntries': max_table_entries,
      'blockSize': block_size,
      'checksum': checksum,
      'parentUniqueId': parent_id.hex(),
      'parentTimestamp': parent_timestamp,
      'parentPath': parent_name.decode('utf-16-be',
                                       errors='replace').rstrip('\x00'),
  }


def ReadVhdStructure(path: str) -> Dict[str, Any]:
  """Reads the footer, and the dynamic header if any, of the VHD at 'path'.

  Returns:
    The metadata dict: virtualSize, virtualSizeGB, diskType, footer and, for
    dynamic disks with a readable header, header and blockSize.

  Raises:
    errors.Vhd.VhdReadError: if the footer cannot be read.
  """
  try:
    with open(path, 'rb') as fp:
      fp.seek(0, os.SEEK_END)
      file_size = fp.tell()
      if file_size < FOOTER_SIZE:
        raise errors.Vhd.VhdReadError(
            'VHD footer not found or invalid: file is smaller than {} bytes'
            .format(FOOTER_SIZE))
      fp.seek(file_size - FOOTER_SIZE)
      footer = ParseFooter(fp.read(FOOTER_SIZE))
      metadata = {
          'virtualSize': footer['currentSize'],
          'virtualSizeGB': footer['currentSize'] / GB,
          'diskType': _DISK_TYPES.get(footer['diskType'] or 2, DYNAMIC),
          'footer': footer,
      }
      offset = footer['dataOffset']
      if (metadata['diskType'] == DYNAMIC and
          offset + DYNAMIC_HEADER_SIZE <= file_size - FOOTER_SIZE):
        fp.seek(offset)
        header = ParseDynamicHeader(fp.read(DYNAMIC_HEADER_SIZE))
        if header['cookie'] == DYNAMIC_HEADER_COOKIE:
          metadata['header'] = header
          metadata['blockSize'] = header['blockSize']
        else:
          logging.debug('No dynamic disk header at offset %d of %s', offset,
                        path)
  except OSError as e:
    raise errors.Vhd.VhdReadError(str(e))
  return metadata


class VhdValidator(object):
  """Runs the marketplace checks over one VHD file.

  Attributes:
    os_type: 'Linux' or 'Windows', used in the generalization guidance.
    check_generalization: bool. Whether to report the generalization check.
    strict_mode: bool. Whether a dynamic disk is reported as a warning.
  """

  def __init__(self, os_type='Linux', check_generalization=True,
               strict_mode=True):
    self.os_type = os_type or 'Linux'
    self.check_generalization = check_generalization is not False
    self.strict_mode = strict_mode is not False
    self._Reset()

  def _Reset(self):
    self.checks = []
    self.errors = []
    self.warnings = []
    self.metadata = {}

  def _AddCheck(self, name, category, status, message, details=None):
    self.checks.append(
        ValidationCheck(name, category, status, message, details))

  def Validate(self, path: str) -> VhdValidationResult:
    """Validates the VHD at 'path'. Never raises on a bad file."""
    self._Reset()
    try:
      self._CheckFileAccess(path)
      self._ParseStructure(path)
      self._ValidateFormat()
      self._ValidateSize()
      self._ValidateType()
      self._ValidateAlignment()
      self._ValidatePartitions()
      if self.check_generalization:
        self._ValidateGeneralization()
      self._CheckSecurity()
    except (errors.Error, OSError) as e:
      logging.info('VHD validation of %s stopped: %s', path, e)
      self.errors.append('Validation failed: {}'.format(e))
      self._AddCheck('validation-error', 'format', FAIL,
                     'Validation process encountered an error', str(e))
    return self._BuildResult(path)

  def _CheckFileAccess(self, path):
    try:
      if not os.path.isfile(path):
        if os.path.exists(path):
          raise errors.Vhd.VhdReadError('VHD path is not a file')
        raise errors.Vhd.VhdReadError(
            'VHD file not found: {}'.format(path))
      if not os.access(path, os.R_OK):
        raise errors.Vhd.VhdReadError(
            'VHD file is not readable: {}'.format(path))
      size = os.path.getsize(path)
    except (errors.Error, OSError) as e:
      self._AddCheck('file-access', 'format', FAIL,
                     'VHD file cannot be accessed', str(e))
      raise
    self.metadata['fileSize'] = size
    self.metadata['fileSizeGB'] = size / GB
    self._AddCheck('file-access', 'format', PASS,
                   'VHD file exists and is readable',
                   'File size: {:.2f} GB'.format(size / GB))

  def _ParseStructure(self, path):
    try:
      self.metadata.update(ReadVhdStructure(path))
    except errors.Vhd.VhdReadError as e:
      self._AddCheck('vhd-structure', 'format', FAIL,
                     'Failed to parse VHD structure', str(e))
      raise
    self._AddCheck(
        'vhd-structure', 'format', PASS, 'VHD structure parsed successfully',
        'Disk type: {}, Virtual size: {:.2f} GB'.format(
            self.metadata['diskType'], self.metadata['virtualSizeGB']))

  def _ValidateFormat(self):
    footer = self.metadata['footer']
    if footer['cookie'] != COOKIE:
      self._AddCheck(
          VHD_FORMAT, 'format', FAIL,
          "Invalid VHD cookie: expected '{}', got '{}'".format(
              COOKIE, footer['cookie']))
      return
    version = footer['version']
    if not version.startswith('1.'):
      self._AddCheck(VHD_FORMAT, 'format', WARNING,
                     'VHD version {} may not be compatible with Azure'.format(
                         version),
                     'Azure expects VHD format version 1.0')
      self.warnings.append(
          'VHD version {} detected (expected 1.0)'.format(version))
    else:
      self._AddCheck(VHD_FORMAT, 'format', PASS, 'VHD format is valid',
                     'Cookie: {}, Version: {}'.format(footer['cookie'],
                                                      version))

  def _ValidateSize(self):
    size_gb = self.metadata.get('virtualSizeGB') or 0
    if size_gb < MIN_SIZE_GB:
      self._AddCheck(
          VHD_SIZE_MIN, 'size', FAIL,
          'VHD size ({:.2f} GB) is below minimum ({} GB)'.format(
              size_gb, MIN_SIZE_GB),
          'Azure requires VHDs to be at least 30 GB')
      self.errors.append('VHD too small: {:.2f} GB (minimum: {} GB)'.format(
          size_gb, MIN_SIZE_GB))
    else:
      self._AddCheck(
          VHD_SIZE_MIN, 'size', PASS,
          'VHD size ({:.2f} GB) meets minimum requirement'.format(size_gb))

    if size_gb > MAX_SIZE_GB:
      self._AddCheck(
          VHD_SIZE_MAX, 'size', FAIL,
          'VHD size ({:.2f} GB) exceeds maximum ({} GB)'.format(
              size_gb, MAX_SIZE_GB),
          'Azure supports VHDs up to 2040 GB (2 TB - 8 GB)')
      self.errors.append('VHD too large: {:.2f} GB (maximum: {} GB)'.format(
          size_gb, MAX_SIZE_GB))
    else:
      self._AddCheck(
          VHD_SIZE_MAX, 'size', PASS,
          'VHD size ({:.2f} GB) is within maximum limit'.format(size_gb))

  def _ValidateType(self):
    disk_type = self.metadata.get('diskType')
    if disk_type == FIXED:
      self._AddCheck(VHD_TYPE, 'format', PASS,
                     'VHD is fixed-size (recommended for Azure)',
                     'Fixed-size VHDs provide better performance in Azure')
    elif disk_type == DYNAMIC and self.strict_mode:
      self._AddCheck(VHD_TYPE, 'format', WARNING,
                     'VHD is dynamically expanding',
                     'Fixed-size VHDs are recommended for production '
                     'workloads in Azure')
      self.warnings.append(
          'Dynamic VHD detected; fixed-size VHDs are recommended for Azure')
    elif disk_type == DYNAMIC:
      self._AddCheck(VHD_TYPE, 'format', PASS,
                     'VHD is dynamically expanding (acceptable)')
    elif disk_type == DIFFERENCING:
      self._AddCheck(VHD_TYPE, 'format', FAIL,
                     'Differencing VHDs are not supported in Azure',
                     'Azure requires fixed or dynamic VHDs')
      self.errors.append('Differencing VHD detected; Azure does not support '
                         'differencing VHDs')
    else:
      self._AddCheck(VHD_TYPE, 'format', FAIL,
                     'Unknown VHD type: {}'.format(disk_type))
      self.errors.append('Unknown VHD type: {}'.format(disk_type))

  def _ValidateAlignment(self):
    virtual_size = self.metadata.get('virtualSize') or 0
    misalignment = virtual_size % ALIGNMENT_BOUNDARY
    if not misalignment:
      self._AddCheck(VHD_ALIGNMENT, 'alignment', PASS,
                     'VHD is aligned to 1 MB boundary',
                     'Virtual size: {} bytes ({} MB)'.format(
                         virtual_size, virtual_size // ALIGNMENT_BOUNDARY))
      return
    self._AddCheck(VHD_ALIGNMENT, 'alignment', FAIL,
                   'VHD is not aligned to 1 MB boundary',
                   'Misalignment: {} bytes. Azure requires VHDs aligned to '
                   '1 MB (1048576 bytes)'.format(misalignment))
    self.errors.append(
        'VHD misaligned: {} bytes off 1 MB boundary'.format(misalignment))

  def _ValidatePartitions(self):
    self._AddCheck(PARTITION_COUNT, 'partition', SKIPPED,
                   'Partition validation requires full disk analysis',
                   'Use Azure VM Certification Test Tool for comprehensive '
                   'partition validation')
    self._AddCheck(PARTITION_TYPE, 'partition', SKIPPED,
                   'Partition type validation requires full disk analysis',
                   'Ensure single root partition for OS disk. Data disks '
                   'should be unpartitioned or single partition.')
    self.warnings.append('Partition validation skipped; use Azure VM '
                         'Certification Test Tool for full analysis')

  def _ValidateGeneralization(self):
    if self.os_type == 'Windows':
      details = ('Ensure VM was generalized with sysprep /generalize /oobe '
                 '/shutdown')
    else:
      details = ('Ensure VM was deprovisioned with waagent '
                 '-deprovision+user -force')
    self._AddCheck(GENERALIZATION, 'generalization', SKIPPED,
                   'Generalization validation requires disk content analysis',
                   details)
    self.warnings.append('Generalization check skipped; ensure {} VM is '
                         'properly generalized'.format(self.os_type))

  def _CheckSecurity(self):
    self._AddCheck(SECURITY_CREDENTIALS, 'security', SKIPPED,
                   'Security validation requires disk content analysis',
                   'Ensure no hardcoded credentials, SSH keys, or sensitive '
                   'data in VHD')
    self.warnings.append(
        'Security check skipped; ensure no hardcoded credentials in VHD')

  def _BuildResult(self, path):
    counts = {PASS: 0, FAIL: 0, WARNING: 0, SKIPPED: 0}
    for check in self.checks:
      counts[check.status] += 1
    valid = not counts[FAIL] and not self.errors
    summary = 'VHD Validation {}: {} passed, {} failed, {} warnings, {} skipped'.format(
        'PASSED' if valid else 'FAILED', counts[PASS], counts[FAIL],
        counts[WARNING], counts[SKIPPED])
    if not valid:
      summary += '\n\nErrors:\n' + '\n'.join(
          '  - {}'.format(e) for e in self.errors)
    if self.warnings:
      summary += '\n\nWarnings:\n' + '\n'.join(
          '  - {}'.format(w) for w in self.warnings)
    return VhdValidationResult(
        valid=valid,
        file_path=path,
        checks=list(self.checks),
        errors=list(self.errors),
        warnings=list(self.warnings),
        metadata=dict(self.metadata),
        summary=summary)


def ValidateVhd(path: str, **options) -> VhdValidationResult:
  """Validates the VHD at 'path' with VhdValidator(**options)."""
  return VhdValidator(**options).Validate(path)


def IsValidVhd(path: str) -> bool:
  return ValidateVhd(path).valid


def GetVhdMetadata(path: str) -> Optional[Dict[str, Any]]:
  """Returns the metadata of the VHD at 'path', or None if it is unreadable."""
  try:
    return ReadVhdStructure(path)
  except errors.Vhd.VhdReadError as e:
    logging.debug('Could not read VHD metadata of %s: %s', path, e)
    return None


def FormatValidationResult(result: VhdValidationResult) -> str:
  """Returns a human readable report of 'result'."""
  metadata = result.metadata
  lines = [
      _HEAVY_RULE,
      'VHD VALIDATION REPORT',
      _HEAVY_RULE,
      '',
      'VHD File: {}'.format(result.file_path),
      'Status: {}'.format('✓ VALID' if result.valid
                          else '✗ INVALID'),
      '',
      _LIGHT_RULE,
      'METADATA',
      _LIGHT_RULE,
      'File Size: {:.2f} GB'.format(metadata.get('fileSizeGB') or 0),
      'Virtual Size: {:.2f} GB'.format(metadata.get('virtualSizeGB') or 0),
      'Disk Type: {}'.format(metadata.get('diskType', 'unknown')),
  ]
  if metadata.get('blockSize'):
    lines.append('Block Size: {:.0f} KB'.format(metadata['blockSize'] / 1024))
  lines.extend(['', _LIGHT_RULE, 'VALIDATION CHECKS', _LIGHT_RULE])
  for check in result.checks:
    icon = _STATUS_ICONS.get(check.status, _SKIPPED_ICON)
    lines.append('[{}] {}: {}'.format(icon, check.name, check.message))
    if check.details:
      lines.append('    {}'.format(check.details))
  lines.extend(['', _LIGHT_RULE, 'SUMMARY', _LIGHT_RULE, result.summary,
                _HEAVY_RULE])
  return '\n'.join(lines) + '\n'
