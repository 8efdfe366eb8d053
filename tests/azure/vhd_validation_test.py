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
"""Tests for azmp.azure.vhd_validation."""

import os
import struct
import unittest

from absl.testing import absltest

from azmp import errors
from azmp.azure import vhd_validation

_FOOTER = struct.Struct('>8sIIQI4sI4sQQHBBII16sB')
_DYNAMIC_HEADER = struct.Struct('>8sQQIIII16sI4s512s')
_GB = 1024 ** 3
_NO_DATA_OFFSET = 0xFFFFFFFFFFFFFFFF


def _Footer(size=30 * _GB, disk_type=2, data_offset=_NO_DATA_OFFSET,
            cookie=b'conectix', version=0x00010000):
  raw = _FOOTER.pack(cookie, 2, version, data_offset, 0, b'azmp',
                     0x00010000, b'Wi2k', size, size, 1024, 16, 63,
                     disk_type, 0, b'\x01' * 16, 0)
  return raw.ljust(512, b'\x00')


def _DynamicHeader(block_size=2 * 1024 * 1024, cookie=b'cxsparse'):
  raw = _DYNAMIC_HEADER.pack(cookie, _NO_DATA_OFFSET, 1536, 0x00010000, 15360,
                             block_size, 0, b'\x00' * 16, 0, b'\x00' * 4,
                             b'\x00' * 512)
  return raw.ljust(1024, b'\x00')


class VhdValidationTestCase(absltest.TestCase):

  def _WriteVhd(self, content):
    return self.create_tempfile('disk.vhd', content=content, mode='wb'
                               ).full_path

  def _Check(self, result, name):
    return next(c for c in result.checks if c.name == name)

  def testParseFooter(self):
    footer = vhd_validation.ParseFooter(b'\x00' * 100 + _Footer(disk_type=3))
    self.assertEqual('conectix', footer['cookie'])
    self.assertEqual('1.0', footer['version'])
    self.assertEqual('azmp', footer['creatorApplication'])
    self.assertEqual('Wi2k', footer['creatorHostOS'])
    self.assertEqual(30 * _GB, footer['currentSize'])
    self.assertEqual(3, footer['diskType'])
    self.assertEqual({'cylinders': 1024, 'heads': 16, 'sectorsPerTrack': 63},
                     footer['diskGeometry'])
    self.assertEqual('01' * 16, footer['uniqueId'])
    self.assertFalse(footer['savedState'])

  def testParseShortFooter(self):
    with self.assertRaises(errors.Vhd.VhdReadError):
      vhd_validation.ParseFooter(b'conectix')

  def testFormatVersion(self):
    self.assertEqual('0.0', vhd_validation.FormatVersion(0))
    self.assertEqual('1.0', vhd_validation.FormatVersion(0x00010000))
    self.assertEqual('6.3', vhd_validation.FormatVersion(0x00060003))

  def testValidFixedVhd(self):
    path = self._WriteVhd(_Footer())
    result = vhd_validation.VhdValidator().Validate(path)
    self.assertTrue(result.valid)
    self.assertEqual([], result.errors)
    self.assertEqual('fixed', result.metadata['diskType'])
    self.assertEqual(30.0, result.metadata['virtualSizeGB'])
    self.assertEqual(
        ['file-access', 'vhd-structure', 'vhd-format', 'vhd-size-min',
         'vhd-size-max', 'vhd-type', 'vhd-alignment', 'partition-count',
         'partition-type', 'generalization', 'security-credentials'],
        [c.name for c in result.checks])
    self.assertTrue(result.summary.startswith(
        'VHD Validation PASSED: 7 passed, 0 failed, 0 warnings, 4 skipped'))
    self.assertTrue(vhd_validation.IsValidVhd(path))

  def testSkipGeneralization(self):
    path = self._WriteVhd(_Footer())
    result = vhd_validation.ValidateVhd(path, check_generalization=False)
    self.assertNotIn('generalization', [c.name for c in result.checks])

  def testWindowsGeneralizationGuidance(self):
    path = self._WriteVhd(_Footer())
    result = vhd_validation.ValidateVhd(path, os_type='Windows')
    self.assertIn('sysprep', self._Check(result, 'generalization').details)
    self.assertIn('ensure Windows VM is properly generalized',
                  ' '.join(result.warnings))

  def testDynamicVhd(self):
    path = self._WriteVhd(
        _Footer(disk_type=3, data_offset=512) + _DynamicHeader() +
        _Footer(disk_type=3, data_offset=512))
    metadata = vhd_validation.GetVhdMetadata(path)
    self.assertEqual('dynamic', metadata['diskType'])
    self.assertEqual(2 * 1024 * 1024, metadata['blockSize'])
    self.assertEqual(1536, metadata['header']['tableOffset'])

    result = vhd_validation.ValidateVhd(path)
    self.assertTrue(result.valid)
    self.assertEqual('warning', self._Check(result, 'vhd-type').status)
    self.assertIn('Block Size: 2048 KB',
                  vhd_validation.FormatValidationResult(result))

    result = vhd_validation.ValidateVhd(path, strict_mode=False)
    self.assertEqual('pass', self._Check(result, 'vhd-type').status)

  def testDynamicHeaderWithoutCookieIsIgnored(self):
    path = self._WriteVhd(
        _Footer(disk_type=3, data_offset=512) +
        _DynamicHeader(cookie=b'garbage!') +
        _Footer(disk_type=3, data_offset=512))
    metadata = vhd_validation.GetVhdMetadata(path)
    self.assertNotIn('header', metadata)
    self.assertNotIn('blockSize', metadata)

  def testDifferencingVhd(self):
    result = vhd_validation.ValidateVhd(self._WriteVhd(_Footer(disk_type=4)))
    self.assertFalse(result.valid)
    self.assertIn('Differencing VHD detected; Azure does not support '
                  'differencing VHDs', result.errors)

  def testTooSmall(self):
    result = vhd_validation.ValidateVhd(self._WriteVhd(_Footer(size=_GB)))
    self.assertFalse(result.valid)
    self.assertEqual(['VHD too small: 1.00 GB (minimum: 30 GB)'],
                     result.errors)

  def testTooLarge(self):
    result = vhd_validation.ValidateVhd(
        self._WriteVhd(_Footer(size=2048 * _GB)))
    self.assertEqual(['VHD too large: 2048.00 GB (maximum: 2040 GB)'],
                     result.errors)

  def testMisaligned(self):
    result = vhd_validation.ValidateVhd(
        self._WriteVhd(_Footer(size=30 * _GB + 512)))
    self.assertFalse(result.valid)
    self.assertEqual(['VHD misaligned: 512 bytes off 1 MB boundary'],
                     result.errors)

  def testBadCookie(self):
    result = vhd_validation.ValidateVhd(
        self._WriteVhd(_Footer(cookie=b'notavhd!')))
    self.assertFalse(result.valid)
    self.assertEqual("Invalid VHD cookie: expected 'conectix', got 'notavhd!'",
                     self._Check(result, 'vhd-format').message)

  def testUnexpectedVersion(self):
    result = vhd_validation.ValidateVhd(
        self._WriteVhd(_Footer(version=0x00020000)))
    self.assertTrue(result.valid)
    self.assertIn('VHD version 2.0 detected (expected 1.0)', result.warnings)

  def testMissingFile(self):
    path = os.path.join(self.create_tempdir().full_path, 'missing.vhd')
    result = vhd_validation.ValidateVhd(path)
    self.assertFalse(result.valid)
    self.assertEqual('fail', self._Check(result, 'file-access').status)
    self.assertEqual('fail', self._Check(result, 'validation-error').status)
    self.assertEqual(['Validation failed: VHD file not found: ' + path],
                     result.errors)
    self.assertIsNone(vhd_validation.GetVhdMetadata(path))
    self.assertFalse(vhd_validation.IsValidVhd(path))

  def testTruncatedFile(self):
    result = vhd_validation.ValidateVhd(self._WriteVhd(b'conectix'))
    self.assertFalse(result.valid)
    self.assertEqual('pass', self._Check(result, 'file-access').status)
    self.assertEqual('fail', self._Check(result, 'vhd-structure').status)

  def testReadVhdStructureRaises(self):
    with self.assertRaises(errors.Vhd.VhdReadError):
      vhd_validation.ReadVhdStructure(self._WriteVhd(b'short'))

  def testToDict(self):
    path = self._WriteVhd(_Footer())
    report = vhd_validation.ValidateVhd(path).ToDict()
    self.assertEqual(path, report['vhdPath'])
    self.assertTrue(report['valid'])
    self.assertEqual({'name': 'partition-count', 'category': 'partition',
                      'status': 'skipped',
                      'message': 'Partition validation requires full disk '
                                 'analysis',
                      'details': 'Use Azure VM Certification Test Tool for '
                                 'comprehensive partition validation'},
                     report['checks'][7])

  def testFormatReport(self):
    result = vhd_validation.ValidateVhd(self._WriteVhd(_Footer(size=_GB)))
    report = vhd_validation.FormatValidationResult(result)
    self.assertIn('VHD VALIDATION REPORT', report)
    self.assertIn('Status: ✗ INVALID', report)
    self.assertIn('[✗] vhd-size-min: VHD size (1.00 GB) is below minimum '
                  '(30 GB)', report)
    self.assertIn('[○] partition-count', report)
    self.assertTrue(report.endswith('═' * 80 + '\n'))


if __name__ == '__main__':
  unittest.main()
