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
"""Data disk layouts attached to a marketplace VM.

A layout is a number of identical disks attached through an ARM copy loop.
Individual disks may be overridden by index to change their size, storage
type, caching or LUN.
"""

import collections
import dataclasses
import re
from typing import Any, Dict, List, Optional

from azmp import arm_util
from azmp import errors
from azmp.azure import disk_types

DATABASE = 'database'
LOGS = 'logs'
APP_DATA = 'appdata'
HIGH_PERFORMANCE = 'highperformance'
ARCHIVE = 'archive'
CUSTOM = 'custom'

WORKLOAD_DATABASE = 'database'
WORKLOAD_LOGS = 'logs'
WORKLOAD_APPLICATION = 'application'
WORKLOAD_ANALYTICS = 'analytics'
WORKLOAD_ARCHIVE = 'archive'
WORKLOAD_TYPES = (WORKLOAD_DATABASE, WORKLOAD_LOGS, WORKLOAD_APPLICATION,
                  WORKLOAD_ANALYTICS, WORKLOAD_ARCHIVE)

MIN_DISK_SIZE_GB = 4
MAX_DISK_SIZE_GB = 32767
MIN_LUN = 0
MAX_LUN = 63
DEFAULT_MAX_DATA_DISKS = 4
# Per-disk performance caps used by CalculatePerformance.
MAX_DISK_IOPS = 20000
MAX_DISK_THROUGHPUT_MBPS = 900

_PREMIUM_TYPES = (disk_types.PREMIUM_SSD, disk_types.PREMIUM_SSD_ZRS,
                  disk_types.PREMIUM_V2)
_LEGACY_PREMIUM_SERIES = ('DS', 'ES', 'FS', 'GS', 'LS', 'MS', 'NV', 'NC')
_PREMIUM_SUFFIX_RE = re.compile(r's(_v\d+)?$')
_CORES_RE = re.compile(r'(\d+)')


@dataclasses.dataclass(frozen=True)
class DataDiskPreset:
  preset: str
  name: str
  description: str
  use_case: str
  disk_count: int
  disk_size_gb: int
  disk_type: str
  caching: str
  min_disk_slots: int
  estimated_monthly_cost: float


DATA_DISK_PRESETS = collections.OrderedDict([
    (DATABASE, DataDiskPreset(
        DATABASE, 'Database',
        'Optimized for database workloads (SQL Server, PostgreSQL, MySQL)',
        'Production databases, OLTP workloads, read-heavy applications',
        4, 1024, disk_types.PREMIUM_SSD, disk_types.READ_ONLY, 4, 614)),
    (LOGS, DataDiskPreset(
        LOGS, 'Logs',
        'Optimized for log file storage and write-heavy workloads',
        'Application logs, transaction logs, telemetry data',
        2, 512, disk_types.STANDARD_SSD, disk_types.NONE, 2, 77)),
    (APP_DATA, DataDiskPreset(
        APP_DATA, 'Application Data',
        'Balanced configuration for application data and file storage',
        'Application files, user data, content storage',
        2, 256, disk_types.STANDARD_SSD, disk_types.READ_WRITE, 2, 38)),
    (HIGH_PERFORMANCE, DataDiskPreset(
        HIGH_PERFORMANCE, 'High Performance',
        'Maximum performance for I/O intensive workloads',
        'Analytics, big data processing, high-performance computing',
        8, 2048, disk_types.PREMIUM_SSD, disk_types.READ_ONLY, 8, 2458)),
    (ARCHIVE, DataDiskPreset(
        ARCHIVE, 'Archive',
        'Cost-optimized for long-term data retention',
        'Backups, archives, infrequently accessed data',
        1, 4096, disk_types.STANDARD_HDD, disk_types.NONE, 1, 77)),
    (CUSTOM, DataDiskPreset(
        CUSTOM, 'Custom',
        'Build your own data disk configuration',
        'Custom requirements not covered by presets',
        0, 128, disk_types.STANDARD_SSD, disk_types.READ_ONLY, 0, 0)),
])

MAX_DATA_DISKS_BY_VM_SIZE = {
    'Standard_B1s': 2,
    'Standard_B1ms': 2,
    'Standard_B2s': 4,
    'Standard_B2ms': 4,
    'Standard_B4ms': 8,
    'Standard_B8ms': 16,
    'Standard_B12ms': 16,
    'Standard_B16ms': 32,
    'Standard_B20ms': 32,
    'Standard_D2s_v3': 4,
    'Standard_D4s_v3': 8,
    'Standard_D8s_v3': 16,
    'Standard_D16s_v3': 32,
    'Standard_D32s_v3': 32,
    'Standard_D48s_v3': 32,
    'Standard_D64s_v3': 32,
    'Standard_E2s_v3': 4,
    'Standard_E4s_v3': 8,
    'Standard_E8s_v3': 16,
    'Standard_E16s_v3': 32,
    'Standard_E32s_v3': 32,
    'Standard_E48s_v3': 32,
    'Standard_E64s_v3': 32,
    'Standard_F2s_v2': 4,
    'Standard_F4s_v2': 8,
    'Standard_F8s_v2': 16,
    'Standard_F16s_v2': 32,
    'Standard_F32s_v2': 32,
    'Standard_F48s_v2': 32,
    'Standard_F64s_v2': 32,
    'Standard_M8ms': 8,
    'Standard_M16ms': 16,
    'Standard_M32ms': 32,
    'Standard_M64ms': 32,
    'Standard_M128ms': 32,
}

# Monthly price per GB.
PRICE_PER_GB_MONTH = {
    disk_types.STANDARD_HDD: 0.019,
    disk_types.STANDARD_SSD: 0.075,
    disk_types.STANDARD_SSD_ZRS: 0.094,
    disk_types.PREMIUM_SSD: 0.150,
    disk_types.PREMIUM_SSD_ZRS: 0.188,
    disk_types.PREMIUM_V2: 0.180,
    # Base price only, provisioned IOPS and throughput are billed apart.
    disk_types.ULTRA_SSD: 0.240,
}

# (IOPS per GB, MB/s per GB)
PERFORMANCE_PER_GB = {
    disk_types.STANDARD_HDD: (0.5, 0.06),
    disk_types.STANDARD_SSD: (4, 0.06),
    disk_types.STANDARD_SSD_ZRS: (4, 0.06),
    disk_types.PREMIUM_SSD: (5, 0.2),
    disk_types.PREMIUM_SSD_ZRS: (5, 0.2),
    disk_types.PREMIUM_V2: (10, 0.3),
    disk_types.ULTRA_SSD: (20, 0.4),
}


@dataclasses.dataclass
class DiskOverride:
  """Replaces the layout defaults for the disk at 'match_index'."""
  match_index: int
  size_gb: Optional[int] = None
  disk_type: Optional[str] = None
  caching: Optional[str] = None
  lun: Optional[int] = None
  name: Optional[str] = None


@dataclasses.dataclass
class DataDisksConfiguration:
  vm_name: str
  resource_group: str
  vm_size: str
  location: str = 'eastus'
  disk_count: int = 0
  disk_size_gb: int = 128
  disk_type: str = disk_types.STANDARD_SSD
  caching: str = disk_types.READ_ONLY
  lun_start: int = 0
  disk_overrides: List[DiskOverride] = dataclasses.field(default_factory=list)
  preset: Optional[str] = None


def GetAllPresets() -> List[DataDiskPreset]:
  return [p for p in DATA_DISK_PRESETS.values() if p.preset != CUSTOM]


def GetPreset(preset: str) -> Optional[DataDiskPreset]:
  return DATA_DISK_PRESETS.get(preset)


def GetMaxDataDisks(vm_size: str) -> int:
  return MAX_DATA_DISKS_BY_VM_SIZE.get(vm_size, DEFAULT_MAX_DATA_DISKS)


def GetRecommendedPreset(workload: str, vm_size: str) -> str:
  max_disks = GetMaxDataDisks(vm_size)
  if workload == WORKLOAD_DATABASE:
    return DATABASE if max_disks >= 4 else APP_DATA
  if workload == WORKLOAD_LOGS:
    return LOGS
  if workload == WORKLOAD_ANALYTICS:
    return HIGH_PERFORMANCE if max_disks >= 8 else DATABASE
  if workload == WORKLOAD_ARCHIVE:
    return ARCHIVE
  return APP_DATA


def GetRecommendedCaching(workload: str) -> str:
  if workload in (WORKLOAD_LOGS, WORKLOAD_ARCHIVE):
    return disk_types.NONE
  if workload == WORKLOAD_APPLICATION:
    return disk_types.READ_WRITE
  return disk_types.READ_ONLY


def IsValidDiskSize(size_gb: int) -> bool:
  return MIN_DISK_SIZE_GB <= size_gb <= MAX_DISK_SIZE_GB


def IsValidLun(lun: int) -> bool:
  return MIN_LUN <= lun <= MAX_LUN


def IsPremiumCapable(vm_size: str) -> bool:
  if any(series in vm_size for series in _LEGACY_PREMIUM_SERIES):
    return True
  return bool(_PREMIUM_SUFFIX_RE.search(vm_size))


class DataDiskManager(object):
  """Validates, prices and renders a DataDisksConfiguration."""

  def __init__(self, config: DataDisksConfiguration):
    self.config = config
    if not config.location:
      config.location = 'eastus'
    if config.lun_start is None:
      config.lun_start = 0
    self._overrides = {o.match_index: o for o in config.disk_overrides or []}

  def _Disk(self, index):
    """Returns (size_gb, disk_type, caching, lun) of the disk at 'index'."""
    config = self.config
    override = self._overrides.get(index) or DiskOverride(index)

    def _Pick(value, default):
      return default if value is None else value

    return (_Pick(override.size_gb, config.disk_size_gb),
            _Pick(override.disk_type, config.disk_type),
            _Pick(override.caching, config.caching),
            _Pick(override.lun, config.lun_start + index))

  def _Disks(self):
    return [self._Disk(i) for i in range(self.config.disk_count)]

  def _UsesPremiumDisks(self):
    if self.config.disk_type in _PREMIUM_TYPES:
      return True
    return any(o.disk_type in _PREMIUM_TYPES
               for o in self.config.disk_overrides or [])

  def GetVmLimits(self) -> Dict[str, int]:
    """Returns the disk count, IOPS and throughput limits of the VM size.

    IOPS and throughput are estimated from the first number in the size name,
    taken as the core count: 2000 IOPS and 50 MB/s per core.
    """
    match = _CORES_RE.search(self.config.vm_size or '')
    cores = int(match.group(1)) if match else 2
    return {
        'maxDataDiskCount': GetMaxDataDisks(self.config.vm_size),
        'maxIOPS': cores * 2000,
        'maxThroughputMBps': cores * 50,
    }

  def Validate(self) -> Dict[str, Any]:
    config = self.config
    validation_errors = []
    warnings = []
    limits = self.GetVmLimits()

    if config.disk_count > limits['maxDataDiskCount']:
      validation_errors.append(
          "Disk count ({}) exceeds VM limit for '{}' (max: {} disks). "
          'Reduce disk count or choose a larger VM size.'.format(
              config.disk_count, config.vm_size, limits['maxDataDiskCount']))
    if not IsValidDiskSize(config.disk_size_gb):
      validation_errors.append(
          'Default disk size ({} GB) is invalid. Must be 4-32767 GB.'.format(
              config.disk_size_gb))

    for override in config.disk_overrides or []:
      index = override.match_index
      if not 0 <= index < config.disk_count:
        validation_errors.append(
            'Override matchIndex {} is out of range (0-{}).'.format(
                index, config.disk_count - 1))
      if override.size_gb and not IsValidDiskSize(override.size_gb):
        validation_errors.append(
            'Override disk size ({} GB) at index {} is invalid. '
            'Must be 4-32767 GB.'.format(override.size_gb, index))
      if override.lun is not None and not IsValidLun(override.lun):
        validation_errors.append(
            'Override LUN {} at index {} is invalid. Must be 0-63.'.format(
                override.lun, index))

    luns = [disk[3] for disk in self._Disks()]
    for index, lun in enumerate(luns):
      override = self._overrides.get(index)
      if override and override.lun is not None:
        continue
      if not IsValidLun(lun):
        validation_errors.append(
            'LUN {} at index {} is invalid. Must be 0-63. Lower the LUN '
            'start or the disk count.'.format(lun, index))
    duplicates = []
    for lun, count in collections.Counter(luns).items():
      if count > 1:
        duplicates.append(str(lun))
    if duplicates:
      validation_errors.append(
          'Duplicate LUN assignments detected: {}. '
          'Ensure all disks have unique LUN numbers.'.format(
              ', '.join(duplicates)))

    performance = self.CalculatePerformance()
    if performance['totalIOPS'] > limits['maxIOPS']:
      warnings.append(
          'Total IOPS ({:,}) exceeds VM limit ({:,}). Performance may be '
          'throttled. Consider reducing disk count or using lower-tier '
          'disks.'.format(performance['totalIOPS'], limits['maxIOPS']))
    if performance['totalThroughputMBps'] > limits['maxThroughputMBps']:
      warnings.append(
          'Total throughput ({} MB/s) exceeds VM limit ({} MB/s). '
          'Performance may be throttled.'.format(
              performance['totalThroughputMBps'],
              limits['maxThroughputMBps']))

    if self._UsesPremiumDisks() and not IsPremiumCapable(config.vm_size):
      validation_errors.append(
          "VM size '{}' does not support Premium disks. Choose a "
          'premium-capable VM (e.g., DS, ES, FS series) or use '
          'Standard/StandardSSD disks.'.format(config.vm_size))

    if config.disk_count > 16:
      warnings.append(
          'Using {} data disks may impact VM boot time. Consider disk '
          'striping (RAID) to consolidate disks.'.format(config.disk_count))
    if config.disk_count == 0:
      warnings.append(
          'No data disks configured. VM will only have OS disk. Consider '
          'adding data disks for application data separation.')

    return {
        'valid': not validation_errors,
        'errors': validation_errors,
        'warnings': warnings,
        'vmLimits': limits,
        'calculated': {
            'totalIOPS': performance['totalIOPS'],
            'totalThroughputMBps': performance['totalThroughputMBps'],
        },
    }

  def EstimateCosts(self) -> Dict[str, Any]:
    """Returns the monthly and annual cost, broken down by storage type."""
    if not self.config.disk_count:
      return {
          'costPerDiskMonthly': 0,
          'totalMonthlyCost': 0,
          'totalAnnualCost': 0,
          'breakdown': [],
      }
    sizes_by_type = collections.OrderedDict()
    for size_gb, disk_type, _, _ in self._Disks():
      sizes_by_type.setdefault(disk_type, []).append(size_gb)

    breakdown = []
    total_monthly = 0.0
    for disk_type, sizes in sizes_by_type.items():
      avg_size = sum(sizes) / len(sizes)
      price = PRICE_PER_GB_MONTH.get(disk_type, 0.075)
      subtotal = len(sizes) * avg_size * price
      breakdown.append({
          'diskType': disk_type,
          'diskCount': len(sizes),
          'sizeGB': int(round(avg_size)),
          'pricePerGBMonth': price,
          'subtotalMonthly': subtotal,
      })
      total_monthly += subtotal
    return {
        'costPerDiskMonthly': total_monthly / self.config.disk_count,
        'totalMonthlyCost': total_monthly,
        'totalAnnualCost': total_monthly * 12,
        'breakdown': breakdown,
    }

  def CalculatePerformance(self) -> Dict[str, Any]:
    per_disk_iops = []
    per_disk_throughput = []
    for size_gb, disk_type, _, _ in self._Disks():
      iops_per_gb, mbps_per_gb = PERFORMANCE_PER_GB.get(
          disk_type, PERFORMANCE_PER_GB[disk_types.STANDARD_SSD])
      per_disk_iops.append(min(int(size_gb * iops_per_gb), MAX_DISK_IOPS))
      per_disk_throughput.append(
          min(int(size_gb * mbps_per_gb), MAX_DISK_THROUGHPUT_MBPS))
    return {
        'totalIOPS': sum(per_disk_iops),
        'totalThroughputMBps': sum(per_disk_throughput),
        'perDiskIOPS': per_disk_iops,
        'perDiskThroughputMBps': per_disk_throughput,
        'performanceTier': self._PerformanceTier(),
    }

  def _PerformanceTier(self):
    config = self.config
    if config.disk_type == disk_types.ULTRA_SSD:
      return 'Ultra'
    if config.disk_type in _PREMIUM_TYPES:
      return 'Premium'
    override_types = [o.disk_type for o in config.disk_overrides or []]
    if disk_types.ULTRA_SSD in override_types:
      return 'Ultra'
    if any(t in _PREMIUM_TYPES for t in override_types):
      return 'Premium'
    return 'Standard'

  def GetTemplateParameters(self) -> Dict[str, Any]:
    config = self.config
    return {
        'dataDiskCount': {
            'type': 'int',
            'defaultValue': config.disk_count,
            'minValue': 0,
            'maxValue': 32,
            'metadata': {
                'description': 'Number of data disks to attach (0-32)',
            },
        },
        'dataDiskSizeGB': {
            'type': 'int',
            'defaultValue': config.disk_size_gb,
            'minValue': MIN_DISK_SIZE_GB,
            'maxValue': MAX_DISK_SIZE_GB,
            'metadata': {'description': 'Size of each data disk in GB'},
        },
        'dataDiskType': {
            'type': 'string',
            'defaultValue': config.disk_type,
            'allowedValues': list(disk_types.STORAGE_TYPES),
            'metadata': {'description': 'Data disk storage account type'},
        },
        'dataDiskCaching': {
            'type': 'string',
            'defaultValue': config.caching,
            'allowedValues': [disk_types.NONE, disk_types.READ_ONLY,
                              disk_types.READ_WRITE],
            'metadata': {'description': 'Data disk caching mode'},
        },
    }

  def GetTemplateVariables(self) -> Dict[str, Any]:
    return {
        'dataDiskNamePrefix': "[concat(parameters('vmName'), '-datadisk-')]",
        'lunStart': self.config.lun_start or 0,
    }

  def GetDataDiskResources(self) -> List[Dict[str, Any]]:
    """Returns the dataDisks entries, one copy loop when there are several.

    A single disk is written out directly, since copyIndex() is only valid
    inside a copy loop.
    """
    if not self.config.disk_count:
      return []
    if self.config.disk_count > 1:
      lun = "[add(variables('lunStart'), copyIndex('dataDisks'))]"
      name = ("[concat(variables('dataDiskNamePrefix'), "
              "copyIndex('dataDisks'))]")
    else:
      lun = "[variables('lunStart')]"
      name = "[concat(variables('dataDiskNamePrefix'), '0')]"
    disk = {
        'lun': lun,
        'name': name,
        'createOption': 'Empty',
        'diskSizeGB': '[parameters("dataDiskSizeGB")]',
        'managedDisk': {
            'storageAccountType': '[parameters("dataDiskType")]',
        },
        'caching': '[parameters("dataDiskCaching")]',
    }
    if self.config.disk_count > 1:
      disk = dict({'copy': {'name': 'dataDisks',
                            'count': '[parameters("dataDiskCount")]'}},
                  **disk)
    return [disk]

  def GetStorageProfile(self, os_disk: Dict[str, Any]) -> Dict[str, Any]:
    profile = {
        'imageReference': {
            'publisher': '[parameters("imagePublisher")]',
            'offer': '[parameters("imageOffer")]',
            'sku': '[parameters("imageSku")]',
            'version': 'latest',
        },
        'osDisk': os_disk,
    }
    data_disks = self.GetDataDiskResources()
    if data_disks:
      profile['dataDisks'] = data_disks
    return profile


def CreateDataDiskConfiguration(vm_name=None,
                                resource_group=None,
                                vm_size=None,
                                location=None,
                                disk_count=0,
                                disk_size=128,
                                disk_type=None,
                                caching=None,
                                lun_start=0,
                                preset=None):
  """Builds a DataDisksConfiguration, applying 'preset' when it is known.

  A known preset replaces the disk count, size, type and caching options.
  """
  config = DataDisksConfiguration(
      vm_name=vm_name,
      resource_group=resource_group,
      vm_size=vm_size,
      location=location or 'eastus',
      disk_count=int(disk_count or 0),
      disk_size_gb=int(disk_size or 128),
      disk_type=disk_type or disk_types.STANDARD_SSD,
      caching=caching or disk_types.READ_ONLY,
      lun_start=int(lun_start or 0))
  chosen = GetPreset(preset) if preset else None
  if chosen:
    config.disk_count = chosen.disk_count
    config.disk_size_gb = chosen.disk_size_gb
    config.disk_type = chosen.disk_type
    config.caching = chosen.caching
    config.preset = chosen.preset
  return config


def GenerateDataDiskTemplate(config: DataDisksConfiguration
                            ) -> Dict[str, Any]:
  """Returns a deployment template of a VM with the data disks of 'config'.

  Raises:
    errors.Config.InvalidConfigError: if the configuration does not validate.
  """
  manager = DataDiskManager(config)
  validation = manager.Validate()
  if not validation['valid']:
    raise errors.Config.InvalidConfigError(
        'Invalid configuration: {}'.format(', '.join(validation['errors'])))
  os_disk = {
      'createOption': 'FromImage',
      'managedDisk': {'storageAccountType': '[parameters("osDiskType")]'},
  }
  vm = {
      'type': 'Microsoft.Compute/virtualMachines',
      'apiVersion': '2023-09-01',
      'name': '[parameters("vmName")]',
      'location': '[parameters("location")]',
      'properties': {'storageProfile': manager.GetStorageProfile(os_disk)},
  }
  return arm_util.DeploymentTemplate(
      parameters=manager.GetTemplateParameters(),
      variables=manager.GetTemplateVariables(),
      resources=[vm])
