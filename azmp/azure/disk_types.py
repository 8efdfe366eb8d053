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
"""Managed disk storage types for OS and data disks.

See https://learn.microsoft.com/azure/virtual-machines/disks-types for the
characteristics of each storage type.
"""

import dataclasses
import re
from typing import Any, Dict, List, Optional, Tuple

from azmp.availability import availability_zones

STANDARD_HDD = 'Standard_LRS'
STANDARD_SSD = 'StandardSSD_LRS'
STANDARD_SSD_ZRS = 'StandardSSD_ZRS'
PREMIUM_SSD = 'Premium_LRS'
PREMIUM_SSD_ZRS = 'Premium_ZRS'
PREMIUM_V2 = 'PremiumV2_LRS'
ULTRA_SSD = 'UltraSSD_LRS'
STORAGE_TYPES = (STANDARD_HDD, STANDARD_SSD, STANDARD_SSD_ZRS, PREMIUM_SSD,
                 PREMIUM_SSD_ZRS, PREMIUM_V2, ULTRA_SSD)
# Storage types whose performance tier can be set independently of size.
TIERED_TYPES = (PREMIUM_SSD, PREMIUM_SSD_ZRS)

PERFORMANCE = 'Performance'
BALANCED = 'Balanced'
COST_OPTIMIZED = 'Cost-Optimized'
HIGH_AVAILABILITY = 'High Availability'

NONE = 'None'
READ_ONLY = 'ReadOnly'
READ_WRITE = 'ReadWrite'

_ALL_CACHING = (NONE, READ_ONLY, READ_WRITE)


@dataclasses.dataclass(frozen=True)
class DiskTypeInfo:
  storage_type: str
  category: str
  label: str
  description: str
  cost_per_gb_month: float
  max_iops: int
  max_throughput_mbps: int
  requires_premium_vm: bool
  requires_zone_support: bool
  supported_caching: Tuple[str, ...]
  min_size_gb: int
  max_size_gb: int


@dataclasses.dataclass(frozen=True)
class PerformanceTier:
  tier: str
  min_size_gb: int
  max_size_gb: int
  iops: int
  throughput_mbps: int


DISK_TYPES = {
    STANDARD_HDD: DiskTypeInfo(
        STANDARD_HDD, COST_OPTIMIZED, 'Standard HDD (Standard_LRS)',
        'Cost-optimized magnetic storage. Best for backups, archival, and '
        'infrequent access.',
        0.045, 500, 60, False, False, (NONE, READ_ONLY), 32, 32767),
    STANDARD_SSD: DiskTypeInfo(
        STANDARD_SSD, BALANCED, 'Standard SSD (StandardSSD_LRS)',
        'Balanced performance and cost. Good for dev/test, web servers, and '
        'light workloads.',
        0.075, 6000, 750, False, False, _ALL_CACHING, 4, 32767),
    STANDARD_SSD_ZRS: DiskTypeInfo(
        STANDARD_SSD_ZRS, HIGH_AVAILABILITY,
        'Standard SSD Zone-Redundant (StandardSSD_ZRS)',
        'Zone-redundant Standard SSD for higher availability.',
        0.095, 6000, 750, False, True, _ALL_CACHING, 4, 32767),
    PREMIUM_SSD: DiskTypeInfo(
        PREMIUM_SSD, PERFORMANCE, 'Premium SSD (Premium_LRS)',
        'High performance, low latency SSD. Recommended for production '
        'workloads.',
        0.135, 20000, 900, True, False, _ALL_CACHING, 4, 32767),
    PREMIUM_SSD_ZRS: DiskTypeInfo(
        PREMIUM_SSD_ZRS, HIGH_AVAILABILITY,
        'Premium SSD Zone-Redundant (Premium_ZRS)',
        'Zone-redundant Premium SSD for mission-critical workloads with high '
        'availability.',
        0.175, 20000, 900, True, True, _ALL_CACHING, 4, 32767),
    PREMIUM_V2: DiskTypeInfo(
        PREMIUM_V2, PERFORMANCE, 'Premium SSD v2 (PremiumV2_LRS)',
        'Next-gen Premium SSD with customizable IOPS and throughput.',
        0.12, 80000, 1200, True, True, (NONE,), 4, 65536),
    ULTRA_SSD: DiskTypeInfo(
        ULTRA_SSD, PERFORMANCE, 'Ultra Disk (UltraSSD_LRS)',
        'Ultra-low latency, high IOPS disk. Best for IO-intensive workloads '
        'like databases.',
        0.25, 160000, 4000, True, True, (NONE,), 4, 65536),
}

# Premium SSD tiers, ordered by size.
PERFORMANCE_TIERS = [
    PerformanceTier('P1', 4, 4, 120, 25),
    PerformanceTier('P2', 5, 8, 120, 25),
    PerformanceTier('P3', 9, 16, 120, 25),
    PerformanceTier('P4', 17, 32, 120, 25),
    PerformanceTier('P6', 33, 64, 240, 50),
    PerformanceTier('P10', 65, 128, 500, 100),
    PerformanceTier('P15', 129, 256, 1100, 125),
    PerformanceTier('P20', 257, 511, 2300, 150),
    PerformanceTier('P30', 512, 1023, 5000, 200),
    PerformanceTier('P40', 1024, 2048, 7500, 250),
    PerformanceTier('P50', 2049, 4096, 7500, 250),
    PerformanceTier('P60', 4097, 8192, 16000, 500),
    PerformanceTier('P70', 8193, 16384, 18000, 750),
    PerformanceTier('P80', 16385, 32767, 20000, 900),
]
_TIERS_BY_NAME = {tier.tier: tier for tier in PERFORMANCE_TIERS}

_MODERN_PREMIUM_RE = re.compile(r's(_v\d+)?$')
_LEGACY_PREMIUM_SERIES = ('ds', 'es', 'fs', 'gs', 'ls', 'ms')


def GetDiskTypeInfo(storage_type: str) -> Optional[DiskTypeInfo]:
  return DISK_TYPES.get(storage_type)


def GetDiskTypesByCategory(category: str) -> List[DiskTypeInfo]:
  return [info for info in DISK_TYPES.values() if info.category == category]


def GetPerformanceTierInfo(tier: str) -> Optional[PerformanceTier]:
  return _TIERS_BY_NAME.get(tier)


def GetPerformanceTier(size_gb: int) -> str:
  """Returns the Premium SSD tier that matches a disk of 'size_gb'."""
  for tier in PERFORMANCE_TIERS:
    if tier.min_size_gb <= size_gb <= tier.max_size_gb:
      return tier.tier
  return PERFORMANCE_TIERS[-1].tier


def IsPremiumCapableVmSize(vm_size: str) -> bool:
  """Returns whether 'vm_size' can attach Premium storage.

  Current sizes mark premium support with an 's' before the version suffix
  (Standard_D4s_v3, Standard_B4ms). Older series carry it in the series name
  (DS, ES, FS, GS, LS, MS).
  """
  normalized = vm_size.lower()
  if _MODERN_PREMIUM_RE.search(normalized):
    return True
  return any(series in normalized for series in _LEGACY_PREMIUM_SERIES)


def GetRecommendedCaching(storage_type: str, is_os_disk: bool) -> str:
  info = DISK_TYPES[storage_type]
  if is_os_disk and READ_WRITE in info.supported_caching:
    return READ_WRITE
  if not is_os_disk and storage_type == PREMIUM_SSD:
    return READ_ONLY
  if storage_type in (ULTRA_SSD, PREMIUM_V2):
    return NONE
  return READ_ONLY


@dataclasses.dataclass
class DataDisk:
  name: str
  size_gb: int
  storage_type: str
  caching: str
  lun: int
  create_option: str = 'Empty'
  performance_tier: Optional[str] = None


@dataclasses.dataclass
class DiskConfiguration:
  os_disk_type: str
  os_disk_size_gb: Optional[int] = None
  os_disk_caching: Optional[str] = None
  os_disk_performance_tier: Optional[str] = None
  data_disk_type: Optional[str] = None
  data_disks: List[DataDisk] = dataclasses.field(default_factory=list)
  enable_ultra_ssd: bool = False


class DiskTypeManager(object):
  """Validates a DiskConfiguration and renders its storage profile."""

  def __init__(self, config: DiskConfiguration):
    self.config = config

  def Validate(self, vm_size: Optional[str] = None,
               location: Optional[str] = None) -> Dict[str, Any]:
    """Checks the OS and data disks against their storage type limits.

    Args:
      vm_size: string. VM size the disks attach to. Premium checks are skipped
        when it is not given.
      location: string. Region of the VM. Zone-redundant types are rejected in
        regions without availability zones.

    Returns:
      A dict {'isValid', 'errors', 'warnings', 'recommendations'}.
    """
    config = self.config
    validation_errors = []
    warnings = []
    recommendations = []
    result = {
        'isValid': True,
        'errors': validation_errors,
        'warnings': warnings,
        'recommendations': recommendations,
    }

    os_info = DISK_TYPES.get(config.os_disk_type)
    if not os_info:
      validation_errors.append(
          'Invalid OS disk type: {}'.format(config.os_disk_type))
      result['isValid'] = False
      return result

    size = config.os_disk_size_gb
    if size:
      if size < os_info.min_size_gb:
        validation_errors.append(
            'OS disk size {} GB is below minimum {} GB for {}'.format(
                size, os_info.min_size_gb, config.os_disk_type))
      if size > os_info.max_size_gb:
        validation_errors.append(
            'OS disk size {} GB exceeds maximum {} GB for {}'.format(
                size, os_info.max_size_gb, config.os_disk_type))

    premium_vm = vm_size and IsPremiumCapableVmSize(vm_size)
    if vm_size and os_info.requires_premium_vm and not premium_vm:
      validation_errors.append(
          'OS disk type {} requires a premium-capable VM size (e.g., '
          'Standard_DS2_v2). Current size: {}'.format(
              config.os_disk_type, vm_size))

    if os_info.requires_zone_support:
      if location and not availability_zones.SupportsAvailabilityZones(
          location):
        validation_errors.append(
            'OS disk type {} requires availability zones, which are not '
            'offered in {}'.format(config.os_disk_type, location))
      else:
        warnings.append(
            'OS disk type {} requires zone-aware VM deployment. Ensure VM is '
            'deployed with availability zones.'.format(config.os_disk_type))

    if (config.os_disk_caching and
        config.os_disk_caching not in os_info.supported_caching):
      validation_errors.append(
          'Caching {} not supported for {}. Supported: {}'.format(
              config.os_disk_caching, config.os_disk_type,
              ', '.join(os_info.supported_caching)))

    tier = config.os_disk_performance_tier
    if tier:
      if config.os_disk_type not in TIERED_TYPES:
        warnings.append(
            'Performance tier is only applicable to Premium SSD disks. '
            'Ignoring for {}.'.format(config.os_disk_type))
      elif size:
        tier_info = _TIERS_BY_NAME.get(tier)
        if (not tier_info or
            not tier_info.min_size_gb <= size <= tier_info.max_size_gb):
          warnings.append(
              'Performance tier {} is not optimal for disk size {} GB. '
              'Recommended: {}'.format(tier, size, GetPerformanceTier(size)))

    for disk in config.data_disks:
      info = DISK_TYPES.get(disk.storage_type)
      if not info:
        validation_errors.append(
            'Invalid data disk type for disk {}: {}'.format(
                disk.name, disk.storage_type))
        continue
      if not info.min_size_gb <= disk.size_gb <= info.max_size_gb:
        validation_errors.append(
            'Data disk {} size {} GB is out of range [{}, {}] for {}'.format(
                disk.name, disk.size_gb, info.min_size_gb, info.max_size_gb,
                disk.storage_type))
      if vm_size and info.requires_premium_vm and not premium_vm:
        validation_errors.append(
            'Data disk {} type {} requires a premium-capable VM size'.format(
                disk.name, disk.storage_type))
      if disk.caching not in info.supported_caching:
        validation_errors.append(
            'Caching {} not supported for data disk {} with type {}'.format(
                disk.caching, disk.name, disk.storage_type))

    if config.os_disk_type == STANDARD_HDD:
      recommendations.append(
          'Consider using Standard SSD or Premium SSD for better OS disk '
          'performance in production environments.')
    if premium_vm and config.os_disk_type == STANDARD_SSD:
      recommendations.append(
          'Your VM size supports Premium SSD. Consider upgrading OS disk to '
          'Premium SSD for better performance.')
    if config.os_disk_type == ULTRA_SSD and not config.enable_ultra_ssd:
      warnings.append(
          'Ultra Disk requires enableUltraSSD flag to be set on the VM. '
          'Ensure additionalCapabilities.ultraSSDEnabled is set to true.')

    result['isValid'] = not validation_errors
    return result

  def GetTemplateParameters(self) -> Dict[str, Any]:
    config = self.config
    params = {
        'osDiskType': {
            'type': 'string',
            'defaultValue': config.os_disk_type,
            'allowedValues': list(STORAGE_TYPES),
            'metadata': {
                'description': 'OS disk storage account type (Standard HDD, '
                               'Standard SSD, Premium SSD, Ultra Disk)',
            },
        },
    }
    if config.os_disk_size_gb:
      info = DISK_TYPES[config.os_disk_type]
      params['osDiskSizeGB'] = {
          'type': 'int',
          'defaultValue': config.os_disk_size_gb,
          'minValue': info.min_size_gb,
          'maxValue': info.max_size_gb,
          'metadata': {'description': 'OS disk size in GB'},
      }
    if config.data_disk_type:
      params['dataDiskType'] = {
          'type': 'string',
          'defaultValue': config.data_disk_type,
          'allowedValues': list(STORAGE_TYPES),
          'metadata': {'description': 'Data disk storage account type'},
      }
    if config.data_disks:
      params['dataDiskCount'] = {
          'type': 'int',
          'defaultValue': len(config.data_disks),
          'minValue': 0,
          'maxValue': 64,
          'metadata': {'description': 'Number of data disks'},
      }
    return params

  def GetTemplateVariables(self) -> Dict[str, Any]:
    config = self.config
    variables = {
        'osDiskCaching': (config.os_disk_caching or
                          GetRecommendedCaching(config.os_disk_type, True)),
    }
    if config.os_disk_type in TIERED_TYPES:
      if config.os_disk_performance_tier:
        variables['osDiskPerformanceTier'] = config.os_disk_performance_tier
      elif config.os_disk_size_gb:
        variables['osDiskPerformanceTier'] = GetPerformanceTier(
            config.os_disk_size_gb)
    if config.data_disk_type:
      variables['dataDiskCaching'] = GetRecommendedCaching(
          config.data_disk_type, False)
    return variables

  def GetOsDiskConfig(self) -> Dict[str, Any]:
    config = self.config
    os_disk = {
        'createOption': 'FromImage',
        'managedDisk': {
            'storageAccountType': "[parameters('osDiskType')]",
        },
        'caching': "[variables('osDiskCaching')]",
    }
    if config.os_disk_size_gb:
      os_disk['diskSizeGB'] = "[parameters('osDiskSizeGB')]"
    if (config.os_disk_performance_tier and
        config.os_disk_type in TIERED_TYPES):
      os_disk['managedDisk']['tier'] = "[variables('osDiskPerformanceTier')]"
    return os_disk

  def GetDataDisksConfig(self) -> List[Dict[str, Any]]:
    data_disks = []
    for disk in self.config.data_disks:
      entry = {
          'lun': disk.lun,
          'name': disk.name,
          'createOption': disk.create_option,
          'diskSizeGB': disk.size_gb,
          'managedDisk': {'storageAccountType': disk.storage_type},
          'caching': disk.caching,
      }
      if disk.performance_tier and disk.storage_type in TIERED_TYPES:
        entry['managedDisk']['tier'] = disk.performance_tier
      data_disks.append(entry)
    return data_disks

  def GetStorageProfile(self) -> Dict[str, Any]:
    profile = {
        'osDisk': self.GetOsDiskConfig(),
        'imageReference': {
            'publisher': "[parameters('imagePublisher')]",
            'offer': "[parameters('imageOffer')]",
            'sku': "[parameters('imageSku')]",
            'version': "[parameters('imageVersion')]",
        },
    }
    data_disks = self.GetDataDisksConfig()
    if data_disks:
      profile['dataDisks'] = data_disks
    return profile

  def IsMarketplaceCompliant(self) -> Dict[str, Any]:
    issues = []
    if not self.config.os_disk_type:
      issues.append('OS disk type must be explicitly configured')
    if self.config.os_disk_type == STANDARD_HDD:
      issues.append('Standard HDD is not recommended for production workloads')
    if (self.config.os_disk_type == ULTRA_SSD and
        not self.config.enable_ultra_ssd):
      issues.append('Ultra Disk requires enableUltraSSD flag to be set on VM')
    return {'compliant': not issues, 'issues': issues}


def CreateDiskConfiguration(os_disk_type,
                            os_disk_size=None,
                            os_disk_caching=None,
                            os_disk_performance_tier=None,
                            data_disk_type=None,
                            data_disk_count=0,
                            data_disk_size=None,
                            enable_ultra_ssd=False):
  """Builds a DiskConfiguration with 'data_disk_count' identical data disks.

  Data disks default to 128 GB StandardSSD_LRS with the recommended caching
  of their type, on LUNs 0 to data_disk_count - 1.
  """
  config = DiskConfiguration(
      os_disk_type=os_disk_type,
      os_disk_size_gb=os_disk_size or None,
      os_disk_caching=os_disk_caching or None,
      os_disk_performance_tier=os_disk_performance_tier or None,
      data_disk_type=data_disk_type or None,
      enable_ultra_ssd=bool(enable_ultra_ssd))
  if data_disk_count and data_disk_count > 0:
    disk_type = data_disk_type or STANDARD_SSD
    caching = GetRecommendedCaching(disk_type, False)
    config.data_disks = [
        DataDisk(name='datadisk{}'.format(i),
                 size_gb=data_disk_size or 128,
                 storage_type=disk_type,
                 caching=caching,
                 lun=i)
        for i in range(data_disk_count)
    ]
  return config


def GenerateDiskTemplate(config: DiskConfiguration) -> Dict[str, Any]:
  """Returns {'parameters', 'variables', 'storageProfile'} for 'config'."""
  manager = DiskTypeManager(config)
  return {
      'parameters': manager.GetTemplateParameters(),
      'variables': manager.GetTemplateVariables(),
      'storageProfile': manager.GetStorageProfile(),
  }
