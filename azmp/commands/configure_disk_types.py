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
"""The configure-disk-types command.

Chooses the storage account types of a VM's OS disk and data disks, checks
them against the VM size and region, and prints or exports the storage
profile.

  azmp configure-disk-types --os_disk_type=Premium_LRS \
      --vm_size=Standard_DS2_v2
  azmp configure-disk-types --os_disk_type=Premium_LRS --os_disk_size=128 \
      --performance_tier=P20
  azmp configure-disk-types --disk_config=disks.json --validate_only
  azmp configure-disk-types --list_disk_types
"""

import dataclasses
import logging

from absl import flags
import yaml

from azmp import arm_util
from azmp import commands
from azmp import errors
from azmp.azure import disk_types
from azmp.commands import configure_data_disks

FLAGS = flags.FLAGS

VM_API_VERSION = '2023-09-01'
DEFAULT_OS_DISK_SIZE_GB = 128

flags.DEFINE_enum('os_disk_type', None, list(disk_types.STORAGE_TYPES),
                  'OS disk storage account type.')
flags.DEFINE_integer('os_disk_size', None, 'OS disk size in GB.',
                     lower_bound=1)
flags.DEFINE_enum('os_disk_caching', None,
                  [disk_types.NONE, disk_types.READ_ONLY,
                   disk_types.READ_WRITE],
                  'OS disk host caching. Defaults to the recommended caching '
                  'of the disk type.')
flags.DEFINE_enum('performance_tier', None,
                  [tier.tier for tier in disk_types.PERFORMANCE_TIERS],
                  'Premium SSD performance tier of the OS disk.')
flags.DEFINE_boolean('enable_ultra_ssd', False,
                     'Enable the Ultra SSD capability on the VM.')
flags.DEFINE_string('disk_config', None,
                    'JSON or YAML disk configuration, e.g. '
                    '{"osDiskType": "Premium_LRS", "dataDisks": []}. '
                    'Replaces the disk flags.')
flags.DEFINE_boolean('list_disk_types', False,
                     'Print the managed disk types and exit.')
flags.DEFINE_boolean('list_tiers', False,
                     'Print the Premium SSD performance tiers and exit.')

_CATEGORIES = (disk_types.PERFORMANCE, disk_types.HIGH_AVAILABILITY,
               disk_types.BALANCED, disk_types.COST_OPTIMIZED)

_CONFIG_KEYS = {
    'osDiskType': 'os_disk_type',
    'osDiskSizeGB': 'os_disk_size_gb',
    'osDiskCaching': 'os_disk_caching',
    'osDiskPerformanceTier': 'os_disk_performance_tier',
    'dataDiskType': 'data_disk_type',
    'enableUltraSSD': 'enable_ultra_ssd',
}
_DATA_DISK_KEYS = {
    'name': 'name',
    'sizeGB': 'size_gb',
    'storageAccountType': 'storage_type',
    'caching': 'caching',
    'lun': 'lun',
    'createOption': 'create_option',
    'performanceTier': 'performance_tier',
}


def _DataDiskFromDict(path, index, values):
  if not isinstance(values, dict):
    raise errors.Config.InvalidConfigError(
        'dataDisks[{}] in {} must be a mapping'.format(index, path))
  unknown = sorted(set(values) - set(_DATA_DISK_KEYS))
  if unknown:
    raise errors.Config.InvalidConfigError(
        'Unknown keys in dataDisks[{}] of {}: {}'.format(
            index, path, ', '.join(unknown)))
  options = {_DATA_DISK_KEYS[key]: value for key, value in values.items()}
  options.setdefault('name', 'datadisk{}'.format(index))
  options.setdefault('lun', index)
  try:
    return disk_types.DataDisk(**options)
  except TypeError as e:
    raise errors.Config.InvalidConfigError(
        'Invalid dataDisks[{}] in {}: {}'.format(index, path, e))


def LoadDiskConfiguration(path):
  """Returns the DiskConfiguration stored in the JSON or YAML file 'path'.

  Keys use the ARM spelling: osDiskType, osDiskSizeGB, osDiskCaching,
  osDiskPerformanceTier, dataDiskType, enableUltraSSD and dataDisks, a list
  of {name, sizeGB, storageAccountType, caching, lun} mappings.

  Raises:
    errors.Config.InvalidConfigError: if the file cannot be read, has unknown
      keys or lacks osDiskType.
  """
  try:
    with open(path, encoding='utf-8') as fp:
      values = yaml.safe_load(fp) or {}
  except (OSError, yaml.YAMLError) as e:
    raise errors.Config.InvalidConfigError(
        'Failed to load configuration from {}: {}'.format(path, e))
  if not isinstance(values, dict):
    raise errors.Config.InvalidConfigError(
        'Configuration file {} must contain a mapping'.format(path))
  values = dict(values)
  data_disks = values.pop('dataDisks', None) or []
  unknown = sorted(set(values) - set(_CONFIG_KEYS))
  if unknown:
    raise errors.Config.InvalidConfigError(
        'Unknown configuration keys in {}: {}'.format(path, ', '.join(unknown)))
  if not values.get('osDiskType'):
    raise errors.Config.InvalidConfigError(
        'osDiskType is required in {}'.format(path))
  data_disk_type = values.get('dataDiskType')
  if data_disk_type and data_disk_type not in disk_types.STORAGE_TYPES:
    raise errors.Config.InvalidConfigError(
        'Invalid dataDiskType {} in {}. One of: {}'.format(
            data_disk_type, path, ', '.join(disk_types.STORAGE_TYPES)))
  if not isinstance(data_disks, list):
    raise errors.Config.InvalidConfigError(
        'dataDisks in {} must be a list'.format(path))
  config = disk_types.DiskConfiguration(
      **{_CONFIG_KEYS[key]: value for key, value in values.items()})
  config.data_disks = [_DataDiskFromDict(path, i, disk)
                       for i, disk in enumerate(data_disks)]
  return config


def _ConfigurationFromFlags():
  """Builds the DiskConfiguration described by the disk flags.

  The data disk flags are shared with configure-data-disks, so only those
  given on the command line are used.
  """
  data_disk_type = None
  if commands.FlagIsSet('data_disk_type'):
    data_disk_type = configure_data_disks.ParseDiskType(FLAGS.data_disk_type)
  return disk_types.CreateDiskConfiguration(
      FLAGS.os_disk_type,
      os_disk_size=FLAGS.os_disk_size,
      os_disk_caching=FLAGS.os_disk_caching,
      os_disk_performance_tier=FLAGS.performance_tier,
      data_disk_type=data_disk_type,
      data_disk_count=(FLAGS.data_disk_count
                       if commands.FlagIsSet('data_disk_count') else 0),
      data_disk_size=(FLAGS.data_disk_size
                      if commands.FlagIsSet('data_disk_size') else None),
      enable_ultra_ssd=FLAGS.enable_ultra_ssd)


def EstimateCosts(config):
  """Returns the monthly and annual storage cost of 'config'.

  An OS disk without an explicit size is priced at 128 GB. Data disks of
  unknown types are not priced.
  """
  os_info = disk_types.GetDiskTypeInfo(config.os_disk_type)
  os_size = config.os_disk_size_gb or DEFAULT_OS_DISK_SIZE_GB
  os_cost = os_size * os_info.cost_per_gb_month
  data_cost = 0.0
  for disk in config.data_disks:
    info = disk_types.GetDiskTypeInfo(disk.storage_type)
    if info:
      data_cost += disk.size_gb * info.cost_per_gb_month
  total = os_cost + data_cost
  return {
      'osDisk': {
          'sizeGB': os_size,
          'monthlyCost': os_cost,
          'type': config.os_disk_type,
      },
      'dataDisks': {
          'count': len(config.data_disks),
          'totalSizeGB': sum(disk.size_gb for disk in config.data_disks),
          'monthlyCost': data_cost,
      } if config.data_disks else None,
      'total': {
          'monthlyCost': total,
          'annualCost': total * 12,
      },
  }


def GenerateDeploymentTemplate(config):
  """Returns a deployment template of a VM with the disks of 'config'."""
  parts = disk_types.GenerateDiskTemplate(config)
  parameters = {
      'vmName': {'type': 'string'},
      'location': {'type': 'string',
                   'defaultValue': '[resourceGroup().location]'},
      'imagePublisher': {'type': 'string'},
      'imageOffer': {'type': 'string'},
      'imageSku': {'type': 'string'},
      'imageVersion': {'type': 'string', 'defaultValue': 'latest'},
  }
  parameters.update(parts['parameters'])
  vm = {
      'type': 'Microsoft.Compute/virtualMachines',
      'apiVersion': VM_API_VERSION,
      'name': "[parameters('vmName')]",
      'location': "[parameters('location')]",
      'properties': {
          'storageProfile': parts['storageProfile'],
      },
  }
  if config.enable_ultra_ssd:
    vm['properties']['additionalCapabilities'] = {'ultraSSDEnabled': True}
  return arm_util.DeploymentTemplate(parameters=parameters,
                                     variables=parts['variables'],
                                     resources=[vm])


def PrintDiskTypeCatalog():
  print('\n=== Azure Managed Disk Types ===\n')
  for category in _CATEGORIES:
    infos = disk_types.GetDiskTypesByCategory(category)
    if not infos:
      continue
    print('\n{}:'.format(category))
    print(commands.HEAVY_RULE)
    for info in infos:
      print('\n  {}'.format(info.label))
      print('  Type: {}'.format(info.storage_type))
      print('  Description: {}'.format(info.description))
      print('  Cost: ~${:.3f}/GB/month'.format(info.cost_per_gb_month))
      print('  Max IOPS: {:,}'.format(info.max_iops))
      print('  Max Throughput: {} MB/s'.format(info.max_throughput_mbps))
      print('  Size Range: {} GB - {} GB'.format(info.min_size_gb,
                                                info.max_size_gb))
      print('  Premium VM Required: {}'.format(
          'Yes' if info.requires_premium_vm else 'No'))
      print('  Zone Support Required: {}'.format(
          'Yes' if info.requires_zone_support else 'No'))
      print('  Supported Caching: {}'.format(
          ', '.join(info.supported_caching)))
  print()


def PrintPerformanceTiers():
  print('\n=== Premium SSD Performance Tiers ===\n')
  print('Performance tiers allow you to set disk performance independent of '
        'disk size.\n')
  print('Tier | Disk Size Range      | IOPS     | Throughput')
  print(commands.LIGHT_RULE)
  for tier in disk_types.PERFORMANCE_TIERS:
    print('{:<4} | {:<20} | {:<8} | {} MB/s'.format(
        tier.tier, '{}-{} GB'.format(tier.min_size_gb, tier.max_size_gb),
        '{:,}'.format(tier.iops), tier.throughput_mbps))
  print()


def _PrintValidation(validation):
  commands.PrintList('❌ Validation Errors:', validation['errors'], '-')
  commands.PrintList('⚠️  Warnings:', validation['warnings'], '-')
  commands.PrintList('💡 Recommendations:', validation['recommendations'],
                     '-')


def _PrintText(config, validation, compliance):
  print('\n=== Disk Configuration ===\n')
  os_info = disk_types.GetDiskTypeInfo(config.os_disk_type)
  print('OS Disk:')
  print('  Type: {}'.format(os_info.label))
  print('  Storage Account Type: {}'.format(config.os_disk_type))
  if config.os_disk_size_gb:
    print('  Size: {} GB'.format(config.os_disk_size_gb))
    print('  Estimated Monthly Cost: ${:.2f}'.format(
        config.os_disk_size_gb * os_info.cost_per_gb_month))
  print('  Caching: {}'.format(
      config.os_disk_caching or
      disk_types.GetRecommendedCaching(config.os_disk_type, True)))
  tier = disk_types.GetPerformanceTierInfo(
      config.os_disk_performance_tier or '')
  if tier:
    print('  Performance Tier: {}'.format(tier.tier))
    print('  IOPS: {:,}'.format(tier.iops))
    print('  Throughput: {} MB/s'.format(tier.throughput_mbps))
  else:
    print('  Max IOPS: {:,}'.format(os_info.max_iops))
    print('  Max Throughput: {} MB/s'.format(os_info.max_throughput_mbps))

  if config.data_disks:
    print('\nData Disks ({}):'.format(len(config.data_disks)))
    for index, disk in enumerate(config.data_disks):
      info = disk_types.GetDiskTypeInfo(disk.storage_type)
      print('\n  Disk {}: {}'.format(index + 1, disk.name))
      print('    Type: {}'.format(info.label if info else disk.storage_type))
      print('    Size: {} GB'.format(disk.size_gb))
      print('    Caching: {}'.format(disk.caching))
      print('    LUN: {}'.format(disk.lun))
      if info:
        print('    Estimated Monthly Cost: ${:.2f}'.format(
            disk.size_gb * info.cost_per_gb_month))
  elif config.data_disk_type:
    print('\nData Disk Type: {}'.format(config.data_disk_type))
  print()

  _PrintValidation(validation)
  print('=== Marketplace Compliance ===')
  print('Status: {}'.format(
      '✅ COMPLIANT' if compliance['compliant'] else '❌ NON-COMPLIANT'))
  commands.PrintList('Issues:', compliance['issues'], '-')


def Run(argv):
  """Prints, validates or exports the disk types of one VM.

  Raises:
    errors.Config.InvalidConfigError: if --disk_config cannot be loaded.
  """
  del argv
  if FLAGS.list_disk_types:
    PrintDiskTypeCatalog()
    return 0
  if FLAGS.list_tiers:
    PrintPerformanceTiers()
    return 0

  if FLAGS.disk_config:
    config = LoadDiskConfiguration(FLAGS.disk_config)
    logging.info('Configuration loaded from %s.', FLAGS.disk_config)
  elif not FLAGS.os_disk_type:
    logging.error('--os_disk_type is required (or use --disk_config to load '
                  'from file). One of: %s. Use --list_disk_types for details.',
                  ', '.join(disk_types.STORAGE_TYPES))
    return 1
  else:
    config = _ConfigurationFromFlags()

  manager = disk_types.DiskTypeManager(config)
  validation = manager.Validate(FLAGS.vm_size, FLAGS.location)

  if FLAGS.validate_only:
    print('🔍 Validating disk configuration...\n')
    print('✅ Configuration is valid\n' if validation['isValid'] else
          '❌ Configuration has errors\n')
    _PrintValidation(validation)
    return 0
  if not disk_types.GetDiskTypeInfo(config.os_disk_type):
    _PrintValidation(validation)
    return 1
  if not validation['isValid'] and FLAGS.format == commands.TEMPLATE:
    raise errors.Config.InvalidConfigError(
        'Invalid configuration: {}'.format(', '.join(validation['errors'])))

  compliance = manager.IsMarketplaceCompliant()
  if FLAGS.format == commands.JSON:
    print(commands.ToJson({
        'configuration': dataclasses.asdict(config),
        'validation': validation,
        'compliance': compliance,
        'estimatedCosts': EstimateCosts(config),
    }))
  elif FLAGS.format == commands.TEMPLATE:
    print(commands.ToJson(disk_types.GenerateDiskTemplate(config)))
  else:
    _PrintText(config, validation, compliance)

  if FLAGS.output and validation['isValid']:
    path = commands.WriteFile(
        FLAGS.output, commands.ToJson(GenerateDeploymentTemplate(config)))
    print('✅ ARM template exported to {}\n'.format(path))

  return 0 if validation['isValid'] else 1
