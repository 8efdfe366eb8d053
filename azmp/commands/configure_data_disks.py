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
"""The configure-data-disks command.

  azmp configure-data-disks --vm_name=myVM --resource_group=myRG \
      --vm_size=Standard_D8s_v3 --data_disk_preset=database
  azmp configure-data-disks --list_presets
"""

import dataclasses
import logging

from absl import flags

from azmp import commands
from azmp.azure import data_disks
from azmp.azure import disk_types

FLAGS = flags.FLAGS

flags.DEFINE_string('vm_size', None, 'VM size, e.g. Standard_D8s_v3.')
flags.DEFINE_integer('data_disk_count', 1, 'Number of data disks (1-32).',
                     lower_bound=0)
flags.DEFINE_integer('data_disk_size', 1024,
                     'Size of each data disk in GB (4-32767).')
flags.DEFINE_string('data_disk_type', 'StandardSSD',
                    'Disk type: StandardHDD, StandardSSD, StandardSSDZRS, '
                    'PremiumSSD, PremiumSSDZRS, PremiumV2 or UltraSSD. ARM '
                    'names such as Premium_LRS are accepted too.')
flags.DEFINE_enum('data_disk_caching', disk_types.READ_WRITE,
                  [disk_types.NONE, disk_types.READ_ONLY,
                   disk_types.READ_WRITE],
                  'Host caching of the data disks.')
flags.DEFINE_integer('lun_start', 0, 'First LUN (0-63).', lower_bound=0,
                     upper_bound=data_disks.MAX_LUN)
flags.DEFINE_string('data_disk_preset', None,
                    'Preset: database, logs, appdata, highperf or archive. '
                    'Overrides the count, size, type and caching flags.')
flags.DEFINE_boolean('list_presets', False,
                     'Print the data disk presets and exit.')

_DISK_TYPE_ALIASES = {
    'StandardHDD': disk_types.STANDARD_HDD,
    'StandardSSD': disk_types.STANDARD_SSD,
    'StandardSSDZRS': disk_types.STANDARD_SSD_ZRS,
    'PremiumSSD': disk_types.PREMIUM_SSD,
    'PremiumSSDZRS': disk_types.PREMIUM_SSD_ZRS,
    'PremiumV2': disk_types.PREMIUM_V2,
    'UltraSSD': disk_types.ULTRA_SSD,
}

_PRESET_ALIASES = {
    'db': data_disks.DATABASE,
    'log': data_disks.LOGS,
    'app': data_disks.APP_DATA,
    'highperf': data_disks.HIGH_PERFORMANCE,
}


def ParseDiskType(value):
  """Maps a short or ARM disk type name to the ARM storage account type.

  Unknown names fall back to Standard SSD.
  """
  if value in disk_types.STORAGE_TYPES:
    return value
  return _DISK_TYPE_ALIASES.get(value, disk_types.STANDARD_SSD)


def ParsePreset(value):
  """Returns the preset named 'value', or None for custom disks."""
  if not value:
    return None
  value = value.lower()
  value = _PRESET_ALIASES.get(value, value)
  if value == data_disks.CUSTOM or value not in data_disks.DATA_DISK_PRESETS:
    return None
  return value


def PrintPresetCatalog():
  print('\n=== Azure Data Disk Presets ===\n')
  for preset in data_disks.GetAllPresets():
    print('  {} ({})'.format(preset.name, preset.preset))
    print('  ' + commands.LIGHT_RULE)
    print('  Description: {}'.format(preset.description))
    print('  Use Case: {}'.format(preset.use_case))
    print('  Configuration:')
    print('    • Disk Count: {}'.format(preset.disk_count))
    print('    • Disk Size: {} GB each'.format(preset.disk_size_gb))
    print('    • Disk Type: {}'.format(preset.disk_type))
    print('    • Caching: {}'.format(preset.caching))
    print('  Estimated Cost: ~${}/month'.format(preset.estimated_monthly_cost))
    print()
  print('Use a preset with: --data_disk_preset=<name>')
  print('Examples: --data_disk_preset=database, --data_disk_preset=logs\n')


def _PrintText(config, validation, costs, performance):
  print('\n=== Azure Data Disk Configuration ===\n')
  print('Configuration:')
  print('  VM Name: {}'.format(config.vm_name))
  print('  Resource Group: {}'.format(config.resource_group))
  print('  VM Size: {}'.format(config.vm_size))
  print('  Location: {}'.format(config.location))
  preset = data_disks.GetPreset(config.preset) if config.preset else None
  print('  Preset: {}'.format(preset.name if preset else 'Custom'))
  print('  Disk Count: {}'.format(config.disk_count))
  print('  Disk Size: {} GB each'.format(config.disk_size_gb))
  print('  Disk Type: {}'.format(config.disk_type))
  print('  Caching: {}'.format(config.caching))
  print('  LUN Start: {}'.format(config.lun_start))
  print()

  limits = validation['vmLimits']
  print('VM Size Limits:')
  print('  Max Data Disks: {}'.format(limits['maxDataDiskCount']))
  print('  Max IOPS: {:,}'.format(limits['maxIOPS']))
  print('  Max Throughput: {} MB/s'.format(limits['maxThroughputMBps']))
  print()

  if validation['valid']:
    print('✅ Validation: PASSED\n')
  else:
    print('❌ Validation: FAILED\n')
    commands.PrintList('Errors:', validation['errors'])
  commands.PrintList('⚠️  Warnings:', validation['warnings'])

  print('Performance Estimate:')
  print('  Total IOPS: {:,}'.format(performance['totalIOPS']))
  print('  Total Throughput: {} MB/s'.format(
      performance['totalThroughputMBps']))
  if performance['perDiskIOPS']:
    print('  Per-Disk Breakdown:')
    for index, (iops, throughput) in enumerate(
        zip(performance['perDiskIOPS'],
            performance['perDiskThroughputMBps'])):
      print('    • Disk {}: {:,} IOPS, {} MB/s'.format(index, iops,
                                                      throughput))
  print()

  print('Cost Estimate:')
  print('  Cost per Disk: ${:.2f}/month'.format(costs['costPerDiskMonthly']))
  print('  Total Monthly: ${:.2f}/month'.format(costs['totalMonthlyCost']))
  print('  Total Annual: ${:.2f}/year'.format(costs['totalAnnualCost']))
  if costs['breakdown']:
    print('  Breakdown by Type:')
    for item in costs['breakdown']:
      print('    • {}x {}GB {}: ${:.2f}/month'.format(
          item['diskCount'], item['sizeGB'], item['diskType'],
          item['subtotalMonthly']))
  print()


def Run(argv):
  """Prints, and optionally exports, a data disk layout for one VM."""
  del argv
  if FLAGS.list_presets:
    PrintPresetCatalog()
    return 0

  if not (FLAGS.vm_name and FLAGS.resource_group and FLAGS.vm_size):
    logging.error('--vm_name, --resource_group and --vm_size are required. '
                  'Use --list_presets to see the data disk presets.')
    return 1

  config = data_disks.CreateDataDiskConfiguration(
      vm_name=FLAGS.vm_name,
      resource_group=FLAGS.resource_group,
      vm_size=FLAGS.vm_size,
      location=FLAGS.location,
      disk_count=FLAGS.data_disk_count,
      disk_size=FLAGS.data_disk_size,
      disk_type=ParseDiskType(FLAGS.data_disk_type),
      caching=FLAGS.data_disk_caching,
      lun_start=FLAGS.lun_start,
      preset=ParsePreset(FLAGS.data_disk_preset))

  manager = data_disks.DataDiskManager(config)
  validation = manager.Validate()
  costs = manager.EstimateCosts()
  performance = manager.CalculatePerformance()

  if FLAGS.format == commands.JSON:
    print(commands.ToJson({
        'configuration': dataclasses.asdict(config),
        'validation': validation,
        'costEstimate': costs,
        'performance': performance,
    }))
  elif FLAGS.format == commands.TEMPLATE:
    print(commands.ToJson(data_disks.GenerateDataDiskTemplate(config)))
  else:
    _PrintText(config, validation, costs, performance)

  if FLAGS.output:
    path = commands.WriteFile(
        FLAGS.output,
        commands.ToJson(data_disks.GenerateDataDiskTemplate(config)))
    print('✅ ARM template exported to: {}\n'.format(path))

  if not validation['valid'] and not FLAGS.validate_only:
    return 1
  return 0
