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
"""The configure-backup command: Azure Backup templates for one VM.

  azmp configure-backup --vault_name=myVault --vm_name=myVM \
      --resource_group=myRG --policy=production
  azmp configure-backup --list_policies
"""

import dataclasses
import logging

from absl import flags
import yaml

from azmp import commands
from azmp import errors
from azmp.azure import backup

FLAGS = flags.FLAGS

flags.DEFINE_boolean('create_vault', False,
                     'Create the Recovery Services vault. Requires '
                     '--location.')
flags.DEFINE_enum('policy', backup.PRODUCTION, list(backup.PRESETS),
                  'Backup policy preset.')
flags.DEFINE_boolean('enabled', True, 'Whether backup is enabled.')
flags.DEFINE_integer('disk_size', 100,
                     'VM disk size in GB used for the cost estimate.',
                     lower_bound=1)
flags.DEFINE_integer('daily_retention', None,
                     'Daily retention in days (7-9999), custom policy only.')
flags.DEFINE_integer('weekly_retention', None,
                     'Weekly retention in weeks (1-5163), custom policy only.')
flags.DEFINE_integer('monthly_retention', None,
                     'Monthly retention in months (1-1188), custom policy '
                     'only.')
flags.DEFINE_integer('yearly_retention', None,
                     'Yearly retention in years (1-99), custom policy only.')
flags.DEFINE_boolean('list_policies', False,
                     'Print the backup policy presets and exit.')
flags.DEFINE_string('config', None,
                    'JSON or YAML file of flag values, e.g. '
                    '{"vault_name": "myVault"}. Flags given on the command '
                    'line take precedence.')

_CONFIG_KEYS = (
    'vault_name', 'create_vault', 'location', 'vm_name', 'resource_group',
    'policy', 'enabled', 'disk_size', 'daily_retention', 'weekly_retention',
    'monthly_retention', 'yearly_retention')


def LoadConfigFile(path):
  """Returns the flag values stored in the JSON or YAML file 'path'.

  Raises:
    errors.Config.InvalidConfigError: if the file cannot be read or holds
      anything but a mapping of known keys.
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
  unknown = sorted(set(values) - set(_CONFIG_KEYS))
  if unknown:
    raise errors.Config.InvalidConfigError(
        'Unknown configuration keys in {}: {}'.format(path, ', '.join(unknown)))
  return values


def _ParseConfigValue(key, value):
  """Parses a config file value with the parser of the flag it sets.

  Raises:
    errors.Config.InvalidConfigError: if the flag parser rejects 'value'.
  """
  if value is None:
    return None
  try:
    return FLAGS[key].parser.parse(value)
  except (ValueError, TypeError) as e:
    raise errors.Config.InvalidConfigError(
        'Invalid value {!r} for {} in {}: {}'.format(value, key, FLAGS.config,
                                                     e))


def _Options():
  """Returns the effective options: command line, then config file."""
  options = {key: FLAGS[key].value for key in _CONFIG_KEYS}
  if FLAGS.config:
    for key, value in LoadConfigFile(FLAGS.config).items():
      if not commands.FlagIsSet(key):
        options[key] = _ParseConfigValue(key, value)
  return options


def PrintPolicyCatalog():
  print('\n=== Azure Backup Policies ===\n')
  for key, preset in backup.GetAllPresets().items():
    if key == backup.CUSTOM:
      continue
    retention = preset.retention
    print('  {} ({})'.format(preset.name, key))
    print('  ' + commands.LIGHT_RULE)
    print('  Description: {}'.format(preset.description))
    print('  Backup Schedule: {} at {}'.format(preset.schedule.frequency,
                                              preset.schedule.time))
    print('  Retention:')
    if retention.daily_days:
      print('    • Daily: {} days'.format(retention.daily_days))
    if retention.weekly_weeks:
      print('    • Weekly: {} weeks ({})'.format(
          retention.weekly_weeks, ', '.join(retention.weekly_days or [])))
    if retention.monthly_months:
      print('    • Monthly: {} months ({} {})'.format(
          retention.monthly_months, retention.monthly_week,
          retention.monthly_day))
    if retention.yearly_years:
      print('    • Yearly: {} years ({})'.format(
          retention.yearly_years, ', '.join(retention.yearly_months or [])))
    print('  Instant Restore: {}'.format(
        '{} days'.format(preset.instant_restore.retention_days)
        if preset.instant_restore.enabled else 'Disabled'))
    print('  Estimated Cost: ~${}/month per 100GB VM'.format(
        preset.estimated_monthly_cost_per_100gb))
    print()
  print('\n  Custom Policy')
  print('  ' + commands.LIGHT_RULE)
  print('  Description: Define your own retention periods')
  print('  Options: --daily_retention, --weekly_retention, '
        '--monthly_retention, --yearly_retention')
  print()


def _PrintText(manager, validation, costs):
  config = manager.config
  print('\n=== Backup Configuration ===\n')
  print('Backup: {}'.format('✅ ENABLED' if config.enabled else '❌ DISABLED'))
  print('Recovery Services Vault: {}'.format(config.vault_name))
  print('Create New Vault: {}'.format(
      'Yes' if config.create_vault else 'No (using existing)'))
  if config.create_vault and config.vault_config:
    vault = config.vault_config
    print('  Location: {}'.format(vault.location))
    print('  SKU: {}'.format(vault.sku))
    print('  Public Access: {}'.format(
        'Enabled' if vault.public_network_access else 'Disabled'))

  preset = manager.preset
  if config.policy_preset == backup.CUSTOM and config.custom_policy:
    preset = config.custom_policy
  print('\nBackup Policy: {}'.format(config.policy_preset))
  print('  Schedule: {} at {}'.format(preset.schedule.frequency,
                                      preset.schedule.time))
  print('  Retention:')
  for label, count, unit in (
      ('Daily', preset.retention.daily_days, 'days'),
      ('Weekly', preset.retention.weekly_weeks, 'weeks'),
      ('Monthly', preset.retention.monthly_months, 'months'),
      ('Yearly', preset.retention.yearly_years, 'years')):
    if count:
      print('    • {}: {} {}'.format(label, count, unit))
  print('  Instant Restore: {}'.format(
      '{} days'.format(preset.instant_restore.retention_days)
      if preset.instant_restore.enabled else 'Disabled'))

  print('\nVM Details:')
  print('  VM Name: {}'.format(config.vm_name))
  print('  Resource Group: {}'.format(config.resource_group_name))

  print('\n=== Cost Estimate ===\n')
  print('Protected Instance: ${:.2f}/month'.format(
      costs['protectedInstanceCost']))
  print('Backup Storage: ${:.2f}/month'.format(costs['storageCost']))
  print('\nTotal Monthly Cost: ${:.2f}'.format(costs['totalMonthlyCost']))
  print('Total Annual Cost: ${:.2f}'.format(costs['totalAnnualCost']))
  print('\nNotes:')
  for note in costs['notes']:
    print('  • {}'.format(note))

  print('\n=== Validation ===\n')
  if validation['isValid']:
    print('✅ Configuration is valid\n')
  else:
    print('❌ Configuration has errors:\n')
    for error in validation['errors']:
      print('  ❌ {}'.format(error))
    print()
  commands.PrintList('⚠️  Warnings:', validation['warnings'], '⚠️ ')
  commands.PrintList('💡 Recommendations:', validation['recommendations'],
                     '💡')

  compliance = manager.IsMarketplaceCompliant()
  print('=== Marketplace Compliance ===\n')
  if compliance['compliant']:
    print('Status: ✅ COMPLIANT\n')
  else:
    print('Status: ⚠️  NON-COMPLIANT\n')
    commands.PrintList('Issues:', compliance['issues'])


def Run(argv):
  """Prints, and optionally exports, the backup configuration of a VM."""
  del argv
  if FLAGS.list_policies:
    PrintPolicyCatalog()
    return 0

  options = _Options()
  if not (options['vault_name'] and options['vm_name'] and
          options['resource_group']):
    logging.error('--vault_name, --vm_name and --resource_group are '
                  'required. Use --list_policies to see the backup policies.')
    return 1
  if options['create_vault'] and not options['location']:
    logging.error('--location is required when --create_vault is specified.')
    return 1

  custom_retention = None
  if options['policy'] == backup.CUSTOM:
    custom_retention = {
        'daily': options['daily_retention'],
        'weekly': options['weekly_retention'],
        'monthly': options['monthly_retention'],
        'yearly': options['yearly_retention'],
    }
  config = backup.CreateBackupConfiguration(
      vault_name=options['vault_name'],
      vm_name=options['vm_name'],
      resource_group_name=options['resource_group'],
      enabled=options['enabled'],
      create_vault=options['create_vault'],
      vault_location=options['location'],
      policy_preset=options['policy'],
      custom_retention=custom_retention)

  manager = backup.BackupManager(config)
  validation = manager.Validate()
  costs = manager.EstimateCosts(options['disk_size'])

  if FLAGS.format == commands.JSON:
    print(commands.ToJson({
        'configuration': dataclasses.asdict(config),
        'validation': validation,
        'compliance': manager.IsMarketplaceCompliant(),
        'estimatedCosts': costs,
    }))
  elif FLAGS.format == commands.TEMPLATE:
    print(commands.ToJson(backup.GenerateBackupTemplate(config)))
  else:
    _PrintText(manager, validation, costs)

  if FLAGS.output:
    path = commands.WriteFile(
        FLAGS.output, commands.ToJson(backup.GenerateBackupTemplate(config)))
    print('\n✅ ARM template exported to: {}\n'.format(path))

  if not validation['isValid'] and not FLAGS.validate_only:
    return 1
  return 0
