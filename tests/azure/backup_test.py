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
"""Tests for azmp.azure.backup."""

import unittest

from absl.testing import parameterized

from azmp import errors
from azmp.azure import backup


def _Config(**kwargs):
  options = {
      'vault_name': 'prod-vault',
      'vm_name': 'web01',
      'resource_group_name': 'web-rg',
  }
  options.update(kwargs)
  return backup.CreateBackupConfiguration(**options)


class PresetTestCase(parameterized.TestCase):

  def testAllPresets(self):
    self.assertEqual(list(backup.PRESETS), list(backup.GetAllPresets()))

  @parameterized.parameters(
      ('development', 7, None, None, None, 2),
      ('production', 30, 12, 12, None, 5),
      ('longterm', 90, 52, 60, 7, 5),
  )
  def testRetention(self, preset, daily, weekly, monthly, yearly, instant):
    policy = backup.GetPreset(preset)
    self.assertEqual(daily, policy.retention.daily_days)
    self.assertEqual(weekly, policy.retention.weekly_weeks)
    self.assertEqual(monthly, policy.retention.monthly_months)
    self.assertEqual(yearly, policy.retention.yearly_years)
    self.assertEqual(instant, policy.instant_restore.retention_days)

  def testGetPresetReturnsCopy(self):
    backup.GetPreset('production').retention.daily_days = 1
    self.assertEqual(30, backup.GetPreset('production').retention.daily_days)

  def testUnknownPreset(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'Unknown backup policy preset: hourly'):
      backup.GetPreset('hourly')


class CreateBackupConfigurationTestCase(unittest.TestCase):

  def testDefaults(self):
    config = _Config()
    self.assertTrue(config.enabled)
    self.assertFalse(config.create_vault)
    self.assertIsNone(config.vault_config)
    self.assertEqual('production', config.policy_preset)
    self.assertIsNone(config.custom_policy)

  def testCreateVault(self):
    config = _Config(create_vault=True, vault_location='eastus')
    self.assertEqual('prod-vault', config.vault_config.name)
    self.assertEqual('eastus', config.vault_config.location)
    self.assertEqual('RS0', config.vault_config.sku)

  def testCustomRetention(self):
    config = _Config(policy_preset='custom',
                     custom_retention={'daily': 14, 'yearly': 3})
    retention = config.custom_policy.retention
    self.assertEqual(14, retention.daily_days)
    self.assertIsNone(retention.weekly_weeks)
    self.assertEqual(3, retention.yearly_years)
    self.assertEqual('02:00', config.custom_policy.schedule.time)

  def testCustomRetentionIgnoredForPresets(self):
    config = _Config(policy_preset='production',
                     custom_retention={'daily': 14})
    self.assertIsNone(config.custom_policy)


class ValidateTestCase(parameterized.TestCase):

  def testValidProduction(self):
    result = backup.BackupManager(_Config()).Validate()
    self.assertTrue(result['isValid'])
    self.assertEqual([], result['errors'])
    self.assertEqual([], result['warnings'])
    self.assertEqual(1, len(result['recommendations']))

  def testMissingNames(self):
    config = backup.BackupConfiguration(vault_name='', vm_name='',
                                        resource_group_name='')
    self.assertEqual([
        'Vault name is required',
        'VM name is required',
        'Resource group name is required',
    ], backup.BackupManager(config).Validate()['errors'])

  @parameterized.parameters('ab', 'bad_name', 'x' * 51)
  def testBadVaultName(self, vault_name):
    result = backup.BackupManager(_Config(vault_name=vault_name)).Validate()
    self.assertFalse(result['isValid'])
    self.assertIn('3-50 characters', result['errors'][0])

  def testCreateVaultWithoutLocation(self):
    result = backup.BackupManager(_Config(create_vault=True)).Validate()
    self.assertIn('Vault configuration is required when creating a new vault',
                  result['errors'])

  def testCustomWithoutRetention(self):
    result = backup.BackupManager(_Config(policy_preset='custom')).Validate()
    self.assertIn('Custom policy configuration is required when using '
                  'Custom preset', result['errors'])

  @parameterized.parameters(
      ({'daily': 3}, 'Daily retention must be between 7 and 9999 days'),
      ({'weekly': 6000}, 'Weekly retention must be between 1 and 5163 weeks'),
      ({'monthly': 0}, 'Monthly retention must be between 1 and 1188 months'),
      ({'yearly': 100}, 'Yearly retention must be between 1 and 99 years'),
  )
  def testCustomRetentionRanges(self, retention, message):
    config = _Config(policy_preset='custom', custom_retention=retention)
    result = backup.BackupManager(config).Validate()
    self.assertFalse(result['isValid'])
    self.assertEqual([message], result['errors'])

  def testDevelopmentWarns(self):
    result = backup.BackupManager(
        _Config(policy_preset='development')).Validate()
    self.assertTrue(result['isValid'])
    self.assertIn('only 7 days retention', result['warnings'][0])

  def testDisabledWarns(self):
    result = backup.BackupManager(_Config(enabled=False)).Validate()
    self.assertEqual(['Backup is disabled. This VM will not be protected '
                      'against data loss.'], result['warnings'])
    self.assertEqual([], result['recommendations'])


class EstimateCostsTestCase(unittest.TestCase):

  def testProduction(self):
    costs = backup.BackupManager(_Config()).EstimateCosts(100)
    self.assertEqual(10.0, costs['protectedInstanceCost'])
    self.assertAlmostEqual(25.0, costs['snapshotCost'])
    self.assertAlmostEqual(53.6, costs['storageCost'])
    self.assertAlmostEqual(63.6, costs['totalMonthlyCost'])
    self.assertAlmostEqual(763.2, costs['totalAnnualCost'])
    self.assertEqual('Storage (100GB VM, 2.9x factor): $28.60/month',
                     costs['notes'][1])
    self.assertEqual(4, len(costs['notes']))

  def testDevelopment(self):
    costs = backup.BackupManager(
        _Config(policy_preset='development')).EstimateCosts(200)
    # 200 GB * 1.35 * 0.10 + 200 GB * 2 days * 0.05
    self.assertAlmostEqual(10 + 27 + 20, costs['totalMonthlyCost'])

  def testCustomPolicyIsUsed(self):
    config = _Config(policy_preset='custom', custom_retention={'daily': 10})
    costs = backup.BackupManager(config).EstimateCosts(100)
    # 100 GB * 1.5 * 0.10 + 100 GB * 5 days * 0.05
    self.assertAlmostEqual(10 + 15 + 25, costs['totalMonthlyCost'])


class ComplianceTestCase(unittest.TestCase):

  def testProductionCompliant(self):
    self.assertEqual({'compliant': True, 'issues': []},
                     backup.BackupManager(_Config()).IsMarketplaceCompliant())

  def testDisabledDevelopment(self):
    result = backup.BackupManager(
        _Config(enabled=False,
                policy_preset='development')).IsMarketplaceCompliant()
    self.assertFalse(result['compliant'])
    self.assertEqual(2, len(result['issues']))


class RetentionPolicyTestCase(unittest.TestCase):

  def testDailyOnly(self):
    policy = backup.BuildRetentionPolicy(backup.RetentionPolicy(daily_days=7))
    self.assertEqual({
        'retentionPolicyType': 'LongTermRetentionPolicy',
        'dailySchedule': {
            'retentionTimes': ['02:00:00Z'],
            'retentionDuration': {'count': 7, 'durationType': 'Days'},
        },
    }, policy)

  def testLongTerm(self):
    policy = backup.BuildRetentionPolicy(
        backup.GetPreset('longterm').retention)
    self.assertEqual(['Sunday'], policy['weeklySchedule']['daysOfTheWeek'])
    self.assertEqual(
        {'daysOfTheWeek': ['Sunday'], 'weeksOfTheMonth': ['First']},
        policy['monthlySchedule']['retentionScheduleWeekly'])
    self.assertEqual(['January'], policy['yearlySchedule']['monthsOfYear'])
    self.assertEqual({'count': 7, 'durationType': 'Years'},
                     policy['yearlySchedule']['retentionDuration'])


class GenerateBackupTemplateTestCase(unittest.TestCase):

  def _Types(self, template):
    return [r['type'] for r in template['resources']]

  def testExistingVault(self):
    template = backup.GenerateBackupTemplate(_Config())
    self.assertEqual([backup.POLICY_TYPE, backup.PROTECTED_ITEM_TYPE],
                     self._Types(template))
    self.assertNotIn('vaultLocation', template['parameters'])
    self.assertEqual([], template['resources'][0]['dependsOn'])
    self.assertEqual('production',
                     template['parameters']['backupPolicyPreset'][
                         'defaultValue'])

  def testNewVault(self):
    template = backup.GenerateBackupTemplate(
        _Config(create_vault=True, vault_location='westus2'))
    self.assertEqual(
        [backup.VAULT_TYPE, backup.POLICY_TYPE, backup.PROTECTED_ITEM_TYPE],
        self._Types(template))
    self.assertEqual('westus2',
                     template['parameters']['vaultLocation']['defaultValue'])
    policy = template['resources'][1]
    self.assertEqual(1, len(policy['dependsOn']))
    self.assertEqual(['02:00:00Z'],
                     policy['properties']['schedulePolicy'][
                         'scheduleRunTimes'])
    self.assertEqual(5, policy['properties']['instantRpRetentionRangeInDays'])

  def testDisabled(self):
    template = backup.GenerateBackupTemplate(_Config(enabled=False))
    self.assertEqual([], template['resources'])
    self.assertFalse(template['parameters']['enableBackup']['defaultValue'])

  def testVariables(self):
    variables = backup.GenerateBackupTemplate(_Config())['variables']
    self.assertEqual('02:00', variables['backupScheduleTime'])
    self.assertEqual(5, variables['instantRestoreRetentionDays'])
    self.assertEqual('Azure', variables['backupFabric'])


if __name__ == '__main__':
  unittest.main()
