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
"""Recovery Services vault, backup policy and protected item resources."""

import datetime
import re

from azmp import arm_util
from azmp import data

VAULT_TYPE = 'Microsoft.RecoveryServices/vaults'
POLICY_TYPE = 'Microsoft.RecoveryServices/vaults/backupPolicies'
PROTECTED_ITEM_TYPE = ('Microsoft.RecoveryServices/vaults/backupFabrics/'
                       'protectionContainers/protectedItems')
VM_TYPE = 'Microsoft.Compute/virtualMachines'
API_VERSION = '2023-06-01'

DAILY = 'Daily'
WEEKLY = 'Weekly'

_TIME_RE = re.compile(r'^([0-1][0-9]|2[0-3]):[0-5][0-9]$')


def RecoveryServicesVault(name, location=arm_util.DEFAULT_LOCATION, sku='RS0',
                          tags=None):
  """Returns a Recovery Services vault with an unlocked immutability state."""
  return {
      'type': VAULT_TYPE,
      'apiVersion': API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'sku': {'name': sku or 'RS0', 'tier': 'Standard'},
      'properties': {
          'publicNetworkAccess': 'Enabled',
          'restoreSettings': {'crossRegionRestoreFlag': False},
          'securitySettings': {
              'immutabilitySettings': {'state': 'Unlocked'},
          },
      },
      'tags': tags or {},
  }


def _RunTime(schedule_date, schedule_time):
  if schedule_date is None:
    schedule_date = datetime.datetime.now(datetime.timezone.utc).date()
  if isinstance(schedule_date, (datetime.date, datetime.datetime)):
    schedule_date = schedule_date.strftime('%Y-%m-%d')
  return '{}T{}:00.000Z'.format(schedule_date, schedule_time)


def _Retention(count, duration_type, run_time, **schedule):
  schedule['retentionTimes'] = [run_time]
  schedule['retentionDuration'] = {
      'count': count,
      'durationType': duration_type,
  }
  return schedule


def BackupPolicy(name,
                 vault_name,
                 schedule_type=DAILY,
                 schedule_time='02:00',
                 timezone='UTC',
                 daily_retention_days=None,
                 weekly_retention_weeks=None,
                 monthly_retention_months=None,
                 yearly_retention_years=None,
                 instant_rp_retention_days=2,
                 schedule_date=None):
  """Returns an AzureIaasVM backup policy of vault 'vault_name'.

  Args:
    name: string. Policy name.
    vault_name: string. Name of the vault owning the policy.
    schedule_type: string. 'Daily' or 'Weekly'.
    schedule_time: string. Run time as HH:MM in 'timezone'.
    timezone: string. Time zone of the schedule.
    daily_retention_days: int. Days to keep daily points, or None.
    weekly_retention_weeks: int. Weeks to keep Sunday points, or None.
    monthly_retention_months: int. Months to keep first-Sunday points, or None.
    yearly_retention_years: int. Years to keep the first Sunday of January,
      or None.
    instant_rp_retention_days: int. Days snapshots are kept for instant
      restore, 1-5.
    schedule_date: datetime.date or 'YYYY-MM-DD' string used as the date part
      of the run times. Defaults to the current UTC date.

  Returns:
    The backupPolicies resource. Retention schedules are present only for the
    tiers that are set.
  """
  run_time = _RunTime(schedule_date, schedule_time)
  retention = {'retentionPolicyType': 'LongTermRetentionPolicy'}
  if daily_retention_days:
    retention['dailySchedule'] = _Retention(
        daily_retention_days, 'Days', run_time)
  if weekly_retention_weeks:
    retention['weeklySchedule'] = _Retention(
        weekly_retention_weeks, 'Weeks', run_time,
        daysOfTheWeek=['Sunday'])
  if monthly_retention_months:
    retention['monthlySchedule'] = _Retention(
        monthly_retention_months, 'Months', run_time,
        retentionScheduleFormatType='Weekly',
        retentionScheduleWeekly={
            'daysOfTheWeek': ['Sunday'],
            'weeksOfTheMonth': ['First'],
        })
  if yearly_retention_years:
    retention['yearlySchedule'] = _Retention(
        yearly_retention_years, 'Years', run_time,
        retentionScheduleFormatType='Weekly',
        monthsOfYear=['January'],
        retentionScheduleWeekly={
            'daysOfTheWeek': ['Sunday'],
            'weeksOfTheMonth': ['First'],
        })

  return {
      'type': POLICY_TYPE,
      'apiVersion': API_VERSION,
      'name': '{}/{}'.format(vault_name, name),
      'properties': {
          'backupManagementType': 'AzureIaasVM',
          'instantRpRetentionRangeInDays': (
              2 if instant_rp_retention_days is None
              else instant_rp_retention_days),
          'schedulePolicy': {
              'schedulePolicyType': 'SimpleSchedulePolicy',
              'scheduleRunFrequency': schedule_type or DAILY,
              'scheduleRunTimes': [run_time],
              'scheduleWeeklyFrequency': 0,
          },
          'retentionPolicy': retention,
          'timeZone': timezone or 'UTC',
      },
  }


def EnableVmBackup(vm_name, vault_name, policy_name, resource_group=None):
  """Returns the protected item that enrolls 'vm_name' with 'policy_name'."""
  resource_group = resource_group or arm_util.DEFAULT_RESOURCE_GROUP
  container = 'iaasvmcontainer;iaasvmcontainerv2;{};{}'.format(
      resource_group, vm_name)
  item = 'vm;iaasvmcontainerv2;{};{}'.format(resource_group, vm_name)
  return {
      'type': PROTECTED_ITEM_TYPE,
      'apiVersion': API_VERSION,
      'name': '{}/Azure/{}/{}'.format(vault_name, container, item),
      'properties': {
          'protectedItemType': VM_TYPE,
          'policyId': arm_util.ResourceId(POLICY_TYPE, vault_name,
                                          policy_name),
          'sourceResourceId': "[resourceId('{}', '{}', '{}')]".format(
              resource_group, VM_TYPE, vm_name),
      },
  }


# Keyword arguments of BackupPolicy for each preset, without the vault name.
BACKUP_PRESETS = {
    'development': {
        'name': 'policy-dev',
        'daily_retention_days': 7,
        'instant_rp_retention_days': 2,
    },
    'production': {
        'name': 'policy-prod',
        'daily_retention_days': 30,
        'weekly_retention_weeks': 12,
        'monthly_retention_months': 12,
        'instant_rp_retention_days': 5,
    },
    'longterm': {
        'name': 'policy-longterm',
        'daily_retention_days': 90,
        'weekly_retention_weeks': 52,
        'monthly_retention_months': 60,
        'yearly_retention_years': 7,
        'instant_rp_retention_days': 5,
    },
}


def BackupPreset(preset, vault_name, schedule_date=None):
  """Returns the backup policy of 'preset', defaulting to development."""
  kwargs = dict(BACKUP_PRESETS.get(preset, BACKUP_PRESETS['development']))
  return BackupPolicy(vault_name=vault_name, schedule_date=schedule_date,
                      **kwargs)


def EstimateBackupStorage(vm_size_gb, daily_retention=30, weekly_retention=12,
                          monthly_retention=12, compression_ratio=0.5):
  """Estimates the vault storage in GB used by a VM's recovery points.

  The first daily point is a full compressed copy. Later daily, weekly and
  monthly points hold 10%, 30% and 50% of the disk as changed blocks.
  """
  compressed = vm_size_gb * compression_ratio
  daily = compressed + vm_size_gb * 0.1 * compression_ratio * (
      daily_retention - 1)
  weekly = vm_size_gb * 0.3 * compression_ratio * weekly_retention
  monthly = vm_size_gb * 0.5 * compression_ratio * monthly_retention
  return int(round(daily + weekly + monthly))


def ValidateBackupPolicy(config):
  """Validates a backup policy configuration.

  Args:
    config: dict with the keys 'name', 'vaultName', 'scheduleTime',
      'instantRpRetentionRangeInDays', 'dailyRetentionDays' and
      'weeklyRetentionWeeks'.

  Returns:
    A dict {'valid', 'errors', 'warnings'}.
  """
  validation_errors = []
  warnings = []
  if not config.get('name'):
    validation_errors.append('Policy name is required')
  if not config.get('vaultName'):
    validation_errors.append('Vault name is required')
  if not _TIME_RE.match(config.get('scheduleTime') or ''):
    validation_errors.append(
        'Schedule time must be in HH:mm format (e.g., 02:00)')
  instant_days = config.get('instantRpRetentionRangeInDays')
  if instant_days and not 1 <= instant_days <= 5:
    validation_errors.append(
        'Instant restore retention must be between 1 and 5 days')

  daily = config.get('dailyRetentionDays')
  if daily and daily < 7:
    warnings.append(
        'Daily retention less than 7 days is not recommended for production')
  if not daily and not config.get('weeklyRetentionWeeks'):
    warnings.append(
        'No retention policy specified - backups will not be retained')
  return {
      'valid': not validation_errors,
      'errors': validation_errors,
      'warnings': warnings,
  }


def BestPractices():
  return data.ReadResource('best_practices/backup.md').strip()
