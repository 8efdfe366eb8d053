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
"""Azure Backup configuration for marketplace VM templates.

A BackupConfiguration selects a Recovery Services vault and one of the policy
presets. BackupManager validates it, estimates its monthly cost and produces
the parameters, variables and resources of an ARM deployment template.
"""

import copy
import dataclasses
import re
from typing import Any, Dict, List, Optional

from azmp import arm_util
from azmp import errors

VAULT_TYPE = 'Microsoft.RecoveryServices/vaults'
POLICY_TYPE = 'Microsoft.RecoveryServices/vaults/backupPolicies'
PROTECTED_ITEM_TYPE = ('Microsoft.RecoveryServices/vaults/backupFabrics/'
                       'protectionContainers/protectedItems')
VM_TYPE = 'Microsoft.Compute/virtualMachines'
API_VERSION = '2023-06-01'

DEVELOPMENT = 'development'
PRODUCTION = 'production'
LONG_TERM = 'longterm'
CUSTOM = 'custom'
PRESETS = (DEVELOPMENT, PRODUCTION, LONG_TERM, CUSTOM)

DAILY = 'Daily'
WEEKLY = 'Weekly'
SUNDAY = 'Sunday'

# Only RS0 is offered for Recovery Services vaults.
VAULT_SKU = 'RS0'

PROTECTED_INSTANCE_COST = 10.0
STORAGE_PER_GB_MONTH = 0.10
SNAPSHOT_PER_GB_MONTH = 0.05

_VAULT_NAME_RE = re.compile(r'^[a-zA-Z0-9-]{3,50}$')
_TIME_RE = re.compile(r'^([0-1][0-9]|2[0-3]):[0-5][0-9]$')
_RETENTION_TIME = '02:00:00Z'

_VAULT_ID = ("[resourceId('Microsoft.RecoveryServices/vaults', "
             "parameters('recoveryServicesVaultName'))]")
_POLICY_ID = ("[resourceId('Microsoft.RecoveryServices/vaults/backupPolicies', "
              "parameters('recoveryServicesVaultName'), "
              "variables('backupPolicyName'))]")
_VM_ID = "[resourceId('Microsoft.Compute/virtualMachines', parameters('vmName'))]"


@dataclasses.dataclass
class RetentionPolicy:
  """How long each tier of recovery points is kept.

  Attributes:
    daily_days: Days a daily recovery point is kept.
    weekly_weeks: Weeks a weekly recovery point is kept.
    weekly_days: Days of the week whose recovery point is kept weekly.
    monthly_months: Months a monthly recovery point is kept.
    monthly_week: Week of the month ('First', 'Second', ..., 'Last').
    monthly_day: Day of the week of the monthly recovery point.
    yearly_years: Years a yearly recovery point is kept.
    yearly_months: Months of the year whose recovery point is kept yearly.
    yearly_week: Week of the month of the yearly recovery point.
    yearly_day: Day of the week of the yearly recovery point.
  """
  daily_days: Optional[int] = None
  weekly_weeks: Optional[int] = None
  weekly_days: Optional[List[str]] = None
  monthly_months: Optional[int] = None
  monthly_week: Optional[str] = None
  monthly_day: Optional[str] = None
  yearly_years: Optional[int] = None
  yearly_months: Optional[List[str]] = None
  yearly_week: Optional[str] = None
  yearly_day: Optional[str] = None


@dataclasses.dataclass
class BackupSchedule:
  frequency: str = DAILY
  time: str = '02:00'
  days_of_week: Optional[List[str]] = None


@dataclasses.dataclass
class InstantRestore:
  enabled: bool = True
  retention_days: int = 2


@dataclasses.dataclass
class BackupPolicy:
  """A named schedule, retention and instant restore combination."""
  name: str
  schedule: BackupSchedule
  retention: RetentionPolicy
  instant_restore: InstantRestore
  description: str = ''
  estimated_monthly_cost_per_100gb: float = 0
  time_zone: str = 'UTC'


@dataclasses.dataclass
class VaultConfiguration:
  name: str
  location: str
  sku: str = VAULT_SKU
  public_network_access: bool = True
  tags: Optional[Dict[str, str]] = None


@dataclasses.dataclass
class BackupConfiguration:
  """Backup settings of one VM.

  Attributes:
    vault_name: Name of the Recovery Services vault.
    vm_name: Name of the protected VM.
    resource_group_name: Resource group of the VM.
    enabled: Whether the template enables backup.
    create_vault: Whether the template creates the vault.
    vault_config: Settings of the vault to create.
    policy_preset: One of PRESETS.
    custom_policy: Policy used with the custom preset.
  """
  vault_name: str
  vm_name: str
  resource_group_name: str
  enabled: bool = True
  create_vault: bool = False
  vault_config: Optional[VaultConfiguration] = None
  policy_preset: str = PRODUCTION
  custom_policy: Optional[BackupPolicy] = None


def _DailyPreset(name, description, daily_days, instant_days, cost,
                 **retention):
  return BackupPolicy(
      name=name,
      description=description,
      schedule=BackupSchedule(DAILY, '02:00'),
      retention=RetentionPolicy(daily_days=daily_days, **retention),
      instant_restore=InstantRestore(True, instant_days),
      estimated_monthly_cost_per_100gb=cost)


_PRESET_POLICIES = {
    DEVELOPMENT: _DailyPreset(
        'Development',
        '7 days daily retention with 2-day instant restore. '
        'Suitable for dev/test environments.',
        7, 2, 15),
    PRODUCTION: _DailyPreset(
        'Production',
        '30 days daily + 12 weeks weekly + 12 months monthly retention with '
        '5-day instant restore.',
        30, 5, 35,
        weekly_weeks=12, weekly_days=[SUNDAY],
        monthly_months=12, monthly_week='First', monthly_day=SUNDAY),
    LONG_TERM: _DailyPreset(
        'Long-term',
        '90 days daily + 52 weeks weekly + 60 months monthly + 7 years '
        'yearly retention.',
        90, 5, 75,
        weekly_weeks=52, weekly_days=[SUNDAY],
        monthly_months=60, monthly_week='First', monthly_day=SUNDAY,
        yearly_years=7, yearly_months=['January'], yearly_week='First',
        yearly_day=SUNDAY),
    CUSTOM: _DailyPreset(
        'Custom',
        'Custom backup policy with user-defined retention settings.',
        30, 2, 35),
}


def GetPreset(preset: str) -> BackupPolicy:
  """Returns a copy of the policy of 'preset'.

  Raises:
    errors.Config.InvalidConfigError: if 'preset' is not a known preset.
  """
  try:
    return copy.deepcopy(_PRESET_POLICIES[preset])
  except KeyError:
    raise errors.Config.InvalidConfigError(
        'Unknown backup policy preset: {}. Valid presets: {}'.format(
            preset, ', '.join(PRESETS)))


def GetAllPresets() -> Dict[str, BackupPolicy]:
  return copy.deepcopy(_PRESET_POLICIES)


def _CheckRange(value, low, high, message, validation_errors):
  if value is not None and not low <= value <= high:
    validation_errors.append(message)


class BackupManager(object):
  """Validates a BackupConfiguration and renders it as ARM template parts."""

  def __init__(self, config: BackupConfiguration):
    self.config = config

  @property
  def preset(self) -> BackupPolicy:
    return GetPreset(self.config.policy_preset)

  def _EffectivePolicy(self) -> BackupPolicy:
    if self.config.policy_preset == CUSTOM and self.config.custom_policy:
      return self.config.custom_policy
    return self.preset

  def Validate(self) -> Dict[str, Any]:
    """Checks names, vault settings and custom retention ranges.

    Returns:
      A dict {'isValid', 'errors', 'warnings', 'recommendations'}.
    """
    config = self.config
    validation_errors = []
    warnings = []
    recommendations = []

    if not config.vault_name:
      validation_errors.append('Vault name is required')
    elif not _VAULT_NAME_RE.match(config.vault_name):
      validation_errors.append(
          'Vault name must be 3-50 characters (alphanumeric and hyphens only)')
    if not config.vm_name:
      validation_errors.append('VM name is required')
    if not config.resource_group_name:
      validation_errors.append('Resource group name is required')
    if config.create_vault and not config.vault_config:
      validation_errors.append(
          'Vault configuration is required when creating a new vault')
    if config.policy_preset not in PRESETS:
      validation_errors.append(
          'Unknown backup policy preset: {}'.format(config.policy_preset))
    if config.policy_preset == CUSTOM and not config.custom_policy:
      validation_errors.append(
          'Custom policy configuration is required when using Custom preset')

    policy = config.custom_policy
    if policy:
      retention = policy.retention
      _CheckRange(retention.daily_days, 7, 9999,
                  'Daily retention must be between 7 and 9999 days',
                  validation_errors)
      _CheckRange(retention.weekly_weeks, 1, 5163,
                  'Weekly retention must be between 1 and 5163 weeks',
                  validation_errors)
      _CheckRange(retention.monthly_months, 1, 1188,
                  'Monthly retention must be between 1 and 1188 months',
                  validation_errors)
      _CheckRange(retention.yearly_years, 1, 99,
                  'Yearly retention must be between 1 and 99 years',
                  validation_errors)
      if policy.instant_restore.enabled:
        _CheckRange(policy.instant_restore.retention_days, 1, 5,
                    'Instant restore retention must be between 1 and 5 days',
                    validation_errors)
      if not _TIME_RE.match(policy.schedule.time or ''):
        validation_errors.append(
            'Backup time must be in HH:MM format (24-hour)')

    if config.enabled:
      recommendations.append(
          'Backup is enabled. Ensure the Recovery Services Vault is in the '
          'same region as the VM for optimal performance.')
      if config.policy_preset == DEVELOPMENT:
        warnings.append(
            'Development backup policy provides only 7 days retention. '
            'Consider Production policy for critical workloads.')
      if config.policy_preset == CUSTOM and not (
          policy and policy.instant_restore.enabled):
        recommendations.append(
            'Enable instant restore for faster recovery operations '
            '(1-5 days snapshot retention).')
    else:
      warnings.append('Backup is disabled. This VM will not be protected '
                      'against data loss.')

    return {
        'isValid': not validation_errors,
        'errors': validation_errors,
        'warnings': warnings,
        'recommendations': recommendations,
    }

  def EstimateCosts(self, vm_disk_size_gb: float) -> Dict[str, Any]:
    """Estimates the monthly cost of protecting a VM of the given disk size.

    Storage grows with retention: 5% of the disk per daily point, 2% per
    weekly point and 1% per monthly point.
    """
    preset = self._EffectivePolicy()
    retention = preset.retention
    storage_factor = 1.0
    storage_factor += (retention.daily_days or 0) * 0.05
    storage_factor += (retention.weekly_weeks or 0) * 0.02
    storage_factor += (retention.monthly_months or 0) * 0.01
    storage_cost = vm_disk_size_gb * storage_factor * STORAGE_PER_GB_MONTH

    snapshot_cost = 0.0
    instant_restore = preset.instant_restore
    if instant_restore.enabled:
      snapshot_cost = (vm_disk_size_gb * instant_restore.retention_days *
                       SNAPSHOT_PER_GB_MONTH)
      snapshot_note = 'Instant restore snapshots ({} days): ${:.2f}/month'.format(
          instant_restore.retention_days, snapshot_cost)
    else:
      snapshot_note = 'Instant restore disabled'

    total_monthly = PROTECTED_INSTANCE_COST + storage_cost + snapshot_cost
    return {
        'protectedInstanceCost': PROTECTED_INSTANCE_COST,
        'storageCost': storage_cost + snapshot_cost,
        'snapshotCost': snapshot_cost,
        'totalMonthlyCost': total_monthly,
        'totalAnnualCost': total_monthly * 12,
        'notes': [
            'Protected instance: ${:.2f}/month'.format(
                PROTECTED_INSTANCE_COST),
            'Storage ({}GB VM, {:.1f}x factor): ${:.2f}/month'.format(
                _FormatNumber(vm_disk_size_gb), storage_factor, storage_cost),
            snapshot_note,
            'Costs may vary based on actual backup data size and change rate',
        ],
    }

  def GetTemplateParameters(self) -> Dict[str, Any]:
    config = self.config
    params = {
        'enableBackup': {
            'type': 'bool',
            'defaultValue': config.enabled,
            'metadata': {
                'description': 'Enable Azure Backup for the virtual machine',
            },
        },
        'backupPolicyPreset': {
            'type': 'string',
            'defaultValue': config.policy_preset,
            'allowedValues': list(PRESETS),
            'metadata': {
                'description': 'Backup policy preset (development, '
                               'production, longterm, or custom)',
            },
        },
        'recoveryServicesVaultName': {
            'type': 'string',
            'defaultValue': config.vault_name,
            'metadata': {'description': 'Recovery Services Vault name'},
        },
    }
    if config.create_vault and config.vault_config:
      params['vaultLocation'] = {
          'type': 'string',
          'defaultValue': config.vault_config.location,
          'metadata': {
              'description': 'Recovery Services Vault location (should '
                             'match VM location)',
          },
      }
    return params

  def GetTemplateVariables(self) -> Dict[str, Any]:
    policy = self._EffectivePolicy()
    return {
        'backupPolicyName': "[concat('policy-', parameters('backupPolicyPreset'))]",
        'backupFabric': 'Azure',
        'protectionContainer': (
            "[concat('iaasvmcontainer;iaasvmcontainerv2;', "
            "resourceGroup().name, ';', parameters('vmName'))]"),
        'protectedItem': (
            "[concat('vm;iaasvmcontainerv2;', resourceGroup().name, ';', "
            "parameters('vmName'))]"),
        'backupScheduleTime': policy.schedule.time,
        'instantRestoreRetentionDays': policy.instant_restore.retention_days,
    }

  def GetVaultResource(self) -> Optional[Dict[str, Any]]:
    """Returns the vault resource, or None when the vault already exists."""
    vault = self.config.vault_config
    if not self.config.create_vault or not vault:
      return None
    return {
        'type': VAULT_TYPE,
        'apiVersion': API_VERSION,
        'name': "[parameters('recoveryServicesVaultName')]",
        'location': "[parameters('vaultLocation')]",
        'sku': {'name': vault.sku, 'tier': 'Standard'},
        'properties': {
            'publicNetworkAccess': ('Enabled' if vault.public_network_access
                                    else 'Disabled'),
        },
        'tags': vault.tags or {},
    }

  def GetBackupPolicyResource(self) -> Dict[str, Any]:
    policy = self._EffectivePolicy()
    return {
        'type': POLICY_TYPE,
        'apiVersion': API_VERSION,
        'name': ("[concat(parameters('recoveryServicesVaultName'), '/', "
                 "variables('backupPolicyName'))]"),
        'dependsOn': [_VAULT_ID] if self.config.create_vault else [],
        'properties': {
            'backupManagementType': 'AzureIaasVM',
            'instantRpRetentionRangeInDays': (
                policy.instant_restore.retention_days),
            'schedulePolicy': {
                'schedulePolicyType': 'SimpleSchedulePolicy',
                'scheduleRunFrequency': policy.schedule.frequency,
                'scheduleRunTimes': ['{}:00Z'.format(policy.schedule.time)],
            },
            'retentionPolicy': BuildRetentionPolicy(policy.retention),
            'timeZone': 'UTC',
        },
    }

  def GetProtectedItemResource(self) -> Dict[str, Any]:
    return {
        'type': PROTECTED_ITEM_TYPE,
        'apiVersion': API_VERSION,
        'name': ("[concat(parameters('recoveryServicesVaultName'), '/', "
                 "variables('backupFabric'), '/', "
                 "variables('protectionContainer'), '/', "
                 "variables('protectedItem'))]"),
        'dependsOn': [_VM_ID, _POLICY_ID],
        'properties': {
            'protectedItemType': VM_TYPE,
            'policyId': _POLICY_ID,
            'sourceResourceId': _VM_ID,
        },
    }

  def IsMarketplaceCompliant(self) -> Dict[str, Any]:
    issues = []
    if not self.config.enabled:
      issues.append('Backup is not enabled. Azure Marketplace recommends '
                    'backup for production VMs.')
    if self.config.policy_preset == DEVELOPMENT:
      issues.append('Development backup policy (7 days) may not meet '
                    'enterprise requirements. Consider Production or '
                    'Long-term policies.')
    return {'compliant': not issues, 'issues': issues}


def _FormatNumber(value):
  if isinstance(value, float) and value.is_integer():
    return int(value)
  return value


def BuildRetentionPolicy(retention: RetentionPolicy) -> Dict[str, Any]:
  """Returns the LongTermRetentionPolicy of 'retention'."""
  policy = {'retentionPolicyType': 'LongTermRetentionPolicy'}
  if retention.daily_days:
    policy['dailySchedule'] = {
        'retentionTimes': [_RETENTION_TIME],
        'retentionDuration': {
            'count': retention.daily_days,
            'durationType': 'Days',
        },
    }
  if retention.weekly_weeks:
    policy['weeklySchedule'] = {
        'daysOfTheWeek': retention.weekly_days or [SUNDAY],
        'retentionTimes': [_RETENTION_TIME],
        'retentionDuration': {
            'count': retention.weekly_weeks,
            'durationType': 'Weeks',
        },
    }
  if retention.monthly_months:
    policy['monthlySchedule'] = {
        'retentionScheduleFormatType': 'Weekly',
        'retentionScheduleWeekly': {
            'daysOfTheWeek': [retention.monthly_day or SUNDAY],
            'weeksOfTheMonth': [retention.monthly_week or 'First'],
        },
        'retentionTimes': [_RETENTION_TIME],
        'retentionDuration': {
            'count': retention.monthly_months,
            'durationType': 'Months',
        },
    }
  if retention.yearly_years:
    policy['yearlySchedule'] = {
        'retentionScheduleFormatType': 'Weekly',
        'monthsOfYear': retention.yearly_months or ['January'],
        'retentionScheduleWeekly': {
            'daysOfTheWeek': [retention.yearly_day or SUNDAY],
            'weeksOfTheMonth': [retention.yearly_week or 'First'],
        },
        'retentionTimes': [_RETENTION_TIME],
        'retentionDuration': {
            'count': retention.yearly_years,
            'durationType': 'Years',
        },
    }
  return policy


def CreateBackupConfiguration(vault_name,
                              vm_name,
                              resource_group_name,
                              enabled=True,
                              create_vault=False,
                              vault_location=None,
                              policy_preset=None,
                              custom_retention=None):
  """Builds a BackupConfiguration from command line style options.

  Args:
    vault_name: string. Recovery Services vault name.
    vm_name: string. Name of the VM to protect.
    resource_group_name: string. Resource group of the VM.
    enabled: bool. Whether backup is enabled.
    create_vault: bool. Whether the template creates the vault.
    vault_location: string. Region of the vault to create.
    policy_preset: string. One of PRESETS. Defaults to production.
    custom_retention: dict with optional 'daily', 'weekly', 'monthly' and
      'yearly' counts. Only used with the custom preset.

  Returns:
    BackupConfiguration.
  """
  preset = policy_preset or PRODUCTION
  config = BackupConfiguration(
      vault_name=vault_name,
      vm_name=vm_name,
      resource_group_name=resource_group_name,
      enabled=enabled is not False,
      create_vault=bool(create_vault),
      policy_preset=preset)
  if create_vault and vault_location:
    config.vault_config = VaultConfiguration(
        name=vault_name, location=vault_location)
  if custom_retention and preset == CUSTOM:
    base = GetPreset(PRODUCTION)
    config.custom_policy = BackupPolicy(
        name='Custom',
        schedule=base.schedule,
        retention=RetentionPolicy(
            daily_days=custom_retention.get('daily'),
            weekly_weeks=custom_retention.get('weekly'),
            monthly_months=custom_retention.get('monthly'),
            yearly_years=custom_retention.get('yearly')),
        instant_restore=base.instant_restore)
  return config


def GenerateBackupTemplate(config: BackupConfiguration) -> Dict[str, Any]:
  """Returns a deployment template protecting the VM of 'config'.

  The vault is included only when it is created, and the policy and
  protected item only when backup is enabled.
  """
  manager = BackupManager(config)
  resources = []
  vault = manager.GetVaultResource()
  if vault:
    resources.append(vault)
  if config.enabled:
    resources.append(manager.GetBackupPolicyResource())
    resources.append(manager.GetProtectedItemResource())
  return arm_util.DeploymentTemplate(
      parameters=manager.GetTemplateParameters(),
      variables=manager.GetTemplateVariables(),
      resources=resources)
