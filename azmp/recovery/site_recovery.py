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
"""Azure Site Recovery (A2A) replication between paired regions."""

from azmp import arm_util
from azmp import data

API_VERSION = '2023-06-01'
POLICY_TYPE = 'Microsoft.RecoveryServices/vaults/replicationPolicies'
PROTECTED_ITEM_TYPE = (
    'Microsoft.RecoveryServices/vaults/replicationFabrics/'
    'replicationProtectionContainers/replicationProtectedItems')
RECOVERY_PLAN_TYPE = 'Microsoft.RecoveryServices/vaults/replicationRecoveryPlans'
FABRIC_TYPE = 'Microsoft.RecoveryServices/vaults/replicationFabrics'
VM_TYPE = 'Microsoft.Compute/virtualMachines'

DEFAULT_TARGET_REGION = 'westus2'

# Azure region pairs. Not every pairing is symmetric.
REGION_PAIRS = {
    'eastus': 'westus',
    'eastus2': 'centralus',
    'westus': 'eastus',
    'westus2': 'westcentralus',
    'westus3': 'eastus',
    'centralus': 'eastus2',
    'northcentralus': 'southcentralus',
    'southcentralus': 'northcentralus',
    'westcentralus': 'westus2',
    'northeurope': 'westeurope',
    'westeurope': 'northeurope',
    'uksouth': 'ukwest',
    'ukwest': 'uksouth',
    'francecentral': 'francesouth',
    'francesouth': 'francecentral',
    'germanywestcentral': 'germanynorth',
    'germanynorth': 'germanywestcentral',
    'switzerlandnorth': 'switzerlandwest',
    'switzerlandwest': 'switzerlandnorth',
    'norwayeast': 'norwaywest',
    'norwaywest': 'norwayeast',
    'brazilsouth': 'southcentralus',
    'southafricanorth': 'southafricawest',
    'southafricawest': 'southafricanorth',
    'australiaeast': 'australiasoutheast',
    'australiasoutheast': 'australiaeast',
    'australiacentral': 'australiacentral2',
    'australiacentral2': 'australiacentral',
    'southeastasia': 'eastasia',
    'eastasia': 'southeastasia',
    'japaneast': 'japanwest',
    'japanwest': 'japaneast',
    'koreacentral': 'koreasouth',
    'koreasouth': 'koreacentral',
    'centralindia': 'southindia',
    'southindia': 'centralindia',
    'westindia': 'southindia',
    'canadacentral': 'canadaeast',
    'canadaeast': 'canadacentral',
    'uaenorth': 'uaecentral',
    'uaecentral': 'uaenorth',
}


def ReplicationPolicy(name, vault_name, recovery_point_retention_hours=24,
                      app_consistent_minutes=60, crash_consistent_minutes=5):
  return {
      'type': POLICY_TYPE,
      'apiVersion': API_VERSION,
      'name': '{}/{}'.format(vault_name, name),
      'properties': {
          'providerSpecificInput': {
              'instanceType': 'A2A',
              'recoveryPointHistory': recovery_point_retention_hours,
              'crashConsistentFrequencyInMinutes': crash_consistent_minutes,
              'appConsistentFrequencyInMinutes': app_consistent_minutes,
              'multiVmSyncStatus': 'Enable',
          },
      },
  }


def EnableVmReplication(vm_name, vault_name, source_region,
                        replication_policy_name, target_region=None,
                        target_resource_group=None,
                        target_virtual_network=None):
  """Returns the protected item replicating 'vm_name' out of 'source_region'.

  The target resource group and virtual network default to
  '<vm>-dr-rg' and '<vm>-dr-vnet'. Replication stages data through the
  existing cache storage account 'asr<source_region>cache'.
  """
  del target_region  # The target follows from the policy's container mapping.
  target_resource_group = target_resource_group or '{}-dr-rg'.format(vm_name)
  target_vnet = target_virtual_network or '{}-dr-vnet'.format(vm_name)
  return {
      'type': PROTECTED_ITEM_TYPE,
      'apiVersion': API_VERSION,
      'name': '{}/Azure/{}/{}'.format(vault_name, source_region, vm_name),
      'properties': {
          'policyId': arm_util.ResourceId(POLICY_TYPE, vault_name,
                                          replication_policy_name),
          'providerSpecificDetails': {
              'instanceType': 'A2A',
              'fabricObjectId': arm_util.ResourceId(VM_TYPE, vm_name),
              'recoveryResourceGroupId': arm_util.ResourceId(
                  'Microsoft.Resources/resourceGroups',
                  target_resource_group),
              'recoveryAzureNetworkId': arm_util.ResourceId(
                  'Microsoft.Network/virtualNetworks', target_vnet),
              'recoverySubnetName': 'default',
              'primaryStagingStorageAccountCustomInput': {
                  'resourceType': 'Existing',
                  'azureStorageAccountId': arm_util.ResourceId(
                      'Microsoft.Storage/storageAccounts',
                      'asr{}cache'.format(source_region)),
              },
          },
      },
  }


def RecoveryPlan(name, vault_name, vm_names, source_region, target_region):
  """Returns a recovery plan failing over 'vm_names' in order.

  Each VM gets its own Boot group, so VMs start one group after another in
  the order given.
  """
  groups = []
  for vm_name in vm_names or []:
    groups.append({
        'groupType': 'Boot',
        'replicationProtectedItems': [{
            'id': arm_util.ResourceId(PROTECTED_ITEM_TYPE, vault_name,
                                      'Azure', source_region, vm_name),
            'virtualMachineId': arm_util.ResourceId(VM_TYPE, vm_name),
        }],
        'startGroupActions': [],
        'endGroupActions': [],
    })
  fabric_id = arm_util.ResourceId(FABRIC_TYPE, vault_name, 'Azure')
  return {
      'type': RECOVERY_PLAN_TYPE,
      'apiVersion': API_VERSION,
      'name': '{}/{}'.format(vault_name, name),
      'properties': {
          'primaryFabricId': fabric_id,
          'primaryFabricFriendlyName': source_region,
          'recoveryFabricId': fabric_id,
          'recoveryFabricFriendlyName': target_region,
          'failoverDeploymentModel': 'ResourceManager',
          'groups': groups,
      },
  }


def GetRecommendedTargetRegion(source_region):
  return REGION_PAIRS.get((source_region or '').lower(), DEFAULT_TARGET_REGION)


def EstimateRto(vm_count, avg_vm_size_gb):
  """Estimates the failover time in minutes.

  Ten minutes of fixed overhead, plus two minutes per VM and half a minute
  per 100 GB of each VM.
  """
  data_minutes = (avg_vm_size_gb / 100.0) * 0.5 * vm_count
  return int(round(10 + 2 * vm_count + data_minutes))


def EstimateRpo(crash_consistent_minutes):
  """Returns the expected data loss window in minutes."""
  return crash_consistent_minutes + 5


def EstimateReplicationBandwidth(vm_size_gb, daily_change_rate=0.1):
  """Returns the steady state replication bandwidth in Mbps, one decimal."""
  change_gb_per_second = vm_size_gb * daily_change_rate / 24 / 3600
  return round(change_gb_per_second * 8 * 1024, 1)


def ValidateReplicationPolicy(config):
  """Validates a replication policy configuration.

  Args:
    config: dict with the optional keys 'recoveryPointRetentionInHours',
      'crashConsistentFrequencyInMinutes' and
      'appConsistentFrequencyInMinutes'.

  Returns:
    A dict {'valid', 'errors', 'warnings'}.
  """
  validation_errors = []
  warnings = []
  retention = config.get('recoveryPointRetentionInHours')
  crash = config.get('crashConsistentFrequencyInMinutes')
  app = config.get('appConsistentFrequencyInMinutes')
  if retention and not 1 <= retention <= 72:
    validation_errors.append(
        'Recovery point retention must be between 1 and 72 hours')
  if crash and not 5 <= crash <= 240:
    validation_errors.append(
        'Crash-consistent frequency must be between 5 and 240 minutes')
  if app is not None and not 0 <= app <= 240:
    validation_errors.append(
        'App-consistent frequency must be between 0 and 240 minutes')
  if crash and crash > 30:
    warnings.append(
        'Crash-consistent frequency > 30 minutes may result in higher RPO')
  if retention and retention < 24:
    warnings.append('Recovery point retention < 24 hours is not recommended '
                    'for production')
  return {
      'valid': not validation_errors,
      'errors': validation_errors,
      'warnings': warnings,
  }


def BestPractices():
  return data.ReadResource('best_practices/site_recovery.md').strip()
