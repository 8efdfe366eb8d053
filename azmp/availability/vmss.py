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
"""Generators for virtual machine scale sets and their autoscale settings."""

from azmp import arm_util
from azmp import data
from azmp import errors

VMSS_TYPE = 'Microsoft.Compute/virtualMachineScaleSets'
AUTOSCALE_TYPE = 'Microsoft.Insights/autoscalesettings'
VMSS_API_VERSION = '2023-09-01'
AUTOSCALE_API_VERSION = '2022-10-01'

FLEXIBLE = 'Flexible'
UNIFORM = 'Uniform'

MANUAL = 'Manual'
ROLLING = 'Rolling'
AUTOMATIC = 'Automatic'

HTTP = 'Http'
HTTPS = 'Https'
TCP = 'Tcp'

FLEXIBLE_FAULT_DOMAIN_ERROR = (
    'Flexible VMSS fault domain count must be between 1 and 5')
UNIFORM_FAULT_DOMAIN_ERROR = (
    'Uniform VMSS fault domain count must be between 1 and 3')
_MAX_FAULT_DOMAINS = {FLEXIBLE: 5, UNIFORM: 3}
_FAULT_DOMAIN_ERRORS = {
    FLEXIBLE: FLEXIBLE_FAULT_DOMAIN_ERROR,
    UNIFORM: UNIFORM_FAULT_DOMAIN_ERROR,
}


def _CheckFaultDomains(mode, count):
  if not 1 <= count <= _MAX_FAULT_DOMAINS[mode]:
    raise errors.Config.InvalidConfigError(_FAULT_DOMAIN_ERRORS[mode])


def _AddZonesAndTags(resource, zones, tags):
  if zones:
    resource['zones'] = [str(z) for z in zones]
  if tags:
    resource['tags'] = tags


def VmssFlexible(name, vm_size, instance_count=3,
                 platform_fault_domain_count=1, zones=None,
                 single_placement_group=None, tags=None,
                 location=arm_util.DEFAULT_LOCATION):
  """Returns a scale set in Flexible orchestration mode.

  Raises:
    errors.Config.InvalidConfigError: if the fault domain count is not 1-5.
  """
  _CheckFaultDomains(FLEXIBLE, platform_fault_domain_count)
  resource = {
      'type': VMSS_TYPE,
      'apiVersion': VMSS_API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'sku': {
          'name': vm_size,
          'tier': 'Standard',
          'capacity': instance_count,
      },
      'properties': {
          'orchestrationMode': FLEXIBLE,
          'platformFaultDomainCount': platform_fault_domain_count,
      },
  }
  if single_placement_group is not None:
    resource['properties']['singlePlacementGroup'] = single_placement_group
  _AddZonesAndTags(resource, zones, tags)
  return resource


def VmssUniform(name, vm_size, instance_count=2,
                platform_fault_domain_count=2, upgrade_mode=MANUAL,
                overprovision=True, single_placement_group=True, zones=None,
                tags=None, location=arm_util.DEFAULT_LOCATION):
  """Returns a scale set in Uniform orchestration mode.

  The virtualMachineProfile is an empty skeleton; callers fill in the
  storage, OS and network profiles.

  Raises:
    errors.Config.InvalidConfigError: if the fault domain count is not 1-3.
  """
  _CheckFaultDomains(UNIFORM, platform_fault_domain_count)
  resource = {
      'type': VMSS_TYPE,
      'apiVersion': VMSS_API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'sku': {
          'name': vm_size,
          'tier': 'Standard',
          'capacity': instance_count,
      },
      'properties': {
          'orchestrationMode': UNIFORM,
          'overprovision': overprovision,
          'upgradePolicy': {'mode': upgrade_mode or MANUAL},
          'platformFaultDomainCount': platform_fault_domain_count,
          'singlePlacementGroup': single_placement_group,
          'virtualMachineProfile': {
              'storageProfile': {},
              'osProfile': {},
              'networkProfile': {},
          },
      },
  }
  _AddZonesAndTags(resource, zones, tags)
  return resource


def VmssAutoscale(vmss_name, profile):
  """Returns autoscale settings targeting the scale set 'vmss_name'."""
  return {
      'type': AUTOSCALE_TYPE,
      'apiVersion': AUTOSCALE_API_VERSION,
      'name': '{}-autoscale'.format(vmss_name),
      'location': arm_util.DEFAULT_LOCATION,
      'properties': {
          'enabled': True,
          'targetResourceUri': arm_util.ResourceId(VMSS_TYPE, vmss_name),
          'profiles': [profile],
      },
  }


def _CpuRule(vmss_resource_id, operator, threshold, direction):
  return {
      'metricTrigger': {
          'metricName': 'Percentage CPU',
          'metricResourceId': vmss_resource_id,
          'timeGrain': 'PT1M',
          'statistic': 'Average',
          'timeWindow': 'PT5M',
          'timeAggregation': 'Average',
          'operator': operator,
          'threshold': threshold,
      },
      'scaleAction': {
          'direction': direction,
          'type': 'ChangeCount',
          'value': '1',
          'cooldown': 'PT5M',
      },
  }


def CpuAutoscaleRules(vmss_resource_id, scale_out_threshold=75,
                      scale_in_threshold=25):
  """Returns a scale-out and a scale-in rule on average CPU."""
  return [
      _CpuRule(vmss_resource_id, 'GreaterThan', scale_out_threshold,
               'Increase'),
      _CpuRule(vmss_resource_id, 'LessThan', scale_in_threshold, 'Decrease'),
  ]


def VmssHealthExtension(protocol=HTTP, port=80, request_path=None,
                        interval_in_seconds=30, number_of_probes=2):
  """Returns the application health extension for scale set instances."""
  settings = {
      'protocol': protocol,
      'port': port,
      'intervalInSeconds': interval_in_seconds,
      'numberOfProbes': number_of_probes,
  }
  if protocol != TCP and request_path:
    settings['requestPath'] = request_path
  return {
      'name': 'HealthExtension',
      'properties': {
          'publisher': 'Microsoft.ManagedServices',
          'type': 'ApplicationHealthLinux',
          'typeHandlerVersion': '1.0',
          'autoUpgradeMinorVersion': True,
          'settings': settings,
      },
  }


def RollingUpgradePolicy(max_batch_percent=20, max_unhealthy_percent=20,
                         pause_time='PT0S'):
  return {
      'maxBatchInstancePercent': max_batch_percent,
      'maxUnhealthyInstancePercent': max_unhealthy_percent,
      'maxUnhealthyUpgradedInstancePercent': max_unhealthy_percent,
      'pauseTimeBetweenBatches': pause_time,
      'prioritizeUnhealthyInstances': True,
  }


def VmssSla(zone_count, instance_count):
  """Returns the uptime SLA percentage of a scale set."""
  if instance_count < 2:
    return 99.9
  if zone_count >= 2:
    return 99.99
  return 99.95


def ValidateVmssConfig(config):
  """Validates a scale set configuration without raising.

  Args:
    config: dict with the keys 'name', 'vmSize', 'orchestrationMode',
      'platformFaultDomainCount', 'instanceCount' and 'zones'.

  Returns:
    A dict {'valid', 'errors', 'warnings'}.
  """
  validation_errors = []
  warnings = []
  if not config.get('name'):
    validation_errors.append('VMSS name is required')
  if not config.get('vmSize'):
    validation_errors.append('VM size is required')

  mode = config.get('orchestrationMode')
  fault_domains = config.get('platformFaultDomainCount')
  if mode in _MAX_FAULT_DOMAINS and fault_domains:
    if not 1 <= fault_domains <= _MAX_FAULT_DOMAINS[mode]:
      validation_errors.append(_FAULT_DOMAIN_ERRORS[mode])

  instance_count = config.get('instanceCount')
  if instance_count is not None and instance_count < 0:
    validation_errors.append('Instance count must be non-negative')
  if instance_count == 1:
    warnings.append(
        'Single instance VMSS provides no high availability benefits')

  if not config.get('zones'):
    warnings.append('Consider using availability zones for 99.99% SLA')

  return {
      'valid': not validation_errors,
      'errors': validation_errors,
      'warnings': warnings,
  }


def BestPractices():
  return data.ReadResource('best_practices/vmss.md').strip()
