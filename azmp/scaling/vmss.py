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
"""Base scale set definition that the other scaling generators build on."""

from azmp import arm_util
from azmp import errors
from azmp.availability import vmss as availability_vmss

FLEXIBLE = availability_vmss.FLEXIBLE
UNIFORM = availability_vmss.UNIFORM


def CreateVmssDefinition(name=None,
                         vm_size=None,
                         location=None,
                         instance_count=2,
                         orchestration_mode=UNIFORM,
                         upgrade_mode=availability_vmss.MANUAL,
                         overprovision=True,
                         single_placement_group=None,
                         platform_fault_domain_count=2,
                         zones=None,
                         tags=None):
  """Returns a Microsoft.Compute/virtualMachineScaleSets resource.

  Args:
    name: string. Scale set name.
    vm_size: string. Instance SKU, e.g. 'Standard_D2s_v5'.
    location: string. Defaults to the resource group location.
    instance_count: int. Initial capacity.
    orchestration_mode: string. 'Uniform' or 'Flexible'.
    upgrade_mode: string. 'Manual', 'Automatic' or 'Rolling'. Uniform only.
    overprovision: bool. Uniform only.
    single_placement_group: bool. Defaults to True for Uniform scale sets
      and False for Flexible ones.
    platform_fault_domain_count: int. 1-3 for Uniform, 1-5 for Flexible.
    zones: list of zone numbers.
    tags: dict of resource tags.

  Returns:
    The resource dict. The virtualMachineProfile is an empty skeleton.

  Raises:
    errors.Config.InvalidConfigError: if the name or size is missing, or the
      fault domain count is out of range for the orchestration mode.
  """
  if not name:
    raise errors.Config.InvalidConfigError(
        'scale:vmss.definition requires a VMSS name')
  if not vm_size:
    raise errors.Config.InvalidConfigError(
        'scale:vmss.definition requires a vmSize')
  if platform_fault_domain_count is None:
    platform_fault_domain_count = 2

  resource = {
      'type': availability_vmss.VMSS_TYPE,
      'apiVersion': availability_vmss.VMSS_API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'sku': {
          'name': vm_size,
          'tier': 'Standard',
          'capacity': 2 if instance_count is None else instance_count,
      },
      'properties': {
          'virtualMachineProfile': {
              'osProfile': {},
              'storageProfile': {},
              'networkProfile': {},
          },
      },
  }
  if zones:
    resource['zones'] = [str(z) for z in zones]
  if tags:
    resource['tags'] = tags

  properties = resource['properties']
  if orchestration_mode == FLEXIBLE:
    if not 1 <= platform_fault_domain_count <= 5:
      raise errors.Config.InvalidConfigError(
          'Flexible VMSS platformFaultDomainCount must be between 1 and 5')
    properties['orchestrationMode'] = FLEXIBLE
    properties['platformFaultDomainCount'] = platform_fault_domain_count
    properties['singlePlacementGroup'] = bool(single_placement_group)
    return resource

  if not 1 <= platform_fault_domain_count <= 3:
    raise errors.Config.InvalidConfigError(
        'Uniform VMSS platformFaultDomainCount must be between 1 and 3')
  upgrade_mode = upgrade_mode or availability_vmss.MANUAL
  properties['orchestrationMode'] = UNIFORM
  properties['overprovision'] = overprovision
  properties['singlePlacementGroup'] = (
      True if single_placement_group is None else single_placement_group)
  properties['platformFaultDomainCount'] = platform_fault_domain_count
  properties['upgradePolicy'] = {'mode': upgrade_mode}
  if upgrade_mode == availability_vmss.ROLLING:
    properties['upgradePolicy']['rollingUpgradePolicy'] = {
        'maxBatchInstancePercent': 20,
        'maxUnhealthyInstancePercent': 20,
        'maxUnhealthyUpgradedInstancePercent': 20,
        'pauseTimeBetweenBatches': 'PT0S',
    }
  return resource
