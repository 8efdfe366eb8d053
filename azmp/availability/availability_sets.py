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
"""Generators for Azure availability sets and proximity placement groups.

An availability set spreads VMs across fault domains (racks sharing power and
network) and update domains (groups rebooted together during maintenance).
"""

from azmp import arm_util
from azmp import data
from azmp import errors

AVAILABILITY_SET_TYPE = 'Microsoft.Compute/availabilitySets'
PROXIMITY_PLACEMENT_GROUP_TYPE = 'Microsoft.Compute/proximityPlacementGroups'
API_VERSION = '2023-09-01'

ALIGNED = 'Aligned'
CLASSIC = 'Classic'
VALID_SKUS = (ALIGNED, CLASSIC)

DEFAULT_FAULT_DOMAINS = 2
DEFAULT_UPDATE_DOMAINS = 5
MIN_FAULT_DOMAINS, MAX_FAULT_DOMAINS = 1, 3
MIN_UPDATE_DOMAINS, MAX_UPDATE_DOMAINS = 1, 20

FAULT_DOMAIN_ERROR = 'Fault domain count must be between 1 and 3'
UPDATE_DOMAIN_ERROR = 'Update domain count must be between 1 and 20'

SLA_SINGLE_VM = 99.9
SLA_AVAILABILITY_SET = 99.95


def _FaultDomainsValid(count):
  return MIN_FAULT_DOMAINS <= count <= MAX_FAULT_DOMAINS


def _UpdateDomainsValid(count):
  return MIN_UPDATE_DOMAINS <= count <= MAX_UPDATE_DOMAINS


def AvailabilitySet(name,
                    platform_fault_domain_count=None,
                    platform_update_domain_count=None,
                    proximity_placement_group_id=None,
                    sku=ALIGNED,
                    tags=None,
                    location=arm_util.DEFAULT_LOCATION):
  """Returns a Microsoft.Compute/availabilitySets resource.

  Args:
    name: string. Name of the availability set.
    platform_fault_domain_count: int. Fault domains, 1-3. Defaults to 2.
    platform_update_domain_count: int. Update domains, 1-20. Defaults to 5.
    proximity_placement_group_id: string. Optional resource id of a proximity
      placement group to join.
    sku: string. "Aligned" (managed disks) or "Classic".
    tags: dict. Optional resource tags.
    location: string. Azure region or ARM location expression.

  Raises:
    errors.Config.InvalidConfigError: if a domain count is out of range.
  """
  fault_domains = (DEFAULT_FAULT_DOMAINS if platform_fault_domain_count is None
                   else platform_fault_domain_count)
  update_domains = (DEFAULT_UPDATE_DOMAINS
                    if platform_update_domain_count is None
                    else platform_update_domain_count)
  if not _FaultDomainsValid(fault_domains):
    raise errors.Config.InvalidConfigError(FAULT_DOMAIN_ERROR)
  if not _UpdateDomainsValid(update_domains):
    raise errors.Config.InvalidConfigError(UPDATE_DOMAIN_ERROR)

  properties = {
      'platformFaultDomainCount': fault_domains,
      'platformUpdateDomainCount': update_domains,
  }
  if proximity_placement_group_id:
    properties['proximityPlacementGroup'] = {
        'id': proximity_placement_group_id
    }

  resource = {
      'type': AVAILABILITY_SET_TYPE,
      'apiVersion': API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'sku': {'name': sku or ALIGNED},
      'properties': properties,
  }
  if tags:
    resource['tags'] = tags
  return resource


def AvailabilitySetRef(name):
  """Returns the {id: ...} reference a VM uses to join an availability set."""
  return {'id': arm_util.ResourceId(AVAILABILITY_SET_TYPE, name)}


def RecommendedFaultDomains(vm_count):
  if vm_count <= 1:
    return 1
  if vm_count <= 3:
    return 2
  return 3


def RecommendedUpdateDomains(vm_count):
  if vm_count <= 1:
    return 1
  if vm_count <= 5:
    return vm_count
  if vm_count <= 10:
    return 10
  return 20


def AvailabilitySetSla(vm_count):
  """Returns the uptime SLA percentage for 'vm_count' VMs in one set."""
  return SLA_SINGLE_VM if vm_count < 2 else SLA_AVAILABILITY_SET


def ValidateAvailabilitySet(config):
  """Validates an availability set configuration without raising.

  Args:
    config: dict with the keys 'name', 'platformFaultDomainCount',
      'platformUpdateDomainCount' and 'sku'. Missing counts are not checked.

  Returns:
    A dict {'valid': bool, 'errors': [str]}.
  """
  validation_errors = []
  if not config.get('name'):
    validation_errors.append('Availability set name is required')

  fault_domains = config.get('platformFaultDomainCount')
  if fault_domains is not None and not _FaultDomainsValid(fault_domains):
    validation_errors.append(FAULT_DOMAIN_ERROR)

  update_domains = config.get('platformUpdateDomainCount')
  if update_domains is not None and not _UpdateDomainsValid(update_domains):
    validation_errors.append(UPDATE_DOMAIN_ERROR)

  sku = config.get('sku')
  if sku and sku not in VALID_SKUS:
    validation_errors.append('SKU must be either "Aligned" or "Classic"')

  return {'valid': not validation_errors, 'errors': validation_errors}


def ProximityPlacementGroup(name, location=arm_util.DEFAULT_LOCATION):
  """Returns a Standard proximity placement group for low-latency VMs."""
  return {
      'type': PROXIMITY_PLACEMENT_GROUP_TYPE,
      'apiVersion': API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'properties': {
          'proximityPlacementGroupType': 'Standard',
      },
  }


def BestPractices():
  return data.ReadResource('best_practices/availability_sets.md').strip()
