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
"""Generators for zonal and zone-redundant Azure resources."""

import collections
from typing import Any, Dict, List, Sequence

from azmp import arm_util
from azmp import data

VM_TYPE = 'Microsoft.Compute/virtualMachines'
DISK_TYPE = 'Microsoft.Compute/disks'
PUBLIC_IP_TYPE = 'Microsoft.Network/publicIPAddresses'
COMPUTE_API_VERSION = '2023-09-01'
DISK_API_VERSION = '2023-04-02'
NETWORK_API_VERSION = '2023-09-01'

ZONES = ['1', '2', '3']

SLA_SINGLE_ZONE = 99.9
SLA_MULTI_ZONE = 99.99

# Regions offering three availability zones, grouped by geography.
ZONE_REGIONS_BY_GEOGRAPHY = collections.OrderedDict([
    ('Americas', [
        'eastus', 'eastus2', 'westus2', 'westus3', 'centralus',
        'southcentralus', 'canadacentral', 'brazilsouth'
    ]),
    ('Europe', [
        'northeurope', 'westeurope', 'francecentral', 'uksouth',
        'germanywestcentral', 'norwayeast', 'switzerlandnorth',
        'swedencentral', 'polandcentral'
    ]),
    ('Asia Pacific', [
        'southeastasia', 'eastasia', 'australiaeast', 'japaneast',
        'koreacentral', 'southafricanorth'
    ]),
    ('Middle East', ['uaenorth', 'qatarcentral', 'israelcentral']),
])
ZONE_REGIONS = frozenset(
    region for regions in ZONE_REGIONS_BY_GEOGRAPHY.values()
    for region in regions)


def _NormalizeLocation(location: str) -> str:
  return ''.join((location or '').split()).lower()


def GetAvailableZones(location: str) -> List[str]:
  """Returns the zone numbers offered in 'location', or [] if none."""
  if _NormalizeLocation(location) in ZONE_REGIONS:
    return list(ZONES)
  return []


def SupportsAvailabilityZones(location: str) -> bool:
  return bool(GetAvailableZones(location))


def GetZoneSupportedRegions(by_geography=False):
  """Returns the zone-capable regions.

  Args:
    by_geography: bool. If true, return a dict mapping geography name to its
      regions instead of a flat list.
  """
  if by_geography:
    return {k: list(v) for k, v in ZONE_REGIONS_BY_GEOGRAPHY.items()}
  return [region for regions in ZONE_REGIONS_BY_GEOGRAPHY.values()
          for region in regions]


def ZonalVm(name: str, zone: str, vm_size: str = None,
            location: str = arm_util.DEFAULT_LOCATION) -> Dict[str, Any]:
  """Returns a VM pinned to a single availability zone."""
  properties = {}
  if vm_size:
    properties['hardwareProfile'] = {'vmSize': vm_size}
  return {
      'type': VM_TYPE,
      'apiVersion': COMPUTE_API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'zones': [str(zone)],
      'properties': properties,
  }


def ZoneRedundantDisk(name: str, zones: Sequence[str] = None,
                      disk_size_gb: int = 128,
                      location: str = arm_util.DEFAULT_LOCATION
                     ) -> Dict[str, Any]:
  """Returns an empty Premium_ZRS managed disk replicated across zones."""
  return {
      'type': DISK_TYPE,
      'apiVersion': DISK_API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'sku': {'name': 'Premium_ZRS'},
      'zones': [str(z) for z in (zones or ZONES)],
      'properties': {
          'creationData': {'createOption': 'Empty'},
          'diskSizeGB': disk_size_gb,
      },
  }


def ZoneRedundantPublicIp(name: str,
                          location: str = arm_util.DEFAULT_LOCATION
                         ) -> Dict[str, Any]:
  """Returns a Standard SKU static public IP, which is zone-redundant."""
  return {
      'type': PUBLIC_IP_TYPE,
      'apiVersion': NETWORK_API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'sku': {'name': 'Standard', 'tier': 'Regional'},
      'properties': {
          'publicIPAllocationMethod': 'Static',
          'publicIPAddressVersion': 'IPv4',
      },
  }


def AvailabilityZoneSla(vm_count: int, zone_count: int) -> float:
  if vm_count < 2 or zone_count < 2:
    return SLA_SINGLE_ZONE
  return SLA_MULTI_ZONE


def RecommendZoneDistribution(vm_count: int) -> Dict[str, Any]:
  """Recommends how to spread 'vm_count' VMs over the three zones.

  Returns:
    A dict with 'zones' (zone numbers used), 'distribution' (VMs per zone, in
    the same order) and a human readable 'description'.
  """
  if vm_count <= 1:
    return {
        'zones': ['1'],
        'distribution': [1],
        'description': 'Single VM in zone 1 (99.9% SLA)',
    }
  if vm_count == 2:
    return {
        'zones': ['1', '2'],
        'distribution': [1, 1],
        'description': '1 VM per zone across 2 zones (99.99% SLA)',
    }
  base, remainder = divmod(vm_count, 3)
  distribution = [
      base + (1 if remainder > 0 else 0),
      base + (1 if remainder > 1 else 0),
      base,
  ]
  return {
      'zones': list(ZONES),
      'distribution': distribution,
      'description': '{} distribution across 3 zones (99.99% SLA)'.format(
          '-'.join(str(n) for n in distribution)),
  }


def ValidateZoneConfig(config: Dict[str, Any], location: str
                      ) -> Dict[str, Any]:
  """Validates a zone configuration for 'location'.

  Args:
    config: dict with optional 'zones' (list of zone numbers), 'singleZone'
      and 'zoneRedundant' keys.
    location: Azure region name.

  Returns:
    A dict {'valid', 'errors', 'warnings'}. An unsupported region short
    circuits the remaining checks.
  """
  validation_errors = []
  warnings = []
  if not SupportsAvailabilityZones(location):
    validation_errors.append(
        'Region {} does not support availability zones'.format(location))
    return {'valid': False, 'errors': validation_errors, 'warnings': warnings}

  zones = [str(z) for z in config.get('zones') or []]
  single_zone = config.get('singleZone')
  if single_zone is not None:
    zones.append(str(single_zone))
  for zone in zones:
    if zone not in ZONES:
      validation_errors.append(
          "Invalid zone number: {}. Must be '1', '2', or '3'".format(zone))

  if single_zone is not None and not config.get('zoneRedundant'):
    warnings.append('Single zone deployment provides 99.9% SLA. '
                    'Consider multi-zone for 99.99% SLA')

  return {
      'valid': not validation_errors,
      'errors': validation_errors,
      'warnings': warnings,
  }


def BestPractices():
  return data.ReadResource('best_practices/availability_zones.md').strip()
