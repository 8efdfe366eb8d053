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
"""Availability sets, availability zones and scale sets."""

from azmp.availability import availability_sets
from azmp.availability import availability_zones
from azmp.availability import vmss

_SETS_ALIASES = ('sets', 'availabilitysets')
_ZONES_ALIASES = ('zones', 'availabilityzones')
_VMSS_ALIASES = ('vmss', 'scaleset', 'scalesets')


def BestPractices(kind=None):
  """Returns best-practice markdown for one availability option or all.

  Args:
    kind: string. One of the aliases of availability sets, availability zones
      or scale sets. Any other value returns a combined guide.
  """
  kind = (kind or '').lower()
  if kind in _SETS_ALIASES:
    return availability_sets.BestPractices()
  if kind in _ZONES_ALIASES:
    return availability_zones.BestPractices()
  if kind in _VMSS_ALIASES:
    return vmss.BestPractices()
  return '\n\n'.join([
      '# Azure VM Availability Options',
      '## Availability Sets',
      availability_sets.BestPractices(),
      '## Availability Zones',
      availability_zones.BestPractices(),
      '## Virtual Machine Scale Sets',
      vmss.BestPractices(),
  ])
