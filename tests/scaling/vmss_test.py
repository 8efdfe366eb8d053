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
"""Tests for azmp.scaling.vmss."""

import unittest

from azmp import errors
from azmp.scaling import vmss


class CreateVmssDefinitionTestCase(unittest.TestCase):

  def testUniformDefaults(self):
    resource = vmss.CreateVmssDefinition('web', 'Standard_D2s_v5')
    self.assertEqual({'name': 'Standard_D2s_v5', 'tier': 'Standard',
                      'capacity': 2}, resource['sku'])
    self.assertEqual('[resourceGroup().location]', resource['location'])
    self.assertEqual({
        'virtualMachineProfile': {
            'osProfile': {},
            'storageProfile': {},
            'networkProfile': {},
        },
        'orchestrationMode': 'Uniform',
        'overprovision': True,
        'singlePlacementGroup': True,
        'platformFaultDomainCount': 2,
        'upgradePolicy': {'mode': 'Manual'},
    }, resource['properties'])
    self.assertNotIn('zones', resource)
    self.assertNotIn('tags', resource)

  def testRollingUpgrade(self):
    resource = vmss.CreateVmssDefinition('web', 'Standard_D2s_v5',
                                         upgrade_mode='Rolling',
                                         zones=[1, 2, 3])
    self.assertEqual(['1', '2', '3'], resource['zones'])
    policy = resource['properties']['upgradePolicy']
    self.assertEqual('Rolling', policy['mode'])
    self.assertEqual(20, policy['rollingUpgradePolicy'][
        'maxBatchInstancePercent'])

  def testFlexible(self):
    resource = vmss.CreateVmssDefinition(
        'web', 'Standard_D2s_v5', instance_count=0,
        orchestration_mode=vmss.FLEXIBLE, platform_fault_domain_count=5,
        tags={'app': 'web'})
    properties = resource['properties']
    self.assertEqual(0, resource['sku']['capacity'])
    self.assertEqual('Flexible', properties['orchestrationMode'])
    self.assertFalse(properties['singlePlacementGroup'])
    self.assertEqual(5, properties['platformFaultDomainCount'])
    self.assertNotIn('upgradePolicy', properties)
    self.assertNotIn('overprovision', properties)
    self.assertEqual({'app': 'web'}, resource['tags'])

  def testFaultDomainLimits(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'Uniform VMSS platformFaultDomainCount'):
      vmss.CreateVmssDefinition('web', 'Standard_D2s_v5',
                                platform_fault_domain_count=5)
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'Flexible VMSS platformFaultDomainCount'):
      vmss.CreateVmssDefinition('web', 'Standard_D2s_v5',
                                orchestration_mode=vmss.FLEXIBLE,
                                platform_fault_domain_count=0)

  def testRequiredFields(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError, 'name'):
      vmss.CreateVmssDefinition(vm_size='Standard_D2s_v5')
    with self.assertRaisesRegex(errors.Config.InvalidConfigError, 'vmSize'):
      vmss.CreateVmssDefinition('web')


if __name__ == '__main__':
  unittest.main()
