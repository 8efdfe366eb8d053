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
"""Tests for azmp.availability.vmss."""

import unittest

from absl.testing import parameterized

from azmp import errors
from azmp.availability import vmss


class VmssFlexibleTestCase(parameterized.TestCase):

  def testDefaults(self):
    resource = vmss.VmssFlexible('web', 'Standard_D2s_v5')
    self.assertEqual({'name': 'Standard_D2s_v5', 'tier': 'Standard',
                      'capacity': 3}, resource['sku'])
    self.assertEqual({'orchestrationMode': 'Flexible',
                      'platformFaultDomainCount': 1}, resource['properties'])
    self.assertNotIn('zones', resource)
    self.assertNotIn('tags', resource)

  def testZonesTagsAndPlacementGroup(self):
    resource = vmss.VmssFlexible(
        'web', 'Standard_D2s_v5', zones=[1, 2, 3], tags={'a': 'b'},
        single_placement_group=False, platform_fault_domain_count=5)
    self.assertEqual(['1', '2', '3'], resource['zones'])
    self.assertEqual({'a': 'b'}, resource['tags'])
    self.assertFalse(resource['properties']['singlePlacementGroup'])

  @parameterized.parameters(0, 6)
  def testFaultDomainsOutOfRange(self, count):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'between 1 and 5'):
      vmss.VmssFlexible('web', 'Standard_D2s_v5',
                        platform_fault_domain_count=count)


class VmssUniformTestCase(unittest.TestCase):

  def testDefaults(self):
    properties = vmss.VmssUniform('api', 'Standard_D4s_v5')['properties']
    self.assertEqual('Uniform', properties['orchestrationMode'])
    self.assertEqual({'mode': 'Manual'}, properties['upgradePolicy'])
    self.assertTrue(properties['overprovision'])
    self.assertEqual(2, properties['platformFaultDomainCount'])
    self.assertEqual({'storageProfile': {}, 'osProfile': {},
                      'networkProfile': {}},
                     properties['virtualMachineProfile'])

  def testFaultDomainsOutOfRange(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'Uniform VMSS fault domain count'):
      vmss.VmssUniform('api', 'Standard_D4s_v5',
                       platform_fault_domain_count=4)


class AutoscaleTestCase(unittest.TestCase):

  def testVmssAutoscale(self):
    settings = vmss.VmssAutoscale('web', {'name': 'default'})
    self.assertEqual('web-autoscale', settings['name'])
    self.assertEqual(
        "[resourceId('Microsoft.Compute/virtualMachineScaleSets', 'web')]",
        settings['properties']['targetResourceUri'])
    self.assertEqual([{'name': 'default'}], settings['properties']['profiles'])

  def testCpuRules(self):
    scale_out, scale_in = vmss.CpuAutoscaleRules('vmss-id', 80, 20)
    self.assertEqual('GreaterThan', scale_out['metricTrigger']['operator'])
    self.assertEqual(80, scale_out['metricTrigger']['threshold'])
    self.assertEqual('Increase', scale_out['scaleAction']['direction'])
    self.assertEqual('LessThan', scale_in['metricTrigger']['operator'])
    self.assertEqual(20, scale_in['metricTrigger']['threshold'])
    self.assertEqual('Decrease', scale_in['scaleAction']['direction'])
    self.assertEqual('vmss-id', scale_in['metricTrigger']['metricResourceId'])


class HealthAndUpgradeTestCase(unittest.TestCase):

  def testHttpHealthExtension(self):
    settings = vmss.VmssHealthExtension(
        request_path='/health')['properties']['settings']
    self.assertEqual({'protocol': 'Http', 'port': 80,
                      'intervalInSeconds': 30, 'numberOfProbes': 2,
                      'requestPath': '/health'}, settings)

  def testTcpHealthExtensionDropsPath(self):
    settings = vmss.VmssHealthExtension(
        protocol=vmss.TCP, port=22,
        request_path='/health')['properties']['settings']
    self.assertNotIn('requestPath', settings)

  def testRollingUpgradePolicy(self):
    policy = vmss.RollingUpgradePolicy(max_batch_percent=10)
    self.assertEqual(10, policy['maxBatchInstancePercent'])
    self.assertEqual(20, policy['maxUnhealthyUpgradedInstancePercent'])
    self.assertEqual('PT0S', policy['pauseTimeBetweenBatches'])


class SlaAndValidationTestCase(parameterized.TestCase):

  @parameterized.parameters((3, 1, 99.9), (1, 2, 99.95), (2, 2, 99.99))
  def testSla(self, zone_count, instance_count, expected):
    self.assertEqual(expected, vmss.VmssSla(zone_count, instance_count))

  def testValid(self):
    result = vmss.ValidateVmssConfig({
        'name': 'web', 'vmSize': 'Standard_D2s_v5',
        'orchestrationMode': 'Flexible', 'platformFaultDomainCount': 5,
        'instanceCount': 3, 'zones': ['1', '2'],
    })
    self.assertEqual({'valid': True, 'errors': [], 'warnings': []}, result)

  def testErrorsAndWarnings(self):
    result = vmss.ValidateVmssConfig({
        'orchestrationMode': 'Uniform', 'platformFaultDomainCount': 5,
        'instanceCount': 1,
    })
    self.assertFalse(result['valid'])
    self.assertEqual([
        'VMSS name is required',
        'VM size is required',
        'Uniform VMSS fault domain count must be between 1 and 3',
    ], result['errors'])
    self.assertEqual([
        'Single instance VMSS provides no high availability benefits',
        'Consider using availability zones for 99.99% SLA',
    ], result['warnings'])

  def testNegativeInstances(self):
    result = vmss.ValidateVmssConfig({'name': 'a', 'vmSize': 'b',
                                      'instanceCount': -1, 'zones': ['1']})
    self.assertEqual(['Instance count must be non-negative'],
                     result['errors'])


if __name__ == '__main__':
  unittest.main()
