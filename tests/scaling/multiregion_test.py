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
"""Tests for azmp.scaling.multiregion."""

import unittest

from azmp import errors
from azmp.scaling import multiregion

_EAST_ID = "[resourceId('Microsoft.Network/publicIPAddresses', 'east-pip')]"


class TrafficManagerTestCase(unittest.TestCase):

  def testProfile(self):
    profile = multiregion.CreateTrafficManagerProfile(
        'app-tm', 'contoso-app', routing_method=multiregion.PERFORMANCE,
        monitor={'protocol': 'HTTP', 'port': 80, 'path': '/health'},
        endpoints=[
            {'name': 'east', 'target_resource_id': _EAST_ID,
             'location': 'eastus'},
            {'name': 'onprem', 'endpoint_type': multiregion.EXTERNAL_ENDPOINT,
             'target': 'app.contoso.com', 'priority': 2},
        ])
    self.assertEqual('global', profile['location'])
    properties = profile['properties']
    self.assertEqual('Performance', properties['trafficRoutingMethod'])
    self.assertEqual('Disabled', properties['trafficViewEnrollmentStatus'])
    self.assertEqual({'relativeName': 'contoso-app', 'ttl': 30},
                     properties['dnsConfig'])
    self.assertEqual({'protocol': 'HTTP', 'port': 80, 'path': '/health',
                      'intervalInSeconds': 30, 'timeoutInSeconds': 10,
                      'toleratedNumberOfFailures': 3},
                     properties['monitorConfig'])
    east, onprem = properties['endpoints']
    self.assertEqual(
        'Microsoft.Network/trafficManagerProfiles/AzureEndpoint', east['type'])
    self.assertEqual({'endpointStatus': 'Enabled', 'priority': 1, 'weight': 1,
                      'targetResourceId': _EAST_ID,
                      'endpointLocation': 'eastus'}, east['properties'])
    self.assertEqual('app.contoso.com', onprem['properties']['target'])
    self.assertEqual(2, onprem['properties']['priority'])

  def testNestedEndpoint(self):
    endpoint = multiregion.CreateTrafficManagerEndpoint(
        'child', multiregion.NESTED_ENDPOINTS, target='child.example',
        min_child_endpoints=2, geo_mapping=('GEO-EU',))
    self.assertEqual(2, endpoint['properties']['minChildEndpoints'])
    self.assertEqual(['GEO-EU'], endpoint['properties']['geoMapping'])

  def testAzureEndpointNeedsTarget(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'targetResourceId'):
      multiregion.CreateTrafficManagerEndpoint('east')

  def testProfileRequiresDnsName(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError, 'dnsName'):
      multiregion.CreateTrafficManagerProfile('app-tm')


class DeploymentPlanTestCase(unittest.TestCase):

  def _Regions(self):
    return [
        {'region': 'eastus', 'role': multiregion.PRIMARY,
         'vmss_name': 'web-east', 'baseline_capacity': 4, 'max_capacity': 10},
        {'region': 'westus2', 'role': multiregion.SECONDARY,
         'vmss_name': 'web-west'},
    ]

  def testPlan(self):
    plan = multiregion.CreateMultiRegionDeploymentPlan(
        'shop', 'shop-tm', self._Regions(),
        replication={'enabled': True, 'recovery_vault_name': 'vault'},
        monitoring={'action_group_ids': ('ag1',)})
    primary, secondary = plan['regions']
    self.assertEqual((4, 10, 1), (primary['baselineCapacity'],
                                  primary['maxCapacity'],
                                  primary['failoverPriority']))
    self.assertEqual((2, 2, 100), (secondary['baselineCapacity'],
                                   secondary['maxCapacity'],
                                   secondary['failoverPriority']))
    self.assertEqual({'enabled': True, 'recoveryVaultName': 'vault',
                      'replicationPolicyName': None}, plan['replication'])
    self.assertEqual({'applicationInsightsResourceId': None,
                      'actionGroupIds': ['ag1']}, plan['monitoring'])

  def testPlanNeedsTwoRegions(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'at least two regions'):
      multiregion.CreateMultiRegionDeploymentPlan('shop', 'shop-tm',
                                                  self._Regions()[:1])

  def testPlanNeedsOnePrimary(self):
    regions = self._Regions()
    regions[1]['role'] = multiregion.PRIMARY
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'exactly one primary region'):
      multiregion.CreateMultiRegionDeploymentPlan('shop', 'shop-tm', regions)

  def testFailoverPlan(self):
    plan = multiregion.CreateFailoverPlan(
        'dr', 'eastus', 'westus2',
        [{'name': 'Promote database', 'description': 'Fail over SQL',
          'validation': ('Replica is writable',)},
         {'name': 'Shift traffic', 'description': 'Disable east endpoint',
          'automation': 'runbook-shift'}],
        detection_threshold_minutes=None)
    self.assertEqual(5, plan['detectionThresholdMinutes'])
    self.assertEqual(['Replica is writable'], plan['steps'][0]['validation'])
    self.assertIsNone(plan['steps'][0]['automation'])
    self.assertEqual([], plan['steps'][1]['validation'])

  def testFailoverPlanNeedsSteps(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError, 'steps'):
      multiregion.CreateFailoverPlan('dr', 'eastus', 'westus2', [])


if __name__ == '__main__':
  unittest.main()
