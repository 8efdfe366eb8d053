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
"""Tests for azmp.monitoring.alerts."""

import unittest

from absl.testing import parameterized

from azmp import errors
from azmp.monitoring import alerts

_VM_ID = "[resourceId('Microsoft.Compute/virtualMachines', 'vm1')]"
_WORKSPACE_ID = ("[resourceId('Microsoft.OperationalInsights/workspaces', "
                 "'logs')]")


class DurationTestCase(parameterized.TestCase):

  @parameterized.parameters(('PT5M', 5), ('pt30m', 30), ('PT1H30M', 90),
                            ('P1D', 1440), ('P1DT2H', 1560), ('', 60),
                            (None, 60), ('PT0M', 60), ('5 minutes', 60))
  def testDurationToMinutes(self, duration, expected):
    self.assertEqual(expected, alerts.DurationToMinutes(duration, 60))


class MetricAlertTestCase(unittest.TestCase):

  def testCpuAlert(self):
    definition = alerts.CreateCpuAlert(_VM_ID, threshold=90,
                                       action_group_ids=['ag1'])
    self.assertEqual({
        'name': 'cpu-high-alert',
        'displayName': 'High CPU Utilization',
        'description':
            'Triggers when CPU utilization exceeds the target threshold.',
        'severity': 2,
        'signalType': 'Metric',
        'scopes': [_VM_ID],
        'evaluationFrequency': 'PT1M',
        'windowSize': 'PT5M',
        'autoMitigate': True,
        'enabled': True,
        'condition': {
            'type': 'metric',
            'metricName': 'Percentage CPU',
            'metricNamespace': 'microsoft.compute/virtualmachines',
            'operator': 'GreaterThan',
            'threshold': 90,
            'timeAggregation': 'Average',
            'evaluationPeriods': 3,
        },
        'actions': {'actionGroupIds': ['ag1']},
        'insights': [
            'Threshold set to 90% with PT5M window',
            'Recommended to investigate workload spikes and consider '
            'scale-out policies',
        ],
        'metadata': {'signal': 'cpu', 'version': '1.0.0'},
    }, definition)

  def testMemoryThresholdInBytes(self):
    definition = alerts.CreateMemoryAlert(_VM_ID, threshold_mb=256)
    self.assertEqual(256 * 1024 * 1024, definition['condition']['threshold'])
    self.assertEqual('Minimum', definition['condition']['timeAggregation'])
    self.assertEqual({}, definition['actions'])

  def testRequiresResource(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'Missing required option "resourceId"'):
      alerts.CreateCpuAlert(None)

  def testMetricResource(self):
    resource = alerts.ToMetricAlertResource(
        alerts.CreateCpuAlert(_VM_ID, action_group_ids=['ag1', 'ag2']))
    self.assertEqual('Microsoft.Insights/metricAlerts', resource['type'])
    self.assertEqual('global', resource['location'])
    properties = resource['properties']
    self.assertEqual({'allOf': [{
        'name': 'High CPU Utilization',
        'metricName': 'Percentage CPU',
        'metricNamespace': 'microsoft.compute/virtualmachines',
        'operator': 'GreaterThan',
        'threshold': 80,
        'timeAggregation': 'Average',
    }]}, properties['criteria'])
    self.assertEqual([{'actionGroupId': 'ag1'}, {'actionGroupId': 'ag2'}],
                     properties['actions'])
    self.assertNotIn('targetResourceType', properties)

  def testMetricResourceWithoutNamespace(self):
    definition = alerts.CreateCpuAlert(_VM_ID)
    del definition['condition']['metricNamespace']
    properties = alerts.ToMetricAlertResource(definition)['properties']
    self.assertEqual('Microsoft.Compute/virtualMachines',
                     properties['targetResourceType'])
    self.assertEqual([], properties['actions'])

  def testMetricResourceRejectsLogAlert(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'not metric-based'):
      alerts.ToMetricAlertResource(alerts.CreateCostAnomalyAlert('/sub'))


class LogAlertTestCase(unittest.TestCase):

  def testCostAlert(self):
    definition = alerts.CreateCostAnomalyAlert('/subscriptions/123',
                                               threshold_percent=35)
    condition = definition['condition']
    self.assertIn('| where Growth > 35', condition['query'])
    self.assertEqual('High', condition['alertSensitivity'])
    self.assertFalse(definition['autoMitigate'])
    self.assertEqual('Triggers when cost increases by more than 35% compared '
                     'to the previous day.', definition['description'])
    self.assertEqual(
        'Medium',
        alerts.CreateCostAnomalyAlert('/sub')['condition']['alertSensitivity'])

  def testScalingAlertQuery(self):
    definition = alerts.CreateScalingHealthAlert('vmss-id',
                                                 failure_count_threshold=5,
                                                 window_size='PT1H')
    query = definition['condition']['query']
    self.assertIn("| where ResourceId == 'vmss-id'", query)
    self.assertIn('bin(TimeGenerated, 1h)', query)
    self.assertIn('| where FailureCount >= 5', query)
    self.assertEqual('Triggers when 5+ scaling failures occur within PT1H.',
                     definition['description'])

  def testScheduledQueryResource(self):
    definition = alerts.CreateCostAnomalyAlert(
        '/sub', action_group_ids=['ag1'], emails=['a@contoso.com',
                                                  'b@contoso.com'])
    resource = alerts.ToScheduledQueryResource(definition, _WORKSPACE_ID)
    self.assertEqual('Microsoft.Insights/scheduledQueryRules',
                     resource['type'])
    properties = resource['properties']
    self.assertEqual('Enabled', properties['enabled'])
    self.assertEqual({'query': definition['condition']['query'],
                      'dataSourceId': _WORKSPACE_ID,
                      'queryType': 'ResultCount'}, properties['source'])
    self.assertEqual({'frequencyInMinutes': 30, 'timeWindowInMinutes': 1440},
                     properties['schedule'])
    self.assertEqual({
        'severity': 2,
        'trigger': {'operator': 'GreaterThan', 'threshold': 0},
        'aznsAction': {
            'actionGroup': ['ag1'],
            'properties': {'emailAddresses': 'a@contoso.com,b@contoso.com'},
        },
    }, properties['action'])

  def testScheduledQueryWithoutActions(self):
    resource = alerts.ToScheduledQueryResource(
        alerts.CreateScalingHealthAlert('vmss-id'), _WORKSPACE_ID)
    self.assertNotIn('aznsAction', resource['properties']['action'])
    self.assertEqual({'frequencyInMinutes': 5, 'timeWindowInMinutes': 30},
                     resource['properties']['schedule'])

  def testScheduledQueryRejectsMetricAlert(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'not log-based'):
      alerts.ToScheduledQueryResource(alerts.CreateCpuAlert(_VM_ID),
                                      _WORKSPACE_ID)


if __name__ == '__main__':
  unittest.main()
