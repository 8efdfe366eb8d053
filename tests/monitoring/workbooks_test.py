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
"""Tests for azmp.monitoring.workbooks."""

import json
import unittest

from absl.testing import parameterized

from azmp.monitoring import workbooks


def _QueryNames(workbook):
  return [item['name'] for item in workbook['items']
          if item['type'] == workbooks.QUERY_ITEM]


class GenerateWorkbookTestCase(parameterized.TestCase):

  def testVmPerformance(self):
    workbook = workbooks.GenerateVmPerformanceWorkbook()
    self.assertEqual('Notebook/1.0', workbook['version'])
    self.assertEqual(13, len(workbook['items']))
    self.assertEqual(['VM Overview', 'Performance Trends',
                      'Cost vs Performance', 'Scaling Patterns',
                      'Recommendations'], _QueryNames(workbook))
    overview = workbook['items'][2]
    self.assertEqual({'durationMs': 86400000},
                     overview['content']['timeContext'])
    self.assertEqual(workbooks.ReadQuery('vm_overview'),
                     overview['content']['query'])
    self.assertEqual({'showBorder': True}, overview['styleSettings'])
    self.assertEqual('vm-performance-analytics',
                     workbook['metadata']['templateId'])
    self.assertIn("helper('monitor:cpuAlert'",
                  workbook['items'][-1]['content']['json'])

  def testVmPerformanceWithoutOptionalSections(self):
    workbook = workbooks.GenerateVmPerformanceWorkbook(False, False, False)
    self.assertEqual(['VM Overview', 'Recommendations'],
                     _QueryNames(workbook))
    self.assertEqual(7, len(workbook['items']))

  def testVmParameters(self):
    parameters = workbooks.GenerateVmPerformanceWorkbook()['parameters']
    self.assertEqual({
        'name': 'VirtualMachine',
        'type': 'resource',
        'label': 'Virtual Machine',
        'description': 'Target virtual machine',
        'required': True,
        'dependsOn': ['Subscription', 'ResourceGroup'],
    }, parameters[3])
    self.assertEqual('24h', parameters[0]['defaultValue'])

  def testVmssScaling(self):
    workbook = workbooks.GenerateVmssScalingWorkbook()
    self.assertEqual(13, len(workbook['items']))
    overview = workbook['items'][2]
    self.assertEqual('microsoft.insights/components',
                     overview['content']['resourceType'])
    self.assertNotIn('styleSettings', overview)
    workbook = workbooks.GenerateVmssScalingWorkbook(False, False, False)
    self.assertEqual(['VMSS Overview', 'Autoscale Event Impact',
                      'Scaling Optimization Recommendations'],
                     _QueryNames(workbook))

  def testCostOptimization(self):
    workbook = workbooks.GenerateCostOptimizationWorkbook()
    self.assertEqual(14, len(workbook['items']))
    self.assertEqual([{'name': 'CostScope', 'type': 'parameter',
                       'value': '{Scope}'}], workbook['variables'])
    workbook = workbooks.GenerateCostOptimizationWorkbook(False, False, False)
    self.assertEqual(['Cost Overview', 'Performance vs Cost Impact',
                      'Cost Optimization Actions'], _QueryNames(workbook))
    optional = workbook['parameters'][2]
    self.assertFalse(optional['required'])

  @parameterized.parameters(
      'vm_overview', 'performance_trends', 'cost_vs_performance',
      'scaling_patterns', 'recommendations', 'vmss_overview', 'load_patterns',
      'autoscale_events', 'cpu_forecast', 'scaling_cost',
      'scaling_optimization', 'cost_overview', 'rightsizing', 'reservations',
      'spot_suitability', 'performance_cost_impact', 'cost_actions')
  def testQueriesExist(self, name):
    query = workbooks.ReadQuery(name)
    self.assertTrue(query)
    self.assertEqual(query, query.strip())


class RegistryTestCase(unittest.TestCase):

  def testList(self):
    templates = workbooks.ListWorkbookTemplates()
    self.assertEqual(['vm-performance-analytics', 'vmss-scaling-analytics',
                      'vm-cost-optimization'], [t['id'] for t in templates])
    self.assertNotIn('template', templates[0])
    self.assertEqual('2.0.0', templates[0]['version'])
    self.assertEqual(
        ['vm-cost-optimization'],
        [t['id'] for t in
         workbooks.ListWorkbookTemplates('cost-optimization')])

  def testGet(self):
    template = workbooks.GetWorkbookTemplate('vmss-scaling-analytics')
    self.assertEqual('expert', template['complexity'])
    self.assertEqual(workbooks.GenerateVmssScalingWorkbook(),
                     template['template'])
    self.assertIsNone(workbooks.GetWorkbookTemplate('missing'))

  def testWorkbookResource(self):
    definition = workbooks.GenerateCostOptimizationWorkbook()
    resource = workbooks.WorkbookResource('Cost Review', definition)
    self.assertEqual("[guid(resourceGroup().id, 'Cost Review')]",
                     resource['name'])
    self.assertEqual('shared', resource['kind'])
    properties = resource['properties']
    self.assertEqual(definition, json.loads(properties['serializedData']))
    self.assertEqual('workbook', properties['category'])
    resource = workbooks.WorkbookResource('Cost Review', '{}', name='abc')
    self.assertEqual('abc', resource['name'])
    self.assertEqual('{}', resource['properties']['serializedData'])


if __name__ == '__main__':
  unittest.main()
