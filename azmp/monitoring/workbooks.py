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
"""Azure Monitor workbook definitions for VM performance, scaling and cost.

A workbook definition is a 'Notebook/1.0' document: a list of text, parameter
and query items. The KQL of every query item lives in
azmp/data/workbooks/<name>.kql so it can be edited, or overridden with
--data_search_paths, without touching this module.
"""

import dataclasses
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

from azmp import arm_util
from azmp import data

WORKBOOK_TYPE = 'Microsoft.Insights/workbooks'
WORKBOOK_API_VERSION = '2022-04-01'
NOTEBOOK_VERSION = 'Notebook/1.0'
TEMPLATE_VERSION = '2.0.0'

WORKSPACE_RESOURCE_TYPE = 'microsoft.operationalinsights/workspaces'
COMPONENTS_RESOURCE_TYPE = 'microsoft.insights/components'

# Workbook item types.
TEXT_ITEM = 1
QUERY_ITEM = 3
PARAMETERS_ITEM = 9

TABLE = 'table'
CHART = 'chart'

_ALERT_SUGGESTIONS = """### Suggested Alert Rules:

1. **High CPU Alert** - Trigger when CPU > 80% for 10 minutes
2. **Low Memory Alert** - Trigger when available memory < 500 MB
3. **Disk Performance Alert** - Trigger when disk latency > 100ms
4. **Cost Anomaly Alert** - Trigger on 20% cost increase
5. **Scaling Failure Alert** - Trigger on autoscale failures

Use the monitor helpers in a deployment template to create these alerts:
```
{{ helper('monitor:cpuAlert', resource_id=vm_id, threshold=80, window_size='PT10M') }}
{{ helper('monitor:memoryAlert', resource_id=vm_id, threshold_mb=500) }}
{{ helper('monitor:costAlert', scope_id=scope_id, threshold_percent=20) }}
```"""


def ReadQuery(name: str) -> str:
  """Returns the KQL text of the workbook query 'name'."""
  return data.ReadResource('workbooks/{}.kql'.format(name)).strip()


def _TextItem(markdown: str) -> Dict[str, Any]:
  return {'type': TEXT_ITEM, 'content': {'json': markdown}}


def _HeaderItem(title: str, description: str) -> Dict[str, Any]:
  return _TextItem('# {}\n\n{}\n\n---'.format(title, description))


def _ParametersItem(parameters: List[Dict[str, Any]]) -> Dict[str, Any]:
  return {'type': PARAMETERS_ITEM, 'content': {'parameters': parameters}}


def _QueryItem(query: str,
               name: str,
               visualization: Optional[str] = None,
               resource_type: str = WORKSPACE_RESOURCE_TYPE,
               bordered: bool = True,
               **content: Any) -> Dict[str, Any]:
  """Returns a query item running data file 'query'.

  Args:
    query: string. Name of the .kql data file.
    name: string. Item name shown in the workbook editor.
    visualization: string. 'table', 'chart' or None for the default grid.
    resource_type: string. Resource type the query runs against.
    bordered: bool. Whether the item is drawn with a border.
    **content: extra keys of the item content, e.g. timeContext.
  """
  item_content = {
      'query': ReadQuery(query),
      'size': 0,
  }
  item_content.update(content)
  item_content['queryType'] = 0
  item_content['resourceType'] = resource_type
  if visualization:
    item_content['visualization'] = visualization
  item = {'type': QUERY_ITEM, 'content': item_content, 'name': name}
  if bordered:
    item['styleSettings'] = {'showBorder': True}
  return item


def _Section(heading: str, query: str, name: str,
             visualization: Optional[str] = None) -> List[Dict[str, Any]]:
  return [_TextItem(heading), _QueryItem(query, name, visualization)]


def _Workbook(parameters, variables, items, metadata):
  return {
      'version': NOTEBOOK_VERSION,
      'parameters': parameters,
      'variables': variables,
      'resources': [],
      'items': items,
      'metadata': metadata,
  }


def _Parameter(name, param_type, label, description, required=True,
               default_value=None, depends_on=None, options=None):
  return arm_util.Compact({
      'name': name,
      'type': param_type,
      'label': label,
      'description': description,
      'defaultValue': default_value,
      'required': required,
      'dependsOn': depends_on,
      'options': options,
  })


def _VmParameters():
  return [
      _Parameter('TimeRange', 'timeRange', 'Time Range',
                 'Time range for analysis', default_value='24h'),
      _Parameter('Subscription', 'subscription', 'Subscription',
                 'Azure subscription'),
      _Parameter('ResourceGroup', 'resourceGroup', 'Resource Group',
                 'Resource group containing the VM',
                 depends_on=['Subscription']),
      _Parameter('VirtualMachine', 'resource', 'Virtual Machine',
                 'Target virtual machine',
                 depends_on=['Subscription', 'ResourceGroup']),
  ]


def _VmssParameters():
  return [
      _Parameter('TimeRange', 'timeRange', 'Time Range',
                 'Time range for analysis', default_value='7d'),
      _Parameter('VmssResourceId', 'resource', 'VMSS Resource',
                 'Virtual Machine Scale Set'),
  ]


def _CostParameters():
  return [
      _Parameter('TimeRange', 'timeRange', 'Time Range',
                 'Time range for cost analysis', default_value='30d'),
      _Parameter('Scope', 'dropdown', 'Analysis Scope',
                 'Scope of cost analysis', default_value='resourceGroup',
                 options=[
                     {'label': 'Subscription', 'value': 'subscription'},
                     {'label': 'Resource Group', 'value': 'resourceGroup'},
                     {'label': 'Resource', 'value': 'resource'},
                 ]),
      _Parameter('SubscriptionId', 'subscription', 'Subscription (optional)',
                 'Target subscription for cost analysis', required=False),
      _Parameter('CostResourceGroup', 'resourceGroup',
                 'Resource Group (optional)', 'Resource group to analyze',
                 required=False, depends_on=['SubscriptionId']),
      _Parameter('CostResourceId', 'resource', 'Resource (optional)',
                 'Specific resource scope (e.g., VM)', required=False,
                 depends_on=['SubscriptionId', 'CostResourceGroup']),
  ]


def GenerateVmPerformanceWorkbook(include_performance_analysis=True,
                                  include_cost_analysis=True,
                                  include_scaling_analytics=True):
  """Returns the VM performance and cost analytics workbook.

  The overview, recommendations and alert sections are always present; the
  performance, cost and scaling sections can be left out.
  """
  parameters = _VmParameters()
  items = [
      _HeaderItem(
          'VM Performance & Cost Analytics',
          'Comprehensive analysis of virtual machine performance, cost '
          'optimization opportunities, and scaling patterns'),
      _ParametersItem(parameters),
      _QueryItem('vm_overview', 'VM Overview',
                 timeContext={'durationMs': 86400000}),
  ]
  if include_performance_analysis:
    items += _Section(
        '## 📊 Performance Analysis\n\nDetailed performance metrics with '
        'bottleneck identification and optimization opportunities.',
        'performance_trends', 'Performance Trends', CHART)
  if include_cost_analysis:
    items += _Section(
        '## 💰 Cost Analysis\n\nPerformance-aware cost optimization with '
        'right-sizing recommendations.',
        'cost_vs_performance', 'Cost vs Performance')
  if include_scaling_analytics:
    items += _Section(
        '## 🚀 Scaling Analytics\n\nAutoscale performance and load pattern '
        'analysis.',
        'scaling_patterns', 'Scaling Patterns')
  items += _Section(
      '## 🎯 Optimization Recommendations\n\nActionable insights based on '
      'performance, cost, and scaling analysis.',
      'recommendations', 'Recommendations')
  items += [
      _TextItem('## 🚨 Recommended Alerts\n\nProactive monitoring alerts '
                'based on current performance patterns.'),
      _TextItem(_ALERT_SUGGESTIONS),
  ]
  return _Workbook(
      parameters,
      [{
          'name': 'WorkspaceId',
          'type': 3,
          'value': 'Resources | where type == '
                   '"microsoft.operationalinsights/workspaces" | project id',
      }],
      items,
      {
          'templateId': 'vm-performance-analytics',
          'integrations': ['Azure Monitor', 'Cost Management',
                           'Performance Insights'],
          'dataRetention': '90 days',
          'refreshInterval': '5 minutes',
          'costEstimate': 'Low - uses standard Azure Monitor logs',
      })


def GenerateVmssScalingWorkbook(include_load_patterns=True,
                                include_predictive_analysis=True,
                                include_cost_projections=True):
  """Returns the VMSS autoscale analytics workbook."""
  parameters = _VmssParameters()
  items = [
      _HeaderItem(
          'VMSS Scaling Analytics',
          'Advanced autoscaling analysis with load patterns, predictive '
          'insights, and cost optimization'),
      _ParametersItem(parameters),
      _QueryItem('vmss_overview', 'VMSS Overview',
                 resource_type=COMPONENTS_RESOURCE_TYPE, bordered=False),
  ]
  if include_load_patterns:
    items += _Section(
        '## 📈 Load Pattern Analysis\n\nDetailed analysis of load patterns '
        'for autoscale optimization.',
        'load_patterns', 'Load Pattern Classification', TABLE)
  items += _Section(
      '## ⚙️ Autoscale Performance\n\nScaling events, performance impact, '
      'and optimization opportunities.',
      'autoscale_events', 'Autoscale Event Impact', TABLE)
  if include_predictive_analysis:
    items += _Section(
        '## 🔮 Predictive Analysis\n\nForecasting and predictive scaling '
        'recommendations.',
        'cpu_forecast', 'CPU Forecast', CHART)
  if include_cost_projections:
    items += _Section(
        '## 💸 Scaling Cost Analysis\n\nCost impact of scaling decisions and '
        'optimization opportunities.',
        'scaling_cost', 'Scaling Cost Impact', TABLE)
  items += _Section(
      '## 🎯 Scaling Optimization\n\nRecommendations for improving autoscale '
      'efficiency and cost-effectiveness.',
      'scaling_optimization', 'Scaling Optimization Recommendations', TABLE)
  return _Workbook(
      parameters,
      [{
          'name': 'VmssMetrics',
          'type': 3,
          'value': 'AzureMetrics | where ResourceId contains '
                   '"virtualMachineScaleSets" | distinct MetricName',
      }],
      items,
      {
          'templateId': 'vmss-scaling-analytics',
          'integrations': ['Azure Monitor', 'Autoscale', 'Cost Management',
                           'Performance Analytics'],
          'dataRetention': '180 days',
          'refreshInterval': '1 minute',
          'costEstimate': 'Medium - includes detailed metrics analysis',
      })


def GenerateCostOptimizationWorkbook(include_rightsizing=True,
                                     include_reserved_instances=True,
                                     include_spot_recommendations=True):
  """Returns the performance-aware VM cost optimization workbook."""
  parameters = _CostParameters()
  items = [
      _HeaderItem(
          'VM Cost Optimization',
          'Comprehensive cost analysis with performance-aware '
          'recommendations'),
      _ParametersItem(parameters),
  ]
  items += _Section(
      '## 💰 Cost Overview\n\nComprehensive cost analysis with performance '
      'correlation.',
      'cost_overview', 'Cost Overview', TABLE)
  if include_rightsizing:
    items += _Section(
        '## 📏 Right-sizing Analysis\n\nPerformance-based VM size '
        'recommendations.',
        'rightsizing', 'Rightsizing Recommendations', TABLE)
  if include_reserved_instances:
    items += _Section(
        '## 🏦 Reserved Instance Analysis\n\nReservation recommendations '
        'based on usage patterns.',
        'reservations', 'Reservation Coverage', TABLE)
  if include_spot_recommendations:
    items += _Section(
        '## 🎯 Spot Instance Opportunities\n\nSpot instance suitability '
        'analysis.',
        'spot_suitability', 'Spot Suitability', TABLE)
  items += _Section(
      '## ⚡ Performance Impact Analysis\n\nPerformance implications of cost '
      'optimization recommendations.',
      'performance_cost_impact', 'Performance vs Cost Impact', TABLE)
  items += _Section(
      '## ✅ Action Items\n\nPrioritized cost optimization actions.',
      'cost_actions', 'Cost Optimization Actions', TABLE)
  return _Workbook(
      parameters,
      [{'name': 'CostScope', 'type': 'parameter', 'value': '{Scope}'}],
      items,
      {
          'templateId': 'vm-cost-optimization',
          'integrations': ['Cost Management', 'Azure Advisor',
                           'Performance Analytics'],
          'dataRetention': '365 days',
          'refreshInterval': '1 hour',
          'costEstimate': 'Low - primarily uses Cost Management API',
      })


@dataclasses.dataclass(frozen=True)
class WorkbookTemplate:
  """A registered workbook and the metadata shown when listing it."""
  id: str
  name: str
  description: str
  category: str
  tags: Tuple[str, ...]
  complexity: str
  estimated_setup_time: str
  prerequisites: Tuple[str, ...]
  generator: Callable[[], Dict[str, Any]]
  version: str = TEMPLATE_VERSION

  def ToDict(self, include_template=True):
    info = {
        'id': self.id,
        'name': self.name,
        'description': self.description,
        'category': self.category,
        'tags': list(self.tags),
        'version': self.version,
        'complexity': self.complexity,
        'estimatedSetupTime': self.estimated_setup_time,
        'prerequisites': list(self.prerequisites),
    }
    if include_template:
      info['template'] = self.generator()
    return info


WORKBOOK_TEMPLATES = (
    WorkbookTemplate(
        'vm-performance-analytics', 'VM Performance Analytics',
        'Comprehensive VM performance analysis with cost insights and '
        'optimization recommendations',
        'advanced-monitoring',
        ('performance', 'cost', 'optimization', 'monitoring'),
        'advanced', '15-20 minutes',
        ('Log Analytics workspace', 'VM insights enabled',
         'Performance counters configured'),
        GenerateVmPerformanceWorkbook),
    WorkbookTemplate(
        'vmss-scaling-analytics', 'VMSS Scaling Analytics',
        'Advanced autoscaling analysis with load patterns and predictive '
        'insights',
        'scaling-analytics',
        ('vmss', 'autoscale', 'load-patterns', 'predictive', 'cost'),
        'expert', '20-30 minutes',
        ('VMSS with autoscale enabled', 'Azure Monitor metrics',
         'Historical scaling data'),
        GenerateVmssScalingWorkbook),
    WorkbookTemplate(
        'vm-cost-optimization', 'VM Cost Optimization',
        'Performance-aware cost optimization with right-sizing and '
        'reservation recommendations',
        'cost-optimization',
        ('cost', 'optimization', 'rightsizing', 'reservations',
         'performance'),
        'intermediate', '10-15 minutes',
        ('Cost Management access', 'Performance data',
         'Azure Advisor enabled'),
        GenerateCostOptimizationWorkbook),
)


def ListWorkbookTemplates(category=None):
  """Returns the registered templates' metadata, without definitions."""
  return [t.ToDict(include_template=False) for t in WORKBOOK_TEMPLATES
          if category is None or t.category == category]


def GetWorkbookTemplate(template_id):
  """Returns the registered template 'template_id' with its definition.

  Returns None if no template has that id.
  """
  for template in WORKBOOK_TEMPLATES:
    if template.id == template_id:
      return template.ToDict()
  return None


def WorkbookResource(display_name, definition, name=None,
                     location=arm_util.DEFAULT_LOCATION,
                     category='workbook', source_id='Azure Monitor',
                     tags=None):
  """Returns a shared workbook resource holding 'definition'.

  Args:
    display_name: string. Name shown in the portal.
    definition: dict or JSON string. The Notebook/1.0 document.
    name: string. Resource name. Workbook names must be GUIDs, so by default
      one is derived from the resource group and 'display_name'.
    location: string. Azure region.
    category: string. Gallery the workbook is listed in.
    source_id: string. Resource the workbook is attached to.
    tags: dict of resource tags.

  Returns:
    The workbooks resource dict.
  """
  if not isinstance(definition, str):
    definition = json.dumps(definition, ensure_ascii=False)
  return {
      'type': WORKBOOK_TYPE,
      'apiVersion': WORKBOOK_API_VERSION,
      'name': name or "[guid(resourceGroup().id, '{}')]".format(display_name),
      'location': location or arm_util.DEFAULT_LOCATION,
      'kind': 'shared',
      'properties': {
          'displayName': display_name,
          'serializedData': definition,
          'version': '1.0',
          'sourceId': source_id,
          'category': category,
      },
      'tags': tags or {},
  }
