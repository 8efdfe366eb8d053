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
"""Azure Monitor alert rule definitions and their ARM resources.

Alert definitions are plain dicts describing a metric or log signal. They are
turned into deployable resources by ToMetricAlertResource and
ToScheduledQueryResource.
"""

import logging
import re

from azmp import arm_util
from azmp import errors

METRIC_ALERT_TYPE = 'Microsoft.Insights/metricAlerts'
METRIC_ALERT_API_VERSION = '2018-03-01'
SCHEDULED_QUERY_TYPE = 'Microsoft.Insights/scheduledQueryRules'
SCHEDULED_QUERY_API_VERSION = '2022-10-01'
VM_RESOURCE_TYPE = 'Microsoft.Compute/virtualMachines'
VM_METRIC_NAMESPACE = 'microsoft.compute/virtualmachines'

METRIC = 'Metric'
LOG = 'Log'

DEFAULT_FREQUENCY_MINUTES = 5
DEFAULT_TIME_WINDOW_MINUTES = 60

_DURATION_RE = re.compile(r'P(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?')

_COST_QUERY = """Usage
| where TimeGenerated >= ago(2d)
| summarize PreviousCost = sumif(PreTaxCost, TimeGenerated < ago(1d)),
          CurrentCost = sumif(PreTaxCost, TimeGenerated >= ago(1d))
| extend Growth = case(PreviousCost == 0, 0, ((CurrentCost - PreviousCost) / PreviousCost) * 100)
| where Growth > {threshold}
| project Growth, CurrentCost, PreviousCost"""

_SCALING_QUERY = """AzureActivity
| where ResourceId == '{resource_id}'
| where CategoryValue == 'Autoscale' and Level == 'Error'
| summarize FailureCount = count() by bin(TimeGenerated, {bin_size})
| where FailureCount >= {threshold}
| project FailureCount"""


def DurationToMinutes(duration, fallback):
  """Converts an ISO-8601 duration such as 'PT5M' or 'P1D' to minutes.

  Args:
    duration: string. The duration; only days, hours and minutes count.
    fallback: int. Returned when 'duration' is empty or amounts to zero.

  Returns:
    The number of minutes.
  """
  if not duration:
    return fallback
  match = _DURATION_RE.search(duration.upper())
  if not match:
    return fallback
  days, hours, minutes = (int(g) if g else 0 for g in match.groups())
  total = days * 1440 + hours * 60 + minutes
  return total if total > 0 else fallback


def _Require(value, option):
  if not value:
    raise errors.Config.InvalidConfigError(
        'Missing required option "{}"'.format(option))


def _Definition(signal_type, name, display_name, description, scope, severity,
                evaluation_frequency, window_size, auto_mitigate, condition,
                action_group_ids, emails, insights, signal):
  return arm_util.Prune({
      'name': name,
      'displayName': display_name,
      'description': description,
      'severity': severity,
      'signalType': signal_type,
      'scopes': [scope],
      'evaluationFrequency': evaluation_frequency,
      'windowSize': window_size,
      'autoMitigate': auto_mitigate,
      'enabled': True,
      'condition': condition,
      'actions': {
          'actionGroupIds': action_group_ids,
          'emails': emails,
      },
      'insights': insights,
      'metadata': {'signal': signal, 'version': '1.0.0'},
  })


def CreateCpuAlert(resource_id, name='cpu-high-alert',
                   display_name='High CPU Utilization', description=None,
                   threshold=80, evaluation_frequency='PT1M',
                   window_size='PT5M', severity=2, action_group_ids=None,
                   emails=None, auto_mitigate=True):
  """Returns a metric alert on average 'Percentage CPU' above 'threshold'."""
  _Require(resource_id, 'resourceId')
  condition = {
      'type': 'metric',
      'metricName': 'Percentage CPU',
      'metricNamespace': VM_METRIC_NAMESPACE,
      'operator': 'GreaterThan',
      'threshold': threshold,
      'timeAggregation': 'Average',
      'evaluationPeriods': 3,
  }
  return _Definition(
      METRIC, name, display_name,
      description or
      'Triggers when CPU utilization exceeds the target threshold.',
      resource_id, severity, evaluation_frequency, window_size,
      auto_mitigate, condition, action_group_ids, emails,
      ['Threshold set to {}% with {} window'.format(threshold, window_size),
       'Recommended to investigate workload spikes and consider scale-out '
       'policies'],
      'cpu')


def CreateMemoryAlert(resource_id, name='memory-low-alert',
                      display_name='Low Available Memory', description=None,
                      threshold_mb=512, evaluation_frequency='PT5M',
                      window_size='PT10M', severity=3, action_group_ids=None,
                      emails=None, auto_mitigate=True):
  """Returns a metric alert on minimum available memory below 'threshold_mb'.

  The metric is reported in bytes, so the threshold is scaled accordingly.
  """
  _Require(resource_id, 'resourceId')
  condition = {
      'type': 'metric',
      'metricName': 'Available Memory Bytes',
      'metricNamespace': VM_METRIC_NAMESPACE,
      'operator': 'LessThan',
      'threshold': threshold_mb * 1024 * 1024,
      'timeAggregation': 'Minimum',
      'evaluationPeriods': 2,
  }
  return _Definition(
      METRIC, name, display_name,
      description or
      'Triggers when available memory remains below the defined threshold.',
      resource_id, severity, evaluation_frequency, window_size,
      auto_mitigate, condition, action_group_ids, emails,
      ['Alert triggers when available memory < {} MB'.format(threshold_mb),
       'Consider scaling up memory or optimizing application memory usage'],
      'memory')


def CreateCostAnomalyAlert(scope_id, name='cost-anomaly-alert',
                           display_name='Cost Anomaly Detected',
                           description=None, threshold_percent=20,
                           evaluation_frequency='PT30M', window_size='P1D',
                           severity=2, action_group_ids=None, emails=None):
  """Returns a log alert on day-over-day cost growth.

  Args:
    scope_id: string. Subscription, resource group or resource to watch.
    name: string. Alert rule name.
    display_name: string. Alert rule display name.
    description: string. Overrides the generated description.
    threshold_percent: number. Growth in percent that raises the alert.
    evaluation_frequency: string. ISO-8601 evaluation interval.
    window_size: string. ISO-8601 window of the rule.
    severity: int. 0 (critical) to 4 (verbose).
    action_group_ids: list of action group resource ids.
    emails: list of addresses to notify.

  Returns:
    The alert definition dict.
  """
  _Require(scope_id, 'scopeId')
  condition = {
      'type': 'log',
      'query': _COST_QUERY.format(threshold=threshold_percent),
      'timeWindow': 'PT24H',
      'operator': 'GreaterThan',
      'threshold': 0,
      'frequency': evaluation_frequency,
      'alertSensitivity': 'High' if threshold_percent >= 30 else 'Medium',
  }
  return _Definition(
      LOG, name, display_name,
      description or
      'Triggers when cost increases by more than {}% compared to the '
      'previous day.'.format(threshold_percent),
      scope_id, severity, evaluation_frequency, window_size, False,
      condition, action_group_ids, emails,
      ['Detects cost growth over {}% in the last 24 hours'.format(
          threshold_percent),
       'Investigate newly provisioned resources or unexpected usage spikes'],
      'cost')


def CreateScalingHealthAlert(resource_id, name='scaling-failure-alert',
                             display_name='Autoscale Failures Detected',
                             failure_count_threshold=3,
                             evaluation_frequency='PT5M', window_size='PT30M',
                             severity=2, action_group_ids=None, emails=None):
  """Returns a log alert on repeated autoscale errors of 'resource_id'."""
  _Require(resource_id, 'resourceId')
  query = _SCALING_QUERY.format(
      resource_id=resource_id,
      bin_size=window_size.upper().replace('PT', '').lower(),
      threshold=failure_count_threshold)
  condition = {
      'type': 'log',
      'query': query,
      'timeWindow': window_size,
      'operator': 'GreaterThan',
      'threshold': 0,
      'frequency': evaluation_frequency,
  }
  return _Definition(
      LOG, name, display_name,
      'Triggers when {}+ scaling failures occur within {}.'.format(
          failure_count_threshold, window_size),
      resource_id, severity, evaluation_frequency, window_size, False,
      condition, action_group_ids, emails,
      ['Investigate autoscale settings and VMSS health',
       'Consider enabling predictive scaling for smoother scale-out'],
      'scaling')


def ToMetricAlertResource(definition):
  """Returns the metricAlerts resource for a metric alert definition."""
  condition = definition.get('condition') or {}
  if condition.get('type') != 'metric':
    raise errors.Config.InvalidConfigError(
        'Alert definition is not metric-based')
  criterion = arm_util.Prune({
      'name': definition['displayName'],
      'metricName': condition['metricName'],
      'metricNamespace': condition.get('metricNamespace'),
      'operator': condition['operator'],
      'threshold': condition['threshold'],
      'timeAggregation': condition['timeAggregation'],
      'dimensions': condition.get('dimensions'),
      'dynamicThreshold': condition.get('dynamicThreshold'),
  })
  action_group_ids = (definition.get('actions') or {}).get('actionGroupIds')
  properties = {
      'description': definition['description'],
      'severity': definition['severity'],
      'enabled': definition.get('enabled', True),
      'scopes': definition['scopes'],
      'evaluationFrequency': definition['evaluationFrequency'],
      'windowSize': definition['windowSize'],
      'criteria': {'allOf': [criterion]},
      'autoMitigate': definition.get('autoMitigate', True),
  }
  if not condition.get('metricNamespace'):
    properties['targetResourceType'] = VM_RESOURCE_TYPE
  properties['actions'] = [{'actionGroupId': group_id}
                           for group_id in action_group_ids or []]
  return {
      'type': METRIC_ALERT_TYPE,
      'apiVersion': METRIC_ALERT_API_VERSION,
      'name': definition['name'],
      'location': 'global',
      'properties': properties,
  }


def ToScheduledQueryResource(definition, workspace_id):
  """Returns the scheduledQueryRules resource for a log alert definition.

  Args:
    definition: dict. A definition built by CreateCostAnomalyAlert or
      CreateScalingHealthAlert.
    workspace_id: string. Log Analytics workspace the query runs against.

  Returns:
    The resource dict. The schedule is expressed in minutes.

  Raises:
    errors.Config.InvalidConfigError: if 'definition' is not log-based.
  """
  condition = definition.get('condition') or {}
  if condition.get('type') != 'log':
    raise errors.Config.InvalidConfigError('Alert definition is not log-based')
  actions = definition.get('actions') or {}
  action_group_ids = actions.get('actionGroupIds')
  emails = actions.get('emails')

  action = {
      'severity': definition['severity'],
      'trigger': {
          'operator': condition['operator'],
          'threshold': condition['threshold'],
      },
  }
  if action_group_ids or emails:
    azns_action = {'actionGroup': action_group_ids or []}
    if emails:
      azns_action['properties'] = {'emailAddresses': ','.join(emails)}
    action['aznsAction'] = azns_action

  frequency = DurationToMinutes(definition.get('evaluationFrequency'),
                               DEFAULT_FREQUENCY_MINUTES)
  window = DurationToMinutes(definition.get('windowSize'),
                            DEFAULT_TIME_WINDOW_MINUTES)
  logging.debug('Scheduling log alert %s every %d minutes over %d minutes.',
                definition['name'], frequency, window)
  return {
      'type': SCHEDULED_QUERY_TYPE,
      'apiVersion': SCHEDULED_QUERY_API_VERSION,
      'name': definition['name'],
      'location': 'global',
      'properties': {
          'description': definition['description'],
          'enabled': 'Enabled' if definition.get('enabled', True)
                     else 'Disabled',
          'source': {
              'query': condition['query'],
              'dataSourceId': workspace_id,
              'queryType': 'ResultCount',
          },
          'schedule': {
              'frequencyInMinutes': frequency,
              'timeWindowInMinutes': window,
          },
          'action': action,
          'autoMitigate': definition.get('autoMitigate', False),
      },
  }
