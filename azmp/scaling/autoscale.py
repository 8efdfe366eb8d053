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
"""Metric and schedule based autoscale settings for scale sets.

Profiles passed to CreateAutoscalePolicy are dicts with the keys 'name',
'capacity' ({'minimum', 'maximum', 'default'}), 'rules' (keyword argument
dicts of CreateMetricScaleRule) and optionally 'fixed_date' and
'recurrence', which follow the ARM shape.
"""

import copy

from azmp import arm_util
from azmp import errors

AUTOSCALE_TYPE = 'Microsoft.Insights/autoscalesettings'
API_VERSION = '2022-10-01'

PERCENTAGE_CPU = 'Percentage CPU'
AVAILABLE_MEMORY_BYTES = 'Available Memory Bytes'
NETWORK_IN_TOTAL = 'Network In Total'
NETWORK_OUT_TOTAL = 'Network Out Total'

INCREASE = 'Increase'
DECREASE = 'Decrease'

DEFAULT_METRIC_RESOURCE_URI = (
    '[resourceId("Microsoft.Compute/virtualMachineScaleSets", '
    'parameters("vmssName"))]')

WEEKDAYS = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday']
ALL_DAYS = WEEKDAYS + ['Saturday', 'Sunday']


def CreateMetricScaleRule(metric_name=None,
                          threshold=None,
                          direction=INCREASE,
                          metric_resource_uri=None,
                          time_grain='PT1M',
                          statistic='Average',
                          time_window='PT5M',
                          time_aggregation='Average',
                          operator='GreaterThan',
                          cooldown='PT5M',
                          scale_type='ChangeCount',
                          value=1):
  """Returns an autoscale rule that fires on a platform metric.

  Raises:
    errors.Config.InvalidConfigError: if the metric name is missing or the
      threshold is not a number.
  """
  if not metric_name:
    raise errors.Config.InvalidConfigError(
        'Metric scale rule requires a metricName')
  if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
    raise errors.Config.InvalidConfigError(
        'Metric scale rule requires a numeric threshold')
  return {
      'metricTrigger': {
          'metricName': metric_name,
          'metricNamespace': '',
          'metricResourceUri': (metric_resource_uri or
                                DEFAULT_METRIC_RESOURCE_URI),
          'timeGrain': time_grain or 'PT1M',
          'statistic': statistic or 'Average',
          'timeWindow': time_window or 'PT5M',
          'timeAggregation': time_aggregation or 'Average',
          'operator': operator or 'GreaterThan',
          'threshold': threshold,
          'dimensions': [],
          'dividePerInstance': False,
      },
      'scaleAction': {
          'direction': direction,
          'type': scale_type or 'ChangeCount',
          'value': str(value) if value else '1',
          'cooldown': cooldown or 'PT5M',
      },
  }


def _Capacity(capacity):
  return {
      'minimum': str(capacity['minimum']),
      'maximum': str(capacity['maximum']),
      'default': str(capacity['default']),
  }


def _FixedDate(fixed_date):
  return {
      'timeZone': fixed_date.get('timeZone') or 'UTC',
      'start': fixed_date.get('start'),
      'end': fixed_date.get('end'),
  }


def _Recurrence(recurrence):
  schedule = recurrence.get('schedule', {})
  return {
      'frequency': recurrence.get('frequency'),
      'schedule': {
          'timeZone': schedule.get('timeZone') or 'UTC',
          'days': schedule.get('days'),
          'hours': schedule.get('hours'),
          'minutes': schedule.get('minutes'),
      },
  }


def CreateScheduleProfile(name=None, capacity=None, fixed_date=None,
                          recurrence=None, rules=None):
  """Returns an autoscale profile active on a fixed date or a recurrence.

  Raises:
    errors.Config.InvalidConfigError: if the name or minimum capacity is
      missing.
  """
  if not name:
    raise errors.Config.InvalidConfigError('Schedule profile requires a name')
  if not capacity or not isinstance(capacity.get('minimum'), int):
    raise errors.Config.InvalidConfigError(
        'Schedule profile requires capacity with minimum value')
  profile = {
      'name': name,
      'capacity': _Capacity(capacity),
      'rules': [CreateMetricScaleRule(**rule) for rule in rules or []],
  }
  if fixed_date:
    profile['fixedDate'] = _FixedDate(fixed_date)
  if recurrence:
    profile['recurrence'] = _Recurrence(recurrence)
  return profile


def CreateAutoscalePolicy(name=None, target_resource_uri=None, profiles=None,
                          enabled=True, notifications=None, tags=None):
  """Returns a Microsoft.Insights/autoscalesettings resource.

  Args:
    name: string. Setting name, also used as properties.name.
    target_resource_uri: string. Resource id of the scaled resource.
    profiles: list of profile dicts, see the module docstring.
    enabled: bool.
    notifications: list of ARM notification dicts, passed through.
    tags: dict of resource tags.

  Raises:
    errors.Config.InvalidConfigError: if the name or target is missing, or
      there are no profiles.
  """
  if not name:
    raise errors.Config.InvalidConfigError('Auto-scale policy requires a name')
  if not target_resource_uri:
    raise errors.Config.InvalidConfigError(
        'Auto-scale policy requires a targetResourceUri')
  if not profiles:
    raise errors.Config.InvalidConfigError(
        'Auto-scale policy requires at least one profile')

  resource = {
      'type': AUTOSCALE_TYPE,
      'apiVersion': API_VERSION,
      'name': name,
      'location': arm_util.DEFAULT_LOCATION,
      'properties': {
          'name': name,
          'enabled': enabled is not False,
          'targetResourceUri': target_resource_uri,
          'profiles': [CreateScheduleProfile(**p) for p in profiles],
      },
  }
  if notifications:
    resource['properties']['notifications'] = copy.deepcopy(notifications)
  if tags:
    resource['tags'] = tags
  return resource


def _CpuRule(operator, threshold, direction):
  return {
      'metric_name': PERCENTAGE_CPU,
      'operator': operator,
      'threshold': threshold,
      'direction': direction,
  }


def CreateCpuScalingPolicy(name=None, target_resource_uri=None,
                           scale_out_threshold=75, scale_in_threshold=25,
                           min_instances=2, max_instances=10,
                           default_instances=2):
  """Returns a single-profile policy scaling by one instance on CPU."""
  return CreateAutoscalePolicy(
      name=name,
      target_resource_uri=target_resource_uri,
      profiles=[{
          'name': 'Default Profile',
          'capacity': {
              'minimum': min_instances,
              'maximum': max_instances,
              'default': default_instances,
          },
          'rules': [
              _CpuRule('GreaterThan', scale_out_threshold, INCREASE),
              _CpuRule('LessThan', scale_in_threshold, DECREASE),
          ],
      }])


def _WeeklyRecurrence(time_zone, days, hours):
  return {
      'frequency': 'Week',
      'schedule': {
          'timeZone': time_zone,
          'days': days,
          'hours': hours,
          'minutes': [0],
      },
  }


def CreateBusinessHoursSchedule(business_hours_capacity, off_hours_capacity,
                                time_zone='UTC', business_days=None,
                                business_hours=(9, 17)):
  """Returns a business hours and an off hours profile.

  Args:
    business_hours_capacity: dict with 'min', 'max' and 'default'.
    off_hours_capacity: dict with 'min', 'max' and 'default'.
    time_zone: string. Windows time zone name of the recurrences.
    business_days: list of day names. Defaults to Monday through Friday.
    business_hours: (start, end) hours. Business hours are [start, end).

  Returns:
    A list of two profile dicts for CreateAutoscalePolicy. The off hours
    profile recurs every day of the week.
  """
  start, end = business_hours or (9, 17)
  time_zone = time_zone or 'UTC'

  def _Profile(profile_name, capacity, days, hours):
    return {
        'name': profile_name,
        'capacity': {
            'minimum': capacity['min'],
            'maximum': capacity['max'],
            'default': capacity['default'],
        },
        'rules': [],
        'recurrence': _WeeklyRecurrence(time_zone, days, hours),
    }

  return [
      _Profile('Business Hours Profile', business_hours_capacity,
               list(business_days or WEEKDAYS), list(range(start, end))),
      _Profile('Off Hours Profile', off_hours_capacity, list(ALL_DAYS),
               list(range(0, start)) + list(range(end, 24))),
  ]
