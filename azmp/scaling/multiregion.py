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
"""Traffic Manager profiles and multi-region deployment and failover plans."""

from azmp import errors

PROFILE_TYPE = 'Microsoft.Network/trafficManagerProfiles'
API_VERSION = '2018-04-01'

PRIORITY = 'Priority'
PERFORMANCE = 'Performance'
WEIGHTED = 'Weighted'
GEOGRAPHIC = 'Geographic'

AZURE_ENDPOINT = 'AzureEndpoint'
EXTERNAL_ENDPOINT = 'ExternalEndpoint'
NESTED_ENDPOINTS = 'NestedEndpoints'

PRIMARY = 'Primary'
SECONDARY = 'Secondary'
TERTIARY = 'Tertiary'


def CreateTrafficManagerEndpoint(name=None,
                                 endpoint_type=AZURE_ENDPOINT,
                                 target_resource_id=None,
                                 target=None,
                                 endpoint_status='Enabled',
                                 priority=1,
                                 weight=1,
                                 location=None,
                                 endpoint_location=None,
                                 geo_mapping=None,
                                 min_child_endpoints=None):
  """Returns an endpoint entry of a Traffic Manager profile.

  Raises:
    errors.Config.InvalidConfigError: if the name is missing, or an Azure
      endpoint has no target resource.
  """
  if not name:
    raise errors.Config.InvalidConfigError(
        'Traffic Manager endpoint requires a name')
  properties = {
      'endpointStatus': endpoint_status or 'Enabled',
      'priority': 1 if priority is None else priority,
      'weight': 1 if weight is None else weight,
  }
  if endpoint_type == AZURE_ENDPOINT:
    if not target_resource_id:
      raise errors.Config.InvalidConfigError(
          'Azure endpoints require a targetResourceId')
    properties['targetResourceId'] = target_resource_id
  elif target:
    properties['target'] = target
  if location or endpoint_location:
    properties['endpointLocation'] = location or endpoint_location
  if geo_mapping:
    properties['geoMapping'] = list(geo_mapping)
  if isinstance(min_child_endpoints, int):
    properties['minChildEndpoints'] = min_child_endpoints
  return {
      'name': name,
      'type': '{}/{}'.format(PROFILE_TYPE, endpoint_type),
      'properties': properties,
  }


def CreateTrafficManagerProfile(name=None,
                                dns_name=None,
                                routing_method=PRIORITY,
                                ttl=30,
                                monitor=None,
                                endpoints=None,
                                traffic_view_enabled=False,
                                profile_status='Enabled',
                                tags=None):
  """Returns a global Microsoft.Network/trafficManagerProfiles resource.

  Args:
    name: string. Profile name.
    dns_name: string. Relative DNS name under trafficmanager.net.
    routing_method: string. Traffic routing method.
    ttl: int. DNS TTL in seconds.
    monitor: dict overriding the endpoint monitor; keys 'protocol', 'port',
      'path', 'intervalInSeconds', 'timeoutInSeconds' and
      'toleratedNumberOfFailures'.
    endpoints: list of keyword argument dicts of CreateTrafficManagerEndpoint.
    traffic_view_enabled: bool.
    profile_status: string. 'Enabled' or 'Disabled'.
    tags: dict of resource tags.

  Raises:
    errors.Config.InvalidConfigError: if the name or DNS name is missing.
  """
  if not name:
    raise errors.Config.InvalidConfigError(
        'Traffic Manager profile requires a name')
  if not dns_name:
    raise errors.Config.InvalidConfigError(
        'Traffic Manager profile requires a dnsName')
  monitor_config = {
      'protocol': 'HTTPS',
      'port': 443,
      'path': '/',
      'intervalInSeconds': 30,
      'timeoutInSeconds': 10,
      'toleratedNumberOfFailures': 3,
  }
  monitor_config.update(monitor or {})
  profile = {
      'type': PROFILE_TYPE,
      'apiVersion': API_VERSION,
      'name': name,
      'location': 'global',
      'properties': {
          'profileStatus': profile_status or 'Enabled',
          'trafficRoutingMethod': routing_method or PRIORITY,
          'trafficViewEnrollmentStatus': (
              'Enabled' if traffic_view_enabled else 'Disabled'),
          'dnsConfig': {
              'relativeName': dns_name,
              'ttl': 30 if ttl is None else ttl,
          },
          'monitorConfig': monitor_config,
          'endpoints': [CreateTrafficManagerEndpoint(**e)
                        for e in endpoints or []],
      },
  }
  if tags:
    profile['tags'] = tags
  return profile


def _RegionEntry(region):
  role = region.get('role')
  baseline = region.get('baseline_capacity')
  if baseline is None:
    baseline = 2
  max_capacity = region.get('max_capacity')
  if max_capacity is None:
    max_capacity = baseline
  failover_priority = region.get('failover_priority')
  if failover_priority is None:
    failover_priority = 1 if role == PRIMARY else 100
  return {
      'region': region.get('region'),
      'role': role,
      'vmssName': region.get('vmss_name'),
      'trafficManagerEndpointName': region.get(
          'traffic_manager_endpoint_name'),
      'baselineCapacity': baseline,
      'maxCapacity': max_capacity,
      'failoverPriority': failover_priority,
  }


def CreateMultiRegionDeploymentPlan(application_name=None,
                                    traffic_manager_profile=None,
                                    regions=None,
                                    replication=None,
                                    monitoring=None):
  """Returns a deployment plan spreading an application across regions.

  Args:
    application_name: string.
    traffic_manager_profile: string. Name of the fronting profile.
    regions: list of dicts with the keys 'region', 'role' ('Primary',
      'Secondary' or 'Tertiary') and optionally 'vmss_name',
      'traffic_manager_endpoint_name', 'baseline_capacity', 'max_capacity'
      and 'failover_priority'.
    replication: dict with 'enabled' and optionally 'recovery_vault_name' and
      'replication_policy_name'.
    monitoring: dict with the optional keys
      'application_insights_resource_id' and 'action_group_ids'.

  Raises:
    errors.Config.InvalidConfigError: if a name is missing, there are fewer
      than two regions, or there is not exactly one primary region.
  """
  if not application_name:
    raise errors.Config.InvalidConfigError(
        'Multi-region deployment plan requires an applicationName')
  if not traffic_manager_profile:
    raise errors.Config.InvalidConfigError(
        'Multi-region deployment plan requires a trafficManagerProfile')
  if not regions or len(regions) < 2:
    raise errors.Config.InvalidConfigError(
        'Multi-region deployment plan requires at least two regions')
  primaries = [r for r in regions if r.get('role') == PRIMARY]
  if len(primaries) != 1:
    raise errors.Config.InvalidConfigError(
        'Multi-region deployment plan must have exactly one primary region')

  replication = replication or {}
  monitoring = monitoring or {}
  return {
      'applicationName': application_name,
      'trafficManagerProfile': traffic_manager_profile,
      'regions': [_RegionEntry(r) for r in regions],
      'replication': {
          'enabled': bool(replication.get('enabled')),
          'recoveryVaultName': replication.get('recovery_vault_name'),
          'replicationPolicyName': replication.get('replication_policy_name'),
      },
      'monitoring': {
          'applicationInsightsResourceId': monitoring.get(
              'application_insights_resource_id'),
          'actionGroupIds': list(monitoring.get('action_group_ids') or []),
      },
  }


def CreateFailoverPlan(name=None, primary_region=None, secondary_region=None,
                       steps=None, detection_threshold_minutes=5):
  """Returns an ordered failover runbook between two regions.

  Each step is a dict with 'name', 'description' and optionally
  'automation' and 'validation'.
  """
  if not name:
    raise errors.Config.InvalidConfigError('Failover plan requires a name')
  if not primary_region or not secondary_region:
    raise errors.Config.InvalidConfigError(
        'Failover plan requires primaryRegion and secondaryRegion')
  if not steps:
    raise errors.Config.InvalidConfigError(
        'Failover plan requires one or more steps')
  return {
      'name': name,
      'detectionThresholdMinutes': (
          5 if detection_threshold_minutes is None
          else detection_threshold_minutes),
      'primaryRegion': primary_region,
      'secondaryRegion': secondary_region,
      'steps': [{
          'name': step.get('name'),
          'description': step.get('description'),
          'automation': step.get('automation'),
          'validation': list(step.get('validation') or []),
      } for step in steps],
  }
