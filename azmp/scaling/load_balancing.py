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
"""Load balancer and application gateway resources for scale sets.

Child configurations (frontends, pools, probes, rules, listeners...) are
passed to the resource builders as lists of keyword argument dicts of the
matching Create* function.
"""

from azmp import arm_util
from azmp import errors

LB_TYPE = 'Microsoft.Network/loadBalancers'
APPGW_TYPE = 'Microsoft.Network/applicationGateways'
API_VERSION = '2023-09-01'

WEB = 'Web'
API = 'Api'
TCP_SERVICE = 'TcpService'

_LB_PARAM = "parameters('loadBalancerName')"
_APPGW_PARAM = "parameters('applicationGatewayName')"


def _ChildId(parent_type, parent_name_expr, collection, name):
  return "[concat(resourceId('{}', {}), '/{}/{}')]".format(
      parent_type, parent_name_expr, collection, name)


def _LbChild(collection, name):
  return {'id': _ChildId(LB_TYPE, _LB_PARAM, collection, name)}


def _AppGwChild(collection, name):
  return {'id': _ChildId(APPGW_TYPE, _APPGW_PARAM, collection, name)}


def _PrivateAddressing(properties, subnet_id, private_ip_address,
                       private_ip_allocation_method):
  if not subnet_id:
    return
  properties['subnet'] = {'id': subnet_id}
  if private_ip_address:
    properties['privateIPAddress'] = private_ip_address
    properties['privateIPAllocationMethod'] = (
        private_ip_allocation_method or 'Static')
  else:
    properties['privateIPAllocationMethod'] = (
        private_ip_allocation_method or 'Dynamic')


def CreateFrontendIpConfig(name=None, public_ip_address_id=None,
                           subnet_id=None, private_ip_address=None,
                           private_ip_allocation_method=None, zones=None):
  """Returns a public or private frontend IP configuration.

  A private frontend is Static when an address is given and Dynamic
  otherwise.
  """
  properties = {}
  if public_ip_address_id:
    properties['publicIPAddress'] = {'id': public_ip_address_id}
  _PrivateAddressing(properties, subnet_id, private_ip_address,
                     private_ip_allocation_method)
  frontend = {'name': name, 'properties': properties}
  if zones:
    frontend['zones'] = [str(z) for z in zones]
  return frontend


def CreateBackendPoolConfig(name=None, vmss_resource_id=None,
                            nic_resource_ids=None):
  if not name:
    raise errors.Config.InvalidConfigError('Backend pool requires a name')
  properties = {}
  if vmss_resource_id:
    properties['virtualMachineScaleSet'] = {'id': vmss_resource_id}
  if nic_resource_ids:
    properties['backendAddressPoolAddresses'] = [
        {'id': nic_id} for nic_id in nic_resource_ids]
  return {'name': name, 'properties': properties}


def CreateProbeConfig(name=None, protocol='Tcp', port=None, request_path=None,
                      interval_in_seconds=30, number_of_probes=2):
  """Returns a health probe. The request path only applies to HTTP(S)."""
  if not name:
    raise errors.Config.InvalidConfigError('Health probe requires a name')
  probe = {
      'name': name,
      'properties': {
          'protocol': protocol.upper(),
          'port': port,
          'intervalInSeconds': interval_in_seconds or 30,
          'numberOfProbes': number_of_probes or 2,
      },
  }
  if protocol in ('Http', 'Https') and request_path:
    probe['properties']['requestPath'] = request_path
  return probe


def CreateLoadBalancingRule(name=None, protocol='Tcp', frontend_port=None,
                            backend_port=None, frontend_ip_config_name=None,
                            backend_pool_name=None, probe_name=None,
                            idle_timeout_in_minutes=4,
                            enable_floating_ip=False,
                            load_distribution='Default'):
  """Returns a rule of the load balancer named by the loadBalancerName param.

  Raises:
    errors.Config.InvalidConfigError: if the name is missing.
  """
  if not name:
    raise errors.Config.InvalidConfigError(
        'Load balancing rule requires a name')
  properties = {
      'protocol': protocol.upper(),
      'frontendPort': frontend_port,
      'backendPort': backend_port,
      'idleTimeoutInMinutes': (4 if idle_timeout_in_minutes is None
                               else idle_timeout_in_minutes),
      'enableFloatingIP': bool(enable_floating_ip),
      'loadDistribution': load_distribution or 'Default',
      'frontendIPConfiguration': _LbChild('frontendIPConfigurations',
                                          frontend_ip_config_name),
      'backendAddressPool': _LbChild('backendAddressPools',
                                     backend_pool_name),
  }
  if probe_name:
    properties['probe'] = _LbChild('probes', probe_name)
  return {'name': name, 'properties': properties}


def _InboundNatPool(lb_name, pool):
  frontend_id = (
      "[concat(resourceId('{}', '{}'), '/frontendIPConfigurations/{}')]"
      .format(LB_TYPE, lb_name, pool['frontend_ip_config_name']))
  return {
      'name': pool['name'],
      'properties': {
          'protocol': pool['protocol'],
          'frontendPortRangeStart': pool['frontend_port_range_start'],
          'frontendPortRangeEnd': pool['frontend_port_range_end'],
          'backendPort': pool['backend_port'],
          'frontendIPConfiguration': {'id': frontend_id},
      },
  }


def CreateLoadBalancer(name=None,
                       frontend_ip_configurations=None,
                       backend_address_pools=None,
                       load_balancing_rules=None,
                       probes=None,
                       inbound_nat_pools=None,
                       sku='Standard',
                       location=None,
                       tags=None):
  """Returns a Microsoft.Network/loadBalancers resource.

  Args:
    name: string. Load balancer name.
    frontend_ip_configurations: list of CreateFrontendIpConfig kwargs.
    backend_address_pools: list of CreateBackendPoolConfig kwargs.
    load_balancing_rules: list of CreateLoadBalancingRule kwargs.
    probes: list of CreateProbeConfig kwargs.
    inbound_nat_pools: list of dicts with 'name', 'protocol',
      'frontend_port_range_start', 'frontend_port_range_end', 'backend_port'
      and 'frontend_ip_config_name'.
    sku: string. 'Basic', 'Standard' or 'Gateway'.
    location: string. Defaults to the resource group location.
    tags: dict of resource tags.

  Raises:
    errors.Config.InvalidConfigError: if the name is missing, or any of the
      frontends, pools or rules is empty.
  """
  if not name:
    raise errors.Config.InvalidConfigError('Load Balancer requires a name')
  if not frontend_ip_configurations:
    raise errors.Config.InvalidConfigError(
        'Load Balancer requires at least one frontendIPConfiguration')
  if not backend_address_pools:
    raise errors.Config.InvalidConfigError(
        'Load Balancer requires at least one backendAddressPool')
  if not load_balancing_rules:
    raise errors.Config.InvalidConfigError(
        'Load Balancer requires at least one loadBalancingRule')

  resource = {
      'type': LB_TYPE,
      'apiVersion': API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'sku': {'name': sku or 'Standard'},
      'properties': {
          'frontendIPConfigurations': [
              CreateFrontendIpConfig(**f) for f in frontend_ip_configurations],
          'backendAddressPools': [
              CreateBackendPoolConfig(**p) for p in backend_address_pools],
          'loadBalancingRules': [
              CreateLoadBalancingRule(**r) for r in load_balancing_rules],
          'probes': [CreateProbeConfig(**p) for p in probes or []],
          'inboundNatPools': [
              _InboundNatPool(name, p) for p in inbound_nat_pools or []],
      },
  }
  if tags:
    resource['tags'] = tags
  return resource


_PROBE_RECOMMENDATIONS = {
    WEB: {
        'protocol': 'Http',
        'port': 80,
        'requestPath': '/health',
        'intervalInSeconds': 15,
        'numberOfProbes': 2,
        'rationale': ('Use HTTP probe for web workloads with application '
                      'health endpoint'),
    },
    API: {
        'protocol': 'Https',
        'port': 443,
        'requestPath': '/healthz',
        'intervalInSeconds': 10,
        'numberOfProbes': 2,
        'rationale': ('HTTPS probe with secure health endpoint ensures API '
                      'availability monitoring'),
    },
    TCP_SERVICE: {
        'protocol': 'Tcp',
        'port': 3389,
        'intervalInSeconds': 15,
        'numberOfProbes': 3,
        'rationale': ('TCP probe verifies port availability for non-HTTP '
                      'services; adjust port as needed'),
    },
}


def RecommendHealthProbe(workload):
  """Returns probe settings for 'Web', 'Api' or anything else as TCP."""
  if workload not in _PROBE_RECOMMENDATIONS:
    workload = TCP_SERVICE
  recommendation = {'workload': workload}
  recommendation.update(_PROBE_RECOMMENDATIONS[workload])
  return recommendation


def CreateAppGatewayIpConfig(name=None, subnet_id=None):
  if not name or not subnet_id:
    raise errors.Config.InvalidConfigError(
        'Application Gateway IP configuration requires name and subnetId')
  return {'name': name, 'properties': {'subnet': {'id': subnet_id}}}


def CreateAppGatewayFrontendConfig(name=None, public_ip_address_id=None,
                                   subnet_id=None, private_ip_address=None,
                                   private_ip_allocation_method=None):
  properties = {}
  if public_ip_address_id:
    properties['publicIPAddress'] = {'id': public_ip_address_id}
  _PrivateAddressing(properties, subnet_id, private_ip_address,
                     private_ip_allocation_method)
  return {'name': name, 'properties': properties}


def CreateAppGatewayFrontendPort(name=None, port=None):
  return {'name': name, 'properties': {'port': port}}


def CreateAppGatewayBackendPool(name=None, addresses=None):
  """Returns a backend pool; each address is a dict of 'ipAddress'/'fqdn'."""
  backend_addresses = [
      arm_util.Compact({'ipAddress': a.get('ipAddress'), 'fqdn': a.get('fqdn')})
      for a in addresses or []
  ]
  return {'name': name, 'properties': {'backendAddresses': backend_addresses}}


def CreateAppGatewayHttpSetting(name=None, port=None, protocol='Http',
                                cookie_based_affinity='Disabled',
                                request_timeout=30, probe_name=None,
                                pick_host_name_from_backend_address=False):
  properties = {
      'port': port,
      'protocol': protocol,
      'cookieBasedAffinity': cookie_based_affinity or 'Disabled',
      'requestTimeout': request_timeout or 30,
      'pickHostNameFromBackendAddress': bool(
          pick_host_name_from_backend_address),
  }
  if probe_name:
    properties['probe'] = _AppGwChild('probes', probe_name)
  return {'name': name, 'properties': properties}


def CreateAppGatewayProbe(name=None, protocol='Http', path='/', interval=30,
                          timeout=30, unhealthy_threshold=3,
                          pick_host_name_from_backend_http_settings=False):
  return {
      'name': name,
      'properties': {
          'protocol': protocol,
          'path': path,
          'interval': interval or 30,
          'timeout': timeout or 30,
          'unhealthyThreshold': unhealthy_threshold or 3,
          'pickHostNameFromBackendHttpSettings': bool(
              pick_host_name_from_backend_http_settings),
      },
  }


def CreateAppGatewayListener(name=None, frontend_ip_config_name=None,
                             frontend_port_name=None, protocol='Http',
                             ssl_certificate_name=None, host_name=None):
  properties = {
      'protocol': protocol,
      'frontendIPConfiguration': _AppGwChild('frontendIPConfigurations',
                                             frontend_ip_config_name),
      'frontendPort': _AppGwChild('frontendPorts', frontend_port_name),
  }
  if ssl_certificate_name:
    properties['sslCertificate'] = _AppGwChild('sslCertificates',
                                               ssl_certificate_name)
  if host_name:
    properties['hostName'] = host_name
  return {'name': name, 'properties': properties}


def CreateAppGatewayRoutingRule(name=None, listener_name=None,
                                backend_pool_name=None,
                                backend_http_settings_name=None,
                                rule_type='Basic', priority=None,
                                url_path_map_name=None):
  properties = {
      'ruleType': rule_type or 'Basic',
      'httpListener': _AppGwChild('httpListeners', listener_name),
      'backendAddressPool': _AppGwChild('backendAddressPools',
                                        backend_pool_name),
      'backendHttpSettings': _AppGwChild('backendHttpSettingsCollection',
                                         backend_http_settings_name),
  }
  if priority is not None:
    properties['priority'] = priority
  if url_path_map_name:
    properties['urlPathMap'] = _AppGwChild('urlPathMaps', url_path_map_name)
  return {'name': name, 'properties': properties}


_APPGW_REQUIRED = (
    ('gateway_ip_configurations', 'gateway IP configuration'),
    ('frontend_ip_configurations', 'frontend IP configuration'),
    ('frontend_ports', 'frontend port'),
    ('backend_address_pools', 'backend pool'),
    ('http_settings', 'HTTP setting'),
    ('listeners', 'listener'),
    ('request_routing_rules', 'routing rule'),
)


def CreateApplicationGateway(name=None,
                             gateway_ip_configurations=None,
                             frontend_ip_configurations=None,
                             frontend_ports=None,
                             backend_address_pools=None,
                             http_settings=None,
                             listeners=None,
                             request_routing_rules=None,
                             probes=None,
                             sku=None,
                             enable_http2=True,
                             waf_configuration=None,
                             location=None,
                             tags=None):
  """Returns a Microsoft.Network/applicationGateways resource.

  Each collection argument is a list of keyword argument dicts of the
  matching CreateAppGateway* function. 'sku' is a dict with 'name', 'tier'
  and 'capacity'; 'waf_configuration' a dict with 'enabled', 'mode',
  'rule_set_type' and 'rule_set_version'.

  Raises:
    errors.Config.InvalidConfigError: if the name or any required
      collection is missing.
  """
  if not name:
    raise errors.Config.InvalidConfigError(
        'Application Gateway requires a name')
  args = locals()
  for arg, label in _APPGW_REQUIRED:
    if not args[arg]:
      raise errors.Config.InvalidConfigError(
          'Application Gateway requires at least one {}'.format(label))

  sku = sku or {}
  sku_name = sku.get('name') or 'Standard_v2'
  resource = {
      'type': APPGW_TYPE,
      'apiVersion': API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'properties': {
          'sku': {
              'name': sku_name,
              'tier': sku.get('tier') or sku_name,
              'capacity': sku.get('capacity') or 2,
          },
          'enableHttp2': enable_http2 is not False,
          'gatewayIPConfigurations': [
              CreateAppGatewayIpConfig(**c) for c in gateway_ip_configurations],
          'frontendIPConfigurations': [
              CreateAppGatewayFrontendConfig(**c)
              for c in frontend_ip_configurations],
          'frontendPorts': [
              CreateAppGatewayFrontendPort(**p) for p in frontend_ports],
          'backendAddressPools': [
              CreateAppGatewayBackendPool(**p) for p in backend_address_pools],
          'backendHttpSettingsCollection': [
              CreateAppGatewayHttpSetting(**s) for s in http_settings],
          'httpListeners': [
              CreateAppGatewayListener(**listener) for listener in listeners],
          'requestRoutingRules': [
              CreateAppGatewayRoutingRule(**r) for r in request_routing_rules],
          'probes': [CreateAppGatewayProbe(**p) for p in probes or []],
      },
  }
  if waf_configuration:
    resource['properties']['webApplicationFirewallConfiguration'] = {
        'enabled': bool(waf_configuration.get('enabled')),
        'firewallMode': waf_configuration.get('mode'),
        'ruleSetType': waf_configuration.get('rule_set_type') or 'OWASP',
        'ruleSetVersion': waf_configuration.get('rule_set_version') or '3.2',
    }
  if tags:
    resource['tags'] = tags
  return resource


_APPGW_SKU_RECOMMENDATIONS = {
    'missionCritical': ('WAF_v2', 'Mission-critical workloads benefit from '
                        'WAF_v2 for advanced security and autoscaling.'),
    'api': ('Standard_v2', 'Standard_v2 provides autoscaling and zone '
            'redundancy ideal for API workloads.'),
    'web': ('Standard_v2', 'Standard_v2 balances cost and performance for '
            'typical web applications.'),
}


def RecommendAppGatewaySku(workload):
  sku, rationale = _APPGW_SKU_RECOMMENDATIONS.get(
      workload, _APPGW_SKU_RECOMMENDATIONS['web'])
  return {'sku': sku, 'tier': sku, 'rationale': rationale}
