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
"""Tests for azmp.scaling.load_balancing."""

import unittest

from absl.testing import parameterized

from azmp import errors
from azmp.scaling import load_balancing

_SUBNET_ID = ("[resourceId('Microsoft.Network/virtualNetworks/subnets', "
              "'vnet', 'default')]")
_PIP_ID = "[resourceId('Microsoft.Network/publicIPAddresses', 'web-pip')]"


def _LbArgs():
  return {
      'name': 'web-lb',
      'frontend_ip_configurations': [{'name': 'fe', 'public_ip_address_id':
                                          _PIP_ID}],
      'backend_address_pools': [{'name': 'pool'}],
      'load_balancing_rules': [{
          'name': 'http',
          'frontend_port': 80,
          'backend_port': 80,
          'frontend_ip_config_name': 'fe',
          'backend_pool_name': 'pool',
          'probe_name': 'http-probe',
      }],
      'probes': [{'name': 'http-probe', 'protocol': 'Http', 'port': 80,
                  'request_path': '/health'}],
  }


class LoadBalancerTestCase(parameterized.TestCase):

  def testFrontends(self):
    self.assertEqual({'name': 'fe', 'properties': {
        'publicIPAddress': {'id': _PIP_ID}}},
                     load_balancing.CreateFrontendIpConfig('fe', _PIP_ID))
    private = load_balancing.CreateFrontendIpConfig(
        'fe', subnet_id=_SUBNET_ID, private_ip_address='10.0.0.4',
        zones=[1, 2])
    self.assertEqual({'subnet': {'id': _SUBNET_ID},
                      'privateIPAddress': '10.0.0.4',
                      'privateIPAllocationMethod': 'Static'},
                     private['properties'])
    self.assertEqual(['1', '2'], private['zones'])
    dynamic = load_balancing.CreateFrontendIpConfig('fe', subnet_id=_SUBNET_ID)
    self.assertEqual('Dynamic',
                     dynamic['properties']['privateIPAllocationMethod'])

  def testProbe(self):
    probe = load_balancing.CreateProbeConfig('p', 'Tcp', 22,
                                             request_path='/ignored')
    self.assertEqual({'protocol': 'TCP', 'port': 22, 'intervalInSeconds': 30,
                      'numberOfProbes': 2}, probe['properties'])

  def testLoadBalancer(self):
    lb = load_balancing.CreateLoadBalancer(
        inbound_nat_pools=[{
            'name': 'ssh',
            'protocol': 'Tcp',
            'frontend_port_range_start': 50000,
            'frontend_port_range_end': 50119,
            'backend_port': 22,
            'frontend_ip_config_name': 'fe',
        }], **_LbArgs())
    self.assertEqual({'name': 'Standard'}, lb['sku'])
    properties = lb['properties']
    (rule,) = properties['loadBalancingRules']
    self.assertEqual({
        'protocol': 'TCP',
        'frontendPort': 80,
        'backendPort': 80,
        'idleTimeoutInMinutes': 4,
        'enableFloatingIP': False,
        'loadDistribution': 'Default',
        'frontendIPConfiguration': {
            'id': "[concat(resourceId('Microsoft.Network/loadBalancers', "
                  "parameters('loadBalancerName')), "
                  "'/frontendIPConfigurations/fe')]"
        },
        'backendAddressPool': {
            'id': "[concat(resourceId('Microsoft.Network/loadBalancers', "
                  "parameters('loadBalancerName')), '/backendAddressPools/"
                  "pool')]"
        },
        'probe': {
            'id': "[concat(resourceId('Microsoft.Network/loadBalancers', "
                  "parameters('loadBalancerName')), '/probes/http-probe')]"
        },
    }, rule['properties'])
    self.assertEqual('/health',
                     properties['probes'][0]['properties']['requestPath'])
    self.assertEqual(
        "[concat(resourceId('Microsoft.Network/loadBalancers', 'web-lb'), "
        "'/frontendIPConfigurations/fe')]",
        properties['inboundNatPools'][0]['properties'][
            'frontendIPConfiguration']['id'])

  def testBackendPoolMembers(self):
    pool = load_balancing.CreateBackendPoolConfig(
        'pool', vmss_resource_id='vmss-id', nic_resource_ids=['nic1'])
    self.assertEqual({'virtualMachineScaleSet': {'id': 'vmss-id'},
                      'backendAddressPoolAddresses': [{'id': 'nic1'}]},
                     pool['properties'])

  @parameterized.parameters(
      ('name', 'requires a name'),
      ('frontend_ip_configurations', 'frontendIPConfiguration'),
      ('backend_address_pools', 'backendAddressPool'),
      ('load_balancing_rules', 'loadBalancingRule'))
  def testLoadBalancerRequiredFields(self, missing, message):
    args = _LbArgs()
    del args[missing]
    with self.assertRaisesRegex(errors.Config.InvalidConfigError, message):
      load_balancing.CreateLoadBalancer(**args)

  @parameterized.parameters(('Web', 'Http', '/health'),
                            ('Api', 'Https', '/healthz'),
                            ('Batch', 'Tcp', None))
  def testRecommendHealthProbe(self, workload, protocol, path):
    recommendation = load_balancing.RecommendHealthProbe(workload)
    self.assertEqual(protocol, recommendation['protocol'])
    self.assertEqual(path, recommendation.get('requestPath'))


def _AppGwArgs():
  return {
      'name': 'web-appgw',
      'gateway_ip_configurations': [{'name': 'gw', 'subnet_id': _SUBNET_ID}],
      'frontend_ip_configurations': [{'name': 'fe', 'public_ip_address_id':
                                          _PIP_ID}],
      'frontend_ports': [{'name': 'port80', 'port': 80}],
      'backend_address_pools': [{'name': 'pool', 'addresses': [
          {'ipAddress': '10.0.1.4'}, {'fqdn': 'web.contoso.com'}]}],
      'http_settings': [{'name': 'settings', 'port': 80,
                         'probe_name': 'health'}],
      'listeners': [{'name': 'listener', 'frontend_ip_config_name': 'fe',
                     'frontend_port_name': 'port80'}],
      'request_routing_rules': [{'name': 'rule', 'listener_name': 'listener',
                                 'backend_pool_name': 'pool',
                                 'backend_http_settings_name': 'settings',
                                 'priority': 100}],
      'probes': [{'name': 'health', 'path': '/health'}],
  }


class ApplicationGatewayTestCase(parameterized.TestCase):

  def testApplicationGateway(self):
    gateway = load_balancing.CreateApplicationGateway(
        waf_configuration={'enabled': True, 'mode': 'Prevention'},
        **_AppGwArgs())
    properties = gateway['properties']
    self.assertEqual({'name': 'Standard_v2', 'tier': 'Standard_v2',
                      'capacity': 2}, properties['sku'])
    self.assertTrue(properties['enableHttp2'])
    self.assertEqual(
        [{'ipAddress': '10.0.1.4'}, {'fqdn': 'web.contoso.com'}],
        properties['backendAddressPools'][0]['properties'][
            'backendAddresses'])
    self.assertEqual(
        "[concat(resourceId('Microsoft.Network/applicationGateways', "
        "parameters('applicationGatewayName')), '/probes/health')]",
        properties['backendHttpSettingsCollection'][0]['properties'][
            'probe']['id'])
    rule = properties['requestRoutingRules'][0]['properties']
    self.assertEqual(100, rule['priority'])
    self.assertEqual('Basic', rule['ruleType'])
    self.assertNotIn('urlPathMap', rule)
    self.assertEqual({'enabled': True, 'firewallMode': 'Prevention',
                      'ruleSetType': 'OWASP', 'ruleSetVersion': '3.2'},
                     properties['webApplicationFirewallConfiguration'])

  def testListenerWithCertificate(self):
    listener = load_balancing.CreateAppGatewayListener(
        'https', 'fe', 'port443', 'Https', ssl_certificate_name='cert',
        host_name='www.contoso.com')
    self.assertEqual('www.contoso.com', listener['properties']['hostName'])
    self.assertIn("'/sslCertificates/cert'",
                  listener['properties']['sslCertificate']['id'])

  @parameterized.parameters(
      ('gateway_ip_configurations', 'gateway IP configuration'),
      ('frontend_ports', 'frontend port'),
      ('listeners', 'listener'),
      ('request_routing_rules', 'routing rule'))
  def testRequiredCollections(self, missing, label):
    args = _AppGwArgs()
    args[missing] = []
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'at least one ' + label):
      load_balancing.CreateApplicationGateway(**args)

  def testIpConfigRequiresSubnet(self):
    with self.assertRaises(errors.Config.InvalidConfigError):
      load_balancing.CreateAppGatewayIpConfig('gw')

  @parameterized.parameters(('missionCritical', 'WAF_v2'),
                            ('api', 'Standard_v2'),
                            ('batch', 'Standard_v2'))
  def testRecommendSku(self, workload, sku):
    recommendation = load_balancing.RecommendAppGatewaySku(workload)
    self.assertEqual(sku, recommendation['sku'])
    self.assertEqual(sku, recommendation['tier'])


if __name__ == '__main__':
  unittest.main()
