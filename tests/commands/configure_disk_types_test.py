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
"""Tests for azmp.commands.configure_disk_types."""

import json
import os

from absl import flags
from absl.testing import absltest

from azmp import errors
from azmp.azure import disk_types
from azmp.commands import configure_disk_types
from tests import azmp_common_test_case

FLAGS = flags.FLAGS

_DISK_CONFIG = {
    'osDiskType': 'Premium_LRS',
    'osDiskSizeGB': 256,
    'dataDisks': [{
        'name': 'logs',
        'sizeGB': 64,
        'storageAccountType': 'Premium_LRS',
        'caching': 'ReadOnly',
    }],
}


class EstimateCostsTestCase(absltest.TestCase):

  def testOsDiskDefaultsTo128Gb(self):
    costs = configure_disk_types.EstimateCosts(
        disk_types.CreateDiskConfiguration(disk_types.STANDARD_HDD))
    self.assertEqual(128, costs['osDisk']['sizeGB'])
    self.assertAlmostEqual(5.76, costs['osDisk']['monthlyCost'])
    self.assertIsNone(costs['dataDisks'])
    self.assertAlmostEqual(5.76 * 12, costs['total']['annualCost'])

  def testDataDisks(self):
    costs = configure_disk_types.EstimateCosts(
        disk_types.CreateDiskConfiguration(
            disk_types.PREMIUM_SSD, os_disk_size=64,
            data_disk_type=disk_types.STANDARD_SSD, data_disk_count=2,
            data_disk_size=256))
    self.assertEqual(2, costs['dataDisks']['count'])
    self.assertEqual(512, costs['dataDisks']['totalSizeGB'])
    self.assertAlmostEqual(38.4, costs['dataDisks']['monthlyCost'])
    self.assertAlmostEqual(8.64 + 38.4, costs['total']['monthlyCost'])


class LoadDiskConfigurationTestCase(azmp_common_test_case.AzmpCommonTestCase):

  def testJson(self):
    config = configure_disk_types.LoadDiskConfiguration(
        self.WriteJson(_DISK_CONFIG))
    self.assertEqual(disk_types.PREMIUM_SSD, config.os_disk_type)
    self.assertEqual(256, config.os_disk_size_gb)
    (disk,) = config.data_disks
    self.assertEqual(disk_types.DataDisk(
        name='logs', size_gb=64, storage_type=disk_types.PREMIUM_SSD,
        caching=disk_types.READ_ONLY, lun=0), disk)

  def testYaml(self):
    path = self.create_tempfile(
        'disks.yaml', 'osDiskType: StandardSSD_LRS\nenableUltraSSD: true\n')
    config = configure_disk_types.LoadDiskConfiguration(path.full_path)
    self.assertEqual(disk_types.STANDARD_SSD, config.os_disk_type)
    self.assertTrue(config.enable_ultra_ssd)
    self.assertEqual([], config.data_disks)

  def testOsDiskTypeRequired(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'osDiskType is required'):
      configure_disk_types.LoadDiskConfiguration(
          self.WriteJson({'osDiskSizeGB': 128}))

  def testUnknownKeys(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError, 'colour'):
      configure_disk_types.LoadDiskConfiguration(
          self.WriteJson({'osDiskType': 'Premium_LRS', 'colour': 'blue'}))

  def testInvalidDataDiskType(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                'Invalid dataDiskType Fast_LRS'):
      configure_disk_types.LoadDiskConfiguration(
          self.WriteJson({'osDiskType': 'Premium_LRS',
                          'dataDiskType': 'Fast_LRS'}))

  def testIncompleteDataDisk(self):
    with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                r'dataDisks\[0\]'):
      configure_disk_types.LoadDiskConfiguration(
          self.WriteJson({'osDiskType': 'Premium_LRS',
                          'dataDisks': [{'name': 'data'}]}))

  def testMissingFile(self):
    with self.assertRaises(errors.Config.InvalidConfigError):
      configure_disk_types.LoadDiskConfiguration('/nonexistent/disks.json')


class ConfigureDiskTypesTestCase(azmp_common_test_case.AzmpCommonTestCase):

  def testListDiskTypes(self):
    FLAGS.list_disk_types = True
    with self.CaptureStdout() as stdout:
      self.assertEqual(0, configure_disk_types.Run([]))
    output = stdout.getvalue()
    self.assertIn('=== Azure Managed Disk Types ===', output)
    self.assertIn('High Availability:', output)
    self.assertIn('Premium SSD (Premium_LRS)', output)
    self.assertIn('Supported Caching: None, ReadOnly, ReadWrite', output)

  def testListTiers(self):
    FLAGS.list_tiers = True
    with self.CaptureStdout() as stdout:
      self.assertEqual(0, configure_disk_types.Run([]))
    self.assertIn('P80  | 16385-32767 GB       | 20,000   | 900 MB/s',
                  stdout.getvalue())

  def testOsDiskTypeRequired(self):
    with self.CaptureStdout() as stdout:
      with self.assertLogs(level='ERROR') as logs:
        self.assertEqual(1, configure_disk_types.Run([]))
    self.assertEqual('', stdout.getvalue())
    self.assertIn('--os_disk_type is required', logs.output[0])

  def testInvalidOsDiskTypeFlag(self):
    with self.assertRaises(flags.IllegalFlagValueError):
      FLAGS['os_disk_type'].parse('Fast_LRS')

  def testTextOutput(self):
    FLAGS.os_disk_type = disk_types.PREMIUM_SSD
    FLAGS.os_disk_size = 128
    FLAGS.performance_tier = 'P20'
    FLAGS.vm_size = 'Standard_DS2_v2'
    with self.CaptureStdout() as stdout:
      self.assertEqual(0, configure_disk_types.Run([]))
    output = stdout.getvalue()
    self.assertIn('Type: Premium SSD (Premium_LRS)', output)
    self.assertIn('Estimated Monthly Cost: $17.28', output)
    self.assertIn('Caching: ReadWrite', output)
    self.assertIn('Performance Tier: P20', output)
    self.assertIn('IOPS: 2,300', output)
    self.assertIn('Performance tier P20 is not optimal for disk size 128 GB. '
                  'Recommended: P10', output)
    self.assertIn('Status: ✅ COMPLIANT', output)

  def testPremiumOnNonPremiumVm(self):
    FLAGS.os_disk_type = disk_types.PREMIUM_SSD
    FLAGS.vm_size = 'Standard_D2_v3'
    with self.CaptureStdout() as stdout:
      self.assertEqual(1, configure_disk_types.Run([]))
    output = stdout.getvalue()
    self.assertIn('❌ Validation Errors:', output)
    self.assertIn('  - OS disk type Premium_LRS requires a premium-capable VM '
                  'size', output)

  def testJsonOutput(self):
    FLAGS.format = 'json'
    FLAGS.os_disk_type = disk_types.STANDARD_HDD
    FLAGS['data_disk_count'].parse('2')
    FLAGS['data_disk_size'].parse('256')
    with self.CaptureStdout() as stdout:
      self.assertEqual(0, configure_disk_types.Run([]))
    result = json.loads(stdout.getvalue())
    disks = result['configuration']['data_disks']
    self.assertEqual(['datadisk0', 'datadisk1'], [d['name'] for d in disks])
    self.assertEqual([256, 256], [d['size_gb'] for d in disks])
    self.assertEqual([disk_types.STANDARD_SSD] * 2,
                     [d['storage_type'] for d in disks])
    self.assertTrue(result['validation']['isValid'])
    self.assertFalse(result['compliance']['compliant'])
    self.assertEqual(512, result['estimatedCosts']['dataDisks']['totalSizeGB'])

  def testDataDiskFlagsOnlyWhenGiven(self):
    FLAGS.format = 'json'
    FLAGS.os_disk_type = disk_types.STANDARD_SSD
    with self.CaptureStdout() as stdout:
      self.assertEqual(0, configure_disk_types.Run([]))
    configuration = json.loads(stdout.getvalue())['configuration']
    self.assertEqual([], configuration['data_disks'])
    self.assertIsNone(configuration['data_disk_type'])

  def testDataDiskTypeAlias(self):
    FLAGS.format = 'json'
    FLAGS.os_disk_type = disk_types.PREMIUM_SSD
    FLAGS['data_disk_type'].parse('PremiumSSD')
    FLAGS['data_disk_count'].parse('1')
    with self.CaptureStdout() as stdout:
      self.assertEqual(0, configure_disk_types.Run([]))
    (disk,) = json.loads(stdout.getvalue())['configuration']['data_disks']
    self.assertEqual(disk_types.PREMIUM_SSD, disk['storage_type'])
    self.assertEqual(disk_types.READ_ONLY, disk['caching'])

  def testTemplateFormat(self):
    FLAGS.format = 'template'
    FLAGS.os_disk_type = disk_types.PREMIUM_SSD
    FLAGS.os_disk_size = 512
    with self.CaptureStdout() as stdout:
      self.assertEqual(0, configure_disk_types.Run([]))
    template = json.loads(stdout.getvalue())
    self.assertEqual(['parameters', 'storageProfile', 'variables'],
                     sorted(template))
    self.assertEqual('P30', template['variables']['osDiskPerformanceTier'])

  def testTemplateOfInvalidConfiguration(self):
    FLAGS.format = 'template'
    FLAGS.os_disk_type = disk_types.ULTRA_SSD
    FLAGS.os_disk_caching = disk_types.READ_WRITE
    with self.CaptureStdout():
      with self.assertRaisesRegex(errors.Config.InvalidConfigError,
                                  'Caching ReadWrite not supported'):
        configure_disk_types.Run([])

  def testExportTemplate(self):
    FLAGS.os_disk_type = disk_types.ULTRA_SSD
    FLAGS.enable_ultra_ssd = True
    FLAGS.output = os.path.join(self.create_tempdir().full_path,
                                'disks.json')
    with self.CaptureStdout() as stdout:
      self.assertEqual(0, configure_disk_types.Run([]))
    self.assertIn('✅ ARM template exported to', stdout.getvalue())
    with open(FLAGS.output, encoding='utf-8') as fp:
      template = json.load(fp)
    self.assertIn('vmName', template['parameters'])
    self.assertIn('osDiskType', template['parameters'])
    (vm,) = template['resources']
    self.assertEqual({'ultraSSDEnabled': True},
                     vm['properties']['additionalCapabilities'])
    self.assertEqual("[parameters('osDiskType')]",
                     vm['properties']['storageProfile']['osDisk'][
                         'managedDisk']['storageAccountType'])

  def testDiskConfigValidateOnly(self):
    FLAGS.disk_config = self.WriteJson(_DISK_CONFIG, 'disks.json')
    FLAGS.validate_only = True
    with self.CaptureStdout() as stdout:
      self.assertEqual(0, configure_disk_types.Run([]))
    self.assertIn('✅ Configuration is valid', stdout.getvalue())

  def testInvalidValidateOnly(self):
    FLAGS.os_disk_type = disk_types.PREMIUM_SSD
    FLAGS.vm_size = 'Standard_D2_v3'
    FLAGS.validate_only = True
    with self.CaptureStdout() as stdout:
      self.assertEqual(0, configure_disk_types.Run([]))
    self.assertIn('❌ Configuration has errors', stdout.getvalue())

  def testUnknownOsDiskTypeInDiskConfig(self):
    FLAGS.disk_config = self.WriteJson({'osDiskType': 'Fast_LRS'},
                                       'disks.json')
    with self.CaptureStdout() as stdout:
      self.assertEqual(1, configure_disk_types.Run([]))
    self.assertIn('Invalid OS disk type: Fast_LRS', stdout.getvalue())


if __name__ == '__main__':
  absltest.main()
