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
"""Tests for azmp.extensions.catalog."""

import unittest

from azmp.extensions import catalog


class CatalogTestCase(unittest.TestCase):

  def testCounts(self):
    self.assertEqual(20, catalog.Count())
    self.assertEqual(8, len(catalog.ListExtensions(catalog.WINDOWS)))
    self.assertEqual(7, len(catalog.ListExtensions(catalog.LINUX)))
    self.assertEqual(5, len(catalog.ListExtensions(catalog.CROSS_PLATFORM)))
    self.assertEqual(20, len(catalog.ListExtensions()))

  def testSameNameInSeveralCategories(self):
    windows = catalog.GetExtension('customScriptExtension', catalog.WINDOWS)
    linux = catalog.GetExtension('customScriptExtension', catalog.LINUX)
    self.assertEqual('CustomScriptExtension', windows['type'])
    self.assertEqual('CustomScript', linux['type'])
    self.assertEqual('Linux', linux['platform'])

  def testGetExtension(self):
    self.assertEqual({
        'name': 'keyVaultExtension',
        'displayName': 'Key Vault Extension',
        'category': 'crossplatform',
        'platform': 'Both',
        'publisher': 'Microsoft.Azure.KeyVault',
        'type': 'KeyVault',
        'version': '2.0/3.0',
        'description': 'Certificate and secret management',
        'priority': 'Should-Have',
    }, catalog.GetExtension('keyVaultExtension', catalog.CROSS_PLATFORM))
    self.assertIsNone(catalog.GetExtension('keyVaultExtension',
                                           catalog.WINDOWS))


if __name__ == '__main__':
  unittest.main()
