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
"""Extensions available on both Windows and Linux.

Each function takes the platform, 'Windows' or 'Linux', and picks the
matching extension type.
"""

import copy

from azmp import extensions


def _ByPlatform(platform, windows_value, linux_value):
  return windows_value if platform == extensions.WINDOWS else linux_value


def AzureMonitorAgentExtension(platform, workspace_id=None,
                               workspace_key=None,
                               enable_automatic_upgrade=True):
  settings = {
      'workspaceId': workspace_id,
      'enableAutomaticUpgrade': enable_automatic_upgrade is not False,
  }
  protected = {'workspaceKey': workspace_key} if workspace_key else None
  return extensions.Extension(
      'AzureMonitorAgent', 'Microsoft.Azure.Monitor',
      _ByPlatform(platform, 'AzureMonitorWindowsAgent',
                  'AzureMonitorLinuxAgent'),
      '1.22', settings, protected)


def AzureSecurityAgentExtension(platform):
  settings = {
      'enableGenevaUpload': True,
      'enableAutoConfig': True,
      'reportSuccessOnUnsupportedDistro': True,
  }
  return extensions.Extension(
      'AzureSecurityAgent', 'Microsoft.Azure.Security.Monitoring',
      _ByPlatform(platform, 'AzureSecurityWindowsAgent',
                  'AzureSecurityLinuxAgent'),
      '2.14', settings)


def DependencyAgentExtension(platform, enable_ama=True, workspace_id=None):
  return extensions.Extension(
      'DependencyAgent', 'Microsoft.Azure.Monitoring.DependencyAgent',
      _ByPlatform(platform, 'DependencyAgentWindows', 'DependencyAgentLinux'),
      '9.10',
      {'enableAMA': enable_ama is not False, 'workspaceId': workspace_id})


def AadSshLoginExtension():
  """Azure AD login over SSH. Linux only despite living here."""
  return extensions.Extension('AADSSHLoginForLinux',
                              'Microsoft.Azure.ActiveDirectory',
                              'AADSSHLoginForLinux', '1.0')


def KeyVaultExtension(platform, secrets_management_settings,
                      authentication_settings=None):
  """Keeps Key Vault certificates in sync on the VM.

  Args:
    platform: string. 'Windows' or 'Linux'.
    secrets_management_settings: dict in the ARM shape. It must hold
      'observedCertificates'. On Windows the certificate store defaults to
      LocalMachine/MY.
    authentication_settings: dict with 'msiEndpoint' and 'msiClientId'.

  Returns:
    The extension dict; version 3.0 on Windows and 2.0 on Linux.
  """
  secrets = copy.deepcopy(secrets_management_settings or {})
  if platform == extensions.WINDOWS:
    secrets.setdefault('certificateStoreLocation', 'LocalMachine')
    secrets.setdefault('certificateStoreName', 'MY')
  settings = {
      'secretsManagementSettings': {
          'pollingIntervalInS': secrets.get('pollingIntervalInS') or '3600',
          'certificateStoreLocation': secrets.get('certificateStoreLocation'),
          'certificateStoreName': secrets.get('certificateStoreName'),
          'observedCertificates': secrets.get('observedCertificates') or [],
          'linkOnRenewal': bool(secrets.get('linkOnRenewal')),
          'requireInitialSync': bool(secrets.get('requireInitialSync')),
      },
      'authenticationSettings': authentication_settings,
  }
  return extensions.Extension(
      'KeyVault', 'Microsoft.Azure.KeyVault',
      _ByPlatform(platform, 'KeyVaultForWindows', 'KeyVaultForLinux'),
      _ByPlatform(platform, '3.0', '2.0'), settings)
