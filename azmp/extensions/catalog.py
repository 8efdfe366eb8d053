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
"""Catalog of the supported VM extensions."""

import dataclasses

WINDOWS = 'windows'
LINUX = 'linux'
CROSS_PLATFORM = 'crossplatform'
CATEGORIES = (WINDOWS, LINUX, CROSS_PLATFORM)

MUST_HAVE = 'Must-Have'
SHOULD_HAVE = 'Should-Have'
NICE_TO_HAVE = 'Nice-to-Have'


@dataclasses.dataclass(frozen=True)
class ExtensionInfo:
  name: str
  display_name: str
  category: str
  platform: str
  publisher: str
  type: str
  version: str
  description: str
  priority: str

  def ToDict(self):
    return {
        'name': self.name,
        'displayName': self.display_name,
        'category': self.category,
        'platform': self.platform,
        'publisher': self.publisher,
        'type': self.type,
        'version': self.version,
        'description': self.description,
        'priority': self.priority,
    }


def _Windows(*args):
  return ExtensionInfo(args[0], args[1], WINDOWS, 'Windows', *args[2:])


def _Linux(*args):
  return ExtensionInfo(args[0], args[1], LINUX, 'Linux', *args[2:])


EXTENSIONS_CATALOG = (
    _Windows('customScriptExtension', 'Custom Script Extension',
             'Microsoft.Compute', 'CustomScriptExtension', '1.10',
             'Execute PowerShell scripts for configuration and deployment',
             MUST_HAVE),
    _Windows('monitoringAgentExtension', 'Microsoft Monitoring Agent',
             'Microsoft.EnterpriseCloud.Monitoring',
             'MicrosoftMonitoringAgent', '1.0',
             'Azure Monitor and Log Analytics integration', MUST_HAVE),
    _Windows('antimalwareExtension', 'IaaS Antimalware',
             'Microsoft.Azure.Security', 'IaaSAntimalware', '1.3',
             'Windows Defender Antimalware protection', MUST_HAVE),
    _Windows('dscExtension', 'PowerShell DSC', 'Microsoft.Powershell', 'DSC',
             '2.77', 'Desired State Configuration management', SHOULD_HAVE),
    _Windows('domainJoinExtension', 'AD Domain Join', 'Microsoft.Compute',
             'JsonADDomainExtension', '1.3',
             'Active Directory domain join capability', SHOULD_HAVE),
    _Windows('diagnosticsExtension', 'Diagnostics Extension',
             'Microsoft.Azure.Diagnostics', 'IaaSDiagnostics', '1.5',
             'Diagnostic data collection and export', NICE_TO_HAVE),
    _Windows('gpuDriverExtension', 'NVIDIA GPU Driver', 'Microsoft.HpcCompute',
             'NvidiaGpuDriverWindows', '1.3', 'NVIDIA GPU driver installation',
             NICE_TO_HAVE),
    _Windows('backupExtension', 'VM Snapshot',
             'Microsoft.Azure.RecoveryServices', 'VMSnapshot', '1.10',
             'Azure Backup integration', SHOULD_HAVE),
    _Linux('customScriptExtension', 'Custom Script Extension',
           'Microsoft.Azure.Extensions', 'CustomScript', '2.1',
           'Execute bash scripts for configuration and deployment', MUST_HAVE),
    _Linux('omsAgentExtension', 'OMS Agent for Linux',
           'Microsoft.EnterpriseCloud.Monitoring', 'OmsAgentForLinux', '1.14',
           'Azure Monitor and Log Analytics for Linux', MUST_HAVE),
    _Linux('securityAgentExtension', 'Azure Security Agent',
           'Microsoft.Azure.Security.Monitoring', 'AzureSecurityLinuxAgent',
           '2.14', 'Security baseline monitoring and compliance', MUST_HAVE),
    _Linux('vmAccessExtension', 'VM Access Extension',
           'Microsoft.OSTCExtensions', 'VMAccessForLinux', '1.5',
           'SSH key management and user administration', SHOULD_HAVE),
    _Linux('dependencyAgentExtension', 'Dependency Agent',
           'Microsoft.Azure.Monitoring.DependencyAgent',
           'DependencyAgentLinux', '9.10', 'Application dependency mapping',
           NICE_TO_HAVE),
    _Linux('gpuDriverExtension', 'NVIDIA GPU Driver', 'Microsoft.HpcCompute',
           'NvidiaGpuDriverLinux', '1.6', 'NVIDIA GPU driver for Linux',
           NICE_TO_HAVE),
    _Linux('runCommandExtension', 'Run Command', 'Microsoft.CPlat.Core',
           'RunCommandLinux', '1.0', 'Remote command execution', NICE_TO_HAVE),
    ExtensionInfo('azureMonitorAgentExtension', 'Azure Monitor Agent',
                  CROSS_PLATFORM, 'Both', 'Microsoft.Azure.Monitor',
                  'AzureMonitorAgent', '1.22',
                  'Unified monitoring agent for Windows and Linux', MUST_HAVE),
    ExtensionInfo('azureSecurityAgentExtension', 'Azure Security Agent',
                  CROSS_PLATFORM, 'Both',
                  'Microsoft.Azure.Security.Monitoring', 'AzureSecurityAgent',
                  '2.14', 'Security Center integration for both platforms',
                  MUST_HAVE),
    ExtensionInfo('dependencyAgentExtension', 'Dependency Agent',
                  CROSS_PLATFORM, 'Both',
                  'Microsoft.Azure.Monitoring.DependencyAgent',
                  'DependencyAgent', '9.10',
                  'Application performance monitoring', SHOULD_HAVE),
    ExtensionInfo('aadSSHLoginExtension', 'AAD SSH Login', CROSS_PLATFORM,
                  'Linux', 'Microsoft.Azure.ActiveDirectory',
                  'AADSSHLoginForLinux', '1.0',
                  'Azure AD authentication for SSH', SHOULD_HAVE),
    ExtensionInfo('keyVaultExtension', 'Key Vault Extension', CROSS_PLATFORM,
                  'Both', 'Microsoft.Azure.KeyVault', 'KeyVault', '2.0/3.0',
                  'Certificate and secret management', SHOULD_HAVE),
)


def ListExtensions(category=None):
  """Returns catalog entries as dicts, optionally of one category."""
  return [e.ToDict() for e in EXTENSIONS_CATALOG
          if category is None or e.category == category]


def GetExtension(name, category):
  """Returns the entry named 'name' in 'category' as a dict, or None."""
  for extension in EXTENSIONS_CATALOG:
    if extension.name == name and extension.category == category:
      return extension.ToDict()
  return None


def Count():
  return len(EXTENSIONS_CATALOG)
