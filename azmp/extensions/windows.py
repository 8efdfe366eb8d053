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
"""Windows-only VM extensions."""

from azmp import extensions

EVERY_DAY = 0
SUNDAY = 7
SCAN_DISABLED = 8


def CustomScriptExtension(file_uris=None, command_to_execute=None,
                          timestamp=None):
  """Runs PowerShell scripts downloaded from 'file_uris'.

  The command is a protected setting.
  """
  settings = {}
  if file_uris:
    settings['fileUris'] = list(file_uris)
  if timestamp:
    settings['timestamp'] = timestamp
  protected = {}
  if command_to_execute:
    protected['commandToExecute'] = command_to_execute
  return extensions.Extension('CustomScriptExtension', 'Microsoft.Compute',
                              'CustomScriptExtension', '1.10', settings,
                              protected)


def MonitoringAgentExtension(workspace_id, workspace_key):
  return extensions.Extension(
      'MicrosoftMonitoringAgent', 'Microsoft.EnterpriseCloud.Monitoring',
      'MicrosoftMonitoringAgent', '1.0', {'workspaceId': workspace_id},
      {'workspaceKey': workspace_key})


def AntimalwareExtension(realtime_protection=True, scheduled_scan_day=SUNDAY,
                         scheduled_scan_time=120, scheduled_scan_type='Quick',
                         exclusions=None):
  """Microsoft Antimalware for Azure.

  Args:
    realtime_protection: bool.
    scheduled_scan_day: int. 0 is every day, 1-7 Sunday to Saturday and 8
      disables the scheduled scan.
    scheduled_scan_time: int. Minutes after midnight, in steps of 60.
    scheduled_scan_type: string. 'Quick' or 'Full'.
    exclusions: dict with 'Paths', 'Extensions' and 'Processes'.
  """
  if scheduled_scan_day is None:
    scheduled_scan_day = SUNDAY
  settings = {
      'AntimalwareEnabled': True,
      'RealtimeProtectionEnabled': realtime_protection is not False,
      'ScheduledScanSettings': {
          'isEnabled': scheduled_scan_day != SCAN_DISABLED,
          'day': scheduled_scan_day,
          'time': 120 if scheduled_scan_time is None else scheduled_scan_time,
          'scanType': scheduled_scan_type or 'Quick',
      },
      'Exclusions': exclusions or {
          'Paths': '',
          'Extensions': '',
          'Processes': '',
      },
  }
  return extensions.Extension('IaaSAntimalware', 'Microsoft.Azure.Security',
                              'IaaSAntimalware', '1.3', settings)


def DscExtension(modules_url, configuration_function, properties=None,
                 wmf_version=None, privacy=None):
  settings = {
      'modulesUrl': modules_url,
      'configurationFunction': configuration_function,
      'wmfVersion': wmf_version,
      'privacy': privacy,
  }
  protected = {'properties': properties} if properties else None
  return extensions.Extension('DSC', 'Microsoft.Powershell', 'DSC', '2.77',
                              settings, protected)


def DomainJoinExtension(domain, user, password, ou_path='', restart=True,
                        options=3):
  """Joins the VM to an Active Directory domain.

  'options' is the NetJoinDomain flag set; 3 joins the domain and creates the
  computer account.
  """
  settings = {
      'Name': domain,
      'OUPath': ou_path or '',
      'User': user,
      'Restart': restart is not False,
      'Options': 3 if options is None else options,
  }
  return extensions.Extension('JsonADDomainExtension', 'Microsoft.Compute',
                              'JsonADDomainExtension', '1.3', settings,
                              {'Password': password})


def DiagnosticsExtension(storage_account, storage_account_key,
                         storage_account_endpoint='https://core.windows.net',
                         xml_config=None):
  settings = {'storageAccount': storage_account, 'xmlCfg': xml_config}
  protected = {
      'storageAccountName': storage_account,
      'storageAccountKey': storage_account_key,
      'storageAccountEndPoint': (storage_account_endpoint or
                                 'https://core.windows.net'),
  }
  return extensions.Extension('IaaSDiagnostics', 'Microsoft.Azure.Diagnostics',
                              'IaaSDiagnostics', '1.5', settings, protected)


def GpuDriverExtension():
  return extensions.Extension('NvidiaGpuDriverWindows', 'Microsoft.HpcCompute',
                              'NvidiaGpuDriverWindows', '1.3')


def BackupExtension(locale='en-US', task_id=None, command_to_execute=None,
                    object_str=None, logs_blob_uri=None, status_blob_uri=None):
  """The VMSnapshot extension Azure Backup uses for application consistency."""
  settings = {
      'locale': locale or 'en-US',
      'taskId': task_id,
      'commandToExecute': command_to_execute,
      'objectStr': object_str,
      'logsBlobUri': logs_blob_uri,
      'statusBlobUri': status_blob_uri,
  }
  return extensions.Extension('VMSnapshot', 'Microsoft.Azure.RecoveryServices',
                              'VMSnapshot', '1.10', settings)
