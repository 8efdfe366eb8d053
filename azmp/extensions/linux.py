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
"""Linux-only VM extensions."""

from azmp import extensions


def CustomScriptExtension(file_uris=None, command_to_execute=None,
                          skip_dos2unix=None, timestamp=None):
  settings = {}
  if file_uris:
    settings['fileUris'] = list(file_uris)
  if skip_dos2unix is not None:
    settings['skipDos2Unix'] = skip_dos2unix
  if timestamp:
    settings['timestamp'] = timestamp
  protected = {}
  if command_to_execute:
    protected['commandToExecute'] = command_to_execute
  return extensions.Extension('CustomScript', 'Microsoft.Azure.Extensions',
                              'CustomScript', '2.1', settings, protected)


def OmsAgentExtension(workspace_id, workspace_key):
  settings = {
      'workspaceId': workspace_id,
      'stopOnMultipleConnections': False,
  }
  return extensions.Extension(
      'OmsAgentForLinux', 'Microsoft.EnterpriseCloud.Monitoring',
      'OmsAgentForLinux', '1.14', settings, {'workspaceKey': workspace_key})


def SecurityAgentExtension():
  return extensions.Extension(
      'AzureSecurityLinuxAgent', 'Microsoft.Azure.Security.Monitoring',
      'AzureSecurityLinuxAgent', '2.14',
      {'enableGenevaUpload': True, 'enableAutoConfig': True})


def VmAccessExtension(username=None, password=None, ssh_key=None,
                      reset_ssh=False, remove_user=None, expiration=None):
  """Resets credentials or SSH configuration. All settings are protected."""
  protected = {}
  if username:
    protected['username'] = username
  if password:
    protected['password'] = password
  if ssh_key:
    protected['ssh_key'] = ssh_key
  if reset_ssh:
    protected['reset_ssh'] = True
  if remove_user:
    protected['remove_user'] = remove_user
  if expiration:
    protected['expiration'] = expiration
  extension = extensions.Extension('VMAccessForLinux',
                                   'Microsoft.OSTCExtensions',
                                   'VMAccessForLinux', '1.5')
  extension['protectedSettings'] = protected
  return extension


def DependencyAgentExtension():
  return extensions.Extension(
      'DependencyAgentLinux', 'Microsoft.Azure.Monitoring.DependencyAgent',
      'DependencyAgentLinux', '9.10', {'enableAMA': True})


def GpuDriverExtension():
  return extensions.Extension('NvidiaGpuDriverLinux', 'Microsoft.HpcCompute',
                              'NvidiaGpuDriverLinux', '1.6')


def RunCommandExtension(command_to_execute=None, script=None, parameters=None,
                        timeout_in_seconds=None, async_execution=None):
  """Runs a command, or else an inline script given as a list of lines."""
  protected = {}
  if command_to_execute:
    protected['commandToExecute'] = command_to_execute
  elif script:
    protected['script'] = list(script)
  if parameters:
    protected['parameters'] = list(parameters)
  settings = {}
  if timeout_in_seconds:
    settings['timeoutInSeconds'] = timeout_in_seconds
  if async_execution is not None:
    settings['asyncExecution'] = async_execution
  return extensions.Extension('RunCommandLinux', 'Microsoft.CPlat.Core',
                              'RunCommandLinux', '1.0', settings, protected)
