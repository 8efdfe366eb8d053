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
"""Custom script extensions that serve an HTTP health endpoint.

Load balancer and cluster probes hit the endpoint. The scripts are rendered
from the jinja2 templates in data/scripts.
"""

import base64
import dataclasses
from typing import Optional

import jinja2

from azmp import data
from azmp import errors
from azmp import extensions

EXTENSION_TYPE = 'Microsoft.Compute/virtualMachines/extensions'
API_VERSION = '2023-03-01'
EXTENSION_NAME = '[concat(parameters("vmName"), "/HealthExtension")]'
VM_DEPENDENCY = (
    '[resourceId("Microsoft.Compute/virtualMachines", parameters("vmName"))]')

WINDOWS_SCRIPT = 'scripts/health_windows.ps1.j2'
LINUX_SCRIPT = 'scripts/health_linux.sh.j2'


@dataclasses.dataclass
class HealthExtensionConfig:
  """Health endpoint settings.

  Attributes:
    enabled: bool. A disabled config generates an empty dict.
    port: int. Listening port.
    endpoint: string. Path answering 200; other paths answer 404 on Windows.
    protocol: string. 'HTTP' or 'HTTPS'.
    response_content: string. Response body.
    check_interval: int. Probe interval in seconds, informational.
  """
  enabled: bool = True
  port: int = 80
  endpoint: str = '/health'
  protocol: str = 'HTTP'
  response_content: str = 'OK'
  check_interval: Optional[int] = None


def _RenderScript(resource_name, config):
  environment = jinja2.Environment(undefined=jinja2.StrictUndefined,
                                   keep_trailing_newline=True)
  template = environment.from_string(data.ReadResource(resource_name))
  return template.render(port=config.port, endpoint=config.endpoint,
                         response_content=config.response_content or 'OK')


def _Resource(publisher, extension_type, version, settings):
  return {
      'type': EXTENSION_TYPE,
      'apiVersion': API_VERSION,
      'name': EXTENSION_NAME,
      'dependsOn': [VM_DEPENDENCY],
      'properties': {
          'publisher': publisher,
          'type': extension_type,
          'typeHandlerVersion': version,
          'autoUpgradeMinorVersion': True,
          'settings': settings,
      },
  }


def _AsConfig(config):
  if isinstance(config, dict):
    return HealthExtensionConfig(**config)
  return config


def GenerateWindowsHealthExtension(config):
  """Returns a CustomScriptExtension running an HttpListener in PowerShell."""
  config = _AsConfig(config)
  if not config.enabled:
    return {}
  script = _RenderScript(WINDOWS_SCRIPT, config)
  command = 'powershell -ExecutionPolicy Unrestricted -Command "{}"'.format(
      script.replace('"', '\\"'))
  return _Resource('Microsoft.Compute', 'CustomScriptExtension', '1.10',
                   {'commandToExecute': command})


def GenerateLinuxHealthExtension(config):
  """Returns a CustomScript extension installing a netcat systemd service.

  The script is passed base64-encoded in settings.script.
  """
  config = _AsConfig(config)
  if not config.enabled:
    return {}
  script = _RenderScript(LINUX_SCRIPT, config)
  encoded = base64.b64encode(script.encode('utf-8')).decode('ascii')
  return _Resource('Microsoft.Azure.Extensions', 'CustomScript', '2.1',
                   {'script': encoded})


def GenerateHealthExtension(config, os_type):
  """Returns the health extension for 'os_type'.

  Raises:
    errors.Config.InvalidConfigError: if 'os_type' is not Windows or Linux.
  """
  if os_type == extensions.WINDOWS:
    return GenerateWindowsHealthExtension(config)
  if os_type == extensions.LINUX:
    return GenerateLinuxHealthExtension(config)
  raise errors.Config.InvalidConfigError(
      'Unsupported OS type: {}'.format(os_type))
