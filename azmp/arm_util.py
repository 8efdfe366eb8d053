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

"""Utilities shared by the ARM resource generators."""

import copy
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

DEPLOYMENT_TEMPLATE_SCHEMA = (
    'https://schema.management.azure.com/schemas/2019-04-01/'
    'deploymentTemplate.json#'
)
CONTENT_VERSION = '1.0.0.0'
DEFAULT_LOCATION = '[resourceGroup().location]'
DEFAULT_RESOURCE_GROUP = '[resourceGroup().name]'


def ResourceId(resource_type: str, *names: str) -> str:
  """Returns an ARM resourceId() expression for the given type and names."""
  quoted = ', '.join("'{}'".format(name) for name in names)
  return "[resourceId('{}', {})]".format(resource_type, quoted)


def Compact(values: Dict[str, Any]) -> Dict[str, Any]:
  """Returns a copy of 'values' without the keys whose value is None."""
  return {k: v for k, v in values.items() if v is not None}


def DeploymentTemplate(parameters: Optional[Dict[str, Any]] = None,
                       variables: Optional[Dict[str, Any]] = None,
                       resources: Optional[List[Dict[str, Any]]] = None,
                       outputs: Optional[Dict[str, Any]] = None
                      ) -> Dict[str, Any]:
  """Wraps resources in an ARM deployment template envelope."""
  template = {
      '$schema': DEPLOYMENT_TEMPLATE_SCHEMA,
      'contentVersion': CONTENT_VERSION,
      'parameters': parameters or {},
      'variables': variables or {},
      'resources': resources or [],
  }
  if outputs:
    template['outputs'] = outputs
  return template


def ToJson(obj: Any) -> str:
  """Serializes a generated resource the way templates embed it."""
  return json.dumps(obj, indent=2, ensure_ascii=False)


def Prune(obj: Any) -> Any:
  """Recursively drops None values from dicts, the way JSON omits them."""
  if isinstance(obj, dict):
    return {k: Prune(v) for k, v in obj.items() if v is not None}
  if isinstance(obj, list):
    return [Prune(v) for v in obj]
  return obj


def _IsReferenced(text: str, prefix: str, key: str) -> bool:
  return "{}('{}')".format(prefix, key) in text


def PruneTemplate(template: Dict[str, Any]) -> Tuple[Dict[str, Any],
                                                     List[str]]:
  """Removes parameters and variables that no expression references.

  Variables are pruned first so that parameters only referenced from a
  removed variable are dropped as well.

  Args:
    template: dict. A deployment template. It is not modified.

  Returns:
    A tuple of the pruned template and the names of the kept parameters.
  """
  template = copy.deepcopy(template)
  variables = template.get('variables') or {}
  text = json.dumps(template, ensure_ascii=False)
  for key in list(variables):
    if not _IsReferenced(text, 'variables', key):
      logging.debug('Pruned unused variable from template: %s', key)
      del variables[key]
  text = json.dumps(template, ensure_ascii=False)
  parameters = template.get('parameters') or {}
  for key in list(parameters):
    if not _IsReferenced(text, 'parameters', key):
      logging.debug('Pruned unused parameter from template: %s', key)
      del parameters[key]
  return template, list(parameters)
