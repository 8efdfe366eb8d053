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
"""Renders jinja2 deployment templates that call the generator helpers.

Inside a template, helpers are called by name, e.g.

  "resources": [
    {{ helper('availability:set', name='web-avset') }}
  ]

Undefined variables are errors rather than empty strings.
"""

import itertools
import json

import jinja2

from azmp import helpers


def _ToJson(value, indent=2):
  return json.dumps(value, indent=indent, ensure_ascii=False)


def _CallHelper(helper_name, /, *args, **kwargs):
  """Calls a helper, failing on undefined arguments before the call."""
  for value in itertools.chain(args, kwargs.values()):
    if isinstance(value, jinja2.Undefined):
      # Raises jinja2.UndefinedError under StrictUndefined.
      str(value)
  return helpers.CallHelper(helper_name, *args, **kwargs)


def _Environment():
  environment = jinja2.Environment(undefined=jinja2.StrictUndefined,
                                   keep_trailing_newline=True)
  environment.globals['helper'] = _CallHelper
  environment.filters['tojson'] = _ToJson
  return environment


def RenderTemplate(template_text, context=None):
  """Renders the jinja2 'template_text'.

  Args:
    template_text: string. The template.
    context: dict. Variables available to the template.

  Returns:
    The rendered text.

  Raises:
    jinja2.UndefinedError: if the template uses a variable missing from
      'context'.
    errors.Helpers.UnknownHelperError: if the template calls an unknown
      helper.
  """
  template = _Environment().from_string(template_text)
  return template.render(**(context or {}))


def RenderTemplateFile(template_path, context=None):
  """Renders the jinja2 template stored at 'template_path'."""
  with open(template_path, encoding='utf-8') as fp:
    return RenderTemplate(fp.read(), context)
