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
"""The render command: expands a jinja2 template through the helpers.

  azmp render --template=mainTemplate.json.j2 --context=values.yaml \
      --output=mainTemplate.json --prune_template
"""

import json
import logging

from absl import flags
import jinja2
import yaml

from azmp import arm_util
from azmp import commands
from azmp import errors
from azmp import template_renderer

FLAGS = flags.FLAGS

flags.DEFINE_string('template', None, 'jinja2 template to render.')
flags.DEFINE_string('context', None,
                    'YAML or JSON file of variables available to the '
                    'template.')
flags.DEFINE_boolean('prune_template', False,
                     'Parse the output as a deployment template and drop '
                     'unreferenced parameters and variables.')


def LoadContext(path):
  """Returns the mapping stored in the YAML or JSON file 'path'."""
  if not path:
    return {}
  try:
    with open(path, encoding='utf-8') as fp:
      context = yaml.safe_load(fp) or {}
  except (OSError, yaml.YAMLError) as e:
    raise errors.Config.InvalidConfigError(
        'Failed to load template context from {}: {}'.format(path, e))
  if not isinstance(context, dict):
    raise errors.Config.InvalidConfigError(
        'Template context {} must contain a mapping'.format(path))
  return context


def PruneRendered(text):
  """Returns 'text', a rendered deployment template, without unused inputs."""
  try:
    template = json.loads(text)
  except ValueError as e:
    raise errors.Config.InvalidConfigError(
        'Rendered template is not valid JSON: {}'.format(e))
  template, kept = arm_util.PruneTemplate(template)
  logging.info('Kept %d template parameter(s): %s', len(kept),
               ', '.join(kept))
  return commands.ToJson(template) + '\n'


def Run(argv):
  del argv
  if not FLAGS.template:
    raise errors.Config.InvalidConfigError('--template is required.')
  try:
    rendered = template_renderer.RenderTemplateFile(
        FLAGS.template, LoadContext(FLAGS.context))
  except OSError as e:
    raise errors.Config.InvalidConfigError(
        'Failed to read template {}: {}'.format(FLAGS.template, e))
  except jinja2.TemplateError as e:
    raise errors.Config.InvalidConfigError(
        'Failed to render template {}: {}'.format(FLAGS.template, e))
  if FLAGS.prune_template:
    rendered = PruneRendered(rendered)
  if FLAGS.output:
    path = commands.WriteFile(FLAGS.output, rendered)
    logging.info('Rendered %s to %s.', FLAGS.template, path)
  else:
    print(rendered, end='')
  return 0
