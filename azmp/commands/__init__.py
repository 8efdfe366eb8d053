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
"""Subcommands of the azmp command line and the flags they share.

Each command module exposes Run(argv), which returns the process exit code.
"""

import json
import logging
import os

from absl import flags

FLAGS = flags.FLAGS

TEXT = 'text'
JSON = 'json'
TEMPLATE = 'template'
OUTPUT_FORMATS = [TEXT, JSON, TEMPLATE]

HEAVY_RULE = '═' * 80
LIGHT_RULE = '─' * 73

flags.DEFINE_enum('format', TEXT, OUTPUT_FORMATS,
                  'How results are printed. "template" prints the generated '
                  'ARM template.')
flags.DEFINE_string('output', None,
                    'File that receives the generated template or report.')
flags.DEFINE_string('vault_name', None, 'Recovery Services vault name.')
flags.DEFINE_string('resource_group', None, 'Azure resource group name.')
flags.DEFINE_string('vm_name', None, 'Virtual machine name.')
flags.DEFINE_string('location', None, 'Azure region, e.g. eastus.')
flags.DEFINE_boolean('validate_only', False,
                     'Only validate. An invalid configuration does not change '
                     'the exit code.')


def ToJson(obj):
  return json.dumps(obj, indent=2, ensure_ascii=False)


def WriteFile(path, text):
  """Writes 'text' to 'path' and returns the absolute path."""
  path = os.path.abspath(os.path.expanduser(path))
  with open(path, 'w', encoding='utf-8') as fp:
    fp.write(text)
  logging.debug('Wrote %d characters to %s.', len(text), path)
  return path


def PrintList(title, items, bullet='•'):
  """Prints 'title' and one indented line per item, if there are any."""
  if not items:
    return
  print(title)
  for item in items:
    print('  {} {}'.format(bullet, item))
  print()


def FlagIsSet(name):
  return FLAGS[name].present
