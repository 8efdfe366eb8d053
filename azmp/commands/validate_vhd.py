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
"""The validate-vhd command: marketplace checks of a local VHD file."""

import os

from absl import flags

from azmp import commands
from azmp import errors
from azmp.azure import vhd_validation

FLAGS = flags.FLAGS

flags.DEFINE_string('vhd_path', None, 'Path of the VHD file to validate.')
flags.DEFINE_enum('os_type', 'Linux', ['Linux', 'Windows'],
                  'Operating system installed on the VHD.')
flags.DEFINE_boolean('check_generalization', True,
                     'Report the generalization check.')
flags.DEFINE_boolean('strict_mode', True,
                     'Report dynamic disks as warnings.')


def Run(argv):
  """Validates --vhd_path. Returns 0 when the VHD is valid, 1 otherwise."""
  del argv
  if not FLAGS.vhd_path:
    raise errors.Config.InvalidConfigError('--vhd_path is required.')
  if FLAGS.format == commands.TEMPLATE:
    raise errors.Config.InvalidConfigError(
        'validate-vhd supports --format=text or --format=json.')

  vhd_path = os.path.abspath(os.path.expanduser(FLAGS.vhd_path))
  if FLAGS.format == commands.TEXT:
    print(commands.HEAVY_RULE)
    print('Azure Marketplace VHD Validator')
    print(commands.HEAVY_RULE)
    print()
    print('Validating VHD: {}'.format(vhd_path))
    print('OS Type: {}'.format(FLAGS.os_type))
    print('Strict Mode: {}'.format(
        'Enabled' if FLAGS.strict_mode else 'Disabled'))
    print('Check Generalization: {}'.format(
        'Yes' if FLAGS.check_generalization else 'No'))
    print()

  result = vhd_validation.ValidateVhd(
      vhd_path,
      os_type=FLAGS.os_type,
      check_generalization=FLAGS.check_generalization,
      strict_mode=FLAGS.strict_mode)

  if FLAGS.format == commands.JSON:
    report = commands.ToJson(result.ToDict())
    print(report)
  else:
    report = vhd_validation.FormatValidationResult(result)
    print(report)

  if FLAGS.output:
    path = commands.WriteFile(FLAGS.output, report)
    if FLAGS.format == commands.TEXT:
      print('Validation report written to: {}'.format(path))

  if result.valid:
    if FLAGS.format == commands.TEXT:
      print('\n✓ VHD validation PASSED')
    return 0
  if FLAGS.format == commands.TEXT:
    print('\n✗ VHD validation FAILED\n')
    print('Please address the errors above before uploading to Azure '
          'Marketplace.')
  return 1
