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
"""Command line entry point: azmp <command> [--flags].

Commands:
  configure-backup       Azure Backup configuration and ARM template.
  configure-data-disks   Data disk layout, cost and performance.
  configure-disk-types   OS and data disk storage types of a VM.
  validate-vhd           Marketplace checks of a local VHD file.
  cleanup-vault          Delete a Recovery Services vault via PowerShell.
  approve                Approve a cleanup dry-run result.
  approvals              List (and prune) cleanup approvals.
  render                 Render a jinja2 template through the helpers.
"""

import logging

from absl import app
from absl import flags

from azmp import errors
from azmp import log_util
from azmp.commands import cleanup
from azmp.commands import configure_backup
from azmp.commands import configure_data_disks
from azmp.commands import configure_disk_types
from azmp.commands import render
from azmp.commands import validate_vhd

FLAGS = flags.FLAGS

COMMANDS = {
    'configure-backup': configure_backup.Run,
    'configure-data-disks': configure_data_disks.Run,
    'configure-disk-types': configure_disk_types.Run,
    'validate-vhd': validate_vhd.Run,
    'cleanup-vault': cleanup.RunCleanupVault,
    'approve': cleanup.RunApprove,
    'approvals': cleanup.RunApprovals,
    'render': render.Run,
}


def main(argv):
  """Runs the command named by argv[1] and returns its exit code."""
  if len(argv) < 2:
    raise app.UsageError('A command is required. One of: {}'.format(
        ', '.join(sorted(COMMANDS))))
  command = argv[1]
  if command not in COMMANDS:
    raise app.UsageError('Unknown command "{}". One of: {}'.format(
        command, ', '.join(sorted(COMMANDS))))
  if len(argv) > 2:
    raise app.UsageError('Unexpected arguments: {}'.format(
        ' '.join(argv[2:])))

  log_util.ConfigureLoggingFromFlags()
  logging.debug('Running command %s.', command)
  try:
    return COMMANDS[command](argv[1:])
  except errors.Error as e:
    logging.error('%s failed: %s', command, e)
    return 1


def Run():
  log_util.ConfigureBasicLogging()
  app.run(main)


if __name__ == '__main__':
  Run()
