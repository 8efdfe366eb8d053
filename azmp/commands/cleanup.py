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
"""Recovery Services vault cleanup and the approvals that guard it.

cleanup-vault runs the vault deletion PowerShell script. A dry run previews
the operations, and its JSON result can be approved with 'approve' so that a
later run with --approval_hash only proceeds while the approval is valid.
"""

import logging
import os

from absl import flags

from azmp import approval_manager
from azmp import commands
from azmp import errors
from azmp import vm_util

FLAGS = flags.FLAGS

PWSH = 'pwsh'
DEFAULT_CLEANUP_SCRIPT = os.path.join('scripts', 'cleanup',
                                      'Delete-RecoveryServicesVault.ps1')
_POWERSHELL_NOT_FOUND = (
    'PowerShell 7+ (pwsh) is required but not found. Please install '
    'PowerShell 7+ from https://github.com/PowerShell/PowerShell')

flags.DEFINE_string('subscription_name', None, 'Azure subscription name.')
flags.DEFINE_string('subscription_id', None, 'Azure subscription ID.')
flags.DEFINE_boolean('dry_run', False,
                     'Preview the cleanup operations without making changes.')
flags.DEFINE_boolean('confirm', False,
                     'Allow destructive operations after an interactive '
                     'confirmation.')
flags.DEFINE_boolean('force', False,
                     'Skip all safety confirmations. Use with extreme '
                     'caution.')
flags.DEFINE_boolean('skip_module_updates', False,
                     'Skip PowerShell module update checks.')
flags.DEFINE_string('cleanup_script', DEFAULT_CLEANUP_SCRIPT,
                    'Path of the vault cleanup PowerShell script.')
flags.DEFINE_string('approval_hash', None,
                    'Only run when an unexpired approval exists for this '
                    'dry-run hash.')
flags.DEFINE_string('dry_run_file', None,
                    'Dry-run result JSON. Written by cleanup-vault '
                    '--dry_run and read by approve.')
flags.DEFINE_boolean('prune', False,
                     'approvals: delete expired approvals first.')


def CheckPowerShell():
  """Raises errors.Cleanup.PowerShellNotFoundError unless pwsh runs."""
  try:
    vm_util.IssueCommand([PWSH, '--version'], timeout=60)
  except (OSError, errors.VmUtil.IssueCommandError) as e:
    logging.debug('pwsh check failed: %s', e)
    raise errors.Cleanup.PowerShellNotFoundError(_POWERSHELL_NOT_FOUND)


def BuildPowerShellArgs(script_path, vault_name, resource_group,
                        subscription_name=None, subscription_id=None,
                        dry_run=False, force=False, skip_module_updates=False):
  """Returns the pwsh arguments running 'script_path'."""
  args = ['-File', script_path, '-VaultName', vault_name,
          '-ResourceGroupName', resource_group]
  if subscription_name:
    args.extend(['-SubscriptionName', subscription_name])
  if subscription_id:
    args.extend(['-SubscriptionId', subscription_id])
  if dry_run:
    args.append('-DryRun')
  if force:
    args.append('-Force')
  if skip_module_updates:
    args.append('-SkipModuleUpdates')
  return args


def _Confirm(prompt):
  return input(prompt).strip().lower() == 'yes'


def RunCleanupVault(argv):
  """Deletes a Recovery Services vault through the cleanup script.

  Raises:
    errors.Config.InvalidConfigError: if the vault or resource group is
      missing.
    errors.Cleanup.PowerShellNotFoundError: if pwsh cannot be run.
    errors.Cleanup.ScriptNotFoundError: if the script does not exist.
    errors.Cleanup.ConfirmationRequiredError: if a destructive run lacks
      --confirm or --force.
    errors.Approval.ApprovalNotFoundError: if --approval_hash has no valid
      approval for this vault and resource group.
    errors.Cleanup.ScriptFailedError: if the script exits non-zero.
  """
  del argv
  if not FLAGS.vault_name:
    raise errors.Config.InvalidConfigError(
        'Vault name is required. Use --vault_name.')
  if not FLAGS.resource_group:
    raise errors.Config.InvalidConfigError(
        'Resource group is required. Use --resource_group.')

  logging.info('Recovery Services Vault Cleanup')
  logging.info('Validating PowerShell environment...')
  CheckPowerShell()
  logging.info('PowerShell 7+ detected.')

  script_path = os.path.abspath(os.path.expanduser(FLAGS.cleanup_script))
  if not os.path.isfile(script_path):
    raise errors.Cleanup.ScriptNotFoundError(
        'PowerShell script not found at: {}'.format(script_path))

  print('\n📋 Execution Plan:')
  print('   Vault: {}'.format(FLAGS.vault_name))
  print('   Resource Group: {}'.format(FLAGS.resource_group))
  if FLAGS.subscription_name:
    print('   Subscription: {}'.format(FLAGS.subscription_name))
  if FLAGS.subscription_id:
    print('   Subscription ID: {}'.format(FLAGS.subscription_id))
  print('   Mode: {}'.format(
      'DRY RUN (preview only)' if FLAGS.dry_run else 'EXECUTION'))

  if FLAGS.approval_hash and not FLAGS.dry_run:
    approval = approval_manager.ApprovalManager().RequireApproval(
        FLAGS.approval_hash)
    vault_info = approval.get('vaultInfo') or {}
    if (vault_info.get('name') != FLAGS.vault_name or
        vault_info.get('resourceGroup') != FLAGS.resource_group):
      raise errors.Approval.ApprovalNotFoundError(
          'Approval {} covers vault {} in resource group {}, not vault {} in '
          'resource group {}.'.format(
              FLAGS.approval_hash, vault_info.get('name'),
              vault_info.get('resourceGroup'), FLAGS.vault_name,
              FLAGS.resource_group))
    print('   Approved by {} at {} (expires {})'.format(
        approval['approvedBy'], approval['approvedAt'],
        approval['expiresAt']))

  force = FLAGS.force
  if not FLAGS.dry_run and not force:
    if not FLAGS.confirm:
      raise errors.Cleanup.ConfirmationRequiredError(
          'Destructive operations require explicit confirmation. Use '
          '--dry_run to preview operations, --confirm to be prompted, or '
          '--force to skip all safety checks.')
    print('\n⚠️  DESTRUCTIVE OPERATION WARNING')
    print('   This will permanently delete the Recovery Services Vault and '
          'ALL backup data!')
    print('   This action CANNOT be undone.')
    print('   Vault: {}'.format(FLAGS.vault_name))
    print('   Resource Group: {}\n'.format(FLAGS.resource_group))
    if not _Confirm('Type "yes" to proceed with deletion: '):
      print('Operation cancelled by user')
      return 0
    logging.info('User confirmation received.')
    force = True
  elif FLAGS.dry_run:
    print('\n🔍 DRY RUN MODE: Previewing operations without making changes')

  args = BuildPowerShellArgs(
      script_path, FLAGS.vault_name, FLAGS.resource_group,
      subscription_name=FLAGS.subscription_name,
      subscription_id=FLAGS.subscription_id,
      dry_run=FLAGS.dry_run,
      force=force,
      skip_module_updates=FLAGS.skip_module_updates)
  print('\n🚀 Executing PowerShell script...\n')
  stdout, stderr, retcode = vm_util.IssueCommand(
      [PWSH] + args, timeout=None, raise_on_failure=False)
  if stdout:
    print(stdout)
  if retcode:
    if stderr:
      logging.error(stderr)
    print('\n❌ Vault cleanup failed')
    raise errors.Cleanup.ScriptFailedError(
        'PowerShell script failed with exit code {}'.format(retcode))

  print('\n✅ Vault cleanup completed successfully')
  if FLAGS.dry_run:
    print('   (Dry run - no actual changes made)')
    if FLAGS.dry_run_file:
      path = commands.WriteFile(FLAGS.dry_run_file, stdout)
      print('   Dry-run result written to {}. Approve it with: '
            'azmp approve --dry_run_file={}'.format(path, path))
  return 0


def RunApprove(argv):
  """Approves the dry run in --dry_run_file for --approval_ttl_hours.

  Raises:
    errors.Approval.InvalidDryRunError: if the file is missing, malformed or
      its hash does not match its contents.
  """
  del argv
  if not FLAGS.dry_run_file:
    raise errors.Config.InvalidConfigError('--dry_run_file is required.')
  dry_run = approval_manager.ParseDryRunFile(FLAGS.dry_run_file)
  expected = approval_manager.ComputeHash(dry_run['vaultInfo'],
                                          dry_run['operations'])
  if expected != dry_run['hash']:
    raise errors.Approval.InvalidDryRunError(
        'Dry-run hash {} does not match its contents ({}).'.format(
            dry_run['hash'], expected))
  approval = approval_manager.ApprovalManager().SaveApproval(dry_run)
  if FLAGS.format == commands.JSON:
    print(commands.ToJson(approval))
  else:
    print('✅ Approved {} operation(s) on vault {}'.format(
        approval['operationCount'], approval['vaultInfo'].get('name')))
    print('   Hash: {}'.format(approval['hash']))
    print('   Expires: {}'.format(approval['expiresAt']))
    print('\nRun the cleanup with --approval_hash={}'.format(
        approval['hash']))
  return 0


def RunApprovals(argv):
  """Lists unexpired approvals, pruning expired ones with --prune."""
  del argv
  manager = approval_manager.ApprovalManager()
  if FLAGS.prune:
    pruned = manager.PruneExpired()
    logging.info('Pruned %d expired approval(s).', pruned)
  approvals = manager.ListValidApprovals()
  if FLAGS.format == commands.JSON:
    print(commands.ToJson(approvals))
    return 0
  if not approvals:
    print('No valid approvals.')
    return 0
  print('\n=== Valid Approvals ===\n')
  for approval in approvals:
    vault_info = approval.get('vaultInfo') or {}
    print('  {}'.format(approval['hash']))
    print('    Vault: {} ({})'.format(vault_info.get('name'),
                                      vault_info.get('resourceGroup')))
    print('    Operations: {}'.format(approval.get('operationCount')))
    print('    Approved by {} at {}'.format(approval.get('approvedBy'),
                                           approval.get('approvedAt')))
    print('    Expires: {}'.format(approval['expiresAt']))
    print()
  return 0
