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
"""Time-limited approvals of reviewed vault cleanup dry runs.

A dry run of the cleanup script writes a JSON document describing the vault
and the operations it would perform, identified by a SHA-256 hash. Approving
it stores <hash>.json in the approvals directory; the approval is honored
until it expires.
"""

import datetime
import hashlib
import json
import logging
import os

from absl import flags

from azmp import errors
from azmp import flags as azmp_flags

FLAGS = flags.FLAGS

APPROVALS_DIR = 'approvals'
_REQUIRED_DRY_RUN_KEYS = ('hash', 'vaultInfo', 'operations')


def _Now():
  return datetime.datetime.now(datetime.timezone.utc)


def FormatTimestamp(timestamp):
  """Formats an aware datetime as UTC ISO-8601 with milliseconds."""
  timestamp = timestamp.astimezone(datetime.timezone.utc)
  return '{}.{:03d}Z'.format(timestamp.strftime('%Y-%m-%dT%H:%M:%S'),
                             timestamp.microsecond // 1000)


def ParseTimestamp(text):
  if text.endswith('Z'):
    text = text[:-1] + '+00:00'
  timestamp = datetime.datetime.fromisoformat(text)
  if timestamp.tzinfo is None:
    timestamp = timestamp.replace(tzinfo=datetime.timezone.utc)
  return timestamp


def ParseDryRunFile(path):
  """Loads a cleanup dry-run result.

  Args:
    path: string. Path of the dry-run JSON file.

  Returns:
    The dry-run dict.

  Raises:
    errors.Approval.InvalidDryRunError: if the file is missing, is not JSON
      or lacks 'hash', 'vaultInfo' or 'operations'.
  """
  if not os.path.exists(path):
    raise errors.Approval.InvalidDryRunError(
        'Dry-run file not found: {}'.format(path))
  try:
    with open(path, encoding='utf-8') as fp:
      dry_run = json.load(fp)
  except ValueError as e:
    raise errors.Approval.InvalidDryRunError(
        'Failed to parse dry-run file: {}'.format(e))
  if (not isinstance(dry_run, dict) or
      not all(dry_run.get(k) for k in _REQUIRED_DRY_RUN_KEYS)):
    raise errors.Approval.InvalidDryRunError(
        'Invalid dry-run file format: missing required fields')
  return dry_run


def ComputeHash(vault_info, operations):
  """Returns the SHA-256 hex digest identifying a dry run.

  The digest covers the compact JSON of 'vault_info' immediately followed by
  the compact JSON of 'operations', keys in their given order.
  """
  hash_input = ''.join(
      json.dumps(value, separators=(',', ':'), ensure_ascii=False)
      for value in (vault_info, operations))
  return hashlib.sha256(hash_input.encode('utf-8')).hexdigest()


class ApprovalManager(object):
  """Stores approvals as <hash>.json files.

  Attributes:
    approvals_dir: string. Directory holding the approval files.
    default_ttl_hours: int. Lifetime of an approval saved without a TTL.
  """

  def __init__(self, base_dir=None, default_ttl_hours=None):
    base_dir = os.path.expanduser(base_dir or FLAGS.azmp_home)
    self.approvals_dir = os.path.join(base_dir, APPROVALS_DIR)
    self.default_ttl_hours = (default_ttl_hours or
                              FLAGS.approval_ttl_hours or
                              azmp_flags.DEFAULT_APPROVAL_TTL_HOURS)
    os.makedirs(self.approvals_dir, exist_ok=True)

  def _ApprovalPath(self, approval_hash):
    return os.path.join(self.approvals_dir, '{}.json'.format(approval_hash))

  def _ReadApprovals(self):
    """Yields (path, approval) for every readable approval file."""
    for file_name in sorted(os.listdir(self.approvals_dir)):
      if not file_name.endswith('.json'):
        continue
      path = os.path.join(self.approvals_dir, file_name)
      try:
        with open(path, encoding='utf-8') as fp:
          approval = json.load(fp)
        ParseTimestamp(approval['expiresAt'])
      except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        logging.warning('Skipping unreadable approval file %s: %s', path, e)
        continue
      yield path, approval

  @staticmethod
  def _IsValid(approval, now=None):
    return (now or _Now()) < ParseTimestamp(approval['expiresAt'])

  def SaveApproval(self, dry_run, ttl_hours=None):
    """Approves 'dry_run' for 'ttl_hours' and returns the approval."""
    ttl = ttl_hours or self.default_ttl_hours
    now = _Now()
    approval = {
        'hash': dry_run['hash'],
        'vaultInfo': dry_run['vaultInfo'],
        'approvedAt': FormatTimestamp(now),
        'approvedBy': azmp_flags.GetCurrentUser(),
        'expiresAt': FormatTimestamp(now + datetime.timedelta(hours=ttl)),
        'operationCount': len(dry_run['operations']),
    }
    path = self._ApprovalPath(approval['hash'])
    with open(path, 'w', encoding='utf-8') as fp:
      json.dump(approval, fp, indent=2)
    logging.info('Saved approval %s, valid until %s.', approval['hash'],
                 approval['expiresAt'])
    return approval

  def GetApproval(self, approval_hash):
    """Returns the stored approval for 'approval_hash', or None.

    Files that cannot be read, or that lack a parseable 'expiresAt', are
    logged and treated as missing.
    """
    path = self._ApprovalPath(approval_hash)
    if not os.path.exists(path):
      return None
    try:
      with open(path, encoding='utf-8') as fp:
        approval = json.load(fp)
      ParseTimestamp(approval['expiresAt'])
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
      logging.warning('Ignoring malformed approval file %s: %s', path, e)
      return None
    return approval

  def HasApproval(self, approval_hash):
    approval = self.GetApproval(approval_hash)
    return bool(approval) and self._IsValid(approval)

  def RequireApproval(self, approval_hash):
    """Returns the unexpired approval for 'approval_hash'.

    Raises:
      errors.Approval.ApprovalNotFoundError: if there is none.
    """
    if not self.HasApproval(approval_hash):
      raise errors.Approval.ApprovalNotFoundError(
          'No valid approval found for hash {}. Approve the dry run first.'
          .format(approval_hash))
    return self.GetApproval(approval_hash)

  def FindApprovalByVault(self, vault_name, resource_group):
    """Returns the first approval of the vault, expired or not, or None."""
    for _, approval in self._ReadApprovals():
      vault_info = approval.get('vaultInfo') or {}
      if (vault_info.get('name') == vault_name and
          vault_info.get('resourceGroup') == resource_group):
        return approval
    return None

  def DeleteApproval(self, approval_hash):
    """Deletes an approval. Returns False if it did not exist."""
    path = self._ApprovalPath(approval_hash)
    if not os.path.exists(path):
      return False
    os.remove(path)
    return True

  def PruneExpired(self):
    """Deletes expired approvals and returns how many were deleted."""
    now = _Now()
    pruned = 0
    for path, approval in self._ReadApprovals():
      if not self._IsValid(approval, now):
        os.remove(path)
        pruned += 1
    logging.debug('Pruned %d expired approvals.', pruned)
    return pruned

  def ListValidApprovals(self):
    now = _Now()
    return [approval for _, approval in self._ReadApprovals()
            if self._IsValid(approval, now)]
