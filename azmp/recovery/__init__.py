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
"""Backup, site recovery and snapshot resources."""

from azmp.recovery import backup
from azmp.recovery import site_recovery
from azmp.recovery import snapshots

_BACKUP_ALIASES = ('backup',)
_SITE_RECOVERY_ALIASES = ('siterecovery', 'asr', 'dr')
_SNAPSHOT_ALIASES = ('snapshots', 'snapshot')


def BestPractices(kind=None):
  """Returns best-practice markdown for one recovery option or all."""
  kind = (kind or '').lower()
  if kind in _BACKUP_ALIASES:
    return backup.BestPractices()
  if kind in _SITE_RECOVERY_ALIASES:
    return site_recovery.BestPractices()
  if kind in _SNAPSHOT_ALIASES:
    return snapshots.BestPractices()
  return '\n\n'.join([
      '# Azure VM Recovery Options',
      '## Backup',
      backup.BestPractices(),
      '## Site Recovery (Disaster Recovery)',
      site_recovery.BestPractices(),
      '## Snapshots',
      snapshots.BestPractices(),
  ])
