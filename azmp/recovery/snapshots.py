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
"""Managed disk snapshots and VM restore points."""

import re

from azmp import arm_util
from azmp import data

SNAPSHOT_TYPE = 'Microsoft.Compute/snapshots'
DISK_TYPE = 'Microsoft.Compute/disks'
VM_TYPE = 'Microsoft.Compute/virtualMachines'
COLLECTION_TYPE = 'Microsoft.Compute/restorePointCollections'
RESTORE_POINT_TYPE = 'Microsoft.Compute/restorePointCollections/restorePoints'
DISK_API_VERSION = '2023-04-02'
COMPUTE_API_VERSION = '2023-09-01'

CRASH_CONSISTENT = 'CrashConsistent'
APPLICATION_CONSISTENT = 'ApplicationConsistent'

SNAPSHOT_PRICE_PER_GB_MONTH = 0.05

SNAPSHOT_RETENTION_POLICIES = {
    'hourly': {
        'frequency': 'Hourly',
        'retention': 24,
        'description': 'Keep 24 hourly snapshots',
    },
    'daily': {
        'frequency': 'Daily',
        'retention': 7,
        'description': 'Keep 7 daily snapshots',
    },
    'weekly': {
        'frequency': 'Weekly',
        'retention': 4,
        'description': 'Keep 4 weekly snapshots',
    },
    'monthly': {
        'frequency': 'Monthly',
        'retention': 12,
        'description': 'Keep 12 monthly snapshots',
    },
}

_SNAPSHOT_SCHEDULES = {
    'development': ('Daily', 3,
                    'Daily snapshots, 3-day retention for quick rollback'),
    'production': ('Daily', 7,
                   'Daily snapshots, 7-day retention for week-long recovery'),
    'critical': ('Hourly', 24,
                 'Hourly snapshots, 24-hour retention for minimal data loss'),
}
_DEFAULT_SCHEDULE = ('Daily', 7, 'Default: Daily snapshots, 7-day retention')

_NAME_RE = re.compile(r'^[a-zA-Z0-9_-]+$')


def DiskSnapshot(name, disk_name, incremental=True, sku='Standard_LRS',
                 location=arm_util.DEFAULT_LOCATION, tags=None):
  """Returns a snapshot copying the managed disk 'disk_name'."""
  return {
      'type': SNAPSHOT_TYPE,
      'apiVersion': DISK_API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'sku': {'name': sku or 'Standard_LRS'},
      'properties': {
          'creationData': {
              'createOption': 'Copy',
              'sourceResourceId': arm_util.ResourceId(DISK_TYPE, disk_name),
          },
          'incremental': bool(incremental),
          'networkAccessPolicy': 'AllowAll',
          'publicNetworkAccess': 'Enabled',
      },
      'tags': tags or {},
  }


def RestorePointCollection(name, vm_name, location=arm_util.DEFAULT_LOCATION):
  return {
      'type': COLLECTION_TYPE,
      'apiVersion': COMPUTE_API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'properties': {
          'source': {'id': arm_util.ResourceId(VM_TYPE, vm_name)},
      },
  }


def VmRestorePoint(name, collection_name, consistency_mode=CRASH_CONSISTENT,
                   exclude_disks=None):
  """Returns a restore point in 'collection_name'.

  Args:
    name: string. Restore point name.
    collection_name: string. Name of the restore point collection.
    consistency_mode: string. 'CrashConsistent' or 'ApplicationConsistent'.
    exclude_disks: list of managed disk names left out of the restore point.
  """
  restore_point = {
      'type': RESTORE_POINT_TYPE,
      'apiVersion': COMPUTE_API_VERSION,
      'name': '{}/{}'.format(collection_name, name),
      'properties': {
          'consistencyMode': consistency_mode or CRASH_CONSISTENT,
      },
  }
  if exclude_disks:
    restore_point['properties']['excludeDisks'] = [
        {'id': arm_util.ResourceId(DISK_TYPE, disk)} for disk in exclude_disks
    ]
  return restore_point


def DiskFromSnapshot(name, snapshot_name, sku='Premium_LRS',
                     disk_size_gb=None, location=arm_util.DEFAULT_LOCATION):
  """Returns a managed disk restored from 'snapshot_name'.

  The size is inherited from the snapshot unless 'disk_size_gb' is given.
  """
  properties = {
      'creationData': {
          'createOption': 'Copy',
          'sourceResourceId': arm_util.ResourceId(SNAPSHOT_TYPE,
                                                  snapshot_name),
      },
  }
  if disk_size_gb:
    properties['diskSizeGB'] = disk_size_gb
  return {
      'type': DISK_TYPE,
      'apiVersion': DISK_API_VERSION,
      'name': name,
      'location': location or arm_util.DEFAULT_LOCATION,
      'sku': {'name': sku or 'Premium_LRS'},
      'properties': properties,
  }


def EstimateSnapshotCost(disk_size_gb, incremental, snapshot_count=7,
                         change_rate=0.1):
  """Returns the monthly storage cost in USD of 'snapshot_count' snapshots.

  An incremental chain stores one full copy and 'change_rate' of the disk
  for every later snapshot.
  """
  if incremental:
    total_gb = disk_size_gb + disk_size_gb * change_rate * (snapshot_count - 1)
  else:
    total_gb = disk_size_gb * snapshot_count
  return round(total_gb * SNAPSHOT_PRICE_PER_GB_MONTH, 2)


def EstimateRestoreTime(disk_size_gb, incremental):
  """Returns the minutes needed to create a disk from a snapshot."""
  minutes_per_100gb = 2 if incremental else 3
  return int(round(5 + disk_size_gb / 100.0 * minutes_per_100gb))


def GetRecommendedSnapshotSchedule(workload):
  frequency, retention, description = _SNAPSHOT_SCHEDULES.get(
      workload, _DEFAULT_SCHEDULE)
  return {
      'frequency': frequency,
      'retention': retention,
      'incremental': True,
      'description': description,
  }


def ValidateSnapshotConfig(config):
  """Validates a snapshot configuration.

  Args:
    config: dict with the keys 'name', 'diskName' and 'incremental'.

  Returns:
    A dict {'valid', 'errors', 'warnings'}.
  """
  validation_errors = []
  warnings = []
  name = config.get('name') or ''
  if not name:
    validation_errors.append('Snapshot name is required')
  if len(name) > 80:
    validation_errors.append('Snapshot name must be 80 characters or less')
  if not _NAME_RE.match(name):
    validation_errors.append('Snapshot name can only contain letters, '
                             'numbers, underscores, and hyphens')
  if not config.get('diskName'):
    validation_errors.append('Disk name is required')
  if not config.get('incremental'):
    warnings.append(
        'Consider using incremental snapshots to reduce storage costs')
  return {
      'valid': not validation_errors,
      'errors': validation_errors,
      'warnings': warnings,
  }


def BestPractices():
  return data.ReadResource('best_practices/snapshots.md').strip()
