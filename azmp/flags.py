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
"""File used for the management of global azmp flags."""

import os

from absl import flags

FLAGS = flags.FLAGS

DEFAULT_AZMP_HOME = os.path.join('~', '.azmp')
DEFAULT_APPROVAL_TTL_HOURS = 24


def GetCurrentUser():
  """Get the current user name from the environment.

  Returns:
    The USER or USERNAME variable, OR 'unknown' if neither is set.
  """
  for variable in ('USER', 'USERNAME'):
    if os.environ.get(variable):
      return os.environ[variable]
  return 'unknown'


AZMP_HOME = flags.DEFINE_string(
    'azmp_home',
    DEFAULT_AZMP_HOME,
    'Base directory for azmp state. Approvals are stored in the approvals/ '
    'subdirectory.',
)
APPROVAL_TTL_HOURS = flags.DEFINE_integer(
    'approval_ttl_hours',
    DEFAULT_APPROVAL_TTL_HOURS,
    'How long a saved cleanup approval stays valid, in hours.',
    lower_bound=1,
)
