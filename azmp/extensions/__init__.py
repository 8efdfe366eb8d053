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
"""VM extension profiles for Windows, Linux and both platforms."""

from azmp import arm_util

WINDOWS = 'Windows'
LINUX = 'Linux'


def Extension(name, publisher, extension_type, version, settings=None,
              protected_settings=None):
  """Returns an extension profile entry.

  Empty settings are omitted, as are None values inside them.
  """
  return arm_util.Prune({
      'name': name,
      'publisher': publisher,
      'type': extension_type,
      'typeHandlerVersion': version,
      'autoUpgradeMinorVersion': True,
      'settings': settings or None,
      'protectedSettings': protected_settings or None,
  })
