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
"""Finds the guides, queries and script templates bundled in azmp/data.

Users can specify additional directories to search for data files using the
`--data_search_paths` flag, e.g. to override a workbook query. Resource names
are '/' separated, e.g. 'workbooks/vm_overview.kql'.
"""

import importlib.resources
import logging
import os

from absl import flags

FLAGS = flags.FLAGS

flags.DEFINE_multi_string('data_search_paths', ['.'],
                          'Additional paths to search for data files. '
                          'These paths will be searched prior to using files '
                          'bundled with azmp.')

DATA_PACKAGE_NAME = 'azmp.data'


class ResourceNotFound(ValueError):
  """Error raised when a resource could not be found on the search path."""
  pass


def _SearchPaths():
  """Returns the --data_search_paths directories to consult.

  Paths given on the command line are all searched, with a warning for those
  that are not directories. Default paths are only searched if they exist.
  """
  if not FLAGS.is_parsed():
    return []
  if FLAGS['data_search_paths'].present:
    for path in FLAGS.data_search_paths:
      if not os.path.isdir(path):
        logging.warning('Data search path %s is not a directory.', path)
    return list(FLAGS.data_search_paths)
  return [path for path in FLAGS.data_search_paths if os.path.isdir(path)]


def _BundledResource(resource_name):
  resource = importlib.resources.files(DATA_PACKAGE_NAME)
  for part in resource_name.split('/'):
    resource = resource.joinpath(part)
  return resource


def ResourcePath(resource_name, search_user_paths=True):
  """Gets the filename of a resource.

  Args:
    resource_name: string. Name of a resource, '/' separated.
    search_user_paths: boolean. Whether paths from "--data_search_paths" should
      be searched before the bundled files.
  Returns:
    A path to the resource on the filesystem.
  Raises:
    ResourceNotFound: When resource was not found.
  """
  searched = []
  if search_user_paths:
    for directory in _SearchPaths():
      path = os.path.join(directory, *resource_name.split('/'))
      if os.path.isfile(path):
        return path
      searched.append(directory)
  bundled = _BundledResource(resource_name)
  if bundled.is_file():
    return str(bundled)
  searched.append(DATA_PACKAGE_NAME)
  raise ResourceNotFound(
      '{0} (Searched: {1})'.format(resource_name, ', '.join(searched)))


def ReadResource(resource_name, search_user_paths=True):
  """Returns the text content of a resource."""
  with open(ResourcePath(resource_name, search_user_paths),
            encoding='utf-8') as fp:
    return fp.read()
