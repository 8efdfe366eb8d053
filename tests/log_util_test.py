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
"""Tests for azmp.log_util."""

import logging

from absl import flags
from absl.testing import absltest
from absl.testing import flagsaver

from azmp import log_util
from tests import azmp_common_test_case

FLAGS = flags.FLAGS


class ConfigureLoggingTestCase(azmp_common_test_case.AzmpCommonTestCase):

  def setUp(self):
    super(ConfigureLoggingTestCase, self).setUp()
    logger = logging.getLogger()
    self.addCleanup(logger.setLevel, logger.level)
    self.addCleanup(setattr, logger, 'handlers', list(logger.handlers))

  def testStderrOnly(self):
    log_util.ConfigureLogging(logging.WARNING)
    handlers = logging.getLogger().handlers
    self.assertLen(handlers, 1)
    self.assertEqual(logging.WARNING, handlers[0].level)

  def testLogFile(self):
    log_path = self.create_tempfile('azmp.log').full_path
    log_util.ConfigureLogging(logging.INFO, log_path=log_path,
                              file_log_level=logging.DEBUG)
    logging.debug('only in the file')
    for handler in logging.getLogger().handlers:
      handler.flush()
      self.addCleanup(handler.close)
    with open(log_path) as fp:
      self.assertIn('only in the file', fp.read())

  @flagsaver.flagsaver(log_level='error')
  def testFromFlags(self):
    log_util.ConfigureLoggingFromFlags()
    self.assertEqual(logging.ERROR, logging.getLogger().handlers[0].level)


if __name__ == '__main__':
  absltest.main()
