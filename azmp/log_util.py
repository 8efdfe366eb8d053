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
"""Utilities related to loggers and logging."""

import logging

from absl import flags

DEBUG = 'debug'
INFO = 'info'
WARNING = 'warning'
ERROR = 'error'
LOG_LEVELS = {
    DEBUG: logging.DEBUG,
    INFO: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}

LOG_LEVEL = flags.DEFINE_enum(
    'log_level',
    INFO,
    list(LOG_LEVELS.keys()),
    'The log level to run at.',
)
LOG_FILE = flags.DEFINE_string(
    'log_file',
    None,
    'Optional path of a file that receives debug-level logs in addition to '
    'stderr.',
)
flags.DEFINE_enum(
    'file_log_level',
    DEBUG,
    list(LOG_LEVELS.keys()),
    'Anything logged at this level or higher will be written to the log file.',
)

STDERR_FORMAT = '%(levelname)-8s %(message)s'
FILE_FORMAT = '%(asctime)s %(filename)s:%(lineno)d %(levelname)-8s %(message)s'


def ConfigureBasicLogging():
  """Initializes basic python logging before flags are parsed."""
  logging.basicConfig(format=STDERR_FORMAT, level=logging.INFO)


def ConfigureLogging(stderr_log_level, log_path=None,
                     file_log_level=logging.DEBUG):
  """Configure logging.

  Note that this will destroy existing logging configuration!

  This configures python logging to emit messages to stderr and, when a path
  is given, to a log file.

  Args:
    stderr_log_level: Messages at this level and above are emitted to stderr.
    log_path: Optional path to the log file.
    file_log_level: Messages at this level and above are written to the log
      file.
  """
  logger = logging.getLogger()
  logger.handlers = []
  logger.setLevel(logging.DEBUG)

  handler = logging.StreamHandler()
  handler.setLevel(stderr_log_level)
  handler.setFormatter(logging.Formatter(STDERR_FORMAT))
  logger.addHandler(handler)

  if log_path:
    handler = logging.FileHandler(log_path)
    handler.setLevel(file_log_level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(handler)
    logging.debug('Verbose logging to: %s', log_path)


def ConfigureLoggingFromFlags():
  """Configures logging from --log_level, --log_file and --file_log_level."""
  ConfigureLogging(
      LOG_LEVELS[LOG_LEVEL.value],
      log_path=LOG_FILE.value,
      file_log_level=LOG_LEVELS[flags.FLAGS.file_log_level])
