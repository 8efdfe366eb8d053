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
"""Runs local commands such as pwsh for the cleanup commands."""

import logging
import os
import subprocess
import tempfile
import threading

from azmp import errors

WINDOWS = 'nt'
DEFAULT_TIMEOUT = 300


def RunningOnWindows():
  """Returns True if azmp is running on Windows."""
  return os.name == WINDOWS


def IssueCommand(cmd, env=None, timeout=DEFAULT_TIMEOUT,
                 raise_on_failure=True, raise_on_timeout=True):
  """Runs 'cmd' once and returns what it printed.

  Output is collected in temporary files, so commands that print a lot (the
  vault cleanup script does) cannot fill a pipe and hang.

  Args:
    cmd: list of strings. The program and its arguments.
    env: dict. Environment of the child process, or None to inherit ours.
    timeout: float. Seconds after which the process is killed. None waits
      forever.
    raise_on_failure: bool. Whether a non-zero exit code raises.
    raise_on_timeout: bool. Whether a killed process raises.

  Returns:
    A tuple (stdout, stderr, retcode).

  Raises:
    OSError: if the program cannot be started.
    errors.VmUtil.IssueCommandError: on a non-zero exit code when
      'raise_on_failure' is set.
    errors.VmUtil.IssueCommandTimeoutError: when the timeout kills the process
      and 'raise_on_timeout' is set.
  """
  full_cmd = ' '.join(cmd)
  logging.info('Running: %s', full_cmd)

  with tempfile.TemporaryFile() as out_file, \
      tempfile.TemporaryFile() as err_file:
    process = subprocess.Popen(cmd, env=env, shell=RunningOnWindows(),
                               stdin=subprocess.DEVNULL, stdout=out_file,
                               stderr=err_file)
    timed_out = threading.Event()

    def _Kill():
      timed_out.set()
      logging.warning('Killing "%s" after %s seconds.', full_cmd, timeout)
      process.kill()

    timer = threading.Timer(timeout, _Kill) if timeout is not None else None
    if timer:
      timer.start()
    try:
      process.wait()
    finally:
      if timer:
        timer.cancel()

    out_file.seek(0)
    stdout = out_file.read().decode('utf-8', 'ignore')
    err_file.seek(0)
    stderr = err_file.read().decode('utf-8', 'ignore')

  retcode = process.returncode
  summary = 'Ran: {}\nReturnCode: {}\nSTDOUT: {}\nSTDERR: {}'.format(
      full_cmd, retcode, stdout, stderr)
  if retcode:
    logging.info(summary)
  else:
    logging.debug(summary)

  if timed_out.is_set() and raise_on_timeout:
    raise errors.VmUtil.IssueCommandTimeoutError(
        '{}\nTimed out after {} seconds.'.format(summary, timeout))
  if retcode and raise_on_failure:
    raise errors.VmUtil.IssueCommandError(summary)
  return stdout, stderr, retcode
