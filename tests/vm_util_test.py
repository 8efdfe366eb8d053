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
"""Tests for azmp.vm_util."""

import unittest

import mock

from azmp import errors
from azmp import vm_util


class IssueCommandTestCase(unittest.TestCase):

  def testReturnsOutput(self):
    stdout, stderr, retcode = vm_util.IssueCommand(['echo', 'hello'])
    self.assertEqual('hello\n', stdout)
    self.assertEqual('', stderr)
    self.assertEqual(0, retcode)

  def testRaisesOnFailure(self):
    with self.assertRaises(errors.VmUtil.IssueCommandError):
      vm_util.IssueCommand(['false'])

  def testReturnsFailure(self):
    _, _, retcode = vm_util.IssueCommand(['false'], raise_on_failure=False)
    self.assertEqual(1, retcode)

  def testTimeoutRaises(self):
    with self.assertRaises(errors.VmUtil.IssueCommandTimeoutError):
      vm_util.IssueCommand(['sleep', '10'], timeout=0.1)

  def testTimeoutWithoutRaise(self):
    _, _, retcode = vm_util.IssueCommand(
        ['sleep', '10'], timeout=0.1, raise_on_timeout=False,
        raise_on_failure=False)
    self.assertNotEqual(0, retcode)

  def testMissingExecutable(self):
    with self.assertRaises(OSError):
      vm_util.IssueCommand(['azmp-no-such-executable'])


class RunningOnWindowsTestCase(unittest.TestCase):

  def testWindows(self):
    with mock.patch('os.name', 'nt'):
      self.assertTrue(vm_util.RunningOnWindows())

  def testPosix(self):
    with mock.patch('os.name', 'posix'):
      self.assertFalse(vm_util.RunningOnWindows())


if __name__ == '__main__':
  unittest.main()
