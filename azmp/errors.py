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

"""A common location for all azmp-defined exceptions."""


class Error(Exception):
  pass


class Config(object):
  """Errors raised while building resources from a configuration."""

  class InvalidConfigError(Error):
    """Error raised when a required configuration value is missing or bad."""
    pass


class Vhd(object):
  """Errors raised by azure/vhd_validation.py."""

  class VhdReadError(Error):
    """Error raised when a VHD footer or header cannot be read."""
    pass


class Approval(object):
  """Errors raised by approval_manager.py."""

  class InvalidDryRunError(Error):
    """Error raised when a dry-run file is missing or malformed."""
    pass

  class ApprovalNotFoundError(Error):
    """Error raised when no unexpired approval matches a hash."""
    pass


class Cleanup(object):
  """Errors raised by the vault cleanup command."""

  class PowerShellNotFoundError(Error):
    """Error raised when pwsh is not installed or not on the PATH."""
    pass

  class ScriptNotFoundError(Error):
    pass

  class ConfirmationRequiredError(Error):
    """Error raised when a destructive run lacks --confirm or --force."""
    pass

  class ScriptFailedError(Error):
    pass


class Helpers(object):
  """Errors raised by the template helper registry."""

  class UnknownHelperError(Error):
    pass


class VmUtil(object):
  """Errors raised by vm_util.py."""

  class IssueCommandError(Error):
    pass

  class IssueCommandTimeoutError(Error):
    pass
