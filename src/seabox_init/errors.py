# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Errors used by the container bootstrap."""
from __future__ import annotations

from typing import Union


class ConfigurationError(Exception):
    """Error for an invalid bootstrap configuration."""


class SubprocessError(Exception):
    """Error for Subprocess calls.

    Attributes:
        cmd: Command in list form.
        return_code: Return code of the subprocess.
        stdout: Content of stdout of the subprocess.
        stderr: Content of stderr of the subprocess.
    """

    def __init__(
        self,
        cmd: list[str],
        return_code: int,
        stdout: Union[bytes, str],
        stderr: Union[bytes, str],
    ):
        """Construct the subprocess error.

        Args:
            cmd: Command in list form.
            return_code: Return code of the subprocess.
            stdout: Content of stdout of the subprocess.
            stderr: Content of stderr of the subprocess.
        """
        super().__init__(f"[{' '.join(cmd)}] failed with return code {return_code!r}: {stderr!r}")

        self.cmd = cmd
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr


class BootstrapError(Exception):
    """Base class for errors that abort the bootstrap without a session handoff."""


class MissingCreationToolError(BootstrapError):
    """Represents a container without useradd or adduser to create the user."""


class UserCreationError(BootstrapError):
    """Represents a failure of the user creation command."""


class UserNotFoundError(BootstrapError):
    """Represents no account in the account database for the requested uid."""


class InputAbortError(BootstrapError):
    """Represents the end of standard input while waiting for an answer."""


class HandoffUnavailableError(BootstrapError):
    """Represents a container with neither su nor sudo to start the session."""
