# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Handoff of the bootstrap process to the interactive session of the container user.

The handoff is a point of no return: once the process image is replaced, nothing of the
bootstrap runs anymore. The session is therefore described by a SessionSpec value and the
replacement is the last act of the caller.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from seabox_init import accounts
from seabox_init.capabilities import CapabilitySet
from seabox_init.constants import SEABOX_NAME
from seabox_init.errors import HandoffUnavailableError
from seabox_init.shell import select_shell

logger = logging.getLogger(__name__)

MANUAL_RECOVERY_MESSAGE = (
    "sudo / su not installed in the container. Manually enter the container with "
    f"'{SEABOX_NAME} enter'"
)


class HandoffMechanism(str, Enum):
    """Tools able to start a login session as another user.

    Attributes:
        SU: su, able to use an explicit shell.
        SUDO: sudo in interactive login mode.
    """

    SU = "su"
    SUDO = "sudo"


class HandoffState(str, Enum):
    """States of the session handoff.

    Attributes:
        IDLE: No session prepared.
        HANDOFF_READY: A session is prepared.
        REPLACED: The process image is being replaced by the session.
        UNAVAILABLE: No tool can start the session.
    """

    IDLE = "idle"
    HANDOFF_READY = "handoff_ready"
    REPLACED = "replaced"
    UNAVAILABLE = "unavailable"


_TRANSITIONS = {
    HandoffState.IDLE: (HandoffState.HANDOFF_READY,),
    HandoffState.HANDOFF_READY: (HandoffState.REPLACED, HandoffState.UNAVAILABLE),
}


@dataclass(frozen=True)
class SessionSpec:
    """The interactive session to replace the bootstrap with.

    Attributes:
        username: The container user.
        shell: The login shell.
        mechanism: The tool starting the session.
    """

    username: str
    shell: str
    mechanism: HandoffMechanism

    @property
    def argv(self) -> list[str]:
        """The command starting the login session."""
        if self.mechanism == HandoffMechanism.SU:
            return ["su", "-s", self.shell, "-", self.username]
        return ["sudo", "-iu", self.username]


class SessionHandoff:
    """Preparation and execution of the session handoff.

    Attributes:
        state: The current state of the handoff.
    """

    def __init__(self, capabilities: CapabilitySet):
        """Construct the handoff.

        Args:
            capabilities: The capabilities of the container after the bootstrap.
        """
        self._capabilities = capabilities
        self.state = HandoffState.IDLE

    def _transition(self, state: HandoffState) -> None:
        """Move the handoff to a new state.

        Args:
            state: The next state.

        Raises:
            RuntimeError: If the transition is not allowed from the current state.
        """
        if state not in _TRANSITIONS.get(self.state, ()):
            raise RuntimeError(
                f"Cannot move the session handoff from {self.state.value} to {state.value}"
            )
        self.state = state

    def prepare(self, username: str, shell: str) -> SessionSpec:
        """Describe the session of the user.

        Args:
            username: The resolved username.
            shell: The resolved login shell.

        Raises:
            HandoffUnavailableError: If neither su nor sudo is present.
            RuntimeError: If a session was already prepared.

        Returns:
            The session to hand off to.
        """
        self._transition(HandoffState.HANDOFF_READY)
        if self._capabilities.su:
            mechanism = HandoffMechanism.SU
        elif self._capabilities.sudo:
            mechanism = HandoffMechanism.SUDO
        else:
            self._transition(HandoffState.UNAVAILABLE)
            raise HandoffUnavailableError(MANUAL_RECOVERY_MESSAGE)
        return SessionSpec(username=username, shell=shell, mechanism=mechanism)

    def replace(self, session: SessionSpec) -> None:
        """Replace the current process with the session.

        Args:
            session: The prepared session.

        Raises:
            RuntimeError: If no session was prepared.
        """
        self._transition(HandoffState.REPLACED)
        logger.debug("Handing off to %s", session.argv)
        exec_session(session.argv)


def exec_session(  # pragma: no cover
    argv: list[str], env: Optional[dict[str, str]] = None
) -> None:
    """Replace the current process image with a command.

    Args:
        argv: The command in list form, looked up on the PATH.
        env: The environment of the command, defaults to the current environment.
    """
    if env is None:
        os.execvp(argv[0], argv)  # nosec B606
    else:
        os.execvpe(argv[0], argv, env)  # nosec B606


def default_shell_command(
    capabilities: CapabilitySet, override: Optional[str] = None
) -> tuple[list[str], dict[str, str]]:
    """Describe the shell of the current user, used when re-entering a provisioned container.

    Args:
        capabilities: The detected capabilities.
        override: An explicit shell to use.

    Returns:
        The shell command and its environment, with SHELL set to the shell.
    """
    entry = accounts.find_user_by_uid(os.getuid())
    shell = select_shell(override, entry.shell if entry else None, capabilities)
    env = dict(os.environ)
    env["SHELL"] = shell
    return [shell], env
