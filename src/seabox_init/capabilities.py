# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Detection of the account, package and privilege tools present in the container."""

import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from seabox_init.constants import PREFERRED_SHELL

logger = logging.getLogger(__name__)


class UserCreationTool(str, Enum):
    """Tools able to create an account, the fuller-featured first.

    Attributes:
        USERADD: The shadow-utils useradd.
        ADDUSER: The busybox adduser.
    """

    USERADD = "useradd"
    ADDUSER = "adduser"


class GroupMembershipTool(str, Enum):
    """Tools able to add an account to a group, the fuller-featured first.

    Attributes:
        USERMOD: The shadow-utils usermod.
        ADDGROUP: The busybox addgroup.
    """

    USERMOD = "usermod"
    ADDGROUP = "addgroup"


class PackageManager(str, Enum):
    """Supported package managers, in order of priority.

    Attributes:
        APT: Debian and derivatives.
        DNF: Fedora and derivatives.
        PACMAN: Arch Linux.
        APK: Alpine Linux.
    """

    APT = "apt"
    DNF = "dnf"
    PACMAN = "pacman"
    APK = "apk"


@dataclass(frozen=True)
class CapabilitySet:
    """The tools present in the container.

    Attributes:
        user_creation: The best user creation tool, if any.
        group_membership: The best group membership tool, if any.
        package_manager: The package manager with the highest priority, if any.
        sudo: Whether sudo is present.
        su: Whether su is present.
        preferred_shell: Whether the preferred login shell is present.
    """

    user_creation: Optional[UserCreationTool]
    group_membership: Optional[GroupMembershipTool]
    package_manager: Optional[PackageManager]
    sudo: bool
    su: bool
    preferred_shell: bool

    @property
    def has_escalation_tools(self) -> bool:
        """Whether both sudo and su are present."""
        return self.sudo and self.su


def _command_exists(command: str) -> bool:
    """Check whether a command is found on the PATH.

    Args:
        command: The command name, or an absolute path to an executable.

    Returns:
        Whether the command exists.
    """
    return shutil.which(command) is not None


def detect() -> CapabilitySet:
    """Probe the container for the tools used by the bootstrap.

    Returns:
        The detected capabilities.
    """
    capabilities = CapabilitySet(
        user_creation=next(
            (tool for tool in UserCreationTool if _command_exists(tool.value)), None
        ),
        group_membership=next(
            (tool for tool in GroupMembershipTool if _command_exists(tool.value)), None
        ),
        package_manager=next(
            (manager for manager in PackageManager if _command_exists(manager.value)), None
        ),
        sudo=_command_exists("sudo"),
        su=_command_exists("su"),
        preferred_shell=_command_exists(PREFERRED_SHELL),
    )
    logger.debug("Detected capabilities: %s", capabilities)
    return capabilities
