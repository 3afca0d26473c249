# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Creation and resolution of the container user."""

import logging
from dataclasses import dataclass

from seabox_init import accounts
from seabox_init.capabilities import CapabilitySet, UserCreationTool
from seabox_init.configuration import ParameterSet
from seabox_init.errors import (
    MissingCreationToolError,
    SubprocessError,
    UserCreationError,
    UserNotFoundError,
)
from seabox_init.shell import creation_shell
from seabox_init.utilities import execute_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerUser:
    """The container user every later stage addresses.

    Attributes:
        uid: The numeric user id, supplied by the host.
        username: The name found in the account database for the uid.
        recorded_shell: The login shell recorded in the account database, empty if none.
        password_set: Whether a password was set during this run.
    """

    uid: int
    username: str
    recorded_shell: str = ""
    password_set: bool = False


def _creation_command(
    tool: UserCreationTool, username: str, uid: int, shell: str
) -> list[str]:
    """Build the command creating the user with a home directory.

    Args:
        tool: The user creation tool.
        username: The requested username.
        uid: The numeric user id.
        shell: The login shell.

    Returns:
        The command in list form.
    """
    if tool == UserCreationTool.USERADD:
        return ["useradd", "--uid", str(uid), "--shell", shell, "--create-home", username]
    # busybox adduser creates the home directory by default, -D skips the password prompt.
    return ["adduser", "--gecos", "", "-D", "-u", str(uid), "-s", shell, username]


def create_user(params: ParameterSet, capabilities: CapabilitySet) -> None:
    """Create the container user unless an account already owns the uid.

    Args:
        params: The bootstrap parameters.
        capabilities: The detected capabilities.

    Raises:
        MissingCreationToolError: If neither useradd nor adduser is present.
        UserCreationError: If the creation command fails.
    """
    existing = accounts.find_user_by_uid(params.uid)
    if existing is not None:
        logger.debug(
            "User %s already has uid %s, skipping user creation", existing.name, params.uid
        )
        return

    if capabilities.user_creation is None:
        raise MissingCreationToolError(
            f"Neither useradd nor adduser found in the container, create a user with "
            f"uid={params.uid} manually"
        )

    shell = creation_shell(params, capabilities)
    logger.info("Creating user %s with uid=%s", params.username, params.uid)
    try:
        execute_command(
            _creation_command(capabilities.user_creation, params.username, params.uid, shell)
        )
    except SubprocessError as exc:
        raise UserCreationError(f"Failed to create user {params.username}: {exc}") from exc


def resolve_user(params: ParameterSet) -> ContainerUser:
    """Resolve the container user from the numeric id.

    The requested username may differ from the name in the account database, e.g. when the image
    already has a user with the uid.

    Args:
        params: The bootstrap parameters.

    Raises:
        UserNotFoundError: If no account has the uid.

    Returns:
        The container user.
    """
    entry = accounts.find_user_by_uid(params.uid)
    if entry is None:
        if params.create_user:
            raise UserNotFoundError(f"No user with uid={params.uid} found after user creation")
        raise UserNotFoundError(
            f"No user with uid={params.uid} found in the container and user creation is "
            "disabled, check the configured uid"
        )
    if entry.name != params.username:
        logger.debug(
            "Using existing user %s for uid=%s instead of %s",
            entry.name,
            params.uid,
            params.username,
        )
    return ContainerUser(uid=entry.uid, username=entry.name, recorded_shell=entry.shell)


def provision(params: ParameterSet, capabilities: CapabilitySet) -> ContainerUser:
    """Create the user if requested and resolve it.

    Args:
        params: The bootstrap parameters.
        capabilities: The detected capabilities.

    Returns:
        The container user.
    """
    if params.create_user:
        create_user(params, capabilities)
    return resolve_user(params)

