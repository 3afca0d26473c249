# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Membership of the container user in the privilege groups."""

import logging
from enum import Enum

from seabox_init import accounts
from seabox_init.capabilities import CapabilitySet, GroupMembershipTool
from seabox_init.utilities import execute_command

logger = logging.getLogger(__name__)


class PrivilegeGroup(str, Enum):
    """Groups conventionally granted sudo access, in processing order.

    Attributes:
        SUDO: The Debian convention.
        WHEEL: The Fedora, Arch and Alpine convention.
    """

    SUDO = "sudo"
    WHEEL = "wheel"


def existing_groups() -> list[PrivilegeGroup]:
    """List the privilege groups defined in the group database.

    Returns:
        The privilege groups that exist, in processing order.
    """
    return [group for group in PrivilegeGroup if accounts.group_exists(group.value)]


def _membership_command(tool: GroupMembershipTool, username: str, group: str) -> list[str]:
    """Build the command adding the user to the group.

    Args:
        tool: The group membership tool.
        username: The username.
        group: The group name.

    Returns:
        The command in list form.
    """
    if tool == GroupMembershipTool.USERMOD:
        return ["usermod", "-a", "-G", group, username]
    return ["addgroup", username, group]


def grant_memberships(username: str, capabilities: CapabilitySet) -> list[PrivilegeGroup]:
    """Add the user to every privilege group that exists.

    Args:
        username: The resolved username.
        capabilities: The detected capabilities.

    Returns:
        The privilege groups that exist, whether or not the user could be added.
    """
    groups = existing_groups()
    for group in PrivilegeGroup:
        if group not in groups:
            logger.debug("Group %s not found, skipping", group.value)
            continue
        if capabilities.group_membership is None:
            logger.warning("Found group %s but usermod/addgroup do not exist", group.value)
            continue
        logger.debug("Adding user to %s group", group.value)
        _, exit_code = execute_command(
            _membership_command(capabilities.group_membership, username, group.value),
            check_exit=False,
        )
        if exit_code != 0:
            logger.warning("Failed to add user %s to group %s", username, group.value)
    return groups
