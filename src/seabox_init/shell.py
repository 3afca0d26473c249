# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Resolution of the login shell.

The order is: explicit override, shell recorded in the account database, the preferred shell if
present, and the minimal shell present on every image.
"""

import logging
from typing import Optional

from seabox_init.capabilities import CapabilitySet
from seabox_init.configuration import ParameterSet
from seabox_init.constants import MINIMAL_SHELL, PREFERRED_SHELL

logger = logging.getLogger(__name__)


def fallback_shell(capabilities: CapabilitySet) -> str:
    """Get the shell to use when none is configured or recorded.

    Args:
        capabilities: The detected capabilities.

    Returns:
        The preferred shell if present, else the minimal shell.
    """
    return PREFERRED_SHELL if capabilities.preferred_shell else MINIMAL_SHELL


def select_shell(
    override: Optional[str], recorded_shell: Optional[str], capabilities: CapabilitySet
) -> str:
    """Select the login shell from its sources, in order of precedence.

    Args:
        override: The explicit shell override.
        recorded_shell: The login shell recorded for the user.
        capabilities: The detected capabilities.

    Returns:
        The login shell.
    """
    if override:
        return override
    if recorded_shell:
        return recorded_shell
    return fallback_shell(capabilities)


def creation_shell(params: ParameterSet, capabilities: CapabilitySet) -> str:
    """Get the login shell to record when creating the user.

    Args:
        params: The bootstrap parameters.
        capabilities: The detected capabilities.

    Returns:
        The login shell.
    """
    return select_shell(params.shell_override, None, capabilities)


def resolve_login_shell(
    params: ParameterSet, recorded_shell: str, capabilities: CapabilitySet
) -> str:
    """Resolve the login shell to hand the session off to.

    Args:
        params: The bootstrap parameters.
        recorded_shell: The login shell recorded for the container user, empty if none.
        capabilities: The detected capabilities.

    Returns:
        The login shell.
    """
    shell = select_shell(params.shell_override, recorded_shell, capabilities)
    logger.debug("Resolved login shell %s", shell)
    return shell
