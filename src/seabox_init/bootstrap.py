# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""The bootstrap pipeline run when entering a container.

Concurrent runs against the same container are not supported: the host must serialize the
entries of a container until its first bootstrap is complete.
"""

import dataclasses
import logging
from typing import Callable, Optional

from seabox_init import capabilities as capabilities_module
from seabox_init import groups, installer, password, provisioner, sudoers
from seabox_init.capabilities import CapabilitySet
from seabox_init.configuration import ParameterSet
from seabox_init.provisioner import ContainerUser
from seabox_init.session import SessionHandoff, SessionSpec
from seabox_init.shell import resolve_login_shell

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class BootstrapResult:
    """Outcome of the bootstrap stages.

    Attributes:
        user: The container user.
        capabilities: The capabilities after the installation stage.
        session: The session to hand off to.
        handoff: The handoff performing the process replacement.
    """

    user: ContainerUser
    capabilities: CapabilitySet
    session: SessionSpec
    handoff: SessionHandoff


def run(
    params: ParameterSet,
    capabilities: Optional[CapabilitySet] = None,
    read_line: Callable[[str], str] = input,
) -> BootstrapResult:
    """Run every bootstrap stage up to the session handoff, excluded.

    Args:
        params: The bootstrap parameters.
        capabilities: The capabilities of the container, detected if not given.
        read_line: Function prompting the operator on standard input.

    Returns:
        The container user and the session to hand off to.
    """
    if capabilities is None:
        capabilities = capabilities_module.detect()

    user = provisioner.provision(params, capabilities)
    capabilities = installer.ensure_escalation_tools(
        params.sudo_install_policy, capabilities, read_line
    )

    existing_groups = groups.grant_memberships(user.username, capabilities)
    sudoers.grant_group_rules(existing_groups)

    if params.passwordless_sudo:
        sudoers.configure_passwordless(user.username, capabilities)

    if params.skip_password:
        logger.debug("Skipping password creation for user %s", user.username)
    else:
        user = dataclasses.replace(
            user, password_set=password.set_password(user.username, user.uid)
        )

    shell = resolve_login_shell(params, user.recorded_shell, capabilities)
    handoff = SessionHandoff(capabilities)
    session = handoff.prepare(user.username, shell)
    return BootstrapResult(
        user=user, capabilities=capabilities, session=session, handoff=handoff
    )
