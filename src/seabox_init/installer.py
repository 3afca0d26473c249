# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Installation of sudo and su through the package manager of the container."""

import logging
from typing import Callable

from seabox_init import capabilities as capabilities_module
from seabox_init.capabilities import CapabilitySet, PackageManager
from seabox_init.configuration import SudoInstallPolicy
from seabox_init.errors import InputAbortError, SubprocessError
from seabox_init.utilities import execute_command, retry

logger = logging.getLogger(__name__)

INSTALL_PROMPT = "sudo and su not found in the container - install? [Y/n] "

# Only dnf ships su in a separate package, the others provide it through their base system.
INSTALL_COMMANDS: dict[PackageManager, list[str]] = {
    PackageManager.APT: ["apt", "install", "-y", "sudo"],
    PackageManager.DNF: ["dnf", "install", "-y", "sudo", "su"],
    PackageManager.PACMAN: ["pacman", "-Syu", "--noconfirm", "sudo"],
    PackageManager.APK: ["apk", "add", "sudo"],
}


def parse_answer(answer: str) -> bool:
    """Interpret the answer to the install prompt.

    Args:
        answer: The line entered by the operator.

    Returns:
        False if the answer starts with n or N, True otherwise. An empty answer is a yes.
    """
    return not answer.startswith(("n", "N"))


def prompt_install(read_line: Callable[[str], str] = input) -> bool:
    """Ask the operator whether to install sudo and su.

    Args:
        read_line: Function printing the prompt and returning the line read from standard input.

    Raises:
        InputAbortError: If standard input is closed before an answer.

    Returns:
        Whether to install.
    """
    try:
        answer = read_line(INSTALL_PROMPT)
    except EOFError as exc:
        raise InputAbortError("No answer to the sudo installation prompt, aborting") from exc
    return parse_answer(answer)


def decide(policy: SudoInstallPolicy, read_line: Callable[[str], str] = input) -> bool:
    """Resolve the install decision from the policy.

    Args:
        policy: The install policy.
        read_line: Function used to prompt the operator when the policy is to prompt.

    Returns:
        Whether to install.
    """
    if policy == SudoInstallPolicy.INSTALL:
        return True
    if policy == SudoInstallPolicy.NO_INSTALL:
        return False
    return prompt_install(read_line)


@retry(exception=SubprocessError, tries=3, delay=5, backoff=2, local_logger=logger)
def _refresh_apt_index() -> None:
    """Refresh the apt package index; mirrors are retried as they can be flaky."""
    execute_command(["apt", "update"], interactive=True)


def install_packages(manager: PackageManager) -> bool:
    """Install sudo, and su where packaged separately, with the package manager.

    Args:
        manager: The package manager.

    Returns:
        Whether the installation succeeded.
    """
    try:
        if manager == PackageManager.APT:
            _refresh_apt_index()
        execute_command(INSTALL_COMMANDS[manager], interactive=True)
    except SubprocessError:
        logger.warning("Failed to install sudo/su with %s", manager.value)
        return False
    return True


def ensure_escalation_tools(
    policy: SudoInstallPolicy,
    capabilities: CapabilitySet,
    read_line: Callable[[str], str] = input,
) -> CapabilitySet:
    """Install sudo and su if missing and allowed by the policy.

    Args:
        policy: The install policy.
        capabilities: The detected capabilities.
        read_line: Function used to prompt the operator when the policy is to prompt.

    Returns:
        The capabilities after the installation. They are detected again only if the package
        manager was run.
    """
    if capabilities.has_escalation_tools:
        logger.debug("sudo and su found, skipping installation")
        return capabilities

    if not decide(policy, read_line):
        logger.debug("Not installing sudo/su")
        return capabilities

    if capabilities.package_manager is None:
        logger.warning("Couldn't find package manager to install sudo/su")
        return capabilities

    logger.info("Installing sudo and su")
    install_packages(capabilities.package_manager)
    return capabilities_module.detect()
