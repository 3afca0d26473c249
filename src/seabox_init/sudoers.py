# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Sudo policy of the container.

The policy store is the main sudoers file and the drop-in directory it includes. Rules written
by the bootstrap go to drop-in files only, the main file is never modified.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

from seabox_init.capabilities import CapabilitySet
from seabox_init.groups import PrivilegeGroup

logger = logging.getLogger(__name__)

SUDOERS_PATH = Path("/etc/sudoers")
SUDOERS_DROP_IN_DIR = Path("/etc/sudoers.d")
SUDOERS_FILE_MODE = 0o440
SUDOERS_DIR_MODE = 0o750


def group_rule(group: str) -> str:
    """Build the rule granting a group full sudo access.

    Args:
        group: The group name.

    Returns:
        The sudoers rule.
    """
    return f"%{group}\tALL=(ALL:ALL) ALL"


def passwordless_rule(username: str) -> str:
    """Build the rule allowing a user to sudo without a password.

    Args:
        username: The username.

    Returns:
        The sudoers rule.
    """
    return f"{username} ALL=(ALL) NOPASSWD:ALL"


def group_rule_file(group: str) -> Path:
    """Get the drop-in file holding the rule of a group.

    Args:
        group: The group name.

    Returns:
        The drop-in file path.
    """
    return SUDOERS_DROP_IN_DIR / f"00-{group}"


def passwordless_rule_file(username: str) -> Path:
    """Get the drop-in file holding the passwordless rule of a user.

    sudo skips drop-in files with a dot in their name, so dots are replaced with a plus sign,
    which a portable username cannot hold.

    Args:
        username: The username.

    Returns:
        The drop-in file path.
    """
    return SUDOERS_DROP_IN_DIR / f"zz-{username.replace('.', '+')}"


def policy_file_exists() -> bool:
    """Check whether the main sudoers file exists.

    Returns:
        Whether sudo is installed and configured.
    """
    return SUDOERS_PATH.is_file()


def _is_loaded_drop_in(path: Path) -> bool:
    """Check whether sudo reads a file of the drop-in directory.

    Args:
        path: The file in the drop-in directory.

    Returns:
        False for the files sudo ignores: names with a dot or ending with a tilde.
    """
    return path.is_file() and "." not in path.name and not path.name.endswith("~")


def policy_files() -> list[Path]:
    """List the files making up the sudo policy.

    Returns:
        The main file, if present, followed by the loaded drop-in files in lexical order.
    """
    files = [SUDOERS_PATH] if SUDOERS_PATH.is_file() else []
    if SUDOERS_DROP_IN_DIR.is_dir():
        files.extend(
            sorted(path for path in SUDOERS_DROP_IN_DIR.iterdir() if _is_loaded_drop_in(path))
        )
    return files


def logical_lines(text: str) -> Iterator[str]:
    """Split sudoers content in logical lines, joining backslash continuations.

    Args:
        text: The content of a sudoers file.

    Yields:
        The logical lines.
    """
    pending = ""
    for line in text.splitlines():
        if line.endswith("\\"):
            pending += line[:-1] + " "
            continue
        yield pending + line
        pending = ""
    if pending:
        yield pending


def _active_group_rule_pattern(group: str) -> re.Pattern[str]:
    """Build the pattern of an active rule for a group.

    Args:
        group: The group name.

    Returns:
        A pattern matching the rule at the start of an uncommented line.
    """
    return re.compile(rf"^\s*%{re.escape(group)}\s+ALL\s*=")


def has_active_group_rule(group: str, files: Iterable[Path] | None = None) -> bool:
    """Check whether the policy already has an active rule for a group.

    Commented out rules, as shipped by many distributions, do not count.

    Args:
        group: The group name.
        files: The policy files to look into, defaults to the whole policy.

    Returns:
        Whether an active rule exists.
    """
    pattern = _active_group_rule_pattern(group)
    for path in policy_files() if files is None else files:
        content = path.read_text(encoding="utf-8", errors="replace")
        if any(pattern.match(line) for line in logical_lines(content)):
            logger.debug("Found active rule for group %s in %s", group, path)
            return True
    return False


def _ensure_drop_in_dir() -> None:
    """Create the drop-in directory; minimal images may lack it."""
    if not SUDOERS_DROP_IN_DIR.exists():
        SUDOERS_DROP_IN_DIR.mkdir(mode=SUDOERS_DIR_MODE, parents=True)


def append_rule(path: Path, rule: str) -> None:
    """Append a rule to a drop-in file, keeping its existing content.

    Args:
        path: The drop-in file.
        rule: The sudoers rule.
    """
    _ensure_drop_in_dir()
    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    separator = "\n" if existing and not existing.endswith("\n") else ""
    with path.open("a", encoding="utf-8") as file:
        file.write(f"{separator}{rule}\n")
    path.chmod(SUDOERS_FILE_MODE)


def write_rule(path: Path, rule: str) -> bool:
    """Write a drop-in file holding a single rule.

    A file with the same rule is left as is, a file with other content belongs to the
    administrator and is never overwritten.

    Args:
        path: The drop-in file.
        rule: The sudoers rule.

    Returns:
        Whether the file holds the rule.
    """
    content = f"{rule}\n"
    if path.exists():
        if path.read_text(encoding="utf-8") != content:
            logger.warning("%s already exists with other rules, not overwriting it", path)
            return False
        path.chmod(SUDOERS_FILE_MODE)
        return True
    _ensure_drop_in_dir()
    path.write_text(content, encoding="utf-8")
    path.chmod(SUDOERS_FILE_MODE)
    return True


def grant_group_rules(groups: Iterable[PrivilegeGroup]) -> list[PrivilegeGroup]:
    """Ensure each group has an active sudo rule.

    Args:
        groups: The privilege groups that exist.

    Returns:
        The groups a rule was written for.
    """
    if not policy_file_exists():
        logger.warning(
            "Attempted to grant sudo/wheel groups sudo access, but sudo not installed"
        )
        return []

    granted = []
    for group in groups:
        if has_active_group_rule(group.value):
            continue
        logger.debug("Granting '%s' group sudo access", group.value)
        append_rule(group_rule_file(group.value), group_rule(group.value))
        granted.append(group)
    return granted


def configure_passwordless(username: str, capabilities: CapabilitySet) -> bool:
    """Allow the user to sudo without a password.

    Args:
        username: The resolved username.
        capabilities: The detected capabilities.

    Returns:
        Whether the passwordless rule is in place.
    """
    if not capabilities.sudo:
        logger.warning(
            "Specified passwordless sudo, but sudo is not installed in the container."
        )
        return False
    if not policy_file_exists():
        logger.warning("Specified passwordless sudo, but %s does not exist.", SUDOERS_PATH)
        return False
    logger.info("Enabling passwordless sudo")
    return write_rule(passwordless_rule_file(username), passwordless_rule(username))
