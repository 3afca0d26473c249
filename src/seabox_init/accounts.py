# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Reading of the account and group databases of the container.

The databases are read as files rather than through the pwd and grp modules so the entries
created by the bootstrap are visible right away, regardless of NSS caching, and so they can be
redirected in tests.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

PASSWD_PATH = Path("/etc/passwd")
GROUP_PATH = Path("/etc/group")

_PASSWD_FIELD_COUNT = 7
_GROUP_FIELD_COUNT = 4


@dataclass(frozen=True)
class PasswdEntry:
    """A row of the account database.

    Attributes:
        name: The username.
        uid: The numeric user id.
        gid: The numeric id of the primary group.
        home: The home directory.
        shell: The login shell, empty when not recorded.
    """

    name: str
    uid: int
    gid: int
    home: str
    shell: str


@dataclass(frozen=True)
class GroupEntry:
    """A row of the group database.

    Attributes:
        name: The group name.
        gid: The numeric group id.
    """

    name: str
    gid: int


def _records(path: Path, field_count: int) -> Iterator[list[str]]:
    """Iterate over the colon-delimited records of a database file.

    Blank lines, comments and lines with a wrong number of fields are skipped.

    Args:
        path: The database file.
        field_count: The number of fields of a record.

    Yields:
        The fields of each record.
    """
    if not path.exists():
        logger.debug("Database %s does not exist", path)
        return
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        if not line.strip() or line.startswith("#"):
            continue
        fields = line.split(":")
        if len(fields) != field_count:
            logger.debug("Skipping malformed line in %s: %s", path, line)
            continue
        yield fields


def passwd_entries() -> Iterator[PasswdEntry]:
    """Iterate over the account database.

    Yields:
        The entries, in file order. Entries with non-numeric ids are skipped.
    """
    for name, _, uid, gid, _, home, shell in _records(PASSWD_PATH, _PASSWD_FIELD_COUNT):
        if not uid.isdigit() or not gid.isdigit():
            continue
        yield PasswdEntry(name=name, uid=int(uid), gid=int(gid), home=home, shell=shell.strip())


def group_entries() -> Iterator[GroupEntry]:
    """Iterate over the group database.

    Yields:
        The entries, in file order. Entries with a non-numeric id are skipped.
    """
    for name, _, gid, _ in _records(GROUP_PATH, _GROUP_FIELD_COUNT):
        if not gid.isdigit():
            continue
        yield GroupEntry(name=name, gid=int(gid))


def find_user_by_uid(uid: int) -> Optional[PasswdEntry]:
    """Find the first account with the numeric id.

    Args:
        uid: The numeric user id.

    Returns:
        The first matching entry, or None.
    """
    return next((entry for entry in passwd_entries() if entry.uid == uid), None)


def group_exists(name: str) -> bool:
    """Check whether a group is defined.

    Args:
        name: The group name.

    Returns:
        Whether the group exists.
    """
    return any(entry.name == name for entry in group_entries())
