#  Copyright 2025 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Unit test setups and configurations."""

from dataclasses import dataclass
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from seabox_init import accounts, sudoers

BASE_PASSWD = "root:x:0:0:root:/root:/bin/sh\nnobody:x:65534:65534:nobody:/nonexistent:\n"
BASE_GROUP = "root:x:0:\n"


@dataclass
class SystemFiles:
    """The system files of a fake container.

    Attributes:
        passwd: The account database.
        group: The group database.
        sudoers: The main sudoers file.
        sudoers_dir: The sudoers drop-in directory.
    """

    passwd: Path
    group: Path
    sudoers: Path
    sudoers_dir: Path

    def add_user(self, name: str, uid: int, shell: str = "/bin/sh") -> None:
        """Append an account to the account database.

        Args:
            name: The username.
            uid: The numeric user id.
            shell: The login shell.
        """
        with self.passwd.open("a", encoding="utf-8") as file:
            file.write(f"{name}:x:{uid}:{uid}::/home/{name}:{shell}\n")

    def add_group(self, name: str, gid: int, members: str = "") -> None:
        """Append a group to the group database.

        Args:
            name: The group name.
            gid: The numeric group id.
            members: The comma separated members.
        """
        with self.group.open("a", encoding="utf-8") as file:
            file.write(f"{name}:x:{gid}:{members}\n")

    def install_sudoers(self, content: str = "root ALL=(ALL:ALL) ALL\n") -> None:
        """Create the main sudoers file.

        Args:
            content: The content of the main sudoers file.
        """
        self.sudoers.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True, name="system_files")
def system_files_fixture(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> SystemFiles:
    """Mock the hardcoded system file paths."""
    system_files = SystemFiles(
        passwd=tmp_path / "passwd",
        group=tmp_path / "group",
        sudoers=tmp_path / "sudoers",
        sudoers_dir=tmp_path / "sudoers.d",
    )
    system_files.passwd.write_text(BASE_PASSWD, encoding="utf-8")
    system_files.group.write_text(BASE_GROUP, encoding="utf-8")
    monkeypatch.setattr(accounts, "PASSWD_PATH", system_files.passwd)
    monkeypatch.setattr(accounts, "GROUP_PATH", system_files.group)
    monkeypatch.setattr(sudoers, "SUDOERS_PATH", system_files.sudoers)
    monkeypatch.setattr(sudoers, "SUDOERS_DROP_IN_DIR", system_files.sudoers_dir)
    return system_files


@pytest.fixture(name="exc_cmd_mock")
def exc_command_fixture(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Mock the execution of commands in every bootstrap stage."""
    exc_cmd_mock = MagicMock(return_value=("", 0))
    for module in (
        "seabox_init.provisioner",
        "seabox_init.installer",
        "seabox_init.groups",
        "seabox_init.password",
    ):
        monkeypatch.setattr(f"{module}.execute_command", exc_cmd_mock)
    return exc_cmd_mock
