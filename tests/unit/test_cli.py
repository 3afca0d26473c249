#  Copyright 2025 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Test cases of the CLI entrypoint."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml
from click.testing import CliRunner

from seabox_init import cli
from seabox_init.errors import HandoffUnavailableError
from seabox_init.session import MANUAL_RECOVERY_MESSAGE


@pytest.fixture(name="config_file")
def config_file_fixture(tmp_path: Path) -> Path:
    """Write a bootstrap configuration."""
    config_file = tmp_path / "config.yaml"
    with open(config_file, mode="w", encoding="utf-8") as file:
        yaml.safe_dump({"createUser": True, "username": "dev", "uid": 1000, "verbose": True}, file)
    return config_file


@pytest.fixture(name="logging_mock", autouse=True)
def logging_mock_fixture(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Mock the logging configuration, which replaces the handlers of the root logger."""
    logging_mock = MagicMock()
    monkeypatch.setattr(cli, "_configure_logging", logging_mock)
    return logging_mock


@pytest.fixture(name="run_mock")
def run_mock_fixture(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Mock the bootstrap pipeline."""
    run_mock = MagicMock()
    monkeypatch.setattr(cli.bootstrap, "run", run_mock)
    return run_mock


def test_bootstrap(config_file: Path, run_mock: MagicMock, logging_mock: MagicMock):
    """
    arrange: Given a valid configuration file.
    act: Run the bootstrap command.
    assert: The pipeline runs with the parameters and the session is handed off.
    """
    result = CliRunner().invoke(cli.main, ["bootstrap", "--config-file", str(config_file)])

    assert result.exit_code == 0, result.output
    params = run_mock.call_args.args[0]
    assert params.username == "dev"
    assert params.uid == 1000
    logging_mock.assert_called_once_with("INFO", True)
    bootstrap_result = run_mock.return_value
    bootstrap_result.handoff.replace.assert_called_once_with(bootstrap_result.session)


def test_bootstrap_config_from_env(config_file: Path, run_mock: MagicMock):
    """
    arrange: Given the configuration file path in the environment.
    act: Run the bootstrap command without the option.
    assert: The configuration file is read.
    """
    result = CliRunner().invoke(
        cli.main, ["bootstrap"], env={"SEABOX_INIT_CONFIG_FILE": str(config_file)}
    )

    assert result.exit_code == 0, result.output
    run_mock.assert_called_once()


def test_bootstrap_invalid_config(tmp_path: Path, run_mock: MagicMock):
    """
    arrange: Given a configuration file with a negative uid.
    act: Run the bootstrap command.
    assert: The command fails as a usage error and nothing runs.
    """
    config_file = tmp_path / "config.yaml"
    config_file.write_text("uid: -1\n", encoding="utf-8")

    result = CliRunner().invoke(cli.main, ["bootstrap", "--config-file", str(config_file)])

    assert result.exit_code == 2
    assert "--config-file" in result.output
    run_mock.assert_not_called()


def test_bootstrap_error(
    config_file: Path, run_mock: MagicMock, caplog: pytest.LogCaptureFixture
):
    """
    arrange: Given a pipeline failing to hand off the session.
    act: Run the bootstrap command.
    assert: The error is logged and the command exits with 1.
    """
    run_mock.side_effect = HandoffUnavailableError(MANUAL_RECOVERY_MESSAGE)

    result = CliRunner().invoke(cli.main, ["bootstrap", "--config-file", str(config_file)])

    assert result.exit_code == 1
    assert MANUAL_RECOVERY_MESSAGE in caplog.text


def test_bootstrap_exec_failure(config_file: Path, run_mock: MagicMock):
    """
    arrange: Given a session command failing to start.
    act: Run the bootstrap command.
    assert: The command exits with 1.
    """
    run_mock.return_value.handoff.replace.side_effect = FileNotFoundError("su")

    result = CliRunner().invoke(cli.main, ["bootstrap", "--config-file", str(config_file)])

    assert result.exit_code == 1


def test_shell(monkeypatch: pytest.MonkeyPatch):
    """
    arrange: Given a shell override.
    act: Run the shell command.
    assert: The override is started.
    """
    exec_mock = MagicMock()
    monkeypatch.setattr(cli.session, "exec_session", exec_mock)
    monkeypatch.setattr(cli.capabilities, "detect", MagicMock())
    monkeypatch.setattr(
        cli.session,
        "default_shell_command",
        MagicMock(return_value=(["/bin/zsh"], {"SHELL": "/bin/zsh"})),
    )

    result = CliRunner().invoke(cli.main, ["shell", "--shell", "/bin/zsh"])

    assert result.exit_code == 0, result.output
    exec_mock.assert_called_once_with(["/bin/zsh"], {"SHELL": "/bin/zsh"})
