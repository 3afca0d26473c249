# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""The CLI entrypoint for the container bootstrap."""

import logging
import sys
from typing import Optional, TextIO

import click

from seabox_init import bootstrap, capabilities, session
from seabox_init.configuration import ParameterSet
from seabox_init.constants import CONFIG_FILE_ENV_VAR
from seabox_init.errors import BootstrapError, ConfigurationError

logger = logging.getLogger(__name__)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _configure_logging(log_level: str, verbose: bool = False) -> None:
    """Configure the logging of the application.

    Args:
        log_level: The log level.
        verbose: Whether to narrate optional and skipped steps, forcing the debug level.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else log_level,
        stream=sys.stderr,
        format="%(levelname)s: %(message)s",
        force=True,
    )


@click.group()
def main() -> None:
    """Bootstrap the user of a seabox container."""


@main.command(name="bootstrap")
@click.option(
    "--config-file",
    type=click.File(mode="r", encoding="utf-8"),
    envvar=CONFIG_FILE_ENV_VAR,
    required=True,
    help="The file path containing the bootstrap parameters, in YAML or JSON.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    help="The log level for the application.",
)
def bootstrap_command(config_file: TextIO, log_level: str) -> None:
    """Provision the container user and start its login session.

    Args:
        config_file: The file containing the bootstrap parameters.
        log_level: The log level.

    Raises:
        BadParameter: If the bootstrap parameters are invalid.
    """
    try:
        params = ParameterSet.from_yaml_file(config_file)
    except ConfigurationError as exc:
        raise click.BadParameter(str(exc), param_hint="'--config-file'") from exc
    _configure_logging(log_level.upper(), params.verbose)

    try:
        result = bootstrap.run(params)
    except BootstrapError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    # Nothing runs after the handoff, the process image is replaced.
    try:
        result.handoff.replace(result.session)
    except OSError as exc:
        logger.error("Failed to start the session with %s: %s", result.session.argv, exc)
        sys.exit(1)


@main.command(name="shell")
@click.option(
    "--shell",
    "shell_override",
    type=str,
    default=None,
    help="The shell to start instead of the login shell of the current user.",
)
def shell_command(shell_override: Optional[str]) -> None:
    """Start the login shell of the current user.

    Args:
        shell_override: The shell to start instead of the login shell.
    """
    _configure_logging("WARNING")
    argv, env = session.default_shell_command(capabilities.detect(), shell_override)
    session.exec_session(argv, env)
