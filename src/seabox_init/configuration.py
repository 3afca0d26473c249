# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Configuration of a bootstrap run, as injected by the host-side orchestrator."""

import logging
from enum import Enum
from typing import Any, Optional, TextIO

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from seabox_init.constants import DEFAULT_USERNAME
from seabox_init.errors import ConfigurationError

logger = logging.getLogger(__name__)


class SudoInstallPolicy(str, Enum):
    """Decision policy for installing sudo and su when missing.

    Attributes:
        INSTALL: Install without asking.
        NO_INSTALL: Never install.
        PROMPT: Ask the operator on standard input.
    """

    INSTALL = "Install"
    NO_INSTALL = "NoInstall"
    PROMPT = "Prompt"

    @classmethod
    def from_install_sudo(cls, install_sudo: Optional[bool]) -> "SudoInstallPolicy":
        """Map the orchestrator's tri-state install_sudo setting to a policy.

        Args:
            install_sudo: True to install, False to never install, None when unset.

        Returns:
            The install policy.
        """
        if install_sudo is None:
            return cls.PROMPT
        return cls.INSTALL if install_sudo else cls.NO_INSTALL


# Lowercase values used by the host when rendering the bootstrap parameters.
_WIRE_POLICIES = {
    "install": SudoInstallPolicy.INSTALL,
    "no_install": SudoInstallPolicy.NO_INSTALL,
    "prompt": SudoInstallPolicy.PROMPT,
}


class ParameterSet(BaseModel):
    """Resolved parameters of a single bootstrap run.

    Attributes:
        create_user: Whether to create the container user.
        username: The requested name of the container user.
        uid: The numeric id shared by the host user and the container user.
        sudo_install_policy: Whether to install sudo and su when missing.
        passwordless_sudo: Whether to allow the user to sudo without a password.
        no_password: Whether to skip setting a password for the user.
        verbose: Whether to narrate optional and skipped steps.
        shell_override: The login shell to use instead of the recorded one.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    create_user: bool = Field(False, alias="createUser")
    username: str = Field(DEFAULT_USERNAME, min_length=1)
    uid: int = Field(ge=0)
    sudo_install_policy: SudoInstallPolicy = Field(
        SudoInstallPolicy.PROMPT, alias="sudoInstallPolicy"
    )
    passwordless_sudo: bool = Field(False, alias="passwordlessSudo")
    no_password: bool = Field(False, alias="noPassword")
    verbose: bool = False
    shell_override: Optional[str] = Field(None, alias="shellOverride")

    @field_validator("sudo_install_policy", mode="before")
    @classmethod
    def parse_sudo_install_policy(cls, value: Any) -> Any:
        """Accept the install_sudo boolean and the lowercase wire values.

        Args:
            value: The raw value of the field.

        Returns:
            The value to validate as a SudoInstallPolicy.
        """
        if value is None or isinstance(value, bool):
            return SudoInstallPolicy.from_install_sudo(value)
        if isinstance(value, str) and value in _WIRE_POLICIES:
            return _WIRE_POLICIES[value]
        return value

    @field_validator("shell_override", mode="before")
    @classmethod
    def empty_shell_is_unset(cls, value: Any) -> Any:
        """Treat an empty shell override as no override.

        Args:
            value: The raw value of the field.

        Returns:
            None for an empty value, else the value.
        """
        if value == "":
            return None
        return value

    @property
    def skip_password(self) -> bool:
        """Whether the password stage is skipped; passwordless sudo implies no password."""
        return self.no_password or self.passwordless_sudo

    @staticmethod
    def from_yaml_file(file: TextIO) -> "ParameterSet":
        """Initialize the parameters from a YAML (or JSON) formatted file.

        Args:
            file: The file object to parse the parameters from.

        Raises:
            ConfigurationError: If the content is not a valid parameter set.

        Returns:
            The parameters.
        """
        try:
            config = yaml.safe_load(file)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Unable to parse bootstrap configuration: {exc}") from exc
        if not isinstance(config, dict):
            raise ConfigurationError("Bootstrap configuration must be a mapping")
        try:
            return ParameterSet.model_validate(config)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid bootstrap configuration: {exc}") from exc
