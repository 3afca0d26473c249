# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Constants for the container bootstrap."""

SEABOX_NAME = "seabox"

# The user name requested by the host when the image carries no regular user.
DEFAULT_USERNAME = "user"

PREFERRED_SHELL = "/bin/bash"
MINIMAL_SHELL = "/bin/sh"

CONFIG_FILE_ENV_VAR = "SEABOX_INIT_CONFIG_FILE"
