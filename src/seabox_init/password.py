# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Setting of the login password of the container user."""

import logging

from seabox_init.utilities import execute_command

logger = logging.getLogger(__name__)


def set_password(username: str, uid: int) -> bool:
    """Run passwd for the user, attached to the terminal.

    A failure leaves the account usable without a password, so it is only reported.

    Args:
        username: The resolved username.
        uid: The numeric user id.

    Returns:
        Whether the password was set.
    """
    print(f"Setting password for user '{username}' with uid={uid}", flush=True)
    try:
        _, exit_code = execute_command(["passwd", username], check_exit=False, interactive=True)
    except FileNotFoundError:
        logger.warning("passwd not found in the container, no password set for %s", username)
        return False
    if exit_code != 0:
        logger.warning(
            "Password for user %s was not set, passwd exited with %s", username, exit_code
        )
        return False
    return True
