# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Utilities used by the bootstrap stages."""

import functools
import logging
import subprocess  # nosec B404
import time
from typing import Any, Callable, Sequence, Type, TypeVar

from typing_extensions import ParamSpec

from seabox_init.errors import SubprocessError

logger = logging.getLogger(__name__)


# Parameters of the function decorated with retry
ParamT = ParamSpec("ParamT")  # pylint: disable=invalid-name
# Return type of the function decorated with retry
ReturnT = TypeVar("ReturnT")


def retry(
    exception: Type[Exception] = Exception,
    tries: int = 1,
    delay: float = 0,
    backoff: float = 1,
    local_logger: logging.Logger = logger,
) -> Callable[[Callable[ParamT, ReturnT]], Callable[ParamT, ReturnT]]:
    """Parameterize the decorator retrying a function on an exception.

    Args:
        exception: Exception type to be retried.
        tries: Number of attempts, the last failure is raised.
        delay: Time in seconds to wait before the first retry.
        backoff: Factor applied to the delay after each retry.
        local_logger: Logger for logging.

    Returns:
        The function decorator for retry.
    """

    def retry_decorator(
        func: Callable[ParamT, ReturnT],
    ) -> Callable[ParamT, ReturnT]:
        """Decorate function with retry.

        Args:
            func: The function to decorate.

        Returns:
            The resulting function with retry added.
        """

        @functools.wraps(func)
        def fn_with_retry(*args: ParamT.args, **kwargs: ParamT.kwargs) -> ReturnT:
            """Wrap the function with retries.

            Args:
                args: The placeholder for decorated function's positional arguments.
                kwargs: The placeholder for decorated function's key word arguments.

            Raises:
                RuntimeError: Should be unreachable.

            Returns:
                Original return type of the decorated function.
            """
            current_delay = delay
            for attempt in range(1, tries + 1):
                try:
                    return func(*args, **kwargs)
                # Error caught is set by the input of the function.
                except exception as err:  # pylint: disable=broad-exception-caught
                    if attempt == tries:
                        local_logger.warning(
                            "%s failed after %s tries: %s", func.__name__, tries, err
                        )
                        raise
                    local_logger.warning(
                        "%s failed, retrying in %s seconds: %s", func.__name__, current_delay, err
                    )
                    time.sleep(current_delay)
                    current_delay *= backoff

            raise RuntimeError("Unreachable code of retry logic.")

        return fn_with_retry

    return retry_decorator


def secure_run_subprocess(
    cmd: Sequence[str], interactive: bool = False, **kwargs: Any
) -> subprocess.CompletedProcess:
    """Run command in subprocess according to security recommendations.

    CalledProcessError will not be raised on error of the command executed.
    Errors should be handled by the caller by checking the exit code.

    The following arguments to `subprocess.run` should not be set: `capture_output`, `shell`,
    `check`. As those arguments are used by this function.

    Args:
        cmd: Command in a list.
        interactive: Attach the command to the terminal instead of capturing its output. Used for
            commands prompting the operator, e.g. passwd, or reporting progress.
        kwargs: Additional keyword arguments for the `subprocess.run` call.

    Returns:
        Object representing the completed process. The outputs of a non-interactive subprocess
        can be accessed.
    """
    logger.debug("Executing command %s", cmd)

    result = subprocess.run(  # nosec B603
        cmd,
        capture_output=not interactive,
        # Not running in shell to avoid security problems.
        shell=False,
        check=False,
        **kwargs,
    )
    if not interactive:
        logger.debug("Command %s returns: %s", cmd, result.stdout)
    return result


def execute_command(
    cmd: Sequence[str], check_exit: bool = True, interactive: bool = False, **kwargs: Any
) -> tuple[str, int]:
    """Execute a command on a subprocess.

    The output is logged if the log level of the logger is set to debug.

    Args:
        cmd: Command in a list.
        check_exit: Whether to check for non-zero exit code and raise exceptions.
        interactive: Attach the command to the terminal instead of capturing its output.
        kwargs: Additional keyword arguments for the `subprocess.run` call.

    Returns:
        Output on stdout, and the exit code. The output is empty for interactive commands.

    Raises:
        SubprocessError: If `check_exit` is set and the exit code is non-zero.
    """
    result = secure_run_subprocess(cmd, interactive=interactive, **kwargs)

    if check_exit:
        try:
            result.check_returncode()
        except subprocess.CalledProcessError as err:
            logger.error(
                "Command %s failed with code %i: %s",
                " ".join(cmd),
                err.returncode,
                err.stderr,
            )

            raise SubprocessError(list(cmd), err.returncode, err.stdout, err.stderr) from err

    if result.stdout is None:
        return ("", result.returncode)
    if isinstance(result.stdout, str):
        return (result.stdout, result.returncode)

    return (result.stdout.decode(kwargs.get("encoding", "utf-8")), result.returncode)
