"""Synchronous execution of host programs requested by ``executeshell``."""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - runs commands requested by trusted server scripts
from collections.abc import Sequence

from bds_enhancer.errors import ShellCommandError

logger = logging.getLogger(__name__)


def run_shell_command(main_command: str, args: Sequence[str] = ()) -> str:
    """
    Run ``main_command`` with ``args`` and capture its combined output.

    The program runs without a shell and without stdin. A non-zero exit status
    is not a failure: whatever the program printed is still its result.

    Returns:
        Combined stdout and stderr, decoded as UTF-8 with replacement.

    Raises:
        ShellCommandError: If the program could not be started.
    """
    command = [main_command, *args]
    try:
        completed = subprocess.run(  # nosec B603 - argv list, no shell
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except OSError as exc:
        raise ShellCommandError(" ".join(command), exc) from exc

    if completed.returncode != 0:
        logger.info("Shell command %r exited with status %d", command, completed.returncode)
    return completed.stdout.decode("utf-8", errors="replace")
