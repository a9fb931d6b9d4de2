"""Construction and spawning of the dedicated server child process."""

from __future__ import annotations

import logging
import os
import subprocess  # nosec B404 - the supervisor's whole job is running the server
import sys
from dataclasses import dataclass, field
from pathlib import Path

from bds_enhancer.errors import UnsupportedPlatformError

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = ("linux", "windows")


def current_platform() -> str:
    """Normalized name of the host platform (``linux``, ``windows``, ``macos``, ...)."""
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "win32":
        return "windows"
    if sys.platform == "darwin":
        return "macos"
    return sys.platform


@dataclass(frozen=True)
class ChildCommand:
    """Everything needed to start the server.

    Attributes:
        argv: Program and arguments.
        cwd:  Working directory (the server installation).
        env:  Variables added to the inherited environment.
    """

    argv: tuple[str, ...]
    cwd: Path
    env: dict[str, str] = field(default_factory=dict)


def build_command(platform: str, server_path: Path | str, executable: str) -> ChildCommand:
    """
    Build the command line for the server binary.

    On Linux the server loads its bundled shared libraries from its own
    directory, so ``LD_LIBRARY_PATH=.`` is added.

    Raises:
        UnsupportedPlatformError: If the server does not ship for ``platform``.
    """
    if platform not in SUPPORTED_PLATFORMS:
        raise UnsupportedPlatformError(platform)

    cwd = Path(server_path)
    env = {"LD_LIBRARY_PATH": "."} if platform == "linux" else {}
    return ChildCommand(argv=(str(cwd / executable),), cwd=cwd, env=env)


def spawn(command: ChildCommand) -> subprocess.Popen[bytes]:
    """Start the child with piped stdin/stdout; stderr is inherited."""
    env = {**os.environ, **command.env}
    logger.info("Starting %s in %s", " ".join(command.argv), command.cwd)
    process = subprocess.Popen(  # nosec B603 - argv list, no shell
        list(command.argv),
        cwd=command.cwd,
        env=env,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
    )
    logger.info("Server started with pid %d", process.pid)
    return process
