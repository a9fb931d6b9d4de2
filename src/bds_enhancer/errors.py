"""Typed exceptions for the supervisor.

Design intent:
    - Protocol outcomes like "malformed control message" or "player not in
      the directory" are represented by ``None`` and never raise.
    - Infrastructure failures (platform, pipes, subordinate processes) raise
      typed exceptions so the owning forwarding path can log them and stop.
"""

from __future__ import annotations


class EnhancerError(RuntimeError):
    """Base exception for supervisor failures."""


class UnsupportedPlatformError(EnhancerError):
    """The host platform cannot run the dedicated server."""

    def __init__(self, platform: str) -> None:
        super().__init__(f"Unsupported platform: {platform}")
        self.platform = platform


class ShellCommandError(EnhancerError):
    """A subordinate shell command could not be started.

    Args:
        command_line: The command and its arguments, space-joined.
        cause: The underlying OS error.
    """

    def __init__(self, command_line: str, cause: OSError) -> None:
        super().__init__(str(cause))
        self.command_line = command_line
        self.cause = cause


class ChannelClosedError(EnhancerError):
    """Receive on a command channel whose producers have shut down."""


class RelayError(EnhancerError):
    """A forwarding path of the relay failed.

    Args:
        path: Name of the failed path (for example ``"child-stdin"``).
        cause: Optional underlying exception.
    """

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        message = f"{path} path failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.path = path
        self.cause = cause
