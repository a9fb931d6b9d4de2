"""BDS Enhancer: a supervisor for Bedrock Dedicated Server.

Runs the server as a child process, relays the operator console to it, and
overlays a small control protocol on the server's log output so that
in-game scripts can ask the supervisor to kick, transfer, run commands and
report their results back.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("bds_enhancer")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
