"""
Shared pytest fixtures for the BDS Enhancer test suite.

This module provides fixtures that are automatically available to all test files:
- A recording command sink standing in for the server's stdin
- Pipeline and dispatcher instances wired to that sink
- Isolation from the developer's environment variables

The protocol engine is single-threaded and has no I/O of its own, so nearly
every test can drive it directly and assert on the recorded commands.
"""

from collections.abc import Callable, Sequence

import pytest

from bds_enhancer.config import ProtocolSettings
from bds_enhancer.core.directory import PlayerDirectory
from bds_enhancer.core.dispatcher import Dispatcher
from bds_enhancer.core.pipeline import RecordPipeline

# ============================================================================
# ENVIRONMENT
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove BDS_* variables so the developer's shell cannot leak into tests."""
    for name in ("BDS_SERVER_PATH", "BDS_EXECUTABLE", "BDS_CHUNK_SIZE", "BDS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# COMMAND SINK FIXTURES
# ============================================================================


@pytest.fixture
def sent() -> list[str]:
    """Commands emitted towards the server, in order."""
    return []


@pytest.fixture
def displayed() -> list[str]:
    """Records rendered to the operator, in order."""
    return []


@pytest.fixture
def shell_calls() -> list[tuple[str, tuple[str, ...]]]:
    """Invocations received by the fake shell runner."""
    return []


@pytest.fixture
def fake_shell(shell_calls) -> Callable[[str, Sequence[str]], str]:
    """Shell runner that records calls and returns a fixed output."""

    def run(main_command: str, args: Sequence[str]) -> str:
        shell_calls.append((main_command, tuple(args)))
        return "  shell output\n"

    return run


@pytest.fixture
def protocol() -> ProtocolSettings:
    return ProtocolSettings()


@pytest.fixture
def directory() -> PlayerDirectory:
    return PlayerDirectory()


@pytest.fixture
def dispatcher(sent, directory, protocol, fake_shell) -> Dispatcher:
    """Dispatcher writing into ``sent`` with a fake shell runner."""
    return Dispatcher(sent.append, directory, protocol, fake_shell)


@pytest.fixture
def pipeline(sent, displayed, protocol, fake_shell) -> RecordPipeline:
    """Full record pipeline writing into ``sent`` and ``displayed``."""
    return RecordPipeline(sent.append, displayed.append, protocol, fake_shell)
