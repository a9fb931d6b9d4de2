"""
Supervisor configuration management.

This module handles loading and accessing configuration from multiple sources
with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/enhancer.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Command-line arguments are applied on top of the loaded configuration by
``bds_enhancer.cli``.

Usage:
    from bds_enhancer.config import load_config

    cfg = load_config()
    print(cfg.server.path)
    print(cfg.protocol.chunk_size)

Environment Variable Mapping:
    BDS_SERVER_PATH    -> server.path
    BDS_EXECUTABLE     -> server.executable
    BDS_CHUNK_SIZE     -> protocol.chunk_size
    BDS_LOG_LEVEL      -> logging.level
"""

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from bds_enhancer.core.constants import (
    DEFAULT_CHUNK_SIZE,
    JOIN_CHANNEL,
    PLAYER_INFO_CHANNEL,
    RESULT_CHANNEL,
    SHELL_RESULT_CHANNEL,
    SPAWN_CHANNEL,
)

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "enhancer.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "enhancer.example.ini"


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class ServerSettings:
    """Location of the dedicated server installation."""

    path: str = "."
    executable: str = "bedrock_server"

    @property
    def absolute_path(self) -> Path:
        """Get absolute path to the server directory."""
        return Path(self.path).resolve()


@dataclass
class ProtocolSettings:
    """Control protocol tuning and scriptevent channel names."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    result_channel: str = RESULT_CHANNEL
    shell_result_channel: str = SHELL_RESULT_CHANNEL
    player_info_channel: str = PLAYER_INFO_CHANNEL
    join_channel: str = JOIN_CHANNEL
    spawn_channel: str = SPAWN_CHANNEL


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class EnhancerConfig:
    """
    Complete supervisor configuration.

    Aggregates all settings sections. Built by :func:`load_config`.
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    protocol: ProtocolSettings = field(default_factory=ProtocolSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source: Path | None = None


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_chunk_size(value: str) -> int:
    """Parse a chunk size, falling back to the default for unusable values."""
    try:
        size = int(value)
    except ValueError:
        return DEFAULT_CHUNK_SIZE
    return size if size >= 1 else DEFAULT_CHUNK_SIZE


def _load_from_ini(parser: configparser.ConfigParser, cfg: EnhancerConfig) -> None:
    """Load configuration from parsed INI file into EnhancerConfig."""
    # Server section
    if parser.has_section("server"):
        if parser.has_option("server", "path"):
            cfg.server.path = parser.get("server", "path")
        if parser.has_option("server", "executable"):
            cfg.server.executable = parser.get("server", "executable")

    # Protocol section
    if parser.has_section("protocol"):
        if parser.has_option("protocol", "chunk_size"):
            cfg.protocol.chunk_size = _parse_chunk_size(parser.get("protocol", "chunk_size"))
        for channel in (
            "result_channel",
            "shell_result_channel",
            "player_info_channel",
            "join_channel",
            "spawn_channel",
        ):
            if parser.has_option("protocol", channel):
                setattr(cfg.protocol, channel, parser.get("protocol", channel))

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed"):
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: EnhancerConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_path := os.getenv("BDS_SERVER_PATH"):
        cfg.server.path = env_path
    if env_executable := os.getenv("BDS_EXECUTABLE"):
        cfg.server.executable = env_executable
    if env_chunk := os.getenv("BDS_CHUNK_SIZE"):
        cfg.protocol.chunk_size = _parse_chunk_size(env_chunk)
    if env_log := os.getenv("BDS_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()


def load_config(config_file: Path | str | None = None) -> EnhancerConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. ``config_file`` if given, else config/enhancer.ini
        3. config/enhancer.example.ini (fallback for development)
        4. Built-in defaults

    Args:
        config_file: Explicit INI file to read instead of the default lookup.
            A missing explicit file is an error.

    Returns:
        EnhancerConfig: Fully populated configuration object.

    Raises:
        FileNotFoundError: If ``config_file`` is given but does not exist.
    """
    cfg = EnhancerConfig()

    source: Path | None = None
    if config_file is not None:
        source = Path(config_file)
        if not source.exists():
            raise FileNotFoundError(f"Config file not found: {source}")
    elif CONFIG_FILE.exists():
        source = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        source = CONFIG_EXAMPLE

    if source is not None:
        parser = configparser.ConfigParser()
        parser.read(source, encoding="utf-8")
        _load_from_ini(parser, cfg)
        cfg.source = source

    _apply_env_overrides(cfg)

    return cfg


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_config_status(cfg: EnhancerConfig) -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information.
    """
    return {
        "config_file_path": str(cfg.source) if cfg.source else None,
        "using_example": cfg.source == CONFIG_EXAMPLE,
        "server_path": str(cfg.server.absolute_path),
        "executable": cfg.server.executable,
        "chunk_size": cfg.protocol.chunk_size,
        "log_level": cfg.logging.level,
    }


def print_config_summary(cfg: EnhancerConfig) -> None:
    """Print a summary of the configuration to stdout."""
    status = get_config_status(cfg)
    print("\n" + "=" * 60)
    print("BDS ENHANCER CONFIGURATION")
    print("=" * 60)
    print(f"Config file: {status['config_file_path'] or '(built-in defaults)'}")
    if status["using_example"]:
        print("WARNING: Using example config (copy to enhancer.ini for production)")
    print("-" * 60)
    print(f"Server path: {status['server_path']}")
    print(f"Executable:  {status['executable']}")
    print(f"Chunk size:  {status['chunk_size']}")
    print(f"Channels:    {cfg.protocol.result_channel}, {cfg.protocol.shell_result_channel}")
    print(f"Log level:   {status['log_level']}")
    print("=" * 60 + "\n")
