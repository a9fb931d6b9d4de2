"""
Command-line interface for BDS Enhancer.

Provides CLI commands for running the supervisor:
- run: Start the dedicated server under supervision
- show-config: Print the effective configuration

Usage:
    bds-enhancer run [PATH] [EXECUTABLE] [--config FILE] [--log-level LEVEL]
    bds-enhancer show-config [--config FILE]

Environment Variables:
    BDS_SERVER_PATH: Server installation directory (default: .)
    BDS_EXECUTABLE: Server executable name (default: bedrock_server)
    BDS_CHUNK_SIZE: Maximum characters per reply chunk (default: 1500)
    BDS_LOG_LEVEL: Supervisor log level (default: INFO)
"""

import argparse
import logging
import sys

from bds_enhancer import __version__
from bds_enhancer.config import EnhancerConfig, LoggingSettings, load_config, print_config_summary
from bds_enhancer.errors import EnhancerError

logger = logging.getLogger(__name__)

LOG_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s",
}


def configure_logging(settings: LoggingSettings) -> None:
    """
    Configure the root logger on stderr.

    Stdout is reserved for the server's own output, so supervisor logs never
    mix into it.
    """
    logging.basicConfig(
        level=getattr(logging, settings.level, logging.INFO),
        format=LOG_FORMATS.get(settings.format, LOG_FORMATS["detailed"]),
        stream=sys.stderr,
        force=True,
    )


def _load(args: argparse.Namespace) -> EnhancerConfig | None:
    """Load configuration, reporting failures on stderr."""
    try:
        return load_config(getattr(args, "config", None))
    except (OSError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return None


def _exit_status(returncode: int) -> int:
    """Map a child's return code to a shell exit status (signals become 128+N)."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run the dedicated server under supervision.

    Configuration Priority:
        1. CLI arguments (PATH, EXECUTABLE, --log-level)
        2. Environment variables (BDS_SERVER_PATH, BDS_EXECUTABLE, BDS_LOG_LEVEL)
        3. Config file
        4. Default values

    Returns:
        The server's exit status, 1 on startup error or path failure,
        0 on Ctrl+C.
    """
    from bds_enhancer.process import build_command, current_platform, spawn
    from bds_enhancer.relay import Relay

    cfg = _load(args)
    if cfg is None:
        return 1

    if getattr(args, "path", None):
        cfg.server.path = args.path
    if getattr(args, "executable", None):
        cfg.server.executable = args.executable
    if getattr(args, "log_level", None):
        cfg.logging.level = args.log_level.upper()

    configure_logging(cfg.logging)

    try:
        command = build_command(current_platform(), cfg.server.path, cfg.server.executable)
        process = spawn(command)
    except (EnhancerError, OSError) as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        return 1

    try:
        return _exit_status(Relay(process, cfg.protocol).run())
    except KeyboardInterrupt:
        # The server shares our process group and receives the interrupt too.
        print("\nSupervisor stopped.")
        return 0


def cmd_show_config(args: argparse.Namespace) -> int:
    """Print the effective configuration. Returns 0 on success, 1 on error."""
    cfg = _load(args)
    if cfg is None:
        return 1
    print_config_summary(cfg)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bds-enhancer",
        description="BDS Enhancer - Bedrock Dedicated Server supervisor",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run the dedicated server",
        description=(
            "Start the dedicated server, relay the console to it and handle "
            "control messages from its scripts."
        ),
    )
    run_parser.add_argument(
        "path",
        nargs="?",
        help="Server installation directory (default: ., or BDS_SERVER_PATH env var)",
    )
    run_parser.add_argument(
        "executable",
        nargs="?",
        help="Server executable name (default: bedrock_server, or BDS_EXECUTABLE env var)",
    )
    run_parser.add_argument("--config", "-c", type=str, help="INI configuration file")
    run_parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Supervisor log level (default: INFO, or BDS_LOG_LEVEL env var)",
    )
    run_parser.set_defaults(func=cmd_run)

    # show-config command
    config_parser = subparsers.add_parser(
        "show-config",
        help="Print the effective configuration",
    )
    config_parser.add_argument("--config", "-c", type=str, help="INI configuration file")
    config_parser.set_defaults(func=cmd_show_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
