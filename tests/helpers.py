"""Helpers for building control-message records and decoding replies."""

import json

from bds_enhancer.core.framer import LogRecord
from tests.constants import ACTION_LINE


def action_record(payload: dict) -> LogRecord:
    """Build a log record carrying ``payload`` as a control message."""
    return LogRecord(ACTION_LINE.format(payload=json.dumps(payload)))


def parse_scriptevent(command: str) -> tuple[str, dict]:
    """Split ``scriptevent <channel> <json>`` into channel and decoded JSON."""
    prefix, channel, body = command.split(" ", 2)
    assert prefix == "scriptevent"
    return channel, json.loads(body)
