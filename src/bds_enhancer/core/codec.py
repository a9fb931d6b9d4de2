"""Extraction of control messages and player lists from log records.

Two independent rules run against every record:

1. **Action extraction**: ``[Scripting] bds_enhancer:`` followed by a JSON
   object on the same line. Decoded with :func:`~bds_enhancer.core.actions.decode_action`.
2. **Player-list extraction**: ``*###`` followed by the JSON body of a
   ``listd`` query response, running to the end of the record.

Neither rule raises on bad input; a record that does not decode simply
carries no action or no players.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from bds_enhancer.core.actions import Action, decode_action
from bds_enhancer.core.constants import ACTION_MARKER, PLAYER_LIST_MARKER
from bds_enhancer.core.directory import PlayerDirectory

logger = logging.getLogger(__name__)

# Leading greedy ".*": with two markers on one line, the last one wins.
ACTION_MESSAGE_REGEX = re.compile(r".*" + re.escape(ACTION_MARKER) + r"(?P<json>\{.*\})")

LISTD_COMMAND = "listd"


@dataclass(frozen=True)
class PlayerEntry:
    """One row of a ``listd`` response; absent fields are empty strings."""

    name: str
    device_id: str
    xuid: str


def parse_action(text: str) -> Action | None:
    """Find and decode an embedded control message in ``text``."""
    match = ACTION_MESSAGE_REGEX.search(text)
    if match is None:
        return None

    action = decode_action(match.group("json"))
    if action is None:
        logger.debug("Ignoring undecodable control message: %s", match.group("json"))
    return action


def _string_field(entry: dict, key: str) -> str:
    value = entry.get(key)
    return value if isinstance(value, str) else ""


def parse_player_list(text: str) -> list[PlayerEntry] | None:
    """
    Decode a ``listd`` response embedded in ``text``.

    Returns:
        The player rows in response order, or None if the marker is absent,
        the body is not JSON, or the response is for another command.
    """
    index = text.find(PLAYER_LIST_MARKER)
    if index < 0:
        return None

    try:
        parsed = json.loads(text[index + len(PLAYER_LIST_MARKER) :])
    except json.JSONDecodeError:
        return None

    if not isinstance(parsed, dict) or parsed.get("command") != LISTD_COMMAND:
        return None

    rows = parsed.get("result")
    if not isinstance(rows, list):
        return []

    return [
        PlayerEntry(
            name=_string_field(row, "name"),
            device_id=_string_field(row, "deviceSessionId"),
            xuid=_string_field(row, "xuid"),
        )
        for row in rows
        if isinstance(row, dict)
    ]


def apply_player_list(text: str, directory: PlayerDirectory) -> int:
    """Upsert every player of a ``listd`` response into ``directory``.

    Returns:
        Number of entries written (0 when ``text`` carries no response).
    """
    entries = parse_player_list(text)
    if not entries:
        return 0

    for entry in entries:
        directory.upsert(entry.name, entry.device_id, entry.xuid)
    logger.debug("Player directory refreshed with %d entries", len(entries))
    return len(entries)
