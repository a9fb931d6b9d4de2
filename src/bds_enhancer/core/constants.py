"""Shared protocol constants for the core package.

The marker strings and scriptevent channel names form the wire contract with
the behaviour-pack scripts running inside the server. Changing any of them
breaks every deployed script, so they live in one place.
"""

from __future__ import annotations

# Prefix that an in-game script logs before a JSON control message.
ACTION_MARKER = "[Scripting] bds_enhancer:"

# Prefix that precedes the JSON body of a `listd` query response.
PLAYER_LIST_MARKER = "*###"

# Banner the server prepends to log lines when it has no log file.
NO_LOG_FILE_PREFIX = "NO LOG FILE! - "

# Maximum number of characters carried by a single reply chunk.
DEFAULT_CHUNK_SIZE = 1500

# Scriptevent channels used for replies and notifications.
RESULT_CHANNEL = "bds_enhancer:result"
SHELL_RESULT_CHANNEL = "bds_enhancer:shell_result"
PLAYER_INFO_CHANNEL = "system:playerinfo"
JOIN_CHANNEL = "system:on_join"
SPAWN_CHANNEL = "system:on_spawn"
