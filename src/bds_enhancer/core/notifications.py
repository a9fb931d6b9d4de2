"""Join and spawn notifications derived from the server's own log lines.

Scripts cannot see a player's xuid or platform id directly, so the supervisor
watches for the server's connection messages and forwards the identities as
pipe-delimited scriptevents::

    Player connected: Alice, xuid: 2535400000000001
      -> scriptevent system:on_join Alice|2535400000000001
    Player Spawned: Alice xuid: 2535400000000001, pfid: 9a1b2c3d
      -> scriptevent system:on_spawn Alice|2535400000000001|9a1b2c3d
"""

from __future__ import annotations

import re

from bds_enhancer.config import ProtocolSettings

ON_JOIN_REGEX = re.compile(r"Player connected: (?P<player>.+), xuid: (?P<xuid>\d+)")
ON_SPAWN_REGEX = re.compile(r"Player Spawned: (?P<player>.+) xuid: (?P<xuid>\d+), pfid: (?P<pfid>.+)")


def notification_for(text: str, protocol: ProtocolSettings | None = None) -> str | None:
    """Return the notification command for a join/spawn record, else None."""
    protocol = protocol or ProtocolSettings()

    if match := ON_JOIN_REGEX.search(text):
        return f"scriptevent {protocol.join_channel} {match['player']}|{match['xuid']}"
    if match := ON_SPAWN_REGEX.search(text):
        return (
            f"scriptevent {protocol.spawn_channel} "
            f"{match['player']}|{match['xuid']}|{match['pfid']}"
        )
    return None
