"""In-memory directory of connected players.

The directory is filled from ``listd`` query responses that the server prints
to its log, and read when a script asks for a player's identity. Entries are
keyed by exact player name, overwritten on every refresh, and never expire.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlayerInfo:
    """Identity attributes of one connected player.

    Attributes:
        name:      Player name as shown in game (directory key).
        device_id: Device session id reported by ``listd``.
        xuid:      Xbox user id, kept as the decimal string the server prints.
    """

    name: str
    device_id: str
    xuid: str


class PlayerDirectory:
    """Name-keyed player cache with last-write-wins semantics."""

    def __init__(self) -> None:
        self._players: dict[str, PlayerInfo] = {}

    def upsert(self, name: str, device_id: str, xuid: str) -> PlayerInfo:
        info = PlayerInfo(name=name, device_id=device_id, xuid=xuid)
        self._players[name] = info
        return info

    def lookup(self, name: str) -> PlayerInfo | None:
        """Exact, case-sensitive lookup."""
        return self._players.get(name)

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, name: object) -> bool:
        return name in self._players
