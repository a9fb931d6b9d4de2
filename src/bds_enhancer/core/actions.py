"""
Pydantic models for control messages sent by in-game scripts.

A control message is a JSON object discriminated by its ``action`` field (the
variant name in lowercase). Variant-specific fields live under ``payload``::

    {"action": "reload"}
    {"action": "kick", "payload": {"player": "Bob", "reason": "spam"}}
    {"action": "executeshell",
     "payload": {"main_command": "ls", "args": ["-l"], "result": true}}

Models are frozen: an action is decoded once, dispatched once, then dropped.
Payload fields are strictly typed, so ``"result": 1`` or ``"port": "19132"``
is rejected rather than coerced.
Use :func:`decode_action` rather than validating the models directly.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)

# ============================================================================
# PAYLOADS
# ============================================================================


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class TransferPayload(_Frozen):
    """
    Move a player to another server.

    Attributes:
        player: Target player's name
        host: Destination server address
        port: Destination server port
    """

    player: StrictStr
    host: StrictStr
    port: StrictInt = Field(ge=0, le=65535)


class KickPayload(_Frozen):
    """
    Disconnect a player.

    Attributes:
        player: Target player's name
        reason: Message shown to the kicked player
    """

    player: StrictStr
    reason: StrictStr


class GetPlayerPayload(_Frozen):
    """Name of the player whose identity should be reported back."""

    name: StrictStr


class ExecutePayload(_Frozen):
    """
    Run a server console command.

    Attributes:
        command: Command line sent verbatim to the server
        result: Whether the next log record should be returned as the result
    """

    command: StrictStr
    result: StrictBool


class ExecuteShellPayload(_Frozen):
    """
    Run a program on the host machine.

    Attributes:
        main_command: Program to execute
        args: Arguments passed to the program, in order
        result: Whether a failure to start should be reported back
    """

    main_command: StrictStr
    args: tuple[StrictStr, ...] = ()
    result: StrictBool = False

    @property
    def command_line(self) -> str:
        return " ".join((self.main_command, *self.args))


# ============================================================================
# ACTIONS
# ============================================================================


class Reload(_Frozen):
    action: Literal["reload"]


class Stop(_Frozen):
    action: Literal["stop"]


class Transfer(_Frozen):
    action: Literal["transfer"]
    payload: TransferPayload


class Kick(_Frozen):
    action: Literal["kick"]
    payload: KickPayload


class GetPlayer(_Frozen):
    action: Literal["getplayer"]
    payload: GetPlayerPayload

    @field_validator("payload", mode="before")
    @classmethod
    def _accept_bare_name(cls, value: object) -> object:
        # Older scripts send the name itself as the payload.
        if isinstance(value, str):
            return {"name": value}
        return value


class Execute(_Frozen):
    action: Literal["execute"]
    payload: ExecutePayload


class ExecuteShell(_Frozen):
    action: Literal["executeshell"]
    payload: ExecuteShellPayload


Action = Annotated[
    Reload | Stop | Transfer | Kick | GetPlayer | Execute | ExecuteShell,
    Field(discriminator="action"),
]

_ACTION_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)


def decode_action(raw_json: str) -> Action | None:
    """
    Decode a control message.

    Returns:
        The typed action, or None if the text is not valid JSON, names an
        unknown action, or carries an invalid payload.
    """
    try:
        return _ACTION_ADAPTER.validate_json(raw_json)
    except ValidationError:
        return None
