"""Action dispatcher and chunked reply protocol.

The dispatcher turns decoded control messages into console commands for the
server and owns the single-slot correlation state used to return the output
of a console command to the script that asked for it.

Outgoing commands
-----------------
==================  =====================================================
Action              Sent to the server
==================  =====================================================
reload              ``reload``
stop                ``stop``
transfer            ``transfer <player> <host> <port>``
kick                ``kick <player> <reason>``
execute             ``<command>`` verbatim (arms correlation if requested)
getplayer           ``scriptevent system:playerinfo {name, deviceId, xuid}``
executeshell        one ``scriptevent bds_enhancer:shell_result`` per chunk
==================  =====================================================

Correlation
-----------
``execute`` with ``result: true`` arms :class:`CommandStatus`. The next log
record that is not itself a control message is taken as the command's output,
sent back in chunks on the result channel, and the status is disarmed. The
match is purely positional: whatever the server prints next is captured, and
arming again before that happens replaces the outstanding command.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from bds_enhancer.config import ProtocolSettings
from bds_enhancer.core.actions import (
    Action,
    Execute,
    ExecuteShell,
    GetPlayer,
    Kick,
    Reload,
    Stop,
    Transfer,
)
from bds_enhancer.core.chunking import split_chunks
from bds_enhancer.core.directory import PlayerDirectory
from bds_enhancer.core.shell import run_shell_command
from bds_enhancer.errors import ShellCommandError

logger = logging.getLogger(__name__)

# Sends one command line to the server (without trailing newline).
CommandSink = Callable[[str], None]

ShellRunner = Callable[[str, Sequence[str]], str]


@dataclass
class CommandStatus:
    """Correlation slot for the one command awaiting its result.

    Attributes:
        waiting:       Whether a command is armed.
        command:       The armed command line.
        reply_channel: Scriptevent channel the result is sent on.
    """

    waiting: bool = False
    command: str = ""
    reply_channel: str = ""

    def arm(self, command: str, reply_channel: str) -> None:
        self.waiting = True
        self.command = command
        self.reply_channel = reply_channel

    def disarm(self) -> None:
        self.waiting = False


def encode_json(payload: dict) -> str:
    """Compact JSON as expected by the in-game scripts."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def scriptevent(channel: str, message: str) -> str:
    return f"scriptevent {channel} {message}"


class Dispatcher:
    """Executes actions and emits replies through ``send``.

    Args:
        send: Callable receiving each outgoing command line.
        directory: Player directory consulted by ``getplayer``.
        protocol: Chunk size and channel names.
        shell_runner: Runs ``executeshell`` programs; defaults to
            :func:`~bds_enhancer.core.shell.run_shell_command`.
    """

    def __init__(
        self,
        send: CommandSink,
        directory: PlayerDirectory,
        protocol: ProtocolSettings | None = None,
        shell_runner: ShellRunner = run_shell_command,
    ) -> None:
        self._send = send
        self._directory = directory
        self._protocol = protocol or ProtocolSettings()
        self._run_shell = shell_runner
        self.status = CommandStatus()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def dispatch(self, action: Action) -> None:
        logger.info("Dispatching %s action", action.action)

        if isinstance(action, Reload):
            self._send("reload")
        elif isinstance(action, Stop):
            self._send("stop")
        elif isinstance(action, Transfer):
            arg = action.payload
            self._send(f"transfer {arg.player} {arg.host} {arg.port}")
        elif isinstance(action, Kick):
            self._send(f"kick {action.payload.player} {action.payload.reason}")
        elif isinstance(action, Execute):
            if action.payload.result:
                if self.status.waiting:
                    logger.warning(
                        "Replacing pending result capture for %r with %r",
                        self.status.command,
                        action.payload.command,
                    )
                self.status.arm(action.payload.command, self._protocol.result_channel)
            self._send(action.payload.command)
        elif isinstance(action, GetPlayer):
            self._send_player_info(action.payload.name)
        elif isinstance(action, ExecuteShell):
            self._execute_shell(action)
        else:
            raise TypeError(f"Unhandled action type: {type(action).__name__}")

    def _send_player_info(self, name: str) -> None:
        player = self._directory.lookup(name)
        if player is None:
            logger.debug("Player %r not in directory; no reply sent", name)
            return

        reply = encode_json({"name": player.name, "deviceId": player.device_id, "xuid": player.xuid})
        self._send(scriptevent(self._protocol.player_info_channel, reply))

    def _execute_shell(self, action: ExecuteShell) -> None:
        arg = action.payload
        command_line = arg.command_line
        channel = self._protocol.shell_result_channel

        try:
            output = self._run_shell(arg.main_command, arg.args)
        except ShellCommandError as exc:
            logger.warning("Shell command %r failed: %s", command_line, exc)
            if arg.result:
                reply = {"command": command_line, "result_message": f"Error: {exc}", "err": True}
                self._send(scriptevent(channel, encode_json(reply)))
            return

        for chunk in split_chunks(output.strip(), self._protocol.chunk_size):
            reply = {
                "command": command_line,
                "result_message": chunk.text,
                "count": chunk.count,
                "end": chunk.end,
                "err": False,
            }
            self._send(scriptevent(channel, encode_json(reply)))

    # ------------------------------------------------------------------
    # Correlated results
    # ------------------------------------------------------------------

    def capture_result(self, text: str) -> bool:
        """Send ``text`` as the armed command's result, if one is armed.

        Returns:
            True if the text was consumed as a result.
        """
        if not self.status.waiting:
            return False

        for chunk in split_chunks(text, self._protocol.chunk_size):
            reply = {
                "command": self.status.command,
                "result_message": chunk.text,
                "count": chunk.count,
                "end": chunk.end,
            }
            self._send(scriptevent(self.status.reply_channel, encode_json(reply)))
        self.status.disarm()
        return True
