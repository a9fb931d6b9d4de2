"""Per-record processing for the server's output stream.

For each log record, in order:

1. If it carries a control message, dispatch the action and stop there. The
   record is not displayed.
2. Strip the ``NO LOG FILE! - `` banner.
3. Refresh the player directory if the record is a ``listd`` response.
4. If a command result is awaited, send this record back as the result.
5. Display the record.
6. Emit a join/spawn notification if the record announces one.

All state (player directory, correlation slot) belongs to the pipeline
instance and is only ever touched from the thread calling :meth:`handle`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from bds_enhancer.config import ProtocolSettings
from bds_enhancer.core.codec import apply_player_list, parse_action
from bds_enhancer.core.directory import PlayerDirectory
from bds_enhancer.core.dispatcher import CommandSink, Dispatcher, ShellRunner
from bds_enhancer.core.framer import LogRecord
from bds_enhancer.core.notifications import notification_for
from bds_enhancer.core.shell import run_shell_command

logger = logging.getLogger(__name__)

# Renders one record to the operator (without trailing newline).
RecordDisplay = Callable[[str], None]


class RecordPipeline:
    """Single-threaded codec, dispatch and notification pipeline."""

    def __init__(
        self,
        send: CommandSink,
        display: RecordDisplay,
        protocol: ProtocolSettings | None = None,
        shell_runner: ShellRunner = run_shell_command,
    ) -> None:
        self._send = send
        self._display = display
        self._protocol = protocol or ProtocolSettings()
        self.directory = PlayerDirectory()
        self.dispatcher = Dispatcher(send, self.directory, self._protocol, shell_runner)

    def handle(self, record: LogRecord) -> None:
        action = parse_action(record.text)
        if action is not None:
            self.dispatcher.dispatch(action)
            return

        text = record.strip_banner()
        apply_player_list(text, self.directory)
        self.dispatcher.capture_result(text)
        self._display(text)

        if notification := notification_for(text, self._protocol):
            self._send(notification)

    def run(self, records: Iterable[LogRecord]) -> int:
        """Process ``records`` until exhausted; returns the number handled."""
        handled = 0
        for record in records:
            self.handle(record)
            handled += 1
        logger.debug("Record stream ended after %d records", handled)
        return handled
