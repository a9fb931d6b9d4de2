"""
Concurrency relay between the operator console, the server and the pipeline.

Three forwarding paths run concurrently and meet at a single FIFO channel of
outgoing command lines:

    operator console ──(thread: operator-input)──┐
                                                 ├──> CommandChannel ──(thread: child-stdin)──> server stdin
    server stdout ──(main thread: framer + RecordPipeline)──┘

Only the main thread touches the pipeline's state, so no locks are needed
beyond the channel itself. Commands from the operator and from the pipeline
interleave in enqueue order.

Failure handling
----------------
There are no retries. A failing path logs the error and terminates the
server; its stdout then reaches end of stream, the main path finishes, and
:meth:`Relay.run` returns a non-zero status. Write failures after the server
has already closed its stdout are expected (commands queued while it shut
down) and are not treated as failures.
"""

from __future__ import annotations

import logging
import queue
import subprocess
import sys
import threading
from typing import TextIO

from bds_enhancer.config import ProtocolSettings
from bds_enhancer.core.dispatcher import ShellRunner
from bds_enhancer.core.framer import iter_records
from bds_enhancer.core.pipeline import RecordPipeline
from bds_enhancer.core.shell import run_shell_command
from bds_enhancer.errors import ChannelClosedError, RelayError

logger = logging.getLogger(__name__)

_CLOSED = object()


class CommandChannel:
    """Unbounded FIFO hand-off of command lines; many producers, one consumer."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[object] = queue.SimpleQueue()

    def send(self, command: str) -> None:
        self._queue.put(command)

    def close(self) -> None:
        """Wake the consumer with end-of-channel once queued items are drained."""
        self._queue.put(_CLOSED)

    def receive(self) -> str:
        """
        Block until the next command is available.

        Raises:
            ChannelClosedError: Once :meth:`close` has been called and every
                earlier command has been received.
        """
        item = self._queue.get()
        if item is _CLOSED:
            # Keep the channel closed for any later receive.
            self._queue.put(_CLOSED)
            raise ChannelClosedError("command channel closed")
        assert isinstance(item, str)
        return item


class Relay:
    """Runs the three forwarding paths for one server process.

    Args:
        process: Running server with piped stdin and stdout.
        protocol: Protocol settings passed to the pipeline.
        console_in: Operator input, one command per line.
        console_out: Where server records are displayed.
        shell_runner: Runner for ``executeshell`` actions.
    """

    def __init__(
        self,
        process: subprocess.Popen[bytes],
        protocol: ProtocolSettings | None = None,
        console_in: TextIO | None = None,
        console_out: TextIO | None = None,
        shell_runner: ShellRunner = run_shell_command,
    ) -> None:
        if process.stdin is None or process.stdout is None:
            raise ValueError("server process must have piped stdin and stdout")

        self._process = process
        self._console_in = console_in if console_in is not None else sys.stdin
        self._console_out = console_out if console_out is not None else sys.stdout
        self.channel = CommandChannel()
        self.pipeline = RecordPipeline(self.channel.send, self._display, protocol, shell_runner)

        self._stdout_finished = threading.Event()
        self._failures: list[RelayError] = []
        self._failures_lock = threading.Lock()

    @property
    def failures(self) -> list[RelayError]:
        with self._failures_lock:
            return list(self._failures)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _forward_operator_input(self) -> None:
        try:
            for line in self._console_in:
                self.channel.send(line.rstrip("\r\n"))
        except (OSError, ValueError) as exc:
            self._fail("operator-input", exc)
            return
        logger.info("Operator console closed; console forwarding stopped")

    def _write_child_stdin(self) -> None:
        stdin = self._process.stdin
        assert stdin is not None
        while True:
            try:
                command = self.channel.receive()
            except ChannelClosedError:
                logger.debug("Command channel closed; stdin writer stopped")
                return

            try:
                stdin.write(f"{command}\n".encode())
                stdin.flush()
            except (OSError, ValueError) as exc:
                if self._stdout_finished.is_set():
                    logger.debug("Dropped %r: server already closed its output", command)
                    return
                self._fail("child-stdin", exc)
                return

    def _display(self, text: str) -> None:
        self._console_out.write(f"{text}\n")
        self._console_out.flush()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _fail(self, path: str, exc: BaseException) -> None:
        error = RelayError(path, exc)
        logger.error("%s", error)
        with self._failures_lock:
            self._failures.append(error)
        if self._process.poll() is None:
            logger.info("Terminating server after %s path failure", path)
            self._process.terminate()

    def run(self) -> int:
        """
        Relay until the server's output ends.

        Returns:
            The server's exit status, or 1 if any forwarding path failed.
        """
        writer = threading.Thread(
            target=self._write_child_stdin, name="child-stdin", daemon=True
        )
        operator = threading.Thread(
            target=self._forward_operator_input, name="operator-input", daemon=True
        )
        writer.start()
        operator.start()

        stdout = self._process.stdout
        assert stdout is not None
        try:
            self.pipeline.run(iter_records(stdout))
        except Exception as exc:
            logger.exception("Server output processing failed")
            self._fail("child-stdout", exc)
        finally:
            self._stdout_finished.set()
            self.channel.close()

        returncode = self._process.wait()
        writer.join()
        logger.info("Server exited with status %d", returncode)

        if self.failures:
            return 1
        return returncode
