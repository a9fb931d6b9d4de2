"""Log framer: turns the server's raw stdout bytes into log records.

The dedicated server writes one message per ``write()`` call. Most messages
are a single line that starts with a log header::

    [2024-05-01 12:00:00:123 INFO] Server started.

Some (command output, stack traces) span several lines, and only the first
carries a header. The framer groups physical lines into records using two
boundaries:

- a line that starts with a log header opens a new record;
- when a read has been fully consumed and ended on a newline, the pending
  record is complete and is flushed.

Blank lines between records are dropped; inside a record they are kept.

A partial trailing line is held back until more bytes arrive. At end of
stream everything still buffered is flushed as a final record.
"""

from __future__ import annotations

import codecs
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from bds_enhancer.core.constants import NO_LOG_FILE_PREFIX

# Bytes requested per read. read1() returns as soon as anything is available.
READ_SIZE = 65536

LOG_HEADER_REGEX = re.compile(
    r"^(?:" + re.escape(NO_LOG_FILE_PREFIX) + r")?"
    r"\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}(?::\d{3})? [A-Z]+\]"
)


class ByteStream(Protocol):
    """Readable binary stream supporting short reads (``BufferedReader``, ``BytesIO``)."""

    def read1(self, size: int = ..., /) -> bytes: ...


@dataclass(frozen=True)
class LogRecord:
    """One complete unit of server output.

    Attributes:
        text: The record's physical lines joined with ``\\n`` (no trailing
              newline).
    """

    text: str

    def strip_banner(self) -> str:
        """Record text without the leading ``NO LOG FILE! - `` banner."""
        return self.text.removeprefix(NO_LOG_FILE_PREFIX)


def is_record_header(line: str) -> bool:
    """Whether ``line`` starts with a server log header."""
    return LOG_HEADER_REGEX.match(line) is not None


class LogFramer:
    """Incremental line-to-record assembler.

    ``feed()`` accepts decoded text in arbitrary fragments and returns the
    records completed by it; ``close()`` flushes what remains. The class
    holds no reference to any stream, so it can be driven directly in tests.
    """

    def __init__(self) -> None:
        self._partial = ""
        self._pending: list[str] = []

    def feed(self, text: str) -> list[LogRecord]:
        records: list[LogRecord] = []
        data = self._partial + text
        *lines, self._partial = data.split("\n")

        for line in lines:
            line = line.removesuffix("\r")
            if not line and not self._pending:
                continue
            if self._pending and is_record_header(line):
                records.append(self._take_pending())
            self._pending.append(line)

        # Read consumed on a line boundary: the message is complete.
        if self._partial == "" and self._pending:
            records.append(self._take_pending())
        return records

    def close(self) -> list[LogRecord]:
        records: list[LogRecord] = []
        if self._partial:
            line = self._partial.removesuffix("\r")
            self._partial = ""
            if self._pending and is_record_header(line):
                records.append(self._take_pending())
            if line or self._pending:
                self._pending.append(line)
        if self._pending:
            records.append(self._take_pending())
        return records

    def _take_pending(self) -> LogRecord:
        record = LogRecord("\n".join(self._pending))
        self._pending = []
        return record


def iter_records(stream: ByteStream, read_size: int = READ_SIZE) -> Iterator[LogRecord]:
    """Lazily frame ``stream`` into log records until end of stream.

    Blocks only while waiting for bytes. The iterator is single use; to frame
    a new stream, call this again.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    framer = LogFramer()
    while True:
        chunk = stream.read1(read_size)
        if not chunk:
            break
        yield from framer.feed(decoder.decode(chunk))
    yield from framer.feed(decoder.decode(b"", final=True))
    yield from framer.close()
