"""Splitting of long reply text into bounded, end-marked chunks.

Scriptevent messages have a length limit, so results are sent as a series of
chunks. Each chunk carries its zero-based ``count`` and an ``end`` flag set on
the last one; the receiving script concatenates them in ``count`` order.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from bds_enhancer.core.constants import DEFAULT_CHUNK_SIZE


@dataclass(frozen=True)
class Chunk:
    """One slice of a reply text.

    Attributes:
        count: Zero-based position of the chunk.
        text:  At most ``chunk_size`` characters of the original text.
        end:   True only for the final chunk.
    """

    count: int
    text: str
    end: bool


def chunk_count(length: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Number of chunks for a text of ``length`` characters (at least one)."""
    if length <= 0:
        return 1
    return (length - 1) // chunk_size + 1


def split_chunks(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[Chunk]:
    """Yield the chunks of ``text`` in ascending order.

    An empty text yields a single empty chunk with ``end`` set.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    total = chunk_count(len(text), chunk_size)
    for index in range(total):
        start = index * chunk_size
        yield Chunk(count=index, text=text[start : start + chunk_size], end=index == total - 1)
