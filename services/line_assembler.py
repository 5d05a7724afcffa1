"""Reassemble newline-terminated lines from arbitrarily chunked bytes."""

from __future__ import annotations

import logging
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

NEWLINE = b"\n"


class LineAssembler:
    """Buffers a partial line across reads and yields complete lines.

    ``feed`` buffers the chunk immediately and returns a lazy iterator over
    the complete lines. Lines are cut out of the buffer as the iterator is
    consumed, so callers must drain it before the buffer holds only the
    unterminated tail.

    With ``max_pending`` set, an unterminated line that outgrows the limit
    is dropped whole: everything up to and including its eventual newline is
    discarded, so no fragment of it is ever emitted as a line.
    """

    def __init__(self, max_pending: Optional[int] = None) -> None:
        self._buffer = bytearray()
        self._discarding = False
        self.max_pending = max_pending or None

    @property
    def pending(self) -> int:
        return len(self._buffer)

    @property
    def discarding(self) -> bool:
        return self._discarding

    def feed(self, chunk: bytes) -> Iterator[bytes]:
        if not chunk:
            return iter(())
        if self._discarding:
            index = chunk.find(NEWLINE)
            if index < 0:
                return iter(())
            self._discarding = False
            chunk = chunk[index + 1:]
        self._buffer.extend(chunk)
        return self._drain()

    def _drain(self) -> Iterator[bytes]:
        while True:
            index = self._buffer.find(NEWLINE)
            if index < 0:
                break
            line = bytes(self._buffer[: index + 1])
            del self._buffer[: index + 1]
            yield line

        if self.max_pending is not None and len(self._buffer) > self.max_pending:
            logger.warning(
                "Discarding unterminated line that exceeded the buffer limit",
                extra={"pending_bytes": len(self._buffer)},
            )
            self._buffer.clear()
            self._discarding = True
