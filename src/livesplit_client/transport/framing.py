"""Splitting of inbound byte chunks into protocol lines."""

from __future__ import annotations

from ..errors import ProtocolError

DEFAULT_MAX_LINE_BYTES = 64 * 1024


class LineSplitter:
    """Accumulates stream chunks and yields complete terminator-delimited lines.

    A single chunk may carry several replies back to back, or only part of
    one; the unterminated tail is held until a later chunk completes it.
    A tail longer than ``max_line_bytes`` raises :class:`ProtocolError`.
    """

    def __init__(
        self,
        terminator: bytes = b"\r\n",
        *,
        encoding: str = "utf-8",
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    ) -> None:
        if not terminator:
            raise ValueError("terminator must not be empty")
        self._terminator = terminator
        self._encoding = encoding
        self._max_line_bytes = max_line_bytes
        self._buffer = bytearray()

    @property
    def pending(self) -> bytes:
        return bytes(self._buffer)

    def feed(self, chunk: bytes) -> list[str]:
        # a terminator may straddle the previous chunk boundary
        search_from = max(len(self._buffer) - len(self._terminator) + 1, 0)
        self._buffer.extend(chunk)

        lines: list[str] = []
        start = 0
        while True:
            index = self._buffer.find(self._terminator, max(start, search_from))
            if index < 0:
                break
            lines.append(self._buffer[start:index].decode(self._encoding, errors="replace"))
            start = index + len(self._terminator)
        if start:
            del self._buffer[:start]

        if len(self._buffer) > self._max_line_bytes:
            size = len(self._buffer)
            self._buffer.clear()
            raise ProtocolError(f"Unterminated line exceeds {self._max_line_bytes} bytes ({size} buffered)")
        return lines

    def reset(self) -> None:
        self._buffer.clear()


__all__ = ["DEFAULT_MAX_LINE_BYTES", "LineSplitter"]
