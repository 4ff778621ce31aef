"""TCP transport on asyncio streams, emitting one event per received line."""

from __future__ import annotations

import asyncio
import socket

from ..endpoint import Endpoint
from ..errors import ConnectionError, NotConnectedError, ProtocolError
from ..events import Connected, Disconnected, EventHub, Line, TransportError
from ..logger import BoundLogger, create_logger
from .base import LINE_TERMINATOR, Transport
from .framing import DEFAULT_MAX_LINE_BYTES, LineSplitter


class TcpTransport:
    kind: Transport.Kind = "tcp"

    def __init__(
        self,
        *,
        terminator: str = LINE_TERMINATOR,
        encoding: str = "utf-8",
        read_size: int = 4096,
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
        logger: BoundLogger | None = None,
    ) -> None:
        self._terminator = terminator
        self._encoding = encoding
        self._read_size = read_size
        self._logger = (logger or create_logger()).child("tcp")
        self._events = EventHub(self._logger)
        self._splitter = LineSplitter(
            terminator.encode(encoding), encoding=encoding, max_line_bytes=max_line_bytes
        )
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._read_task: asyncio.Task[None] | None = None
        self._endpoint: Endpoint | None = None
        self._connected = False

    @property
    def events(self) -> EventHub:
        return self._events

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def endpoint(self) -> Endpoint | None:
        return self._endpoint

    async def connect(self, endpoint: Endpoint) -> bool:
        if self._connected:
            return True
        self._logger.info("Connecting to %s", endpoint)
        try:
            reader, writer = await asyncio.open_connection(endpoint.host, endpoint.port)
        except OSError as exc:
            self._logger.error("Cannot connect to %s: %s", endpoint, exc)
            self._events.emit(TransportError(exc))
            raise ConnectionError(f"Cannot connect to {endpoint}: {exc}", context=endpoint) from exc

        sock = writer.get_extra_info("socket")
        if sock is not None:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        self._endpoint = endpoint
        self._reader = reader
        self._writer = writer
        self._splitter.reset()
        self._connected = True
        self._read_task = asyncio.create_task(self._read_loop(reader, writer))
        self._logger.info("Connected to %s", endpoint)
        self._events.emit(Connected())
        return True

    def write(self, line: str) -> None:
        if not self._connected or self._writer is None:
            raise NotConnectedError("Transport is not connected")
        self._logger.trace("TCP -> %s", line)
        self._writer.write(f"{line}{self._terminator}".encode(self._encoding))

    def close(self) -> bool:
        if not self._connected or self._writer is None:
            return False
        self._connected = False
        self._logger.info("Closing connection to %s", self._endpoint)
        # Disconnected is emitted by the read loop once the stream reports EOF
        self._writer.transport.abort()
        return True

    async def wait_closed(self) -> None:
        if self._read_task is not None:
            await asyncio.shield(self._read_task)

    async def _read_loop(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            while True:
                chunk = await reader.read(self._read_size)
                if not chunk:
                    self._logger.debug("Stream from %s reached EOF", self._endpoint)
                    break
                for text in self._splitter.feed(chunk):
                    self._logger.trace("TCP <- %s", text)
                    self._events.emit(Line(text))
        except asyncio.CancelledError:
            raise
        except (OSError, ProtocolError) as exc:
            self._logger.error("Stream error on %s: %s", self._endpoint, exc)
            self._events.emit(TransportError(exc))
        finally:
            self._connected = False
            writer.transport.abort()
            self._writer = None
            self._reader = None
            if self._splitter.pending:
                self._logger.debug("Dropping %d unterminated bytes", len(self._splitter.pending))
                self._splitter.reset()
            self._logger.info("Disconnected from %s", self._endpoint)
            self._events.emit(Disconnected())


__all__ = ["TcpTransport"]
