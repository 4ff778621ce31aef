"""Common transport abstractions."""

from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable

from ..endpoint import Endpoint
from ..events import EventHub

TransportKind = Literal["tcp"]

LINE_TERMINATOR = "\r\n"


@runtime_checkable
class Transport(Protocol):
    """What the dispatcher needs from a line-oriented stream."""

    Kind = TransportKind

    @property
    def kind(self) -> TransportKind: ...

    @property
    def events(self) -> EventHub: ...

    @property
    def connected(self) -> bool: ...

    async def connect(self, endpoint: Endpoint) -> bool: ...

    def write(self, line: str) -> None: ...

    def close(self) -> bool: ...


__all__ = ["LINE_TERMINATOR", "Transport", "TransportKind"]
