"""Custom exceptions raised by the LiveSplit Python client."""

from __future__ import annotations

from typing import Any


class LiveSplitError(Exception):
    """Base error for all client failures."""

    def __init__(self, message: str, *, context: Any | None = None) -> None:
        super().__init__(message)
        self.context = context


class EndpointError(LiveSplitError, ValueError):
    """Raised when a connection address is not a valid ``host:port`` pair."""


class ConnectionError(LiveSplitError):
    """Raised when the client cannot reach the server or the stream fails."""


class NotConnectedError(LiveSplitError):
    """Raised when a command is issued without an open connection."""


class InvalidCommandError(LiveSplitError):
    """Raised when a command would not fit on a single protocol line."""


class ProtocolError(LiveSplitError):
    """Raised when the peer sends data that cannot be framed into lines."""


__all__ = [
    "ConnectionError",
    "EndpointError",
    "InvalidCommandError",
    "LiveSplitError",
    "NotConnectedError",
    "ProtocolError",
]
