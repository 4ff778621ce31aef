"""Public surface for the LiveSplit Server Python client."""

from .client import ClientOptions, LiveSplitClient
from .dispatcher import Dispatcher, DispatcherState
from .endpoint import Endpoint
from .errors import (
    ConnectionError,
    EndpointError,
    InvalidCommandError,
    LiveSplitError,
    NotConnectedError,
    ProtocolError,
)
from .events import Connected, Disconnected, Line, Subscription, TransportError
from .transport import LineSplitter, TcpTransport
from .types import NO_RESPONSE, NoResponse, Reply
from .version import __version__

__all__ = [
    "__version__",
    "ClientOptions",
    "Connected",
    "ConnectionError",
    "Disconnected",
    "Dispatcher",
    "DispatcherState",
    "Endpoint",
    "EndpointError",
    "InvalidCommandError",
    "Line",
    "LineSplitter",
    "LiveSplitClient",
    "LiveSplitError",
    "NO_RESPONSE",
    "NoResponse",
    "NotConnectedError",
    "ProtocolError",
    "Reply",
    "Subscription",
    "TcpTransport",
    "TransportError",
]
