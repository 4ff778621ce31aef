"""Transport implementations exposed to users."""

from .base import LINE_TERMINATOR, Transport, TransportKind
from .framing import LineSplitter
from .tcp import TcpTransport

__all__ = [
    "LINE_TERMINATOR",
    "LineSplitter",
    "TcpTransport",
    "Transport",
    "TransportKind",
]
