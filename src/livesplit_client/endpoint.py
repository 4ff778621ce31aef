"""Connection address parsing."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import EndpointError


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int

    @classmethod
    def parse(cls, address: str) -> "Endpoint":
        """Parse ``"host:port"``; anything else raises :class:`EndpointError`."""
        if not isinstance(address, str):
            raise EndpointError("Invalid address type, HOST:PORT expected", context=address)

        parts = address.split(":")
        if len(parts) != 2:
            raise EndpointError(
                f"Failed to parse connection details from {address!r}, HOST:PORT expected",
                context=address,
            )

        host, raw_port = (part.strip() for part in parts)
        if not host:
            raise EndpointError(f"Missing host in {address!r}", context=address)
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise EndpointError(f"Invalid port in {address!r}", context=address) from exc
        if not 0 <= port <= 65535:
            raise EndpointError(f"Port out of range in {address!r}", context=address)
        return cls(host=host, port=port)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


__all__ = ["Endpoint"]
