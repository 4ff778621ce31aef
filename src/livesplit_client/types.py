"""Shared typing helpers."""

from __future__ import annotations

from typing import Final, Union


class NoResponse:
    """Type of :data:`NO_RESPONSE`, the value a command resolves to on timeout."""

    _instance: "NoResponse | None" = None

    def __new__(cls) -> "NoResponse":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_RESPONSE"

    def __reduce__(self) -> str:
        return "NO_RESPONSE"


NO_RESPONSE: Final = NoResponse()

Reply = Union[str, NoResponse]


__all__ = ["NO_RESPONSE", "NoResponse", "Reply"]
