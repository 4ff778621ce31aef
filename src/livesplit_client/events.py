"""Transport events and the hub that delivers them to subscribers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from .logger import BoundLogger, create_logger


@dataclass(frozen=True)
class Connected:
    pass


@dataclass(frozen=True)
class Disconnected:
    pass


@dataclass(frozen=True)
class Line:
    text: str


@dataclass(frozen=True)
class TransportError:
    error: BaseException


Event = Union[Connected, Disconnected, Line, TransportError]
EventHandler = Callable[[Event], None]


class Subscription:
    """Handle returned by :meth:`EventHub.subscribe`; ``cancel()`` detaches the handler."""

    def __init__(self, hub: "EventHub", handler: EventHandler) -> None:
        self._hub = hub
        self.handler = handler

    @property
    def active(self) -> bool:
        return self in self._hub._subscriptions

    def cancel(self) -> None:
        self._hub._remove(self)


class EventHub:
    """Synchronous fan-out of events, in subscription order.

    A handler that raises is logged and skipped so one bad subscriber
    cannot stop line delivery to the others.
    """

    def __init__(self, logger: BoundLogger | None = None) -> None:
        self._subscriptions: list[Subscription] = []
        self._logger = (logger or create_logger()).child("events")

    def subscribe(self, handler: EventHandler) -> Subscription:
        subscription = Subscription(self, handler)
        self._subscriptions.append(subscription)
        return subscription

    def emit(self, event: Event) -> None:
        for subscription in list(self._subscriptions):
            if subscription not in self._subscriptions:
                continue
            try:
                subscription.handler(event)
            except Exception as exc:
                self._logger.error("Event handler %r failed on %r: %s", subscription.handler, event, exc)

    def clear(self) -> None:
        self._subscriptions.clear()

    def __len__(self) -> int:
        return len(self._subscriptions)

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)


__all__ = [
    "Connected",
    "Disconnected",
    "Event",
    "EventHandler",
    "EventHub",
    "Line",
    "Subscription",
    "TransportError",
]
