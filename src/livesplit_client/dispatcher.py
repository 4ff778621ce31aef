"""Pipelined command dispatcher for a line protocol without request ids.

The peer answers response-expecting commands with exactly one line each, in
order, and never says which command a line belongs to. Correlation is
therefore purely positional: the oldest pending command owns the next line.
That only holds while at most one response-expecting command is on the wire,
so the dispatcher writes the next one only after the current head resolves,
either with its reply or with :data:`NO_RESPONSE` when its timer fires first.

Fire-and-forget commands issued while a reply is outstanding are held back
until the response-expecting command issued just before them resolves, so
they cannot slip between a command and its reply and they keep their place
relative to later response-expecting commands.

Everything runs on one event loop; ``issue`` never suspends.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field

from .errors import ConnectionError, InvalidCommandError, NotConnectedError
from .events import Disconnected, Event, Line, TransportError
from .logger import BoundLogger, create_logger
from .transport.base import Transport
from .types import NO_RESPONSE, Reply

FORBIDDEN_CHARACTERS = ("\r", "\n")
COMMAND_ENCODING = "utf-8"


def validate_timeout(value: float) -> float:
    if value <= 0:
        raise ValueError(f"timeout must be positive, got {value!r}")
    return float(value)


@dataclass
class PendingCommand:
    wire: str
    future: asyncio.Future[Reply]
    timer: asyncio.TimerHandle | None = None

    def resolve(self, reply: Reply) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        if not self.future.done():
            self.future.set_result(reply)

    def fail(self, error: BaseException) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        if not self.future.done():
            self.future.set_exception(error)


@dataclass
class DeferredCommand:
    wire: str
    # the response-expecting command that was last in line when this was issued
    after: PendingCommand


@dataclass
class DispatcherState:
    queue: deque[PendingCommand] = field(default_factory=deque)
    deferred: deque[DeferredCommand] = field(default_factory=deque)

    @property
    def draining(self) -> bool:
        return bool(self.queue)


class Dispatcher:
    """Owns the write side of a transport and every line it receives."""

    def __init__(
        self,
        transport: Transport,
        *,
        timeout: float,
        logger: BoundLogger | None = None,
    ) -> None:
        self._transport = transport
        self._logger = (logger or create_logger()).child("dispatcher")
        self._state = DispatcherState()
        self._timeout = validate_timeout(timeout)
        self._subscription = transport.events.subscribe(self._on_event)

    @property
    def state(self) -> DispatcherState:
        return self._state

    @property
    def timeout(self) -> float:
        """Seconds a command may wait for its reply, applied when it is written."""
        return self._timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        self._timeout = validate_timeout(value)

    def issue(self, command: str, expect_response: bool = True) -> asyncio.Future[Reply] | bool:
        """Queue ``command`` for the wire.

        Returns a future resolving to the reply line (or :data:`NO_RESPONSE`)
        when ``expect_response`` is true, otherwise ``True``.
        """
        if not self._transport.connected:
            raise NotConnectedError("Client must be connected to the server")
        self._check_command(command)

        if not expect_response:
            if self._state.draining:
                self._logger.trace("Deferring %r until %d pending replies arrive", command, len(self._state.queue))
                self._state.deferred.append(DeferredCommand(command, self._state.queue[-1]))
            else:
                self._transport.write(command)
            return True

        future: asyncio.Future[Reply] = asyncio.get_running_loop().create_future()
        self._state.queue.append(PendingCommand(command, future))
        if len(self._state.queue) == 1:
            self._transmit_head()
        return future

    def close(self) -> None:
        self._subscription.cancel()
        self._abandon(ConnectionError("Dispatcher closed"))

    def _transmit_head(self) -> None:
        while self._state.queue:
            head = self._state.queue[0]
            try:
                self._transport.write(head.wire)
            except NotConnectedError as exc:
                self._abandon(ConnectionError(str(exc)))
                return
            except Exception as exc:
                self._logger.error("Failed to write %r: %s", head.wire, exc)
                self._state.queue.popleft()
                head.fail(exc)
                self._flush_deferred(head)
                continue
            loop = asyncio.get_running_loop()
            head.timer = loop.call_later(self._timeout, self._on_timeout, head)
            return

    def _on_event(self, event: Event) -> None:
        if isinstance(event, Line):
            self._on_line(event.text)
        elif isinstance(event, TransportError):
            self._logger.warn("Transport error with %d replies outstanding: %s", len(self._state.queue), event.error)
        elif isinstance(event, Disconnected):
            self._subscription.cancel()
            self._abandon(ConnectionError("Connection closed"))

    def _on_line(self, text: str) -> None:
        if not self._state.queue:
            self._logger.debug("Discarding orphan line %r", text)
            return
        head = self._state.queue.popleft()
        head.resolve(text)
        self._advance(head)

    def _on_timeout(self, pending: PendingCommand) -> None:
        if not self._state.queue or self._state.queue[0] is not pending:
            return
        self._logger.debug("No reply to %r within %.3fs", pending.wire, self._timeout)
        self._state.queue.popleft()
        pending.timer = None
        pending.resolve(NO_RESPONSE)
        self._advance(pending)

    def _advance(self, resolved: PendingCommand) -> None:
        if not self._transport.connected:
            self._abandon(ConnectionError("Connection closed"))
            return
        self._flush_deferred(resolved)
        if self._state.queue:
            self._transmit_head()

    def _flush_deferred(self, resolved: PendingCommand) -> None:
        deferred = self._state.deferred
        while deferred and deferred[0].after is resolved:
            command = deferred.popleft()
            try:
                self._transport.write(command.wire)
            except Exception as exc:
                self._logger.error("Dropping deferred %r, write failed: %s", command.wire, exc)

    def _abandon(self, error: ConnectionError) -> None:
        queue, self._state.queue = self._state.queue, deque()
        dropped = len(self._state.deferred)
        self._state.deferred = deque()
        if queue or dropped:
            self._logger.warn("Abandoning %d pending and %d deferred commands: %s", len(queue), dropped, error)
        for pending in queue:
            pending.fail(error)

    def _check_command(self, command: str) -> None:
        if not isinstance(command, str):
            raise InvalidCommandError("Command must be a string", context=command)
        if any(char in command for char in FORBIDDEN_CHARACTERS):
            raise InvalidCommandError("No newline symbols allowed in commands", context=command)
        try:
            command.encode(COMMAND_ENCODING)
        except UnicodeEncodeError as exc:
            raise InvalidCommandError(f"Command is not valid {COMMAND_ENCODING}: {exc}", context=command) from exc


__all__ = ["DeferredCommand", "Dispatcher", "DispatcherState", "PendingCommand", "validate_timeout"]
