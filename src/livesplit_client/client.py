"""High-level client exposing the LiveSplit Server command set."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable

from .dispatcher import Dispatcher, validate_timeout
from .endpoint import Endpoint
from .errors import NotConnectedError
from .events import EventHandler, EventHub, Subscription
from .logger import BoundLogger, LogLevel, create_logger
from .transport import TcpTransport, Transport
from .types import NO_RESPONSE, Reply

DEFAULT_TIMEOUT = 0.1

TransportFactory = Callable[[BoundLogger], Transport]

GETTER_COMMANDS = (
    "getcurrenttimerphase",
    "getdelta",
    "getlastsplittime",
    "getcomparisonsplittime",
    "getcurrenttime",
    "getfinaltime",
    "getpredictedtime",
    "getbestpossibletime",
    "getsplitindex",
    "getcurrentsplitname",
    "getprevioussplitname",
)


@dataclass
class ClientOptions:
    address: str
    timeout: float = DEFAULT_TIMEOUT
    logger: object | None = None
    log_level: LogLevel = "info"
    transport_factory: TransportFactory | None = None


def _default_transport(logger: BoundLogger) -> Transport:
    return TcpTransport(logger=logger)


class LiveSplitClient:
    """Primary entry point for talking to a LiveSplit Server instance.

    Getter commands return an awaitable resolving to the reply line, or to
    :data:`~livesplit_client.types.NO_RESPONSE` if the server stays silent
    for ``timeout`` seconds. Control commands return ``True`` once queued.
    """

    def __init__(
        self,
        address: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        logger: object | None = None,
        log_level: LogLevel = "info",
        transport_factory: TransportFactory | None = None,
    ) -> None:
        options = ClientOptions(
            address=address,
            timeout=timeout,
            logger=logger,
            log_level=log_level,
            transport_factory=transport_factory,
        )
        self.endpoint = Endpoint.parse(options.address)
        self._logger = create_logger(logger=options.logger, level=options.log_level)
        self._logger.info("Initializing LiveSplitClient for %s", self.endpoint)
        self._transport_factory = options.transport_factory or _default_transport
        self._timeout = validate_timeout(options.timeout)
        self._events = EventHub(self._logger)
        self._transport: Transport | None = None
        self._dispatcher: Dispatcher | None = None
        self._relay: Subscription | None = None
        self._connecting: asyncio.Future[bool] | None = None
        self._init_game_time_sent = False

    @property
    def connected(self) -> bool:
        return self._transport is not None and self._transport.connected

    @property
    def timeout(self) -> float:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        self._timeout = validate_timeout(value)
        if self._dispatcher is not None:
            self._dispatcher.timeout = self._timeout

    def subscribe(self, handler: EventHandler) -> Subscription:
        """Receive ``Connected``, ``Disconnected``, ``Line`` and ``TransportError`` events."""
        return self._events.subscribe(handler)

    async def connect(self) -> bool:
        """Open a connection; concurrent callers share one in-flight attempt."""
        if self.connected:
            return True
        if self._connecting is None or self._connecting.done():
            self._connecting = asyncio.ensure_future(self._open())
        connecting = self._connecting
        try:
            return await asyncio.shield(connecting)
        finally:
            if connecting.done() and self._connecting is connecting:
                self._connecting = None

    async def _open(self) -> bool:
        self._detach()
        transport = self._transport_factory(self._logger)
        self._relay = transport.events.subscribe(self._events.emit)
        self._transport = transport
        self._dispatcher = Dispatcher(transport, timeout=self._timeout, logger=self._logger)
        try:
            return await transport.connect(self.endpoint)
        except BaseException:
            self._detach()
            raise

    def disconnect(self) -> bool:
        if self._transport is None:
            return False
        return self._transport.close()

    def send(self, command: str, expect_response: bool = True) -> asyncio.Future[Reply] | bool:
        """Send a raw command line; see :meth:`Dispatcher.issue`."""
        if self._dispatcher is None:
            raise NotConnectedError("Client must be connected to the server")
        return self._dispatcher.issue(command, expect_response)

    async def __aenter__(self) -> "LiveSplitClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.disconnect()

    # Control commands, no reply expected

    def start_timer(self) -> bool:
        return self._command("starttimer")

    def start_or_split(self) -> bool:
        return self._command("startorsplit")

    def split(self) -> bool:
        return self._command("split")

    def unsplit(self) -> bool:
        return self._command("unsplit")

    def skip_split(self) -> bool:
        return self._command("skipsplit")

    def pause(self) -> bool:
        return self._command("pause")

    def resume(self) -> bool:
        return self._command("resume")

    def reset(self) -> bool:
        return self._command("reset")

    def init_game_time(self) -> bool:
        """Enable the Game Time comparison. The server only honours this once."""
        if self._init_game_time_sent:
            return False
        result = self._command("initgametime")
        self._init_game_time_sent = True
        return result

    def set_game_time(self, time: str) -> bool:
        return self._command("setgametime", time)

    def set_loading_times(self, time: str) -> bool:
        return self._command("setloadingtimes", time)

    def pause_game_time(self) -> bool:
        return self._command("pausegametime")

    def unpause_game_time(self) -> bool:
        return self._command("unpausegametime")

    def set_comparison(self, comparison: str) -> bool:
        return self._command("setcomparison", comparison)

    # Getters

    def get_delta(self, comparison: str = "") -> asyncio.Future[Reply]:
        return self._query("getdelta", comparison)

    def get_last_split_time(self) -> asyncio.Future[Reply]:
        return self._query("getlastsplittime")

    def get_comparison_split_time(self) -> asyncio.Future[Reply]:
        return self._query("getcomparisonsplittime")

    def get_current_time(self) -> asyncio.Future[Reply]:
        return self._query("getcurrenttime")

    def get_final_time(self, comparison: str = "") -> asyncio.Future[Reply]:
        return self._query("getfinaltime", comparison)

    def get_predicted_time(self, comparison: str = "") -> asyncio.Future[Reply]:
        return self._query("getpredictedtime", comparison)

    def get_best_possible_time(self) -> asyncio.Future[Reply]:
        return self._query("getbestpossibletime")

    def get_split_index(self) -> asyncio.Future[Reply]:
        return self._query("getsplitindex")

    def get_current_split_name(self) -> asyncio.Future[Reply]:
        return self._query("getcurrentsplitname")

    def get_previous_split_name(self) -> asyncio.Future[Reply]:
        return self._query("getprevioussplitname")

    def get_current_timer_phase(self) -> asyncio.Future[Reply]:
        return self._query("getcurrenttimerphase")

    async def get_all(self) -> dict[str, str | None]:
        """Run every getter in turn; commands that time out map to ``None``."""
        output: dict[str, str | None] = {}
        for command in GETTER_COMMANDS:
            reply = await self._query(command)
            output[command] = None if reply is NO_RESPONSE else reply
        return output

    def _command(self, name: str, argument: str = "") -> bool:
        result = self.send(_format(name, argument), expect_response=False)
        assert isinstance(result, bool)
        return result

    def _query(self, name: str, argument: str = "") -> asyncio.Future[Reply]:
        result = self.send(_format(name, argument), expect_response=True)
        assert not isinstance(result, bool)
        return result

    def _detach(self) -> None:
        if self._relay is not None:
            self._relay.cancel()
            self._relay = None
        if self._dispatcher is not None:
            self._dispatcher.close()
            self._dispatcher = None
        self._transport = None


def _format(name: str, argument: str) -> str:
    return f"{name} {argument}" if argument else name


__all__ = ["ClientOptions", "DEFAULT_TIMEOUT", "LiveSplitClient"]
