import asyncio

import pytest

from livesplit_client import (
    NO_RESPONSE,
    ConnectionError,
    Disconnected,
    Line,
    LiveSplitClient,
    NotConnectedError,
    TcpTransport,
)
from livesplit_client.events import Connected, EventHub
from livesplit_client.transport.base import Transport


class DummyTransport:
    kind: Transport.Kind = "tcp"

    def __init__(self, replies: dict[str, str] | None = None) -> None:
        self.events = EventHub()
        self.connected = False
        self.written: list[str] = []
        self.replies = dict(replies or {})

    async def connect(self, endpoint) -> bool:
        self.connected = True
        self.events.emit(Connected())
        return True

    def write(self, line: str) -> None:
        self.written.append(line)
        if line in self.replies:
            reply = self.replies[line]
            asyncio.get_running_loop().call_soon(self.events.emit, Line(reply))

    def close(self) -> bool:
        if not self.connected:
            return False
        self.connected = False
        self.events.emit(Disconnected())
        return True


def make_client(transport: DummyTransport, **kwargs) -> LiveSplitClient:
    return LiveSplitClient("127.0.0.1:16834", transport_factory=lambda logger: transport, **kwargs)


def test_scenario_against_server() -> None:
    async def scenario():
        seen = []

        async def handler(reader, writer):
            while line := await reader.readline():
                command = line.decode().rstrip("\r\n")
                seen.append(command)
                if command == "getcurrenttime":
                    writer.write(b"00:01.23\r\n")
                    await writer.drain()
            writer.close()

        server = await asyncio.start_server(handler, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        client = LiveSplitClient(f"127.0.0.1:{port}", timeout=1.0)
        async with server:
            assert await client.connect() is True
            assert client.connected
            time = await client.get_current_time()
            assert client.pause() is True
            await asyncio.sleep(0.05)
            assert client.disconnect() is True
            assert client.disconnect() is False
            await asyncio.sleep(0.05)
        return time, seen

    time, seen = asyncio.run(scenario())
    assert time == "00:01.23"
    assert seen == ["getcurrenttime", "pause"]


def test_default_transport_is_tcp() -> None:
    async def scenario():
        server = await asyncio.start_server(lambda reader, writer: writer.close(), "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        client = LiveSplitClient(f"127.0.0.1:{port}")
        async with server:
            await client.connect()
            transport = client._transport
            client.disconnect()
        return transport

    assert isinstance(asyncio.run(scenario()), TcpTransport)


def test_disconnect_before_connect_returns_false() -> None:
    client = make_client(DummyTransport())
    assert client.disconnect() is False
    assert client.connected is False


def test_send_requires_connection() -> None:
    client = make_client(DummyTransport())
    with pytest.raises(NotConnectedError):
        client.send("getcurrenttime")
    with pytest.raises(NotConnectedError):
        client.pause()


def test_send_after_disconnect_fails_fast() -> None:
    async def scenario():
        transport = DummyTransport()
        client = make_client(transport)
        await client.connect()
        client.disconnect()
        with pytest.raises(NotConnectedError):
            client.split()

    asyncio.run(scenario())


def test_connect_failure_raises_connection_error() -> None:
    async def scenario():
        server = await asyncio.start_server(lambda reader, writer: None, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()
        client = LiveSplitClient(f"127.0.0.1:{port}")
        with pytest.raises(ConnectionError):
            await client.connect()
        return client.connected

    assert asyncio.run(scenario()) is False


def test_command_wire_format() -> None:
    async def scenario():
        transport = DummyTransport()
        client = make_client(transport)
        await client.connect()
        client.start_timer()
        client.start_or_split()
        client.split()
        client.unsplit()
        client.skip_split()
        client.pause()
        client.resume()
        client.reset()
        client.set_game_time("1:23.45")
        client.set_loading_times("0:05.00")
        client.pause_game_time()
        client.unpause_game_time()
        client.set_comparison("Best Segments")
        return transport.written

    assert asyncio.run(scenario()) == [
        "starttimer",
        "startorsplit",
        "split",
        "unsplit",
        "skipsplit",
        "pause",
        "resume",
        "reset",
        "setgametime 1:23.45",
        "setloadingtimes 0:05.00",
        "pausegametime",
        "unpausegametime",
        "setcomparison Best Segments",
    ]


def test_getter_arguments_are_optional() -> None:
    async def scenario():
        transport = DummyTransport({"getdelta": "-", "getdelta Personal Best": "+1.5", "getfinaltime": "1:00"})
        client = make_client(transport)
        await client.connect()
        return (
            await client.get_delta(),
            await client.get_delta("Personal Best"),
            await client.get_final_time(),
        )

    assert asyncio.run(scenario()) == ("-", "+1.5", "1:00")


def test_init_game_time_is_sent_once() -> None:
    async def scenario():
        transport = DummyTransport()
        client = make_client(transport)
        await client.connect()
        return client.init_game_time(), client.init_game_time(), transport.written

    assert asyncio.run(scenario()) == (True, False, ["initgametime"])


def test_get_all_collects_every_getter() -> None:
    async def scenario():
        transport = DummyTransport(
            {
                "getcurrenttimerphase": "Running",
                "getdelta": "-0.50",
                "getlastsplittime": "0:30.00",
                "getcomparisonsplittime": "0:31.00",
                "getcurrenttime": "0:45.12",
                "getfinaltime": "2:00.00",
                "getpredictedtime": "1:59.50",
                "getbestpossibletime": "1:55.00",
                "getsplitindex": "1",
                "getcurrentsplitname": "World 1",
                # getprevioussplitname never answers
            }
        )
        client = make_client(transport, timeout=0.02)
        await client.connect()
        return await client.get_all()

    result = asyncio.run(scenario())
    assert result["getcurrenttime"] == "0:45.12"
    assert result["getcurrentsplitname"] == "World 1"
    assert result["getprevioussplitname"] is None
    assert len(result) == 11


def test_timeout_property_reaches_dispatcher() -> None:
    async def scenario():
        transport = DummyTransport()
        client = make_client(transport, timeout=5.0)
        await client.connect()
        client.timeout = 0.02
        return await asyncio.wait_for(client.get_split_index(), 1.0)

    assert asyncio.run(scenario()) is NO_RESPONSE


def test_timeout_must_be_positive() -> None:
    client = make_client(DummyTransport())
    with pytest.raises(ValueError):
        client.timeout = -1


def test_events_are_relayed_to_subscribers() -> None:
    async def scenario():
        transport = DummyTransport({"getcurrenttime": "00:01.23"})
        client = make_client(transport)
        events = []
        client.subscribe(events.append)
        await client.connect()
        await client.get_current_time()
        client.disconnect()
        return events

    assert asyncio.run(scenario()) == [Connected(), Line("00:01.23"), Disconnected()]


def test_reconnect_uses_fresh_transport() -> None:
    async def scenario():
        transports = []

        def factory(logger):
            transport = DummyTransport()
            transports.append(transport)
            transport.replies["getsplitindex"] = str(len(transports))
            return transport

        client = LiveSplitClient("127.0.0.1:16834", transport_factory=factory)
        async with client:
            first = await client.get_split_index()
        async with client:
            second = await client.get_split_index()
        return first, second, len(transports)

    assert asyncio.run(scenario()) == ("1", "2", 2)


def test_concurrent_connects_share_one_transport() -> None:
    async def scenario():
        transports = []

        class SlowTransport(DummyTransport):
            async def connect(self, endpoint) -> bool:
                await asyncio.sleep(0.02)
                return await super().connect(endpoint)

        def factory(logger):
            transports.append(SlowTransport())
            return transports[-1]

        client = LiveSplitClient("127.0.0.1:16834", transport_factory=factory)
        results = await asyncio.gather(client.connect(), client.connect())
        return results, len(transports), client._transport is transports[0], client.connected

    assert asyncio.run(scenario()) == ([True, True], 1, True, True)


def test_connect_after_disconnect_opens_new_connection() -> None:
    async def scenario():
        transports = []

        def factory(logger):
            transports.append(DummyTransport())
            return transports[-1]

        client = LiveSplitClient("127.0.0.1:16834", transport_factory=factory)
        await client.connect()
        client.disconnect()
        await client.connect()
        return len(transports), client.connected

    assert asyncio.run(scenario()) == (2, True)
