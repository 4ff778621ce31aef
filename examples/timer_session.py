"""End-to-end timer session against a running LiveSplit Server."""

from __future__ import annotations

import asyncio
import os

from livesplit_client import NO_RESPONSE, ConnectionError, Disconnected, Line, LiveSplitClient

ADDRESS = os.getenv("LIVESPLIT_ADDRESS", "127.0.0.1:16834")
LOG_LEVEL = os.getenv("LIVESPLIT_CLIENT_LOG", "info")


def log_section(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def show(label: str, reply: object) -> None:
    print(f"→ {label}: {'(no answer)' if reply is NO_RESPONSE else reply}")


def on_event(event: object) -> None:
    if isinstance(event, Line):
        print(f"  debug line: {event.text!r}")
    elif isinstance(event, Disconnected):
        print("→ Disconnected")


async def main() -> None:
    log_section("LiveSplit Python Client: Timer Session")
    client = LiveSplitClient(ADDRESS, timeout=0.5, log_level=LOG_LEVEL)
    client.subscribe(on_event)

    try:
        await client.connect()
    except ConnectionError as exc:
        print(f"→ Cannot reach {ADDRESS}: {exc}")
        return
    print(f"→ Connected to {client.endpoint}")

    log_section("Step 1: Start and wait")
    client.start_or_split()
    await asyncio.sleep(1)
    show("Current time after 1 sec", await client.get_current_time())
    show("Split name", await client.get_current_split_name())

    log_section("Step 2: Pipelined getters")
    phase, index, delta = await asyncio.gather(
        client.get_current_timer_phase(),
        client.get_split_index(),
        client.get_delta(),
    )
    show("Timer phase", phase)
    show("Split index", index)
    show("Delta", delta)

    log_section("Step 3: Summary")
    for command, reply in (await client.get_all()).items():
        show(command, reply if reply is not None else NO_RESPONSE)

    log_section("Step 4: Pause and reset")
    client.pause()
    client.reset()
    await asyncio.sleep(0.1)
    client.disconnect()
    await asyncio.sleep(0.1)


if __name__ == "__main__":
    asyncio.run(main())
