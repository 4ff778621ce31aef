import pytest

from livesplit_client.errors import ProtocolError
from livesplit_client.transport.framing import LineSplitter


def test_single_chunk_with_two_lines_yields_two_lines() -> None:
    splitter = LineSplitter()
    assert splitter.feed(b"00:01.23\r\nRunning\r\n") == ["00:01.23", "Running"]
    assert splitter.pending == b""


def test_partial_line_is_held_until_terminated() -> None:
    splitter = LineSplitter()
    assert splitter.feed(b"00:0") == []
    assert splitter.feed(b"1.23\r") == []
    assert splitter.feed(b"\nnext") == ["00:01.23"]
    assert splitter.pending == b"next"


def test_empty_lines_between_terminators_are_kept() -> None:
    splitter = LineSplitter()
    assert splitter.feed(b"a\r\n\r\nb\r\n") == ["a", "", "b"]


def test_invalid_utf8_is_replaced() -> None:
    splitter = LineSplitter()
    assert splitter.feed(b"caf\xff\r\n") == ["caf�"]


def test_reset_drops_pending_bytes() -> None:
    splitter = LineSplitter()
    splitter.feed(b"half")
    splitter.reset()
    assert splitter.feed(b"line\r\n") == ["line"]


def test_unterminated_line_over_limit_raises() -> None:
    splitter = LineSplitter(max_line_bytes=8)
    assert splitter.feed(b"01234567") == []
    with pytest.raises(ProtocolError):
        splitter.feed(b"89")
    assert splitter.pending == b""
    assert splitter.feed(b"ok\r\n") == ["ok"]


def test_terminated_lines_do_not_count_against_limit() -> None:
    splitter = LineSplitter(max_line_bytes=8)
    assert splitter.feed(b"0123456\r\n0123456\r\nabc") == ["0123456", "0123456"]
    assert splitter.pending == b"abc"


def test_byte_at_a_time_feed() -> None:
    splitter = LineSplitter()
    lines = []
    for byte in b"00:01.23\r\nRunning\r\n":
        lines.extend(splitter.feed(bytes([byte])))
    assert lines == ["00:01.23", "Running"]
    assert splitter.pending == b""
