import asyncio
import sys
from unittest.mock import AsyncMock, Mock

import orjson
import pytest

from swayless.core import (
    SwayIPCConnection,
    SwayIPCSocket,
    decode_header,
    encode_message,
    header_len,
    socket_path_from_env,
)

WORKSPACE_EVENT = 0x80000000


def frame(payload_type: int, payload: bytes) -> bytes:
    return encode_message(payload_type, payload)


def fed_socket(*frames: bytes, eof: bool = True) -> SwayIPCSocket:
    socket = SwayIPCSocket()
    socket.reader = asyncio.StreamReader()
    for f in frames:
        socket.reader.feed_data(f)
    if eof:
        socket.reader.feed_eof()
    socket.writer = Mock()
    socket.writer.drain = AsyncMock()
    return socket


def test_header_layout():
    message = encode_message(0, b"workspace 1")
    assert message[:6] == b"i3-ipc"
    assert int.from_bytes(message[6:10], sys.byteorder) == len(b"workspace 1")
    assert int.from_bytes(message[10:14], sys.byteorder) == 0
    assert decode_header(message[:header_len]) == (11, 0)


def test_bad_magic_is_a_connection_error():
    with pytest.raises(ConnectionError):
        decode_header(b"x" * header_len)


def test_socket_path_prefers_swaysock(monkeypatch):
    monkeypatch.setenv("SWAYSOCK", "/run/sway.sock")
    monkeypatch.setenv("I3SOCK", "/run/i3.sock")
    assert socket_path_from_env() == "/run/sway.sock"

    monkeypatch.delenv("SWAYSOCK")
    assert socket_path_from_env() == "/run/i3.sock"

    monkeypatch.delenv("I3SOCK")
    with pytest.raises(EnvironmentError):
        socket_path_from_env()


@pytest.mark.asyncio
async def test_send_receive_writes_a_frame_and_reads_the_reply():
    socket = fed_socket(frame(0, b'[{"success": true}]'))

    reply = await socket.send_receive(0, b"workspace 2")

    socket.writer.write.assert_called_once_with(frame(0, b"workspace 2"))
    assert reply == [{"success": True}]


@pytest.mark.asyncio
async def test_truncated_reply_is_a_connection_error():
    socket = fed_socket(frame(0, b'[{"success": true}]')[:-3])
    with pytest.raises(ConnectionError):
        await socket.receive()


@pytest.mark.asyncio
async def test_subscribe_skips_undecodable_events():
    good = {"change": "focus", "current": {"name": "2", "output": "DP-1"}}
    socket = fed_socket(
        frame(2, b'{"success": true}'),
        frame(WORKSPACE_EVENT, b"{broken"),
        frame(WORKSPACE_EVENT, b"[1, 2]"),
        frame(WORKSPACE_EVENT, orjson.dumps(good)),
    )
    ipc = SwayIPCConnection()
    ipc.sockets["subscribe"] = socket

    received = []
    with pytest.raises(ConnectionError):
        async for event in ipc.subscribe(["workspace"]):
            received.append(event)

    assert received == [("workspace", "focus", good)]
    socket.writer.write.assert_called_once_with(frame(2, b'["workspace"]'))


@pytest.mark.asyncio
async def test_subscribe_rejects_unknown_events():
    ipc = SwayIPCConnection()
    with pytest.raises(ValueError):
        async for _ in ipc.subscribe(["nonsense"]):
            pass


@pytest.mark.asyncio
async def test_refused_subscription():
    ipc = SwayIPCConnection()
    ipc.sockets["subscribe"] = fed_socket(frame(2, b'{"success": false}'))
    with pytest.raises(ConnectionError):
        async for _ in ipc.subscribe(["workspace"]):
            pass
