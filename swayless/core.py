import asyncio
import logging
import os
import sys
from collections import defaultdict
from typing import AsyncGenerator

import orjson

JSONValue = (
    bool
    | str
    | None
    | float
    | dict[str, "JSONInnerValue"]
    | list[dict[str, "JSONInnerValue"]]
)
JSONInnerValue = JSONValue | list[dict[str, JSONValue]]
JSONDict = dict[str, JSONValue]
JSONList = list[JSONDict]

logger = logging.getLogger(__name__)

magic_string = "i3-ipc"
magic_len = len(magic_string)
magic_enc = magic_string.encode()
payload_len_len = 4  # length of payload length
payload_type_len = 4  # length of payload type
header_len = magic_len + payload_len_len + payload_type_len

RUN_COMMAND = 0
GET_WORKSPACES = 1
SUBSCRIBE = 2
GET_OUTPUTS = 3
GET_TREE = 4

_events = {
    0x80000000: "workspace",
    0x80000001: "output",
    0x80000002: "mode",
    0x80000003: "window",
    0x80000004: "barconfig_update",
    0x80000005: "binding",
    0x80000006: "shutdown",
    0x80000007: "tick",
    0x80000014: "bar_state_update",
    0x80000015: "input",
}


def encode_message(payload_type: int, payload: bytes = b"") -> bytes:
    data = magic_enc
    data += len(payload).to_bytes(payload_len_len, sys.byteorder)
    data += payload_type.to_bytes(payload_type_len, sys.byteorder)
    return data + payload


def decode_header(header: bytes) -> tuple[int, int]:
    """Returns `(payload_length, payload_type)` of an i3-ipc header."""
    if header[:magic_len] != magic_enc:
        raise ConnectionError(f"Bad magic in IPC header: {header[:magic_len]!r}")
    length_bytes = header[magic_len : magic_len + payload_len_len]
    type_bytes = header[magic_len + payload_len_len :]
    return (
        int.from_bytes(length_bytes, sys.byteorder),
        int.from_bytes(type_bytes, sys.byteorder),
    )


def socket_path_from_env() -> str:
    socket_path = next(
        (path for name in ["SWAYSOCK", "I3SOCK"] if (path := os.environ.get(name))),
        None,
    )
    if not socket_path:
        raise EnvironmentError("Could not find the socket, is sway running?")
    return socket_path


class SwayIPCSocket:
    def __init__(self):
        self.lock = asyncio.Lock()
        self.reader: asyncio.StreamReader = None  # pyright: ignore
        self.writer: asyncio.StreamWriter = None  # pyright: ignore

    async def connect(self):
        socket_path = socket_path_from_env()
        self.reader, self.writer = await asyncio.open_unix_connection(path=socket_path)

    async def send(self, payload_type: int, command=b""):
        if not self.writer:  # first time calling, create socket
            await self.connect()

        self.writer.write(encode_message(payload_type, command))
        await self.writer.drain()

    async def _read_frame(self) -> tuple[int, bytes]:
        try:
            header = await self.reader.readexactly(header_len)
            payload_length, payload_type = decode_header(header)
            return payload_type, await self.reader.readexactly(payload_length)
        except asyncio.IncompleteReadError as e:
            raise ConnectionError("sway closed the IPC socket") from e

    async def receive(self) -> JSONDict | JSONList:
        _, raw_response = await self._read_frame()
        return orjson.loads(raw_response)

    async def receive_event(self) -> tuple[str, JSONDict]:
        event_int, raw_response = await self._read_frame()
        event_human = _events.get(event_int, "unknown")
        return event_human, orjson.loads(raw_response)

    async def close(self):
        if self.writer and not self.writer.is_closing():
            self.writer.close()
            await self.writer.wait_closed()

    async def send_receive(self, payload_type: int, command=b"") -> JSONDict | JSONList:
        async with self.lock:  # ensure only one coroutine is in this block at a time
            await self.send(payload_type, command)
            return await self.receive()


class SwayIPCConnection:
    """
    One socket per message type, so a blocking subscription never delays
    commands or queries.
    """

    def __init__(self) -> None:
        self.sockets = defaultdict(lambda: SwayIPCSocket())

    async def connect(self) -> None:
        await self.sockets["run_command"].connect()

    async def run_command(self, c: str) -> list[dict[str, bool | str]]:
        return await self.sockets["run_command"].send_receive(
            RUN_COMMAND, c.encode()
        )  # pyright: ignore

    async def get_workspaces(self) -> JSONList:
        return await self.sockets["get_workspaces"].send_receive(
            GET_WORKSPACES
        )  # pyright: ignore

    async def get_outputs(self) -> JSONList:
        return await self.sockets["get_outputs"].send_receive(
            GET_OUTPUTS
        )  # pyright: ignore

    async def get_tree(self) -> JSONDict:
        return await self.sockets["get_tree"].send_receive(GET_TREE)  # pyright:ignore

    async def subscribe(
        self, events: list[str]
    ) -> AsyncGenerator[tuple[str, str, JSONDict], None]:
        if not all(r in _events.values() for r in events):
            raise ValueError("invalid payload")

        socket = self.sockets["subscribe"]
        reply = await socket.send_receive(SUBSCRIBE, orjson.dumps(events))
        if not reply.get("success"):  # pyright: ignore
            raise ConnectionError(f"Could not subscribe with {events}")

        while True:
            try:
                event, payload = await socket.receive_event()
            except orjson.JSONDecodeError as e:
                logger.warning("Skipping undecodable event: %s", e)
                continue
            except asyncio.exceptions.CancelledError:
                await self.close(["subscribe"])
                raise
            if not isinstance(payload, dict):
                logger.warning("Skipping event with unexpected payload: %r", payload)
                continue
            yield event, payload.get("change", "run"), payload

    async def close(self, socket_names: list[str] | None = None):
        if socket_names is None:
            socket_names = list(self.sockets.keys())

        for name in socket_names:
            if (socket := self.sockets.pop(name, None)) is not None:
                await socket.close()
