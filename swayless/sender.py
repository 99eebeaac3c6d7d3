import asyncio
import os

from swayless.commands import Command, encode_command


async def send_command(socket_path: str, command: Command) -> None:
    """
    Writes a single command to the daemon socket. Fire and forget: the daemon
    sends no reply, failures only show up in its log.
    """
    if not os.path.exists(socket_path):
        raise FileNotFoundError(
            f"Socket {socket_path} does not exist, run `swayless init` first"
        )

    _, writer = await asyncio.open_unix_connection(path=socket_path)
    try:
        writer.write(encode_command(command))
        await writer.drain()
        writer.write_eof()
    finally:
        writer.close()
        await writer.wait_closed()
