import asyncio
import logging
import os

from swayless.commands import CommandDecodeError, decode_command
from swayless.coordinator import OutputCoordinator

logger = logging.getLogger(__name__)


class CommandServer:
    """
    Accepts one command per connection on a unix socket and applies it to the
    coordinator under its lock. Nothing is written back to the sender.
    """

    def __init__(self, coordinator: OutputCoordinator, socket_path: str) -> None:
        self.coordinator = coordinator
        self.socket_path = socket_path
        self.server: asyncio.AbstractServer | None = None
        self.error: BaseException | None = None
        self._stopped = asyncio.Event()

    async def start(self) -> None:
        if os.path.lexists(self.socket_path):
            logger.info("Removing stale socket %s", self.socket_path)
            os.remove(self.socket_path)

        self.server = await asyncio.start_unix_server(
            self.handle_client, path=self.socket_path
        )
        logger.info("Listening for commands on %s", self.socket_path)

    def stop(self, error: BaseException | None = None) -> None:
        self.error = self.error or error
        self._stopped.set()

    async def serve(self) -> None:
        """Serves until `stop` is called; re-raises the error that stopped it."""
        if self.server is None:
            await self.start()
        try:
            await self._stopped.wait()
        finally:
            self.server.close()  # pyright: ignore
            await self.server.wait_closed()  # pyright: ignore
        if self.error is not None:
            raise self.error

    async def handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        try:
            command = decode_command(await reader.read())
        except CommandDecodeError as e:
            logger.warning("Dropping connection with bad payload: %s", e)
            await self._close(writer)
            return

        logger.info("Handling command %r", command)
        async with self.coordinator.lock:
            try:
                await self.coordinator.dispatch(command)
            except LookupError as e:
                logger.error("Command %r aborted: %s", command, e)
            except ConnectionError as e:
                logger.critical("Lost the sway connection: %s", e)
                self.stop(e)
        await self._close(writer)

    async def _close(self, writer: asyncio.StreamWriter) -> None:
        writer.close()
        try:
            await writer.wait_closed()
        except ConnectionError:
            pass
