import asyncio
import logging
from signal import SIGINT, SIGTERM

from swayless.client import SwayClient
from swayless.coordinator import OutputCoordinator
from swayless.core import SwayIPCConnection
from swayless.listener import FocusEventListener
from swayless.server import CommandServer
from swayless.settings import Settings

logger = logging.getLogger(__name__)


def _log_listener_exit(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    if (error := task.exception()) is not None:
        logger.error(
            "Focus listener stopped, manual workspace switches are no longer "
            "tracked: %s",
            error,
        )


async def run_daemon(settings: Settings, ipc: SwayIPCConnection | None = None) -> None:
    """
    Connects to sway, initializes every active output, then serves commands
    while following workspace focus events. Connection and bind failures
    propagate to the caller.
    """
    if ipc is None:
        ipc = SwayIPCConnection()

    client = SwayClient(ipc)
    coordinator = OutputCoordinator(client, settings["initial_tag"])
    server = CommandServer(coordinator, settings["socket_path"])
    listener = FocusEventListener(client, coordinator)
    listener_task: asyncio.Task | None = None

    try:
        await ipc.connect()
        async with coordinator.lock:
            await coordinator.initialize()
        await server.start()

        listener_task = asyncio.create_task(listener.run())
        listener_task.add_done_callback(_log_listener_exit)
        await server.serve()
    except asyncio.exceptions.CancelledError:
        logger.info("Shutting down")
    finally:
        if listener_task is not None:
            listener_task.cancel()
        await ipc.close()


def run_swayless(settings: Settings) -> None:
    """
    Runs the daemon until SIGINT or SIGTERM.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    loop.add_signal_handler(SIGINT, lambda: [t.cancel() for t in asyncio.all_tasks(loop)])
    loop.add_signal_handler(SIGTERM, lambda: [t.cancel() for t in asyncio.all_tasks(loop)])
    try:
        loop.run_until_complete(run_daemon(settings))
    finally:
        loop.close()
