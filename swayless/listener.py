import logging

from swayless.client import SwayClient
from swayless.coordinator import OutputCoordinator
from swayless.data_types import WorkspaceEvent

logger = logging.getLogger(__name__)


class FocusEventListener:
    """
    Keeps the per-output bookkeeping truthful when workspaces are switched
    outside of swayless, e.g. with sway's own keybindings.
    """

    def __init__(self, client: SwayClient, coordinator: OutputCoordinator) -> None:
        self.client = client
        self.coordinator = coordinator

    async def handle(self, payload: WorkspaceEvent) -> None:
        current = payload.get("current")
        if not isinstance(current, dict):
            logger.debug("Ignoring focus event without workspace: %r", payload)
            return

        workspace, output = current.get("name"), current.get("output")
        if not isinstance(workspace, str) or not isinstance(output, str):
            logger.debug("Ignoring focus event without name or output: %r", current)
            return

        async with self.coordinator.lock:
            self.coordinator.observe_workspace_focus(workspace, output)

    async def run(self) -> None:
        """
        Runs until the subscription drops; a `ConnectionError` is raised then.
        """
        async for payload in self.client.subscribe_focus_events():
            try:
                await self.handle(payload)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping focus event %r: %s", payload, e)
