import logging
import re

from swayless.client import SwayClient
from swayless.naming import quote, workspace_name

logger = logging.getLogger(__name__)


class OutputState:
    """
    Tag bookkeeping for one output.

    `borrowed` maps a tag to the ids of containers that belong to it but are
    parked on the focused tag's workspace. The focused and previous tag share
    a two slot ring, so toggling swaps them instead of collapsing to one.

    Every WM side effect goes through the `SwayClient` passed in by the
    caller; the state never holds a connection of its own.
    """

    def __init__(self, name: str, initial_tag: str, ordinal: int = 0) -> None:
        self.name = name
        self.ordinal = ordinal
        self.borrowed: dict[str, set[int]] = {}
        self._ring = [initial_tag, initial_tag]
        self._cursor = 0

    def __repr__(self) -> str:
        return (
            f"OutputState(name={self.name!r}, ordinal={self.ordinal}, "
            f"focused={self.focused_tag!r}, previous={self.previous_tag!r}, "
            f"borrowed={self.borrowed!r})"
        )

    @property
    def focused_tag(self) -> str:
        return self._ring[self._cursor]

    @property
    def previous_tag(self) -> str:
        return self._ring[1 - self._cursor]

    def workspace_name(self, tag: str) -> str:
        return workspace_name(tag, self.ordinal)

    def _advance(self, tag: str) -> None:
        self._ring[1 - self._cursor] = tag
        self._cursor = 1 - self._cursor

    def is_borrowing(self, tag: str) -> bool:
        return bool(self.borrowed.get(tag))

    def borrow_container(self, tag: str, container: int) -> None:
        self.unborrow_container(container)
        self.borrowed.setdefault(tag, set()).add(container)

    def unborrow_container(self, container: int) -> bool:
        for tag, containers in list(self.borrowed.items()):
            if container in containers:
                containers.discard(container)
                if not containers:
                    del self.borrowed[tag]
                return True
        return False

    async def _move_home(self, client: SwayClient, tag: str, containers: set[int]) -> None:
        """
        Best effort: a container that cannot be moved (usually because it was
        closed while borrowed) is logged and forgotten.
        """
        target = quote(self.workspace_name(tag))
        for container in sorted(containers):
            results = await client.run(
                f"[con_id={container}] move container to workspace {target}"
            )
            if not all(r.get("success") for r in results):
                logger.info(
                    "Dropping borrowed container: [output=%s] [tag=%s] [con_id=%s]",
                    self.name,
                    tag,
                    container,
                )

    async def return_all_containers(self, client: SwayClient) -> None:
        for tag, containers in list(self.borrowed.items()):
            await self._move_home(client, tag, containers)
        self.borrowed.clear()

    async def return_containers(self, client: SwayClient, tag: str) -> bool:
        if not (containers := self.borrowed.get(tag)):
            self.borrowed.pop(tag, None)
            return False

        await self._move_home(client, tag, containers)
        del self.borrowed[tag]
        return True

    async def borrow_containers_from(
        self, client: SwayClient, tag: str, containers: list[int]
    ) -> None:
        if not containers:
            return

        for container in containers:
            self.borrow_container(tag, container)

        source = re.escape(self.workspace_name(tag))
        target = quote(self.workspace_name(self.focused_tag))
        await client.run(
            f'[workspace="^{source}$"] move container to workspace {target}'
        )

    async def switch_to(self, client: SwayClient, tag: str) -> None:
        if tag == self.focused_tag:
            return

        await self.return_all_containers(client)
        await client.run(f"workspace {quote(self.workspace_name(tag))}")
        self._advance(tag)

    async def toggle_to_previous(self, client: SwayClient) -> None:
        if self.previous_tag == self.focused_tag:
            return

        await self.return_all_containers(client)
        await client.run(f"workspace {quote(self.workspace_name(self.previous_tag))}")
        self._cursor = 1 - self._cursor

    def observe_focus(self, tag: str) -> bool:
        """
        Records a workspace switch that already happened outside of this
        daemon. No command is sent.
        """
        if tag == self.focused_tag:
            return False
        self._advance(tag)
        return True
