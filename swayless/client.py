import logging
from typing import AsyncGenerator, Callable

from swayless.core import SwayIPCConnection
from swayless.data_types import (
    CommandResult,
    Node,
    Output,
    Workspace,
    WorkspaceEvent,
)

logger = logging.getLogger(__name__)


def rec_parse_tree(node: Node | list[Node], func: Callable[[Node], int | None]) -> list:
    if isinstance(node, list):
        return [item for elem in node for item in rec_parse_tree(elem, func)]

    if (result := func(node)) is not None:
        return [result]

    return rec_parse_tree([*node["floating_nodes"], *node["nodes"]], func)


def window_finder(n: Node) -> int | None:
    if n["type"] not in ("con", "floating_con"):
        return None
    if not n["nodes"] and not n["floating_nodes"]:
        return n["id"]


def focused_window(n: Node) -> int | None:
    if n["type"] in ("con", "floating_con") and n["focused"]:
        return n["id"]


def find_child(node: Node, name: str) -> Node | None:
    return next((child for child in node["nodes"] if child["name"] == name), None)


class SwayClient:
    """
    The slice of sway the daemon needs: commands, output and workspace
    listings, tree lookups and the workspace focus stream.
    """

    def __init__(self, ipc: SwayIPCConnection) -> None:
        self.ipc = ipc

    async def run(self, command: str) -> list[CommandResult]:
        """
        Runs a command and logs every failed sub-command. A failure is never
        raised: the remaining sub-commands of the batch still ran.
        """
        logger.debug("Running command: [cmd=%s]", command)
        results: list[CommandResult] = await self.ipc.run_command(command)  # pyright: ignore
        for result in results:
            if not result.get("success"):
                logger.warning(
                    "Failed running command: [cmd=%s] [error=%s]",
                    command,
                    result.get("error", "unknown"),
                )
        return results

    async def list_outputs(self) -> list[Output]:
        return await self.ipc.get_outputs()  # pyright: ignore

    async def list_workspaces(self) -> list[Workspace]:
        return await self.ipc.get_workspaces()  # pyright: ignore

    async def focused_output(self) -> tuple[int, Output] | None:
        """Returns the focused output and its position in the output listing."""
        for ordinal, output in enumerate(await self.list_outputs()):
            if output.get("focused"):
                return ordinal, output
        return None

    async def visible_workspace(self, output_name: str) -> Workspace | None:
        return next(
            (
                ws
                for ws in await self.list_workspaces()
                if ws["output"] == output_name and ws["visible"]
            ),
            None,
        )

    async def containers_on_workspace(
        self, output_name: str, workspace: str
    ) -> list[int]:
        """
        Returns the ids of all windows, tiling and floating, on the named
        workspace of the given output. Missing outputs or workspaces (sway
        drops empty workspaces) yield an empty list.
        """
        tree: Node = await self.ipc.get_tree()  # pyright: ignore
        if (output_node := find_child(tree, output_name)) is None:
            logger.warning("Output not found in the tree: [output=%s]", output_name)
            return []
        if (ws_node := find_child(output_node, workspace)) is None:
            logger.debug("Workspace does not exist: [workspace=%s]", workspace)
            return []
        windows = [*ws_node["floating_nodes"], *ws_node["nodes"]]
        return rec_parse_tree(windows, window_finder)

    async def focused_container(self, output_name: str) -> int | None:
        tree: Node = await self.ipc.get_tree()  # pyright: ignore
        if (output_node := find_child(tree, output_name)) is None:
            return None
        found = rec_parse_tree(output_node["nodes"], focused_window)
        return found[0] if found else None

    async def subscribe_focus_events(self) -> AsyncGenerator[WorkspaceEvent, None]:
        async for _, change, payload in self.ipc.subscribe(["workspace"]):
            if change == "focus":
                yield payload
