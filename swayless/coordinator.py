import asyncio
import logging

from swayless import commands
from swayless.client import SwayClient
from swayless.commands import Command
from swayless.naming import quote, split_workspace_name
from swayless.output_state import OutputState

logger = logging.getLogger(__name__)


class NoFocusedOutputError(LookupError):
    pass


class NoVisibleWorkspaceError(LookupError):
    pass


class OutputCoordinator:
    """
    Owns one `OutputState` per output and routes every operation to the
    state of the focused output.

    `lock` serializes everything that touches the states: the command server
    and the focus listener hold it for the whole handling of one command or
    event. The methods below do not take it themselves.
    """

    def __init__(self, client: SwayClient, initial_tag: str = "1") -> None:
        self.client = client
        self.initial_tag = initial_tag
        self.outputs: dict[str, OutputState] = {}
        self.lock = asyncio.Lock()

    def state_for(self, output_name: str, ordinal: int | None = None) -> OutputState:
        if (state := self.outputs.get(output_name)) is None:
            logger.info("Tracking new output: [output=%s]", output_name)
            state = self.outputs[output_name] = OutputState(
                output_name, self.initial_tag, ordinal or 0
            )
        if ordinal is not None:
            state.ordinal = ordinal
        return state

    async def initialize(self) -> None:
        outputs = await self.client.list_outputs()
        ordinals = {output["name"]: i for i, output in enumerate(outputs)}

        # focusing in reverse leaves sway's focus on the first listed output
        for output in reversed([o for o in outputs if o["active"]]):
            state = self.state_for(output["name"], ordinals[output["name"]])
            await self.client.run(f"focus output {quote(state.name)}")
            await self.client.run(
                f"workspace {quote(state.workspace_name(state.focused_tag))}"
            )

        logger.info("Initialized outputs: %s", list(self.outputs.values()))

    async def current(self) -> OutputState:
        if (focused := await self.client.focused_output()) is None:
            raise NoFocusedOutputError("No focused output")
        ordinal, output = focused
        return self.state_for(output["name"], ordinal)

    async def focus_tag(self, tag: str) -> None:
        state = await self.current()
        await state.switch_to(self.client, tag)

    async def focus_tag_all_outputs(self, tag: str) -> None:
        current = await self.current()
        outputs = await self.client.list_outputs()
        for ordinal, output in enumerate(outputs):
            if not output["active"]:
                continue
            state = self.state_for(output["name"], ordinal)
            await self.client.run(f"focus output {quote(state.name)}")
            await state.switch_to(self.client, tag)

        await self.client.run(f"focus output {quote(current.name)}")

    async def move_focused_container_to_tag(self, tag: str) -> None:
        state = await self.current()
        if (container := await self.client.focused_container(state.name)) is None:
            logger.info("No focused container to move: [output=%s]", state.name)
            return

        if state.is_borrowing(tag):
            # tag's containers are parked here, so this one stays visible
            # and goes home together with them
            state.borrow_container(tag, container)
            target = state.workspace_name(state.focused_tag)
        else:
            state.unborrow_container(container)
            target = state.workspace_name(tag)

        await self.client.run(
            f"[con_id={container}] move container to workspace {quote(target)}"
        )

    async def move_focused_container_to_adjacent_output(self, direction: int) -> None:
        outputs = await self.client.list_outputs()
        index = next((i for i, o in enumerate(outputs) if o.get("focused")), None)
        if index is None:
            raise NoFocusedOutputError("No focused output")

        source = self.state_for(outputs[index]["name"], index)
        target = outputs[(index + direction) % len(outputs)]
        if (workspace := await self.client.visible_workspace(target["name"])) is None:
            raise NoVisibleWorkspaceError(
                f"No visible workspace on output {target['name']}"
            )

        if (container := await self.client.focused_container(source.name)) is not None:
            source.unborrow_container(container)

        name = quote(workspace["name"])
        await self.client.run(f"move container to workspace {name}")
        await self.client.run(f"workspace {name}")

    async def move_focused_container_to_next_output(self) -> None:
        await self.move_focused_container_to_adjacent_output(1)

    async def move_focused_container_to_previous_output(self) -> None:
        await self.move_focused_container_to_adjacent_output(-1)

    async def bring_tag_here(self, tag: str) -> None:
        """
        Pulls the containers of `tag` onto the focused workspace, or sends
        them back when they are already here.
        """
        state = await self.current()
        if tag == state.focused_tag:
            logger.info("Tag %s is already focused on %s", tag, state.name)
            return

        if await state.return_containers(self.client, tag):
            return

        containers = await self.client.containers_on_workspace(
            state.name, state.workspace_name(tag)
        )
        if not containers:
            logger.info("Nothing to bring from tag %s on %s", tag, state.name)
            return
        await state.borrow_containers_from(self.client, tag, containers)

    async def alt_tab(self) -> None:
        state = await self.current()
        await state.toggle_to_previous(self.client)

    def observe_workspace_focus(self, workspace: str, output_name: str) -> None:
        tag, ordinal = split_workspace_name(workspace)
        state = self.outputs.get(output_name) or self.state_for(output_name, ordinal)
        if state.observe_focus(tag):
            logger.debug("Observed focus change: %r", state)

    async def dispatch(self, command: Command) -> None:
        match command:
            case {"command": commands.FOCUS_TAG, "tag": tag}:
                await self.focus_tag(tag)
            case {"command": commands.FOCUS_TAG_ALL_OUTPUTS, "tag": tag}:
                await self.focus_tag_all_outputs(tag)
            case {"command": commands.MOVE_CONTAINER_TO_TAG, "tag": tag}:
                await self.move_focused_container_to_tag(tag)
            case {"command": commands.MOVE_CONTAINER_TO_NEXT_OUTPUT}:
                await self.move_focused_container_to_next_output()
            case {"command": commands.MOVE_CONTAINER_TO_PREVIOUS_OUTPUT}:
                await self.move_focused_container_to_previous_output()
            case {"command": commands.BRING_TAG_HERE, "tag": tag}:
                await self.bring_tag_here(tag)
            case {"command": commands.ALT_TAB}:
                await self.alt_tab()
            case {"command": commands.INIT}:
                logger.warning("Received init over the socket, ignoring")
            case _:
                logger.warning("Unknown command: %r", command)
