import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from swayless.sender import send_command
from swayless.server import CommandServer


def fake_coordinator():
    coordinator = Mock()
    coordinator.lock = asyncio.Lock()
    coordinator.dispatch = AsyncMock()
    return coordinator


async def wait_for(predicate):
    for _ in range(200):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition not reached")


@pytest.fixture
def socket_path(tmp_path):
    return str(tmp_path / "swayless.sock")


@pytest.mark.asyncio
async def test_commands_are_dispatched(socket_path):
    coordinator = fake_coordinator()
    server = CommandServer(coordinator, socket_path)
    serving = asyncio.create_task(server.serve())
    await wait_for(lambda: server.server is not None)

    await send_command(socket_path, {"command": "focus-tag", "tag": "2"})
    await send_command(socket_path, {"command": "alt-tab"})
    await wait_for(lambda: coordinator.dispatch.await_count == 2)

    assert [c.args[0] for c in coordinator.dispatch.await_args_list] == [
        {"command": "focus-tag", "tag": "2"},
        {"command": "alt-tab"},
    ]
    server.stop()
    await serving


@pytest.mark.asyncio
async def test_stale_socket_is_replaced(socket_path):
    with open(socket_path, "w") as f:
        f.write("left over")

    coordinator = fake_coordinator()
    server = CommandServer(coordinator, socket_path)
    await server.start()
    serving = asyncio.create_task(server.serve())

    await send_command(socket_path, {"command": "alt-tab"})
    await wait_for(lambda: coordinator.dispatch.await_count == 1)

    server.stop()
    await serving


@pytest.mark.asyncio
async def test_bad_payload_does_not_stop_the_server(socket_path):
    coordinator = fake_coordinator()
    server = CommandServer(coordinator, socket_path)
    await server.start()
    serving = asyncio.create_task(server.serve())

    _, writer = await asyncio.open_unix_connection(path=socket_path)
    writer.write(b"{not json")
    writer.write_eof()
    writer.close()
    await writer.wait_closed()

    await send_command(socket_path, {"command": "alt-tab"})
    await wait_for(lambda: coordinator.dispatch.await_count == 1)
    coordinator.dispatch.assert_awaited_once_with({"command": "alt-tab"})

    server.stop()
    await serving


@pytest.mark.asyncio
async def test_failed_operation_keeps_serving(socket_path):
    coordinator = fake_coordinator()
    coordinator.dispatch.side_effect = [LookupError("No focused output"), None]
    server = CommandServer(coordinator, socket_path)
    await server.start()
    serving = asyncio.create_task(server.serve())

    await send_command(socket_path, {"command": "alt-tab"})
    await send_command(socket_path, {"command": "alt-tab"})
    await wait_for(lambda: coordinator.dispatch.await_count == 2)
    assert not coordinator.lock.locked()

    server.stop()
    await serving


@pytest.mark.asyncio
async def test_lost_sway_connection_stops_the_server(socket_path):
    coordinator = fake_coordinator()
    coordinator.dispatch.side_effect = ConnectionError("sway closed the IPC socket")
    server = CommandServer(coordinator, socket_path)
    await server.start()
    serving = asyncio.create_task(server.serve())

    await send_command(socket_path, {"command": "alt-tab"})

    with pytest.raises(ConnectionError):
        await asyncio.wait_for(serving, 2)


@pytest.mark.asyncio
async def test_sender_needs_a_running_daemon(socket_path):
    with pytest.raises(FileNotFoundError):
        await send_command(socket_path, {"command": "alt-tab"})
