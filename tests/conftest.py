import pytest

from swayless.client import SwayClient
from swayless.coordinator import OutputCoordinator
from tests.fakes import fake_ipc, output, workspace


@pytest.fixture
def ipc():
    """Two outputs, the first one focused, both showing tag 1."""
    return fake_ipc(
        [output("DP-1", focused=True), output("HDMI-A-1")],
        [
            workspace("1", "DP-1", visible=True, focused=True),
            workspace("1²", "HDMI-A-1", visible=True),
        ],
    )


@pytest.fixture
def client(ipc):
    return SwayClient(ipc)


@pytest.fixture
def coordinator(client):
    return OutputCoordinator(client, "1")
