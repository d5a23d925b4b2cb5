"""Shared fixtures: a device session over an in-memory transport."""

import pytest

from rfid_reader_mcp.device import RFIDDevice
from rfid_reader_mcp.protocol.framing import build_response_frame

from fakes import FakeTransport


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def device(transport):
    return RFIDDevice(transport)


@pytest.fixture
def respond(transport):
    """Queue a device response: ``respond(command, status, answer)``."""

    def _respond(command: int, status: int, answer: bytes = b"") -> None:
        transport.queue(build_response_frame(command, status, answer))

    return _respond
