"""Pytest configuration and fixtures for hue-lib tests."""

import socket
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from core.config import ConfigStore

HUE_REPLY = (
    "HTTP/1.1 200 OK\r\n"
    "HOST: 239.255.255.250:1900\r\n"
    "EXT:\r\n"
    "CACHE-CONTROL: max-age=100\r\n"
    "LOCATION: http://{ip}:80/description.xml\r\n"
    "SERVER: Linux/3.14.0 UPnP/1.0 IpBridge/1.48.0\r\n"
    "hue-bridgeid: 001788FFFE255ACC\r\n"
    "ST: upnp:rootdevice\r\n"
    "USN: uuid:{uuid}::upnp:rootdevice\r\n"
    "\r\n"
)


def hue_reply(uuid: str, ip: str = '10.0.0.5') -> bytes:
    """Build an SSDP reply as sent by a Hue bridge."""
    return HUE_REPLY.format(uuid=uuid, ip=ip).encode()


class FakeSocket:
    """UDP socket stand-in that replays queued datagrams, then times out."""

    def __init__(self, replies=None, send_error: Exception | None = None):
        self.replies = list(replies or [])
        self.send_error = send_error
        self.sent = []
        self.timeout = None
        self.closed = False

    def sendto(self, data, address):
        if self.send_error:
            raise self.send_error
        self.sent.append((data, address))

    def settimeout(self, timeout):
        self.timeout = timeout

    def recvfrom(self, bufsize):
        if self.replies:
            return self.replies.pop(0)
        time.sleep(self.timeout or 0)
        raise socket.timeout()

    def close(self):
        self.closed = True


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def store(tmp_path):
    """ConfigStore backed by a temporary directory."""
    return ConfigStore(tmp_path / 'config')


@pytest.fixture
def empty_session():
    """requests session mock whose N-UPnP lookup returns no bridges."""
    session = MagicMock()
    session.get.return_value.json.return_value = []
    return session


@pytest.fixture(autouse=True)
def setup_logging():
    """Disable loguru output from library code during tests."""
    from loguru import logger
    logger.disable("core")
    yield
    logger.enable("core")
