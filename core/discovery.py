"""Bridge discovery.

Two strategies run in sequence against one accumulator:
- SSDP: broadcast an M-SEARCH query and collect replies until a hard deadline
- N-UPnP: ask the vendor directory service, only if SSDP found nothing
"""

import socket
import threading
import time

import requests
from loguru import logger as default_logger

from core.errors import TransportError
from models.types import NupnpEntry
from models.utils import is_valid_bridge_id

SSDP_ADDRESS = '239.255.255.250'
SSDP_PORT = 1900
SSDP_PAYLOAD = (
    'M-SEARCH * HTTP/1.1\r\n'
    'ST: ssdp:all\r\n'
    'MX: 10\r\n'
    'MAN: ssdp:discover\r\n'
    f'HOST: {SSDP_ADDRESS}:{SSDP_PORT}\r\n'
    '\r\n'
)
VENDOR_MARKER = 'IpBridge'
UUID_LENGTH = 36

DEFAULT_UDP_TIMEOUT = 5
POLL_INTERVAL = 0.5
RECV_BUFFER_SIZE = 2048

NUPNP_URL = 'https://www.meethue.com/api/nupnp'
NUPNP_TIMEOUT = 5

_UUID_CHARS = frozenset('0123456789abcdefABCDEF-')


def bridge_uri(ip: str) -> str:
    """Base URI of the bridge API at ip."""
    return f"http://{ip}/api"


def parse_ssdp_response(message: str) -> str | None:
    """Extract the bridge UUID from an SSDP reply.

    The reply must contain the vendor marker, a LOCATION header and a
    "uuid:" token followed by a 36 character UUID.

    Returns:
        The UUID, or None if the reply is not from a bridge
    """
    if VENDOR_MARKER not in message:
        return None

    headers = {}
    for line in message.splitlines()[1:]:
        name, sep, value = line.partition(':')
        if sep:
            headers.setdefault(name.strip().upper(), value.strip())

    if not headers.get('LOCATION'):
        return None

    for value in headers.values():
        start = value.find('uuid:')
        if start == -1:
            continue
        token = value[start + 5:start + 5 + UUID_LENGTH]
        if len(token) == UUID_LENGTH and set(token) <= _UUID_CHARS:
            return token

    return None


class BridgeDiscoverer:
    """Finds bridges on the local network.

    Args:
        udp_timeout: Seconds to listen for SSDP replies, measured from the
            start of listening
        session: requests session used for the N-UPnP lookup
        socket_factory: Callable returning a UDP socket
        logger: loguru-compatible logger
    """

    def __init__(self, udp_timeout: float = DEFAULT_UDP_TIMEOUT,
                 session: requests.Session | None = None,
                 socket_factory=None, logger=None):
        self.udp_timeout = udp_timeout
        self.session = session or requests.Session()
        self.socket_factory = socket_factory or _udp_socket
        self.logger = logger or default_logger

    def discover(self, cancel: threading.Event | None = None) -> dict[str, str]:
        """Discover bridges.

        Args:
            cancel: Optional event; setting it stops the SSDP listen window early

        Returns:
            Dict of bridge id to base URI (empty if nothing was found)
        """
        bridges = {}
        self.udp_discover(bridges, cancel=cancel)
        if cancel is not None and cancel.is_set():
            return bridges
        self.nupnp_discover(bridges)
        return bridges

    def udp_discover(self, bridges: dict[str, str], cancel: threading.Event | None = None):
        """Broadcast an M-SEARCH and record replying bridges into bridges."""
        self.logger.info("Bridge UDP Discovery")

        try:
            sock = self.socket_factory()
        except OSError as e:
            raise TransportError("Unable to open SSDP socket", e)

        try:
            try:
                sock.sendto(SSDP_PAYLOAD.encode('ascii'), (SSDP_ADDRESS, SSDP_PORT))
            except OSError as e:
                raise TransportError("Unable to send SSDP query", e)

            deadline = time.monotonic() + self.udp_timeout
            while cancel is None or not cancel.is_set():
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break

                sock.settimeout(min(remaining, POLL_INTERVAL))
                try:
                    data, (ip, port) = sock.recvfrom(RECV_BUFFER_SIZE)
                except socket.timeout:
                    continue
                except OSError as e:
                    raise TransportError("SSDP receive failed", e)

                self._handle_reply(bridges, data, ip, port)
        finally:
            sock.close()

        if cancel is not None and cancel.is_set():
            self.logger.info("UDP discovery cancelled.")
        else:
            self.logger.info("UDP discovery timed out.")

    def _handle_reply(self, bridges: dict[str, str], data: bytes, ip: str, port: int):
        message = data.decode('utf-8', errors='replace')
        uuid = parse_ssdp_response(message)
        if uuid is None:
            self.logger.debug("Found {}:{}: {}", ip, port, message)
            return

        if uuid not in bridges:
            self.logger.info("Found bridge ({}:{}) with uuid: {}", ip, port, uuid)
        bridges[uuid] = bridge_uri(ip)

    def nupnp_discover(self, bridges: dict[str, str]):
        """Query the N-UPnP directory, unless bridges is already populated."""
        if bridges:
            return

        self.logger.info("Bridge NUPNP Discovery")
        try:
            response = self.session.get(NUPNP_URL, timeout=NUPNP_TIMEOUT)
        except requests.exceptions.RequestException as e:
            raise TransportError("N-UPnP discovery request failed", e)

        try:
            entries: list[NupnpEntry] = response.json()
        except ValueError:
            self.logger.debug("N-UPnP response was not JSON")
            return

        if not isinstance(entries, list):
            return

        for entry in entries:
            if not isinstance(entry, dict):
                continue
            bridge_id = entry.get('id')
            ip = entry.get('internalipaddress')
            if not is_valid_bridge_id(bridge_id) or not isinstance(ip, str) or not ip:
                self.logger.debug("Skipping malformed N-UPnP entry: {}", entry)
                continue
            bridges[bridge_id] = bridge_uri(ip)


def _udp_socket() -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 2)
    return sock
