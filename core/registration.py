"""Registration of this application with a bridge.

Ties discovery, the config store and the bridge handshake together:
- register_default: discover, persist bridges, register, persist credential
- resolve_default: rebuild a BridgeHandle from stored config
- remove_default: unregister at the bridge and forget the credential
"""

import click
import requests
from loguru import logger as default_logger

from core.bridge import BridgeHandle
from core.config import ConfigStore
from core.discovery import BridgeDiscoverer
from core.errors import AlreadyRegistered, APIError, BridgeNotFound, NoBridgeFound, TransportError
from models.types import ApplicationRecord, BridgeRecord
from models.utils import DEVICE_TYPE


class RegistrationCoordinator:
    """Manages the default application identity of this installation."""

    def __init__(self, store: ConfigStore, discoverer: BridgeDiscoverer | None = None,
                 session: requests.Session | None = None, logger=None,
                 device_type: str = DEVICE_TYPE):
        self.store = store
        self.session = session or requests.Session()
        self.logger = logger or default_logger
        self.discoverer = discoverer or BridgeDiscoverer(session=self.session, logger=self.logger)
        self.device_type = device_type

    def register_bridges(self) -> dict[str, BridgeRecord]:
        """Discover bridges and persist each one.

        Raises:
            NoBridgeFound: If discovery returned nothing
        """
        bridges = self.discoverer.discover()
        if not bridges:
            raise NoBridgeFound("No bridge found.")

        records = {}
        for bridge_id, uri in bridges.items():
            record = BridgeRecord(bridge_id, uri)
            self.store.write_bridge(record)
            records[bridge_id] = record
        return records

    def register_default(self) -> BridgeHandle:
        """Register a new default application with the first discovered bridge.

        A person has to press the bridge's link button shortly before this
        is called; the bridge rejects the request otherwise.

        Raises:
            AlreadyRegistered: A default application already exists
            NoBridgeFound: Discovery found no bridges
            RegistrationRejected: The bridge refused the registration
        """
        if self.store.find_default_application() is not None:
            raise AlreadyRegistered("Default application already registered.")

        # Only single-bridge installations are supported.
        bridge = next(iter(self.register_bridges().values()))

        click.echo(f"Registering new app with bridge {bridge.id}...")
        self.logger.info("Registering with bridge {} at {}", bridge.id, bridge.uri)
        handle = BridgeHandle.register(bridge.uri, device_type=self.device_type,
                                       session=self.session)

        self.store.write_application(ApplicationRecord(bridge.id, handle.application_id))
        self.logger.info("Registered application for bridge {}", bridge.id)
        return handle

    def resolve_default(self) -> BridgeHandle:
        """Build a BridgeHandle for the default application.

        Falls back to discovery when the stored bridge record is missing.

        Raises:
            NotConfigured: No default application exists
            BridgeNotFound: The application's bridge cannot be located
        """
        application = self.store.default_application()
        bridge = self.store.find_bridge(application.bridge_id)

        if bridge is None:
            self.logger.info("Bridge {} not in config, discovering", application.bridge_id)
            for bridge_id, uri in self.discoverer.discover().items():
                record = BridgeRecord(bridge_id, uri)
                self.store.write_bridge(record)
                if bridge_id == application.bridge_id:
                    bridge = record

        if bridge is None:
            raise BridgeNotFound(f"Unable to find bridge: {application.bridge_id}")

        return BridgeHandle(application.application_id, bridge.uri, session=self.session)

    def remove_default(self) -> bool:
        """Unregister the default application and delete it locally.

        The local record is deleted even if the bridge refuses or cannot be
        reached.

        Returns:
            True if the bridge confirmed the unregister, False otherwise
        """
        handle = self.resolve_default()

        unregistered = True
        try:
            handle.unregister()
        except (APIError, TransportError) as e:
            self.logger.warning("Unable to unregister {} at bridge: {}", handle.application_id, e)
            unregistered = False
        finally:
            self.store.delete_default_application()

        return unregistered
