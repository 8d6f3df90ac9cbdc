"""
hue-lib
Find Philips Hue bridges, register this application, and reuse the
registration on later runs.

    import hue_lib

    bridge = hue_lib.register_default()   # first run, after pressing the link button
    bridge = hue_lib.application()        # subsequent runs
"""

import requests

from core.bridge import BridgeHandle
from core.config import ConfigStore
from core.discovery import BridgeDiscoverer
from core.log import configure_logging
from core.registration import RegistrationCoordinator
from models.utils import device_type, one_time_uuid, percent_to_unit_interval

__all__ = [
    'BridgeHandle',
    'configure_logging',
    'coordinator',
    'device_type',
    'discover',
    'application',
    'one_time_uuid',
    'percent_to_unit_interval',
    'register_default',
    'remove_default',
]


def coordinator() -> RegistrationCoordinator:
    """Build a RegistrationCoordinator using the default config directory."""
    session = requests.Session()
    return RegistrationCoordinator(
        ConfigStore(),
        BridgeDiscoverer(session=session),
        session=session,
    )


def discover() -> dict[str, str]:
    """Return a dict of bridge id to base URI for bridges on the network."""
    return BridgeDiscoverer().discover()


def register_default() -> BridgeHandle:
    return coordinator().register_default()


def application() -> BridgeHandle:
    """Return a BridgeHandle for the registered default application."""
    return coordinator().resolve_default()


def remove_default() -> bool:
    return coordinator().remove_default()
