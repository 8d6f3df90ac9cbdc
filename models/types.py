"""Type definitions for hue-lib.

Records persisted by the config store, plus the shape of entries returned by
the NUPNP discovery service.
"""

from dataclasses import dataclass
from typing import TypedDict


@dataclass(frozen=True)
class BridgeRecord:
    """A known bridge: stable identifier and base URI of its API."""
    id: str
    uri: str

    def to_dict(self) -> dict:
        return {'id': self.id, 'uri': self.uri}

    @classmethod
    def from_dict(cls, data: dict) -> 'BridgeRecord':
        return cls(id=data['id'], uri=data['uri'])


@dataclass(frozen=True)
class ApplicationRecord:
    """Credential issued by a bridge, tied to the bridge it came from."""
    bridge_id: str
    application_id: str

    def to_dict(self) -> dict:
        return {'bridge_id': self.bridge_id, 'application_id': self.application_id}

    @classmethod
    def from_dict(cls, data: dict) -> 'ApplicationRecord':
        return cls(bridge_id=data['bridge_id'], application_id=data['application_id'])


class NupnpEntry(TypedDict, total=False):
    """Bridge information from N-UPnP discovery."""
    id: str
    internalipaddress: str
    name: str | None
    macaddress: str | None
