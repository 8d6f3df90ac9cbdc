"""BridgeHandle: an application credential paired with a bridge URI.

Handles the link button registration handshake and authenticated requests
against the bridge's v1 API.
"""

import requests

from core.errors import APIError, HueError, RegistrationRejected, TransportError
from models.utils import DEVICE_TYPE

REQUEST_TIMEOUT = 5

# Bridge error type returned when the link button was not pressed
LINK_BUTTON_NOT_PRESSED = 101


class BridgeHandle:
    """Authenticated access to a single bridge."""

    def __init__(self, application_id: str, base_uri: str,
                 session: requests.Session | None = None):
        """Initialise BridgeHandle.

        Args:
            application_id: Credential issued by the bridge
            base_uri: Base URI of the bridge API (e.g. http://10.0.0.5/api)
            session: requests session to issue calls with
        """
        self.application_id = application_id
        self.base_uri = base_uri.rstrip('/')
        self.session = session or requests.Session()

    def __repr__(self) -> str:
        return f"BridgeHandle(application_id={self.application_id!r}, base_uri={self.base_uri!r})"

    @property
    def uri(self) -> str:
        """URI prefix for authenticated calls."""
        return f"{self.base_uri}/{self.application_id}"

    @classmethod
    def register(cls, base_uri: str, device_type: str = DEVICE_TYPE,
                 session: requests.Session | None = None) -> 'BridgeHandle':
        """Create a new application credential on the bridge at base_uri.

        The bridge only accepts this while its link button grace window is
        open; otherwise it answers with error type 101.

        Raises:
            RegistrationRejected: The bridge returned an error object
            TransportError: The bridge could not be reached
        """
        session = session or requests.Session()
        result = _send(session, 'POST', base_uri, {'devicetype': device_type})

        entry = _first_entry(result)
        if 'error' in entry:
            raise RegistrationRejected(entry['error'])

        try:
            application_id = entry['success']['username']
        except (KeyError, TypeError):
            raise HueError(f"Unexpected registration response: {result!r}")

        return cls(application_id, base_uri, session=session)

    def request(self, method: str, path: str = '', data: dict | None = None):
        """Make an authenticated request to the bridge.

        Args:
            method: HTTP method
            path: Path relative to the authenticated prefix (e.g. '/config')
            data: JSON body

        Raises:
            APIError: The bridge returned an error object
            TransportError: The bridge could not be reached
        """
        result = _send(self.session, method, f"{self.uri}{path}", data)

        if isinstance(result, list):
            errors = [entry['error'] for entry in result
                      if isinstance(entry, dict) and 'error' in entry]
            if errors:
                raise APIError(errors[0])
        return result

    def get_config(self) -> dict:
        return self.request('GET', '/config')

    def unregister(self):
        """Delete this application's credential from the bridge whitelist."""
        return self.request('DELETE', f"/config/whitelist/{self.application_id}")


def _send(session: requests.Session, method: str, url: str, data: dict | None):
    try:
        response = session.request(method, url, json=data, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        raise TransportError(f"{method} {url} failed", e)
    except ValueError as e:
        raise TransportError(f"{method} {url} returned invalid JSON", e)


def _first_entry(result) -> dict:
    if isinstance(result, list) and result and isinstance(result[0], dict):
        return result[0]
    raise HueError(f"Unexpected bridge response: {result!r}")
