"""Error types raised by bridge discovery, registration and the config store."""


class HueError(Exception):
    """Base class for all hue-lib errors.

    Args:
        message: Human readable description
        original_error: Underlying exception, if this error wraps one
    """

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error

    def __str__(self) -> str:
        message = super().__str__()
        if self.original_error is None:
            return message
        return f"{message}\nCause: {self.original_error}"


class AlreadyRegistered(HueError):
    """A default application is already configured."""


class NoBridgeFound(HueError):
    """Discovery returned no bridges."""


class NotConfigured(HueError):
    """No default application has been registered."""


class BridgeNotFound(HueError):
    """The bridge of the default application cannot be located."""


class APIError(HueError):
    """The bridge answered with an error object."""

    def __init__(self, api_error: dict):
        self.type = api_error.get('type')
        self.address = api_error.get('address')
        self.description = api_error.get('description', 'Unknown error')
        super().__init__(self.description)


class RegistrationRejected(APIError):
    """The bridge refused to register the application (e.g. link button not pressed)."""


class TransportError(HueError):
    """Network or socket failure."""


class StorageError(HueError):
    """Config file could not be read or written."""
