"""Error types for the bridge."""


class BridgeError(Exception):
    """Base error for bridge failures."""


class DiscoveryTimeout(BridgeError):
    """Raised when no Legrand hub was advertised within the discovery window."""


class AuthError(BridgeError):
    """Raised when the Legrand hub rejects the login or cannot be reached."""


class FetchError(BridgeError):
    """Raised when the Legrand device catalog cannot be read."""


class SessionRejected(FetchError):
    """Raised when the Legrand hub returns 401 or 403 for a catalog read."""


class DispatchError(BridgeError):
    """Raised when a command to a single Hubitat device fails."""

    def __init__(self, device_id: str, message: str):
        super().__init__(message)
        self.device_id = device_id
