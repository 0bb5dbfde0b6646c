"""Custom exceptions for pyhuewatch."""


class PyHueWatchException(Exception):
    """Base class for pyhuewatch exceptions."""


class TransportError(PyHueWatchException):
    """Raised when the bridge cannot be reached or answers with an HTTP error."""

    def __init__(self, status_code: int, error_message: str) -> None:
        """Initialize the transport error."""
        self.status_code = status_code
        self.error_message = error_message
        super().__init__(f"Transport Error {status_code}: {error_message}")


class ProtocolError(PyHueWatchException):
    """Raised when a response body does not parse or lacks expected fields."""


class PairingDenied(ProtocolError):
    """Raised when the bridge refuses pairing until its link button is pressed."""


class IdentityMismatch(PyHueWatchException):
    """Raised when two snapshots of different lights are compared."""

    def __init__(self, current_id: str, next_id: str) -> None:
        """Initialize the identity mismatch error."""
        self.current_id = current_id
        self.next_id = next_id
        super().__init__(
            f"States are not for the same light: {current_id!r} != {next_id!r}"
        )


class MissingDeviceState(PyHueWatchException):
    """Raised when a tracked light has no entry in a snapshot set."""

    def __init__(self, light_id: str, snapshot: str) -> None:
        """Initialize the missing device state error."""
        self.light_id = light_id
        self.snapshot = snapshot
        super().__init__(f"Light {light_id!r} not found in {snapshot} state")
