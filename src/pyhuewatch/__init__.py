"""Python library for watching the lights of a Hue bridge."""

# Import main classes for easier access
from .bridge import AsyncBridgeClient
from .diff import diff_states, get_events
from .models import Bridge, Event, Light, LightStates, State, User
from .poller import LightPoller, PollerState

# Import exceptions for easier handling
from .exceptions import (
    IdentityMismatch,
    MissingDeviceState,
    PairingDenied,
    ProtocolError,
    PyHueWatchException,
    TransportError,
)

__version__ = "0.1.0"

# Define what gets imported with 'from pyhuewatch import *'
__all__ = [
    "AsyncBridgeClient",
    "LightPoller",
    "PollerState",
    "get_events",
    "diff_states",
    "Bridge",
    "Event",
    "Light",
    "LightStates",
    "State",
    "User",
    "PyHueWatchException",
    "TransportError",
    "ProtocolError",
    "PairingDenied",
    "IdentityMismatch",
    "MissingDeviceState",
    "__version__",
]
