"""Data models for pyhuewatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from .const import BRIGHTNESS_PERCENT_MAX, BRIGHTNESS_RAW_MAX
from .exceptions import ProtocolError

# Attributes tracked per light, in the order change events are produced
EVENT_FIELDS = ("name", "on", "brightness")

EventValue = Union[str, bool, int]


def brightness_to_percent(raw: int) -> int:
    """Map the bridge's 1-254 brightness scale to 0-100.

    Values above 254 are not clamped, so the result can exceed 100.
    """
    return round(raw / BRIGHTNESS_RAW_MAX * BRIGHTNESS_PERCENT_MAX)


@dataclass(frozen=True)
class Bridge:
    """Connection descriptor of a Hue bridge."""

    hostname: str
    port: int

    @property
    def base_url(self) -> str:
        """Return the HTTP root of the bridge."""
        return f"http://{self.hostname}:{self.port}"


@dataclass(frozen=True)
class User:
    """Username handed out by the bridge after pairing."""

    username: str


@dataclass(frozen=True, order=True)
class Light:
    """Identity of a light. Two lights are the same light when their ids match."""

    id: str
    name: str = field(default="", compare=False)


@dataclass(frozen=True)
class State:
    """Observed attributes of one light at one point in time."""

    id: str
    name: str
    on: bool
    brightness: int

    @classmethod
    def from_api(cls, light: Light, data: Any) -> State:
        """Create a State from a ``GET /api/<user>/lights/<id>`` body."""
        if not isinstance(data, dict):
            raise ProtocolError(f"Light {light.id!r}: expected an object, got {data!r}")
        json_state = data.get("state")
        if not isinstance(json_state, dict):
            raise ProtocolError(f"Light {light.id!r}: missing 'state' object")

        name = data.get("name")
        if not isinstance(name, str):
            raise ProtocolError(f"Light {light.id!r}: missing 'name'")
        on = json_state.get("on")
        if not isinstance(on, bool):
            raise ProtocolError(f"Light {light.id!r}: missing 'state.on'")
        # On/off only lights do not report a brightness
        bri = json_state.get("bri", 0)
        if isinstance(bri, bool) or not isinstance(bri, int):
            raise ProtocolError(f"Light {light.id!r}: invalid 'state.bri' {bri!r}")

        return cls(
            id=light.id,
            name=name,
            on=on,
            brightness=brightness_to_percent(bri),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the dictionary written to the output stream."""
        return {
            "id": self.id,
            "name": self.name,
            "on": self.on,
            "brightness": self.brightness,
        }


@dataclass(frozen=True)
class Event:
    """Change of a single attribute of a light."""

    id: str
    field: str
    value: EventValue

    def __post_init__(self) -> None:
        """Reject attributes that are not tracked."""
        if self.field not in EVENT_FIELDS:
            raise ValueError(f"Unknown event field {self.field!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the dictionary written to the output stream."""
        return {"id": self.id, self.field: self.value}


# Snapshot set: every tracked light mapped to its latest state
LightStates = Dict[Light, State]


def sorted_states(states: LightStates) -> List[State]:
    """Return the states of a snapshot set ordered by light id."""
    return [states[light] for light in sorted(states)]
