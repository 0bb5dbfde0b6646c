"""JSON lines written to the output stream, and their parsers."""

from __future__ import annotations

import json
from typing import Any, List

from .exceptions import ProtocolError
from .models import EVENT_FIELDS, Event, LightStates, State, sorted_states


def snapshot_to_json(states: LightStates) -> str:
    """Serialize a snapshot set as one JSON array ordered by light id."""
    return json.dumps([state.to_dict() for state in sorted_states(states)])


def event_to_json(event: Event) -> str:
    """Serialize an event as one JSON object."""
    return json.dumps(event.to_dict())


def _loads(line: str) -> Any:
    try:
        return json.loads(line)
    except ValueError as err:
        raise ProtocolError(f"Invalid JSON line: {line!r}") from err


def parse_snapshot(line: str) -> List[State]:
    """Parse a line written by :func:`snapshot_to_json` back into states."""
    data = _loads(line)
    if not isinstance(data, list):
        raise ProtocolError("Snapshot line is not a JSON array")
    try:
        return [
            State(
                id=item["id"],
                name=item["name"],
                on=item["on"],
                brightness=item["brightness"],
            )
            for item in data
        ]
    except (KeyError, TypeError) as err:
        raise ProtocolError(f"Malformed snapshot entry: {err}") from err


def parse_event(line: str) -> Event:
    """Parse a line written by :func:`event_to_json` back into an event."""
    data = _loads(line)
    if not isinstance(data, dict) or "id" not in data:
        raise ProtocolError(f"Malformed event line: {line!r}")
    changed = [name for name in EVENT_FIELDS if name in data]
    if len(changed) != 1 or len(data) != 2:
        raise ProtocolError(f"Event must carry exactly one attribute: {line!r}")
    return Event(id=data["id"], field=changed[0], value=data[changed[0]])
