"""Attribute level comparison of light snapshots."""

from __future__ import annotations

from typing import Iterable, List

from .exceptions import IdentityMismatch, MissingDeviceState
from .models import EVENT_FIELDS, Event, Light, LightStates, State


def get_events(current: State, next_state: State) -> List[Event]:
    """Return one Event per attribute that differs between two snapshots.

    Events follow the order of ``EVENT_FIELDS`` (name, on, brightness) and
    carry the value from ``next_state``.

    Raises:
        IdentityMismatch: If the snapshots do not describe the same light.

    """
    if current.id != next_state.id:
        raise IdentityMismatch(current.id, next_state.id)
    if current is next_state:
        return []

    return [
        Event(id=next_state.id, field=name, value=getattr(next_state, name))
        for name in EVENT_FIELDS
        if getattr(current, name) != getattr(next_state, name)
    ]


def diff_states(
    lights: Iterable[Light], current: LightStates, next_states: LightStates
) -> List[Event]:
    """Diff every light of ``lights`` in order and concatenate the events.

    Raises:
        MissingDeviceState: If a light has no entry in either snapshot set.

    """
    events: List[Event] = []
    for light in lights:
        if light not in current:
            raise MissingDeviceState(light.id, "current")
        if light not in next_states:
            raise MissingDeviceState(light.id, "next")
        events.extend(get_events(current[light], next_states[light]))
    return events
