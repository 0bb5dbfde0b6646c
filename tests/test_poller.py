from __future__ import annotations

import asyncio
import json
from typing import Iterable, List, Optional, Sequence, Union

import pytest

from pyhuewatch.exceptions import MissingDeviceState, PairingDenied, TransportError
from pyhuewatch.models import Event, Light, LightStates, State, User
from pyhuewatch.output import parse_event, parse_snapshot
from pyhuewatch.poller import LightPoller, PollerState

LIGHT_A = Light("A", "Lamp A")
LIGHT_B = Light("B", "Lamp B")

INITIAL: LightStates = {
    LIGHT_A: State("A", "Lamp A", False, 0),
    LIGHT_B: State("B", "Lamp B", True, 100),
}


class _ScriptedClient:
    """Bridge client returning one prepared snapshot set (or error) per fetch."""

    def __init__(
        self,
        lights: Sequence[Light],
        fetches: List[Union[LightStates, Exception]],
        pair_error: Optional[Exception] = None,
    ) -> None:
        self._lights = list(lights)
        self._fetches = list(fetches)
        self._pair_error = pair_error
        self.paired_with: List[str] = []
        self.fetched_lights: List[List[Light]] = []

    async def async_pair(self, device_name: str) -> User:
        self.paired_with.append(device_name)
        if self._pair_error is not None:
            raise self._pair_error
        return User("user")

    async def async_list_lights(self, user: User) -> List[Light]:
        assert user == User("user")
        return list(self._lights)

    async def async_fetch_states(self, user: User, lights: Iterable[Light]) -> LightStates:
        self.fetched_lights.append(list(lights))
        result = self._fetches.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _poller(client: _ScriptedClient, lines: List[str]) -> LightPoller:
    return LightPoller(client, device_name="test", interval=0, output_callback=lines.append)


def test_initialize_emits_full_snapshot() -> None:
    lines: List[str] = []
    client = _ScriptedClient([LIGHT_B, LIGHT_A], [INITIAL])
    poller = _poller(client, lines)

    asyncio.run(poller.async_initialize())

    assert poller.state is PollerState.POLLING
    assert poller.user == User("user")
    assert poller.lights == (LIGHT_B, LIGHT_A)
    assert client.paired_with == ["test"]
    assert len(lines) == 1
    assert [item["id"] for item in json.loads(lines[0])] == ["A", "B"]
    assert sorted(parse_snapshot(lines[0]), key=lambda s: s.id) == [
        INITIAL[LIGHT_A],
        INITIAL[LIGHT_B],
    ]


def test_only_changed_attribute_is_emitted() -> None:
    lines: List[str] = []
    next_states = {
        LIGHT_A: State("A", "Lamp A", True, 0),
        LIGHT_B: State("B", "Lamp B", True, 100),
    }
    poller = _poller(_ScriptedClient([LIGHT_A, LIGHT_B], [INITIAL, next_states]), lines)

    async def _main() -> List[Event]:
        await poller.async_initialize()
        return await poller.async_poll_once()

    events = asyncio.run(_main())

    assert events == [Event("A", "on", True)]
    assert json.loads(lines[1]) == {"id": "A", "on": True}
    assert len(lines) == 2
    assert poller.current_states == next_states


def test_events_follow_light_order_then_field_order() -> None:
    lines: List[str] = []
    next_states = {
        LIGHT_A: State("A", "Lamp A", True, 0),
        LIGHT_B: State("B", "Reading", False, 20),
    }
    poller = _poller(_ScriptedClient([LIGHT_B, LIGHT_A], [INITIAL, next_states]), lines)

    async def _main() -> None:
        await poller.async_initialize()
        await poller.async_poll_once()

    asyncio.run(_main())

    assert [parse_event(line) for line in lines[1:]] == [
        Event("B", "name", "Reading"),
        Event("B", "on", False),
        Event("B", "brightness", 20),
        Event("A", "on", True),
    ]


def test_each_poll_diffs_against_previous_poll() -> None:
    lines: List[str] = []
    second = {LIGHT_A: State("A", "Lamp A", True, 0), LIGHT_B: INITIAL[LIGHT_B]}
    third = {LIGHT_A: State("A", "Lamp A", True, 50), LIGHT_B: INITIAL[LIGHT_B]}
    client = _ScriptedClient([LIGHT_A, LIGHT_B], [INITIAL, second, third, third])
    poller = _poller(client, lines)

    asyncio.run(poller.async_run(max_polls=3))

    assert [parse_event(line) for line in lines[1:]] == [
        Event("A", "on", True),
        Event("A", "brightness", 50),
    ]
    assert client.fetched_lights == [[LIGHT_A, LIGHT_B]] * 4


def test_transport_error_terminates_without_partial_output() -> None:
    lines: List[str] = []
    second = {LIGHT_A: State("A", "Lamp A", True, 0), LIGHT_B: INITIAL[LIGHT_B]}
    failure = TransportError(0, "Request error: connection refused")
    poller = _poller(_ScriptedClient([LIGHT_A, LIGHT_B], [INITIAL, second, failure]), lines)

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(poller.async_run())

    assert excinfo.value is failure
    assert poller.state is PollerState.TERMINATED
    assert len(lines) == 2
    assert json.loads(lines[1]) == {"id": "A", "on": True}
    assert poller.current_states == second


def test_missing_light_terminates_before_emitting() -> None:
    lines: List[str] = []
    # A changed, but B vanished: nothing of this poll may be emitted
    incomplete = {LIGHT_A: State("A", "Lamp A", True, 0)}
    poller = _poller(_ScriptedClient([LIGHT_A, LIGHT_B], [INITIAL, incomplete]), lines)

    with pytest.raises(MissingDeviceState) as excinfo:
        asyncio.run(poller.async_run())

    assert excinfo.value.light_id == "B"
    assert excinfo.value.snapshot == "next"
    assert poller.state is PollerState.TERMINATED
    assert len(lines) == 1
    assert poller.current_states == INITIAL


def test_pairing_denied_terminates_before_output() -> None:
    lines: List[str] = []
    client = _ScriptedClient([LIGHT_A], [], pair_error=PairingDenied("link button not pressed"))
    poller = _poller(client, lines)

    with pytest.raises(PairingDenied):
        asyncio.run(poller.async_run())

    assert poller.state is PollerState.TERMINATED
    assert lines == []


def test_poll_before_initialize_is_rejected() -> None:
    poller = _poller(_ScriptedClient([LIGHT_A], []), [])

    with pytest.raises(RuntimeError):
        asyncio.run(poller.async_poll_once())


@pytest.mark.parametrize("fail_on_line", [1, 2])
def test_output_failure_terminates(fail_on_line: int) -> None:
    written: List[str] = []

    def closed_pipe(line: str) -> None:
        if len(written) + 1 == fail_on_line:
            raise BrokenPipeError("stdout closed")
        written.append(line)

    second = {LIGHT_A: State("A", "Lamp A", True, 0), LIGHT_B: INITIAL[LIGHT_B]}
    poller = LightPoller(
        _ScriptedClient([LIGHT_A, LIGHT_B], [INITIAL, second]),
        interval=0,
        output_callback=closed_pipe,
    )

    with pytest.raises(BrokenPipeError):
        asyncio.run(poller.async_run())

    assert poller.state is PollerState.TERMINATED
    assert len(written) == fail_on_line - 1
