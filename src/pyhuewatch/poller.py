"""Polling loop that turns successive light snapshots into change events."""

from __future__ import annotations

import asyncio
from enum import Enum
import logging
import sys
from typing import Callable, List, Optional, Tuple

from .bridge import AsyncBridgeClient
from .const import DEFAULT_DEVICE_NAME, DEFAULT_POLL_INTERVAL
from .diff import diff_states
from .models import Event, Light, LightStates, User
from .output import event_to_json, snapshot_to_json

_LOGGER = logging.getLogger(__name__)


class PollerState(Enum):
    """Lifecycle of a LightPoller."""

    INITIALIZING = "initializing"
    POLLING = "polling"
    TERMINATED = "terminated"


def _print_line(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


class LightPoller:
    """Polls a bridge and emits a JSON line for every light attribute change.

    The poller pairs with the bridge, prints the full state of every light
    once, then repeatedly fetches a new snapshot set, diffs it light by light
    against the previous one and prints the resulting events. Any error is
    fatal: the poller moves to ``PollerState.TERMINATED`` and re-raises.

    Attributes:
        _client (AsyncBridgeClient): Client used for every bridge request.
        _device_name (str): Name sent to the bridge while pairing.
        _interval (float): Seconds to wait between two polls.
        _output_callback (Callable[[str], None]): Receives each JSON line.
        _lights (Tuple[Light, ...]): Lights tracked for the whole run.
        _current_states (LightStates): Snapshot set of the last poll.

    """

    def __init__(
        self,
        client: AsyncBridgeClient,
        device_name: str = DEFAULT_DEVICE_NAME,
        interval: float = DEFAULT_POLL_INTERVAL,
        output_callback: Optional[Callable[[str], None]] = None,
    ) -> None:
        """Initialize the poller.

        Args:
            client (AsyncBridgeClient): Client for the bridge to poll.
            device_name (str): Device name used while requesting a username.
            interval (float): Fixed wait between polls, in seconds.
            output_callback (Optional[Callable[[str], None]]): Called with every
                serialized snapshot set and event. Defaults to writing stdout.

        """
        self._client = client
        self._device_name = device_name
        self._interval = interval
        self._output_callback = output_callback or _print_line
        self._state = PollerState.INITIALIZING
        self._user: Optional[User] = None
        self._lights: Tuple[Light, ...] = ()
        self._current_states: LightStates = {}

    @property
    def state(self) -> PollerState:
        """Return the lifecycle state."""
        return self._state

    @property
    def user(self) -> Optional[User]:
        """Return the user obtained while pairing."""
        return self._user

    @property
    def lights(self) -> Tuple[Light, ...]:
        """Return the lights tracked by this poller."""
        return self._lights

    @property
    def current_states(self) -> LightStates:
        """Return a copy of the latest snapshot set."""
        return dict(self._current_states)

    async def async_initialize(self) -> None:
        """Pair, list the lights and emit their initial state."""
        if self._state is not PollerState.INITIALIZING:
            raise RuntimeError(f"Cannot initialize a poller in state {self._state}")
        try:
            self._user = await self._client.async_pair(self._device_name)
            self._lights = tuple(await self._client.async_list_lights(self._user))
            self._current_states = await self._client.async_fetch_states(
                self._user, self._lights
            )
            self._output_callback(snapshot_to_json(self._current_states))
        except Exception:
            self._state = PollerState.TERMINATED
            raise

        self._state = PollerState.POLLING
        _LOGGER.info(
            "Polling %d lights every %s seconds.", len(self._lights), self._interval
        )

    async def async_poll_once(self) -> List[Event]:
        """Fetch the next snapshot set, emit its events and make it current.

        A poll whose fetch or diff fails emits nothing, and the previous
        snapshot set stays current.
        """
        if self._state is not PollerState.POLLING:
            raise RuntimeError(f"Cannot poll in state {self._state}")
        try:
            next_states = await self._client.async_fetch_states(
                self._user, self._lights
            )
            events = diff_states(self._lights, self._current_states, next_states)
            for event in events:
                self._output_callback(event_to_json(event))
        except Exception:
            self._state = PollerState.TERMINATED
            raise

        self._current_states = next_states
        _LOGGER.debug("Poll produced %d events.", len(events))
        return events

    async def async_run(self, max_polls: Optional[int] = None) -> None:
        """Initialize and poll until an error occurs or ``max_polls`` is reached."""
        await self.async_initialize()
        polls = 0
        while max_polls is None or polls < max_polls:
            await self.async_poll_once()
            polls += 1
            # Naive rate limiting: the wait ignores how many requests were made
            await asyncio.sleep(self._interval)
