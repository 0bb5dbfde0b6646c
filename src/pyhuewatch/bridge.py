"""Async client for the Hue bridge REST API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

import aiohttp

from .const import (
    DEFAULT_REQUEST_TIMEOUT,
    DEVICE_TYPE_PREFIX,
    ERROR_LINK_BUTTON_NOT_PRESSED,
    LIGHT_ENDPOINT,
    LIGHTS_ENDPOINT,
    PAIR_ENDPOINT,
)
from .exceptions import PairingDenied, ProtocolError, TransportError
from .models import Bridge, Light, LightStates, State, User

_LOGGER = logging.getLogger(__name__)


def _bridge_error(data: Any) -> Optional[Dict[str, Any]]:
    """Return the error object of a ``[{"error": {...}}]`` style body, if any."""
    if isinstance(data, list) and data and isinstance(data[0], dict):
        error = data[0].get("error")
        if isinstance(error, dict):
            return error
    return None


class AsyncBridgeClient:
    """Fetches users, lights and light states from a Hue bridge using aiohttp.

    Every call is a single HTTP round trip. Failures are never retried: an
    unreachable bridge or a non-2xx answer raises ``TransportError``, a body
    that cannot be understood raises ``ProtocolError``.
    """

    def __init__(
        self,
        bridge: Bridge,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """Initialize the bridge client."""
        self.bridge = bridge
        self._timeout = timeout
        # Use provided session or create a new one
        self._session = session
        self._managed_session = session is None

    async def __aenter__(self) -> AsyncBridgeClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close_session()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            _LOGGER.debug("Opening HTTP session to bridge %s.", self.bridge.base_url)
            self._session = aiohttp.ClientSession()
            self._managed_session = True
        return self._session

    async def close_session(self) -> None:
        """Close the aiohttp session if it's managed by this instance."""
        if self._session and not self._session.closed and self._managed_session:
            await self._session.close()
            self._session = None
            _LOGGER.debug("Closed HTTP session to bridge %s.", self.bridge.base_url)
        elif self._session and not self._managed_session:
            _LOGGER.debug("Leaving caller-owned HTTP session open.")

    async def _async_request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform one request and return the decoded JSON body."""
        url = self.bridge.base_url + endpoint
        session = await self._get_session()

        _LOGGER.debug("Making %s request to %s", method, url)
        try:
            async with session.request(
                method,
                url,
                json=json_data,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as response:
                _LOGGER.debug("Response status code: %s", response.status)
                raw_body = await response.read()
                if not 200 <= response.status < 300:
                    error_text = raw_body.decode("utf-8", errors="replace")
                    _LOGGER.error(
                        "Bridge Error Response (%s): %s", response.status, error_text
                    )
                    raise TransportError(
                        response.status, error_text or response.reason or ""
                    )
        except asyncio.TimeoutError as timeout_err:
            _LOGGER.error("Request timed out: %s %s", method, url)
            raise TransportError(408, "Request timed out") from timeout_err
        except aiohttp.ClientError as req_err:
            _LOGGER.error("Request error during bridge request: %s", req_err)
            raise TransportError(0, f"Request error: {req_err}") from req_err

        _LOGGER.debug("Response body: %r", raw_body)
        try:
            return json.loads(raw_body.decode("utf-8"))
        except ValueError as err:
            err_msg = f"Failed to parse JSON from {method} {endpoint}"
            raise ProtocolError(err_msg) from err

    async def async_pair(self, device_name: str) -> User:
        """Request a new username for ``device_name``.

        The bridge only hands out a username shortly after its link button
        was pressed, otherwise ``PairingDenied`` is raised.
        """
        payload = {"devicetype": f"{DEVICE_TYPE_PREFIX}#{device_name}"}
        data = await self._async_request("POST", PAIR_ENDPOINT, json_data=payload)

        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise ProtocolError(f"Unexpected pairing response: {data!r}")
        error = _bridge_error(data)
        if error is not None:
            error_type = error.get("type")
            description = error.get("description", "link button not pressed")
            if error_type in (None, ERROR_LINK_BUTTON_NOT_PRESSED):
                raise PairingDenied(description)
            raise ProtocolError(f"Pairing failed (type {error_type}): {description}")

        success = data[0].get("success")
        if not isinstance(success, dict) or not isinstance(
            success.get("username"), str
        ):
            raise ProtocolError("No error, but no success either")

        _LOGGER.info("Paired with %s as device %r.", self.bridge.hostname, device_name)
        return User(success["username"])

    async def async_list_lights(self, user: User) -> List[Light]:
        """Return the lights known to the bridge, in the bridge's order."""
        data = await self._async_request(
            "GET", LIGHTS_ENDPOINT.format(username=user.username)
        )
        error = _bridge_error(data)
        if error is not None:
            raise ProtocolError(f"Failed to get lights: {error.get('description')}")
        if not isinstance(data, dict):
            raise ProtocolError(f"Unexpected lights response: {data!r}")

        lights = []
        for light_id, light_data in data.items():
            if not isinstance(light_data, dict) or not isinstance(
                light_data.get("name"), str
            ):
                raise ProtocolError(f"Light {light_id!r} has no name")
            lights.append(Light(id=str(light_id), name=light_data["name"]))

        _LOGGER.info("Found %d lights.", len(lights))
        return lights

    async def async_fetch_state(self, user: User, light: Light) -> State:
        """Return the current state of one light."""
        data = await self._async_request(
            "GET",
            LIGHT_ENDPOINT.format(username=user.username, light_id=light.id),
        )
        error = _bridge_error(data)
        if error is not None:
            raise ProtocolError(
                f"Failed to get light state for {light.id!r}: "
                f"{error.get('description')}"
            )
        return State.from_api(light, data)

    async def async_fetch_states(
        self, user: User, lights: Iterable[Light]
    ) -> LightStates:
        """Return a snapshot set with one fetched state per light.

        The protocol has no batch endpoint, so lights are fetched one by one.
        """
        states: LightStates = {}
        for light in lights:
            states[light] = await self.async_fetch_state(user, light)
        return states
