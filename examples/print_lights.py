#!/usr/bin/env python3

"""Example script: pair with a bridge, print its lights and watch a few polls."""

import asyncio
import logging
import sys

from pyhuewatch import (
    AsyncBridgeClient,
    Bridge,
    LightPoller,
    PairingDenied,
    PyHueWatchException,
    TransportError,
)

# --- Configuration ---
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)

HOST = sys.argv[1] if len(sys.argv) > 1 else "localhost"
PORT = int(sys.argv[2]) if len(sys.argv) > 2 else 8080
POLLS = 5


async def main() -> int:
    """Run a short watch session against the bridge."""
    logging.info("Connecting to bridge at %s:%d...", HOST, PORT)
    async with AsyncBridgeClient(Bridge(HOST, PORT)) as client:
        poller = LightPoller(client, device_name="example script")
        try:
            await poller.async_run(max_polls=POLLS)
        except PairingDenied:
            logging.error("Press the link button on the bridge and try again.")
            return 1
        except TransportError as e:
            logging.error(
                "Bridge unreachable: Status=%s, Message=%s",
                e.status_code,
                e.error_message,
            )
            return 1
        except PyHueWatchException:
            logging.exception("Watching lights failed")
            return 1

        for light in poller.lights:
            state = poller.current_states[light]
            logging.info(
                "  - %s (%s): on=%s brightness=%d%%",
                light.name,
                light.id,
                state.on,
                state.brightness,
            )
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
