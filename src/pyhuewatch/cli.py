"""Command line entry point: print light states and stream their changes."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from .bridge import AsyncBridgeClient
from .const import (
    DEFAULT_DEVICE_NAME,
    DEFAULT_HOST,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PORT,
)
from .exceptions import PyHueWatchException
from .models import Bridge
from .poller import LightPoller

_LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser of the ``pyhuewatch`` command."""
    parser = argparse.ArgumentParser(
        prog="pyhuewatch",
        description=(
            "Print json represented state of all lights and stream json "
            "updates of state."
        ),
    )
    parser.add_argument("host", nargs="?", default=DEFAULT_HOST)
    parser.add_argument("port", nargs="?", type=int, default=DEFAULT_PORT)
    parser.add_argument(
        "-d",
        "--device",
        default=DEFAULT_DEVICE_NAME,
        help="the device name to use while requesting a username",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help="seconds to wait between two polls",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable debug logging"
    )
    return parser


async def _async_watch(args: argparse.Namespace) -> None:
    async with AsyncBridgeClient(Bridge(args.host, args.port)) as client:
        poller = LightPoller(client, device_name=args.device, interval=args.interval)
        await poller.async_run()


def main(argv: Optional[List[str]] = None) -> int:
    """Run the watcher and return the process exit code."""
    # argparse exits with 0 on --help, before anything touches the network
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as exit_err:
        # Malformed arguments are fatal like any other error
        if exit_err.code:
            return 1
        raise

    # Logs go to stderr, stdout only carries json lines
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    try:
        asyncio.run(_async_watch(args))
    except KeyboardInterrupt:
        _LOGGER.info("Interrupted, exiting.")
        return 130
    except PyHueWatchException as err:
        _LOGGER.error("%s: %s", type(err).__name__, err)
        return 1
    except Exception:
        _LOGGER.exception("unknown error")
        return 1
    return 0
