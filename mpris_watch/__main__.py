"""Run mpris-watch from the command line."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from mpris_watch.constants import APP_NAME, CONF_LOG_LEVEL, MPRIS_WATCH_LOGGER_NAME
from mpris_watch.errors import InvalidConfigError, TransportUnavailable
from mpris_watch.helpers.output import SnapshotPrinter
from mpris_watch.watch import MprisWatch

LOGGER = logging.getLogger(MPRIS_WATCH_LOGGER_NAME)

FORMAT_DATE = "%Y-%m-%d"
FORMAT_TIME = "%H:%M:%S"
FORMAT_DATETIME = f"{FORMAT_DATE} {FORMAT_TIME}"
LOG_FORMAT = "%(asctime)s %(levelname)s (%(name)s) %(message)s"

EXIT_OK = 0
EXIT_TRANSPORT_ERROR = 1
EXIT_CONFIG_ERROR = 2


def get_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Arguments handling."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME, description="Report the state of all MPRIS media players."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the (JSON) settings file",
    )
    parser.add_argument(
        "--log-level",
        type=str.lower,
        default=None,
        choices=["critical", "error", "warning", "info", "debug", "verbose"],
        help="Log level, overrides the log_level setting",
    )
    return parser.parse_args(argv)


def setup_logger(level: str) -> logging.Logger:
    """Initialize logging (to stderr, stdout is reserved for the player lines)."""
    logging.basicConfig(
        format=LOG_FORMAT, datefmt=FORMAT_DATETIME, level=level.upper(), stream=sys.stderr
    )
    logging.getLogger().setLevel(level.upper())
    return LOGGER


async def start_watch(args: argparse.Namespace) -> int:
    """Run the watch until it is terminated and return the exit code."""
    watch = MprisWatch(args.config)
    watch.subscribe(SnapshotPrinter())
    try:
        await watch.start()
    except InvalidConfigError as err:
        LOGGER.error("%s", err)
        return EXIT_CONFIG_ERROR
    except TransportUnavailable as err:
        LOGGER.error("%s", err)
        return EXIT_TRANSPORT_ERROR
    setup_logger(args.log_level or watch.config.get(CONF_LOG_LEVEL))

    run_task = asyncio.create_task(watch.run())
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, run_task.cancel)
    try:
        await run_task
    except asyncio.CancelledError:
        LOGGER.debug("Terminated, shutting down")
        return EXIT_OK
    except TransportUnavailable as err:
        LOGGER.error("%s", err)
        return EXIT_TRANSPORT_ERROR
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        await watch.stop()
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Start mpris-watch."""
    args = get_arguments(argv)
    setup_logger(args.log_level or "info")
    return asyncio.run(start_watch(args))


if __name__ == "__main__":
    sys.exit(main())
