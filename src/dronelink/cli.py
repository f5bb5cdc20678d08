"""``dronelink`` command-line entry point.

Two modes share one connection setup:

- ``dronelink repl``: type commands, see telemetry;
- ``dronelink gamepad``: drive from a joystick through ``PygameGamepad``.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from dronelink.config import DroneLinkConfig, load_config
from dronelink.connection import log_error, open_connection
from dronelink.core.system import ActorSystem
from dronelink.driver import ControlMapping, driver
from dronelink.errors import Direction
from dronelink.logconfig import configure_logging

log = logging.getLogger("dronelink.cli")

PROMPT = "> "
QUIT = "quit"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dronelink", description="UDP command link for Tello-style drones")
    parser.add_argument("--config", type=Path, default=None, help="path to dronelink.toml")
    parser.add_argument("--local-port", type=int, default=None)
    parser.add_argument("--remote-host", default=None)
    parser.add_argument("--remote-port", type=int, default=None)
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--log-file", default=None)

    modes = parser.add_subparsers(dest="mode", required=True)
    modes.add_parser("repl", help="send typed commands, print telemetry")
    modes.add_parser("gamepad", help="send commands from a connected joystick")
    return parser


def apply_overrides(config: DroneLinkConfig, args: argparse.Namespace) -> DroneLinkConfig:
    """Return *config* with every CLI flag that was given applied on top."""
    link: dict[str, Any] = {}
    if args.local_port is not None:
        link["local_port"] = args.local_port
    if args.remote_host is not None:
        link["remote_host"] = args.remote_host
    if args.remote_port is not None:
        link["remote_port"] = args.remote_port

    logging_: dict[str, Any] = {}
    if args.log_level is not None:
        logging_["level"] = args.log_level
    if args.log_file is not None:
        logging_["file"] = args.log_file

    return replace(
        config,
        link=replace(config.link, **link),
        logging=replace(config.logging, **logging_),
    )


async def run_repl(config: DroneLinkConfig) -> None:
    def show_telemetry(text: str) -> None:
        print(f"\r{text}\n{PROMPT}", end="", flush=True)

    def show_error(direction: Direction, message: str) -> None:
        log_error(direction, message)
        print(PROMPT, end="", flush=True)

    loop = asyncio.get_running_loop()
    async with ActorSystem("dronelink") as system:
        connection = await open_connection(
            system, config.link, on_message=show_telemetry, on_error=show_error
        )
        while True:
            try:
                line = await loop.run_in_executor(None, input, PROMPT)
            except EOFError:
                break
            command = line.strip()
            if command == QUIT:
                break
            if command:
                log.debug("command: %s", command)
                connection.send(command)


async def run_gamepad(config: DroneLinkConfig) -> None:
    from dronelink.gamepad import PygameGamepad

    async with ActorSystem("dronelink") as system:
        connection = await open_connection(system, config.link)
        system.spawn(
            driver(
                PygameGamepad(),
                connection,
                mapping=ControlMapping.from_config(config.driver),
                interval=config.driver.interval,
            ),
            "driver",
        )
        await asyncio.Event().wait()


def _run(main: Any) -> None:
    if sys.platform == "win32":
        asyncio.run(main)
    else:
        import uvloop

        uvloop.run(main)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = apply_overrides(load_config(args.config), args)
    configure_logging(config.logging)

    mode = run_repl if args.mode == "repl" else run_gamepad
    try:
        _run(mode(config))
    except KeyboardInterrupt:
        log.info("interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
