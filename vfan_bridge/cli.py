"""Command-line interface for vfan-bridge."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .app import VFanBridgeApp
from .config import load_config
from .locator import EndpointLocator

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vfan-bridge",
        description="Bridge a serial-attached fan controller to a hwmon virtual fan",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("start", help="Start the bridge service")
    subparsers.add_parser(
        "locate", help="Look for the serial device and hwmon directory once and exit"
    )
    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)

    if args.command == "start":
        VFanBridgeApp.start(config)
        return 0

    if args.command == "locate":
        locator = EndpointLocator.from_config(config)
        device_path = locator.find_serial_device()
        hwmon_directory = locator.find_hwmon_directory()
        print(f"serial device: {device_path or 'not found'}")
        print(f"hwmon directory: {hwmon_directory or 'not found'}")
        return 0 if device_path and hwmon_directory else 1

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                print(f"{key} = {value}")
            print()
        return 0

    LOGGER.error("Unknown command: %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
