#!/usr/bin/env python3
"""
minerscan CLI
=============

Command-line front end for the discovery and command layer.

Usage:
    minerscan scan [SUBNET] [--start 1] [--end 254]   # Find miners
    minerscan subnet                                  # Show local subnet
    minerscan status <ip>                             # Full status JSON
    minerscan restart <ip>                            # Restart a miner
    minerscan settings <ip> --frequency 525 --core-voltage 1150
"""
import argparse
import asyncio
import json
import sys
from typing import List, Optional

from pydantic import ValidationError

from app.config import get_settings
from app.logging_config import configure_logging
from app.models.miner import SettingsUpdate
from app.services.errors import MinerAPIError
from app.services.miner_client import get_miner_client
from app.services.miner_discovery import get_local_subnet, get_subnet_scanner


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


async def cmd_scan(args: argparse.Namespace) -> None:
    settings = get_settings()
    subnet = args.subnet or settings.default_subnet or get_local_subnet()
    start = settings.scan_start if args.start is None else args.start
    end = settings.scan_end if args.end is None else args.end

    print(f"Scanning {subnet}.{start}-{end} ...", file=sys.stderr)
    miners = await get_subnet_scanner(settings).scan(subnet, start, end)
    _print_json([miner.model_dump(by_alias=True) for miner in miners])


async def cmd_subnet(args: argparse.Namespace) -> None:
    print(get_local_subnet())


async def cmd_status(args: argparse.Namespace) -> None:
    _print_json(await get_miner_client().fetch_status(args.ip))


async def cmd_restart(args: argparse.Namespace) -> None:
    _print_json(await get_miner_client().restart(args.ip))


async def cmd_settings(args: argparse.Namespace) -> None:
    update = SettingsUpdate(frequency=args.frequency, coreVoltage=args.core_voltage)
    _print_json(await get_miner_client().update_settings(args.ip, update))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minerscan",
        description="Discover and control AxeOS miners on the local network",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Scan a subnet range for miners")
    scan.add_argument("subnet", nargs="?", help="Three-octet prefix, e.g. 192.168.1")
    scan.add_argument("--start", type=int, help="First last-octet value")
    scan.add_argument("--end", type=int, help="Last last-octet value")
    scan.set_defaults(func=cmd_scan)

    subnet = subparsers.add_parser("subnet", help="Show the detected local subnet")
    subnet.set_defaults(func=cmd_subnet)

    status = subparsers.add_parser("status", help="Fetch full miner status")
    status.add_argument("ip")
    status.set_defaults(func=cmd_status)

    restart = subparsers.add_parser("restart", help="Restart a miner")
    restart.add_argument("ip")
    restart.set_defaults(func=cmd_restart)

    settings = subparsers.add_parser("settings", help="Set frequency and core voltage")
    settings.add_argument("ip")
    settings.add_argument("--frequency", type=int, required=True, help="Frequency in MHz")
    settings.add_argument("--core-voltage", type=int, required=True, help="Core voltage in mV")
    settings.set_defaults(func=cmd_settings)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)
    try:
        asyncio.run(args.func(args))
    except (MinerAPIError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
