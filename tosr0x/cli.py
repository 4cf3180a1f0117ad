#!/usr/bin/env python3
"""Thin CLI over the `Board` driver.

Defaults come from the TOSR0X_* environment (see `config.py`); flags
override them. Returns 0 on success, 1 without a command, 2 on failure.
"""

import argparse
import logging
from contextlib import ExitStack

from . import protocol
from .board import Board
from .byte_logger import ByteDumpLogger
from .config import Settings
from .csv_logger import CSVLogger
from .transport import MockTransport, SerialTransport

logger = logging.getLogger(__name__)


def parse_index(value: str):
    """argparse type: 'all', 'none' or a relay number."""
    if value.lower() in ("all", "none"):
        return protocol.Group(value.lower())
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid relay index {value!r}") from None


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tosr0x", description="TOSRx relay board control")
    parser.add_argument("--port", default=settings.port, help="serial device path")
    parser.add_argument("--relays", type=int, default=settings.relay_count, help="relay count")
    parser.add_argument("--timeout", type=float, default=settings.timeout, help="reply timeout (s)")
    parser.add_argument("--mock", action="store_true", default=settings.mock, help="use a mock board")
    parser.add_argument("--csv", metavar="PATH", help="log every exchange to a CSV file")
    parser.add_argument("--dump", metavar="BASE", help="dump raw serial I/O to BASE.dump[.txt]")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("version", help="read firmware version")

    p = sub.add_parser("state", help="show relay states")
    p.add_argument("index", nargs="?", type=parse_index, default=protocol.ALL)

    for name in ("enable", "disable", "toggle"):
        p = sub.add_parser(name, help=f"{name} a relay (number, all or none)")
        p.add_argument("index", type=parse_index)

    return parser


def run(board: Board, args) -> None:
    if args.cmd == "version":
        print(board.version().hex())
        return

    if args.cmd == "state":
        state = board.state(args.index)
        if isinstance(state, list):
            for number, value in enumerate(state, start=1):
                print(f"{number}: {'on' if value else 'off'}")
        else:
            print("on" if state else "off")
        return

    getattr(board, args.cmd)(args.index)
    logger.info("%s %s done", args.cmd, getattr(args.index, "value", args.index))


def main(argv=None):
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"error: {e}")
        return 2

    parser = build_parser(settings)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if not args.cmd:
        parser.print_help()
        return 1

    with ExitStack() as stack:
        csv_logger = stack.enter_context(CSVLogger(args.csv)) if args.csv else None
        byte_logger = stack.enter_context(ByteDumpLogger(args.dump)) if args.dump else None
        try:
            if args.mock:
                transport = MockTransport(size=args.relays)
            else:
                transport = SerialTransport(args.port, timeout=args.timeout)
            stack.callback(transport.close)

            board = Board(
                transport,
                args.relays,
                timeout=args.timeout,
                csv_logger=csv_logger,
                byte_logger=byte_logger,
            )
            run(board, args)
        except (protocol.TOSRError, ConnectionError) as e:
            logger.error("%s failed: %s", args.cmd, e)
            return 2

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
