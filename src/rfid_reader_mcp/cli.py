"""Command-line front end: print the model, read one tag, or read in a loop.

Examples::

    rfid-reader --mode info
    rfid-reader --dev /dev/ttyUSB1 --mode read
    rfid-reader --mode read-loop --silent

Defaults come from ``RFID_*`` environment variables (see
:class:`~rfid_reader_mcp.config.ReaderConfig`), flags override them.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable

from .config import ReaderConfig
from .device import RFIDDevice
from .errors import ProtocolError, RFIDError
from .feedback import Feedback

logger = logging.getLogger(__name__)

MODES = ("read", "read-loop", "info")


def build_parser(defaults: ReaderConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rfid-reader",
        description="Talk to a serial RFID reader/writer.",
    )
    parser.add_argument(
        "--dev",
        default=defaults.device,
        help="RFID reader/writer serial interface device",
    )
    parser.add_argument(
        "--mode",
        default="read",
        choices=MODES,
        help="Application mode",
    )
    parser.add_argument(
        "--baudrate",
        type=int,
        default=defaults.baudrate,
        help="Serial line speed",
    )
    parser.add_argument(
        "--silent",
        action=argparse.BooleanOptionalAction,
        default=defaults.silent,
        help="Skip beeps and LED flashes, reduces number of commands sent to the reader",
    )
    parser.add_argument(
        "--debug",
        action=argparse.BooleanOptionalAction,
        default=defaults.debug,
        help="Log every frame sent to and received from the reader",
    )
    return parser


def info_mode(device: RFIDDevice) -> int:
    print(device.info())
    return 0


def read_mode(device: RFIDDevice, feedback: Feedback) -> int:
    try:
        tag = device.wait_for_tag()
    except RFIDError as e:
        feedback.error()
        logger.error("%s", e)
        return 1
    print(tag.hex())
    feedback.ok()
    return 0


def read_loop_mode(device: RFIDDevice, feedback: Feedback) -> int:
    last_tag: bytes | None = None
    while True:
        try:
            tag = device.wait_for_tag()
        except ProtocolError as e:
            logger.error("Malformed response, stopping: %s", e)
            return 1
        except RFIDError as e:
            logger.warning("Read failed, retrying: %s", e)
            continue
        if tag == last_tag:
            continue
        print(tag.hex(), flush=True)
        feedback.ok()
        last_tag = tag


def run(
    argv: list[str] | None = None,
    device_factory: Callable[[ReaderConfig], RFIDDevice] = RFIDDevice.open,
) -> int:
    """Parse ``argv``, run the selected mode and return the exit code."""
    defaults = ReaderConfig.from_env()
    args = build_parser(defaults).parse_args(argv)
    config = ReaderConfig(
        device=args.dev,
        baudrate=args.baudrate,
        timeout=defaults.timeout,
        silent=args.silent,
        debug=args.debug,
    )

    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        device = device_factory(config)
    except RFIDError as e:
        logger.error("%s", e)
        return 1

    with device:
        feedback = Feedback(device, silent=config.silent)
        try:
            feedback.reset()
            if args.mode == "info":
                return info_mode(device)
            if args.mode == "read":
                return read_mode(device, feedback)
            return read_loop_mode(device, feedback)
        except RFIDError as e:
            logger.error("%s", e)
            return 1
        except KeyboardInterrupt:
            return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
