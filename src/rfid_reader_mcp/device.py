"""Synchronous session with an RFID reader/writer.

Every operation is one blocking request/response exchange routed through
:meth:`RFIDDevice.raw_command`. There is no locking: a session must not be
used from two threads at once, the protocol has no request identifiers.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .config import ReaderConfig
from .errors import EncodeError, TransportError, UnexpectedStatusError
from .protocol.commands import Command, Duration, LedMode, Status, beep_data, led_data
from .protocol.framing import build_frame, read_frame
from .transport.serial_connection import SerialConnection

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def write(self, data: bytes) -> int: ...

    def read(self, size: int) -> bytes: ...

    def close(self) -> None: ...


class RFIDDevice:
    """An open connection to the reader.

    Usage::

        with RFIDDevice.open(ReaderConfig(device="/dev/ttyUSB0")) as dev:
            print(dev.info())
            tag = dev.wait_for_tag()
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._closed = False

    @classmethod
    def open(cls, config: ReaderConfig | None = None) -> RFIDDevice:
        """Open the serial port described by ``config`` and wrap it."""
        config = config or ReaderConfig()
        conn = SerialConnection(config.device, config.baudrate, config.timeout)
        conn.open()
        return cls(conn)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._transport.close()

    def __enter__(self) -> RFIDDevice:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def raw_command(self, command: Command | int, data: bytes = b"") -> tuple[int, bytes]:
        """Send one command and return the response ``(status, answer)``.

        Lower-level escape hatch used by all other operations; also the only
        way to issue ``Command.WRITE2``/``Command.WRITE3``.

        Raises:
            EncodeError: The command is not a 16-bit code or the data is too
                long for one frame.
            TransportError: The write or read on the port failed.
            FramingError: The response header was malformed.
            IntegrityError: The response checksum did not match.
        """
        if self._closed:
            raise TransportError("device is closed", phase="send")

        try:
            request = build_frame(int(command), data)
        except ValueError as e:
            raise EncodeError(str(e), phase="encode") from e
        logger.debug("TX: %s", request.hex(" "))
        try:
            self._transport.write(request)
        except OSError as e:
            raise TransportError(f"error sending command: {e}", phase="send") from e

        try:
            response = read_frame(self._transport)
        except OSError as e:
            raise TransportError(f"error reading response: {e}", phase="receive") from e
        logger.debug("RX: %r", response)
        return response.status, response.answer

    def _expect_ok(self, command: Command, data: bytes = b"") -> bytes:
        status, answer = self.raw_command(command, data)
        if status != Status.OK:
            raise UnexpectedStatusError(status, answer)
        return answer

    def info(self) -> str:
        """Return the device model string."""
        answer = self._expect_ok(Command.INFO)
        return answer.decode("ascii", errors="replace")

    def beep(self, duration: Duration) -> None:
        """Beep for ``duration`` (seconds or ``timedelta``).

        Blocks until the device answers, which is after the beep ends. A zero
        duration beeps forever, so this call never returns in that case.
        """
        self._expect_ok(Command.BEEP, beep_data(duration))

    def change_led(self, mode: LedMode | int) -> None:
        """Switch the LED off, red or green."""
        self._expect_ok(Command.LED, led_data(mode))

    def read_tag(self) -> bytes | None:
        """Ask the reader for the tag in its field.

        Returns:
            The tag identifier bytes (possibly empty), or ``None`` when no tag
            is in the field.

        Raises:
            UnexpectedStatusError: Any status other than OK / no tag.
        """
        status, answer = self.raw_command(Command.READ)
        if status == Status.OK:
            return answer
        if status == Status.NO_TAG:
            return None
        raise UnexpectedStatusError(status, answer)

    def wait_for_tag(self) -> bytes:
        """Poll :meth:`read_tag` until a tag shows up.

        Unbounded and without backoff; tag presentation paces the loop.
        """
        while True:
            tag = self.read_tag()
            if tag is not None:
                return tag
