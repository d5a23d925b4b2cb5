"""Serial connection to the RFID reader/writer.

The reader enumerates as a USB-serial adapter (``/dev/ttyUSB0`` on Linux)
and talks 8N1 at 38400 baud with no flow control.
"""

from __future__ import annotations

import logging

import serial

from ..errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_DEVICE = "/dev/ttyUSB0"
DEFAULT_BAUDRATE = 38400


class SerialConnection:
    """Manages the serial port shared by one device session.

    Usage::

        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
        conn.write(frame_bytes)
        header = conn.read(4)
        conn.close()

    ``timeout`` is handed to pyserial: ``None`` blocks until the requested
    bytes arrive, a number makes ``read`` return short after that many
    seconds.
    """

    def __init__(
        self,
        device: str = DEFAULT_DEVICE,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float | None = None,
        serial_cls: type | None = None,
    ) -> None:
        self._device = device
        self._baudrate = baudrate
        self._timeout = timeout
        self._serial_cls = serial_cls or serial.Serial
        self._port = None

    @property
    def device(self) -> str:
        return self._device

    @property
    def connected(self) -> bool:
        return self._port is not None and self._port.is_open

    def open(self) -> None:
        """Open the serial port.

        Raises:
            TransportError: If the port cannot be opened.
        """
        if self.connected:
            return
        try:
            self._port = self._serial_cls(
                port=self._device,
                baudrate=self._baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self._timeout,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
            )
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"error opening serial port {self._device}: {e}") from e
        logger.info("Connected to %s @ %d baud", self._device, self._baudrate)

    def close(self) -> None:
        """Close the serial port."""
        if self._port is None:
            return
        try:
            self._port.close()
        except (serial.SerialException, OSError) as e:
            logger.warning("Error closing %s: %s", self._device, e)
        finally:
            self._port = None
            logger.info("Disconnected from %s", self._device)

    def write(self, data: bytes) -> int:
        """Write raw bytes to the port.

        Returns:
            Number of bytes written.

        Raises:
            TransportError: If the port is closed or the write fails.
        """
        if not self.connected:
            raise TransportError("serial port is not open", phase="send")
        try:
            written = self._port.write(data)
            self._port.flush()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"error sending command: {e}", phase="send") from e
        if written is not None and written != len(data):
            raise TransportError(
                f"short write: {written} of {len(data)} bytes", phase="send"
            )
        return len(data)

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes; fewer only when the read timed out.

        Raises:
            TransportError: If the port is closed or the read fails.
        """
        if not self.connected:
            raise TransportError("serial port is not open", phase="receive")
        try:
            return self._port.read(size)
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"error reading response: {e}", phase="receive") from e

    def __enter__(self) -> SerialConnection:
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
