"""Message frame builder and parser for the reader's serial protocol.

Frame layout::

    +---------+---------+---------+-------------------------+----------+
    | Prefix  | Length  | Command |          Body           | Checksum |
    | 2 bytes | 2 bytes | 2 bytes |     variable length     |  1 byte  |
    +---------+---------+---------+-------------------------+----------+

- Prefix: 0xAA 0xDD in both directions
- Length: big-endian count of every byte after the length field
  (command + body + checksum)
- Body: request data, or ``status(1) + answer`` in a response
- Checksum: XOR of command + body
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Protocol

from ..errors import FramingError, IntegrityError, TransportError

PREFIX = b"\xAA\xDD"
HEADER_SIZE = 4  # prefix(2) + length(2)
COMMAND_SIZE = 2
CHECKSUM_SIZE = 1
MAX_LENGTH = 0xFFFF
MAX_COMMAND = 0xFFFF
# command(2) + status(1) + checksum(1)
MIN_RESPONSE_LENGTH = COMMAND_SIZE + 1 + CHECKSUM_SIZE


class ByteStream(Protocol):
    def read(self, size: int) -> bytes: ...


@dataclass
class ResponseFrame:
    """A parsed response frame."""

    command: int
    status: int
    answer: bytes
    checksum: int

    def __repr__(self) -> str:
        return (
            f"ResponseFrame(command=0x{self.command:04X}, "
            f"status=0x{self.status:02X}, "
            f"answer={self.answer.hex(' ') if self.answer else '(empty)'})"
        )


def xor_checksum(data: bytes) -> int:
    """Return the XOR of every byte in ``data``."""
    checksum = 0
    for byte in data:
        checksum ^= byte
    return checksum


def _encode(body: bytes) -> bytes:
    if len(body) + CHECKSUM_SIZE > MAX_LENGTH:
        raise ValueError(
            f"Frame body of {len(body)} bytes does not fit the length field"
        )
    length = (len(body) + CHECKSUM_SIZE).to_bytes(2, "big")
    return PREFIX + length + body + bytes([xor_checksum(body)])


def build_frame(command: int, data: bytes = b"") -> bytes:
    """Build a request frame.

    Args:
        command: 16-bit command code.
        data: Command-specific data bytes.

    Returns:
        The complete frame ready to be written to the port.

    Raises:
        ValueError: The command is not a 16-bit code or the data does not
            fit the length field.
    """
    if not 0 <= command <= MAX_COMMAND:
        raise ValueError(f"Command {command} is not a 16-bit code")
    return _encode(command.to_bytes(COMMAND_SIZE, "big") + bytes(data))


def build_response_frame(command: int, status: int, answer: bytes = b"") -> bytes:
    """Build a frame shaped like a device response.

    The device is the only producer of these on the wire; this exists so
    fakes and tests can speak the same encoding.
    """
    return _encode(
        command.to_bytes(COMMAND_SIZE, "big") + bytes([status]) + bytes(answer)
    )


def _read_exactly(stream: ByteStream, size: int) -> bytes:
    """Read up to ``size`` bytes, stopping early only when the stream runs dry."""
    buf = b""
    while len(buf) < size:
        chunk = stream.read(size - len(buf))
        if not chunk:
            break
        buf += chunk
    return buf


def read_frame(stream: ByteStream) -> ResponseFrame:
    """Read and validate one response frame from ``stream``.

    Args:
        stream: Any object with a blocking ``read(n)``, such as a
            ``serial.Serial`` or ``io.BytesIO``.

    Raises:
        FramingError: Header shorter than 4 bytes, wrong prefix or a length
            field too small to hold command, status and checksum.
        TransportError: The stream ended before the declared length arrived.
        IntegrityError: The checksum byte does not match.
    """
    header = _read_exactly(stream, HEADER_SIZE)
    if len(header) < HEADER_SIZE:
        raise FramingError(
            f"short header: got {len(header)} of {HEADER_SIZE} bytes",
            phase="receive",
        )

    prefix, length_field = header[:2], header[2:]
    if prefix != PREFIX:
        raise FramingError(f"bad prefix {prefix.hex(' ')}", phase="decode")

    length = int.from_bytes(length_field, "big")
    if length < MIN_RESPONSE_LENGTH:
        raise FramingError(f"invalid length value {length}", phase="decode")

    rest = _read_exactly(stream, length)
    if len(rest) < length:
        raise TransportError(
            f"payload read error: got {len(rest)} of {length} bytes",
            phase="receive",
        )

    body, checksum = rest[:-CHECKSUM_SIZE], rest[-1]
    expected = xor_checksum(body)
    if checksum != expected:
        raise IntegrityError(expected=expected, actual=checksum)

    return ResponseFrame(
        command=int.from_bytes(body[:COMMAND_SIZE], "big"),
        status=body[COMMAND_SIZE],
        answer=body[COMMAND_SIZE + 1 :],
        checksum=checksum,
    )


def parse_frame(data: bytes) -> ResponseFrame:
    """Parse a complete response frame held in memory.

    Same checks as :func:`read_frame`, plus bytes left over after the
    declared length are rejected.
    """
    stream = io.BytesIO(data)
    frame = read_frame(stream)
    leftover = len(data) - stream.tell()
    if leftover:
        raise FramingError(f"{leftover} trailing bytes after frame", phase="decode")
    return frame
