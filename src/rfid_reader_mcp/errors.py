"""Exception types raised by the reader library.

Every failure carries the exchange ``phase`` it came from, one of ``"encode"``,
``"send"``, ``"receive"`` or ``"decode"`` (``None`` when raised outside an
exchange, e.g. while opening the port).
"""

from __future__ import annotations


class RFIDError(Exception):
    """Base class for reader errors."""

    def __init__(self, message: str, phase: str | None = None) -> None:
        super().__init__(message)
        self.phase = phase

    def __str__(self) -> str:
        message = super().__str__()
        if self.phase:
            return f"rfid: {self.phase}: {message}"
        return f"rfid: {message}"


class TransportError(RFIDError):
    """The serial stream failed to open, write or deliver enough bytes."""


class EncodeError(RFIDError, ValueError):
    """A request cannot be encoded: command or data out of range."""


class ProtocolError(RFIDError):
    """A response frame is malformed."""


class FramingError(ProtocolError):
    """Short header, wrong prefix or implausible length field."""


class IntegrityError(ProtocolError):
    """The checksum byte does not match the frame contents."""

    def __init__(self, expected: int, actual: int, phase: str | None = "decode") -> None:
        super().__init__(
            f"checksum mismatch: expected 0x{expected:02X}, got 0x{actual:02X}",
            phase,
        )
        self.expected = expected
        self.actual = actual


class UnexpectedStatusError(RFIDError):
    """A well-formed response carried a status the operation cannot accept."""

    def __init__(self, status: int, answer: bytes = b"") -> None:
        message = f"received unexpected status {status}"
        if answer:
            message += f", answer {answer.hex(' ')}"
        super().__init__(message)
        self.status = status
        self.answer = answer


__all__ = [
    "RFIDError",
    "TransportError",
    "EncodeError",
    "ProtocolError",
    "FramingError",
    "IntegrityError",
    "UnexpectedStatusError",
]
