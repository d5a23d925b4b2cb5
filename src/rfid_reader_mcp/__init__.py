"""Driver for serial RFID reader/writers speaking the 0xAADD framed protocol."""

from .config import ReaderConfig
from .device import RFIDDevice
from .errors import (
    EncodeError,
    FramingError,
    IntegrityError,
    ProtocolError,
    RFIDError,
    TransportError,
    UnexpectedStatusError,
)
from .protocol.commands import Command, LedMode, Status

__version__ = "0.1.0"
