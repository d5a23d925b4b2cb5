"""Protocol layer: frame codec, XOR checksum, command constants and data encoders."""

from .framing import (
    ResponseFrame,
    build_frame,
    build_response_frame,
    parse_frame,
    read_frame,
    xor_checksum,
)
from .commands import Command, LedMode, Status, beep_data, beep_units, led_data
