"""Command, status and LED constants plus request data encoders.

Commands are 16-bit codes sent big-endian after the length field; the
device echoes the code back in its response.
"""

from __future__ import annotations

import math
from datetime import timedelta
from enum import IntEnum
from typing import Union

Duration = Union[float, int, timedelta]


class Command(IntEnum):
    """Command codes understood by the reader."""

    INFO = 0x0102
    BEEP = 0x0103
    LED = 0x0104
    READ = 0x010C
    WRITE2 = 0x020C
    WRITE3 = 0x030C


class Status(IntEnum):
    """Named response status bytes. Anything else is unexpected."""

    OK = 0x00
    NO_TAG = 0x01


class LedMode(IntEnum):
    """LED states accepted by the LED command."""

    OFF = 0x00
    RED = 0x01
    GREEN = 0x02


# Buzzer time quantum is 1/255 s; beep durations go on the wire as a count of these.
BEEP_UNITS_PER_SECOND = 255
MAX_BEEP_UNITS = 255


def beep_units(duration: Duration) -> int:
    """Convert a beep duration to device beep units.

    Rounds to the nearest unit. Zero stays zero, which the device treats
    as "beep forever"; any other duration yields at least one unit and at
    most ``MAX_BEEP_UNITS``.

    Args:
        duration: Seconds as a number, or a ``timedelta``.
    """
    if isinstance(duration, timedelta):
        seconds = duration.total_seconds()
    else:
        seconds = float(duration)

    if not math.isfinite(seconds):
        raise ValueError(f"Beep duration must be finite, got {seconds}")
    if seconds == 0:
        return 0
    units = max(0, math.floor(seconds * BEEP_UNITS_PER_SECOND + 0.5))
    if units == 0:
        # 0 would beep forever
        units = 1
    return min(units, MAX_BEEP_UNITS)


def beep_data(duration: Duration) -> bytes:
    """Data byte for a Beep request."""
    return bytes([beep_units(duration)])


def led_data(mode: LedMode | int) -> bytes:
    """Data byte for an LED request.

    Raises:
        ValueError: ``mode`` is not one of ``LedMode``.
    """
    try:
        mode = LedMode(mode)
    except ValueError:
        raise ValueError(
            f"LED mode must be one of {[m.value for m in LedMode]}, got {mode}"
        ) from None
    return bytes([mode])
