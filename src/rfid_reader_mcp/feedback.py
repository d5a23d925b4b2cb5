"""LED and buzzer signalling for user-facing read results."""

from __future__ import annotations

import logging

from .device import RFIDDevice
from .errors import RFIDError
from .protocol.commands import LedMode

logger = logging.getLogger(__name__)

OK_BEEP_SECONDS = 0.05
ERROR_BEEP_SECONDS = 0.2


class Feedback:
    """Signals read outcomes on the reader itself.

    With ``silent`` set no command is sent, which also keeps the port free
    for tag reads.
    """

    def __init__(self, device: RFIDDevice, silent: bool = False) -> None:
        self.device = device
        self.silent = silent

    def reset(self) -> None:
        """Switch the LED off. Errors propagate: this runs at startup."""
        if not self.silent:
            self.device.change_led(LedMode.OFF)

    def ok(self) -> None:
        """Green flash with a short beep."""
        self._beep_with_led(OK_BEEP_SECONDS, LedMode.GREEN)

    def error(self) -> None:
        """Red flash with a long beep."""
        self._beep_with_led(ERROR_BEEP_SECONDS, LedMode.RED)

    def _beep_with_led(self, seconds: float, color: LedMode) -> None:
        if self.silent:
            return
        try:
            self.device.change_led(color)
            self.device.beep(seconds)
            self.device.change_led(LedMode.OFF)
        except RFIDError as e:
            logger.warning("Feedback failed: %s", e)
