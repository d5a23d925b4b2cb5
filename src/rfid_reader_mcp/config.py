"""Reader connection settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .transport.serial_connection import DEFAULT_BAUDRATE, DEFAULT_DEVICE

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class ReaderConfig:
    """Settings for one reader session.

    Attributes:
        device: Serial device path.
        baudrate: Serial line speed.
        timeout: Read timeout in seconds, ``None`` to block until data arrives.
        silent: Skip LED/beep feedback in the caller layer.
        debug: Log every TX/RX frame.
    """

    device: str = DEFAULT_DEVICE
    baudrate: int = DEFAULT_BAUDRATE
    timeout: float | None = None
    silent: bool = False
    debug: bool = False

    @classmethod
    def from_env(cls, prefix: str = "RFID_", environ=None) -> ReaderConfig:
        """Build a config from ``<prefix>DEVICE``, ``<prefix>BAUDRATE``,
        ``<prefix>TIMEOUT``, ``<prefix>SILENT`` and ``<prefix>DEBUG``."""
        env = os.environ if environ is None else environ
        timeout = env.get(f"{prefix}TIMEOUT")
        return cls(
            device=env.get(f"{prefix}DEVICE", DEFAULT_DEVICE),
            baudrate=int(env.get(f"{prefix}BAUDRATE", DEFAULT_BAUDRATE)),
            timeout=float(timeout) if timeout else None,
            silent=_env_bool(env.get(f"{prefix}SILENT"), False),
            debug=_env_bool(env.get(f"{prefix}DEBUG"), False),
        )

    def to_dict(self) -> dict:
        return {
            "device": self.device,
            "baudrate": self.baudrate,
            "timeout": self.timeout,
            "silent": self.silent,
            "debug": self.debug,
        }
