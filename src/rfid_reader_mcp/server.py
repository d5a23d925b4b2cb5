"""MCP server entry point for the serial RFID reader/writer.

Exposes the device session as tools via the Model Context Protocol using
the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import ReaderConfig
from .device import RFIDDevice
from .errors import RFIDError, UnexpectedStatusError
from .protocol.commands import Command, LedMode

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "rfid-reader",
    instructions="MCP server for a serial 13.56 MHz RFID reader/writer",
)

# Global connection state. Tool calls may arrive concurrently; the
# protocol has no request ids, so every exchange holds the lock.
_device: RFIDDevice | None = None
_config: ReaderConfig | None = None
_lock = threading.Lock()

LED_MODES = {mode.name.lower(): mode for mode in LedMode}


def _get_device() -> RFIDDevice:
    """Get the active device session, raising if not connected."""
    if _device is None or _device.closed:
        raise RuntimeError(
            "Not connected to device. Use the 'connect' tool first."
        )
    return _device


def _error(e: RFIDError) -> dict[str, Any]:
    result: dict[str, Any] = {"error": str(e), "kind": type(e).__name__}
    if isinstance(e, UnexpectedStatusError):
        result["status"] = e.status
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(device: str | None = None, baudrate: int | None = None) -> dict[str, Any]:
    """Open the serial port to the reader and query its model.

    Args:
        device: Serial device path (default from RFID_DEVICE or /dev/ttyUSB0).
        baudrate: Line speed (default 38400).
    """
    global _device, _config
    with _lock:
        if _device is not None and not _device.closed:
            return {
                "connected": True,
                "message": "Already connected",
                **_config.to_dict(),
            }

        config = ReaderConfig.from_env()
        if device:
            config.device = device
        if baudrate:
            config.baudrate = baudrate

        try:
            dev = RFIDDevice.open(config)
        except RFIDError as e:
            return _error(e)
        _device, _config = dev, config

        result: dict[str, Any] = {"connected": True, **config.to_dict()}
        try:
            result["model"] = dev.info()
        except RFIDError as e:
            logger.warning("Info query after connect failed: %s", e)
            result["model_error"] = str(e)
        return result


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial port."""
    global _device, _config
    with _lock:
        if _device is not None:
            _device.close()
        _device = None
        _config = None
    return {"disconnected": True}


@mcp.tool()
def get_device_info() -> dict[str, Any]:
    """Retrieve the reader's model string (Info command 0x0102)."""
    with _lock:
        dev = _get_device()
        try:
            return {"model": dev.info()}
        except RFIDError as e:
            return _error(e)


# ─── TAG AND SIGNALLING TOOLS ─────────────────────────────────────────

@mcp.tool()
def read_tag() -> dict[str, Any]:
    """Ask once for a tag in the field.

    Returns ``{"present": false}`` when no tag is found, otherwise the tag
    identifier as lowercase hex.
    """
    with _lock:
        dev = _get_device()
        try:
            tag = dev.read_tag()
        except RFIDError as e:
            return _error(e)
    if tag is None:
        return {"present": False}
    return {"present": True, "tag": tag.hex()}


@mcp.tool()
def beep(duration_ms: int = 50) -> dict[str, Any]:
    """Sound the buzzer.

    Args:
        duration_ms: Beep length in milliseconds, 1-1000. Longer beeps are
            capped at one second by the device.
    """
    if not 1 <= duration_ms <= 1000:
        # 0 would beep forever and hold the port
        return {"error": "duration_ms must be 1-1000"}
    with _lock:
        dev = _get_device()
        try:
            dev.beep(duration_ms / 1000)
        except RFIDError as e:
            return _error(e)
    return {"beeped": True, "duration_ms": duration_ms}


@mcp.tool()
def set_led(mode: str) -> dict[str, Any]:
    """Switch the reader LED.

    Args:
        mode: One of "off", "red", "green".
    """
    led = LED_MODES.get(mode.lower())
    if led is None:
        return {"error": f"Unknown LED mode '{mode}'. Valid: {list(LED_MODES)}"}
    with _lock:
        dev = _get_device()
        try:
            dev.change_led(led)
        except RFIDError as e:
            return _error(e)
    return {"led": led.name.lower()}


@mcp.tool()
def raw_command(command: int, data_hex: str = "") -> dict[str, Any]:
    """Send an arbitrary command and return the raw status and answer.

    Needed for the write commands (0x020C, 0x030C), which have no
    dedicated tool.

    Args:
        command: 16-bit command code, e.g. 524 for 0x020C.
        data_hex: Command data as hex, spaces allowed.
    """
    if not 0 <= command <= 0xFFFF:
        return {"error": "command must be 0-65535"}
    try:
        data = bytes.fromhex(data_hex)
    except ValueError:
        return {"error": f"Invalid hex data: {data_hex!r}"}

    with _lock:
        dev = _get_device()
        try:
            status, answer = dev.raw_command(command, data)
        except RFIDError as e:
            return _error(e)

    result: dict[str, Any] = {"status": status, "answer": answer.hex()}
    try:
        result["command"] = Command(command).name
    except ValueError:
        result["command"] = f"0x{command:04X}"
    return result


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
