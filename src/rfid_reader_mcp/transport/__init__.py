"""Byte-stream transports for talking to the reader."""

from .serial_connection import SerialConnection
