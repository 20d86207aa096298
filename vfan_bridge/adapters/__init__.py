"""Adapter modules for the serial link and hwmon files."""

from .serial import SerialTransport, TransportError
from .sysfs import SysfsError, read_int, write_int

__all__ = [
    "SerialTransport",
    "SysfsError",
    "TransportError",
    "read_int",
    "write_int",
]
