"""Transport layer: serial link to the radar."""

from .serial_connection import SerialConnection, PortInfo
