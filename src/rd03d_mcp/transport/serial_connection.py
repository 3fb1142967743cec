"""UART connection to the RD-03D radar via pyserial.

The radar talks 8N1 at a fixed 256000 baud. Reads are non-blocking in
practice: :meth:`SerialConnection.read_available` only returns what is
already waiting in the driver buffer so the caller's poll loop never
stalls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import serial

logger = logging.getLogger(__name__)

BAUD_RATE = 256000
READ_TIMEOUT_S = 0.0


@dataclass
class PortInfo:
    """Settings of the opened port."""

    port: str = ""
    baudrate: int = BAUD_RATE


class SerialConnection:
    """Manages the serial link to the radar.

    Usage::

        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
        conn.write(command_bytes)
        data = conn.read_available()
        conn.close()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = BAUD_RATE,
        read_timeout: float = READ_TIMEOUT_S,
    ) -> None:
        self._port_info = PortInfo(port=port, baudrate=baudrate)
        self._read_timeout = read_timeout
        self._serial: serial.Serial | None = None

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    @property
    def port_info(self) -> PortInfo:
        return self._port_info

    def open(self) -> PortInfo:
        """Open the serial port.

        Raises:
            ConnectionError: If the port cannot be opened.
        """
        try:
            self._serial = serial.Serial(
                self._port_info.port,
                baudrate=self._port_info.baudrate,
                timeout=self._read_timeout,
            )
        except serial.SerialException as e:
            raise ConnectionError(
                f"Could not open {self._port_info.port} at "
                f"{self._port_info.baudrate} baud: {e}"
            ) from e

        logger.info(
            "Opened %s at %d baud", self._port_info.port, self._port_info.baudrate
        )
        return self._port_info

    def close(self) -> None:
        """Close the serial port."""
        if self._serial is None:
            return

        try:
            self._serial.close()
        except serial.SerialException as e:
            logger.warning("Error closing port: %s", e)
        finally:
            self._serial = None
            logger.info("Closed %s", self._port_info.port)

    def _require_open(self) -> serial.Serial:
        if not self.connected:
            raise ConnectionError("Serial port is not open")
        return self._serial

    def write(self, data: bytes) -> int:
        """Write raw bytes to the radar.

        Raises:
            ConnectionError: If not connected.
        """
        port = self._require_open()
        written = port.write(data)
        port.flush()
        return written

    def read_available(self) -> bytes:
        """Return every byte currently waiting, possibly ``b""``.

        Raises:
            ConnectionError: If not connected.
        """
        port = self._require_open()
        waiting = port.in_waiting
        if not waiting:
            return b""
        return bytes(port.read(waiting))

    def reset_input(self) -> None:
        """Discard stale bytes in the receive buffer."""
        self._require_open().reset_input_buffer()
