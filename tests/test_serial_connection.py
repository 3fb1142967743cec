"""Tests for the pyserial-backed connection."""

from unittest.mock import MagicMock, patch

import pytest
import serial

from rd03d_mcp.transport.serial_connection import BAUD_RATE, SerialConnection


@pytest.fixture
def mock_serial():
    with patch("rd03d_mcp.transport.serial_connection.serial.Serial") as cls:
        port = MagicMock()
        port.is_open = True
        cls.return_value = port
        yield cls, port


def test_open_uses_radar_baud_rate(mock_serial):
    cls, _ = mock_serial
    conn = SerialConnection("/dev/ttyUSB0")
    info = conn.open()
    cls.assert_called_once_with("/dev/ttyUSB0", baudrate=BAUD_RATE, timeout=0.0)
    assert info.port == "/dev/ttyUSB0"
    assert info.baudrate == 256000
    assert conn.connected


def test_open_failure_raises_connection_error(mock_serial):
    cls, _ = mock_serial
    cls.side_effect = serial.SerialException("no such port")
    conn = SerialConnection("/dev/missing")
    with pytest.raises(ConnectionError):
        conn.open()
    assert not conn.connected


def test_read_available_returns_waiting_bytes(mock_serial):
    _, port = mock_serial
    port.in_waiting = 3
    port.read.return_value = b"\xAA\xFF\x03"
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    assert conn.read_available() == b"\xAA\xFF\x03"
    port.read.assert_called_once_with(3)


def test_read_available_empty(mock_serial):
    _, port = mock_serial
    port.in_waiting = 0
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    assert conn.read_available() == b""
    port.read.assert_not_called()


def test_write_flushes(mock_serial):
    _, port = mock_serial
    port.write.return_value = 12
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    assert conn.write(b"\x00" * 12) == 12
    port.flush.assert_called_once()


def test_reset_input(mock_serial):
    _, port = mock_serial
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    conn.reset_input()
    port.reset_input_buffer.assert_called_once()


def test_io_requires_open_port():
    conn = SerialConnection("/dev/ttyUSB0")
    with pytest.raises(ConnectionError):
        conn.write(b"\x00")
    with pytest.raises(ConnectionError):
        conn.read_available()


def test_close_is_idempotent(mock_serial):
    _, port = mock_serial
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    conn.close()
    conn.close()
    port.close.assert_called_once()
    assert not conn.connected


def test_close_error_is_logged_not_raised(mock_serial):
    _, port = mock_serial
    port.close.side_effect = serial.SerialException("gone")
    conn = SerialConnection("/dev/ttyUSB0")
    conn.open()
    conn.close()
    assert not conn.connected
