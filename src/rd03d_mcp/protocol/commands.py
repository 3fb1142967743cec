"""Command constants and builders for host-to-radar configuration.

Command layout::

    +-------------+---------+---------+---------+-------------+
    |  Preamble   | Length  | Command |  Value  |  Postamble  |
    |  4 bytes    | 2 bytes | 2 bytes | n bytes |  4 bytes    |
    +-------------+---------+---------+---------+-------------+

- Preamble: 0xFD 0xFC 0xFB 0xFA
- Length: little-endian size of (command word + value)
- Postamble: 0x04 0x03 0x02 0x01
"""

from __future__ import annotations

from enum import IntEnum

PREAMBLE = b"\xFD\xFC\xFB\xFA"
POSTAMBLE = b"\x04\x03\x02\x01"


class Command(IntEnum):
    """Command words understood by the radar."""

    MULTI_TARGET = 0x0090


def build_command(command: Command, value: bytes = b"") -> bytes:
    """Build a complete command packet.

    Args:
        command: 16-bit command word.
        value: Command-specific value bytes.
    """
    if not 0 <= command <= 0xFFFF:
        raise ValueError(f"Command word must be 0-0xFFFF, got {command:#x}")
    body = int(command).to_bytes(2, "little") + value
    return PREAMBLE + len(body).to_bytes(2, "little") + body + POSTAMBLE


def build_enable_multi_target() -> bytes:
    """Build the command that switches the radar to 3-target tracking."""
    return build_command(Command.MULTI_TARGET)


MULTI_TARGET_CMD = build_enable_multi_target()
