"""Target decoding for validated radar frames."""

from __future__ import annotations

import math
from collections.abc import Sequence

from ..models.target import Target
from .framing import target_blocks

SIGN_FLAG = 0x8000
MAGNITUDE_MASK = 0x7FFF
Y_OFFSET = 0x8000


def read_u16_le(data: bytes, offset: int) -> int:
    """Read an unsigned little-endian 16-bit field."""
    return int.from_bytes(data[offset : offset + 2], "little")


def decode_sign_magnitude(raw: int) -> int:
    """Decode the flag-bit encoding used for x and speed.

    Bit 15 set means positive, clear means negative; the low 15 bits
    are the magnitude.
    """
    magnitude = raw & MAGNITUDE_MASK
    if raw & SIGN_FLAG:
        return magnitude
    return -magnitude


def decode_offset(raw: int) -> int:
    """Decode the offset encoding used for y."""
    return raw - Y_OFFSET


def decode_target(block: bytes, target: Target) -> Target:
    """Decode one 8-byte target block into ``target`` in place.

    A block whose raw x and y are both zero means "no target" and
    clears the record, whatever the speed and distance bytes hold.
    """
    raw_x = read_u16_le(block, 0)
    raw_y = read_u16_le(block, 2)
    raw_speed = read_u16_le(block, 4)
    raw_distance = read_u16_le(block, 6)

    if raw_x == 0 and raw_y == 0:
        target.clear()
        return target

    target.valid = True
    target.x = decode_sign_magnitude(raw_x)
    target.y = decode_offset(raw_y)
    target.speed = decode_sign_magnitude(raw_speed)
    target.distance_raw = raw_distance

    # x and y are in mm, distance is reported in cm
    target.distance = math.hypot(target.x, target.y) / 10.0
    # Angle from the forward (y) axis, positive toward +x
    target.angle = math.degrees(math.atan2(target.x, target.y))
    return target


def decode_targets(frame: bytes, targets: Sequence[Target]) -> int:
    """Decode all target blocks of a validated frame.

    Returns:
        The number of valid targets after decoding.
    """
    for block, target in zip(target_blocks(frame), targets):
        decode_target(block, target)
    return sum(1 for t in targets if t.valid)
