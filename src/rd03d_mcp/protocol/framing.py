"""Frame synchronization and validation for the RD-03D report stream.

Frame layout::

    +-------------+-----------+-----------+-----------+---------+
    |   Header    | Target 1  | Target 2  | Target 3  |  Tail   |
    |   4 bytes   |  8 bytes  |  8 bytes  |  8 bytes  | 2 bytes |
    +-------------+-----------+-----------+-----------+---------+

- Header: 0xAA 0xFF 0x03 0x00
- Target block: four little-endian uint16 fields (x, y, speed, distance)
- Tail: 0x55 0xCC

The radar streams frames back to back with no length field, so the
synchronizer has to find the header by scanning byte by byte.
"""

from __future__ import annotations

from enum import Enum

HEADER = b"\xAA\xFF\x03\x00"
TAIL = b"\x55\xCC"
HEADER_SIZE = len(HEADER)
TARGET_BLOCK_SIZE = 8
MAX_TARGETS = 3
FRAME_SIZE = HEADER_SIZE + MAX_TARGETS * TARGET_BLOCK_SIZE + len(TAIL)  # 30


class ParserState(Enum):
    """Synchronizer states."""

    SYNC_SEEKING = "sync_seeking"
    COLLECTING = "collecting"


def has_valid_tail(frame: bytes) -> bool:
    """Return True if a complete frame ends with the tail marker."""
    return len(frame) == FRAME_SIZE and frame[-len(TAIL):] == TAIL


def target_blocks(frame: bytes) -> list[bytes]:
    """Split a frame into its three 8-byte target blocks."""
    return [
        frame[HEADER_SIZE + i * TARGET_BLOCK_SIZE : HEADER_SIZE + (i + 1) * TARGET_BLOCK_SIZE]
        for i in range(MAX_TARGETS)
    ]


class FrameSynchronizer:
    """Byte-at-a-time header matcher and frame accumulator.

    Usage::

        sync = FrameSynchronizer()
        for b in stream:
            frame = sync.push(b, now)
            if frame is not None:
                ...  # 30 bytes, tail not yet checked
    """

    def __init__(self) -> None:
        self._buffer = bytearray(FRAME_SIZE)
        self._sync_index = 0
        self._frame_index = 0
        self._state = ParserState.SYNC_SEEKING
        self.last_byte_time: float | None = None

    @property
    def state(self) -> ParserState:
        return self._state

    @property
    def pending(self) -> int:
        """Number of bytes held for the frame currently being matched."""
        if self._state is ParserState.COLLECTING:
            return self._frame_index
        return self._sync_index

    def reset(self) -> None:
        """Drop any partial frame and go back to header seeking."""
        self._state = ParserState.SYNC_SEEKING
        self._sync_index = 0
        self._frame_index = 0

    def expired(self, now: float, timeout: float) -> bool:
        """True if a partial frame has seen no bytes for longer than ``timeout``."""
        if self._state is not ParserState.COLLECTING or self.last_byte_time is None:
            return False
        return now - self.last_byte_time > timeout

    def push(self, byte: int, now: float) -> bytes | None:
        """Consume one byte.

        Returns:
            The complete 30-byte frame when this byte finishes one,
            otherwise ``None``. The synchronizer is already reset to
            header seeking when a frame is returned.
        """
        self.last_byte_time = now

        if self._state is ParserState.SYNC_SEEKING:
            if byte == HEADER[self._sync_index]:
                self._buffer[self._sync_index] = byte
                self._sync_index += 1
                if self._sync_index >= HEADER_SIZE:
                    self._state = ParserState.COLLECTING
                    self._frame_index = HEADER_SIZE
            elif byte == HEADER[0]:
                # Possible start of a new header
                self._sync_index = 1
                self._buffer[0] = byte
            else:
                self._sync_index = 0
            return None

        self._buffer[self._frame_index] = byte
        self._frame_index += 1
        if self._frame_index < FRAME_SIZE:
            return None

        frame = bytes(self._buffer)
        self.reset()
        return frame
