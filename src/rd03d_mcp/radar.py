"""RD-03D radar core: byte feed, frame dispatch, and connectivity.

The core is poll-driven and single-threaded. Bytes go in through
:meth:`RD03D.process_byte`, :meth:`RD03D.feed`, or :meth:`RD03D.update`
(which drains an attached :class:`SerialConnection`); decoded frames come
out through the registered callback and the query methods.

Usage::

    radar = RD03D()
    radar.on_frame(lambda targets, count: print(count, targets[0]))
    radar.begin(SerialConnection("/dev/ttyUSB0"))
    while True:
        radar.update()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from .models.stats import Statistics
from .models.target import Target
from .protocol.commands import MULTI_TARGET_CMD
from .protocol.framing import MAX_TARGETS, FrameSynchronizer, ParserState, has_valid_tail
from .protocol.parser import decode_targets

if TYPE_CHECKING:
    from .transport.serial_connection import SerialConnection

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 100
CONNECTED_WINDOW_MS = 1000
SETTLE_S = 0.1

FrameCallback = Callable[[tuple[Target, ...], int], None]


def _millis() -> float:
    return time.monotonic() * 1000.0


class RD03D:
    """Frame parser and target store for one radar.

    Args:
        timeout_ms: Inactivity limit for a partially received frame.
        clock: Callable returning the current time in milliseconds.
    """

    def __init__(
        self,
        timeout_ms: float = DEFAULT_TIMEOUT_MS,
        clock: Callable[[], float] = _millis,
    ) -> None:
        self._clock = clock
        self._timeout_ms = DEFAULT_TIMEOUT_MS
        self.set_timeout(timeout_ms)
        self._sync = FrameSynchronizer()
        self._targets = tuple(Target() for _ in range(MAX_TARGETS))
        self._stats = Statistics()
        self._callback: FrameCallback | None = None
        self._connection: SerialConnection | None = None

    # ─── Configuration ───────────────────────────────────────────────

    def begin(self, connection: SerialConnection, settle_s: float = SETTLE_S) -> None:
        """Attach an open connection and switch the radar to multi-target mode.

        Opens the connection if needed, drops stale input, sends the
        multi-target command, and restarts the parser. The connectivity
        window starts counting from here. If configuration fails, the
        connection is detached again, and closed if this call opened it.
        """
        opened = False
        if not connection.connected:
            connection.open()
            opened = True
        self._connection = connection
        try:
            connection.reset_input()
            self.enable_multi_target(settle_s)
        except Exception:
            self._connection = None
            if opened:
                connection.close()
            raise

        self._sync.reset()
        now = self._clock()
        self._sync.last_byte_time = now
        self._stats.last_frame_time = now

    def end(self) -> None:
        """Detach and close the attached connection, if any."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def enable_multi_target(self, settle_s: float = SETTLE_S) -> None:
        """Send the multi-target tracking command to the attached radar."""
        if self._connection is None:
            return
        self._connection.write(MULTI_TARGET_CMD)
        logger.info("Multi-target mode requested")
        if settle_s > 0:
            time.sleep(settle_s)

    def set_timeout(self, timeout_ms: float) -> None:
        """Set the partial-frame inactivity timeout in milliseconds."""
        if timeout_ms <= 0:
            raise ValueError(f"Timeout must be positive, got {timeout_ms}")
        self._timeout_ms = timeout_ms

    def on_frame(self, callback: FrameCallback | None) -> None:
        """Register the frame callback, replacing any previous one.

        The callback receives the three target records and the number
        of valid targets. Pass ``None`` to unregister.
        """
        self._callback = callback

    # ─── Processing ──────────────────────────────────────────────────

    def check_timeout(self) -> bool:
        """Abandon a stale partial frame.

        Returns:
            True if a partial frame was dropped.
        """
        if not self._sync.expired(self._clock(), self._timeout_ms):
            return False
        logger.debug(
            "Frame timeout after %d bytes, resynchronizing", self._sync.pending
        )
        self._stats.error_count += 1
        self._sync.reset()
        return True

    def process_byte(self, byte: int) -> bool:
        """Run one byte through the parser.

        Returns:
            True if this byte completed a frame that was dispatched.
        """
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"Byte value must be 0-255, got {byte}")
        self.check_timeout()
        frame = self._sync.push(byte, self._clock())
        if frame is None:
            return False
        return self._handle_frame(frame)

    def feed(self, data: Iterable[int]) -> int:
        """Process a sequence of bytes in order.

        Returns:
            Number of frames dispatched.
        """
        self.check_timeout()
        dispatched = 0
        for byte in data:
            if self.process_byte(byte):
                dispatched += 1
        return dispatched

    def update(self) -> int:
        """Drain the attached connection and process what arrived.

        Call this frequently from the application loop. Without an
        attached connection only the timeout check runs.

        Returns:
            Number of frames dispatched.
        """
        self.check_timeout()
        if self._connection is None:
            return 0
        return self.feed(self._connection.read_available())

    def _handle_frame(self, frame: bytes) -> bool:
        if not has_valid_tail(frame):
            logger.debug("Dropping frame with bad tail: %s", frame[-2:].hex(" "))
            self._stats.error_count += 1
            return False

        count = decode_targets(frame, self._targets)
        self._stats.frame_count += 1
        self._stats.last_frame_time = self._clock()

        if self._callback is not None:
            try:
                self._callback(self._targets, count)
            except Exception:
                # Keep parsing the rest of the chunk
                logger.exception("Frame callback failed")
        return True

    # ─── Queries ─────────────────────────────────────────────────────

    @property
    def state(self) -> ParserState:
        return self._sync.state

    @property
    def stats(self) -> Statistics:
        return self._stats

    @property
    def frame_count(self) -> int:
        return self._stats.frame_count

    @property
    def error_count(self) -> int:
        return self._stats.error_count

    @property
    def timeout_ms(self) -> float:
        return self._timeout_ms

    @property
    def connection(self) -> SerialConnection | None:
        return self._connection

    def get_target(self, index: int) -> Target | None:
        """Return the target in slot 0-2, or ``None`` for any other index."""
        if not 0 <= index < MAX_TARGETS:
            return None
        return self._targets[index]

    def get_targets(self) -> tuple[Target, ...]:
        return self._targets

    def get_target_count(self) -> int:
        """Number of currently valid targets."""
        return sum(1 for t in self._targets if t.valid)

    def is_connected(self) -> bool:
        """True if a frame arrived within the last second."""
        last = self._stats.last_frame_time
        if last is None:
            return False
        return self._clock() - last < CONNECTED_WINDOW_MS
