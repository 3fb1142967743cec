"""Tests for frame synchronization and tail validation."""

from rd03d_mcp.protocol.framing import (
    FRAME_SIZE,
    HEADER,
    TAIL,
    FrameSynchronizer,
    ParserState,
    has_valid_tail,
    target_blocks,
)


def _frame(payload: bytes = bytes(24), tail: bytes = TAIL) -> bytes:
    return HEADER + payload + tail


def _push_all(sync: FrameSynchronizer, data: bytes, now: float = 0.0) -> list[bytes]:
    frames = []
    for b in data:
        frame = sync.push(b, now)
        if frame is not None:
            frames.append(frame)
    return frames


def test_frame_size():
    """Header, three 8-byte blocks, and tail add up to 30 bytes."""
    assert FRAME_SIZE == 30


def test_initial_state_is_seeking():
    sync = FrameSynchronizer()
    assert sync.state is ParserState.SYNC_SEEKING
    assert sync.pending == 0


def test_header_switches_to_collecting():
    """A full header match moves the write position past the header."""
    sync = FrameSynchronizer()
    _push_all(sync, HEADER)
    assert sync.state is ParserState.COLLECTING
    assert sync.pending == 4


def test_complete_frame_returned_and_reset():
    """The 30th byte yields the frame and returns to header seeking."""
    sync = FrameSynchronizer()
    data = _frame(bytes(range(24)))
    frames = _push_all(sync, data)
    assert frames == [data]
    assert sync.state is ParserState.SYNC_SEEKING
    assert sync.pending == 0


def test_bad_tail_frame_still_returned():
    """Tail checking is the validator's job, not the synchronizer's."""
    sync = FrameSynchronizer()
    frames = _push_all(sync, _frame(tail=b"\x00\x00"))
    assert len(frames) == 1
    assert sync.state is ParserState.SYNC_SEEKING


def test_noise_is_skipped():
    """Leading garbage never prevents synchronization."""
    sync = FrameSynchronizer()
    data = _frame(bytes(range(24)))
    frames = _push_all(sync, b"\x01\x02\xFF\x03\x00\x55\xCC" + data)
    assert frames == [data]


def test_repeated_first_header_byte_restarts_match():
    """A stray 0xAA followed by a real header still syncs."""
    sync = FrameSynchronizer()
    data = _frame()
    frames = _push_all(sync, b"\xAA\xAA" + data)
    assert frames == [data]


def test_header_restart_mid_match():
    """0xAA in the middle of a partial header starts a new candidate."""
    sync = FrameSynchronizer()
    data = _frame()
    frames = _push_all(sync, b"\xAA\xFF\xAA" + data[1:])
    assert frames == [data]


def test_mismatch_resets_match_index():
    sync = FrameSynchronizer()
    _push_all(sync, b"\xAA\xFF\x03")
    assert sync.pending == 3
    sync.push(0x42, 0.0)
    assert sync.pending == 0
    assert sync.state is ParserState.SYNC_SEEKING


def test_back_to_back_frames():
    sync = FrameSynchronizer()
    first = _frame(bytes([1]) * 24)
    second = _frame(bytes([2]) * 24)
    assert _push_all(sync, first + second) == [first, second]


def test_expired_only_while_collecting():
    """A stale header search is not a timeout; a stale partial frame is."""
    sync = FrameSynchronizer()
    _push_all(sync, HEADER[:2], now=0.0)
    assert not sync.expired(500.0, 100)

    sync.reset()
    _push_all(sync, HEADER + b"\x01\x02", now=0.0)
    assert not sync.expired(100.0, 100)
    assert sync.expired(100.5, 100)


def test_reset_drops_partial_frame():
    sync = FrameSynchronizer()
    _push_all(sync, HEADER + bytes(10))
    sync.reset()
    assert sync.state is ParserState.SYNC_SEEKING
    assert sync.pending == 0


def test_has_valid_tail():
    assert has_valid_tail(_frame())
    assert not has_valid_tail(_frame(tail=b"\x55\xCD"))
    assert not has_valid_tail(_frame()[:-1])


def test_target_blocks_offsets():
    """Blocks start at offsets 4, 12, and 20."""
    payload = bytes([1]) * 8 + bytes([2]) * 8 + bytes([3]) * 8
    blocks = target_blocks(_frame(payload))
    assert blocks == [bytes([1]) * 8, bytes([2]) * 8, bytes([3]) * 8]
