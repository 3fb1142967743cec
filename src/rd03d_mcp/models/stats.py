"""Frame statistics model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Statistics:
    """Cumulative counters kept by the radar core."""

    frame_count: int = 0
    error_count: int = 0
    last_frame_time: float | None = None  # ms, None until the first frame

    def to_dict(self) -> dict:
        return {
            "frame_count": self.frame_count,
            "error_count": self.error_count,
            "last_frame_time": self.last_frame_time,
        }
