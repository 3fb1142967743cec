"""Tracked target record."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Target:
    """One tracked object as reported by the radar.

    Records are reused across frames: the decoder overwrites them in
    place rather than allocating new ones.
    """

    x: int = 0                # mm, negative = left, positive = right
    y: int = 0                # mm, forward distance
    speed: int = 0            # cm/s, negative = approaching
    distance_raw: int = 0     # sensor distance resolution code
    distance: float = 0.0     # cm, derived from x and y
    angle: float = 0.0        # degrees from the forward axis
    valid: bool = False

    def clear(self) -> None:
        """Reset to the empty, invalid state."""
        self.x = 0
        self.y = 0
        self.speed = 0
        self.distance_raw = 0
        self.distance = 0.0
        self.angle = 0.0
        self.valid = False

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "x_mm": self.x,
            "y_mm": self.y,
            "speed_cm_s": self.speed,
            "distance_raw": self.distance_raw,
            "distance_cm": round(self.distance, 2),
            "angle_deg": round(self.angle, 2),
        }
