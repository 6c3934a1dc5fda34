"""Light-weight spatial coordinates and broadcast flags."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class SpatialInfo:
    """A point (or vector) in the Y-up world space."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __str__(self) -> str:
        return f"({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def dist_2d(self, other: SpatialInfo) -> float:
        """Distance to ``other`` on the XZ plane."""
        dx = self.x - other.x
        dz = self.z - other.z
        return math.sqrt(dx * dx + dz * dz)

    def dot_2d(self, other: SpatialInfo) -> float:
        """Dot product with ``other`` on the XZ plane."""
        return self.x * other.x + self.z * other.z

    def magnitude_2d(self) -> float:
        """Length of the vector projected onto the XZ plane."""
        return math.sqrt(self.x * self.x + self.z * self.z)

    def normalize_2d(self) -> None:
        """Scale X and Z in place so the XZ length becomes 1.

        A zero vector becomes NaN in X and Z, as IEEE division gives.
        """
        mag = self.magnitude_2d()
        self.x = _ieee_div(self.x, mag)
        self.z = _ieee_div(self.z, mag)

    def unit_2d(self) -> SpatialInfo:
        """Return a copy whose XZ part is normalised; Y is kept."""
        mag = self.magnitude_2d()
        return SpatialInfo(_ieee_div(self.x, mag), self.y, _ieee_div(self.z, mag))


def _ieee_div(a: float, b: float) -> float:
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


class BroadcastType(int):
    """A broadcast bit mask."""

    def check(self, value: int) -> bool:
        """True if any bit of this mask is set in ``value``."""
        return (value & int(self) & 0xFFFFFFFF) > 0