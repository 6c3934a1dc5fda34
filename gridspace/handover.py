"""Detects when an entity's Z-up location has moved."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from gridspace.spatial_info import SpatialInfo


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


@dataclass
class FVector:
    """A Z-up location; a component left as None was not sent."""

    x: float | None = None
    y: float | None = None
    z: float | None = None


def _component(vec: FVector | None, name: str) -> float:
    if vec is None:
        return 0.0
    value = getattr(vec, name)
    return 0.0 if value is None else _f32(value)


def check_entity_handover(
    net_id: int, new_loc: FVector, old_loc: FVector | None
) -> tuple[SpatialInfo, SpatialInfo] | None:
    """Return ``(old_info, new_info)`` in Y-up space if the location changed.

    Components missing from ``new_loc`` keep the old value. Returns None when
    the location is unchanged.
    """
    old_x = _component(old_loc, "x")
    old_y = _component(old_loc, "y")
    old_z = _component(old_loc, "z")

    new_x = old_x if new_loc.x is None else _f32(new_loc.x)
    new_y = old_y if new_loc.y is None else _f32(new_loc.y)
    new_z = old_z if new_loc.z is None else _f32(new_loc.z)

    if (new_x, new_y, new_z) == (old_x, old_y, old_z):
        return None

    # Y and Z swap between the Z-up engine space and the Y-up world space.
    old_info = SpatialInfo(x=old_x, y=old_z, z=old_y)
    new_info = SpatialInfo(x=new_x, y=new_z, z=new_y)
    return old_info, new_info