"""Area-of-interest queries that resolve to spatial channel ids."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, field

from gridspace.grid import SpatialError, StaticGrid2DSpatialController
from gridspace.spatial_info import SpatialInfo


@dataclass
class SpotsAOI:
    """Individual points, each with an optional distance.

    A spot without a matching entry in ``dists`` counts as distance 0.
    """

    spots: list[SpatialInfo] = field(default_factory=list)
    dists: list[int] = field(default_factory=list)


@dataclass
class BoxAOI:
    """An axis-aligned box on the XZ plane given by its centre and half-extent."""

    center: SpatialInfo = field(default_factory=SpatialInfo)
    extent: SpatialInfo = field(default_factory=SpatialInfo)


@dataclass
class SphereAOI:
    """A circle on the XZ plane."""

    center: SpatialInfo = field(default_factory=SpatialInfo)
    radius: float = 0.0


@dataclass
class ConeAOI:
    """A circular sector on the XZ plane; ``angle`` is in radians from ``direction``."""

    center: SpatialInfo = field(default_factory=SpatialInfo)
    direction: SpatialInfo = field(default_factory=SpatialInfo)
    radius: float = 0.0
    angle: float = 0.0


@dataclass
class SpatialInterestQuery:
    """Any combination of the supported areas of interest."""

    spots_aoi: SpotsAOI | None = None
    box_aoi: BoxAOI | None = None
    sphere_aoi: SphereAOI | None = None
    cone_aoi: ConeAOI | None = None


def _frange(start: float, stop: float, step: float) -> Iterator[float]:
    value = start
    while value <= stop:
        yield value
        value += step


def _steps(
    controller: StaticGrid2DSpatialController, size_x: float, size_z: float, what: str
) -> tuple[float, float]:
    step_z = min(size_z, controller.grid_height) * 0.5
    if step_z <= 0:
        raise SpatialError(
            f"invalid {what}Z={size_z:f}, gridHeight={controller.grid_height:f}"
        )
    step_x = min(size_x, controller.grid_width) * 0.5
    if step_x <= 0:
        raise SpatialError(
            f"invalid {what}X={size_x:f}, gridWidth={controller.grid_width:f}"
        )
    return step_x, step_z


def _try_channel_id(controller: StaticGrid2DSpatialController, spot: SpatialInfo) -> int | None:
    try:
        return controller.get_channel_id(spot)
    except SpatialError:
        return None


def _distance_level(
    controller: StaticGrid2DSpatialController, center: SpatialInfo, spot: SpatialInfo
) -> int:
    return int(math.ceil(center.dist_2d(spot) / controller.grid_size()))


def _query_spots(
    controller: StaticGrid2DSpatialController, aoi: SpotsAOI, result: dict[int, int]
) -> None:
    for i, spot in enumerate(aoi.spots):
        channel_id = _try_channel_id(controller, SpatialInfo(spot.x, spot.y, spot.z))
        if channel_id is None:
            continue
        result[channel_id] = int(aoi.dists[i]) if i < len(aoi.dists) else 0


def _query_box(
    controller: StaticGrid2DSpatialController, aoi: BoxAOI, result: dict[int, int]
) -> None:
    center = SpatialInfo(aoi.center.x, 0.0, aoi.center.z)
    ext = aoi.extent
    step_x, step_z = _steps(controller, ext.x, ext.z, "box extent")

    for z in _frange(center.z - ext.z, center.z + ext.z, step_z):
        for x in _frange(center.x - ext.x, center.x + ext.x, step_x):
            spot = SpatialInfo(x, 0.0, z)
            channel_id = _try_channel_id(controller, spot)
            if channel_id is not None:
                result[channel_id] = _distance_level(controller, center, spot)

    result[controller.get_channel_id(center)] = 0


def _query_sphere(
    controller: StaticGrid2DSpatialController, aoi: SphereAOI, result: dict[int, int]
) -> None:
    r = aoi.radius
    center = SpatialInfo(aoi.center.x, 0.0, aoi.center.z)
    step_x, step_z = _steps(controller, r, r, "radius")

    for z in _frange(center.z - r, center.z + r, step_z):
        for x in _frange(center.x - r, center.x + r, step_x):
            if (x - center.x) ** 2 + (z - center.z) ** 2 > r * r:
                continue
            spot = SpatialInfo(x, 0.0, z)
            channel_id = _try_channel_id(controller, spot)
            if channel_id is not None:
                result[channel_id] = _distance_level(controller, center, spot)

    result[controller.get_channel_id(center)] = 0


def _query_cone(
    controller: StaticGrid2DSpatialController, aoi: ConeAOI, result: dict[int, int]
) -> None:
    r = aoi.radius
    center = SpatialInfo(aoi.center.x, 0.0, aoi.center.z)
    cone_dir = SpatialInfo(aoi.direction.x, 0.0, aoi.direction.z)
    cone_dir.normalize_2d()
    step_x, step_z = _steps(controller, r, r, "radius")
    cos_angle = math.cos(aoi.angle)

    z_start = max(controller.world_offset_z, center.z - r)
    z_stop = min(controller.world_offset_z + controller.world_height(), center.z + r)
    x_start = max(controller.world_offset_x, center.x - r)
    x_stop = min(controller.world_offset_x + controller.world_width(), center.x + r)

    for z in _frange(z_start, z_stop, step_z):
        for x in _frange(x_start, x_stop, step_x):
            if (x - center.x) ** 2 + (z - center.z) ** 2 > r * r:
                continue
            spot = SpatialInfo(x, 0.0, z)
            direction = SpatialInfo(spot.x - center.x, 0.0, spot.z - center.z)
            direction.normalize_2d()
            # A spot at the centre normalises to NaN, which never compares below.
            if direction.dot_2d(cone_dir) < cos_angle:
                continue
            channel_id = _try_channel_id(controller, spot)
            if channel_id is not None:
                result[channel_id] = _distance_level(controller, center, spot)

    result[controller.get_channel_id(center)] = 0


def query_channel_ids(
    controller: StaticGrid2DSpatialController, query: SpatialInterestQuery | None
) -> dict[int, int]:
    """Map each spatial channel the query touches to its distance level.

    The distance level is the distance from the area's centre in grid
    diagonals, rounded up; the centre's own channel is always 0. Raises
    SpatialError for a missing query, a non-positive size, or a box, sphere
    or cone whose centre lies outside the world.
    """
    if query is None:
        raise SpatialError("query is nil")

    result: dict[int, int] = {}
    if query.spots_aoi is not None:
        _query_spots(controller, query.spots_aoi, result)
    if query.box_aoi is not None:
        _query_box(controller, query.box_aoi, result)
    if query.sphere_aoi is not None:
        _query_sphere(controller, query.sphere_aoi, result)
    if query.cone_aoi is not None:
        _query_cone(controller, query.cone_aoi, result)
    return result