"""A static 2D grid that maps world positions to spatial channel ids."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from os import PathLike
from typing import Any

from gridspace.spatial_info import SpatialInfo

SPATIAL_CHANNEL_ID_START = 65536
"""The id of the first spatial channel."""

MIN_Y = -3.40282347e38 / 2
MAX_Y = 3.40282347e38 / 2

_UINT32_MASK = 0xFFFFFFFF

_FLOAT_FIELDS = {
    "GridWidth": "grid_width",
    "GridHeight": "grid_height",
    "WorldOffsetX": "world_offset_x",
    "WorldOffsetZ": "world_offset_z",
}
_UINT32_FIELDS = {
    "GridCols": "grid_cols",
    "GridRows": "grid_rows",
    "ServerCols": "server_cols",
    "ServerRows": "server_rows",
    "ServerInterestBorderSize": "server_interest_border_size",
}


class SpatialError(ValueError):
    """A position, query or configuration that the spatial grid cannot handle."""


@dataclass
class SpatialRegion:
    """The box one grid covers, with its channel and the server that owns it."""

    min: SpatialInfo
    max: SpatialInfo
    channel_id: int
    server_index: int


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SpatialError(f"{key} should be a number")
    return float(value)


def _as_uint32(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SpatialError(f"{key} should be a number")
    if isinstance(value, float):
        if not value.is_integer():
            raise SpatialError(f"{key} should be an integer")
        value = int(value)
    if not 0 <= value <= _UINT32_MASK:
        raise SpatialError(f"{key} is out of the uint32 range")
    return value


@dataclass
class StaticGrid2DSpatialController:
    """Divides the XZ plane into ``grid_cols`` x ``grid_rows`` equal grids.

    Each grid is one spatial channel. Servers own blocks of grids, laid out as
    ``server_cols`` x ``server_rows``; ``server_interest_border_size`` is how many
    grids beyond its own block each server is interested in.
    """

    grid_width: float = 0.0
    grid_height: float = 0.0
    grid_cols: int = 0
    grid_rows: int = 0
    world_offset_x: float = 0.0
    world_offset_z: float = 0.0
    server_cols: int = 0
    server_rows: int = 0
    server_interest_border_size: int = 0
    channel_id_start: int = SPATIAL_CHANNEL_ID_START
    _grid_size: float = field(default=0.0, init=False, repr=False, compare=False)

    def world_width(self) -> float:
        return self.grid_width * self.grid_cols

    def world_height(self) -> float:
        return self.grid_height * self.grid_rows

    def grid_size(self) -> float:
        """Length of a grid's diagonal; 0 until both grid sides are positive."""
        if self._grid_size == 0 and self.grid_width > 0 and self.grid_height > 0:
            self._grid_size = math.hypot(self.grid_width, self.grid_height)
        return self._grid_size

    def load_config(self, config: str | bytes | Mapping[str, Any]) -> None:
        """Set the grid parameters from a JSON object and validate them.

        Keys match the field names case-insensitively ("GridWidth", "gridwidth").
        Unknown keys are ignored, missing keys keep their current values.
        """
        data = json.loads(config) if isinstance(config, (str, bytes, bytearray)) else config
        if not isinstance(data, Mapping):
            raise SpatialError("spatial controller config should be a JSON object")

        lookup = {name.lower(): attr for name, attr in {**_FLOAT_FIELDS, **_UINT32_FIELDS}.items()}
        updates: dict[str, Any] = {}
        for key, value in data.items():
            attr = lookup.get(str(key).lower())
            if attr is None or value is None:
                continue
            if attr in _FLOAT_FIELDS.values():
                updates[attr] = _as_float(value, key)
            else:
                updates[attr] = _as_uint32(value, key)

        for attr, value in updates.items():
            setattr(self, attr, value)
        self._grid_size = 0.0

        if self.grid_width <= 0 or self.grid_height <= 0:
            raise SpatialError("GridWidth and GridHeight should be positive")
        if self.grid_cols <= 0 or self.grid_rows <= 0:
            raise SpatialError("GridCols and GridRows should be positive")
        if self.server_cols <= 0 or self.server_rows <= 0:
            raise SpatialError("ServerCols and ServerRows should be positive")
        if self.server_interest_border_size <= 0:
            raise SpatialError("ServerInterestBorderSize should be positive")

    def get_channel_id(self, info: SpatialInfo) -> int:
        """The channel id of the grid that ``info`` lies in."""
        return self.get_channel_id_with_offset(info, self.world_offset_x, self.world_offset_z)

    def get_channel_id_no_offset(self, info: SpatialInfo) -> int:
        """Like :meth:`get_channel_id`, with the world origin at the first grid."""
        return self.get_channel_id_with_offset(info, 0.0, 0.0)

    def get_channel_id_with_offset(
        self, info: SpatialInfo, offset_x: float, offset_z: float
    ) -> int:
        """The channel id of the grid holding ``info``, given a world offset.

        Raises SpatialError when the point falls outside the world.
        """
        grid_x = self._grid_index(info.x, offset_x, self.grid_width)
        if grid_x is None or not 0 <= grid_x < self.grid_cols:
            raise SpatialError(
                f"gridX={grid_x} when X={info.x:f}. GridX should be in [0,{self.grid_cols})"
            )
        grid_y = self._grid_index(info.z, offset_z, self.grid_height)
        if grid_y is None or not 0 <= grid_y < self.grid_rows:
            raise SpatialError(
                f"gridY={grid_y} when Z={info.z:f}. GridY should be in [0,{self.grid_rows})"
            )
        index = (grid_x + grid_y * self.grid_cols) & _UINT32_MASK
        return (index + self.channel_id_start) & _UINT32_MASK

    @staticmethod
    def _grid_index(value: float, offset: float, size: float) -> int | None:
        try:
            cell = (value - offset) / size
        except ZeroDivisionError:
            return None
        if not math.isfinite(cell):
            return None
        return math.floor(cell)

    def _server_grid_dims(self) -> tuple[int, int]:
        return (
            _ceil_div(self.grid_cols, self.server_cols),
            _ceil_div(self.grid_rows, self.server_rows),
        )

    def get_regions(self) -> list[SpatialRegion]:
        """Every grid's region, in channel order (row by row along X)."""
        server_grid_cols, server_grid_rows = self._server_grid_dims()
        regions = []
        for y in range(self.grid_rows):
            for x in range(self.grid_cols):
                index = x + y * self.grid_cols
                server_x = x // server_grid_cols
                server_y = y // server_grid_rows
                regions.append(
                    SpatialRegion(
                        min=SpatialInfo(
                            x=self.world_offset_x + self.grid_width * x,
                            y=MIN_Y,
                            z=self.world_offset_z + self.grid_height * y,
                        ),
                        max=SpatialInfo(
                            x=self.world_offset_x + self.grid_width * (x + 1),
                            y=MAX_Y,
                            z=self.world_offset_z + self.grid_height * (y + 1),
                        ),
                        channel_id=(self.channel_id_start + index) & _UINT32_MASK,
                        server_index=server_x + server_y * self.server_cols,
                    )
                )
        return regions

    def get_adjacent_channels(self, spatial_channel_id: int) -> list[int]:
        """Ids of the up to eight grids around ``spatial_channel_id``."""
        index = (spatial_channel_id - self.channel_id_start) & _UINT32_MASK
        grid_x = index % self.grid_cols
        grid_y = index // self.grid_cols
        return [
            (x + y * self.grid_cols + self.channel_id_start) & _UINT32_MASK
            for y in range(max(grid_y - 1, 0), min(grid_y + 1, self.grid_rows - 1) + 1)
            for x in range(max(grid_x - 1, 0), min(grid_x + 1, self.grid_cols - 1) + 1)
            if (x, y) != (grid_x, grid_y)
        ]


def load_spatial_controller(path: str | PathLike[str]) -> StaticGrid2DSpatialController:
    """Create a controller from a JSON file whose "Config" object holds its parameters."""
    with open(path, "rb") as fh:
        raw = fh.read()
    try:
        document = json.loads(raw)
    except ValueError as exc:
        raise SpatialError(f"failed to parse spatial controller config {path}: {exc}") from exc
    if not isinstance(document, Mapping):
        raise SpatialError(f"spatial controller config {path} should be a JSON object")
    if "Config" not in document:
        raise SpatialError(f"'Config' does not exist in json: {path}")
    controller = StaticGrid2DSpatialController()
    controller.load_config(document["Config"])
    return controller