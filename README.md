# gridspace

`gridspace` splits a game world into a static grid of cells on the XZ plane
(Y is up). Each cell is a *spatial channel* with its own numeric id, and
blocks of cells belong to spatial servers. The package works out which
channel a point falls in, which channels surround a channel, which region
each cell covers, and which channels a box, sphere, cone or set of spots
touches.

It also has a small finite state machine, loaded from JSON, that decides
which message types are allowed in each state.

## Installation

```
pip install gridspace
```

To run the tests, install the `test` extra and run `pytest`.

## Coordinates

`gridspace.spatial_info.SpatialInfo` is a mutable dataclass with `x`, `y` and
`z`. Its 2D helpers work on the XZ plane: `dist_2d`, `dot_2d`,
`magnitude_2d`, `normalize_2d` (in place) and `unit_2d` (a copy). Normalising
a zero vector gives NaN components.

`gridspace.spatial_info.BroadcastType` is an `int` bit mask whose
`check(value)` is true when any of its bits is set in `value`.

## The grid controller

```python
from gridspace.grid import StaticGrid2DSpatialController
from gridspace.spatial_info import SpatialInfo

ctl = StaticGrid2DSpatialController(
    grid_width=100, grid_height=50,
    grid_cols=9, grid_rows=8,
    world_offset_x=-450, world_offset_z=-200,
    server_cols=3, server_rows=4,
    server_interest_border_size=2,
)

ctl.get_channel_id(SpatialInfo(x=0, z=0))    # 65576
ctl.get_adjacent_channels(65536)             # [65537, 65545, 65546]
regions = ctl.get_regions()                  # one SpatialRegion per cell
```

- Channel ids start at `channel_id_start`, 65536 by default
  (`gridspace.grid.SPATIAL_CHANNEL_ID_START`). A cell's id is
  `channel_id_start + gridX + gridY * grid_cols`.
- `get_channel_id_no_offset` ignores the world offset;
  `get_channel_id_with_offset` takes one explicitly.
- A point outside the world raises `gridspace.grid.SpatialError`, a subclass
  of `ValueError`.
- `get_regions` lists cells row by row along X. Each `SpatialRegion` has
  `min`, `max`, `channel_id` and `server_index`. Its Y range is very large, so
  it covers the whole height.
- `world_width()`, `world_height()` and `grid_size()` give the world's size.
  `grid_size()` is the length of a cell's diagonal.

### Configuration

`load_config` takes a JSON object as text, bytes or a mapping. Its keys are
`GridWidth`, `GridHeight`, `GridCols`, `GridRows`, `WorldOffsetX`,
`WorldOffsetZ`, `ServerCols`, `ServerRows` and `ServerInterestBorderSize`, and
they match without regard to case. Unknown keys are ignored. Missing keys
keep their current values. A `SpatialError` is raised in these cases:

- a grid size, grid count or server count is not positive;
- the interest border size is not positive;
- a value has the wrong type.

`load_spatial_controller(path)` reads a JSON file whose `"Config"` object
holds those keys, and returns a new controller:

```python
from gridspace.grid import load_spatial_controller

ctl = load_spatial_controller("spatial_static_2x2.json")
```

## Area-of-interest queries

```python
import math
from gridspace.aoi import ConeAOI, SpatialInterestQuery, query_channel_ids
from gridspace.spatial_info import SpatialInfo

query = SpatialInterestQuery(
    cone_aoi=ConeAOI(
        center=SpatialInfo(x=5, z=5),
        direction=SpatialInfo(x=1, z=0),
        radius=100,
        angle=math.pi / 4,
    )
)
result = query_channel_ids(ctl, query)       # {channel_id: distance_level}
```

A query may combine `SpotsAOI`, `BoxAOI`, `SphereAOI` and `ConeAOI`, and the
results of all of them go into one mapping.

- **Distance level.** For a box, sphere or cone, a channel's distance level is
  its distance from the centre in cell diagonals, rounded up. The channel
  that holds the centre is always 0.
- **Spots.** Each spot takes its matching entry in `dists`, or 0 if it has
  none. Spots outside the world are skipped.
- **Errors.** `SpatialError` is raised in these cases:
  - the query is `None`;
  - an extent or radius is not positive;
  - a box, sphere or cone has its centre outside the world.

## Connection state machine

```python
from gridspace.fsm import load

with open("server_conn_fsm.json", "rb") as fh:
    fsm = load(fh.read())

fsm.is_allowed(1)
fsm.on_received(1)       # follows the current state's transition, if any
fsm.current_state().name
```

The JSON has `States` (each with `Name`, `MsgTypeWhitelist` and
`MsgTypeBlacklist`), `Transitions` (`FromState`, `ToState`, `MsgType`) and an
optional `InitState`.

- **Type lists.** Lists are text such as `"1, 2-10, 30"`. A blacklist entry
  overrides the whitelist. Types that are not listed are not allowed.
  Segments that cannot be parsed are logged and skipped, and so are
  transitions that name an unknown state.
- **Starting state.** Without `InitState`, the machine starts in the first
  state.
- **Moving between states.** `change_state(name)` raises `ValueError` for an
  unknown name. `move_to_next_state()` moves to the state listed after the
  current one and returns whether it did.
- **Parsing on its own.** `parse_msg_types` yields the types in such a list.

## Other helpers

- `gridspace.handover.check_entity_handover(net_id, new_loc, old_loc)`
  compares two Z-up `FVector` locations. Their components are rounded to
  32-bit floats. A component of `new_loc` that is `None` keeps its old value.
  - If the location changed, it returns `(old_info, new_info)` as Y-up
    `SpatialInfo`.
  - If it did not change, it returns `None`.
- `gridspace.util`:
  - `get_next_id(mapping, start, min_id, max_id)` returns the first id from
    `start`, wrapping within the range, that is not in `mapping`. It raises
    `LookupError` when the range is full.
  - `hash_string(s)` returns a 32-bit string hash.
  - `difference(a, b)` returns the entries of `a` whose keys are not in `b`.
  - `get_ip(addr)` returns the host part of a socket address tuple, an
    `ipaddress` object or a `"host:port"` string.

## What this package does not do

`gridspace` only calculates. It keeps no channels and no connections:

- it does not create, subscribe or remove spatial channels;
- it does not assign grids to connected servers;
- it does not move entity data between channels when an entity crosses a
  cell border;
- it has no network client or server and no command-line program.