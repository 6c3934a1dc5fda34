import math

import pytest

from gridspace.aoi import (
    BoxAOI,
    ConeAOI,
    SpatialInterestQuery,
    SphereAOI,
    SpotsAOI,
    query_channel_ids,
)
from gridspace.grid import SpatialError, StaticGrid2DSpatialController
from gridspace.spatial_info import SpatialInfo


def _ctl(offset_x, offset_z, width, height, cols, rows, server_cols=1, server_rows=1, border=0):
    return StaticGrid2DSpatialController(
        grid_width=width,
        grid_height=height,
        grid_cols=cols,
        grid_rows=rows,
        world_offset_x=offset_x,
        world_offset_z=offset_z,
        server_cols=server_cols,
        server_rows=server_rows,
        server_interest_border_size=border,
    )


def _cone(center, direction, radius, angle):
    return SpatialInterestQuery(
        cone_aoi=ConeAOI(
            center=SpatialInfo(*center),
            direction=SpatialInfo(*direction),
            radius=radius,
            angle=angle,
        )
    )


def test_cone_one_grid_world():
    ctl = _ctl(0, 0, 10, 10, 1, 1)
    result = query_channel_ids(ctl, _cone((5, 0, 5), (1, 0, 0), 1, math.pi / 4))
    assert 65536 in result


def test_cone_four_by_one_world():
    ctl = _ctl(0, 0, 10, 10, 4, 1)
    query = _cone((0, 0, 5), (1, 0, 0), 1, math.pi / 4)
    result = query_channel_ids(ctl, query)
    assert 65536 in result

    query.cone_aoi.radius = 25
    assert len(query_channel_ids(ctl, query)) == 3

    query.cone_aoi.radius = 100
    assert len(query_channel_ids(ctl, query)) == 4

    query.cone_aoi.direction = SpatialInfo(0, 0, 1)
    assert len(query_channel_ids(ctl, query)) == 1


def test_cone_three_by_three_world():
    ctl = _ctl(0, 0, 10, 10, 3, 3)
    query = _cone((5, 0, 5), (1, 0, 0), 100, 0.1)
    assert len(query_channel_ids(ctl, query)) == 3

    query.cone_aoi.angle = math.pi / 4
    assert len(query_channel_ids(ctl, query)) == 6

    query.cone_aoi.center = SpatialInfo(15, 0, 15)
    query.cone_aoi.direction = SpatialInfo(-1, 0, 0)
    assert len(query_channel_ids(ctl, query)) == 4

    query.cone_aoi.center = SpatialInfo(5, 0, 15)
    query.cone_aoi.direction = SpatialInfo(0, 0, -1)
    assert len(query_channel_ids(ctl, query)) == 3


def test_cone_with_offset_world():
    ctl = _ctl(-2000, -500, 1000, 1000, 4, 1, server_cols=2, border=1)
    query = _cone((1250, 118, 0), (-0.087, 0, 0.996), 30000, 0.5236)
    result = query_channel_ids(ctl, query)
    assert len(result) == 1
    assert result == {65539: 0}


def test_cone_does_not_mutate_direction():
    ctl = _ctl(0, 0, 10, 10, 3, 3)
    query = _cone((5, 0, 5), (3, 0, 4), 100, 0.1)
    query_channel_ids(ctl, query)
    assert query.cone_aoi.direction == SpatialInfo(3, 0, 4)


def test_sphere_one_grid_world():
    ctl = _ctl(0, 0, 10, 10, 1, 1)
    query = SpatialInterestQuery(sphere_aoi=SphereAOI(center=SpatialInfo(5, 0, 5), radius=1))
    assert 65536 in query_channel_ids(ctl, query)

    query.sphere_aoi.radius = 100
    assert 65536 in query_channel_ids(ctl, query)


def test_sphere_two_by_two_world():
    ctl = _ctl(-5, -5, 5, 5, 2, 2)
    query = SpatialInterestQuery(sphere_aoi=SphereAOI(center=SpatialInfo(0, 0, 0), radius=1))
    assert len(query_channel_ids(ctl, query)) == 4

    query.sphere_aoi.center.x = 4.9
    query.sphere_aoi.center.z = 4.9
    result = query_channel_ids(ctl, query)
    assert len(result) == 1
    assert 65539 in result

    query.sphere_aoi.radius = 4.9
    assert len(query_channel_ids(ctl, query)) == 1

    query.sphere_aoi.radius = 10
    assert len(query_channel_ids(ctl, query)) == 4


def test_sphere_three_by_three_world():
    ctl = _ctl(-150, -150, 100, 100, 3, 3)
    query = SpatialInterestQuery(sphere_aoi=SphereAOI(center=SpatialInfo(0, 0, 0), radius=150))
    assert len(query_channel_ids(ctl, query)) == 9

    query.sphere_aoi.radius = 99
    assert len(query_channel_ids(ctl, query)) == 5


def test_box_one_grid_world():
    ctl = _ctl(0, 0, 10, 10, 1, 1)
    query = SpatialInterestQuery(
        box_aoi=BoxAOI(center=SpatialInfo(5, 0, 5), extent=SpatialInfo(1, 0, 1))
    )
    assert query_channel_ids(ctl, query) == {65536: 0}

    query.box_aoi.extent.x = 100
    query.box_aoi.extent.z = 100
    assert 65536 in query_channel_ids(ctl, query)


def test_box_two_by_two_world():
    ctl = _ctl(-5, -5, 5, 5, 2, 2)
    query = SpatialInterestQuery(
        box_aoi=BoxAOI(center=SpatialInfo(0, 0, 0), extent=SpatialInfo(1, 0, 1))
    )
    assert len(query_channel_ids(ctl, query)) == 4

    query.box_aoi.center.x = 4.9
    query.box_aoi.center.z = 4.9
    result = query_channel_ids(ctl, query)
    assert len(result) == 1
    assert 65539 in result

    query.box_aoi.extent.x = 4.9
    query.box_aoi.extent.z = 4.9
    assert len(query_channel_ids(ctl, query)) == 1

    query.box_aoi.extent.z = 10
    result = query_channel_ids(ctl, query)
    assert len(result) == 2
    assert set(result) == {65537, 65539}


def test_box_three_by_three_world():
    ctl = _ctl(-150, -150, 100, 100, 3, 3)
    query = SpatialInterestQuery(
        box_aoi=BoxAOI(center=SpatialInfo(0, 0, 0), extent=SpatialInfo(150, 0, 150))
    )
    assert len(query_channel_ids(ctl, query)) == 9

    query.box_aoi.extent.x = 100
    query.box_aoi.extent.z = 100
    assert len(query_channel_ids(ctl, query)) == 9


def test_spots_with_and_without_distances():
    ctl = _ctl(-5, -5, 5, 5, 2, 2)
    query = SpatialInterestQuery(
        spots_aoi=SpotsAOI(
            spots=[SpatialInfo(-2, 0, -2), SpatialInfo(2, 0, 2), SpatialInfo(100, 0, 0)],
            dists=[3],
        )
    )
    assert query_channel_ids(ctl, query) == {65536: 3, 65539: 0}


def test_empty_query_gives_empty_result():
    ctl = _ctl(0, 0, 10, 10, 1, 1)
    assert query_channel_ids(ctl, SpatialInterestQuery()) == {}


def test_missing_query_raises():
    ctl = _ctl(0, 0, 10, 10, 1, 1)
    with pytest.raises(SpatialError):
        query_channel_ids(ctl, None)


@pytest.mark.parametrize(
    "query",
    [
        SpatialInterestQuery(
            box_aoi=BoxAOI(center=SpatialInfo(5, 0, 5), extent=SpatialInfo(1, 0, 0))
        ),
        SpatialInterestQuery(
            box_aoi=BoxAOI(center=SpatialInfo(5, 0, 5), extent=SpatialInfo(0, 0, 1))
        ),
        SpatialInterestQuery(sphere_aoi=SphereAOI(center=SpatialInfo(5, 0, 5), radius=0)),
        SpatialInterestQuery(
            cone_aoi=ConeAOI(
                center=SpatialInfo(5, 0, 5), direction=SpatialInfo(1, 0, 0), radius=-1, angle=1
            )
        ),
    ],
)
def test_non_positive_size_raises(query):
    ctl = _ctl(0, 0, 10, 10, 1, 1)
    with pytest.raises(SpatialError):
        query_channel_ids(ctl, query)


def test_center_outside_world_raises():
    ctl = _ctl(0, 0, 10, 10, 1, 1)
    query = SpatialInterestQuery(
        box_aoi=BoxAOI(center=SpatialInfo(50, 0, 50), extent=SpatialInfo(1, 0, 1))
    )
    with pytest.raises(SpatialError):
        query_channel_ids(ctl, query)


def test_center_channel_always_has_distance_zero():
    ctl = _ctl(-150, -150, 100, 100, 3, 3)
    query = SpatialInterestQuery(sphere_aoi=SphereAOI(center=SpatialInfo(0, 0, 0), radius=150))
    result = query_channel_ids(ctl, query)
    assert result[ctl.get_channel_id(SpatialInfo(0, 0, 0))] == 0
    assert all(level >= 0 for level in result.values())