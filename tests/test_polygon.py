import math

import numpy as np
import pytest

from common.types import GeodesicPoint
from geospatial.ellipsoid import WGS84
from geospatial.polygon import GeodesicPolygon, _transit, _transit_direct


def planimeter(wgs84, points, polyline=False):
    polygon = GeodesicPolygon(wgs84, polyline)
    for lat, lon in points:
        polygon.add_point(lat, lon)
    return polygon.compute(reverse=False, signed=True)


def test_polar_cap_north(wgs84):
    num, area, perimeter = planimeter(wgs84, [(89, 0), (89, 90), (89, 180), (89, 270)])
    assert num == 4
    assert perimeter == pytest.approx(631819.8745, abs=1e-4)
    assert area == pytest.approx(24952305678.0, abs=1)


def test_polar_cap_south(wgs84):
    _, area, perimeter = planimeter(wgs84, [(-89, 0), (-89, 90), (-89, 180), (-89, 270)])
    assert perimeter == pytest.approx(631819.8745, abs=1e-4)
    assert area == pytest.approx(-24952305678.0, abs=1)


def test_diamond_at_the_origin(wgs84):
    _, area, perimeter = planimeter(wgs84, [(0, -1), (-1, 0), (0, 1), (1, 0)])
    assert perimeter == pytest.approx(627598.2731, abs=1e-4)
    assert area == pytest.approx(24619419146.0, abs=1)


def test_octant(wgs84):
    _, area, perimeter = planimeter(wgs84, [(90, 0), (0, 0), (0, 90)])
    assert perimeter == pytest.approx(30022685, abs=1)
    assert area == pytest.approx(63758202715511.0, abs=1)


def test_octant_as_polyline(wgs84):
    num, area, perimeter = planimeter(wgs84, [(90, 0), (0, 0), (0, 90)], polyline=True)
    assert num == 3
    assert perimeter == pytest.approx(20020719, abs=1)
    assert area == 0.0


def test_polygon_around_the_pole_with_unnormalized_longitudes(wgs84):
    _, area, perimeter = planimeter(wgs84, [(89, 0.1), (89, 90.1), (89, -179.9)])
    assert perimeter == pytest.approx(539297, abs=1)
    assert area == pytest.approx(12476152838.5, abs=1)


@pytest.mark.parametrize(
    "points",
    [
        [(9, -0.00000000000001), (9, 180), (9, 0)],
        [(9, 0.00000000000001), (9, 0), (9, 180)],
        [(9, 0.00000000000001), (9, 180), (9, 0)],
        [(9, -0.00000000000001), (9, 0), (9, 180)],
    ],
)
def test_degenerate_polygon_through_the_pole(wgs84, points):
    _, area, perimeter = planimeter(wgs84, points)
    assert perimeter == pytest.approx(36026861, abs=1)
    assert area == pytest.approx(0, abs=1)


def test_longitudes_beyond_360(wgs84):
    points = [(89, -360), (89, -240), (89, -120), (89, 0), (89, 120), (89, 240)]
    _, area, perimeter = planimeter(wgs84, points)
    assert perimeter == pytest.approx(1160741, abs=1)
    assert area == pytest.approx(32415230256.0, abs=1)


def test_fewer_than_two_points(wgs84):
    polygon = GeodesicPolygon(wgs84)
    assert polygon.compute() == (0, 0.0, 0.0)
    polygon.add_point(10, 10)
    assert polygon.compute() == (1, 0.0, 0.0)


def test_reverse_and_unsigned(wgs84):
    # Clockwise traversal gives a negative signed area.
    clockwise = [(0, 0), (1, 0), (1, 1), (0, 1)]
    polygon = GeodesicPolygon(wgs84)
    for lat, lon in clockwise:
        polygon.add_point(lat, lon)
    _, signed_area, _ = polygon.compute()
    assert signed_area < 0

    _, reversed_area, _ = polygon.compute(reverse=True)
    assert reversed_area == pytest.approx(-signed_area)

    # Unsigned: the region to the left of a clockwise ring is everything else.
    _, unsigned_area, _ = polygon.compute(signed=False)
    assert unsigned_area == pytest.approx(WGS84.area + signed_area)


def test_add_edge_on_empty_polygon_is_ignored(wgs84):
    polygon = GeodesicPolygon(wgs84)
    polygon.add_edge(90, 1000)
    assert polygon.num == 0
    assert polygon.test_edge(90, 1000) == (0, 0.0, 0.0)


def test_add_edge_matches_add_point(wgs84):
    by_edges = GeodesicPolygon(wgs84)
    by_edges.add_point(0, 0)
    by_edges.add_edge(90, 1e5)
    by_edges.add_edge(0, 1e5)
    by_edges.add_edge(270, 1e5)

    corners = [(0, 0)]
    lat, lon = 0, 0
    for azi in (90, 0, 270):
        r = wgs84.direct(lat, lon, azi, 1e5)
        lat, lon = r.lat2, r.lon2
        corners.append((lat, lon))
    by_points = GeodesicPolygon(wgs84)
    for lat, lon in corners:
        by_points.add_point(lat, lon)

    num, area, perimeter = by_edges.compute()
    assert num == 4
    expected = by_points.compute()
    assert area == pytest.approx(expected.area, rel=1e-9)
    assert perimeter == pytest.approx(expected.perimeter, rel=1e-12)


def test_test_point_leaves_polygon_unchanged(wgs84):
    polygon = GeodesicPolygon(wgs84)
    for lat, lon in [(0, 0), (0, 1), (1, 1)]:
        polygon.add_point(lat, lon)
    before = polygon.compute()

    tentative = polygon.test_point(1, 0)
    assert polygon.num == 3
    assert polygon.compute() == before

    polygon.add_point(1, 0)
    committed = polygon.compute()
    assert tentative.num == committed.num == 4
    assert tentative.area == pytest.approx(committed.area, rel=1e-9)
    assert tentative.perimeter == pytest.approx(committed.perimeter, rel=1e-12)


def test_test_edge_leaves_polygon_unchanged(wgs84):
    polygon = GeodesicPolygon(wgs84)
    polygon.add_point(0, 0)
    polygon.add_point(0, 1)
    before = polygon.compute()

    tentative = polygon.test_edge(0, 1e5)
    assert polygon.compute() == before

    polygon.add_edge(0, 1e5)
    committed = polygon.compute()
    assert tentative.num == committed.num == 3
    assert tentative.area == pytest.approx(committed.area, rel=1e-9)
    assert tentative.perimeter == pytest.approx(committed.perimeter, rel=1e-12)


def edge_square(wgs84, lat, lon):
    polygon = GeodesicPolygon(wgs84)
    polygon.add_point(lat, lon)
    for azi in (90, 0, 270):
        polygon.add_edge(azi, 1e5)
    return polygon


def test_add_edge_ring_starting_on_the_prime_meridian(wgs84):
    # Moving the same shape in longitude must not change its area.
    on_meridian = edge_square(wgs84, 0, 0).compute()
    shifted = edge_square(wgs84, 0, 0.5).compute()
    assert shifted.area == pytest.approx(5000206228.99, rel=1e-6)
    assert on_meridian.area == pytest.approx(shifted.area, rel=1e-9)
    assert on_meridian.perimeter == pytest.approx(shifted.perimeter, rel=1e-12)


def test_test_edge_from_the_prime_meridian(wgs84):
    polygon = GeodesicPolygon(wgs84)
    polygon.add_point(0, 0)
    tentative = polygon.test_edge(90, 1e5)
    # Two vertices on the equator enclose nothing.
    assert tentative.area == pytest.approx(0, abs=1)


def test_add_edge_ring_across_the_prime_meridian(wgs84):
    across = edge_square(wgs84, 10, -0.4).compute()
    away = edge_square(wgs84, 10, 20).compute()
    assert across.area > 0
    assert across.area == pytest.approx(away.area, rel=1e-9)


def test_meridian_crossing_counts_agree_in_parity():
    assert _transit_direct(0.0, 0.9) == 0
    assert _transit_direct(0.9, 0.0) == 0
    assert _transit_direct(-0.5, 0.5) % 2 == _transit(-0.5, 0.5) % 2 == 1
    assert _transit_direct(0.5, -0.5) % 2 == _transit(0.5, -0.5) % 2 == 1
    assert _transit_direct(350.0, 370.0) % 2 == 1
    assert _transit_direct(-361.0, -350.0) % 2 == 1
    assert _transit_direct(-360.0, -350.0) == 0
    assert _transit_direct(10.0, 20.0) == 0


def test_test_point_on_empty_polygon(wgs84):
    assert GeodesicPolygon(wgs84).test_point(10, 10) == (1, 0.0, 0.0)


def test_polyline_never_reports_area(wgs84):
    polyline = GeodesicPolygon(wgs84, polyline=True)
    polyline.add_point(0, 0)
    polyline.add_point(0, 1)
    polyline.add_edge(0, 1e5)
    assert polyline.compute().area == 0.0
    assert polyline.test_point(1, 0).area == 0.0
    assert polyline.test_edge(270, 1e5).area == 0.0
    # The open path is one degree of equator plus 100 km.
    expected = wgs84.inverse(0, 0, 0, 1).s12 + 1e5
    assert polyline.compute().perimeter == pytest.approx(expected)


def test_clear(wgs84):
    polygon = GeodesicPolygon(wgs84)
    for lat, lon in [(0, 0), (0, 1), (1, 1)]:
        polygon.add_point(lat, lon)
    polygon.clear()
    assert polygon.num == 0
    assert polygon.compute() == (0, 0.0, 0.0)


def test_geodesic_polygon_factory(wgs84):
    polygon = wgs84.polygon()
    assert isinstance(polygon, GeodesicPolygon)
    assert polygon.geodesic is wgs84
    assert wgs84.polygon(polyline=True).polyline


def test_add_point_rejects_bad_latitude(wgs84):
    with pytest.raises(ValueError):
        GeodesicPolygon(wgs84).add_point(100, 0)


def test_static_area_accepts_several_input_forms(wgs84):
    ring = [(0, 0), (0, 1), (1, 1), (1, 0)]
    expected = planimeter(wgs84, ring)

    area, perimeter = GeodesicPolygon.area(ring, wgs84)
    assert (area, perimeter) == (expected.area, expected.perimeter)
    assert area > 0

    area, perimeter = GeodesicPolygon.area(np.array(ring, dtype=float))
    assert area == pytest.approx(expected.area)

    points = [GeodesicPoint(lat, lon) for lat, lon in ring]
    assert GeodesicPolygon.area(points, wgs84) == (area, perimeter)


def test_static_area_of_nothing():
    assert GeodesicPolygon.area([]) == (0.0, 0.0)


def test_static_area_rejects_bad_shape():
    with pytest.raises(ValueError):
        GeodesicPolygon.area(np.zeros((3, 3)))


def test_nan_vertex_propagates(wgs84):
    _, area, perimeter = planimeter(wgs84, [(0, 0), (0, 1), (math.nan, 1)])
    assert math.isnan(area)
    assert math.isnan(perimeter)
