"""Cross-check against pyproj.Geod, an independent build of the same algorithms."""

import numpy as np
import pytest

from geospatial.geomath import ang_diff
from geospatial.polygon import GeodesicPolygon

pyproj = pytest.importorskip("pyproj")


@pytest.fixture(scope="module")
def geod():
    return pyproj.Geod(ellps="WGS84")


def angle_error(a: float, b: float) -> float:
    d, e = ang_diff(a, b)
    return abs(d + e)


def test_inverse_matches_pyproj(wgs84, geod, rng):
    lat1, lat2 = rng.uniform(-85, 85, size=(2, 200))
    lon1, lon2 = rng.uniform(-180, 180, size=(2, 200))
    for la1, lo1, la2, lo2 in zip(lat1, lon1, lat2, lon2):
        ours = wgs84.inverse(la1, lo1, la2, lo2)
        az12, az21, dist = geod.inv(lo1, la1, lo2, la2)
        assert ours.s12 == pytest.approx(dist, abs=1e-6)
        assert angle_error(ours.azi1, az12) < 1e-8
        # pyproj reports the back azimuth at point 2.
        assert angle_error(ours.azi2 + 180.0, az21) < 1e-8


def test_direct_matches_pyproj(wgs84, geod, rng):
    lat1 = rng.uniform(-85, 85, size=200)
    lon1 = rng.uniform(-180, 180, size=200)
    azi1 = rng.uniform(-180, 180, size=200)
    s12 = rng.uniform(0, 1.5e7, size=200)
    for la1, lo1, az1, s in zip(lat1, lon1, azi1, s12):
        ours = wgs84.direct(la1, lo1, az1, s)
        lon2, lat2, back = geod.fwd(lo1, la1, az1, s)
        assert ours.lat2 == pytest.approx(lat2, abs=1e-10)
        assert angle_error(ours.lon2, lon2) < 1e-10
        assert angle_error(ours.azi2 + 180.0, back) < 1e-8


def test_polygon_matches_pyproj(wgs84, geod):
    lats = np.array([51.5, 48.9, 52.5, 55.7, 59.3])
    lons = np.array([-0.1, 2.35, 13.4, 12.6, 18.1])
    area, perimeter = GeodesicPolygon.area(np.column_stack([lats, lons]), wgs84)
    ref_area, ref_perimeter = geod.polygon_area_perimeter(lons, lats)
    assert area == pytest.approx(ref_area, rel=1e-9)
    assert perimeter == pytest.approx(ref_perimeter, rel=1e-12)


def test_line_points_match_pyproj(wgs84, geod):
    line = wgs84.inverse_line(40.6, -73.8, 35.7, 139.7)
    ours = [line.position(line.distance * i / 8) for i in range(1, 8)]
    theirs = geod.npts(-73.8, 40.6, 139.7, 35.7, 7)
    for point, (lon, lat) in zip(ours, theirs):
        assert point.lat == pytest.approx(lat, abs=1e-9)
        assert angle_error(point.lon, lon) < 1e-9
