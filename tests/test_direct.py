import math

import pytest

from geospatial.geomath import ang_diff
from geospatial.masks import GeodesicFlags, GeodesicMask


def lon_delta(a: float, b: float) -> float:
    d, e = ang_diff(a, b)
    return abs(d + e)


def test_jfk_heading_towards_cdg(wgs84):
    r = wgs84.direct(40.63972222, -73.77888889, 53.5, 5850e3)
    assert r.lat2 == pytest.approx(49.01467, abs=0.5e-5)
    assert r.lon2 == pytest.approx(2.56106, abs=0.5e-5)
    assert r.azi2 == pytest.approx(111.62947, abs=0.5e-5)
    assert r.s12 == 5850e3
    assert math.isfinite(r.a12)


def test_direct_through_the_pole(wgs84):
    r = wgs84.direct(0.01777745589997, 30, 0, 10e6)
    assert r.lat2 == pytest.approx(90, abs=0.5e-5)
    # Just at the pole the longitude is ill-defined; either side is fine.
    if r.lon2 < 0:
        assert r.lon2 == pytest.approx(-150, abs=0.5e-5)
        assert abs(r.azi2) == pytest.approx(180, abs=0.5e-5)
    else:
        assert r.lon2 == pytest.approx(30, abs=0.5e-5)
        assert r.azi2 == pytest.approx(0, abs=0.5e-5)


def test_area_on_prolate_ellipsoid(prolate):
    r = prolate.general_direct(1, 2, 3, 4, outmask=GeodesicMask.AREA)
    assert r.S12 == pytest.approx(23700, abs=0.5)


def test_long_unroll_in_direct(wgs84):
    r = wgs84.general_direct(40, -75, -10, 2e7, flags=GeodesicFlags.LONG_UNROLL)
    assert r.lat2 == pytest.approx(-39, abs=1)
    assert r.lon2 == pytest.approx(-254, abs=1)
    assert r.azi2 == pytest.approx(-170, abs=1)

    r = wgs84.general_direct(40, -75, -10, 2e7)
    assert r.lon2 == pytest.approx(105, abs=1)


def test_arc_length_on_flattened_ellipsoid():
    from geospatial.ellipsoid import Ellipsoid
    from geospatial.geodesic import Geodesic

    geod = Geodesic(Ellipsoid(6.4e6, 0.1))
    r = geod.general_direct(1, 2, 10, 5e6)
    assert r.a12 == pytest.approx(48.55570690, abs=0.5e-8)


def test_tiny_negative_azimuth_reaches_antimeridian(wgs84):
    r = wgs84.general_direct(45, 0, -0.000000000000000003, 1e7,
                             flags=GeodesicFlags.LONG_UNROLL)
    assert r.lat2 == pytest.approx(45.30632, abs=0.5e-5)
    assert r.lon2 == pytest.approx(-180, abs=0.5e-5)
    assert abs(r.azi2) == pytest.approx(180, abs=0.5e-5)


def test_backwards_from_the_pole(wgs84):
    r = wgs84.direct(90, 10, 180, -1e6)
    assert r.lat2 == pytest.approx(81.04623, abs=0.5e-5)
    assert r.lon2 == pytest.approx(-170, abs=0.5e-5)
    assert r.azi2 == pytest.approx(0, abs=0.5e-5)


def test_zero_distance_returns_start(wgs84):
    r = wgs84.direct(12.5, -45.25, 33.0, 0.0)
    assert r.lat2 == pytest.approx(12.5, abs=1e-12)
    assert r.lon2 == pytest.approx(-45.25, abs=1e-12)
    assert r.azi2 == pytest.approx(33.0, abs=1e-12)
    assert r.a12 == pytest.approx(0.0, abs=1e-12)


def test_equator_eastward_on_a_sphere(sphere):
    quarter = math.pi * 6.4e6 / 2
    r = sphere.direct(0, 0, 90, quarter)
    assert r.lat2 == pytest.approx(0, abs=1e-12)
    assert r.lon2 == pytest.approx(90, abs=1e-10)
    assert r.a12 == pytest.approx(90, abs=1e-10)


def test_arc_direct_matches_distance_direct(wgs84):
    by_distance = wgs84.general_direct(-20, 130, 75, 3e6)
    by_arc = wgs84.arc_direct(-20, 130, 75, by_distance.a12)
    assert by_arc.lat2 == pytest.approx(by_distance.lat2, abs=1e-12)
    assert lon_delta(by_arc.lon2, by_distance.lon2) < 1e-12
    assert by_arc.s12 == pytest.approx(3e6, abs=1e-6)


def test_direct_inverse_round_trip(wgs84, rng):
    for _ in range(50):
        lat1 = rng.uniform(-89, 89)
        lon1 = rng.uniform(-180, 180)
        azi1 = rng.uniform(-180, 180)
        s12 = rng.uniform(1e3, 1.9e7)
        direct = wgs84.direct(lat1, lon1, azi1, s12)
        inverse = wgs84.inverse(lat1, lon1, direct.lat2, direct.lon2)
        assert inverse.s12 == pytest.approx(s12, abs=1e-6)
        assert lon_delta(inverse.azi1, azi1) < 1e-9
        assert lon_delta(inverse.azi2, direct.azi2) < 1e-9


def test_reduced_length_and_scales_on_a_sphere(sphere):
    # On a sphere m12 = R sin(sigma12) and M12 = M21 = cos(sigma12).
    r = sphere.general_direct(10, 20, 30, 60, flags=GeodesicFlags.ARC_MODE)
    assert r.m12 == pytest.approx(6.4e6 * math.sin(math.radians(60)), rel=1e-12)
    assert r.M12 == pytest.approx(0.5, abs=1e-12)
    assert r.M21 == pytest.approx(0.5, abs=1e-12)
    assert r.s12 == pytest.approx(6.4e6 * math.radians(60), rel=1e-12)


def test_out_of_range_start_latitude_raises(wgs84):
    with pytest.raises(ValueError):
        wgs84.direct(95, 0, 0, 1000)


def test_nan_distance_propagates(wgs84):
    r = wgs84.direct(10, 10, 10, math.nan)
    assert math.isnan(r.lat2)
    assert math.isnan(r.lon2)


def test_latitude_and_azimuth_always_come_back(wgs84):
    simple = wgs84.direct(1, 2, 3, 4e5)
    r = wgs84.general_direct(1, 2, 3, 4e5, outmask=GeodesicMask.AREA)
    assert math.isfinite(r.S12)
    assert r.lat2 == pytest.approx(simple.lat2, abs=1e-12)
    assert r.azi2 == pytest.approx(simple.azi2, abs=1e-12)
    assert math.isnan(r.lon2)

    r = wgs84.general_direct(1, 2, 3, 4e5, outmask=GeodesicMask.NONE)
    assert r.lat2 == pytest.approx(simple.lat2, abs=1e-12)
    assert r.azi2 == pytest.approx(simple.azi2, abs=1e-12)


def test_general_direct_agrees_with_direct(wgs84, rng):
    for _ in range(30):
        lat1 = rng.uniform(-90, 90)
        lon1 = rng.uniform(-180, 180)
        azi1 = rng.uniform(-180, 180)
        s12 = rng.uniform(0, 2e7)
        simple = wgs84.direct(lat1, lon1, azi1, s12)
        general = wgs84.general_direct(lat1, lon1, azi1, s12)
        for field in ("lat2", "lon2", "azi2", "s12", "a12"):
            assert getattr(general, field) == pytest.approx(
                getattr(simple, field), rel=1e-14, abs=1e-9
            )


def test_arc_mode_returns_the_arc_it_was_given(wgs84, rng):
    for _ in range(20):
        a12 = rng.uniform(0, 0.09)  # under about 10 km
        r = wgs84.general_direct(rng.uniform(-80, 80), rng.uniform(-180, 180),
                                 rng.uniform(-180, 180), a12,
                                 flags=GeodesicFlags.ARC_MODE)
        assert r.a12 == pytest.approx(a12, abs=1e-12)
        assert r.s12 < 1.1e4
