import numpy as np
import pytest

from geospatial.distance_calculations import (
    compute_azimuth,
    compute_heading_change,
    geodesic_direct,
    geodesic_distance,
    geodesic_distance_batch,
    geodesic_inverse,
    interpolate_geodesic,
)


def test_inverse_and_distance_agree():
    result = geodesic_inverse(40.6, -73.8, 49.01666667, 2.55)
    assert result.s12 == pytest.approx(5853226, abs=0.5)
    assert geodesic_distance(40.6, -73.8, 49.01666667, 2.55) == result.s12
    assert compute_azimuth(40.6, -73.8, 49.01666667, 2.55) == result.azi1


def test_direct_along_the_equator():
    lat, lon, azi = geodesic_direct(0.0, 0.0, 90.0, 1_000_000)
    assert lat == pytest.approx(0.0, abs=1e-12)
    assert lon == pytest.approx(np.degrees(1e6 / 6378137.0), abs=1e-10)
    assert azi == pytest.approx(90.0, abs=1e-12)


def test_batch_matches_scalar_and_broadcasts():
    lats = np.array([10.0, 20.0, -30.0])
    lons = np.array([0.0, 45.0, 170.0])
    distances = geodesic_distance_batch(0.0, 0.0, lats, lons)
    assert distances.shape == (3,)
    for d, lat, lon in zip(distances, lats, lons):
        assert d == geodesic_distance(0.0, 0.0, lat, lon)

    grid = geodesic_distance_batch(lats[:, None], lons[:, None], lats[None, :], lons[None, :])
    assert grid.shape == (3, 3)
    np.testing.assert_allclose(np.diag(grid), 0.0, atol=1e-9)
    np.testing.assert_allclose(grid, grid.T, rtol=1e-12)


def test_interpolate_geodesic_spacing():
    lats, lons = interpolate_geodesic(40.6, -73.8, 51.6, -0.5, 11)
    assert lats.shape == lons.shape == (11,)
    assert (lats[0], lons[0]) == (40.6, -73.8)
    assert (lats[-1], lons[-1]) == (51.6, -0.5)

    steps = [geodesic_distance(lats[i], lons[i], lats[i + 1], lons[i + 1])
             for i in range(10)]
    total = geodesic_distance(40.6, -73.8, 51.6, -0.5)
    np.testing.assert_allclose(steps, total / 10, rtol=1e-9)


def test_interpolate_geodesic_needs_two_points():
    with pytest.raises(ValueError):
        interpolate_geodesic(0, 0, 1, 1, 1)


@pytest.mark.parametrize(
    "h1, h2, expected",
    [(10.0, 30.0, 20.0), (350.0, 10.0, 20.0), (10.0, 350.0, -20.0),
     (0.0, 180.0, 180.0), (-170.0, 170.0, -20.0)],
)
def test_heading_change(h1, h2, expected):
    assert compute_heading_change(h1, h2) == pytest.approx(expected)
