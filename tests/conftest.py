import numpy as np
import pytest

from geospatial.ellipsoid import Ellipsoid, WGS84
from geospatial.geodesic import Geodesic


@pytest.fixture(scope="session")
def wgs84() -> Geodesic:
    # One solver is enough; it holds no per-call state.
    return Geodesic(WGS84)


@pytest.fixture(scope="session")
def sphere() -> Geodesic:
    # f = 0 turns every geodesic into a great circle, which gives closed forms to check against.
    return Geodesic(Ellipsoid(6.4e6, 0.0, name="sphere"))


@pytest.fixture(scope="session")
def prolate() -> Geodesic:
    return Geodesic(Ellipsoid(6.4e6, -1 / 150.0, name="prolate"))


@pytest.fixture
def rng() -> np.random.Generator:
    # Fixed seed so a failure can be reproduced.
    return np.random.default_rng(20240917)
