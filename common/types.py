"""
Type Definitions for Geodesic Computations.

This module defines the value types exchanged between the solvers and
their callers. Angles are in DEGREES throughout; lengths are in the unit of
the ellipsoid's semi-major axis (meters for WGS84) and areas in that unit
squared.

Design Rationale
----------------
The solvers themselves only take and return scalars. These types bundle the
scalars for callers:
1. `GeodesicPoint` validates latitude once at the boundary
2. `GeodesicResult` carries every quantity a solver can produce, with NaN
   marking quantities that were not requested
3. `PolygonResult` unpacks like the (count, area, perimeter) triple
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Tuple


@dataclass(frozen=True)
class GeodesicPoint:
    """A geographic position on the ellipsoid.

    Attributes
    ----------
    lat : float
        Geodetic latitude in DEGREES. Range: [-90, 90].
    lon : float
        Geodetic longitude in DEGREES, normalized to (-180, 180].

    Notes
    -----
    - Latitude is positive north, negative south.
    - Longitude is positive east, negative west.
    - NaN coordinates are accepted and propagate through the solvers.

    Examples
    --------
    >>> p = GeodesicPoint(lat=51.4778, lon=359.9985)
    >>> round(p.lon, 4)
    -0.0015
    """
    lat: float
    lon: float

    def __post_init__(self):
        """Validate latitude and normalize longitude."""
        lat = float(self.lat)
        if abs(lat) > 90:
            raise ValueError(
                f"Latitude {lat} deg out of range [-90, 90]. "
                f"Did you swap latitude and longitude?"
            )
        lon = float(self.lon)
        # Same reduction as geospatial.geomath.ang_normalize (common cannot
        # import geospatial); tests/test_ellipsoid.py keeps the two in step.
        if math.isfinite(lon):
            lon = math.remainder(lon, 360.0)
            if lon == -180.0:
                lon = 180.0
        else:
            lon = math.nan
        object.__setattr__(self, "lat", lat)
        object.__setattr__(self, "lon", lon)

    def as_tuple(self) -> Tuple[float, float]:
        """Return ``(lat, lon)`` in degrees."""
        return self.lat, self.lon


@dataclass
class GeodesicResult:
    """Outcome of a direct, inverse or line-position computation.

    Attributes
    ----------
    lat1, lon1 : float
        First point in degrees.
    azi1 : float
        Azimuth at the first point in degrees, clockwise from north.
    lat2, lon2 : float
        Second point in degrees.
    azi2 : float
        Forward azimuth at the second point in degrees.
    s12 : float
        Distance between the points along the geodesic.
    a12 : float
        Arc length on the auxiliary sphere in degrees.
    m12 : float
        Reduced length of the geodesic.
    M12, M21 : float
        Geodesic scales (dimensionless).
    S12 : float
        Area between the geodesic and the equator.

    Quantities that were not requested through the capability mask are NaN.
    """
    lat1: float = math.nan
    lon1: float = math.nan
    azi1: float = math.nan
    lat2: float = math.nan
    lon2: float = math.nan
    azi2: float = math.nan
    s12: float = math.nan
    a12: float = math.nan
    m12: float = math.nan
    M12: float = math.nan
    M21: float = math.nan
    S12: float = math.nan

    @property
    def point1(self) -> GeodesicPoint:
        """First point as a `GeodesicPoint`."""
        return GeodesicPoint(self.lat1, self.lon1)

    @property
    def point2(self) -> GeodesicPoint:
        """Second point as a `GeodesicPoint`."""
        return GeodesicPoint(self.lat2, self.lon2)

    @property
    def distance(self) -> float:
        return self.s12

    @property
    def arc_length(self) -> float:
        return self.a12

    @property
    def reduced_length(self) -> float:
        return self.m12

    @property
    def scale12(self) -> float:
        return self.M12

    @property
    def scale21(self) -> float:
        return self.M21

    @property
    def area(self) -> float:
        return self.S12


class PolygonResult(NamedTuple):
    """Running totals reported by a polygon accumulator.

    Attributes
    ----------
    num : int
        Number of vertices.
    area : float
        Enclosed area (0 for a polyline).
    perimeter : float
        Perimeter of the polygon or length of the polyline.
    """
    num: int
    area: float
    perimeter: float
