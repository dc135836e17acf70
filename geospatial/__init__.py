"""
Geodesics on an Ellipsoid of Revolution.

All Earth-surface geometry in this package originates here:
- Reference ellipsoids (WGS84, GRS80, custom)
- Direct and inverse geodesic problems
- Geodesic lines for fast repeated positions along one geodesic
- Geodesic polygon area and perimeter
- Degree-based distance helpers on WGS84
"""

from geospatial.ellipsoid import Ellipsoid, WGS84, GRS80
from geospatial.masks import GeodesicMask, GeodesicFlags
from geospatial.accumulator import Accumulator
from geospatial.geodesic import Geodesic
from geospatial.geodesic_line import GeodesicLine
from geospatial.polygon import GeodesicPolygon

from geospatial.distance_calculations import (
    geodesic_inverse,
    geodesic_direct,
    compute_azimuth,
    geodesic_distance,
    geodesic_distance_batch,
    interpolate_geodesic,
    compute_heading_change,
)

__all__ = [
    # Ellipsoid model
    "Ellipsoid",
    "WGS84",
    "GRS80",
    # Solvers
    "GeodesicMask",
    "GeodesicFlags",
    "Accumulator",
    "Geodesic",
    "GeodesicLine",
    "GeodesicPolygon",
    # Distance helpers
    "geodesic_inverse",
    "geodesic_direct",
    "compute_azimuth",
    "geodesic_distance",
    "geodesic_distance_batch",
    "interpolate_geodesic",
    "compute_heading_change",
]
