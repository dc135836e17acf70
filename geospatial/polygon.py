"""
Geodesic Polygon Area and Perimeter.

A polygon is built vertex by vertex (or edge by edge); its sides are
geodesics. The area is the sum over the edges of the area S12 between each
edge and the equator, reduced modulo the total area of the ellipsoid and
corrected for the number of times the boundary crosses the prime meridian.

Scientific Context
------------------
Because each S12 is measured from the equator, the per-edge contributions
are large and mostly cancel. The running sum is therefore kept in an
`Accumulator` (double-double) so that the area of a small polygon is
still accurate to roundoff after many edges.

Conventions
-----------
- Counter-clockwise traversal gives a positive area.
- A polygon encircling a pole is handled; its area is measured from the
  pole it encircles.
- A polyline only accumulates perimeter; its area is reported as 0.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy 87, 43-55,
  Sec. 6.
"""

import math
from typing import Iterable, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from common.logging_config import get_logger
from common.types import GeodesicPoint, PolygonResult
from geospatial.accumulator import Accumulator
from geospatial.geodesic import Geodesic
from geospatial.geomath import ang_diff, ang_normalize, check_latitude
from geospatial.masks import GeodesicMask

logger = get_logger(__name__)


def _transit(lon1: float, lon2: float) -> int:
    """+1 for an eastward crossing of the prime meridian, -1 westward, else 0.

    lon1 and lon2 are the end points of an edge found with the inverse
    solution, so the edge spans less than 180 degrees of longitude.
    """
    lon12, _ = ang_diff(lon1, lon2)
    lon1 = ang_normalize(lon1)
    lon2 = ang_normalize(lon2)
    if lon12 > 0 and ((lon1 < 0 <= lon2) or (lon1 > 0 and lon2 == 0)):
        return 1
    if lon12 < 0 and lon2 < 0 <= lon1:
        return -1
    return 0


def _transit_direct(lon1: float, lon2: float) -> int:
    """Prime-meridian crossings of an edge with unrolled longitudes.

    lon = 0 counts as east of the meridian, as in `_transit`.
    """
    # Only the parity and the direction matter, so fold into [-360, 360]
    lon1 = math.remainder(lon1, 720.0)
    lon2 = math.remainder(lon2, 720.0)
    return ((0 if 0 <= lon2 < 360 else 1)
            - (0 if 0 <= lon1 < 360 else 1))


def _reduce_area(area: float, area0: float, crossings: int,
                 reverse: bool, signed: bool) -> float:
    """Bring a raw area sum into the conventional range.

    Parameters
    ----------
    area : float
        Sum of the edge contributions.
    area0 : float
        Total area of the ellipsoid.
    crossings : int
        Net number of prime-meridian crossings. Only the parity matters.
    reverse : bool
        Treat clockwise traversal as positive.
    signed : bool
        Return a signed area in (-area0/2, area0/2]; otherwise the area
        in [0, area0).
    """
    area = math.remainder(area, area0)
    if crossings & 1:
        # An odd number of crossings means the polygon encircles a pole
        area += (1 if area < 0 else -1) * area0 / 2
    # The edge sums give the area to the right (clockwise positive)
    if not reverse:
        area *= -1
    if signed:
        if area > area0 / 2:
            area -= area0
        elif area <= -area0 / 2:
            area += area0
    else:
        if area >= area0:
            area -= area0
        elif area < 0:
            area += area0
    return 0.0 + area


def _reduce_accumulated_area(total: Accumulator, area0: float, crossings: int,
                             reverse: bool, signed: bool) -> float:
    """`_reduce_area` on an Accumulator, keeping the extra precision."""
    total.remainder(area0)
    if crossings & 1:
        total.add((1 if total.sum() < 0 else -1) * area0 / 2)
    if not reverse:
        total.negate()
    if signed:
        if total.sum() > area0 / 2:
            total.add(-area0)
        elif total.sum() <= -area0 / 2:
            total.add(area0)
    else:
        if total.sum() >= area0:
            total.add(-area0)
        elif total.sum() < 0:
            total.add(area0)
    return 0.0 + total.sum()


class GeodesicPolygon:
    """Incremental computation of geodesic polygon area and perimeter.

    Parameters
    ----------
    geodesic : Geodesic, optional
        Solver defining the ellipsoid. Default: WGS84.
    polyline : bool
        If True, only the length of an open path is accumulated.

    Examples
    --------
    >>> poly = GeodesicPolygon()
    >>> for lat, lon in [(0, 0), (0, 1), (1, 1), (1, 0)]:
    ...     poly.add_point(lat, lon)
    >>> result = poly.compute()
    >>> result.num
    4
    """

    def __init__(self, geodesic: Optional[Geodesic] = None,
                 polyline: bool = False):
        self.geodesic = geodesic if geodesic is not None else Geodesic()
        self.polyline = polyline
        self.area0 = self.geodesic.ellipsoid.area
        self._mask = (GeodesicMask.LATITUDE | GeodesicMask.LONGITUDE
                      | GeodesicMask.DISTANCE)
        if not polyline:
            # Unrolled longitudes let add_edge count crossings
            self._mask |= GeodesicMask.AREA | GeodesicMask.LONG_UNROLL
        self._areasum = Accumulator()
        self._perimetersum = Accumulator()
        self.clear()

    def clear(self) -> None:
        """Remove all vertices."""
        self._num = 0
        self._crossings = 0
        self._areasum.set(0.0)
        self._perimetersum.set(0.0)
        self._lat0 = self._lon0 = math.nan
        self.lat1 = self.lon1 = math.nan

    @property
    def num(self) -> int:
        """Number of vertices added so far."""
        return self._num

    def add_point(self, lat: float, lon: float) -> None:
        """Append a vertex, joined to the previous one by a geodesic.

        Raises
        ------
        ValueError
            If |lat| > 90.
        """
        check_latitude(lat)
        if self._num == 0:
            self._lat0 = self.lat1 = lat
            self._lon0 = self.lon1 = lon
        else:
            _, s12, _, _, _, _, _, _, _, S12 = self.geodesic._gen_inverse(
                self.lat1, self.lon1, lat, lon, self._mask
            )
            self._perimetersum.add(s12)
            if not self.polyline:
                self._areasum.add(S12)
                self._crossings += _transit(self.lon1, lon)
            self.lat1 = lat
            self.lon1 = lon
        self._num += 1

    def add_edge(self, azi: float, s: float) -> None:
        """Append a vertex reached from the last one by azimuth and distance.

        Does nothing if there is no vertex yet.
        """
        if self._num == 0:
            logger.debug("add_edge called on an empty polygon; ignored")
            return
        _, lat, lon, _, _, _, _, _, S12 = self.geodesic._gen_direct(
            self.lat1, self.lon1, azi, False, s, self._mask
        )
        self._perimetersum.add(s)
        if not self.polyline:
            self._areasum.add(S12)
            self._crossings += _transit_direct(self.lon1, lon)
        self.lat1 = lat
        self.lon1 = lon
        self._num += 1

    def compute(self, reverse: bool = False,
                signed: bool = True) -> PolygonResult:
        """Area and perimeter of the polygon closed back to its first vertex.

        Parameters
        ----------
        reverse : bool
            If True, clockwise traversal counts as positive area.
        signed : bool
            If True, return a signed area; otherwise the area in
            [0, total ellipsoid area).

        Returns
        -------
        PolygonResult
            (num, area, perimeter). For a polyline the perimeter is the
            open path length and the area is 0.
        """
        if self._num < 2:
            return PolygonResult(self._num, 0.0, 0.0)
        if self.polyline:
            return PolygonResult(self._num, 0.0, self._perimetersum.sum())

        _, s12, _, _, _, _, _, _, _, S12 = self.geodesic._gen_inverse(
            self.lat1, self.lon1, self._lat0, self._lon0, self._mask
        )
        perimeter = self._perimetersum.sum(s12)
        total = self._areasum.copy()
        total.add(S12)
        crossings = self._crossings + _transit(self.lon1, self._lon0)
        area = _reduce_accumulated_area(total, self.area0, crossings,
                                        reverse, signed)
        return PolygonResult(self._num, area, perimeter)

    def test_point(self, lat: float, lon: float, reverse: bool = False,
                   signed: bool = True) -> PolygonResult:
        """Result compute() would give after add_point(lat, lon).

        The polygon itself is left unchanged.
        """
        check_latitude(lat)
        if self._num == 0:
            return PolygonResult(1, 0.0, 0.0)

        perimeter = self._perimetersum.copy()
        area = self._areasum.sum()
        crossings = self._crossings
        # The tentative edge and, for a polygon, the closing edge
        edges = [(self.lat1, self.lon1, lat, lon)]
        if not self.polyline:
            edges.append((lat, lon, self._lat0, self._lon0))
        for elat1, elon1, elat2, elon2 in edges:
            _, s12, _, _, _, _, _, _, _, S12 = self.geodesic._gen_inverse(
                elat1, elon1, elat2, elon2, self._mask
            )
            perimeter.add(s12)
            if not self.polyline:
                area += S12
                crossings += _transit(elon1, elon2)

        if self.polyline:
            return PolygonResult(self._num + 1, 0.0, perimeter.sum())
        area = _reduce_area(area, self.area0, crossings, reverse, signed)
        return PolygonResult(self._num + 1, area, perimeter.sum())

    def test_edge(self, azi: float, s: float, reverse: bool = False,
                  signed: bool = True) -> PolygonResult:
        """Result compute() would give after add_edge(azi, s).

        The polygon itself is left unchanged. With no vertices there is
        nothing to extend and the result is (0, 0, 0).
        """
        if self._num == 0:
            return PolygonResult(0, 0.0, 0.0)

        perimeter = self._perimetersum.copy()
        perimeter.add(s)
        if self.polyline:
            return PolygonResult(self._num + 1, 0.0, perimeter.sum())

        area = self._areasum.sum()
        crossings = self._crossings
        _, lat, lon, _, _, _, _, _, S12 = self.geodesic._gen_direct(
            self.lat1, self.lon1, azi, False, s, self._mask
        )
        area += S12
        crossings += _transit_direct(self.lon1, lon)
        _, s12, _, _, _, _, _, _, _, S12 = self.geodesic._gen_inverse(
            lat, lon, self._lat0, self._lon0, self._mask
        )
        perimeter.add(s12)
        area += S12
        crossings += _transit(lon, self._lon0)
        area = _reduce_area(area, self.area0, crossings, reverse, signed)
        return PolygonResult(self._num + 1, area, perimeter.sum())

    @staticmethod
    def area(coordinates: Union[NDArray, Iterable],
             geodesic: Optional[Geodesic] = None) -> Tuple[float, float]:
        """Signed area and perimeter of a closed polygon.

        Parameters
        ----------
        coordinates : array_like or iterable
            Vertices as (lat, lon) pairs in DEGREES, `GeodesicPoint`s, or an
            (N, 2) array. The polygon is closed implicitly.
        geodesic : Geodesic, optional
            Solver defining the ellipsoid. Default: WGS84.

        Returns
        -------
        Tuple[float, float]
            (area, perimeter); counter-clockwise polygons have positive area.
        """
        polygon = GeodesicPolygon(geodesic)
        for lat, lon in _as_lat_lon_array(coordinates):
            polygon.add_point(float(lat), float(lon))
        result = polygon.compute(reverse=False, signed=True)
        return result.area, result.perimeter


def _as_lat_lon_array(coordinates: Union[NDArray, Iterable]) -> NDArray:
    """Coerce polygon vertices into an (N, 2) float array."""
    if isinstance(coordinates, np.ndarray):
        array = coordinates.astype(np.float64)
    else:
        pairs = [
            c.as_tuple() if isinstance(c, GeodesicPoint) else tuple(c)
            for c in coordinates
        ]
        array = np.asarray(pairs, dtype=np.float64)
    if array.size == 0:
        return np.empty((0, 2))
    if array.ndim != 2 or array.shape[1] != 2:
        raise ValueError(
            f"Expected (N, 2) array of (lat, lon) pairs, got shape {array.shape}"
        )
    return array
