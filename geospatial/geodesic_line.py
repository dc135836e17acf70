"""
Geodesic Lines.

A `GeodesicLine` fixes a start point and azimuth and precomputes the series
coefficients of that geodesic, so that many points along it can be found
at the cost of a single series evaluation each. This is the fast way to
sample a route, e.g. to draw it or to find waypoints at regular spacing.

Which coefficients are precomputed is controlled by the capability mask
given at construction; asking a line for a quantity it was not built for
returns NaN.
"""

import math
from typing import TYPE_CHECKING

from common.types import GeodesicPoint, GeodesicResult
from geospatial.geomath import (
    TINY, ang_normalize, ang_round, atan2d, check_latitude, norm2, sincosd, sq,
)
from geospatial.masks import GeodesicFlags, GeodesicMask, OUT_MASK
from geospatial.series import (
    a1m1f, a2m1f, c1f, c1pf, c2f, expansion_parameter, sin_cos_series,
)

if TYPE_CHECKING:
    from geospatial.geodesic import Geodesic


class GeodesicLine:
    """A geodesic with a fixed start point and azimuth.

    Parameters
    ----------
    geodesic : Geodesic
        Solver providing the ellipsoid.
    lat1, lon1 : float
        Start point in DEGREES.
    azi1 : float
        Azimuth at the start point in DEGREES.
    caps : GeodesicMask
        Quantities positions on the line should support. Latitude and
        azimuth are always included; an empty mask means
        DISTANCE_IN | LONGITUDE.
    salp1, calp1 : float, optional
        sin and cos of azi1, when already known exactly (used when the
        line is built from an inverse solution).

    Attributes
    ----------
    lat1, lon1, azi1 : float
        Start point and azimuth; azi1 normalized to (-180, 180].
    caps : int
        Effective capability mask.
    ellipsoid : Ellipsoid
        Ellipsoid of the parent solver.
    s13, a13 : float
        Distance and arc length to the reference point; NaN until set.

    Raises
    ------
    ValueError
        If |lat1| > 90.
    """

    def __init__(self, geodesic: "Geodesic", lat1: float, lon1: float,
                 azi1: float,
                 caps: int = GeodesicMask.STANDARD | GeodesicMask.DISTANCE_IN,
                 salp1: float = math.nan, calp1: float = math.nan):
        self.ellipsoid = geodesic.ellipsoid
        self.a = geodesic.a
        self.f = geodesic.f
        self._b = geodesic._b
        self._c2 = geodesic._c2
        self._f1 = geodesic._f1

        caps = int(caps)
        if caps == GeodesicMask.NONE:
            caps = GeodesicMask.DISTANCE_IN | GeodesicMask.LONGITUDE
        # Latitude and azimuth are free; unrolling is decided per position
        self.caps = int(caps | GeodesicMask.LATITUDE | GeodesicMask.AZIMUTH
                        | GeodesicMask.LONG_UNROLL)

        self.lat1 = check_latitude(lat1)
        self.lon1 = lon1
        if math.isnan(salp1) or math.isnan(calp1):
            self.azi1 = ang_normalize(azi1)
            self.salp1, self.calp1 = sincosd(ang_round(azi1))
        else:
            self.azi1 = azi1
            self.salp1, self.calp1 = salp1, calp1

        sbet1, cbet1 = sincosd(ang_round(self.lat1))
        sbet1 *= self._f1
        sbet1, cbet1 = norm2(sbet1, cbet1)
        cbet1 = max(TINY, cbet1)
        self._dn1 = math.sqrt(1 + geodesic._ep2 * sq(sbet1))

        # Clairaut constant and the equatorial crossing
        self._salp0 = self.salp1 * cbet1
        self._calp0 = math.hypot(self.calp1, self.salp1 * sbet1)
        self._ssig1 = sbet1
        self._somg1 = self._salp0 * sbet1
        if sbet1 != 0 or self.calp1 != 0:
            self._csig1 = self._comg1 = cbet1 * self.calp1
        else:
            self._csig1 = self._comg1 = 1.0
        self._ssig1, self._csig1 = norm2(self._ssig1, self._csig1)

        self._k2 = sq(self._calp0) * geodesic._ep2
        eps = expansion_parameter(self._k2)

        if self.caps & GeodesicMask.CAP_C1:
            self._A1m1 = a1m1f(eps)
            self._C1a = c1f(eps)
            self._B11 = sin_cos_series(True, self._ssig1, self._csig1, self._C1a)
            s, c = math.sin(self._B11), math.cos(self._B11)
            # tau1 = sig1 + B11
            self._stau1 = self._ssig1 * c + self._csig1 * s
            self._ctau1 = self._csig1 * c - self._ssig1 * s

        if self.caps & GeodesicMask.CAP_C1P:
            self._C1pa = c1pf(eps)

        if self.caps & GeodesicMask.CAP_C2:
            self._A2m1 = a2m1f(eps)
            self._C2a = c2f(eps)
            self._B21 = sin_cos_series(True, self._ssig1, self._csig1, self._C2a)

        if self.caps & GeodesicMask.CAP_C3:
            self._C3a = geodesic._series.c3f(eps)
            self._A3c = -self.f * self._salp0 * geodesic._series.a3f(eps)
            self._B31 = sin_cos_series(True, self._ssig1, self._csig1, self._C3a)

        if self.caps & GeodesicMask.CAP_C4:
            self._C4a = geodesic._series.c4f(eps)
            self._A4 = sq(self.a) * self._calp0 * self._salp0 * geodesic._e2
            self._B41 = sin_cos_series(False, self._ssig1, self._csig1, self._C4a)

        self.s13 = math.nan
        self.a13 = math.nan

    def __repr__(self) -> str:
        return (f"GeodesicLine(lat1={self.lat1}, lon1={self.lon1}, "
                f"azi1={self.azi1}, caps={self.caps:#x})")

    def _gen_position(self, arcmode, s12_a12, outmask):
        """Point at distance (or arc) s12_a12 from the start.

        Returns (a12, lat2, lon2, azi2, s12, m12, M12, M21, S12); quantities
        the line was not built for, or not requested, are NaN.
        """
        a12 = lat2 = lon2 = azi2 = s12 = m12 = M12 = M21 = S12 = math.nan
        outmask = int(outmask) & self.caps & OUT_MASK
        if not (arcmode or self.caps & (OUT_MASK & GeodesicMask.DISTANCE_IN)):
            # A distance was given but the line cannot convert it
            return a12, lat2, lon2, azi2, s12, m12, M12, M21, S12

        B12 = AB1 = 0.0
        if arcmode:
            sig12 = math.radians(s12_a12)
            ssig12, csig12 = sincosd(s12_a12)
        else:
            # Revert the distance series to get sig12 from tau12
            tau12 = s12_a12 / (self._b * (1 + self._A1m1))
            tau12 = tau12 if math.isfinite(tau12) else math.nan
            s, c = math.sin(tau12), math.cos(tau12)
            B12 = -sin_cos_series(True,
                                  self._stau1 * c + self._ctau1 * s,
                                  self._ctau1 * c - self._stau1 * s,
                                  self._C1pa)
            sig12 = tau12 - (B12 - self._B11)
            ssig12, csig12 = math.sin(sig12), math.cos(sig12)
            if abs(self.f) > 0.01:
                # The reverted series loses accuracy for large flattening;
                # polish with one Newton step
                ssig2 = self._ssig1 * csig12 + self._csig1 * ssig12
                csig2 = self._csig1 * csig12 - self._ssig1 * ssig12
                B12 = sin_cos_series(True, ssig2, csig2, self._C1a)
                serr = ((1 + self._A1m1) * (sig12 + (B12 - self._B11))
                        - s12_a12 / self._b)
                sig12 = sig12 - serr / math.sqrt(1 + self._k2 * sq(ssig2))
                ssig12, csig12 = math.sin(sig12), math.cos(sig12)

        # sig2 = sig1 + sig12
        ssig2 = self._ssig1 * csig12 + self._csig1 * ssig12
        csig2 = self._csig1 * csig12 - self._ssig1 * ssig12
        dn2 = math.sqrt(1 + self._k2 * sq(ssig2))
        if outmask & (GeodesicMask.DISTANCE | GeodesicMask.REDUCED_LENGTH
                      | GeodesicMask.GEODESIC_SCALE):
            if arcmode or abs(self.f) > 0.01:
                B12 = sin_cos_series(True, ssig2, csig2, self._C1a)
            AB1 = (1 + self._A1m1) * (B12 - self._B11)

        sbet2 = self._calp0 * ssig2
        cbet2 = math.hypot(self._salp0, self._calp0 * csig2)
        if cbet2 == 0:
            # Break the degeneracy at a pole
            cbet2 = csig2 = TINY
        salp2 = self._salp0
        calp2 = self._calp0 * csig2

        if outmask & GeodesicMask.DISTANCE:
            s12 = (self._b * ((1 + self._A1m1) * sig12 + AB1)
                   if arcmode else s12_a12)

        if outmask & GeodesicMask.LONGITUDE:
            somg2 = self._salp0 * ssig2
            comg2 = csig2
            if outmask & GeodesicMask.LONG_UNROLL:
                E = math.copysign(1, self._salp0)
                omg12 = E * (
                    sig12
                    - (math.atan2(ssig2, csig2)
                       - math.atan2(self._ssig1, self._csig1))
                    + (math.atan2(E * somg2, comg2)
                       - math.atan2(E * self._somg1, self._comg1))
                )
            else:
                omg12 = math.atan2(somg2 * self._comg1 - comg2 * self._somg1,
                                   comg2 * self._comg1 + somg2 * self._somg1)
            lam12 = omg12 + self._A3c * (
                sig12 + (sin_cos_series(True, ssig2, csig2, self._C3a)
                         - self._B31)
            )
            lon12 = math.degrees(lam12)
            if outmask & GeodesicMask.LONG_UNROLL:
                lon2 = self.lon1 + lon12
            else:
                lon2 = ang_normalize(ang_normalize(self.lon1)
                                     + ang_normalize(lon12))

        if outmask & GeodesicMask.LATITUDE:
            lat2 = atan2d(sbet2, self._f1 * cbet2)

        if outmask & GeodesicMask.AZIMUTH:
            azi2 = atan2d(salp2, calp2)

        if outmask & (GeodesicMask.REDUCED_LENGTH
                      | GeodesicMask.GEODESIC_SCALE):
            B22 = sin_cos_series(True, ssig2, csig2, self._C2a)
            AB2 = (1 + self._A2m1) * (B22 - self._B21)
            J12 = (self._A1m1 - self._A2m1) * sig12 + (AB1 - AB2)
            if outmask & GeodesicMask.REDUCED_LENGTH:
                m12 = self._b * ((dn2 * (self._csig1 * ssig2)
                                  - self._dn1 * (self._ssig1 * csig2))
                                 - self._csig1 * csig2 * J12)
            if outmask & GeodesicMask.GEODESIC_SCALE:
                t = (self._k2 * (ssig2 - self._ssig1) * (ssig2 + self._ssig1)
                     / (self._dn1 + dn2))
                M12 = csig12 + (t * ssig2 - csig2 * J12) * self._ssig1 / self._dn1
                M21 = csig12 - (t * self._ssig1 - self._csig1 * J12) * ssig2 / dn2

        if outmask & GeodesicMask.AREA:
            B42 = sin_cos_series(False, ssig2, csig2, self._C4a)
            if self._calp0 == 0 or self._salp0 == 0:
                # alp12 = alp2 - alp1, used in atan2 so no need to normalize
                salp12 = salp2 * self.calp1 - calp2 * self.salp1
                calp12 = calp2 * self.calp1 + salp2 * self.salp1
            else:
                # Expressed in terms of sig12 to avoid cancellation
                if csig12 <= 0:
                    salp12 = self._csig1 * (1 - csig12) + ssig12 * self._ssig1
                else:
                    salp12 = ssig12 * (self._csig1 * ssig12 / (1 + csig12)
                                       + self._ssig1)
                salp12 *= self._calp0 * self._salp0
                calp12 = sq(self._salp0) + sq(self._calp0) * self._csig1 * csig2
            S12 = (self._c2 * math.atan2(salp12, calp12)
                   + self._A4 * (B42 - self._B41))

        a12 = s12_a12 if arcmode else math.degrees(sig12)
        return a12, lat2, lon2, azi2, s12, m12, M12, M21, S12

    def position(self, s12: float) -> GeodesicPoint:
        """Point a distance s12 (meters) along the line."""
        _, lat2, lon2, _, _, _, _, _, _ = self._gen_position(
            False, s12, GeodesicMask.LATITUDE | GeodesicMask.LONGITUDE
        )
        return GeodesicPoint(lat2, lon2)

    def arc_position(self, a12: float,
                     outmask: int = GeodesicMask.STANDARD) -> GeodesicResult:
        """Position an arc length a12 (degrees) along the line."""
        return self.gen_position(a12, GeodesicFlags.ARC_MODE, outmask)

    def gen_position(self, s12_a12: float, flags: int = GeodesicFlags.NONE,
                     outmask: int = GeodesicMask.ALL) -> GeodesicResult:
        """Position along the line with selectable inputs and outputs.

        Parameters
        ----------
        s12_a12 : float
            Distance in meters, or arc length in degrees with ARC_MODE.
        flags : GeodesicFlags
            ARC_MODE and/or LONG_UNROLL.
        outmask : GeodesicMask
            Quantities to compute. Anything outside the line's caps is NaN;
            latitude and azimuth are always computed.

        Returns
        -------
        GeodesicResult
            Point 1 is the start of the line, point 2 the requested position.
        """
        arcmode = bool(flags & GeodesicFlags.ARC_MODE)
        unroll = bool(flags & GeodesicFlags.LONG_UNROLL)
        outmask = int(outmask) | GeodesicMask.LATITUDE | GeodesicMask.AZIMUTH
        if unroll:
            outmask |= GeodesicMask.LONG_UNROLL

        a12, lat2, lon2, azi2, s12, m12, M12, M21, S12 = self._gen_position(
            arcmode, s12_a12, outmask
        )
        return GeodesicResult(
            lat1=self.lat1,
            lon1=self.lon1 if unroll else ang_normalize(self.lon1),
            azi1=self.azi1,
            lat2=lat2, lon2=lon2, azi2=azi2,
            s12=s12, a12=a12, m12=m12, M12=M12, M21=M21, S12=S12,
        )

    def set_distance(self, s13: float) -> None:
        """Place the reference point a distance s13 from the start."""
        self.s13 = s13
        self.a13, _, _, _, _, _, _, _, _ = self._gen_position(
            False, self.s13, GeodesicMask.NONE
        )

    def set_arc(self, a13: float) -> None:
        """Place the reference point an arc length a13 from the start."""
        self.a13 = a13
        _, _, _, _, self.s13, _, _, _, _ = self._gen_position(
            True, self.a13, GeodesicMask.DISTANCE
        )

    def gen_set_distance(self, s13_a13: float,
                         flags: int = GeodesicFlags.NONE) -> None:
        if flags & GeodesicFlags.ARC_MODE:
            self.set_arc(s13_a13)
        else:
            self.set_distance(s13_a13)

    @property
    def distance(self) -> float:
        """Distance to the reference point (NaN if unset or unknown)."""
        return self.s13

    @property
    def arc(self) -> float:
        """Arc length to the reference point in degrees."""
        return self.a13

    @property
    def equatorial_azimuth(self) -> float:
        """Azimuth at the point where the line crosses the equator northward."""
        return atan2d(self._salp0, self._calp0)

    @property
    def equatorial_arc(self) -> float:
        """Arc length in degrees from that equator crossing to the start."""
        return atan2d(self._ssig1, self._csig1)
