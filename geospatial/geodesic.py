"""
Direct and Inverse Geodesic Problems on an Ellipsoid of Revolution.

A geodesic is the shortest path between two points on the ellipsoid. Two
problems are solved here:

- Direct: given a start point, an azimuth and a distance (or an arc length
  on the auxiliary sphere), find the end point and the azimuth there.
- Inverse: given two points, find the distance between them and the
  azimuths at both ends.

Both also return the reduced length m12, the geodesic scales M12 and M21,
and the area S12 between the geodesic and the equator.

Scientific Context
------------------
The geodesic is mapped onto a great circle of an auxiliary sphere via the
reduced latitude beta (tan(beta) = (1 - f) tan(phi)). Along that great
circle the Clairaut constant sin(alpha0) = sin(alpha) cos(beta) is fixed,
and distance, longitude, reduced length and area become integrals in the
spherical arc length sigma which are evaluated by the series in
`geospatial.series`.

The inverse problem has no closed form. It is solved by finding the
azimuth alpha1 at the first point for which the longitude difference of
the resulting geodesic matches the requested one, using Newton's method
with a bisection fallback.

Accuracy
--------
Errors are a few nanometers in distance for |f| <= 0.01 (WGS84 has
f = 0.0034), and the inverse solution converges for every pair of points,
including nearly antipodal ones.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy 87, 43-55.
- Karney, C.F.F. (2011). Geodesics on an ellipsoid of revolution.
  arXiv:1102.1215.
"""

import math

from common.constants import NEWTON_MAX_ITERATIONS, BISECTION_EXTRA_ITERATIONS
from common.logging_config import get_logger
from common.types import GeodesicResult
from geospatial.ellipsoid import Ellipsoid, WGS84
from geospatial.geodesic_line import GeodesicLine
from geospatial.geomath import (
    EPSILON, TINY,
    ang_diff, ang_normalize, ang_round, atan2d, cbrt, check_latitude,
    norm2, sincosd, sq,
)
from geospatial.masks import GeodesicFlags, GeodesicMask, OUT_MASK
from geospatial.series import (
    EllipsoidSeries, a1m1f, a2m1f, c1f, c2f, expansion_parameter,
    sin_cos_series,
)

logger = get_logger(__name__)


class Geodesic:
    """Solver for geodesic problems on a given ellipsoid.

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Reference ellipsoid. Default: WGS84.

    Attributes
    ----------
    ellipsoid : Ellipsoid
        The reference ellipsoid.
    a : float
        Equatorial radius in meters.
    f : float
        Flattening.

    Notes
    -----
    All angles are in degrees, lengths in meters, areas in m². Latitudes
    outside [-90, 90] raise ValueError; longitudes and azimuths may take
    any finite value.

    Examples
    --------
    >>> geod = Geodesic()
    >>> r = geod.inverse(40.6, -73.8, 51.6, -0.5)  # JFK to LHR
    >>> round(r.s12 / 1000)
    5551
    """

    # Convergence tolerances
    TOL0 = EPSILON
    TOL1 = 200 * TOL0
    TOL2 = math.sqrt(TOL0)
    TOLB = TOL0
    XTHRESH = 1000 * TOL2

    MAXIT1 = NEWTON_MAX_ITERATIONS
    MAXIT2 = MAXIT1 + BISECTION_EXTRA_ITERATIONS

    def __init__(self, ellipsoid: Ellipsoid = WGS84):
        self.ellipsoid = ellipsoid
        self.a = ellipsoid.a
        self.f = ellipsoid.f
        self._f1 = 1 - self.f
        self._e2 = ellipsoid.e2
        self._ep2 = ellipsoid.ep2
        self._n = ellipsoid.n
        self._b = ellipsoid.b
        self._c2 = ellipsoid.c2
        # Threshold for the short-line closed form. Scaled so that the error
        # of the closed-form solution stays below roundoff for any f.
        self._etol2 = 0.1 * self.TOL2 / math.sqrt(
            max(0.001, abs(self.f)) * min(1.0, 1 - self.f / 2) / 2
        )
        self._series = EllipsoidSeries(self._n)
        logger.debug(
            f"Geodesic solver on {ellipsoid.name}: a={self.a} m, f={self.f:.10g}"
        )

    def __repr__(self) -> str:
        return f"Geodesic(ellipsoid={self.ellipsoid!r})"

    # ------------------------------------------------------------------
    # Building blocks of the inverse solution
    # ------------------------------------------------------------------

    def _lengths(self, eps, sig12, ssig1, csig1, dn1, ssig2, csig2, dn2,
                 cbet1, cbet2, outmask):
        """Distance, reduced length and geodesic scales for an arc sig12.

        Returns (s12b, m12b, m0, M12, M21) with s12b and m12b in units of
        the semi-minor axis. Quantities not selected by outmask are NaN.
        """
        outmask &= OUT_MASK
        s12b = m12b = m0 = M12 = M21 = math.nan
        need_i2 = outmask & (GeodesicMask.REDUCED_LENGTH
                             | GeodesicMask.GEODESIC_SCALE)

        if outmask & (GeodesicMask.DISTANCE | GeodesicMask.REDUCED_LENGTH
                      | GeodesicMask.GEODESIC_SCALE):
            A1 = a1m1f(eps)
            C1a = c1f(eps)
            if need_i2:
                A2 = a2m1f(eps)
                C2a = c2f(eps)
                m0x = A1 - A2
                A2 = 1 + A2
            A1 = 1 + A1

        if outmask & GeodesicMask.DISTANCE:
            B1 = (sin_cos_series(True, ssig2, csig2, C1a)
                  - sin_cos_series(True, ssig1, csig1, C1a))
            s12b = A1 * (sig12 + B1)
            if need_i2:
                B2 = (sin_cos_series(True, ssig2, csig2, C2a)
                      - sin_cos_series(True, ssig1, csig1, C2a))
                J12 = m0x * sig12 + (A1 * B1 - A2 * B2)
        elif need_i2:
            # Combine the two series before summing
            C2a = [A1 * c1 - A2 * c2 for c1, c2 in zip(C1a, C2a)]
            J12 = m0x * sig12 + (sin_cos_series(True, ssig2, csig2, C2a)
                                 - sin_cos_series(True, ssig1, csig1, C2a))

        if outmask & GeodesicMask.REDUCED_LENGTH:
            m0 = m0x
            # Keep the antisymmetric terms apart to preserve accuracy
            m12b = (dn2 * (csig1 * ssig2) - dn1 * (ssig1 * csig2)
                    - csig1 * csig2 * J12)

        if outmask & GeodesicMask.GEODESIC_SCALE:
            csig12 = csig1 * csig2 + ssig1 * ssig2
            t = self._ep2 * (cbet1 - cbet2) * (cbet1 + cbet2) / (dn1 + dn2)
            M12 = csig12 + (t * ssig2 - csig2 * J12) * ssig1 / dn1
            M21 = csig12 - (t * ssig1 - csig1 * J12) * ssig2 / dn2

        return s12b, m12b, m0, M12, M21

    @staticmethod
    def _astroid(x: float, y: float) -> float:
        """Largest positive root k of k⁴ + 2k³ - (x² + y² - 1)k² - 2y²k - y² = 0.

        Used for the starting guess of nearly antipodal points, where the
        geodesic is approximated by the envelope of a family of lines.
        """
        p = sq(x)
        q = sq(y)
        r = (p + q - 1) / 6
        if q == 0 and r <= 0:
            # Degenerate case: y = 0 with |x| <= 1
            return 0.0

        S = p * q / 4
        r2 = sq(r)
        r3 = r * r2
        disc = S * (S + 2 * r3)
        u = r
        if disc >= 0:
            T3 = S + r3
            # Choose the sign that avoids cancellation
            T3 += -math.sqrt(disc) if T3 < 0 else math.sqrt(disc)
            T = cbrt(T3)
            u += T + (r2 / T if T != 0 else 0)
        else:
            # Three real roots; take the largest
            ang = math.atan2(math.sqrt(-disc), -(S + r3))
            u += 2 * r * math.cos(ang / 3)

        v = math.sqrt(sq(u) + q)
        uv = -q / (v - u) if u < 0 else u + v
        w = (uv - q) / (2 * v)
        return uv / (math.sqrt(uv + sq(w)) + w)

    def _inverse_start(self, sbet1, cbet1, dn1, sbet2, cbet2, dn2,
                       lam12, slam12, clam12):
        """Starting azimuth for the inverse iteration.

        Returns (sig12, salp1, calp1, salp2, calp2, dnm). A non-negative
        sig12 means the short-line closed form already solved the problem
        and salp2, calp2, dnm are valid.
        """
        sig12 = -1.0
        salp2 = calp2 = dnm = math.nan

        sbet12 = sbet2 * cbet1 - cbet2 * sbet1
        cbet12 = cbet2 * cbet1 + sbet2 * sbet1
        sbet12a = sbet2 * cbet1 + cbet2 * sbet1

        shortline = cbet12 >= 0 and sbet12 < 0.5 and cbet2 * lam12 < 0.5
        if shortline:
            sbetm2 = sq(sbet1 + sbet2)
            sbetm2 /= sbetm2 + sq(cbet1 + cbet2)
            dnm = math.sqrt(1 + self._ep2 * sbetm2)
            omg12 = lam12 / (self._f1 * dnm)
            somg12, comg12 = math.sin(omg12), math.cos(omg12)
        else:
            somg12, comg12 = slam12, clam12

        salp1 = cbet2 * somg12
        if comg12 >= 0:
            calp1 = sbet12 + cbet2 * sbet1 * sq(somg12) / (1 + comg12)
        else:
            calp1 = sbet12a - cbet2 * sbet1 * sq(somg12) / (1 - comg12)

        ssig12 = math.hypot(salp1, calp1)
        csig12 = sbet1 * sbet2 + cbet1 * cbet2 * comg12

        if shortline and ssig12 < self._etol2:
            # Really short line: solve on a sphere of radius b * dnm
            salp2 = cbet1 * somg12
            calp2 = sbet12 - cbet1 * sbet2 * (
                sq(somg12) / (1 + comg12) if comg12 >= 0 else 1 - comg12
            )
            salp2, calp2 = norm2(salp2, calp2)
            sig12 = math.atan2(ssig12, csig12)
        elif (abs(self._n) >= 0.1 or csig12 >= 0
              or ssig12 >= 6 * abs(self._n) * math.pi * sq(cbet1)):
            # Not nearly antipodal: the spherical guess is good enough
            pass
        else:
            # Nearly antipodal; scale to the astroid problem
            lam12x = math.atan2(-slam12, -clam12)
            if self.f >= 0:
                k2 = sq(sbet1) * self._ep2
                eps = expansion_parameter(k2)
                lamscale = self.f * cbet1 * self._series.a3f(eps) * math.pi
                betscale = lamscale * cbet1
                x = lam12x / lamscale
                y = sbet12a / betscale
            else:
                cbet12a = cbet2 * cbet1 - sbet2 * sbet1
                bet12a = math.atan2(sbet12a, cbet12a)
                _, m12b, m0, _, _ = self._lengths(
                    self._n, math.pi + bet12a, sbet1, -cbet1, dn1,
                    sbet2, cbet2, dn2, cbet1, cbet2,
                    GeodesicMask.REDUCED_LENGTH,
                )
                x = -1 + m12b / (cbet1 * cbet2 * m0 * math.pi)
                betscale = (sbet12a / x if x < -0.01
                            else -self.f * sq(cbet1) * math.pi)
                lamscale = betscale / cbet1
                y = lam12x / lamscale

            if y > -self.TOL1 and x > -1 - self.XTHRESH:
                # Strip near the cut: the astroid solution is singular here
                if self.f >= 0:
                    salp1 = min(1.0, -x)
                    calp1 = -math.sqrt(1 - sq(salp1))
                else:
                    calp1 = max(0.0 if x > -self.TOL1 else -1.0, x)
                    salp1 = math.sqrt(1 - sq(calp1))
            else:
                k = self._astroid(x, y)
                if self.f >= 0:
                    omg12a = lamscale * (-x * k / (1 + k))
                else:
                    omg12a = lamscale * (-y * (1 + k) / k)
                somg12, comg12 = math.sin(omg12a), -math.cos(omg12a)
                salp1 = cbet2 * somg12
                calp1 = sbet12a - cbet2 * sbet1 * sq(somg12) / (1 - comg12)

        # NaN falls through to norm2 so that it propagates
        if not salp1 <= 0:
            salp1, calp1 = norm2(salp1, calp1)
        else:
            salp1, calp1 = 1.0, 0.0
        return sig12, salp1, calp1, salp2, calp2, dnm

    def _lambda12(self, sbet1, cbet1, dn1, sbet2, cbet2, dn2,
                  salp1, calp1, slam120, clam120, diffp):
        """Longitude error of the geodesic leaving point 1 with azimuth alp1.

        Returns (lam12, salp2, calp2, sig12, ssig1, csig1, ssig2, csig2,
        eps, domg12, dlam12) where lam12 is the difference between the
        longitude reached at the latitude of point 2 and the target, and
        dlam12 its derivative with respect to alp1 (NaN unless diffp).
        """
        if sbet1 == 0 and calp1 == 0:
            # Break degeneracy of equatorial line
            calp1 = -TINY

        salp0 = salp1 * cbet1
        calp0 = math.hypot(calp1, salp1 * sbet1)

        ssig1 = sbet1
        somg1 = salp0 * sbet1
        csig1 = comg1 = calp1 * cbet1
        ssig1, csig1 = norm2(ssig1, csig1)

        # Enforce the symmetries in the case |bet2| = -bet1
        salp2 = salp0 / cbet2 if cbet2 != cbet1 else salp1
        if cbet2 != cbet1 or abs(sbet2) != -sbet1:
            if cbet1 < -sbet1:
                dcb = (cbet2 - cbet1) * (cbet1 + cbet2)
            else:
                dcb = (sbet1 - sbet2) * (sbet1 + sbet2)
            calp2 = math.sqrt(sq(calp1 * cbet1) + dcb) / cbet2
        else:
            calp2 = abs(calp1)

        ssig2 = sbet2
        somg2 = salp0 * sbet2
        csig2 = comg2 = calp2 * cbet2
        ssig2, csig2 = norm2(ssig2, csig2)

        sig12 = math.atan2(max(0.0, csig1 * ssig2 - ssig1 * csig2) + 0.0,
                           csig1 * csig2 + ssig1 * ssig2)
        somg12 = max(0.0, comg1 * somg2 - somg1 * comg2) + 0.0
        comg12 = comg1 * comg2 + somg1 * somg2
        # omg12 - lam120, reduced to (-pi, pi]
        eta = math.atan2(somg12 * clam120 - comg12 * slam120,
                         comg12 * clam120 + somg12 * slam120)

        k2 = sq(calp0) * self._ep2
        eps = expansion_parameter(k2)
        C3a = self._series.c3f(eps)
        B312 = (sin_cos_series(True, ssig2, csig2, C3a)
                - sin_cos_series(True, ssig1, csig1, C3a))
        domg12 = -self.f * self._series.a3f(eps) * salp0 * (sig12 + B312)
        lam12 = eta + domg12

        if diffp:
            if calp2 == 0:
                dlam12 = -2 * self._f1 * dn1 / sbet1
            else:
                _, dlam12, _, _, _ = self._lengths(
                    eps, sig12, ssig1, csig1, dn1, ssig2, csig2, dn2,
                    cbet1, cbet2, GeodesicMask.REDUCED_LENGTH,
                )
                dlam12 *= self._f1 / (calp2 * cbet2)
        else:
            dlam12 = math.nan

        return (lam12, salp2, calp2, sig12, ssig1, csig1, ssig2, csig2,
                eps, domg12, dlam12)

    def _gen_inverse(self, lat1, lon1, lat2, lon2, outmask):
        """Solve the inverse problem.

        Returns
        -------
        tuple
            (a12, s12, salp1, calp1, salp2, calp2, m12, M12, M21, S12);
            quantities not selected by outmask are NaN. a12 is always set.
        """
        a12 = s12 = m12 = M12 = M21 = S12 = math.nan
        outmask = int(outmask) & OUT_MASK

        # Longitude difference, made exact and reduced to [0, 180] by
        # exploiting the symmetry lon -> -lon
        lon12, lon12s = ang_diff(lon1, lon2)
        lonsign = math.copysign(1, lon12)
        lon12 = lonsign * ang_round(lon12)
        lon12s = ang_round((180 - lon12) - lonsign * lon12s)
        lam12 = math.radians(lon12)
        if lon12 > 90:
            slam12, clam12 = sincosd(lon12s)
            clam12 = -clam12
        else:
            slam12, clam12 = sincosd(lon12)

        lat1 = ang_round(lat1)
        lat2 = ang_round(lat2)
        # Put the point with the larger |lat| first, then make lat1 <= 0
        swapp = -1 if abs(lat1) < abs(lat2) or math.isnan(lat2) else 1
        if swapp < 0:
            lonsign *= -1
            lat1, lat2 = lat2, lat1
        latsign = math.copysign(1, -lat1)
        lat1 *= latsign
        lat2 *= latsign
        # Now -90 <= lat1 <= 0 and lat1 <= lat2 <= -lat1

        sbet1, cbet1 = sincosd(lat1)
        sbet1 *= self._f1
        sbet1, cbet1 = norm2(sbet1, cbet1)
        cbet1 = max(TINY, cbet1)

        sbet2, cbet2 = sincosd(lat2)
        sbet2 *= self._f1
        sbet2, cbet2 = norm2(sbet2, cbet2)
        cbet2 = max(TINY, cbet2)

        # Make |bet1| = |bet2| exact when |lat1| = |lat2|
        if cbet1 < -sbet1:
            if cbet2 == cbet1:
                sbet2 = math.copysign(sbet1, sbet2)
        elif abs(sbet2) == -sbet1:
            cbet2 = cbet1

        dn1 = math.sqrt(1 + self._ep2 * sq(sbet1))
        dn2 = math.sqrt(1 + self._ep2 * sq(sbet2))

        meridian = lat1 == -90 or slam12 == 0
        if meridian:
            # Point 1 is a pole or both points lie on one meridian
            calp1, salp1 = clam12, slam12
            calp2, salp2 = 1.0, 0.0

            ssig1, csig1 = sbet1, calp1 * cbet1
            ssig2, csig2 = sbet2, calp2 * cbet2
            sig12 = math.atan2(max(0.0, csig1 * ssig2 - ssig1 * csig2) + 0.0,
                               csig1 * csig2 + ssig1 * ssig2)
            s12x, m12x, _, M12, M21 = self._lengths(
                self._n, sig12, ssig1, csig1, dn1, ssig2, csig2, dn2,
                cbet1, cbet2,
                outmask | GeodesicMask.DISTANCE | GeodesicMask.REDUCED_LENGTH,
            )
            # A negative reduced length means the meridian is not the
            # shortest path (beyond the conjugate point); fall through to
            # the general solution in that case.
            if sig12 < 1 or m12x >= 0:
                if (sig12 < 3 * TINY
                        or (sig12 < self.TOL0 and (s12x < 0 or m12x < 0))):
                    sig12 = m12x = s12x = 0.0
                m12x *= self._b
                s12x *= self._b
                a12 = math.degrees(sig12)
            else:
                meridian = False

        # Sentinel: somg12 > 1 means omg12 has not been resolved yet
        somg12 = 2.0
        comg12 = math.nan
        omg12 = math.nan
        if (not meridian and sbet1 == 0
                and (self.f <= 0 or lon12s >= self.f * 180)):
            # Both points on the equator and the equator is the shortest path
            calp1 = calp2 = 0.0
            salp1 = salp2 = 1.0
            s12x = self.a * lam12
            sig12 = omg12 = lam12 / self._f1
            m12x = self._b * math.sin(sig12)
            if outmask & GeodesicMask.GEODESIC_SCALE:
                M12 = M21 = math.cos(sig12)
            a12 = lon12 / self._f1
        elif not meridian:
            sig12, salp1, calp1, salp2, calp2, dnm = self._inverse_start(
                sbet1, cbet1, dn1, sbet2, cbet2, dn2, lam12, slam12, clam12
            )
            if sig12 >= 0:
                # Short line solved in closed form
                s12x = sig12 * self._b * dnm
                m12x = sq(dnm) * self._b * math.sin(sig12 / dnm)
                if outmask & GeodesicMask.GEODESIC_SCALE:
                    M12 = M21 = math.cos(sig12 / dnm)
                a12 = math.degrees(sig12)
                omg12 = lam12 / (self._f1 * dnm)
            else:
                (sig12, salp1, calp1, salp2, calp2, ssig1, csig1, ssig2,
                 csig2, eps, domg12) = self._solve_azimuth(
                    sbet1, cbet1, dn1, sbet2, cbet2, dn2,
                    salp1, calp1, slam12, clam12,
                )
                lengthmask = outmask
                if outmask & (GeodesicMask.REDUCED_LENGTH
                              | GeodesicMask.GEODESIC_SCALE):
                    lengthmask |= GeodesicMask.DISTANCE
                s12x, m12x, _, M12, M21 = self._lengths(
                    eps, sig12, ssig1, csig1, dn1, ssig2, csig2, dn2,
                    cbet1, cbet2, lengthmask,
                )
                m12x *= self._b
                s12x *= self._b
                a12 = math.degrees(sig12)
                if outmask & GeodesicMask.AREA:
                    sdomg12, cdomg12 = math.sin(domg12), math.cos(domg12)
                    somg12 = slam12 * cdomg12 - clam12 * sdomg12
                    comg12 = clam12 * cdomg12 + slam12 * sdomg12

        if outmask & GeodesicMask.DISTANCE:
            s12 = 0.0 + s12x
        if outmask & GeodesicMask.REDUCED_LENGTH:
            m12 = 0.0 + m12x

        if outmask & GeodesicMask.AREA:
            S12 = self._area_term(sbet1, cbet1, sbet2, cbet2,
                                  salp1, calp1, salp2, calp2)
            if not meridian and somg12 > 1:
                somg12, comg12 = math.sin(omg12), math.cos(omg12)
            if not meridian and comg12 > -0.7071 and sbet2 - sbet1 < 1.75:
                # Use tan(Gamma/2) = tan(omg12/2) * (tan(bet1/2) + tan(bet2/2))
                #                    / (1 + tan(bet1/2) tan(bet2/2))
                domg12 = 1 + comg12
                dbet1 = 1 + cbet1
                dbet2 = 1 + cbet2
                alp12 = 2 * math.atan2(
                    somg12 * (sbet1 * dbet2 + sbet2 * dbet1),
                    domg12 * (sbet1 * sbet2 + dbet1 * dbet2),
                )
            else:
                salp12 = salp2 * calp1 - calp2 * salp1
                calp12 = calp2 * calp1 + salp2 * salp1
                # Avoid an ambiguous sign when alp12 is +/-180
                if salp12 == 0 and calp12 < 0:
                    salp12 = TINY * calp1
                    calp12 = -1.0
                alp12 = math.atan2(salp12, calp12)
            S12 += self._c2 * alp12
            S12 *= swapp * lonsign * latsign
            S12 += 0.0

        # Undo the canonicalization
        if swapp < 0:
            salp1, salp2 = salp2, salp1
            calp1, calp2 = calp2, calp1
            if outmask & GeodesicMask.GEODESIC_SCALE:
                M12, M21 = M21, M12

        salp1 *= swapp * lonsign
        calp1 *= swapp * latsign
        salp2 *= swapp * lonsign
        calp2 *= swapp * latsign

        return a12, s12, salp1, calp1, salp2, calp2, m12, M12, M21, S12

    def _solve_azimuth(self, sbet1, cbet1, dn1, sbet2, cbet2, dn2,
                       salp1, calp1, slam12, clam12):
        """Iterate on alp1 until the geodesic reaches the target longitude.

        Newton's method is used while it makes progress; every step also
        tightens a bracket [alp1a, alp1b] on the solution, and once Newton
        misbehaves or runs out of iterations the bracket is bisected.
        """
        numit = 0
        tripn = tripb = False
        converged = False
        salp1a, calp1a = TINY, 1.0
        salp1b, calp1b = TINY, -1.0

        while numit < self.MAXIT2:
            (v, salp2, calp2, sig12, ssig1, csig1, ssig2, csig2,
             eps, domg12, dv) = self._lambda12(
                sbet1, cbet1, dn1, sbet2, cbet2, dn2,
                salp1, calp1, slam12, clam12, numit < self.MAXIT1,
            )
            if tripb or not abs(v) >= (8 if tripn else 1) * self.TOL0:
                converged = True
                break

            # Update the bracket
            if v > 0 and (numit > self.MAXIT1
                          or calp1 / salp1 > calp1b / salp1b):
                salp1b, calp1b = salp1, calp1
            elif v < 0 and (numit > self.MAXIT1
                            or calp1 / salp1 < calp1a / salp1a):
                salp1a, calp1a = salp1, calp1

            numit += 1
            if numit < self.MAXIT1 and dv > 0:
                dalp1 = -v / dv
                if abs(dalp1) < math.pi:
                    sdalp1, cdalp1 = math.sin(dalp1), math.cos(dalp1)
                    nsalp1 = salp1 * cdalp1 + calp1 * sdalp1
                    if nsalp1 > 0:
                        calp1 = calp1 * cdalp1 - salp1 * sdalp1
                        salp1, calp1 = norm2(nsalp1, calp1)
                        # Once near convergence, demand a slightly looser
                        # tolerance to avoid cycling on roundoff
                        tripn = abs(v) <= 16 * self.TOL0
                        continue

            if numit == self.MAXIT1:
                logger.debug(
                    "Newton iteration did not converge; bisecting "
                    "the azimuth bracket"
                )
            # Bisect; also reached when Newton leaves the bracket
            salp1 = (salp1a + salp1b) / 2
            calp1 = (calp1a + calp1b) / 2
            salp1, calp1 = norm2(salp1, calp1)
            tripn = False
            tripb = (abs(salp1a - salp1) + (calp1a - calp1) < self.TOLB
                     or abs(salp1 - salp1b) + (calp1 - calp1b) < self.TOLB)

        if not converged:
            logger.warning(
                f"Inverse geodesic did not converge in {self.MAXIT2} "
                f"iterations; returning best estimate"
            )

        return (sig12, salp1, calp1, salp2, calp2, ssig1, csig1, ssig2,
                csig2, eps, domg12)

    def _area_term(self, sbet1, cbet1, sbet2, cbet2,
                   salp1, calp1, salp2, calp2) -> float:
        """The A4 (I4(sig2) - I4(sig1)) part of the area S12."""
        salp0 = salp1 * cbet1
        calp0 = math.hypot(calp1, salp1 * sbet1)
        if calp0 == 0 or salp0 == 0:
            # Meridian or equatorial geodesic: the integral vanishes
            return 0.0
        ssig1, csig1 = norm2(sbet1, calp1 * cbet1)
        ssig2, csig2 = norm2(sbet2, calp2 * cbet2)
        k2 = sq(calp0) * self._ep2
        eps = expansion_parameter(k2)
        A4 = sq(self.a) * calp0 * salp0 * self._e2
        C4a = self._series.c4f(eps)
        B41 = sin_cos_series(False, ssig1, csig1, C4a)
        B42 = sin_cos_series(False, ssig2, csig2, C4a)
        return A4 * (B42 - B41)

    def _gen_direct(self, lat1, lon1, azi1, arcmode, s12_a12, outmask):
        """Solve the direct problem through a temporary GeodesicLine.

        Returns (a12, lat2, lon2, azi2, s12, m12, M12, M21, S12).
        """
        outmask = int(outmask)
        if not arcmode:
            outmask |= GeodesicMask.DISTANCE_IN
        line = GeodesicLine(self, lat1, lon1, azi1, outmask)
        return line._gen_position(arcmode, s12_a12, outmask)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def direct(self, lat1: float, lon1: float, azi1: float,
               s12: float) -> GeodesicResult:
        """Solve the direct problem for a distance.

        Parameters
        ----------
        lat1, lon1 : float
            Start point in DEGREES.
        azi1 : float
            Azimuth at the start point in DEGREES clockwise from north.
        s12 : float
            Distance in meters; may be negative.

        Returns
        -------
        GeodesicResult
            lat2, lon2, azi2, s12 and a12 are populated.
        """
        return self.general_direct(lat1, lon1, azi1, s12,
                                   outmask=GeodesicMask.STANDARD)

    def arc_direct(self, lat1: float, lon1: float, azi1: float, a12: float,
                   outmask: int = GeodesicMask.STANDARD) -> GeodesicResult:
        """Solve the direct problem for an arc length a12 in degrees."""
        return self.general_direct(lat1, lon1, azi1, a12,
                                   flags=GeodesicFlags.ARC_MODE,
                                   outmask=outmask)

    def general_direct(self, lat1: float, lon1: float, azi1: float,
                       s12_a12: float, flags: int = GeodesicFlags.NONE,
                       outmask: int = GeodesicMask.ALL) -> GeodesicResult:
        """Solve the direct problem with full control over inputs and outputs.

        Parameters
        ----------
        lat1, lon1, azi1 : float
            Start point and azimuth in DEGREES.
        s12_a12 : float
            Distance in meters, or arc length in degrees with ARC_MODE.
        flags : GeodesicFlags
            ARC_MODE and/or LONG_UNROLL.
        outmask : GeodesicMask
            Quantities to compute; the rest are NaN. Latitude and
            azimuth of point 2 are always computed.

        Raises
        ------
        ValueError
            If |lat1| > 90.
        """
        check_latitude(lat1)
        arcmode = bool(flags & GeodesicFlags.ARC_MODE)
        unroll = bool(flags & GeodesicFlags.LONG_UNROLL)
        # Latitude and azimuth of the end point come with every solution
        outmask = int(outmask) | GeodesicMask.LATITUDE | GeodesicMask.AZIMUTH
        if unroll:
            outmask |= GeodesicMask.LONG_UNROLL

        a12, lat2, lon2, azi2, s12, m12, M12, M21, S12 = self._gen_direct(
            lat1, lon1, azi1, arcmode, s12_a12, outmask
        )
        return GeodesicResult(
            lat1=lat1, lon1=lon1 if unroll else ang_normalize(lon1),
            azi1=ang_normalize(azi1),
            lat2=lat2, lon2=lon2, azi2=azi2,
            s12=s12, a12=a12, m12=m12, M12=M12, M21=M21, S12=S12,
        )

    def inverse(self, lat1: float, lon1: float, lat2: float,
                lon2: float) -> GeodesicResult:
        """Solve the inverse problem: distance and azimuths between two points.

        Returns
        -------
        GeodesicResult
            s12, azi1, azi2 and a12 are populated.
        """
        return self.general_inverse(
            lat1, lon1, lat2, lon2,
            outmask=GeodesicMask.DISTANCE | GeodesicMask.AZIMUTH,
        )

    def general_inverse(self, lat1: float, lon1: float, lat2: float,
                        lon2: float, outmask: int = GeodesicMask.ALL,
                        flags: int = GeodesicFlags.NONE) -> GeodesicResult:
        """Solve the inverse problem with a selectable set of outputs.

        Parameters
        ----------
        lat1, lon1, lat2, lon2 : float
            End points in DEGREES.
        outmask : GeodesicMask
            Quantities to compute; the rest are NaN.
        flags : GeodesicFlags
            With LONG_UNROLL, lon2 is reported as lon1 + lon12 so that it
            shows which way round the globe the geodesic went.

        Raises
        ------
        ValueError
            If either latitude is outside [-90, 90].
        """
        check_latitude(lat1)
        check_latitude(lat2)
        unroll = bool(flags & GeodesicFlags.LONG_UNROLL)
        outmask = int(outmask)

        a12, s12, salp1, calp1, salp2, calp2, m12, M12, M21, S12 = \
            self._gen_inverse(lat1, lon1, lat2, lon2, outmask)

        if unroll:
            lon12, e = ang_diff(lon1, lon2)
            lon2 = (lon1 + lon12) + e
        else:
            lon1 = ang_normalize(lon1)
            lon2 = ang_normalize(lon2)

        result = GeodesicResult(lat1=lat1, lon1=lon1, lat2=lat2, lon2=lon2,
                                a12=a12, s12=s12, m12=m12,
                                M12=M12, M21=M21, S12=S12)
        if outmask & GeodesicMask.AZIMUTH:
            result.azi1 = atan2d(salp1, calp1)
            result.azi2 = atan2d(salp2, calp2)
        return result

    def line(self, lat1: float, lon1: float, azi1: float,
             caps: int = GeodesicMask.STANDARD | GeodesicMask.DISTANCE_IN
             ) -> GeodesicLine:
        """Geodesic line starting at (lat1, lon1) with azimuth azi1."""
        return GeodesicLine(self, lat1, lon1, azi1, caps)

    def direct_line(self, lat1: float, lon1: float, azi1: float,
                    s12_a12: float, flags: int = GeodesicFlags.NONE,
                    caps: int = GeodesicMask.STANDARD | GeodesicMask.DISTANCE_IN
                    ) -> GeodesicLine:
        """Geodesic line with its reference point set s12_a12 from the start.

        With ARC_MODE in flags, s12_a12 is an arc length in degrees.
        """
        arcmode = bool(flags & GeodesicFlags.ARC_MODE)
        caps = int(caps)
        if caps and not arcmode:
            # Converting the distance to an arc needs the inverse series
            caps |= GeodesicMask.DISTANCE_IN
        line = GeodesicLine(self, lat1, lon1, azi1, caps)
        line.gen_set_distance(s12_a12, flags)
        return line

    def inverse_line(self, lat1: float, lon1: float, lat2: float, lon2: float,
                     caps: int = GeodesicMask.STANDARD | GeodesicMask.DISTANCE_IN
                     ) -> GeodesicLine:
        """Geodesic line through two points; its reference point is point 2."""
        check_latitude(lat1)
        check_latitude(lat2)
        a12, _, salp1, calp1, _, _, _, _, _, _ = self._gen_inverse(
            lat1, lon1, lat2, lon2, GeodesicMask.NONE
        )
        azi1 = atan2d(salp1, calp1)
        caps = int(caps)
        if caps & (OUT_MASK & GeodesicMask.DISTANCE_IN):
            # set_arc needs DISTANCE to record the distance to point 2
            caps |= GeodesicMask.DISTANCE
        line = GeodesicLine(self, lat1, lon1, azi1, caps, salp1, calp1)
        line.set_arc(a12)
        return line

    def polygon(self, polyline: bool = False):
        """Empty GeodesicPolygon (or polyline) on this ellipsoid."""
        from geospatial.polygon import GeodesicPolygon
        return GeodesicPolygon(self, polyline)

