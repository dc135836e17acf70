"""
Angle and floating-point helpers shared by the geodesic solvers.

Angles are handled in degrees wherever exactness matters: reducing an angle
in degrees before converting to radians keeps multiples of 90° exact, so
that e.g. a due-east azimuth has a cosine of exactly zero.
"""

import math
import sys
from typing import Sequence, Tuple


DIGITS = sys.float_info.mant_dig
EPSILON = sys.float_info.epsilon
MIN_NORMAL = sys.float_info.min


def sq(x: float) -> float:
    """Square of x."""
    return x * x


def cbrt(x: float) -> float:
    """Real cube root."""
    return math.copysign(abs(x) ** (1 / 3.0), x)


def norm2(x: float, y: float) -> Tuple[float, float]:
    """Scale (x, y) to unit length."""
    r = math.hypot(x, y)
    return x / r, y / r


def error_free_sum(u: float, v: float) -> Tuple[float, float]:
    """Sum of two floats together with its rounding error.

    Returns
    -------
    Tuple[float, float]
        (s, t) with s = round(u + v) and t = u + v - s exactly.
    """
    s = u + v
    up = s - v
    vpp = s - up
    up -= u
    vpp -= v
    t = s if s == 0 else 0.0 - (up + vpp)
    return s, t


def polyval(n: int, p: Sequence[float], s: int, x: float) -> float:
    """Evaluate the degree-n polynomial with coefficients p[s:s+n+1].

    Coefficients are ordered from the highest power down. A negative
    degree gives the zero polynomial.
    """
    y = 0.0 if n < 0 else float(p[s])
    while n > 0:
        n -= 1
        s += 1
        y = y * x + p[s]
    return y


def ang_round(x: float) -> float:
    """Round tiny angles so that 90 - x is exact.

    Values below 1/16 are coarsened to 1/16 - (1/16 - x), which removes
    the low-order bits that would otherwise make sin/cos of nearly polar
    latitudes and nearly cardinal azimuths inconsistent.
    """
    z = 1 / 16.0
    y = abs(x)
    if y < z:
        y = z - (z - y)
    if x == 0:
        return 0.0
    return -y if x < 0 else y


def ang_normalize(x: float) -> float:
    """Reduce an angle in degrees to (-180, 180]."""
    if not math.isfinite(x):
        return math.nan
    y = math.remainder(x, 360.0)
    return 180.0 if y == -180 else y


def check_latitude(lat: float) -> float:
    """Return lat unchanged, rejecting |lat| > 90.

    Raises
    ------
    ValueError
        If the latitude lies outside [-90, 90]. NaN passes through.
    """
    if abs(lat) > 90:
        raise ValueError(f"Latitude {lat} deg out of range [-90, 90]")
    return lat


def ang_diff(x: float, y: float) -> Tuple[float, float]:
    """Exact difference y - x of two angles, reduced to (-180, 180].

    Returns
    -------
    Tuple[float, float]
        (d, e) with d the rounded difference and e its error, so that
        d + e equals y - x (mod 360) exactly.
    """
    d, t = error_free_sum(ang_normalize(-x), ang_normalize(y))
    d = ang_normalize(d)
    return error_free_sum(-180.0 if d == 180 and t > 0 else d, t)


def sincosd(x: float) -> Tuple[float, float]:
    """Sine and cosine of an angle in degrees.

    The argument is reduced to [-45, 45] exactly before conversion, so
    sincosd(90) returns (1, 0) rather than (1, 6e-17).
    """
    r = math.fmod(x, 360.0) if math.isfinite(x) else math.nan
    q = 0 if math.isnan(r) else int(round(r / 90))
    r -= 90 * q
    r = math.radians(r)
    s = math.sin(r)
    c = math.cos(r)
    q %= 4
    if q == 1:
        s, c = c, -s
    elif q == 2:
        s, c = -s, -c
    elif q == 3:
        s, c = -c, s
    # Keep the sign of sin(-0) but drop stray negative zeros elsewhere
    s = x if x == 0 else 0.0 + s
    return s, 0.0 + c


def atan2d(y: float, x: float) -> float:
    """Two-argument arctangent in degrees, result in [-180, 180].

    Exact for the quadrant boundaries: atan2d(1, 0) is exactly 90.
    """
    if abs(y) > abs(x):
        q = 2
        x, y = y, x
    else:
        q = 0
    if x < 0:
        q += 1
        x = -x
    ang = math.degrees(math.atan2(y, x))
    if q == 1:
        ang = (180 if y >= 0 else -180) - ang
    elif q == 2:
        ang = 90 - ang
    elif q == 3:
        ang = -90 + ang
    return ang

# Smallest value whose square is still a normal float; used to keep
# cos(latitude) and similar quantities away from zero.
TINY = math.sqrt(MIN_NORMAL)
