"""
Series Expansions for Geodesics on an Ellipsoid.

The integrals that map arc length on the auxiliary sphere to distance,
longitude, reduced length and area on the ellipsoid are expanded as
trigonometric series in the arc length whose coefficients are polynomials
in a small parameter. Two families are used:

1. Series in `eps`, the Clairaut-dependent expansion parameter of a single
   geodesic (A1, C1, C1', A2, C2). These depend on nothing else and are
   plain functions.
2. Series in `eps` whose coefficients are themselves polynomials in the
   third flattening `n` of the ellipsoid (A3, C3, C4). The `n`-polynomials
   are evaluated once per ellipsoid by `EllipsoidSeries`.

All expansions are carried to SERIES_ORDER = 6, which is sufficient for
full double precision for |f| < 0.01.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. J. Geodesy 87, 43-55,
  Eqs. (15), (17), (18), (23), (24), (25), (42), (43).
"""

import math
from typing import List

from common.constants import SERIES_ORDER
from geospatial.geomath import polyval, sq


NA1 = SERIES_ORDER
NC1 = SERIES_ORDER
NC1P = SERIES_ORDER
NA2 = SERIES_ORDER
NC2 = SERIES_ORDER
NA3 = SERIES_ORDER
NC3 = SERIES_ORDER
NC4 = SERIES_ORDER


# Each table below lists, for each coefficient, the integer numerators of
# a polynomial (highest power first) followed by a common denominator.

_A1M1_COEFF = [1, 4, 64, 0, 256]

_C1_COEFF = [
    -1, 6, -16, 32,
    -9, 64, -128, 2048,
    9, -16, 768,
    3, -5, 512,
    -7, 1280,
    -7, 2048,
]

_C1P_COEFF = [
    205, -432, 768, 1536,
    4005, -4736, 3840, 12288,
    -225, 116, 384,
    -7173, 2695, 7680,
    3467, 7680,
    38081, 61440,
]

_A2M1_COEFF = [-11, -28, -192, 0, 256]

_C2_COEFF = [
    1, 2, 16, 32,
    35, 64, 384, 2048,
    15, 80, 768,
    7, 35, 512,
    63, 1280,
    77, 2048,
]

_A3_COEFF = [
    -3, 128,
    -2, -3, 64,
    -1, -3, -1, 16,
    3, -1, -2, 8,
    1, -1, 2,
    1, 1,
]

_C3_COEFF = [
    3, 128,
    2, 5, 128,
    -1, 3, 3, 64,
    -1, 0, 1, 8,
    -1, 1, 4,
    5, 256,
    1, 3, 128,
    -3, -2, 3, 64,
    1, -3, 2, 32,
    7, 512,
    -10, 9, 384,
    5, -9, 5, 192,
    7, 512,
    -14, 7, 512,
    21, 2560,
]

_C4_COEFF = [
    97, 15015,
    1088, 156, 45045,
    -224, -4784, 1573, 45045,
    -10656, 14144, -4576, -858, 45045,
    64, 624, -4576, 6864, -3003, 15015,
    100, 208, 572, 3432, -12012, 30030, 45045,
    1, 9009,
    -2944, 468, 135135,
    5792, 1040, -1287, 135135,
    5952, -11648, 9152, -2574, 135135,
    -64, -624, 4576, -6864, 3003, 135135,
    8, 10725,
    1856, -936, 225225,
    -8448, 4992, -1144, 225225,
    -1440, 4160, -4576, 1716, 225225,
    -136, 63063,
    1024, -208, 105105,
    3584, -3328, 1144, 315315,
    -128, 135135,
    -2560, 832, 405405,
    128, 99099,
]


def expansion_parameter(k2: float) -> float:
    """eps = k² / (2(1 + sqrt(1 + k²)) + k²), i.e. (sqrt(1+k²)-1)/(sqrt(1+k²)+1)."""
    return k2 / (2 * (1 + math.sqrt(1 + k2)) + k2)


def _sine_coefficients(eps: float, coeff: List[int], order: int) -> List[float]:
    """Evaluate the coefficients of a series whose l-th term is O(eps^l).

    Index 0 of the returned list is unused (zero) so that index l holds
    the coefficient of sin(2l sigma).
    """
    c = [0.0] * (order + 1)
    eps2 = sq(eps)
    d = eps
    o = 0
    for l in range(1, order + 1):
        m = (order - l) // 2
        c[l] = d * polyval(m, coeff, o, eps2) / coeff[o + m + 1]
        o += m + 2
        d *= eps
    return c


def a1m1f(eps: float) -> float:
    """A1 - 1, the scale factor between sigma and s/b, minus one."""
    m = NA1 // 2
    t = polyval(m, _A1M1_COEFF, 0, sq(eps)) / _A1M1_COEFF[m + 1]
    return (t + eps) / (1 - eps)


def c1f(eps: float) -> List[float]:
    """Coefficients C1[l] of the distance integral I1."""
    return _sine_coefficients(eps, _C1_COEFF, NC1)


def c1pf(eps: float) -> List[float]:
    """Coefficients C1'[l] of the reverted series giving sigma from tau."""
    return _sine_coefficients(eps, _C1P_COEFF, NC1P)


def a2m1f(eps: float) -> float:
    """A2 - 1, for the reduced-length integral I2."""
    m = NA2 // 2
    t = polyval(m, _A2M1_COEFF, 0, sq(eps)) / _A2M1_COEFF[m + 1]
    return (t - eps) / (1 + eps)


def c2f(eps: float) -> List[float]:
    """Coefficients C2[l] of the reduced-length integral I2."""
    return _sine_coefficients(eps, _C2_COEFF, NC2)


def sin_cos_series(sinp: bool, sinx: float, cosx: float, c: List[float]) -> float:
    """Evaluate a trigonometric series by Clenshaw summation.

    Computes sum(c[l] * sin(2 l x), l = 1..N) when `sinp` is True, with
    c[0] ignored, and sum(c[l] * cos((2 l + 1) x), l = 0..N-1) otherwise.

    Parameters
    ----------
    sinp : bool
        Sine series if True, cosine series if False.
    sinx, cosx : float
        sin(x) and cos(x).
    c : list of float
        Series coefficients.
    """
    k = len(c)
    n = k - (1 if sinp else 0)
    ar = 2 * (cosx - sinx) * (cosx + sinx)
    y1 = 0.0
    if n & 1:
        k -= 1
        y0 = c[k]
    else:
        y0 = 0.0
    n //= 2
    while n:
        n -= 1
        k -= 1
        y1 = ar * y0 - y1 + c[k]
        k -= 1
        y0 = ar * y1 - y0 + c[k]
    return 2 * sinx * cosx * y0 if sinp else cosx * (y0 - y1)


class EllipsoidSeries:
    """Series coefficients that depend on the ellipsoid's third flattening.

    Parameters
    ----------
    n : float
        Third flattening of the ellipsoid.

    Notes
    -----
    The tables are evaluated once; `a3f`, `c3f` and `c4f` then only need
    a polynomial evaluation in eps per coefficient.
    """

    def __init__(self, n: float):
        self.n = n
        self._a3x = self._a3_table(n)
        self._c3x = self._c3_table(n)
        self._c4x = self._c4_table(n)

    @staticmethod
    def _a3_table(n: float) -> List[float]:
        a3x = []
        o = 0
        for j in range(NA3 - 1, -1, -1):
            m = min(NA3 - j - 1, j)
            a3x.append(polyval(m, _A3_COEFF, o, n) / _A3_COEFF[o + m + 1])
            o += m + 2
        return a3x

    @staticmethod
    def _c3_table(n: float) -> List[float]:
        c3x = []
        o = 0
        for l in range(1, NC3):
            for j in range(NC3 - 1, l - 1, -1):
                m = min(NC3 - j - 1, j)
                c3x.append(polyval(m, _C3_COEFF, o, n) / _C3_COEFF[o + m + 1])
                o += m + 2
        return c3x

    @staticmethod
    def _c4_table(n: float) -> List[float]:
        c4x = []
        o = 0
        for l in range(NC4):
            for j in range(NC4 - 1, l - 1, -1):
                m = NC4 - j - 1
                c4x.append(polyval(m, _C4_COEFF, o, n) / _C4_COEFF[o + m + 1])
                o += m + 2
        return c4x

    def a3f(self, eps: float) -> float:
        """A3, the scale of the longitude integral I3."""
        return polyval(NA3 - 1, self._a3x, 0, eps)

    def c3f(self, eps: float) -> List[float]:
        """Coefficients C3[l] of the longitude integral I3 (index 0 unused)."""
        c = [0.0] * NC3
        mult = 1.0
        o = 0
        for l in range(1, NC3):
            m = NC3 - l - 1
            mult *= eps
            c[l] = mult * polyval(m, self._c3x, o, eps)
            o += m + 1
        return c

    def c4f(self, eps: float) -> List[float]:
        """Coefficients C4[l] of the area integral I4."""
        c = [0.0] * NC4
        mult = 1.0
        o = 0
        for l in range(NC4):
            m = NC4 - l - 1
            c[l] = mult * polyval(m, self._c4x, o, eps)
            o += m + 1
            mult *= eps
        return c
