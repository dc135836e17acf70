"""
Compensated summation for long running totals.

Polygon areas are sums of many edge contributions that largely cancel;
on the WGS84 ellipsoid the total is of order 5e14 m² while an edge may
contribute a few m². The accumulator keeps the running sum as an
unevaluated pair (s, t) so that the rounding error of each addition is
retained rather than lost.
"""

import math
from typing import Union

from geospatial.geomath import error_free_sum


class Accumulator:
    """Running sum held as a double-double pair.

    Parameters
    ----------
    y : float or Accumulator
        Initial value; an Accumulator is copied.

    Examples
    --------
    >>> acc = Accumulator()
    >>> for _ in range(10):
    ...     acc.add(0.1)
    >>> acc.sum()
    1.0
    """

    def __init__(self, y: Union[float, "Accumulator"] = 0.0):
        self.set(y)

    def set(self, y: Union[float, "Accumulator"]) -> None:
        """Replace the current value with y."""
        if isinstance(y, Accumulator):
            self._s, self._t = y._s, y._t
        else:
            self._s, self._t = float(y), 0.0

    def add(self, y: float) -> None:
        """Add y to the running sum."""
        y, u = error_free_sum(y, self._t)
        self._s, self._t = error_free_sum(y, self._s)
        if self._s == 0:
            self._s = u
        else:
            self._t += u

    def sum(self, y: float = 0.0) -> float:
        """Return the sum plus y without modifying the accumulator."""
        if y == 0.0:
            return self._s
        b = Accumulator(self)
        b.add(y)
        return b._s

    def negate(self) -> None:
        self._s *= -1
        self._t *= -1

    def remainder(self, y: float) -> None:
        """Reduce the sum to [-y/2, y/2]."""
        self._s = math.remainder(self._s, y)
        self.add(0.0)

    def copy(self) -> "Accumulator":
        return Accumulator(self)
