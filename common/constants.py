"""
Geodetic Constants for Ellipsoidal Geodesic Computations.

This module provides the defining parameters of the reference ellipsoids
supported out of the box, together with their sources, and the fixed
numerical settings of the geodesic solvers.

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- GRS80 parameters: Moritz, H. (2000). Geodetic Reference System 1980.
  Journal of Geodesy, 74(1), 128-133.
- Karney, C.F.F. (2013). Algorithms for geodesics. Journal of Geodesy,
  87(1), 43-55.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Constant:
    """A defining constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The SI unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


class GeodeticConstants:
    """Registry of reference-ellipsoid parameters.

    All constants are class attributes with full metadata. Only the
    semi-major axis and the flattening are stored; every other ellipsoid
    quantity is derived from these two in `geospatial.ellipsoid`.

    WGS84
    -----
    The standard for GPS and global applications.

    GRS80
    -----
    Differs from WGS84 only in the last digits of the flattening;
    used by ITRF-based national datums (ETRS89, NAD83).
    """

    # =========================================================================
    # WGS84 Ellipsoid Parameters
    # Reference: NIMA TR8350.2, Third Edition, 2000
    # =========================================================================

    WGS84_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    WGS84_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Flattening of WGS84 ellipsoid: f = (a - b) / a"
    )

    # =========================================================================
    # GRS80 Ellipsoid Parameters
    # Reference: Moritz (2000)
    # =========================================================================

    GRS80_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="GRS80, Moritz (2000)",
        description="Semi-major axis (equatorial radius) of GRS80 ellipsoid"
    )

    GRS80_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257222101,
        uncertainty=1e-18,  # Derived from J2
        unit="dimensionless",
        source="GRS80, Moritz (2000) (derived)",
        description="Flattening of GRS80 ellipsoid: f = (a - b) / a"
    )


# =============================================================================
# Solver settings
# =============================================================================

# Order of the series expansions in the third flattening n.
SERIES_ORDER: Final[int] = 6

# Newton steps allowed in the inverse solution before switching to bisection.
NEWTON_MAX_ITERATIONS: Final[int] = 20

# Bisection steps allowed once the Newton steps are used up. Enough to shrink
# the azimuth bracket to machine precision (53 bits) with some margin.
BISECTION_EXTRA_ITERATIONS: Final[int] = 53 + 10
