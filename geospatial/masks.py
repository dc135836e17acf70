"""
Capability masks and mode flags for the geodesic solvers.

`GeodesicMask` selects which quantities a computation returns. Each output
bit is combined with the internal series capabilities (CAP_*) it needs, so
that a `GeodesicLine` can decide at construction which series coefficients
to precompute:

=================  =========  ============================
Member             Bit        Series needed
=================  =========  ============================
LATITUDE           1 << 7     none (always computed)
LONGITUDE          1 << 8     C3
AZIMUTH            1 << 9     none (always computed)
DISTANCE           1 << 10    C1
DISTANCE_IN        1 << 11    C1, C1p
REDUCED_LENGTH     1 << 12    C1, C2
GEODESIC_SCALE     1 << 13    C1, C2
AREA               1 << 14    C4
LONG_UNROLL        1 << 15    none
=================  =========  ============================

`GeodesicFlags` selects how the length argument of a direct or position
computation is read (ARC_MODE) and whether longitudes are unrolled.

The bit layout is an implementation detail; only member names are stable.
"""

from enum import IntFlag


class GeodesicMask(IntFlag):
    """Quantities to compute (outputs) or accept (inputs)."""

    NONE = 0

    # Series coefficient capabilities
    CAP_C1 = 1 << 0
    CAP_C1P = 1 << 1
    CAP_C2 = 1 << 2
    CAP_C3 = 1 << 3
    CAP_C4 = 1 << 4

    LATITUDE = 1 << 7
    LONGITUDE = 1 << 8 | CAP_C3
    AZIMUTH = 1 << 9
    DISTANCE = 1 << 10 | CAP_C1
    DISTANCE_IN = 1 << 11 | CAP_C1 | CAP_C1P
    REDUCED_LENGTH = 1 << 12 | CAP_C1 | CAP_C2
    GEODESIC_SCALE = 1 << 13 | CAP_C1 | CAP_C2
    AREA = 1 << 14 | CAP_C4
    LONG_UNROLL = 1 << 15

    STANDARD = LATITUDE | LONGITUDE | AZIMUTH | DISTANCE
    ALL = (LATITUDE | LONGITUDE | AZIMUTH | DISTANCE | DISTANCE_IN
           | REDUCED_LENGTH | GEODESIC_SCALE | AREA)


class GeodesicFlags(IntFlag):
    """Modes for direct and line-position computations."""

    NONE = 0
    # Length arguments and results are arc lengths in degrees
    ARC_MODE = 1 << 0
    # Report longitude as a continuous value instead of reducing it
    LONG_UNROLL = 1 << 15

    ALL = ARC_MODE | LONG_UNROLL


CAP_MASK = 0x1F
OUT_ALL = 0x7F80
# Output bits including LONG_UNROLL
OUT_MASK = 0xFF80
