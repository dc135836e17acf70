"""
Common utilities and infrastructure for the geodesy library.

This package provides foundational components used across all modules:
- Reference-ellipsoid constants with provenance and solver settings
- Value types for points and solver results
- Logging configuration
"""

from common.constants import (
    Constant,
    GeodeticConstants,
    SERIES_ORDER,
    NEWTON_MAX_ITERATIONS,
    BISECTION_EXTRA_ITERATIONS,
)
from common.types import GeodesicPoint, GeodesicResult, PolygonResult
from common.logging_config import get_logger

__all__ = [
    "Constant",
    "GeodeticConstants",
    "SERIES_ORDER",
    "NEWTON_MAX_ITERATIONS",
    "BISECTION_EXTRA_ITERATIONS",
    "GeodesicPoint",
    "GeodesicResult",
    "PolygonResult",
    "get_logger",
]
