"""
Logging Configuration for the geodesic solvers.

The solvers are pure numerical code, so they log sparingly: construction
details and iteration fallbacks at DEBUG, and running out of iterations
at WARNING. The default level is WARNING so that importing the library is
silent; set ``GEODESY_LOG_LEVEL`` (e.g. ``DEBUG``) to see more.
"""

import logging
import os
import sys
from typing import Optional, Union


LOG_LEVEL_ENV_VAR = "GEODESY_LOG_LEVEL"


def _default_level() -> int:
    """Resolve the default level from the environment (WARNING if unset)."""
    name = os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        return logging.WARNING
    return level


def get_logger(name: str, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Get a logger configured for the geodesy library.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int or str, optional
        Logging level. Defaults to the value of ``GEODESY_LOG_LEVEL``,
        or WARNING.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(_default_level() if level is None else level)
    return logger
