# geomkit/geometry/precision.py
"""
Tolerance context for geometric calculations.

A single process-wide value replaces exact floating-point equality in every
approximate comparison. Operations read it at call time, so changing it affects
all subsequent comparisons. Writers sharing it across threads must synchronize
themselves.
"""
import logging
import math
from contextlib import contextmanager
from typing import Iterator, Optional

from geomkit.config import settings

logger = logging.getLogger(__name__)

_precision: float = settings.precision


def _validate(value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"Precision must be a positive finite number, got {value}")
    return value


def get_precision() -> float:
    """Return the tolerance currently used by approximate comparisons."""
    return _precision


def set_precision(value: float) -> None:
    """
    Replace the process-wide tolerance.

    Raises:
        ValueError: If the value is not a positive finite number
    """
    global _precision
    _precision = _validate(value)
    logger.info(f"Geometric precision set to {_precision}")


def reset_precision() -> None:
    """Restore the configured default tolerance."""
    set_precision(settings.precision)


@contextmanager
def precision_context(value: float) -> Iterator[float]:
    """
    Temporarily use another tolerance.

    Example:
        with precision_context(1e-3):
            assert Vector([1, 0]).eql([1.0001, 0])
    """
    previous = get_precision()
    set_precision(value)
    try:
        yield get_precision()
    finally:
        set_precision(previous)


def resolve_tolerance(tolerance: Optional[float] = None) -> float:
    """Return the explicit tolerance if one was given, else the current precision."""
    if tolerance is None:
        return _precision
    return tolerance
