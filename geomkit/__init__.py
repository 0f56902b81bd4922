"""
geomkit - vectors, matrices, lines, planes and line segments
compared under a configurable numeric tolerance.
"""
from geomkit.config import GeometrySettings, configure_logging, settings
from geomkit.geometry import (
    GeometryKind,
    Line,
    LineSegment,
    Matrix,
    Plane,
    Vector,
    get_precision,
    kind_of,
    precision_context,
    reset_precision,
    set_precision,
)
from geomkit.utils import GeometryModel, ReadOnlyModelError

__version__ = "0.1.0"

__all__ = [
    'GeometryKind', 'GeometryModel', 'GeometrySettings', 'Line', 'LineSegment',
    'Matrix', 'Plane', 'ReadOnlyModelError', 'Vector', 'configure_logging',
    'get_precision', 'kind_of', 'precision_context', 'reset_precision',
    'set_precision', 'settings',
]
