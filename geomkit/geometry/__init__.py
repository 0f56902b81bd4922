"""Geometric value types. Import order matters: each module builds on the previous ones."""
from geomkit.geometry.precision import (
    get_precision,
    precision_context,
    reset_precision,
    resolve_tolerance,
    set_precision,
)
from geomkit.geometry.kinds import GeometryKind, kind_of
from geomkit.geometry.vector import Vector
from geomkit.geometry.matrix import Matrix
from geomkit.geometry.line import Line
from geomkit.geometry.plane import Plane
from geomkit.geometry.line_segment import LineSegment

__all__ = [
    'GeometryKind', 'Line', 'LineSegment', 'Matrix', 'Plane', 'Vector',
    'get_precision', 'kind_of', 'precision_context', 'reset_precision',
    'resolve_tolerance', 'set_precision',
]
