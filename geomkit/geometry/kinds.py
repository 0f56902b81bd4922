"""Tags used to route binary operations on the kind of their argument."""
from enum import Enum
from typing import Any


class GeometryKind(Enum):
    POINT = "point"
    LINE = "line"
    PLANE = "plane"
    SEGMENT = "segment"


def kind_of(obj: Any) -> GeometryKind:
    """
    Classify an operation argument.

    Anything that does not carry its own tag (a Vector, a list or tuple of
    coordinates) is treated as a point.
    """
    return getattr(obj, "kind", GeometryKind.POINT)
