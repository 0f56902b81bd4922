# geomkit/geometry/line_segment.py
import logging
from typing import Any, ClassVar, Optional, Tuple

from pydantic import Field, PrivateAttr, field_validator, model_validator

from geomkit.geometry.kinds import GeometryKind, kind_of
from geomkit.geometry.line import Line
from geomkit.geometry.plane import Plane
from geomkit.geometry.precision import resolve_tolerance
from geomkit.geometry.vector import Vector, as_elements, to_3d_elements
from geomkit.utils.base_model import GeometryModel

logger = logging.getLogger(__name__)


class LineSegment(GeometryModel):
    """
    The finite part of a line between two 3D points.

    The supporting Line is derived from the endpoints and cached; it is
    rebuilt whenever either endpoint changes.
    """
    kind: ClassVar[GeometryKind] = GeometryKind.SEGMENT

    start: Vector = Field(description="First endpoint")
    end: Vector = Field(description="Second endpoint")

    _line: Optional[Line] = PrivateAttr(default=None)
    _line_key: Optional[Tuple[Tuple[float, ...], Tuple[float, ...]]] = PrivateAttr(default=None)

    def __init__(self, start: Any = None, end: Any = None, **data: Any) -> None:
        super().__init__(start=start, end=end, **data)

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_point(cls, value: Any) -> Vector:
        if value is None:
            raise ValueError("LineSegment requires a start and an end point")
        elements = to_3d_elements(value)
        if elements is None:
            raise ValueError("LineSegment endpoints must be 2D or 3D")
        return Vector(elements)

    @model_validator(mode="after")
    def check_length(self) -> "LineSegment":
        if self.start.elements == self.end.elements:
            raise ValueError("LineSegment endpoints must differ")
        return self

    @property
    def line(self) -> Line:
        """The infinite line through both endpoints, directed from start to end."""
        key = (self.start.elements, self.end.elements)
        if self._line is None or self._line_key != key:
            self._line = Line(self.start, self.to_vector())
            self._line_key = key
        return self._line

    def eql(self, segment: Any, tolerance: Optional[float] = None) -> bool:
        """Segments are equal when their endpoints match, in either order."""
        if kind_of(segment) is not GeometryKind.SEGMENT:
            return False
        tolerance = resolve_tolerance(tolerance)
        return bool(
            (self.start.eql(segment.start, tolerance) and self.end.eql(segment.end, tolerance))
            or (self.start.eql(segment.end, tolerance) and self.end.eql(segment.start, tolerance))
        )

    def dup(self) -> "LineSegment":
        return LineSegment(self.start, self.end)

    def length(self) -> float:
        return self.to_vector().modulus()

    def to_vector(self) -> Vector:
        """Vector from start to end."""
        return self.end.subtract(self.start)

    def midpoint(self) -> Vector:
        return self.start.add(self.end).multiply(0.5)

    def bisecting_plane(self) -> Plane:
        """Plane through the midpoint, perpendicular to the segment."""
        return Plane(self.midpoint(), self.to_vector())

    def translate(self, vector: Any) -> "LineSegment":
        v = as_elements(vector)
        offset = [v[0], v[1], v[2] if len(v) > 2 else 0.0]
        return LineSegment(self.start.add(offset), self.end.add(offset))

    def is_parallel_to(self, obj: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        return self.line.is_parallel_to(obj, tolerance=tolerance)

    def distance_from(self, obj: Any, tolerance: Optional[float] = None) -> Optional[float]:
        """
        Shortest distance to a point, line, plane or segment.

        A parallel line or plane is equally far from every point, so the start
        point is measured instead. Parallel segments are compared end to end.
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        p = self.point_closest_to(obj, tolerance=tolerance)
        if p is None:
            if kind is GeometryKind.SEGMENT:
                distances = [
                    obj.distance_from(self.start, tolerance=tolerance),
                    obj.distance_from(self.end, tolerance=tolerance),
                    self.distance_from(obj.start, tolerance=tolerance),
                    self.distance_from(obj.end, tolerance=tolerance),
                ]
                return min(d for d in distances if d is not None)
            if kind in (GeometryKind.LINE, GeometryKind.PLANE) and self.is_parallel_to(obj, tolerance=tolerance):
                return self.start.distance_from(obj, tolerance=tolerance)
            return None
        return p.distance_from(obj, tolerance=tolerance)

    def contains(self, obj: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        """
        Whether a point or another segment lies on this segment, endpoints
        included. Undefined (None) for lines and planes.
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind is GeometryKind.SEGMENT:
            return bool(self.contains(obj.start, tolerance=tolerance)
                        and self.contains(obj.end, tolerance=tolerance))
        if kind is not GeometryKind.POINT:
            return None
        p = to_3d_elements(obj)
        if p is None:
            return None
        if self.start.eql(p, tolerance):
            return True
        # A point between the endpoints sees the segment pointing back at the start
        v = self.start.subtract(p)
        vect = self.to_vector()
        return bool(v.is_antiparallel_to(vect, tolerance=tolerance) and v.modulus() <= vect.modulus())

    def intersects(self, obj: Any, tolerance: Optional[float] = None) -> bool:
        return self.intersection_with(obj, tolerance=tolerance) is not None

    def intersection_with(self, obj: Any, tolerance: Optional[float] = None) -> Optional[Vector]:
        """
        The point shared with a line, plane or segment.

        Returns:
            None if the supporting line misses obj, or meets it outside the segment
        """
        tolerance = resolve_tolerance(tolerance)
        if not self.line.intersects(obj, tolerance=tolerance):
            return None
        p = self.line.intersection_with(obj, tolerance=tolerance)
        if p is None or not self.contains(p, tolerance=tolerance):
            return None
        return p

    def point_closest_to(self, obj: Any, tolerance: Optional[float] = None) -> Optional[Vector]:
        """
        The point on this segment closest to a point, line, segment or plane.

        Points beyond either end are clamped to that endpoint.

        Returns:
            None for a parallel line or plane
        """
        tolerance = resolve_tolerance(tolerance)
        if kind_of(obj) is GeometryKind.PLANE:
            v = self.line.intersection_with(obj, tolerance=tolerance)
            if v is None:
                logger.debug(f"{self} runs parallel to {obj}; no unique closest point")
                return None
            return self.point_closest_to(v, tolerance=tolerance)

        p = self.line.point_closest_to(obj, tolerance=tolerance)
        if p is None:
            return None
        if self.contains(p, tolerance=tolerance):
            return p
        if self.line.parameter_of(p.elements) < 0:
            return self.start.dup()
        return self.end.dup()

    def __str__(self) -> str:
        return f"LineSegment({self.start} -> {self.end})"
