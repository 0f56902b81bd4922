# geomkit/geometry/line.py
import logging
import math
from typing import Any, ClassVar, Optional

from pydantic import Field, field_validator

from geomkit.geometry.kinds import GeometryKind, kind_of
from geomkit.geometry.matrix import apply_linear, resolve_rotation, rotate_point
from geomkit.geometry.precision import resolve_tolerance
from geomkit.geometry.vector import Vector, as_elements, to_3d_elements
from geomkit.utils.base_model import GeometryModel

logger = logging.getLogger(__name__)


class Line(GeometryModel):
    """
    An infinite straight line in 3D space.

    The line is stored as an anchor point and a unit direction vector. 2D
    input is placed in the z = 0 plane. Construction fails for input with
    more than three components and for a zero-length direction.

    Binary operations accept points (Vectors or sequences), other lines,
    planes and line segments. Where a plane or segment already implements
    the formula, the call is forwarded to it with this line as the argument.
    """
    kind: ClassVar[GeometryKind] = GeometryKind.LINE

    X: ClassVar["Line"]
    Y: ClassVar["Line"]
    Z: ClassVar["Line"]

    anchor: Vector = Field(description="A point on the line")
    direction: Vector = Field(description="Unit vector along the line")

    def __init__(self, anchor: Any = None, direction: Any = None, **data: Any) -> None:
        super().__init__(anchor=anchor, direction=direction, **data)

    @field_validator("anchor", "direction", mode="before")
    @classmethod
    def coerce_vector(cls, value: Any) -> Vector:
        """Copy the input into a fresh 3D Vector so the line never aliases caller state."""
        if value is None:
            raise ValueError("Line requires both an anchor and a direction")
        elements = to_3d_elements(value)
        if elements is None:
            raise ValueError("Line anchor and direction must be 2D or 3D")
        return Vector(elements)

    @field_validator("direction")
    @classmethod
    def normalize_direction(cls, value: Vector) -> Vector:
        mod = value.modulus()
        if mod == 0:
            raise ValueError("Line direction cannot have zero length")
        return Vector([x / mod for x in value.elements])

    def eql(self, line: Any, tolerance: Optional[float] = None) -> bool:
        """
        Two lines are equal when they are parallel (in either sense) and the
        other line's anchor lies on this one.
        """
        if kind_of(line) is not GeometryKind.LINE:
            return False
        tolerance = resolve_tolerance(tolerance)
        return bool(self.is_parallel_to(line, tolerance=tolerance)
                    and self.contains(line.anchor, tolerance=tolerance))

    def dup(self) -> "Line":
        return Line(self.anchor, self.direction)

    def translate(self, vector: Any) -> "Line":
        """Copy of the line moved by a 2D or 3D offset."""
        v = as_elements(vector)
        offset = [v[0], v[1], v[2] if len(v) > 2 else 0.0]
        return Line([a + d for a, d in zip(self.anchor.elements, offset)], self.direction)

    def is_parallel_to(self, obj: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        """
        Whether this line runs parallel (or anti-parallel) to a line, plane
        or segment. Undefined (None) for a point.
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind in (GeometryKind.PLANE, GeometryKind.SEGMENT):
            return obj.is_parallel_to(self, tolerance=tolerance)
        if kind is not GeometryKind.LINE:
            return None
        theta = self.direction.angle_from(obj.direction)
        return abs(theta) <= tolerance or abs(theta - math.pi) <= tolerance

    def distance_from(self, obj: Any, tolerance: Optional[float] = None) -> Optional[float]:
        """
        Shortest distance to a point, line, plane or segment.

        Returns:
            None for a point that is not 2D or 3D
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind in (GeometryKind.PLANE, GeometryKind.SEGMENT):
            return obj.distance_from(self, tolerance=tolerance)
        if kind is GeometryKind.LINE:
            if self.is_parallel_to(obj, tolerance=tolerance):
                return self.distance_from(obj.anchor, tolerance=tolerance)
            # Distance along the common perpendicular
            n = self.direction.cross(obj.direction).to_unit_vector()
            return abs(self.anchor.subtract(obj.anchor).dot(n))

        p = to_3d_elements(obj)
        if p is None:
            return None
        pa = [pi - ai for pi, ai in zip(p, self.anchor.elements)]
        mod_pa = math.sqrt(sum(x * x for x in pa))
        if mod_pa == 0:
            return 0.0
        # Direction is a unit vector
        cos_theta = sum(x * d for x, d in zip(pa, self.direction.elements)) / mod_pa
        sin2 = 1 - cos_theta * cos_theta
        # Roundoff can push sin^2 slightly below zero
        return abs(mod_pa * math.sqrt(max(0.0, sin2)))

    def contains(self, obj: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        """
        Whether a point, segment or line lies on this line.

        A line contains another line when both are equal. Undefined (None) for
        a plane.
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind is GeometryKind.SEGMENT:
            return bool(self.contains(obj.start, tolerance=tolerance)
                        and self.contains(obj.end, tolerance=tolerance))
        if kind is GeometryKind.LINE:
            return self.eql(obj, tolerance=tolerance)
        if kind is GeometryKind.PLANE:
            return None
        dist = self.distance_from(obj, tolerance=tolerance)
        return dist is not None and dist <= tolerance

    def position_of(self, point: Any, tolerance: Optional[float] = None) -> Optional[float]:
        """
        Signed distance of a point on the line from the anchor, measured along
        the direction.

        Returns:
            None if the point is not on the line
        """
        if not self.contains(point, tolerance=tolerance):
            return None
        return self.parameter_of(to_3d_elements(point))

    def parameter_of(self, p: Any) -> float:
        """Signed position of the foot of the perpendicular from p, measured from the anchor."""
        return sum((pi - ai) * d for pi, ai, d in zip(p, self.anchor.elements, self.direction.elements))

    def lies_in(self, plane: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        return plane.contains(self, tolerance=tolerance)

    def intersects(self, obj: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        """Whether this line meets a line, plane or segment in exactly one point."""
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind in (GeometryKind.PLANE, GeometryKind.SEGMENT):
            return obj.intersects(self, tolerance=tolerance)
        if kind is not GeometryKind.LINE:
            return None
        return (not self.is_parallel_to(obj, tolerance=tolerance)
                and self.distance_from(obj, tolerance=tolerance) <= tolerance)

    def intersection_with(self, obj: Any, tolerance: Optional[float] = None) -> Optional[Vector]:
        """
        The unique point shared with a line, plane or segment.

        Returns:
            None if the objects do not intersect
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind in (GeometryKind.PLANE, GeometryKind.SEGMENT):
            return obj.intersection_with(self, tolerance=tolerance)
        if kind is not GeometryKind.LINE or not self.intersects(obj, tolerance=tolerance):
            return None

        p, x = self.anchor, self.direction
        q, y = obj.anchor, obj.direction
        p_sub_q = p.subtract(q)
        x_dot_q_sub_p = -x.dot(p_sub_q)
        y_dot_p_sub_q = y.dot(p_sub_q)
        x_dot_x = x.dot(x)
        y_dot_y = y.dot(y)
        x_dot_y = x.dot(y)
        # Denominator only vanishes for parallel lines, excluded above
        k = ((x_dot_q_sub_p * y_dot_y / x_dot_x + x_dot_y * y_dot_p_sub_q)
             / (y_dot_y - x_dot_y * x_dot_y))
        return p.add(x.multiply(k))

    def point_closest_to(self, obj: Any, tolerance: Optional[float] = None) -> Optional[Vector]:
        """
        The point on this line closest to a point, line, segment or plane.

        Returns:
            None for a parallel line or plane (every point is equally close)
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind is GeometryKind.SEGMENT:
            p = obj.point_closest_to(self, tolerance=tolerance)
            return None if p is None else self.point_closest_to(p, tolerance=tolerance)

        if kind is GeometryKind.LINE:
            if self.intersects(obj, tolerance=tolerance):
                return self.intersection_with(obj, tolerance=tolerance)
            if self.is_parallel_to(obj, tolerance=tolerance):
                logger.debug("Parallel lines have no unique closest point")
                return None
            from geomkit.geometry.plane import Plane

            # Plane containing obj and the common perpendicular; it cuts this
            # line at the closest point
            normal = self.direction.cross(obj.direction).cross(obj.direction)
            plane = Plane.create(obj.anchor, normal)
            if plane is None:
                return None
            return plane.intersection_with(self, tolerance=tolerance)

        if kind is GeometryKind.PLANE:
            if not obj.intersects(self, tolerance=tolerance):
                return None
            return obj.intersection_with(self, tolerance=tolerance)

        p = to_3d_elements(obj)
        if p is None:
            return None
        if self.contains(p, tolerance=tolerance):
            return Vector(p)
        # Foot of the perpendicular
        return self.anchor.add(self.direction.multiply(self.parameter_of(p)))

    def rotate(self, t: Any, line: Any, tolerance: Optional[float] = None) -> Optional["Line"]:
        """
        Copy of this line rotated by t radians (or a rotation Matrix) about
        another line.

        The anchor is rotated about the pivot line's closest point to it, and
        the direction about the pivot's direction, so the sense of the pivot
        direction matters. A 2D or 3D point pivot stands for a line through
        that point parallel to the z axis.
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(line)
        if kind is GeometryKind.POINT:
            pivot = to_3d_elements(line)
            if pivot is None:
                return None
            line = Line(pivot, Vector.k)
        elif kind is not GeometryKind.LINE:
            return None

        rotation = resolve_rotation(t, line.direction, size=3)
        if rotation is None:
            return None
        centre = line.point_closest_to(self.anchor, tolerance=tolerance).elements
        return Line.create(
            rotate_point(rotation, self.anchor.elements, centre),
            apply_linear(rotation, self.direction.elements),
        )

    def reverse(self) -> "Line":
        return Line(self.anchor, self.direction.multiply(-1))

    def reflection_in(self, obj: Any, tolerance: Optional[float] = None) -> Optional["Line"]:
        """Mirror image of this line in a point, line or plane."""
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind is GeometryKind.PLANE:
            new_anchor = self.anchor.reflection_in(obj, tolerance=tolerance)
            # Mirror a second point, anchor + direction, and rebuild the direction
            tip = self.anchor.add(self.direction)
            mirrored = tip.reflection_in(obj, tolerance=tolerance)
            return Line.create(new_anchor, mirrored.subtract(new_anchor))
        if kind is GeometryKind.LINE:
            # Half a turn about the mirror line
            return self.rotate(math.pi, obj, tolerance=tolerance)
        if kind is not GeometryKind.POINT:
            return None
        p = to_3d_elements(obj)
        if p is None:
            return None
        return Line(self.anchor.reflection_in(p), self.direction)

    def __str__(self) -> str:
        return f"Line({self.anchor} -> {self.direction})"


Line.X = Line(Vector.zero(3), Vector.i).lock()
Line.Y = Line(Vector.zero(3), Vector.j).lock()
Line.Z = Line(Vector.zero(3), Vector.k).lock()
