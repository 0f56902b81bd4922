# geomkit/geometry/plane.py
import logging
import math
from typing import Any, ClassVar, Iterable, Optional

from pydantic import Field, field_validator, model_validator

from geomkit.geometry.kinds import GeometryKind, kind_of
from geomkit.geometry.line import Line
from geomkit.geometry.matrix import Matrix, apply_linear, resolve_rotation, rotate_point
from geomkit.geometry.precision import resolve_tolerance
from geomkit.geometry.vector import Vector, as_elements, to_3d_elements
from geomkit.utils.base_model import GeometryModel

logger = logging.getLogger(__name__)


def _triangle_normal(a: Vector, b: Vector, c: Vector) -> Vector:
    """Unit normal of the corner at b, from (a - b) x (c - b); zero for collinear points."""
    return a.subtract(b).cross(c.subtract(b)).to_unit_vector()


class Plane(GeometryModel):
    """
    An infinite plane in 3D space.

    Stored as an anchor point and a unit normal. It can be built from a normal,
    `Plane(anchor, normal)`, or from three points, `Plane(anchor, p1, p2)`, in
    which case the normal is (p1 - anchor) x (p2 - anchor). Construction fails
    when the normal has zero length (including collinear points).
    """
    kind: ClassVar[GeometryKind] = GeometryKind.PLANE

    XY: ClassVar["Plane"]
    YZ: ClassVar["Plane"]
    ZX: ClassVar["Plane"]
    YX: ClassVar["Plane"]
    ZY: ClassVar["Plane"]
    XZ: ClassVar["Plane"]

    anchor: Vector = Field(description="A point in the plane")
    normal: Vector = Field(description="Unit vector perpendicular to the plane")

    def __init__(self, anchor: Any = None, v1: Any = None, v2: Any = None, **data: Any) -> None:
        if v2 is not None:
            data["through"] = (v1, v2)
        elif v1 is not None or "normal" not in data:
            data["normal"] = v1
        super().__init__(anchor=anchor, **data)

    @model_validator(mode="before")
    @classmethod
    def normal_from_points(cls, data: Any) -> Any:
        """Derive the normal when the plane is given as three points."""
        if not isinstance(data, dict) or "through" not in data:
            return data
        data = dict(data)
        p1, p2 = data.pop("through")
        points = [to_3d_elements(p) if p is not None else None for p in (data.get("anchor"), p1, p2)]
        if any(p is None for p in points):
            raise ValueError("Plane points must be 2D or 3D")
        a, b, c = (Vector(p) for p in points)
        data["normal"] = b.subtract(a).cross(c.subtract(a))
        return data

    @field_validator("anchor", "normal", mode="before")
    @classmethod
    def coerce_vector(cls, value: Any) -> Vector:
        """Copy the input into a fresh 3D Vector so the plane never aliases caller state."""
        if value is None:
            raise ValueError("Plane requires an anchor and a normal")
        elements = to_3d_elements(value)
        if elements is None:
            raise ValueError("Plane anchor and normal must be 2D or 3D")
        return Vector(elements)

    @field_validator("normal")
    @classmethod
    def normalize_normal(cls, value: Vector) -> Vector:
        mod = value.modulus()
        if mod == 0:
            raise ValueError("Plane normal cannot have zero length")
        return Vector([x / mod for x in value.elements])

    @classmethod
    def from_points(cls, points: Iterable[Any], tolerance: Optional[float] = None) -> Optional["Plane"]:
        """
        Best-fit plane through an ordered list of points, such as the vertices
        of a polygon.

        The normal is the sum of the corner normals around the list, so it
        points the way that makes the points run anticlockwise.

        Returns:
            None if fewer than three points are given, a point is not 2D/3D, or
            the points are not coplanar
        """
        tolerance = resolve_tolerance(tolerance)
        vertices = []
        for point in points:
            p = to_3d_elements(point)
            if p is None:
                return None
            vertices.append(Vector(p))
        if len(vertices) < 3:
            logger.debug(f"Need at least three points for a plane, got {len(vertices)}")
            return None

        total = Vector.zero(3)
        previous = None
        for n in range(2, len(vertices)):
            normal = _triangle_normal(vertices[n], vertices[n - 1], vertices[n - 2])
            if previous is not None:
                # Each corner normal must stay (anti)parallel to the last one
                theta = normal.angle_from(previous)
                if theta is not None and not (abs(theta) <= tolerance or abs(theta - math.pi) <= tolerance):
                    logger.debug("Points are not coplanar")
                    return None
            total = total.add(normal)
            previous = normal

        # Corners at the first and last point, which the loop skips
        total = total.add(_triangle_normal(vertices[1], vertices[0], vertices[-1]))
        total = total.add(_triangle_normal(vertices[0], vertices[-1], vertices[-2]))
        return cls.create(vertices[0], total)

    def eql(self, plane: Any, tolerance: Optional[float] = None) -> bool:
        """Planes are equal when parallel (either normal sense) and one anchor lies in the other."""
        if kind_of(plane) is not GeometryKind.PLANE:
            return False
        tolerance = resolve_tolerance(tolerance)
        return bool(self.contains(plane.anchor, tolerance=tolerance)
                    and self.is_parallel_to(plane, tolerance=tolerance))

    def dup(self) -> "Plane":
        return Plane(self.anchor, self.normal)

    def translate(self, vector: Any) -> "Plane":
        v = as_elements(vector)
        offset = [v[0], v[1], v[2] if len(v) > 2 else 0.0]
        return Plane([a + d for a, d in zip(self.anchor.elements, offset)], self.normal)

    def is_parallel_to(self, obj: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind is GeometryKind.PLANE:
            theta = self.normal.angle_from(obj.normal)
            return abs(theta) <= tolerance or abs(math.pi - theta) <= tolerance
        if kind is GeometryKind.LINE:
            return self.normal.is_perpendicular_to(obj.direction, tolerance=tolerance)
        if kind is GeometryKind.SEGMENT:
            return self.is_parallel_to(obj.line, tolerance=tolerance)
        return None

    def is_perpendicular_to(self, plane: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        if kind_of(plane) is not GeometryKind.PLANE:
            return None
        theta = self.normal.angle_from(plane.normal)
        return abs(math.pi / 2 - theta) <= resolve_tolerance(tolerance)

    def distance_from(self, obj: Any, tolerance: Optional[float] = None) -> Optional[float]:
        """
        Shortest distance to a point, line, plane or segment.

        Anything that meets the plane is at distance 0.
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind is GeometryKind.SEGMENT:
            return obj.distance_from(self, tolerance=tolerance)
        if self.intersects(obj, tolerance=tolerance) or self.contains(obj, tolerance=tolerance):
            return 0.0
        if kind in (GeometryKind.PLANE, GeometryKind.LINE):
            return abs(self.anchor.subtract(obj.anchor).dot(self.normal))
        p = to_3d_elements(obj)
        if p is None:
            return None
        return abs(self.anchor.subtract(p).dot(self.normal))

    def contains(self, obj: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        """
        Whether a point, line or segment lies in the plane.

        Undefined (None) for another plane; use eql() for that.
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind is GeometryKind.PLANE:
            return None
        if kind is GeometryKind.LINE:
            return bool(self.contains(obj.anchor, tolerance=tolerance)
                        and self.contains(obj.anchor.add(obj.direction), tolerance=tolerance))
        if kind is GeometryKind.SEGMENT:
            return bool(self.contains(obj.start, tolerance=tolerance)
                        and self.contains(obj.end, tolerance=tolerance))
        p = to_3d_elements(obj)
        if p is None:
            return None
        return abs(self.normal.dot(self.anchor.subtract(p))) <= tolerance

    def intersects(self, obj: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        """Whether a line, plane or segment crosses this plane. Undefined (None) for a point."""
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind is GeometryKind.POINT:
            return None
        if kind is GeometryKind.SEGMENT:
            return obj.intersects(self, tolerance=tolerance)
        return not self.is_parallel_to(obj, tolerance=tolerance)

    def intersection_with(self, obj: Any, tolerance: Optional[float] = None) -> Optional[Any]:
        """
        The point where a line or segment crosses the plane, or the Line
        shared with another plane.

        Returns:
            None if the objects do not intersect
        """
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind is GeometryKind.SEGMENT:
            return obj.intersection_with(self, tolerance=tolerance)
        if not self.intersects(obj, tolerance=tolerance):
            return None
        if kind is GeometryKind.LINE:
            # Solve N . (A + kD - P) = 0 for k
            multiplier = (self.normal.dot(self.anchor.subtract(obj.anchor))
                          / self.normal.dot(obj.direction))
            return obj.anchor.add(obj.direction.multiply(multiplier))
        return self._intersection_with_plane(obj, tolerance)

    def _intersection_with_plane(self, plane: "Plane", tolerance: float) -> Optional[Line]:
        cross = self.normal.cross(plane.normal)
        direction = cross.to_unit_vector()
        n, o = self.normal.elements, plane.normal.elements
        rhs = Vector([self.normal.dot(self.anchor), plane.normal.dot(plane.anchor)])
        # Look for a coordinate that can be set to zero on the intersection line;
        # the other two then solve a 2x2 system, unless that system is singular.
        # Each system's determinant is the matching component of the cross product.
        for zero_axis in sorted(range(3), key=lambda axis: -abs(cross.elements[axis])):
            first, second = (zero_axis + 1) % 3, (zero_axis + 2) % 3
            solver = Matrix([[n[first], n[second]], [o[first], o[second]]])
            inverse = solver.inverse(tolerance=tolerance)
            if inverse is None:
                continue
            solution = inverse.multiply(rhs).elements
            anchor = [0.0, 0.0, 0.0]
            anchor[first] = solution[0]
            anchor[second] = solution[1]
            return Line.create(anchor, direction)
        logger.debug("No non-singular coordinate pair found for plane intersection")
        return None

    def point_closest_to(self, point: Any, tolerance: Optional[float] = None) -> Optional[Vector]:
        """Foot of the perpendicular from a 2D or 3D point; None for anything else."""
        if kind_of(point) is not GeometryKind.POINT:
            return None
        p = to_3d_elements(point)
        if p is None:
            return None
        dot = self.anchor.subtract(p).dot(self.normal)
        return Vector(p).add(self.normal.multiply(dot))

    def rotate(self, t: Any, line: Any, tolerance: Optional[float] = None) -> Optional["Plane"]:
        """
        Copy of this plane rotated by t radians (or a rotation Matrix) about a
        line. The anchor turns about the line's closest point to it.
        """
        if kind_of(line) is not GeometryKind.LINE:
            return None
        rotation = resolve_rotation(t, line.direction, size=3)
        if rotation is None:
            return None
        centre = line.point_closest_to(self.anchor, tolerance=tolerance).elements
        return Plane.create(
            rotate_point(rotation, self.anchor.elements, centre),
            apply_linear(rotation, self.normal.elements),
        )

    def reflection_in(self, obj: Any, tolerance: Optional[float] = None) -> Optional["Plane"]:
        """Mirror image of this plane in a point, line or plane."""
        tolerance = resolve_tolerance(tolerance)
        kind = kind_of(obj)
        if kind is GeometryKind.PLANE:
            new_anchor = self.anchor.reflection_in(obj, tolerance=tolerance)
            # Mirror anchor + normal as well and rebuild the normal from the two images
            tip = self.anchor.add(self.normal)
            mirrored = tip.reflection_in(obj, tolerance=tolerance)
            return Plane.create(new_anchor, mirrored.subtract(new_anchor))
        if kind is GeometryKind.LINE:
            return self.rotate(math.pi, obj, tolerance=tolerance)
        if kind is not GeometryKind.POINT:
            return None
        p = to_3d_elements(obj)
        if p is None:
            return None
        return Plane(self.anchor.reflection_in(p), self.normal)

    def __str__(self) -> str:
        return f"Plane({self.anchor}, normal={self.normal})"


Plane.XY = Plane(Vector.zero(3), Vector.k).lock()
Plane.YZ = Plane(Vector.zero(3), Vector.i).lock()
Plane.ZX = Plane(Vector.zero(3), Vector.j).lock()
Plane.YX = Plane.XY
Plane.ZY = Plane.YZ
Plane.XZ = Plane.ZX
