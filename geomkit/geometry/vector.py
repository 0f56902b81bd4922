# geomkit/geometry/vector.py
import logging
import math
import random
from typing import Any, Callable, ClassVar, List, Optional, Tuple

from pydantic import Field, field_validator

from geomkit.geometry.kinds import GeometryKind, kind_of
from geomkit.geometry.precision import resolve_tolerance
from geomkit.utils.base_model import GeometryModel

logger = logging.getLogger(__name__)


def as_elements(value: Any) -> List[float]:
    """Return the components of a Vector, or of a raw sequence of numbers, as a new list."""
    if isinstance(value, Vector):
        return list(value.elements)
    return list(value)


def to_3d_elements(value: Any) -> Optional[List[float]]:
    """
    Return the components of a 2D or 3D point padded to 3D.

    Returns:
        A new list of three numbers, or None for any other dimension
    """
    elements = as_elements(value)
    if len(elements) == 2:
        elements.append(0.0)
    if len(elements) != 3:
        return None
    return elements


def format_number(value: float) -> str:
    """Format a component the way inspect() shows it: integral values without a decimal part."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class Vector(GeometryModel):
    """
    An ordered list of real numbers.

    Vectors serve both as points and directions in 2D/3D geometry and as
    general n-dimensional vectors for the Matrix class. Elements are indexed
    from 1 in e(), mirroring the usual mathematical notation.

    Operations that cannot produce a result (mismatched dimensions, undefined
    angles) return None rather than raising.
    """
    kind: ClassVar[GeometryKind] = GeometryKind.POINT

    i: ClassVar["Vector"]
    j: ClassVar["Vector"]
    k: ClassVar["Vector"]

    elements: Tuple[float, ...] = Field(default=(), description="Components of the vector")

    def __init__(self, elements: Any = (), **data: Any) -> None:
        super().__init__(elements=elements, **data)

    @field_validator("elements", mode="before")
    @classmethod
    def coerce_elements(cls, value: Any) -> Tuple[float, ...]:
        """Accept another Vector or any sequence of numbers."""
        return tuple(as_elements(value))

    @classmethod
    def random(cls, n: int) -> "Vector":
        """Vector of n components drawn uniformly from [0, 1)."""
        return cls([random.random() for _ in range(n)])

    @classmethod
    def zero(cls, n: int) -> "Vector":
        return cls([0.0] * n)

    def e(self, i: int) -> Optional[float]:
        """Return the i-th component (1-based), or None if out of range."""
        if i < 1 or i > len(self.elements):
            return None
        return self.elements[i - 1]

    def dimensions(self) -> int:
        return len(self.elements)

    def modulus(self) -> float:
        """Euclidean length of the vector."""
        return math.sqrt(self.dot(self))

    def eql(self, vector: Any, tolerance: Optional[float] = None) -> bool:
        """
        Check whether every component matches within the tolerance.

        Args:
            vector: Vector or sequence of numbers to compare with
            tolerance: Maximum per-component difference.
                      If None, uses the current global precision.

        Returns:
            False when the dimensions differ
        """
        other = as_elements(vector)
        if len(other) != len(self.elements):
            return False
        tolerance = resolve_tolerance(tolerance)
        return all(abs(a - b) <= tolerance for a, b in zip(self.elements, other))

    def dup(self) -> "Vector":
        """Independent, unlocked copy of this vector."""
        return Vector(self.elements)

    def map(self, fn: Callable[[float, int], float]) -> "Vector":
        """New vector built from fn(component, index) with 1-based indices."""
        return Vector([fn(x, i) for i, x in enumerate(self.elements, start=1)])

    def each(self, fn: Callable[[float, int], Any]) -> None:
        """Call fn(component, index) for every component, with 1-based indices."""
        for i, x in enumerate(self.elements, start=1):
            fn(x, i)

    def to_unit_vector(self) -> "Vector":
        """
        Vector of length 1 in the same direction.

        A zero vector has no direction and is returned as an unchanged copy.
        """
        r = self.modulus()
        if r == 0:
            return self.dup()
        return self.map(lambda x, i: x / r)

    def angle_from(self, vector: Any) -> Optional[float]:
        """
        Unsigned angle to another vector, in radians within [0, pi].

        Returns:
            None if the dimensions differ or either vector has zero length
        """
        other = as_elements(vector)
        if len(other) != len(self.elements):
            return None
        dot = sum(a * b for a, b in zip(self.elements, other))
        mod1 = math.sqrt(sum(a * a for a in self.elements))
        mod2 = math.sqrt(sum(b * b for b in other))
        if mod1 * mod2 == 0:
            logger.debug("Angle is undefined for a zero-length vector")
            return None
        # Clamp for floating point errors
        cos_theta = max(-1.0, min(1.0, dot / (mod1 * mod2)))
        return math.acos(cos_theta)

    def is_parallel_to(self, vector: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        angle = self.angle_from(vector)
        if angle is None:
            return None
        return angle <= resolve_tolerance(tolerance)

    def is_antiparallel_to(self, vector: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        angle = self.angle_from(vector)
        if angle is None:
            return None
        return abs(angle - math.pi) <= resolve_tolerance(tolerance)

    def is_perpendicular_to(self, vector: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        dot = self.dot(vector)
        if dot is None:
            return None
        return abs(dot) <= resolve_tolerance(tolerance)

    def add(self, vector: Any) -> Optional["Vector"]:
        other = as_elements(vector)
        if len(other) != len(self.elements):
            logger.debug(f"Cannot add vectors of dimension {len(self.elements)} and {len(other)}")
            return None
        return self.map(lambda x, i: x + other[i - 1])

    def subtract(self, vector: Any) -> Optional["Vector"]:
        other = as_elements(vector)
        if len(other) != len(self.elements):
            logger.debug(f"Cannot subtract vectors of dimension {len(self.elements)} and {len(other)}")
            return None
        return self.map(lambda x, i: x - other[i - 1])

    def multiply(self, k: float) -> "Vector":
        """Multiply every component by a scalar."""
        return self.map(lambda x, i: x * k)

    def dot(self, vector: Any) -> Optional[float]:
        other = as_elements(vector)
        if len(other) != len(self.elements):
            return None
        return sum(a * b for a, b in zip(self.elements, other))

    def cross(self, vector: Any) -> Optional["Vector"]:
        """Cross product; both vectors must be 3D."""
        b = as_elements(vector)
        if len(self.elements) != 3 or len(b) != 3:
            logger.debug("Cross product requires two 3D vectors")
            return None
        a = self.elements
        return Vector([
            a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0],
        ])

    def max(self) -> float:
        """Component with the largest absolute value (0 for an empty vector)."""
        m = 0.0
        for x in reversed(self.elements):
            if abs(x) > abs(m):
                m = x
        return m

    def index_of(self, x: float) -> Optional[int]:
        """1-based index of the first component exactly equal to x."""
        for i, value in enumerate(self.elements, start=1):
            if value == x:
                return i
        return None

    def to_diagonal_matrix(self) -> "Matrix":
        from geomkit.geometry.matrix import Matrix

        return Matrix.from_diagonal(self.elements)

    def round(self) -> "Vector":
        """Round every component to the nearest integer, halves rounding up."""
        return self.map(lambda x, i: float(math.floor(x + 0.5)))

    def snap_to(self, x: float, tolerance: Optional[float] = None) -> "Vector":
        """Replace components within the tolerance of x by x itself."""
        tolerance = resolve_tolerance(tolerance)
        return self.map(lambda y, i: x if abs(y - x) <= tolerance else y)

    def distance_from(self, obj: Any, tolerance: Optional[float] = None) -> Optional[float]:
        """
        Distance from this point to a point, line, plane or line segment.

        Lines, planes and segments compute the distance themselves, with this
        vector as the point argument.
        """
        if kind_of(obj) is not GeometryKind.POINT:
            return obj.distance_from(self, tolerance=tolerance)
        other = as_elements(obj)
        if len(other) != len(self.elements):
            return None
        return math.sqrt(sum((a - b) ** 2 for a, b in zip(self.elements, other)))

    def lies_on(self, line: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        """Whether this point lies on a line or line segment."""
        return line.contains(self, tolerance=tolerance)

    def lies_in(self, plane: Any, tolerance: Optional[float] = None) -> Optional[bool]:
        return plane.contains(self, tolerance=tolerance)

    def rotate(self, t: Any, obj: Any, tolerance: Optional[float] = None) -> Optional["Vector"]:
        """
        Rotate this point by an angle (radians) or a rotation Matrix.

        Args:
            t: Angle in radians, or a rotation Matrix to apply directly
            obj: For a 2D vector, the point to rotate about. For a 3D vector,
                 the Line to rotate about; the rotation happens in the plane
                 through the line's closest point to this one.

        Returns:
            The rotated point, or None for other dimensions or pivot types
        """
        from geomkit.geometry.matrix import resolve_rotation, rotate_point

        n = len(self.elements)
        if n == 2:
            if kind_of(obj) is not GeometryKind.POINT:
                return None
            centre = as_elements(obj)
            if len(centre) != 2:
                return None
            rotation = resolve_rotation(t, size=2)
        elif n == 3:
            if kind_of(obj) is not GeometryKind.LINE:
                return None
            centre = obj.point_closest_to(self, tolerance=tolerance).elements
            rotation = resolve_rotation(t, obj.direction, size=3)
        else:
            logger.debug(f"Cannot rotate a vector of dimension {n}")
            return None
        if rotation is None:
            return None
        return Vector(rotate_point(rotation, self.elements, centre))

    def reflection_in(self, obj: Any, tolerance: Optional[float] = None) -> Optional["Vector"]:
        """
        Mirror image of this point in a point, line or plane.

        Reflections in lines and planes treat a 2D point as lying in z = 0.
        """
        kind = kind_of(obj)
        if kind in (GeometryKind.LINE, GeometryKind.PLANE):
            p = to_3d_elements(self)
            if p is None:
                return None
            c = obj.point_closest_to(p, tolerance=tolerance).elements
            return Vector([2 * c[n] - p[n] for n in range(3)])
        if kind is not GeometryKind.POINT:
            return None
        q = as_elements(obj)
        if len(q) != len(self.elements):
            return None
        return self.map(lambda x, i: q[i - 1] + (q[i - 1] - x))

    def to_3d(self) -> Optional["Vector"]:
        """Copy of a 3D vector, or a 2D vector padded with z = 0; None otherwise."""
        elements = to_3d_elements(self)
        if elements is None:
            return None
        return Vector(elements)

    def inspect(self) -> str:
        return "[" + ", ".join(format_number(x) for x in self.elements) + "]"

    def set_elements(self, elements: Any) -> "Vector":
        """Replace the components in place. Returns self."""
        self.elements = elements
        return self

    def __add__(self, other: Any) -> Optional["Vector"]:
        return self.add(other)

    def __sub__(self, other: Any) -> Optional["Vector"]:
        return self.subtract(other)

    def __mul__(self, k: float) -> "Vector":
        return self.multiply(k)

    __rmul__ = __mul__

    def __str__(self) -> str:
        return self.inspect()


Vector.i = Vector([1, 0, 0]).lock()
Vector.j = Vector([0, 1, 0]).lock()
Vector.k = Vector([0, 0, 1]).lock()
