# geomkit/geometry/matrix.py
import logging
import math
import numbers
import random
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Tuple

from pydantic import Field, field_validator

from geomkit.geometry.precision import resolve_tolerance
from geomkit.geometry.vector import Vector, as_elements
from geomkit.utils.base_model import GeometryModel

logger = logging.getLogger(__name__)


class MatrixDimensions(NamedTuple):
    rows: int
    cols: int


def _is_nested(value: Sequence[Any]) -> bool:
    """Whether a sequence holds rows rather than scalars."""
    return len(value) > 0 and not isinstance(value[0], numbers.Real)


def as_rows(value: Any) -> List[List[float]]:
    """
    Return the rows of a Matrix or raw input as new lists.

    A Vector or flat sequence of numbers becomes a single column.
    """
    if isinstance(value, Matrix):
        return [list(row) for row in value.elements]
    if isinstance(value, Vector):
        return [[x] for x in value.elements]
    value = list(value)
    if _is_nested(value):
        return [as_elements(row) for row in value]
    return [[x] for x in value]


class Matrix(GeometryModel):
    """
    A rectangular grid of real numbers.

    Rows and columns are indexed from 1. A matrix with no rows is valid; it
    behaves as an absorbing element for add/subtract and has determinant 1.

    Operations that cannot produce a result (size mismatches, singular
    matrices) return None rather than raising.
    """
    elements: Tuple[Tuple[float, ...], ...] = Field(default=(), description="Rows of the matrix")

    def __init__(self, elements: Any = (), **data: Any) -> None:
        super().__init__(elements=elements, **data)

    @field_validator("elements", mode="before")
    @classmethod
    def coerce_rows(cls, value: Any) -> Tuple[Tuple[float, ...], ...]:
        """Accept a Matrix, nested sequences, or a flat sequence / Vector as a column."""
        rows = as_rows(value)
        if rows and any(len(row) != len(rows[0]) for row in rows):
            raise ValueError("All matrix rows must have the same length")
        return tuple(tuple(row) for row in rows)

    @classmethod
    def identity(cls, n: int) -> "Matrix":
        return cls([[1.0 if i == j else 0.0 for j in range(n)] for i in range(n)])

    @classmethod
    def from_diagonal(cls, elements: Any) -> "Matrix":
        """Square matrix with the given values on the diagonal."""
        values = as_elements(elements)
        n = len(values)
        return cls([[values[i] if i == j else 0.0 for j in range(n)] for i in range(n)])

    @classmethod
    def rotation(cls, theta: float, axis: Any = None) -> Optional["Matrix"]:
        """
        Rotation matrix for an angle in radians.

        Without an axis this is the 2x2 rotation in the plane. With an axis the
        3x3 matrix rotates about that axis (right-hand rule); the axis is
        normalized here.

        Returns:
            None if the axis is not 3D or has zero length
        """
        if axis is None:
            return cls([
                [math.cos(theta), -math.sin(theta)],
                [math.sin(theta), math.cos(theta)],
            ])
        a = as_elements(axis)
        if len(a) != 3:
            logger.debug(f"Rotation axis must be 3D, got {len(a)} components")
            return None
        mod = math.sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])
        if mod == 0:
            logger.debug("Rotation axis has zero length")
            return None
        x, y, z = a[0] / mod, a[1] / mod, a[2] / mod
        s = math.sin(theta)
        c = math.cos(theta)
        t = 1 - c
        return cls([
            [t * x * x + c, t * x * y - s * z, t * x * z + s * y],
            [t * x * y + s * z, t * y * y + c, t * y * z - s * x],
            [t * x * z - s * y, t * y * z + s * x, t * z * z + c],
        ])

    @classmethod
    def rotation_x(cls, t: float) -> "Matrix":
        c, s = math.cos(t), math.sin(t)
        return cls([[1, 0, 0], [0, c, -s], [0, s, c]])

    @classmethod
    def rotation_y(cls, t: float) -> "Matrix":
        c, s = math.cos(t), math.sin(t)
        return cls([[c, 0, s], [0, 1, 0], [-s, 0, c]])

    @classmethod
    def rotation_z(cls, t: float) -> "Matrix":
        c, s = math.cos(t), math.sin(t)
        return cls([[c, -s, 0], [s, c, 0], [0, 0, 1]])

    @classmethod
    def random(cls, n: int, m: int) -> "Matrix":
        return cls.zero(n, m).map(lambda x, i, j: random.random())

    @classmethod
    def zero(cls, n: int, m: int) -> "Matrix":
        return cls([[0.0] * m for _ in range(n)])

    def e(self, i: int, j: int) -> Optional[float]:
        """Element at row i, column j (1-based), or None if out of range."""
        if i < 1 or i > self.rows() or j < 1 or j > self.cols():
            return None
        return self.elements[i - 1][j - 1]

    def row(self, i: int) -> Optional[Vector]:
        if i < 1 or i > self.rows():
            return None
        return Vector(self.elements[i - 1])

    def col(self, j: int) -> Optional[Vector]:
        if self.rows() == 0 or j < 1 or j > self.cols():
            return None
        return Vector([row[j - 1] for row in self.elements])

    def dimensions(self) -> MatrixDimensions:
        return MatrixDimensions(self.rows(), self.cols())

    def rows(self) -> int:
        return len(self.elements)

    def cols(self) -> int:
        if not self.elements:
            return 0
        return len(self.elements[0])

    def eql(self, matrix: Any, tolerance: Optional[float] = None) -> bool:
        """
        Check whether both matrices have the same size and every element
        matches within the tolerance.
        """
        other = as_rows(matrix)
        if self.rows() == 0 or len(other) == 0:
            return self.rows() == len(other)
        if self.rows() != len(other) or self.cols() != len(other[0]):
            return False
        tolerance = resolve_tolerance(tolerance)
        return all(
            abs(a - b) <= tolerance
            for row, other_row in zip(self.elements, other)
            for a, b in zip(row, other_row)
        )

    def dup(self) -> "Matrix":
        return Matrix(self.elements)

    def map(self, fn: Callable[[float, int, int], float]) -> "Matrix":
        """New matrix built from fn(element, row, col) with 1-based indices."""
        return Matrix([
            [fn(x, i, j) for j, x in enumerate(row, start=1)]
            for i, row in enumerate(self.elements, start=1)
        ])

    def is_same_size_as(self, matrix: Any) -> bool:
        other = as_rows(matrix)
        if self.rows() == 0:
            return len(other) == 0
        return self.rows() == len(other) and self.cols() == len(other[0])

    def add(self, matrix: Any) -> Optional["Matrix"]:
        if self.rows() == 0:
            return self.dup()
        other = as_rows(matrix)
        if not self.is_same_size_as(other):
            logger.debug(f"Cannot add a {self.rows()}x{self.cols()} matrix to a differently sized one")
            return None
        return self.map(lambda x, i, j: x + other[i - 1][j - 1])

    def subtract(self, matrix: Any) -> Optional["Matrix"]:
        if self.rows() == 0:
            return self.dup()
        other = as_rows(matrix)
        if not self.is_same_size_as(other):
            logger.debug(f"Cannot subtract a differently sized matrix from a {self.rows()}x{self.cols()} one")
            return None
        return self.map(lambda x, i, j: x - other[i - 1][j - 1])

    def can_multiply_from_left(self, matrix: Any) -> bool:
        """Whether self x matrix is defined (self.cols equals matrix.rows)."""
        if self.rows() == 0:
            return False
        return self.cols() == len(as_rows(matrix))

    def multiply(self, matrix: Any) -> Any:
        """
        Multiply by a scalar, a Matrix, or a Vector.

        Multiplying by a Vector returns a Vector (the single column of the
        product) rather than a one-column Matrix.

        Returns:
            None for an empty receiver or incompatible sizes
        """
        if self.rows() == 0:
            return None
        if isinstance(matrix, numbers.Real):
            return self.map(lambda x, i, j: x * matrix)
        return_vector = isinstance(matrix, Vector)
        other = as_rows(matrix)
        if not other or not self.can_multiply_from_left(other):
            logger.debug(f"Cannot multiply a {self.rows()}x{self.cols()} matrix by one with {len(other)} rows")
            return None
        product = Matrix([
            [sum(a * other[c][j] for c, a in enumerate(row)) for j in range(len(other[0]))]
            for row in self.elements
        ])
        return product.col(1) if return_vector else product

    def minor(self, a: int, b: int, c: int, d: int) -> Optional["Matrix"]:
        """
        The c x d sub-matrix starting at row a, column b (1-based).

        Indices wrap around the edges of the matrix.
        """
        if self.rows() == 0:
            return None
        rows, cols = self.rows(), self.cols()
        return Matrix([
            [self.elements[(a + i - 1) % rows][(b + j - 1) % cols] for j in range(d)]
            for i in range(c)
        ])

    def transpose(self) -> "Matrix":
        if self.rows() == 0:
            return Matrix([])
        return Matrix([list(column) for column in zip(*self.elements)])

    def is_square(self) -> bool:
        return self.rows() == self.cols()

    def max(self) -> Optional[float]:
        """Element with the largest absolute value, or None for an empty matrix."""
        if self.rows() == 0:
            return None
        m = 0.0
        for row in reversed(self.elements):
            for x in reversed(row):
                if abs(x) > abs(m):
                    m = x
        return m

    def index_of(self, x: float) -> Optional[Tuple[int, int]]:
        """(row, col) of the first element equal to x, scanning row by row."""
        for i, row in enumerate(self.elements, start=1):
            for j, value in enumerate(row, start=1):
                if value == x:
                    return i, j
        return None

    def diagonal(self) -> Optional[Vector]:
        if not self.is_square():
            return None
        return Vector([self.elements[i][i] for i in range(self.rows())])

    def to_right_triangular(self) -> "Matrix":
        """
        Reduce to right (upper) triangular form by Gaussian elimination.

        A zero pivot is repaired by adding the first lower row with a non-zero
        entry in that column to the pivot row; rows are never swapped. When no
        such row exists the zero pivot stays and elimination moves on.
        """
        if self.rows() == 0:
            return Matrix([])
        m = [list(row) for row in self.elements]
        n = len(m)
        width = len(m[0])
        for i in range(min(n, width)):
            if m[i][i] == 0:
                for j in range(i + 1, n):
                    if m[j][i] != 0:
                        m[i] = [m[i][p] + m[j][p] for p in range(width)]
                        break
            if m[i][i] != 0:
                for j in range(i + 1, n):
                    multiplier = m[j][i] / m[i][i]
                    # Entries up to the pivot column are zero by construction
                    m[j] = [0.0 if p <= i else m[j][p] - m[i][p] * multiplier for p in range(width)]
        return Matrix(m)

    def determinant(self) -> Optional[float]:
        """Product of the triangular form's diagonal; 1 for an empty matrix, None if not square."""
        if self.rows() == 0:
            return 1.0
        if not self.is_square():
            return None
        triangular = self.to_right_triangular().elements
        det = triangular[0][0]
        for i in range(1, len(triangular)):
            det *= triangular[i][i]
        return det

    def is_singular(self, tolerance: Optional[float] = None) -> bool:
        """
        Whether the matrix is square with a determinant within the tolerance of zero.

        The tolerance is relative to the product of the row lengths, which bounds
        the determinant, so uniformly small entries do not make a matrix singular.
        """
        if not self.is_square():
            return False
        scale = 1.0
        for row in self.elements:
            scale *= math.sqrt(sum(x * x for x in row))
        return abs(self.determinant()) <= resolve_tolerance(tolerance) * scale

    def trace(self) -> Optional[float]:
        if self.rows() == 0:
            return 0.0
        if not self.is_square():
            return None
        return sum(self.elements[i][i] for i in range(self.rows()))

    def rank(self, tolerance: Optional[float] = None) -> int:
        """Number of rows of the triangular form holding an element above the tolerance."""
        if self.rows() == 0:
            return 0
        tolerance = resolve_tolerance(tolerance)
        triangular = self.to_right_triangular().elements
        return sum(1 for row in triangular if any(abs(x) > tolerance for x in row))

    def augment(self, matrix: Any) -> Optional["Matrix"]:
        """Append the columns of another matrix with the same number of rows."""
        if self.rows() == 0:
            return self.dup()
        other = as_rows(matrix)
        if self.rows() != len(other):
            logger.debug(f"Cannot augment a matrix of {self.rows()} rows with one of {len(other)} rows")
            return None
        return Matrix([list(row) + list(extra) for row, extra in zip(self.elements, other)])

    def inverse(self, tolerance: Optional[float] = None) -> Optional["Matrix"]:
        """
        Inverse by Gauss-Jordan elimination of [M | I].

        Returns:
            None for an empty, non-square or singular matrix
        """
        if self.rows() == 0:
            return None
        if not self.is_square() or self.is_singular(tolerance=tolerance):
            logger.debug("Cannot invert a non-square or singular matrix")
            return None
        n = self.rows()
        m = [list(row) for row in self.augment(Matrix.identity(n)).to_right_triangular().elements]
        width = len(m[0])
        inverse_rows: List[List[float]] = [[] for _ in range(n)]
        # Non-singular, so there are no zeros on the diagonal; work from the last row up
        for i in reversed(range(n)):
            divisor = m[i][i]
            m[i] = [x / divisor for x in m[i]]
            # Rows below are final, so the right hand side of this one is too
            inverse_rows[i] = m[i][n:]
            for j in range(i):
                factor = m[j][i]
                m[j] = [m[j][p] - m[i][p] * factor for p in range(width)]
        return Matrix(inverse_rows)

    def round(self) -> "Matrix":
        """Round every element to the nearest integer, halves rounding up."""
        return self.map(lambda x, i, j: float(math.floor(x + 0.5)))

    def snap_to(self, x: float, tolerance: Optional[float] = None) -> "Matrix":
        tolerance = resolve_tolerance(tolerance)
        return self.map(lambda p, i, j: x if abs(p - x) <= tolerance else p)

    def inspect(self) -> str:
        """One bracketed row per line; an empty matrix renders as []."""
        if self.rows() == 0:
            return "[]"
        return "\n".join(Vector(row).inspect() for row in self.elements)

    def set_elements(self, elements: Any) -> "Matrix":
        """Replace the contents in place. Returns self."""
        self.elements = elements
        return self

    def __str__(self) -> str:
        return self.inspect()


def resolve_rotation(t: Any, axis: Any = None, size: int = 2) -> Optional[Matrix]:
    """
    Turn a rotation argument into a size x size Matrix.

    Args:
        t: Either an angle in radians or a ready-made rotation Matrix
        axis: Rotation axis for 3D rotations by angle
        size: Required matrix size (2 or 3)
    """
    if isinstance(t, Matrix):
        if t.dimensions() != (size, size):
            logger.debug(f"Expected a {size}x{size} rotation matrix, got {t.rows()}x{t.cols()}")
            return None
        return t
    if size == 2:
        return Matrix.rotation(t)
    return Matrix.rotation(t, axis)


def rotate_point(rotation: Matrix, point: Sequence[float], centre: Sequence[float]) -> List[float]:
    """Apply a rotation matrix to a point about a centre: C + R(P - C)."""
    offset = [p - c for p, c in zip(point, centre)]
    return [
        centre[r] + sum(a * b for a, b in zip(row, offset))
        for r, row in enumerate(rotation.elements)
    ]


def apply_linear(rotation: Matrix, vector: Sequence[float]) -> List[float]:
    """R x v for a direction (no centre)."""
    return [sum(a * b for a, b in zip(row, vector)) for row in rotation.elements]
