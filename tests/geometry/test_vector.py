import math

import pytest

from geomkit.geometry.line import Line
from geomkit.geometry.line_segment import LineSegment
from geomkit.geometry.plane import Plane
from geomkit.geometry.precision import precision_context
from geomkit.geometry.vector import Vector
from geomkit.utils.base_model import ReadOnlyModelError


class TestVectorCreation:
    def test_inspect(self):
        assert Vector([0, 1, 7, 5]).inspect() == "[0, 1, 7, 5]"
        assert Vector([0, 1.4, 7.034, 5.28638]).inspect() == "[0, 1.4, 7.034, 5.28638]"

    def test_single_element(self):
        v = Vector([4])
        assert v.inspect() == "[4]"
        assert v.modulus() == 4

    def test_from_tuple_and_vector(self):
        assert Vector((1, 2)).elements == (1.0, 2.0)
        assert Vector(Vector([3, 4])).elements == (3.0, 4.0)

    def test_keyword_construction(self):
        assert Vector(elements=[1, 2, 3]).eql([1, 2, 3])

    def test_zero(self):
        assert Vector.zero(4).inspect() == "[0, 0, 0, 0]"
        for n in range(1, 8):
            assert Vector.zero(n).modulus() == 0
            assert Vector.zero(n).dimensions() == n

    def test_random(self):
        for n in range(1, 8):
            v = Vector.random(n)
            assert v.dimensions() == n
            assert all(0 <= x < 1 for x in v.elements)

    def test_str(self):
        assert str(Vector([1, 2.5])) == "[1, 2.5]"


class TestVectorAccess:
    def test_e(self):
        v = Vector([0, 3, 4, 5])
        assert v.e(1) == 0
        assert v.e(4) == 5
        assert v.e(5) is None
        assert v.e(0) is None

    def test_dimensions_and_modulus(self):
        v = Vector([0, 3, 4, 5])
        assert v.dimensions() == 4
        assert v.modulus() == pytest.approx(math.sqrt(50))
        assert Vector.i.modulus() == 1

    def test_max(self):
        assert Vector([2, 8, 5, 9, 3, 7, 12]).max() == 12
        assert Vector([-17, 8, 5, 9, 3, 7, 12]).max() == -17

    def test_index_of(self):
        v = Vector([2, 6, 0, 3])
        assert v.index_of(2) == 1
        assert v.index_of(3) == 4
        assert v.index_of(v.max()) == 2
        assert v.index_of(7) is None


class TestVectorEquality:
    def test_eql(self):
        v = Vector.random(6)
        assert v.eql(v)
        assert Vector.zero(3).eql([0, 0, 0])
        assert Vector([3, 6, 9]).eql([3.0, 6.0, 9.0])
        assert not Vector([3.01, 6, 9]).eql([3.0, 6.0, 9.0])
        assert not Vector([3, 6, 9]).eql([3, 6, 10])
        assert not Vector([3, 6, 9]).eql([4, 6, 9])

    def test_eql_dimension_mismatch(self):
        assert not Vector([1, 2]).eql([1, 2, 0])

    def test_eql_follows_precision(self):
        assert not Vector([1, 0]).eql([1.0001, 0])
        with precision_context(1e-3):
            assert Vector([1, 0]).eql([1.0001, 0])
        assert Vector([1, 0]).eql([1.0001, 0], tolerance=1e-3)

    def test_exact_equality_operator(self):
        assert Vector([1, 2]) == Vector([1, 2])
        assert Vector([1, 2]) != Vector([1, 2.0000001])


class TestVectorCopies:
    def test_dup_is_independent(self):
        v = Vector([3, 4, 5])
        dup = v.dup()
        assert v.eql(dup)
        dup.set_elements([24, 4, 5])
        assert v.eql([3, 4, 5])
        assert dup.eql([24, 4, 5])

    def test_constructor_copies_input(self):
        source = Vector([1, 2, 3])
        v = Vector(source)
        source.set_elements([9, 9, 9])
        assert v.eql([1, 2, 3])

    def test_constants_are_locked(self):
        assert Vector.i.is_locked
        with pytest.raises(ReadOnlyModelError):
            Vector.i.set_elements([5, 5, 5])
        assert Vector.i.eql([1, 0, 0])

    def test_dup_of_constant_is_mutable(self):
        v = Vector.k.dup()
        assert not v.is_locked
        v.set_elements([0, 0, 2])
        assert v.eql([0, 0, 2])


class TestVectorIteration:
    def test_map(self):
        assert Vector([1, 6, 3, 9]).map(lambda x, i: x * x).eql([1, 36, 9, 81])

    def test_map_passes_one_based_index(self):
        assert Vector([5, 5, 5]).map(lambda x, i: i).eql([1, 2, 3])

    def test_each(self):
        seen = []
        Vector([4, 7]).each(lambda x, i: seen.append((x, i)))
        assert seen == [(4, 1), (7, 2)]


class TestVectorAngles:
    def test_to_unit_vector(self):
        v = Vector([8, 2, 9, 4])
        assert v.to_unit_vector().modulus() == pytest.approx(1)
        assert v.to_unit_vector().multiply(math.sqrt(165)).eql(v)
        assert v.to_unit_vector().is_parallel_to(v)

    def test_to_unit_vector_is_idempotent(self):
        u = Vector([3, -4, 12]).to_unit_vector()
        assert u.to_unit_vector().eql(u)

    def test_zero_vector_unit_is_copy(self):
        zero = Vector.zero(3)
        unit = zero.to_unit_vector()
        assert unit.eql(zero)
        assert unit is not zero

    def test_angle_from(self):
        assert Vector.i.angle_from(Vector.j) == pytest.approx(math.pi / 2)
        assert Vector([1, 0]).angle_from(Vector([1, 1])) == pytest.approx(math.pi / 4)
        assert Vector.i.angle_from([1, 6, 3, 5]) is None

    def test_angle_from_is_symmetric(self):
        a = Vector([1, 2, 3]).to_unit_vector()
        b = Vector([-4, 0, 7]).to_unit_vector()
        assert a.angle_from(b) == pytest.approx(b.angle_from(a))
        assert 0 <= a.angle_from(b) <= math.pi

    def test_angle_from_clamps_roundoff(self):
        v = Vector([0.1, 0.2, 0.3])
        assert v.angle_from(v.multiply(3)) == pytest.approx(0, abs=1e-7)
        assert v.angle_from(v.multiply(-3)) == pytest.approx(math.pi)

    def test_angle_from_zero_vector_is_undefined(self):
        assert Vector.zero(3).angle_from(Vector.i) is None
        assert Vector.i.is_parallel_to(Vector.zero(3)) is None

    def test_angle_types(self):
        assert Vector.i.is_parallel_to(Vector.i.multiply(235457))
        assert Vector.i.is_parallel_to([8, 9]) is None
        assert Vector.i.is_antiparallel_to(Vector.i.multiply(-235457))
        assert Vector.i.is_antiparallel_to([8, 9]) is None
        assert Vector.i.is_perpendicular_to(Vector.k)
        assert Vector.i.is_perpendicular_to([8, 9, 0, 3]) is None


class TestVectorArithmetic:
    def test_add_subtract_multiply(self):
        v1 = Vector([2, 9, 4])
        v2 = Vector([5, 13, 7])
        assert v1.add(v2).eql([7, 22, 11])
        assert v1.subtract(v2).eql([-3, -4, -3])
        assert v1.add([2, 8]) is None
        assert v1.subtract([9, 3, 6, 1, 7]) is None
        assert v1.multiply(4).eql([8, 36, 16])

    def test_operators(self):
        v1 = Vector([2, 9, 4])
        v2 = Vector([5, 13, 7])
        assert (v1 + v2).eql([7, 22, 11])
        assert (v1 - v2).eql([-3, -4, -3])
        assert (v1 * 2).eql([4, 18, 8])
        assert (2 * v1).eql([4, 18, 8])

    def test_products(self):
        v1 = Vector([2, 9, 4])
        v2 = Vector([5, 13, 7])
        assert v1.dot(v2) == 2 * 5 + 9 * 13 + 4 * 7
        assert v1.cross(v2).eql([9 * 7 - 4 * 13, 4 * 5 - 2 * 7, 2 * 13 - 9 * 5])
        assert v1.dot([7, 9]) is None
        assert v2.cross([9, 1, 4, 3]) is None

    def test_to_diagonal_matrix(self):
        assert Vector([2, 6, 4, 3]).to_diagonal_matrix().eql([
            [2, 0, 0, 0],
            [0, 6, 0, 0],
            [0, 0, 4, 0],
            [0, 0, 0, 3],
        ])

    def test_round(self):
        assert Vector([2.56, 3.5, 3.49]).round().eql([3, 4, 3])
        assert Vector([-2.5]).round().eql([-2])

    def test_snap_to(self):
        assert Vector([1.0000001, 0.5, -0.0000001]).snap_to(1).eql([1, 0.5, -0.0000001], tolerance=0)
        assert Vector([1.0000001, 0.5, -0.0000001]).snap_to(0).eql([1.0000001, 0.5, 0], tolerance=0)


class TestVectorGeometry:
    def test_distance_from_point(self):
        expected = Vector([1, 9, 0, 13]).modulus()
        assert Vector([3, 9, 4, 6]).distance_from([2, 0, 4, -7]) == pytest.approx(expected)
        assert Vector([1, 2]).distance_from([1, 2, 3]) is None

    def test_distance_from_line_plane_segment(self):
        assert Vector([2, 8, 7]).distance_from(Line.X) == pytest.approx(math.sqrt(64 + 49))
        assert Vector([28, -43, 78]).distance_from(Plane.XY) == pytest.approx(78)
        assert Vector([7, 4, 0]).distance_from(LineSegment([0, 0, 0], [4, 0, 0])) == pytest.approx(5)

    def test_lies_on_and_in(self):
        segment = LineSegment([2, 9, 4], [14, 21, 4])
        assert Vector([12, 0, 0]).lies_on(Line.X)
        assert not Vector([12, 1, 0]).lies_on(Line.X)
        assert not Vector([12, 0, 3]).lies_on(Line.X)
        assert Vector([9, 16, 4]).lies_on(segment)
        assert not Vector([9, 17, 4]).lies_on(segment)
        assert Vector([0, -3, 6]).lies_in(Plane.YZ)
        assert not Vector([4, -3, 6]).lies_in(Plane.YZ)

    def test_reflection_in(self):
        assert Vector([3, 0, 0]).reflection_in([0, 3, 0]).eql([-3, 6, 0])
        assert Vector([3, 0, 0]).reflection_in(Line([0, 0, 0], [1, 0, 1])).eql([0, 0, 3])
        v1 = Vector([25, -48, 77])
        v2 = Vector([25, -48, -77])
        assert v1.reflection_in(Plane.XY).eql(v2)
        assert v2.reflection_in(Plane.YX).eql(v1)

    def test_reflection_of_2d_point_in_line(self):
        assert Vector([3, 1]).reflection_in(Line.X).eql([3, -1, 0])

    def test_rotate_2d(self):
        assert Vector([12, 1]).rotate(math.pi / 2, [5, 1]).eql([5, 8])

    def test_rotate_3d_about_line(self):
        assert Vector.i.rotate(-math.pi / 2, Line([10, 0, 100], Vector.k)).eql([10, 9, 0])

    def test_rotate_with_matrix(self):
        from geomkit.geometry.matrix import Matrix

        assert Vector([1, 0]).rotate(Matrix.rotation(math.pi), [0, 0]).eql([-1, 0])
        assert Vector([1, 0]).rotate(Matrix.identity(3), [0, 0]) is None

    def test_rotate_invalid_pivot(self):
        assert Vector([1, 0, 0]).rotate(math.pi, [0, 0, 0]) is None
        assert Vector([1, 0]).rotate(math.pi, Line.Z) is None
        assert Vector([1, 0, 0, 0]).rotate(math.pi, Line.Z) is None

    def test_to_3d(self):
        assert Vector([1, 2]).to_3d().eql([1, 2, 0])
        assert Vector([1, 2, 3]).to_3d().eql([1, 2, 3])
        assert Vector([1]).to_3d() is None
