# tests/test_manifolds.py
import math

import numpy as np
import pytest

from manifoldmeasures.manifolds import (
    COMPLEX,
    QUATERNION,
    REAL,
    Circle,
    Field,
    Grassmann,
    Manifold,
    ManifoldKind,
    ProjectiveSpace,
    Rotations,
    SpecialOrthogonal,
    Sphere,
    Stiefel,
)


class TestConstructors:
    def test_representation_sizes(self):
        assert Sphere(2).representation_size == (3,)
        assert ProjectiveSpace(3, COMPLEX).representation_size == (4,)
        assert Stiefel(5, 2).representation_size == (5, 2)
        assert Grassmann(4, 3).representation_size == (4, 3)
        assert Rotations(3).representation_size == (3, 3)
        assert Circle().representation_size == ()
        assert Circle(COMPLEX).representation_size == ()

    def test_matrix_sizes(self):
        assert Sphere(2).matrix_size == (3, 1)
        assert Stiefel(5, 2).matrix_size == (5, 2)
        assert Circle().matrix_size == (1, 1)

    def test_manifold_dimension(self):
        assert Sphere(2).manifold_dimension == 2
        assert Sphere(2, COMPLEX).manifold_dimension == 5
        assert ProjectiveSpace(2).manifold_dimension == 2
        assert Stiefel(3, 3).manifold_dimension == 3
        assert Stiefel(4, 2, COMPLEX).manifold_dimension == 12
        assert Grassmann(5, 2).manifold_dimension == 6
        assert Rotations(3).manifold_dimension == 3
        assert Circle().manifold_dimension == 1

    def test_values_are_immutable_and_hashable(self):
        M = Sphere(2)
        assert M == Sphere(2)
        assert M != Sphere(2, COMPLEX)
        assert len({M, Sphere(2), Sphere(3)}) == 2
        with pytest.raises(AttributeError):
            M.n = 3

    def test_rotations_and_special_orthogonal_differ_only_in_kind(self):
        R, S = Rotations(3), SpecialOrthogonal(3)
        assert R.kind is ManifoldKind.ROTATIONS
        assert S.kind is ManifoldKind.SPECIAL_ORTHOGONAL
        assert R.representation_size == S.representation_size
        assert R.is_group and S.is_group and Circle().is_group
        assert not Sphere(3).is_group

    def test_invalid_dimensions(self):
        with pytest.raises(ValueError):
            Sphere(-1)
        with pytest.raises(ValueError):
            Stiefel(2, 3)
        with pytest.raises(ValueError):
            Grassmann(3, 0)

    def test_str(self):
        assert str(Sphere(2)) == "Sphere(2, real)"
        assert str(Stiefel(4, 2, COMPLEX)) == "Stiefel(4, 2, complex)"
        assert str(Rotations(3)) == "Rotations(3)"
        assert str(Circle()) == "Circle(real)"


def test_field_properties():
    assert [f.real_dimension for f in (REAL, COMPLEX, QUATERNION)] == [1, 2, 4]
    assert REAL.jack_alpha == 2.0 and COMPLEX.jack_alpha == 1.0 and QUATERNION.jack_alpha == 0.5
    assert REAL.dtype == np.float64
    assert COMPLEX.dtype == np.complex128
    with pytest.raises(NotImplementedError):
        Field.QUATERNION.dtype


class TestMembership:
    def test_sphere(self):
        M = Sphere(2)
        assert M.is_point(np.array([0.0, 0.6, 0.8]))
        assert not M.is_point(np.array([0.0, 0.6, 0.9]))
        assert not M.is_point(np.array([1.0, 0.0]))
        assert not M.is_point(np.array([1.0j, 0.0, 0.0]))
        assert Sphere(2, COMPLEX).is_point(np.array([1.0j, 0.0, 0.0]))

    def test_stiefel(self):
        M = Stiefel(3, 2)
        assert M.is_point(np.eye(3)[:, :2])
        assert not M.is_point(np.ones((3, 2)))

    def test_rotations_require_positive_determinant(self):
        M = Rotations(2)
        assert M.is_point(np.eye(2))
        assert not M.is_point(np.diag([1.0, -1.0]))

    def test_circle(self):
        assert Circle().is_point(0.3)
        assert Circle(COMPLEX).is_point(np.exp(0.3j))
        assert not Circle(COMPLEX).is_point(0.5)

    def test_nan_is_not_a_point(self):
        assert not Sphere(1).is_point(np.array([math.nan, 1.0]))

    def test_quaternion_points_not_representable(self):
        with pytest.raises(NotImplementedError):
            Sphere(2, QUATERNION).is_point(np.array([1.0, 0.0, 0.0]))


class TestProjection:
    def test_sphere(self):
        x = Sphere(2).project(np.array([3.0, 0.0, 4.0]))
        assert np.allclose(x, [0.6, 0.0, 0.8])

    def test_stiefel(self, rng):
        M = Stiefel(4, 2, COMPLEX)
        A = rng.standard_normal((4, 2)) + 1j * rng.standard_normal((4, 2))
        assert M.is_point(M.project(A))

    def test_rotations_fix_determinant(self):
        M = Rotations(3)
        X = M.project(np.diag([2.0, 1.0, -1.0]))
        assert M.is_point(X)

    def test_real_circle_wraps(self):
        assert Circle().project(0.5 + 2.0 * math.pi) == pytest.approx(0.5)
        assert Circle().project(-2.5 * math.pi) == pytest.approx(-0.5 * math.pi)

    def test_complex_circle(self):
        assert Circle(COMPLEX).project(3.0 + 4.0j) == pytest.approx(0.6 + 0.8j)


def test_manifold_direct_construction():
    M = Manifold(ManifoldKind.SPHERE, 1)
    assert M == Sphere(1)
