# tests/measures/test_bingham.py
import math

import numpy as np
import pytest
from scipy.integrate import quad

from manifoldmeasures.config import option_context
from manifoldmeasures.errors import RejectionLimitError
from manifoldmeasures.manifolds import COMPLEX, Circle, Grassmann, ProjectiveSpace, Rotations, Sphere, Stiefel
from manifoldmeasures.measures.bingham import Bingham, QuadraticForm, log_bingham_normalizer
from manifoldmeasures.measures.primitive import Hausdorff


def approx(a, b, tol=1e-9):
    return abs(a - b) <= tol * max(1.0, abs(b))


def _circle_grid(n=4000):
    theta = np.linspace(0.0, 2.0 * math.pi, n, endpoint=False)
    return np.stack([np.cos(theta), np.sin(theta)], axis=1)


class TestNormalizer:
    @pytest.mark.parametrize("B", [
        np.diag([0.0, 2.0]),
        np.diag([-1.5, 0.5]),
        np.array([[1.0, 0.7], [0.7, -0.4]]),
    ])
    def test_circle_matches_quadrature(self, B):
        X = _circle_grid()
        mean_exp = np.mean(np.exp(np.einsum("ij,jk,ik->i", X, B, X)))
        assert approx(log_bingham_normalizer(B, 1), math.log(mean_exp))

    def test_rank_one_sphere_matches_quadrature(self):
        # on S^2 the coordinate t = x_3 is uniform on [-1, 1]
        B = np.diag([0.0, 0.0, 3.0])
        value, _ = quad(lambda t: math.exp(3.0 * t * t), 0.0, 1.0)
        assert approx(log_bingham_normalizer(B, 1), math.log(value))

    def test_shift_by_largest_eigenvalue(self):
        # eigenvalues (1, 1, 3): shifting by 1 leaves a single non-zero eigenvalue
        B = np.diag([1.0, 1.0, 3.0])
        value, _ = quad(lambda t: math.exp(2.0 * t * t), 0.0, 1.0)
        assert approx(log_bingham_normalizer(B, 1), 1.0 + math.log(value))
        B = np.diag([1.0, 3.0, 3.0])
        value, _ = quad(lambda t: math.exp(-2.0 * t * t), 0.0, 1.0)
        assert approx(log_bingham_normalizer(B, 1), 3.0 + math.log(value))

    def test_multiple_of_identity(self):
        assert approx(log_bingham_normalizer(2.5 * np.eye(4), 1), 2.5)
        assert approx(log_bingham_normalizer(2.5 * np.eye(4), 3), 7.5)

    def test_complex_circle(self):
        # on the unit sphere of C^2, t = |x_2|^2 is uniform on [0, 1]
        B = np.diag([0.0, 2.0]).astype(complex)
        expected = math.log((math.exp(2.0) - 1.0) / 2.0)
        assert approx(log_bingham_normalizer(B, 1, COMPLEX), expected)

    def test_general_matrix_needs_series(self):
        B = np.diag([0.0, 1.0, 2.5])
        with pytest.raises(NotImplementedError):
            log_bingham_normalizer(B, 1)
        X = Hausdorff(Sphere(2)).sample(20000, rng=5)
        mc = math.log(np.mean(np.exp(np.einsum("ij,jk,ik->i", X, B, X))))
        with option_context(hypergeometric_max_degree=60):
            assert log_bingham_normalizer(B, 1) == pytest.approx(mc, abs=0.03)


class TestDensity:
    def test_normalized_on_circle(self):
        d = Bingham(Sphere(1), B=np.array([[1.0, 0.7], [0.7, -0.4]]))
        dens = [d.density(x) for x in _circle_grid(2000)]
        assert np.mean(dens) == pytest.approx(1.0, abs=1e-8)

    def test_shift_invariance(self, rng):
        B = np.diag([0.0, 0.0, 3.0])
        a = Bingham(Sphere(2), B=B)
        b = Bingham(Sphere(2), B=B + 5.0 * np.eye(3))
        for x in Hausdorff(Sphere(2)).sample(5, rng=rng):
            assert approx(a.log_density(x), b.log_density(x))

    def test_antipodal_symmetry(self, rng):
        d = Bingham(ProjectiveSpace(2), B=np.diag([0.0, 1.0, 4.0]))
        with option_context(hypergeometric_max_degree=40):
            x = Hausdorff(Sphere(2)).sample(rng=rng)
            assert approx(d.log_density(x), d.log_density(-x))

    def test_rank_one_stiefel_density(self, rng):
        # B = beta v v^T has a closed-form normalizer for any k
        v = np.array([1.0, 0.0, 0.0, 0.0])
        d = Bingham(Stiefel(4, 2), B=2.0 * np.outer(v, v))
        x = Hausdorff(Stiefel(4, 2)).sample(rng=rng)
        assert np.isfinite(d.log_density(x))

    def test_record_and_repr(self):
        d = Bingham(Sphere(1), QuadraticForm(np.eye(2)))
        assert np.array_equal(d.B, np.eye(2))
        assert repr(d).startswith("Bingham(Sphere(1, real), QuadraticForm(B=")

    def test_undefined_on_circle(self):
        with pytest.raises(ValueError):
            Bingham(Circle(), B=np.eye(1))


def test_mode():
    B = np.diag([0.0, 4.0, 1.0])
    assert np.allclose(np.abs(Bingham(Sphere(2), B=B).mode()), [0.0, 1.0, 0.0])
    X = Bingham(Stiefel(3, 2), B=B).mode()
    assert np.allclose(np.abs(X), [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    R = Bingham(Rotations(3), B=B).mode()
    assert Rotations(3).is_point(R)


class TestSampling:
    @pytest.mark.parametrize("manifold", [Sphere(1), Sphere(3), ProjectiveSpace(2), Sphere(2, COMPLEX)])
    def test_samples_lie_on_manifold(self, manifold, rng):
        n = manifold.matrix_size[0]
        B = np.diag(np.linspace(-1.0, 3.0, n))
        d = Bingham(manifold, B=B)
        for x in d.sample(20, rng=rng):
            assert manifold.is_point(x)

    def test_circle_second_moment(self):
        B = np.diag([0.0, 2.0])
        X = _circle_grid()
        w = np.exp(2.0 * X[:, 1] ** 2)
        expected = np.sum(w * X[:, 1] ** 2) / np.sum(w)
        draws = Bingham(Sphere(1), B=B).sample(8000, rng=8)
        assert np.mean(draws[:, 1] ** 2) == pytest.approx(expected, abs=0.025)

    def test_sphere_second_moment(self):
        B = np.diag([0.0, 0.0, 3.0])
        num, _ = quad(lambda t: t * t * math.exp(3.0 * t * t), 0.0, 1.0)
        den, _ = quad(lambda t: math.exp(3.0 * t * t), 0.0, 1.0)
        draws = Bingham(Sphere(2), B=B).sample(8000, rng=9)
        assert np.mean(draws[:, 2] ** 2) == pytest.approx(num / den, abs=0.025)

    def test_complex_second_moment(self):
        B = np.diag([0.0, 2.0]).astype(complex)
        draws = Bingham(Sphere(1, COMPLEX), B=B).sample(8000, rng=10)
        e2 = math.exp(2.0)
        expected = (e2 + 1.0) / (2.0 * (e2 - 1.0))
        assert np.mean(np.abs(draws[:, 1]) ** 2) == pytest.approx(expected, abs=0.025)

    def test_zero_matrix_is_uniform(self, rng):
        X = Bingham(Sphere(2), B=np.zeros((3, 3))).sample(2000, rng=rng)
        assert np.allclose((X ** 2).mean(axis=0), 1.0 / 3.0, atol=0.04)

    def test_matrix_manifolds_not_implemented(self, rng):
        for M in (Stiefel(3, 2), Grassmann(3, 2), Rotations(3)):
            with pytest.raises(NotImplementedError):
                Bingham(M, B=np.eye(3)).sample(rng=rng)

    def test_rejection_limit(self):
        d = Bingham(Sphere(2), B=np.diag([0.0, 5.0, 10.0]))
        with option_context(max_rejections=0):
            with pytest.raises(RejectionLimitError):
                d.sample(500, rng=12)
