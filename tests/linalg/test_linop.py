# test_linop.py
import numpy as np
from scipy.linalg import cholesky
import pytest

from manifoldmeasures.linalg.linop import (
    DenseLinOp, TriangularLinOp, CholeskyLinOp, ALLOWED_FLAGS, _as_linear_operator
)


def approx(a, b, tol=1e-12):
    return np.allclose(a, b, atol=tol, rtol=0)


class TestDenseLinOp:
    @classmethod
    def setup_class(cls):
        cls.n = 3
        cls.arr = np.array([[4.0, 1.0, 0.0],
                            [1.0, 3.0, 0.5],
                            [0.0, 0.5, 2.0]])
        cls.op = DenseLinOp(cls.arr, copy=True)

    def test_array_properties(self):
        assert self.op.shape == (self.n, self.n)
        assert self.op.dtype == self.arr.dtype
        assert "dense" in self.op.flags
        assert np.array_equal(self.op.to_dense(), self.arr)

    def test_linalg_operations(self):
        assert approx(self.op.cholesky().to_dense(), cholesky(self.arr, lower=True))
        assert approx(self.op.logdet(), np.linalg.slogdet(self.arr)[1])

        b1 = np.ones((self.n,))
        B = np.ones((self.n, 4))
        assert approx(self.op.solve(b1), np.linalg.solve(self.arr, b1))
        assert self.op.solve(b1).shape == (self.n,)
        assert approx(self.op.solve(B), np.linalg.solve(self.arr, B))

    def test_matmat_rmatmat(self):
        b1 = np.ones((self.n,))
        B = np.arange(2 * self.n, dtype=float).reshape(self.n, 2)
        assert approx(self.op.matmat(b1), self.arr @ b1)
        assert approx(self.op.matmat(B), self.arr @ B)
        assert approx(self.op.rmatmat(B), self.arr.T @ B)


def test_complex_rmatmat_is_conjugate_transpose():
    A = np.array([[1.0 + 2.0j, 0.5], [1.0j, 3.0]])
    op = DenseLinOp(A)
    x = np.array([1.0, 1.0j])
    assert approx(op.rmatmat(x), A.conj().T @ x)


def test_triangular_solve_and_flags():
    L = np.array([[1.0, 0.0], [2.0, 3.0]])
    tri = TriangularLinOp(L, lower=True)
    b = np.array([1.0, 5.0])
    x = tri.solve(b)
    assert approx(L @ x, b)
    y = tri.solve(b, adjoint=True)
    assert approx(L.T @ y, b)
    assert "triangular_lower" in tri.flags
    assert approx(tri.logdet(), np.log(3.0))


def test_triangular_reads_one_triangle():
    A = np.array([[1.0, 9.0], [2.0, 3.0]])
    assert np.array_equal(TriangularLinOp(A, lower=True).to_dense(), np.tril(A))
    assert np.array_equal(TriangularLinOp(A, lower=False).to_dense(), np.triu(A))


def test_cholesky_linop(spd_matrix):
    L = cholesky(spd_matrix, lower=True)
    op = CholeskyLinOp(L)
    assert approx(op.to_dense(), spd_matrix)
    b = np.array([1.0, -2.0, 0.5])
    assert approx(op.solve(b), np.linalg.solve(spd_matrix, b))
    assert approx(op.logdet(), np.linalg.slogdet(spd_matrix)[1])
    assert op.cholesky() is op.root
    assert {"hermitian", "positive_definite"} <= op.flags


def test_cholesky_linop_rejects_upper_factor():
    with pytest.raises(ValueError):
        CholeskyLinOp(TriangularLinOp(np.eye(2), lower=False))


def test_flags_api():
    op = DenseLinOp(np.eye(2))
    op.add_flag("hermitian")
    assert op.has_flag("hermitian")
    with pytest.raises(ValueError):
        op.add_flag("not_a_flag")
    assert op.flags <= ALLOWED_FLAGS


def test_non_square_errors():
    op = DenseLinOp(np.ones((2, 3)))
    with pytest.raises(np.linalg.LinAlgError):
        op.logdet()


def test_as_linear_operator_passthrough():
    op = DenseLinOp(np.eye(2))
    assert _as_linear_operator(op) is op
    assert isinstance(_as_linear_operator(np.eye(2)), DenseLinOp)


def test_positive_definite_flags_use_cholesky(spd_matrix):
    op = DenseLinOp(spd_matrix)
    op.add_flag("hermitian")
    op.add_flag("positive_definite")
    assert approx(op.logdet(), np.linalg.slogdet(spd_matrix)[1])
