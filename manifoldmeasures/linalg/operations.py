# linalg/operations.py
"""
Linear algebra used by the measures. Operations that accept linear operator
inputs are exposed as functions (`logdet(A)` rather than `A.logdet()`);
the rest are the matrix factorizations with the uniqueness conventions the
samplers rely on.

Inner products are the real part of the Frobenius inner product,
``Re tr(x^H y)``, which is the Euclidean inner product of the real embedding
for real and complex arrays alike.
"""

import numpy as np
from scipy.linalg import null_space

from ..custom_types import Array, ArrayLike
from ..array_backend.utils import _ensure_matrix, _ensure_vector
from .linop import _as_linear_operator, LinOpLike
from .utils import hermitianize


# -----------------------------------------------------------------------------
# Expose LinOp methods as functions
# -----------------------------------------------------------------------------

def solve(A: LinOpLike, b: ArrayLike, **kwargs) -> Array:
    return _as_linear_operator(A).solve(b, **kwargs)

def logdet(A: LinOpLike) -> float:
    return _as_linear_operator(A).logdet()

# -----------------------------------------------------------------------------
# Inner products and quadratic forms
# -----------------------------------------------------------------------------

def real_inner(x: ArrayLike, y: ArrayLike) -> float:
    """Return Re <x, y> = Re tr(x^H y) for arrays of equal shape."""
    return float(np.real(np.vdot(np.asarray(x), np.asarray(y))))


def quad_form(x: ArrayLike, A: LinOpLike) -> Array | float:
    """Compute the quadratic form x^H A x.

    For a vector `x` of shape (n,) returns the real scalar Re(x^H A x). For a
    matrix `x` of shape (n, k) returns the (k, k) matrix x^H A x.
    """
    A = _as_linear_operator(A)
    x = np.asarray(x)
    Ax = A.matmat(x)
    if x.ndim < 2:
        return float(np.real(np.vdot(x, Ax)))
    return x.conj().T @ Ax


# -----------------------------------------------------------------------------
# Factorizations with uniqueness conventions
# -----------------------------------------------------------------------------

def _phase(z: Array) -> Array:
    """Elementwise z/|z|, with phase 1 where z == 0."""
    z = np.asarray(z)
    mag = np.abs(z)
    safe = np.where(mag == 0, 1, mag)
    return np.where(mag == 0, 1, z / safe)


def qr_unique(A: ArrayLike) -> tuple[Array, Array]:
    """Thin QR decomposition A = QR with a real, non-negative diagonal of R.

    The columns of Q (and rows of R) are rescaled by the phase of diag(R),
    which makes the decomposition unique for full column rank A. For A with
    IID standard normal entries, Q is then uniformly distributed on the
    Stiefel manifold (Gupta & Nagar, Theorem 2.3.19).
    """
    A = _ensure_matrix(A, copy=False)
    Q, R = np.linalg.qr(A, mode="reduced")
    s = _phase(np.diag(R))
    Q = Q * s[np.newaxis, :]
    R = s.conj()[:, np.newaxis] * R
    return Q, R


def svd_unique(A: ArrayLike) -> tuple[Array, Array, Array]:
    """Thin SVD A = U diag(D) V^H with the first row of U real and non-negative.

    Returns (U, D, V), with V (not V^H). Each singular pair is only defined
    up to a common phase; fixing it on the first row of U picks one.
    """
    A = _ensure_matrix(A, copy=False)
    U, D, Vh = np.linalg.svd(A, full_matrices=False)
    s = _phase(U[0, :])
    U = U * s.conj()[np.newaxis, :]
    V = Vh.conj().T * s.conj()[np.newaxis, :]
    return U, D, V


def polar(A: ArrayLike) -> tuple[Array, Array]:
    """Polar decomposition A = H P, with H having orthonormal columns and P
    Hermitian positive semidefinite.

    H = U V^H is the orthonormal factor closest to A in the Frobenius norm,
    which equals A (A^H A)^{-1/2} whenever A has full column rank.
    """
    A = _ensure_matrix(A, copy=False)
    U, D, Vh = np.linalg.svd(A, full_matrices=False)
    H = U @ Vh
    P = (Vh.conj().T * D[np.newaxis, :]) @ Vh
    return H, hermitianize(P)


def householder_reflect(x: ArrayLike, mu: ArrayLike) -> Array:
    """Apply the Householder reflection that maps e_1 to the unit vector `mu`.

    Works on real vectors. The reflection is H = I - 2 v v^T / (v^T v) with
    v = e_1 - mu; when mu already equals e_1 the input is returned unchanged.
    """
    x = _ensure_vector(x, copy=True)
    mu = _ensure_vector(mu, length=x.size, copy=False)
    v = -np.asarray(mu, dtype=float)
    v[0] += 1.0
    vv = float(v @ v)
    if vv == 0.0:
        return x
    return x - (2.0 * float(v @ x) / vv) * v


def orthogonal_complement(Q: ArrayLike) -> Array:
    """Orthonormal basis of the orthogonal complement of the columns of Q.

    For Q of shape (n, j) with orthonormal columns returns an (n, n - j)
    matrix N with N^H Q = 0 and N^H N = I.
    """
    Q = _ensure_matrix(Q, copy=False)
    return null_space(Q.conj().T)
