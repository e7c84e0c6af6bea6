# measures/bingham.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy.optimize import brentq

from ..custom_types import Array, ArrayLike, PRNG
from ..array_backend.utils import _ensure_point
from ..linalg.operations import real_inner
from ..linalg.utils import hermitianize
from ..manifolds import Field, ManifoldKind
from ..special.hypergeometric import log_hypergeometric_pfq
from .parameterized import ParameterizedMeasure, ParameterRecord
from .sphere_sampling import _check_rejection_limit

logger = logging.getLogger(__name__)

__all__ = [
    "QuadraticForm",
    "Bingham",
    "log_bingham_normalizer",
]


@dataclass(frozen=True, eq=False, repr=False)
class QuadraticForm(ParameterRecord):
    """Hermitian matrix B of the exponent Re tr(x^H B x)."""
    B: Any


_BINGHAM_KINDS = frozenset({
    ManifoldKind.SPHERE,
    ManifoldKind.PROJECTIVE_SPACE,
    ManifoldKind.STIEFEL,
    ManifoldKind.GRASSMANN,
    ManifoldKind.ROTATIONS,
    ManifoldKind.SPECIAL_ORTHOGONAL,
})


def log_bingham_normalizer(B: ArrayLike, k: int, field: Field = Field.REAL) -> float:
    """log 1F1(dk/2; dn/2; B) with Jack parameter 2/d, for n x n Hermitian B.

    The exponent changes by a constant k * beta when B is replaced by
    B + beta I, so the function is evaluated at B - beta I, with beta the
    smallest or the largest eigenvalue of B, whichever leaves fewer non-zero
    eigenvalues, and k * beta is added back. This makes B proportional to the
    identity exact, and B with only two distinct eigenvalues, one of them
    simple (always the case for n = 2), a scalar Kummer function.
    """
    B = hermitianize(B)
    n = B.shape[0]
    d = field.real_dimension
    eigs = np.linalg.eigvalsh(B)
    tol = 1e-12 * max(1.0, float(np.max(np.abs(eigs))))
    beta = float(eigs[0])
    if np.count_nonzero(np.abs(eigs - eigs[-1]) > tol) < np.count_nonzero(np.abs(eigs - eigs[0]) > tol):
        beta = float(eigs[-1])
    shifted = B - beta * np.eye(n)
    return k * beta + log_hypergeometric_pfq((0.5 * d * k,), (0.5 * d * n,), shifted,
                                             alpha=field.jack_alpha)


def _real_embedding(B: Array) -> Array:
    """Real symmetric matrix R with x_r^T R x_r = x^H B x for x_r = [Re x; Im x]."""
    return np.block([[B.real, -B.imag], [B.imag, B.real]])


def _sample_bingham_real(rng: PRNG, B: Array) -> Array:
    """Kent, Ganeiber & Mardia (2018) ACG-envelope sampler on the real sphere.

    With A = lambda_max I - B (eigenvalues lambda_i >= 0, smallest 0) the target
    is proportional to exp(-x^T A x). The envelope is the ACG with
    Omega = I + 2A/b, where b solves sum_i 1 / (b + 2 lambda_i) = 1. Both are
    diagonal in the eigenbasis of B, so draws are made there and rotated back.
    """
    w, vecs = np.linalg.eigh(hermitianize(B))
    lam = w[-1] - w
    q = lam.size
    if q == 1 or not np.any(lam > 0):
        x = rng.standard_normal(q)
        return x / np.linalg.norm(x)

    b = brentq(lambda t: np.sum(1.0 / (t + 2.0 * lam)) - 1.0, 1.0, float(q))
    scale = 1.0 / np.sqrt(1.0 + 2.0 * lam / b)
    log_bound = 0.5 * (q - b) + 0.5 * q * math.log(b / q)

    n_rejected = 0
    while True:
        y = scale * rng.standard_normal(q)
        x = y / np.linalg.norm(y)
        t = float(np.sum(lam * x * x))
        log_ratio = -t + 0.5 * q * math.log1p(2.0 * t / b) + log_bound
        if math.log1p(-rng.uniform()) < log_ratio:
            break
        n_rejected += 1
        _check_rejection_limit("Bingham sampler", n_rejected)
    logger.debug("Bingham sampler: %d rejections (q=%d, b=%g)", n_rejected, q, b)
    return vecs @ x


class Bingham(ParameterizedMeasure):
    """The Bingham distribution.

    For a manifold of points in F^{n x k} the density with respect to the
    normalized Hausdorff measure is

    .. math::

        p(x | B) = \\frac{\\exp(\\Re \\operatorname{tr}(x^H B x))}{{}_1F_1(\\frac{dk}{2}; \\frac{dn}{2}; B)}

    for Hermitian B. The density does not change when B is replaced by
    B + beta I, so B cannot be identified from data.

    Constructor:
        Bingham(M, B=B)

    The normalizing constant is closed form when B has at most two
    distinct eigenvalues, one of them simple, and otherwise needs the opt-in matrix
    hypergeometric series (`options.hypergeometric_max_degree`). Exact
    sampling is available on spheres and projective spaces.
    """

    _record_types = (QuadraticForm,)

    def _check_parameterization(self) -> None:
        if self.manifold.kind not in _BINGHAM_KINDS:
            raise ValueError(f"Bingham is not defined on {self.manifold}.")

    def log_normalizer(self) -> float:
        return log_bingham_normalizer(self.params.B, self.manifold.matrix_size[1], self.manifold.field)

    def log_density(self, x: ArrayLike) -> float:
        M = self.manifold
        x = _ensure_point(x, M.representation_size)
        B = self.params.B
        return real_inner(x, B @ x) - self.log_normalizer()

    def mode(self) -> Array:
        """Eigenvectors of B with the k largest eigenvalues (not unique)."""
        M = self.manifold
        k = M.matrix_size[1]
        _, vecs = np.linalg.eigh(hermitianize(self.params.B))
        X = vecs[:, ::-1][:, :k]
        if M.has_vector_points:
            return X[:, 0]
        if M.kind in (ManifoldKind.ROTATIONS, ManifoldKind.SPECIAL_ORTHOGONAL) and np.linalg.det(X) < 0:
            X = X.copy()
            X[:, 0] = -X[:, 0]
        return X

    def _sample_point(self, rng: PRNG) -> Array:
        M = self.manifold
        if not M.has_vector_points:
            raise NotImplementedError(f"Bingham sampling is only implemented for spheres and "
                                      f"projective spaces, not {M}.")
        B = np.asarray(self.params.B)
        if M.field is Field.COMPLEX:
            m = B.shape[0]
            x = _sample_bingham_real(rng, _real_embedding(B.astype(complex)))
            return x[:m] + 1j * x[m:]
        if M.field is Field.REAL:
            return _sample_bingham_real(rng, np.real(B))
        raise NotImplementedError(f"Sampling is not implemented on {M}.")
