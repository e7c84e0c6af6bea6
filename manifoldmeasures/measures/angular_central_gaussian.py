# measures/angular_central_gaussian.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from ..custom_types import Array, ArrayLike, PRNG
from ..array_backend.utils import _ensure_point
from ..linalg.linop import CholeskyLinOp, DenseLinOp, TriangularLinOp
from ..linalg.operations import logdet, polar, quad_form
from ..linalg.utils import hermitianize
from ..manifolds import ManifoldKind
from .measure import _point_dtype, _standard_normal
from .parameterized import ParameterizedMeasure, ParameterRecord

logger = logging.getLogger(__name__)

__all__ = [
    "Precision",
    "CholeskyFactor",
    "AngularCentralGaussian",
]


@dataclass(frozen=True, eq=False, repr=False)
class Precision(ParameterRecord):
    """Precision matrix P = Sigma^{-1}, Hermitian positive definite."""
    P: Any


@dataclass(frozen=True, eq=False, repr=False)
class CholeskyFactor(ParameterRecord):
    """Lower Cholesky factor L of Sigma = L L^H."""
    L: Any


_ACG_KINDS = frozenset({
    ManifoldKind.SPHERE,
    ManifoldKind.PROJECTIVE_SPACE,
    ManifoldKind.STIEFEL,
    ManifoldKind.GRASSMANN,
    ManifoldKind.ROTATIONS,
    ManifoldKind.SPECIAL_ORTHOGONAL,
})


def _precision_operator(P: ArrayLike) -> CholeskyLinOp:
    """The precision matrix held through its lower Cholesky factor, P = R R^H.

    A P that is not positive definite gets a NaN factor, so that densities and
    draws come out NaN instead of raising.
    """
    P = DenseLinOp(hermitianize(P), copy=False)
    try:
        R = P.cholesky()
    except np.linalg.LinAlgError:
        logger.debug("precision matrix is not positive definite")
        R = TriangularLinOp(np.full(P.shape, np.nan, dtype=P.dtype), lower=True, copy=False)
    return CholeskyLinOp(R)


class AngularCentralGaussian(ParameterizedMeasure):
    """The Angular Central Gaussian (ACG) distribution.

    For a manifold of points in F^{n x k} (k = 1 for spheres), the density
    with respect to the normalized Hausdorff measure is

    .. math::

        p(x | \\Sigma) = \\det(\\Sigma)^{-dk/2} \\det(x^H \\Sigma^{-1} x)^{-dn/2}

    where d is the real dimension of F (Chikuse 2003, Eq. 2.4.3). It is the
    law of the orthonormal factor of a centred Gaussian matrix with row
    covariance Sigma.

    Constructors:
        AngularCentralGaussian(M, P=P)   precision matrix P = Sigma^{-1}
        AngularCentralGaussian(M, L=L)   lower Cholesky factor of Sigma

    Draws project L z, z standard normal, onto the manifold. With the
    precision parameterization L z is replaced by the triangular solve
    R^{-H} z for P = R R^H, which has the same covariance.
    A precision matrix that is not positive definite gives NaN densities and
    NaN draws.
    """

    _record_types = (Precision, CholeskyFactor)

    def _check_parameterization(self) -> None:
        if self.manifold.kind not in _ACG_KINDS:
            raise ValueError(f"AngularCentralGaussian is not defined on {self.manifold}.")

    def log_density(self, x: ArrayLike) -> float:
        M = self.manifold
        x = _ensure_point(x, M.representation_size)
        n, k = M.matrix_size
        d = M.real_dimension
        params = self.params

        if isinstance(params, Precision):
            P = _precision_operator(params.P)
            if k == 1:
                log_q = np.log(quad_form(x, P))
            else:
                log_q = logdet(hermitianize(quad_form(x, P), copy=False))
            return float(0.5 * d * (k * logdet(P) - n * log_q))

        if isinstance(params, CholeskyFactor):
            L = TriangularLinOp(params.L, lower=True, copy=False)
            z = L.solve(x)
            if k == 1:
                log_q = np.log(np.linalg.norm(z))
            else:
                log_q = 0.5 * logdet(z.conj().T @ z)
            return float(-d * (k * L.logdet() + n * log_q))

        raise ValueError(f"Unsupported parameterization {type(params).__name__}.")

    def mode(self) -> Array:
        """A point of maximal density.

        The columns span the eigenvectors of Sigma with the k largest
        eigenvalues. The mode is unique only up to the manifold's symmetries
        (sign for spheres, right rotation for Stiefel points).
        """
        M = self.manifold
        n, k = M.matrix_size
        params = self.params
        if isinstance(params, Precision):
            _, vecs = np.linalg.eigh(hermitianize(params.P))
            X = vecs[:, :k]
        elif isinstance(params, CholeskyFactor):
            L = np.tril(params.L)
            _, vecs = np.linalg.eigh(hermitianize(L @ L.conj().T))
            X = vecs[:, ::-1][:, :k]
        else:
            raise ValueError(f"Unsupported parameterization {type(params).__name__}.")

        if M.has_vector_points:
            return X[:, 0]
        if M.kind in (ManifoldKind.ROTATIONS, ManifoldKind.SPECIAL_ORTHOGONAL) and np.linalg.det(X) < 0:
            X = X.copy()
            X[:, 0] = -X[:, 0]
        return X

    def _sample_point(self, rng: PRNG) -> Array:
        M = self.manifold
        dtype = _point_dtype(M)
        z = _standard_normal(rng, M.representation_size, dtype)
        params = self.params

        if isinstance(params, CholeskyFactor):
            y = TriangularLinOp(params.L, lower=True, copy=False).matmat(z)
        elif isinstance(params, Precision):
            R = _precision_operator(params.P).cholesky()
            y = R.solve(z, adjoint=True, check_finite=False)
        else:
            raise ValueError(f"Unsupported parameterization {type(params).__name__}.")

        if not np.all(np.isfinite(y)):
            return np.full(M.representation_size, np.nan, dtype=dtype)
        if M.kind in (ManifoldKind.ROTATIONS, ManifoldKind.SPECIAL_ORTHOGONAL):
            # the polar factor is Haar on O(n); a fixed reflection maps the
            # det = -1 component onto SO(n)
            x, _ = polar(y)
            if np.linalg.det(x) < 0:
                x[:, 0] = -x[:, 0]
            return x
        return M.project(y)
