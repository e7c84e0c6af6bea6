# measures/von_mises_fisher.py
"""
The von Mises-Fisher (Langevin) distribution.

The restriction of an isotropic Gaussian in the ambient space to the
manifold: the density with respect to the normalized Hausdorff measure is
proportional to exp(Re <F, x>) for a mean parameter F. Five encodings of the
mean parameter are supported:

==================  ===========================  =====================
record              keywords                     manifolds
==================  ===========================  =====================
ModeConcentration   mu, kappa                    Sphere, Circle
MeanVector          c = kappa mu                 Sphere, complex Circle
Loading             F                            Stiefel, Rotations
SvdForm             U, D, V with F = U D V^H     Stiefel, Rotations
PolarForm           H, P with F = H P            Stiefel, Rotations
==================  ===========================  =====================

On the real circle points are angles and mu is the modal angle. On
`Rotations(n)` the Stiefel(n, n) normalizing constant is used, so the
density is correct only up to a constant; sampling there is exact.
"""
from __future__ import annotations

import cmath
import logging
import math
from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy.special import gammaln

from ..custom_types import Array, ArrayLike, PRNG
from ..array_backend.utils import _ensure_point, _ensure_real_scalar
from ..linalg.operations import real_inner, svd_unique
from ..manifolds import Circle, Field, ManifoldKind, Sphere
from ..special.functions import LOG_2, log_bessel_i
from ..special.hypergeometric import log_hypergeometric_pfq
from .parameterized import ParameterizedMeasure, ParameterRecord
from .sphere_sampling import (
    _check_rejection_limit,
    sample_vmf_stiefel,
    sample_vmf_vector,
    sample_von_mises_angle,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ModeConcentration",
    "MeanVector",
    "Loading",
    "SvdForm",
    "PolarForm",
    "VonMisesFisher",
    "Langevin",
    "VonMises",
    "Fisher",
    "log_vmf_normalizer",
]


@dataclass(frozen=True, eq=False, repr=False)
class ModeConcentration(ParameterRecord):
    mu: Any
    kappa: Any


@dataclass(frozen=True, eq=False, repr=False)
class MeanVector(ParameterRecord):
    c: Any


@dataclass(frozen=True, eq=False, repr=False)
class Loading(ParameterRecord):
    F: Any


@dataclass(frozen=True, eq=False, repr=False)
class SvdForm(ParameterRecord):
    U: Any
    D: Any
    V: Any


@dataclass(frozen=True, eq=False, repr=False)
class PolarForm(ParameterRecord):
    H: Any
    P: Any


_VECTOR_RECORDS = (ModeConcentration, MeanVector)
_MATRIX_RECORDS = (Loading, SvdForm, PolarForm)
_ROTATION_KINDS = (ManifoldKind.ROTATIONS, ManifoldKind.SPECIAL_ORTHOGONAL)


def log_vmf_normalizer(p: int, kappa: float) -> float:
    """Log normalizing constant of the vMF distribution on the unit sphere of
    R^p with respect to the normalized Hausdorff measure.

    .. math::

        \\log {}_0F_1(; p/2; \\kappa^2/4) = \\log\\Gamma(p/2) + \\nu (\\log 2 - \\log\\kappa) + \\log I_\\nu(\\kappa),
        \\quad \\nu = p/2 - 1

    kappa = 0 is the uniform distribution and gives exactly 0.
    """
    kappa = float(_ensure_real_scalar(kappa))
    if kappa == 0.0:
        return 0.0
    nu = 0.5 * p - 1.0
    with np.errstate(invalid="ignore", divide="ignore"):
        log_kappa = np.log(kappa)
    return float(gammaln(0.5 * p) + nu * (LOG_2 - log_kappa) + log_bessel_i(nu, kappa))


class VonMisesFisher(ParameterizedMeasure):
    """The von Mises-Fisher distribution on a sphere, circle, Stiefel manifold
    or rotation group.

    Constructors:
        VonMisesFisher(Sphere(n), mu=mu, kappa=kappa)
        VonMisesFisher(Sphere(n), c=c)
        VonMisesFisher(Stiefel(n, k), F=F)
        VonMisesFisher(Stiefel(n, k), U=U, D=D, V=V)
        VonMisesFisher(Stiefel(n, k), H=H, P=P)

    Vector densities use the Bessel closed form of the normalizing constant,
    matrix densities the hypergeometric function 0F1(dn/2; F^H F / 4), which
    for k > 1 needs the opt-in series unless F has rank one.
    """

    _record_types = _VECTOR_RECORDS + _MATRIX_RECORDS

    def _check_parameterization(self) -> None:
        M = self.manifold
        params = self.params
        if M.kind in (ManifoldKind.SPHERE, ManifoldKind.CIRCLE):
            if not isinstance(params, _VECTOR_RECORDS):
                raise ValueError(f"{M} takes (mu, kappa) or (c,) parameters, not {type(params).__name__}.")
            if M.kind is ManifoldKind.CIRCLE and M.field is Field.REAL and not isinstance(params, ModeConcentration):
                raise ValueError(f"{M} takes (mu, kappa) parameters with mu an angle.")
        elif M.kind is ManifoldKind.STIEFEL or M.kind in _ROTATION_KINDS:
            if not isinstance(params, _MATRIX_RECORDS):
                raise ValueError(f"{M} takes (F,), (U, D, V) or (H, P) parameters, not {type(params).__name__}.")
        else:
            raise ValueError(f"VonMisesFisher is not defined on {M}.")

    @property
    def _is_real_circle(self) -> bool:
        return self.manifold.kind is ManifoldKind.CIRCLE and self.manifold.field is Field.REAL

    # ---- Parameter conversions ----

    def _mean_vector(self) -> Array:
        """c = kappa mu for vector parameterizations, in the manifold's dtype."""
        params = self.params
        if isinstance(params, ModeConcentration):
            c = params.kappa * params.mu
        else:
            c = params.c
        return np.asarray(c, dtype=self.manifold.dtype)

    def _loading(self) -> Array:
        params = self.params
        if isinstance(params, Loading):
            F = params.F
        elif isinstance(params, SvdForm):
            F = (params.U * params.D[np.newaxis, :]) @ params.V.conj().T
        elif isinstance(params, PolarForm):
            F = params.H @ params.P
        else:
            raise ValueError(f"Unsupported parameterization {type(params).__name__}.")
        return np.asarray(F, dtype=self.manifold.dtype)

    def _svd(self) -> tuple[Array, Array, Array]:
        params = self.params
        if isinstance(params, SvdForm):
            dtype = self.manifold.dtype
            return (np.asarray(params.U, dtype=dtype), np.asarray(params.D, dtype=float),
                    np.asarray(params.V, dtype=dtype))
        return svd_unique(self._loading())

    # ---- Densities ----

    def log_density(self, x: ArrayLike) -> float:
        M = self.manifold
        params = self.params
        x = _ensure_point(x, M.representation_size)
        d = M.real_dimension

        if self._is_real_circle:
            kappa = _ensure_real_scalar(params.kappa)
            theta = _ensure_real_scalar(x)
            return kappa * math.cos(theta - _ensure_real_scalar(params.mu)) - float(log_bessel_i(0.0, kappa))

        if isinstance(params, ModeConcentration):
            kappa = _ensure_real_scalar(params.kappa)
            return kappa * real_inner(params.mu, x) - log_vmf_normalizer(d * x.size, kappa)

        if isinstance(params, MeanVector):
            kappa = float(np.linalg.norm(params.c))
            return real_inner(params.c, x) - log_vmf_normalizer(d * x.size, kappa)

        n = M.matrix_size[0]
        b = 0.5 * d * n
        if isinstance(params, SvdForm):
            D = np.asarray(params.D, dtype=float)
            arg = np.diag(0.25 * D * D)
        elif isinstance(params, PolarForm):
            arg = 0.25 * (params.P.conj().T @ params.P)
        else:
            F = params.F
            arg = 0.25 * (F.conj().T @ F)
        return real_inner(self._loading(), x) - log_hypergeometric_pfq((), (b,), arg, alpha=M.field.jack_alpha)

    def mode(self) -> Array | float | complex:
        """The modal point: mu, c / |c|, U V^H or H.

        On rotation groups the mode is the closest rotation to F. Matrix modes
        are not unique when F is rank deficient.
        """
        M = self.manifold
        params = self.params

        if isinstance(params, ModeConcentration):
            mu = np.array(params.mu)
            return mu.item() if M.kind is ManifoldKind.CIRCLE else mu
        if isinstance(params, MeanVector):
            c = np.asarray(params.c)
            mode = c / np.linalg.norm(c)
            return mode.item() if M.kind is ManifoldKind.CIRCLE else mode

        if M.kind in _ROTATION_KINDS:
            return M.project(self._loading())
        if isinstance(params, PolarForm):
            return np.array(params.H)
        U, _, V = self._svd()
        return U @ V.conj().T

    # ---- Sampling ----

    def _sample_point(self, rng: PRNG) -> Array | float | complex:
        M = self.manifold
        params = self.params

        if self._is_real_circle:
            return sample_von_mises_angle(rng, float(params.mu), float(params.kappa))

        if M.kind is ManifoldKind.CIRCLE:
            c = complex(self._mean_vector())
            theta = sample_von_mises_angle(rng, cmath.phase(c), abs(c))
            return cmath.exp(1j * theta)

        if M.kind is ManifoldKind.SPHERE:
            return sample_vmf_vector(rng, self._mean_vector())

        U, D, V = self._svd()
        if M.kind is ManifoldKind.STIEFEL:
            return sample_vmf_stiefel(rng, U, D, V)

        # exact on SO(n): draw from the Langevin distribution on O(n) and keep
        # the draws with positive determinant
        n_rejected = 0
        while True:
            X = sample_vmf_stiefel(rng, U, D, V)
            if np.linalg.det(X) > 0:
                break
            n_rejected += 1
            _check_rejection_limit("rotation vMF sampler", n_rejected)
        logger.debug("rotation vMF sampler: %d rejections", n_rejected)
        return X


Langevin = VonMisesFisher


def VonMises(field: Field = Field.REAL, params: ParameterRecord | None = None, **kwargs: Any) -> VonMisesFisher:
    """The von Mises distribution on the real or complex circle.

    VonMises(mu=0.5, kappa=1.0) uses angles; VonMises(COMPLEX, mu=1j, kappa=1.0)
    and VonMises(COMPLEX, c=3 + 4j) use unit complex numbers.
    """
    return VonMisesFisher(Circle(field), params, **kwargs)


def Fisher(params: ParameterRecord | None = None, **kwargs: Any) -> VonMisesFisher:
    """The Fisher distribution, vMF on the 2-sphere."""
    return VonMisesFisher(Sphere(2), params, **kwargs)
