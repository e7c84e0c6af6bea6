# measures/sphere_sampling.py
"""
Exact samplers for the von Mises-Fisher distribution.

- `sample_von_mises_angle`: Best & Fisher (1979) rejection sampler for the
  von Mises distribution on the circle.
- `sample_vmf_vector`: Wood (1994) sampler on the sphere of any dimension,
  for real and complex vectors (complex vectors use the real embedding).
- `sample_vmf_stiefel`: Hoff (2009) sampler on the Stiefel manifold, which
  draws the columns one at a time from sphere vMF distributions on the
  orthogonal complement of the previous columns and accepts or rejects the
  whole matrix.

Every rejection loop terminates almost surely. `options.max_rejections`
caps the number of rejections per draw; exceeding it raises
`RejectionLimitError`.
"""
from __future__ import annotations

import logging
import math

import numpy as np
from scipy.special import expit

from ..config import options
from ..custom_types import Array, ArrayLike, PRNG
from ..errors import RejectionLimitError
from ..linalg.operations import householder_reflect, orthogonal_complement
from ..special.functions import log_bessel_i_ratio

logger = logging.getLogger(__name__)

__all__ = [
    "sample_von_mises_angle",
    "sample_wood_cosine",
    "sample_vmf_vector",
    "sample_vmf_stiefel",
]


def _check_rejection_limit(sampler: str, n_rejected: int) -> None:
    limit = options.max_rejections
    if limit is not None and n_rejected > limit:
        raise RejectionLimitError(sampler, limit)


def _wrap(theta: float) -> float:
    return (theta + math.pi) % (2.0 * math.pi) - math.pi


# -----------------------------------------------------------------------------
# Circle
# -----------------------------------------------------------------------------

def sample_von_mises_angle(rng: PRNG, mu: float, kappa: float) -> float:
    """Draw an angle in [-pi, pi) from the von Mises distribution VM(mu, kappa).

    Best & Fisher (1979), with the envelope constants rearranged so that they
    stay finite for kappa close to 0 and for very large kappa.
    """
    mu = float(mu)
    kappa = float(kappa)
    if math.isnan(kappa) or math.isnan(mu):
        return math.nan
    if kappa == 0.0:
        return float(rng.uniform(-math.pi, math.pi))
    if math.isinf(kappa):
        return _wrap(mu)

    s = math.sqrt(1.0 + 4.0 * kappa * kappa)
    tau = 1.0 + s
    sqrt_2tau = math.sqrt(2.0 * tau)
    rho = 2.0 * kappa / (tau + sqrt_2tau)
    one_minus_rho = (1.0 + 1.0 / (s + 2.0 * kappa) + sqrt_2tau) / (tau + sqrt_2tau)
    r_minus_1 = one_minus_rho * one_minus_rho / (2.0 * rho)
    if not math.isfinite(r_minus_1):
        # kappa below the smallest normal double: indistinguishable from uniform
        return float(rng.uniform(-math.pi, math.pi))
    r = 1.0 + r_minus_1
    kappa_r_minus_1 = kappa * r_minus_1

    n_rejected = 0
    while True:
        z = math.cos(math.pi * rng.uniform())
        c = kappa_r_minus_1 * ((r + 1.0) / (r + z))
        u = rng.uniform()
        if c * (2.0 - c) > u or (u > 0.0 and math.log(c / u) + 1.0 - c >= 0.0):
            break
        n_rejected += 1
        _check_rejection_limit("von Mises sampler", n_rejected)
    logger.debug("von Mises sampler: %d rejections (kappa=%g)", n_rejected, kappa)

    # 1 - f with f = (1 + r z) / (r + z), kept accurate for f close to 1
    one_minus_f = r_minus_1 * (1.0 - z) / (r + z)
    theta = 2.0 * math.asin(math.sqrt(min(max(0.5 * one_minus_f, 0.0), 1.0)))
    if rng.uniform() < 0.5:
        theta = -theta
    return _wrap(mu + theta)


# -----------------------------------------------------------------------------
# Sphere
# -----------------------------------------------------------------------------

def sample_wood_cosine(rng: PRNG, p: int, kappa: float) -> float:
    """Draw t = <mu, x> for x ~ vMF(mu, kappa) on the unit sphere in R^p, p >= 3.

    t has density proportional to (1 - t^2)^((p - 3)/2) exp(kappa t) on [-1, 1].
    For p = 3 it is a truncated exponential, drawn by inverting its CDF; other
    dimensions use the Beta envelope of Wood (1994).
    """
    kappa = float(kappa)
    if kappa == 0.0:
        half = 0.5 * (p - 1)
        return float(2.0 * rng.beta(half, half) - 1.0)

    if p == 3:
        u = rng.uniform()
        t = 1.0 + math.log1p((1.0 - u) * math.expm1(-2.0 * kappa)) / kappa
        return max(t, -1.0)

    m = p - 1
    a = 2.0 * kappa / m
    b = 1.0 / (math.sqrt(a * a + 1.0) + a)
    x0 = (1.0 - b) / (1.0 + b)
    # log(1 - x0^2) = log(4 b) - 2 log(1 + b)
    c = kappa * x0 + m * (math.log(4.0 * b) - 2.0 * math.log1p(b))

    n_rejected = 0
    while True:
        z = rng.beta(0.5 * m, 0.5 * m)
        w = (1.0 - (1.0 + b) * z) / (1.0 - (1.0 - b) * z)
        if kappa * w + m * math.log1p(-x0 * w) - c >= math.log1p(-rng.uniform()):
            break
        n_rejected += 1
        _check_rejection_limit("Wood vMF sampler", n_rejected)
    logger.debug("Wood vMF sampler: %d rejections (p=%d, kappa=%g)", n_rejected, p, kappa)
    return float(w)


def _sample_vmf_real(rng: PRNG, c: Array) -> Array:
    p = c.size
    kappa = float(np.linalg.norm(c))
    if kappa == 0.0:
        x = rng.standard_normal(p)
        return x / np.linalg.norm(x)
    mu = c / kappa

    if p == 1:
        # P(x = mu) = exp(kappa) / (exp(kappa) + exp(-kappa))
        return mu.copy() if rng.uniform() < expit(2.0 * kappa) else -mu
    if p == 2:
        theta = sample_von_mises_angle(rng, math.atan2(mu[1], mu[0]), kappa)
        return np.array([math.cos(theta), math.sin(theta)])

    t = sample_wood_cosine(rng, p, kappa)
    xi = rng.standard_normal(p - 1)
    xi /= np.linalg.norm(xi)
    x = np.empty(p)
    x[0] = t
    x[1:] = math.sqrt(max((1.0 - t) * (1.0 + t), 0.0)) * xi
    return householder_reflect(x, mu)


def sample_vmf_vector(rng: PRNG, c: ArrayLike) -> Array:
    """Draw x from the vMF distribution with density proportional to
    exp(Re <c, x>) on the unit sphere of R^p or C^p.

    The mode is c / |c| and the concentration |c|; c = 0 gives a uniform draw.
    """
    c = np.asarray(c)
    if np.iscomplexobj(c):
        m = c.size
        x = _sample_vmf_real(rng, np.concatenate([c.real, c.imag]))
        return x[:m] + 1j * x[m:]
    return _sample_vmf_real(rng, c.astype(float))


# -----------------------------------------------------------------------------
# Stiefel
# -----------------------------------------------------------------------------

def sample_vmf_stiefel(rng: PRNG, U: ArrayLike, D: ArrayLike, V: ArrayLike) -> Array:
    """Draw X from the matrix vMF distribution with density proportional to
    exp(Re tr(F^H X)), F = U diag(D) V^H, on the Stiefel manifold.

    Hoff (2009), Simulation of the matrix Bingham-von Mises-Fisher
    distribution. Y = X V has density proportional to
    exp(sum_j D_j Re <u_j, y_j>). Column j of a proposal is a sphere vMF draw
    in the orthogonal complement N_j of the previous columns, with parameter
    z_j = N_j^H D_j u_j. The proposal is accepted with probability

        prod_j r(|z_j|) / r(D_j),    r(x) = I_nu_j(x) / x^nu_j,

    where nu_j is the Bessel order of the sphere in N_j. A column with
    D_j = 0 is a uniform draw and contributes a factor of 1.

    Args:
        U: (n, k) matrix with orthonormal columns.
        D: (k,) non-negative singular values.
        V: (k, k) unitary matrix.
    """
    U = np.asarray(U)
    D = np.asarray(D, dtype=float)
    V = np.asarray(V)
    n, k = U.shape
    is_complex = np.iscomplexobj(U) or np.iscomplexobj(V)
    dtype = np.complex128 if is_complex else np.float64
    d = 2 if is_complex else 1
    H = U * D[np.newaxis, :]

    n_rejected = 0
    while True:
        Y = np.empty((n, k), dtype=dtype)
        log_ratio = 0.0
        for j in range(k):
            if j == 0:
                z = H[:, 0].astype(dtype)
                Y[:, 0] = sample_vmf_vector(rng, z)
                continue
            N = orthogonal_complement(Y[:, :j])
            z = N.conj().T @ H[:, j]
            Y[:, j] = N @ sample_vmf_vector(rng, z)
            if D[j] > 0:
                nu = 0.5 * d * (n - j) - 1.0
                log_ratio += (log_bessel_i_ratio(nu, np.linalg.norm(z))
                              - log_bessel_i_ratio(nu, D[j]))
        if math.log1p(-rng.uniform()) < log_ratio:
            break
        n_rejected += 1
        _check_rejection_limit("Hoff matrix vMF sampler", n_rejected)
    logger.debug("Hoff matrix vMF sampler: %d rejections (n=%d, k=%d)", n_rejected, n, k)
    return Y @ V.conj().T
