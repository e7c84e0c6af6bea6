# special/hypergeometric.py
"""
Hypergeometric functions of a matrix argument.

For a Hermitian matrix X the function pFq^(alpha)(a; b; X) depends only on
the eigenvalues of X. It is the normalizing constant of the matrix Langevin
(0F1) and matrix Bingham (1F1) distributions, with Jack parameter
alpha = 2 for real, 1 for complex and 1/2 for quaternionic matrices.

Closed forms are used whenever X has at most one non-zero eigenvalue: the
zonal polynomials of longer partitions vanish there, and the matrix function
reduces to the scalar one (a Bessel function for 0F1, Kummer's function for
1F1). 0F0(X) = exp(tr X) is closed form for any X.

Everything else needs the full series over partitions. This module
implements it with the Jack function recursion of

    P. Koev, A. Edelman. The efficient evaluation of the hypergeometric
    function of a matrix argument. Math. Comp. 75 (2006), 833-846.

The series is truncated at a total degree, so it is an approximation whose
quality depends on the size of the eigenvalues. It is therefore off unless
`options.hypergeometric_max_degree` is set; by default a general matrix
argument raises `NotImplementedError`.
"""
from __future__ import annotations

import itertools
import logging
import math
from typing import Dict, Iterator, Sequence, Tuple

import numpy as np
from scipy.special import gammaln, hyp0f1, hyp1f1

from ..config import options
from ..custom_types import Array, ArrayLike
from ..array_backend.utils import _ensure_square_matrix
from ..linalg.utils import hermitianize
from .functions import log_bessel_i

logger = logging.getLogger(__name__)

__all__ = [
    "hypergeometric_0f0",
    "hypergeometric_0f1",
    "hypergeometric_1f1",
    "log_hypergeometric_0f1",
    "log_hypergeometric_1f1",
    "log_hypergeometric_pfq",
    "log_hypergeometric_series",
]

Partition = Tuple[int, ...]

# Degree cap for the scalar series used for (p, q) other than (0, 0), (0, 1)
# and (1, 1), when no cap is configured.
_SCALAR_SERIES_MAX_DEGREE = 500

# Beyond this |z|, scipy's hyp1f1 overflows for z > 0; Kummer's transformation
# is used instead.
_KUMMER_SWITCH = 500.0


def _eigenvalues(X: ArrayLike) -> Array:
    arr = np.asarray(X)
    if arr.ndim == 0:
        return np.array([float(np.real(arr))])
    M = _ensure_square_matrix(arr, copy=False)
    return np.linalg.eigvalsh(hermitianize(M))


def _nonzero(eigs: Array) -> Array:
    """Drop eigenvalues that are zero up to round-off of the largest one."""
    tol = 1e-12 * max(1.0, float(np.max(np.abs(eigs)))) if eigs.size else 0.0
    return eigs[np.abs(eigs) > tol]


def _cancel_common(a: Sequence[float], b: Sequence[float]) -> tuple[tuple, tuple]:
    """Drop parameters appearing in both a and b; they cancel term by term."""
    a = list(a)
    b_left = []
    for bj in b:
        if bj in a:
            a.remove(bj)
        else:
            b_left.append(bj)
    return tuple(a), tuple(b_left)


# -----------------------------------------------------------------------------
# Scalar argument
# -----------------------------------------------------------------------------

def _log_0f1_scalar(b: float, z: float) -> float:
    if z == 0:
        return 0.0
    if z < 0:
        with np.errstate(invalid="ignore"):
            return float(np.log(hyp0f1(b, z)))
    # 0F1(; b; z) = Gamma(b) x^(1-b) I_(b-1)(2x) with x = sqrt(z)
    x = math.sqrt(z)
    return float(log_bessel_i(b - 1.0, 2.0 * x) + gammaln(b) + (1.0 - b) * math.log(x))


def _log_1f1_scalar(a: float, b: float, z: float) -> float:
    if z == 0:
        return 0.0
    with np.errstate(invalid="ignore", divide="ignore"):
        if z > _KUMMER_SWITCH:
            # Kummer: 1F1(a; b; z) = e^z 1F1(b - a; b; -z)
            return float(z + np.log(hyp1f1(b - a, b, -z)))
        return float(np.log(hyp1f1(a, b, z)))


# -----------------------------------------------------------------------------
# Koev-Edelman series
# -----------------------------------------------------------------------------

def _partitions(total: int, max_parts: int, max_part: int | None = None) -> Iterator[Partition]:
    """Partitions of `total` into at most `max_parts` non-increasing parts."""
    if max_part is None:
        max_part = total
    if total == 0:
        yield ()
        return
    if max_parts == 0:
        return
    for first in range(min(total, max_part), 0, -1):
        for rest in _partitions(total - first, max_parts - 1, first):
            yield (first,) + rest


def _conjugate(kappa: Partition) -> Partition:
    if not kappa:
        return ()
    return tuple(sum(1 for part in kappa if part >= j) for j in range(1, kappa[0] + 1))


def _pochhammer(a: float, kappa: Partition, alpha: float) -> float:
    """Generalized Pochhammer symbol (a)_kappa^(alpha)."""
    out = 1.0
    for i, part in enumerate(kappa):
        for j in range(part):
            out *= a - i / alpha + j
    return out


def _hook_product(kappa: Partition, alpha: float) -> float:
    """j_kappa, the product of upper and lower hook lengths of kappa."""
    conj = _conjugate(kappa)
    out = 1.0
    for i, part in enumerate(kappa, start=1):
        for j in range(1, part + 1):
            out *= (conj[j - 1] - i + alpha * (part - j + 1)) * (conj[j - 1] - i + 1 + alpha * (part - j))
    return out


def _horizontal_strips(kappa: Partition) -> Iterator[Partition]:
    """Partitions mu with kappa/mu a horizontal strip (kappa itself included)."""
    bounds = [range(nxt, cur + 1) for cur, nxt in zip(kappa, kappa[1:] + (0,))]
    for mu in itertools.product(*bounds):
        yield tuple(part for part in mu if part > 0)


def _strip_coefficient(kappa: Partition, mu: Partition, alpha: float) -> float:
    """beta_{kappa mu} of the Jack function recursion (Koev & Edelman, eq. 4.4)."""
    kc = _conjugate(kappa)
    mc = _conjugate(mu) + (0,) * (len(kc) - len(_conjugate(mu)))

    num = 1.0
    for i, part in enumerate(kappa, start=1):
        for j in range(1, part + 1):
            if kc[j - 1] == mc[j - 1]:
                num *= kc[j - 1] - i + alpha * (part - j + 1)
            else:
                num *= kc[j - 1] - i + 1 + alpha * (part - j)

    den = 1.0
    for i, part in enumerate(mu, start=1):
        for j in range(1, part + 1):
            if kc[j - 1] == mc[j - 1]:
                den *= mc[j - 1] - i + alpha * (part - j + 1)
            else:
                den *= mc[j - 1] - i + 1 + alpha * (part - j)
    return num / den


class _JackFunctions:
    """Jack functions J_kappa^(alpha)(x_1, ..., x_m) with memoized recursion."""

    def __init__(self, x: Sequence[float], alpha: float):
        self.x = [float(v) for v in x]
        self.alpha = float(alpha)
        self._cache: Dict[tuple[Partition, int], float] = {}

    def __call__(self, kappa: Partition, nvars: int | None = None) -> float:
        if nvars is None:
            nvars = len(self.x)
        if not kappa:
            return 1.0
        if len(kappa) > nvars:
            return 0.0
        key = (kappa, nvars)
        if key in self._cache:
            return self._cache[key]

        x_last = self.x[nvars - 1]
        size = sum(kappa)
        total = 0.0
        for mu in _horizontal_strips(kappa):
            if len(mu) > nvars - 1:
                continue
            total += (self(mu, nvars - 1)
                      * x_last ** (size - sum(mu))
                      * _strip_coefficient(kappa, mu, self.alpha))
        self._cache[key] = total
        return total


def log_hypergeometric_series(a: Sequence[float], b: Sequence[float], eigenvalues: ArrayLike,
                              *, alpha: float = 2.0, max_degree: int = 50,
                              rtol: float = 1e-12) -> float:
    """Log of the truncated series for pFq^(alpha)(a; b; X).

    .. math::

        {}_pF_q^{(\\alpha)}(a; b; X) = \\sum_{k=0}^{\\infty} \\sum_{\\kappa \\vdash k}
            \\frac{(a_1)_\\kappa \\cdots (a_p)_\\kappa}{(b_1)_\\kappa \\cdots (b_q)_\\kappa}
            \\frac{\\alpha^k}{j_\\kappa} J_\\kappa^{(\\alpha)}(X)

    Summation stops at the first degree whose contribution is below
    `rtol` times the running sum and smaller than the previous degree's, or
    at `max_degree`, in which case a warning is logged.

    Args:
        a, b: Upper and lower parameters.
        eigenvalues: Eigenvalues of X. Zero eigenvalues may be dropped first;
            they do not change the value.
        alpha: Jack parameter.
        max_degree: Largest total partition degree summed.
        rtol: Relative convergence tolerance.
    """
    x = np.atleast_1d(np.asarray(eigenvalues, dtype=float))
    m = x.size
    jack = _JackFunctions(x, alpha)

    total = 1.0
    prev = math.inf
    for degree in range(1, int(max_degree) + 1):
        degree_sum = 0.0
        for kappa in _partitions(degree, m):
            coef = 1.0
            for ai in a:
                coef *= _pochhammer(ai, kappa, alpha)
            if coef == 0.0:
                continue
            for bj in b:
                coef /= _pochhammer(bj, kappa, alpha)
            degree_sum += coef * alpha ** degree / _hook_product(kappa, alpha) * jack(kappa)
        total += degree_sum
        if abs(degree_sum) <= rtol * abs(total) and abs(degree_sum) <= abs(prev):
            logger.debug("hypergeometric series converged at degree %d", degree)
            break
        prev = degree_sum
    else:
        logger.warning(
            "hypergeometric series for a=%s, b=%s did not reach rtol=%g by degree %d",
            tuple(a), tuple(b), rtol, max_degree,
        )
    with np.errstate(invalid="ignore", divide="ignore"):
        return float(np.log(total))


# -----------------------------------------------------------------------------
# Public entry points
# -----------------------------------------------------------------------------

def log_hypergeometric_pfq(a: Sequence[float], b: Sequence[float], X: ArrayLike,
                           *, alpha: float = 2.0) -> float:
    """Log of the hypergeometric function pFq^(alpha)(a; b; X).

    Args:
        a: Upper parameters (a tuple, possibly empty).
        b: Lower parameters (a tuple, possibly empty).
        X: Scalar or Hermitian matrix argument.
        alpha: Jack parameter (2 real, 1 complex, 1/2 quaternionic). Has no
            effect for scalar arguments.

    Raises:
        NotImplementedError: If X has two or more non-zero eigenvalues, the
            function is not 0F0, and the truncated series has not been enabled
            with `options.hypergeometric_max_degree`.
    """
    a, b = _cancel_common(tuple(a), tuple(b))
    eigs = _eigenvalues(X)
    if not a and not b:
        return float(np.sum(eigs))

    eigs = _nonzero(eigs)
    if eigs.size == 0:
        return 0.0

    if eigs.size == 1:
        z = float(eigs[0])
        if not a and len(b) == 1:
            return _log_0f1_scalar(b[0], z)
        if len(a) == 1 and len(b) == 1:
            return _log_1f1_scalar(a[0], b[0], z)
        max_degree = options.hypergeometric_max_degree or _SCALAR_SERIES_MAX_DEGREE
        return log_hypergeometric_series(a, b, eigs, alpha=alpha, max_degree=max_degree,
                                         rtol=options.hypergeometric_rtol)

    if options.hypergeometric_max_degree is None:
        raise NotImplementedError(
            f"{len(a)}F{len(b)} of a matrix argument with {eigs.size} non-zero eigenvalues "
            "has no closed form. The truncated series of Koev & Edelman (2006) is available "
            "by setting `options.hypergeometric_max_degree`."
        )
    return log_hypergeometric_series(a, b, eigs, alpha=alpha,
                                     max_degree=options.hypergeometric_max_degree,
                                     rtol=options.hypergeometric_rtol)


def hypergeometric_0f0(X: ArrayLike) -> float:
    """0F0(X) = exp(tr X)."""
    return math.exp(log_hypergeometric_pfq((), (), X))


def log_hypergeometric_0f1(b: float, X: ArrayLike, *, alpha: float = 2.0) -> float:
    """log 0F1(; b; X)."""
    return log_hypergeometric_pfq((), (b,), X, alpha=alpha)


def hypergeometric_0f1(b: float, X: ArrayLike, *, alpha: float = 2.0) -> float:
    """0F1(; b; X). For scalar z > 0 this is Gamma(b) x^(1-b) I_(b-1)(2x), x = sqrt(z)."""
    return math.exp(log_hypergeometric_0f1(b, X, alpha=alpha))


def log_hypergeometric_1f1(a: float, b: float, X: ArrayLike, *, alpha: float = 2.0) -> float:
    """log 1F1(a; b; X)."""
    return log_hypergeometric_pfq((a,), (b,), X, alpha=alpha)


def hypergeometric_1f1(a: float, b: float, X: ArrayLike, *, alpha: float = 2.0) -> float:
    """1F1(a; b; X), Kummer's confluent hypergeometric function for scalar X."""
    return math.exp(log_hypergeometric_1f1(a, b, X, alpha=alpha))
