# special/functions.py
"""
Log-scale special functions used by the normalizing constants.

Every function works on the log scale so that large dimensions and large
concentrations neither overflow nor underflow. NaN and Inf inputs propagate
into the result; nothing here raises for a mathematically undefined value.
"""
from __future__ import annotations

import math

import numpy as np
from scipy.special import gammaln, ive, logsumexp

from ..custom_types import Array, ArrayLike

__all__ = [
    "log_multivariate_gamma",
    "log_bessel_i",
    "log_bessel_i_ratio",
]

LOG_PI = math.log(math.pi)
LOG_2 = math.log(2.0)

# Window of the power series used where the scaled Bessel function leaves the
# normal floating point range: spreads summed on each side of the largest term,
# plus a fixed number of terms.
_BESSEL_SERIES_WIDTH = 12.0
_BESSEL_SERIES_MIN_TERMS = 32
_TINY = np.finfo(float).tiny


def _scalar_or_array(out: Array) -> float | Array:
    return float(out) if np.ndim(out) == 0 else out


def log_multivariate_gamma(m: int, a: ArrayLike) -> float | Array:
    """Log of the multivariate gamma function.

    .. math::

        \\log \\Gamma_m(a) = \\frac{m(m-1)}{4} \\log \\pi + \\sum_{i=1}^{m} \\log \\Gamma\\left(a - \\frac{i-1}{2}\\right)

    Defined for ``a > (m - 1)/2``. Unlike `scipy.special.multigammaln` no
    domain check is made.

    Args:
        m: Dimension, a non-negative integer. `m = 0` gives 0.
        a: Scalar or array argument.
    """
    m = int(m)
    a = np.asarray(a, dtype=float)
    half_i = 0.5 * np.arange(m)
    out = 0.25 * m * (m - 1) * LOG_PI + np.sum(gammaln(a[..., np.newaxis] - half_i), axis=-1)
    return _scalar_or_array(out)


def _log_bessel_i_series(nu: float, x: float) -> float:
    """log I_nu(x) from the ascending series, summed on the log scale.

    The terms (x/2)^(2k) / (k! Gamma(nu + k + 1)) are log-concave in k and
    peak where (k + 1)(nu + k + 1) = x^2/4, so only a window of terms around
    the peak is summed. Its half-width is a multiple of the spread
    1 / sqrt(1/(k + 1) + 1/(nu + k + 1)) of the terms at the peak.
    """
    m = x * x / (2.0 * (nu + math.sqrt(nu * nu + x * x)))
    peak = max(0.0, m - 1.0)
    spread = 1.0 / math.sqrt(1.0 / (peak + 1.0) + 1.0 / (nu + peak + 1.0))
    half_width = _BESSEL_SERIES_WIDTH * spread + _BESSEL_SERIES_MIN_TERMS
    k = np.arange(max(0, int(peak - half_width)), int(peak + half_width) + 1, dtype=float)
    log_half_x = math.log(0.5 * x)
    log_terms = 2.0 * k * log_half_x - gammaln(k + 1.0) - gammaln(nu + k + 1.0)
    return nu * log_half_x + float(logsumexp(log_terms))


def log_bessel_i(nu: ArrayLike, x: ArrayLike) -> float | Array:
    """Log of the modified Bessel function of the first kind, log I_nu(x).

    Computed as log(ive(nu, x)) + |x| from the exponentially scaled Bessel
    function, which stays finite for large x. Where the scaled value falls
    below the normal floating point range (large order relative to the
    argument, or a tiny argument) the ascending series is summed on the log
    scale instead.

    Args:
        nu: Order, nu >= -1.
        x: Argument, x >= 0.
    """
    nu, x = np.broadcast_arrays(np.asarray(nu, dtype=float), np.asarray(x, dtype=float))
    scaled = np.array(ive(nu, x), dtype=float, ndmin=1)
    with np.errstate(divide="ignore"):
        out = np.log(scaled) + np.abs(np.array(x, ndmin=1))

    flat_nu = np.ravel(nu)
    flat_x = np.ravel(x)
    under = ((np.ravel(scaled) < _TINY) & (flat_x > 0) & (flat_nu >= 0)
             & np.isfinite(flat_nu) & np.isfinite(flat_x))
    if np.any(under):
        flat_out = np.ravel(out)
        flat_out[under] = [_log_bessel_i_series(a, b) for a, b in zip(flat_nu[under], flat_x[under])]
        out = flat_out.reshape(out.shape)

    return _scalar_or_array(out.reshape(np.shape(x)))


def log_bessel_i_ratio(nu: ArrayLike, x: ArrayLike) -> float | Array:
    """Return log(I_nu(x) / x^nu), including its finite limit at x = 0.

    The limit is -nu log 2 - log Gamma(nu + 1). This is the x-dependent part
    of the von Mises-Fisher normalizing constant, and evaluating it through
    this function avoids the 0 * log(0) of the naive expression.
    """
    nu, x = np.broadcast_arrays(np.asarray(nu, dtype=float), np.asarray(x, dtype=float))
    zero = x == 0
    safe_x = np.where(zero, 1.0, x)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.asarray(log_bessel_i(nu, safe_x)) - nu * np.log(safe_x)
        limit = -nu * LOG_2 - gammaln(nu + 1.0)
    return _scalar_or_array(np.where(zero, limit, out))
