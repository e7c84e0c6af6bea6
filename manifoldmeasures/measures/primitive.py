# measures/primitive.py
"""
Primitive measures: the Hausdorff (volume) measure and the Haar measure.

Both are reference measures, so their log-density is identically zero. The
total volumes follow Chikuse (2003), Statistics on Special Manifolds, with
the complex and quaternionic Stiefel volumes built up column by column from
sphere volumes.
"""
from __future__ import annotations

import math

import numpy as np
from scipy.special import gammaln

from ..custom_types import Array, ArrayLike, PRNG
from ..linalg.operations import qr_unique
from ..manifolds import Field, Manifold, ManifoldKind
from ..special.functions import LOG_2, LOG_PI, log_multivariate_gamma
from .measure import Measure, _point_dtype, _standard_normal

__all__ = [
    "Hausdorff",
    "Haar",
    "LeftHaar",
    "RightHaar",
    "hausdorff_log_mass",
]

_LOG_2PI = math.log(2.0 * math.pi)


# -----------------------------------------------------------------------------
# Volumes
# -----------------------------------------------------------------------------

def _sphere_log_mass(n: int, d: int) -> float:
    nu = 0.5 * d * (n + 1)
    return float(LOG_2 + nu * LOG_PI - gammaln(nu))


def _stiefel_log_mass(n: int, k: int, d: int) -> float:
    if d == 1:
        return float(k * LOG_2 + 0.5 * k * n * LOG_PI - log_multivariate_gamma(k, 0.5 * n))
    # vol St(n, k) = vol S(n - 1) vol St(n - 1, k - 1)
    return float(sum(_sphere_log_mass(n - 1 - i, d) for i in range(k)))


def hausdorff_log_mass(manifold: Manifold) -> float:
    """Log of the total Hausdorff volume of `manifold` in its default embedding."""
    kind = manifold.kind
    n, k, d = manifold.n, manifold.k, manifold.real_dimension

    if kind is ManifoldKind.SPHERE:
        return _sphere_log_mass(n, d)
    if kind is ManifoldKind.PROJECTIVE_SPACE:
        return _sphere_log_mass(n, d) - _sphere_log_mass(0, d)
    if kind is ManifoldKind.STIEFEL:
        return _stiefel_log_mass(n, k, d)
    if kind is ManifoldKind.GRASSMANN:
        return _stiefel_log_mass(n, k, d) - _stiefel_log_mass(k, k, d)
    if kind in (ManifoldKind.ROTATIONS, ManifoldKind.SPECIAL_ORTHOGONAL):
        # O(n) is two copies of SO(n)
        return _stiefel_log_mass(n, n, 1) - LOG_2
    if kind is ManifoldKind.CIRCLE:
        return _LOG_2PI
    raise ValueError(f"Unknown manifold kind {kind!r}.")


# -----------------------------------------------------------------------------
# Uniform draws
# -----------------------------------------------------------------------------

def _sample_uniform(manifold: Manifold, rng: PRNG) -> Array | float | complex:
    """Exact draw from the normalized Hausdorff measure."""
    dtype = _point_dtype(manifold)
    kind = manifold.kind

    if kind is ManifoldKind.CIRCLE:
        if manifold.field is Field.REAL:
            return float(rng.uniform(-math.pi, math.pi))
        z = complex(_standard_normal(rng, (), dtype))
        return z / abs(z)

    if kind in (ManifoldKind.SPHERE, ManifoldKind.PROJECTIVE_SPACE):
        x = _standard_normal(rng, manifold.representation_size, dtype)
        return x / np.linalg.norm(x)

    Q, _ = qr_unique(_standard_normal(rng, manifold.matrix_size, dtype))
    if kind in (ManifoldKind.ROTATIONS, ManifoldKind.SPECIAL_ORTHOGONAL) and np.linalg.det(Q) < 0:
        if manifold.n == 1:
            Q = -Q
        else:
            Q[:, [0, 1]] = Q[:, [1, 0]]
    return Q


# -----------------------------------------------------------------------------
# Measures
# -----------------------------------------------------------------------------

class Hausdorff(Measure):
    """The Hausdorff (volume) measure on a manifold's default embedding.

    `log_density` is zero everywhere; `log_mass` is the closed-form volume.
    Samples are exact uniform draws: normalized Gaussian vectors for spheres,
    the Q factor of the unique QR decomposition of a Gaussian matrix for
    Stiefel and Grassmann points, and that factor with two columns swapped
    when its determinant is negative for rotations.
    """

    def log_density(self, x: ArrayLike) -> float:
        return 0.0

    def log_mass(self) -> float:
        return hausdorff_log_mass(self.manifold)

    def _sample_point(self, rng: PRNG) -> Array | float | complex:
        return _sample_uniform(self.manifold, rng)


_DIRECTIONS = ("left", "right")


class Haar(Measure):
    """The left- or right-invariant Haar measure on a compact group.

    For the compact groups supported here (rotations and the circle) the Haar
    measure coincides with the Hausdorff measure, so mass and sampling are
    delegated to it.

    Args:
        group: A group manifold (`Rotations`, `SpecialOrthogonal`, `Circle`).
        direction: "left" or "right".
    """

    def __init__(self, group: Manifold, direction: str = "left") -> None:
        super().__init__(group)
        if not group.is_group:
            raise ValueError(f"Haar measure requires a group manifold. Got {group}.")
        if direction not in _DIRECTIONS:
            raise ValueError(f"direction must be one of {_DIRECTIONS}. Got {direction!r}.")
        self._direction = direction
        self._hausdorff = Hausdorff(group)

    @property
    def group(self) -> Manifold:
        return self.manifold

    @property
    def direction(self) -> str:
        return self._direction

    def log_density(self, x: ArrayLike) -> float:
        return 0.0

    def log_mass(self) -> float:
        return self._hausdorff.log_mass()

    def _sample_point(self, rng: PRNG) -> Array | float | complex:
        return self._hausdorff._sample_point(rng)

    def __repr__(self) -> str:
        return f"Haar({self.group}, {self.direction!r})"


def LeftHaar(group: Manifold) -> Haar:
    return Haar(group, "left")


def RightHaar(group: Manifold) -> Haar:
    return Haar(group, "right")
