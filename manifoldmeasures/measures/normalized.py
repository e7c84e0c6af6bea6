# measures/normalized.py
from __future__ import annotations

import math

from ..custom_types import Array, ArrayLike, PRNG
from .measure import Measure

__all__ = [
    "Normalized",
    "normalize_measure",
    "mass",
]


class Normalized(Measure):
    """The probability measure nu / mass(nu) for a finite base measure nu.

    Its log-density with respect to the base is -log_mass(nu) everywhere, its
    own log-mass is 0, and draws come from the base's sampler unchanged.
    """

    def __init__(self, base: Measure) -> None:
        if not isinstance(base, Measure):
            raise TypeError(f"Expected a Measure, got {type(base).__name__}.")
        super().__init__(base.manifold)
        self._base = base

    @property
    def base(self) -> Measure:
        return self._base

    def base_measure(self) -> Measure:
        return self._base

    def log_density(self, x: ArrayLike) -> float:
        return float(self._base.log_density(x)) - float(self._base.log_mass())

    def log_mass(self) -> float:
        return 0.0

    def _sample_point(self, rng: PRNG) -> Array | float | complex:
        return self._base._sample_point(rng)

    def __repr__(self) -> str:
        return f"Normalized({self._base!r})"


def normalize_measure(measure: Measure) -> Normalized:
    """Return the normalized counterpart of `measure`.

    Normalizing is idempotent: an already normalized measure is returned as is.
    """
    if isinstance(measure, Normalized):
        return measure
    return Normalized(measure)


def mass(measure: Measure) -> float:
    """Total mass exp(log_mass) of `measure`."""
    return math.exp(measure.log_mass())
