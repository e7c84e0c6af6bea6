# measures/measure.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from ..custom_types import Array, ArrayLike, PRNG, RNGLike
from ..array_backend.utils import _as_rng, _ensure_batch_array
from ..manifolds import Field, Manifold, ManifoldKind

__all__ = [
    "Measure",
]


def _point_dtype(manifold: Manifold) -> Any:
    """dtype of sampled points. Raises NotImplementedError for quaternions."""
    if manifold.kind is ManifoldKind.CIRCLE and manifold.field is Field.REAL:
        return np.dtype(np.float64)
    return manifold.dtype


def _standard_normal(rng: PRNG, shape: tuple[int, ...], dtype: Any) -> Array:
    """IID standard normal draws; complex draws have E|z|^2 = 1."""
    if np.issubdtype(dtype, np.complexfloating):
        re = rng.standard_normal(shape)
        im = rng.standard_normal(shape)
        return (re + 1j * im) / np.sqrt(2.0)
    return rng.standard_normal(shape)


class Measure(ABC):
    """
    Abstract base class for a measure on a manifold.

    Subclasses provide `log_density` with respect to `base_measure()`,
    `log_mass` and a single-point sampler `_sample_point`. The batched and
    buffer-filling sampling entry points are shared.

    Construction never validates numeric parameters and never computes a
    normalizing constant; invalid parameters show up as NaN or Inf in results.
    """

    def __init__(self, manifold: Manifold) -> None:
        if not isinstance(manifold, Manifold):
            raise TypeError(f"Expected a Manifold, got {type(manifold).__name__}.")
        self._manifold = manifold

    @property
    def manifold(self) -> Manifold:
        return self._manifold

    # ---- Densities ----

    @abstractmethod
    def log_density(self, x: ArrayLike) -> float:
        """Log-density of the point `x` with respect to `base_measure()`.

        `x` is assumed to lie on the manifold; off-manifold points give
        meaningless values rather than errors.
        """
        ...

    def density(self, x: ArrayLike) -> float:
        with np.errstate(over="ignore"):
            return float(np.exp(self.log_density(x)))

    @abstractmethod
    def log_mass(self) -> float:
        """Log of the total mass of the measure over its manifold."""
        ...

    def base_measure(self) -> Measure:
        """Reference measure of `log_density`."""
        return self

    # ---- Sampling ----

    @abstractmethod
    def _sample_point(self, rng: PRNG) -> Array | float | complex:
        """Draw one point using `rng`."""
        ...

    def sample(self, n_samples: int | None = None, *, rng: RNGLike = None) -> Array | float | complex:
        """
        Draw points from the measure.

        Args:
            n_samples: Number of points. With `None` a single point of the
                manifold's representation shape is returned, otherwise an
                array of shape (n_samples, *representation_size).
            rng: A numpy Generator, an integer seed, or None for fresh entropy.

        Raises:
            NotImplementedError: For manifolds whose points numpy cannot hold.
        """
        rng = _as_rng(rng)
        dtype = _point_dtype(self.manifold)
        if n_samples is None:
            return self._sample_point(rng)
        out = np.empty((int(n_samples),) + self.manifold.representation_size, dtype=dtype)
        return self.sample_into(out, rng=rng)

    def sample_into(self, out: Array, *, rng: RNGLike = None) -> Array:
        """
        Fill the caller-provided array `out` with draws and return it.

        `out` has either the representation shape of a single point or a
        leading batch axis, shape (N, *representation_size).
        """
        if not isinstance(out, np.ndarray):
            raise TypeError(f"sample_into requires a numpy array, got {type(out).__name__}.")
        rng = _as_rng(rng)
        dtype = _point_dtype(self.manifold)
        if not np.can_cast(dtype, out.dtype, casting="same_kind"):
            raise ValueError(f"Cannot store points of dtype {dtype} in an array of dtype {out.dtype}.")

        batch = _ensure_batch_array(out, self.manifold.representation_size, copy=False)
        for i in range(batch.shape[0]):
            batch[i] = self._sample_point(rng)
        return out

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.manifold})"
