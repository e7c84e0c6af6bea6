# custom_types.py
"""
Type aliases shared across manifoldmeasures.

Conventions:
- Annotate function input with `ArrayLike`
- Annotate function output with `Array`
- Random sources are `numpy.random.Generator` instances; anything accepted
  by `numpy.random.default_rng` (an int seed, None) is `RNGLike`.
"""
from __future__ import annotations
from typing import TypeAlias, Union
from numpy.random import Generator as NumpyRNG

from numpy.typing import (
    NDArray as NumpyArray,
    ArrayLike as NumpyArrayLike
)

Array = NumpyArray
ArrayLike: TypeAlias = NumpyArrayLike
PRNG: TypeAlias = NumpyRNG
RNGLike: TypeAlias = Union[NumpyRNG, int, None]
