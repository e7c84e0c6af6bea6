# config.py
"""
Package-wide numerical options.

`options` is read at call time by the samplers and the hypergeometric
kernels, so changes take effect immediately. Use `option_context` to change
options temporarily:

    with option_context(max_rejections=1000):
        x = VonMisesFisher(M, mu=mu, kappa=kappa).sample(rng=rng)
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, fields
from typing import Any, Iterator

__all__ = [
    "Options",
    "options",
    "option_context",
]


@dataclass
class Options:
    """Numerical options.

    Attributes:
        max_rejections: Maximum number of rejected proposals for a single draw
            of any rejection sampler. `None` loops until acceptance, which
            terminates almost surely.
        hypergeometric_max_degree: Highest total partition degree used by the
            truncated series for hypergeometric functions of a matrix argument.
            `None` disables the series, so general matrix arguments raise
            `NotImplementedError`.
        hypergeometric_rtol: Relative size of a degree's contribution below
            which the series is considered converged.
    """
    max_rejections: int | None = None
    hypergeometric_max_degree: int | None = None
    hypergeometric_rtol: float = 1e-12


options = Options()


@contextmanager
def option_context(**overrides: Any) -> Iterator[Options]:
    """Temporarily override fields of `options`, restoring them on exit."""
    names = {f.name for f in fields(Options)}
    unknown = sorted(set(overrides) - names)
    if unknown:
        raise ValueError(f"Unknown option(s) {unknown}. Allowed: {sorted(names)}")

    saved = {name: getattr(options, name) for name in overrides}
    for name, value in overrides.items():
        setattr(options, name, value)
    try:
        yield options
    finally:
        for name, value in saved.items():
            setattr(options, name, value)
