# measures/parameterized.py
"""
Shared machinery for parameterized probability measures.

A parameterized measure holds one parameter record. Each measure family
lists the record types it accepts (its alternative encodings), and
operations dispatch on the record type. Records copy their fields into
read-only arrays, so measures never share or alias caller data.
"""
from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping, Sequence, Type

import numpy as np

from ..custom_types import Array
from ..manifolds import Manifold
from .measure import Measure
from .normalized import normalize_measure
from .primitive import Hausdorff

__all__ = [
    "ParameterRecord",
    "ParameterizedMeasure",
]


def _frozen_array(value: Any) -> Array:
    arr = np.array(value)
    arr.setflags(write=False)
    return arr


class ParameterRecord:
    """Base class of the frozen dataclasses holding measure parameters."""

    def __post_init__(self) -> None:
        for f in fields(self):
            object.__setattr__(self, f.name, _frozen_array(getattr(self, f.name)))

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def __repr__(self) -> str:
        parts = ", ".join(f"{f.name}={np.array2string(getattr(self, f.name), precision=4)}"
                          for f in fields(self))
        return f"{self.__class__.__name__}({parts})"


def _resolve_params(measure_name: str, record_types: Sequence[Type[ParameterRecord]],
                    params: ParameterRecord | None, kwargs: Mapping[str, Any]) -> ParameterRecord:
    """Build the parameter record from either a record or keyword parameters."""
    if params is not None:
        if kwargs:
            raise ValueError(f"{measure_name}: pass either a parameter record or keyword parameters, not both.")
        if not isinstance(params, tuple(record_types)):
            allowed = ", ".join(t.__name__ for t in record_types)
            raise ValueError(f"{measure_name}: unsupported parameter record {type(params).__name__}. "
                             f"Allowed: {allowed}.")
        return params

    names = frozenset(kwargs)
    for record_type in record_types:
        if record_type.field_names() == names:
            return record_type(**kwargs)

    allowed = "; ".join(", ".join(sorted(t.field_names())) for t in record_types)
    raise ValueError(f"{measure_name}: unknown parameter set {sorted(names)}. Allowed sets: {allowed}.")


class ParameterizedMeasure(Measure):
    """A probability measure with a density relative to the normalized
    Hausdorff measure of its manifold.

    Parameters are reachable as attributes, e.g. `d.kappa` for a record
    with a `kappa` field.
    """

    _record_types: tuple = ()

    def __init__(self, manifold: Manifold, params: ParameterRecord | None = None, **kwargs: Any) -> None:
        super().__init__(manifold)
        self._params = _resolve_params(self.__class__.__name__, self._record_types, params, kwargs)
        self._check_parameterization()

    def _check_parameterization(self) -> None:
        """Raise ValueError if the record cannot describe a measure on this manifold."""

    @property
    def params(self) -> ParameterRecord:
        return self._params

    def __getattr__(self, name: str) -> Any:
        params = self.__dict__.get("_params")
        if params is not None and name in params.field_names():
            return getattr(params, name)
        raise AttributeError(f"{self.__class__.__name__!r} object has no attribute {name!r}")

    def base_measure(self) -> Measure:
        return normalize_measure(Hausdorff(self.manifold))

    def log_mass(self) -> float:
        return 0.0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.manifold}, {self._params!r})"
