# tests/measures/test_parameterized.py
import numpy as np
import pytest

from manifoldmeasures.manifolds import Sphere
from manifoldmeasures.measures.parameterized import _resolve_params
from manifoldmeasures.measures.von_mises_fisher import MeanVector, ModeConcentration, VonMisesFisher


def test_field_names():
    assert ModeConcentration.field_names() == frozenset({"mu", "kappa"})
    assert MeanVector.field_names() == frozenset({"c"})


def test_records_are_frozen():
    r = MeanVector(c=[1.0, 0.0])
    assert isinstance(r.c, np.ndarray)
    with pytest.raises(AttributeError):
        r.c = np.zeros(2)
    with pytest.raises(ValueError):
        r.c[0] = 2.0


def test_resolve_params():
    types = (ModeConcentration, MeanVector)
    assert isinstance(_resolve_params("X", types, None, {"c": [1.0]}), MeanVector)
    assert isinstance(_resolve_params("X", types, None, {"mu": [1.0], "kappa": 1.0}), ModeConcentration)
    record = MeanVector(c=[1.0])
    assert _resolve_params("X", types, record, {}) is record
    with pytest.raises(ValueError, match="unknown parameter set"):
        _resolve_params("X", types, None, {"mu": [1.0]})


def test_attribute_access():
    d = VonMisesFisher(Sphere(1), mu=np.array([1.0, 0.0]), kappa=2.0)
    assert np.array_equal(d.mu, [1.0, 0.0])
    assert float(d.kappa) == 2.0
    with pytest.raises(AttributeError):
        d.c


def test_repr():
    d = VonMisesFisher(Sphere(1), c=np.array([1.0, 0.0]))
    assert repr(d) == "VonMisesFisher(Sphere(1, real), MeanVector(c=[1. 0.]))"
