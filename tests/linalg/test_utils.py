# tests/linalg/test_utils.py
import numpy as np
import pytest

from manifoldmeasures.linalg import utils as U


def test_hermitianize():
    M = np.array([[1.0, 2.0], [0.0, 3.0]])
    out = U.hermitianize(M, copy=True)
    assert out is not M
    assert np.allclose(out, [[1.0, 1.0], [1.0, 3.0]])

    # complex input: Hermitian part, real diagonal
    C = np.array([[1.0 + 1.0j, 2.0j], [0.0, 1.0]])
    H = U.hermitianize(C)
    assert np.allclose(H, H.conj().T)
    assert np.allclose(np.imag(np.diag(H)), 0.0)

    # already Hermitian input is unchanged
    S = np.array([[2.0, 1.0 - 1.0j], [1.0 + 1.0j, 3.0]])
    assert np.allclose(U.hermitianize(S), S)

    # non-square input raises
    with pytest.raises(ValueError):
        U.hermitianize(np.ones((2, 3)))
