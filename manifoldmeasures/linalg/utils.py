# linalg/utils.py

from __future__ import annotations

import numpy as np

from ..custom_types import Array, ArrayLike
from ..array_backend.utils import _ensure_square_matrix


def hermitianize(matrix: ArrayLike, *, copy: bool = True) -> Array:
    """
    Return the Hermitian part (A + A^H) / 2 of a square matrix.

    For real input this is the symmetric part. Used before eigen-solvers that
    only read one triangle, so that round-off asymmetry in a computed Gram or
    parameter matrix does not bias the result.

    Args:
    matrix : array-like, shape (d, d)
        Input square matrix intended to be Hermitian.

    Returns:
        Array, the Hermitian part. A new array if `copy` is True.
    """
    A = _ensure_square_matrix(matrix, copy=copy)
    return 0.5 * (A + A.conj().T)
