# array_backend/utils.py
"""
Utility functions for array canonicalization used by manifoldmeasures.

Points on a manifold are plain numpy arrays in the manifold's embedded
representation: shape (n,) for sphere-like manifolds, (n, k) for Stiefel-like
manifolds and () for the circle. The helpers here turn user input into that
canonical form and raise `ValueError` when the shape cannot match.

All functions that return arrays accept `copy: bool = True`. When `copy=True`
the returned array is guaranteed to be a different object from the input.
"""

from __future__ import annotations

import numpy as np
from typing import Any, Tuple

from ..custom_types import Array, ArrayLike, PRNG, RNGLike


def _as_array(x: Any) -> Array:
    try:
        return np.asarray(x)
    except Exception as e:
        raise TypeError(
            f"Could not convert input to array.\n"
            f"Input type: {type(x).__name__}\n"
            f"Input value: {repr(x)}\n"
            f"Original error: {e}"
        ) from e


def _is_numpy_scalar(x: Any) -> bool:
    """Return true if object is a numpy generic or Python scalar"""
    return np.isscalar(x) or isinstance(x, np.generic)


def _as_rng(rng: RNGLike = None) -> PRNG:
    """Return a `numpy.random.Generator` for a generator, an integer seed or None.

    A generator passed in is returned as is, so successive calls sharing it
    consume one random stream.
    """
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _ensure_real_scalar(x: Any, *, as_array: bool = False) -> float | int | Array:
    """
    Return a Python scalar or 0d array for inputs that contain a single real value.

    Accepts:
      - Python scalars (int, float)
      - numpy scalar types (np.float64(...), np.int32(...))
      - 0-D numpy arrays (shape == ())

    Raises:
      ValueError if input contains more than one element or is complex.
    """
    if _is_numpy_scalar(x):
        if np.iscomplexobj(x):
            raise ValueError(f"_ensure_real_scalar: input is complex-valued: {x!r}")
        if isinstance(x, np.generic) and not as_array:
            return x.item()
        if as_array:
            return np.array(x)
        return x

    arr = _as_array(x)
    if arr.size != 1:
        raise ValueError(f"_ensure_real_scalar: input must contain exactly one element; got size={arr.size}, shape={arr.shape}")
    if np.iscomplexobj(arr):
        raise ValueError(f"_ensure_real_scalar: input is complex-valued (shape={arr.shape}).")

    if as_array:
        return np.array(arr.reshape(()))
    return arr.item()


def _ensure_vector(x: ArrayLike, *, as_column: bool = False,
                   length: int | None = None, copy: bool = True) -> Array:
    """
    Ensure input is returned as a 1-D vector (canonical shape (n,)) by default.
    If as_column=True, return shape (n,1).

    Accepts:
      - 1D arrays -> (n,) (or (n,1) if as_column)
      - 2D arrays shaped (n,1) or (1,n) -> converted appropriately
      - 0D scalar -> treated as length-1 vector

    Raises:
      ValueError for incompatible shapes (ndim > 2 or 2D with both dims >1)
    """
    arr = _as_array(x)

    if arr.ndim == 0:
        v = arr.reshape((1,))
        out = v.reshape((-1, 1)) if as_column else v
    elif arr.ndim == 1:
        out = arr.reshape((-1, 1)) if as_column else arr
    elif arr.ndim == 2:
        num_rows, num_cols = arr.shape
        if num_rows == 1 or num_cols == 1:
            v = np.ravel(arr)
            out = v.reshape((-1, 1)) if as_column else v
        else:
            raise ValueError(f"_ensure_vector: 2D input has shape {arr.shape}, which is not a vector (expected (n,1) or (1,n)).")
    else:
        raise ValueError(f"_ensure_vector: input has too many dimensions (ndim={arr.ndim}).")

    if length is not None and out.size != length:
        raise ValueError(f"_ensure_vector: required length {length}. Got {out.size}.")

    return out.copy() if copy else out


def _ensure_matrix(x: ArrayLike, *, as_row_matrix: bool = False,
                   num_rows: int | None = None, num_cols: int | None = None,
                   copy: bool = True) -> Array:
    """ Ensure input is a 2D matrix

    - Scalar inputs (0D) become arrays of shape (1, 1)
    - 1D inputs become:
        - shape (1, n) if as_row_matrix is True
        - shape (n, 1) if as_row_matrix is False
    - 2D inputs are passed through as is
    - Other shapes raise an error
    """
    arr = _as_array(x)

    if arr.ndim == 2:
        out = arr
    elif arr.ndim == 1:
        out = arr.reshape(1, -1) if as_row_matrix else arr.reshape(-1, 1)
    elif arr.ndim == 0:
        out = arr.reshape(1, 1)
    else:
        raise ValueError(f"_ensure_matrix: Input cannot be converted to a 2D matrix. Shape {arr.shape}")

    if num_rows is not None and out.shape[0] != num_rows:
        raise ValueError(f"_ensure_matrix: Required {num_rows} rows. Got {out.shape[0]}.")

    if num_cols is not None and out.shape[1] != num_cols:
        raise ValueError(f"_ensure_matrix: Required {num_cols} columns. Got {out.shape[1]}.")

    return out.copy() if copy else out


def _ensure_square_matrix(x: ArrayLike, n: int | None = None, *, copy: bool = True) -> Array:
    """Ensure input is a 2d square matrix"""
    matrix = _ensure_matrix(x, copy=copy)
    num_rows, num_cols = matrix.shape
    if num_rows != num_cols:
        raise ValueError(f"Array is not square. Shape {matrix.shape}")

    if n is not None and matrix.shape[0] != n:
        raise ValueError(f"Required matrix dimension {n}. Got {matrix.shape[0]}.")

    return matrix


def _ensure_point(x: ArrayLike, shape: Tuple[int, ...], *, copy: bool = False) -> Array:
    """Ensure `x` has the representation shape of a manifold point.

    Column vectors (n, 1) and row vectors (1, n) are accepted where a vector
    of shape (n,) is expected. The dtype is left alone, so real points on a
    complex manifold stay real.
    """
    arr = _as_array(x)
    shape = tuple(shape)
    if arr.shape == shape:
        return arr.copy() if copy else arr
    if len(shape) == 1:
        return _ensure_vector(arr, length=shape[0], copy=copy)
    if len(shape) == 0 and arr.size == 1:
        out = arr.reshape(())
        return out.copy() if copy else out
    raise ValueError(f"_ensure_point: expected a point of shape {shape}. Got shape {arr.shape}.")


def _ensure_batch_array(x: ArrayLike, value_shape: Tuple[int, ...],
                        *, copy: bool = True) -> Array:
    """Ensure `x` has a leading batch axis followed by `value_shape`.

    An array whose shape equals `value_shape` is treated as a single value and
    expanded to a batch of one. With `copy=False` the result is a view, so
    writes into it reach `x`; samplers use this to fill caller buffers.

    Raises:
        ValueError: If the per-value shape doesn't match `value_shape`.
    """
    arr = _as_array(x)
    value_shape = tuple(value_shape)

    if arr.ndim == len(value_shape):
        arr = arr[np.newaxis, ...]

    if arr.shape[1:] != value_shape:
        raise ValueError(
            f"Batch array with value shape {arr.shape[1:]} does not match required value shape {value_shape}."
        )

    return arr.copy() if copy else arr
