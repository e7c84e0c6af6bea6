# linop.py
from __future__ import annotations

from typing import Any, FrozenSet, Union
import numpy as np
from abc import ABC, abstractmethod
from scipy.linalg import cholesky, solve_triangular

from ..custom_types import Array, ArrayLike
from ..array_backend.utils import (
    _ensure_matrix,
    _ensure_square_matrix,
    _ensure_vector,
)

__all__ = [
    "LinOp",
    "DenseLinOp",
    "TriangularLinOp",
    "CholeskyLinOp",
    "LinOpLike",
]


# --- Flags: canonical set and helpers ----------------------------------------
ALLOWED_FLAGS = frozenset({
    "hermitian",
    "positive_definite",
    "triangular_lower",
    "triangular_upper",
    "dense",
})


# ---- Core abstract class ----

class LinOp(ABC):
    """Abstract base class for a square or rectangular linear operator over
    the reals or the complex numbers.

    Concrete subclasses must provide `shape`, `dtype` and `to_dense`. The
    adjoint is always the conjugate transpose, so real and complex operators
    share one code path.

    Flags are restricted to ALLOWED_FLAGS. Use `.flags` (frozenset) to inspect.
    """

    def __init__(self) -> None:
        self._flags: set[str] = set()

    @property
    @abstractmethod
    def shape(self) -> tuple[int, int]:
        """Return (n_out, n_in)."""
        ...

    @property
    @abstractmethod
    def dtype(self) -> Any:
        """Return dtype (e.g., np.float64 or np.complex128)."""
        ...

    @abstractmethod
    def to_dense(self) -> Array:
        """Return dense array representation of the operator."""
        ...

    def _check_square(self) -> None:
        """ Throw error if operator is not square """
        n_out, n_in = self.shape
        if n_out != n_in:
            raise np.linalg.LinAlgError(f"Linear operator is not square. Has shape ({n_out}, {n_in})")

    @staticmethod
    def _as_rhs(b: ArrayLike, n: int) -> tuple[Array, bool]:
        """Return `b` as an (n, m) matrix and whether it was a vector."""
        b = np.asarray(b)
        is_vector = b.ndim < 2
        if is_vector:
            b = _ensure_vector(b, as_column=True, length=n, copy=False)
        return _ensure_matrix(b, num_rows=n, copy=False), is_vector

    # ---- Products ----
    def matmat(self, X: ArrayLike) -> Array:
        """Return A @ X. Vectors in give vectors out."""
        X, is_vector = self._as_rhs(X, self.shape[1])
        out = self.to_dense() @ X
        return out[:, 0] if is_vector else out

    def rmatmat(self, X: ArrayLike) -> Array:
        """Return A^H @ X. Vectors in give vectors out."""
        X, is_vector = self._as_rhs(X, self.shape[0])
        out = self.to_dense().conj().T @ X
        return out[:, 0] if is_vector else out

    def solve(self, b: ArrayLike, **kwargs) -> Array:
        """Solve A x = b; default uses dense fallback."""
        self._check_square()
        b, is_vector = self._as_rhs(b, self.shape[0])
        out = np.linalg.solve(self.to_dense(), b)
        return out[:, 0] if is_vector else out

    def cholesky(self) -> TriangularLinOp:
        """Return the lower triangular L with A = L @ L^H. Default: dense path."""
        self._check_square()
        L = cholesky(self.to_dense(), lower=True, check_finite=False)
        return TriangularLinOp(L, lower=True, copy=False)

    def logdet(self) -> float:
        """Return log|det A|.

        Operators flagged Hermitian positive definite go through their
        Cholesky factor; others use the dense LU fallback, which makes no sign
        check, so an indefinite operator yields the log of the absolute
        determinant.
        """
        self._check_square()
        if self.has_flag("hermitian") and self.has_flag("positive_definite"):
            return 2.0 * self.cholesky().logdet()
        _, log_det = np.linalg.slogdet(self.to_dense())
        return float(log_det)

    # ---- Flags API ----
    def add_flag(self, flag: str) -> None:
        """Attach a semantic flag (must be one of ALLOWED_FLAGS)."""
        if flag not in ALLOWED_FLAGS:
            raise ValueError(f"Unknown flag {flag!r}. Allowed: {sorted(ALLOWED_FLAGS)}")
        self._flags.add(flag)

    def has_flag(self, flag: str) -> bool:
        """Return True if flag attached."""
        return flag in self._flags

    @property
    def flags(self) -> FrozenSet[str]:
        """Return frozenset of current flags (read-only view)."""
        return frozenset(self._flags)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(shape={self.shape}, dtype={self.dtype})"


# ---- Concrete linear operator subclasses ----

class DenseLinOp(LinOp):
    """Dense linear operator backed by a numpy array."""

    def __init__(self, arr: ArrayLike, copy: bool = True) -> None:
        super().__init__()
        self.array = _ensure_matrix(arr, copy=copy)
        self._dtype = self.array.dtype
        self.add_flag("dense")

    @property
    def shape(self) -> tuple[int, int]:
        return self.array.shape

    @property
    def dtype(self) -> Any:
        return self._dtype

    def to_dense(self) -> Array:
        return self.array


class TriangularLinOp(LinOp):
    """Triangular operator represented by a lower or upper triangular matrix.

    Only the triangle named by `lower` is read; the other one is ignored, so a
    full matrix can be passed and its triangle is used.
    """

    def __init__(self, tri: ArrayLike, *, lower: bool = True, copy: bool = True) -> None:
        super().__init__()
        tri = _ensure_square_matrix(tri, copy=copy)
        self.tri = np.tril(tri) if lower else np.triu(tri)
        self.lower = bool(lower)
        self._n = self.tri.shape[0]
        self._dtype = self.tri.dtype
        self.add_flag("triangular_lower" if self.lower else "triangular_upper")

    @property
    def shape(self) -> tuple[int, int]:
        return (self._n, self._n)

    @property
    def dtype(self) -> Any:
        return self._dtype

    def to_dense(self) -> Array:
        return np.array(self.tri)

    def solve(self, b: ArrayLike, *, adjoint: bool = False,
              check_finite: bool = False) -> Array:
        """Solve T x = b (or T^H x = b with `adjoint=True`) by substitution.

        No inverse is formed. `check_finite` is forwarded to
        scipy.linalg.solve_triangular and defaults to False so that NaN
        parameters propagate into the result instead of raising.
        """
        b, is_vector = self._as_rhs(b, self._n)
        out = solve_triangular(self.tri, b, lower=self.lower,
                               trans="C" if adjoint else "N",
                               check_finite=check_finite)
        return out[:, 0] if is_vector else out

    def logdet(self) -> float:
        """Return log|det T| = sum log|T_ii|."""
        return float(np.sum(np.log(np.abs(np.diag(self.tri)))))


class CholeskyLinOp(LinOp):
    """A Hermitian positive definite operator A represented by its lower
    Cholesky factor L such that A = L @ L^H."""

    def __init__(self, root: TriangularLinOp | ArrayLike) -> None:
        super().__init__()
        if not isinstance(root, TriangularLinOp):
            root = TriangularLinOp(root, lower=True)
        if not root.lower:
            raise ValueError("CholeskyLinOp requires a lower triangular factor.")
        self.root = root
        self._n = root.shape[0]
        self.add_flag("hermitian")
        self.add_flag("positive_definite")

    @property
    def shape(self) -> tuple[int, int]:
        return (self._n, self._n)

    @property
    def dtype(self) -> Any:
        return self.root.dtype

    def to_dense(self) -> Array:
        L = self.root.tri
        return L @ L.conj().T

    def matmat(self, X: ArrayLike) -> Array:
        return self.root.matmat(self.root.rmatmat(X))

    def solve(self, b: ArrayLike, **kwargs) -> Array:
        """Linear solve using forward then backward triangular substitution."""
        y = self.root.solve(b)
        return self.root.solve(y, adjoint=True)

    def cholesky(self) -> TriangularLinOp:
        return self.root

    def logdet(self) -> float:
        return 2.0 * self.root.logdet()


LinOpLike = Union[LinOp, ArrayLike]


def _as_linear_operator(A: LinOpLike) -> LinOp:
    """Wrap arrays as DenseLinOp; pass LinOp instances through."""
    if isinstance(A, LinOp):
        return A
    return DenseLinOp(A, copy=False)
