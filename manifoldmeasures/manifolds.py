# manifolds.py
"""
Manifold descriptors.

A `Manifold` is an immutable value naming one manifold family, its
dimensions and its number system. It determines the representation of a
point (a vector, a matrix, or for the circle a scalar), and provides the
membership test and projection that samplers and tests need.

Points are numpy arrays in the default embedding:

=======================  ==================  ==========================
Manifold                 point shape         constraint
=======================  ==================  ==========================
Sphere(n, F)             (n + 1,)            unit norm
ProjectiveSpace(n, F)    (n + 1,)            unit norm (representative)
Stiefel(n, k, F)         (n, k)              X^H X = I_k
Grassmann(n, k, F)       (n, k)              X^H X = I_k (representative)
Rotations(n)             (n, n)              X^T X = I_n, det X = 1
SpecialOrthogonal(n)     (n, n)              X^T X = I_n, det X = 1
Circle(REAL)             ()                  angle in [-pi, pi)
Circle(COMPLEX)          ()                  unit complex number
=======================  ==================  ==========================
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple

import numpy as np

from .custom_types import Array, ArrayLike
from .array_backend.utils import _as_array
from .linalg.operations import polar

__all__ = [
    "Field",
    "ManifoldKind",
    "Manifold",
    "Sphere",
    "ProjectiveSpace",
    "Stiefel",
    "Grassmann",
    "Rotations",
    "SpecialOrthogonal",
    "Circle",
    "REAL",
    "COMPLEX",
    "QUATERNION",
]


class Field(Enum):
    """Number system of a manifold. The value is the real dimension."""
    REAL = 1
    COMPLEX = 2
    QUATERNION = 4

    @property
    def real_dimension(self) -> int:
        return self.value

    @property
    def jack_alpha(self) -> float:
        """Jack parameter of the hypergeometric functions over this field."""
        return 2.0 / self.value

    @property
    def dtype(self) -> Any:
        """numpy dtype of point entries. Quaternions have none."""
        if self is Field.REAL:
            return np.dtype(np.float64)
        if self is Field.COMPLEX:
            return np.dtype(np.complex128)
        raise NotImplementedError("Quaternionic arrays have no numpy dtype.")


REAL = Field.REAL
COMPLEX = Field.COMPLEX
QUATERNION = Field.QUATERNION


class ManifoldKind(Enum):
    SPHERE = "Sphere"
    PROJECTIVE_SPACE = "ProjectiveSpace"
    STIEFEL = "Stiefel"
    GRASSMANN = "Grassmann"
    ROTATIONS = "Rotations"
    SPECIAL_ORTHOGONAL = "SpecialOrthogonal"
    CIRCLE = "Circle"


_VECTOR_KINDS = frozenset({ManifoldKind.SPHERE, ManifoldKind.PROJECTIVE_SPACE})
_MATRIX_KINDS = frozenset({
    ManifoldKind.STIEFEL,
    ManifoldKind.GRASSMANN,
    ManifoldKind.ROTATIONS,
    ManifoldKind.SPECIAL_ORTHOGONAL,
})
_GROUP_KINDS = frozenset({
    ManifoldKind.ROTATIONS,
    ManifoldKind.SPECIAL_ORTHOGONAL,
    ManifoldKind.CIRCLE,
})


@dataclass(frozen=True)
class Manifold:
    """Immutable descriptor of a manifold.

    Build instances with the constructors `Sphere`, `ProjectiveSpace`,
    `Stiefel`, `Grassmann`, `Rotations`, `SpecialOrthogonal` and `Circle`
    rather than directly.

    Attributes:
        kind: The manifold family.
        n: Sphere/projective dimension, or number of rows for matrix manifolds.
        k: Number of columns (1 for vector manifolds and the circle).
        field: Number system of the entries.
    """
    kind: ManifoldKind
    n: int
    k: int = 1
    field: Field = Field.REAL

    def __post_init__(self) -> None:
        if self.n < 0:
            raise ValueError(f"{self.kind.value}: dimension must be non-negative. Got n={self.n}.")
        if self.kind in (ManifoldKind.STIEFEL, ManifoldKind.GRASSMANN) and not 1 <= self.k <= self.n:
            raise ValueError(f"{self.kind.value}: require 1 <= k <= n. Got n={self.n}, k={self.k}.")

    def __str__(self) -> str:
        field = self.field.name.lower()
        if self.kind in _VECTOR_KINDS:
            return f"{self.kind.value}({self.n}, {field})"
        if self.kind in (ManifoldKind.STIEFEL, ManifoldKind.GRASSMANN):
            return f"{self.kind.value}({self.n}, {self.k}, {field})"
        if self.kind is ManifoldKind.CIRCLE:
            return f"Circle({field})"
        return f"{self.kind.value}({self.n})"

    # ---- Representation ----

    @property
    def representation_size(self) -> Tuple[int, ...]:
        """Shape of a point in the default embedding."""
        if self.kind in _VECTOR_KINDS:
            return (self.n + 1,)
        if self.kind in _MATRIX_KINDS:
            return (self.n, self.k)
        return ()

    @property
    def matrix_size(self) -> Tuple[int, int]:
        """Point shape viewed as an (n, k) matrix; vectors have k = 1."""
        if self.kind in _VECTOR_KINDS:
            return (self.n + 1, 1)
        if self.kind in _MATRIX_KINDS:
            return (self.n, self.k)
        return (1, 1)

    @property
    def has_vector_points(self) -> bool:
        return self.kind in _VECTOR_KINDS

    @property
    def has_matrix_points(self) -> bool:
        return self.kind in _MATRIX_KINDS

    @property
    def is_group(self) -> bool:
        return self.kind in _GROUP_KINDS

    @property
    def real_dimension(self) -> int:
        """Real dimension d of the number system (1, 2 or 4)."""
        return self.field.real_dimension

    @property
    def dtype(self) -> Any:
        """dtype of point entries; real circle points are float angles."""
        return self.field.dtype

    @property
    def manifold_dimension(self) -> int:
        """Intrinsic real dimension of the manifold."""
        d = self.real_dimension
        n, k = self.n, self.k
        if self.kind is ManifoldKind.SPHERE:
            return d * (n + 1) - 1
        if self.kind is ManifoldKind.PROJECTIVE_SPACE:
            return d * n
        if self.kind is ManifoldKind.STIEFEL:
            # n k entries, k real unit-norm constraints, k(k-1)/2 off-diagonal
            # constraints per real dimension
            return d * n * k - k - d * k * (k - 1) // 2
        if self.kind is ManifoldKind.GRASSMANN:
            return d * k * (n - k)
        if self.kind in (ManifoldKind.ROTATIONS, ManifoldKind.SPECIAL_ORTHOGONAL):
            return n * (n - 1) // 2
        return 1

    # ---- Membership and projection ----

    def _check_array_field(self) -> None:
        if self.field is Field.QUATERNION:
            raise NotImplementedError(f"{self}: quaternionic points cannot be represented as numpy arrays.")

    def is_point(self, x: ArrayLike, *, atol: float = 1e-8) -> bool:
        """Return True if `x` lies on the manifold up to `atol`."""
        self._check_array_field()
        x = _as_array(x)
        if x.shape != self.representation_size:
            return False
        if not np.all(np.isfinite(x)):
            return False

        if self.kind is ManifoldKind.CIRCLE:
            if self.field is Field.REAL:
                return not np.iscomplexobj(x)
            return bool(abs(abs(complex(x)) - 1.0) <= atol)

        if self.field is Field.REAL and np.iscomplexobj(x):
            return False

        if self.kind in _VECTOR_KINDS:
            return bool(abs(np.linalg.norm(x) - 1.0) <= atol)

        gram = x.conj().T @ x
        if not np.allclose(gram, np.eye(self.k), atol=atol, rtol=0):
            return False
        if self.kind in (ManifoldKind.ROTATIONS, ManifoldKind.SPECIAL_ORTHOGONAL):
            return bool(abs(np.linalg.det(x) - 1.0) <= atol * self.n)
        return True

    def project(self, x: ArrayLike) -> Array | float | complex:
        """Return the point of the manifold closest to `x` in the embedding.

        Vectors are normalized, matrices are replaced by their orthonormal
        polar factor x (x^H x)^{-1/2}, rotations additionally have the sign
        of their last singular direction fixed so that det = 1, and real
        angles are wrapped to [-pi, pi).
        """
        self._check_array_field()
        x = _as_array(x)

        if self.kind is ManifoldKind.CIRCLE:
            if self.field is Field.REAL:
                return float(_wrap_angle(float(x)))
            z = complex(x)
            return z / abs(z)

        if self.kind in _VECTOR_KINDS:
            return x / np.linalg.norm(x)

        if self.kind in (ManifoldKind.ROTATIONS, ManifoldKind.SPECIAL_ORTHOGONAL):
            U, _, Vh = np.linalg.svd(np.real(x))
            if np.linalg.det(U) * np.linalg.det(Vh) < 0:
                U[:, -1] = -U[:, -1]
            return U @ Vh

        H, _ = polar(x)
        return H


def _wrap_angle(theta: ArrayLike) -> Array:
    """Wrap angles to [-pi, pi)."""
    return np.mod(np.asarray(theta) + math.pi, 2.0 * math.pi) - math.pi


# ---- Constructors ----

def Sphere(n: int, field: Field = Field.REAL) -> Manifold:
    """Unit sphere of dimension n in F^(n+1) (for F = REAL)."""
    return Manifold(ManifoldKind.SPHERE, int(n), 1, field)


def ProjectiveSpace(n: int, field: Field = Field.REAL) -> Manifold:
    """Projective space of lines in F^(n+1), points represented by unit vectors."""
    return Manifold(ManifoldKind.PROJECTIVE_SPACE, int(n), 1, field)


def Stiefel(n: int, k: int, field: Field = Field.REAL) -> Manifold:
    """Stiefel manifold of n x k matrices with orthonormal columns."""
    return Manifold(ManifoldKind.STIEFEL, int(n), int(k), field)


def Grassmann(n: int, k: int, field: Field = Field.REAL) -> Manifold:
    """Grassmann manifold of k-dimensional subspaces of F^n."""
    return Manifold(ManifoldKind.GRASSMANN, int(n), int(k), field)


def Rotations(n: int) -> Manifold:
    """Rotation group SO(n), points are n x n rotation matrices."""
    return Manifold(ManifoldKind.ROTATIONS, int(n), int(n), Field.REAL)


def SpecialOrthogonal(n: int) -> Manifold:
    """Special orthogonal group SO(n); same points as `Rotations(n)`."""
    return Manifold(ManifoldKind.SPECIAL_ORTHOGONAL, int(n), int(n), Field.REAL)


def Circle(field: Field = Field.REAL) -> Manifold:
    """Circle group; real points are angles, complex points unit complex numbers."""
    return Manifold(ManifoldKind.CIRCLE, 1, 1, field)
