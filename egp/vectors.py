"""
Vector Math

Elementary real-vector arithmetic used by profile matching. Vectors are
float32 numpy arrays; any sequence of floats is accepted as input.

The norm is sqrt(sum(|x_i|)), not the Euclidean norm. Matching behaviour
depends on this exact formula.

Author: EGP Team
License: MIT
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
import numpy.typing as npt

Vector = npt.NDArray[np.float32]
VectorLike = Union[Sequence[float], Vector]


def as_vector(a: VectorLike) -> Vector:
    """Coerce a sequence to a 1-d float32 array."""
    vector = np.asarray(a, dtype=np.float32)
    if vector.ndim != 1:
        raise ValueError(f"Expected a 1-d vector, got shape {vector.shape}")
    return vector


def _check_lengths(a: Vector, b: Vector) -> None:
    if a.shape != b.shape:
        raise ValueError(f"Vector length mismatch: {a.shape[0]} != {b.shape[0]}")


def one_hot(index: int, length: int) -> Vector:
    vector = np.zeros(length, dtype=np.float32)
    vector[index] = 1.0
    return vector


def scale(a: VectorLike, by: float) -> Vector:
    return as_vector(a) * np.float32(by)


def sum(a: VectorLike, b: VectorLike) -> Vector:  # noqa: A001 - mirrors vector algebra naming
    a, b = as_vector(a), as_vector(b)
    _check_lengths(a, b)
    return a + b


def difference(a: VectorLike, b: VectorLike) -> Vector:
    """a - b"""
    a, b = as_vector(a), as_vector(b)
    _check_lengths(a, b)
    return a - b


def norm(a: VectorLike) -> float:
    return float(np.sqrt(np.abs(as_vector(a)).sum(dtype=np.float32)))


def distance(a: VectorLike, b: VectorLike) -> float:
    return norm(difference(a, b))


def sum_many(xs: Sequence[VectorLike]) -> Vector:
    if len(xs) == 0:
        raise ValueError("Cannot sum an empty list of vectors")
    total = np.zeros_like(as_vector(xs[0]))
    for x in xs:
        total = sum(total, x)
    return total


def average(xs: Sequence[VectorLike]) -> Vector:
    """Componentwise mean; undefined for an empty list."""
    if len(xs) == 0:
        raise ValueError("Cannot average an empty list of vectors")
    return sum_many(xs) / np.float32(len(xs))


__all__ = [
    "Vector",
    "VectorLike",
    "as_vector",
    "one_hot",
    "scale",
    "sum",
    "difference",
    "norm",
    "distance",
    "sum_many",
    "average",
]
