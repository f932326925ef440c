"""
core/math_ops.py

Numeric primitives used by the network model and the generation manager.

Thin numpy wrappers with explicit dimension checks. Randomness always comes
from an injected np.random.Generator, never from a module-level global.
"""

from __future__ import annotations
from typing import Optional, Sequence, Union
import math

import numpy as np

from neuro_flap.exceptions import InputSizeMismatchError, InvalidConfigError


# Open-interval bounds for sigmoid outputs
_SIGMOID_LOW = np.finfo(np.float64).tiny
_SIGMOID_HIGH = np.nextafter(1.0, 0.0)

# Beyond this magnitude the logistic curve is flat in float64
_SIGMOID_CLAMP = 500.0


def matrix_vector_multiply(matrix: np.ndarray, vector: np.ndarray) -> np.ndarray:
    """Standard matrix-vector product, dimension-checked."""
    matrix = np.asarray(matrix, dtype=np.float64)
    vector = np.asarray(vector, dtype=np.float64)

    if matrix.ndim != 2 or vector.ndim != 1:
        raise InputSizeMismatchError(
            f"Expected 2-D matrix and 1-D vector, got {matrix.ndim}-D and {vector.ndim}-D"
        )
    if matrix.shape[1] != vector.shape[0]:
        raise InputSizeMismatchError(
            f"Cannot multiply {matrix.shape[0]}x{matrix.shape[1]} matrix "
            f"by vector of length {vector.shape[0]}"
        )
    return matrix @ vector


def vector_add(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Elementwise sum of two equal-length vectors."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)

    if a.shape != b.shape:
        raise InputSizeMismatchError(
            f"Cannot add vectors of shapes {a.shape} and {b.shape}"
        )
    return a + b


def sigmoid(x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Logistic function 1 / (1 + e^-x), applied elementwise.

    Results are kept strictly inside (0, 1): for saturated inputs float64
    would otherwise round to exactly 0.0 or 1.0.
    """
    z = np.clip(np.asarray(x, dtype=np.float64), -_SIGMOID_CLAMP, _SIGMOID_CLAMP)
    out = np.clip(1.0 / (1.0 + np.exp(-z)), _SIGMOID_LOW, _SIGMOID_HIGH)
    if out.ndim == 0:
        return float(out)
    return out


def gaussian_sample(
    rng: np.random.Generator,
    mean: float = 0.0,
    stddev: float = 1.0,
    size: Optional[Union[int, Sequence[int]]] = None,
) -> Union[float, np.ndarray]:
    """Draw from Normal(mean, stddev^2). Returns a float when size is None."""
    if not math.isfinite(mean):
        raise InvalidConfigError(f"Mean must be finite, got {mean}")
    if not math.isfinite(stddev) or stddev < 0:
        raise InvalidConfigError(f"Standard deviation must be finite and >= 0, got {stddev}")

    sample = rng.normal(mean, stddev, size=size)
    if size is None:
        return float(sample)
    return sample


def weighted_index_sample(
    weights: Sequence[float],
    quota: Optional[int],
    counts: np.ndarray,
    rng: np.random.Generator,
) -> int:
    """
    Draw an index with probability proportional to its weight.

    Indices already selected `quota` times (according to `counts`) are
    excluded. `counts` is updated in place so successive calls share one
    tally; pass quota=None for no cap.
    """
    w = np.asarray(weights, dtype=np.float64)

    if w.ndim != 1 or len(w) == 0:
        raise InvalidConfigError("Weights must be a non-empty 1-D sequence")
    if len(counts) != len(w):
        raise InputSizeMismatchError(
            f"Got {len(counts)} selection counts for {len(w)} weights"
        )
    if np.any(w < 0) or not np.all(np.isfinite(w)):
        raise InvalidConfigError("Weights must be finite and non-negative")

    eligible = w > 0
    if quota is not None:
        eligible &= counts < quota

    masked = np.where(eligible, w, 0.0)
    total = masked.sum()
    if total <= 0:
        raise InvalidConfigError(
            "No index left with positive weight under the selection quota"
        )

    idx = int(rng.choice(len(w), p=masked / total))
    counts[idx] += 1
    return idx
