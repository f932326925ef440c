"""
core/network.py

The GeneticNetwork - one agent's controller.

A fixed-topology feed-forward network described by its signature:
signature[0] is the input width, signature[-1] the output width, and the
entries in between are hidden-layer widths. Every layer transition is a
dense matrix plus a bias vector followed by a sigmoid.

The network is the genotype and the phenotype at once: the evolutionary
operators work directly on its weights and biases.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

import numpy as np

from neuro_flap.exceptions import (
    InputSizeMismatchError,
    InvalidConfigError,
    NonFiniteValueError,
    ShapeMismatchError,
)
from .math_ops import gaussian_sample, matrix_vector_multiply, sigmoid, vector_add


Signature = Tuple[int, ...]


def validate_signature(signature: Sequence[int]) -> Signature:
    """Normalize a signature to a tuple of positive ints."""
    sig = tuple(signature)
    if len(sig) < 2:
        raise InvalidConfigError(
            f"Signature needs at least an input and an output layer, got {list(sig)}"
        )
    for width in sig:
        if isinstance(width, bool) or not isinstance(width, (int, np.integer)) or width < 1:
            raise InvalidConfigError(
                f"Layer widths must be positive integers, got {list(sig)}"
            )
    return tuple(int(w) for w in sig)


class GeneticNetwork:
    """
    Feed-forward network with evolvable weights.

    Construction allocates zero-valued parameters of the right shape with
    fitness unset (None). Use init_random() to seed a genesis population,
    or evolution.reproduce() to breed one from two parents.
    """

    def __init__(self, signature: Sequence[int]):
        self._signature = validate_signature(signature)
        self._fitness: Optional[float] = None

        # One independent array per transition; rows never share storage
        self._weights: List[np.ndarray] = [
            np.zeros((m, n)) for n, m in zip(self._signature[:-1], self._signature[1:])
        ]
        self._biases: List[np.ndarray] = [
            np.zeros(m) for m in self._signature[1:]
        ]

    # ==================== Shape ====================

    @property
    def signature(self) -> Signature:
        return self._signature

    @property
    def input_size(self) -> int:
        return self._signature[0]

    @property
    def output_size(self) -> int:
        return self._signature[-1]

    @property
    def num_layers(self) -> int:
        """Number of weight/bias transitions."""
        return len(self._signature) - 1

    @property
    def num_parameters(self) -> int:
        return sum(w.size for w in self._weights) + sum(b.size for b in self._biases)

    def weight_shapes(self) -> List[Tuple[int, int]]:
        return [(m, n) for n, m in zip(self._signature[:-1], self._signature[1:])]

    # ==================== Parameters ====================

    @property
    def weights(self) -> List[np.ndarray]:
        return self._weights

    @weights.setter
    def weights(self, new_weights: Sequence[np.ndarray]) -> None:
        arrays = [np.array(w, dtype=np.float64) for w in new_weights]
        expected = self.weight_shapes()
        if [a.shape for a in arrays] != expected:
            raise ShapeMismatchError(
                f"Weight shapes {[a.shape for a in arrays]} do not match "
                f"signature {list(self._signature)} (expected {expected})"
            )
        self._weights = arrays

    @property
    def biases(self) -> List[np.ndarray]:
        return self._biases

    @biases.setter
    def biases(self, new_biases: Sequence[np.ndarray]) -> None:
        arrays = [np.array(b, dtype=np.float64) for b in new_biases]
        expected = [(m,) for m in self._signature[1:]]
        if [a.shape for a in arrays] != expected:
            raise ShapeMismatchError(
                f"Bias shapes {[a.shape for a in arrays]} do not match "
                f"signature {list(self._signature)} (expected {expected})"
            )
        self._biases = arrays

    # ==================== Fitness ====================

    @property
    def fitness(self) -> Optional[float]:
        """Externally assigned score; None until the simulation sets it."""
        return self._fitness

    @fitness.setter
    def fitness(self, value: Optional[float]) -> None:
        self._fitness = None if value is None else float(value)

    @property
    def has_fitness(self) -> bool:
        return self._fitness is not None

    # ==================== Initialization ====================

    def init_random(
        self,
        mean: float = 0.0,
        stddev: float = 1.0,
        rng: Optional[np.random.Generator] = None,
    ) -> "GeneticNetwork":
        """Replace every weight and bias with an independent Normal(mean, stddev^2) draw."""
        rng = rng if rng is not None else np.random.default_rng()

        self._weights = [
            gaussian_sample(rng, mean, stddev, size=shape)
            for shape in self.weight_shapes()
        ]
        self._biases = [
            gaussian_sample(rng, mean, stddev, size=m)
            for m in self._signature[1:]
        ]
        return self

    # ==================== Forward pass ====================

    def compute(self, inputs: Sequence[float]) -> np.ndarray:
        """
        Forward pass: v <- sigmoid(W[i] @ v + b[i]) for every layer.

        Returns a vector of length signature[-1] with every component
        strictly inside (0, 1).
        """
        vec = np.asarray(inputs, dtype=np.float64)
        if vec.ndim != 1 or vec.shape[0] != self.input_size:
            raise InputSizeMismatchError(
                f"Network with signature {list(self._signature)} expects "
                f"{self.input_size} inputs, got shape {vec.shape}"
            )
        if not np.all(np.isfinite(vec)):
            raise NonFiniteValueError(f"Network inputs must be finite, got {vec.tolist()}")

        for weight, bias in zip(self._weights, self._biases):
            vec = sigmoid(vector_add(matrix_vector_multiply(weight, vec), bias))

        return vec

    def decide(self, inputs: Sequence[float], threshold: float = 0.5) -> bool:
        """Binary action decision: True when the first output exceeds threshold."""
        return bool(self.compute(inputs)[0] > threshold)

    # ==================== Utilities ====================

    def copy(self) -> "GeneticNetwork":
        clone = GeneticNetwork(self._signature)
        clone._weights = [w.copy() for w in self._weights]
        clone._biases = [b.copy() for b in self._biases]
        clone._fitness = self._fitness
        return clone

    def same_parameters(self, other: "GeneticNetwork") -> bool:
        """Exact (bitwise) equality of signature, weights and biases."""
        if self._signature != other.signature:
            return False
        return all(
            np.array_equal(a, b) for a, b in zip(self._weights, other.weights)
        ) and all(
            np.array_equal(a, b) for a, b in zip(self._biases, other.biases)
        )

    def __repr__(self) -> str:
        return (
            f"GeneticNetwork(signature={list(self._signature)}, "
            f"fitness={self._fitness})"
        )

    def __str__(self) -> str:
        """Human-readable dump of signature, weights and biases."""
        def fmt(values) -> str:
            return ",".join(str(float(v)) for v in values)

        sig = ",".join(str(w) for w in self._signature)
        lines = [f"signature: [{sig}]", "weights:"]
        for matrix in self._weights:
            lines.extend(f"[{fmt(row)}]" for row in matrix)
            lines.append("")
        lines.append("biases:")
        for vector in self._biases:
            lines.extend(f"[{float(el)}]" for el in vector)
            lines.append("")
        return "\n".join(lines) + "\n"
