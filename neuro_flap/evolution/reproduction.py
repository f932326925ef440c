"""
evolution/reproduction.py

Uniform crossover with independent Gaussian mutation.

Every scalar in every weight matrix and bias vector is inherited from one
parent chosen by a fair coin flip (per scalar, not per network), then
perturbed by Normal(0, mutation_stddev^2) with probability mutation_rate.
"""

from __future__ import annotations
from typing import Optional
import math

import numpy as np

from neuro_flap.core.network import GeneticNetwork
from neuro_flap.exceptions import InvalidConfigError, ShapeMismatchError


def check_mutation_params(mutation_rate: float, mutation_stddev: float) -> None:
    if not 0.0 <= mutation_rate <= 1.0:
        raise InvalidConfigError(f"Mutation rate must be in [0, 1], got {mutation_rate}")
    if not math.isfinite(mutation_stddev) or mutation_stddev < 0:
        raise InvalidConfigError(
            f"Mutation stddev must be finite and >= 0, got {mutation_stddev}"
        )


def _cross_array(
    a: np.ndarray,
    b: np.ndarray,
    mutation_rate: float,
    mutation_stddev: float,
    rng: np.random.Generator,
) -> np.ndarray:
    from_a = rng.random(a.shape) < 0.5
    child = np.where(from_a, a, b)

    mutate = rng.random(a.shape) < mutation_rate
    if mutate.any():
        noise = rng.normal(0.0, mutation_stddev, size=a.shape)
        child[mutate] += noise[mutate]

    return child


def reproduce(
    parent1: GeneticNetwork,
    parent2: GeneticNetwork,
    mutation_rate: float = 0.0,
    mutation_stddev: float = 1.0,
    rng: Optional[np.random.Generator] = None,
) -> GeneticNetwork:
    """
    Breed one child from two parents with identical signatures.

    The child's fitness is unset. Nothing but the parents' parameters and
    the rng stream influences the result.
    """
    if parent1.signature != parent2.signature:
        raise ShapeMismatchError(
            f"Cannot reproduce networks with signatures "
            f"{list(parent1.signature)} and {list(parent2.signature)}"
        )
    check_mutation_params(mutation_rate, mutation_stddev)
    rng = rng if rng is not None else np.random.default_rng()

    child = GeneticNetwork(parent1.signature)
    child.weights = [
        _cross_array(w1, w2, mutation_rate, mutation_stddev, rng)
        for w1, w2 in zip(parent1.weights, parent2.weights)
    ]
    child.biases = [
        _cross_array(b1, b2, mutation_rate, mutation_stddev, rng)
        for b1, b2 in zip(parent1.biases, parent2.biases)
    ]
    return child
