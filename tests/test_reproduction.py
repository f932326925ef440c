"""
Tests for evolution/reproduction.py

Per-scalar uniform crossover and Gaussian mutation.
"""

import numpy as np
import pytest

from neuro_flap.core.network import GeneticNetwork
from neuro_flap.evolution.reproduction import reproduce
from neuro_flap.exceptions import InvalidConfigError, ShapeMismatchError


def make_parent(signature, seed, mean=0.0):
    return GeneticNetwork(signature).init_random(mean, 1.0, np.random.default_rng(seed))


def flatten(net):
    return np.concatenate([w.ravel() for w in net.weights] + [b.ravel() for b in net.biases])


class TestReproduce:
    """Tests for reproduce."""

    def test_child_has_parent_signature_and_no_fitness(self):
        a = make_parent([2, 3, 1], 1)
        b = make_parent([2, 3, 1], 2)
        a.fitness, b.fitness = 5.0, 3.0

        child = reproduce(a, b, 0.1, 0.5, np.random.default_rng(42))

        assert child.signature == (2, 3, 1)
        assert child.fitness is None
        assert child is not a and child is not b

    def test_self_crossover_without_mutation_is_identity(self):
        a = make_parent([3, 5, 2], 1)
        child = reproduce(a, a, mutation_rate=0.0, mutation_stddev=3.0, rng=np.random.default_rng(42))
        assert child.same_parameters(a)

    def test_no_mutation_takes_values_from_a_parent(self):
        a = make_parent([4, 6, 3], 1)
        b = make_parent([4, 6, 3], 2)
        child = reproduce(a, b, 0.0, 1.0, np.random.default_rng(42))

        ca, cb, cc = flatten(a), flatten(b), flatten(child)
        assert np.all((cc == ca) | (cc == cb))

    def test_crossover_is_per_scalar_and_fair(self):
        a = GeneticNetwork([100, 100])
        b = GeneticNetwork([100, 100])
        a.weights = [np.ones((100, 100))]
        b.weights = [np.zeros((100, 100))]
        a.biases = [np.ones(100)]
        b.biases = [np.zeros(100)]

        child = reproduce(a, b, 0.0, 1.0, np.random.default_rng(42))
        fraction_from_a = flatten(child).mean()

        # 10,100 scalars
        assert fraction_from_a == pytest.approx(0.5, abs=0.03)

    def test_full_mutation_perturbs_every_value(self):
        a = make_parent([3, 4, 2], 1)
        child = reproduce(a, a, 1.0, 0.5, np.random.default_rng(42))
        assert np.all(flatten(child) != flatten(a))

    def test_mutation_rate_fraction(self):
        a = GeneticNetwork([100, 100])
        child = reproduce(a, a, 0.2, 1.0, np.random.default_rng(42))
        mutated = np.count_nonzero(flatten(child))
        assert mutated / a.num_parameters == pytest.approx(0.2, abs=0.02)

    def test_zero_stddev_mutation_is_noop(self):
        a = make_parent([2, 2], 1)
        child = reproduce(a, a, 1.0, 0.0, np.random.default_rng(42))
        assert child.same_parameters(a)

    def test_seeded_reproducible(self):
        a = make_parent([2, 3, 1], 1)
        b = make_parent([2, 3, 1], 2)
        c1 = reproduce(a, b, 0.3, 0.5, np.random.default_rng(9))
        c2 = reproduce(a, b, 0.3, 0.5, np.random.default_rng(9))
        assert c1.same_parameters(c2)

    def test_parents_unchanged(self):
        a = make_parent([2, 3, 1], 1)
        b = make_parent([2, 3, 1], 2)
        a_before, b_before = a.copy(), b.copy()
        reproduce(a, b, 1.0, 1.0, np.random.default_rng(42))
        assert a.same_parameters(a_before)
        assert b.same_parameters(b_before)

    def test_signature_mismatch_raises(self):
        a = GeneticNetwork([2, 3, 1])
        b = GeneticNetwork([2, 4, 1])
        with pytest.raises(ShapeMismatchError):
            reproduce(a, b, 0.0, 1.0, np.random.default_rng(42))

    @pytest.mark.parametrize("rate,stddev", [
        (-0.1, 1.0), (1.5, 1.0), (0.5, -1.0),
        (float("nan"), 1.0), (0.5, float("nan")), (0.5, float("inf")),
    ])
    def test_invalid_mutation_params_raise(self, rate, stddev):
        a = GeneticNetwork([2, 1])
        with pytest.raises(InvalidConfigError):
            reproduce(a, a, rate, stddev, np.random.default_rng(42))
