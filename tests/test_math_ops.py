"""
Tests for core/math_ops.py

Matrix ops, sigmoid range, Gaussian and quota-capped weighted sampling.
"""

import numpy as np
import pytest

from neuro_flap.core.math_ops import (
    gaussian_sample,
    matrix_vector_multiply,
    sigmoid,
    vector_add,
    weighted_index_sample,
)
from neuro_flap.exceptions import InputSizeMismatchError, InvalidConfigError


class TestMatrixVectorMultiply:
    """Tests for matrix_vector_multiply."""

    def test_product(self):
        m = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
        v = np.array([1.0, -1.0])
        assert np.allclose(matrix_vector_multiply(m, v), [-1.0, -1.0, -1.0])

    def test_accepts_lists(self):
        assert np.allclose(matrix_vector_multiply([[2.0]], [3.0]), [6.0])

    def test_dimension_mismatch_raises(self):
        with pytest.raises(InputSizeMismatchError):
            matrix_vector_multiply(np.zeros((3, 2)), np.zeros(3))

    def test_non_vector_raises(self):
        with pytest.raises(InputSizeMismatchError):
            matrix_vector_multiply(np.zeros((3, 2)), np.zeros((2, 1)))


class TestVectorAdd:
    """Tests for vector_add."""

    def test_sum(self):
        assert np.allclose(vector_add([1.0, 2.0], [0.5, -2.0]), [1.5, 0.0])

    def test_length_mismatch_raises(self):
        with pytest.raises(InputSizeMismatchError):
            vector_add([1.0, 2.0], [1.0])


class TestSigmoid:
    """Tests for sigmoid."""

    def test_zero_is_half(self):
        assert sigmoid(0.0) == 0.5

    def test_scalar_returns_float(self):
        assert isinstance(sigmoid(1.0), float)

    def test_known_value(self):
        assert sigmoid(2.0) == pytest.approx(1.0 / (1.0 + np.exp(-2.0)))

    def test_saturated_inputs_stay_open_interval(self):
        out = sigmoid(np.array([-1e6, -800.0, -40.0, 40.0, 800.0, 1e6]))
        assert np.all(out > 0.0)
        assert np.all(out < 1.0)

    def test_monotonic(self):
        x = np.linspace(-10, 10, 101)
        assert np.all(np.diff(sigmoid(x)) > 0)


class TestGaussianSample:
    """Tests for gaussian_sample."""

    def test_scalar_draw(self):
        rng = np.random.default_rng(42)
        assert isinstance(gaussian_sample(rng, 0.0, 1.0), float)

    def test_shape(self):
        rng = np.random.default_rng(42)
        assert gaussian_sample(rng, 0.0, 1.0, size=(3, 2)).shape == (3, 2)

    def test_moments(self):
        rng = np.random.default_rng(42)
        samples = gaussian_sample(rng, 5.0, 2.0, size=20000)
        assert samples.mean() == pytest.approx(5.0, abs=0.05)
        assert samples.std() == pytest.approx(2.0, abs=0.05)

    def test_zero_stddev_returns_mean(self):
        rng = np.random.default_rng(42)
        assert np.all(gaussian_sample(rng, 3.0, 0.0, size=5) == 3.0)

    def test_negative_stddev_raises(self):
        rng = np.random.default_rng(42)
        with pytest.raises(InvalidConfigError):
            gaussian_sample(rng, 0.0, -1.0)

    @pytest.mark.parametrize("mean,stddev", [(0.0, float("nan")), (0.0, float("inf")), (float("inf"), 1.0)])
    def test_non_finite_parameters_raise(self, mean, stddev):
        rng = np.random.default_rng(42)
        with pytest.raises(InvalidConfigError):
            gaussian_sample(rng, mean, stddev)

    def test_seeded_reproducible(self):
        a = gaussian_sample(np.random.default_rng(7), 0.0, 1.0, size=4)
        b = gaussian_sample(np.random.default_rng(7), 0.0, 1.0, size=4)
        assert np.array_equal(a, b)


class TestWeightedIndexSample:
    """Tests for weighted_index_sample."""

    def test_never_picks_zero_weight(self):
        rng = np.random.default_rng(42)
        counts = np.zeros(3, dtype=np.int64)
        picks = [weighted_index_sample([0.0, 1.0, 3.0], None, counts, rng) for _ in range(200)]
        assert 0 not in picks

    def test_proportional(self):
        rng = np.random.default_rng(42)
        counts = np.zeros(2, dtype=np.int64)
        for _ in range(10000):
            weighted_index_sample([1.0, 3.0], None, counts, rng)
        assert counts[1] / counts.sum() == pytest.approx(0.75, abs=0.02)

    def test_updates_counts(self):
        rng = np.random.default_rng(42)
        counts = np.zeros(2, dtype=np.int64)
        idx = weighted_index_sample([0.0, 1.0], None, counts, rng)
        assert idx == 1
        assert list(counts) == [0, 1]

    def test_quota_caps_selection(self):
        rng = np.random.default_rng(42)
        counts = np.zeros(3, dtype=np.int64)
        for _ in range(6):
            weighted_index_sample([100.0, 1.0, 1.0], 2, counts, rng)
        assert list(counts) == [2, 2, 2]

    def test_exhausted_quota_raises(self):
        rng = np.random.default_rng(42)
        counts = np.array([1, 1])
        with pytest.raises(InvalidConfigError):
            weighted_index_sample([1.0, 1.0], 1, counts, rng)

    def test_all_zero_weights_raise(self):
        rng = np.random.default_rng(42)
        with pytest.raises(InvalidConfigError):
            weighted_index_sample([0.0, 0.0], None, np.zeros(2, dtype=np.int64), rng)

    def test_negative_weight_raises(self):
        rng = np.random.default_rng(42)
        with pytest.raises(InvalidConfigError):
            weighted_index_sample([-1.0, 2.0], None, np.zeros(2, dtype=np.int64), rng)

    def test_counts_length_mismatch_raises(self):
        rng = np.random.default_rng(42)
        with pytest.raises(InputSizeMismatchError):
            weighted_index_sample([1.0, 2.0], None, np.zeros(3, dtype=np.int64), rng)
