import math

import numpy as np
import pytest

from splattrain.multinomial import multinomial_sample


def test_indices_are_distinct_and_in_range():
    rng = np.random.default_rng(0)
    weights = rng.random(50)
    result = multinomial_sample(weights, 20, rng)
    assert len(result) == 20
    assert len(set(result)) == 20
    assert all(0 <= i < 50 for i in result)


def test_sampling_all_gives_permutation():
    result = multinomial_sample([0.1, 0.5, 2.0, 1.0], 4, np.random.default_rng(1))
    assert sorted(result) == list(range(4))


def test_zero_weights_skipped_while_positive_remain():
    weights = [0.0, 1.0, 0.0, 2.0, 0.0]
    for seed in range(20):
        result = multinomial_sample(weights, 2, np.random.default_rng(seed))
        assert sorted(result) == [1, 3]


def test_heavy_weight_dominates():
    weights = [1.0, 1e6, 1.0]
    rng = np.random.default_rng(7)
    hits = sum(multinomial_sample(weights, 1, rng) == [1] for _ in range(100))
    assert hits >= 95


def test_same_seed_is_reproducible():
    weights = np.linspace(0.1, 1.0, 30)
    a = multinomial_sample(weights, 10, np.random.default_rng(42))
    b = multinomial_sample(weights, 10, np.random.default_rng(42))
    assert a == b


def test_zero_samples_is_empty():
    assert multinomial_sample([1.0, 2.0], 0) == []


@pytest.mark.parametrize(
    "weights", [[1.0, math.nan], [1.0, math.inf], [1.0, -0.5]]
)
def test_invalid_weights_raise(weights):
    with pytest.raises(ValueError, match="Failed to sample"):
        multinomial_sample(weights, 1)


def test_too_many_samples_raises():
    with pytest.raises(ValueError):
        multinomial_sample([1.0, 2.0], 3)