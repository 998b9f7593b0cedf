import math

import numpy as np
import pytest

from splattrain.train_config import (
    MIN_OPACITY,
    ExponentialLrScheduler,
    RefineStats,
    TrainConfig,
    inv_sigmoid,
)


def test_defaults_match_documented_values():
    config = TrainConfig()
    assert config.total_steps == 30000
    assert config.ssim_weight == 0.2
    assert config.ssim_window_size == 11
    assert config.lr_mean == 4e-5
    assert config.lr_mean_end == 4e-7
    assert config.refine_every == 150
    assert config.growth_grad_threshold == 0.00085
    assert config.growth_stop_iter == 12500
    assert config.max_splats == 10000000


def test_min_opacity_threshold_in_raw_space():
    threshold = float(inv_sigmoid(MIN_OPACITY))
    assert threshold < 0.0
    assert 1.0 / (1.0 + math.exp(-threshold)) == pytest.approx(0.9 / 255.0, rel=1e-9)


def test_scheduler_first_step_is_initial():
    sched = ExponentialLrScheduler(0.5, 0.9)
    assert sched.step() == pytest.approx(0.5)
    assert sched.step() == pytest.approx(0.5 * 0.9)


def test_scheduler_is_non_increasing():
    sched = ExponentialLrScheduler(0.1, 0.95)
    values = [sched.step() for _ in range(20)]
    assert all(a >= b for a, b in zip(values, values[1:]))


@pytest.mark.parametrize("lr,gamma", [(0.0, 0.5), (1.5, 0.5), (0.1, 0.0), (0.1, 1.5)])
def test_scheduler_rejects_invalid(lr, gamma):
    with pytest.raises(ValueError):
        ExponentialLrScheduler(lr, gamma)


def test_mean_schedule_reaches_end_after_total_steps():
    config = TrainConfig(total_steps=50)
    sched = config.mean_schedule()
    assert sched.step() == pytest.approx(config.lr_mean)
    lr = None
    for _ in range(config.total_steps):
        lr = sched.step()
    assert lr == pytest.approx(config.lr_mean_end, rel=1e-6)


def test_scale_schedule_reaches_end_after_total_steps():
    config = TrainConfig(total_steps=40)
    sched = config.scale_schedule()
    values = [sched.step() for _ in range(config.total_steps + 1)]
    assert values[0] == pytest.approx(config.lr_scale)
    assert values[-1] == pytest.approx(config.lr_scale_end, rel=1e-6)


def test_schedule_needs_positive_steps():
    with pytest.raises(ValueError):
        TrainConfig(total_steps=0).mean_schedule()


def test_inv_sigmoid_round_trip():
    x = np.array([0.01, 0.3, 0.5, 0.9])
    y = inv_sigmoid(x)
    back = 1.0 / (1.0 + np.exp(-y))
    np.testing.assert_allclose(back, x, rtol=1e-12)


def test_inv_sigmoid_half_is_zero():
    assert float(inv_sigmoid(0.5)) == 0.0


def test_inv_sigmoid_is_monotonic():
    y = inv_sigmoid(np.linspace(0.05, 0.95, 10))
    assert np.all(np.diff(y) > 0)
    assert math.isinf(float(inv_sigmoid(1.0)))


def test_refine_stats_fields():
    stats = RefineStats(num_added=3, num_pruned=2)
    assert (stats.num_added, stats.num_pruned) == (3, 2)
    assert stats == RefineStats(3, 2)