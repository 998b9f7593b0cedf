"""Training hyper-parameters, learning-rate schedules and small helpers."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

__all__ = [
    "MIN_OPACITY",
    "TrainConfig",
    "ExponentialLrScheduler",
    "RefineStats",
    "inv_sigmoid",
]

# Splats below this opacity are pruned during refinement.
MIN_OPACITY = 0.9 / 255.0


class ExponentialLrScheduler:
    """Learning rate that starts at ``initial_lr`` and is multiplied by ``gamma`` each step."""

    def __init__(self, initial_lr: float, gamma: float) -> None:
        if not 0.0 < initial_lr <= 1.0:
            raise ValueError("Initial learning rate must be greater than 0 and at most 1")
        if not 0.0 < gamma <= 1.0:
            raise ValueError("Gamma must be greater than 0 and at most 1")
        self.initial_lr = initial_lr
        self.gamma = gamma
        self._previous_lr = initial_lr / gamma

    def step(self) -> float:
        """Advance one step and return the learning rate for it."""
        self._previous_lr *= self.gamma
        return self._previous_lr


@dataclass
class TrainConfig:
    """Options controlling optimisation and splat refinement."""

    total_steps: int = 30000
    ssim_weight: float = 0.2
    ssim_window_size: int = 11
    lr_mean: float = 4e-5
    lr_mean_end: float = 4e-7
    mean_noise_weight: float = 1e4
    lr_coeffs_dc: float = 3e-3
    lr_coeffs_sh_scale: float = 20.0
    lr_opac: float = 3e-2
    lr_scale: float = 1e-2
    lr_scale_end: float = 6e-3
    lr_rotation: float = 1e-3
    opac_loss_weight: float = 1e-8
    refine_every: int = 150
    growth_grad_threshold: float = 0.00085
    growth_select_fraction: float = 0.1
    growth_stop_iter: int = 12500
    match_alpha_weight: float = 0.1
    max_splats: int = 10000000

    def _schedule(self, start: float, end: float) -> ExponentialLrScheduler:
        if self.total_steps <= 0:
            raise ValueError("total_steps must be positive")
        decay = (end / start) ** (1.0 / self.total_steps)
        return ExponentialLrScheduler(start, decay)

    def mean_schedule(self) -> ExponentialLrScheduler:
        """Schedule decaying from ``lr_mean`` to ``lr_mean_end`` over ``total_steps``."""
        return self._schedule(self.lr_mean, self.lr_mean_end)

    def scale_schedule(self) -> ExponentialLrScheduler:
        """Schedule decaying from ``lr_scale`` to ``lr_scale_end`` over ``total_steps``."""
        return self._schedule(self.lr_scale, self.lr_scale_end)


@dataclass(frozen=True)
class RefineStats:
    """Outcome of one refinement pass."""

    num_added: int
    num_pruned: int


def inv_sigmoid(x: np.ndarray | float) -> np.ndarray:
    """Inverse of the logistic sigmoid: log(x / (1 - x))."""
    x = np.asarray(x, dtype=np.float64)
    return np.log(x / (1.0 - x))