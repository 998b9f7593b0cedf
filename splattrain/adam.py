"""Adam optimiser with optional per-element learning-rate scaling."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional

import numpy as np

__all__ = [
    "AdaptiveMomentumState",
    "AdamState",
    "AdaptiveMomentum",
    "AdamScaledConfig",
    "AdamScaled",
]


@dataclass(frozen=True)
class AdaptiveMomentumState:
    """First and second moment estimates after ``time`` steps."""

    time: int
    moment_1: np.ndarray
    moment_2: np.ndarray


@dataclass(frozen=True)
class AdamState:
    """Optimiser state of one parameter; ``scaling`` multiplies the learning rate element-wise."""

    momentum: Optional[AdaptiveMomentumState] = None
    scaling: Optional[np.ndarray] = None


@dataclass(frozen=True)
class AdaptiveMomentum:
    beta_1: float
    beta_2: float
    epsilon: float

    def transform(
        self, grad: np.ndarray, state: Optional[AdaptiveMomentumState]
    ) -> tuple[np.ndarray, AdaptiveMomentumState]:
        """Update the moments with ``grad`` and return the bias-corrected step direction."""
        grad = np.asarray(grad, dtype=np.float64)
        if state is not None:
            state = AdaptiveMomentumState(
                time=state.time + 1,
                moment_1=state.moment_1 * self.beta_1 + grad * (1.0 - self.beta_1),
                moment_2=state.moment_2 * self.beta_2 + grad**2 * (1.0 - self.beta_2),
            )
        else:
            state = AdaptiveMomentumState(
                time=1,
                moment_1=grad * (1.0 - self.beta_1),
                moment_2=grad**2 * (1.0 - self.beta_2),
            )

        m1 = state.moment_1 / (1.0 - self.beta_1**state.time)
        m2 = state.moment_2 / (1.0 - self.beta_2**state.time)
        return m1 / (np.sqrt(m2) + self.epsilon), state


@dataclass(frozen=True)
class AdamScaled:
    """Adam update rule with optional weight decay and gradient clipping."""

    momentum: AdaptiveMomentum
    weight_decay: Optional[float] = None
    grad_clip_value: Optional[float] = None
    grad_clip_norm: Optional[float] = None

    def _clip(self, grad: np.ndarray) -> np.ndarray:
        if self.grad_clip_value is not None:
            return np.clip(grad, -self.grad_clip_value, self.grad_clip_value)
        if self.grad_clip_norm is not None:
            norm = float(np.sqrt(np.sum(grad**2)))
            if norm > self.grad_clip_norm:
                return grad * (self.grad_clip_norm / norm)
        return grad

    def step(
        self,
        lr: float,
        tensor: np.ndarray,
        grad: np.ndarray,
        state: Optional[AdamState] = None,
    ) -> tuple[np.ndarray, AdamState]:
        """Apply one update and return the new parameter values and state."""
        tensor = np.asarray(tensor, dtype=np.float64)
        grad = self._clip(np.asarray(grad, dtype=np.float64))

        momentum = state.momentum if state is not None else None
        scaling = state.scaling if state is not None else None

        if self.weight_decay is not None:
            grad = grad + tensor * self.weight_decay

        direction, momentum = self.momentum.transform(grad, momentum)
        new_state = AdamState(momentum=momentum, scaling=scaling)

        if scaling is not None:
            delta = direction * (np.asarray(scaling) * lr)
        else:
            delta = direction * lr
        return tensor - delta, new_state


@dataclass(frozen=True)
class AdamScaledConfig:
    beta_1: float = 0.9
    beta_2: float = 0.999
    epsilon: float = 1e-5
    weight_decay: Optional[float] = None
    grad_clip_value: Optional[float] = None
    grad_clip_norm: Optional[float] = None

    def __post_init__(self) -> None:
        if self.grad_clip_value is not None and self.grad_clip_norm is not None:
            raise ValueError("choose either value or norm gradient clipping, not both")

    def with_epsilon(self, epsilon: float) -> "AdamScaledConfig":
        return dataclasses.replace(self, epsilon=epsilon)

    def init(self) -> AdamScaled:
        """Build the optimiser this configuration describes."""
        return AdamScaled(
            momentum=AdaptiveMomentum(self.beta_1, self.beta_2, self.epsilon),
            weight_decay=self.weight_decay,
            grad_clip_value=self.grad_clip_value,
            grad_clip_norm=self.grad_clip_norm,
        )