"""Weighted sampling of distinct indices."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

import numpy as np

__all__ = ["multinomial_sample"]


def multinomial_sample(
    weights: Sequence[float] | np.ndarray,
    n: int,
    rng: Optional[np.random.Generator] = None,
) -> list[int]:
    """Draw ``n`` distinct indices, each chosen with probability proportional to its weight.

    Sampling is without replacement. Raises ValueError when a weight is negative,
    infinite or NaN, or when ``n`` exceeds the number of weights.
    """
    w = np.asarray(weights, dtype=np.float64).ravel()
    n_inf = int(np.isinf(w).sum())
    n_nan = int(np.isnan(w).sum())
    if n < 0 or n > w.size or n_inf or n_nan or np.any(w < 0):
        raise ValueError(
            f"Failed to sample from weights. Counts: {w.size} "
            f"Infinities: {n_inf} NaN: {n_nan}"
        )
    if n == 0:
        return []
    if rng is None:
        rng = np.random.default_rng()

    # Efraimidis-Spirakis keys: log(u) / w, largest n win. Zero weights rank last.
    u = rng.random(w.size)
    with np.errstate(divide="ignore"):
        keys = np.where(w > 0, np.log(u) / np.where(w > 0, w, 1.0), -np.inf)
    order = np.argsort(-keys, kind="stable")
    return [int(i) for i in order[:n]]