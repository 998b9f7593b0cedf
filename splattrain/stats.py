"""Per-splat refinement statistics gathered from screen-space gradients."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

__all__ = ["RefineRecord"]


class RefineRecord:
    """Running maximum of the screen-space gradient norm for each splat.

    Pruning and densification read it.
    """

    def __init__(self, num_points: int) -> None:
        if num_points < 0:
            raise ValueError("num_points must not be negative")
        self.refine_weight_norm = np.zeros(num_points, dtype=np.float32)

    def __len__(self) -> int:
        return int(self.refine_weight_norm.shape[0])

    def gather_stats(
        self,
        refine_weight: np.ndarray,
        resolution: Sequence[int],
        global_from_compact_gid: np.ndarray,
        num_visible: int | np.ndarray,
    ) -> None:
        """Fold the gradients of one render into the running maxima, in place.

        ``refine_weight`` holds an [x, y] gradient per visible (compact) splat.
        Only the first ``num_visible`` rows count. Each row is scaled by half
        the resolution, and its norm is kept where it beats the stored value.
        """
        width, height = resolution
        count = int(np.asarray(num_visible).ravel()[0])
        weights = np.asarray(refine_weight, dtype=np.float32).reshape(-1, 2)
        gids = np.asarray(global_from_compact_gid).ravel()
        if count < 0 or count > weights.shape[0] or count > gids.shape[0]:
            raise ValueError(
                f"num_visible {count} exceeds the number of visible splats given"
            )

        gids = gids[:count].astype(np.int64)
        if count and (gids.min() < 0 or gids.max() >= len(self)):
            raise IndexError("global splat id out of range")

        scale = np.array([width / 2.0, height / 2.0], dtype=np.float32)
        grads = weights[:count] * scale
        norms = np.sqrt(grads[:, 0] * grads[:, 0] + grads[:, 1] * grads[:, 1])
        np.maximum.at(self.refine_weight_norm, gids, norms)

    def keep(self, indices: Sequence[int] | np.ndarray) -> "RefineRecord":
        """A new record holding only the splats at ``indices``, in that order."""
        idx = np.asarray(indices, dtype=np.int64).ravel()
        kept = RefineRecord(idx.shape[0])
        kept.refine_weight_norm = self.refine_weight_norm[idx].copy()
        return kept