"""Gaussian splat training helpers: COLMAP readers, scaled Adam, sampling, refinement statistics and configuration."""

__version__ = "0.2.0"

__all__ = [
    "adam",
    "codewriter",
    "colmap",
    "multinomial",
    "stats",
    "train_config",
]