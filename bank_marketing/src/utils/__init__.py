"""Project-wide utilities (logging, seeds, ranking metrics)."""

from __future__ import annotations

from .logging_utils import DEFAULT_LOG_FORMAT, configure_logging
from .metrics_utils import (
    compute_lift,
    lift_curve,
    precision_at_frac,
    recall_at_frac,
    top_k_from_frac,
)
from .seed_utils import set_global_seed, temp_seed

__all__ = [
    "configure_logging",
    "DEFAULT_LOG_FORMAT",
    "set_global_seed",
    "temp_seed",
    "compute_lift",
    "lift_curve",
    "precision_at_frac",
    "recall_at_frac",
    "top_k_from_frac",
]
