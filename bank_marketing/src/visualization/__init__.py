"""Matplotlib figures used in the report (data overview and model evaluation)."""

from __future__ import annotations

from .plots import (
    plot_class_balance,
    plot_confusion_matrix,
    plot_missingness,
    plot_roc_comparison,
    plot_roc_curve,
    plot_variable_importance,
)

__all__ = [
    "plot_class_balance",
    "plot_confusion_matrix",
    "plot_missingness",
    "plot_roc_comparison",
    "plot_roc_curve",
    "plot_variable_importance",
]
