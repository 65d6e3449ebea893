"""Evaluation utilities.

Experiment runners call this package to compute:

- test-set classification metrics, confusion matrices and ROC curves;
- budget-oriented ranking metrics (lift in the top-q% contacts);
- per-variable importance for each model.
"""

from __future__ import annotations

from .prediction import (
    ModelEvaluation,
    compare_models,
    compute_classification_metrics,
    compute_confusion_matrix,
    compute_ranking_metrics,
    compute_roc,
    evaluate_model,
)
from .importance import (
    native_importance,
    permutation_variable_importance,
    variable_importance,
)

__all__ = [
    "ModelEvaluation",
    "compare_models",
    "compute_classification_metrics",
    "compute_confusion_matrix",
    "compute_ranking_metrics",
    "compute_roc",
    "evaluate_model",
    "native_importance",
    "permutation_variable_importance",
    "variable_importance",
]
