"""Variable importance per model.

Two flavours:

- **native**: impurity-based ``feature_importances_`` of the tree / forest,
  summed over the one-hot columns of each source variable and normalised to
  sum to one;
- **permutation**: drop in test score when one raw input column is shuffled
  (model-agnostic; used for Naive Bayes, which has no native importance).

Both are reported per *source* variable (``job``, ``balance`` ...), not per
one-hot column, so models are comparable.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import numpy as np
import pandas as pd
from sklearn.inspection import permutation_importance

from bank_marketing.src.data.features import FeatureSpec, onehot_source_columns
from bank_marketing.src.models.classifiers import unwrap_pipeline

logger = logging.getLogger(__name__)

ImportanceMethod = Literal["auto", "native", "permutation"]

IMPORTANCE_COLUMNS = ["model", "variable", "importance", "importance_std", "method"]


def has_native_importance(model: Any) -> bool:
    pipe = unwrap_pipeline(model)
    return hasattr(pipe.named_steps["model"], "feature_importances_")


def native_importance(model: Any, spec: FeatureSpec) -> pd.Series:
    """Impurity importance aggregated to source variables, largest first."""
    pipe = unwrap_pipeline(model)
    estimator = pipe.named_steps["model"]
    if not hasattr(estimator, "feature_importances_"):
        raise AttributeError(f"{type(estimator).__name__} has no native feature importances.")

    values = np.asarray(estimator.feature_importances_, dtype=float)
    sources = onehot_source_columns(spec)
    if len(sources) != values.shape[0]:
        raise ValueError(
            f"Expected {len(sources)} encoded columns for importance, model has {values.shape[0]}."
        )

    per_variable = pd.Series(values, index=sources).groupby(level=0, sort=False).sum()
    total = float(per_variable.sum())
    if total > 0.0:
        per_variable = per_variable / total
    per_variable.index.name = "variable"
    return per_variable.rename("importance").sort_values(ascending=False, kind="mergesort")


def permutation_variable_importance(
    model: Any,
    X: pd.DataFrame,
    y: pd.Series,
    *,
    scoring: str = "roc_auc",
    n_repeats: int = 5,
    random_state: int = 42,
) -> pd.DataFrame:
    """Mean / std score drop when each raw column is permuted."""
    result = permutation_importance(
        model,
        X,
        y,
        scoring=scoring,
        n_repeats=int(n_repeats),
        random_state=random_state,
    )
    table = pd.DataFrame(
        {
            "variable": list(X.columns),
            "importance": result.importances_mean,
            "importance_std": result.importances_std,
        }
    )
    return table.sort_values("importance", ascending=False, kind="mergesort").reset_index(drop=True)


def variable_importance(
    name: str,
    model: Any,
    X: pd.DataFrame,
    y: pd.Series,
    spec: FeatureSpec,
    *,
    method: ImportanceMethod = "auto",
    scoring: str = "roc_auc",
    n_repeats: int = 5,
    random_state: int = 42,
) -> pd.DataFrame:
    """Importance table for one model.

    ``method="auto"`` uses native importance where the estimator has one and
    permutation importance otherwise.
    """
    if method not in ("auto", "native", "permutation"):
        raise ValueError(f"Unknown importance method '{method}'.")

    use_native = method == "native" or (method == "auto" and has_native_importance(model))
    if use_native:
        series = native_importance(model, spec)
        table = series.reset_index()
        table["importance_std"] = np.nan
        table["method"] = "native"
    else:
        table = permutation_variable_importance(
            model, X, y, scoring=scoring, n_repeats=n_repeats, random_state=random_state
        )
        table["method"] = "permutation"

    table["model"] = name
    logger.info(
        "%s: top variables (%s) %s",
        name,
        table["method"].iloc[0] if not table.empty else method,
        table["variable"].head(5).tolist(),
    )
    return table[IMPORTANCE_COLUMNS].reset_index(drop=True)


__all__ = [
    "IMPORTANCE_COLUMNS",
    "has_native_importance",
    "native_importance",
    "permutation_variable_importance",
    "variable_importance",
]
