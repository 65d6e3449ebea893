"""Test-set evaluation of the fitted classifiers.

Every model is scored on the untouched (not downsampled) test split, so
accuracy reflects the natural ~12 % subscription rate while ROC / AUC
measure ranking quality independent of the threshold.

Key APIs
--------
- :func:`compute_confusion_matrix`: labelled 2x2 table.
- :func:`compute_classification_metrics`: accuracy, sensitivity,
  specificity, F1, AUC, average precision, log-loss, Brier.
- :func:`compute_roc`: ROC curve points.
- :func:`evaluate_model`: all of the above for one fitted model.
- :func:`compare_models`: one row per model, best AUC first.
- :func:`compute_ranking_metrics`: lift / precision / recall when only the
  top-q% contacts are called.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn import metrics

from bank_marketing.src.utils.metrics_utils import (
    compute_lift,
    precision_at_frac,
    recall_at_frac,
)

logger = logging.getLogger(__name__)

CLASS_NAMES = ("no", "yes")


# ---------------------------------------------------------------------------
# Input coercion
# ---------------------------------------------------------------------------


def _to_1d_labels(x: Any) -> np.ndarray:
    """Flatten labels (array, Series or one-column frame) to 1D."""
    if isinstance(x, pd.DataFrame):
        if x.shape[1] != 1:
            raise ValueError(f"Labels must be a single column, got a frame of shape {x.shape}.")
        x = x.iloc[:, 0]
    return np.asarray(x).reshape(-1)


def _to_1d_proba(x: Any) -> np.ndarray:
    """P(subscribed) as a float 1D array.

    Accepts a probability Series / 1D array, or the ``(n, 2)`` output of
    ``predict_proba`` (whose second column is the positive class).
    """
    arr = x.to_numpy() if isinstance(x, (pd.Series, pd.DataFrame)) else np.asarray(x)
    if arr.ndim == 2:
        if arr.shape[1] == 2:
            arr = arr[:, 1]
        elif arr.shape[1] != 1:
            raise ValueError(f"Cannot read positive-class probabilities from shape {arr.shape}.")
    return arr.astype(float).reshape(-1)


def drop_nan_pairs(y_true: Any, y_score: Any) -> tuple[np.ndarray, np.ndarray]:
    """Labels and scores with rows holding a non-finite value removed."""
    y = _to_1d_labels(y_true).astype(float)
    s = _to_1d_proba(y_score)
    if y.shape != s.shape:
        raise ValueError(f"{y.shape[0]} labels but {s.shape[0]} scores.")
    keep = np.isfinite(y) & np.isfinite(s)
    return y[keep], s[keep]


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def compute_confusion_matrix(
    y_true: pd.Series | np.ndarray,
    y_pred: pd.Series | np.ndarray,
    class_names: Sequence[str] = CLASS_NAMES,
) -> pd.DataFrame:
    """2x2 confusion matrix; rows are actual classes, columns predicted."""
    counts = metrics.confusion_matrix(
        _to_1d_labels(y_true).astype(int),
        _to_1d_labels(y_pred).astype(int),
        labels=[0, 1],
    )
    return pd.DataFrame(
        counts,
        index=pd.Index([f"actual_{c}" for c in class_names], name="actual"),
        columns=pd.Index([f"predicted_{c}" for c in class_names], name="predicted"),
    )


def compute_classification_metrics(
    y_true: pd.Series | np.ndarray,
    y_pred: pd.Series | np.ndarray,
    y_prob: Optional[pd.Series | np.ndarray] = None,
) -> Dict[str, Optional[float]]:
    """Threshold and probability metrics for one model on one split.

    Returns a dict with accuracy, balanced_accuracy, precision, recall
    (sensitivity), specificity, f1, auc, average_precision, log_loss, brier,
    support_pos and support_neg. The probability metrics stay ``None``
    without ``y_prob``; auc and average_precision also stay ``None`` when
    ``y_true`` holds a single class.
    """
    truth = _to_1d_labels(y_true).astype(int)
    pred = _to_1d_labels(y_pred).astype(int)
    if truth.shape != pred.shape:
        raise ValueError(f"{truth.shape[0]} labels but {pred.shape[0]} predictions.")

    tn, fp, fn, tp = metrics.confusion_matrix(truth, pred, labels=[0, 1]).ravel()
    precision, recall, f1, _ = metrics.precision_recall_fscore_support(
        truth, pred, average="binary", pos_label=1, zero_division=0
    )
    specificity = tn / (tn + fp) if (tn + fp) else 0.0

    out: Dict[str, Optional[float]] = {
        "accuracy": float(metrics.accuracy_score(truth, pred)),
        "balanced_accuracy": float((recall + specificity) / 2.0),
        "precision": float(precision),
        "recall": float(recall),
        "specificity": float(specificity),
        "f1": float(f1),
        "auc": None,
        "average_precision": None,
        "log_loss": None,
        "brier": None,
        "support_pos": float(tp + fn),
        "support_neg": float(tn + fp),
    }
    if y_prob is None:
        return out

    prob = _to_1d_proba(y_prob)
    if prob.shape != truth.shape:
        raise ValueError(f"{truth.shape[0]} labels but {prob.shape[0]} probabilities.")
    prob = np.clip(prob, 1e-15, 1.0 - 1e-15)

    if np.unique(truth).size == 2:
        out["auc"] = float(metrics.roc_auc_score(truth, prob))
        out["average_precision"] = float(metrics.average_precision_score(truth, prob))
    out["log_loss"] = float(metrics.log_loss(truth, prob, labels=[0, 1]))
    out["brier"] = float(metrics.brier_score_loss(truth, prob, pos_label=1))
    return out


def compute_roc(y_true: pd.Series | np.ndarray, y_prob: pd.Series | np.ndarray) -> pd.DataFrame:
    """ROC curve points (fpr, tpr, threshold), NaN pairs dropped."""
    y, p = drop_nan_pairs(y_true, y_prob)
    if np.unique(y).size < 2:
        raise ValueError("ROC curve needs both classes in y_true.")
    fpr, tpr, thresholds = metrics.roc_curve(y.astype(int), p)
    return pd.DataFrame({"fpr": fpr, "tpr": tpr, "threshold": thresholds})


def compute_ranking_metrics(
    y_true: pd.Series | np.ndarray,
    scores: pd.Series | np.ndarray,
    *,
    top_frac: float = 0.2,
) -> Dict[str, float]:
    """Budget-oriented metrics at a single calling fraction."""
    y, s = drop_nan_pairs(y_true, scores)
    y_bin = (y > 0.0).astype(int)

    return {
        "base_rate": float(np.mean(y_bin)) if y_bin.size > 0 else float("nan"),
        "precision_top": float(precision_at_frac(y_bin, s, top_frac=top_frac)),
        "recall_top": float(recall_at_frac(y_bin, s, top_frac=top_frac)),
        "lift_top": float(compute_lift(y_bin, s, top_frac=top_frac)),
    }


# ---------------------------------------------------------------------------
# Per-model evaluation
# ---------------------------------------------------------------------------


@dataclass
class ModelEvaluation:
    """Everything the report shows for one fitted model."""

    name: str
    metrics: Dict[str, Optional[float]]
    confusion: pd.DataFrame
    roc: pd.DataFrame
    probabilities: pd.Series
    predictions: pd.Series
    threshold: float = 0.5
    ranking: Dict[str, float] = field(default_factory=dict)


def evaluate_model(
    name: str,
    model: Any,
    X_test: pd.DataFrame,
    y_test: pd.Series,
    *,
    threshold: float = 0.5,
    top_frac: float = 0.2,
) -> ModelEvaluation:
    """Score a fitted classifier on the test split.

    ``model`` must expose ``predict_proba`` with classes ordered ``[0, 1]``.
    """
    if not (0.0 <= threshold <= 1.0):
        raise ValueError(f"threshold must be in [0, 1], got {threshold}.")

    proba = pd.Series(_to_1d_proba(model.predict_proba(X_test)), index=X_test.index, name="p_yes")
    preds = (proba >= float(threshold)).astype(int).rename("predicted")

    result = ModelEvaluation(
        name=name,
        metrics=compute_classification_metrics(y_test, preds, proba),
        confusion=compute_confusion_matrix(y_test, preds),
        roc=compute_roc(y_test, proba),
        probabilities=proba,
        predictions=preds,
        threshold=float(threshold),
        ranking=compute_ranking_metrics(y_test, proba, top_frac=top_frac),
    )
    logger.info(
        "%s: accuracy=%.4f auc=%.4f sensitivity=%.4f specificity=%.4f",
        name,
        result.metrics["accuracy"],
        result.metrics["auc"] if result.metrics["auc"] is not None else float("nan"),
        result.metrics["recall"],
        result.metrics["specificity"],
    )
    return result


def compare_models(evaluations: Mapping[str, ModelEvaluation] | Sequence[ModelEvaluation]) -> pd.DataFrame:
    """Metrics table with one row per model, highest AUC first."""
    items = list(evaluations.values()) if isinstance(evaluations, Mapping) else list(evaluations)
    rows = []
    for ev in items:
        row: Dict[str, Any] = {"model": ev.name, "threshold": ev.threshold}
        row.update(ev.metrics)
        row.update(ev.ranking)
        rows.append(row)

    table = pd.DataFrame(rows)
    if table.empty:
        return table
    table["auc"] = pd.to_numeric(table["auc"], errors="coerce")
    return table.sort_values("auc", ascending=False, na_position="last", kind="mergesort").reset_index(drop=True)


__all__ = [
    "CLASS_NAMES",
    "ModelEvaluation",
    "compare_models",
    "compute_classification_metrics",
    "compute_confusion_matrix",
    "compute_ranking_metrics",
    "compute_roc",
    "drop_nan_pairs",
    "evaluate_model",
]
