"""Report figures for the term-deposit classifiers.

- Data plots: missingness after sentinel recoding, class balance.
- Model plots: ROC curve (single / overlaid), confusion matrix heatmap,
  variable importance bars.

Notes
-----
- Uses matplotlib only.
- Robust to sklearn ``predict_proba`` outputs of shape (n, 2).
- Every function returns the Figure and saves it when ``save_path`` is set.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Tuple, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from sklearn.metrics import roc_auc_score, roc_curve

from bank_marketing.src.evaluation.prediction import drop_nan_pairs


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _maybe_save(fig: plt.Figure, save_path: str | Path | None) -> None:
    if save_path is None:
        return
    path = Path(save_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches="tight", dpi=200)


def _roc_points(y_true: Any, y_prob: Any) -> Tuple[np.ndarray, np.ndarray, float]:
    y, p = drop_nan_pairs(y_true, y_prob)
    y = (y > 0).astype(int)
    try:
        auc = float(roc_auc_score(y, p))
    except ValueError:
        auc = float("nan")
    fpr, tpr, _ = roc_curve(y, p)
    return fpr, tpr, auc


def _auc_label(auc: float) -> str:
    return f"AUC={auc:.3f}" if np.isfinite(auc) else "AUC=nan"


# ---------------------------------------------------------------------------
# Data plots
# ---------------------------------------------------------------------------


def plot_missingness(
    missingness: pd.DataFrame,
    title: str = "Missing values after recoding 'unknown'",
    *,
    threshold: float | None = None,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Horizontal bars of the missing fraction per column (from ``missingness_table``)."""
    frac = missingness["missing_frac"].sort_values()

    fig, ax = plt.subplots(figsize=(6, max(2.5, 0.3 * len(frac))))
    ax.barh([str(i) for i in frac.index], frac.to_numpy())
    if threshold is not None:
        ax.axvline(float(threshold), linestyle="--", linewidth=1, color="tab:red", label="drop threshold")
        ax.legend(loc="lower right")
    ax.set_xlabel("Missing fraction")
    ax.set_xlim(0, 1)
    ax.set_title(title)
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


def plot_class_balance(
    balances: Mapping[str, pd.DataFrame],
    title: str = "Class balance",
    *,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Grouped bars of class counts for several frames (e.g. train before/after downsampling)."""
    names = list(balances.keys())
    classes = sorted({str(c) for table in balances.values() for c in table.index})
    x = np.arange(len(classes))
    width = 0.8 / max(1, len(names))

    fig, ax = plt.subplots(figsize=(6, 4))
    for i, name in enumerate(names):
        table = balances[name]
        counts = pd.Series(table["count"].to_numpy(), index=[str(c) for c in table.index])
        heights = [int(counts.get(c, 0)) for c in classes]
        ax.bar(x + i * width - 0.4 + width / 2, heights, width=width, label=name)

    ax.set_xticks(x)
    ax.set_xticklabels(classes)
    ax.set_ylabel("Rows")
    ax.set_title(title)
    ax.legend()
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


# ---------------------------------------------------------------------------
# Model plots
# ---------------------------------------------------------------------------


def plot_roc_curve(
    y_true: Union[pd.Series, np.ndarray],
    y_prob: Union[pd.Series, np.ndarray],
    title: str = "ROC curve",
    *,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """ROC curve with AUC."""
    fpr, tpr, auc = _roc_points(y_true, y_prob)

    fig, ax = plt.subplots(figsize=(5.5, 4))
    ax.plot(fpr, tpr, label=_auc_label(auc))
    ax.plot([0, 1], [0, 1], linestyle="--", linewidth=1, label="Random")
    ax.set_xlabel("False Positive Rate")
    ax.set_ylabel("True Positive Rate")
    ax.set_title(title)
    ax.legend()
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


def plot_roc_comparison(
    y_true: Union[pd.Series, np.ndarray],
    probabilities: Mapping[str, Union[pd.Series, np.ndarray]],
    title: str = "ROC curves (test set)",
    *,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Overlay the ROC curves of several models on one axis."""
    fig, ax = plt.subplots(figsize=(6, 4.5))
    for name, prob in probabilities.items():
        fpr, tpr, auc = _roc_points(y_true, prob)
        ax.plot(fpr, tpr, label=f"{name} ({_auc_label(auc)})")
    ax.plot([0, 1], [0, 1], linestyle="--", linewidth=1, color="grey", label="Random")
    ax.set_xlabel("False Positive Rate")
    ax.set_ylabel("True Positive Rate")
    ax.set_title(title)
    ax.legend(fontsize=9, loc="lower right")
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


def plot_confusion_matrix(
    confusion: pd.DataFrame,
    title: str = "Confusion matrix",
    *,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Heatmap of a confusion-matrix table with counts annotated."""
    values = confusion.to_numpy()

    fig, ax = plt.subplots(figsize=(4.5, 4))
    im = ax.imshow(values, cmap="Blues")
    fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)

    ax.set_xticks(range(values.shape[1]))
    ax.set_yticks(range(values.shape[0]))
    ax.set_xticklabels([str(c) for c in confusion.columns], rotation=20)
    ax.set_yticklabels([str(i) for i in confusion.index])

    threshold = values.max() / 2.0 if values.size else 0.0
    for i in range(values.shape[0]):
        for j in range(values.shape[1]):
            ax.text(
                j,
                i,
                f"{int(values[i, j])}",
                ha="center",
                va="center",
                color="white" if values[i, j] > threshold else "black",
            )

    ax.set_title(title)
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


def plot_variable_importance(
    importance: pd.DataFrame,
    title: str = "Variable importance",
    *,
    top_n: int = 15,
    save_path: str | Path | None = None,
) -> plt.Figure:
    """Horizontal bars of the ``top_n`` most important variables."""
    top = importance.sort_values("importance", ascending=False).head(int(top_n)).iloc[::-1]

    fig, ax = plt.subplots(figsize=(6, max(2.5, 0.35 * len(top))))
    xerr = top["importance_std"].to_numpy() if "importance_std" in top and top["importance_std"].notna().any() else None
    ax.barh(top["variable"].astype(str), top["importance"].to_numpy(), xerr=xerr)
    method = str(top["method"].iloc[0]) if "method" in top and not top.empty else ""
    ax.set_xlabel(f"Importance ({method})" if method else "Importance")
    ax.set_title(title)
    fig.tight_layout()

    _maybe_save(fig, save_path)
    return fig


__all__ = [
    "plot_class_balance",
    "plot_confusion_matrix",
    "plot_missingness",
    "plot_roc_comparison",
    "plot_roc_curve",
    "plot_variable_importance",
]
