"""Render the analysis as a single markdown document.

The document follows the order of the pipeline: data, cleaning decisions,
class balance, model comparison, then one section per model with its
confusion matrix and most important variables. Tables are rendered as
fixed-width text blocks from ``DataFrame.to_string``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional, Sequence

import pandas as pd

from bank_marketing.src.data.preprocess import CleaningReport
from bank_marketing.src.evaluation.prediction import ModelEvaluation

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS: Sequence[str] = (
    "model",
    "accuracy",
    "balanced_accuracy",
    "recall",
    "specificity",
    "f1",
    "auc",
    "lift_top",
)

MODEL_TITLES = {
    "naive_bayes": "Naive Bayes",
    "decision_tree": "Decision tree",
    "random_forest": "Random forest",
}


def _block(frame: pd.DataFrame | pd.Series, float_format: str = "{:.4f}") -> str:
    text = frame.to_string(float_format=lambda v: float_format.format(v))
    return f"```\n{text}\n```"


def _bullet_columns(columns: Sequence[str]) -> str:
    return ", ".join(f"`{c}`" for c in columns) if columns else "none"


def _figure(figures: Mapping[str, str], key: str, caption: str) -> list[str]:
    if key not in figures:
        return []
    return [f"![{caption}]({figures[key]})", ""]


def render_report(
    *,
    dataset: str,
    raw_shape: tuple[int, int],
    cleaning: CleaningReport,
    balances: Mapping[str, pd.DataFrame],
    comparison: pd.DataFrame,
    evaluations: Mapping[str, ModelEvaluation],
    importances: Mapping[str, pd.DataFrame],
    figures: Optional[Mapping[str, str]] = None,
    top_n_variables: int = 10,
) -> str:
    """Build the markdown text of the report.

    ``figures`` maps figure keys (``"roc_comparison"``, ``"missingness"``,
    ``"class_balance"``, ``"confusion_<model>"``, ``"importance_<model>"``)
    to paths relative to the report file.
    """
    figures = dict(figures or {})
    lines: list[str] = [
        "# Term deposit subscription: model comparison",
        "",
        "## Data",
        "",
        f"- Source: `{dataset}`",
        f"- Raw table: {raw_shape[0]} rows x {raw_shape[1]} columns",
        f"- After cleaning: {cleaning.rows_out} rows x {len(cleaning.columns_out)} columns",
        "",
        "## Cleaning",
        "",
        f"- High-missingness columns dropped: {_bullet_columns(cleaning.dropped_columns.get('high_missing', []))}",
        f"- Low-information columns dropped: {_bullet_columns(cleaning.dropped_columns.get('low_information', []))}",
        f"- Near-zero-variance columns dropped: {_bullet_columns(cleaning.dropped_columns.get('near_zero_variance', []))}",
        f"- Rows with remaining missing values dropped: {cleaning.rows_dropped_incomplete}",
        f"- Duplicate rows dropped: {cleaning.rows_dropped_duplicates}",
        f"- Kept columns: {_bullet_columns(cleaning.columns_out)}",
        "",
    ]
    missing = cleaning.missingness
    if not missing.empty:
        lines += ["Missing values after recoding sentinels:", "", _block(missing[missing["missing"] > 0]), ""]
    lines += _figure(figures, "missingness", "Missingness")

    lines += ["## Class balance", ""]
    for name, table in balances.items():
        lines += [f"**{name}**", "", _block(table), ""]
    lines += _figure(figures, "class_balance", "Class balance")

    lines += ["## Model comparison (test set)", ""]
    if comparison.empty:
        lines += ["No model was evaluated.", ""]
    else:
        cols = [c for c in SUMMARY_COLUMNS if c in comparison.columns]
        lines += [_block(comparison[cols].set_index("model")), ""]
        best = comparison.iloc[0]
        lines += [
            f"Highest AUC: **{MODEL_TITLES.get(best['model'], best['model'])}** "
            f"(AUC {float(best['auc']):.3f}, accuracy {float(best['accuracy']):.3f}).",
            "",
        ]
    lines += _figure(figures, "roc_comparison", "ROC curves")

    for name, ev in evaluations.items():
        title = MODEL_TITLES.get(name, name)
        lines += [f"## {title}", "", "Confusion matrix:", "", _block(ev.confusion), ""]
        lines += _figure(figures, f"confusion_{name}", f"{title} confusion matrix")
        importance = importances.get(name)
        if importance is not None and not importance.empty:
            top = importance.head(int(top_n_variables)).set_index("variable")[["importance"]]
            method = str(importance["method"].iloc[0])
            lines += [f"Top variables ({method} importance):", "", _block(top), ""]
            lines += _figure(figures, f"importance_{name}", f"{title} variable importance")

    return "\n".join(lines).rstrip() + "\n"


def write_report(text: str, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    logger.info("Wrote report to %s", out)
    return out


__all__ = ["render_report", "write_report"]
