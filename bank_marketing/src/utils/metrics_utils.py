"""Budget-oriented ranking metrics for campaign targeting.

A call centre can only phone a fraction of its contact list. Besides
accuracy and AUC, the report therefore states how many subscribers a model
would reach if the bank called only the top-q% of clients ranked by the
predicted probability of subscribing:

- ``precision_at_frac``: subscriber rate among the called clients;
- ``recall_at_frac``: share of all subscribers reached;
- ``compute_lift``: precision@q divided by the overall subscriber rate.

All helpers accept Series or array-likes, align by index when both inputs
are Series, and drop NaNs first.
"""

from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np
import pandas as pd

ArrayLike = Union[pd.Series, Sequence[int], Sequence[float], np.ndarray]


def _to_series(values: ArrayLike, name: str) -> pd.Series:
    if isinstance(values, pd.Series):
        s = values.copy()
        s.name = name
        return s
    return pd.Series(np.asarray(values).reshape(-1), name=name)


def _aligned_nonan(y_true: ArrayLike, scores: ArrayLike) -> Tuple[pd.Series, pd.Series]:
    """Align ``y_true`` and ``scores`` and drop rows where either is NaN."""
    y = pd.to_numeric(_to_series(y_true, "y_true"), errors="coerce")
    s = pd.to_numeric(_to_series(scores, "score"), errors="coerce")

    if not (isinstance(y_true, pd.Series) and isinstance(scores, pd.Series)):
        if len(y) != len(s):
            raise ValueError(f"Length mismatch: y_true={len(y)} vs scores={len(s)}")
        y = y.reset_index(drop=True)
        s = s.reset_index(drop=True)

    df = pd.concat([y, s], axis=1).dropna()
    return (df["y_true"] > 0).astype(int), df["score"].astype(float)


def _validate_top_frac(top_frac: float) -> float:
    f = float(top_frac)
    if not (0.0 < f <= 1.0):
        raise ValueError(f"top_frac must be in (0, 1], got {top_frac}.")
    return f


def top_k_from_frac(n: int, top_frac: float) -> int:
    """Convert a budget fraction to an integer top-k (ceil)."""
    if n <= 0:
        return 0
    f = _validate_top_frac(top_frac)
    return int(np.ceil(n * f))


def _top_k_labels(y: pd.Series, s: pd.Series, top_frac: float) -> pd.Series:
    k = top_k_from_frac(len(y), top_frac)
    # Stable sort keeps ties in input order.
    order = s.sort_values(ascending=False, kind="mergesort").index
    return y.loc[order].iloc[:k]


def precision_at_frac(y_true: ArrayLike, scores: ArrayLike, top_frac: float = 0.2) -> float:
    """Subscriber rate among the top-q% contacts ranked by ``scores``."""
    y, s = _aligned_nonan(y_true, scores)
    if len(y) == 0:
        return float("nan")
    return float(_top_k_labels(y, s, top_frac).mean())


def recall_at_frac(y_true: ArrayLike, scores: ArrayLike, top_frac: float = 0.2) -> float:
    """Share of all subscribers contained in the top-q% contacts."""
    y, s = _aligned_nonan(y_true, scores)
    total_pos = int(y.sum())
    if total_pos == 0:
        return float("nan")
    return float(_top_k_labels(y, s, top_frac).sum() / total_pos)


def compute_lift(y_true: ArrayLike, scores: ArrayLike, top_frac: float = 0.2) -> float:
    """lift@top-q% = precision@top-q% / base subscriber rate."""
    f = _validate_top_frac(top_frac)
    y, s = _aligned_nonan(y_true, scores)
    if len(y) == 0:
        return float("nan")

    base_rate = float(y.mean())
    if base_rate == 0.0:
        return float("nan")
    return float(precision_at_frac(y, s, top_frac=f) / base_rate)


def lift_curve(
    y_true: ArrayLike,
    scores: ArrayLike,
    fractions: Sequence[float] = (0.05, 0.1, 0.2, 0.3, 0.5),
) -> pd.DataFrame:
    """Precision, recall and lift at several budget fractions."""
    rows = []
    for f in fractions:
        f = float(f)
        rows.append(
            {
                "frac": f,
                "precision": precision_at_frac(y_true, scores, top_frac=f),
                "recall": recall_at_frac(y_true, scores, top_frac=f),
                "lift": compute_lift(y_true, scores, top_frac=f),
            }
        )
    return pd.DataFrame(rows, columns=["frac", "precision", "recall", "lift"])


__all__ = [
    "compute_lift",
    "lift_curve",
    "precision_at_frac",
    "recall_at_frac",
    "top_k_from_frac",
]
