"""Train/test splitting and class balancing.

Only about 12 % of contacted clients subscribe to a term deposit. The test
split keeps that natural rate (stratified), while the training split is
balanced by downsampling the majority ("no") class so the classifiers do not
collapse to always predicting "no". The test set is never resampled.
"""

from __future__ import annotations

import logging
from typing import Tuple

import pandas as pd
from sklearn.model_selection import train_test_split
from sklearn.utils import resample

from .load import TARGET_COLUMN

logger = logging.getLogger(__name__)


def class_balance(labels: pd.Series) -> pd.DataFrame:
    """Counts and fractions per class, largest class first."""
    counts = labels.value_counts(dropna=False)
    table = pd.DataFrame({"count": counts.astype(int), "fraction": counts / counts.sum()})
    table.index.name = labels.name or "class"
    return table


def stratified_train_test_split(
    df: pd.DataFrame,
    test_size: float = 0.2,
    random_state: int = 42,
    stratify_col: str | None = TARGET_COLUMN,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Stratified train/test split; both parts get a fresh RangeIndex."""
    if not (0.0 < test_size < 1.0):
        raise ValueError("test_size must be in (0, 1).")

    if stratify_col is not None:
        if stratify_col not in df.columns:
            raise KeyError(f"Column '{stratify_col}' not found for stratification.")
        stratify_vals = df[stratify_col]
    else:
        stratify_vals = None

    train_df, test_df = train_test_split(
        df,
        test_size=test_size,
        random_state=random_state,
        stratify=stratify_vals,
    )
    logger.info("Split %d rows into train=%d, test=%d", len(df), len(train_df), len(test_df))
    return train_df.reset_index(drop=True), test_df.reset_index(drop=True)


def downsample_majority(
    df: pd.DataFrame,
    target_col: str = TARGET_COLUMN,
    random_state: int = 42,
) -> pd.DataFrame:
    """Downsample the majority class to the size of the minority class.

    Every minority row is kept; majority rows are sampled without
    replacement. The result is shuffled and re-indexed.
    """
    if target_col not in df.columns:
        raise KeyError(f"Column '{target_col}' not found for downsampling.")

    counts = df[target_col].value_counts()
    if counts.shape[0] != 2:
        raise ValueError(
            f"Downsampling needs exactly two classes in '{target_col}', found {counts.index.tolist()}."
        )

    # value_counts is sorted descending; positional picks stay distinct on ties.
    majority_label, minority_label = counts.index[0], counts.index[-1]
    n_minority = int(counts.iloc[-1])

    majority = df[df[target_col] == majority_label]
    minority = df[df[target_col] == minority_label]

    majority_down = resample(
        majority,
        replace=False,
        n_samples=n_minority,
        random_state=random_state,
    )
    balanced = pd.concat([majority_down, minority])
    balanced = balanced.sample(frac=1.0, random_state=random_state).reset_index(drop=True)

    logger.info(
        "Downsampled majority class %r from %d to %d rows (train size %d -> %d)",
        majority_label,
        len(majority),
        n_minority,
        len(df),
        len(balanced),
    )
    return balanced


__all__ = ["class_balance", "downsample_majority", "stratified_train_test_split"]
