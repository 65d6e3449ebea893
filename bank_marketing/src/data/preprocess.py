"""Deterministic cleaning of the bank marketing table.

The cleaning sequence is fixed and runs on the full table before the
train/test split. None of the steps estimate model parameters; they only
decide which columns and rows are usable:

1) recode sentinel strings (``"unknown"``) to missing values;
2) drop columns whose missing fraction is too high;
3) drop configured low-information columns;
4) drop zero / near-zero-variance columns;
5) drop rows that still contain missing values;
6) drop exact-duplicate rows;
7) re-check near-zero variance on the remaining rows.

After :func:`clean_data` no row is an exact duplicate of another and no
column is (near-)constant. With ``drop_incomplete_rows`` (the default) the
kept columns also hold no missing values. The target column is never
dropped by a column filter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd

from .load import TARGET_COLUMN

logger = logging.getLogger(__name__)

DEFAULT_SENTINELS: Tuple[str, ...] = ("unknown",)
DEFAULT_LOW_INFORMATION_COLUMNS: Tuple[str, ...] = ("day", "month")
DEFAULT_LABEL_COL = "subscribed"

# Ratio of most to second most frequent value (95/5) and percentage of
# distinct values used to flag near-zero-variance predictors.
DEFAULT_FREQ_CUT = 95.0 / 5.0
DEFAULT_UNIQUE_CUT = 10.0


@dataclass
class CleaningConfig:
    """Parameters of :func:`clean_data`.

    Parameters
    ----------
    sentinels:
        String values meaning "not recorded"; compared case-insensitively.
    max_missing_frac:
        Columns with a larger missing fraction (after recoding) are dropped.
    low_information_columns:
        Columns dropped regardless of their content.
    freq_cut, unique_cut:
        Near-zero-variance thresholds, see :func:`near_zero_variance`.
    drop_incomplete_rows:
        Drop rows with any remaining missing value. When off, missing
        categorical values are modelled as their own ``"missing"`` level
        (see :func:`~bank_marketing.src.data.features.split_xy`).
    drop_duplicates:
        Drop exact-duplicate rows.
    target_col:
        Target column, protected from every column filter.
    """

    sentinels: Tuple[str, ...] = DEFAULT_SENTINELS
    max_missing_frac: float = 0.2
    low_information_columns: Tuple[str, ...] = DEFAULT_LOW_INFORMATION_COLUMNS
    freq_cut: float = DEFAULT_FREQ_CUT
    unique_cut: float = DEFAULT_UNIQUE_CUT
    drop_incomplete_rows: bool = True
    drop_duplicates: bool = True
    target_col: str = TARGET_COLUMN

    def __post_init__(self) -> None:
        self.sentinels = tuple(self.sentinels)
        self.low_information_columns = tuple(self.low_information_columns)
        if not (0.0 <= float(self.max_missing_frac) <= 1.0):
            raise ValueError("max_missing_frac must be in [0, 1].")
        if float(self.freq_cut) < 1.0:
            raise ValueError("freq_cut must be >= 1.")
        if not (0.0 <= float(self.unique_cut) <= 100.0):
            raise ValueError("unique_cut must be a percentage in [0, 100].")


@dataclass
class CleaningReport:
    """What :func:`clean_data` removed, and why."""

    rows_in: int = 0
    rows_out: int = 0
    columns_in: List[str] = field(default_factory=list)
    columns_out: List[str] = field(default_factory=list)
    dropped_columns: Dict[str, List[str]] = field(default_factory=dict)
    rows_dropped_incomplete: int = 0
    rows_dropped_duplicates: int = 0
    missingness: pd.DataFrame = field(default_factory=pd.DataFrame)
    near_zero_variance: pd.DataFrame = field(default_factory=pd.DataFrame)

    def to_frame(self) -> pd.DataFrame:
        """One row per removed column, plus row-level summary lines."""
        rows = [
            {"step": reason, "item": col}
            for reason, cols in self.dropped_columns.items()
            for col in cols
        ]
        rows.append({"step": "incomplete_rows", "item": str(self.rows_dropped_incomplete)})
        rows.append({"step": "duplicate_rows", "item": str(self.rows_dropped_duplicates)})
        rows.append({"step": "rows_in", "item": str(self.rows_in)})
        rows.append({"step": "rows_out", "item": str(self.rows_out)})
        return pd.DataFrame(rows, columns=["step", "item"])


# ---------------------------------------------------------------------------
# Individual cleaning steps
# ---------------------------------------------------------------------------


def _is_text(series: pd.Series) -> bool:
    return pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series)


def recode_sentinels(
    df: pd.DataFrame,
    sentinels: Sequence[str] = DEFAULT_SENTINELS,
) -> pd.DataFrame:
    """Replace sentinel strings in text columns with NaN."""
    out = df.copy()
    wanted = {str(s).strip().lower() for s in sentinels}
    if not wanted:
        return out

    for col in out.columns:
        if not _is_text(out[col]):
            continue
        normalized = out[col].astype("string").str.strip().str.lower()
        mask = normalized.isin(wanted).fillna(False).to_numpy(dtype=bool)
        if mask.any():
            out[col] = out[col].where(~mask, np.nan)
    return out


def missingness_table(df: pd.DataFrame) -> pd.DataFrame:
    """Per-column missing count and fraction, most-missing first."""
    n = len(df)
    counts = df.isna().sum()
    table = pd.DataFrame(
        {
            "missing": counts.astype(int),
            "missing_frac": counts / n if n else 0.0,
        }
    )
    table.index.name = "column"
    return table.sort_values("missing_frac", ascending=False, kind="mergesort")


def drop_high_missing_columns(
    df: pd.DataFrame,
    max_missing_frac: float = 0.2,
    protected: Sequence[str] = (TARGET_COLUMN,),
) -> Tuple[pd.DataFrame, List[str]]:
    """Drop columns whose missing fraction exceeds ``max_missing_frac``."""
    table = missingness_table(df)
    to_drop = [
        str(col)
        for col, frac in table["missing_frac"].items()
        if frac > max_missing_frac and col not in protected
    ]
    to_drop = [c for c in df.columns if c in to_drop]
    return df.drop(columns=to_drop), to_drop


def drop_low_information_columns(
    df: pd.DataFrame,
    columns: Sequence[str] = DEFAULT_LOW_INFORMATION_COLUMNS,
    protected: Sequence[str] = (TARGET_COLUMN,),
) -> Tuple[pd.DataFrame, List[str]]:
    """Drop the configured columns that are present."""
    to_drop = [c for c in df.columns if c in set(columns) and c not in protected]
    return df.drop(columns=to_drop), to_drop


def near_zero_variance(
    df: pd.DataFrame,
    freq_cut: float = DEFAULT_FREQ_CUT,
    unique_cut: float = DEFAULT_UNIQUE_CUT,
    protected: Sequence[str] = (TARGET_COLUMN,),
) -> pd.DataFrame:
    """Near-zero-variance diagnostics for every unprotected column.

    A column is flagged (``nzv``) when it has at most one distinct
    non-missing value, or when both

    - ``freq_ratio`` (count of the most common value / count of the second
      most common) is greater than ``freq_cut``, and
    - ``percent_unique`` (distinct values / rows * 100) is at most
      ``unique_cut``.
    """
    rows = []
    for col in df.columns:
        if col in protected:
            continue
        values = df[col].dropna()
        counts = values.value_counts()
        n_unique = int(counts.shape[0])
        zero_var = n_unique <= 1

        if n_unique >= 2:
            freq_ratio = float(counts.iloc[0]) / float(counts.iloc[1])
        else:
            freq_ratio = float("inf") if n_unique == 1 else float("nan")
        percent_unique = 100.0 * n_unique / len(values) if len(values) else 0.0

        nzv = zero_var or (freq_ratio > freq_cut and percent_unique <= unique_cut)
        rows.append(
            {
                "column": col,
                "freq_ratio": freq_ratio,
                "percent_unique": percent_unique,
                "zero_var": bool(zero_var),
                "nzv": bool(nzv),
            }
        )

    table = pd.DataFrame(rows, columns=["column", "freq_ratio", "percent_unique", "zero_var", "nzv"])
    return table.set_index("column")


def drop_near_zero_variance(
    df: pd.DataFrame,
    freq_cut: float = DEFAULT_FREQ_CUT,
    unique_cut: float = DEFAULT_UNIQUE_CUT,
    protected: Sequence[str] = (TARGET_COLUMN,),
) -> Tuple[pd.DataFrame, List[str], pd.DataFrame]:
    """Drop columns flagged by :func:`near_zero_variance`.

    Returns the reduced frame, the dropped column names and the diagnostics.
    """
    table = near_zero_variance(df, freq_cut=freq_cut, unique_cut=unique_cut, protected=protected)
    flagged = set(table.index[table["nzv"]])
    to_drop = [c for c in df.columns if c in flagged]
    return df.drop(columns=to_drop), to_drop, table


def add_target_label(
    df: pd.DataFrame,
    target_col: str = TARGET_COLUMN,
    positive: str = "yes",
    negative: str = "no",
    label_col: str = DEFAULT_LABEL_COL,
) -> pd.DataFrame:
    """Add an integer 0/1 label derived from the yes/no target."""
    if target_col not in df.columns:
        raise KeyError(f"Missing target column '{target_col}' in DataFrame.")

    out = df.copy()
    normalized = out[target_col].astype("string").str.strip().str.lower()
    mapping = {positive.lower(): 1, negative.lower(): 0}
    unexpected = sorted(set(normalized.dropna()) - set(mapping))
    if unexpected or normalized.isna().any():
        raise ValueError(
            f"Target column '{target_col}' must only contain {positive!r}/{negative!r}; "
            f"found {unexpected or 'missing values'}."
        )
    out[label_col] = normalized.map(mapping).astype(int)
    return out


# ---------------------------------------------------------------------------
# Full cleaning pass
# ---------------------------------------------------------------------------


def clean_data(
    df: pd.DataFrame,
    config: CleaningConfig | None = None,
) -> Tuple[pd.DataFrame, CleaningReport]:
    """Run the full deterministic cleaning sequence.

    Returns
    -------
    cleaned:
        Cleaned copy of ``df`` with a fresh RangeIndex.
    report:
        :class:`CleaningReport` describing every removal.
    """
    cfg = config or CleaningConfig()
    target = cfg.target_col
    if target not in df.columns:
        raise KeyError(f"Missing target column '{target}' in DataFrame.")

    report = CleaningReport(rows_in=int(len(df)), columns_in=[str(c) for c in df.columns])
    protected = (target,)

    out = recode_sentinels(df, cfg.sentinels)
    report.missingness = missingness_table(out)
    n_missing = int(report.missingness["missing"].sum())
    logger.info("Recoded sentinels %s: %d missing cells", list(cfg.sentinels), n_missing)

    out, dropped = drop_high_missing_columns(out, cfg.max_missing_frac, protected=protected)
    report.dropped_columns["high_missing"] = dropped
    logger.info("Dropped high-missingness columns (> %.0f%%): %s", 100 * cfg.max_missing_frac, dropped)

    out, dropped = drop_low_information_columns(out, cfg.low_information_columns, protected=protected)
    report.dropped_columns["low_information"] = dropped
    logger.info("Dropped low-information columns: %s", dropped)

    out, dropped, nzv_table = drop_near_zero_variance(
        out, freq_cut=cfg.freq_cut, unique_cut=cfg.unique_cut, protected=protected
    )
    report.dropped_columns["near_zero_variance"] = dropped
    report.near_zero_variance = nzv_table
    logger.info("Dropped near-zero-variance columns: %s", dropped)

    if cfg.drop_incomplete_rows:
        before = len(out)
        out = out.dropna()
        report.rows_dropped_incomplete = int(before - len(out))
        logger.info("Dropped %d rows with missing values", report.rows_dropped_incomplete)

    if cfg.drop_duplicates:
        before = len(out)
        out = out.drop_duplicates()
        report.rows_dropped_duplicates = int(before - len(out))
        logger.info("Dropped %d duplicate rows", report.rows_dropped_duplicates)

    # Row drops can leave a column (near-)constant; dropping it can in turn
    # create new duplicates. Repeat until the frame is stable.
    while True:
        out, late, late_table = drop_near_zero_variance(
            out, freq_cut=cfg.freq_cut, unique_cut=cfg.unique_cut, protected=protected
        )
        if not late:
            break
        report.dropped_columns["near_zero_variance"].extend(late)
        nzv_table.loc[late] = late_table.loc[late]
        logger.info("Dropped near-zero-variance columns after row filtering: %s", late)
        if cfg.drop_duplicates:
            before = len(out)
            out = out.drop_duplicates()
            report.rows_dropped_duplicates += int(before - len(out))

    out = out.reset_index(drop=True)
    report.rows_out = int(len(out))
    report.columns_out = [str(c) for c in out.columns]
    logger.info("Cleaned data: %d rows x %d columns", out.shape[0], out.shape[1])
    return out, report


__all__ = [
    "CleaningConfig",
    "CleaningReport",
    "DEFAULT_LABEL_COL",
    "DEFAULT_LOW_INFORMATION_COLUMNS",
    "DEFAULT_SENTINELS",
    "add_target_label",
    "clean_data",
    "drop_high_missing_columns",
    "drop_low_information_columns",
    "drop_near_zero_variance",
    "missingness_table",
    "near_zero_variance",
    "recode_sentinels",
]
