"""Model-ready design matrices for the cleaned bank table.

Two encodings are needed:

* **One-hot** (decision tree, random forest): numeric columns pass through,
  categorical columns are expanded to indicator columns.
* **Discretised** (Naive Bayes): categorical columns become ordinal codes and
  numeric columns are cut into quantile bins, so that every feature is
  categorical and a Laplace-smoothed categorical likelihood applies.

Category levels are fixed once from the cleaned table (like factor levels
fixed before a split) and stored in :class:`FeatureSpec`, so train and test
matrices always have the same columns. Everything estimated from data
(quantile bin edges) is fitted inside the model pipeline on train only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.preprocessing import KBinsDiscretizer, OneHotEncoder, OrdinalEncoder

from .load import TARGET_COLUMN

# Level standing in for a missing categorical value kept by cleaning.
MISSING_LEVEL = "missing"


@dataclass
class FeatureSpec:
    """Which columns feed the models, and the levels of each categorical."""

    numeric: List[str]
    categorical: List[str]
    categories: Dict[str, List[str]] = field(default_factory=dict)
    target_col: str = TARGET_COLUMN
    positive_label: str = "yes"

    @property
    def feature_names(self) -> List[str]:
        return list(self.numeric) + list(self.categorical)


def _as_levels(values: pd.Series) -> pd.Series:
    return values.astype(object).where(values.notna(), MISSING_LEVEL).astype(str)


def infer_feature_spec(
    df: pd.DataFrame,
    target_col: str = TARGET_COLUMN,
    positive_label: str = "yes",
) -> FeatureSpec:
    """Derive numeric/categorical groups and category levels from ``df``."""
    if target_col not in df.columns:
        raise KeyError(f"Missing target column '{target_col}' in DataFrame.")

    numeric: List[str] = []
    categorical: List[str] = []
    for col in df.columns:
        if col == target_col:
            continue
        if pd.api.types.is_numeric_dtype(df[col]) and not pd.api.types.is_bool_dtype(df[col]):
            numeric.append(col)
        else:
            categorical.append(col)

    categories = {col: sorted(_as_levels(df[col]).unique().tolist()) for col in categorical}
    return FeatureSpec(
        numeric=numeric,
        categorical=categorical,
        categories=categories,
        target_col=target_col,
        positive_label=positive_label,
    )


def split_xy(df: pd.DataFrame, spec: FeatureSpec) -> Tuple[pd.DataFrame, pd.Series]:
    """Return features ``X`` (categoricals as str) and integer labels ``y``.

    Missing categorical values become :data:`MISSING_LEVEL`; a missing
    numeric value raises ``ValueError``.
    """
    missing = [c for c in spec.feature_names + [spec.target_col] if c not in df.columns]
    if missing:
        raise KeyError(f"Missing columns for model matrix: {missing}")

    X = df[spec.feature_names].copy()
    for col in spec.categorical:
        X[col] = _as_levels(X[col])

    incomplete = [c for c in spec.numeric if X[c].isna().any()]
    if incomplete:
        raise ValueError(f"Numeric columns {incomplete} contain missing values; drop incomplete rows first.")

    target = df[spec.target_col].astype(str).str.strip().str.lower()
    y = (target == spec.positive_label.lower()).astype(int).rename(spec.target_col)
    return X, y


def _make_onehot_encoder(categories: List[List[str]]) -> OneHotEncoder:
    """Make OneHotEncoder compatible across scikit-learn versions."""
    try:
        return OneHotEncoder(categories=categories, sparse_output=False, handle_unknown="ignore")
    except TypeError:
        # sklearn<1.2 uses "sparse"
        return OneHotEncoder(categories=categories, sparse=False, handle_unknown="ignore")


def make_onehot_preprocessor(spec: FeatureSpec) -> ColumnTransformer:
    """Numeric passthrough + one-hot categoricals (tree / forest input)."""
    transformers: list[tuple[str, object, List[str]]] = []
    if spec.numeric:
        transformers.append(("numeric", "passthrough", list(spec.numeric)))
    if spec.categorical:
        levels = [list(spec.categories[c]) for c in spec.categorical]
        transformers.append(("categorical", _make_onehot_encoder(levels), list(spec.categorical)))
    return ColumnTransformer(transformers=transformers, remainder="drop")


def onehot_source_columns(spec: FeatureSpec) -> List[str]:
    """Source column of each output column of :func:`make_onehot_preprocessor`."""
    sources = list(spec.numeric)
    for col in spec.categorical:
        sources.extend([col] * len(spec.categories[col]))
    return sources


def make_discretizing_preprocessor(spec: FeatureSpec, n_bins: int = 5) -> ColumnTransformer:
    """Ordinal categoricals + quantile-binned numerics (Naive Bayes input).

    Levels outside ``spec.categories`` raise at transform time.
    """
    if n_bins < 2:
        raise ValueError("n_bins must be >= 2.")

    transformers: list[tuple[str, object, List[str]]] = []
    if spec.categorical:
        levels = [list(spec.categories[c]) for c in spec.categorical]
        transformers.append(("categorical", OrdinalEncoder(categories=levels), list(spec.categorical)))
    if spec.numeric:
        binner = KBinsDiscretizer(n_bins=int(n_bins), encode="ordinal", strategy="quantile")
        transformers.append(("numeric", binner, list(spec.numeric)))
    return ColumnTransformer(transformers=transformers, remainder="drop")


def discretized_category_counts(spec: FeatureSpec, n_bins: int = 5) -> List[int]:
    """Number of possible codes per output column of the discretising preprocessor."""
    return [len(spec.categories[c]) for c in spec.categorical] + [int(n_bins)] * len(spec.numeric)


__all__ = [
    "FeatureSpec",
    "MISSING_LEVEL",
    "discretized_category_counts",
    "infer_feature_spec",
    "make_discretizing_preprocessor",
    "make_onehot_preprocessor",
    "onehot_source_columns",
    "split_xy",
]
