"""Data loading, deterministic cleaning, splitting and model matrices.

Workflow
--------
1) :func:`load_bank_data` reads ``bank-full.csv`` (semicolon-delimited).
2) :func:`clean_data` recodes ``"unknown"`` to missing and drops unusable
   columns and rows; it returns a :class:`CleaningReport` as well.
3) :func:`stratified_train_test_split` then :func:`downsample_majority` on
   the training part only.
4) :func:`infer_feature_spec` / :func:`split_xy` build model inputs; the
   encoders themselves live inside each model pipeline.
"""

from __future__ import annotations

from .load import (
    BANK_COLUMNS,
    TARGET_COLUMN,
    dataset_status,
    load_bank_data,
    validate_schema,
)
from .preprocess import (
    CleaningConfig,
    CleaningReport,
    DEFAULT_LABEL_COL,
    add_target_label,
    clean_data,
    drop_high_missing_columns,
    drop_low_information_columns,
    drop_near_zero_variance,
    missingness_table,
    near_zero_variance,
    recode_sentinels,
)
from .split import class_balance, downsample_majority, stratified_train_test_split
from .features import (
    MISSING_LEVEL,
    FeatureSpec,
    infer_feature_spec,
    make_discretizing_preprocessor,
    make_onehot_preprocessor,
    onehot_source_columns,
    split_xy,
)

__all__ = [
    # loading
    "BANK_COLUMNS",
    "TARGET_COLUMN",
    "dataset_status",
    "load_bank_data",
    "validate_schema",
    # cleaning
    "CleaningConfig",
    "CleaningReport",
    "DEFAULT_LABEL_COL",
    "add_target_label",
    "clean_data",
    "drop_high_missing_columns",
    "drop_low_information_columns",
    "drop_near_zero_variance",
    "missingness_table",
    "near_zero_variance",
    "recode_sentinels",
    # splitting
    "class_balance",
    "downsample_majority",
    "stratified_train_test_split",
    # model matrices
    "MISSING_LEVEL",
    "FeatureSpec",
    "infer_feature_spec",
    "make_discretizing_preprocessor",
    "make_onehot_preprocessor",
    "onehot_source_columns",
    "split_xy",
]
