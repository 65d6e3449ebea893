import numpy as np
import pytest

from bank_marketing.src.data.features import (
    MISSING_LEVEL,
    discretized_category_counts,
    infer_feature_spec,
    make_discretizing_preprocessor,
    make_onehot_preprocessor,
    onehot_source_columns,
    split_xy,
)
from bank_marketing.src.data.preprocess import CleaningConfig, clean_data


@pytest.fixture
def cleaned(bank_frame):
    df, _ = clean_data(bank_frame)
    return df


def test_infer_feature_spec(cleaned):
    spec = infer_feature_spec(cleaned)
    assert spec.numeric == ["age", "balance", "duration", "campaign", "previous"]
    assert spec.categorical == ["job", "marital", "education", "housing", "loan"]
    assert "unknown" not in spec.categories["job"]
    assert spec.categories["education"] == ["primary", "secondary", "tertiary"]
    assert "y" not in spec.feature_names


def test_split_xy(cleaned):
    spec = infer_feature_spec(cleaned)
    X, y = split_xy(cleaned, spec)
    assert list(X.columns) == spec.feature_names
    assert set(y.unique()) <= {0, 1}
    assert y.sum() == (cleaned["y"] == "yes").sum()

    with pytest.raises(KeyError):
        split_xy(cleaned.drop(columns=["age"]), spec)


def test_onehot_width_matches_sources(cleaned):
    spec = infer_feature_spec(cleaned)
    X, _ = split_xy(cleaned, spec)
    matrix = make_onehot_preprocessor(spec).fit_transform(X)
    sources = onehot_source_columns(spec)
    assert matrix.shape == (len(cleaned), len(sources))
    assert len(sources) == 5 + 5 + 3 + 3 + 2 + 2


def test_onehot_keeps_levels_missing_from_subset(cleaned):
    spec = infer_feature_spec(cleaned)
    X, _ = split_xy(cleaned, spec)
    subset = X[X["education"] == "primary"]
    matrix = make_onehot_preprocessor(spec).fit_transform(subset)
    assert matrix.shape[1] == len(onehot_source_columns(spec))


def test_discretizing_preprocessor(cleaned):
    spec = infer_feature_spec(cleaned)
    X, _ = split_xy(cleaned, spec)
    codes = make_discretizing_preprocessor(spec, n_bins=4).fit_transform(X)
    counts = discretized_category_counts(spec, n_bins=4)
    assert codes.shape == (len(cleaned), len(counts))
    assert np.all(codes >= 0)
    assert np.all(codes.max(axis=0) < np.asarray(counts))

    with pytest.raises(ValueError):
        make_discretizing_preprocessor(spec, n_bins=1)


def test_missing_categoricals_become_a_level(bank_frame):
    df, _ = clean_data(bank_frame, CleaningConfig(drop_incomplete_rows=False))
    spec = infer_feature_spec(df)
    assert MISSING_LEVEL in spec.categories["job"]
    assert MISSING_LEVEL in spec.categories["education"]
    assert "nan" not in spec.categories["job"]

    X, _ = split_xy(df, spec)
    assert (X["job"] == MISSING_LEVEL).sum() == 5
    assert X[spec.categorical].notna().all().all()

    codes = make_discretizing_preprocessor(spec, n_bins=4).fit_transform(X)
    assert codes.shape[0] == len(df)


def test_split_xy_rejects_missing_numerics(cleaned):
    spec = infer_feature_spec(cleaned)
    broken = cleaned.copy()
    broken.loc[0, "age"] = np.nan
    with pytest.raises(ValueError, match="age"):
        split_xy(broken, spec)
