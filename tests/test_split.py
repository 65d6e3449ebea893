import pandas as pd
import pytest

from bank_marketing.src.data.preprocess import clean_data
from bank_marketing.src.data.split import (
    class_balance,
    downsample_majority,
    stratified_train_test_split,
)


@pytest.fixture
def cleaned(bank_frame):
    df, _ = clean_data(bank_frame)
    return df


def test_split_sizes_and_stratification(cleaned):
    train, test = stratified_train_test_split(cleaned, test_size=0.2, random_state=0)
    assert len(train) + len(test) == len(cleaned)
    assert len(test) == 78

    overall = (cleaned["y"] == "yes").mean()
    assert abs((train["y"] == "yes").mean() - overall) < 0.02
    assert abs((test["y"] == "yes").mean() - overall) < 0.03
    assert list(test.index) == list(range(len(test)))


def test_split_is_reproducible(cleaned):
    a, _ = stratified_train_test_split(cleaned, random_state=7)
    b, _ = stratified_train_test_split(cleaned, random_state=7)
    pd.testing.assert_frame_equal(a, b)


def test_split_rejects_bad_test_size(cleaned):
    with pytest.raises(ValueError):
        stratified_train_test_split(cleaned, test_size=1.0)
    with pytest.raises(KeyError):
        stratified_train_test_split(cleaned, stratify_col="missing")


def test_downsample_balances_and_keeps_minority(cleaned):
    train, _ = stratified_train_test_split(cleaned, random_state=0)
    counts = train["y"].value_counts()
    minority = counts.index[-1]

    balanced = downsample_majority(train, random_state=0)
    new_counts = balanced["y"].value_counts()
    assert new_counts.iloc[0] == new_counts.iloc[1] == counts.iloc[-1]

    kept_minority = balanced[balanced["y"] == minority].sort_values(list(balanced.columns))
    orig_minority = train[train["y"] == minority].sort_values(list(train.columns))
    pd.testing.assert_frame_equal(kept_minority.reset_index(drop=True), orig_minority.reset_index(drop=True))


def test_downsample_handles_tied_classes():
    df = pd.DataFrame({"x": range(6), "y": ["no", "yes"] * 3})
    balanced = downsample_majority(df)
    assert balanced["y"].value_counts().tolist() == [3, 3]


def test_downsample_needs_two_classes():
    df = pd.DataFrame({"x": range(6), "y": ["a", "b", "c", "a", "b", "c"]})
    with pytest.raises(ValueError):
        downsample_majority(df)


def test_class_balance():
    table = class_balance(pd.Series(["no", "no", "no", "yes"], name="y"))
    assert table.loc["no", "count"] == 3
    assert table.loc["yes", "fraction"] == pytest.approx(0.25)
    assert table.index.name == "y"
