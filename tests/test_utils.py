import logging
import random

import numpy as np
import pandas as pd
import pytest

from bank_marketing.src.utils import (
    compute_lift,
    configure_logging,
    lift_curve,
    precision_at_frac,
    recall_at_frac,
    set_global_seed,
    temp_seed,
    top_k_from_frac,
)

# Two subscribers out of ten; the best-scored contact is one of them.
Y = [1, 0, 0, 0, 0, 0, 0, 0, 0, 1]
SCORES = [1.0, 0.9, 0.8, 0.7, 0.6, 0.5, 0.4, 0.3, 0.2, 0.1]


def test_top_k_from_frac():
    assert top_k_from_frac(10, 0.2) == 2
    assert top_k_from_frac(10, 0.25) == 3
    assert top_k_from_frac(0, 0.2) == 0
    with pytest.raises(ValueError):
        top_k_from_frac(10, 0.0)


def test_precision_recall_lift_at_top_fraction():
    assert precision_at_frac(Y, SCORES, top_frac=0.2) == pytest.approx(0.5)
    assert recall_at_frac(Y, SCORES, top_frac=0.2) == pytest.approx(0.5)
    assert compute_lift(Y, SCORES, top_frac=0.2) == pytest.approx(2.5)
    assert recall_at_frac(Y, SCORES, top_frac=1.0) == pytest.approx(1.0)


def test_series_inputs_align_by_index():
    y = pd.Series(Y, index=range(10))
    s = pd.Series(SCORES[::-1], index=range(9, -1, -1))
    assert precision_at_frac(y, s, top_frac=0.2) == pytest.approx(0.5)


def test_nan_scores_are_dropped():
    y = [1, 0, 1, 0]
    s = [0.9, np.nan, 0.1, 0.8]
    assert precision_at_frac(y, s, top_frac=0.34) == pytest.approx(0.5)


def test_no_positives_gives_nan():
    assert np.isnan(compute_lift([0, 0, 0], [0.3, 0.2, 0.1]))
    assert np.isnan(recall_at_frac([0, 0, 0], [0.3, 0.2, 0.1]))


def test_lift_curve():
    curve = lift_curve(Y, SCORES, fractions=(0.1, 0.2, 1.0))
    assert list(curve.columns) == ["frac", "precision", "recall", "lift"]
    assert curve["lift"].tolist() == pytest.approx([5.0, 2.5, 1.0])


def test_temp_seed_restores_state():
    set_global_seed(0)
    expected = np.random.rand()

    set_global_seed(0)
    with temp_seed(123):
        np.random.rand()
        random.random()
    assert np.random.rand() == expected


def test_configure_logging_file_handler(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    logger = configure_logging(log_file=log_file, logger_name="bank_marketing.test", capture_warnings=False)
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()

    assert log_file.read_text(encoding="utf-8").strip().endswith("hello")
    assert logger.propagate is False
    assert len(logger.handlers) == 2

    configure_logging(log_file=log_file, logger_name="bank_marketing.test", capture_warnings=False)
    assert len(logging.getLogger("bank_marketing.test").handlers) == 2
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
