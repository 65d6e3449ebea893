from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from bank_marketing.src.config import ReportConfig
from bank_marketing.src.data.load import BANK_COLUMNS
from bank_marketing.src.models.classifiers import ModelsConfig, RandomForestConfig

N_ROWS = 400
N_DUPLICATES = 3
N_INCOMPLETE = 10


def make_bank_frame(n: int = N_ROWS, seed: int = 0) -> pd.DataFrame:
    """Small synthetic table with the bank-full.csv schema.

    Built so that cleaning has a known outcome:
    - ``poutcome`` (90 % unknown) and ``contact`` (~33 % unknown) exceed the
      missingness threshold;
    - ``default`` and ``pdays`` are near-zero-variance;
    - rows 0-4 have an unknown job, rows 5-9 an unknown education;
    - rows 20-22 are appended again as exact duplicates.
    """
    rng = np.random.default_rng(seed)
    idx = np.arange(n)

    job = rng.choice(["admin.", "technician", "services", "management", "retired"], n).astype(object)
    job[:5] = "unknown"
    education = rng.choice(["primary", "secondary", "tertiary"], n).astype(object)
    education[5:10] = "unknown"

    default = np.full(n, "no", dtype=object)
    default[[50, 150]] = "yes"

    pdays = np.full(n, -1)
    pdays[:4] = [100, 200, 300, 400]

    duration = rng.integers(10, 1000, n)
    p_yes = 1.0 / (1.0 + np.exp(-(duration - 600) / 100.0))
    y = np.where(rng.random(n) < p_yes, "yes", "no")

    df = pd.DataFrame(
        {
            "age": rng.integers(20, 70, n),
            "job": job,
            "marital": rng.choice(["married", "single", "divorced"], n),
            "education": education,
            "default": default,
            "balance": rng.integers(-500, 5000, n),
            "housing": rng.choice(["yes", "no"], n),
            "loan": rng.choice(["no", "yes"], n, p=[0.8, 0.2]),
            "contact": np.where(idx % 3 == 0, "unknown", np.where(idx % 2 == 0, "cellular", "telephone")),
            "day": rng.integers(1, 29, n),
            "month": rng.choice(["may", "jun", "jul", "aug", "nov"], n),
            "duration": duration,
            "campaign": rng.integers(1, 6, n),
            "pdays": pdays,
            "previous": rng.integers(0, 4, n),
            "poutcome": np.where(idx % 10 == 0, "success", "unknown"),
            "y": y,
        }
    )[BANK_COLUMNS]

    dupes = df.iloc[20 : 20 + N_DUPLICATES]
    return pd.concat([df, dupes], ignore_index=True)


@pytest.fixture
def bank_frame() -> pd.DataFrame:
    return make_bank_frame()


@pytest.fixture
def bank_csv(tmp_path, bank_frame):
    """bank-full.csv written with the original semicolon delimiter."""
    data_dir = tmp_path / "raw"
    data_dir.mkdir()
    bank_frame.to_csv(data_dir / "bank-full.csv", sep=";", index=False)
    return data_dir


@pytest.fixture
def fast_config() -> ReportConfig:
    """Defaults with a forest small enough for unit tests."""
    models = ModelsConfig(
        random_forest=RandomForestConfig(
            n_estimators=25,
            max_features_grid=("sqrt", 0.5),
            min_samples_leaf_grid=(1,),
            cv_folds=3,
        )
    )
    cfg = ReportConfig(models=models)
    cfg.evaluation.importance_repeats = 2
    return cfg
