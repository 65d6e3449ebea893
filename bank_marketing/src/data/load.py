"""Data loading helpers for the UCI bank marketing dataset.

``bank-full.csv`` is distributed semicolon-delimited with quoted strings.
Copies re-saved by spreadsheet tools are often comma- or tab-delimited, so
the loader:

1) parses with the expected ``;`` separator;
2) falls back to delimiter auto-detection if the result has too few columns;
3) checks the header against the documented schema.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import List, Sequence, Tuple

import pandas as pd
from pandas.errors import ParserError

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("bank_marketing/data/raw")
DEFAULT_FILENAME = "bank-full.csv"
DEFAULT_SEPARATOR = ";"

TARGET_COLUMN = "y"

# Column order of the published file.
BANK_COLUMNS: List[str] = [
    "age",
    "job",
    "marital",
    "education",
    "default",
    "balance",
    "housing",
    "loan",
    "contact",
    "day",
    "month",
    "duration",
    "campaign",
    "pdays",
    "previous",
    "poutcome",
    TARGET_COLUMN,
]


def dataset_status(
    data_dir: Path = DEFAULT_DATA_DIR,
    filename: str = DEFAULT_FILENAME,
) -> Tuple[bool, Path]:
    """Return whether the dataset CSV exists, and where it is expected."""
    csv_path = Path(data_dir) / filename
    return csv_path.is_file(), csv_path


def validate_schema(df: pd.DataFrame, expected: Sequence[str] = BANK_COLUMNS) -> None:
    """Raise ``KeyError`` if any expected column is missing."""
    missing = [c for c in expected if c not in df.columns]
    if missing:
        raise KeyError(f"Missing columns in bank marketing data: {missing}")


def load_bank_data(
    data_dir: Path = DEFAULT_DATA_DIR,
    filename: str = DEFAULT_FILENAME,
    sep: str = DEFAULT_SEPARATOR,
    min_expected_columns: int = len(BANK_COLUMNS),
    validate: bool = True,
) -> pd.DataFrame:
    """Load the bank marketing CSV with robust delimiter handling.

    Parameters
    ----------
    data_dir:
        Directory containing ``bank-full.csv``.
    filename:
        CSV filename (``bank.csv``, the 10 % sample, works too).
    sep:
        Expected delimiter, tried first.
    min_expected_columns:
        If fewer columns are parsed, delimiter parsing is assumed to have
        failed and auto-detection is tried.
    validate:
        Check the header against :data:`BANK_COLUMNS`.
    """
    exists, csv_path = dataset_status(data_dir, filename)
    if not exists:
        raise FileNotFoundError(
            f"Expected dataset at {csv_path}. Please place the UCI bank marketing CSV in this location."
        )

    try:
        df = pd.read_csv(csv_path, sep=sep)
    except ParserError:
        df = None

    if df is None or df.shape[1] < min_expected_columns:
        logger.info("Parsing %s with sep=%r gave too few columns; auto-detecting delimiter.", csv_path, sep)
        try:
            df = pd.read_csv(csv_path, sep=None, engine="python")
        except (ParserError, csv.Error) as exc:
            raise ValueError(
                f"Failed to parse dataset at {csv_path} with automatic delimiter detection."
            ) from exc

    if df.shape[1] < min_expected_columns:
        raise ValueError(
            f"Parsed dataset from {csv_path} appears to have only {df.shape[1]} columns; "
            "please verify that the file is the bank marketing CSV."
        )

    df.columns = [str(c).strip() for c in df.columns]
    if validate:
        validate_schema(df)

    logger.info("Loaded %s: %d rows x %d columns", csv_path, df.shape[0], df.shape[1])
    return df


__all__ = [
    "BANK_COLUMNS",
    "DEFAULT_DATA_DIR",
    "DEFAULT_FILENAME",
    "TARGET_COLUMN",
    "dataset_status",
    "load_bank_data",
    "validate_schema",
]
