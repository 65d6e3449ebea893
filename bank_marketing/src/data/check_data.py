"""CLI utility to verify dataset availability and basic schema.

Run from the project root:

.. code-block:: bash

    python -m bank_marketing.src.data.check_data

The script does not modify the dataset.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from .load import (
    DEFAULT_DATA_DIR,
    DEFAULT_FILENAME,
    TARGET_COLUMN,
    dataset_status,
    load_bank_data,
)
from .preprocess import DEFAULT_SENTINELS, missingness_table, recode_sentinels
from .split import class_balance


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check dataset placement and schema.")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help=f"Directory containing the CSV (default: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--filename",
        type=str,
        default=DEFAULT_FILENAME,
        help=f"CSV filename (default: {DEFAULT_FILENAME})",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Create the directory so users see where to put the file.
    args.data_dir.mkdir(parents=True, exist_ok=True)

    exists, csv_path = dataset_status(args.data_dir, args.filename)
    if not exists:
        print(
            "Dataset is missing.\n"
            "   Expected the UCI 'Bank Marketing' CSV (semicolon-delimited) at:\n"
            f"   {csv_path}\n"
        )
        return 1

    print(f"Found dataset at: {csv_path}")

    try:
        df = load_bank_data(data_dir=args.data_dir, filename=args.filename)
    except (KeyError, ValueError) as exc:
        print(f"Failed to load dataset: {exc}")
        return 1

    print(f"Rows: {df.shape[0]} | Columns: {df.shape[1]}")
    print("Columns:")
    print(", ".join(df.columns.tolist()))

    print("\nTarget balance:")
    print(class_balance(df[TARGET_COLUMN]).to_string())

    table = missingness_table(recode_sentinels(df, DEFAULT_SENTINELS))
    table = table[table["missing"] > 0]
    print(f"\nCells recorded as {list(DEFAULT_SENTINELS)}:")
    print(table.to_string() if not table.empty else "none")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
