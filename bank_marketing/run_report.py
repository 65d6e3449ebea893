"""Produce the bank marketing term-deposit report in one command.

This launcher:
1) seeds all RNGs;
2) configures console + file logging;
3) checks that ``bank-full.csv`` is in place;
4) runs :mod:`bank_marketing.src.experiments.run_models` (clean, split,
   downsample, fit three classifiers, score, render ``report.md``).

Usage
-----
From the repository root:

    python bank_marketing/run_report.py

Or from inside the folder:

    cd bank_marketing
    python run_report.py --data-dir data/raw

Outputs are written to ``bank_marketing/outputs`` (tables, figures,
``report.md``) and the log to ``bank_marketing/outputs/logs/run_report.log``.
Any extra flags are forwarded to ``run_models`` (e.g. ``--save-models``).
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Make imports & paths robust to the current working directory.
# ---------------------------------------------------------------------------

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
REPO_ROOT = PROJECT_ROOT.parent

# Needed when running from inside bank_marketing/ without an installed package.
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import argparse
import logging
from typing import Optional, Sequence

from bank_marketing.src.data.load import DEFAULT_FILENAME, dataset_status
from bank_marketing.src.experiments import run_models
from bank_marketing.src.utils import configure_logging, set_global_seed

OUTPUT_DIR = PROJECT_ROOT / "outputs"
DEFAULT_DATA_DIR = PROJECT_ROOT / "data" / "raw"
DEFAULT_CONFIG = PROJECT_ROOT / "configs" / "report.yaml"
DEFAULT_SEED = 42


def _parse_args(argv: Optional[Sequence[str]] = None) -> tuple[argparse.Namespace, list[str]]:
    parser = argparse.ArgumentParser(description="Run the full term-deposit classification report.")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help="Directory containing bank-full.csv (default: bank_marketing/data/raw)",
    )
    parser.add_argument("--filename", type=str, default=DEFAULT_FILENAME, help="CSV filename")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help=(
            f"Global random seed (default: {DEFAULT_SEED}). When given it also "
            "overrides split.random_state from the config."
        ),
    )
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="Report YAML config")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="Output directory")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    return parser.parse_known_args(argv)


def _check_dataset(logger: logging.Logger, data_dir: Path, filename: str) -> bool:
    exists, csv_path = dataset_status(data_dir=data_dir, filename=filename)
    if not exists:
        logger.error("Dataset not found at %s", csv_path)
        logger.error(
            "Download the UCI 'Bank Marketing' data, place bank-full.csv under "
            "bank_marketing/data/raw/ or pass --data-dir to point to its folder."
        )
        return False
    logger.info("Found dataset at %s", csv_path)
    return True


def _run_models_argv(args: argparse.Namespace, passthrough: Sequence[str]) -> list[str]:
    """Flags for ``run_models``; the seed is forwarded only when given explicitly."""
    argv = [
        "--data-dir",
        str(args.data_dir),
        "--filename",
        args.filename,
        "--config",
        str(args.config),
        "--output-dir",
        str(args.output_dir),
    ]
    if args.seed is not None:
        argv += ["--random-state", str(args.seed)]
    return argv + list(passthrough)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args, passthrough = _parse_args(argv)

    output_dir = Path(args.output_dir)
    log_file = output_dir / "logs" / "run_report.log"
    logger = configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=log_file,
    )

    set_global_seed(DEFAULT_SEED if args.seed is None else args.seed)

    if not _check_dataset(logger, args.data_dir, args.filename):
        sys.exit(1)

    logger.info("===== Running: model comparison =====")
    run_models(_run_models_argv(args, passthrough))
    logger.info("All done. Report at %s", output_dir / "report.md")


if __name__ == "__main__":
    main()
