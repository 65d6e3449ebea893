"""Train and compare the three term-deposit classifiers.

Protocol
--------
- Load ``bank-full.csv`` and clean it deterministically.
- Stratified 80/20 train/test split on ``y``.
- Downsample the majority class in the training part only.
- Fit Naive Bayes, a decision tree and a random forest on the same frame.
- Score each on the untouched test part: confusion matrix, accuracy,
  ROC / AUC, lift, variable importance.

Outputs
-------
Under ``--output-dir`` (default ``bank_marketing/outputs``):

- ``tables/``: cleaning report, class balance, metrics, confusion matrices,
  ROC points and variable importance as CSV;
- ``figures/``: PNG figures (unless ``--skip-plots``);
- ``models/``: joblib dumps (with ``--save-models``);
- ``report.md``: the rendered report.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Sequence

import matplotlib

matplotlib.use("Agg")  # headless-safe
import matplotlib.pyplot as plt

import pandas as pd

from bank_marketing.src.config import DEFAULT_CONFIG_PATH, ReportConfig, load_report_config
from bank_marketing.src.data.features import FeatureSpec, infer_feature_spec, split_xy
from bank_marketing.src.data.load import DEFAULT_DATA_DIR, DEFAULT_FILENAME, load_bank_data
from bank_marketing.src.data.preprocess import CleaningReport, clean_data
from bank_marketing.src.data.split import (
    class_balance,
    downsample_majority,
    stratified_train_test_split,
)
from bank_marketing.src.evaluation.importance import variable_importance
from bank_marketing.src.evaluation.prediction import (
    ModelEvaluation,
    compare_models,
    evaluate_model,
)
from bank_marketing.src.models.classifiers import MODEL_NAMES, FittedModel, fit_models, save_model
from bank_marketing.src.reporting import render_report, write_report
from bank_marketing.src.utils.logging_utils import configure_logging
from bank_marketing.src.visualization import (
    plot_class_balance,
    plot_confusion_matrix,
    plot_missingness,
    plot_roc_comparison,
    plot_variable_importance,
)

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("bank_marketing/outputs")


@dataclass
class ReportResult:
    """In-memory results of one pipeline run."""

    cleaned: pd.DataFrame
    cleaning: CleaningReport
    spec: FeatureSpec
    balances: Dict[str, pd.DataFrame]
    models: Dict[str, FittedModel]
    evaluations: Dict[str, ModelEvaluation]
    comparison: pd.DataFrame
    importances: Dict[str, pd.DataFrame]
    output_dir: Path
    report_path: Path
    figures: Dict[str, Path] = field(default_factory=dict)


def _ensure_output_dirs(output_dir: Path) -> Dict[str, Path]:
    dirs = {
        "tables": output_dir / "tables",
        "figures": output_dir / "figures",
        "models": output_dir / "models",
    }
    for path in dirs.values():
        path.mkdir(parents=True, exist_ok=True)
    return dirs


def _write_tables(
    table_dir: Path,
    cleaning: CleaningReport,
    balances: Dict[str, pd.DataFrame],
    comparison: pd.DataFrame,
    evaluations: Dict[str, ModelEvaluation],
    importances: Dict[str, pd.DataFrame],
) -> None:
    cleaning.to_frame().to_csv(table_dir / "cleaning_report.csv", index=False)
    cleaning.missingness.to_csv(table_dir / "missingness.csv")
    cleaning.near_zero_variance.to_csv(table_dir / "near_zero_variance.csv")

    balance_rows = []
    for name, table in balances.items():
        part = table.reset_index()
        part.columns = ["class", "count", "fraction"]
        part.insert(0, "frame", name)
        balance_rows.append(part)
    if balance_rows:
        pd.concat(balance_rows, ignore_index=True).to_csv(table_dir / "class_balance.csv", index=False)

    comparison.to_csv(table_dir / "metrics.csv", index=False)
    for name, ev in evaluations.items():
        ev.confusion.to_csv(table_dir / f"confusion_{name}.csv")
        ev.roc.to_csv(table_dir / f"roc_{name}.csv", index=False)

    if importances:
        pd.concat(list(importances.values()), ignore_index=True).to_csv(table_dir / "importance.csv", index=False)
    logger.info("Saved tables to %s", table_dir)


def _save_figures(
    fig_dir: Path,
    cleaning: CleaningReport,
    max_missing_frac: float,
    balances: Dict[str, pd.DataFrame],
    y_test: pd.Series,
    evaluations: Dict[str, ModelEvaluation],
    importances: Dict[str, pd.DataFrame],
) -> Dict[str, Path]:
    figures: Dict[str, Path] = {}

    def _keep(key: str, fig: plt.Figure, path: Path) -> None:
        figures[key] = path
        plt.close(fig)

    path = fig_dir / "missingness.png"
    _keep("missingness", plot_missingness(cleaning.missingness, threshold=max_missing_frac, save_path=path), path)

    path = fig_dir / "class_balance.png"
    _keep("class_balance", plot_class_balance(balances, save_path=path), path)

    if evaluations:
        path = fig_dir / "roc_comparison.png"
        probs = {name: ev.probabilities for name, ev in evaluations.items()}
        _keep("roc_comparison", plot_roc_comparison(y_test, probs, save_path=path), path)

    for name, ev in evaluations.items():
        path = fig_dir / f"confusion_{name}.png"
        _keep(f"confusion_{name}", plot_confusion_matrix(ev.confusion, title=f"Confusion matrix - {name}", save_path=path), path)

    for name, table in importances.items():
        path = fig_dir / f"importance_{name}.png"
        _keep(f"importance_{name}", plot_variable_importance(table, title=f"Variable importance - {name}", save_path=path), path)

    logger.info("Saved %d figures to %s", len(figures), fig_dir)
    return figures


def run_pipeline(
    *,
    data_dir: Path = DEFAULT_DATA_DIR,
    filename: str = DEFAULT_FILENAME,
    config: ReportConfig | None = None,
    output_dir: Path = DEFAULT_OUTPUT_DIR,
    make_plots: bool = True,
    save_models: bool = False,
) -> ReportResult:
    """Run load -> clean -> split -> fit -> score -> report once."""
    cfg = config or ReportConfig()
    output_dir = Path(output_dir)
    dirs = _ensure_output_dirs(output_dir)
    target = cfg.cleaning.target_col

    raw = load_bank_data(data_dir=data_dir, filename=filename)
    cleaned, cleaning = clean_data(raw, cfg.cleaning)
    spec = infer_feature_spec(cleaned, target_col=target)
    logger.info("Features: numeric=%s categorical=%s", spec.numeric, spec.categorical)

    train_df, test_df = stratified_train_test_split(
        cleaned,
        test_size=cfg.split.test_size,
        random_state=cfg.split.random_state,
        stratify_col=target,
    )

    balances: Dict[str, pd.DataFrame] = {
        "cleaned": class_balance(cleaned[target]),
        "train": class_balance(train_df[target]),
    }
    if cfg.split.downsample:
        train_df = downsample_majority(train_df, target_col=target, random_state=cfg.split.random_state)
        balances["train (downsampled)"] = class_balance(train_df[target])
    balances["test"] = class_balance(test_df[target])

    X_train, y_train = split_xy(train_df, spec)
    X_test, y_test = split_xy(test_df, spec)

    models = fit_models(X_train, y_train, spec, cfg.models)

    ev_cfg = cfg.evaluation
    evaluations: Dict[str, ModelEvaluation] = {}
    importances: Dict[str, pd.DataFrame] = {}
    for name, model in models.items():
        ev = evaluate_model(name, model, X_test, y_test, threshold=ev_cfg.threshold, top_frac=ev_cfg.top_frac)
        evaluations[name] = ev
        logger.info("%s confusion matrix:\n%s", name, ev.confusion.to_string())

        importances[name] = variable_importance(
            name,
            model,
            X_test,
            y_test,
            spec,
            method=ev_cfg.importance_method,  # type: ignore[arg-type]
            scoring=ev_cfg.importance_scoring,
            n_repeats=ev_cfg.importance_repeats,
            random_state=cfg.split.random_state,
        )

    comparison = compare_models(evaluations)
    if not comparison.empty:
        logger.info("Model comparison:\n%s", comparison.to_string(index=False))

    _write_tables(dirs["tables"], cleaning, balances, comparison, evaluations, importances)

    figures: Dict[str, Path] = {}
    if make_plots:
        figures = _save_figures(
            dirs["figures"],
            cleaning,
            cfg.cleaning.max_missing_frac,
            balances,
            y_test,
            evaluations,
            importances,
        )

    if save_models:
        for name, model in models.items():
            save_model(model, dirs["models"] / f"{name}.joblib")

    report_path = output_dir / "report.md"
    text = render_report(
        dataset=str(Path(data_dir) / filename),
        raw_shape=(int(raw.shape[0]), int(raw.shape[1])),
        cleaning=cleaning,
        balances=balances,
        comparison=comparison,
        evaluations=evaluations,
        importances=importances,
        figures={k: p.relative_to(output_dir).as_posix() for k, p in figures.items()},
    )
    write_report(text, report_path)

    return ReportResult(
        cleaned=cleaned,
        cleaning=cleaning,
        spec=spec,
        balances=balances,
        models=models,
        evaluations=evaluations,
        comparison=comparison,
        importances=importances,
        output_dir=output_dir,
        report_path=report_path,
        figures=figures,
    )


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare Naive Bayes, decision tree and random forest on the bank marketing data.",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help=f"Directory containing the CSV (default: {DEFAULT_DATA_DIR}).",
    )
    parser.add_argument(
        "--filename",
        type=str,
        default=DEFAULT_FILENAME,
        help=f"CSV filename (default: {DEFAULT_FILENAME}).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="YAML report configuration (default: bank_marketing/configs/report.yaml).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Where tables, figures and report.md are written (default: {DEFAULT_OUTPUT_DIR}).",
    )
    parser.add_argument(
        "--test-size",
        type=float,
        default=None,
        help="Override the test fraction from the config.",
    )
    parser.add_argument(
        "--random-state",
        type=int,
        default=None,
        help="Override the random seed used for splitting, downsampling and importance.",
    )
    parser.add_argument(
        "--models",
        nargs="+",
        choices=list(MODEL_NAMES),
        default=None,
        help="Subset of models to fit (default: as configured).",
    )
    parser.add_argument("--skip-plots", action="store_true", help="Do not write figures.")
    parser.add_argument("--save-models", action="store_true", help="Serialize fitted models with joblib.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if not logging.getLogger().handlers:
        configure_logging()

    cfg = load_report_config(args.config)
    if args.test_size is not None:
        cfg.split.test_size = float(args.test_size)
    if args.random_state is not None:
        cfg.split.random_state = int(args.random_state)
    if args.models is not None:
        cfg.models.enabled = tuple(args.models)

    try:
        run_pipeline(
            data_dir=args.data_dir,
            filename=args.filename,
            config=cfg,
            output_dir=args.output_dir,
            make_plots=not args.skip_plots,
            save_models=args.save_models,
        )
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        logger.error(
            "Run `python -m bank_marketing.src.data.check_data` to verify dataset placement.",
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
