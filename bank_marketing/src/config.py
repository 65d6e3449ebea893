"""YAML configuration for the report run.

Layout of ``bank_marketing/configs/report.yaml``::

    cleaning:       # -> CleaningConfig
    split:          # -> SplitConfig
    models:
      enabled:      # subset of naive_bayes / decision_tree / random_forest
      naive_bayes:  # -> NaiveBayesConfig
      decision_tree:
      random_forest:
    evaluation:     # -> EvaluationConfig

Unknown keys are ignored. A missing or unreadable file, or invalid values in
a section, fall back to defaults with a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import yaml

from bank_marketing.src.data.preprocess import CleaningConfig
from bank_marketing.src.models.classifiers import (
    DecisionTreeConfig,
    ModelsConfig,
    NaiveBayesConfig,
    RandomForestConfig,
)

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "report.yaml"

T = TypeVar("T")


@dataclass
class SplitConfig:
    test_size: float = 0.2
    random_state: int = 42
    downsample: bool = True


@dataclass
class EvaluationConfig:
    """Evaluation settings.

    Parameters
    ----------
    threshold:
        Probability cut-off turning P(yes) into a predicted class.
    top_frac:
        Calling budget for the ranking metrics (share of test contacts).
    importance_method:
        ``"auto"`` (native where available), ``"native"`` or ``"permutation"``.
    importance_repeats:
        Shuffles per column for permutation importance.
    """

    threshold: float = 0.5
    top_frac: float = 0.2
    importance_method: str = "auto"
    importance_repeats: int = 5
    importance_scoring: str = "roc_auc"


@dataclass
class ReportConfig:
    cleaning: CleaningConfig = field(default_factory=CleaningConfig)
    split: SplitConfig = field(default_factory=SplitConfig)
    models: ModelsConfig = field(default_factory=ModelsConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)


def _as_bool(x: Any, default: bool = False) -> bool:
    if x is None:
        return default
    if isinstance(x, bool):
        return x
    if isinstance(x, (int, float)):
        return bool(x)
    if isinstance(x, str):
        return x.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return default


def _build_section(cls: Type[T], raw: Any, section: str) -> T:
    """Instantiate a config dataclass from a YAML mapping, keeping valid keys only."""
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        logger.warning("Config section '%s' is not a mapping; using defaults.", section)
        return cls()

    valid = {f.name: f for f in fields(cls)}
    unknown = sorted(set(raw) - set(valid))
    if unknown:
        logger.warning("Ignoring unknown keys in '%s': %s", section, unknown)

    kwargs: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in valid:
            continue
        default = getattr(cls(), key)
        if isinstance(default, bool):
            value = _as_bool(value, default=default)
        elif isinstance(default, tuple) and isinstance(value, list):
            value = tuple(value)
        kwargs[key] = value

    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as exc:
        logger.warning("Invalid values in '%s' (%s); using defaults.", section, exc)
        return cls()


def _build_models(raw: Any) -> ModelsConfig:
    if raw is None:
        return ModelsConfig()
    if not isinstance(raw, dict):
        logger.warning("Config section 'models' is not a mapping; using defaults.")
        return ModelsConfig()

    enabled: Optional[Tuple[str, ...]] = None
    if raw.get("enabled") is not None:
        enabled = tuple(str(n) for n in raw["enabled"])

    kwargs: Dict[str, Any] = {
        "naive_bayes": _build_section(NaiveBayesConfig, raw.get("naive_bayes"), "models.naive_bayes"),
        "decision_tree": _build_section(DecisionTreeConfig, raw.get("decision_tree"), "models.decision_tree"),
        "random_forest": _build_section(RandomForestConfig, raw.get("random_forest"), "models.random_forest"),
    }
    if enabled is not None:
        kwargs["enabled"] = enabled

    try:
        return ModelsConfig(**kwargs)
    except ValueError as exc:
        logger.warning("Invalid 'models.enabled' (%s); enabling all models.", exc)
        kwargs.pop("enabled", None)
        return ModelsConfig(**kwargs)


def config_from_dict(raw: Dict[str, Any] | None) -> ReportConfig:
    """Build a :class:`ReportConfig` from an already-parsed mapping."""
    raw = raw or {}
    return ReportConfig(
        cleaning=_build_section(CleaningConfig, raw.get("cleaning"), "cleaning"),
        split=_build_section(SplitConfig, raw.get("split"), "split"),
        models=_build_models(raw.get("models")),
        evaluation=_build_section(EvaluationConfig, raw.get("evaluation"), "evaluation"),
    )


def load_report_config(config_path: Path | str | None = DEFAULT_CONFIG_PATH) -> ReportConfig:
    """Load the report configuration from YAML (defaults when absent)."""
    if config_path is None:
        return ReportConfig()

    path = Path(config_path)
    if not path.is_file():
        logger.warning("Report config not found at %s; using defaults.", path)
        return ReportConfig()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        logger.warning("Failed to parse report YAML (%s); using defaults.", exc)
        return ReportConfig()

    if not isinstance(raw, dict):
        logger.warning("Report YAML at %s is not a mapping; using defaults.", path)
        return ReportConfig()

    logger.info("Loaded report config from %s", path)
    return config_from_dict(raw)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "EvaluationConfig",
    "ReportConfig",
    "SplitConfig",
    "config_from_dict",
    "load_report_config",
]
