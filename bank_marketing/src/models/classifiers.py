"""The three classifiers compared in the report.

All models are plain scikit-learn estimators built as
``Pipeline(preprocess -> model)`` so they consume the same raw feature frame
(``split_xy`` output) and apply their own encoding:

- **naive_bayes**: categorical Naive Bayes with Laplace smoothing on
  ordinal categoricals and quantile-binned numerics.
- **decision_tree**: a single CART tree on one-hot features. Defaults mirror
  the stopping rules of a conditional-inference tree (min split 20, min leaf 7).
- **random_forest**: bagged trees whose ``max_features`` (mtry) and leaf size
  are chosen by stratified k-fold cross-validation on ROC AUC.

The three are fitted independently on the same training frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import joblib
import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import GridSearchCV, StratifiedKFold
from sklearn.naive_bayes import CategoricalNB
from sklearn.pipeline import Pipeline
from sklearn.tree import DecisionTreeClassifier

from bank_marketing.src.data.features import (
    FeatureSpec,
    discretized_category_counts,
    make_discretizing_preprocessor,
    make_onehot_preprocessor,
)

logger = logging.getLogger(__name__)

NAIVE_BAYES = "naive_bayes"
DECISION_TREE = "decision_tree"
RANDOM_FOREST = "random_forest"
MODEL_NAMES: Tuple[str, ...] = (NAIVE_BAYES, DECISION_TREE, RANDOM_FOREST)

FittedModel = Union[Pipeline, GridSearchCV]


@dataclass
class NaiveBayesConfig:
    """Naive Bayes settings.

    Parameters
    ----------
    laplace:
        Additive (Laplace) smoothing applied to every category count.
    n_bins:
        Quantile bins per numeric column.
    """

    laplace: float = 1.0
    n_bins: int = 5


@dataclass
class DecisionTreeConfig:
    criterion: str = "gini"
    max_depth: Optional[int] = None
    min_samples_split: int = 20
    min_samples_leaf: int = 7
    ccp_alpha: float = 0.0
    random_state: int = 42


@dataclass
class RandomForestConfig:
    """Random forest and its cross-validated hyperparameter grid.

    ``max_features_grid`` entries may be ints (number of one-hot columns),
    floats (fraction of columns) or ``"sqrt"`` / ``"log2"``.
    """

    n_estimators: int = 500
    max_features_grid: Tuple[Union[int, float, str], ...] = ("sqrt", 0.25, 0.5)
    min_samples_leaf_grid: Tuple[int, ...] = (1, 5)
    cv_folds: int = 5
    scoring: str = "roc_auc"
    n_jobs: Optional[int] = None
    random_state: int = 42

    def __post_init__(self) -> None:
        self.max_features_grid = tuple(self.max_features_grid)
        self.min_samples_leaf_grid = tuple(self.min_samples_leaf_grid)
        if int(self.cv_folds) < 2:
            raise ValueError("cv_folds must be >= 2.")
        if not self.max_features_grid or not self.min_samples_leaf_grid:
            raise ValueError("Random forest grids must not be empty.")


@dataclass
class ModelsConfig:
    naive_bayes: NaiveBayesConfig = field(default_factory=NaiveBayesConfig)
    decision_tree: DecisionTreeConfig = field(default_factory=DecisionTreeConfig)
    random_forest: RandomForestConfig = field(default_factory=RandomForestConfig)
    enabled: Tuple[str, ...] = MODEL_NAMES

    def __post_init__(self) -> None:
        self.enabled = tuple(self.enabled)
        unknown = [n for n in self.enabled if n not in MODEL_NAMES]
        if unknown:
            raise ValueError(f"Unknown model names {unknown}; expected a subset of {list(MODEL_NAMES)}.")


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def build_naive_bayes(spec: FeatureSpec, config: NaiveBayesConfig | None = None) -> Pipeline:
    cfg = config or NaiveBayesConfig()
    counts = discretized_category_counts(spec, n_bins=cfg.n_bins)
    return Pipeline(
        steps=[
            ("preprocess", make_discretizing_preprocessor(spec, n_bins=cfg.n_bins)),
            ("model", CategoricalNB(alpha=float(cfg.laplace), min_categories=np.asarray(counts))),
        ]
    )


def build_decision_tree(spec: FeatureSpec, config: DecisionTreeConfig | None = None) -> Pipeline:
    cfg = config or DecisionTreeConfig()
    tree = DecisionTreeClassifier(
        criterion=cfg.criterion,
        max_depth=cfg.max_depth,
        min_samples_split=int(cfg.min_samples_split),
        min_samples_leaf=int(cfg.min_samples_leaf),
        ccp_alpha=float(cfg.ccp_alpha),
        random_state=cfg.random_state,
    )
    return Pipeline(steps=[("preprocess", make_onehot_preprocessor(spec)), ("model", tree)])


def build_random_forest(spec: FeatureSpec, config: RandomForestConfig | None = None) -> GridSearchCV:
    cfg = config or RandomForestConfig()
    forest = RandomForestClassifier(
        n_estimators=int(cfg.n_estimators),
        random_state=cfg.random_state,
        n_jobs=cfg.n_jobs,
    )
    pipe = Pipeline(steps=[("preprocess", make_onehot_preprocessor(spec)), ("model", forest)])
    param_grid = {
        "model__max_features": list(cfg.max_features_grid),
        "model__min_samples_leaf": [int(v) for v in cfg.min_samples_leaf_grid],
    }
    cv = StratifiedKFold(n_splits=int(cfg.cv_folds), shuffle=True, random_state=cfg.random_state)
    return GridSearchCV(pipe, param_grid=param_grid, scoring=cfg.scoring, cv=cv, refit=True)


def build_model(name: str, spec: FeatureSpec, config: ModelsConfig | None = None) -> FittedModel:
    """Build an unfitted model by name."""
    cfg = config or ModelsConfig()
    if name == NAIVE_BAYES:
        return build_naive_bayes(spec, cfg.naive_bayes)
    if name == DECISION_TREE:
        return build_decision_tree(spec, cfg.decision_tree)
    if name == RANDOM_FOREST:
        return build_random_forest(spec, cfg.random_forest)
    raise ValueError(f"Unknown model '{name}'. Expected one of {list(MODEL_NAMES)}.")


def unwrap_pipeline(model: FittedModel) -> Pipeline:
    """Return the fitted pipeline (the refit best estimator for a grid search)."""
    if isinstance(model, GridSearchCV):
        if not hasattr(model, "best_estimator_"):
            raise AttributeError("GridSearchCV is not fitted; call fit() first.")
        return model.best_estimator_
    return model


def fit_models(
    X: pd.DataFrame,
    y: pd.Series,
    spec: FeatureSpec,
    config: ModelsConfig | None = None,
    names: Optional[Sequence[str]] = None,
) -> Dict[str, FittedModel]:
    """Fit each requested model independently on the same ``(X, y)``."""
    cfg = config or ModelsConfig()
    selected: List[str] = list(names) if names is not None else list(cfg.enabled)

    fitted: Dict[str, FittedModel] = {}
    for name in selected:
        model = build_model(name, spec, cfg)
        logger.info("Fitting %s on %d rows x %d features", name, X.shape[0], X.shape[1])
        model.fit(X, y)
        if isinstance(model, GridSearchCV):
            logger.info(
                "%s: best params %s (cv %s=%.4f)",
                name,
                model.best_params_,
                model.scoring,
                model.best_score_,
            )
        fitted[name] = model
    return fitted


def save_model(model: FittedModel, path: str | Path) -> Path:
    """Serialize a fitted model with joblib."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(model, out)
    logger.info("Saved model to %s", out)
    return out


def load_model(path: str | Path) -> FittedModel:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No serialized model at {path}.")
    return joblib.load(path)


__all__ = [
    "DECISION_TREE",
    "MODEL_NAMES",
    "NAIVE_BAYES",
    "RANDOM_FOREST",
    "DecisionTreeConfig",
    "ModelsConfig",
    "NaiveBayesConfig",
    "RandomForestConfig",
    "build_decision_tree",
    "build_model",
    "build_naive_bayes",
    "build_random_forest",
    "fit_models",
    "load_model",
    "save_model",
    "unwrap_pipeline",
]
