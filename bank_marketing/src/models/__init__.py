"""bank_marketing.src.models

Classifiers compared in the report, each a scikit-learn pipeline taking the
raw feature frame:

- ``naive_bayes``: Laplace-smoothed categorical Naive Bayes.
- ``decision_tree``: a single CART tree.
- ``random_forest``: random forest tuned by stratified k-fold CV.

All share the scikit-learn API (``fit`` / ``predict`` / ``predict_proba``).
"""

from __future__ import annotations

from .classifiers import (
    DECISION_TREE,
    MODEL_NAMES,
    NAIVE_BAYES,
    RANDOM_FOREST,
    DecisionTreeConfig,
    ModelsConfig,
    NaiveBayesConfig,
    RandomForestConfig,
    build_model,
    fit_models,
    load_model,
    save_model,
    unwrap_pipeline,
)

__all__ = [
    "DECISION_TREE",
    "MODEL_NAMES",
    "NAIVE_BAYES",
    "RANDOM_FOREST",
    "DecisionTreeConfig",
    "ModelsConfig",
    "NaiveBayesConfig",
    "RandomForestConfig",
    "build_model",
    "fit_models",
    "load_model",
    "save_model",
    "unwrap_pipeline",
]
