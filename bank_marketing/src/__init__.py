"""Source package for the bank marketing term-deposit report.

Package layout
--------------
- data: loading, deterministic cleaning, splitting/downsampling, model matrices
- models: Naive Bayes, decision tree and random forest pipelines
- evaluation: test-set metrics, ROC, confusion matrices, variable importance
- visualization: report figures
- reporting: markdown rendering of the report
- experiments: the runnable model-comparison script
- utils: logging, seeds and ranking metrics

This ``__init__`` stays lightweight so that importing the package does not
pull in scikit-learn or matplotlib.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "config",
    "data",
    "models",
    "evaluation",
    "visualization",
    "reporting",
    "experiments",
    "utils",
]
