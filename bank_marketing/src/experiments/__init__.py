"""Experiment entrypoints.

Each module exposes a CLI-friendly ``main`` function, re-exported here so it
can be called programmatically (e.g. from ``bank_marketing/run_report.py``).
"""

from __future__ import annotations

from .run_models import main as run_models
from .run_models import run_pipeline

__all__ = ["run_models", "run_pipeline"]
