"""Random seed helpers to keep the report reproducible.

Stochastic steps in the pipeline:
- the stratified train/test split,
- majority-class downsampling,
- tree / forest induction and the forest's cross-validation folds,
- permutation importance.

Each of them takes an explicit ``random_state``; ``set_global_seed`` covers
anything that falls back to the global NumPy / ``random`` state.
"""

from __future__ import annotations

import os
import random
from contextlib import contextmanager
from typing import Iterator

import numpy as np


def set_global_seed(seed: int = 42) -> None:
    """Seed Python and NumPy RNGs and fix ``PYTHONHASHSEED``."""
    os.environ["PYTHONHASHSEED"] = str(int(seed))
    random.seed(int(seed))
    np.random.seed(int(seed))


@contextmanager
def temp_seed(seed: int) -> Iterator[None]:
    """Temporarily seed a block; restores ``random`` and NumPy states afterwards."""
    py_state = random.getstate()
    np_state = np.random.get_state()

    set_global_seed(int(seed))
    try:
        yield
    finally:
        random.setstate(py_state)
        np.random.set_state(np_state)


__all__ = ["set_global_seed", "temp_seed"]
