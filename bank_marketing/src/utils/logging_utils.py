"""Logging setup shared by the report launcher and the model runner.

Each report run logs stage progress (rows dropped, models fitted, metrics)
to stderr and, when ``log_file`` is given, to a file beside the outputs.
Calling :func:`configure_logging` twice replaces the handlers instead of
stacking them, so notebook re-runs do not print every line twice.

Used by
-------
- ``bank_marketing/run_report.py`` (console + ``outputs/logs/run_report.log``)
- ``bank_marketing/src/experiments/run_models.py`` (console only)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

DEFAULT_LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"


def _resolve_log_path(log_file: Union[str, Path], logger_name: Optional[str]) -> Path:
    """Directories (existing, or spelled with a trailing slash) get ``<name>.log``."""
    path = Path(log_file)
    if path.is_dir() or str(log_file).endswith(("/", "\\")):
        stem = (logger_name or "root").replace("/", "_")
        path = path / f"{stem}.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    return handler


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    logger_name: Optional[str] = None,
    *,
    force: bool = True,
    capture_warnings: bool = True,
) -> logging.Logger:
    """Attach console (and optional file) handlers to a logger and return it.

    Parameters
    ----------
    level:
        Level for the logger and its handlers.
    log_file:
        File to append to; a directory gets ``<logger_name or root>.log``.
    logger_name:
        ``None`` configures the root logger, which every
        ``bank_marketing.src`` module propagates to.
    force:
        Close and detach handlers already on the logger.
    capture_warnings:
        Send ``warnings.warn`` output (sklearn binning / convergence
        warnings) through logging.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    if force:
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()

    logger.addHandler(_handler(logging.StreamHandler(stream=sys.stderr), level))
    if log_file is not None:
        path = _resolve_log_path(log_file, logger_name)
        logger.addHandler(_handler(logging.FileHandler(path, encoding="utf-8"), level))

    # Named loggers would otherwise print twice through root.
    if logger_name is not None:
        logger.propagate = False

    logging.captureWarnings(capture_warnings)
    return logger


__all__ = ["configure_logging", "DEFAULT_LOG_FORMAT"]
