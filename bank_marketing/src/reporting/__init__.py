"""Markdown rendering of the analysis report."""

from __future__ import annotations

from .markdown_report import render_report, write_report

__all__ = ["render_report", "write_report"]
