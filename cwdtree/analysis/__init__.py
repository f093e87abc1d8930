"""File analysis: the default symbol analyzer and the per-path report cache."""

from __future__ import annotations

from .cache import AnalysisCache, AnalysisEntry, AnalysisError, Analyzer
from .symbols import SourceReport, SymbolEntry, analyze_source, language_for_path

__all__ = [
    "AnalysisCache",
    "AnalysisEntry",
    "AnalysisError",
    "Analyzer",
    "SourceReport",
    "SymbolEntry",
    "analyze_source",
    "language_for_path",
]
