"""Search package exports.

Combines fuzzy scoring, the snapshot index, and query debouncing in one
import surface.
"""

from __future__ import annotations

from .debounce import DEFAULT_DEBOUNCE_SECONDS, QueryDebouncer
from .fuzzy import fuzzy_score, rank_candidates, substring_score
from .index import DEFAULT_SEARCH_LIMIT, SearchIndex, SearchMatch

__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "DEFAULT_SEARCH_LIMIT",
    "QueryDebouncer",
    "SearchIndex",
    "SearchMatch",
    "fuzzy_score",
    "rank_candidates",
    "substring_score",
]
