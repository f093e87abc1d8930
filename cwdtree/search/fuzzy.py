"""Substring and subsequence scoring for file-name search."""

from __future__ import annotations

import heapq
from collections.abc import Iterator

NAME_MATCH_BASE_SCORE = 20_000
PATH_MATCH_BASE_SCORE = 10_000


def fuzzy_score(query: str, candidate: str) -> int | None:
    """Score ``query`` as an in-order subsequence of ``candidate``.

    Contiguous runs and matches at word boundaries score higher; gaps and long
    candidates cost points. Returns ``None`` when a character is missing.
    """
    if not query:
        return 0
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in "/_- .":
            score += 35
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score


def substring_score(query_folded: str, name_folded: str, label_folded: str) -> int | None:
    """Score a case-folded substring hit, preferring hits in the base name."""
    idx = name_folded.find(query_folded)
    if idx >= 0:
        return NAME_MATCH_BASE_SCORE - (idx * 50) - len(name_folded)
    idx = label_folded.find(query_folded)
    if idx >= 0:
        return PATH_MATCH_BASE_SCORE - (idx * 50) - len(label_folded)
    return None


def rank_candidates(
    query: str,
    names_folded: list[str],
    labels: list[str],
    labels_folded: list[str],
    limit: int = 200,
) -> list[tuple[int, int]]:
    """Return ``(candidate_index, score)`` pairs best first.

    Substring hits win; subsequence scoring only runs when no candidate
    contains the query verbatim. Ties break on label text, then index.
    """
    if len(names_folded) != len(labels) or len(labels_folded) != len(labels):
        raise ValueError("names, labels, and folded labels must have the same length")

    max_results = max(1, limit)
    query_folded = query.casefold()

    def iter_substring_matches() -> Iterator[tuple[int, str, int]]:
        for idx, label_folded in enumerate(labels_folded):
            score = substring_score(query_folded, names_folded[idx], label_folded)
            if score is None:
                continue
            yield (-score, labels[idx], idx)

    ranked = heapq.nsmallest(max_results, iter_substring_matches())
    if ranked:
        return [(idx, -neg_score) for neg_score, _label, idx in ranked]

    def iter_fuzzy_matches() -> Iterator[tuple[int, str, int]]:
        for idx, label in enumerate(labels):
            score = fuzzy_score(query, label)
            if score is None:
                continue
            yield (-score, label, idx)

    ranked = heapq.nsmallest(max_results, iter_fuzzy_matches())
    return [(idx, -neg_score) for neg_score, _label, idx in ranked]


__all__ = [
    "NAME_MATCH_BASE_SCORE",
    "PATH_MATCH_BASE_SCORE",
    "fuzzy_score",
    "substring_score",
    "rank_candidates",
]
