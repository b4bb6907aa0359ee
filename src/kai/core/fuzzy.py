"""Approximate string matching for the picker search box.

Scores are in ``[0, 1]`` where ``0`` is an exact match. A query scores by its
best alignment against any substring of the candidate: the fraction of query
characters that needed an edit, plus a small penalty for how far into the
candidate the match starts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")

DEFAULT_THRESHOLD = 0.3
LOCATION_DISTANCE = 100


def _location_penalty(start: int) -> float:
    return start / LOCATION_DISTANCE


def _best_alignment_score(query: str, text: str) -> float:
    """Edit-distance alignment of ``query`` against every substring of ``text``."""
    m = len(query)
    prev = list(range(m + 1))
    prev_start = [0] * (m + 1)
    best = float(prev[m]) / m

    for j, ch in enumerate(text, start=1):
        cur = [0] * (m + 1)
        cur_start = [j] * (m + 1)
        for i in range(1, m + 1):
            cost = prev[i - 1] + (query[i - 1] != ch)
            start = prev_start[i - 1]
            if prev[i] + 1 < cost:
                cost = prev[i] + 1
                start = prev_start[i]
            if cur[i - 1] + 1 < cost:
                cost = cur[i - 1] + 1
                start = cur_start[i - 1]
            cur[i] = cost
            cur_start[i] = start
        score = cur[m] / m + _location_penalty(cur_start[m])
        if score < best:
            best = score
        prev, prev_start = cur, cur_start

    return best


def match_score(query: str, text: str) -> float:
    """Score ``text`` against ``query``; lower is better, capped at 1.0."""
    if not query:
        return 0.0
    query_folded = query.casefold()
    text_folded = text.casefold()

    idx = text_folded.find(query_folded)
    if idx >= 0:
        return min(1.0, _location_penalty(idx))
    return min(1.0, _best_alignment_score(query_folded, text_folded))


def _error_lower_bound(query_folded: str, text_folded: str) -> float:
    available = set(text_folded)
    missing = sum(1 for ch in query_folded if ch not in available)
    return missing / len(query_folded)


def fuzzy_filter(
    query: str,
    items: Iterable[T],
    keys: Callable[[T], Sequence[str]],
    threshold: float = DEFAULT_THRESHOLD,
) -> list[tuple[T, float]]:
    """Keep items whose best key scores within ``threshold``, best first.

    Items with equal scores keep their input order.
    """
    if not query:
        return [(item, 0.0) for item in items]

    query_folded = query.casefold()
    scored: list[tuple[float, int, T]] = []
    for position, item in enumerate(items):
        best: float | None = None
        for key in keys(item):
            if _error_lower_bound(query_folded, key.casefold()) > threshold:
                continue
            score = match_score(query, key)
            if best is None or score < best:
                best = score
            if best == 0.0:
                break
        if best is not None and best <= threshold:
            scored.append((best, position, item))

    scored.sort(key=lambda row: (row[0], row[1]))
    return [(item, score) for score, _, item in scored]
