"""Property-based tests for the recency list using Hypothesis.

These tests verify core invariants of add_recent:
- The list never exceeds its capacity
- Paths stay unique
- The visited path is always first
- Timestamps never increase towards the tail
"""
from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from kai.core.recents import add_recent

# === Strategies ===

path_strategy = st.sampled_from([f"/work/p{i}" for i in range(12)])
visit_strategy = st.tuples(path_strategy, st.integers(min_value=0, max_value=10**13))
limit_strategy = st.integers(min_value=1, max_value=15)


# === Property Tests ===


@given(visits=st.lists(visit_strategy, max_size=40), limit=limit_strategy)
@settings(max_examples=200)
def test_recency_invariants(visits: list[tuple[str, int]], limit: int) -> None:
    recents = []
    for path, stamp in visits:
        recents = add_recent(recents, path, path.rsplit("/", 1)[-1], accessed_at=stamp, limit=limit)

        assert len(recents) <= limit
        assert recents[0].path == path
        paths = [entry.path for entry in recents]
        assert len(paths) == len(set(paths))
        stamps = [entry.accessed_at for entry in recents]
        assert stamps == sorted(stamps, reverse=True)


@given(visits=st.lists(visit_strategy, min_size=1, max_size=40))
@settings(max_examples=100)
def test_unbounded_list_keeps_every_distinct_path(visits: list[tuple[str, int]]) -> None:
    recents = []
    for path, stamp in visits:
        recents = add_recent(recents, path, "name", accessed_at=stamp, limit=100)

    assert {entry.path for entry in recents} == {path for path, _ in visits}
