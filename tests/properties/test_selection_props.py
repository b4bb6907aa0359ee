"""Property-based tests for the selection engine using Hypothesis.

These tests drive the engine with arbitrary key sequences and check:
- The cursor stays within [0, max_index]
- The scroll window always contains the cursor in list mode
- Filtered entries are a subset of the input, in a stable order for an empty query
"""
from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from kai.core.scanner import DirectoryEntry
from kai.core.selection import VISIBLE_ROWS, KeyEvent, KeyKind, SelectionEngine

# === Strategies ===

name_strategy = st.text(alphabet="abcdez-", min_size=1, max_size=8)

key_strategy = st.one_of(
    st.sampled_from(
        [
            KeyEvent(KeyKind.UP),
            KeyEvent(KeyKind.DOWN),
            KeyEvent(KeyKind.TAB),
            KeyEvent(KeyKind.ENTER),
            KeyEvent(KeyKind.ESCAPE),
            KeyEvent(KeyKind.BACKSPACE),
            KeyEvent(KeyKind.OTHER),
        ]
    ),
    st.sampled_from("abcdez").map(KeyEvent.text),
)


def _entries(names: list[str]) -> list[DirectoryEntry]:
    return [
        DirectoryEntry(
            name=name,
            path=f"/p/{index}-{name}",
            is_project=False,
            has_subdirectories=False,
            last_modified=0.0,
        )
        for index, name in enumerate(names)
    ]


# === Property Tests ===


@given(names=st.lists(name_strategy, max_size=40), keys=st.lists(key_strategy, max_size=60))
@settings(max_examples=200)
def test_cursor_and_window_invariants(names: list[str], keys: list[KeyEvent]) -> None:
    entries = _entries(names)
    engine = SelectionEngine(entries, [])

    for key in keys:
        action = engine.dispatch(key)
        view = engine.view
        state = view.state

        assert 0 <= state.selected_index <= view.max_index
        assert state.scroll_offset >= 0
        if not state.is_search_focused:
            assert state.scroll_offset <= state.selected_index
            assert state.selected_index < state.scroll_offset + VISIBLE_ROWS
        assert set(view.filtered) <= set(entries)
        if not state.search_query:
            assert list(view.filtered) == entries
        if action is not None:
            break
