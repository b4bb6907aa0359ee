"""Search-and-select state machine behind the interactive picker.

The picker has two focus modes. In search mode keystrokes edit the query; in
list mode the arrow keys move a cursor over the filtered entries plus a
trailing "Create new" option. Everything here is pure:

    - transition(state, event, view) -> Transition
    - derive_view(state, entries, recents) -> SelectionView

``derive_view`` also normalizes the state it is given (cursor clamped to the
option list, scroll window following the cursor), so the state stored on a
view always satisfies the scrolling rules. ``SelectionEngine`` strings the two
together for the terminal driver.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum

from kai.core.config import RecentDirectory
from kai.core.fuzzy import DEFAULT_THRESHOLD, fuzzy_filter
from kai.core.scanner import DirectoryEntry

VISIBLE_ROWS = 15


class KeyKind(Enum):
    CHAR = "char"
    ESCAPE = "escape"
    TAB = "tab"
    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    BACKSPACE = "backspace"
    INTERRUPT = "interrupt"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class KeyEvent:
    kind: KeyKind
    char: str = ""

    @classmethod
    def text(cls, char: str) -> KeyEvent:
        return cls(KeyKind.CHAR, char)


class ActionKind(Enum):
    COMMIT = "commit"
    CREATE = "create"
    CANCEL = "cancel"


@dataclass(frozen=True, slots=True)
class Action:
    """Terminal outcome of a picker session."""

    kind: ActionKind
    entry: DirectoryEntry | None = None


class CreateNewOption:
    """Marker for the synthetic last option of the list."""

    _instance: CreateNewOption | None = None

    def __new__(cls) -> CreateNewOption:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CREATE_NEW"


CREATE_NEW = CreateNewOption()

Option = DirectoryEntry | CreateNewOption


@dataclass(frozen=True, slots=True)
class SelectionState:
    search_query: str = ""
    is_search_focused: bool = True
    selected_index: int = 0
    scroll_offset: int = 0


@dataclass(frozen=True, slots=True)
class Transition:
    state: SelectionState
    action: Action | None = None


@dataclass(frozen=True)
class SelectionView:
    """Everything the renderer needs for one frame."""

    state: SelectionState
    filtered: tuple[DirectoryEntry, ...]

    @property
    def options(self) -> tuple[Option, ...]:
        return (*self.filtered, CREATE_NEW)

    @property
    def max_index(self) -> int:
        return len(self.filtered)

    @property
    def visible(self) -> list[tuple[int, DirectoryEntry]]:
        start = self.state.scroll_offset
        window = self.filtered[start : start + VISIBLE_ROWS]
        return [(start + offset, entry) for offset, entry in enumerate(window)]

    @property
    def has_more_above(self) -> bool:
        return self.state.scroll_offset > 0

    @property
    def has_more_below(self) -> bool:
        return self.state.scroll_offset + VISIBLE_ROWS < len(self.filtered)

    @property
    def no_results(self) -> bool:
        return bool(self.state.search_query) and not self.filtered

    def option_at(self, index: int) -> Option:
        return self.options[index]

    def is_selected(self, index: int) -> bool:
        return not self.state.is_search_focused and self.state.selected_index == index

    @property
    def create_selected(self) -> bool:
        return self.is_selected(self.max_index)


# ---------------------------------------------------------------------------
# Derived data
# ---------------------------------------------------------------------------


def search_key(entry: DirectoryEntry) -> str:
    if entry.is_subdirectory and entry.parent_name:
        return f"{entry.parent_name}/{entry.name}"
    return entry.name


def order_entries(
    entries: Iterable[DirectoryEntry], recents: Iterable[RecentDirectory]
) -> list[DirectoryEntry]:
    """Recent entries first (newest first), then the rest in scan order."""
    accessed = {recent.path: recent.accessed_at for recent in recents}
    recent_entries: list[DirectoryEntry] = []
    other_entries: list[DirectoryEntry] = []
    for entry in entries:
        (recent_entries if entry.path in accessed else other_entries).append(entry)
    recent_entries.sort(key=lambda entry: accessed[entry.path], reverse=True)
    return recent_entries + other_entries


def filter_entries(
    ordered: Sequence[DirectoryEntry], query: str, threshold: float = DEFAULT_THRESHOLD
) -> list[DirectoryEntry]:
    if not query:
        return list(ordered)
    matches = fuzzy_filter(
        query,
        ordered,
        keys=lambda entry: (search_key(entry), entry.name, entry.path),
        threshold=threshold,
    )
    return [entry for entry, _ in matches]


def _normalize(state: SelectionState, max_index: int) -> SelectionState:
    selected = min(max(state.selected_index, 0), max(max_index, 0))
    scroll = max(state.scroll_offset, 0)
    # The window only follows the cursor while the cursor is shown.
    if not state.is_search_focused:
        if selected < scroll:
            scroll = selected
        elif selected >= scroll + VISIBLE_ROWS:
            scroll = selected - VISIBLE_ROWS + 1
    if selected == state.selected_index and scroll == state.scroll_offset:
        return state
    return replace(state, selected_index=selected, scroll_offset=scroll)


def build_view(
    state: SelectionState,
    ordered: Sequence[DirectoryEntry],
    threshold: float = DEFAULT_THRESHOLD,
    filtered: Sequence[DirectoryEntry] | None = None,
) -> SelectionView:
    """Like ``derive_view`` for entries that are already in display order."""
    if filtered is None:
        filtered = filter_entries(ordered, state.search_query, threshold)
    return SelectionView(state=_normalize(state, len(filtered)), filtered=tuple(filtered))


def derive_view(
    state: SelectionState,
    entries: Iterable[DirectoryEntry],
    recents: Iterable[RecentDirectory],
    threshold: float = DEFAULT_THRESHOLD,
) -> SelectionView:
    return build_view(state, order_entries(entries, recents), threshold)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def _with_query(state: SelectionState, query: str) -> SelectionState:
    # The cursor is clamped against the new result list by build_view.
    return replace(state, search_query=query, scroll_offset=0)


def _focus_list(state: SelectionState) -> SelectionState:
    return replace(state, is_search_focused=False, selected_index=0)


def _search_transition(state: SelectionState, event: KeyEvent, view: SelectionView) -> Transition:
    query = state.search_query
    count = len(view.filtered)

    if event.kind is KeyKind.ESCAPE:
        if query:
            return Transition(_with_query(state, ""))
        return Transition(state, Action(ActionKind.CANCEL))
    if event.kind in (KeyKind.DOWN, KeyKind.TAB):
        if view.no_results:
            return Transition(state)
        return Transition(_focus_list(state))
    if event.kind is KeyKind.ENTER:
        if count == 1:
            return Transition(state, Action(ActionKind.COMMIT, view.filtered[0]))
        if count >= 2:
            return Transition(_focus_list(state))
        return Transition(state)
    if event.kind is KeyKind.BACKSPACE:
        if not query:
            return Transition(state)
        return Transition(_with_query(state, query[:-1]))
    if event.kind is KeyKind.CHAR and event.char:
        return Transition(_with_query(state, query + event.char))
    return Transition(state)


def _list_transition(state: SelectionState, event: KeyEvent, view: SelectionView) -> Transition:
    selected = state.selected_index

    if event.kind is KeyKind.ESCAPE:
        return Transition(replace(state, is_search_focused=True))
    if event.kind is KeyKind.UP:
        if selected > 0:
            return Transition(replace(state, selected_index=selected - 1))
        return Transition(replace(state, is_search_focused=True))
    if event.kind is KeyKind.DOWN:
        if selected < view.max_index:
            return Transition(replace(state, selected_index=selected + 1))
        return Transition(state)
    if event.kind is KeyKind.ENTER:
        option = view.option_at(selected)
        if isinstance(option, CreateNewOption):
            return Transition(state, Action(ActionKind.CREATE))
        return Transition(state, Action(ActionKind.COMMIT, option))
    if event.kind is KeyKind.CHAR and event.char.isprintable() and event.char:
        focused = replace(state, is_search_focused=True)
        return Transition(_with_query(focused, state.search_query + event.char))
    return Transition(state)


def transition(state: SelectionState, event: KeyEvent, view: SelectionView) -> Transition:
    """Apply one key event. ``view`` must be the view derived from ``state``."""
    if event.kind is KeyKind.INTERRUPT:
        return Transition(state, Action(ActionKind.CANCEL))
    if state.is_search_focused:
        return _search_transition(state, event, view)
    return _list_transition(state, event, view)


class SelectionEngine:
    """Holds the current view and feeds key events through ``transition``."""

    def __init__(
        self,
        entries: Iterable[DirectoryEntry],
        recents: Iterable[RecentDirectory],
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        self._ordered = order_entries(entries, recents)
        self._threshold = threshold
        self._view = build_view(SelectionState(), self._ordered, threshold)

    @property
    def view(self) -> SelectionView:
        return self._view

    @property
    def state(self) -> SelectionState:
        return self._view.state

    def dispatch(self, event: KeyEvent) -> Action | None:
        result = transition(self._view.state, event, self._view)
        same_query = result.state.search_query == self._view.state.search_query
        self._view = build_view(
            result.state,
            self._ordered,
            self._threshold,
            filtered=self._view.filtered if same_query else None,
        )
        return result.action
