"""Rich rendering of the picker state.

Builds one renderable per frame from a ``SelectionView``: a title, the search
line, a three-column table of matches and a key hint footer.
"""

from __future__ import annotations

import time

from rich import box
from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from kai.core.scanner import DirectoryEntry, format_time_ago
from kai.core.selection import SelectionView

COL_SELECTOR = 4
COL_NAME = 50
COL_TIME = 18

TITLE = "KAI PROJECT SEARCH"
FOOTER = "↑↓: Navigate   Enter: Select   ESC: Cancel"
MORE_ABOVE = "↑ More above..."
MORE_BELOW = "↓ More below..."
NO_RESULTS = "No directories found"
CREATE_LABEL = "+ Create new"


def _selector(selected: bool) -> Text:
    return Text(" >" if selected else "  ", style="bold cyan" if selected else "")


def _name_cell(entry: DirectoryEntry, selected: bool) -> Text:
    name_style = "bold cyan" if selected else ""
    text = Text(no_wrap=True, overflow="ellipsis")
    if entry.is_subdirectory and entry.parent_name:
        text.append(f"{entry.parent_name}/", style="dim cyan" if selected else "dim")
    text.append(entry.name, style=name_style)
    return text


def _search_line(view: SelectionView) -> Text:
    line = Text("Search: ", style="dim")
    line.append(view.state.search_query)
    if view.state.is_search_focused:
        line.append("█", style="cyan")
    return line


def _build_table(view: SelectionView, now: float) -> Table:
    table = Table(
        box=box.SQUARE,
        border_style="dim",
        header_style="dim",
        show_edge=True,
        pad_edge=False,
    )
    table.add_column("", width=COL_SELECTOR, no_wrap=True)
    table.add_column("Project", width=COL_NAME, no_wrap=True, overflow="ellipsis")
    table.add_column("Last Modified", width=COL_TIME, no_wrap=True)

    if view.no_results:
        table.add_row("", Text(NO_RESULTS, style="dim"), "")
        return table

    if view.has_more_above:
        table.add_row("", Text(MORE_ABOVE, style="dim"), "")

    rows = view.visible
    for position, (index, entry) in enumerate(rows):
        selected = view.is_selected(index)
        is_last = position == len(rows) - 1 and not view.has_more_below
        table.add_row(
            _selector(selected),
            _name_cell(entry, selected),
            Text(format_time_ago(entry.last_modified, now), style="bold cyan" if selected else ""),
            end_section=is_last,
        )

    if view.has_more_below:
        table.add_row("", Text(MORE_BELOW, style="dim"), "", end_section=True)

    create_selected = view.create_selected
    table.add_row(
        _selector(create_selected),
        Text(CREATE_LABEL, style="bold cyan" if create_selected else "green"),
        "",
    )
    return table


def render_view(view: SelectionView, now: float | None = None) -> RenderableType:
    """Render one frame of the picker."""
    current = time.time() if now is None else now
    return Group(
        Text(TITLE, style="bold cyan"),
        Text(""),
        _search_line(view),
        _build_table(view, current),
        Text(""),
        Text(FOOTER, style="dim"),
    )
