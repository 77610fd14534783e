"""Text rendering for the terminal UI.

Every function returns a list of ``(text, style)`` lines. The curses window
maps style names to attributes; keeping this module free of curses makes the
layout testable.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from worldclock.core.clock import Clock
from worldclock.core.constants import MIN_QUERY_LENGTH
from worldclock.core.types import ViewState
from worldclock.services.city_catalog import normalize_query
from worldclock.ui.app_model import ClockAppModel

Line = Tuple[str, str]

MIN_CARD_WIDTH = 30
MAX_VISIBLE_RESULTS = 10

BORDER = {"tl": "╭", "tr": "╮", "bl": "╰", "br": "╯", "h": "─", "v": "│"}


def calculate_columns(num_clocks: int, width: int) -> int:
    """Number of grid columns for the given clock count and terminal width."""
    max_cols = max(1, width // MIN_CARD_WIDTH)

    if num_clocks <= 2:
        return max(1, min(num_clocks, max_cols))
    if num_clocks <= 4 and max_cols >= 2:
        return 2
    if num_clocks <= 6 and max_cols >= 3:
        return 3
    if max_cols >= 4:
        return 4
    return max_cols


def _fit(text: str, width: int) -> str:
    if len(text) > width:
        text = text[: max(0, width - 1)] + "…" if width > 0 else ""
    return text.center(width)


def render_clock_card(clock: Clock, card_width: int, now: Optional[datetime] = None) -> List[str]:
    """Render one bordered clock card as equal-width text rows."""
    inner = card_width - 2
    v = BORDER["v"]
    return [
        BORDER["tl"] + BORDER["h"] * inner + BORDER["tr"],
        v + _fit(clock.name.upper(), inner) + v,
        v + " " * inner + v,
        v + _fit(clock.format_time(now), inner) + v,
        v + _fit(clock.format_date_with_offset(now), inner) + v,
        BORDER["bl"] + BORDER["h"] * inner + BORDER["br"],
    ]


# Style of each card row, top to bottom
CARD_ROW_STYLES = ["border", "title", "border", "time", "dim", "border"]


def render_clocks(clocks: List[Clock], width: int, now: Optional[datetime] = None) -> List[Line]:
    """Arrange clock cards in a grid."""
    if not clocks:
        return [("No clocks configured", "dim")]

    cols = calculate_columns(len(clocks), width)
    card_width = max(MIN_CARD_WIDTH - 2, width // cols - 1)
    cards = [render_clock_card(clock, card_width, now) for clock in clocks]

    lines: List[Line] = []
    for start in range(0, len(cards), cols):
        row = cards[start : start + cols]
        lines.append(("", "normal"))
        for idx, style in enumerate(CARD_ROW_STYLES):
            lines.append((" " + " ".join(card[idx] for card in row), style))
    return lines


def render_add(model: ClockAppModel) -> List[Line]:
    lines: List[Line] = [("", "normal"), ("Add City", "title"), ("", "normal")]

    if not model.catalog.is_ready():
        load_error = model.catalog.get_error()
        if load_error is not None:
            lines.append((f"Error loading city database: {load_error}", "error"))
        else:
            lines.append(("Loading city database...", "normal"))
        lines += [("", "normal"), ("Press ESC to cancel", "dim")]
        return lines

    lines.append(("Search city (min 3 characters):", "normal"))
    lines.append(("> " + model.search_query + "_", "input"))
    lines.append(("", "normal"))

    if len(normalize_query(model.search_query)) < MIN_QUERY_LENGTH:
        lines.append(("Type at least 3 characters to search...", "dim"))
    elif not model.search_results:
        lines.append(("No cities found", "dim"))
    else:
        lines.append((f"Results ({len(model.search_results)}):", "normal"))
        start = 0
        if model.selected_result >= MAX_VISIBLE_RESULTS:
            start = model.selected_result - MAX_VISIBLE_RESULTS + 1
        end = min(start + MAX_VISIBLE_RESULTS, len(model.search_results))

        for idx in range(start, end):
            city = model.search_results[idx]
            text = f"  {city.name}, {city.country_code} ({city.timezone})"
            if idx == model.selected_result:
                lines.append(("> " + text, "highlight"))
            else:
                lines.append(("  " + text, "normal"))

    lines += [("", "normal"), ("↑/↓: Navigate | Enter: Select | ESC: Cancel", "dim")]
    return lines


def render_delete(model: ClockAppModel) -> List[Line]:
    lines: List[Line] = [("", "normal"), ("Delete Cities", "title"), ("", "normal")]

    for idx, name in enumerate(model.delete_list):
        if model.is_city_protected(name):
            text, style = f"  [ ] {name} (protected)", "dim"
        else:
            mark = "x" if idx in model.delete_selected else " "
            text, style = f"  [{mark}] {name}", "normal"

        if idx == model.delete_cursor:
            lines.append(("> " + text, "highlight"))
        else:
            lines.append(("  " + text, style))

    lines += [("", "normal"), ("↑/↓: Navigate | Space: Toggle | Enter: Delete | ESC: Cancel", "dim")]
    return lines


def render_confirm(model: ClockAppModel) -> List[Line]:
    return [
        ("", "normal"),
        ("Confirm", "title"),
        ("", "normal"),
        (model.confirm_message, "normal"),
        ("", "normal"),
        ("y: Yes | n/ESC: No", "dim"),
    ]


def render_body(model: ClockAppModel, width: int, now: Optional[datetime] = None) -> List[Line]:
    """Lines of the current view, top-aligned."""
    if model.state == ViewState.ADD:
        return render_add(model)
    if model.state == ViewState.DELETE:
        return render_delete(model)
    if model.state == ViewState.CONFIRM:
        return render_confirm(model)
    return render_clocks(model.clocks, width, now)


def render_footer(model: ClockAppModel) -> List[Line]:
    """Status line (if any) and command bar, drawn at the bottom."""
    lines: List[Line] = []
    if model.error:
        lines.append((f"Error: {model.error}", "error"))

    if model.state != ViewState.MAIN:
        return lines

    if model.catalog.is_ready():
        commands = "a: Add City | d: Delete Cities | q: Quit"
    elif model.catalog.get_error() is not None:
        commands = "City database unavailable | d: Delete Cities | q: Quit"
    else:
        commands = "Loading city database... | d: Delete Cities | q: Quit"
    lines.append((commands, "bar"))
    return lines
