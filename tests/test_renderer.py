"""Tests for the text renderer and key decoding."""

import curses
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from worldclock.core.clock import Clock
from worldclock.core.errors import DownloadError
from worldclock.core.types import City, ViewState
from worldclock.ui.main_window import decode_key
from worldclock.ui.renderer import (
    MAX_VISIBLE_RESULTS,
    calculate_columns,
    render_add,
    render_body,
    render_clock_card,
    render_clocks,
    render_delete,
    render_footer,
)

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_model(state=ViewState.MAIN, ready=True, error=None):
    model = MagicMock()
    model.state = state
    model.error = None
    model.catalog.is_ready.return_value = ready
    model.catalog.get_error.return_value = error
    model.search_query = ""
    model.search_results = []
    model.selected_result = 0
    model.delete_list = []
    model.delete_selected = set()
    model.delete_cursor = 0
    model.is_city_protected.side_effect = lambda name: name == "Local"
    return model


@pytest.mark.parametrize(
    "num_clocks,width,expected",
    [
        (1, 120, 1),
        (2, 120, 2),
        (2, 40, 1),
        (3, 120, 2),
        (4, 120, 2),
        (5, 120, 3),
        (6, 120, 3),
        (7, 120, 4),
        (12, 160, 4),
        (7, 70, 2),
        (5, 20, 1),
        (0, 120, 1),
    ],
)
def test_calculate_columns(num_clocks, width, expected):
    assert calculate_columns(num_clocks, width) == expected


def test_clock_card():
    rows = render_clock_card(Clock("Tokyo", "Asia/Tokyo"), 30, NOW)

    assert len(rows) == 6
    assert all(len(row) == 30 for row in rows)
    assert "TOKYO" in rows[1]
    assert "21:00:00" in rows[3]
    assert "2026-01-15 - UTC+09:00" in rows[4]


def test_clock_card_truncates_long_name():
    rows = render_clock_card(Clock("A" * 60, "UTC"), 30, NOW)
    assert len(rows[1]) == 30
    assert "…" in rows[1]


def test_render_clocks_grid():
    clocks = [Clock(name, "UTC") for name in ("One", "Two", "Three")]
    lines = render_clocks(clocks, 120, NOW)

    # Two rows of cards, each a spacer plus six card rows
    assert len(lines) == 14
    assert "ONE" in lines[2][0] and "TWO" in lines[2][0]
    assert "THREE" in lines[9][0]


def test_render_clocks_empty():
    assert render_clocks([], 80) == [("No clocks configured", "dim")]


class TestFooter:
    def test_ready(self):
        lines = render_footer(make_model())
        assert lines == [("a: Add City | d: Delete Cities | q: Quit", "bar")]

    def test_loading(self):
        lines = render_footer(make_model(ready=False))
        assert lines[-1][0].startswith("Loading city database...")

    def test_unavailable(self):
        lines = render_footer(make_model(ready=False, error=DownloadError("offline")))
        assert lines[-1][0].startswith("City database unavailable")

    def test_error_line(self):
        model = make_model()
        model.error = "no cities selected"
        lines = render_footer(model)
        assert lines[0] == ("Error: no cities selected", "error")

    def test_no_command_bar_outside_main(self):
        assert render_footer(make_model(state=ViewState.ADD)) == []


class TestAddView:
    def test_prompt_for_short_query(self):
        model = make_model(state=ViewState.ADD)
        model.search_query = "be"
        texts = [text for text, _ in render_add(model)]
        assert "> be_" in texts
        assert "Type at least 3 characters to search..." in texts

    def test_query_length_counts_case_folded_text(self):
        """'aß' folds to 'ass', so its results are shown like any 3-letter query."""
        model = make_model(state=ViewState.ADD)
        model.search_query = "aß"
        model.search_results = [City("Kassel", "DE", "Europe/Berlin")]

        lines = render_add(model)
        texts = [text for text, _ in lines]
        assert "Type at least 3 characters to search..." not in texts
        assert ("> " + "  Kassel, DE (Europe/Berlin)", "highlight") in lines

    def test_no_results(self):
        model = make_model(state=ViewState.ADD)
        model.search_query = "zzz"
        assert "No cities found" in [text for text, _ in render_add(model)]

    def test_selected_result_highlighted(self):
        model = make_model(state=ViewState.ADD)
        model.search_query = "ber"
        model.search_results = [City("Berlin", "DE", "Europe/Berlin"), City("Bern", "CH", "Europe/Zurich")]
        model.selected_result = 1

        lines = render_add(model)
        highlighted = [text for text, style in lines if style == "highlight"]
        assert highlighted == ["> " + "  Bern, CH (Europe/Zurich)"]

    def test_results_scroll(self):
        model = make_model(state=ViewState.ADD)
        model.search_query = "city"
        model.search_results = [City(f"City {i}", "XX", "UTC") for i in range(20)]
        model.selected_result = 15

        texts = [text for text, _ in render_add(model)]
        shown = [t for t in texts if "City " in t]
        assert len(shown) == MAX_VISIBLE_RESULTS
        assert "City 15" in shown[-1]

    def test_loading_catalog(self):
        model = make_model(state=ViewState.ADD, ready=False)
        assert "Loading city database..." in [text for text, _ in render_add(model)]


def test_delete_view_marks():
    model = make_model(state=ViewState.DELETE)
    model.delete_list = ["Local", "Tokyo", "Paris"]
    model.delete_selected = {2}
    model.delete_cursor = 1

    texts = [text for text, _ in render_delete(model)]
    assert "    [ ] Local (protected)" in texts
    assert "> " + "  [ ] Tokyo" in texts
    assert "    [x] Paris" in texts


def test_render_body_dispatch():
    model = make_model(state=ViewState.CONFIRM)
    model.confirm_message = "Delete 'Tokyo'? (y/n)"
    assert ("Delete 'Tokyo'? (y/n)", "normal") in render_body(model, 80)


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, None),
        ("a", "a"),
        (" ", " "),
        ("\n", "enter"),
        ("\x1b", "esc"),
        ("\x7f", "backspace"),
        ("\x03", "ctrl+c"),
        ("ü", "ü"),
        ("\x01", None),
        (curses.KEY_UP, "up"),
        (curses.KEY_RESIZE, "resize"),
    ],
)
def test_decode_key(raw, expected):
    assert decode_key(raw) == expected
