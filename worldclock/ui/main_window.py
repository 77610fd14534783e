"""Curses main window: input loop and painting."""

import curses
import locale
import os
import time
from typing import Dict, List, Optional, Union

from loguru import logger

from worldclock.ui.app_model import ClockAppModel
from worldclock.ui.renderer import Line, render_body, render_footer

INPUT_TIMEOUT_MS = 200

SPECIAL_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_ENTER: "enter",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_DC: "delete",
}

CONTROL_CHARS = {
    "\n": "enter",
    "\r": "enter",
    "\x1b": "esc",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x03": "ctrl+c",
}


def decode_key(key: Union[int, str, None]) -> Optional[str]:
    """Translate a ``get_wch`` result into a key name understood by the model."""
    if key is None:
        return None
    if isinstance(key, int):
        if key == curses.KEY_RESIZE:
            return "resize"
        return SPECIAL_KEYS.get(key)
    if key in CONTROL_CHARS:
        return CONTROL_CHARS[key]
    if len(key) == 1 and key.isprintable():
        return key
    return None


class MainWindow:
    """Draws the model and feeds it key presses."""

    def __init__(self, model: ClockAppModel):
        self.model = model
        self._styles: Dict[str, int] = {}

    def _init_styles(self) -> None:
        colors = {
            "title": curses.A_BOLD,
            "time": curses.A_BOLD,
            "highlight": curses.A_BOLD,
            "error": curses.A_BOLD,
            "bar": curses.A_REVERSE,
            "dim": curses.A_DIM,
        }
        if curses.has_colors():
            curses.start_color()
            try:
                curses.use_default_colors()
                background = -1
            except curses.error:
                background = curses.COLOR_BLACK
            pairs = {
                "title": curses.COLOR_CYAN,
                "time": curses.COLOR_MAGENTA,
                "highlight": curses.COLOR_MAGENTA,
                "error": curses.COLOR_RED,
                "border": curses.COLOR_BLUE,
            }
            for idx, (style, color) in enumerate(pairs.items(), start=1):
                curses.init_pair(idx, color, background)
                colors[style] = colors.get(style, 0) | curses.color_pair(idx)
        self._styles = colors

    def _read_key(self, stdscr) -> Optional[str]:
        try:
            return decode_key(stdscr.get_wch())
        except curses.error:
            # Input timeout
            return None

    def _paint(self, stdscr) -> None:
        height, width = stdscr.getmaxyx()
        stdscr.erase()

        footer = render_footer(self.model)
        body = render_body(self.model, width)
        body_rows = max(0, height - len(footer))

        self._draw_lines(stdscr, 0, body[:body_rows], width)
        self._draw_lines(stdscr, max(0, height - len(footer)), footer, width)
        stdscr.refresh()

    def _draw_lines(self, stdscr, top: int, lines: List[Line], width: int) -> None:
        height, _ = stdscr.getmaxyx()
        for offset, (text, style) in enumerate(lines):
            y = top + offset
            if y >= height:
                break
            if style == "bar":
                text = text.ljust(width)
            try:
                # Off-screen writes raise
                stdscr.addnstr(y, 0, text, max(0, width - 1), self._styles.get(style, 0))
            except curses.error:
                pass

    def run(self, stdscr) -> None:
        """Main loop, meant to be called through ``curses.wrapper``."""
        stdscr.timeout(INPUT_TIMEOUT_MS)
        stdscr.keypad(True)
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        self._init_styles()

        last_tick = 0.0
        while not self.model.quitting:
            now = time.monotonic()
            key = self._read_key(stdscr)

            changed = self.model.poll_catalog()
            if key == "resize":
                changed = True
            elif key is not None:
                self.model.handle_key(key)
                changed = True

            if int(now) != int(last_tick) or changed:
                last_tick = now
                self._paint(stdscr)


def run_tui(model: ClockAppModel) -> None:
    """Run the terminal UI until the user quits."""
    # Short escape delay so ESC reacts immediately
    os.environ.setdefault("ESCDELAY", "25")
    try:
        # Enable wide-char support in curses based on the current locale.
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        pass

    window = MainWindow(model)
    logger.debug("[MainWindow] Starting curses session")
    try:
        curses.wrapper(window.run)
    except KeyboardInterrupt:
        pass
    logger.debug("[MainWindow] Curses session ended")
