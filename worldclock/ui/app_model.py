"""Modal state model for the terminal UI.

The model owns everything the screen shows and reacts to key names
("up", "enter", "esc", "backspace", "ctrl+c" or a single character). It never
touches curses, so it can be driven directly from tests.
"""

from typing import Callable, List, Optional, Set

from loguru import logger

from worldclock.core.clock import Clock, sort_by_utc_offset
from worldclock.core.config import Config
from worldclock.core.constants import SEARCH_LIMIT
from worldclock.core.errors import WorldClockError
from worldclock.core.types import City, ViewState
from worldclock.services.city_catalog import CityCatalog

SEARCH_CHAR_LIMIT = 50


def build_clocks(config: Config) -> List[Clock]:
    """Create clocks for the configured cities, sorted west to east."""
    clocks = [Clock(city["name"], city["timezone"]) for city in config.cities]
    return sort_by_utc_offset(clocks)


class ClockAppModel:
    """State of the world clock UI."""

    def __init__(
        self,
        config: Config,
        catalog: CityCatalog,
        system_timezone: str,
        search_limit: int = SEARCH_LIMIT,
    ):
        self.config = config
        self.catalog = catalog
        self.system_timezone = system_timezone
        self.search_limit = search_limit

        self.clocks: List[Clock] = build_clocks(config)
        self.state = ViewState.MAIN
        self.error: Optional[str] = None
        self.quitting = False

        # Add view
        self.search_query = ""
        self.search_results: List[City] = []
        self.selected_result = 0

        # Delete view
        self.delete_list: List[str] = []
        self.delete_selected: Set[int] = set()
        self.delete_cursor = 0

        # Confirm view
        self.confirm_message = ""
        self._confirm_action: Optional[Callable[[], None]] = None

        self._catalog_reported = False

    # ------------------------------------------------------------------
    # Background state
    # ------------------------------------------------------------------

    def poll_catalog(self) -> bool:
        """
        Pick up the outcome of the catalog load once it finishes.

        Returns:
            True if the screen needs a redraw
        """
        if self._catalog_reported or not self.catalog.is_loaded():
            return False
        self._catalog_reported = True

        load_error = self.catalog.get_error()
        if load_error is not None:
            self.error = f"Error loading city database: {load_error}"
        return True

    def is_city_protected(self, name: str) -> bool:
        """The city tracking the system timezone cannot be deleted."""
        return any(
            city["name"] == name and city["timezone"] == self.system_timezone
            for city in self.config.cities
        )

    # ------------------------------------------------------------------
    # Key handling
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> None:
        """Route a key press to the handler of the current view."""
        if key == "ctrl+c":
            self.quitting = True
            return

        if self.error:
            # Any key dismisses the status line error; on the main view that
            # is all the key does
            self.error = None
            if self.state == ViewState.MAIN and key != "q":
                return

        handler = {
            ViewState.MAIN: self._handle_main_key,
            ViewState.ADD: self._handle_add_key,
            ViewState.DELETE: self._handle_delete_key,
            ViewState.CONFIRM: self._handle_confirm_key,
        }[self.state]
        handler(key)

    def _handle_main_key(self, key: str) -> None:
        if key == "q":
            self.quitting = True
        elif key == "a":
            if self.catalog.is_ready():
                self._enter_add()
        elif key == "d":
            self._enter_delete()

    def _enter_add(self) -> None:
        self.state = ViewState.ADD
        self.error = None
        self.search_query = ""
        self.search_results = []
        self.selected_result = 0

    def _enter_delete(self) -> None:
        self.state = ViewState.DELETE
        self.error = None
        self.delete_list = self.config.get_city_names()
        self.delete_selected = set()
        self.delete_cursor = 0

    def _handle_add_key(self, key: str) -> None:
        if key == "esc":
            self.state = ViewState.MAIN
        elif key == "up":
            if self.selected_result > 0:
                self.selected_result -= 1
        elif key == "down":
            if self.selected_result < len(self.search_results) - 1:
                self.selected_result += 1
        elif key == "enter":
            self._add_selected_city()
        elif key == "backspace":
            if self.search_query:
                self.search_query = self.search_query[:-1]
                self.refresh_search()
        elif len(key) == 1 and key.isprintable():
            if len(self.search_query) < SEARCH_CHAR_LIMIT:
                self.search_query += key
                self.refresh_search()

    def refresh_search(self) -> None:
        """Re-run the catalog search for the current query."""
        if not self.catalog.is_ready():
            return
        self.search_results = self.catalog.search(self.search_query, self.search_limit)
        if self.selected_result >= len(self.search_results):
            self.selected_result = 0

    def _add_selected_city(self) -> None:
        if not self.search_results or self.selected_result >= len(self.search_results):
            return
        city = self.search_results[self.selected_result]

        def add():
            self.config.add_city(city.name, city.timezone)

        if self._apply_change(add):
            logger.info(f"[App] Added {city.name} ({city.timezone})")

    def _handle_delete_key(self, key: str) -> None:
        if key == "esc":
            self.state = ViewState.MAIN
        elif key == "up":
            if self.delete_cursor > 0:
                self.delete_cursor -= 1
        elif key == "down":
            if self.delete_cursor < len(self.delete_list) - 1:
                self.delete_cursor += 1
        elif key == " ":
            if not self.delete_list:
                return
            if self.is_city_protected(self.delete_list[self.delete_cursor]):
                return
            self.delete_selected ^= {self.delete_cursor}
        elif key == "enter":
            self._confirm_delete()

    def _confirm_delete(self) -> None:
        to_delete = [self.delete_list[idx] for idx in sorted(self.delete_selected)]
        if not to_delete:
            self.error = "no cities selected"
            return

        self.state = ViewState.CONFIRM
        self.error = None
        if len(to_delete) == 1:
            self.confirm_message = f"Delete '{to_delete[0]}'? (y/n)"
        else:
            self.confirm_message = f"Delete {len(to_delete)} selected cities? (y/n)"

        def delete():
            self.config.delete_cities(to_delete)

        self._confirm_action = delete

    def _handle_confirm_key(self, key: str) -> None:
        if key == "y":
            action, self._confirm_action = self._confirm_action, None
            if action is not None and self._apply_change(action):
                logger.info("[App] Deleted selected cities")
        elif key in ("n", "esc"):
            self._confirm_action = None
            self.state = ViewState.MAIN

    def _apply_change(self, change: Callable[[], None]) -> bool:
        """
        Apply a config change, persist it and rebuild the clocks.

        The model always returns to the main view. Failures end up on the
        status line and the on-disk configuration is re-read.
        """
        self.state = ViewState.MAIN
        try:
            change()
            self.config.save()
        except (WorldClockError, ValueError) as e:
            logger.warning(f"[App] Configuration change failed: {e}")
            self.error = str(e)
            try:
                self.config.reload()
            except (WorldClockError, ValueError) as reload_error:
                logger.error(f"[App] Failed to reload configuration: {reload_error}")
            return False

        self.clocks = build_clocks(self.config)
        return True
