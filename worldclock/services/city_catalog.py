"""
City Catalog - In-memory searchable catalog of GeoNames cities.

The catalog is loaded once per process, usually on a background thread, and
then serves searches from any thread.

State model:
- All shared state (records, ready flag, load error) lives in one immutable
  snapshot that is swapped as a single reference.
- Readers grab the snapshot once per call and never take a lock, so they see
  either the empty pre-load state or the fully installed catalog.
- A threading.Event signals completion; UI code can still poll is_ready().
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from loguru import logger

from worldclock.core.constants import MIN_QUERY_LENGTH
from worldclock.core.types import City
from worldclock.services.geonames_fetcher import GeoNamesFetcher
from worldclock.services.geonames_parser import parse_file


@dataclass(frozen=True)
class CatalogSnapshot:
    """One consistent view of the catalog."""

    records: Tuple[City, ...] = ()
    ready: bool = False
    error: Optional[Exception] = None


EMPTY_SNAPSHOT = CatalogSnapshot()


def normalize_query(query: str) -> str:
    return (query or "").strip().casefold()


class CityCatalog:
    """
    Thread-safe catalog of cities with ranked substring search.

    Usage:
        catalog = CityCatalog()
        catalog.start_background_load()
        ...
        if catalog.is_ready():
            results = catalog.search("berlin", 10)
    """

    def __init__(
        self,
        fetcher: Optional[GeoNamesFetcher] = None,
        parser: Callable[[Path], List[City]] = parse_file,
    ):
        """
        Args:
            fetcher: Dataset fetcher. Defaults to the GeoNames cache fetcher.
            parser: Callable turning the dataset path into a list of cities
        """
        self._fetcher = fetcher or GeoNamesFetcher()
        self._parser = parser

        self._snapshot = EMPTY_SNAPSHOT
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._started = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def start_background_load(self) -> bool:
        """
        Start loading the catalog on a daemon thread and return immediately.

        Repeated calls are ignored while a load is in flight or after it
        finished.

        Returns:
            True if a new load was started
        """
        with self._lock:
            if self._started:
                logger.debug("[CityCatalog] Load already started, ignoring")
                return False
            self._started = True
            self._thread = threading.Thread(
                target=self._load,
                daemon=True,
                name="CityCatalogLoader",
            )
            self._thread.start()
        logger.info("[CityCatalog] Background load started")
        return True

    def load_synchronously(self) -> Optional[Exception]:
        """
        Load the catalog on the calling thread, blocking until done.

        If a background load is already running this waits for it instead of
        starting a second one.

        Returns:
            The load error, or None on success
        """
        with self._lock:
            run_here = not self._started
            self._started = True

        if run_here:
            self._load()
        else:
            self._done.wait()
        return self._snapshot.error

    def _load(self) -> None:
        """Fetch, parse and install. Errors are captured, never raised."""
        try:
            path = self._fetcher.ensure_dataset()
            records = tuple(self._parser(path))
        except Exception as e:
            logger.error(f"[CityCatalog] Failed to load city database: {e}")
            self._install(CatalogSnapshot(error=e))
        else:
            logger.info(f"[CityCatalog] Loaded {len(records)} cities")
            self._install(CatalogSnapshot(records=records, ready=True))
        finally:
            self._done.set()

    def _install(self, snapshot: CatalogSnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def is_ready(self) -> bool:
        return self._snapshot.ready

    def get_error(self) -> Optional[Exception]:
        return self._snapshot.error

    def is_loaded(self) -> bool:
        """True once a load attempt has finished, successfully or not."""
        return self._done.is_set()

    def wait_until_loaded(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the load attempt finishes.

        Returns:
            True if the load finished within the timeout
        """
        return self._done.wait(timeout)

    def __len__(self) -> int:
        return len(self._snapshot.records)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, query: str, limit: int) -> List[City]:
        """
        Search cities by name.

        Exact name matches come first, followed by names that start with or
        contain the query, each group in catalog order. The scan stops as soon
        as ``limit`` matches were collected, so a later exact match can be
        missed when the limit is reached by earlier partial matches.

        Args:
            query: Free text, compared case-insensitively
            limit: Maximum number of results

        Returns:
            Matching cities, empty if the catalog is not ready or the query
            is shorter than three characters
        """
        snapshot = self._snapshot
        if not snapshot.ready or limit <= 0:
            return []

        query = normalize_query(query)
        if len(query) < MIN_QUERY_LENGTH:
            return []

        exact_matches: List[City] = []
        partial_matches: List[City] = []

        for city in snapshot.records:
            name = city.name.casefold()
            if name == query:
                exact_matches.append(city)
            elif query in name:
                # Prefix and contains matches rank the same
                partial_matches.append(city)
            else:
                continue

            if len(exact_matches) + len(partial_matches) >= limit:
                break

        return (exact_matches + partial_matches)[:limit]

    def find_best_for_timezone(self, timezone: str) -> Optional[City]:
        """
        Return the most populous city using exactly this timezone.

        Ties go to the city that appears first in the dataset.
        """
        snapshot = self._snapshot
        if not snapshot.ready or not timezone:
            return None

        best: Optional[City] = None
        for city in snapshot.records:
            if city.timezone == timezone and (best is None or city.population > best.population):
                best = city
        return best
