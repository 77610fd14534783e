"""Exception hierarchy for worldclock.

Load-path errors (fetch and parse) are never raised to UI callers; the city
catalog captures them and exposes them through ``CityCatalog.get_error()``.
"""


class WorldClockError(Exception):
    """Base class for all worldclock errors."""


class ConfigError(WorldClockError):
    """Raised when the configuration file cannot be read or written."""


class GeoNamesError(WorldClockError):
    """Base class for city dataset errors."""


class FetchError(GeoNamesError):
    """Raised when the dataset cannot be placed in the local cache.

    Attributes:
        phase: Name of the fetch phase that failed
    """

    phase = "fetch"

    def __init__(self, message: str):
        super().__init__(f"{self.phase}: {message}")


class CacheDirectoryError(FetchError):
    phase = "create cache directory"


class DownloadError(FetchError):
    phase = "download"


class BadStatusError(DownloadError):
    phase = "download status"

    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        super().__init__(f"bad status: {status_code} {reason}".rstrip())


class ArchiveError(FetchError):
    phase = "open archive"


class MissingEntryError(ArchiveError):
    phase = "extract archive entry"


class ParseError(GeoNamesError):
    """Raised when reading the dataset file fails part way."""
