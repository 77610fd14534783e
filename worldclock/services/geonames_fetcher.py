"""GeoNames dataset fetcher."""
import os
import shutil
import zipfile
from pathlib import Path
from typing import Optional

import requests
from loguru import logger

from worldclock.core.constants import (
    CACHE_DIR,
    DOWNLOAD_TIMEOUT,
    GEONAMES_ARCHIVE_NAME,
    GEONAMES_FILE_NAME,
    GEONAMES_URL,
)
from worldclock.core.errors import (
    ArchiveError,
    BadStatusError,
    CacheDirectoryError,
    DownloadError,
    MissingEntryError,
)

COPY_CHUNK_SIZE = 1024 * 1024


class GeoNamesFetcher:
    """
    Ensures the decompressed GeoNames cities file exists in the local cache.

    A cached file is trusted forever; it is only refreshed after
    ``clear_cache()`` or manual deletion.
    """

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        url: str = GEONAMES_URL,
        entry_name: str = GEONAMES_FILE_NAME,
        timeout: float = DOWNLOAD_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            cache_dir: Directory holding the dataset. Defaults to the user cache dir.
            url: Remote zip archive URL
            entry_name: Name of the archive member to extract
            timeout: Socket timeout for the HTTP request (seconds)
            session: Optional requests session (mainly for tests)
        """
        self.cache_dir = Path(cache_dir or CACHE_DIR)
        self.url = url
        self.entry_name = entry_name
        self.timeout = timeout
        self._session = session

    @property
    def dataset_path(self) -> Path:
        return self.cache_dir / self.entry_name

    @property
    def _archive_path(self) -> Path:
        return self.cache_dir / GEONAMES_ARCHIVE_NAME

    def is_cached(self) -> bool:
        """Check if the dataset file is present in the cache."""
        return self.dataset_path.exists()

    def ensure_dataset(self) -> Path:
        """
        Make sure the dataset file exists, downloading it if necessary.

        Returns:
            Path to the decompressed dataset file

        Raises:
            FetchError: A subclass naming the failed phase
        """
        target = self.dataset_path
        if target.exists():
            logger.debug(f"[GeoNamesFetcher] Cache hit: {target}")
            return target

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheDirectoryError(str(e)) from e

        archive_path = self._archive_path
        try:
            self._download(archive_path)
            self._extract(archive_path, target)
        finally:
            self._remove_archive(archive_path)

        logger.info(f"[GeoNamesFetcher] Dataset ready at {target}")
        return target

    def clear_cache(self) -> bool:
        """
        Remove the cached dataset file.

        Returns:
            True if a file was removed, False if there was nothing to remove
        """
        try:
            self.dataset_path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"[GeoNamesFetcher] Removed cached dataset {self.dataset_path}")
        return True

    def _download(self, archive_path: Path) -> None:
        """Download the zip archive to ``archive_path``."""
        logger.info(f"[GeoNamesFetcher] Downloading {self.url}")
        get = self._session.get if self._session else requests.get
        try:
            response = get(self.url, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            raise DownloadError(str(e)) from e

        with response:
            if not 200 <= response.status_code < 300:
                raise BadStatusError(response.status_code, response.reason or "")

            try:
                with open(archive_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=COPY_CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
            except (requests.RequestException, OSError) as e:
                raise DownloadError(str(e)) from e

        logger.debug(f"[GeoNamesFetcher] Downloaded {archive_path.stat().st_size} bytes")

    def _extract(self, archive_path: Path, target: Path) -> None:
        """Extract the dataset entry from the archive onto ``target``."""
        partial = target.with_name(target.name + ".part")
        try:
            with zipfile.ZipFile(archive_path, "r") as archive:
                try:
                    info = archive.getinfo(self.entry_name)
                except KeyError as e:
                    raise MissingEntryError(f"file {self.entry_name} not found in zip archive") from e

                with archive.open(info) as src, open(partial, "wb") as dst:
                    shutil.copyfileobj(src, dst, COPY_CHUNK_SIZE)

            os.replace(partial, target)
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveError(str(e)) from e
        finally:
            if partial.exists():
                try:
                    partial.unlink()
                except OSError as e:
                    logger.warning(f"[GeoNamesFetcher] Failed to remove partial file: {e}")

    @staticmethod
    def _remove_archive(archive_path: Path) -> None:
        try:
            archive_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"[GeoNamesFetcher] Failed to remove temp file: {e}")
