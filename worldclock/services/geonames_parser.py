"""
GeoNames ``cities15000.txt`` parser.

The file is tab-separated, one city per line. Only a few columns are used;
their positions are fixed by the upstream GeoNames dump format:

    1  name
    8  country code
    14 population
    17 timezone
"""

from pathlib import Path
from typing import Iterator, List, TextIO

from loguru import logger

from worldclock.core.errors import ParseError
from worldclock.core.types import City

NAME_FIELD = 1
COUNTRY_CODE_FIELD = 8
POPULATION_FIELD = 14
TIMEZONE_FIELD = 17
MIN_FIELDS = TIMEZONE_FIELD + 1

# Some rows carry very long alternate-name lists
READ_BUFFER_SIZE = 1024 * 1024


def _parse_population(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        return 0


def parse_line(line: str):
    """Parse one dataset row. Returns None for rows that must be skipped."""
    fields = line.rstrip("\r\n").split("\t")
    if len(fields) < MIN_FIELDS:
        return None

    timezone = fields[TIMEZONE_FIELD]
    if not timezone:
        return None

    return City(
        name=fields[NAME_FIELD],
        country_code=fields[COUNTRY_CODE_FIELD],
        timezone=timezone,
        population=_parse_population(fields[POPULATION_FIELD]),
    )


def parse_cities(stream: TextIO) -> Iterator[City]:
    """
    Lazily yield cities from a text stream.

    Malformed rows are skipped silently. A failure while reading the stream
    raises ParseError; the generator cannot be restarted afterwards.
    """
    try:
        for line in stream:
            city = parse_line(line)
            if city is not None:
                yield city
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"failed to read dataset: {e}") from e


def parse_file(path: Path) -> List[City]:
    """Parse a dataset file into a list of cities."""
    try:
        with open(path, "r", encoding="utf-8", buffering=READ_BUFFER_SIZE) as f:
            cities = list(parse_cities(f))
    except OSError as e:
        raise ParseError(f"failed to open dataset {path}: {e}") from e

    logger.debug(f"[GeoNamesParser] Parsed {len(cities)} cities from {path}")
    return cities
