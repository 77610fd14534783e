"""Core types and enums."""
from enum import Enum
from typing import NamedTuple


class City(NamedTuple):
    """A city parsed from one GeoNames dataset row."""

    name: str
    country_code: str
    timezone: str
    population: int = 0


class ViewState(Enum):
    """Views of the terminal UI."""

    MAIN = "main"
    ADD = "add"
    DELETE = "delete"
    CONFIRM = "confirm"

    def __str__(self):
        return self.value
