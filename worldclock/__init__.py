"""Worldclock - A terminal world clock with a searchable GeoNames city catalog."""

__version__ = "0.1.0"
__author__ = "worldclock contributors"
__description__ = "A terminal world clock with live per-city clocks"

from worldclock.core.config import Config
from worldclock.services.city_catalog import CityCatalog

__all__ = ["Config", "CityCatalog", "__version__"]
