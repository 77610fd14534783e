"""City dataset services."""

from worldclock.services.city_catalog import CityCatalog
from worldclock.services.geonames_fetcher import GeoNamesFetcher
from worldclock.services.geonames_parser import parse_cities, parse_file

__all__ = ["CityCatalog", "GeoNamesFetcher", "parse_cities", "parse_file"]
