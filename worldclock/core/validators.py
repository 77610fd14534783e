"""Validators - Pure functions for validation (exception-based)."""
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class ValidationError(ValueError):
    """Raised when validation fails."""

    pass


def load_timezone(timezone: str) -> ZoneInfo:
    """Resolve an IANA timezone identifier.

    Raises:
        ValidationError: If the identifier is empty or unknown
    """
    if not timezone or not isinstance(timezone, str):
        raise ValidationError("Timezone is required")
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ValidationError(f"invalid timezone '{timezone}'") from e


def validate_city_entry(index: int, entry) -> None:
    """Validate one city entry of the configuration file."""
    if not isinstance(entry, dict):
        raise ValidationError(f"city at index {index} is not a mapping")

    name = entry.get("name")
    if not name or not isinstance(name, str):
        raise ValidationError(f"city at index {index} has no name")

    timezone = entry.get("timezone")
    if not timezone or not isinstance(timezone, str):
        raise ValidationError(f"city '{name}' has no timezone")

    try:
        load_timezone(timezone)
    except ValidationError as e:
        raise ValidationError(f"invalid timezone '{timezone}' for city '{name}'") from e


def validate_cities(cities) -> None:
    """Validate the full list of configured cities."""
    if not cities or not isinstance(cities, list):
        raise ValidationError("no cities configured")

    for idx, entry in enumerate(cities):
        validate_city_entry(idx, entry)
