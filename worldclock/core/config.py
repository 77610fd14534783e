"""Configuration management for worldclock."""

import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from loguru import logger

from worldclock.core.clock import get_system_timezone
from worldclock.core.constants import CONFIG_PATH
from worldclock.core.errors import ConfigError
from worldclock.core.validators import ValidationError, load_timezone, validate_cities


class Config:
    """Manages the list of configured cities stored as YAML."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, uses default path.

        Raises:
            ConfigError: If the file cannot be read or parsed
            ValidationError: If the file holds invalid cities
        """
        self.config_path = Path(config_path or CONFIG_PATH)
        self.config_data: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file, creating a default one if missing."""
        if not self.config_path.exists():
            self.config_data = self._get_default_config()
            self.save()
            logger.info(f"[Config] Created default configuration at {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"failed to parse config: {e}") from e
        except OSError as e:
            raise ConfigError(f"failed to read config file: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("failed to parse config: top level must be a mapping")

        validate_cities(data.get("cities"))
        self.config_data = data

    @staticmethod
    def _get_default_config() -> Dict[str, Any]:
        """Default configuration holding only the system timezone."""
        return {"cities": [{"name": "Local", "timezone": get_system_timezone()}]}

    def reload(self) -> None:
        """Re-read the configuration file."""
        self._load_config()

    def save(self) -> None:
        """Save configuration to file."""
        content = yaml.safe_dump(self.config_data, default_flow_style=False, sort_keys=False, allow_unicode=True)
        temp_path = self.config_path.with_name(self.config_path.name + ".tmp")
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(temp_path, self.config_path)
        except OSError as e:
            logger.error(f"[Config] Failed to write {self.config_path}: {e}")
            try:
                if temp_path.exists():
                    temp_path.unlink()
            except OSError:
                pass
            raise ConfigError(f"failed to save config: {e}") from e

    @property
    def cities(self) -> List[Dict[str, str]]:
        """Configured cities as ``{"name", "timezone"}`` mappings."""
        return self.config_data.get("cities", [])

    def get_city_names(self) -> List[str]:
        return [city["name"] for city in self.cities]

    def add_city(self, name: str, timezone: str) -> None:
        """Add a city.

        Args:
            name: Display name
            timezone: IANA timezone identifier

        Raises:
            ValidationError: If the name is empty, the timezone is invalid,
                or the same city is already configured
        """
        if not name or not name.strip():
            raise ValidationError("city has no name")
        load_timezone(timezone)

        for city in self.cities:
            if city["name"] == name and city["timezone"] == timezone:
                raise ValidationError(f"city '{name}' is already configured")

        self.config_data.setdefault("cities", []).append({"name": name, "timezone": timezone})

    def delete_cities(self, names: Iterable[str]) -> int:
        """Remove every city whose name is in ``names``.

        Returns:
            Number of removed cities

        Raises:
            ValidationError: If nothing matches or no city would remain
        """
        names = set(names)
        remaining = [city for city in self.cities if city["name"] not in names]
        removed = len(self.cities) - len(remaining)

        if removed == 0:
            raise ValidationError("no matching cities to delete")
        if not remaining:
            raise ValidationError("cannot delete every configured city")

        self.config_data["cities"] = remaining
        return removed
