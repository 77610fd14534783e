"""Core functionality for worldclock."""

from worldclock.core.clock import Clock
from worldclock.core.config import Config
from worldclock.core.types import City, ViewState

__all__ = ["City", "Clock", "Config", "ViewState"]
