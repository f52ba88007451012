"""Utility functions for the road network package."""

from .logging import get_logger, set_level
from .config import load_config, DEFAULT_CONFIG_PATH

__all__ = ["get_logger", "set_level", "load_config", "DEFAULT_CONFIG_PATH"]
