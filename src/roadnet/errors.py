"""Exceptions raised while building and rebuilding a road network."""

from typing import Optional


class RoadNetworkError(Exception):
    """Base class for all road network errors."""


class ConfigurationError(RoadNetworkError):
    """A missing, duplicate or unresolvable identifier.

    Raised for duplicate Link names, unknown typologies, unknown road
    marker templates, unset marker widths, missing end Nodes and bad
    neighbor indices.  The affected Link cannot be rebuilt.
    """


class ParseError(RoadNetworkError):
    """A persisted record could not be turned into a network object."""

    def __init__(self, message: str, location: Optional[str] = None):
        self.location = location
        if location:
            message = f"{message} ({location})"
        super().__init__(message)


class RegistryLockedError(RoadNetworkError):
    """A registry was modified while a rebuild was running."""
