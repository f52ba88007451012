"""Settings that steer a network rebuild."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .errors import ConfigurationError

ERROR_POLICIES = ("abort", "isolate")


@dataclass(frozen=True)
class RebuildSettings:
    """Rebuild settings, normally read from the ``rebuild`` config section."""

    snap_tolerance: float = 0.0001
    """Distance below which a trimming vertex replaces its neighbour."""

    error_policy: str = "abort"
    """``abort`` stops at the first failing Link, ``isolate`` skips it."""

    default_max_speed: float = 70.0
    """Speed limit (km/h) given to new Links."""

    log_level: Optional[str] = None
    """Level for the package loggers, left alone when None."""

    def __post_init__(self):
        if self.error_policy not in ERROR_POLICIES:
            raise ConfigurationError(
                f"Unknown error policy {self.error_policy!r}, expected one of {ERROR_POLICIES}")
        if not self.snap_tolerance >= 0:
            raise ConfigurationError(f"snap_tolerance must be non-negative, got {self.snap_tolerance}")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "RebuildSettings":
        """Build settings from a mapping, rejecting unknown keys."""
        if not data:
            return cls()
        unknown = set(data) - {"snap_tolerance", "error_policy", "default_max_speed", "log_level"}
        if unknown:
            raise ConfigurationError(f"Unknown rebuild settings: {sorted(unknown)}")
        defaults = cls()
        return cls(
            snap_tolerance=float(data.get("snap_tolerance", defaults.snap_tolerance)),
            error_policy=str(data.get("error_policy", defaults.error_policy)),
            default_max_speed=float(data.get("default_max_speed", defaults.default_max_speed)),
            log_level=data.get("log_level"),
        )
