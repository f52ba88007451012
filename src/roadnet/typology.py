"""Typologies and road marker templates.

Every CrossSectionElement names a typology that says whether vehicles
may drive on it, and every road marker names a template that supplies
its stripe width.  Both are looked up in registries owned by the
Network.  Registries are immutable: adding an entry returns a new
registry, so a rebuild always reads a fixed table.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from .errors import ConfigurationError


@dataclass(frozen=True)
class CrossSectionElementTypology:
    """Kind of a CrossSectionElement, e.g. road, grass or shoulder."""

    name: str
    drivable: bool
    description: str = ""


@dataclass(frozen=True)
class RoadMarkerAlongTemplate:
    """Physical properties of a longitudinal road marker type."""

    marker_type: str
    """Type token, e.g. ``|`` for a solid and ``:`` for a dashed line."""

    width: float
    """Stripe width in metres."""

    pattern: str = ""


@dataclass(frozen=True)
class TypologyRegistry:
    """Typologies keyed by case-insensitive name."""

    entries: Tuple[CrossSectionElementTypology, ...] = ()
    _index: Dict[str, CrossSectionElementTypology] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        index = {}
        for typology in self.entries:
            key = typology.name.lower()
            if key in index:
                raise ConfigurationError(f"Duplicate typology {typology.name!r}")
            index[key] = typology
        object.__setattr__(self, "_index", index)

    def lookup(self, name: Optional[str]) -> Optional[CrossSectionElementTypology]:
        if name is None:
            return None
        return self._index.get(name.lower())

    def with_entry(self, typology: CrossSectionElementTypology) -> "TypologyRegistry":
        return TypologyRegistry(self.entries + (typology,))

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __iter__(self) -> Iterator[CrossSectionElementTypology]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_config(cls, items: Optional[Iterable[Mapping[str, Any]]]) -> "TypologyRegistry":
        entries = []
        for item in items or ():
            if "name" not in item:
                raise ConfigurationError(f"Typology entry without name: {dict(item)}")
            entries.append(CrossSectionElementTypology(
                name=str(item["name"]),
                drivable=bool(item.get("drivable", False)),
                description=str(item.get("description", "")),
            ))
        return cls(tuple(entries))


@dataclass(frozen=True)
class MarkerTemplateRegistry:
    """Road marker templates keyed by exact type token."""

    entries: Tuple[RoadMarkerAlongTemplate, ...] = ()
    _index: Dict[str, RoadMarkerAlongTemplate] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        index = {}
        for template in self.entries:
            if template.marker_type in index:
                raise ConfigurationError(f"Duplicate road marker template {template.marker_type!r}")
            index[template.marker_type] = template
        object.__setattr__(self, "_index", index)

    def lookup(self, marker_type: Optional[str]) -> Optional[RoadMarkerAlongTemplate]:
        if marker_type is None:
            return None
        return self._index.get(marker_type)

    def with_entry(self, template: RoadMarkerAlongTemplate) -> "MarkerTemplateRegistry":
        return MarkerTemplateRegistry(self.entries + (template,))

    def __contains__(self, marker_type: str) -> bool:
        return self.lookup(marker_type) is not None

    def __iter__(self) -> Iterator[RoadMarkerAlongTemplate]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_config(cls, items: Optional[Iterable[Mapping[str, Any]]]) -> "MarkerTemplateRegistry":
        entries = []
        for item in items or ():
            if "type" not in item or "width" not in item:
                raise ConfigurationError(f"Road marker template needs type and width: {dict(item)}")
            entries.append(RoadMarkerAlongTemplate(
                marker_type=str(item["type"]),
                width=float(item["width"]),
                pattern=str(item.get("pattern", "")),
            ))
        return cls(tuple(entries))
