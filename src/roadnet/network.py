"""Road network orchestration.

The :class:`Network` owns Nodes, Links, the typology registry and the
road marker template registry.  :meth:`Network.rebuild` runs the lane
pipeline over all Links in a fixed order:

1. bind typologies and road marker templates (all Links first),
2. recompute the design line geometry,
3. synthesize Lanes from the road markers,
4. connect the Lanes of successive CrossSections within each Link,
5. connect the Lanes across every simple Node; other Nodes are handed
   to the junction expander when one is installed.

Configuration errors either abort the whole rebuild (the default) or
isolate the failing Link, depending on the ``error_policy`` setting.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from src.utils.config import DEFAULT_CONFIG_PATH, load_config
from src.utils.logging import get_logger, set_level

from .cross_section import CrossSection
from .errors import ConfigurationError, RegistryLockedError, RoadNetworkError
from .junction import JunctionExpander, check_connecting_lanes
from .lanes import Lane
from .link import Link, LinkState, connect_successive_lanes_at_node
from .node import Node
from .settings import RebuildSettings
from .typology import (
    CrossSectionElementTypology,
    MarkerTemplateRegistry,
    RoadMarkerAlongTemplate,
    TypologyRegistry,
)
from .validators import NAME_VALIDATOR
from .vertex import Vertex

logger = get_logger(__name__)


class RebuildResult(Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class RebuildReport:
    """Outcome of :meth:`Network.rebuild`."""

    result: RebuildResult
    errors: Dict[str, RoadNetworkError] = field(default_factory=dict)
    """Errors keyed by the name of the Link (or ``node:<id>``) that raised them."""

    lane_count: int = 0
    linked_nodes: List[int] = field(default_factory=list)
    """Simple Nodes whose Lanes were connected."""

    pending_nodes: List[int] = field(default_factory=list)
    """Non-simple Nodes left for an external junction expansion step."""

    violations: List[str] = field(default_factory=list)
    """Post-condition violations reported after junction expansion."""

    @property
    def ok(self) -> bool:
        return self.result is RebuildResult.SUCCESS

    @property
    def failed_links(self) -> List[str]:
        return list(self.errors)

    def raise_for_status(self) -> None:
        """Re-raise the first error of a rebuild that did not succeed."""
        if self.errors:
            raise next(iter(self.errors.values()))


class Network:
    """Nodes, Links and the registries they are resolved against."""

    def __init__(
        self,
        typologies: Optional[TypologyRegistry] = None,
        marker_templates: Optional[MarkerTemplateRegistry] = None,
        settings: Optional[RebuildSettings] = None,
        junction_expander: Optional[JunctionExpander] = None,
    ):
        self._typologies = typologies if typologies is not None else TypologyRegistry()
        self._marker_templates = marker_templates if marker_templates is not None else MarkerTemplateRegistry()
        self.settings = settings if settings is not None else RebuildSettings()
        self.junction_expander = junction_expander
        self.nodes: Dict[int, Node] = {}
        self.links: Dict[str, Link] = {}
        self._rebuilding = False

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Network":
        """Create an empty Network from a parsed configuration."""
        return cls(
            typologies=TypologyRegistry.from_config(config.get("typologies")),
            marker_templates=MarkerTemplateRegistry.from_config(config.get("marker_templates")),
            settings=RebuildSettings.from_mapping(config.get("rebuild")),
        )

    @classmethod
    def from_config_file(cls, path: Optional[Union[str, Path]] = None) -> "Network":
        """Create an empty Network from a YAML file, the bundled default when None."""
        config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
        config = load_config(str(config_path))
        if not config:
            raise ConfigurationError(f"No configuration found at {config_path}")
        return cls.from_config(config)

    # ------------------------------------------------------------------
    # Registries

    @property
    def typologies(self) -> TypologyRegistry:
        return self._typologies

    @typologies.setter
    def typologies(self, registry: TypologyRegistry) -> None:
        self._check_unlocked()
        self._typologies = registry

    @property
    def marker_templates(self) -> MarkerTemplateRegistry:
        return self._marker_templates

    @marker_templates.setter
    def marker_templates(self, registry: MarkerTemplateRegistry) -> None:
        self._check_unlocked()
        self._marker_templates = registry

    def register_typology(self, typology: CrossSectionElementTypology) -> None:
        self.typologies = self._typologies.with_entry(typology)

    def register_marker_template(self, template: RoadMarkerAlongTemplate) -> None:
        self.marker_templates = self._marker_templates.with_entry(template)

    def _check_unlocked(self) -> None:
        if self._rebuilding:
            raise RegistryLockedError("Registries cannot change while the network is rebuilt")

    # ------------------------------------------------------------------
    # Nodes and Links

    def next_node_id(self) -> int:
        return max(self.nodes) + 1 if self.nodes else 0

    def add_node(
        self,
        name: str,
        node_id: int,
        x: float,
        y: float,
        z: float = 0.0,
        radius: Optional[float] = None,
    ) -> Node:
        if node_id in self.nodes:
            raise ConfigurationError(f"Node id {node_id} already exists in the Network")
        node = Node(node_id, name, float(x), float(y), float(z))
        if radius is not None:
            node.set_circle(radius)
        self.nodes[node_id] = node
        return node

    def lookup_node(self, node_id: int) -> Optional[Node]:
        return self.nodes.get(node_id)

    def lookup_link(self, name: str) -> Optional[Link]:
        return self.links.get(name)

    def add_link(
        self,
        name: str,
        from_node_id: int,
        to_node_id: int,
        length: float = float("nan"),
        priority: bool = False,
        cross_sections: Optional[Sequence[CrossSection]] = None,
        intermediate_vertices: Optional[Sequence[Vertex]] = None,
    ) -> Link:
        """Create a Link between two existing Nodes and register it.

        Raises
        ------
        ConfigurationError
            If the name exists or either Node is unknown.
        """
        link = Link(
            self,
            name,
            self.lookup_node(from_node_id),
            self.lookup_node(to_node_id),
            length=length,
            priority=priority,
            cross_sections=cross_sections,
            intermediate_vertices=intermediate_vertices,
            max_speed=self.settings.default_max_speed,
        )
        self.register_link(link)
        return link

    def add_link_from_record(self, record: Mapping[str, Any], location: Optional[str] = None) -> Link:
        """Create and register a Link from a persisted record."""
        from .records import link_from_record

        link = link_from_record(self, record, location)
        self.register_link(link)
        return link

    def register_link(self, link: Link) -> None:
        if link.network is not self:
            raise ConfigurationError(f"Link {link.name} belongs to another network")
        if link.name in self.links:
            raise ConfigurationError(f"link name {link.name} already exists in the Network")
        self.links[link.name] = link
        link.from_node.leaving.append(link)
        link.to_node.entering.append(link)

    def rename_link(self, link: Link, name: str) -> None:
        if name == link.name:
            return
        if not NAME_VALIDATOR.validate(name):
            raise ConfigurationError(f"Invalid link name {name!r}")
        if name in self.links:
            raise ConfigurationError(f"link name {name} already exists in the Network")
        if self.links.get(link.name) is link:
            del self.links[link.name]
            self.links[name] = link
        link._name = name

    def remove_link(self, link: Union[Link, str]) -> None:
        if isinstance(link, str):
            name = link
            link = self.links.get(name)
            if link is None:
                raise ConfigurationError(f"Unknown link {name}")
        # Connecting Lanes at either end would be left without a counterpart
        link.from_node.clear_connecting_lanes()
        link.to_node.clear_connecting_lanes()
        link.clear_lanes()
        if link in link.from_node.leaving:
            link.from_node.leaving.remove(link)
        if link in link.to_node.entering:
            link.to_node.entering.remove(link)
        self.links.pop(link.name, None)

    def remove_node(self, node_id: int) -> None:
        node = self.nodes.get(node_id)
        if node is None:
            raise ConfigurationError(f"Unknown node {node_id}")
        if node.entering or node.leaving:
            raise ConfigurationError(f"Node {node_id} still has links")
        del self.nodes[node_id]

    def lanes(self) -> List[Lane]:
        """All Lanes of all Links followed by all connecting Lanes."""
        result: List[Lane] = []
        for link in self.links.values():
            result.extend(link.lanes())
        for node in self.nodes.values():
            result.extend(node.connecting_lanes)
        return result

    # ------------------------------------------------------------------
    # Rebuild

    def rebuild(self) -> RebuildReport:
        """Run the lane pipeline over the whole Network.

        Returns
        -------
        RebuildReport
            SUCCESS when every Link was rebuilt, PARTIAL when failing
            Links were isolated and FAILED when the rebuild was aborted.
            An aborted rebuild leaves no Lanes behind.
        """
        if self.settings.log_level:
            set_level(self.settings.log_level)
        isolate = self.settings.error_policy == "isolate"
        report = RebuildReport(RebuildResult.SUCCESS)
        self._rebuilding = True
        try:
            self._clear_lanes()
            links = list(self.links.values())

            logger.info("Binding typologies and road markers of %d links", len(links))
            for link in links:
                try:
                    link.fix_phase1(self._typologies, self._marker_templates)
                except ConfigurationError as exc:
                    if not self._handle_failure(report, link.name, exc, isolate):
                        return report
                    link.clear_lanes()
            active = [link for link in links if link.name not in report.errors]

            logger.info("Synthesizing lanes of %d links", len(active))
            for link in active:
                try:
                    link.compute_geometry()
                    link.rebuild_lanes()
                    link.connect_successive_lanes()
                except ConfigurationError as exc:
                    if not self._handle_failure(report, link.name, exc, isolate):
                        return report
                    link.clear_lanes()
            active = [link for link in active if link.name not in report.errors]

            logger.info("Connecting lanes at %d nodes", len(self.nodes))
            for node in self.nodes.values():
                if any(link.name in report.errors for link in node.incident_links()):
                    continue
                try:
                    self._connect_node(node, report)
                except ConfigurationError as exc:
                    if not self._handle_failure(report, f"node:{node.node_id}", exc, isolate):
                        return report
                    node.clear_connecting_lanes()
                for link in node.oversized_for():
                    logger.warning("Circle of node %s exceeds half the length of link %s", node.node_id, link.name)

            for link in active:
                if link.ends_resolved():
                    link.state = LinkState.LINKED_AT_NODES
            report.lane_count = len(self.lanes())
            if report.errors:
                report.result = RebuildResult.PARTIAL
            logger.info("Rebuild %s: %d lanes, %d failures", report.result.value, report.lane_count, len(report.errors))
            return report
        finally:
            self._rebuilding = False

    def _connect_node(self, node: Node, report: RebuildReport) -> None:
        if node.is_simple():
            if connect_successive_lanes_at_node(node, self.settings.snap_tolerance):
                report.linked_nodes.append(node.node_id)
            return
        if node.is_dead_end():
            return
        if self.junction_expander is None:
            logger.info("Node %s (%d in, %d out) awaits junction expansion",
                        node.node_id, node.incoming_count(), node.leaving_count())
            report.pending_nodes.append(node.node_id)
            return
        self.junction_expander(node)
        problems = check_connecting_lanes(node)
        for problem in problems:
            logger.warning(problem)
        report.violations.extend(problems)

    def _handle_failure(self, report: RebuildReport, key: str, exc: ConfigurationError, isolate: bool) -> bool:
        """Record a failure; return False when the rebuild must stop."""
        report.errors[key] = exc
        if isolate:
            logger.error("Rebuild of %s failed, skipping it: %s", key, exc)
            return True
        logger.error("Rebuild aborted at %s: %s", key, exc)
        self._clear_lanes()
        report.result = RebuildResult.FAILED
        return False

    def _clear_lanes(self) -> None:
        for link in self.links.values():
            link.clear_lanes()
        for node in self.nodes.values():
            node.clear_connecting_lanes()

    def __repr__(self) -> str:
        return f"Network({len(self.nodes)} nodes, {len(self.links)} links)"
