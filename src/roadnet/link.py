"""Links between two Nodes.

A Link has a design line that starts at its from Node, follows zero or
more intermediate vertices and ends at its to Node.  The way the Link
looks is described by one or more CrossSections that are swept along
the design line.  Rebuilding a Link binds its elements to their
typologies and marker templates, recomputes its geometry, synthesizes
its Lanes and links the Lanes of successive CrossSections.
"""

import math
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

import numpy as np

from src.utils.logging import get_logger

from .cross_section import CrossSection
from .errors import ConfigurationError
from .geometry import circle_trim_fraction, polyline_length
from .lanes import Lane
from .node import Node
from .typology import MarkerTemplateRegistry, TypologyRegistry
from .validators import MAX_SPEED_VALIDATOR, NAME_VALIDATOR, InputValidator
from .vertex import Vertex, vertices_to_array

if TYPE_CHECKING:  # pragma: no cover
    from .network import Network

logger = get_logger(__name__)

SNAP_TOLERANCE = 0.0001


class LinkState(Enum):
    """Progress of a Link through the rebuild pipeline."""

    UNBOUND = "unbound"
    TYPOLOGY_BOUND = "typology_bound"
    GEOMETRY_COMPUTED = "geometry_computed"
    LANES_SYNTHESIZED = "lanes_synthesized"
    LINKED_WITHIN_LINK = "linked_within_link"
    LINKED_AT_NODES = "linked_at_nodes"


class Link:
    """A directed, named connection between two Nodes.

    Parameters
    ----------
    network : Network
        The Network that owns the Link.
    name : str
        Name of the Link; must not exist in the Network yet.
    from_node, to_node : Node
        Nodes the Link departs from and ends at.
    length : float, optional
        Length in metres; computed from the geometry when NaN.
    priority : bool, optional
        Priority flag used by junction control.
    cross_sections : list of CrossSection, optional
        Profiles along the Link; kept sorted by longitudinal position.
    intermediate_vertices : list of Vertex, optional
        Shape of the Link between its end Nodes.
    max_speed : float, optional
        Speed limit in km/h.

    Raises
    ------
    ConfigurationError
        If the network is None, the name is taken, or an end Node is None.
    """

    def __init__(
        self,
        network: "Network",
        name: str,
        from_node: Node,
        to_node: Node,
        length: float = float("nan"),
        priority: bool = False,
        cross_sections: Optional[Sequence[CrossSection]] = None,
        intermediate_vertices: Optional[Sequence[Vertex]] = None,
        max_speed: float = 70.0,
    ):
        if network is None:
            raise ConfigurationError("network is null")
        if network.lookup_link(name) is not None:
            raise ConfigurationError(f"link name {name} already exists in the Network")
        if from_node is None:
            raise ConfigurationError(f"fromNode of link {name} is null")
        if to_node is None:
            raise ConfigurationError(f"toNode of link {name} is null")
        self.network = network
        self._name = name
        self._from_node = from_node
        self._to_node = to_node
        self.from_node_expand: Optional[Node] = None
        self.to_node_expand: Optional[Node] = None
        self._length = float(length)
        self.priority = priority
        self.max_speed = float(max_speed)
        self.intermediate_vertices: List[Vertex] = list(intermediate_vertices or [])
        self.cross_sections: List[CrossSection] = []
        self.set_cross_sections(cross_sections or [])
        self.state = LinkState.UNBOUND
        self.linked_ends = set()
        self._roadway: Optional[Tuple[np.ndarray, float]] = None

    # ------------------------------------------------------------------
    # Attributes

    @property
    def name(self) -> str:
        return self._name

    def rename(self, name: str) -> None:
        """Change the name; the new name must be valid and not exist in the Network."""
        self.network.rename_link(self, name)

    @staticmethod
    def validate_name() -> InputValidator:
        return NAME_VALIDATOR

    @staticmethod
    def validate_max_speed() -> InputValidator:
        return MAX_SPEED_VALIDATOR

    def set_max_speed_text(self, text: str) -> None:
        """Set the speed limit from text entered in an editor."""
        self.max_speed = MAX_SPEED_VALIDATOR.parse(text)

    @property
    def from_node(self) -> Node:
        return self._from_node

    @from_node.setter
    def from_node(self, node: Node) -> None:
        if node is None:
            raise ConfigurationError(f"fromNode of link {self.name} cannot be null")
        if self in self._from_node.leaving:
            self._from_node.leaving.remove(self)
            node.leaving.append(self)
        self._from_node = node
        self._length = float("nan")

    @property
    def to_node(self) -> Node:
        return self._to_node

    @to_node.setter
    def to_node(self, node: Node) -> None:
        if node is None:
            raise ConfigurationError(f"toNode of link {self.name} cannot be null")
        if self in self._to_node.entering:
            self._to_node.entering.remove(self)
            node.entering.append(self)
        self._to_node = node
        self._length = float("nan")

    @property
    def expanded_from_node(self) -> Node:
        """Route choice Node near the start, or the from Node when none was inserted."""
        if self.from_node_expand is None:
            return self._from_node
        return self.from_node_expand

    @property
    def expanded_to_node(self) -> Node:
        """Route choice Node near the end, or the to Node when none was inserted."""
        if self.to_node_expand is None:
            return self._to_node
        return self.to_node_expand

    def set_cross_sections(self, cross_sections: Sequence[CrossSection]) -> None:
        """Replace the CrossSections, sorted by longitudinal position."""
        self.cross_sections = sorted(cross_sections, key=lambda cs: cs.longitudinal_position)
        for cs in self.cross_sections:
            cs.set_link(self)

    def add_cross_section(self, cross_section: CrossSection) -> None:
        """Insert a CrossSection after those at the same or a lower position."""
        position = len(self.cross_sections)
        for i, cs in enumerate(self.cross_sections):
            if cs.longitudinal_position > cross_section.longitudinal_position:
                position = i
                break
        self.cross_sections.insert(position, cross_section)
        cross_section.set_link(self)

    def cross_section_at_node(self, at_end: bool) -> CrossSection:
        if not self.cross_sections:
            raise ConfigurationError(f"Link {self.name} has no cross sections")
        return self.cross_sections[-1 if at_end else 0]

    # ------------------------------------------------------------------
    # Geometry

    def raw_vertices(self) -> List[Vertex]:
        return [self._from_node.vertex] + list(self.intermediate_vertices) + [self._to_node.vertex]

    def _snap_tolerance(self) -> float:
        settings = getattr(self.network, "settings", None)
        return settings.snap_tolerance if settings is not None else SNAP_TOLERANCE

    def assemble_design_line(self) -> Tuple[List[Vertex], bool, bool]:
        """Build the design line and report which ends were trimmed.

        Returns
        -------
        (list of Vertex, bool, bool)
            The design line, whether it was trimmed at the from Node and
            whether it was trimmed at the to Node.
        """
        result = self.raw_vertices()
        snap = self._snap_tolerance()
        trimmed_end = _trim_at_node(result, self._to_node, True, snap)
        trimmed_start = _trim_at_node(result, self._from_node, False, snap)
        if not trimmed_end and self._to_node.circle is not None:
            logger.debug("Link %s too short for the footprint of node %s", self.name, self._to_node.node_id)
        if not trimmed_start and self._from_node.circle is not None:
            logger.debug("Link %s too short for the footprint of node %s", self.name, self._from_node.node_id)
        return result, trimmed_start, trimmed_end

    def design_line(self) -> List[Vertex]:
        """Vertices of the design line, trimmed at the circles of the end Nodes.

        The line starts at the from Node and ends at the to Node.  When
        an end Node has a circle, an extra vertex is inserted where the
        Link enters or leaves that circle.
        """
        return self.assemble_design_line()[0]

    def design_line_array(self) -> np.ndarray:
        return vertices_to_array(self.design_line())

    def roadway(self) -> Tuple[np.ndarray, float]:
        """Design line without the parts inside the end Node circles.

        Returns
        -------
        (numpy.ndarray, float)
            The roadway line and the distance along the design line
            from the from Node to the start of the roadway.
        """
        vertices, trimmed_start, trimmed_end = self.assemble_design_line()
        station = 0.0
        if trimmed_start:
            station = polyline_length(vertices_to_array(vertices[:2]))
            vertices = vertices[1:]
        if trimmed_end:
            vertices = vertices[:-1]
        return vertices_to_array(vertices), station

    def roadway_line(self) -> np.ndarray:
        return self.roadway()[0]

    def calculate_length(self) -> float:
        """Recompute the length from the untrimmed vertices."""
        self._length = polyline_length(vertices_to_array(self.raw_vertices()))
        return self._length

    @property
    def length(self) -> float:
        if math.isnan(self._length):
            self.calculate_length()
        return self._length

    # ------------------------------------------------------------------
    # Rebuild steps

    def fix_phase1(self, typologies: TypologyRegistry, templates: MarkerTemplateRegistry) -> None:
        """Bind every element to its typology and every marker to its template.

        Raises
        ------
        ConfigurationError
            If a typology or road marker template cannot be resolved.
        """
        self.from_node_expand = None
        self.to_node_expand = None
        for cs in self.cross_sections:
            cs.set_link(self)
            for cse in cs.elements:
                cse.bind_typology(typologies)
                cse.bind_markers(templates)
        self.state = LinkState.TYPOLOGY_BOUND

    def compute_geometry(self) -> np.ndarray:
        self.calculate_length()
        self._roadway = self.roadway()
        self.state = LinkState.GEOMETRY_COMPUTED
        return self._roadway[0]

    def rebuild_lanes(self) -> None:
        """Re-build the Lanes of every CrossSection of the Link.

        Elements are handled from right to left and so are the markers
        within an element.  Existing Lanes are discarded.
        """
        roadway, station = self._roadway if self._roadway is not None else self.roadway()
        roadway_length = polyline_length(roadway)
        for cs in self.cross_sections:
            reference = cs.reference_line(roadway, roadway_length, station)
            for cse in reversed(cs.elements):
                cse.create_marker_vertices(reference)
                cse.create_lanes()
        self.state = LinkState.LANES_SYNTHESIZED

    def connect_successive_lanes(self) -> None:
        connect_successive_lanes_at_link(self.cross_sections, self._snap_tolerance())
        self.state = LinkState.LINKED_WITHIN_LINK

    def clear_lanes(self) -> None:
        for cs in self.cross_sections:
            cs.clear_lanes()
        self._roadway = None
        self.linked_ends = set()
        self.state = LinkState.UNBOUND

    def lanes(self) -> List[Lane]:
        result: List[Lane] = []
        for cs in self.cross_sections:
            result.extend(cs.collect_lanes())
        return result

    def ends_resolved(self) -> bool:
        """True when both ends are linked across a simple Node or are dead ends."""
        for end, node in (("start", self._from_node), ("end", self._to_node)):
            if end not in self.linked_ends and not node.is_dead_end():
                return False
        return True

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"Link({self._name!r}, {self._from_node.node_id} -> {self._to_node.node_id})"


def _delete_vertices_between(vertices: List[Vertex], start: Vertex, end: Vertex) -> None:
    """Remove interior vertices that are closer to both bounds than the bounds are to each other."""
    distance = start.distance(end)
    for i in range(len(vertices) - 2, 0, -1):
        v = vertices[i]
        if v.distance(start) < distance and v.distance(end) < distance:
            del vertices[i]


def _trim_at_node(vertices: List[Vertex], node: Node, at_end: bool, snap: float) -> bool:
    """Insert the vertex where the line crosses the circle of ``node``.

    Returns False when the node has no circle or the boundary segment
    is too short for the circle.
    """
    if node.circle is None:
        return False
    if at_end:
        p1, p2 = vertices[-2], vertices[-1]
    else:
        p1, p2 = vertices[1], vertices[0]
    fraction = circle_trim_fraction(
        np.array([p1.x, p1.y]),
        np.array([p2.x, p2.y]),
        np.array([node.circle.center.x, node.circle.center.y]),
        node.circle.radius,
    )
    if fraction is None:
        return False
    v = Vertex.weighted(fraction, p1, p2)
    if at_end:
        _delete_vertices_between(vertices, v, vertices[-1])
        if vertices[-2].distance(v) < snap:
            vertices[-2] = v
        else:
            vertices.insert(len(vertices) - 1, v)
    else:
        _delete_vertices_between(vertices, vertices[0], v)
        if vertices[1].distance(v) < snap:
            vertices[1] = v
        else:
            vertices.insert(1, v)
    return True


def connect_section_elements(
    previous: CrossSection,
    cross_section: CrossSection,
    via: Optional[Node] = None,
    snap_tolerance: float = SNAP_TOLERANCE,
) -> None:
    """Connect the Lanes of drivable elements to their neighbors.

    Elements with neighbor index -1 are left unconnected; not every
    drivable element has to continue into the next CrossSection.

    Raises
    ------
    ConfigurationError
        If a neighbor index points past the end of the element list.
    """
    for cse_prev in previous.elements:
        if not cse_prev.drivable:
            continue
        neighbor_index = cse_prev.resolved_neighbor_index
        if neighbor_index is None:
            neighbor_index = cse_prev.neighbor_index
        if neighbor_index is None or neighbor_index < 0:
            continue
        if neighbor_index >= len(cross_section.elements):
            raise ConfigurationError(
                f"Neighbor index {neighbor_index} of {cse_prev.describe()} is out of range for "
                f"{cross_section.describe()} with {len(cross_section.elements)} elements")
        cse = cross_section.elements[neighbor_index]
        cse.fix_lane_jump(cse_prev, via=via, snap_tolerance=snap_tolerance)


def connect_successive_lanes_at_link(
    cross_sections: Sequence[CrossSection],
    snap_tolerance: float = SNAP_TOLERANCE,
) -> None:
    """Link every CrossSection to the next one and connect their Lanes."""
    previous = None
    for cs in cross_sections:
        if previous is not None:
            previous.link_to_cross_section(cs)
            connect_section_elements(previous, cs, snap_tolerance=snap_tolerance)
        previous = cs


def connect_successive_lanes_at_node(node: Node, snap_tolerance: float = SNAP_TOLERANCE) -> bool:
    """Connect the Lanes of the two Links of a simple Node.

    Only Nodes with exactly one entering and one leaving Link are
    handled, and only when the leaving Link does not lead straight back
    to where the entering Link came from.  Every pair of connected
    Lanes is joined by a connecting Lane owned by the Node.

    Returns
    -------
    bool
        True if the Lanes were connected.
    """
    if not node.is_simple():
        return False
    from_link = node.entering[0]
    to_link = node.leaving[0]
    if from_link.from_node is to_link.to_node:
        return False
    if not from_link.cross_sections or not to_link.cross_sections:
        logger.debug("Node %s: link without cross sections, nothing to connect", node.node_id)
        return False
    in_cs = from_link.cross_section_at_node(True)
    out_cs = to_link.cross_section_at_node(False)
    in_cs.link_to_cross_section(out_cs)
    connect_section_elements(in_cs, out_cs, via=node, snap_tolerance=snap_tolerance)
    from_link.linked_ends.add("end")
    to_link.linked_ends.add("start")
    return True
