"""Cross sections of a Link.

A CrossSection describes the lateral profile of a Link from its
longitudinal position up to the position of the next CrossSection (or
the end of the Link).  It is an ordered, left to right, list of
CrossSectionElements.  The profile is centred on the Link's design
line; lateral offsets are positive to the left of the direction of
travel.

Each element may point at its counterpart in the next CrossSection
through a neighbor index.  The Lanes of two linked elements are wired
together by :meth:`CrossSectionElement.fix_lane_jump`.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from src.utils.logging import get_logger

from .alignment import slice_alignment
from .errors import ConfigurationError
from .lanes import Lane, synthesize_lanes
from .markers import RoadMarkerAlong
from .typology import CrossSectionElementTypology, MarkerTemplateRegistry, TypologyRegistry

if TYPE_CHECKING:  # pragma: no cover
    from .link import Link
    from .node import Node

logger = get_logger(__name__)

NO_NEIGHBOR = -1


class CrossSectionElement:
    """One lateral slice of a CrossSection, e.g. a carriageway or a verge.

    Parameters
    ----------
    typology_name : str
        Name of the typology, resolved case-insensitively by
        :meth:`bind_typology`.
    width : float
        Width of the element in metres.
    markers : list of RoadMarkerAlong, optional
        Longitudinal markers, positioned from the left edge of the
        element.
    neighbor_index : int, optional
        Index of the counterpart element in the next CrossSection.
        ``-1`` means the element intentionally has no counterpart;
        None means the index is derived when the CrossSections are
        linked.
    """

    def __init__(
        self,
        typology_name: Optional[str],
        width: float,
        markers: Optional[Sequence[RoadMarkerAlong]] = None,
        neighbor_index: Optional[int] = None,
        cross_section: Optional["CrossSection"] = None,
    ):
        self.typology_name = typology_name
        self.width = float(width)
        self.markers: List[RoadMarkerAlong] = list(markers or [])
        self.neighbor_index = neighbor_index
        # neighbor index in effect, set when the CrossSection is linked
        self.resolved_neighbor_index: Optional[int] = None
        self.cross_section = cross_section
        self.typology: Optional[CrossSectionElementTypology] = None
        self.lanes: List[Lane] = []
        self.neighbor: Optional["CrossSectionElement"] = None

    @property
    def drivable(self) -> bool:
        if self.typology is None:
            raise ConfigurationError(f"CrossSectionElement {self.describe()} has no bound typology")
        return self.typology.drivable

    @property
    def index(self) -> int:
        if self.cross_section is None:
            return -1
        return self.cross_section.elements.index(self)

    def describe(self) -> str:
        if self.cross_section is None:
            return f"{self.typology_name}"
        return f"{self.cross_section.describe()}/cse{self.index}"

    def bind_typology(self, typologies: TypologyRegistry) -> None:
        """Resolve the typology of this element.

        Raises
        ------
        ConfigurationError
            If the element has no typology name or the name is unknown.
        """
        if self.typology_name is None:
            raise ConfigurationError(f"CrossSectionElement {self.describe()} has null typologyName")
        self.typology = typologies.lookup(self.typology_name)
        if self.typology is None:
            raise ConfigurationError(f"Undefined crossSectionElementTypology {self.typology_name}")

    def bind_markers(self, templates: MarkerTemplateRegistry) -> None:
        for marker in self.markers:
            marker.bind_template(templates)

    def left_offset(self) -> float:
        """Lateral offset of the left edge of this element."""
        if self.cross_section is None:
            return self.width / 2
        return self.cross_section.element_left_offset(self)

    def create_marker_vertices(self, reference: np.ndarray) -> None:
        left = self.left_offset()
        for marker in reversed(self.markers):
            marker.create_vertices(reference, left)

    def create_lanes(self) -> List[Lane]:
        """Replace the Lanes of this element with freshly synthesized ones."""
        self.clear_lanes()
        self.lanes = synthesize_lanes(self)
        return self.lanes

    def clear_lanes(self) -> None:
        for lane in self.lanes:
            lane.disconnect()
        self.lanes = []
        self.neighbor = None

    def fix_lane_jump(
        self,
        previous: "CrossSectionElement",
        via: Optional["Node"] = None,
        snap_tolerance: float = 0.0001,
    ) -> List[Tuple[Lane, Lane]]:
        """Connect the Lanes of ``previous`` to the Lanes of this element.

        Lanes are paired counting from the right.  When ``via`` is
        given every pair is joined by a connecting Lane owned by that
        Node; otherwise the Lanes are joined directly and a downstream
        Lane with a single upstream Lane is made to start where that
        Lane ends.

        Returns
        -------
        list of (Lane, Lane)
            The (upstream, downstream) pairs that were connected.
        """
        previous.neighbor = self
        pairs = pair_lanes(previous.lanes, self.lanes)
        for up, down in pairs:
            if via is None:
                up.add_down_lane(down)
            else:
                via.add_connecting_lane(up, down)
        if via is None:
            for up, down in pairs:
                if len(down.up_lanes) != 1:
                    continue
                jump = float(np.linalg.norm(down.start_point()[:2] - up.end_point()[:2]))
                if jump > snap_tolerance:
                    logger.debug("Lane jump of %.3f m from %s to %s", jump, up, down)
                    down.center_line = down.center_line.copy()
                    down.center_line[0] = up.end_point()
        return pairs

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "typology": self.typology_name,
            "width": self.width,
            "roadMarkerAlong": [m.to_record() for m in self.markers],
        }
        if self.neighbor_index is not None:
            record["neighborIndex"] = self.neighbor_index
        return record

    def __repr__(self) -> str:
        return f"CrossSectionElement({self.typology_name!r}, width={self.width}, neighbor={self.neighbor_index})"


def pair_lanes(up_lanes: Sequence[Lane], down_lanes: Sequence[Lane]) -> List[Tuple[Lane, Lane]]:
    """Pair upstream and downstream Lanes counting from the right.

    Equal counts give the identity mapping.  Upstream Lanes without a
    counterpart merge into the leftmost downstream Lane; downstream
    Lanes without a counterpart branch off the leftmost upstream Lane.
    """
    n_up = len(up_lanes)
    n_down = len(down_lanes)
    if n_up == 0 or n_down == 0:
        return []
    pairs = []
    for k in range(min(n_up, n_down)):
        pairs.append((up_lanes[n_up - 1 - k], down_lanes[n_down - 1 - k]))
    for i in range(n_up - n_down):
        pairs.append((up_lanes[i], down_lanes[0]))
    for i in range(n_down - n_up):
        pairs.append((up_lanes[0], down_lanes[i]))
    pairs.sort(key=lambda pair: (pair[0].index, pair[1].index))
    return pairs


class CrossSection:
    """Lateral profile of a Link from a longitudinal position onwards."""

    def __init__(
        self,
        longitudinal_position: float = 0.0,
        elements: Optional[Sequence[CrossSectionElement]] = None,
        link: Optional["Link"] = None,
    ):
        self.longitudinal_position = float(longitudinal_position)
        self.link = link
        self.next_cross_section: Optional["CrossSection"] = None
        self.previous_cross_section: Optional["CrossSection"] = None
        self.elements: List[CrossSectionElement] = []
        self.set_elements(elements or [])

    def set_elements(self, elements: Sequence[CrossSectionElement]) -> None:
        self.elements = list(elements)
        for cse in self.elements:
            cse.cross_section = self

    def set_link(self, link: "Link") -> None:
        self.link = link

    @property
    def width(self) -> float:
        return sum(cse.width for cse in self.elements)

    @property
    def index(self) -> int:
        if self.link is None:
            return -1
        return self.link.cross_sections.index(self)

    def describe(self) -> str:
        link_name = self.link.name if self.link is not None else "?"
        return f"{link_name}/cs{self.index}"

    def element_left_offset(self, cse: CrossSectionElement) -> float:
        """Lateral offset of the left edge of ``cse``."""
        offset = self.width / 2
        for element in self.elements:
            if element is cse:
                return offset
            offset -= element.width
        raise ConfigurationError(f"Element {cse!r} is not part of {self.describe()}")

    def longitudinal_range(self, link_length: float) -> Tuple[float, float]:
        """Stretch of the roadway line covered by this CrossSection."""
        end = link_length
        if self.link is not None:
            sections = self.link.cross_sections
            position = sections.index(self)
            if position + 1 < len(sections):
                end = sections[position + 1].longitudinal_position
        return self.longitudinal_position, max(end, self.longitudinal_position)

    def reference_line(self, roadway: np.ndarray, roadway_length: float, station: float = 0.0) -> np.ndarray:
        """Stretch of the roadway line covered by this CrossSection.

        Longitudinal positions are measured from the from Node;
        ``station`` is the distance from the from Node to the start of
        the roadway line.
        """
        start, end = self.longitudinal_range(station + roadway_length)
        return slice_alignment(roadway, start - station, end - station)

    def drivable_elements(self) -> List[CrossSectionElement]:
        return [cse for cse in self.elements if cse.drivable]

    def link_to_cross_section(self, other: "CrossSection") -> None:
        """Make ``other`` the successor of this CrossSection.

        Elements whose neighbor index is unset get one: the k-th
        drivable element from the right is matched to the k-th drivable
        element from the right of ``other``; unmatched elements get -1.
        """
        self.next_cross_section = other
        other.previous_cross_section = self
        for cse in self.elements:
            cse.resolved_neighbor_index = cse.neighbor_index
        mine = self.drivable_elements()
        theirs = other.drivable_elements()
        for k, cse in enumerate(reversed(mine)):
            if cse.neighbor_index is not None:
                continue
            if k < len(theirs):
                cse.resolved_neighbor_index = other.elements.index(theirs[len(theirs) - 1 - k])
        for cse in self.elements:
            if cse.resolved_neighbor_index is None:
                cse.resolved_neighbor_index = NO_NEIGHBOR

    def collect_lanes(self) -> List[Lane]:
        """All Lanes of this CrossSection, left to right."""
        lanes: List[Lane] = []
        for cse in self.elements:
            lanes.extend(cse.lanes)
        return lanes

    def clear_lanes(self) -> None:
        for cse in self.elements:
            cse.clear_lanes()

    def to_record(self) -> Dict[str, Any]:
        return {
            "longitudinalPosition": self.longitudinal_position,
            "crossSectionElement": [cse.to_record() for cse in self.elements],
        }

    def __repr__(self) -> str:
        return f"CrossSection({self.longitudinal_position}, {len(self.elements)} elements)"
