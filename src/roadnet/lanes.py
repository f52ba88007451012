"""Lane synthesis from cross section elements and their road markers.

A Lane is the drivable strip between two laterally consecutive road
markers of a drivable CrossSectionElement.  Its centre line lies
halfway between the two markers; its lateral extent stops at the inner
edge of each stripe.  Lanes are linked into a directed graph through
their down (downstream) and up (upstream) Lane lists.

Lanes that cross a Node are owned by that Node instead of an element;
they are created while linking the Lanes of two Links.
"""

from typing import TYPE_CHECKING, List, Optional

import numpy as np

from src.utils.logging import get_logger

from .errors import ConfigurationError
from .markers import RoadMarkerAlong

if TYPE_CHECKING:  # pragma: no cover
    from .cross_section import CrossSectionElement
    from .link import Link
    from .node import Node

logger = get_logger(__name__)


class Lane:
    """A drivable strip with directional connectivity to other Lanes."""

    def __init__(
        self,
        center_line: np.ndarray,
        lateral_left: float,
        lateral_right: float,
        index: int,
        cse: Optional["CrossSectionElement"] = None,
        node: Optional["Node"] = None,
        left_marker: Optional[RoadMarkerAlong] = None,
        right_marker: Optional[RoadMarkerAlong] = None,
    ):
        self.center_line = np.asarray(center_line, dtype=float)
        self.lateral_left = lateral_left
        self.lateral_right = lateral_right
        self.index = index
        self.cse = cse
        self.node = node
        self.left_marker = left_marker
        self.right_marker = right_marker
        self.down_lanes: List["Lane"] = []
        self.up_lanes: List["Lane"] = []

    @classmethod
    def connecting(cls, node: "Node", up: "Lane", down: "Lane", index: int) -> "Lane":
        """Build the Lane that leads across ``node`` from ``up`` to ``down``."""
        lane = cls(
            center_line=np.vstack([up.end_point(), down.start_point()]),
            lateral_left=up.lateral_left,
            lateral_right=up.lateral_right,
            index=index,
            node=node,
        )
        up.add_down_lane(lane)
        lane.add_down_lane(down)
        return lane

    @property
    def width(self) -> float:
        return self.lateral_left - self.lateral_right

    @property
    def lateral_center(self) -> float:
        return (self.lateral_left + self.lateral_right) / 2

    @property
    def is_connecting(self) -> bool:
        return self.node is not None

    @property
    def link(self) -> Optional["Link"]:
        """The Link that owns this Lane, None for a connecting Lane."""
        if self.cse is None or self.cse.cross_section is None:
            return None
        return self.cse.cross_section.link

    def start_point(self) -> np.ndarray:
        return self.center_line[0]

    def end_point(self) -> np.ndarray:
        return self.center_line[-1]

    def add_down_lane(self, other: "Lane") -> None:
        """Add a directed edge from this Lane to ``other``."""
        if other not in self.down_lanes:
            self.down_lanes.append(other)
        if self not in other.up_lanes:
            other.up_lanes.append(self)

    def disconnect(self) -> None:
        """Remove every edge that touches this Lane."""
        for other in self.down_lanes:
            if self in other.up_lanes:
                other.up_lanes.remove(self)
        for other in self.up_lanes:
            if self in other.down_lanes:
                other.down_lanes.remove(self)
        self.down_lanes = []
        self.up_lanes = []

    def __repr__(self) -> str:
        if self.is_connecting:
            return f"Lane(node={self.node.node_id}, connecting={self.index})"
        if self.cse is None:
            return f"Lane(index={self.index})"
        return f"Lane({self.cse.describe()}, lane={self.index})"


def synthesize_lanes(cse: "CrossSectionElement") -> List[Lane]:
    """Create the Lanes of one CrossSectionElement.

    Parameters
    ----------
    cse : CrossSectionElement
        Element whose typology is bound and whose marker vertices have
        been computed.

    Returns
    -------
    list of Lane
        Lanes ordered left to right.  Empty for a non-drivable element
        or for a drivable element with fewer than two markers.

    Raises
    ------
    ConfigurationError
        If the typology is unbound, a marker has no vertices yet, or two
        markers leave no room for a Lane between them.
    """
    if cse.typology is None:
        raise ConfigurationError(f"CrossSectionElement {cse.describe()} has no bound typology")
    if not cse.typology.drivable:
        return []
    markers = sorted(cse.markers, key=lambda m: m.lateral_position)
    if len(markers) < 2:
        logger.warning("Drivable element %s has %d road marker(s); no lanes", cse.describe(), len(markers))
        return []
    lanes: List[Lane] = []
    for left, right in zip(markers[:-1], markers[1:]):
        if left.lateral_offset is None or right.lateral_offset is None:
            raise ConfigurationError(f"Road markers of {cse.describe()} have no vertices")
        lateral_left = left.lateral_offset - left.width / 2
        lateral_right = right.lateral_offset + right.width / 2
        if not lateral_left > lateral_right:
            raise ConfigurationError(
                f"Road markers at {left.lateral_position} and {right.lateral_position} "
                f"of {cse.describe()} leave no room for a lane")
        center = (left.vertices + right.vertices) / 2
        lanes.append(Lane(
            center_line=center,
            lateral_left=lateral_left,
            lateral_right=lateral_right,
            index=len(lanes),
            cse=cse,
            left_marker=left,
            right_marker=right,
        ))
    return lanes
