"""Network vertices.

A Node sits at a position and may carry a bounding circle that
describes its physical footprint.  Links that end or start at a Node
with a circle get their design line trimmed at the circle boundary.
The Network keeps the lists of entering and leaving Links up to date.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from .errors import ConfigurationError
from .lanes import Lane
from .vertex import Vertex

if TYPE_CHECKING:  # pragma: no cover
    from .link import Link


@dataclass(frozen=True)
class Circle:
    """Bounding circle of a Node."""

    center: Vertex
    radius: float

    def __post_init__(self):
        if not self.radius >= 0:
            raise ConfigurationError(f"Circle radius must be non-negative, got {self.radius}")


@dataclass(eq=False)
class Node:
    """A vertex of the road network.

    Nodes compare by identity; two Nodes at the same position are
    still different Nodes.
    """

    node_id: int
    name: str
    x: float
    y: float
    z: float = 0.0
    circle: Optional[Circle] = None
    entering: List["Link"] = field(default_factory=list)
    """Links that end at this Node."""

    leaving: List["Link"] = field(default_factory=list)
    """Links that start at this Node."""

    connecting_lanes: List[Lane] = field(default_factory=list)
    """Lanes that cross this Node, created while linking lanes."""

    @property
    def vertex(self) -> Vertex:
        return Vertex(self.x, self.y, self.z)

    def distance(self, other: "Node") -> float:
        return self.vertex.distance(other.vertex)

    def set_circle(self, radius: Optional[float], center: Optional[Vertex] = None) -> None:
        """Set or clear the bounding circle; it is centred on the Node by default."""
        if radius is None:
            self.circle = None
        else:
            self.circle = Circle(center if center is not None else self.vertex, float(radius))

    def incoming_count(self) -> int:
        return len(self.entering)

    def leaving_count(self) -> int:
        return len(self.leaving)

    def is_simple(self) -> bool:
        """True for a Node with exactly one entering and one leaving Link."""
        return self.incoming_count() == 1 and self.leaving_count() == 1

    def is_dead_end(self) -> bool:
        return self.incoming_count() + self.leaving_count() <= 1

    def incident_links(self) -> List["Link"]:
        return list(self.entering) + [link for link in self.leaving if link not in self.entering]

    def oversized_for(self) -> List["Link"]:
        """Incident Links shorter than twice the circle radius.

        The circle of a Node should not exceed half the length of any
        of its Links.  This is not enforced; the result is used to warn.
        """
        if self.circle is None:
            return []
        return [link for link in self.incident_links() if 2 * self.circle.radius > link.length]

    def add_connecting_lane(self, up: Lane, down: Lane) -> Lane:
        """Create the Lane that leads across this Node from ``up`` to ``down``."""
        lane = Lane.connecting(self, up, down, index=len(self.connecting_lanes))
        self.connecting_lanes.append(lane)
        return lane

    def clear_connecting_lanes(self) -> None:
        """Drop the connecting Lanes together with their edges."""
        for lane in self.connecting_lanes:
            lane.disconnect()
        self.connecting_lanes = []

    def __repr__(self) -> str:
        return f"Node({self.node_id}, {self.name!r}, {self.vertex})"
