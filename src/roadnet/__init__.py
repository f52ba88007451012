"""Road network model with lane synthesis and lane continuity.

Links between Nodes carry CrossSections made of CrossSectionElements
with longitudinal road markers.  Rebuilding a Network turns these into
Lanes and connects the Lanes across CrossSection, Link and simple Node
boundaries.
"""

from .vertex import Vertex
from .node import Node, Circle
from .typology import (
    CrossSectionElementTypology,
    RoadMarkerAlongTemplate,
    TypologyRegistry,
    MarkerTemplateRegistry,
)
from .markers import RoadMarkerAlong
from .lanes import Lane, synthesize_lanes
from .cross_section import CrossSection, CrossSectionElement, NO_NEIGHBOR
from .link import (
    Link,
    LinkState,
    connect_section_elements,
    connect_successive_lanes_at_link,
    connect_successive_lanes_at_node,
)
from .junction import JunctionExpander, check_connecting_lanes, connection_pairs
from .network import Network, RebuildReport, RebuildResult
from .settings import RebuildSettings
from .errors import ConfigurationError, ParseError, RegistryLockedError, RoadNetworkError

__all__ = [
    "Vertex",
    "Node",
    "Circle",
    "CrossSectionElementTypology",
    "RoadMarkerAlongTemplate",
    "TypologyRegistry",
    "MarkerTemplateRegistry",
    "RoadMarkerAlong",
    "Lane",
    "synthesize_lanes",
    "CrossSection",
    "CrossSectionElement",
    "NO_NEIGHBOR",
    "Link",
    "LinkState",
    "connect_section_elements",
    "connect_successive_lanes_at_link",
    "connect_successive_lanes_at_node",
    "JunctionExpander",
    "check_connecting_lanes",
    "connection_pairs",
    "Network",
    "RebuildReport",
    "RebuildResult",
    "RebuildSettings",
    "ConfigurationError",
    "ParseError",
    "RegistryLockedError",
    "RoadNetworkError",
]
