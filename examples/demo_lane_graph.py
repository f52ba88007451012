"""Demo script for lane synthesis and lane continuity.

This script builds a small network: a two-lane road that runs through
a simple node with a physical footprint and continues on a second
link.  It rebuilds the network and prints the design lines, the lanes
and the lane edges.

Usage:
    python examples/demo_lane_graph.py
"""

import sys
from pathlib import Path

import pandas as pd

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.roadnet import CrossSection, CrossSectionElement, Network, RoadMarkerAlong, Vertex
from src.roadnet.lane_graph import edge_table, lane_table, turn_matrix


def make_cross_section(lane_count: int, lane_width: float = 3.5) -> CrossSection:
    """Create a verge / carriageway / verge profile.

    Parameters
    ----------
    lane_count : int
        Number of lanes on the carriageway.
    lane_width : float
        Distance between consecutive markers in metres.

    Returns
    -------
    CrossSection
        Profile at the start of a link.
    """
    markers = [RoadMarkerAlong("|", 0.2)]
    for i in range(1, lane_count):
        markers.append(RoadMarkerAlong(":", 0.2 + i * lane_width))
    markers.append(RoadMarkerAlong("|", 0.2 + lane_count * lane_width))
    return CrossSection(0.0, [
        CrossSectionElement("grass", 1.0),
        CrossSectionElement("road", lane_count * lane_width + 0.4, markers),
        CrossSectionElement("grass", 1.0),
    ])


def build_network() -> Network:
    network = Network.from_config_file()
    west = network.add_node("west", network.next_node_id(), -200.0, 0.0)
    middle = network.add_node("middle", network.next_node_id(), 0.0, 0.0, radius=12.0)
    east = network.add_node("east", network.next_node_id(), 180.0, 60.0)
    network.add_link("approach", west.node_id, middle.node_id,
                     cross_sections=[make_cross_section(2)])
    network.add_link("departure", middle.node_id, east.node_id,
                     cross_sections=[make_cross_section(2)],
                     intermediate_vertices=[Vertex(100.0, 10.0)])
    return network


def main() -> int:
    print("=" * 60)
    print("Lane graph demo")
    print("=" * 60)

    network = build_network()
    report = network.rebuild()
    print(f"Rebuild result: {report.result.value} ({report.lane_count} lanes)")
    if not report.ok:
        for key, error in report.errors.items():
            print(f"  ✗ {key}: {error}")
        return 1

    for link in network.links.values():
        line = " -> ".join(str(v) for v in link.design_line())
        print(f"\n{link.name} (length {link.length:.1f} m, {link.state.value})")
        print(f"  design line: {line}")

    with pd.option_context("display.width", 160, "display.max_columns", 20):
        print("\nLanes:")
        print(lane_table(network))
        print("\nEdges:")
        print(edge_table(network))
        print("\nTurn matrix at node 'middle':")
        print(turn_matrix(network.lookup_node(1)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
