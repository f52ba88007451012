"""Tabular views of the lane graph.

After a rebuild the Lanes and their down Lane edges can be inspected
as pandas DataFrames: one row per Lane, one row per edge, and a turn
matrix per Node that counts how many entering Lanes reach each leaving
Link.
"""

from pathlib import Path
from typing import Dict, List

import pandas as pd

from .geometry import polyline_length
from .junction import connection_pairs
from .lanes import Lane
from .node import Node

LANE_COLUMNS = [
    "lane", "link", "cross_section", "element", "lane_index", "connecting",
    "node", "lateral_left", "lateral_right", "width", "length", "n_down", "n_up",
]

EDGE_COLUMNS = ["from_lane", "to_lane", "from_link", "to_link", "via_node"]


def _lane_record(lane: Lane) -> Dict:
    link = lane.link
    return {
        "lane": repr(lane),
        "link": link.name if link is not None else None,
        "cross_section": lane.cse.cross_section.index if lane.cse is not None else None,
        "element": lane.cse.index if lane.cse is not None else None,
        "lane_index": lane.index,
        "connecting": lane.is_connecting,
        "node": lane.node.node_id if lane.node is not None else None,
        "lateral_left": lane.lateral_left,
        "lateral_right": lane.lateral_right,
        "width": lane.width,
        "length": polyline_length(lane.center_line),
        "n_down": len(lane.down_lanes),
        "n_up": len(lane.up_lanes),
    }


def lane_table(network) -> pd.DataFrame:
    """One row per Lane of the Network, connecting Lanes included."""
    records = [_lane_record(lane) for lane in network.lanes()]
    return pd.DataFrame(records, columns=LANE_COLUMNS)


def edge_table(network) -> pd.DataFrame:
    """One row per down Lane edge of the Network."""
    records: List[Dict] = []
    for lane in network.lanes():
        for down in lane.down_lanes:
            from_link = lane.link
            to_link = down.link
            records.append({
                "from_lane": repr(lane),
                "to_lane": repr(down),
                "from_link": from_link.name if from_link is not None else None,
                "to_link": to_link.name if to_link is not None else None,
                "via_node": down.node.node_id if down.node is not None else (
                    lane.node.node_id if lane.node is not None else None),
            })
    return pd.DataFrame(records, columns=EDGE_COLUMNS)


def turn_matrix(node: Node) -> pd.DataFrame:
    """Count connections from entering Links (rows) to leaving Links (columns)."""
    pairs = connection_pairs(node)
    rows = [up.link.name if up.link is not None else None for up, _ in pairs]
    columns = [down.link.name if down.link is not None else None for _, down in pairs]
    if not pairs:
        return pd.DataFrame(dtype=int)
    return pd.crosstab(pd.Series(rows, name="entering"), pd.Series(columns, name="leaving"))


def export_lane_table(network, output_dir: Path) -> Path:
    """Write the lane table as CSV and return its path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / "lanes.csv"
    lane_table(network).to_csv(output_path, index=False)
    return output_path
