"""Extension point for junctions that are not simple.

A simple Node (one entering and one leaving Link) is handled by
:func:`src.roadnet.link.connect_successive_lanes_at_node`.  Any other
Node needs a junction expander that decides which entering Lane feeds
which leaving Lane.  Whatever it does, the result must satisfy the same
post-condition as the simple case: every connecting Lane of the Node
has exactly one down Lane.  :func:`check_connecting_lanes` tests that
and :func:`connection_pairs` lists the resulting lane assignment so it
can be compared with the intended turn matrix.
"""

from typing import List, Tuple

from .lanes import Lane
from .node import Node


class JunctionExpander:
    """Connects the Lanes of a Node that has more than two Links.

    Subclasses implement :meth:`expand`; they create connecting Lanes
    with :meth:`Node.add_connecting_lane`.
    """

    def expand(self, node: Node) -> None:
        raise NotImplementedError

    def __call__(self, node: Node) -> None:
        self.expand(node)


def check_connecting_lanes(node: Node) -> List[str]:
    """List violations of the connecting Lane post-condition.

    Returns
    -------
    list of str
        One message per connecting Lane that does not have exactly one
        down Lane; empty when the Node is consistent.
    """
    problems = []
    for lane in node.connecting_lanes:
        if len(lane.down_lanes) != 1:
            problems.append(
                f"Connecting lane {lane!r} of node {node.node_id} has {len(lane.down_lanes)} down lanes")
        if len(lane.up_lanes) != 1:
            problems.append(
                f"Connecting lane {lane!r} of node {node.node_id} has {len(lane.up_lanes)} up lanes")
    return problems


def connection_pairs(node: Node) -> List[Tuple[Lane, Lane]]:
    """(entering Lane, leaving Lane) pairs joined by the connecting Lanes of ``node``."""
    pairs = []
    for lane in node.connecting_lanes:
        for up in lane.up_lanes:
            for down in lane.down_lanes:
                pairs.append((up, down))
    return pairs
