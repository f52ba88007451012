"""Immutable points used to describe Link geometry."""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple

import numpy as np


@dataclass(frozen=True)
class Vertex:
    """A point in the network plane with an optional height."""

    x: float
    y: float
    z: float = 0.0

    @staticmethod
    def weighted(fraction: float, a: "Vertex", b: "Vertex") -> "Vertex":
        """Return the point at ``fraction`` of the way from ``a`` to ``b``.

        A fraction of 0 yields ``a``, 1 yields ``b``; values outside
        [0, 1] extrapolate along the same line.
        """
        return Vertex(
            a.x + fraction * (b.x - a.x),
            a.y + fraction * (b.y - a.y),
            a.z + fraction * (b.z - a.z),
        )

    def distance(self, other: "Vertex") -> float:
        """Euclidean distance to another Vertex."""
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_record(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "z": self.z}

    def __str__(self) -> str:
        return f"({self.x:.3f},{self.y:.3f},{self.z:.3f})"


def vertices_to_array(vertices: Iterable[Vertex]) -> np.ndarray:
    """Stack vertices into an array of shape (N, 3)."""
    return np.array([v.as_tuple() for v in vertices], dtype=float).reshape(-1, 3)
