"""Planar geometry kernel.

Pure functions on points and polylines given as numpy arrays.  Only
the X and Y columns take part in the computations; a Z column, when
present, is carried along untouched or interpolated.
"""

from typing import Optional, Sequence

import numpy as np


def as_points(points: Sequence) -> np.ndarray:
    """Convert a sequence of points to a float array of shape (N, D)."""
    arr = np.asarray(points, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    return arr


def nearest_point_on_segment(p1: np.ndarray, p2: np.ndarray, point: np.ndarray) -> np.ndarray:
    """Project a point onto the segment p1-p2.

    Parameters
    ----------
    p1, p2 : numpy.ndarray
        End points of the segment (XY).
    point : numpy.ndarray
        Point to project (XY).

    Returns
    -------
    numpy.ndarray
        The point of the segment closest to ``point``.  For a
        degenerate segment this is ``p1``.
    """
    p1 = np.asarray(p1, dtype=float)[:2]
    p2 = np.asarray(p2, dtype=float)[:2]
    point = np.asarray(point, dtype=float)[:2]
    direction = p2 - p1
    denom = float(direction.dot(direction))
    if denom == 0.0:
        return p1.copy()
    t = float((point - p1).dot(direction)) / denom
    t = min(max(t, 0.0), 1.0)
    return p1 + t * direction


def segment_lengths(points: np.ndarray) -> np.ndarray:
    """Planar length of every segment of a polyline."""
    pts = as_points(points)
    if len(pts) < 2:
        return np.zeros(0)
    return np.linalg.norm(np.diff(pts[:, :2], axis=0), axis=1)


def polyline_length(points: np.ndarray) -> float:
    """Planar arc length of a polyline."""
    return float(segment_lengths(points).sum())


def cumulative_lengths(points: np.ndarray) -> np.ndarray:
    """Distance along the polyline of each of its vertices."""
    return np.concatenate(([0.0], np.cumsum(segment_lengths(points))))


def circle_trim_fraction(
    p1: np.ndarray,
    p2: np.ndarray,
    center: np.ndarray,
    radius: float
) -> Optional[float]:
    """Find where a segment towards a circle reaches the circle boundary.

    The circle centre is projected onto the segment p1-p2 and the
    boundary is placed ``radius`` before the projection, measured from
    ``p1``.

    Parameters
    ----------
    p1, p2 : numpy.ndarray
        End points of the segment (XY); ``p2`` is the end near the circle.
    center : numpy.ndarray
        Centre of the circle (XY).
    radius : float
        Radius of the circle.

    Returns
    -------
    float or None
        Fraction along p1-p2 of the boundary point, or None when the
        segment is degenerate or too short to reach outside the circle.
    """
    p1 = np.asarray(p1, dtype=float)[:2]
    p2 = np.asarray(p2, dtype=float)[:2]
    segment = float(np.linalg.norm(p2 - p1))
    if segment == 0.0:
        return None
    projection = nearest_point_on_segment(p1, p2, center)
    offset = float(np.linalg.norm(projection - p1)) - radius
    if offset < 0.0 or not offset < segment:
        return None
    return offset / segment
