"""Positions along and across a road alignment.

A CrossSection covers a stretch of its Link's alignment and its
elements and markers sit at lateral offsets from that alignment.  This
module samples an alignment at a distance, cuts out the stretch that
belongs to a CrossSection and offsets a stretch sideways.  Offsets are
positive to the left of the direction of travel.
"""

import numpy as np

from .geometry import as_points, cumulative_lengths, segment_lengths


def point_at(alignment: np.ndarray, s: float) -> np.ndarray:
    """Point at distance ``s`` along the alignment.

    Distances before the start or beyond the end are clamped.
    """
    pts = as_points(alignment)
    if len(pts) == 1:
        return pts[0].copy()
    s_cumulative = cumulative_lengths(pts)
    s = min(max(s, 0.0), s_cumulative[-1])
    idx = np.searchsorted(s_cumulative, s, side='right') - 1
    if idx >= len(pts) - 1:
        idx = len(pts) - 2
    seg_length = s_cumulative[idx + 1] - s_cumulative[idx]
    t = (s - s_cumulative[idx]) / max(seg_length, 1e-12)
    return pts[idx] + t * (pts[idx + 1] - pts[idx])


def slice_alignment(alignment: np.ndarray, start: float, end: float) -> np.ndarray:
    """Cut the stretch between two distances out of an alignment.

    Parameters
    ----------
    alignment : numpy.ndarray
        Array of shape (N, D) with the alignment vertices.
    start, end : float
        Distances along the alignment; clamped to its length.

    Returns
    -------
    numpy.ndarray
        Vertices of the stretch, starting and ending at the requested
        distances and keeping every original vertex in between.
    """
    pts = as_points(alignment)
    s_cumulative = cumulative_lengths(pts)
    total = s_cumulative[-1]
    start = min(max(start, 0.0), total)
    end = min(max(end, start), total)
    inner = pts[(s_cumulative > start) & (s_cumulative < end)]
    first = point_at(pts, start)
    last = point_at(pts, end)
    if end - start <= 0.0:
        return np.vstack([first, last])
    return np.vstack([first, inner, last])


def unit_normals(alignment: np.ndarray) -> np.ndarray:
    """Left-pointing unit normal at every vertex of the alignment."""
    pts = as_points(alignment)
    if len(pts) < 2:
        return np.zeros((len(pts), 2))
    lengths = segment_lengths(pts)
    directions = np.diff(pts[:, :2], axis=0) / np.where(lengths == 0, 1, lengths)[:, None]
    # Average the directions of the two segments that meet at a vertex
    tangents = np.vstack([directions[:1], directions[:-1] + directions[1:], directions[-1:]])
    normals = np.column_stack([-tangents[:, 1], tangents[:, 0]])
    norms = np.linalg.norm(normals, axis=1, keepdims=True)
    return normals / np.where(norms == 0, 1, norms)


def offset_alignment(alignment: np.ndarray, offset: float) -> np.ndarray:
    """Offset an alignment sideways.

    Parameters
    ----------
    alignment : numpy.ndarray
        Array of shape (N, D), D >= 2.
    offset : float
        Lateral offset in metres, positive to the left.

    Returns
    -------
    numpy.ndarray
        The offset polyline, same shape as the input.
    """
    pts = as_points(alignment).copy()
    pts[:, :2] = pts[:, :2] + unit_normals(pts) * offset
    return pts
