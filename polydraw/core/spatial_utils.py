"""Common spatial operation utilities.

This module provides nearest-vertex and nearest-edge lookups used by the
edit helpers.
"""

from typing import Tuple
import numpy as np


def point_to_segment_projection(
    point: np.ndarray,
    segment_start: np.ndarray,
    segment_end: np.ndarray
) -> Tuple[float, np.ndarray, float]:
    """Project a point onto a line segment and calculate distance.

    Uses parametric representation: P(t) = start + t * (end - start)
    where t is clamped to [0, 1] for segment projection.

    Args:
        point: Point coordinates (only first 2 used)
        segment_start: Segment start point (only first 2 used)
        segment_end: Segment end point (only first 2 used)

    Returns:
        Tuple of (parameter t, projected_point, distance)

    Examples:
        >>> t, proj, dist = point_to_segment_projection(
        ...     np.array([0.5, 1.0]), np.array([0.0, 0.0]), np.array([1.0, 0.0]))
        >>> t, dist
        (0.5, 1.0)
    """
    pt = point[:2]
    seg_start_2d = segment_start[:2]
    seg_end_2d = segment_end[:2]

    line_vec = seg_end_2d - seg_start_2d
    line_len_sq = np.dot(line_vec, line_vec)

    # Degenerate segment (start == end)
    if line_len_sq < 1e-10:
        distance = float(np.linalg.norm(pt - seg_start_2d))
        return 0.0, seg_start_2d.copy(), distance

    t = np.dot(pt - seg_start_2d, line_vec) / line_len_sq
    t = max(0.0, min(1.0, float(t)))

    projection = seg_start_2d + t * line_vec
    distance = float(np.linalg.norm(pt - projection))

    return t, projection, distance


def nearest_vertex(vertices: np.ndarray, point: np.ndarray) -> Tuple[int, float]:
    """Index of and distance to the vertex closest to ``point``.

    Args:
        vertices: Open vertex array (Nx2), N >= 1
        point: Query point

    Returns:
        Tuple of (index, distance). Ties resolve to the lowest index.
    """
    distances = np.linalg.norm(vertices[:, :2] - point[:2], axis=1)
    index = int(np.argmin(distances))
    return index, float(distances[index])


def nearest_edge(vertices: np.ndarray, point: np.ndarray) -> Tuple[int, float]:
    """Start index of and distance to the ring edge closest to ``point``.

    Edge ``i`` runs from ``vertices[i]`` to ``vertices[(i + 1) % N]``.

    Args:
        vertices: Open vertex array (Nx2), N >= 2
        point: Query point

    Returns:
        Tuple of (edge start index, distance). Ties resolve to the lowest index.
    """
    best_index = 0
    best_distance = float('inf')
    count = len(vertices)

    for i in range(count):
        _, _, distance = point_to_segment_projection(point, vertices[i], vertices[(i + 1) % count])
        if distance < best_distance:
            best_index = i
            best_distance = distance

    return best_index, best_distance


__all__ = [
    'point_to_segment_projection',
    'nearest_vertex',
    'nearest_edge',
]
