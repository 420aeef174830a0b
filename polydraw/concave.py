"""Concave hull of a ring's vertices.

Implements the k-nearest-neighbours boundary walk (Moreira & Santos, 2007).
Starting from the lowest point, the walk repeatedly moves to the neighbour
that makes the sharpest right-hand turn without crossing the boundary built
so far. When the walk gets stuck, or the closed boundary leaves points
outside, it restarts with one more neighbour.
"""

import logging
import math
from typing import List, Optional

import numpy as np
from shapely.geometry import MultiPoint, Polygon

from .core.errors import HullConstructionError
from .core.geometry_utils import as_points, open_ring, orient_ccw
from .core.validation_utils import ensure_ring_closed

logger = logging.getLogger(__name__)

_AREA_EPS = 1e-10
_COVER_TOLERANCE = 1e-7


def _cross(o: np.ndarray, a: np.ndarray, b: np.ndarray) -> float:
    return float((a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0]))


def _segments_cross(p1: np.ndarray, p2: np.ndarray, q1: np.ndarray, q2: np.ndarray) -> bool:
    """True if segments p1-p2 and q1-q2 touch or cross."""
    d1 = _cross(q1, q2, p1)
    d2 = _cross(q1, q2, p2)
    d3 = _cross(p1, p2, q1)
    d4 = _cross(p1, p2, q2)

    if ((d1 > 0 > d2) or (d1 < 0 < d2)) and ((d3 > 0 > d4) or (d3 < 0 < d4)):
        return True

    # Touching or collinear contact counts as crossing
    def on_segment(a, b, c):
        return (min(a[0], b[0]) <= c[0] <= max(a[0], b[0])
                and min(a[1], b[1]) <= c[1] <= max(a[1], b[1]))

    return ((d1 == 0 and on_segment(q1, q2, p1)) or (d2 == 0 and on_segment(q1, q2, p2))
            or (d3 == 0 and on_segment(p1, p2, q1)) or (d4 == 0 and on_segment(p1, p2, q2)))


def _clockwise_turns(current: np.ndarray, candidates: np.ndarray, back_angle: float) -> np.ndarray:
    """Clockwise angle from the direction back to the previous vertex to each candidate."""
    angles = np.arctan2(candidates[:, 1] - current[1], candidates[:, 0] - current[0])
    return np.mod(back_angle - angles, 2 * math.pi)


def _walk(points: np.ndarray, k: int) -> Optional[List[int]]:
    """Run one boundary walk with ``k`` neighbours.

    Returns:
        Indices of the hull vertices in walking order (first not repeated), or
        None if the walk got stuck.
    """
    count = len(points)
    first = int(np.lexsort((points[:, 0], points[:, 1]))[0])

    hull = [first]
    available = np.ones(count, dtype=bool)
    available[first] = False
    current = first
    back_angle = math.pi
    step = 2

    while (current != first or step == 2) and step <= count + 2:
        if step == 5:
            available[first] = True

        indices = np.flatnonzero(available)
        if len(indices) == 0:
            break

        distances = np.linalg.norm(points[indices] - points[current], axis=1)
        nearest = indices[np.argsort(distances, kind='stable')[:k]]

        turns = _clockwise_turns(points[current], points[nearest], back_angle)
        ordered = nearest[np.argsort(-turns, kind='stable')]

        chosen = None
        for candidate in ordered:
            crossing = False
            # Edges of the hull built so far, except the one ending at current
            for i in range(len(hull) - 2):
                if candidate == first and i == 0:
                    continue
                if _segments_cross(points[current], points[candidate], points[hull[i]], points[hull[i + 1]]):
                    crossing = True
                    break
            if not crossing:
                chosen = int(candidate)
                break

        if chosen is None:
            return None

        back_angle = math.atan2(points[current][1] - points[chosen][1],
                                points[current][0] - points[chosen][0])
        current = chosen
        if current != first:
            hull.append(current)
            available[current] = False
        step += 1

    if current != first:
        return None

    return hull


def _covers_all(hull_points: np.ndarray, points: np.ndarray) -> bool:
    polygon = Polygon(ensure_ring_closed(hull_points))
    if not polygon.is_valid or polygon.area <= _AREA_EPS:
        return False
    return polygon.buffer(_COVER_TOLERANCE).covers(MultiPoint(points))


def concave_hull(
    ring: np.ndarray,
    k: int = 3,
    max_iterations: int = 100,
) -> np.ndarray:
    """Build a concave boundary around the vertices of a ring.

    Args:
        ring: Ring or point cloud (Nx2), closed or open
        k: Initial number of nearest neighbours to consider (>= 3)
        max_iterations: Maximum number of walks (one per k value) to attempt

    Returns:
        Closed counter-clockwise ring whose vertices are a subset of the input

    Raises:
        HullConstructionError: If the points are too few or collinear, or no
            walk closes a boundary covering every point within the budget

    Examples:
        >>> square = np.array([(0, 0), (10, 0), (10, 10), (0, 10), (5, 5)])
        >>> hull = concave_hull(square)
        >>> len(hull)  # interior point (5, 5) is not on the boundary
        5
    """
    points = np.unique(open_ring(as_points(ring)), axis=0)
    count = len(points)

    if count < 3:
        raise HullConstructionError(f"Need at least 3 distinct points, got {count}")

    if MultiPoint(points).convex_hull.area <= _AREA_EPS:
        raise HullConstructionError("Points are collinear")

    if count == 3:
        return orient_ccw(ensure_ring_closed(points))

    k = max(3, int(k))
    attempts = 0

    while k < count and attempts < max_iterations:
        attempts += 1
        hull = _walk(points, k)
        if hull is not None and len(hull) >= 3 and _covers_all(points[hull], points):
            logger.debug("Concave hull closed with k=%d after %d attempt(s)", k, attempts)
            return orient_ccw(ensure_ring_closed(points[hull]))
        k += 1

    raise HullConstructionError(
        f"No closed hull found for {count} points after {attempts} attempt(s)"
    )


__all__ = ['concave_hull']
