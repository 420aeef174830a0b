"""Overlap detection between rings.

Two rings intersect when their interiors share a positive area. Rings that
only touch along an edge or at a vertex do not intersect, so adjacent shapes
drawn against each other are left alone.
"""

from typing import List, Sequence, Union

import numpy as np
from shapely.geometry import Polygon
from shapely.strtree import STRtree

from .core.geometry_utils import ring_to_polygon

_AREA_EPS = 1e-10

RingLike = Union[np.ndarray, Polygon]


def _as_polygon(ring: RingLike) -> Polygon:
    if isinstance(ring, Polygon):
        return ring
    return ring_to_polygon(ring)


def _overlap_area(poly_a: Polygon, poly_b: Polygon) -> float:
    if not poly_a.intersects(poly_b) or poly_a.touches(poly_b):
        return 0.0
    overlap = poly_a.intersection(poly_b)
    return getattr(overlap, "area", 0.0)


def intersects(a: RingLike, b: RingLike, min_area: float = _AREA_EPS) -> bool:
    """Check whether two rings overlap with a shared interior.

    The test is symmetric: ``intersects(a, b) == intersects(b, a)``.

    Args:
        a: First ring (Nx2 array) or Shapely polygon
        b: Second ring (Nx2 array) or Shapely polygon
        min_area: Overlap area that must be exceeded (default: 1e-10)

    Returns:
        True if the interiors overlap, False for disjoint or merely touching rings

    Examples:
        >>> left = np.array([(0, 0), (10, 0), (10, 10), (0, 10)])
        >>> right = np.array([(10, 0), (20, 0), (20, 10), (10, 10)])
        >>> intersects(left, right)  # shared edge only
        False
    """
    poly_a = _as_polygon(a)
    poly_b = _as_polygon(b)

    if poly_a.is_empty or poly_b.is_empty:
        return False

    # The intersection is computed in a fixed order so the result does not
    # depend on argument order
    first, second = sorted((poly_a, poly_b), key=lambda p: (p.bounds, p.area, p.wkb))
    return _overlap_area(first, second) > min_area


def find_intersecting(
    candidate: RingLike,
    rings: Sequence[RingLike],
    min_area: float = _AREA_EPS,
) -> List[int]:
    """Indices of the rings that overlap ``candidate``.

    Uses spatial indexing (STRtree) to skip rings whose bounds are disjoint
    from the candidate.

    Args:
        candidate: Ring to test
        rings: Rings to test against
        min_area: Overlap area that must be exceeded (default: 1e-10)

    Returns:
        Sorted list of indices into ``rings``
    """
    if not rings:
        return []

    polygons = [_as_polygon(r) for r in rings]
    probe = _as_polygon(candidate)

    tree = STRtree(polygons)
    candidate_indices = tree.query(probe, predicate='intersects')

    return sorted(
        int(i) for i in candidate_indices
        if intersects(probe, polygons[i], min_area=min_area)
    )


__all__ = ['intersects', 'find_intersecting']
