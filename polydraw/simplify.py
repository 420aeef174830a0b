"""Ring simplification for freehand strokes.

A freehand stroke arrives as every pointer-move sample, so it is noisy and
dense. :func:`simplify` reduces it to a closed ring using the
Ramer-Douglas-Peucker algorithm from the high-performance simplification
library.
"""

import logging
from typing import Iterable, Sequence

import numpy as np
from shapely.geometry import MultiPoint
from simplification.cutil import simplify_coords as _rdp_simplify

from .core.errors import DegeneratePolygonError, InsufficientPointsError, InvalidConfigurationError
from .core.geometry_utils import (
    as_points,
    open_ring,
    orient_ccw,
    remove_duplicate_vertices,
)
from .core.validation_utils import count_distinct_vertices, ensure_ring_closed

logger = logging.getLogger(__name__)

_AREA_EPS = 1e-10


# ============================================================================
# Private processing functions (work with numpy arrays)
# ============================================================================

def _simplify_rdp_wrapper(vertices: np.ndarray, epsilon: float) -> np.ndarray:
    """Internal function: Simplify an open path using Ramer-Douglas-Peucker.

    Args:
        vertices: Numpy array of 2D vertices (Nx2)
        epsilon: Tolerance value for RDP algorithm

    Returns:
        Numpy array of simplified vertices
    """
    if len(vertices) < 3:
        return vertices.copy()

    # The simplification library expects a list or numpy array
    # and returns a numpy array if input is numpy
    result = _rdp_simplify(np.ascontiguousarray(vertices, dtype=np.float64), epsilon)
    return np.array(result) if not isinstance(result, np.ndarray) else result


def _simplify_closed(vertices: np.ndarray, epsilon: float) -> np.ndarray:
    """Internal function: Simplify a ring given as open vertices.

    RDP needs distinct endpoints, so the ring is split at the vertex farthest
    from the first one and each half is simplified on its own.

    Returns:
        Open vertex array (first vertex not repeated)
    """
    distances = np.linalg.norm(vertices - vertices[0], axis=1)
    split = int(np.argmax(distances))

    if split == 0:
        return vertices[:1].copy()

    first_half = _simplify_rdp_wrapper(vertices[:split + 1], epsilon)
    second_half = _simplify_rdp_wrapper(np.vstack([vertices[split:], vertices[:1]]), epsilon)

    # Both halves share the split vertex and the ring's first vertex
    return np.vstack([first_half[:-1], second_half[:-1]])


# ============================================================================
# Public API
# ============================================================================

def simplify(
    points: Iterable[Sequence[float]],
    factor: float
) -> np.ndarray:
    """Reduce a raw point sequence to a closed, simplified ring.

    Consecutive duplicates are dropped, the path is treated as closed and
    vertices within ``factor`` of the simplified outline are removed. The
    result is oriented counter-clockwise. Self-crossings are kept; use
    :func:`polydraw.core.geometry_utils.fill_nonzero` to resolve them.

    Args:
        points: Raw points, e.g. every pointer-move sample of a drag
        factor: RDP tolerance (>= 0). Larger values give fewer vertices; 0 keeps
            every vertex.

    Returns:
        Closed ring as an (N, 2) numpy array with at least 3 distinct vertices

    Raises:
        InsufficientPointsError: If fewer than 3 distinct points are supplied
        DegeneratePolygonError: If the points enclose no area
        InvalidConfigurationError: If factor is negative

    Examples:
        >>> ring = simplify([(0, 0), (5, 0.01), (10, 0), (10, 10), (0, 10)], factor=0.5)
        >>> len(ring)  # (5, 0.01) is dropped, ring is closed
        5
    """
    if factor < 0:
        raise InvalidConfigurationError(f"simplify factor must be >= 0, got {factor!r}")

    vertices = open_ring(remove_duplicate_vertices(as_points(points)))

    distinct = count_distinct_vertices(vertices)
    if distinct < 3:
        raise InsufficientPointsError(distinct)

    simplified = remove_duplicate_vertices(_simplify_closed(vertices, factor))

    if count_distinct_vertices(simplified) < 3:
        raise DegeneratePolygonError(
            f"Points collapse to a line when simplified with factor {factor}"
        )

    # A figure-eight has zero signed area but still encloses some
    if MultiPoint(simplified).convex_hull.area <= _AREA_EPS:
        raise DegeneratePolygonError("Points enclose no area")

    ring = ensure_ring_closed(simplified)

    logger.debug("Simplified %d points to %d vertices (factor=%s)", len(vertices), len(ring) - 1, factor)

    return orient_ccw(ring)


__all__ = ['simplify']
