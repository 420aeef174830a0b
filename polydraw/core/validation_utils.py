"""Common validation utilities for rings.

This module provides the checks shared by the simplifier, the union and the
edit helpers.
"""

import numpy as np
from shapely.geometry import Polygon
from shapely.validation import explain_validity

from .errors import InvalidRingError

_AREA_EPS = 1e-10


def is_ring_closed(
    coords: np.ndarray,
    tolerance: float = 1e-10
) -> bool:
    """Check if coordinate ring is closed (first == last).

    Args:
        coords: Coordinate array (Nx2)
        tolerance: Tolerance for coordinate comparison

    Returns:
        True if ring is closed (first point equals last point within tolerance)

    Examples:
        >>> coords = np.array([[0, 0], [1, 0], [1, 1], [0, 0]])
        >>> is_ring_closed(coords)
        True

        >>> coords = np.array([[0, 0], [1, 0], [1, 1]])
        >>> is_ring_closed(coords)
        False
    """
    if len(coords) < 2:
        return False

    return np.allclose(coords[0], coords[-1], atol=tolerance)


def ensure_ring_closed(coords: np.ndarray) -> np.ndarray:
    """Ensure coordinate ring is closed by appending first point if needed.

    Args:
        coords: Coordinate array (Nx2)

    Returns:
        Coordinate array guaranteed to be closed (may be original if already closed)

    Examples:
        >>> closed = ensure_ring_closed(np.array([[0, 0], [1, 0], [1, 1]]))
        >>> len(closed)
        4
    """
    if len(coords) < 3:
        return coords

    if not np.allclose(coords[0], coords[-1]):
        coords = np.vstack([coords, coords[0:1]])

    return coords


def count_distinct_vertices(coords: np.ndarray, tolerance: float = 1e-10) -> int:
    """Count distinct vertices of a ring, ignoring the closing vertex."""
    if len(coords) == 0:
        return 0
    working = coords[:-1] if is_ring_closed(coords, tolerance) else coords
    return len(np.unique(working, axis=0))


def validate_ring(coords: np.ndarray) -> Polygon:
    """Check that a ring describes a simple polygon with positive area.

    Args:
        coords: Ring coordinates (Nx2), closed or open

    Returns:
        Shapely Polygon built from the ring

    Raises:
        InvalidRingError: If the ring has non-finite coordinates, fewer than
            three distinct vertices, zero area or self-intersections
    """
    coords = np.asarray(coords, dtype=float)

    if coords.ndim != 2 or coords.shape[1] < 2:
        raise InvalidRingError(f"expected an (N, 2) array, got shape {coords.shape}")

    if not np.all(np.isfinite(coords)):
        raise InvalidRingError("non-finite coordinates")

    if count_distinct_vertices(coords) < 3:
        raise InvalidRingError("fewer than 3 distinct vertices")

    polygon = Polygon(ensure_ring_closed(coords[:, :2]))

    if polygon.area <= _AREA_EPS:
        raise InvalidRingError("zero area")

    if not polygon.is_valid:
        raise InvalidRingError(explain_validity(polygon))

    return polygon


__all__ = [
    'is_ring_closed',
    'ensure_ring_closed',
    'count_distinct_vertices',
    'validate_ring',
]
