"""Common ring manipulation utilities.

Rings are ``(N, 2)`` float numpy arrays whose first and last rows are equal.
This module converts between caller point sequences, rings and Shapely
polygons, and implements the non-zero fill used to turn a self-crossing
stroke into simple rings.
"""

from typing import Iterable, List, Sequence
import numpy as np
from shapely.geometry import LineString, MultiPolygon, Polygon, GeometryCollection
from shapely.geometry.base import BaseGeometry
from shapely.ops import polygonize, unary_union

from .errors import DegeneratePolygonError, InsufficientPointsError
from .validation_utils import count_distinct_vertices, ensure_ring_closed, is_ring_closed

_AREA_EPS = 1e-10


def as_points(points: Iterable[Sequence[float]]) -> np.ndarray:
    """Convert a caller point sequence into an ``(N, 2)`` float array.

    Accepts lists of tuples, numpy arrays and any iterable of pair-like
    values. Extra dimensions (e.g. Z) are dropped.

    Raises:
        ValueError: If the points are not pair-like or not finite
    """
    array = np.asarray(list(points) if not isinstance(points, np.ndarray) else points, dtype=float)

    if array.size == 0:
        return np.empty((0, 2), dtype=float)

    if array.ndim != 2 or array.shape[1] < 2:
        raise ValueError(f"Expected a sequence of (x, y) pairs, got shape {array.shape}")

    array = array[:, :2]

    if not np.all(np.isfinite(array)):
        raise ValueError("Points must have finite coordinates")

    return array


def remove_duplicate_vertices(
    vertices: np.ndarray,
    tolerance: float = 1e-10
) -> np.ndarray:
    """Remove consecutive duplicate vertices within tolerance.

    Closed input stays closed.

    Args:
        vertices: Numpy array of 2D vertices (Nx2)
        tolerance: Distance tolerance for considering vertices as duplicates

    Returns:
        Numpy array of vertices with duplicates removed
    """
    if len(vertices) < 2:
        return vertices.copy()

    is_closed = is_ring_closed(vertices, tolerance)

    result = [vertices[0]]

    for i in range(1, len(vertices)):
        distance = np.linalg.norm(vertices[i] - result[-1])
        if distance > tolerance:
            result.append(vertices[i])

    if is_closed and len(result) > 1:
        if not np.allclose(result[0], result[-1], atol=tolerance):
            result.append(result[0].copy())

    return np.array(result)


def close_ring(vertices: np.ndarray) -> np.ndarray:
    """Deduplicate and close a vertex sequence.

    Raises:
        InsufficientPointsError: If fewer than three distinct vertices remain
    """
    cleaned = remove_duplicate_vertices(np.asarray(vertices, dtype=float))
    if is_ring_closed(cleaned) and len(cleaned) > 1:
        cleaned = cleaned[:-1]

    distinct = count_distinct_vertices(cleaned)
    if distinct < 3:
        raise InsufficientPointsError(distinct)

    closed = ensure_ring_closed(cleaned)
    return remove_duplicate_vertices(closed)


def open_ring(ring: np.ndarray) -> np.ndarray:
    """Return the ring vertices without the closing vertex."""
    if is_ring_closed(ring):
        return ring[:-1]
    return ring


def signed_area(ring: np.ndarray) -> float:
    """Shoelace area, positive for counter-clockwise rings."""
    closed = ensure_ring_closed(np.asarray(ring, dtype=float))
    x = closed[:, 0]
    y = closed[:, 1]
    return float(0.5 * np.sum(x[:-1] * y[1:] - x[1:] * y[:-1]))


def orient_ccw(ring: np.ndarray) -> np.ndarray:
    """Return the ring in counter-clockwise order."""
    if signed_area(ring) < 0:
        return ring[::-1].copy()
    return ring


def ring_to_polygon(ring: np.ndarray) -> Polygon:
    return Polygon(ensure_ring_closed(np.asarray(ring, dtype=float)))


def polygon_to_ring(polygon: Polygon) -> np.ndarray:
    """Exterior of a Shapely polygon as a counter-clockwise ring."""
    coords = np.asarray(polygon.exterior.coords, dtype=float)[:, :2]
    return orient_ccw(remove_duplicate_vertices(coords))


def geometry_to_rings(geometry: BaseGeometry) -> List[np.ndarray]:
    """Extract the exterior rings of every polygon piece of a geometry.

    Interior rings (holes) are dropped and pieces without area are skipped.

    Examples:
        >>> merged = unary_union([square_a, square_b])
        >>> rings = geometry_to_rings(merged)
    """
    if geometry is None or geometry.is_empty:
        return []

    if isinstance(geometry, Polygon):
        pieces = [geometry]
    elif isinstance(geometry, (MultiPolygon, GeometryCollection)):
        pieces = []
        for part in geometry.geoms:
            if isinstance(part, Polygon):
                pieces.append(part)
            elif isinstance(part, (MultiPolygon, GeometryCollection)):
                pieces.extend(p for p in part.geoms if isinstance(p, Polygon))
    else:
        return []

    return [polygon_to_ring(p) for p in pieces if p.area > _AREA_EPS]


def winding_number(point: Sequence[float], ring: np.ndarray) -> int:
    """Winding number of a closed ring around a point.

    Counts signed crossings of the ring's edges with the horizontal ray to
    the right of the point.
    """
    x, y = float(point[0]), float(point[1])
    closed = ensure_ring_closed(ring)
    x0, y0 = closed[:-1, 0], closed[:-1, 1]
    x1, y1 = closed[1:, 0], closed[1:, 1]

    is_left = (x1 - x0) * (y - y0) - (x - x0) * (y1 - y0)
    upward = (y0 <= y) & (y1 > y) & (is_left > 0)
    downward = (y0 > y) & (y1 <= y) & (is_left < 0)

    return int(np.count_nonzero(upward) - np.count_nonzero(downward))


def fill_nonzero(ring: np.ndarray) -> List[np.ndarray]:
    """Resolve a possibly self-intersecting ring under the non-zero fill rule.

    A simple ring is returned unchanged (oriented counter-clockwise). A
    self-crossing ring is noded, split into faces, and the faces with a
    non-zero winding number are dissolved; every resulting piece becomes one
    ring. Loops drawn over themselves therefore stay filled instead of
    cancelling out.

    Args:
        ring: Ring coordinates (Nx2), closed or open

    Returns:
        List of simple counter-clockwise rings (at least one)

    Raises:
        InsufficientPointsError: If the ring has fewer than three distinct vertices
        DegeneratePolygonError: If no face encloses any area

    Examples:
        >>> figure_eight = np.array([(0, 0), (2, 2), (2, 0), (0, 2)])
        >>> len(fill_nonzero(figure_eight))
        2
    """
    closed = close_ring(ring)
    polygon = Polygon(closed)

    if polygon.is_valid and polygon.area > _AREA_EPS:
        return [orient_ccw(closed)]

    noded = unary_union(LineString(closed))
    faces = [
        face for face in polygonize(noded)
        if face.area > _AREA_EPS
        and winding_number(face.representative_point().coords[0], closed) != 0
    ]

    if not faces:
        raise DegeneratePolygonError("Ring encloses no area")

    rings = geometry_to_rings(unary_union(faces))
    if not rings:
        raise DegeneratePolygonError("Ring encloses no area")

    return rings


__all__ = [
    'as_points',
    'remove_duplicate_vertices',
    'close_ring',
    'open_ring',
    'signed_area',
    'orient_ccw',
    'ring_to_polygon',
    'polygon_to_ring',
    'geometry_to_rings',
    'winding_number',
    'fill_nonzero',
]
