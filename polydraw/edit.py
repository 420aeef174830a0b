"""Vertex editing decisions for existing rings.

While editing, a drag either grabs an existing vertex or lands somewhere on
an edge. :func:`classify_edit` decides which, using the elbow distance, and
:func:`apply_edit` builds the replacement ring.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .core.errors import InsufficientPointsError, InvalidConfigurationError
from .core.geometry_utils import as_points, open_ring
from .core.spatial_utils import nearest_edge, nearest_vertex
from .core.types import EditKind
from .core.validation_utils import count_distinct_vertices, ensure_ring_closed


@dataclass(frozen=True)
class EditAction:
    """Classified edit.

    Attributes:
        kind: What the drag does
        index: Vertex index for MOVE/DELETE, start vertex of the edge for APPEND
            (the new vertex is inserted after it)
    """
    kind: EditKind
    index: int


def classify_edit(
    ring: np.ndarray,
    point: Sequence[float],
    elbow_distance: float,
    remove: bool = False,
) -> EditAction:
    """Decide whether a drag edits an existing vertex or appends a new one.

    Args:
        ring: Ring being edited (closed or open)
        point: Drag target, in the same coordinate space as ``ring``
        elbow_distance: Threshold separating vertex edits from appends
        remove: Classify a grab of an existing vertex as DELETE instead of MOVE

    Returns:
        ``MOVE``/``DELETE`` of the nearest vertex if it lies within
        ``elbow_distance``, otherwise ``APPEND`` after the start vertex of the
        nearest edge.

    Examples:
        >>> square = np.array([(0, 0), (100, 0), (100, 100), (0, 100), (0, 0)], dtype=float)
        >>> classify_edit(square, (3, 4), elbow_distance=10)
        EditAction(kind=<EditKind.MOVE: 'move'>, index=0)
        >>> classify_edit(square, (50, 2), elbow_distance=10)
        EditAction(kind=<EditKind.APPEND: 'append'>, index=0)
    """
    if elbow_distance < 0:
        raise InvalidConfigurationError(f"elbow_distance must be >= 0, got {elbow_distance!r}")

    vertices = open_ring(np.asarray(ring, dtype=float))
    if len(vertices) < 2:
        raise InsufficientPointsError(len(vertices))

    target = np.asarray(point, dtype=float)[:2]
    index, distance = nearest_vertex(vertices, target)

    if distance <= elbow_distance:
        return EditAction(EditKind.DELETE if remove else EditKind.MOVE, index)

    edge_index, _ = nearest_edge(vertices, target)
    return EditAction(EditKind.APPEND, edge_index)


def apply_edit(
    ring: np.ndarray,
    action: EditAction,
    point: Sequence[float],
) -> np.ndarray:
    """Build the ring that results from an edit.

    The input ring is never modified.

    Args:
        ring: Ring being edited (closed or open)
        action: Classified edit
        point: Drag target; new position for MOVE, new vertex for APPEND,
            ignored for DELETE

    Returns:
        New closed ring. It may self-intersect after a MOVE or APPEND.

    Raises:
        InsufficientPointsError: If a DELETE would leave fewer than 3 vertices
        IndexError: If the action index is outside the ring
    """
    vertices = open_ring(np.asarray(ring, dtype=float)).copy()
    count = len(vertices)

    if not 0 <= action.index < count:
        raise IndexError(f"Vertex index {action.index} out of range for ring of {count} vertices")

    target = as_points([point])[0]

    if action.kind == EditKind.MOVE:
        vertices[action.index] = target
    elif action.kind == EditKind.APPEND:
        vertices = np.insert(vertices, action.index + 1, target, axis=0)
    elif action.kind == EditKind.DELETE:
        vertices = np.delete(vertices, action.index, axis=0)
        distinct = count_distinct_vertices(vertices)
        if distinct < 3:
            raise InsufficientPointsError(distinct, "Cannot delete a vertex from a triangle")
    else:
        raise ValueError(f"Unknown edit kind: {action.kind}")

    return ensure_ring_closed(vertices)


__all__ = ['EditAction', 'classify_edit', 'apply_edit']
