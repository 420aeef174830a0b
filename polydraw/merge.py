"""Merging a new ring into the shapes it overlaps."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

import numpy as np
from shapely.ops import unary_union

from .core.config import DEFAULT_OPTIONS, CreateOptions
from .core.geometry_utils import geometry_to_rings, ring_to_polygon
from .core.validation_utils import validate_ring
from .overlap import find_intersecting
from .shape import Shape

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Outcome of merging one candidate ring.

    Attributes:
        replaced: Existing shapes that overlapped the candidate and must leave the store
        created: New shapes to add, one per output ring
    """

    replaced: Tuple[Shape, ...] = ()
    created: List[Shape] = field(default_factory=list)

    @property
    def merged(self) -> bool:
        return bool(self.replaced)


def union_rings(rings: Sequence[np.ndarray]) -> List[np.ndarray]:
    """Boolean union of rings under the non-zero fill rule.

    Each input must be a simple ring, so a point is inside the union when any
    input winds around it. The union may fall apart into several disjoint
    pieces; each piece becomes one counter-clockwise ring. Holes enclosed by
    the union are filled (only outer rings are returned).

    Args:
        rings: Input rings (Nx2 arrays), closed or open

    Returns:
        Outer rings of the union

    Raises:
        InvalidRingError: If any ring is self-intersecting, has zero area,
            fewer than 3 distinct vertices or non-finite coordinates

    Examples:
        >>> a = np.array([(0, 0), (10, 0), (10, 10), (0, 10)])
        >>> b = np.array([(5, 5), (15, 5), (15, 15), (5, 15)])
        >>> len(union_rings([a, b]))
        1
    """
    polygons = [validate_ring(r) for r in rings]
    if not polygons:
        return []
    return geometry_to_rings(unary_union(polygons))


def merge(
    candidate: np.ndarray,
    existing: Iterable[Shape],
    options: CreateOptions = DEFAULT_OPTIONS,
) -> MergeResult:
    """Merge a candidate ring with every existing shape it overlaps.

    The candidate is unioned with all overlapping shapes at once. This is a
    single pass: the union results are not checked against the remaining
    shapes again, so a union can end up overlapping a shape that the
    candidate itself did not touch. Shapes enclosed by a hole of the union
    are removed, since the union is stored without its holes.

    Args:
        candidate: New ring
        existing: Shapes currently in the store
        options: Options recorded on the created shapes

    Returns:
        MergeResult with the shapes to remove and the shapes to add. Without
        any overlap, ``created`` holds the candidate alone and ``replaced`` is
        empty.

    Raises:
        InvalidRingError: If the candidate is not a simple ring with area
    """
    candidate_polygon = validate_ring(candidate)
    shapes = list(existing)

    indices = find_intersecting(candidate_polygon, [s.geometry for s in shapes])

    if not indices:
        return MergeResult(created=[Shape(candidate, options)])

    intersecting = [shapes[i] for i in indices]
    rings = union_rings([candidate] + [s.ring for s in intersecting])

    # Shapes lying in a hole of the union are covered once the hole is filled
    filled = [ring_to_polygon(r) for r in rings]
    enclosed = [
        s for i, s in enumerate(shapes)
        if i not in indices and any(p.covers(s.geometry) for p in filled)
    ]

    logger.debug(
        "Merged candidate with %d shape(s) into %d ring(s), absorbing %d enclosed shape(s)",
        len(intersecting), len(rings), len(enclosed),
    )

    return MergeResult(
        replaced=tuple(intersecting + enclosed),
        created=[Shape(ring, options) for ring in rings],
    )


__all__ = ['MergeResult', 'union_rings', 'merge']
