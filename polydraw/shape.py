"""Polygon records kept in a surface's store."""

import itertools
from dataclasses import dataclass, field
from functools import cached_property
from typing import List, Tuple

import numpy as np
from shapely.geometry import Polygon

from .core.config import DEFAULT_OPTIONS, CreateOptions
from .core.geometry_utils import ring_to_polygon
from .core.validation_utils import ensure_ring_closed

_ids = itertools.count(1)


@dataclass(frozen=True, eq=False)
class Shape:
    """One polygon on a surface.

    Shapes compare and hash by identity and are never modified; an edit
    produces a new Shape.

    Attributes:
        ring: Closed outer ring as a read-only (N, 2) array
        options: Options the shape was created with
        id: Process-unique, increasing identifier
    """

    ring: np.ndarray
    options: CreateOptions = DEFAULT_OPTIONS
    id: int = field(default_factory=lambda: next(_ids))

    def __post_init__(self):
        ring = ensure_ring_closed(np.array(self.ring, dtype=float)[:, :2])
        ring.setflags(write=False)
        object.__setattr__(self, 'ring', ring)

    @property
    def coords(self) -> List[Tuple[float, float]]:
        """Closed ring as a list of ``(x, y)`` tuples."""
        return [(float(x), float(y)) for x, y in self.ring]

    @cached_property
    def geometry(self) -> Polygon:
        return ring_to_polygon(self.ring)

    @property
    def area(self) -> float:
        return self.geometry.area

    def __len__(self) -> int:
        return len(self.ring) - 1

    def __repr__(self) -> str:
        return f"Shape(id={self.id}, vertices={len(self)}, area={self.area:.6g})"


__all__ = ['Shape']
