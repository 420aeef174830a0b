"""State of an in-progress freehand drag."""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from .core.geometry_utils import as_points


@dataclass
class DrawSession:
    """Points collected between pointer-down and pointer-up.

    Attributes:
        points: Samples received so far, in order
        cancelled: Set once the drag was aborted; a cancelled session collects
            no more points and creates nothing
        finished: Set once the session was handed to ``finish``
    """

    points: List[Tuple[float, float]] = field(default_factory=list)
    cancelled: bool = False
    finished: bool = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.finished)

    def add(self, point: Sequence[float]) -> bool:
        """Record a sample. Returns False if the session no longer accepts points."""
        if not self.active:
            return False
        x, y = as_points([point])[0]
        # Repeated samples at the same position carry no shape information
        if self.points and self.points[-1] == (x, y):
            return True
        self.points.append((float(x), float(y)))
        return True

    def cancel(self) -> None:
        self.cancelled = True
        self.points.clear()

    def to_array(self) -> np.ndarray:
        return as_points(self.points)

    def __len__(self) -> int:
        return len(self.points)


__all__ = ['DrawSession']
