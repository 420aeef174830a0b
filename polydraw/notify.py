"""Change notifications sent to rendering collaborators."""

from dataclasses import dataclass
from typing import Callable, List, Tuple

from .core.types import NotifyReason
from .shape import Shape


@dataclass(frozen=True)
class Notification:
    """The full set of shapes on a surface after a change.

    Attributes:
        reason: Operation that produced the change
        shapes: Every shape on the surface, in store order
    """

    reason: NotifyReason
    shapes: Tuple[Shape, ...]

    def rings(self) -> List[List[Tuple[float, float]]]:
        """Closed coordinate lists of every shape."""
        return [shape.coords for shape in self.shapes]

    def __len__(self) -> int:
        return len(self.shapes)


Subscriber = Callable[[Notification], None]


__all__ = ['Notification', 'Subscriber']
