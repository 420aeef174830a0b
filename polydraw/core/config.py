"""Options consumed by the drawing engine and the creation pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from .errors import InvalidConfigurationError
from .types import Mode, coerce_mode


@dataclass(frozen=True)
class CreateOptions:
    """Configuration for drawing and creating polygons.

    Every shape keeps the options it was created with, so the values here are
    also a record of how a shape was built.

    Attributes:
        mode: Mode the engine starts in
        smooth_factor: Smoothing applied by the rendering layer
        elbow_distance: Distance that separates "edit a vertex" from
            "append a vertex" during editing
        simplify_factor: Ramer-Douglas-Peucker tolerance; larger means fewer vertices
        merge_polygons: Union new polygons with the ones they overlap
        concave_polygon: Reshape new polygons with the concave hull walk
        maximum_polygons: Cap on the store size, None for unbounded
        stroke_width: Width of the preview stroke while drawing
        leave_mode_after_create: Drop the CREATE bit after each drawn polygon
        notify_after_edit_exit: Hold edit notifications until EDIT mode is left
        hull_neighbours: Initial neighbour count k for the concave hull
        hull_max_iterations: Number of k values the concave hull may try

    Raises:
        InvalidConfigurationError: If any value is out of range

    Examples:
        >>> options = CreateOptions(maximum_polygons=3, merge_polygons=False)
        >>> options.replace(concave_polygon=False).concave_polygon
        False
    """

    mode: Mode = Mode.ALL
    smooth_factor: float = 0.3
    elbow_distance: float = 10.0
    simplify_factor: float = 1.1
    merge_polygons: bool = True
    concave_polygon: bool = True
    maximum_polygons: Optional[int] = None
    stroke_width: float = 2.0
    leave_mode_after_create: bool = False
    notify_after_edit_exit: bool = False
    hull_neighbours: int = 3
    hull_max_iterations: int = 100

    def __post_init__(self):
        try:
            object.__setattr__(self, 'mode', coerce_mode(self.mode))
        except ValueError as exc:
            raise InvalidConfigurationError(str(exc)) from exc

        for name in ('smooth_factor', 'elbow_distance', 'simplify_factor', 'stroke_width'):
            _require_non_negative(name, getattr(self, name))

        object.__setattr__(self, 'maximum_polygons', _normalise_maximum(self.maximum_polygons))

        if not _is_int(self.hull_neighbours) or self.hull_neighbours < 3:
            raise InvalidConfigurationError(
                f"hull_neighbours must be an integer >= 3, got {self.hull_neighbours!r}"
            )
        if not _is_int(self.hull_max_iterations) or self.hull_max_iterations < 1:
            raise InvalidConfigurationError(
                f"hull_max_iterations must be a positive integer, got {self.hull_max_iterations!r}"
            )

    def replace(self, **changes: Any) -> "CreateOptions":
        """Return a validated copy with ``changes`` applied."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise InvalidConfigurationError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    @property
    def unbounded(self) -> bool:
        return self.maximum_polygons is None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require_non_negative(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfigurationError(f"{name} must be a number, got {value!r}")
    if math.isnan(value) or value < 0:
        raise InvalidConfigurationError(f"{name} must be >= 0, got {value!r}")


def _normalise_maximum(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, float) and math.isinf(value) and value > 0:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not _is_int(value) or value < 0:
        raise InvalidConfigurationError(
            f"maximum_polygons must be a non-negative integer or None, got {value!r}"
        )
    return value


DEFAULT_OPTIONS = CreateOptions()


__all__ = ['CreateOptions', 'DEFAULT_OPTIONS']
