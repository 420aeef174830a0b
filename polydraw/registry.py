"""Surface-keyed table of drawing engines.

Hosts that juggle several map instances attach one engine per surface and
address it through the surface object. The module-level functions operate on
a shared default registry.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from .core.config import CreateOptions
from .core.types import Mode
from .engine import DrawEngine
from .shape import Shape

logger = logging.getLogger(__name__)


class SurfaceRegistry:
    """Maps each surface (any hashable host object) to its :class:`DrawEngine`."""

    def __init__(self):
        self._engines: Dict[object, DrawEngine] = {}

    def attach(self, surface: object, options: Optional[CreateOptions] = None) -> DrawEngine:
        """Create the engine for a surface.

        Raises:
            ValueError: If the surface already has an engine
        """
        if surface in self._engines:
            raise ValueError(f"Surface {surface!r} already has a drawing engine")
        engine = DrawEngine(options, surface=surface)
        self._engines[surface] = engine
        logger.info("Attached drawing engine to %r", surface)
        return engine

    def detach(self, surface: object) -> Optional[DrawEngine]:
        """Drop a surface's engine, cancelling any drag in progress.

        Returns:
            The detached engine, or None if the surface had none
        """
        engine = self._engines.pop(surface, None)
        if engine is not None:
            engine.cancel()
            logger.info("Detached drawing engine from %r", surface)
        return engine

    def engine_for(self, surface: object) -> DrawEngine:
        """Engine of a surface.

        Raises:
            KeyError: If no engine is attached to the surface
        """
        try:
            return self._engines[surface]
        except KeyError:
            raise KeyError(f"No drawing engine attached to {surface!r}") from None

    def __contains__(self, surface: object) -> bool:
        return surface in self._engines

    def __len__(self) -> int:
        return len(self._engines)


default_registry = SurfaceRegistry()


def attach(surface: object, options: Optional[CreateOptions] = None) -> DrawEngine:
    return default_registry.attach(surface, options)


def detach(surface: object) -> Optional[DrawEngine]:
    return default_registry.detach(surface)


def create(
    surface: object,
    points: Iterable[Sequence[float]],
    options: Optional[CreateOptions] = None,
    **overrides,
) -> List[Shape]:
    return default_registry.engine_for(surface).create(points, options, **overrides)


def remove_shape(surface: object, shape: Shape) -> bool:
    return default_registry.engine_for(surface).remove_shape(shape)


def clear(surface: object) -> None:
    default_registry.engine_for(surface).clear()


def set_mode(surface: object, mode: int) -> Mode:
    return default_registry.engine_for(surface).set_mode(mode)


def get_mode(surface: object) -> Mode:
    return default_registry.engine_for(surface).mode


def cancel(surface: object) -> None:
    default_registry.engine_for(surface).cancel()


def size(surface: object) -> int:
    return default_registry.engine_for(surface).size()


def all_shapes(surface: object) -> List[Shape]:
    return default_registry.engine_for(surface).all()


__all__ = [
    'SurfaceRegistry',
    'default_registry',
    'attach',
    'detach',
    'create',
    'remove_shape',
    'clear',
    'set_mode',
    'get_mode',
    'cancel',
    'size',
    'all_shapes',
]
