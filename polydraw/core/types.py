"""Type definitions for polydraw operations.

This module defines the mode bitmask and the enums used by the edit and
notification APIs.
"""

from enum import Enum, IntFlag
from typing import Union


class Mode(IntFlag):
    """Bitmask of interactions currently allowed on a surface.

    Any combination of bits is a valid mode.

    Attributes:
        NONE: Nothing is allowed
        CREATE: Freehand drawing of new polygons
        EDIT: Moving and deleting vertices of existing polygons
        DELETE: Removing whole polygons
        APPEND: Inserting new vertices on polygon edges
        EDIT_APPEND: EDIT | APPEND
        ALL: Every interaction

    Examples:
        >>> from polydraw import DrawEngine, Mode
        >>> engine = DrawEngine()
        >>> _ = engine.set_mode(Mode.CREATE | Mode.DELETE)
        >>> bool(engine.mode & Mode.EDIT)
        False
    """
    NONE = 0
    CREATE = 1
    EDIT = 2
    DELETE = 4
    APPEND = 8
    EDIT_APPEND = EDIT | APPEND
    ALL = CREATE | EDIT | DELETE | APPEND


class EditKind(Enum):
    """Outcome of classifying a drag against an existing ring.

    Attributes:
        APPEND: Insert a new vertex after the given index
        MOVE: Move the vertex at the given index
        DELETE: Remove the vertex at the given index
    """
    APPEND = 'append'
    MOVE = 'move'
    DELETE = 'delete'


class NotifyReason(Enum):
    """Reason attached to a store change notification."""
    CREATE = 'create'
    REMOVE = 'remove'
    CLEAR = 'clear'
    EDIT = 'edit'


def coerce_mode(value: Union[Mode, int]) -> Mode:
    """Convert an integer bitmask into a :class:`Mode`.

    Raises:
        ValueError: If the value is not an integer or has bits outside ``Mode.ALL``
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Mode must be an integer bitmask, got {value!r}")
    if value < 0 or value & ~int(Mode.ALL):
        raise ValueError(f"Mode {value!r} has bits outside Mode.ALL")
    return Mode(value)


__all__ = [
    'Mode',
    'EditKind',
    'NotifyReason',
    'coerce_mode',
]
