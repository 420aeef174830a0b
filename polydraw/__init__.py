"""Polydraw - freehand polygon drawing engine.

This library keeps the polygons drawn on an interactive map consistent:
strokes are simplified, optionally reshaped with a concave hull, and merged
with the polygons they overlap. Geometry is handled with Shapely.
"""


# Simplification and editing
from .simplify import simplify
from .edit import EditAction, classify_edit, apply_edit

# Concave hull
from .concave import concave_hull

# Overlap detection
from .overlap import intersects, find_intersecting

# Merge functions
from .merge import MergeResult, merge, union_rings

# Engine
from .shape import Shape
from .session import DrawSession
from .notify import Notification
from .store import ShapeStore
from .engine import DrawEngine
from .registry import SurfaceRegistry

# Core types, configuration and exceptions
from .core import (
    Mode,
    EditKind,
    NotifyReason,
    CreateOptions,
    DEFAULT_OPTIONS,
    PolydrawError,
    GeometryError,
    InsufficientPointsError,
    DegeneratePolygonError,
    HullConstructionError,
    InvalidRingError,
    CapacityExceededError,
    InvalidConfigurationError,
    ModeError,
)

NONE = Mode.NONE
CREATE = Mode.CREATE
EDIT = Mode.EDIT
DELETE = Mode.DELETE
APPEND = Mode.APPEND
EDIT_APPEND = Mode.EDIT_APPEND
ALL = Mode.ALL

__all__ = [

    # Simplification and editing
    'simplify',
    'EditAction',
    'classify_edit',
    'apply_edit',

    # Concave hull
    'concave_hull',

    # Overlap
    'intersects',
    'find_intersecting',

    # Merge
    'MergeResult',
    'merge',
    'union_rings',

    # Engine
    'Shape',
    'DrawSession',
    'Notification',
    'ShapeStore',
    'DrawEngine',
    'SurfaceRegistry',

    # Mode flags
    'Mode',
    'NONE',
    'CREATE',
    'EDIT',
    'DELETE',
    'APPEND',
    'EDIT_APPEND',
    'ALL',

    # Core types
    'EditKind',
    'NotifyReason',
    'CreateOptions',
    'DEFAULT_OPTIONS',

    # Core exceptions
    'PolydrawError',
    'GeometryError',
    'InsufficientPointsError',
    'DegeneratePolygonError',
    'HullConstructionError',
    'InvalidRingError',
    'CapacityExceededError',
    'InvalidConfigurationError',
    'ModeError',
]
