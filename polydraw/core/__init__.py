"""Core types and utilities for polydraw.

This module provides type definitions, configuration, exceptions, and ring
utilities used throughout the library.
"""

from .types import (
    Mode,
    EditKind,
    NotifyReason,
)

from .config import CreateOptions, DEFAULT_OPTIONS

from .errors import (
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

__all__ = [
    # Types
    'Mode',
    'EditKind',
    'NotifyReason',

    # Configuration
    'CreateOptions',
    'DEFAULT_OPTIONS',

    # Exceptions
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
