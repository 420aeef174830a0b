"""Exception hierarchy for polydraw.

Every error raised by the library derives from :class:`PolydrawError`, so
callers can catch the whole family at an adapter boundary.
"""

from typing import Optional


class PolydrawError(Exception):
    """Base class for all polydraw errors."""
    pass


class GeometryError(PolydrawError):
    """Raised when a point sequence cannot describe a polygon."""
    pass


class InsufficientPointsError(GeometryError):
    """Raised when fewer than three distinct points are available.

    Attributes:
        count: Number of distinct points that were supplied
    """

    def __init__(self, count: int, message: Optional[str] = None):
        self.count = count
        super().__init__(message or f"Need at least 3 distinct points, got {count}")


class DegeneratePolygonError(GeometryError):
    """Raised when the points enclose no area (e.g. all collinear)."""
    pass


class HullConstructionError(PolydrawError):
    """Raised when the concave hull walk cannot close a boundary."""
    pass


class InvalidRingError(PolydrawError):
    """Raised when a ring handed to the union is not a simple polygon.

    Attributes:
        reason: Short explanation of why the ring was rejected
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid ring: {reason}")


class CapacityExceededError(PolydrawError):
    """Raised when a mutation would push the store past ``maximum_polygons``.

    Attributes:
        limit: Configured maximum
        requested: Store size the operation would have produced
    """

    def __init__(self, limit: int, requested: int):
        self.limit = limit
        self.requested = requested
        super().__init__(
            f"Operation would leave {requested} polygons, maximum is {limit}"
        )


class InvalidConfigurationError(PolydrawError, ValueError):
    """Raised when create options fail validation."""
    pass


class ModeError(PolydrawError):
    """Raised when an operation is not permitted by the current mode.

    Attributes:
        required: Mode bits the operation needs
        current: Mode that was active
    """

    def __init__(self, required, current):
        self.required = required
        self.current = current
        super().__init__(f"Operation requires mode {required!r}, current mode is {current!r}")


__all__ = [
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
