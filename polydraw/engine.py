"""Drawing engine for a single surface.

The engine owns the mode bitmask, the shape store and the active drag
session of one surface (map instance). Rendering and input adapters talk to
it through ``create``/``remove_shape``/``clear``/``edit``, the drag session
methods and :meth:`DrawEngine.subscribe`.
"""

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from .core.config import DEFAULT_OPTIONS, CreateOptions
from .core.errors import CapacityExceededError, GeometryError, InvalidConfigurationError, ModeError
from .core.geometry_utils import fill_nonzero
from .core.types import EditKind, Mode, NotifyReason, coerce_mode
from .core.validation_utils import validate_ring
from .edit import apply_edit, classify_edit
from .merge import MergeResult, merge
from .notify import Notification, Subscriber
from .pipeline import build_candidates
from .session import DrawSession
from .shape import Shape
from .store import ShapeStore, StoreTransaction

logger = logging.getLogger(__name__)


class DrawEngine:
    """
    Mode state machine and shape store of one surface.

    Every mutating call (``create``, ``remove_shape``, ``clear``, ``edit`` and
    ``finish``) notifies subscribers exactly once, after the store has reached
    its new state. Failed calls leave the store untouched and send nothing.

    The engine is not thread-safe; serialize access per surface.

    Example:
        ```python
        engine = DrawEngine(CreateOptions(maximum_polygons=3))
        engine.subscribe(lambda n: render(n.rings()))

        session = engine.begin()
        for point in drag_samples:
            engine.advance(session, point)
        shapes = engine.finish(session)
        ```

    Attributes:
        options: Default options for create calls and editing
        surface: Host object the engine is attached to, if any
    """

    def __init__(self, options: Optional[CreateOptions] = None, surface: object = None):
        self.options = options if options is not None else DEFAULT_OPTIONS
        self.surface = surface
        self._mode = self.options.mode
        self._store = ShapeStore()
        self._subscribers: List[Subscriber] = []
        self._session: Optional[DrawSession] = None
        self._edit_pending = False

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self._mode

    def set_mode(self, mode: int) -> Mode:
        """Replace the mode bitmask.

        Leaving EDIT mode sends an edit notification that was held back by
        ``notify_after_edit_exit``.

        Returns:
            The new mode

        Raises:
            InvalidConfigurationError: If ``mode`` has bits outside ``Mode.ALL``
        """
        try:
            new_mode = coerce_mode(mode)
        except ValueError as exc:
            raise InvalidConfigurationError(str(exc)) from exc

        previous = self._mode
        self._mode = new_mode
        if previous != new_mode:
            logger.info("Mode changed from %r to %r", previous, new_mode)

        if self._edit_pending and not new_mode & Mode.EDIT:
            self._edit_pending = False
            self._notify(NotifyReason.EDIT)

        return new_mode

    def _require(self, required: Mode) -> None:
        if not self._mode & required:
            raise ModeError(required, self._mode)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for store changes.

        Returns:
            Function that removes the callback again
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, reason: NotifyReason) -> None:
        notification = Notification(reason, tuple(self._store))
        for callback in list(self._subscribers):
            callback(notification)

    # ------------------------------------------------------------------
    # Store operations
    # ------------------------------------------------------------------

    def create(
        self,
        points: Iterable[Sequence[float]],
        options: Optional[CreateOptions] = None,
        **overrides,
    ) -> List[Shape]:
        """Create shapes from a point sequence.

        Runs the points through simplification and the non-zero fill, then
        merges each resulting ring with the shapes it overlaps (when
        ``merge_polygons`` is set). The concave hull only runs when asked for
        through ``options`` or ``concave_polygon=True``; without ``options``
        the engine options are used with the hull switched off, so the given
        outline is kept.

        Args:
            points: Coordinates in a single coordinate space
            options: Options for this call (defaults to the engine options
                without the concave hull)
            **overrides: Individual option values, applied on top of ``options``

        Returns:
            Shapes added to the store

        Raises:
            ModeError: If CREATE is not in the current mode
            InsufficientPointsError: If fewer than 3 distinct points are given
            DegeneratePolygonError: If the points enclose no area
            InvalidRingError: If a ring cannot be merged
            CapacityExceededError: If the store would exceed ``maximum_polygons``
        """
        self._require(Mode.CREATE)
        options = self._resolve_options(options, overrides)
        created = self._create(points, options)
        self._notify(NotifyReason.CREATE)
        return created

    def _resolve_options(self, options: Optional[CreateOptions], overrides: dict) -> CreateOptions:
        if options is None:
            resolved = self.options.replace(concave_polygon=False)
        else:
            resolved = options
        if overrides:
            resolved = resolved.replace(**overrides)
        return resolved

    def _create(self, points: Iterable[Sequence[float]], options: CreateOptions) -> List[Shape]:
        candidates = build_candidates(points, options)

        transaction = self._store.transaction()
        for ring in candidates:
            if options.merge_polygons:
                result = merge(ring, transaction.shapes, options)
            else:
                validate_ring(ring)
                result = MergeResult(created=[Shape(ring, options)])
            transaction.apply(result)

        self._check_capacity(transaction, options)
        return transaction.commit()

    def _check_capacity(self, transaction: StoreTransaction, options: CreateOptions) -> None:
        limit = options.maximum_polygons
        if limit is not None and transaction.size > limit:
            raise CapacityExceededError(limit, transaction.size)

    def remove_shape(self, shape: Shape) -> bool:
        """Remove one shape. Absent shapes are ignored.

        Returns:
            True if the shape was in the store

        Raises:
            ModeError: If DELETE is not in the current mode
        """
        self._require(Mode.DELETE)
        removed = self._store.discard(shape)
        if removed:
            logger.info("Removed %r", shape)
        self._notify(NotifyReason.REMOVE)
        return removed

    def clear(self) -> None:
        """Remove every shape, whatever the mode."""
        self._store.clear()
        self._notify(NotifyReason.CLEAR)

    def edit(
        self,
        shape: Shape,
        point: Sequence[float],
        target: Optional[Sequence[float]] = None,
        remove: bool = False,
    ) -> List[Shape]:
        """Move, delete or append a vertex of a shape.

        The grab point is classified with ``elbow_distance``: near an
        existing vertex it moves that vertex to ``target`` (or deletes it when
        ``remove`` is set), elsewhere it inserts a new vertex on the nearest
        edge, at ``target``. ``target`` defaults to the grab point. The
        edited ring is filled with the non-zero rule and replaces the shape;
        edits do not merge with other shapes.

        Args:
            shape: Shape on this surface
            point: Where the drag started
            target: Where the drag ended
            remove: Delete the grabbed vertex instead of moving it

        Returns:
            Replacement shapes (more than one if the edit made the ring cross itself)

        Raises:
            ModeError: If EDIT (move/delete) or APPEND (append) is not in the mode
            KeyError: If the shape is not on this surface
            InsufficientPointsError: If a delete would leave fewer than 3 vertices
            DegeneratePolygonError: If the edited ring encloses no area
            CapacityExceededError: If the replacement shapes exceed ``maximum_polygons``
        """
        self._require(Mode.EDIT_APPEND)
        if shape not in self._store:
            raise KeyError(f"{shape!r} is not on this surface")

        action = classify_edit(shape.ring, point, self.options.elbow_distance, remove=remove)
        self._require(Mode.APPEND if action.kind == EditKind.APPEND else Mode.EDIT)

        destination = point if target is None else target
        rings = fill_nonzero(apply_edit(shape.ring, action, destination))

        transaction = self._store.transaction()
        transaction.apply(
            MergeResult(replaced=(shape,), created=[Shape(ring, shape.options) for ring in rings])
        )
        self._check_capacity(transaction, self.options)
        replacements = transaction.commit()

        logger.debug("Applied %s at vertex %d of %r", action.kind.value, action.index, shape)

        if self.options.notify_after_edit_exit and self._mode & Mode.EDIT:
            self._edit_pending = True
        else:
            self._notify(NotifyReason.EDIT)

        return replacements

    # ------------------------------------------------------------------
    # Drag session
    # ------------------------------------------------------------------

    def begin(self) -> DrawSession:
        """Start a freehand drag, cancelling any drag still in progress.

        Raises:
            ModeError: If CREATE is not in the current mode
        """
        self._require(Mode.CREATE)
        self.cancel()
        self._session = DrawSession()
        return self._session

    def advance(self, session: DrawSession, point: Sequence[float]) -> bool:
        """Add a sample to a drag. Returns False if the session is no longer active."""
        return session.add(point)

    def finish(self, session: DrawSession) -> List[Shape]:
        """End a drag and create shapes from its samples.

        Strokes with too few points or no enclosed area are routine user
        input and produce no shape. A cancelled session creates nothing and
        sends no notification.

        Returns:
            Shapes added to the store

        Raises:
            InvalidRingError: If a ring cannot be merged
            CapacityExceededError: If the store would exceed ``maximum_polygons``
        """
        if session is self._session:
            self._session = None

        if not session.active:
            return []

        session.finished = True
        created: List[Shape] = []

        if len(session):
            try:
                created = self._create(session.to_array(), self.options)
            except GeometryError as exc:
                logger.debug("Discarded stroke of %d point(s): %s", len(session), exc)

        self._notify(NotifyReason.CREATE)

        if self.options.leave_mode_after_create:
            self.set_mode(int(self._mode) & ~int(Mode.CREATE))

        return created

    def cancel(self) -> None:
        """Abort the drag in progress, if any. The store is not touched."""
        if self._session is not None:
            self._session.cancel()
            self._session = None

    @property
    def session(self) -> Optional[DrawSession]:
        return self._session

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def size(self) -> int:
        return len(self._store)

    def all(self) -> List[Shape]:
        return list(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[Shape]:
        return iter(self._store)

    def __contains__(self, shape: object) -> bool:
        return shape in self._store

    def __repr__(self) -> str:
        return f"DrawEngine(mode={self._mode!r}, shapes={len(self._store)})"


__all__ = ['DrawEngine']
