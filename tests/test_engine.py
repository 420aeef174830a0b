"""Tests for the per-surface drawing engine."""

import itertools
import logging
from unittest.mock import patch

import numpy as np
import pytest
from shapely.geometry import Polygon
from shapely.ops import unary_union

from polydraw import CreateOptions, DrawEngine, Mode, NotifyReason
from polydraw.core.errors import (
    CapacityExceededError,
    HullConstructionError,
    InsufficientPointsError,
    InvalidConfigurationError,
    ModeError,
)
from polydraw.overlap import intersects


def _square(x0: float, y0: float, size: float = 10) -> list:
    return [(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)]


def _drag(x0: float, y0: float, size: float = 100, samples: int = 10) -> list:
    """Pointer samples walking once around a square."""
    corners = _square(x0, y0, size) + [(x0, y0)]
    points = []
    for start, end in zip(corners, corners[1:]):
        for t in np.linspace(0, 1, samples, endpoint=False):
            points.append((start[0] + t * (end[0] - start[0]), start[1] + t * (end[1] - start[1])))
    return points


def _engine(**kwargs) -> DrawEngine:
    """Engine whose create calls keep rings exactly as given."""
    return DrawEngine(CreateOptions(concave_polygon=False, simplify_factor=0, **kwargs))


def _recorder(engine: DrawEngine) -> list:
    received = []
    engine.subscribe(received.append)
    return received


class TestCreate:
    """Tests for DrawEngine.create()."""

    def test_create_adds_shape(self):
        engine = _engine()
        shapes = engine.create(_square(0, 0))

        assert len(shapes) == 1
        assert engine.size() == 1
        assert shapes[0] in engine
        assert shapes[0].area == pytest.approx(100)

    def test_overlapping_create_merges(self):
        engine = _engine()
        first = engine.create(_square(0, 0))[0]
        engine.create(_square(5, 5))

        assert engine.size() == 1
        assert first not in engine

        merged = engine.all()[0]
        expected = unary_union([Polygon(_square(0, 0)), Polygon(_square(5, 5))])
        assert merged.geometry.equals(expected)
        assert merged.area == pytest.approx(175)

    def test_separate_creates_stay_separate(self):
        engine = _engine()
        engine.create(_square(0, 0))
        engine.create(_square(20, 0))
        assert engine.size() == 2

    def test_touching_creates_stay_separate(self):
        engine = _engine()
        engine.create(_square(0, 0))
        engine.create(_square(10, 0))
        assert engine.size() == 2

    def test_merging_disabled(self):
        engine = _engine(merge_polygons=False)
        engine.create(_square(0, 0))
        engine.create(_square(5, 5))
        assert engine.size() == 2

    def test_per_call_override(self):
        engine = _engine()
        engine.create(_square(0, 0))
        created = engine.create(_square(5, 5), merge_polygons=False)

        assert engine.size() == 2
        assert created[0].options.merge_polygons is False

    def test_unknown_override_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            _engine().create(_square(0, 0), colour="red")

    def test_self_crossing_stroke_creates_two_shapes(self):
        engine = _engine()
        shapes = engine.create([(0, 0), (20, 20), (20, 0), (0, 20)])
        assert len(shapes) == 2
        assert engine.size() == 2

    def test_too_few_points(self):
        engine = _engine()
        received = _recorder(engine)

        with pytest.raises(InsufficientPointsError):
            engine.create([(0, 0), (1, 1)])

        assert engine.size() == 0
        assert received == []

    def test_concave_hull_failure_falls_back(self, caplog):
        engine = DrawEngine()

        with patch("polydraw.pipeline.concave_hull", side_effect=HullConstructionError("stuck")):
            with caplog.at_level(logging.WARNING, logger="polydraw.pipeline"):
                shapes = engine.create(_square(0, 0), concave_polygon=True)

        assert len(shapes) == 1
        assert shapes[0].geometry.equals(Polygon(_square(0, 0)))
        assert "Concave hull failed" in caplog.text

    def test_default_create_keeps_concave_outline(self):
        u_shape = [(0, 0), (30, 0), (30, 30), (20, 30), (20, 10), (10, 10), (10, 30), (0, 30)]
        shape = DrawEngine().create(u_shape)[0]

        assert shape.area == pytest.approx(700)
        assert shape.geometry.equals(Polygon(u_shape))

    def test_concave_hull_only_on_request(self):
        with patch("polydraw.pipeline.concave_hull", side_effect=lambda ring, **kwargs: ring) as hull:
            engine = DrawEngine()
            engine.create(_square(0, 0))
            assert not hull.called

            engine.create(_square(20, 0), concave_polygon=True)
            assert hull.call_count == 1

            engine.create(_square(40, 0), CreateOptions())
            assert hull.call_count == 2

    def test_no_overlap_after_random_creates(self):
        engine = _engine()
        rng = np.random.default_rng(42)

        for _ in range(30):
            x0, y0 = rng.uniform(0, 100, 2)
            width, height = rng.uniform(5, 30, 2)
            engine.create([(x0, y0), (x0 + width, y0), (x0 + width, y0 + height), (x0, y0 + height)])

            for a, b in itertools.combinations(engine.all(), 2):
                assert not intersects(a.ring, b.ring)


class TestCapacity:
    """Tests for the maximum_polygons limit."""

    def test_create_beyond_limit_rejected(self):
        engine = _engine(maximum_polygons=2)
        received = _recorder(engine)
        engine.create(_square(0, 0))
        engine.create(_square(20, 0))

        with pytest.raises(CapacityExceededError, match="maximum is 2") as excinfo:
            engine.create(_square(40, 0))

        assert excinfo.value.limit == 2
        assert excinfo.value.requested == 3
        assert engine.size() == 2
        assert len(received) == 2

    def test_merge_at_limit_allowed(self):
        engine = _engine(maximum_polygons=1)
        engine.create(_square(0, 0))
        engine.create(_square(5, 5))
        assert engine.size() == 1

    def test_zero_capacity(self):
        engine = _engine(maximum_polygons=0)
        with pytest.raises(CapacityExceededError):
            engine.create(_square(0, 0))

    def test_unbounded(self):
        engine = _engine(maximum_polygons=float("inf"))
        for i in range(5):
            engine.create(_square(20 * i, 0))
        assert engine.size() == 5


class TestModes:
    """Tests for the mode bitmask gating."""

    def test_default_mode(self):
        assert DrawEngine().mode == Mode.ALL

    def test_set_mode_accepts_integers(self):
        engine = DrawEngine()
        assert engine.set_mode(5) == Mode.CREATE | Mode.DELETE
        assert engine.mode & Mode.DELETE
        assert not engine.mode & Mode.EDIT

    @pytest.mark.parametrize("value", [16, -1, "create", 1.5])
    def test_invalid_mode_rejected(self, value):
        engine = DrawEngine()
        with pytest.raises(InvalidConfigurationError):
            engine.set_mode(value)
        assert engine.mode == Mode.ALL

    def test_create_requires_create_bit(self):
        engine = _engine()
        engine.set_mode(Mode.NONE)
        with pytest.raises(ModeError) as excinfo:
            engine.create(_square(0, 0))
        assert excinfo.value.required == Mode.CREATE
        assert engine.size() == 0

    def test_remove_requires_delete_bit(self):
        engine = _engine()
        shape = engine.create(_square(0, 0))[0]
        engine.set_mode(Mode.CREATE)
        with pytest.raises(ModeError):
            engine.remove_shape(shape)
        assert shape in engine

    def test_clear_ignores_mode(self):
        engine = _engine()
        engine.create(_square(0, 0))
        engine.set_mode(Mode.NONE)
        engine.clear()
        assert engine.size() == 0

    def test_begin_requires_create_bit(self):
        engine = _engine()
        engine.set_mode(Mode.EDIT)
        with pytest.raises(ModeError):
            engine.begin()


class TestRemoveAndClear:
    """Tests for remove_shape() and clear()."""

    def test_remove_shape(self):
        engine = _engine()
        shape = engine.create(_square(0, 0))[0]
        received = _recorder(engine)

        assert engine.remove_shape(shape) is True
        assert engine.size() == 0
        assert [n.reason for n in received] == [NotifyReason.REMOVE]

    def test_remove_absent_shape_is_a_no_op(self):
        engine = _engine()
        shape = engine.create(_square(0, 0))[0]
        engine.remove_shape(shape)
        received = _recorder(engine)

        assert engine.remove_shape(shape) is False
        assert [n.reason for n in received] == [NotifyReason.REMOVE]

    def test_clear_is_idempotent(self):
        engine = _engine()
        engine.create(_square(0, 0))
        engine.create(_square(20, 0))
        received = _recorder(engine)

        engine.clear()
        engine.clear()

        assert engine.size() == 0
        assert [n.reason for n in received] == [NotifyReason.CLEAR, NotifyReason.CLEAR]
        assert all(len(n) == 0 for n in received)


class TestNotifications:
    """Tests for subscriber notifications."""

    def test_create_notifies_once_with_every_shape(self):
        engine = _engine()
        engine.create(_square(0, 0))
        received = _recorder(engine)

        engine.create(_square(20, 0))

        assert len(received) == 1
        assert received[0].reason == NotifyReason.CREATE
        assert received[0].shapes == tuple(engine.all())
        assert len(received[0].rings()) == 2

    def test_merge_notifies_once(self):
        engine = _engine()
        engine.create(_square(0, 0))
        engine.create(_square(20, 0))
        received = _recorder(engine)

        engine.create([(5, 2), (25, 2), (25, 8), (5, 8)])

        assert len(received) == 1
        assert len(received[0]) == 1

    def test_unsubscribe(self):
        engine = _engine()
        received = []
        unsubscribe = engine.subscribe(received.append)
        unsubscribe()
        unsubscribe()

        engine.create(_square(0, 0))
        assert received == []


class TestEdit:
    """Tests for DrawEngine.edit()."""

    def _engine_with_square(self, **kwargs):
        engine = _engine(**kwargs)
        shape = engine.create(_square(0, 0, 100))[0]
        return engine, shape

    def test_move_vertex(self):
        engine, shape = self._engine_with_square()
        replacements = engine.edit(shape, (1, 1), target=(-10, -10))

        assert len(replacements) == 1
        assert shape not in engine
        assert replacements[0] in engine
        assert (-10.0, -10.0) in replacements[0].coords
        assert (0.0, 0.0) not in replacements[0].coords

    def test_delete_vertex(self):
        engine, shape = self._engine_with_square()
        replacements = engine.edit(shape, (99, 1), remove=True)

        assert len(replacements[0]) == 3
        assert replacements[0].area == pytest.approx(5000)

    def test_append_vertex(self):
        engine, shape = self._engine_with_square()
        replacements = engine.edit(shape, (50, 0), target=(50, -20))

        assert len(replacements[0]) == 5
        assert replacements[0].area == pytest.approx(10000 + 1000)

    def test_append_requires_append_bit(self):
        engine, shape = self._engine_with_square()
        engine.set_mode(Mode.EDIT)

        with pytest.raises(ModeError):
            engine.edit(shape, (50, 0), target=(50, -20))
        assert shape in engine

    def test_move_requires_edit_bit(self):
        engine, shape = self._engine_with_square()
        engine.set_mode(Mode.APPEND)

        with pytest.raises(ModeError):
            engine.edit(shape, (1, 1), target=(-10, -10))
        assert shape in engine

    def test_edit_requires_edit_or_append(self):
        engine, shape = self._engine_with_square()
        engine.set_mode(Mode.CREATE | Mode.DELETE)
        with pytest.raises(ModeError):
            engine.edit(shape, (1, 1))

    def test_self_crossing_move_splits_shape(self):
        engine, shape = self._engine_with_square()
        replacements = engine.edit(shape, (1, 1), target=(150, 50))

        assert len(replacements) == 2
        assert engine.size() == 2
        assert all(s.geometry.is_valid for s in replacements)
        assert not intersects(replacements[0].ring, replacements[1].ring)

    def test_unknown_shape(self):
        engine, shape = self._engine_with_square()
        engine.remove_shape(shape)
        with pytest.raises(KeyError, match="not on this surface"):
            engine.edit(shape, (1, 1))

    def test_edit_notifies(self):
        engine, shape = self._engine_with_square()
        received = _recorder(engine)
        engine.edit(shape, (1, 1), target=(-10, -10))
        assert [n.reason for n in received] == [NotifyReason.EDIT]

    def test_notification_held_until_edit_mode_left(self):
        engine, shape = self._engine_with_square(notify_after_edit_exit=True)
        received = _recorder(engine)

        engine.edit(shape, (1, 1), target=(-10, -10))
        assert received == []

        engine.set_mode(Mode.CREATE)
        assert [n.reason for n in received] == [NotifyReason.EDIT]

        engine.set_mode(Mode.NONE)
        assert len(received) == 1


class TestDrawSession:
    """Tests for begin/advance/finish/cancel."""

    def test_drag_creates_shape(self):
        engine = DrawEngine()
        received = _recorder(engine)

        session = engine.begin()
        for point in _drag(0, 0):
            assert engine.advance(session, point)
        shapes = engine.finish(session)

        assert len(shapes) == 1
        assert shapes[0].area == pytest.approx(10000)
        assert [n.reason for n in received] == [NotifyReason.CREATE]
        assert engine.session is None

    def test_cancel_discards_drag(self):
        engine = DrawEngine()
        received = _recorder(engine)

        session = engine.begin()
        for point in _drag(0, 0):
            engine.advance(session, point)
        engine.cancel()
        engine.cancel()

        assert engine.advance(session, (5, 5)) is False
        assert engine.finish(session) == []
        assert engine.size() == 0
        assert received == []

    def test_begin_cancels_previous_session(self):
        engine = DrawEngine()
        first = engine.begin()
        second = engine.begin()

        assert first.cancelled
        assert engine.session is second

    def test_short_stroke_creates_nothing(self):
        engine = DrawEngine()
        received = _recorder(engine)

        session = engine.begin()
        engine.advance(session, (0, 0))
        engine.advance(session, (1, 1))

        assert engine.finish(session) == []
        assert engine.size() == 0
        assert len(received) == 1

    def test_finish_twice(self):
        engine = DrawEngine()
        received = _recorder(engine)
        session = engine.begin()
        for point in _drag(0, 0):
            engine.advance(session, point)
        engine.finish(session)

        assert engine.finish(session) == []
        assert len(received) == 1

    def test_drag_uses_concave_hull(self):
        engine = DrawEngine()
        with patch("polydraw.pipeline.concave_hull", side_effect=lambda ring, **kwargs: ring) as hull:
            session = engine.begin()
            for point in _drag(0, 0):
                engine.advance(session, point)
            engine.finish(session)

        assert hull.call_count == 1

    def test_leave_mode_after_create(self):
        engine = DrawEngine(CreateOptions(leave_mode_after_create=True))
        session = engine.begin()
        for point in _drag(0, 0):
            engine.advance(session, point)
        engine.finish(session)

        assert engine.mode == Mode.EDIT | Mode.DELETE | Mode.APPEND
        with pytest.raises(ModeError):
            engine.begin()

    def test_drag_respects_capacity(self):
        engine = DrawEngine(CreateOptions(maximum_polygons=1))
        engine.create(_square(200, 200))
        session = engine.begin()
        for point in _drag(0, 0):
            engine.advance(session, point)

        with pytest.raises(CapacityExceededError):
            engine.finish(session)
        assert engine.size() == 1
