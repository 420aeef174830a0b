"""Tests for surface registration and the drag session value."""

import pytest

from polydraw import CreateOptions, DrawEngine, DrawSession, Mode, SurfaceRegistry
from polydraw import registry

SQUARE = [(0, 0), (10, 0), (10, 10), (0, 10)]


class Surface:
    """Stand-in for a map instance."""


class TestSurfaceRegistry:

    def test_attach_creates_engine(self):
        surfaces = SurfaceRegistry()
        surface = Surface()
        engine = surfaces.attach(surface, CreateOptions(maximum_polygons=3))

        assert isinstance(engine, DrawEngine)
        assert engine.surface is surface
        assert engine.options.maximum_polygons == 3
        assert surfaces.engine_for(surface) is engine
        assert surface in surfaces
        assert len(surfaces) == 1

    def test_surfaces_are_independent(self):
        surfaces = SurfaceRegistry()
        first, second = Surface(), Surface()
        surfaces.attach(first).create(SQUARE)
        surfaces.attach(second)

        assert surfaces.engine_for(first).size() == 1
        assert surfaces.engine_for(second).size() == 0

    def test_attach_twice_rejected(self):
        surfaces = SurfaceRegistry()
        surface = Surface()
        surfaces.attach(surface)
        with pytest.raises(ValueError):
            surfaces.attach(surface)

    def test_detach_cancels_drag(self):
        surfaces = SurfaceRegistry()
        surface = Surface()
        session = surfaces.attach(surface).begin()

        engine = surfaces.detach(surface)

        assert engine is not None
        assert session.cancelled
        assert surface not in surfaces
        assert surfaces.detach(surface) is None

    def test_unknown_surface(self):
        with pytest.raises(KeyError):
            SurfaceRegistry().engine_for(Surface())


class TestModuleFunctions:

    def test_default_registry_round_trip(self):
        surface = Surface()
        registry.attach(surface)
        try:
            shapes = registry.create(surface, SQUARE)
            assert registry.size(surface) == 1
            assert registry.all_shapes(surface) == shapes

            registry.set_mode(surface, Mode.DELETE)
            assert registry.get_mode(surface) == Mode.DELETE
            assert registry.remove_shape(surface, shapes[0])

            registry.clear(surface)
            registry.cancel(surface)
            assert registry.size(surface) == 0
        finally:
            registry.detach(surface)

        assert surface not in registry.default_registry


    def test_create_forwards_overrides(self):
        surface = Surface()
        registry.attach(surface)
        try:
            registry.create(surface, SQUARE)
            created = registry.create(surface, [(5, 5), (15, 5), (15, 15), (5, 15)], merge_polygons=False)

            assert created[0].options.merge_polygons is False
            assert registry.size(surface) == 2
        finally:
            registry.detach(surface)


class TestDrawSession:

    def test_repeated_samples_collapsed(self):
        session = DrawSession()
        session.add((0, 0))
        session.add((0, 0))
        session.add((1, 0))
        assert len(session) == 2

    def test_cancelled_session_rejects_points(self):
        session = DrawSession()
        session.add((0, 0))
        session.cancel()

        assert not session.active
        assert session.add((1, 1)) is False
        assert len(session) == 0

    def test_to_array(self):
        session = DrawSession()
        for point in SQUARE:
            session.add(point)
        assert session.to_array().shape == (4, 2)
