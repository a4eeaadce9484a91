import pytest

from airink.config import Settings
from airink.geometry import WorldPoint
from airink.gestures import Gesture
from airink.ink import ColorPalette, InkEngine, Tool


@pytest.fixture
def engine(settings, rng):
    return InkEngine(settings, rng=rng)


def draw(engine, points):
    for x, y in points:
        engine.begin_or_continue_stroke(Gesture.PINCH_DRAW, WorldPoint(x, y))


class TestStrokes:

    def test_pinch_starts_stroke_and_release_seals_it(self, engine):
        draw(engine, [(0, 0), (50, 0), (100, 0)])
        assert engine.is_drawing
        assert engine.get_stroke_count() == 0

        engine.begin_or_continue_stroke(Gesture.NONE, None)
        assert not engine.is_drawing
        assert engine.get_stroke_count() == 1
        assert engine.strokes[0].points[0] == WorldPoint(0, 0)

    def test_end_without_stroke_is_noop(self, engine):
        engine.begin_or_continue_stroke(Gesture.POINTING, WorldPoint(1, 1))
        assert engine.get_stroke_count() == 0

    def test_close_points_are_thinned(self, engine):
        draw(engine, [(0, 0)])
        count = len(engine.current_stroke.points)
        draw(engine, [(0.5, 0.5), (1.0, 0.0), (0.0, 1.5), (1.4, 1.4)])
        assert len(engine.current_stroke.points) == count

    def test_far_points_are_appended(self, engine):
        draw(engine, [(0, 0), (40, 0), (80, 0), (120, 0)])
        assert len(engine.current_stroke.points) == 4

    def test_adaptive_smoothing(self, engine):
        last = WorldPoint(0, 0)
        slow = engine.smooth_point(WorldPoint(2, 0), last)
        assert slow.x == pytest.approx(2 * 0.15)

        fast = engine.smooth_point(WorldPoint(100, 0), last)
        assert fast.x == pytest.approx(100 * 0.8)

        mid = engine.smooth_point(WorldPoint(10, 0), last)
        assert mid.x == pytest.approx(10 * 0.5)

        assert engine.smooth_point(WorldPoint(7, 7), None) == WorldPoint(7, 7)

    def test_next_stroke_does_not_inherit_anchor(self, engine):
        draw(engine, [(0, 0), (100, 0)])
        engine.end_stroke()
        draw(engine, [(500, 500)])
        assert engine.current_stroke.points[0] == WorldPoint(500, 500)

    def test_cancel_discards_open_stroke(self, engine):
        draw(engine, [(0, 0), (100, 0)])
        engine.cancel_stroke()
        assert not engine.is_drawing
        assert engine.get_stroke_count() == 0

    def test_tool_settings_apply_to_new_strokes_only(self, engine):
        engine.set_color(ColorPalette.RED)
        engine.set_size(12)
        draw(engine, [(0, 0), (50, 0)])
        engine.end_stroke()

        engine.set_color(ColorPalette.BLUE)
        engine.set_size(2)
        engine.set_tool(Tool.ERASER)
        draw(engine, [(0, 0), (50, 0)])
        engine.end_stroke()

        first, second = engine.strokes
        assert (first.color, first.size, first.is_eraser) == (ColorPalette.RED, 12, False)
        assert second.is_eraser
        assert second.color == ColorPalette.BLACK
        assert second.size == 2

    def test_single_point_stroke_is_not_renderable(self, engine):
        draw(engine, [(0, 0)])
        assert not engine.current_stroke.is_renderable()


class TestDissolve:

    def _fill(self, engine, strokes, points_each):
        for s in range(strokes):
            draw(engine, [(i * 10.0, s * 100.0) for i in range(points_each)])
            engine.end_stroke()

    def test_particle_count_follows_stride(self, engine):
        self._fill(engine, strokes=3, points_each=10)
        total = engine.get_point_count()
        assert total == 30

        spawned = engine.dissolve()
        assert spawned == 3 * 5
        assert len(engine.particles) == spawned
        assert engine.get_stroke_count() == 0
        assert not engine.has_content()

    def test_particles_take_stroke_color_and_start_above_full_life(self, engine):
        engine.set_color(ColorPalette.GREEN)
        engine.set_size(10)
        self._fill(engine, strokes=1, points_each=9)
        engine.dissolve()

        for p in engine.particles:
            assert p.color == ColorPalette.GREEN
            assert p.life > 1.0
            assert 0 <= p.size < 8.0
            assert -4.0 <= p.vy < -1.0

    def test_particles_die_within_bounded_steps(self, engine, settings):
        self._fill(engine, strokes=2, points_each=12)
        engine.dissolve()

        max_steps = int(2.0 / settings.particle_decay) + 1
        for _ in range(max_steps):
            engine.step_particles()
        assert engine.particles == []

    def test_step_applies_physics(self, rng):
        settings = Settings()
        engine = InkEngine(settings, rng=rng)
        draw(engine, [(0, 0)])
        engine.end_stroke()
        engine.dissolve()

        before = engine.particles[0]
        x, y, vx, vy, life, size = before.x, before.y, before.vx, before.vy, before.life, before.size
        engine.step_particles()
        after = engine.particles[0]

        assert after.x == pytest.approx(x + vx)
        assert after.y == pytest.approx(y + vy)
        assert after.vy == pytest.approx(vy + settings.particle_gravity)
        assert after.vx == pytest.approx(vx * settings.particle_drag)
        assert after.life == pytest.approx(life - settings.particle_decay)
        assert after.size == pytest.approx(size * settings.particle_shrink)
        assert after.opacity == pytest.approx(min(1.0, after.life))

    def test_dissolve_empty_history(self, engine):
        assert engine.dissolve() == 0
        assert engine.particles == []
