from dataclasses import replace

import numpy as np
import pytest

from chaosgame.datatypes import Point
from chaosgame.errors import RenderFailure
from chaosgame.geometry import optimal_rate, polygon_vertices
from chaosgame.iterator import ChaosGame
from chaosgame.render import FrameRenderer
from chaosgame.settings import default_settings


@pytest.fixture
def renderer(small_settings):
    return FrameRenderer(replace(small_settings, show_text=False))


def pixel(frame, point, renderer):
    x, y = renderer.to_image(point)
    return frame.image.getpixel((int(round(x)), int(round(y))))


def test_frame_has_configured_size(renderer, small_settings):
    frame = renderer.render(1, [[0.0, 0.0], [1.0, 1.0]])
    assert frame.image.size == (small_settings.width, small_settings.height)
    assert frame.image.mode == "RGB"
    assert frame.index == 1


def test_highlight_is_last_point_of_the_sequence():
    settings_radius = 500
    game = ChaosGame(polygon_vertices(3, settings_radius), optimal_rate(3), seed=42)
    game.run(25)
    assert len(game.points) == 26

    renderer = FrameRenderer(replace(default_settings, show_text=False, radius_fraction=settings_radius / 1080))
    frame = renderer.render(25, game.points.snapshot())
    assert frame.highlight == game.points[-1]
    assert pixel(frame, frame.highlight, renderer) == renderer.highlight


def test_rendering_does_not_touch_the_points(renderer):
    game = ChaosGame(renderer.vertices, renderer.rate, seed=3)
    game.run(30)
    points = game.points.snapshot()
    before = points.copy()
    sequence_before = list(game.points)

    renderer.render(30, points)
    renderer.render(30, game.points)

    assert np.array_equal(points, before)
    assert list(game.points) == sequence_before


def test_background_and_outline(renderer):
    frame = renderer.render(1, [[0.0, 0.0], [0.0, 0.0]])
    assert frame.image.getpixel((0, 0)) == renderer.background
    assert pixel(frame, renderer.vertices[0], renderer) == renderer.outline


def test_warmup_points_are_not_drawn(small_settings):
    renderer = FrameRenderer(replace(small_settings, show_text=False, warmup=2, point_radius=1.0))
    away = [20.0, 20.0]
    points = np.array([away, [0.0, 0.0], [-20.0, 10.0], [0.0, 30.0]])

    frame = renderer.render(3, points)

    assert pixel(frame, away, renderer) == renderer.background
    assert pixel(frame, [-20.0, 10.0], renderer) != renderer.background


def test_point_colors_depend_on_position(renderer):
    points = np.array([[0.0] * 2] * renderer.settings.warmup + [[20.0, 0.0], [-20.0, 0.0], [0.0, 0.0]])
    frame = renderer.render(1, points)
    assert pixel(frame, [20.0, 0.0], renderer) != pixel(frame, [-20.0, 0.0], renderer)


def test_every_frame_is_a_full_repaint(renderer):
    points = np.array([[0.0, 0.0]] * 10 + [[15.0, 15.0]])
    first = renderer.render(1, points)
    second = renderer.render(1, points)
    assert first.image.tobytes() == second.image.tobytes()


def test_text_overlay_changes_with_frame_index(small_settings):
    renderer = FrameRenderer(replace(small_settings, width=480, height=800, show_text=True))
    points = [[0.0, 0.0], [1.0, 1.0]]
    assert renderer.render(1, points).image.tobytes() != renderer.render(2, points).image.tobytes()


def test_empty_points_fail(renderer):
    with pytest.raises(RenderFailure) as info:
        renderer.render(7, np.empty((0, 2)))
    assert info.value.frame_index == 7


def test_non_finite_points_are_a_render_failure(renderer):
    with pytest.raises(RenderFailure):
        renderer.render(1, [[0.0, 0.0]] * 10 + [[np.nan, 0.0]])


def test_highlight_is_a_point(renderer):
    frame = renderer.render(1, [[0.0, 0.0], [3.0, 4.0]])
    assert frame.highlight == Point(3.0, 4.0)
