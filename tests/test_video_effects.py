"""Tests for Ken Burns placement and canvas drawing."""

import numpy as np
import pytest

from shorts_engine.utils.seed import seeded_unit
from shorts_engine.video_assembly.video_effects import (
    EffectsEngine, ken_burns_placement, ken_burns_variant, smoothstep, vertical_gradient_alpha
)

CANVAS = (108, 192)


def _covers(placement, canvas_size=CANVAS):
    width, height = canvas_size
    return (placement.x <= 0 and placement.y <= 0
            and placement.x + placement.width >= width
            and placement.y + placement.height >= height)


def test_seeded_unit_range_and_determinism():
    for seed in range(20):
        value = seeded_unit(seed, 1)
        assert 0.0 <= value < 1.0
        assert value == seeded_unit(seed, 1)


@pytest.mark.parametrize("seed,zoom_in,pan_x,pan_y", [
    (0, True, 1, -1),
    (1, True, -1, -1),
    (2, False, -1, -1),
    (3, False, -1, 1),
    (4, False, 1, 1),
    (5, True, 1, 1),
])
def test_direction_table(seed, zoom_in, pan_x, pan_y):
    # Negative sines wrap into [0, 1) before the 0.5 threshold
    variant = ken_burns_variant(seed)

    assert (variant.zoom_in, variant.pan_x, variant.pan_y) == (zoom_in, pan_x, pan_y)


def test_negative_sine_wraps_upward():
    assert seeded_unit(5, 1) == pytest.approx(1.0 - 0.2794155, abs=1e-6)


def test_placement_is_pure():
    """Same inputs, same geometry."""
    a = ken_burns_placement(3, 0.37, (1280, 720), CANVAS)
    b = ken_burns_placement(3, 0.37, (1280, 720), CANVAS)

    assert a == b


@pytest.mark.parametrize("source_size", [(1280, 720), (720, 1280), (640, 640)])
@pytest.mark.parametrize("seed", range(6))
def test_placement_always_covers_canvas(seed, source_size):
    """The frame never shows a black edge at either end of the move."""
    for progress in (0.0, 0.5, 1.0):
        assert _covers(ken_burns_placement(seed, progress, source_size, CANVAS))


def test_zoom_direction_follows_variant():
    """Zoom-in clips grow by the zoom amount; zoom-out clips shrink by it."""
    for seed in range(6):
        start = ken_burns_placement(seed, 0.0, (1280, 720), CANVAS)
        end = ken_burns_placement(seed, 1.0, (1280, 720), CANVAS)
        if ken_burns_variant(seed).zoom_in:
            assert end.width / start.width == pytest.approx(1.1)
        else:
            assert start.width / end.width == pytest.approx(1.1)


def test_progress_is_clamped():
    assert ken_burns_placement(1, 1.7, (1280, 720), CANVAS) == ken_burns_placement(1, 1.0, (1280, 720), CANVAS)
    assert ken_burns_placement(1, -0.2, (1280, 720), CANVAS) == ken_burns_placement(1, 0.0, (1280, 720), CANVAS)


def test_smoothstep_endpoints():
    assert smoothstep(0.0) == 0.0
    assert smoothstep(1.0) == 1.0
    assert smoothstep(0.5) == pytest.approx(0.5)


def test_gradient_darkens_toward_bottom():
    alpha = vertical_gradient_alpha(192).ravel()

    assert alpha[0] == pytest.approx(0.1)
    assert alpha[-1] == pytest.approx(0.9)
    assert np.all(np.diff(alpha) >= 0)


def test_draw_ken_burns_fills_canvas(small_config):
    engine = EffectsEngine(small_config)
    canvas = engine.new_canvas()
    frame = np.full((72, 128, 3), 200, dtype=np.uint8)

    engine.draw_ken_burns(canvas, frame, seed=2, progress=0.5)

    assert canvas.shape == (192, 108, 3)
    assert canvas.min() >= 190


def test_missing_frame_draws_nothing(small_config):
    engine = EffectsEngine(small_config)
    canvas = engine.new_canvas()

    engine.draw_ken_burns(canvas, None, seed=0, progress=0.0)

    assert not np.any(canvas)


def test_transparent_layer_leaves_canvas(small_config):
    """An incoming clip at zero opacity does not touch the frame."""
    engine = EffectsEngine(small_config)
    canvas = np.full((192, 108, 3), 50, dtype=np.uint8)
    frame = np.full((72, 128, 3), 250, dtype=np.uint8)

    engine.draw_ken_burns(canvas, frame, seed=0, progress=0.0, layer=np.eye(3), opacity=0.0)

    assert np.all(canvas == 50)


def test_gradient_overlay(small_config):
    engine = EffectsEngine(small_config)
    canvas = np.full((192, 108, 3), 255, dtype=np.uint8)

    engine.apply_gradient_overlay(canvas)

    assert canvas[0, 0, 0] == pytest.approx(229, abs=1)
    assert canvas[-1, 0, 0] == pytest.approx(25, abs=1)
