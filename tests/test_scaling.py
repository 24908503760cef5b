from __future__ import annotations

import math

import pytest

from src.logic.scaling import (
    MAX_BOARD_SCALE,
    MIN_BOARD_SCALE,
    ScaleTracker,
    ViewportScale,
    canvas_size,
    clamp_scale,
    compute_scale,
)


def test_compute_scale_identity() -> None:
    assert compute_scale(1280, 720, 1280, 720) == ViewportScale(1.0, 1.0)


def test_compute_scale_half_size() -> None:
    assert compute_scale(640, 360, 1280, 720) == ViewportScale(0.5, 0.5)


def test_compute_scale_axes_are_independent() -> None:
    scale = compute_scale(2560, 720)

    assert scale == ViewportScale(2.0, 1.0)


def test_compute_scale_non_positive_viewport_yields_one_on_that_axis() -> None:
    assert compute_scale(0, 720) == ViewportScale(1.0, 1.0)
    assert compute_scale(-5, 360) == ViewportScale(1.0, 0.5)
    assert compute_scale(640, 0) == ViewportScale(0.5, 1.0)


def test_compute_scale_non_finite_inputs() -> None:
    assert compute_scale(math.nan, 360) == ViewportScale(1.0, 0.5)
    assert compute_scale(640, math.inf) == ViewportScale(0.5, 1.0)
    assert compute_scale(640, 360, 0, 720) == ViewportScale(1.0, 0.5)


def test_compute_scale_clamps() -> None:
    assert compute_scale(1, 1) == ViewportScale(MIN_BOARD_SCALE, MIN_BOARD_SCALE)
    assert compute_scale(100_000, 100_000) == ViewportScale(MAX_BOARD_SCALE, MAX_BOARD_SCALE)


def test_clamp_scale() -> None:
    assert clamp_scale(0) == 1.0
    assert clamp_scale(-2) == 1.0
    assert clamp_scale(math.nan) == 1.0
    assert clamp_scale(0.05) == MIN_BOARD_SCALE
    assert clamp_scale(3.25) == 3.25
    assert clamp_scale(42) == MAX_BOARD_SCALE


def test_canvas_size_grows_with_content_only() -> None:
    assert canvas_size(1280, 800) == (1280, 800)
    assert canvas_size(1000, 600) == (1280, 720)
    assert canvas_size(0, math.nan) == (1280, 720)


def test_tracker_initial_scale() -> None:
    tracker = ScaleTracker(1920, 1080)

    assert tracker.scale == ViewportScale(1.5, 1.5)
    assert tracker.canvas == (1280, 720)


def test_tracker_resize_dead_zone() -> None:
    tracker = ScaleTracker(1920, 1080)

    assert tracker.resize(1920, 1080) is False
    assert tracker.resize(1925, 1080) is False
    assert tracker.scale == ViewportScale(1.5, 1.5)
    assert tracker.resize(2560, 1440) is True
    assert tracker.scale == ViewportScale(2.0, 2.0)


def test_tracker_measure_grows_canvas() -> None:
    tracker = ScaleTracker(1280, 720)

    assert tracker.measure(1280, 800) is True
    assert tracker.scale.x == 1.0
    assert tracker.scale.y == pytest.approx(0.9)
    assert tracker.measure(1280, 800.3) is False
    assert tracker.canvas == (1280, 800)


def test_tracker_measure_smaller_content_keeps_base_canvas() -> None:
    tracker = ScaleTracker(640, 360)

    assert tracker.measure(1280, 500) is False
    assert tracker.canvas == (1280, 720)
    assert tracker.scale == ViewportScale(0.5, 0.5)
