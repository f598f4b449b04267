import numpy as np
import pytest

from mandelblocks import RenderError, RenderParameters, Viewport, render_frame
from mandelblocks.renderer import create_canvas
from mandelblocks.schedulers import fill_per_pixel, fill_per_row, fill_sequential

VIEWPORT = Viewport(-2.0, 2.0, -1.0, 1.0)


def failing_at(target):
    def evaluate(col, row):
        if (col, row) == target:
            raise ArithmeticError("boom")
        return col + row

    return evaluate


@pytest.mark.parametrize("rect", ["-2.0:2.0:-1.0:1.0", "-1.0:0.5:-0.5:0.5"])
def test_exact_modes_are_pixel_identical(rect):
    viewport = Viewport.parse(rect)
    results = [
        render_frame(RenderParameters(24, 16, viewport, mode=mode, tasks=4, max_iterations=60))
        for mode in ("seq", "px", "row")
    ]
    assert np.array_equal(results[0].rgba, results[1].rgba)
    assert np.array_equal(results[0].rgba, results[2].rgba)


@pytest.mark.parametrize("fill", [fill_per_pixel, fill_per_row])
def test_concurrent_baselines_write_every_cell_once(recording_canvas, fill):
    canvas = recording_canvas(9, 7, lambda col, row: col * row)
    fill(canvas, 3)
    assert canvas.is_complete()
    assert (canvas.writes == 1).all()


def test_sequential_writes_every_cell_once(recording_canvas):
    canvas = recording_canvas(9, 7, lambda col, row: col - row)
    fill_sequential(canvas)
    assert (canvas.writes == 1).all()
    assert canvas.values[6, 8] == 2


def test_baselines_use_the_canvas_evaluator():
    params = RenderParameters(12, 10, VIEWPORT, max_iterations=30)
    reference = create_canvas(params)
    fill_sequential(reference)
    for fill in (fill_per_pixel, fill_per_row):
        canvas = create_canvas(params)
        fill(canvas, 2)
        assert np.array_equal(canvas.values, reference.values)


def test_sequential_failure_aborts_render(recording_canvas):
    canvas = recording_canvas(5, 5, failing_at((3, 2)))
    with pytest.raises(RenderError) as excinfo:
        fill_sequential(canvas)
    assert isinstance(excinfo.value.__cause__, ArithmeticError)


@pytest.mark.parametrize("fill", [fill_per_pixel, fill_per_row])
def test_evaluation_failure_aborts_render(recording_canvas, fill):
    canvas = recording_canvas(5, 5, failing_at((3, 2)))
    with pytest.raises(RenderError) as excinfo:
        fill(canvas, 2)
    assert isinstance(excinfo.value.__cause__, ArithmeticError)


@pytest.mark.parametrize("fill", [fill_per_pixel, fill_per_row])
def test_first_failure_cancels_remaining_jobs(recording_canvas, fill):
    canvas = recording_canvas(200, 200, failing_at((0, 0)))
    with pytest.raises(RenderError):
        fill(canvas, 1)
    assert canvas.unwritten() > 0
