import pytest

from mandelblocks.canvas import EXACT, FILLED, UNWRITTEN, Canvas


class CountingEvaluator:
    def __init__(self):
        self.calls = []

    def __call__(self, col, row):
        self.calls.append((col, row))
        return col + 10 * row


def test_compute_writes_exact_value():
    evaluate = CountingEvaluator()
    canvas = Canvas(4, 3, evaluate)
    assert canvas.compute(2, 1) == 12
    assert canvas.state(2, 1) == EXACT
    assert canvas.values[1, 2] == 12


def test_read_evaluates_unwritten_cell_without_writing():
    evaluate = CountingEvaluator()
    canvas = Canvas(4, 3, evaluate)
    assert canvas.read(3, 2) == 23
    assert canvas.state(3, 2) == UNWRITTEN
    assert canvas.unwritten() == 12


def test_read_returns_stored_exact_value():
    evaluate = CountingEvaluator()
    canvas = Canvas(4, 3, evaluate)
    canvas.write(1, 1, 99)
    assert canvas.read(1, 1) == 99
    assert evaluate.calls == []


def test_read_reevaluates_filled_cell():
    canvas = Canvas(4, 3, CountingEvaluator())
    canvas.fill(0, 0, 4, 3, 7)
    assert canvas.state(3, 2) == FILLED
    assert canvas.values[2, 3] == 7
    assert canvas.read(3, 2) == 23


def test_fill_covers_rectangle_only():
    canvas = Canvas(6, 6, CountingEvaluator())
    canvas.fill(2, 1, 3, 2, 5)
    states = canvas.states
    assert (states[1:3, 2:5] == FILLED).all()
    assert canvas.unwritten() == 36 - 6
    assert not canvas.is_complete()


def test_fill_ignores_empty_rectangle():
    canvas = Canvas(2, 2, CountingEvaluator())
    canvas.fill(0, 0, 0, 2, 1)
    assert canvas.unwritten() == 4


@pytest.mark.parametrize("col, row", [(-1, 0), (0, -1), (4, 0), (0, 3)])
def test_out_of_range_access_is_rejected(col, row):
    canvas = Canvas(4, 3, CountingEvaluator())
    with pytest.raises(IndexError):
        canvas.write(col, row, 1)
    with pytest.raises(IndexError):
        canvas.read(col, row)


def test_fill_past_edge_is_rejected():
    canvas = Canvas(4, 3, CountingEvaluator())
    with pytest.raises(IndexError):
        canvas.fill(2, 0, 3, 1, 1)


def test_values_is_a_copy():
    canvas = Canvas(2, 2, CountingEvaluator())
    values = canvas.values
    values[0, 0] = 42
    assert canvas.values[0, 0] == 0


def test_empty_canvas_is_rejected():
    with pytest.raises(ValueError):
        Canvas(0, 4, CountingEvaluator())
