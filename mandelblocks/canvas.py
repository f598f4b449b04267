"""Pixel buffer shared by the schedulers."""

from __future__ import annotations

from typing import Callable

import numpy as np

UNWRITTEN = 0
EXACT = 1
FILLED = 2


class Canvas:
    """A ``width`` x ``height`` grid of escape-time values.

    Cells are indexed as ``(col, row)`` and stored row-major. Writers must
    target disjoint cells; the canvas itself does no locking.
    """

    def __init__(self, width: int, height: int, evaluate: Callable[[int, int], int]):
        if width <= 0 or height <= 0:
            raise ValueError(f"canvas size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._evaluate = evaluate
        self._values = np.zeros((height, width), dtype=np.int32)
        self._state = np.full((height, width), UNWRITTEN, dtype=np.uint8)

    def _check(self, col: int, row: int) -> None:
        if not (0 <= col < self.width and 0 <= row < self.height):
            raise IndexError(f"pixel ({col}, {row}) outside {self.width}x{self.height} canvas")

    def evaluate(self, col: int, row: int) -> int:
        self._check(col, row)
        return self._evaluate(col, row)

    def write(self, col: int, row: int, value: int) -> None:
        self._check(col, row)
        self._values[row, col] = value
        self._state[row, col] = EXACT

    def compute(self, col: int, row: int) -> int:
        value = self.evaluate(col, row)
        self.write(col, row, value)
        return value

    def fill(self, col: int, row: int, width: int, height: int, value: int) -> None:
        """Write ``value`` into every cell of the given rectangle."""

        if width <= 0 or height <= 0:
            return
        self._check(col, row)
        self._check(col + width - 1, row + height - 1)
        self._values[row:row + height, col:col + width] = value
        self._state[row:row + height, col:col + width] = FILLED

    def read(self, col: int, row: int) -> int:
        """Return the exact value of a cell, evaluating it if it was never computed.

        Bulk-filled cells are evaluated again: their stored value is an
        approximation and reading it would make results depend on the order
        in which blocks finish.
        """

        self._check(col, row)
        if self._state[row, col] == EXACT:
            return int(self._values[row, col])
        return self._evaluate(col, row)

    def state(self, col: int, row: int) -> int:
        self._check(col, row)
        return int(self._state[row, col])

    def unwritten(self) -> int:
        return int(np.count_nonzero(self._state == UNWRITTEN))

    def is_complete(self) -> bool:
        return self.unwritten() == 0

    @property
    def values(self) -> np.ndarray:
        return self._values.copy()

    @property
    def states(self) -> np.ndarray:
        return self._state.copy()
