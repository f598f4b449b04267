import threading

import numpy as np
import pytest

from mandelblocks.canvas import Canvas


class RecordingCanvas(Canvas):
    """Canvas that counts how many times every cell has been written."""

    def __init__(self, width, height, evaluate):
        super().__init__(width, height, evaluate)
        self.writes = np.zeros((height, width), dtype=np.int64)
        self._writes_lock = threading.Lock()

    def write(self, col, row, value):
        super().write(col, row, value)
        with self._writes_lock:
            self.writes[row, col] += 1

    def fill(self, col, row, width, height, value):
        super().fill(col, row, width, height, value)
        with self._writes_lock:
            self.writes[row:row + height, col:col + width] += 1


@pytest.fixture
def recording_canvas():
    def make(width, height, evaluate):
        return RecordingCanvas(width, height, evaluate)

    return make
