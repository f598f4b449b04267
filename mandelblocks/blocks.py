"""Adaptive block scheduler.

The canvas is cut into a grid of blocks which a pool of worker threads
consumes from a shared queue. For every block the four corner values are
compared: when they agree the whole block is painted with that value, when
they disagree the block is split in four and the children go back on the
queue, until blocks are small enough to be evaluated pixel by pixel.

Painting a block from its corners is an approximation. A block whose
corners agree can still contain cells with a different escape time, so the
output may differ from the exact schedulers inside bulk-filled blocks.
``block_width``, ``block_height`` and ``threshold`` control that trade-off.

A parent block is only complete once all of its children are. Rather than
parking a thread until then, every split installs a join counter and the
last child to finish completes the parent, so the pool never blocks on
itself regardless of its size.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from queue import SimpleQueue
from typing import Callable, Optional

from .canvas import Canvas
from .schedulers import RenderError

logger = logging.getLogger(__name__)

BLOCK_WIDTH = 32
BLOCK_HEIGHT = 32
THRESHOLD = 4


@dataclass(frozen=True)
class Block:
    """A rectangle of the canvas, already clipped to the canvas bounds."""

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    def limits(self, canvas_width: int, canvas_height: int) -> tuple[int, int]:
        """Return the far corner sampled by the corner test.

        This is ``x + width`` (the first column past the block), pulled back to
        the last canvas column on the right edge; rows likewise.
        """

        limit_w = self.x + self.width
        if limit_w >= canvas_width:
            limit_w = canvas_width - 1
        limit_h = self.y + self.height
        if limit_h >= canvas_height:
            limit_h = canvas_height - 1
        return limit_w, limit_h

    def corners(self, canvas_width: int, canvas_height: int) -> tuple[tuple[int, int], ...]:
        limit_w, limit_h = self.limits(canvas_width, canvas_height)
        return (
            (self.x, self.y),
            (limit_w, limit_h),
            (self.x, limit_h),
            (limit_w, self.y),
        )

    def split(self) -> list["Block"]:
        """Halve both dimensions; the children tile this block exactly.

        Odd sizes give the extra column/row to the second half. Children with
        no area (a side of length 1) are dropped.
        """

        half_w = self.width // 2
        half_h = self.height // 2
        columns = ((self.x, half_w), (self.x + half_w, self.width - half_w))
        rows = ((self.y, half_h), (self.y + half_h, self.height - half_h))
        return [
            Block(x, y, w, h)
            for x, w in columns
            for y, h in rows
            if w > 0 and h > 0
        ]

    def cells(self):
        for row in range(self.y, self.y + self.height):
            for col in range(self.x, self.x + self.width):
                yield col, row


def partition(width: int, height: int, block_width: int = BLOCK_WIDTH, block_height: int = BLOCK_HEIGHT) -> list[Block]:
    """Cut a ``width`` x ``height`` canvas into a grid of clipped blocks."""

    if block_width <= 0 or block_height <= 0:
        raise ValueError(f"block size must be positive, got {block_width}x{block_height}")
    return [
        Block(x, y, min(block_width, width - x), min(block_height, height - y))
        for x in range(0, width, block_width)
        for y in range(0, height, block_height)
    ]


@dataclass(frozen=True)
class Leaf:
    """How a block that was not split any further got its values."""

    block: Block
    depth: int
    filled: bool
    value: Optional[int] = None


class _Join:
    """Counts outstanding children and calls ``on_done`` after the last one."""

    def __init__(self, pending: int, on_done: Callable[[], None]):
        self._pending = pending
        self._on_done = on_done
        self._lock = threading.Lock()

    def child_done(self) -> None:
        with self._lock:
            self._pending -= 1
            finished = self._pending == 0
        if finished:
            self._on_done()


@dataclass(frozen=True)
class _Task:
    block: Block
    depth: int
    label: str
    parent: _Join


class BlockScheduler:
    """Fill a :class:`Canvas` by recursive block subdivision."""

    def __init__(
        self,
        canvas: Canvas,
        *,
        block_width: int = BLOCK_WIDTH,
        block_height: int = BLOCK_HEIGHT,
        threshold: int = THRESHOLD,
        workers: int = 1,
    ):
        if threshold < 1:
            raise ValueError(f"threshold must be at least 1, got {threshold}")
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.canvas = canvas
        self.block_width = block_width
        self.block_height = block_height
        self.threshold = threshold
        self.workers = workers

        self.initial_blocks: list[Block] = []
        self.leaves: list[Leaf] = []
        self.max_depth = 0

        self._tasks: SimpleQueue = SimpleQueue()
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._failure: Optional[BaseException] = None

    def run(self) -> "BlockScheduler":
        self.initial_blocks = partition(self.canvas.width, self.canvas.height, self.block_width, self.block_height)
        logger.info(
            "Scheduling %d blocks of %dx%d on %d workers",
            len(self.initial_blocks),
            self.block_width,
            self.block_height,
            self.workers,
        )

        root = _Join(len(self.initial_blocks), self._done.set)
        for index, block in enumerate(self.initial_blocks, start=1):
            self._tasks.put(_Task(block, 0, str(index), root))

        threads = [
            threading.Thread(target=self._worker, name=f"block-worker-{n}", daemon=True)
            for n in range(1, self.workers + 1)
        ]
        for thread in threads:
            thread.start()

        self._done.wait()

        for _ in threads:
            self._tasks.put(None)
        for thread in threads:
            thread.join()

        if self._failure is not None:
            raise RenderError(f"block render failed: {self._failure}") from self._failure
        return self

    def _worker(self) -> None:
        while True:
            task = self._tasks.get()
            if task is None:
                return
            if self._done.is_set():
                # aborted, drop whatever is still queued
                continue
            try:
                self._process(task)
            except Exception as exc:
                logger.error("block %s failed: %s", task.label, exc)
                with self._lock:
                    if self._failure is None:
                        self._failure = exc
                self._done.set()

    def _process(self, task: _Task) -> None:
        block = task.block
        start = time.perf_counter()
        logger.info(
            "worker %s started  job - (%d, %d) - (%d, %d)",
            task.label, block.x, block.y, block.x + block.width, block.y + block.height,
        )

        uniform, value = self._check_block(block)
        if uniform:
            self.canvas.fill(block.x, block.y, block.width, block.height, value)
            self._record(Leaf(block, task.depth, True, value))
        elif block.width > self.threshold or block.height > self.threshold:
            self._divide(task, start)
            return
        else:
            for col, row in block.cells():
                self.canvas.compute(col, row)
            self._record(Leaf(block, task.depth, False))

        self._finish(task, start)

    def _check_block(self, block: Block) -> tuple[bool, int]:
        values = [self.canvas.read(col, row) for col, row in block.corners(self.canvas.width, self.canvas.height)]
        first = values[0]
        return all(value == first for value in values[1:]), first

    def _divide(self, task: _Task, start: float) -> None:
        children = task.block.split()
        logger.debug("worker %s splitting into %d blocks", task.label, len(children))
        join = _Join(len(children), lambda: self._finish(task, start))
        for index, child in enumerate(children):
            self._tasks.put(_Task(child, task.depth + 1, f"{task.label}-{index}", join))

    def _finish(self, task: _Task, start: float) -> None:
        block = task.block
        logger.info(
            "worker %s finished job - (%d, %d) - (%d, %d)",
            task.label, block.x, block.y, block.x + block.width, block.y + block.height,
        )
        logger.info("worker %s execution time was %.6fs", task.label, time.perf_counter() - start)
        task.parent.child_done()

    def _record(self, leaf: Leaf) -> None:
        with self._lock:
            self.leaves.append(leaf)
            if leaf.depth > self.max_depth:
                self.max_depth = leaf.depth


def fill_blocks(
    canvas: Canvas,
    workers: int,
    block_width: int = BLOCK_WIDTH,
    block_height: int = BLOCK_HEIGHT,
    threshold: int = THRESHOLD,
) -> BlockScheduler:
    scheduler = BlockScheduler(
        canvas,
        block_width=block_width,
        block_height=block_height,
        threshold=threshold,
        workers=workers,
    )
    return scheduler.run()
