"""Rendering primitives for escape-time frames."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import partial
from typing import Optional

import numpy as np
import PIL.Image

from .blocks import BLOCK_HEIGHT, BLOCK_WIDTH, THRESHOLD, BlockScheduler, Leaf, fill_blocks
from .canvas import Canvas
from .schedulers import fill_per_pixel, fill_per_row, fill_sequential
from .viewport import DEFAULT_RECT, Viewport, parse_rect, pixel_to_complex

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000
E = 2.71828
HORIZON = 4
ESCAPE_SENTINEL = 255
GRAY_SCALE = 15

MODES = ("seq", "px", "row", "workers")


def escape_time(c: complex, max_iterations: int = MAX_ITERATIONS) -> int:
    """Return the step before ``z`` leaves the radius-2 disc, or the sentinel."""

    z = complex(0)
    for i in range(max_iterations):
        if z.real * z.real + z.imag * z.imag > HORIZON:
            return i - 1
        z = z * z + c * E ** (-z)
    return ESCAPE_SENTINEL


def gray_level(value: int) -> int:
    return 255 - min(255, value * GRAY_SCALE)


def to_rgba(values: np.ndarray) -> np.ndarray:
    """Map a grid of escape-time values to opaque grayscale RGBA."""

    scaled = np.minimum(values.astype(np.int64) * GRAY_SCALE, 255)
    gray = np.uint8(255 - scaled)
    rgba = np.empty(values.shape + (4,), dtype=np.uint8)
    rgba[..., 0] = gray
    rgba[..., 1] = gray
    rgba[..., 2] = gray
    rgba[..., 3] = 255
    return rgba


@dataclass(frozen=True)
class RenderParameters:
    """Everything a single render needs. Immutable once rendering starts."""

    width: int
    height: int
    viewport: Viewport = field(default_factory=lambda: parse_rect(DEFAULT_RECT))
    mode: str = "seq"
    tasks: int = 2
    max_iterations: int = MAX_ITERATIONS
    block_width: int = BLOCK_WIDTH
    block_height: int = BLOCK_HEIGHT
    threshold: int = THRESHOLD
    quiet: bool = False

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"canvas size must be positive, got {self.width}x{self.height}")
        if self.mode not in MODES:
            raise ValueError(f"unknown mode '{self.mode}'. Valid choices: {', '.join(MODES)}.")
        if self.tasks < 1:
            raise ValueError(f"tasks must be at least 1, got {self.tasks}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")
        if self.block_width < 1 or self.block_height < 1:
            raise ValueError(f"block size must be positive, got {self.block_width}x{self.block_height}")
        if self.threshold < 1:
            raise ValueError(f"threshold must be at least 1, got {self.threshold}")


@dataclass(frozen=True)
class RenderResult:
    """Container for the numerical results of a render."""

    values: np.ndarray
    rgba: np.ndarray
    mode: str
    elapsed: float
    leaves: Optional[tuple[Leaf, ...]] = None
    initial_blocks: int = 0

    def to_image(self) -> PIL.Image.Image:
        return PIL.Image.fromarray(self.rgba)


def pixel_value(params: RenderParameters, col: int, row: int) -> int:
    c = pixel_to_complex(params.viewport, params.width, params.height, col, row)
    return escape_time(c, params.max_iterations)


def create_canvas(params: RenderParameters) -> Canvas:
    return Canvas(params.width, params.height, partial(pixel_value, params))


@contextmanager
def _quiet_logging(enabled: bool):
    package_logger = logging.getLogger(__name__.rpartition(".")[0])
    previous = package_logger.level
    if enabled:
        package_logger.setLevel(logging.WARNING)
    try:
        yield
    finally:
        package_logger.setLevel(previous)


def render_frame(params: RenderParameters) -> RenderResult:
    """Render a frame with the scheduler selected by ``params.mode``."""

    canvas = create_canvas(params)
    scheduler: Optional[BlockScheduler] = None
    start = time.perf_counter()

    with _quiet_logging(params.quiet):
        logger.info(
            "Rendering %dx%d in mode %s with %d tasks", params.width, params.height, params.mode, params.tasks
        )
        if params.mode == "seq":
            fill_sequential(canvas)
        elif params.mode == "px":
            fill_per_pixel(canvas, params.tasks)
        elif params.mode == "row":
            fill_per_row(canvas, params.tasks)
        elif params.mode == "workers":
            scheduler = fill_blocks(
                canvas,
                params.tasks,
                block_width=params.block_width,
                block_height=params.block_height,
                threshold=params.threshold,
            )
        else:
            raise ValueError(f"unknown mode '{params.mode}'")

    elapsed = time.perf_counter() - start
    values = canvas.values
    return RenderResult(
        values=values,
        rgba=to_rgba(values),
        mode=params.mode,
        elapsed=elapsed,
        leaves=tuple(scheduler.leaves) if scheduler is not None else None,
        initial_blocks=len(scheduler.initial_blocks) if scheduler is not None else 0,
    )
