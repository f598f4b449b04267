"""Public API for block-scheduled escape-time rendering."""

from .blocks import Block, BlockScheduler, Leaf, fill_blocks, partition
from .canvas import Canvas
from .renderer import (
    MODES,
    RenderParameters,
    RenderResult,
    escape_time,
    gray_level,
    pixel_value,
    render_frame,
    to_rgba,
)
from .schedulers import RenderError, fill_per_pixel, fill_per_row, fill_sequential
from .viewport import Viewport, parse_rect, parse_size, pixel_to_complex

__all__ = [
    "Block",
    "BlockScheduler",
    "Canvas",
    "Leaf",
    "MODES",
    "RenderError",
    "RenderParameters",
    "RenderResult",
    "Viewport",
    "escape_time",
    "fill_blocks",
    "fill_per_pixel",
    "fill_per_row",
    "fill_sequential",
    "gray_level",
    "parse_rect",
    "parse_size",
    "partition",
    "pixel_to_complex",
    "pixel_value",
    "render_frame",
    "to_rgba",
]
