"""Mapping between canvas pixels and the complex plane."""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_RECT = "-2.0:2.0:-1.0:1.0"
DEFAULT_SIZE = "640x480"


@dataclass(frozen=True)
class Viewport:
    """Region of the complex plane that is mapped onto the canvas."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @classmethod
    def parse(cls, text: str) -> "Viewport":
        return parse_rect(text)

    @property
    def x_span(self) -> float:
        return abs(self.x_max) + abs(self.x_min)

    @property
    def y_span(self) -> float:
        return abs(self.y_max) + abs(self.y_min)


def parse_rect(text: str) -> Viewport:
    """Parse ``xMin:xMax:yMin:yMax`` into a :class:`Viewport`."""

    parts = text.split(":")
    if len(parts) != 4:
        raise ValueError(f"rect must have four colon-separated values, got '{text}'")
    bounds = []
    for part in parts:
        try:
            value = float(part)
        except ValueError as exc:
            raise ValueError(f"rect value '{part}' is not a number") from exc
        if not math.isfinite(value):
            raise ValueError(f"rect value '{part}' is not finite")
        bounds.append(value)
    return Viewport(*bounds)


def parse_size(text: str) -> tuple[int, int]:
    """Parse ``WxH`` into a ``(width, height)`` pair of positive integers."""

    parts = text.lower().split("x")
    if len(parts) != 2:
        raise ValueError(f"size must look like WIDTHxHEIGHT, got '{text}'")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise ValueError(f"size '{text}' does not contain integers") from exc
    if width <= 0 or height <= 0:
        raise ValueError(f"size '{text}' must be positive in both dimensions")
    return width, height


def pixel_to_complex(viewport: Viewport, width: int, height: int, col: int, row: int) -> complex:
    # The span is |max| + |min|, not max - min. Rendered images depend on it.
    x = col / width * (abs(viewport.x_max) + abs(viewport.x_min)) + viewport.x_min
    y = row / height * (abs(viewport.y_max) + abs(viewport.y_min)) + viewport.y_min
    return complex(x, y)
