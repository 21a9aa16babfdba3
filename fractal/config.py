"""Parameters describing a single render of an escape-time fractal."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import ColorDepthOverflow, InvalidPartition

# Colour indices representable by single-byte indexed storage.
INDEXED_COLOR_DEPTH = 256


def available_parallelism() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class Point:
    """A point in the complex plane."""

    x: float
    y: float

    def to_complex(self) -> complex:
        return complex(self.x, self.y)


@dataclass(frozen=True)
class ComplexWindow:
    """The corners of the complex-plane region mapped onto the image."""

    start: Point
    end: Point


@dataclass(frozen=True)
class FractalParameters:
    """Escape-time parameters shared read-only by every worker."""

    bailout: float
    max_iterations: int

    def __post_init__(self) -> None:
        if not self.bailout > 0:
            raise ValueError(f"bailout must be positive, got {self.bailout}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")


@dataclass(frozen=True)
class Bounds:
    """Half-open pixel rectangle ``[x0, x1) x [y0, y1)``."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @property
    def area(self) -> int:
        return max(self.width, 0) * max(self.height, 0)

    def contains(self, x: int, y: int) -> bool:
        return self.x0 <= x < self.x1 and self.y0 <= y < self.y1


DEFAULT_WINDOW = ComplexWindow(
    start=Point(0.276185, 0.479000198),
    end=Point(0.367588933, 0.519762846),
)


@dataclass(frozen=True)
class RenderConfig:
    """Every recognised option of a render, with the reference defaults."""

    width: int = 8096
    height: int = int(8096 * 0.4459)
    window: ComplexWindow = DEFAULT_WINDOW
    bailout: float = 2.0
    max_iterations: int = INDEXED_COLOR_DEPTH - 1
    parallelism: int = field(default_factory=available_parallelism)
    color_depth: int = INDEXED_COLOR_DEPTH
    saturation: float = 0.8
    value: float = 1.0
    colormap: Optional[str] = None
    output: Path = Path("image.png")
    image_format: str = "png"

    def validate(self) -> None:
        """Reject configurations that would fail once workers are running."""

        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"image size must be positive, got {self.width}x{self.height}")
        if not self.bailout > 0:
            raise ValueError(f"bailout must be positive, got {self.bailout}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")
        if self.color_depth > INDEXED_COLOR_DEPTH:
            raise ColorDepthOverflow(
                f"color depth {self.color_depth} exceeds the {INDEXED_COLOR_DEPTH} indices of 8-bit storage"
            )
        if self.max_iterations + 1 > self.color_depth:
            raise ColorDepthOverflow(
                f"max_iterations={self.max_iterations} needs {self.max_iterations + 1} colours, "
                f"but only {self.color_depth} are available"
            )
        if self.parallelism <= 0 or self.parallelism > self.width:
            raise InvalidPartition(
                f"cannot split an image {self.width} pixels wide into {self.parallelism} strips"
            )

    def fractal_parameters(self) -> FractalParameters:
        return FractalParameters(bailout=self.bailout, max_iterations=self.max_iterations)

    def image_bounds(self) -> Bounds:
        return Bounds(0, 0, self.width, self.height)

    def total_pixels(self) -> int:
        return self.width * self.height
