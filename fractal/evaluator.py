"""Escape-time evaluation of individual pixels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .config import Bounds, ComplexWindow, FractalParameters


@runtime_checkable
class Fractal(Protocol):
    """Anything that can colour a single pixel of the image."""

    def at(self, x: int, y: int) -> int:
        """Return the colour index of pixel ``(x, y)``."""


def pixel_to_complex(bounds: Bounds, window: ComplexWindow, x: int, y: int) -> complex:
    """Map pixel ``(x, y)`` of ``bounds`` linearly onto ``window``.

    Only coordinates inside ``bounds`` give meaningful values.
    """

    fx = (x - bounds.x0) / bounds.width
    fy = (y - bounds.y0) / bounds.height
    re = window.start.x + fx * (window.end.x - window.start.x)
    im = window.start.y + fy * (window.end.y - window.start.y)
    return complex(re, im)


def escape_time(c: complex, params: FractalParameters) -> int:
    """Count the iterations of ``z = z*z + c`` that stay inside the bailout radius.

    The magnitude is compared squared; the count is 0 if the first step
    already escapes and ``params.max_iterations`` if the orbit never does.
    """

    bailout_sq = params.bailout * params.bailout
    z = 0j
    iterations = 0
    while iterations < params.max_iterations:
        z = z * z + c
        if z.real * z.real + z.imag * z.imag >= bailout_sq:
            break
        iterations += 1
    return iterations


@dataclass(frozen=True)
class Mandelbrot:
    """The Mandelbrot set sampled over ``window`` at the resolution of ``bounds``."""

    window: ComplexWindow
    bounds: Bounds
    params: FractalParameters

    def at(self, x: int, y: int) -> int:
        return escape_time(pixel_to_complex(self.bounds, self.window, x, y), self.params)
