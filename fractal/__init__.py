"""Public API for parallel escape-time fractal rendering."""

from .channel import ChannelClosed, ProgressChannel
from .config import (
    Bounds,
    ComplexWindow,
    FractalParameters,
    Point,
    RenderConfig,
    available_parallelism,
)
from .coordinator import Coordinator, Finished, RenderResult, Running, render, render_fractal
from .encoder import to_image, write_indexed_image
from .errors import (
    ColorDepthOverflow,
    EncodingFailure,
    FractalError,
    InvalidPartition,
    RenderCancelled,
    RenderFailure,
)
from .evaluator import Fractal, Mandelbrot, escape_time, pixel_to_complex
from .palette import colormap_palette, generate_color_palette, hsv_to_rgb
from .partition import ImageRegion, split_columns, split_image
from .progress import ProgressBar
from .worker import render_region

__all__ = [
    "Bounds",
    "ChannelClosed",
    "ColorDepthOverflow",
    "ComplexWindow",
    "Coordinator",
    "EncodingFailure",
    "Finished",
    "Fractal",
    "FractalError",
    "FractalParameters",
    "ImageRegion",
    "InvalidPartition",
    "Mandelbrot",
    "Point",
    "ProgressBar",
    "ProgressChannel",
    "RenderCancelled",
    "RenderConfig",
    "RenderFailure",
    "RenderResult",
    "Running",
    "available_parallelism",
    "colormap_palette",
    "escape_time",
    "generate_color_palette",
    "hsv_to_rgb",
    "pixel_to_complex",
    "render",
    "render_fractal",
    "render_region",
    "split_columns",
    "split_image",
    "to_image",
    "write_indexed_image",
]
