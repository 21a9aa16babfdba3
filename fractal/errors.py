"""Exceptions raised while configuring, rendering and encoding fractals."""


class FractalError(Exception):
    """Base class for every error raised by the :mod:`fractal` package."""


class InvalidPartition(FractalError, ValueError):
    """The image cannot be split into the requested number of strips."""


class ColorDepthOverflow(FractalError, ValueError):
    """More colour indices are needed than the output format can store."""


class EncodingFailure(FractalError, OSError):
    """The rendered image could not be written to its destination."""


class RenderFailure(FractalError, RuntimeError):
    """A worker failed, so the render did not produce a complete image."""


class RenderCancelled(RenderFailure):
    """The render was cancelled before every pixel was computed."""
