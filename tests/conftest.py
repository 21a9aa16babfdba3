import threading

import pytest

from fractal import Bounds, ComplexWindow, FractalParameters, Mandelbrot, Point


class RecordingGrid:
    """Pixel storage that remembers which thread wrote each coordinate."""

    def __init__(self, width, height):
        self.shape = (height, width)
        self.writes = {}
        self._lock = threading.Lock()

    def __setitem__(self, key, value):
        row, col = key
        with self._lock:
            self.writes.setdefault(threading.get_ident(), []).append((col, row))


@pytest.fixture
def recording_grid():
    return RecordingGrid


@pytest.fixture
def small_mandelbrot():
    bounds = Bounds(0, 0, 100, 100)
    window = ComplexWindow(start=Point(-2.0, -1.5), end=Point(1.0, 1.5))
    return Mandelbrot(window, bounds, FractalParameters(bailout=2.0, max_iterations=50))
