"""Run one worker per strip and aggregate their progress."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, Union

import numpy as np

from .channel import ProgressChannel
from .config import Bounds, RenderConfig
from .errors import InvalidPartition, RenderCancelled, RenderFailure
from .evaluator import Fractal, Mandelbrot
from .partition import ImageRegion, split_image
from .worker import render_region


@dataclass(frozen=True)
class Running:
    """The worker is still rendering; ``count`` pixels are done so far."""

    count: int


@dataclass(frozen=True)
class Finished:
    """The worker closed its channel after rendering ``count`` pixels."""

    count: int


WorkerStatus = Union[Running, Finished]


@dataclass(frozen=True)
class RenderResult:
    """A fully rendered colour-index raster."""

    pixels: np.ndarray
    total_pixels: int
    elapsed: float
    workers: int


class Coordinator:
    """Start a worker per region and poll every progress channel in rounds.

    Each round receives at most one value from every channel that is still
    open and then reports the sum of the latest count of every worker,
    finished or not. Only a closed channel marks a worker as finished; a
    receive that times out just means the worker had nothing new.

    Workers are threads, so the global interpreter lock limits the speedup
    gained from rendering more strips at once.
    """

    def __init__(
        self,
        regions: Sequence[ImageRegion],
        fractal: Fractal,
        *,
        poll_timeout: Optional[float] = None,
    ) -> None:
        if not regions:
            raise InvalidPartition("at least one region is required")
        self.regions = list(regions)
        self.fractal = fractal
        self.poll_timeout = poll_timeout
        self.channels = [ProgressChannel() for _ in self.regions]
        self.statuses: list[WorkerStatus] = [Running(0) for _ in self.regions]
        self._cancel = threading.Event()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: list[Future] = []

    @property
    def total_pixels(self) -> int:
        return sum(region.pixel_count for region in self.regions)

    @property
    def done(self) -> bool:
        return all(isinstance(status, Finished) for status in self.statuses)

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def aggregate(self) -> int:
        return sum(status.count for status in self.statuses)

    def start(self) -> "Coordinator":
        if self._executor is not None:
            raise RuntimeError("workers have already been started")
        self._executor = ThreadPoolExecutor(
            max_workers=len(self.regions),
            thread_name_prefix="fractal-worker",
        )
        self._futures = [
            self._executor.submit(render_region, region, self.fractal, channel, self._cancel)
            for region, channel in zip(self.regions, self.channels)
        ]
        return self

    def cancel(self) -> None:
        """Ask every worker to stop before its next pixel."""

        self._cancel.set()

    def poll(self) -> int:
        """Run one round over all channels and return the aggregate count."""

        for i, channel in enumerate(self.channels):
            status = self.statuses[i]
            if isinstance(status, Finished):
                continue
            value, is_open = channel.receive(self.poll_timeout)
            if not is_open:
                self.statuses[i] = Finished(status.count)
            elif value is not None:
                self.statuses[i] = Running(value)

        # A failed worker makes the image unusable, stop the others early.
        if any(future.done() and future.exception() is not None for future in self._futures):
            self.cancel()
        return self.aggregate()

    def progress(self) -> Iterator[int]:
        """Yield the aggregate count whenever it changes until all workers finish.

        Leaving the loop early does not stop the workers; a later call to
        :meth:`progress` or :meth:`wait` carries on draining the channels.
        """

        if self._executor is None:
            raise RuntimeError("start() must be called before polling progress")

        last = None
        while not self.done:
            current = self.poll()
            if current != last:
                last = current
                yield current

    def wait(self) -> int:
        """Block until every worker is finished and return the final aggregate.

        Raises :class:`RenderFailure` if a worker raised and
        :class:`RenderCancelled` if the render was cancelled before every
        pixel was computed.
        """

        for _ in self.progress():
            pass
        self._shutdown()

        for region, future in zip(self.regions, self._futures):
            exc = future.exception()
            if exc is not None:
                raise RenderFailure(f"worker for region {region.bounds} failed: {exc}") from exc

        total = self.aggregate()
        if total != self.total_pixels:
            if self.cancelled:
                raise RenderCancelled(f"render cancelled after {total} of {self.total_pixels} pixels")
            raise RenderFailure(f"only {total} of {self.total_pixels} pixels were rendered")
        return total

    def _abandon(self) -> None:
        # Nobody is draining the channels any more; release blocked workers.
        self.cancel()
        for channel in self.channels:
            channel.close()

    def _shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "Coordinator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.done:
            self._abandon()
        self._shutdown()


def render_fractal(
    fractal: Fractal,
    bounds: Bounds,
    parallelism: int,
    *,
    on_progress: Optional[Callable[[int], None]] = None,
    poll_timeout: Optional[float] = None,
) -> RenderResult:
    """Render ``fractal`` over ``bounds`` using ``parallelism`` vertical strips."""

    pixels = np.zeros((bounds.height, bounds.width), dtype=np.uint8)
    regions = split_image(pixels, parallelism, bounds)

    started = time.perf_counter()
    with Coordinator(regions, fractal, poll_timeout=poll_timeout) as coordinator:
        coordinator.start()
        for aggregate in coordinator.progress():
            if on_progress is not None:
                on_progress(aggregate)
        total = coordinator.wait()

    return RenderResult(
        pixels=pixels,
        total_pixels=total,
        elapsed=time.perf_counter() - started,
        workers=len(regions),
    )


def render(config: RenderConfig, *, on_progress: Optional[Callable[[int], None]] = None) -> RenderResult:
    """Validate ``config`` and render the Mandelbrot set it describes."""

    config.validate()
    bounds = config.image_bounds()
    fractal = Mandelbrot(config.window, bounds, config.fractal_parameters())
    return render_fractal(fractal, bounds, config.parallelism, on_progress=on_progress)
