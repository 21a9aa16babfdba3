import threading
import time

import numpy as np
import pytest

from fractal import (
    Bounds,
    ColorDepthOverflow,
    ComplexWindow,
    Coordinator,
    Finished,
    InvalidPartition,
    Point,
    RenderCancelled,
    RenderConfig,
    RenderFailure,
    Running,
    render,
    render_fractal,
    split_image,
)


class ConstantFractal:
    def at(self, x, y):
        return 1


class SlowFractal:
    def at(self, x, y):
        time.sleep(0.001)
        return 1


class GatedFractal:
    def __init__(self, release):
        self.release = release

    def at(self, x, y):
        self.release.wait()
        return 1


class FailOnColumn:
    def __init__(self, column):
        self.column = column

    def at(self, x, y):
        if x == self.column:
            raise ZeroDivisionError("bad column")
        return 1


def test_end_to_end_render(small_mandelbrot):
    reports = []
    result = render_fractal(small_mandelbrot, small_mandelbrot.bounds, 4, on_progress=reports.append)

    assert result.total_pixels == 10000
    assert result.workers == 4
    assert result.pixels.shape == (100, 100)
    assert result.pixels.dtype == np.uint8
    assert result.pixels.max() == 50
    assert result.pixels.min() < 50
    assert reports[-1] == 10000


def test_aggregate_progress_is_monotonic_and_reports_total_once(small_mandelbrot):
    reports = []
    render_fractal(small_mandelbrot, small_mandelbrot.bounds, 3, on_progress=reports.append)

    assert all(a < b for a, b in zip(reports, reports[1:]))
    assert reports.count(10000) == 1


def test_parallel_render_matches_single_strip(small_mandelbrot):
    single = render_fractal(small_mandelbrot, small_mandelbrot.bounds, 1)
    parallel = render_fractal(small_mandelbrot, small_mandelbrot.bounds, 7)

    np.testing.assert_array_equal(single.pixels, parallel.pixels)


def test_workers_write_disjoint_pixels(recording_grid):
    grid = recording_grid(40, 10)
    regions = split_image(grid, 4)

    with Coordinator(regions, ConstantFractal()) as coordinator:
        coordinator.start()
        assert coordinator.wait() == 400

    per_thread = [set(coords) for coords in grid.writes.values()]
    assert len(per_thread) == 4
    for i, first in enumerate(per_thread):
        for second in per_thread[i + 1:]:
            assert first.isdisjoint(second)
    written = [coord for coords in grid.writes.values() for coord in coords]
    assert len(written) == 400
    assert set(written) == {(x, y) for x in range(40) for y in range(10)}


def test_statuses_are_finished_with_region_counts():
    pixels = np.zeros((5, 10), dtype=np.uint8)
    regions = split_image(pixels, 3)

    with Coordinator(regions, ConstantFractal()) as coordinator:
        coordinator.start()
        coordinator.wait()

    assert coordinator.statuses == [Finished(15), Finished(15), Finished(20)]


def test_poll_timeout_reports_running_workers():
    pixels = np.zeros((4, 8), dtype=np.uint8)
    reports = []
    bounds = Bounds(0, 0, 8, 4)

    result = render_fractal(SlowFractal(), bounds, 2, on_progress=reports.append, poll_timeout=0.0005)

    assert result.total_pixels == pixels.size
    assert reports[-1] == pixels.size
    assert all(a < b for a, b in zip(reports, reports[1:]))


def test_failing_worker_fails_the_render():
    with pytest.raises(RenderFailure) as excinfo:
        render_fractal(FailOnColumn(5), Bounds(0, 0, 20, 20), 4)

    assert isinstance(excinfo.value.__cause__, ZeroDivisionError)
    assert not isinstance(excinfo.value, RenderCancelled)


def test_cancel_stops_the_render():
    pixels = np.zeros((50, 50), dtype=np.uint8)
    regions = split_image(pixels, 2)

    with Coordinator(regions, ConstantFractal()) as coordinator:
        coordinator.start()
        progress = coordinator.progress()
        next(progress)
        assert not coordinator.cancelled
        coordinator.cancel()
        with pytest.raises(RenderCancelled):
            coordinator.wait()

    assert coordinator.done
    assert coordinator.aggregate() < pixels.size


def test_breaking_out_of_progress_keeps_rendering():
    pixels = np.zeros((50, 50), dtype=np.uint8)
    regions = split_image(pixels, 2)

    with Coordinator(regions, ConstantFractal()) as coordinator:
        coordinator.start()
        for aggregate in coordinator.progress():
            if aggregate >= 10:
                break
        assert coordinator.wait() == pixels.size

    assert not coordinator.cancelled
    assert (pixels == 1).all()


def test_leaving_the_context_early_releases_workers():
    pixels = np.zeros((50, 50), dtype=np.uint8)
    regions = split_image(pixels, 2)

    with Coordinator(regions, ConstantFractal()) as coordinator:
        coordinator.start()
        next(coordinator.progress())

    assert coordinator.cancelled
    assert coordinator.aggregate() < pixels.size


def test_timed_out_receive_leaves_worker_running():
    release = threading.Event()
    pixels = np.zeros((2, 4), dtype=np.uint8)
    regions = split_image(pixels, 2)

    with Coordinator(regions, GatedFractal(release), poll_timeout=0.01) as coordinator:
        coordinator.start()
        assert coordinator.poll() == 0
        assert coordinator.statuses == [Running(0), Running(0)]
        assert not coordinator.done

        release.set()
        assert coordinator.wait() == pixels.size

    assert coordinator.statuses == [Finished(4), Finished(4)]


def test_progress_requires_start():
    pixels = np.zeros((2, 2), dtype=np.uint8)
    coordinator = Coordinator(split_image(pixels, 1), ConstantFractal())

    with pytest.raises(RuntimeError):
        next(coordinator.progress())


def test_coordinator_needs_regions():
    with pytest.raises(InvalidPartition):
        Coordinator([], ConstantFractal())


def test_render_from_config():
    config = RenderConfig(
        width=30,
        height=20,
        window=ComplexWindow(start=Point(-2.0, -1.0), end=Point(1.0, 1.0)),
        max_iterations=30,
        parallelism=3,
    )

    result = render(config)

    assert result.total_pixels == 600
    assert result.pixels.max() <= 30


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"max_iterations": 256}, ColorDepthOverflow),
        ({"max_iterations": 20, "color_depth": 16}, ColorDepthOverflow),
        ({"parallelism": 0}, InvalidPartition),
        ({"parallelism": 11}, InvalidPartition),
    ],
)
def test_render_validates_before_starting_workers(overrides, error):
    config = RenderConfig(width=10, height=10, **{"max_iterations": 10, "parallelism": 2, **overrides})
    before = threading.active_count()

    with pytest.raises(error):
        render(config)

    assert threading.active_count() == before
