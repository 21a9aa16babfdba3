"""Split an image into vertical strips that can be rendered independently."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .config import Bounds
from .errors import InvalidPartition


@dataclass(frozen=True)
class ImageRegion:
    """A strip of the image together with the storage it renders into.

    ``pixels`` is shared by every region of the image and indexed
    ``[row, col]`` relative to ``image``. A region only ever writes the
    coordinates inside ``bounds``; regions of one image never overlap, so no
    locking is needed.
    """

    bounds: Bounds
    image: Bounds
    pixels: Any

    @property
    def pixel_count(self) -> int:
        return self.bounds.area

    def set_color_index(self, x: int, y: int, index: int) -> None:
        if not self.bounds.contains(x, y):
            raise IndexError(f"pixel ({x}, {y}) lies outside region {self.bounds}")
        self.pixels[y - self.image.y0, x - self.image.x0] = index


def split_columns(width: int, n: int) -> list[tuple[int, int]]:
    """Return ``n`` column ranges tiling ``[0, width)``.

    Every range is ``width // n`` columns wide except the last one, which
    also takes the remainder.
    """

    if n <= 0:
        raise InvalidPartition(f"strip count must be positive, got {n}")
    if width < n:
        raise InvalidPartition(f"cannot split {width} columns into {n} strips")

    step = width // n
    ranges = [(i * step, (i + 1) * step) for i in range(n)]
    last_start, _ = ranges[-1]
    ranges[-1] = (last_start, width)
    return ranges


def split_image(pixels: Any, n: int, bounds: Optional[Bounds] = None) -> list[ImageRegion]:
    """Split ``pixels`` into ``n`` full-height vertical strips."""

    if bounds is None:
        height, width = pixels.shape[:2]
        bounds = Bounds(0, 0, int(width), int(height))

    return [
        ImageRegion(
            bounds=Bounds(bounds.x0 + start, bounds.y0, bounds.x0 + stop, bounds.y1),
            image=bounds,
            pixels=pixels,
        )
        for start, stop in split_columns(bounds.width, n)
    ]
