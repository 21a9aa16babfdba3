"""Render one image strip and report progress as it goes."""

from __future__ import annotations

import threading
from typing import Optional

from .channel import ChannelClosed, ProgressChannel
from .evaluator import Fractal
from .partition import ImageRegion


def render_region(
    region: ImageRegion,
    fractal: Fractal,
    channel: ProgressChannel,
    cancel: Optional[threading.Event] = None,
) -> int:
    """Colour every pixel of ``region`` and return how many were rendered.

    The cumulative count is sent on ``channel`` after each pixel. The channel
    is closed when the strip is finished, when ``cancel`` is set, or when
    the fractal raises.
    """

    rendered = 0
    bounds = region.bounds
    try:
        for x in range(bounds.x0, bounds.x1):
            for y in range(bounds.y0, bounds.y1):
                if cancel is not None and cancel.is_set():
                    return rendered
                region.set_color_index(x, y, fractal.at(x, y))
                rendered += 1
                channel.send(rendered)
    except ChannelClosed:
        # The coordinator stopped listening.
        return rendered
    finally:
        channel.close()
    return rendered
