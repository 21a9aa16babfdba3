"""Colour palettes for indexed fractal images."""

from __future__ import annotations

import numpy as np
from matplotlib import colormaps as _mpl_colormaps
from matplotlib.colors import hsv_to_rgb as _mpl_hsv_to_rgb


def hsv_to_rgb(h: float, s: float, v: float) -> tuple[int, int, int]:
    """Convert a hue in degrees plus saturation and value to 8-bit RGB."""

    rgb = _mpl_hsv_to_rgb(np.array([(h / 360.0) % 1.0, s, v], dtype=np.float64))
    return tuple(int(channel) for channel in np.uint8(255 * rgb))


def generate_color_palette(levels: int, saturation: float = 0.8, value: float = 1.0) -> np.ndarray:
    """Return ``levels`` colours spread evenly around the hue circle."""

    if levels <= 0:
        raise ValueError(f"palette needs at least one colour, got {levels}")
    hues = np.arange(levels, dtype=np.float64) / np.float64(levels)
    hsv = np.stack(
        (hues, np.full(levels, saturation, dtype=np.float64), np.full(levels, value, dtype=np.float64)),
        axis=-1,
    )
    return np.uint8(255 * _mpl_hsv_to_rgb(hsv))


def colormap_palette(name: str, levels: int) -> np.ndarray:
    """Sample ``levels`` colours from the matplotlib colormap ``name``."""

    if levels <= 0:
        raise ValueError(f"palette needs at least one colour, got {levels}")
    try:
        cmap = _mpl_colormaps[name]
    except KeyError as exc:
        raise ValueError(f"unknown colormap '{name}'") from exc
    positions = np.linspace(0.0, 1.0, levels, dtype=np.float64)
    rgba = np.array(cmap(positions), copy=True)
    return np.uint8(np.clip(rgba[:, :3] * 255, 0, 255))
