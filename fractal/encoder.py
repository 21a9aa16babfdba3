"""Write colour-index rasters to image files with Pillow."""

from __future__ import annotations

from pathlib import Path
from typing import Union

import numpy as np
import PIL.Image

from .errors import EncodingFailure

# Formats that can store a palette image without conversion.
_PALETTE_FORMATS = {"PNG", "GIF", "BMP", "TIFF"}


def _pil_format_name(ext: str) -> str:
    upper = ext.upper().lstrip(".")
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def to_image(pixels: np.ndarray, palette: np.ndarray) -> PIL.Image.Image:
    """Build a palette-mode image from colour indices and RGB colours."""

    if pixels.ndim != 2:
        raise ValueError(f"expected a 2-D colour-index raster, got shape {pixels.shape}")
    indices = np.ascontiguousarray(pixels, dtype=np.uint8)
    height, width = indices.shape
    image = PIL.Image.frombytes("P", (width, height), indices.tobytes())
    colours = np.asarray(palette, dtype=np.uint8).reshape(-1, 3)
    image.putpalette(colours.flatten().tolist())
    return image


def write_indexed_image(
    pixels: np.ndarray,
    palette: np.ndarray,
    output_path: Union[str, Path],
    image_format: str = "png",
) -> Path:
    """Encode ``pixels`` with ``palette`` and save it to ``output_path``."""

    output_path = Path(output_path)
    pil_format = _pil_format_name(image_format)
    PIL.Image.init()
    if pil_format not in PIL.Image.SAVE:
        raise EncodingFailure(f"could not write {output_path}: unsupported format '{image_format}'")
    image = to_image(pixels, palette)
    if pil_format not in _PALETTE_FORMATS:
        image = image.convert("RGB")

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        image.save(str(output_path), format=pil_format)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodingFailure(f"could not write {output_path}: {exc}") from exc
    return output_path
