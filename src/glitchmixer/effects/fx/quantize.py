"""Quantize effect — reduce color levels per channel."""

import numpy as np

from glitchmixer.buffer import PixelBuffer
from glitchmixer.options import QuantizeOptions

EFFECT_ID = "fx.quantize"
EFFECT_NAME = "Quantize"
EFFECT_CATEGORY = "enhance"
OPTIONS_KEY = "quantize"
OPTIONS = QuantizeOptions

PARAMS: dict = {
    "levels": {
        "type": "int",
        "min": 2,
        "max": 256,
        "default": 8,
        "label": "Color Levels",
        "curve": "linear",
        "unit": "",
        "description": "Number of distinct color levels per channel",
    }
}


def apply(buffer: PixelBuffer, options: QuantizeOptions, rng=None) -> None:
    """Snap RGB to the nearest of `levels` evenly spaced values. Stateless."""
    levels = options.levels
    if levels <= 1:
        return

    step = 255.0 / (levels - 1)
    pixels = buffer.pixels
    rgb = pixels[:, :3].astype(np.float64)
    # Half rounds up, as for non-negative values with round-half-away-from-zero
    snapped = np.floor(rgb / step + 0.5) * step
    pixels[:, :3] = np.minimum(np.floor(snapped + 0.5), 255).astype(np.uint8)
