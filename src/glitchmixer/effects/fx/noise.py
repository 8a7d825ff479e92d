"""Noise effect — random saturating offsets on RGB, alpha untouched."""

import numpy as np

from glitchmixer.buffer import PixelBuffer
from glitchmixer.options import NoiseOptions

EFFECT_ID = "fx.noise"
EFFECT_NAME = "Noise"
EFFECT_CATEGORY = "texture"
OPTIONS_KEY = "noise"
OPTIONS = NoiseOptions

PARAMS: dict = {
    "amount": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.1,
        "label": "Amount",
        "curve": "exponential",
        "unit": "%",
        "description": "Maximum per-channel offset (x255)",
    }
}


def apply(buffer: PixelBuffer, options: NoiseOptions, rng) -> None:
    """Add or subtract a random magnitude in [0, amount*255) per RGB byte."""
    amount = max(0.0, min(1.0, options.amount))
    ceiling = int(amount * 255.0)
    pixels = buffer.pixels

    if ceiling == 0 or pixels.shape[0] == 0:
        return

    shape = (pixels.shape[0], 3)
    magnitude = rng.gen_range(0, ceiling, size=shape).astype(np.int16)
    add = rng.gen_bool(0.5, size=shape)

    rgb = pixels[:, :3].astype(np.int16) + np.where(add, magnitude, -magnitude)
    pixels[:, :3] = np.clip(rgb, 0, 255).astype(np.uint8)
