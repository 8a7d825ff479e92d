"""Invert effect — inverts selected channels."""

from glitchmixer.buffer import PixelBuffer
from glitchmixer.options import InvertOptions

EFFECT_ID = "fx.invert"
EFFECT_NAME = "Invert"
EFFECT_CATEGORY = "fx"
OPTIONS_KEY = "invert"
OPTIONS = InvertOptions

PARAMS: dict = {
    "channels": {
        "type": "channels",
        "default": [0, 1, 2],
        "label": "Channels",
        "description": "Channel indices to invert (0=R, 1=G, 2=B, 3=A)",
    }
}


def apply(buffer: PixelBuffer, options: InvertOptions, rng=None) -> None:
    """255 - value for each listed channel. Stateless."""
    pixels = buffer.pixels
    for channel in options.channels:
        if 0 <= channel < 4:
            pixels[:, channel] = 255 - pixels[:, channel]
