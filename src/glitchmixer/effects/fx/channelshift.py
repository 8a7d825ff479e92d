"""Channel Shift effect — rotates whole color channels through the pixel stream."""

import numpy as np

from glitchmixer.buffer import PixelBuffer
from glitchmixer.options import ChannelShiftOptions, Direction

EFFECT_ID = "fx.channel_shift"
EFFECT_NAME = "Channel Shift"
EFFECT_CATEGORY = "glitch"
OPTIONS_KEY = "channel_shift"
OPTIONS = ChannelShiftOptions

PARAMS: dict = {
    "amount": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.3,
        "label": "Amount",
        "curve": "linear",
        "unit": "%",
        "description": "Shift distance (x30 pixels)",
    },
    "channels": {
        "type": "channels",
        "default": [0, 1, 2],
        "label": "Channels",
    },
    "direction": {
        "type": "choice",
        "options": ["random", "left", "right"],
        "default": "random",
        "label": "Direction",
    },
}

MAX_SHIFT = 30
DEFAULT_CHANNELS = (0, 1, 2)


def resolve_direction(direction: Direction, rng) -> int:
    if direction == Direction.RANDOM:
        return 1 if rng.gen_bool(0.5) else -1
    return int(direction)


def apply(buffer: PixelBuffer, options: ChannelShiftOptions, rng) -> None:
    """Output pixel i takes the channel value of input pixel (i + shift) mod N.

    Alpha (channel 3) is never shifted. Direction is resolved once per call.
    """
    amount = max(0.0, min(1.0, options.amount))
    channels = DEFAULT_CHANNELS if options.channels is None else options.channels
    shift = int(amount * MAX_SHIFT) * resolve_direction(options.direction, rng)

    pixels = buffer.pixels
    if shift == 0 or pixels.shape[0] == 0:
        return

    for channel in channels:
        if not 0 <= channel < 3:
            continue
        # np.roll by -shift: out[i] = in[(i + shift) mod N]
        pixels[:, channel] = np.roll(pixels[:, channel], -shift)
