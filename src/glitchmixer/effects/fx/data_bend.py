"""Data Bend — simulate raw byte-stream corruption on pixel-aligned chunks."""

import logging

import numpy as np

from glitchmixer.buffer import PixelBuffer, align_down, random_aligned_offset
from glitchmixer.options import ChannelSelect, DataBendMode, DataBendOptions

logger = logging.getLogger(__name__)

EFFECT_ID = "fx.data_bend"
EFFECT_NAME = "Data Bend"
EFFECT_CATEGORY = "destruction"
OPTIONS_KEY = "data_bend"
OPTIONS = DataBendOptions

PARAMS: dict = {
    "amount": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.3,
        "label": "Amount",
        "curve": "exponential",
        "unit": "%",
        "description": "Number of bend passes (x200)",
    },
    "mode": {
        "type": "choice",
        "options": ["random", "duplicate", "reverse", "shift", "scramble"],
        "default": "random",
        "label": "Mode",
        "description": "Chunk operation, or a random one per pass",
    },
    "chunk_size": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.5,
        "label": "Chunk Size",
        "curve": "linear",
        "unit": "%",
        "description": "Upper bound of chunk length (x500 bytes)",
    },
    "channel": {
        "type": "choice",
        "options": ["all", "red", "green", "blue", "alpha"],
        "default": "all",
        "label": "Channel",
    },
}

MIN_CHUNK = 16
CHUNK_SCALE = 500
ITERATION_SCALE = 200


def _channels(select: ChannelSelect) -> list[int]:
    if select == ChannelSelect.ALL:
        return [0, 1, 2, 3]
    return [int(select)]


def apply(buffer: PixelBuffer, options: DataBendOptions, rng) -> None:
    """Duplicate, reverse, rotate or scramble random chunks. In place."""
    data = buffer.data
    length = data.size
    amount = max(0.0, min(1.0, options.amount))
    iterations = int(amount * ITERATION_SCALE)

    chunk_factor = 0.5 if options.chunk_size is None else options.chunk_size
    chunk_factor = max(0.0, min(1.0, chunk_factor))
    max_chunk = max(int(chunk_factor * CHUNK_SCALE), MIN_CHUNK + 1)
    channels = _channels(options.channel)

    skipped = 0
    for _ in range(iterations):
        chunk = align_down(rng.gen_range(MIN_CHUNK, max_chunk))
        pos = random_aligned_offset(rng, length - 2 * chunk)
        if pos is None:
            skipped += 1
            continue

        mode = options.mode
        if mode == DataBendMode.RANDOM:
            mode = DataBendMode(rng.gen_range(0, 4))

        region = data[pos : pos + chunk].reshape(-1, 4)
        snapshot = region.copy()

        if mode == DataBendMode.DUPLICATE:
            dest = pos + chunk
            if dest + chunk <= length:
                target = data[dest : dest + chunk].reshape(-1, 4)
                target[:, channels] = snapshot[:, channels]

        elif mode == DataBendMode.REVERSE:
            region[:, channels] = snapshot[::-1][:, channels]

        elif mode == DataBendMode.SHIFT:
            shift = align_down(rng.gen_range(4, chunk))
            rotated = np.roll(snapshot, -(shift // 4), axis=0)
            region[:, channels] = rotated[:, channels]

        else:  # scramble
            order = rng.permutation(region.shape[0])
            region[:, channels] = snapshot[order][:, channels]

    if skipped:
        logger.debug(
            "Data bend skipped %d/%d passes: buffer too small for chunk",
            skipped,
            iterations,
        )
