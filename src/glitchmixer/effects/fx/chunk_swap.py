"""Chunk Swap — exchange random pixel-aligned byte ranges."""

from glitchmixer.buffer import PixelBuffer, align_down, random_aligned_offset, swap_ranges
from glitchmixer.options import ChunkSwapOptions

EFFECT_ID = "fx.chunk_swap"
EFFECT_NAME = "Chunk Swap"
EFFECT_CATEGORY = "destruction"
OPTIONS_KEY = "chunk_swap"
OPTIONS = ChunkSwapOptions

PARAMS: dict = {
    "amount": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.3,
        "label": "Amount",
        "curve": "linear",
        "unit": "%",
        "description": "Number of swaps (x10)",
    },
    "chunk_size": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.5,
        "label": "Chunk Size",
        "curve": "linear",
        "unit": "%",
        "description": "Chunk length relative to 5% of the pixel count",
    },
    "preserve_alpha": {
        "type": "bool",
        "default": False,
        "label": "Preserve Alpha",
    },
}

MIN_CHUNK = 16
MAX_SWAPS = 10


def chunk_length(buffer: PixelBuffer, chunk_size: float | None) -> int:
    """Swap length in bytes: a share of 5% of the pixel count, clamped to [16, L/8]."""
    base = buffer.width * buffer.height // 20
    factor = 0.5 if chunk_size is None else max(0.0, min(1.0, chunk_size))
    size = int(base * factor)
    size = min(max(size, MIN_CHUNK), len(buffer) // 8)
    return align_down(size)


def apply(buffer: PixelBuffer, options: ChunkSwapOptions, rng) -> None:
    """Swap int(amount*10) pairs of chunks. In place."""
    amount = max(0.0, min(1.0, options.amount))
    swaps = int(amount * MAX_SWAPS)
    size = chunk_length(buffer, options.chunk_size)
    if size < 4:
        return

    window = len(buffer) - 2 * size
    for _ in range(swaps):
        first = random_aligned_offset(rng, window)
        if first is None:
            continue
        second = random_aligned_offset(rng, window)
        swap_ranges(
            buffer.data, first, second, size, preserve_alpha=options.preserve_alpha
        )
