"""Byte Corrupt — overwrite, bit-flip, zero or max out raw buffer bytes."""

import logging

import numpy as np

from glitchmixer.buffer import PixelBuffer
from glitchmixer.options import ByteCorruptOptions, CorruptMode

logger = logging.getLogger(__name__)

EFFECT_ID = "fx.byte_corrupt"
EFFECT_NAME = "Byte Corrupt"
EFFECT_CATEGORY = "destruction"
OPTIONS_KEY = "byte_corrupt"
OPTIONS = ByteCorruptOptions

PARAMS: dict = {
    "amount": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.2,
        "label": "Amount",
        "curve": "linear",
        "unit": "%",
        "description": "Share of bytes to corrupt (capped at 5% of the buffer)",
    },
    "mode": {
        "type": "choice",
        "options": ["random", "random_byte", "bit_flip", "zero", "max"],
        "default": "random",
        "label": "Mode",
    },
    "block_size": {
        "type": "int",
        "min": 1,
        "max": 64,
        "default": 1,
        "label": "Block Size",
        "curve": "linear",
        "unit": "bytes",
    },
    "structured": {
        "type": "bool",
        "default": False,
        "label": "Structured",
        "description": "Evenly spaced corruption instead of random positions",
    },
}

# Hard cap so the image is never completely destroyed
MAX_INTENSITY = 0.05
ACCEPT_PROBABILITY = 0.7
# Upper bound on block indices materialized at once
MAX_BATCH_BYTES = 1 << 20


def _block_indices(positions: np.ndarray, block: int, length: int) -> np.ndarray:
    """Byte indices of each block starting at positions, truncated at the buffer end."""
    idx = (positions[:, None] + np.arange(block)).ravel()
    return idx[idx < length]


def _corrupt(data: np.ndarray, idx: np.ndarray, mode: CorruptMode, rng) -> None:
    if idx.size == 0:
        return
    if mode == CorruptMode.RANDOM_BYTE:
        data[idx] = rng.gen_bytes(idx.size)
    elif mode == CorruptMode.BIT_FLIP:
        bits = np.left_shift(1, rng.gen_range(0, 8, size=idx.size)).astype(np.uint8)
        # ufunc.at applies repeated indices one after another
        np.bitwise_xor.at(data, idx, bits)
    elif mode == CorruptMode.ZERO:
        data[idx] = 0
    else:
        data[idx] = 255


def _corrupt_blocks(
    data: np.ndarray, positions: np.ndarray, block: int, mode: CorruptMode, rng
) -> None:
    """Corrupt block-sized runs at positions, in batches of bounded size."""
    length = data.size
    batch = max(1, MAX_BATCH_BYTES // block)
    for start in range(0, positions.size, batch):
        _corrupt(data, _block_indices(positions[start:start + batch], block, length), mode, rng)


def apply(buffer: PixelBuffer, options: ByteCorruptOptions, rng) -> None:
    """Corrupt roughly amount*10% of the buffer (max 5%). In place."""
    data = buffer.data
    length = data.size
    intensity = min(options.amount * 0.1, MAX_INTENSITY)
    count = int(length * intensity)
    block = min(max(1, options.block_size or 1), length)

    if count <= 0:
        return

    if options.structured:
        stride = max(1, int(length / count))
        mode = options.mode
        if mode == CorruptMode.RANDOM:
            mode = CorruptMode(rng.gen_range(0, 4))
        accepted = rng.gen_bool(ACCEPT_PROBABILITY, size=count)
        positions = (np.flatnonzero(accepted) * stride) % length
        logger.debug(
            "Structured corruption: %d/%d positions, stride %d, mode %s",
            positions.size,
            count,
            stride,
            mode.name,
        )
        _corrupt_blocks(data, positions, block, mode, rng)
        return

    positions = rng.gen_range(0, length, size=count)
    if options.mode != CorruptMode.RANDOM:
        _corrupt_blocks(data, positions, block, options.mode, rng)
        return

    modes = rng.gen_range(0, 4, size=count)
    # Draw order decides the last write where blocks overlap
    for pos, value in zip(positions.tolist(), modes.tolist()):
        _corrupt(data, np.arange(pos, min(pos + block, length)), CorruptMode(value), rng)
