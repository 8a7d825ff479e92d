"""Binary XOR — bitwise XOR with a byte pattern laid out over the image."""

import numpy as np

from glitchmixer.buffer import PixelBuffer
from glitchmixer.options import BinaryXorOptions, XorMode

EFFECT_ID = "fx.binary_xor"
EFFECT_NAME = "Binary XOR"
EFFECT_CATEGORY = "destruction"
OPTIONS_KEY = "binary_xor"
OPTIONS = BinaryXorOptions

PARAMS: dict = {
    "strength": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.3,
        "label": "Strength",
        "curve": "linear",
        "unit": "%",
        "description": "Scales every pattern byte before XOR",
    },
    "pattern": {
        "type": "bytes",
        "default": None,
        "label": "Pattern",
        "description": "XOR bytes; random when empty",
    },
    "mode": {
        "type": "choice",
        "options": ["full", "horizontal_bands", "vertical_bands", "blocks"],
        "default": "full",
        "label": "Mode",
    },
}

GRID = 8


def xor_values(pattern: bytes, strength: float) -> np.ndarray:
    """Pattern bytes scaled by strength: byte * int(strength*255) // 255."""
    scale = int(strength * 255.0)
    raw = np.frombuffer(pattern, dtype=np.uint8).astype(np.uint16)
    return (raw * scale // 255).astype(np.uint8)


def apply(buffer: PixelBuffer, options: BinaryXorOptions, rng) -> None:
    """XOR the buffer with a full, banded or blocked pattern. In place.

    Full mode covers every byte including alpha; the spatial modes only
    touch R, G, B.
    """
    strength = max(0.0, min(1.0, options.strength))
    pattern = options.pattern
    if pattern is None:
        pattern = rng.gen_bytes(int(8.0 * strength) + 1).tobytes()
    if not pattern or options.mode == XorMode.INVALID:
        return

    values = xor_values(pattern, strength)
    n = values.size
    mode = options.mode

    if mode == XorMode.FULL:
        data = buffer.data
        data ^= np.resize(values, data.size)
        return

    grid = buffer.grid
    height, width = buffer.height, buffer.width

    if mode == XorMode.HORIZONTAL_BANDS:
        band_height = max(1, height // n)
        per_row = values[(np.arange(height) // band_height) % n]
        cells = per_row[:, None]
    elif mode == XorMode.VERTICAL_BANDS:
        band_width = max(1, width // n)
        per_col = values[(np.arange(width) // band_width) % n]
        cells = per_col[None, :]
    else:
        block_h = max(1, height // GRID)
        block_w = max(1, width // GRID)
        block_y = np.arange(height) // block_h
        block_x = np.arange(width) // block_w
        cells = values[(block_y[:, None] * GRID + block_x[None, :]) % n]

    grid[:, :, :3] ^= cells[..., None]
