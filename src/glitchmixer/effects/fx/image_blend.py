"""Image Blend — composite a tiled secondary image onto the buffer.

The secondary image wraps around (mathematical modulo on the offset
coordinates), so any offset and any secondary size cover the whole primary.

CRITICAL: All blend math runs in int64/float64 to avoid uint8 overflow/wrap.
"""

import logging

import numpy as np

from glitchmixer.buffer import PixelBuffer
from glitchmixer.errors import InvalidSecondaryImage
from glitchmixer.options import BlendMode, ImageBlendOptions
from glitchmixer.validation import validate_secondary

logger = logging.getLogger(__name__)

EFFECT_ID = "fx.image_blend"
EFFECT_NAME = "Image Blend"
EFFECT_CATEGORY = "composite"
OPTIONS_KEY = "image_blend"
OPTIONS = ImageBlendOptions

PARAMS: dict = {
    "blend_mode": {
        "type": "choice",
        "options": ["mix", "difference", "multiply", "screen", "overlay"],
        "default": "mix",
        "label": "Blend Mode",
    },
    "amount": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.5,
        "label": "Amount",
        "curve": "linear",
        "unit": "%",
    },
    "offset_x": {
        "type": "int",
        "min": -4096,
        "max": 4096,
        "default": 0,
        "label": "Offset X",
        "curve": "linear",
        "unit": "px",
    },
    "offset_y": {
        "type": "int",
        "min": -4096,
        "max": 4096,
        "default": 0,
        "label": "Offset Y",
        "curve": "linear",
        "unit": "px",
    },
}


def _blend_mix(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    return layer


def _blend_difference(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    return np.abs(base - layer)


def _blend_multiply(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    return base * layer / 255.0


def _blend_screen(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    return 255 - (255 - base) * (255 - layer) // 255


def _blend_overlay(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    # Conditional: multiply where base < 128, screen where base >= 128
    low = 2 * base * layer // 255
    high = 255 - 2 * (255 - base) * (255 - layer) // 255
    return np.where(base < 128, low, high)


BLEND_MODES = {
    BlendMode.MIX: _blend_mix,
    BlendMode.DIFFERENCE: _blend_difference,
    BlendMode.MULTIPLY: _blend_multiply,
    BlendMode.SCREEN: _blend_screen,
    BlendMode.OVERLAY: _blend_overlay,
}


def sample_secondary(
    secondary: np.ndarray, width: int, height: int, offset_x: int, offset_y: int
) -> np.ndarray:
    """Tile the (sh, sw, 4) secondary over a (height, width) primary."""
    sh, sw = secondary.shape[:2]
    sx = (np.arange(width) + offset_x) % sw
    sy = (np.arange(height) + offset_y) % sh
    return secondary[sy[:, None], sx[None, :]]


def apply(
    buffer: PixelBuffer, options: ImageBlendOptions, rng=None, *, strict: bool = False
) -> None:
    """Blend RGB toward the secondary image by `amount`. Alpha untouched.

    A secondary buffer that does not match its declared size is skipped and
    the primary is left byte-identical; with strict=True it raises
    InvalidSecondaryImage instead.
    """
    errors = validate_secondary(
        len(options.secondary_data), options.width, options.height
    )
    if errors:
        if strict:
            raise InvalidSecondaryImage(errors)
        logger.warning("Image blend skipped: %s", "; ".join(errors))
        return

    if buffer.pixel_count == 0 or options.blend_mode == BlendMode.INVALID:
        return

    amount = max(0.0, min(1.0, options.amount))
    secondary = np.frombuffer(options.secondary_data, dtype=np.uint8).reshape(
        options.height, options.width, 4
    )
    layer = sample_secondary(
        secondary, buffer.width, buffer.height, options.offset_x, options.offset_y
    )

    grid = buffer.grid
    base = grid[:, :, :3].astype(np.int64)
    blended = BLEND_MODES[options.blend_mode](base, layer[:, :, :3].astype(np.int64))
    result = blended * amount + base * (1.0 - amount)
    grid[:, :, :3] = np.clip(result, 0, 255).astype(np.uint8)
