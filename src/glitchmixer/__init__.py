"""glitchmixer — in-place glitch-art effects for RGBA8 pixel buffers."""

from glitchmixer._version import __version__
from glitchmixer.buffer import PixelBuffer
from glitchmixer.engine.determinism import RandomSource
from glitchmixer.engine.glitch_engine import GlitchEngine
from glitchmixer.errors import (
    GlitchError,
    InvalidBufferLength,
    InvalidOptions,
    InvalidSecondaryImage,
)
from glitchmixer.options import GlitchOptions

__all__ = [
    "__version__",
    "GlitchEngine",
    "GlitchError",
    "GlitchOptions",
    "InvalidBufferLength",
    "InvalidOptions",
    "InvalidSecondaryImage",
    "PixelBuffer",
    "RandomSource",
]
