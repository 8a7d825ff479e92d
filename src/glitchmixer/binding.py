"""Pillow binding — convert host images to RGBA8 buffers and back."""

from collections.abc import Mapping

from PIL import Image

from glitchmixer.engine.glitch_engine import GlitchEngine
from glitchmixer.options import GlitchOptions


def image_to_buffer(image: Image.Image) -> tuple[bytearray, int, int]:
    """Return (RGBA8 bytes, width, height) for any Pillow image mode."""
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    return bytearray(rgba.tobytes()), rgba.width, rgba.height


def buffer_to_image(buffer, width: int, height: int) -> Image.Image:
    """Wrap RGBA8 bytes in a new Pillow image of the given size."""
    return Image.frombytes("RGBA", (width, height), bytes(buffer))


def apply_to_image(
    image: Image.Image,
    options: GlitchOptions | Mapping,
    engine: GlitchEngine | None = None,
) -> Image.Image:
    """Run the composite configuration on `image` and return a new RGBA image.

    The source image is not modified. Pass an engine to keep one random
    stream across calls (e.g. for seeded, repeatable animation frames).
    """
    engine = engine if engine is not None else GlitchEngine()
    buffer, width, height = image_to_buffer(image)
    processed = engine.apply_effects(buffer, width, height, options)
    return buffer_to_image(processed, width, height)
