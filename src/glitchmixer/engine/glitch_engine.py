"""GlitchEngine — owns the random stream and exposes every effect as an operation."""

import logging
from collections.abc import Mapping

from glitchmixer.buffer import PixelBuffer
from glitchmixer.effects import registry
from glitchmixer.engine.determinism import RandomSource
from glitchmixer.engine.pipeline import apply_composite
from glitchmixer.errors import InvalidBufferLength
from glitchmixer.options import GlitchOptions, parse_record
from glitchmixer.validation import validate_composite

logger = logging.getLogger(__name__)


class GlitchEngine:
    """Stateful effect runner.

    One RandomSource persists across calls, so two engines built with the
    same seed and fed the same calls produce identical output. An engine is
    not thread-safe; use one engine per thread.

    Args:
        seed: Seed for the random stream (None = OS entropy).
        rng: Inject a random source instead of seeding one.
        strict_blend: Raise InvalidSecondaryImage for a mismatched ImageBlend
            secondary instead of skipping the effect.
    """

    def __init__(self, seed: int | None = None, *, rng=None, strict_blend: bool = False):
        self.rng = rng if rng is not None else RandomSource(seed)
        self.strict_blend = strict_blend

    def apply(self, options_key: str, buffer, width: int, options) -> None:
        """Run one effect in place.

        Args:
            options_key: Composite key of the effect, e.g. "pixel_sort".
            buffer:      Writable RGBA8 memory (bytearray, memoryview, ndarray).
            width:       Pixel width; height = len(buffer) // 4 // width.
            options:     The effect's options record, or a mapping of its fields.

        Raises:
            InvalidBufferLength: If the buffer is not whole rows of RGBA8.
            InvalidOptions: If `options` cannot be turned into the record.
            ValueError: If `options_key` names no effect.
        """
        info = registry.by_options_key(options_key)
        if info is None:
            raise ValueError(f"unknown effect: {options_key}")
        pixels = PixelBuffer(buffer, width)
        record = parse_record(info["options_type"], options, options_key)
        kwargs = {"strict": True} if self.strict_blend and options_key == "image_blend" else {}
        logger.debug("Applying %s to %dx%d buffer", info["id"], width, pixels.height)
        info["fn"](pixels, record, self.rng, **kwargs)

    def pixel_sort(
        self, buffer, width: int, intensity: float, threshold: float,
        vertical: bool = False, channel=None,
    ) -> None:
        self.apply("pixel_sort", buffer, width, {
            "intensity": intensity, "threshold": threshold,
            "vertical": vertical, "channel": channel,
        })

    def data_bend(
        self, buffer, width: int, amount: float, mode=None,
        chunk_size: float | None = None, channel=None,
    ) -> None:
        self.apply("data_bend", buffer, width, {
            "amount": amount, "mode": mode, "chunk_size": chunk_size, "channel": channel,
        })

    def channel_shift(
        self, buffer, width: int, amount: float, channels=None, direction=None
    ) -> None:
        self.apply("channel_shift", buffer, width, {
            "amount": amount, "channels": channels, "direction": direction,
        })

    def add_noise(self, buffer, width: int, amount: float) -> None:
        self.apply("noise", buffer, width, {"amount": amount})

    def invert_channels(self, buffer, width: int, channels) -> None:
        self.apply("invert", buffer, width, {"channels": channels})

    def quantize(self, buffer, width: int, levels: int) -> None:
        self.apply("quantize", buffer, width, {"levels": levels})

    def byte_corrupt(
        self, buffer, width: int, amount: float, mode=None,
        block_size: int | None = None, structured: bool = False,
    ) -> None:
        self.apply("byte_corrupt", buffer, width, {
            "amount": amount, "mode": mode,
            "block_size": block_size, "structured": structured,
        })

    def chunk_swap(
        self, buffer, width: int, amount: float,
        chunk_size: float | None = None, preserve_alpha: bool = False,
    ) -> None:
        self.apply("chunk_swap", buffer, width, {
            "amount": amount, "chunk_size": chunk_size, "preserve_alpha": preserve_alpha,
        })

    def binary_xor(
        self, buffer, width: int, strength: float, pattern=None, mode=None
    ) -> None:
        self.apply("binary_xor", buffer, width, {
            "strength": strength, "pattern": pattern, "mode": mode,
        })

    def image_blend(
        self, buffer, width: int, secondary_data, secondary_width: int,
        secondary_height: int, blend_mode=0, amount: float = 0.5,
        offset_x: int = 0, offset_y: int = 0,
    ) -> None:
        self.apply("image_blend", buffer, width, {
            "secondary_data": secondary_data, "width": secondary_width,
            "height": secondary_height, "blend_mode": blend_mode, "amount": amount,
            "offset_x": offset_x, "offset_y": offset_y,
        })

    def apply_effects(
        self, buffer, width: int, height: int, options: GlitchOptions | Mapping
    ) -> bytearray:
        """Run the composite configuration on a copy of `buffer`.

        Returns:
            A new bytearray with the processed image; `buffer` is not modified.

        Raises:
            InvalidBufferLength: If the buffer is not exactly width*height RGBA8 pixels.
            InvalidOptions: If a mapping configuration is malformed.
            InvalidSecondaryImage: Only with strict_blend.
        """
        if not isinstance(options, GlitchOptions):
            options = GlitchOptions.from_dict(options)

        work = bytearray(buffer)
        errors = validate_composite(len(work), width, height)
        if errors:
            raise InvalidBufferLength(errors)

        failed = apply_composite(
            PixelBuffer(work, width), options, self.rng, strict_blend=self.strict_blend
        )
        if failed:
            logger.warning("Composite finished with rolled back effects: %s", failed)
        return work
