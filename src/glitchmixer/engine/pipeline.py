"""Effect pipeline — applies a composite configuration to a buffer in fixed order.

Global stage: every effect present in GlitchOptions, in COMPOSITE_ORDER.
Channel stage: per-channel effect sets run on a grey expansion of one
channel, which is then folded back as the mean of R, G, B.
"""

import dataclasses
import logging
import time

import numpy as np

from glitchmixer.buffer import PixelBuffer
from glitchmixer.effects import registry
from glitchmixer.engine.container import EffectContainer
from glitchmixer.options import ChannelEffects, GlitchOptions

logger = logging.getLogger(__name__)

# Fixed application order of the composite operation
COMPOSITE_ORDER = [
    "pixel_sort",
    "data_bend",
    "channel_shift",
    "noise",
    "invert",
    "quantize",
    "byte_corrupt",
    "chunk_swap",
    "binary_xor",
    "image_blend",
]

# ChannelEffects field -> registry options key, in application order
CHANNEL_ORDER = [
    ("pixel_sort", "pixel_sort"),
    ("data_bend", "data_bend"),
    ("shift", "channel_shift"),
    ("noise", "noise"),
    ("invert", "invert"),
    ("quantize", "quantize"),
    ("byte_corrupt", "byte_corrupt"),
    ("binary_xor", "binary_xor"),
]

# Per-effect timing threshold (milliseconds)
EFFECT_WARN_MS = 250


def _run_effect(
    buffer: PixelBuffer, options_key: str, options, rng, *, strict_blend: bool
) -> bool:
    info = registry.by_options_key(options_key)
    if info is None:
        raise ValueError(f"unknown effect: {options_key}")

    kwargs = {"strict": True} if strict_blend and options_key == "image_blend" else {}
    container = EffectContainer(info["fn"], info["id"])

    t0 = time.monotonic()
    ok = container.process(buffer, options, rng, **kwargs)
    elapsed_ms = (time.monotonic() - t0) * 1000

    if elapsed_ms > EFFECT_WARN_MS:
        logger.warning(
            "Effect %s took %.0fms (>%dms warn threshold) on %dx%d buffer",
            info["id"],
            elapsed_ms,
            EFFECT_WARN_MS,
            buffer.width,
            buffer.height,
        )
    return ok


def expand_channel(buffer: PixelBuffer, channel: int) -> PixelBuffer:
    """Grey RGBA copy of one channel: value in R, G, B and opaque alpha."""
    values = buffer.pixels[:, channel]
    expanded = np.empty((values.size, 4), dtype=np.uint8)
    expanded[:, :3] = values[:, None]
    expanded[:, 3] = 255
    return PixelBuffer(expanded, buffer.width)


def fold_channel(buffer: PixelBuffer, channel: int, expanded: PixelBuffer) -> None:
    """Write the rounded mean of the expanded R, G, B back into `channel`."""
    total = expanded.pixels[:, :3].astype(np.uint16).sum(axis=1)
    buffer.pixels[:, channel] = np.floor(total / 3.0 + 0.5).astype(np.uint8)


def apply_channel_effects(
    buffer: PixelBuffer, channel: int, effects: ChannelEffects, rng
) -> None:
    """Run one channel's effect set in isolation. Alpha and other channels kept."""
    expanded = expand_channel(buffer, channel)

    for field_name, options_key in CHANNEL_ORDER:
        options = getattr(effects, field_name)
        if options is None:
            continue
        if field_name == "shift":
            # Every grey copy carries the same data, so all three move together
            options = dataclasses.replace(options, channels=(0, 1, 2))
        _run_effect(expanded, options_key, options, rng, strict_blend=False)

    fold_channel(buffer, channel, expanded)


def apply_composite(
    buffer: PixelBuffer, options: GlitchOptions, rng, *, strict_blend: bool = False
) -> list[str]:
    """Apply every configured effect to `buffer` in place.

    Returns:
        Registry IDs of effects that failed and were rolled back.

    Raises:
        InvalidSecondaryImage: If strict_blend is set and the ImageBlend
            secondary does not match its declared size.
    """
    failed: list[str] = []

    for options_key in COMPOSITE_ORDER:
        effect_options = getattr(options, options_key)
        if effect_options is None:
            continue
        logger.debug("Applying %s", options_key)
        if not _run_effect(
            buffer, options_key, effect_options, rng, strict_blend=strict_blend
        ):
            failed.append(registry.by_options_key(options_key)["id"])

    for channel, effects in options.channel_stages():
        logger.debug("Applying %s channel effects", channel.name.lower())
        apply_channel_effects(buffer, int(channel), effects, rng)

    return failed
