"""Effect registry — central lookup for all registered effects."""

from typing import Any, Callable

from glitchmixer.buffer import PixelBuffer

EffectFn = Callable[[PixelBuffer, Any, Any], None]

_REGISTRY: dict[str, dict] = {}


def register(
    effect_id: str,
    fn: EffectFn,
    params: dict,
    name: str,
    category: str,
    options_key: str,
    options_type: type,
):
    """Register an effect."""
    _REGISTRY[effect_id] = {
        "fn": fn,
        "params": params,
        "name": name,
        "category": category,
        "options_key": options_key,
        "options_type": options_type,
    }


def get(effect_id: str) -> dict | None:
    """Get effect info by ID."""
    return _REGISTRY.get(effect_id)


def by_options_key(options_key: str) -> dict | None:
    """Get effect info by its composite configuration key (e.g. "pixel_sort")."""
    for eid, info in _REGISTRY.items():
        if info["options_key"] == options_key:
            return {"id": eid, **info}
    return None


def list_all() -> list[dict]:
    """List all registered effects with metadata."""
    return [
        {
            "id": eid,
            "name": info["name"],
            "category": info["category"],
            "options_key": info["options_key"],
            "params": info["params"],
        }
        for eid, info in _REGISTRY.items()
    ]


def _auto_register():
    """Import and register all built-in effects, in composite order."""
    from glitchmixer.effects.fx import (
        pixelsort,
        data_bend,
        channelshift,
        noise,
        invert,
        quantize,
        byte_corrupt,
        chunk_swap,
        binary_xor,
        image_blend,
    )

    for mod in [
        pixelsort,
        data_bend,
        channelshift,
        noise,
        invert,
        quantize,
        byte_corrupt,
        chunk_swap,
        binary_xor,
        image_blend,
    ]:
        register(
            mod.EFFECT_ID,
            mod.apply,
            mod.PARAMS,
            mod.EFFECT_NAME,
            mod.EFFECT_CATEGORY,
            mod.OPTIONS_KEY,
            mod.OPTIONS,
        )


_auto_register()
