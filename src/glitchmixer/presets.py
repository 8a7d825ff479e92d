"""Built-in effect presets — named composite configurations.

A preset is a plain dict (JSON-ready) whose "glitchOptions" entry is a
composite configuration mapping accepted by GlitchOptions.from_dict.
"""

import copy
import time
import uuid

from glitchmixer.errors import InvalidOptions
from glitchmixer.options import GlitchOptions

REQUIRED_KEYS = {
    "id",
    "name",
    "description",
    "glitchOptions",
    "created",
    "modified",
    "isFavorite",
    "tags",
}


def _builtin(preset_id: str, name: str, description: str, options: dict, tags: list[str]) -> dict:
    return {
        "id": preset_id,
        "name": name,
        "description": description,
        "glitchOptions": options,
        "created": 0.0,
        "modified": 0.0,
        "isFavorite": False,
        "tags": tags,
    }


DEFAULT_PRESETS: list[dict] = [
    _builtin(
        "preset-1",
        "RGB Split",
        "Classic RGB channel shift effect",
        {"channelShift": {"amount": 0.5, "channels": [0, 1, 2], "direction": 1}},
        ["classic", "channel shift"],
    ),
    _builtin(
        "preset-2",
        "Pixel Chaos",
        "Pixelated distortion with random pixel shifts",
        {
            "pixelSort": {"intensity": 0.7, "threshold": 0.4, "vertical": False},
            "quantize": 32,
        },
        ["pixel", "retro"],
    ),
    _builtin(
        "preset-3",
        "Digital Corruption",
        "Heavy data corruption with binary artifacts",
        {
            "byteCorrupt": {"amount": 0.4, "mode": 1, "blockSize": 8, "structured": False},
            "binaryXor": {"strength": 0.3, "mode": 0},
        },
        ["corruption", "binary"],
    ),
    _builtin(
        "preset-4",
        "VHS Artifact",
        "Vintage video tape distortion",
        {
            "dataBend": {"amount": 0.2, "mode": 2, "chunkSize": 0.02},
            "noise": 0.1,
        },
        ["analog", "vintage", "vhs"],
    ),
    _builtin(
        "preset-5",
        "Glitch Wave",
        "Undulating wave pattern with color channel separation",
        {"channelShift": {"amount": 0.3, "channels": [0, 2], "direction": 0}},
        ["wave", "animated"],
    ),
]


def list_presets() -> list[dict]:
    """List built-in presets (id, name, description, tags)."""
    return [
        {
            "id": p["id"],
            "name": p["name"],
            "description": p["description"],
            "tags": list(p["tags"]),
        }
        for p in DEFAULT_PRESETS
    ]


def get_preset(key: str) -> dict | None:
    """Look up a built-in preset by id or (case-insensitive) name. Returns a copy."""
    for p in DEFAULT_PRESETS:
        if p["id"] == key or p["name"].lower() == key.lower():
            return copy.deepcopy(p)
    return None


def preset_options(preset: dict | str) -> GlitchOptions:
    """Parse a preset (or the id/name of a built-in one) into GlitchOptions.

    Raises:
        KeyError: If a built-in preset name is unknown.
        InvalidOptions: If the preset's glitchOptions are malformed.
    """
    if isinstance(preset, str):
        found = get_preset(preset)
        if found is None:
            raise KeyError(f"unknown preset: {preset}")
        preset = found
    return GlitchOptions.from_dict(preset["glitchOptions"])


def new_preset(
    name: str,
    glitch_options: dict,
    description: str = "",
    tags: list[str] | None = None,
) -> dict:
    """Create a new user preset with a fresh id and timestamps."""
    now = time.time()
    return {
        "id": str(uuid.uuid4()),
        "name": name,
        "description": description,
        "glitchOptions": copy.deepcopy(glitch_options),
        "created": now,
        "modified": now,
        "isFavorite": False,
        "tags": list(tags or []),
    }


def validate_preset(preset: dict) -> list[str]:
    """Validate a preset dict. Returns list of error strings (empty = valid)."""
    errors = []

    missing = REQUIRED_KEYS - set(preset.keys())
    if missing:
        errors.append(f"Missing preset keys: {sorted(missing)}")
        return errors

    if not isinstance(preset["id"], str) or not preset["id"]:
        errors.append("'id' must be a non-empty string")

    if not isinstance(preset["name"], str) or not preset["name"].strip():
        errors.append("'name' must be a non-empty string")

    if not isinstance(preset["tags"], list) or not all(
        isinstance(t, str) for t in preset["tags"]
    ):
        errors.append("'tags' must be a list of strings")

    if not isinstance(preset["isFavorite"], bool):
        errors.append("'isFavorite' must be a bool")

    for key in ("created", "modified"):
        if not isinstance(preset[key], (int, float)) or isinstance(preset[key], bool):
            errors.append(f"'{key}' must be a timestamp")

    try:
        GlitchOptions.from_dict(preset["glitchOptions"])
    except InvalidOptions as e:
        errors.append(f"'glitchOptions' invalid: {e}")

    return errors
