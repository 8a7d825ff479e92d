"""Typed effect options and composite configuration parsing.

Every effect takes one frozen record. Fields that select a fixed behavior are
closed IntEnums; where "absent" means "pick one at random" the enum carries an
explicit RANDOM member instead of a nullable integer.

`GlitchOptions.from_dict` turns a plain mapping (snake_case or camelCase keys,
as produced by a JSON/UI layer) into records. Sanitizing mirrors the effect
container: non-finite floats and unknown enum values are dropped so the field
default applies; structurally wrong payloads raise InvalidOptions.
"""

import dataclasses
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from glitchmixer.errors import InvalidOptions

logger = logging.getLogger(__name__)


class Channel(IntEnum):
    RED = 0
    GREEN = 1
    BLUE = 2
    ALPHA = 3


class SortKey(IntEnum):
    """Value PixelSort segments and sorts on."""

    BRIGHTNESS = -1
    RED = 0
    GREEN = 1
    BLUE = 2


class ChannelSelect(IntEnum):
    ALL = -1
    RED = 0
    GREEN = 1
    BLUE = 2
    ALPHA = 3


class DataBendMode(IntEnum):
    RANDOM = -1
    DUPLICATE = 0
    REVERSE = 1
    SHIFT = 2
    SCRAMBLE = 3


class Direction(IntEnum):
    LEFT = -1
    RANDOM = 0
    RIGHT = 1


class CorruptMode(IntEnum):
    RANDOM = -1
    RANDOM_BYTE = 0
    BIT_FLIP = 1
    ZERO = 2
    MAX = 3


class XorMode(IntEnum):
    INVALID = -1
    FULL = 0
    HORIZONTAL_BANDS = 1
    VERTICAL_BANDS = 2
    BLOCKS = 3


class BlendMode(IntEnum):
    INVALID = -1
    MIX = 0
    DIFFERENCE = 1
    MULTIPLY = 2
    SCREEN = 3
    OVERLAY = 4


# --- field parsers ---

_DROP = object()  # parser result meaning "use the field default"


def _float(value):
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        raise InvalidOptions(f"expected a number, got {type(value).__name__}")
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return _DROP
    return value


def _opt_float(value):
    return _DROP if value is None else _float(value)


def _int(value):
    value = _float(value)
    return value if value is _DROP else int(value)


def _opt_int(value):
    return _DROP if value is None else _int(value)


def _bool(value):
    if not isinstance(value, (bool, int, np.bool_)):
        raise InvalidOptions(f"expected a bool, got {type(value).__name__}")
    return bool(value)


def _enum(enum_cls, unknown=_DROP):
    """Enum parser. Unknown values map to `unknown`, the field default if unset."""

    def parse(value):
        if value is None:
            return _DROP
        if isinstance(value, enum_cls):
            return value
        try:
            if isinstance(value, str):
                return enum_cls[value.strip().upper().replace("-", "_").replace(" ", "_")]
            return enum_cls(int(value))
        except (KeyError, ValueError, TypeError):
            outcome = "using default" if unknown is _DROP else "effect disabled"
            logger.warning("Unknown %s value %r, %s", enum_cls.__name__, value, outcome)
            return unknown

    return parse


def _channels(value):
    if value is None:
        return _DROP
    if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        raise InvalidOptions("channel selection must be a list of channel indices")
    try:
        return tuple(int(ch) for ch in value)
    except (TypeError, ValueError) as e:
        raise InvalidOptions(f"channel indices must be integers: {e}") from e


def _byte_string(value):
    if value is None:
        return _DROP
    if isinstance(value, np.ndarray):
        return value.astype(np.uint8, copy=False).tobytes()
    try:
        return bytes(value)
    except (TypeError, ValueError) as e:
        raise InvalidOptions(f"expected a byte sequence: {e}") from e


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def parse_record(cls, payload, key: str):
    """Build a frozen options record from a mapping."""
    if isinstance(payload, cls):
        return payload
    if not isinstance(payload, Mapping):
        raise InvalidOptions(
            f"'{key}' expects a mapping, got {type(payload).__name__}"
        )

    kwargs = {}
    for f in dataclasses.fields(cls):
        camel = _camel(f.name)
        if f.name in payload:
            raw = payload[f.name]
        elif camel in payload:
            raw = payload[camel]
        else:
            continue
        parser = f.metadata.get("parse")
        try:
            value = parser(raw) if parser else raw
        except InvalidOptions as e:
            raise InvalidOptions(f"{key}.{f.name}: {e}") from e
        if value is not _DROP:
            kwargs[f.name] = value

    try:
        return cls(**kwargs)
    except TypeError as e:
        # Missing required fields
        raise InvalidOptions(f"'{key}': {e}") from e


def _opt(parse, default=None):
    return field(default=default, metadata={"parse": parse})


def _req(parse):
    return field(metadata={"parse": parse})


# --- effect records ---


@dataclass(frozen=True)
class PixelSortOptions:
    intensity: float = _req(_float)
    threshold: float = _req(_float)
    vertical: bool = _opt(_bool, False)
    channel: SortKey = _opt(_enum(SortKey), SortKey.BRIGHTNESS)


@dataclass(frozen=True)
class DataBendOptions:
    amount: float = _req(_float)
    mode: DataBendMode = _opt(_enum(DataBendMode), DataBendMode.RANDOM)
    chunk_size: float | None = _opt(_opt_float)
    channel: ChannelSelect = _opt(_enum(ChannelSelect), ChannelSelect.ALL)


@dataclass(frozen=True)
class ChannelShiftOptions:
    amount: float = _req(_float)
    channels: tuple[int, ...] | None = _opt(_channels)
    direction: Direction = _opt(_enum(Direction), Direction.RANDOM)


@dataclass(frozen=True)
class NoiseOptions:
    amount: float = _req(_float)


@dataclass(frozen=True)
class InvertOptions:
    channels: tuple[int, ...] = _opt(_channels, (0, 1, 2))


@dataclass(frozen=True)
class QuantizeOptions:
    levels: int = _req(_int)


@dataclass(frozen=True)
class ByteCorruptOptions:
    amount: float = _req(_float)
    mode: CorruptMode = _opt(_enum(CorruptMode), CorruptMode.RANDOM)
    block_size: int | None = _opt(_opt_int)
    structured: bool = _opt(_bool, False)


@dataclass(frozen=True)
class ChunkSwapOptions:
    amount: float = _req(_float)
    chunk_size: float | None = _opt(_opt_float)
    preserve_alpha: bool = _opt(_bool, False)


@dataclass(frozen=True)
class BinaryXorOptions:
    strength: float = _req(_float)
    pattern: bytes | None = _opt(_byte_string)
    mode: XorMode = _opt(_enum(XorMode, XorMode.INVALID), XorMode.FULL)


@dataclass(frozen=True)
class ImageBlendOptions:
    secondary_data: bytes = _req(_byte_string)
    width: int = _req(_int)
    height: int = _req(_int)
    blend_mode: BlendMode = _opt(_enum(BlendMode, BlendMode.INVALID), BlendMode.MIX)
    amount: float = _opt(_float, 0.5)
    offset_x: int = _opt(_int, 0)
    offset_y: int = _opt(_int, 0)


def _noise(payload, key):
    if isinstance(payload, (NoiseOptions, Mapping)):
        return parse_record(NoiseOptions, payload, key)
    amount = _float(payload)
    return None if amount is _DROP else NoiseOptions(amount)


def _invert(payload, key):
    if isinstance(payload, (InvertOptions, Mapping)):
        return parse_record(InvertOptions, payload, key)
    return InvertOptions(_channels(payload))


def _invert_flag(payload, key):
    """Per-channel invert is a bool; True inverts the expanded R, G, B copies."""
    return InvertOptions((0, 1, 2)) if _bool(payload) else None


def _quantize(payload, key):
    if isinstance(payload, (QuantizeOptions, Mapping)):
        return parse_record(QuantizeOptions, payload, key)
    levels = _int(payload)
    return None if levels is _DROP else QuantizeOptions(levels)


def _record(cls):
    return lambda payload, key: parse_record(cls, payload, key)


def _parse_section(cls, payload, key):
    if isinstance(payload, cls):
        return payload
    if not isinstance(payload, Mapping):
        raise InvalidOptions(f"'{key}' expects a mapping, got {type(payload).__name__}")
    return cls.from_dict(payload)


# --- composite configuration ---


@dataclass(frozen=True)
class ChannelEffects:
    """Effects applied to one color channel in isolation."""

    pixel_sort: PixelSortOptions | None = None
    data_bend: DataBendOptions | None = None
    shift: ChannelShiftOptions | None = None
    noise: NoiseOptions | None = None
    invert: InvertOptions | None = None
    quantize: QuantizeOptions | None = None
    byte_corrupt: ByteCorruptOptions | None = None
    binary_xor: BinaryXorOptions | None = None

    PARSERS = {
        "pixel_sort": _record(PixelSortOptions),
        "data_bend": _record(DataBendOptions),
        "shift": _record(ChannelShiftOptions),
        "noise": _noise,
        "invert": _invert_flag,
        "quantize": _quantize,
        "byte_corrupt": _record(ByteCorruptOptions),
        "binary_xor": _record(BinaryXorOptions),
    }

    @classmethod
    def from_dict(cls, data: Mapping) -> "ChannelEffects":
        return cls(**_parse_sections(cls.PARSERS, data))

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.PARSERS)


@dataclass(frozen=True)
class GlitchOptions:
    """Composite configuration: absent (None) effects are skipped."""

    pixel_sort: PixelSortOptions | None = None
    data_bend: DataBendOptions | None = None
    channel_shift: ChannelShiftOptions | None = None
    noise: NoiseOptions | None = None
    invert: InvertOptions | None = None
    quantize: QuantizeOptions | None = None
    byte_corrupt: ByteCorruptOptions | None = None
    chunk_swap: ChunkSwapOptions | None = None
    binary_xor: BinaryXorOptions | None = None
    image_blend: ImageBlendOptions | None = None
    red_channel: ChannelEffects | None = None
    green_channel: ChannelEffects | None = None
    blue_channel: ChannelEffects | None = None

    PARSERS = {
        "pixel_sort": _record(PixelSortOptions),
        "data_bend": _record(DataBendOptions),
        "channel_shift": _record(ChannelShiftOptions),
        "noise": _noise,
        "invert": _invert,
        "quantize": _quantize,
        "byte_corrupt": _record(ByteCorruptOptions),
        "chunk_swap": _record(ChunkSwapOptions),
        "binary_xor": _record(BinaryXorOptions),
        "image_blend": _record(ImageBlendOptions),
        "red_channel": lambda p, k: _parse_section(ChannelEffects, p, k),
        "green_channel": lambda p, k: _parse_section(ChannelEffects, p, k),
        "blue_channel": lambda p, k: _parse_section(ChannelEffects, p, k),
    }

    @classmethod
    def from_dict(cls, data: Mapping) -> "GlitchOptions":
        """Parse a composite configuration mapping.

        Raises:
            InvalidOptions: If a payload has the wrong shape or lacks a
                required field.
        """
        return cls(**_parse_sections(cls.PARSERS, data))

    def channel_stages(self) -> list[tuple[Channel, ChannelEffects]]:
        stages = [
            (Channel.RED, self.red_channel),
            (Channel.GREEN, self.green_channel),
            (Channel.BLUE, self.blue_channel),
        ]
        return [(ch, fx) for ch, fx in stages if fx is not None and not fx.is_empty()]


def _parse_sections(parsers: dict, data) -> dict:
    if not isinstance(data, Mapping):
        raise InvalidOptions(f"options must be a mapping, got {type(data).__name__}")

    known = set(parsers) | {_camel(k) for k in parsers}
    for key in data:
        if key not in known:
            logger.warning("Ignoring unknown effect option %r", key)

    kwargs = {}
    for name, parse in parsers.items():
        payload = data.get(name, data.get(_camel(name)))
        if payload is None:
            continue
        value = parse(payload, name)
        if value is not None:
            kwargs[name] = value
    return kwargs
