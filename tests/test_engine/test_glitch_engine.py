"""Tests for GlitchEngine — per-effect operations and the composite entry point."""

import numpy as np
import pytest

from glitchmixer import (
    GlitchEngine,
    GlitchOptions,
    InvalidBufferLength,
    InvalidOptions,
    InvalidSecondaryImage,
)
from glitchmixer.options import InvertOptions

pytestmark = pytest.mark.smoke


def _image(w=16, h=8, seed=42):
    rng = np.random.default_rng(seed)
    return bytearray(rng.integers(0, 256, w * h * 4, dtype=np.uint8).tobytes())


FULL_OPTIONS = {
    "pixelSort": {"intensity": 0.05, "threshold": 0.6},
    "dataBend": {"amount": 0.1, "chunkSize": 0.1},
    "channelShift": {"amount": 0.2},
    "noise": 0.1,
    "invert": [0, 2],
    "quantize": 16,
    "byteCorrupt": {"amount": 0.3},
    "chunkSwap": {"amount": 0.5},
    "binaryXor": {"strength": 0.4, "mode": 3},
    "greenChannel": {"noise": 0.2, "quantize": 4},
}


# --- buffer validation ---


@pytest.mark.parametrize(
    "length,width",
    [(7, 1), (16, 0), (16, -2), (12, 2), (16, 1.5)],
)
def test_invalid_buffer_rejected(length, width):
    with pytest.raises(InvalidBufferLength):
        GlitchEngine(1).invert_channels(bytearray(length), width, [0])


def test_read_only_buffer_rejected():
    with pytest.raises(InvalidBufferLength):
        GlitchEngine(1).invert_channels(bytes(16), 2, [0])


def test_non_uint8_array_rejected():
    with pytest.raises(InvalidBufferLength):
        GlitchEngine(1).invert_channels(np.zeros(16, dtype=np.int32), 2, [0])


def test_invalid_buffer_left_untouched():
    data = bytearray(range(7))
    with pytest.raises(InvalidBufferLength):
        GlitchEngine(1).add_noise(data, 1, 1.0)
    assert data == bytearray(range(7))


# --- per-effect operations ---


def test_operations_mutate_in_place():
    data = bytearray([10, 20, 30, 40, 50, 60, 70, 80])
    GlitchEngine().invert_channels(data, 2, [0, 3])
    assert data == bytearray([245, 20, 30, 215, 205, 60, 70, 175])


def test_memoryview_and_ndarray_buffers():
    engine = GlitchEngine(3)
    data = bytearray(16)
    engine.invert_channels(memoryview(data), 2, [1])
    assert data[1] == 255
    arr = np.zeros((2, 2, 4), dtype=np.uint8)
    engine.quantize(arr, 2, 2)
    engine.invert_channels(arr, 2, [3])
    np.testing.assert_array_equal(arr[:, :, 3], 255)


@pytest.mark.parametrize(
    "call",
    [
        lambda e, d, w: e.pixel_sort(d, w, 0.05, 0.5),
        lambda e, d, w: e.pixel_sort(d, w, 0.05, 0.5, vertical=True, channel=1),
        lambda e, d, w: e.data_bend(d, w, 0.2, mode=3, chunk_size=0.1),
        lambda e, d, w: e.channel_shift(d, w, 0.3, channels=[0, 2], direction=0),
        lambda e, d, w: e.add_noise(d, w, 0.2),
        lambda e, d, w: e.byte_corrupt(d, w, 0.5, mode=1, block_size=2, structured=True),
        lambda e, d, w: e.chunk_swap(d, w, 0.5, chunk_size=0.5, preserve_alpha=True),
        lambda e, d, w: e.binary_xor(d, w, 0.5, pattern=b"\x0f", mode=1),
    ],
)
def test_randomized_operations_deterministic_per_seed(call):
    a, b = _image(), _image()
    call(GlitchEngine(99), a, 16)
    call(GlitchEngine(99), b, 16)
    assert a == b
    assert len(a) == 16 * 8 * 4


def test_engine_stream_advances_between_calls():
    engine = GlitchEngine(5)
    a, b = _image(), _image()
    engine.add_noise(a, 16, 0.5)
    engine.add_noise(b, 16, 0.5)
    assert a != b


def test_image_blend_operation():
    data = bytearray([0, 0, 0, 9] * 4)
    secondary = bytes([100, 100, 100, 255])
    GlitchEngine().image_blend(data, 2, secondary, 1, 1, blend_mode=0, amount=1.0)
    assert data == bytearray([100, 100, 100, 9] * 4)


def test_image_blend_mismatch_is_silent_noop():
    data = _image()
    original = bytearray(data)
    GlitchEngine().image_blend(data, 16, b"\x00" * 5, 2, 2)
    assert data == original


def test_image_blend_mismatch_strict():
    with pytest.raises(InvalidSecondaryImage):
        GlitchEngine(strict_blend=True).image_blend(_image(), 16, b"\x00" * 5, 2, 2)


def test_apply_by_key_accepts_records():
    data = bytearray([1, 2, 3, 4])
    GlitchEngine().apply("invert", data, 1, InvertOptions((0,)))
    assert data[0] == 254


def test_apply_unknown_key():
    with pytest.raises(ValueError):
        GlitchEngine().apply("melt", bytearray(4), 1, {})


def test_apply_missing_required_field():
    with pytest.raises(InvalidOptions):
        GlitchEngine().apply("pixel_sort", bytearray(4), 1, {"intensity": 0.5})


# --- composite ---


def test_apply_effects_returns_new_buffer():
    source = _image()
    snapshot = bytes(source)
    out = GlitchEngine(1).apply_effects(source, 16, 8, FULL_OPTIONS)
    assert isinstance(out, bytearray)
    assert len(out) == len(source)
    assert bytes(source) == snapshot
    assert bytes(out) != snapshot


def test_apply_effects_deterministic_per_seed():
    a = GlitchEngine(8).apply_effects(_image(), 16, 8, FULL_OPTIONS)
    b = GlitchEngine(8).apply_effects(_image(), 16, 8, FULL_OPTIONS)
    assert a == b


def test_apply_effects_accepts_glitch_options():
    out = GlitchEngine().apply_effects(
        bytes([0, 0, 0, 0]), 1, 1, GlitchOptions(invert=InvertOptions())
    )
    assert out == bytearray([255, 255, 255, 0])


def test_apply_effects_empty_options_copies():
    source = _image()
    out = GlitchEngine().apply_effects(source, 16, 8, {})
    assert out == source
    assert out is not source


@pytest.mark.parametrize("width,height", [(16, 7), (8, 8), (0, 8)])
def test_apply_effects_dimension_mismatch(width, height):
    with pytest.raises(InvalidBufferLength):
        GlitchEngine().apply_effects(_image(), width, height, {})


def test_apply_effects_bad_options_shape():
    with pytest.raises(InvalidOptions):
        GlitchEngine().apply_effects(_image(), 16, 8, {"pixelSort": 0.5})


def test_apply_effects_image_blend_mismatch_unchanged():
    source = _image()
    out = GlitchEngine().apply_effects(
        source, 16, 8,
        {"imageBlend": {"secondaryData": b"\x01\x02", "width": 4, "height": 4}},
    )
    assert out == source


def test_unknown_xor_and_blend_modes_leave_buffer_unchanged():
    data = _image()
    original = bytearray(data)
    engine = GlitchEngine(3)
    engine.binary_xor(data, 16, 1.0, pattern=b"\xff\x0f", mode=7)
    engine.image_blend(data, 16, bytes([9, 9, 9, 255]), 1, 1, blend_mode=9, amount=1.0)
    assert data == original


def test_apply_effects_unknown_xor_mode_skips_xor():
    data = _image()
    options = {"binaryXor": {"strength": 1.0, "mode": 7}}
    out = GlitchEngine(3).apply_effects(data, 16, 8, options)
    assert out == data
