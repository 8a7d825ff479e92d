"""Tests for fx.binary_xor."""

import numpy as np
import pytest

from glitchmixer.buffer import PixelBuffer
from glitchmixer.effects.fx.binary_xor import apply, xor_values
from glitchmixer.engine.determinism import RandomSource
from glitchmixer.options import BinaryXorOptions, XorMode

pytestmark = pytest.mark.smoke


def test_xor_values_scaled_by_strength():
    np.testing.assert_array_equal(xor_values(b"\xff\x80\x01", 1.0), [255, 128, 1])
    # int(0.5 * 255) = 127: 255*127//255 = 127, 128*127//255 = 63
    np.testing.assert_array_equal(xor_values(b"\xff\x80\x01", 0.5), [127, 63, 0])


def test_full_mode_tiles_pattern_over_every_byte():
    frame = np.zeros((2, 2, 4), dtype=np.uint8)
    apply(
        PixelBuffer(frame, 2),
        BinaryXorOptions(strength=1.0, pattern=b"\x01\x02\x03"),
        None,
    )
    np.testing.assert_array_equal(frame.reshape(-1), [1, 2, 3] * 5 + [1])


def test_full_mode_is_self_inverse(frame):
    original = frame.copy()
    opts = BinaryXorOptions(strength=0.7, pattern=b"\x5a\xc3\x0f\xf0")
    apply(PixelBuffer(frame, 64), opts, None)
    assert not np.array_equal(frame, original)
    apply(PixelBuffer(frame, 64), opts, None)
    np.testing.assert_array_equal(frame, original)


def test_zero_strength_is_identity(frame, rng):
    original = frame.copy()
    apply(PixelBuffer(frame, 64), BinaryXorOptions(strength=0.0), rng)
    np.testing.assert_array_equal(frame, original)


def test_empty_pattern_is_noop(frame):
    original = frame.copy()
    apply(PixelBuffer(frame, 64), BinaryXorOptions(strength=1.0, pattern=b""), None)
    np.testing.assert_array_equal(frame, original)


def test_random_pattern_length_from_strength(scripted):
    frame = np.zeros((1, 4, 4), dtype=np.uint8)
    # int(8 * 0.25) + 1 = 3 random bytes
    rng = scripted(byte_values=[255, 0, 255])
    apply(PixelBuffer(frame, 4), BinaryXorOptions(strength=1.0 / 4), rng)
    scale = int(0.25 * 255)
    expected = np.resize(np.array([255, 0, 255]) * scale // 255, 16)
    np.testing.assert_array_equal(frame.reshape(-1), expected)


def test_horizontal_bands():
    frame = np.zeros((8, 3, 4), dtype=np.uint8)
    apply(
        PixelBuffer(frame, 3),
        BinaryXorOptions(strength=1.0, pattern=b"\x0f\xf0", mode=XorMode.HORIZONTAL_BANDS),
        None,
    )
    # band_height = 8 // 2 = 4
    np.testing.assert_array_equal(frame[:4, :, :3], 0x0F)
    np.testing.assert_array_equal(frame[4:, :, :3], 0xF0)
    np.testing.assert_array_equal(frame[:, :, 3], 0)


def test_vertical_bands():
    frame = np.zeros((2, 6, 4), dtype=np.uint8)
    apply(
        PixelBuffer(frame, 6),
        BinaryXorOptions(strength=1.0, pattern=b"\x01\x02\x03", mode=XorMode.VERTICAL_BANDS),
        None,
    )
    # band_width = 6 // 3 = 2
    np.testing.assert_array_equal(frame[0, :, 0], [1, 1, 2, 2, 3, 3])
    np.testing.assert_array_equal(frame[:, :, 3], 0)


def test_bands_wrap_when_pattern_longer_than_image():
    frame = np.zeros((2, 1, 4), dtype=np.uint8)
    apply(
        PixelBuffer(frame, 1),
        BinaryXorOptions(strength=1.0, pattern=bytes(range(1, 6)), mode=XorMode.HORIZONTAL_BANDS),
        None,
    )
    # band_height clamps to 1
    np.testing.assert_array_equal(frame[:, 0, 0], [1, 2])


def test_blocks_use_eight_by_eight_grid():
    frame = np.zeros((16, 16, 4), dtype=np.uint8)
    pattern = bytes(range(1, 65))
    apply(
        PixelBuffer(frame, 16),
        BinaryXorOptions(strength=1.0, pattern=pattern, mode=XorMode.BLOCKS),
        None,
    )
    # 2x2 pixel cells, value pattern[row*8 + col]
    assert frame[0, 0, 0] == 1
    assert frame[1, 1, 2] == 1
    assert frame[0, 2, 0] == 2
    assert frame[2, 0, 0] == 9
    assert frame[15, 15, 1] == 64
    np.testing.assert_array_equal(frame[:, :, 3], 0)


def test_spatial_modes_self_inverse(frame):
    original = frame.copy()
    for mode in (XorMode.HORIZONTAL_BANDS, XorMode.VERTICAL_BANDS, XorMode.BLOCKS):
        opts = BinaryXorOptions(strength=0.9, pattern=b"\x11\x22\x33", mode=mode)
        apply(PixelBuffer(frame, 64), opts, None)
        apply(PixelBuffer(frame, 64), opts, None)
    np.testing.assert_array_equal(frame, original)


def test_random_pattern_deterministic(frame):
    a, b = frame.copy(), frame.copy()
    opts = BinaryXorOptions(strength=0.6, mode=XorMode.BLOCKS)
    apply(PixelBuffer(a, 64), opts, RandomSource(21))
    apply(PixelBuffer(b, 64), opts, RandomSource(21))
    np.testing.assert_array_equal(a, b)


def test_invalid_mode_is_noop(frame, rng):
    original = frame.copy()
    apply(
        PixelBuffer(frame, 64),
        BinaryXorOptions(strength=1.0, pattern=b"\xff", mode=XorMode.INVALID),
        rng,
    )
    np.testing.assert_array_equal(frame, original)
