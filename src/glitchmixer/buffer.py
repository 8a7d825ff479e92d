"""PixelBuffer — a writable RGBA8 view over caller-owned memory.

Effects never copy the caller's pixels into a new frame; they mutate the
memory behind this view. Alignment helpers live here so every randomized
byte-range operation derives pixel-aligned offsets the same way.
"""

import numpy as np

from glitchmixer.errors import InvalidBufferLength
from glitchmixer.validation import BYTES_PER_PIXEL, validate_buffer


def _flat_view(data) -> tuple[np.ndarray | None, list[str]]:
    """Return a flat uint8 view sharing memory with `data`."""
    if isinstance(data, np.ndarray):
        if data.dtype != np.uint8:
            return None, [f"Buffer dtype must be uint8, got {data.dtype}"]
        if not data.flags.c_contiguous:
            return None, ["Buffer must be C-contiguous to be mutated in place"]
        return data.reshape(-1), []
    try:
        return np.frombuffer(data, dtype=np.uint8), []
    except (TypeError, ValueError) as e:
        return None, [f"Unsupported buffer type {type(data).__name__}: {e}"]


class PixelBuffer:
    """Row-major RGBA8 raster of a fixed pixel width.

    Accepts a bytearray, a writable memoryview or a C-contiguous uint8 ndarray.
    Raises InvalidBufferLength when the memory cannot be read as whole rows
    of `width` pixels or cannot be written.
    """

    def __init__(self, data, width: int):
        flat, errors = _flat_view(data)
        if flat is None:
            raise InvalidBufferLength(errors)
        errors = validate_buffer(flat.size, width, writable=flat.flags.writeable)
        if errors:
            raise InvalidBufferLength(errors)
        self.data = flat
        self.width = int(width)
        self.height = flat.size // BYTES_PER_PIXEL // self.width

    def __len__(self) -> int:
        return self.data.size

    @property
    def pixel_count(self) -> int:
        return self.data.size // BYTES_PER_PIXEL

    @property
    def pixels(self) -> np.ndarray:
        """(N, 4) view, one row per pixel."""
        return self.data.reshape(-1, BYTES_PER_PIXEL)

    @property
    def grid(self) -> np.ndarray:
        """(H, W, 4) view."""
        return self.data.reshape(self.height, self.width, BYTES_PER_PIXEL)


def align_down(n: int) -> int:
    """Round a byte count or offset down to a whole pixel."""
    return n - (n % BYTES_PER_PIXEL)


def random_aligned_offset(rng, upper: int) -> int | None:
    """Uniform pixel-aligned offset in [0, upper), or None if the window is < 1 pixel."""
    if upper < BYTES_PER_PIXEL:
        return None
    return align_down(rng.gen_range(0, upper))


def swap_ranges(
    data: np.ndarray, a: int, b: int, n: int, *, preserve_alpha: bool = False
) -> None:
    """Exchange data[a:a+n] and data[b:b+n] byte-for-byte in ascending order.

    Overlapping ranges produce the same result as swapping one byte pair at a
    time: the exchange is done in blocks no longer than the distance between
    the ranges, so every block's pairs are disjoint. With preserve_alpha,
    bytes at relative offset 3 mod 4 are left in place.
    """
    if a == b or n <= 0:
        return
    lo, hi = min(a, b), max(a, b)
    step = min(hi - lo, n)
    for off in range(0, n, step):
        idx = np.arange(off, min(off + step, n))
        if preserve_alpha:
            idx = idx[idx % BYTES_PER_PIXEL != 3]
        tmp = data[lo + idx]
        data[lo + idx] = data[hi + idx]
        data[hi + idx] = tmp
