"""Pixel Sort effect — sorts runs of pixels along rows/columns by a value metric.

Uses a composite-key approach: segment membership is encoded into the sort
key so a single stable argsort per scan line handles all of its segments.
"""

import numpy as np

from glitchmixer.buffer import PixelBuffer
from glitchmixer.options import PixelSortOptions, SortKey

EFFECT_ID = "fx.pixel_sort"
EFFECT_NAME = "Pixel Sort"
EFFECT_CATEGORY = "glitch"
OPTIONS_KEY = "pixel_sort"
OPTIONS = PixelSortOptions

PARAMS: dict = {
    "intensity": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.5,
        "label": "Intensity",
        "curve": "linear",
        "unit": "%",
        "description": "Minimum run length (x100 pixels) a segment needs to be sorted",
    },
    "threshold": {
        "type": "float",
        "min": 0.0,
        "max": 1.0,
        "default": 0.5,
        "label": "Threshold",
        "curve": "linear",
        "unit": "%",
        "description": "Pixels brighter than this break a run",
    },
    "vertical": {
        "type": "bool",
        "default": False,
        "label": "Vertical",
    },
    "channel": {
        "type": "choice",
        "options": ["brightness", "red", "green", "blue"],
        "default": "brightness",
        "label": "Sort By",
    },
}


def sort_values(pixels: np.ndarray, key: SortKey) -> np.ndarray:
    """Metric per pixel for an (..., 4) array, as int (0-255)."""
    if key == SortKey.BRIGHTNESS:
        return pixels[..., :3].astype(np.uint16).sum(axis=-1) // 3
    return pixels[..., int(key)].astype(np.uint16)


def apply(buffer: PixelBuffer, options: PixelSortOptions, rng=None) -> None:
    """Sort pixels within below-threshold runs of every scan line. In place.

    Strategy (composite-key approach):
      1. Compute the metric for the whole frame (vectorized).
      2. Boundaries: metric > threshold, plus the last pixel of every line.
      3. Segment ID of a pixel = number of boundaries before it on its line.
      4. Keep non-boundary pixels whose segment is long enough.
      5. Per line: argsort (stable) segment_id * 256 + metric over kept
         pixels and scatter back. Boundary pixels never move.
    """
    if buffer.pixel_count == 0:
        return

    threshold = int(max(0.0, min(1.0, options.threshold)) * 255.0)
    min_segment = max(0, int(options.intensity * 100.0))

    grid = buffer.grid
    # Transposed view still writes through to the caller's memory
    work = grid.transpose(1, 0, 2) if options.vertical else grid
    lines, length = work.shape[:2]

    keys = sort_values(work, options.channel)

    boundary = keys > threshold
    boundary[:, -1] = True

    segment_ids = np.cumsum(boundary, axis=1) - boundary
    composite = segment_ids.astype(np.int64) * 256 + keys

    for line in range(lines):
        ids = segment_ids[line]
        inner = ~boundary[line]
        if not inner.any():
            continue
        counts = np.bincount(ids[inner], minlength=int(ids[-1]) + 1)
        kept = inner & (counts[ids] >= min_segment)
        indices = np.flatnonzero(kept)
        if indices.size < 2:
            continue
        order = np.argsort(composite[line, indices], kind="stable")
        work[line, indices] = work[line, indices[order]]
