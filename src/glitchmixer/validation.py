"""Validation gates for pixel buffers and effect inputs.

Every gate returns a list of error strings (empty = valid). Callers decide
whether a non-empty list is fatal and wrap it in the matching error type.
"""

import numbers

BYTES_PER_PIXEL = 4


def validate_buffer(length: int, width: int, *, writable: bool = True) -> list[str]:
    """Validate an RGBA8 buffer against its declared pixel width.

    Checks:
    - Width is a positive integer
    - Length is a multiple of 4 (whole pixels)
    - Pixel count divides evenly into rows of `width`
    - Buffer can be mutated in place
    """
    errors: list[str] = []

    if not isinstance(width, numbers.Integral) or isinstance(width, bool) or width <= 0:
        errors.append(f"Width must be a positive integer, got {width!r}")
        return errors

    if length % BYTES_PER_PIXEL != 0:
        errors.append(
            f"Buffer length {length} is not a multiple of {BYTES_PER_PIXEL}"
        )
        return errors

    pixels = length // BYTES_PER_PIXEL
    if pixels % width != 0:
        errors.append(
            f"Buffer of {pixels} pixels does not divide into rows of width {width}"
        )

    if not writable:
        errors.append("Buffer is read-only; effects mutate in place")

    return errors


def validate_composite(length: int, width: int, height: int) -> list[str]:
    """Validate a buffer handed to the composite operation with both dimensions."""
    errors = validate_buffer(length, width)
    if errors:
        return errors
    if not isinstance(height, numbers.Integral) or height < 0:
        errors.append(f"Height must be a non-negative integer, got {height!r}")
    elif width * height * BYTES_PER_PIXEL != length:
        errors.append(
            f"Declared size {width}x{height} needs {width * height * BYTES_PER_PIXEL} "
            f"bytes, buffer has {length}"
        )
    return errors


def validate_secondary(length: int, width: int, height: int) -> list[str]:
    """Validate the secondary image of an ImageBlend."""
    errors: list[str] = []
    if width <= 0 or height <= 0:
        errors.append(f"Secondary image has empty dimensions {width}x{height}")
        return errors
    expected = width * height * BYTES_PER_PIXEL
    if length != expected:
        errors.append(
            f"Secondary data has {length} bytes, {width}x{height} needs {expected}"
        )
    return errors
