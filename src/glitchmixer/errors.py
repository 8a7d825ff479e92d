"""Structured failures surfaced to callers of the glitch engine."""


class GlitchError(Exception):
    """Base class for all glitchmixer errors."""


class InvalidBufferLength(GlitchError):
    """Buffer cannot be interpreted as an RGBA8 raster of the declared width."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class InvalidSecondaryImage(GlitchError):
    """ImageBlend secondary buffer does not match its declared dimensions."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class InvalidOptions(GlitchError):
    """Composite configuration payload has the wrong structure."""
