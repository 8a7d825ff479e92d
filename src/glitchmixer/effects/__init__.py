"""Glitch effects operating in place on RGBA8 pixel buffers."""
