"""Tests for the effect registry."""

import pytest

from glitchmixer.effects.registry import by_options_key, get, list_all
from glitchmixer.engine.pipeline import COMPOSITE_ORDER

pytestmark = pytest.mark.smoke

REQUIRED_META = {"id", "name", "category", "options_key", "params"}


def test_registry_lists_every_effect_in_composite_order():
    effects = list_all()
    assert [e["options_key"] for e in effects] == COMPOSITE_ORDER


def test_registry_entries_have_metadata():
    for effect in list_all():
        assert REQUIRED_META <= set(effect)
        assert effect["id"] == f"fx.{effect['options_key']}"


def test_get_returns_callable():
    entry = get("fx.invert")
    assert entry is not None
    assert callable(entry["fn"])
    assert entry["options_key"] == "invert"


def test_get_unknown_returns_none():
    assert get("fx.nonexistent") is None


def test_by_options_key():
    info = by_options_key("pixel_sort")
    assert info["id"] == "fx.pixel_sort"
    assert info["options_type"].__name__ == "PixelSortOptions"
    assert by_options_key("nope") is None


def test_numeric_param_defaults_within_range():
    bad = []
    for effect in list_all():
        for key, pdef in effect["params"].items():
            if pdef["type"] in ("float", "int"):
                if not pdef["min"] <= pdef["default"] <= pdef["max"]:
                    bad.append(f"{effect['id']}.{key}")
    assert bad == []


def test_choice_defaults_are_options():
    for effect in list_all():
        for key, pdef in effect["params"].items():
            if pdef["type"] == "choice":
                assert pdef["default"] in pdef["options"], f"{effect['id']}.{key}"
