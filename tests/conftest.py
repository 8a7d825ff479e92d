import numpy as np
import pytest

from glitchmixer.engine.determinism import RandomSource


class ScriptedRandom:
    """Random source that replays queued values, for exact-output effect tests."""

    def __init__(self, ranges=(), bools=(), permutations=(), byte_values=()):
        self.ranges = list(ranges)
        self.bools = list(bools)
        self.permutations = list(permutations)
        self.byte_values = list(byte_values)

    def gen_range(self, low, high, size=None):
        value = self.ranges.pop(0)
        arr = np.asarray(value)
        assert np.all((low <= arr) & (arr < high)), f"scripted {value} outside [{low}, {high})"
        return value

    def gen_bool(self, p, size=None):
        return self.bools.pop(0)

    def gen_bytes(self, n):
        values = np.asarray(self.byte_values[:n], dtype=np.uint8)
        del self.byte_values[:n]
        return values

    def permutation(self, n):
        order = np.asarray(self.permutations.pop(0))
        assert sorted(order.tolist()) == list(range(n))
        return order


@pytest.fixture
def scripted():
    """Factory for ScriptedRandom sources."""
    return ScriptedRandom


@pytest.fixture
def rng():
    return RandomSource(1234)


@pytest.fixture
def frame():
    """Deterministic 64x48 RGBA frame."""
    gen = np.random.default_rng(42)
    return gen.integers(0, 256, (48, 64, 4), dtype=np.uint8)
