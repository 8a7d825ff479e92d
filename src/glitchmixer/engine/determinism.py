"""Seeded randomness for effect reproducibility."""

import hashlib

import numpy as np


def derive_seed(base_seed: int, effect_id: str, call_index: int = 0) -> int:
    """Derive a deterministic seed from context. Same inputs = same output, always."""
    key = f"{base_seed}:{effect_id}:{call_index}"
    return int(hashlib.sha256(key.encode()).hexdigest()[:16], 16)


def make_rng(seed: int | None) -> np.random.Generator:
    """Create an RNG; None seeds from OS entropy."""
    return np.random.default_rng(seed)


class RandomSource:
    """Sequential random stream consumed by every randomized effect.

    Effects only use the four methods below, so tests can substitute any
    object exposing them (a scripted source, a differently seeded one).
    Not safe to share between concurrent callers.
    """

    def __init__(self, seed: int | None = None, *, generator: np.random.Generator | None = None):
        self.seed = seed
        self._rng = generator if generator is not None else make_rng(seed)

    def gen_range(self, low: int, high: int, size=None):
        """Uniform integer(s) in [low, high). Requires low < high."""
        if size is None:
            return int(self._rng.integers(low, high))
        return self._rng.integers(low, high, size=size)

    def gen_bool(self, p: float, size=None):
        """True with probability p."""
        if size is None:
            return bool(self._rng.random() < p)
        return self._rng.random(size) < p

    def gen_bytes(self, n: int) -> np.ndarray:
        """n uniformly random bytes as uint8."""
        return self._rng.integers(0, 256, size=n, dtype=np.uint8)

    def permutation(self, n: int) -> np.ndarray:
        """Uniform permutation of range(n) (Fisher-Yates)."""
        return self._rng.permutation(n)
