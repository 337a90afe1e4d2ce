# MIT License © 2025 Motohiro Suzuki
"""
crypto/rng.py

Random sources for private-scalar generation.

One source per process, seeded once at startup and passed down explicitly.

Deterministic mode:
  env DHLINK_RNG_SEED (int) or LinkConfig.rng_seed
Then a seeded random.Random is used (test vectors / reproducible demos, NOT
secure). Otherwise draws come from the OS CSPRNG via `secrets`.
"""

from __future__ import annotations

import random
import secrets


class SystemRandomSource:
    name = "system"

    def __init__(self) -> None:
        self._r = secrets.SystemRandom()

    def random_int(self, low: int, high: int) -> int:
        if high < low:
            raise ValueError("empty range")
        return self._r.randint(low, high)


class SeededRandom:
    """NOT secure. Reproducible runs only."""
    name = "seeded"

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)
        self._r = random.Random(self.seed)

    def random_int(self, low: int, high: int) -> int:
        if high < low:
            raise ValueError("empty range")
        return self._r.randint(low, high)


def make_random_source(seed: int | None = None):
    if seed is None:
        return SystemRandomSource()
    return SeededRandom(seed)
