"""
Seedable randomness for defect draws and completion jitter.

NO module-level random.random() in the line logic: every draw goes through a RandomSource
so a run can be replayed from its seed.
"""
import random
from typing import Optional


class RandomSource:
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def defect_draw(self) -> float:
        """Uniform value in [0, 100), compared against a worker's defect rate (percent)."""
        return self._rng.random() * 100.0

    def jitter(self, band: float) -> float:
        """Multiplier drawn from [1 - band, 1 + band]."""
        return self._rng.uniform(1.0 - band, 1.0 + band)
