from __future__ import annotations

import math
import random


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        if high <= low:
            return low
        return low + (high - low) * self._random.random()

    def next_angle(self) -> float:
        # random() is in [0, 1), so the angle stays in [0, 2*pi).
        return self._random.random() * 2.0 * math.pi
