# rewardarena/server/gradient_cache.py
"""LRU cache for gradient overlays, keyed by their full input tuple."""

from __future__ import annotations

import logging
from collections import OrderedDict

import numpy as np

from rewardarena.config import Regime, RegimeParams
from rewardarena.env.gradient import generate_gradient_field

from .config import settings

logger = logging.getLogger("rewardarena.server")

GradientKey = tuple[int, int, tuple[float, float], str, tuple[float, ...]]


class GradientCache:
    """LRU cache for rendered gradient fields."""

    def __init__(self, max_size: int | None = None) -> None:
        self._cache: OrderedDict[GradientKey, np.ndarray] = OrderedDict()
        self._max_size = max_size or settings.GRADIENT_CACHE_MAX
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(
        width: int, height: int, goal: tuple[float, float], regime: Regime | None, params: RegimeParams
    ) -> GradientKey:
        label = regime.value if regime is not None else "unknown"
        return (int(width), int(height), (float(goal[0]), float(goal[1])), label, params.cache_key())

    def get_or_build(
        self,
        width: int,
        height: int,
        goal: tuple[float, float],
        regime: Regime | None,
        params: RegimeParams,
    ) -> np.ndarray:
        """Get cached overlay or render it."""
        key = self.make_key(width, height, goal, regime, params)
        if key in self._cache:
            self._cache.move_to_end(key)
            self.hits += 1
            return self._cache[key]

        self.misses += 1
        buffer = generate_gradient_field(width, height, goal, regime, params)
        buffer.setflags(write=False)
        self._cache[key] = buffer
        while len(self._cache) > self._max_size:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug(f"Evicted gradient {evicted[3]} {evicted[0]}x{evicted[1]} from cache")
        return buffer

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


# Global instance
gradient_cache = GradientCache()
