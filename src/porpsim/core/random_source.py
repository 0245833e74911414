"""
Random number generation for the simulation.

All stochastic draws in a run come from one RandomSource so that tracks
are reproducible from a seed, or replayable from recorded values.
"""

from __future__ import annotations

import numpy as np
from typing import Optional, Sequence
from abc import ABC, abstractmethod


class RandomSource(ABC):
    """Abstract base class for random number sources."""

    @abstractmethod
    def next_uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        """Get next uniform random number in [low, high)."""
        pass

    @abstractmethod
    def next_normal(self, mean: float = 0.0, std: float = 1.0) -> float:
        """Get next normal random number."""
        pass

    @abstractmethod
    def next_int(self, low: int, high: int) -> int:
        """Get next random integer in [low, high)."""
        pass


class GeneratedRandomSource(RandomSource):
    """
    Random source using a seeded NumPy Generator.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize with optional seed.

        Args:
            seed: Random seed for reproducibility
        """
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def next_uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        return float(self._rng.uniform(low, high))

    def next_normal(self, mean: float = 0.0, std: float = 1.0) -> float:
        return float(self._rng.normal(mean, std))

    def next_int(self, low: int, high: int) -> int:
        return int(self._rng.integers(low, high))


class ReplayedRandomSource(RandomSource):
    """
    Random source that replays recorded random values.

    Uniform draws replay values in [0, 1) scaled to [low, high); normal
    draws return the recorded value unchanged. Used in tests to force
    specific branches, such as sampling fallbacks.
    """

    def __init__(self, values: Sequence[float], cycle: bool = False):
        """
        Initialize with list of values to replay.

        Args:
            values: Pre-recorded random values
            cycle: Restart from the first value instead of failing when exhausted
        """
        self._values = list(values)
        self._index = 0
        self._cycle = cycle

    def _next_value(self) -> float:
        """Get next value from replay list."""
        if self._index >= len(self._values):
            if not self._cycle or not self._values:
                raise RuntimeError("Ran out of replayed random values")
            self._index = 0
        value = self._values[self._index]
        self._index += 1
        return value

    def next_uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        value = self._next_value()
        return low + value * (high - low)

    def next_normal(self, mean: float = 0.0, std: float = 1.0) -> float:
        return self._next_value()

    def next_int(self, low: int, high: int) -> int:
        return int(self._next_value())

    @property
    def consumed(self) -> int:
        """Number of values drawn since the last reset."""
        return self._index

    def reset(self) -> None:
        """Reset replay index to start."""
        self._index = 0
