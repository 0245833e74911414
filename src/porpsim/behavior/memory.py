"""
Spatial memory of visited positions.

Each porpoise remembers its recent positions together with the food found
there. Two memories decay with the age of a record:

- Reference memory: how well the food value of a past position is
  remembered. Drives attraction towards productive places.
- Working memory: how recently a position was visited (and depleted).
  Drives deterrence from just-visited places and weights the expected
  value of future food.

Both follow a logistic decay from 0.999 at age 0:
    M(age) = M(age-1) - rate * (1 - M(age-1)) * M(age-1)

Records are kept most-recent-first in one bounded sequence, so position,
stored utility and both strengths always share the same age index.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional, Tuple

from porpsim.parameters.constants import SimulationConstants

MAX_MEMORY_STRENGTH = SimulationConstants.MAX_MEMORY_STRENGTH


@dataclass
class MemoryRecord:
    """Memory of one past position."""
    x: float
    y: float
    stored_utility: float                     # Food level found at the position
    ref_strength: float = MAX_MEMORY_STRENGTH
    work_strength: float = MAX_MEMORY_STRENGTH


def logistic_decay(strength: float, rate: float) -> float:
    """One step of logistic memory decay."""
    return strength - rate * (1.0 - strength) * strength


def wrap_displacement(
    dx: float,
    dy: float,
    width: Optional[float] = None,
    height: Optional[float] = None
) -> Tuple[float, float]:
    """
    Shortest displacement on a torus.

    Offsets larger than half the grid extent are moved across the border.
    A None extent means that axis does not wrap.
    """
    if width is not None:
        if dx > width / 2:
            dx -= width
        elif dx < -width / 2:
            dx += width
    if height is not None:
        if dy > height / 2:
            dy -= height
        elif dy < -height / 2:
            dy += height
    return dx, dy


class SpatialMemory:
    """
    Reference and working memory of one porpoise.

    Index 0 is the most recent position ("here", age 0).
    """

    def __init__(
        self,
        memory_max: int = 120,
        ref_mem_decay: float = 0.10,
        work_mem_decay: float = 0.20,
        extent: Optional[Tuple[float, float]] = None
    ):
        """
        Initialize memory.

        Args:
            memory_max: Maximum number of remembered positions
            ref_mem_decay: Reference memory decay rate (r_r)
            work_mem_decay: Working memory decay rate (r_w)
            extent: (width, height) of a toroidal grid, None when bounded
        """
        if memory_max < 1:
            raise ValueError("memory_max must be at least 1")
        self.memory_max = memory_max
        self.ref_mem_decay = ref_mem_decay
        self.work_mem_decay = work_mem_decay
        self.extent = extent

        self._records: Deque[MemoryRecord] = deque(maxlen=memory_max)
        self.work_mem_updated = True

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MemoryRecord]:
        return iter(self._records)

    def __getitem__(self, age: int) -> MemoryRecord:
        return self._records[age]

    @property
    def records(self) -> List[MemoryRecord]:
        """Snapshot of the records, most recent first."""
        return list(self._records)

    @property
    def positions(self) -> List[Tuple[float, float]]:
        """Remembered positions, most recent first."""
        return [(r.x, r.y) for r in self._records]

    def push(self, x: float, y: float, utility: float) -> None:
        """
        Remember the current position and the food found there.

        Existing records age by one step: their reference strength decays
        once. A pending working-memory decay from the previous tick is
        applied first so both strengths stay aligned with age.
        """
        if not self.work_mem_updated:
            self.update_working_memory()

        for record in self._records:
            record.ref_strength = logistic_decay(record.ref_strength, self.ref_mem_decay)

        if utility is None or math.isnan(utility):
            utility = 0.0

        # deque(maxlen) drops the oldest record
        self._records.appendleft(MemoryRecord(x=x, y=y, stored_utility=utility))
        self.work_mem_updated = False

    def update_working_memory(self) -> None:
        """Decay working memory of all past positions, at most once per tick."""
        if self.work_mem_updated:
            return
        for age, record in enumerate(self._records):
            if age == 0:
                continue
            record.work_strength = logistic_decay(record.work_strength, self.work_mem_decay)
        self.work_mem_updated = True

    def expected_food_value(self) -> float:
        """
        Expected value of future food.

        Sum over ages of working memory strength times stored utility, a
        decayed running estimate of recent foraging success.
        """
        self.update_working_memory()
        return sum(r.work_strength * r.stored_utility for r in self._records)

    def _unit_vectors(self, x: float, y: float) -> Iterator[Tuple[MemoryRecord, float, float, float]]:
        """Yield (record, unit_x, unit_y, distance) for records of age >= 1."""
        width, height = self.extent if self.extent is not None else (None, None)
        for age, record in enumerate(self._records):
            if age == 0:
                continue
            dx, dy = wrap_displacement(record.x - x, record.y - y, width, height)
            dist = math.hypot(dx, dy)
            if dist < SimulationConstants.MIN_MEMORY_DISTANCE:
                dist = SimulationConstants.FAR_MEMORY_DISTANCE
            yield record, dx / dist, dy / dist, dist

    def attraction_vector(self, x: float, y: float, weight: float = 1.0) -> Tuple[float, float]:
        """
        Attraction towards remembered food.

        Each past position pulls with utility * reference strength / distance
        along the unit vector pointing at it.

        Args:
            x, y: Current position
            weight: Reference memory weight (B)
        """
        ax = 0.0
        ay = 0.0
        for record, ux, uy, dist in self._unit_vectors(x, y):
            pull = record.stored_utility * record.ref_strength / dist
            ax += pull * ux
            ay += pull * uy
        return weight * ax, weight * ay

    def deterrence_vector(self, x: float, y: float, inertia_const: float) -> Tuple[float, float]:
        """
        Deterrence from recently visited positions.

        Sum of inertia_const * working strength * unit vector towards each
        past position; it is subtracted from the attraction vector.
        """
        self.update_working_memory()
        dx_sum = 0.0
        dy_sum = 0.0
        for record, ux, uy, _ in self._unit_vectors(x, y):
            dx_sum += inertia_const * record.work_strength * ux
            dy_sum += inertia_const * record.work_strength * uy
        return dx_sum, dy_sum

    def memory_vector(
        self,
        x: float,
        y: float,
        weight: float,
        inertia_const: float
    ) -> Tuple[float, float]:
        """Attraction minus deterrence at the given position."""
        ax, ay = self.attraction_vector(x, y, weight)
        deter_x, deter_y = self.deterrence_vector(x, y, inertia_const)
        return ax - deter_x, ay - deter_y

    def clear(self) -> None:
        """Forget all positions."""
        self._records.clear()
        self.work_mem_updated = True
