"""
Food field dynamics.

Food lives in the cells with a positive food probability. Each such cell
starts at the food ceiling (max_food). A porpoise eats all the food in the
cell it just left, leaving a small residual, and food grows back
logistically on a periodic cadence.
"""

from __future__ import annotations

import logging

import numpy as np
from typing import TYPE_CHECKING

from porpsim.parameters.constants import SimulationConstants

if TYPE_CHECKING:
    from porpsim.landscape.cell_data import CellData

logger = logging.getLogger("porpsim.landscape.food")


class FoodField:
    """
    Per-cell food levels layered on a CellData grid.

    Levels stay within [0, max_food]. Cells without food probability stay
    at zero and are never grown.
    """

    def __init__(self, cell_data: CellData, max_food: float = 1.0, growth_rate: float = 0.1):
        """
        Initialize food levels from the food probability layer.

        Args:
            cell_data: Landscape providing food probabilities
            max_food: Food ceiling per cell (U)
            growth_rate: Logistic growth rate per half-hour (r_u)
        """
        if max_food <= 0:
            raise ValueError("max_food must be positive")
        if growth_rate < 0:
            raise ValueError("growth_rate must be non-negative")

        self.cell_data = cell_data
        self.max_food = max_food
        self.growth_rate = growth_rate

        food_prob = np.nan_to_num(cell_data.food_prob, nan=0.0)
        self._food_cells = food_prob > 0
        self._level = np.where(self._food_cells, max_food, 0.0).astype(float)

    @property
    def levels(self) -> np.ndarray:
        """Current food levels (read-only view)."""
        view = self._level.view()
        view.flags.writeable = False
        return view

    @property
    def food_cells(self) -> np.ndarray:
        """Boolean mask of cells that can hold food."""
        return self._food_cells.copy()

    def level(self, x: float, y: float) -> float:
        """Food level of the cell at position (0 outside a bounded grid)."""
        idx = self.cell_data.cell_index(x, y)
        if idx is None:
            return 0.0
        value = float(self._level[idx])
        return value if not np.isnan(value) else 0.0

    def set_level(self, x: float, y: float, value: float) -> None:
        """Set the food level of a food cell, clipped to [0, max_food]."""
        idx = self.cell_data.cell_index(x, y)
        if idx is None or not self._food_cells[idx]:
            return
        self._level[idx] = min(max(value, 0.0), self.max_food)

    def eat(self, x: float, y: float) -> float:
        """
        Eat all food in the cell at position.

        The cell keeps a residual of 0.01 so that it can grow back.

        Returns:
            Amount of food eaten
        """
        idx = self.cell_data.cell_index(x, y)
        if idx is None:
            return 0.0

        current = self._level[idx]
        if not current > 0:
            return 0.0

        residual = SimulationConstants.FOOD_RESIDUAL
        self._level[idx] = residual
        return float(max(current - residual, 0.0))

    def grow(self) -> None:
        """
        Grow food logistically towards max_food in every food cell.

        Applied as 48 compounded half-hour steps. Levels below 0.01 are
        raised to 0.01 first, since logistic growth cannot leave zero.
        """
        if not np.any(self._food_cells):
            return

        level = self._level[self._food_cells]
        level = np.maximum(np.nan_to_num(level, nan=0.0), SimulationConstants.FOOD_RESIDUAL)

        r = self.growth_rate
        u = self.max_food
        for _ in range(SimulationConstants.FOOD_GROWTH_SUBSTEPS):
            level = np.minimum(level + r * level * (1.0 - level / u), u)

        self._level[self._food_cells] = level

    def total(self) -> float:
        """Total food in the landscape."""
        return float(np.nansum(self._level))

    def depleted_fraction(self, threshold: float = 0.5) -> float:
        """Fraction of food cells holding less than threshold * max_food."""
        n_cells = int(np.count_nonzero(self._food_cells))
        if n_cells == 0:
            return 0.0
        depleted = self._level[self._food_cells] < threshold * self.max_food
        return float(np.count_nonzero(depleted)) / n_cells
