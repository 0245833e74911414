"""
Simulation constants.

Fixed values that should not be changed during a run.
"""

from __future__ import annotations

from typing import Tuple


class SimulationConstants:
    """
    Fixed simulation constants.

    Distances are in grid units (one cell, 100 m in the reference
    deployment). One tick is half an hour.
    """

    # Cell size in meters
    CELL_SIZE: int = 100

    # Time steps
    TICKS_PER_HOUR: int = 2
    TICKS_PER_DAY: int = 48
    MAX_TICKS: int = 15000  # 312.5 days

    # Bounded sampling
    MAX_SAMPLING_ATTEMPTS: int = 200

    # Land avoidance
    DEPTH_CHECK_INCREMENT: float = 0.1
    LAND_AVOIDANCE_ANGLES: Tuple[float, ...] = (40.0, 70.0, 120.0)
    LAND_AVOIDANCE_JITTER: float = 10.0
    MAX_BACKTRACK_STEPS: int = 20
    EMERGENCY_STEP: float = 1.0

    # Memory
    MAX_MEMORY_STRENGTH: float = 0.999
    MIN_MEMORY_DISTANCE: float = 1e-20
    FAR_MEMORY_DISTANCE: float = 1e20

    # Food
    FOOD_RESIDUAL: float = 0.01
    FOOD_GROWTH_SUBSTEPS: int = 48

    @staticmethod
    def grid_to_world(grid_coord: float, origin: float, cell_size: float = CELL_SIZE) -> float:
        """Convert a continuous grid coordinate to a world (UTM) coordinate."""
        return grid_coord * cell_size + origin

    @staticmethod
    def world_to_grid(world_coord: float, origin: float, cell_size: float = CELL_SIZE) -> float:
        """Convert a world (UTM) coordinate to a continuous grid coordinate."""
        return (world_coord - origin) / cell_size

    @staticmethod
    def ticks_to_days(ticks: int) -> float:
        """Elapsed simulated days for a tick count."""
        return ticks / SimulationConstants.TICKS_PER_DAY
