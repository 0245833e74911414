"""
porpsim - harbour porpoise movement with spatial memory

Agent-based simulation of porpoise movement on a bathymetry grid:
correlated random walk steps, land avoidance, and a decaying spatial
memory of past foraging success that pulls animals back to good patches.
"""

__version__ = "0.1.0"

from porpsim.core.simulation import Simulation
from porpsim.parameters.simulation_params import SimulationParameters, ConfigurationError
from porpsim.parameters.constants import SimulationConstants
from porpsim.landscape.cell_data import (
    CellData,
    create_homogeneous_landscape,
    create_landscape_from_arrays,
)
from porpsim.movement.base import MovementMode
from porpsim.movement.land_avoidance import NavigationError

__all__ = [
    "Simulation",
    "SimulationParameters",
    "ConfigurationError",
    "SimulationConstants",
    "CellData",
    "create_homogeneous_landscape",
    "create_landscape_from_arrays",
    "MovementMode",
    "NavigationError",
]
