"""Parameters configuration module."""

from porpsim.parameters.simulation_params import SimulationParameters, ConfigurationError
from porpsim.parameters.constants import SimulationConstants

__all__ = ["SimulationParameters", "SimulationConstants", "ConfigurationError"]
