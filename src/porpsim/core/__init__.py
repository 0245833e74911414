"""Core simulation engine module."""

from porpsim.core.simulation import Simulation, SimulationState
from porpsim.core.random_source import RandomSource, GeneratedRandomSource, ReplayedRandomSource
from porpsim.core.output_writer import TrackRecord, TrackWriter, tracks_to_dataframe

__all__ = [
    "Simulation",
    "SimulationState",
    "RandomSource",
    "GeneratedRandomSource",
    "ReplayedRandomSource",
    "TrackRecord",
    "TrackWriter",
    "tracks_to_dataframe",
]
