"""
Simulation parameters configuration.

All configurable model parameters with their defaults and validation.
Defaults follow the fine-scale porpoise movement model calibrated on
dead-reckoning tracks (100 m cells, half-hour steps).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional, Union

from porpsim.parameters.constants import SimulationConstants


class ConfigurationError(ValueError):
    """Raised for invalid parameters, unknown movement modes or landscapes."""


@dataclass
class SimulationParameters:
    """
    All simulation parameters with their defaults.
    """

    # === Simulation Setup ===
    random_seed: Optional[int] = None
    porpoise_count: int = 1
    movement_mode: Union[str, int] = "memory"  # markov | crw | memory (or 0 | 1 | 2)
    sim_ticks: int = SimulationConstants.MAX_TICKS   # 312.5 days of half-hour steps
    landscape: str = "Homogeneous"
    data_dir: Optional[str] = None     # Folder holding landscape sub-folders
    population_tag: str = "sim"

    # === Memory ===
    r_r: float = 0.10                  # Reference memory decay rate
    r_w: float = 0.20                  # Working memory decay rate
    memory_max: int = 120              # Max number of remembered positions
    ref_mem_weight: float = 1.0        # B: weight of the reference memory vector
    inertia_const: float = 0.001       # k: tendency to keep moving with CRW
    use_exp_food_val: bool = True      # Scale CRW contribution by expected food

    # === Food ===
    r_u: float = 0.10                  # Food growth rate
    max_food: float = 1.0              # U: food ceiling per cell
    food_update_interval: int = 1      # Days between food growth events

    # === Correlated random walk ===
    corr_angle: float = 0.26           # Autocorrelation of turning angle
    corr_logmov: float = 0.94          # Autocorrelation of log10 step length
    angle_bias: float = 24.0           # Added to |prev_angle| before correlation
    angle_sd: float = 38.0             # SD of turning angle draw
    angle_incr_mean: float = 96.0      # Mean of speed-dependent angle increase
    angle_incr_sd: float = 28.0
    m: float = 5.495409                # 10^0.74 - step length where angle increase vanishes
    logmov_mean: float = 0.42          # Random component of log10 step length
    logmov_sd: float = 0.48
    max_log_mov: float = 1.18          # log10 of max distance per half hour (grid units)

    # === Markov movement ===
    markov_angle_sd: float = 40.0
    markov_angle_threshold: float = 60.0   # |angle| above which angles are inflated
    markov_logmov_mean: float = 0.5
    markov_logmov_sd: float = 0.25

    # === Environment ===
    min_depth: float = 1.0             # Minimum water depth (m) when avoiding land

    # === Landscape ===
    wrap_border_homo: bool = True      # Wrap border for homogeneous landscape
    world_width: int = 400             # Grid width (for homogeneous)
    world_height: int = 400            # Grid height (for homogeneous)
    homogeneous_depth: float = 20.0
    homogeneous_food_prob: float = 0.5

    def __post_init__(self):
        """Validate parameters."""
        self._validate()

    def _validate(self) -> None:
        """Validate parameter ranges."""
        from porpsim.movement.base import MovementMode

        # Raises ConfigurationError for unknown modes
        MovementMode.from_name(self.movement_mode)

        if self.porpoise_count < 1:
            raise ConfigurationError("porpoise_count must be at least 1")
        if self.sim_ticks < 1:
            raise ConfigurationError("sim_ticks must be at least 1")
        if self.memory_max < 1:
            raise ConfigurationError("memory_max must be at least 1")
        for name in ("r_r", "r_w"):
            value = getattr(self, name)
            if not 0 < value < 1:
                raise ConfigurationError(f"{name} must be between 0 and 1 (exclusive)")
        if self.r_u < 0:
            raise ConfigurationError("r_u must be non-negative")
        if self.max_food <= 0:
            raise ConfigurationError("max_food must be positive")
        if self.food_update_interval < 1:
            raise ConfigurationError("food_update_interval must be at least 1 day")
        if self.m <= 0:
            raise ConfigurationError("m must be positive")
        if self.world_width < 3 or self.world_height < 3:
            raise ConfigurationError("world must be at least 3x3 cells")

    @property
    def mode(self):
        """Movement mode as a MovementMode member."""
        from porpsim.movement.base import MovementMode
        return MovementMode.from_name(self.movement_mode)

    @property
    def is_homogeneous(self) -> bool:
        """Check if using homogeneous landscape."""
        return self.landscape.lower() == "homogeneous"

    @classmethod
    def from_dict(cls, params: dict) -> SimulationParameters:
        """Create parameters from dictionary, ignoring unknown keys."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in params.items() if k in names})

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> SimulationParameters:
        """Load parameters from a JSON file holding a flat object."""
        with open(path, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigurationError(f"Parameter file {path} must contain a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        """Convert parameters to dictionary."""
        return asdict(self)
