"""
Main simulation controller for porpsim.

The Simulation owns everything a run shares between porpoises: the
landscape, the food field, the random source, the step generator and
the land avoidance engine. Porpoises receive these through a
StepContext every tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

import pandas as pd
from tqdm import tqdm

from porpsim.agents.porpoise import Porpoise, StepContext
from porpsim.config import DEFAULT_DATA_DIR
from porpsim.core.output_writer import TrackRecord, tracks_to_dataframe
from porpsim.core.random_source import GeneratedRandomSource, RandomSource
from porpsim.landscape.cell_data import CellData, create_homogeneous_landscape
from porpsim.landscape.food import FoodField
from porpsim.landscape.loader import BATHY_FILE, LandscapeLoader
from porpsim.movement.land_avoidance import LandAvoidance, NavigationError
from porpsim.movement.step_generator import create_step_generator
from porpsim.parameters.constants import SimulationConstants
from porpsim.parameters.simulation_params import ConfigurationError

if TYPE_CHECKING:
    from porpsim.core.output_writer import TrackWriter
    from porpsim.parameters.simulation_params import SimulationParameters

logger = logging.getLogger("porpsim.core.simulation")


@dataclass
class SimulationState:
    """Tracks the current state of the simulation."""

    tick: int = 0
    food_growth_events: int = 0
    aborted: bool = False

    @property
    def day(self) -> int:
        """Completed simulated days."""
        return self.tick // SimulationConstants.TICKS_PER_DAY

    @property
    def hour(self) -> int:
        """Current hour of day (0-23)."""
        half_hour = self.tick % SimulationConstants.TICKS_PER_DAY
        return half_hour // SimulationConstants.TICKS_PER_HOUR

    def advance_tick(self) -> None:
        """Advance simulation by one tick (30 minutes)."""
        self.tick += 1


class Simulation:
    """
    Main simulation controller.

    Orchestrates the run:
    - Landscape and food field setup
    - Porpoise creation on random water cells
    - Stepping porpoises in id order every tick
    - Periodic food growth
    - Track collection
    """

    def __init__(
        self,
        params: SimulationParameters,
        cell_data: Optional[CellData] = None,
        seed: Optional[int] = None,
        rng: Optional[RandomSource] = None,
        record_tracks: bool = True,
    ):
        """
        Initialize the simulation.

        Args:
            params: Simulation parameters configuration
            cell_data: Pre-loaded landscape data (optional)
            seed: Random seed, overrides params.random_seed
            rng: Random source to use instead of a seeded generator
            record_tracks: Keep a TrackRecord per porpoise per tick
        """
        self.params = params
        self.state = SimulationState()
        self.record_tracks = record_tracks

        self._seed = seed if seed is not None else params.random_seed
        self._rng = rng
        self._cell_data: Optional[CellData] = cell_data
        self._food: Optional[FoodField] = None
        self._porpoises: List[Porpoise] = []
        self._tracks: List[TrackRecord] = []
        self._context: Optional[StepContext] = None

        self._is_initialized = False

    def initialize(self) -> None:
        """
        Set up landscape, food, random source and porpoises.

        Raises:
            ConfigurationError: If the landscape cannot be resolved
        """
        if self._is_initialized:
            return

        if self._cell_data is None:
            self._cell_data = self._resolve_landscape()

        if self._rng is None:
            self._rng = GeneratedRandomSource(self._seed)

        self._food = FoodField(
            self._cell_data,
            max_food=self.params.max_food,
            growth_rate=self.params.r_u,
        )

        self._context = StepContext(
            landscape=self._cell_data,
            params=self.params,
            generator=create_step_generator(self.params.mode, self.params, self._rng),
            avoidance=LandAvoidance(self._cell_data, self.params, self._rng),
            food=self._food,
        )

        self._porpoises = [self._create_porpoise(i) for i in range(self.params.porpoise_count)]

        self._is_initialized = True
        logger.info(
            "Initialized %d porpoise(s) in %s mode on '%s' (%dx%d, seed=%s)",
            len(self._porpoises), self.params.mode.name.lower(),
            self._cell_data.landscape_name, self._cell_data.width, self._cell_data.height,
            self._seed
        )

    def _resolve_landscape(self) -> CellData:
        """Build the homogeneous landscape or load one from the data directory."""
        if self.params.is_homogeneous:
            return create_homogeneous_landscape(
                width=self.params.world_width,
                height=self.params.world_height,
                depth=self.params.homogeneous_depth,
                food_prob=self.params.homogeneous_food_prob,
                wrap=self.params.wrap_border_homo,
            )

        data_dir = self.params.data_dir or DEFAULT_DATA_DIR
        loader = LandscapeLoader(self.params.landscape, data_dir)
        if not loader.file_exists(BATHY_FILE):
            available = LandscapeLoader.list_landscapes(data_dir)
            raise ConfigurationError(
                f"Unknown landscape '{self.params.landscape}' in {data_dir} "
                f"(available: {', '.join(available) or 'none'})"
            )

        cell_data = CellData(self.params.landscape, data_dir)
        cell_data.load()
        return cell_data

    def _create_porpoise(self, porpoise_id: int) -> Porpoise:
        """Create a porpoise on a random cell deeper than min_depth."""
        try:
            x, y = self._cell_data.random_water_position(self._rng, self.params.min_depth)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        heading = self._rng.next_uniform(0.0, 360.0)
        is_female = self._rng.next_uniform() < 0.5
        return Porpoise.create(
            porpoise_id, x, y, heading,
            params=self.params,
            landscape=self._cell_data,
            food=self._food,
            population=self.params.population_tag,
            is_female=is_female,
        )

    @property
    def porpoises(self) -> List[Porpoise]:
        return self._porpoises

    @property
    def landscape(self) -> Optional[CellData]:
        return self._cell_data

    @property
    def food(self) -> Optional[FoodField]:
        return self._food

    @property
    def tracks(self) -> List[TrackRecord]:
        return self._tracks

    @property
    def sampling_fallbacks(self) -> int:
        """Capped sampling loops that used their fallback value, over all porpoises."""
        return sum(p.sampling_fallbacks for p in self._porpoises)

    @property
    def max_ticks(self) -> int:
        return self.params.sim_ticks

    @property
    def food_growth_interval(self) -> int:
        """Ticks between food growth events."""
        return self.params.food_update_interval * SimulationConstants.TICKS_PER_DAY

    def step(self) -> List[TrackRecord]:
        """
        Execute one simulation tick.

        Returns:
            Track records of this tick

        Raises:
            NavigationError: If a porpoise ends on land and cannot recover
        """
        if not self._is_initialized:
            self.initialize()

        ctx = self._context
        ctx.tick = self.state.tick
        for porpoise in sorted(self._porpoises, key=lambda p: p.id):
            porpoise.step(ctx)

        self.state.advance_tick()

        if self.state.tick % self.food_growth_interval == 0:
            self._grow_food()

        records = [
            TrackRecord.from_porpoise(p, self._cell_data, self.params, self.state.tick)
            for p in self._porpoises
        ]
        if self.record_tracks:
            self._tracks.extend(records)
        return records

    def _grow_food(self) -> None:
        self._food.grow()
        self.state.food_growth_events += 1
        logger.info(
            "Day %d: food regrown (total %.2f, %.0f%% of food cells depleted)",
            self.state.day, self._food.total(), 100 * self._food.depleted_fraction()
        )

    def run(
        self,
        max_ticks: Optional[int] = None,
        progress: bool = True,
        writer: Optional[TrackWriter] = None,
    ) -> None:
        """
        Run the simulation until the tick budget is used.

        Args:
            max_ticks: Ticks to run (params.sim_ticks if None)
            progress: Show a progress bar
            writer: Open TrackWriter receiving every tick's records

        Raises:
            NavigationError: Logged, the run is marked aborted and the error re-raised
        """
        if not self._is_initialized:
            self.initialize()

        ticks = max_ticks if max_ticks is not None else self.max_ticks
        logger.info("Running %d ticks (%.1f days)", ticks, SimulationConstants.ticks_to_days(ticks))

        iterator = range(ticks)
        if progress:
            iterator = tqdm(iterator, desc="Simulating", unit="tick")

        try:
            for _ in iterator:
                records = self.step()
                if writer is not None:
                    writer.write_many(records)
        except NavigationError as e:
            self.state.aborted = True
            logger.error("Run aborted at tick %d: %s", self.state.tick, e)
            raise
        finally:
            if progress:
                iterator.close()

        logger.info(
            "Run finished after %d ticks (%d sampling fallbacks)",
            self.state.tick, self.sampling_fallbacks
        )

    def tracks_dataframe(self) -> pd.DataFrame:
        """Collected tracks as a DataFrame."""
        return tracks_to_dataframe(self._tracks)
