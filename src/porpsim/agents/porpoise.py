"""
Porpoise agent implementation.

Each tick a porpoise runs through a fixed sequence:

    GenerateStep -> ValidateLand -> ApplyMemoryBlend -> PostValidate
    -> Commit -> UpdateFood -> UpdateMemory

The memory blend only runs in memory-augmented mode.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Tuple

from porpsim.agents.base import Agent
from porpsim.behavior.memory import SpatialMemory
from porpsim.movement.base import MovementMode
from porpsim.movement.land_avoidance import AvoidanceStage, NavigationError
from porpsim.parameters.constants import SimulationConstants

if TYPE_CHECKING:
    from porpsim.landscape.cell_data import CellData
    from porpsim.landscape.food import FoodField
    from porpsim.movement.land_avoidance import LandAvoidance
    from porpsim.movement.step_generator import StepGenerator
    from porpsim.parameters.simulation_params import SimulationParameters

logger = logging.getLogger("porpsim.agents.porpoise")

# Priors for the first correlated step
INITIAL_PREV_LOG_MOV = 0.8
INITIAL_PREV_ANGLE = 10.0


@dataclass
class StepContext:
    """
    Shared run state a porpoise needs to take one step.

    Owned by the Simulation and passed explicitly every tick.
    """
    landscape: CellData
    params: SimulationParameters
    generator: StepGenerator
    avoidance: LandAvoidance
    food: Optional[FoodField] = None
    tick: int = 0


@dataclass
class Porpoise(Agent):
    """
    Harbour porpoise moving on the landscape grid.
    """

    # === Identity (inherited from Agent: id, x, y, heading) ===
    population: str = "sim"             # Population tag
    is_female: bool = True
    length: float = 150.0               # Body length (cm)
    weight: float = 50.0                # Body mass (kg)
    mode: MovementMode = MovementMode.MEMORY

    # === Movement state ===
    prev_log_mov: float = INITIAL_PREV_LOG_MOV   # Previous log10(step length)
    pres_log_mov: float = 0.0
    prev_angle: float = INITIAL_PREV_ANGLE       # Previous turning angle
    pres_angle: float = 0.0
    last_step_length: float = 0.0

    # === Memory ===
    memory: SpatialMemory = field(default_factory=SpatialMemory)
    vt: Tuple[float, float] = (0.0, 0.0)         # Memory vector of the last tick
    ve_total: float = 0.0                        # Expected future food value

    # === State ===
    alive: bool = True
    food_eaten: float = 0.0
    last_avoidance: AvoidanceStage = AvoidanceStage.ACCEPTED
    avoidance_counts: Counter = field(default_factory=Counter)
    sampling_fallbacks: int = 0

    @classmethod
    def create(
        cls,
        id: int,
        x: float,
        y: float,
        heading: float,
        params: SimulationParameters,
        landscape: CellData,
        food: Optional[FoodField] = None,
        **kwargs
    ) -> Porpoise:
        """
        Create a porpoise at a water position with an initialised memory.

        Raises:
            ValueError: If the position is not in water
        """
        if not landscape.is_water(x, y):
            raise ValueError(f"Porpoise {id} cannot start on land at ({x:.2f}, {y:.2f})")

        extent = (landscape.width, landscape.height) if landscape.wrap else None
        memory = SpatialMemory(
            memory_max=params.memory_max,
            ref_mem_decay=params.r_r,
            work_mem_decay=params.r_w,
            extent=extent,
        )
        porpoise = cls(
            id=id,
            x=x,
            y=y,
            heading=Agent.normalize_heading(heading),
            mode=params.mode,
            memory=memory,
            **kwargs
        )
        porpoise.memory.push(x, y, food.level(x, y) if food is not None else 0.0)
        return porpoise

    def step(self, ctx: StepContext) -> None:
        """
        Execute one simulation step (30 minutes).

        Raises:
            NavigationError: If the porpoise ends on land and cannot recover
        """
        if not self.alive:
            return

        if len(self.memory) > 0:
            prev_x, prev_y = self.memory[0].x, self.memory[0].y
        else:
            prev_x, prev_y = self.x, self.y

        # GenerateStep
        proposal = ctx.generator.propose(self.prev_angle, self.prev_log_mov)
        if proposal.fell_back:
            self.sampling_fallbacks += 1
        self.pres_angle = proposal.turn_angle
        self.pres_log_mov = proposal.log_mov
        step_length = proposal.step_length
        self.turn_right(self.pres_angle)

        # ValidateLand
        outcome = ctx.avoidance.avoid(self, step_length, self.memory.positions)
        self.pres_angle += outcome.turn
        stage = outcome.stage

        # ApplyMemoryBlend
        if self.mode.uses_memory:
            self._apply_memory_blend(ctx.params, step_length)

        # PostValidate
        if ctx.avoidance.emergency_redirect(self, step_length):
            step_length = SimulationConstants.EMERGENCY_STEP
            stage = AvoidanceStage.EMERGENCY

        # Commit
        if not self._commit(ctx.landscape, step_length, prev_x, prev_y, ctx.tick):
            stage = AvoidanceStage.ROLLBACK
            step_length = 0.0

        # UpdateFood
        if ctx.food is not None:
            self.food_eaten += ctx.food.eat(prev_x, prev_y)

        # UpdateMemory
        utility = ctx.food.level(self.x, self.y) if ctx.food is not None else 0.0
        self.memory.push(self.x, self.y, utility)

        self.last_avoidance = stage
        self.avoidance_counts[stage] += 1
        self.last_step_length = step_length
        self.prev_angle = Agent.subtract_headings(self.pres_angle, 0.0)
        self.prev_log_mov = self.pres_log_mov

    def _apply_memory_blend(self, params: SimulationParameters, step_length: float) -> None:
        """
        Turn towards the resultant of the CRW step and the memory vector.

        The CRW contribution is k + |step| * VE when the expected food value
        is used, otherwise the plain step length.
        """
        self.vt = self.memory.memory_vector(
            self.x, self.y, params.ref_mem_weight, params.inertia_const
        )

        if params.use_exp_food_val:
            self.ve_total = self.memory.expected_food_value()
            crw_contrib = params.inertia_const + step_length * self.ve_total
        else:
            crw_contrib = step_length

        total_dx = self.get_dx() * crw_contrib + self.vt[0]
        total_dy = self.get_dy() * crw_contrib + self.vt[1]
        self.face_vector(total_dx, total_dy)

    def _commit(
        self,
        landscape: CellData,
        step_length: float,
        prev_x: float,
        prev_y: float,
        tick: int
    ) -> bool:
        """
        Move forward and make sure the porpoise ends in water.

        Returns:
            False if the move was rolled back to the previous position
        """
        self.forward(step_length)
        self.x, self.y = landscape.wrap_position(self.x, self.y)

        if landscape.is_water(self.x, self.y):
            return True

        logger.warning(
            "Porpoise %s landed on land at (%.2f, %.2f) in tick %d, rolling back",
            self.id, self.x, self.y, tick
        )
        land_x, land_y = self.x, self.y
        self.set_position(prev_x, prev_y)
        if not landscape.is_water(self.x, self.y):
            self.alive = False
            logger.error("Porpoise %s stranded at (%.2f, %.2f) in tick %d", self.id, land_x, land_y, tick)
            raise NavigationError(self.id, tick, land_x, land_y)
        return False

    @property
    def sex(self) -> str:
        return "F" if self.is_female else "M"
