"""
Land avoidance for porpoise movement.

A proposed step is accepted when every point along its path, sampled at
0.1 grid-unit increments, lies in water (depth > 0). Otherwise the
porpoise escalates through a fixed ladder, each stage tried at most once
per tick:

1. TURN_40 / TURN_70 / TURN_120: compare depth at distance d on both
   sides of the heading (turn angle jittered by 0-10 degrees); turn
   toward the deeper side if either side is at least min_depth deep.
2. BACKTRACK: face and jump back to previously visited positions until
   the water ahead is deep enough, using at most 20 history entries.

After the memory blend the controller calls emergency_redirect, which
faces the deepest neighboring cell when the final heading still crosses
land. If the committed cell is still land, the controller rolls back to
the start-of-tick position, and raises NavigationError when even that
fails.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Sequence, Tuple

from porpsim.agents.base import Agent
from porpsim.behavior.memory import wrap_displacement
from porpsim.parameters.constants import SimulationConstants

if TYPE_CHECKING:
    from porpsim.core.random_source import RandomSource
    from porpsim.landscape.cell_data import CellData
    from porpsim.parameters.simulation_params import SimulationParameters

logger = logging.getLogger("porpsim.movement.land_avoidance")


class AvoidanceStage(Enum):
    """Stage of the land avoidance ladder that produced the final step."""
    ACCEPTED = "accepted"       # Path clear, step unchanged
    TURN_40 = "turn_40"
    TURN_70 = "turn_70"
    TURN_120 = "turn_120"
    BACKTRACK = "backtrack"     # Jumped back along the position history
    EMERGENCY = "emergency"     # Faced deepest neighbor cell, 1-unit step
    ROLLBACK = "rollback"       # Landed on land, returned to previous position

    @classmethod
    def for_angle(cls, angle: float) -> "AvoidanceStage":
        return {40: cls.TURN_40, 70: cls.TURN_70, 120: cls.TURN_120}[int(angle)]

    @property
    def is_turn(self) -> bool:
        return self in (AvoidanceStage.TURN_40, AvoidanceStage.TURN_70, AvoidanceStage.TURN_120)


@dataclass(frozen=True)
class AvoidanceOutcome:
    """Result of one land avoidance call."""
    stage: AvoidanceStage
    turn: float = 0.0           # Heading change applied (degrees, clockwise)
    backtrack_steps: int = 0


class NavigationError(RuntimeError):
    """A porpoise ended on land with no way back to water."""

    def __init__(self, porpoise_id: int, tick: int, x: float, y: float):
        self.porpoise_id = porpoise_id
        self.tick = tick
        self.x = x
        self.y = y
        super().__init__(
            f"Porpoise {porpoise_id} stranded on land at ({x:.2f}, {y:.2f}) in tick {tick}"
        )


class LandAvoidance:
    """
    Land avoidance engine shared by all porpoises of a run.
    """

    def __init__(self, landscape: CellData, params: SimulationParameters, rng: RandomSource):
        self.landscape = landscape
        self.params = params
        self.rng = rng
        self.angles = SimulationConstants.LAND_AVOIDANCE_ANGLES
        self.jitter = SimulationConstants.LAND_AVOIDANCE_JITTER
        self.increment = SimulationConstants.DEPTH_CHECK_INCREMENT
        self.max_backtrack = SimulationConstants.MAX_BACKTRACK_STEPS

    def _displacement(self, agent: Agent, x: float, y: float) -> Tuple[float, float]:
        """Displacement from the agent to (x, y), wrap-corrected on a torus."""
        if self.landscape.wrap:
            return wrap_displacement(x - agent.x, y - agent.y, self.landscape.width, self.landscape.height)
        return x - agent.x, y - agent.y

    def enough_water_ahead(self, agent: Agent, distance: float) -> bool:
        """
        Check that the whole path of length distance along the heading is water.

        Depth is sampled at 0, 0.1, 0.2, ... and at distance itself.
        """
        n_samples = int(math.ceil(distance / self.increment))
        for k in range(n_samples + 1):
            d = min(k * self.increment, distance)
            # NaN compares False
            if not self.landscape.depth_ahead(agent.x, agent.y, agent.heading, d) > 0:
                return False
        return True

    def avoid(
        self,
        agent: Agent,
        distance: float,
        history: Sequence[Tuple[float, float]]
    ) -> AvoidanceOutcome:
        """
        Make sure the step ahead stays in water, escalating as needed.

        Args:
            agent: Moving agent; heading and possibly position are changed
            distance: Step length in grid units
            history: Past positions, most recent first (index 0 = here)

        Returns:
            AvoidanceOutcome describing the stage used
        """
        if self.enough_water_ahead(agent, distance):
            return AvoidanceOutcome(AvoidanceStage.ACCEPTED)

        min_depth = self.params.min_depth
        for angle in self.angles:
            turn = angle + self.rng.next_uniform(0.0, self.jitter)
            depth_right = self.landscape.depth_ahead(agent.x, agent.y, agent.heading, distance, turn)
            depth_left = self.landscape.depth_ahead(agent.x, agent.y, agent.heading, distance, -turn)
            right_ok = depth_right >= min_depth
            left_ok = depth_left >= min_depth

            if not (right_ok or left_ok):
                continue

            if right_ok and left_ok:
                signed_turn = turn if depth_right >= depth_left else -turn
            elif right_ok:
                signed_turn = turn
            else:
                signed_turn = -turn

            agent.turn_right(signed_turn)
            stage = AvoidanceStage.for_angle(angle)
            logger.debug("Porpoise %s avoided land with %s (%.1f deg)", agent.id, stage.value, signed_turn)
            return AvoidanceOutcome(stage, turn=signed_turn)

        return self._backtrack(agent, distance, history)

    def _backtrack(
        self,
        agent: Agent,
        distance: float,
        history: Sequence[Tuple[float, float]]
    ) -> AvoidanceOutcome:
        """Jump back along the position history until there is water ahead."""
        start_heading = agent.heading
        steps = 0
        for px, py in list(history)[1:]:
            if steps >= self.max_backtrack:
                break
            dx, dy = self._displacement(agent, px, py)
            agent.face_vector(dx, dy)
            agent.set_position(px, py)
            steps += 1
            if self.enough_water_ahead(agent, distance):
                break

        logger.debug("Porpoise %s backtracked %d positions", agent.id, steps)
        turn = Agent.subtract_headings(agent.heading, start_heading)
        return AvoidanceOutcome(AvoidanceStage.BACKTRACK, turn=turn, backtrack_steps=steps)

    def emergency_redirect(self, agent: Agent, distance: float) -> bool:
        """
        Post-validation of the final heading.

        If the path of length distance crosses land, face the deepest of
        the neighboring cells.

        Returns:
            True if the heading was overridden (caller forces a 1-unit step)
        """
        if self.enough_water_ahead(agent, distance):
            return False

        neighbor = self.landscape.max_depth_neighbor(agent.x, agent.y)
        if neighbor is None:
            logger.warning("Porpoise %s has no water neighbor at (%.2f, %.2f)", agent.id, agent.x, agent.y)
            return True

        nx, ny, _ = neighbor
        dx, dy = self._displacement(agent, nx, ny)
        agent.face_vector(dx, dy)
        logger.debug("Porpoise %s faced deepest neighbor cell (%.1f, %.1f)", agent.id, nx, ny)
        return True
