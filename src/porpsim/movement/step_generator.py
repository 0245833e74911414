"""
Step generators for porpoise movement.

A step generator proposes the turning angle and log10 step length for the
next half-hour step. Two models are available:

- Markov: independent draws of turning angle and step length.
- Correlated random walk (CRW): turning angle and step length are
  autocorrelated with the previous step. Turning angles increase when the
  previous step was short, so slow animals turn more.

All draws come from the run's RandomSource and all rejection loops are
capped through sample_bounded.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from porpsim.movement.base import MovementMode, sample_bounded
from porpsim.parameters.constants import SimulationConstants

if TYPE_CHECKING:
    from porpsim.core.random_source import RandomSource
    from porpsim.parameters.simulation_params import SimulationParameters

logger = logging.getLogger("porpsim.movement.step_generator")

# Fallback turning angle range when the speed-dependent increase never converges
FALLBACK_ANGLE_MIN = 90.0
FALLBACK_ANGLE_MAX = 110.0


@dataclass(frozen=True)
class StepProposal:
    """Candidate turning angle and step length for one tick."""
    turn_angle: float          # Degrees, positive = clockwise
    log_mov: float             # log10 of step length in grid units
    fell_back: bool = False    # True if any sampling loop hit its cap

    @property
    def step_length(self) -> float:
        """Step length in grid units."""
        return 10 ** self.log_mov


class StepGenerator(ABC):
    """
    Abstract base class for step generators.
    """

    def __init__(self, params: SimulationParameters, rng: RandomSource):
        self.params = params
        self.rng = rng
        self.max_attempts = SimulationConstants.MAX_SAMPLING_ATTEMPTS

    @abstractmethod
    def propose(self, prev_angle: float, prev_log_mov: float) -> StepProposal:
        """
        Propose the next step.

        Args:
            prev_angle: Turning angle of the previous step (degrees)
            prev_log_mov: log10 step length of the previous step

        Returns:
            StepProposal for this tick
        """
        pass

    def get_name(self) -> str:
        """Return the name of this generator."""
        return self.__class__.__name__


class MarkovStepGenerator(StepGenerator):
    """
    Markov movement: no autocorrelation between steps.

    Turning angles are drawn from N(0, 40). Angles larger than 60 degrees
    are multiplied by 1.0-1.5 to make the distribution more leptokurtic.
    log10 step lengths are drawn from N(0.5, 0.25).
    """

    def propose(self, prev_angle: float, prev_log_mov: float) -> StepProposal:
        p = self.params
        log_mov = self.rng.next_normal(p.markov_logmov_mean, p.markov_logmov_sd)

        angle = self.rng.next_normal(0.0, p.markov_angle_sd)
        if abs(angle) > p.markov_angle_threshold:
            angle *= 1.0 + self.rng.next_uniform(0.0, 0.5)

        return StepProposal(turn_angle=angle, log_mov=log_mov)


class CRWStepGenerator(StepGenerator):
    """
    Correlated random walk movement.

    Turning angle:
        biased = prev_angle + 24 (or - 24 for left turns)
        angle ~ N(-corr_angle * biased, 38), redrawn until |angle| <= 180
        |angle| += R * (1 - prev_mov / m), R ~ N(96, 28), redrawn until < 180
        (no increase when prev_mov > m)

    Step length:
        log_mov = corr_logmov * prev_log_mov + N(0.42, 0.48),
        redrawn while log_mov > max_log_mov
    """

    def propose(self, prev_angle: float, prev_log_mov: float) -> StepProposal:
        angle, angle_forced = self._turning_angle(prev_angle, prev_log_mov)
        log_mov, log_forced = self._log_step_length(prev_log_mov)
        return StepProposal(
            turn_angle=angle,
            log_mov=log_mov,
            fell_back=angle_forced or log_forced,
        )

    def _turning_angle(self, prev_angle: float, prev_log_mov: float) -> tuple[float, bool]:
        p = self.params

        if prev_angle < 0:
            biased_prev = prev_angle - p.angle_bias
        else:
            biased_prev = prev_angle + p.angle_bias
        center = biased_prev * -p.corr_angle

        first = sample_bounded(
            draw=lambda: center + self.rng.next_normal(0.0, p.angle_sd),
            accept=lambda a: abs(a) <= 180.0,
            max_attempts=self.max_attempts,
            fallback=lambda last: 90.0 if last >= 0 else -90.0,
        )

        sign = -1.0 if first.value < 0 else 1.0
        base_angle = abs(first.value)

        # Turning angles decrease linearly with the previous step length
        prev_mov = 10 ** prev_log_mov
        if prev_mov <= p.m:
            scale = 1.0 - prev_mov / p.m
        else:
            scale = 0.0

        second = sample_bounded(
            draw=lambda: base_angle + self.rng.next_normal(p.angle_incr_mean, p.angle_incr_sd) * scale,
            accept=lambda a: a < 180.0,
            max_attempts=self.max_attempts,
            fallback=lambda last: self.rng.next_uniform(FALLBACK_ANGLE_MIN, FALLBACK_ANGLE_MAX),
        )

        return sign * second.value, first.fell_back or second.fell_back

    def _log_step_length(self, prev_log_mov: float) -> tuple[float, bool]:
        p = self.params
        carried = p.corr_logmov * prev_log_mov

        result = sample_bounded(
            draw=lambda: carried + self.rng.next_normal(p.logmov_mean, p.logmov_sd),
            accept=lambda v: v <= p.max_log_mov,
            max_attempts=self.max_attempts,
            fallback=lambda last: p.max_log_mov,
        )
        return result.value, result.fell_back


def create_step_generator(
    mode: MovementMode,
    params: SimulationParameters,
    rng: RandomSource,
) -> StepGenerator:
    """
    Create the step generator for a movement mode.

    Memory-augmented movement uses the CRW as its base.
    """
    mode = MovementMode.from_name(mode)
    if mode is MovementMode.MARKOV:
        return MarkovStepGenerator(params, rng)
    return CRWStepGenerator(params, rng)
