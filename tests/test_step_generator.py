"""
Tests for the Markov and correlated random walk step generators.

Replayed random sources feed exact draws, so each branch of the
turning angle and step length logic can be checked by hand.
"""

import numpy as np
import pytest

from porpsim.core.random_source import GeneratedRandomSource, ReplayedRandomSource
from porpsim.movement.base import MovementMode
from porpsim.movement.step_generator import (
    CRWStepGenerator,
    MarkovStepGenerator,
    StepProposal,
    create_step_generator,
)
from porpsim.parameters import SimulationParameters


@pytest.fixture
def params():
    return SimulationParameters(movement_mode="crw")


class TestStepProposal:
    """Test the proposal value object."""

    def test_step_length(self):
        assert StepProposal(turn_angle=0.0, log_mov=1.0).step_length == pytest.approx(10.0)
        assert StepProposal(turn_angle=0.0, log_mov=0.0).step_length == pytest.approx(1.0)


class TestMarkovStepGenerator:
    """Test uncorrelated Markov steps."""

    def test_small_angle_not_inflated(self, params):
        """Angles within 60 degrees are used as drawn."""
        rng = ReplayedRandomSource([0.7, 30.0])
        proposal = MarkovStepGenerator(params, rng).propose(10.0, 0.8)
        assert proposal.log_mov == 0.7
        assert proposal.turn_angle == 30.0
        assert rng.consumed == 2

    def test_large_angle_inflated(self, params):
        """Angles beyond 60 degrees are multiplied by 1 + U(0, 0.5)."""
        rng = ReplayedRandomSource([0.5, -80.0, 0.5])
        proposal = MarkovStepGenerator(params, rng).propose(10.0, 0.8)
        assert proposal.turn_angle == pytest.approx(-100.0)
        assert not proposal.fell_back

    def test_log_step_distribution(self, params):
        """log10 step lengths follow N(0.5, 0.25) and ignore the previous step."""
        generator = MarkovStepGenerator(params, GeneratedRandomSource(seed=2024))
        prev_angle, prev_log_mov = 10.0, 0.8
        log_movs = []
        for _ in range(5000):
            proposal = generator.propose(prev_angle, prev_log_mov)
            log_movs.append(proposal.log_mov)
            prev_angle, prev_log_mov = proposal.turn_angle, proposal.log_mov

        log_movs = np.array(log_movs)
        assert log_movs.mean() == pytest.approx(0.5, abs=0.02)
        assert log_movs.std() == pytest.approx(0.25, abs=0.02)

    def test_hundred_ticks(self, params):
        """A 100-tick Markov walk gives finite steps of a few grid units."""
        generator = MarkovStepGenerator(params, GeneratedRandomSource(seed=7))
        steps = [generator.propose(0.0, 0.0).step_length for _ in range(100)]
        assert all(np.isfinite(steps))
        assert 1.0 < np.median(steps) < 6.0


class TestCRWStepGenerator:
    """Test correlated random walk steps."""

    def test_fast_previous_step_has_no_angle_increase(self, params):
        """When the previous step exceeded m, the increase draw is scaled to zero."""
        rng = ReplayedRandomSource([20.0, 96.0, 0.1])
        proposal = CRWStepGenerator(params, rng).propose(10.0, 0.8)

        center = -0.26 * (10.0 + 24.0)
        assert proposal.turn_angle == pytest.approx(center + 20.0)
        assert proposal.log_mov == pytest.approx(0.94 * 0.8 + 0.1)
        assert not proposal.fell_back
        assert rng.consumed == 3

    def test_slow_previous_step_increases_angle(self, params):
        """Short previous steps increase the turning angle."""
        rng = ReplayedRandomSource([0.0, 96.0, 0.0])
        proposal = CRWStepGenerator(params, rng).propose(-10.0, 0.0)

        center = -0.26 * (-10.0 - 24.0)
        scale = 1.0 - 1.0 / params.m
        assert proposal.turn_angle == pytest.approx(center + 96.0 * scale)
        assert proposal.log_mov == pytest.approx(0.0)

    def test_sign_is_kept_after_increase(self, params):
        """The increase applies to |angle| and the sign is restored."""
        rng = ReplayedRandomSource([-30.0, 50.0, 0.0])
        proposal = CRWStepGenerator(params, rng).propose(10.0, 0.0)

        base = abs(-0.26 * 34.0 - 30.0)
        scale = 1.0 - 1.0 / params.m
        assert proposal.turn_angle == pytest.approx(-(base + 50.0 * scale))

    def test_turning_angle_fallback_positive(self, params):
        """Angles that never fall within 180 degrees fall back to +90."""
        rng = ReplayedRandomSource([500.0], cycle=True)
        proposal = CRWStepGenerator(params, rng).propose(10.0, 0.8)
        assert proposal.turn_angle == 90.0
        assert proposal.log_mov == params.max_log_mov
        assert proposal.fell_back

    def test_turning_angle_fallback_negative(self, params):
        """The fallback keeps the sign of the last rejected draw."""
        rng = ReplayedRandomSource([-500.0], cycle=True)
        proposal = CRWStepGenerator(params, rng).propose(10.0, 0.8)
        assert proposal.turn_angle == -90.0
        assert proposal.fell_back

    def test_angle_increase_fallback(self, params):
        """An increase that never stays below 180 falls back to U(90, 110)."""
        values = [0.0] + [300.0] * 200 + [0.5] + [0.1]
        rng = ReplayedRandomSource(values)
        proposal = CRWStepGenerator(params, rng).propose(10.0, 0.0)

        assert proposal.turn_angle == pytest.approx(-100.0)
        assert proposal.log_mov == pytest.approx(0.1)
        assert proposal.fell_back
        assert rng.consumed == len(values)

    def test_step_length_resampled_below_ceiling(self, params):
        """Step lengths above the ceiling are redrawn."""
        rng = ReplayedRandomSource([0.0, 0.0, 2.0, 1.5, 0.3])
        proposal = CRWStepGenerator(params, rng).propose(10.0, 0.8)
        assert proposal.log_mov == pytest.approx(0.94 * 0.8 + 0.3)
        assert not proposal.fell_back

    def test_long_walk_stays_bounded(self, params):
        """Turning angles stay within 180 degrees and steps below the ceiling."""
        generator = CRWStepGenerator(params, GeneratedRandomSource(seed=11))
        prev_angle, prev_log_mov = 10.0, 0.8
        for _ in range(2000):
            proposal = generator.propose(prev_angle, prev_log_mov)
            assert abs(proposal.turn_angle) <= 180.0
            assert proposal.log_mov <= params.max_log_mov
            prev_angle, prev_log_mov = proposal.turn_angle, proposal.log_mov


class TestCreateStepGenerator:
    """Test generator selection by movement mode."""

    @pytest.mark.parametrize("mode,expected", [
        (MovementMode.MARKOV, MarkovStepGenerator),
        (MovementMode.CRW, CRWStepGenerator),
        (MovementMode.MEMORY, CRWStepGenerator),
        ("markov", MarkovStepGenerator),
        (2, CRWStepGenerator),
    ])
    def test_generator_for_mode(self, params, mode, expected):
        generator = create_step_generator(mode, params, GeneratedRandomSource(seed=1))
        assert isinstance(generator, expected)
        assert generator.get_name() == expected.__name__
