"""
Movement module.

Module Structure:
    base.py            - Movement modes and bounded rejection sampling
    step_generator.py  - Markov and correlated random walk step proposals
    land_avoidance.py  - Escalating land avoidance ladder

Quick Start:
    from porpsim.movement import create_step_generator, MovementMode

    generator = create_step_generator(MovementMode.CRW, params, rng)
    proposal = generator.propose(prev_angle, prev_log_mov)
"""

from porpsim.movement.base import (
    MovementMode,
    SampleResult,
    sample_bounded,
)

from porpsim.movement.step_generator import (
    StepProposal,
    StepGenerator,
    MarkovStepGenerator,
    CRWStepGenerator,
    create_step_generator,
)

from porpsim.movement.land_avoidance import (
    AvoidanceStage,
    AvoidanceOutcome,
    LandAvoidance,
    NavigationError,
)

__all__ = [
    # Base
    "MovementMode",
    "SampleResult",
    "sample_bounded",
    # Step generators
    "StepProposal",
    "StepGenerator",
    "MarkovStepGenerator",
    "CRWStepGenerator",
    "create_step_generator",
    # Land avoidance
    "AvoidanceStage",
    "AvoidanceOutcome",
    "LandAvoidance",
    "NavigationError",
]
