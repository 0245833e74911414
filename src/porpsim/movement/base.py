"""
Shared movement types.

Defines the movement modes and the bounded rejection sampler used by the
step generators. Every rejection loop in the model is capped: when the
candidate draws never satisfy the bound, a deterministic fallback value is
used instead and the result is flagged, so the caller can tell a sampled
value from a forced one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from porpsim.parameters.simulation_params import ConfigurationError

logger = logging.getLogger("porpsim.movement")


class MovementMode(Enum):
    """Movement model modes."""
    MARKOV = 0    # Uncorrelated turning angles and step lengths
    CRW = 1       # Correlated random walk
    MEMORY = 2    # CRW combined with reference and working memory

    @classmethod
    def from_name(cls, value: Union[str, int, "MovementMode"]) -> "MovementMode":
        """
        Parse a movement mode from a name or a numeric code.

        Accepts enum members, names ("markov", "crw", "memory",
        case-insensitive) and the numeric codes 0, 1 and 2.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ConfigurationError(f"Unknown movement mode: {value!r}")
        if isinstance(value, int):
            for mode in cls:
                if mode.value == value:
                    return mode
            raise ConfigurationError(f"Unknown movement mode: {value!r}")
        if isinstance(value, str):
            key = value.strip().upper()
            if key.isdigit():
                return cls.from_name(int(key))
            if key in cls.__members__:
                return cls[key]
        raise ConfigurationError(f"Unknown movement mode: {value!r}")

    @property
    def uses_memory(self) -> bool:
        return self is MovementMode.MEMORY


@dataclass(frozen=True)
class SampleResult:
    """Outcome of a bounded rejection sampling loop."""
    value: float
    attempts: int        # Number of candidate draws made
    fell_back: bool      # True if the fallback value was used


def sample_bounded(
    draw: Callable[[], float],
    accept: Callable[[float], bool],
    max_attempts: int,
    fallback: Callable[[float], float],
) -> SampleResult:
    """
    Draw candidates until one is accepted, at most max_attempts times.

    Args:
        draw: Produces a candidate value
        accept: Returns True when a candidate satisfies the bound
        max_attempts: Maximum number of candidate draws
        fallback: Called with the last rejected candidate when the cap is hit

    Returns:
        SampleResult with the accepted (or fallback) value
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    value = draw()
    attempts = 1
    while not accept(value):
        if attempts >= max_attempts:
            forced = fallback(value)
            logger.debug(
                "Sampling cap of %d draws reached (last=%.4f), using fallback %.4f",
                max_attempts, value, forced
            )
            return SampleResult(value=forced, attempts=attempts, fell_back=True)
        value = draw()
        attempts += 1
    return SampleResult(value=value, attempts=attempts, fell_back=False)
