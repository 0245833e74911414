"""Behavior module: spatial memory of past positions."""

from porpsim.behavior.memory import (
    MemoryRecord,
    SpatialMemory,
    logistic_decay,
    wrap_displacement,
)

__all__ = [
    "MemoryRecord",
    "SpatialMemory",
    "logistic_decay",
    "wrap_displacement",
]
