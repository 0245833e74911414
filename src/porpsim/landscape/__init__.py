"""Landscape grid and food field."""

from porpsim.landscape.cell_data import (
    CellData,
    LandscapeMetadata,
    create_homogeneous_landscape,
    create_landscape_from_arrays,
)
from porpsim.landscape.food import FoodField
from porpsim.landscape.loader import LandscapeLoader, load_asc

__all__ = [
    "CellData",
    "LandscapeMetadata",
    "create_homogeneous_landscape",
    "create_landscape_from_arrays",
    "FoodField",
    "LandscapeLoader",
    "load_asc",
]
