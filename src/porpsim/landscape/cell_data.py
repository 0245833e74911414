"""
Landscape cell data management.

Holds the static raster layers the movement model reads: water depth
(bathymetry) and food probability. Positions are continuous grid
coordinates; cell (i, j) covers y in [i, i+1) and x in [j, j+1).
Depth values > 0 are navigable water; depth <= 0 or NaN (no data) is land.

The grid is either toroidal (positions wrap at the borders) or bounded
(anything outside the grid reads as land with no food).
"""

from __future__ import annotations

import math
import numpy as np
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass
class LandscapeMetadata:
    """Metadata from ASC file headers."""

    ncols: int
    nrows: int
    xllcorner: float = 0.0
    yllcorner: float = 0.0
    cellsize: float = 100.0
    nodata_value: float = -9999.0

    @property
    def width(self) -> int:
        return self.ncols

    @property
    def height(self) -> int:
        return self.nrows


class CellData:
    """
    Manages the spatial data layers for the simulation.

    Data layers:
    - depth: Water depth (bathymetry, NaN where no data)
    - food_prob: Probability of food (cells > 0 hold food patches)
    """

    def __init__(self, landscape_name: str, data_dir: Optional[str] = None, wrap: bool = False):
        """
        Initialize cell data for a landscape.

        Args:
            landscape_name: Name of landscape folder (e.g., 'InnerDanishWaters')
            data_dir: Base data directory. If None, uses ./data
            wrap: Treat the grid as a torus
        """
        self.landscape_name = landscape_name
        self.data_dir = Path(data_dir) if data_dir is not None else Path("data")
        self.wrap = wrap

        self.metadata: Optional[LandscapeMetadata] = None

        # Data arrays, indexed [row (y), column (x)] with row 0 = SOUTH
        self._depth: Optional[np.ndarray] = None
        self._food_prob: Optional[np.ndarray] = None

        self._loaded: bool = False

    def load(self) -> None:
        """Load all data layers from files."""
        from porpsim.landscape.loader import LandscapeLoader

        loader = LandscapeLoader(self.landscape_name, self.data_dir)
        data = loader.load_all()

        self.metadata = data['metadata']
        self._depth = data['depth']
        self._food_prob = data['food_prob']
        self._loaded = True

    def _ensure_loaded(self) -> None:
        """Ensure data is loaded."""
        if not self._loaded:
            self.load()

    @property
    def width(self) -> int:
        """Grid width in cells."""
        self._ensure_loaded()
        return self.metadata.ncols

    @property
    def height(self) -> int:
        """Grid height in cells."""
        self._ensure_loaded()
        return self.metadata.nrows

    @property
    def depth(self) -> np.ndarray:
        """Depth layer (read-only view)."""
        self._ensure_loaded()
        view = self._depth.view()
        view.flags.writeable = False
        return view

    @property
    def food_prob(self) -> np.ndarray:
        """Food probability layer (read-only view)."""
        self._ensure_loaded()
        view = self._food_prob.view()
        view.flags.writeable = False
        return view

    def cell_index(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        """
        Convert continuous position to grid indices (row, column).

        Returns None for positions outside a bounded grid.
        """
        self._ensure_loaded()
        j = math.floor(x)
        i = math.floor(y)
        if self.wrap:
            return (i % self.height, j % self.width)
        if 0 <= i < self.height and 0 <= j < self.width:
            return (i, j)
        return None

    def is_valid_position(self, x: float, y: float) -> bool:
        """Check if position lies on the grid (always true for a torus)."""
        return self.cell_index(x, y) is not None

    def wrap_position(self, x: float, y: float) -> Tuple[float, float]:
        """Map a position back onto a toroidal grid; unchanged when bounded."""
        self._ensure_loaded()
        if not self.wrap:
            return (x, y)
        return (x % self.width, y % self.height)

    def get_depth(self, x: float, y: float) -> float:
        """Get water depth at position (NaN outside a bounded grid)."""
        idx = self.cell_index(x, y)
        if idx is None:
            return math.nan
        return float(self._depth[idx])

    def is_water(self, x: float, y: float) -> bool:
        """True if the cell at position is navigable (depth > 0)."""
        # NaN compares False, so no-data cells are land
        return self.get_depth(x, y) > 0

    def get_food_prob(self, x: float, y: float) -> float:
        """Get food probability at position (0 outside a bounded grid)."""
        idx = self.cell_index(x, y)
        if idx is None:
            return 0.0
        value = float(self._food_prob[idx])
        return value if not math.isnan(value) else 0.0

    @staticmethod
    def point_ahead(
        x: float,
        y: float,
        heading: float,
        distance: float,
        angle_offset: float = 0.0
    ) -> Tuple[float, float]:
        """
        Point reached by moving distance along heading + angle_offset.

        Headings are in degrees, 0 = North, clockwise.
        """
        rad = math.radians(heading + angle_offset)
        return (x + distance * math.sin(rad), y + distance * math.cos(rad))

    def depth_ahead(
        self,
        x: float,
        y: float,
        heading: float,
        distance: float,
        angle_offset: float = 0.0
    ) -> float:
        """Depth of the cell reached from (x, y) at distance along heading + angle_offset."""
        ax, ay = self.point_ahead(x, y, heading, distance, angle_offset)
        return self.get_depth(ax, ay)

    def max_depth_neighbor(self, x: float, y: float) -> Optional[Tuple[float, float, float]]:
        """
        Find the deepest of the 8 cells surrounding the cell at (x, y).

        Returns:
            (center_x, center_y, depth) of that cell, or None if every
            neighbor is land or off the grid
        """
        cx = math.floor(x)
        cy = math.floor(y)
        best = None
        for di in (-1, 0, 1):
            for dj in (-1, 0, 1):
                if di == 0 and dj == 0:
                    continue
                nx = cx + dj + 0.5
                ny = cy + di + 0.5
                depth = self.get_depth(nx, ny)
                if math.isnan(depth):
                    continue
                if best is None or depth > best[2]:
                    best = (nx, ny, depth)
        if best is None or best[2] <= 0:
            return None
        return best

    def to_world(self, x: float, y: float) -> Tuple[float, float]:
        """Convert grid coordinates to world (UTM) coordinates."""
        self._ensure_loaded()
        meta = self.metadata
        return (meta.xllcorner + x * meta.cellsize, meta.yllcorner + y * meta.cellsize)

    def random_water_position(self, rng, min_depth: float = 0.0, max_attempts: int = 10000) -> Tuple[float, float]:
        """
        Draw a uniformly random position whose depth exceeds min_depth.

        Args:
            rng: RandomSource used for the draws
            min_depth: Required depth at the position
            max_attempts: Number of positions to try

        Raises:
            ValueError: If no water position was found
        """
        self._ensure_loaded()
        for _ in range(max_attempts):
            x = rng.next_uniform(0.0, float(self.width))
            y = rng.next_uniform(0.0, float(self.height))
            if self.get_depth(x, y) > min_depth:
                return x, y
        raise ValueError(
            f"No cell deeper than {min_depth} m found in landscape '{self.landscape_name}'"
        )


def create_landscape_from_arrays(
    depth: np.ndarray,
    food_prob: Optional[np.ndarray] = None,
    wrap: bool = False,
    metadata: Optional[LandscapeMetadata] = None,
    name: str = "Custom",
) -> CellData:
    """
    Create a landscape from pre-built raster arrays.

    Args:
        depth: Depth array of shape (height, width), row 0 = SOUTH
        food_prob: Food probability array of the same shape (zeros if None)
        wrap: Treat the grid as a torus
        metadata: Grid metadata (derived from the array shape if None)
        name: Landscape name

    Returns:
        CellData ready for use
    """
    depth = np.asarray(depth, dtype=float)
    if depth.ndim != 2:
        raise ValueError("depth must be a 2-D array")
    height, width = depth.shape

    if food_prob is None:
        food_prob = np.zeros_like(depth)
    else:
        food_prob = np.asarray(food_prob, dtype=float)
        if food_prob.shape != depth.shape:
            raise ValueError(
                f"food_prob shape {food_prob.shape} does not match depth shape {depth.shape}"
            )

    if metadata is None:
        metadata = LandscapeMetadata(ncols=width, nrows=height)

    cell_data = CellData.__new__(CellData)
    cell_data.landscape_name = name
    cell_data.data_dir = Path(".")
    cell_data.wrap = wrap
    cell_data.metadata = metadata
    cell_data._depth = depth.copy()
    cell_data._food_prob = food_prob.copy()
    cell_data._loaded = True
    return cell_data


def create_homogeneous_landscape(
    width: int = 400,
    height: int = 400,
    depth: float = 20.0,
    food_prob: float = 0.5,
    wrap: bool = True
) -> CellData:
    """
    Create a homogeneous (uniform) landscape for testing.

    Args:
        width: Grid width
        height: Grid height
        depth: Uniform depth value
        food_prob: Uniform food probability
        wrap: Treat the grid as a torus

    Returns:
        CellData with homogeneous values
    """
    return create_landscape_from_arrays(
        depth=np.full((height, width), depth, dtype=float),
        food_prob=np.full((height, width), food_prob, dtype=float),
        wrap=wrap,
        name="Homogeneous",
    )
