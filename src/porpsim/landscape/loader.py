"""
Landscape data file loader.

Loads the pre-rasterised ESRI ASCII grid files of a landscape folder.
"""

from __future__ import annotations

import logging

import numpy as np
from pathlib import Path
from typing import Dict, Any, List, Tuple, Union

from porpsim.landscape.cell_data import LandscapeMetadata

logger = logging.getLogger("porpsim.landscape.loader")

# File names in a landscape folder
BATHY_FILE = "bathy.asc"
PATCHES_FILE = "patches.asc"

HEADER_KEYS = ('ncols', 'nrows', 'xllcorner', 'yllcorner', 'cellsize', 'nodata_value')


def load_asc(filepath: Union[str, Path]) -> Tuple[np.ndarray, LandscapeMetadata]:
    """
    Load an ASCII grid file.

    NODATA cells become NaN. The array is flipped so that row 0 is the
    SOUTHERN edge, matching grid coordinates where y grows northwards.

    Args:
        filepath: Path to the .asc file

    Returns:
        Tuple of (data array, metadata)
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Landscape file not found: {filepath}")

    header: Dict[str, float] = {}
    rows: List[List[float]] = []

    with open(filepath, 'r') as f:
        for line in f:
            line = line.strip()
            if not line:
                continue

            parts = line.split()
            if len(parts) == 2 and parts[0].lower() in HEADER_KEYS:
                header[parts[0].lower()] = float(parts[1])
            else:
                rows.append([float(v) for v in parts])

    if 'ncols' not in header or 'nrows' not in header:
        raise ValueError(f"Missing ncols/nrows header in {filepath}")

    metadata = LandscapeMetadata(
        ncols=int(header['ncols']),
        nrows=int(header['nrows']),
        xllcorner=header.get('xllcorner', 0.0),
        yllcorner=header.get('yllcorner', 0.0),
        cellsize=header.get('cellsize', 100.0),
        nodata_value=header.get('nodata_value', -9999.0),
    )

    data_array = np.array(rows, dtype=float)
    if data_array.shape != (metadata.nrows, metadata.ncols):
        raise ValueError(
            f"{filepath}: expected {metadata.nrows}x{metadata.ncols} values, "
            f"got shape {data_array.shape}"
        )

    data_array[data_array == metadata.nodata_value] = np.nan

    # ASC files list the NORTHERN row first
    data_array = np.flipud(data_array)

    return data_array, metadata


class LandscapeLoader:
    """
    Loads landscape data from files.
    """

    def __init__(self, landscape_name: str, data_dir: Union[Path, str] = "data"):
        """
        Initialize loader for a landscape.

        Args:
            landscape_name: Name of landscape folder
            data_dir: Base data directory
        """
        self.landscape_name = landscape_name
        self.data_dir = Path(data_dir)
        self.landscape_path = self.data_dir / landscape_name

    def load_all(self) -> Dict[str, Any]:
        """
        Load all data files for the landscape.

        A missing patches file means the landscape has no food.

        Returns:
            Dictionary containing the loaded arrays and metadata
        """
        depth, metadata = load_asc(self.landscape_path / BATHY_FILE)

        if self.file_exists(PATCHES_FILE):
            food_prob, food_meta = load_asc(self.landscape_path / PATCHES_FILE)
            if food_prob.shape != depth.shape:
                raise ValueError(
                    f"{PATCHES_FILE} is {food_meta.nrows}x{food_meta.ncols}, "
                    f"expected {metadata.nrows}x{metadata.ncols}"
                )
            food_prob = np.nan_to_num(food_prob, nan=0.0)
        else:
            logger.warning("No %s in %s, landscape has no food", PATCHES_FILE, self.landscape_path)
            food_prob = np.zeros_like(depth)

        logger.info(
            "Loaded landscape '%s': %dx%d cells of %.0f m",
            self.landscape_name, metadata.nrows, metadata.ncols, metadata.cellsize
        )

        return {
            'metadata': metadata,
            'depth': depth,
            'food_prob': food_prob,
        }

    def file_exists(self, filename: str) -> bool:
        """Check if a data file exists."""
        return (self.landscape_path / filename).exists()

    @staticmethod
    def list_landscapes(data_dir: Union[Path, str] = "data") -> List[str]:
        """
        List available landscapes in the data directory.

        Args:
            data_dir: Base data directory

        Returns:
            List of landscape names
        """
        data_path = Path(data_dir)
        if not data_path.exists():
            return []

        landscapes = []
        for item in data_path.iterdir():
            if item.is_dir() and (item / BATHY_FILE).exists():
                landscapes.append(item.name)

        return sorted(landscapes)
