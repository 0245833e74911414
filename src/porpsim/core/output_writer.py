"""
Track output for porpsim simulations.

One TrackRecord is produced per porpoise per tick. Records can be
streamed to a CSV file with TrackWriter or collected into a pandas
DataFrame for analysis.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, TextIO, Union

import pandas as pd

from porpsim.parameters.constants import SimulationConstants

if TYPE_CHECKING:
    from porpsim.agents.porpoise import Porpoise
    from porpsim.landscape.cell_data import CellData
    from porpsim.parameters.simulation_params import SimulationParameters

logger = logging.getLogger("porpsim.core.output_writer")


@dataclass
class TrackRecord:
    """Position and state of one porpoise at the end of one tick."""
    id: int
    population: str
    sex: str
    length: float
    weight: float
    x: float                # World x (xllcorner + x * cellsize)
    y: float                # World y
    depth: float
    tick: int
    day: float              # Elapsed simulated days
    ref_mem_decay: float
    work_mem_decay: float
    food_growth_rate: float
    max_food: float

    @classmethod
    def from_porpoise(
        cls,
        porpoise: Porpoise,
        landscape: CellData,
        params: SimulationParameters,
        tick: int
    ) -> TrackRecord:
        world_x, world_y = landscape.to_world(porpoise.x, porpoise.y)
        return cls(
            id=porpoise.id,
            population=porpoise.population,
            sex=porpoise.sex,
            length=porpoise.length,
            weight=porpoise.weight,
            x=world_x,
            y=world_y,
            depth=landscape.get_depth(porpoise.x, porpoise.y),
            tick=tick,
            day=SimulationConstants.ticks_to_days(tick),
            ref_mem_decay=params.r_r,
            work_mem_decay=params.r_w,
            food_growth_rate=params.r_u,
            max_food=params.max_food,
        )

    @classmethod
    def fieldnames(cls) -> List[str]:
        return [f.name for f in fields(cls)]


class TrackWriter:
    """
    Writes track records to a CSV file.

    Usage:
        with TrackWriter("tracks.csv") as writer:
            writer.write_many(records)
    """

    def __init__(self, path: Union[str, Path], delimiter: str = ","):
        self.path = Path(path)
        self.delimiter = delimiter
        self._file: Optional[TextIO] = None
        self._writer: Optional[csv.DictWriter] = None
        self.rows_written = 0

    def __enter__(self) -> "TrackWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self) -> None:
        """Open the output file and write the header."""
        if self.is_open:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        f = open(self.path, "w", newline="")
        try:
            writer = csv.DictWriter(f, fieldnames=TrackRecord.fieldnames(), delimiter=self.delimiter)
            writer.writeheader()
        except Exception:
            f.close()
            raise
        self._file = f
        self._writer = writer
        logger.debug("Opened track file %s", self.path)

    def close(self) -> None:
        """Close the output file."""
        if self._file is not None:
            self._file.close()
            logger.debug("Wrote %d track rows to %s", self.rows_written, self.path)
        self._file = None
        self._writer = None

    def write(self, record: TrackRecord) -> None:
        if self._writer is None:
            raise RuntimeError(f"Track file {self.path} is not open")
        self._writer.writerow(asdict(record))
        self.rows_written += 1

    def write_many(self, records: Iterable[TrackRecord]) -> None:
        for record in records:
            self.write(record)


def tracks_to_dataframe(records: Iterable[TrackRecord]) -> pd.DataFrame:
    """Collect track records into a DataFrame with one row per record."""
    return pd.DataFrame([asdict(r) for r in records], columns=TrackRecord.fieldnames())
