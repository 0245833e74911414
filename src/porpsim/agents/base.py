"""
Base agent class.

Provides position and heading handling shared by moving agents.
Headings are in degrees with 0 = North, increasing clockwise, so a unit
step along heading h is (sin h, cos h).
"""

from __future__ import annotations

import math

from dataclasses import dataclass
from typing import Tuple


@dataclass
class Agent:
    """
    Base class for agents moving on the landscape grid.
    """

    id: int
    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0  # degrees, 0 = North, clockwise

    def get_position(self) -> Tuple[float, float]:
        """Get current position as (x, y) tuple."""
        return (self.x, self.y)

    def set_position(self, x: float, y: float) -> None:
        """Set position to given coordinates."""
        self.x = x
        self.y = y

    def get_dx(self) -> float:
        """Get x-component of unit vector in heading direction."""
        return math.sin(math.radians(self.heading))

    def get_dy(self) -> float:
        """Get y-component of unit vector in heading direction."""
        return math.cos(math.radians(self.heading))

    def forward(self, distance: float) -> None:
        """Move forward in current heading direction."""
        rad = math.radians(self.heading)
        self.x += distance * math.sin(rad)
        self.y += distance * math.cos(rad)

    def turn_right(self, degrees: float) -> None:
        """Turn right (clockwise) by given degrees; negative turns left."""
        self.heading = Agent.normalize_heading(self.heading + degrees)

    def face_vector(self, dx: float, dy: float) -> bool:
        """
        Turn to face the direction of (dx, dy).

        Returns:
            False (heading unchanged) for a zero-length vector
        """
        if dx == 0.0 and dy == 0.0:
            return False
        self.heading = Agent.heading_of(dx, dy)
        return True

    def face_point(self, x: float, y: float) -> bool:
        """Turn to face the given point (no wrap correction)."""
        return self.face_vector(x - self.x, y - self.y)

    def get_point_ahead(self, distance: float, angle_offset: float = 0.0) -> Tuple[float, float]:
        """
        Get point at given distance ahead with optional angle offset.

        Args:
            distance: Distance ahead
            angle_offset: Offset from current heading in degrees (positive = right)
        """
        rad = math.radians(self.heading + angle_offset)
        return (self.x + distance * math.sin(rad), self.y + distance * math.cos(rad))

    @staticmethod
    def heading_of(dx: float, dy: float) -> float:
        """Heading in [0, 360) of the vector (dx, dy)."""
        # atan2(dx, dy) for North = 0
        return Agent.normalize_heading(math.degrees(math.atan2(dx, dy)))

    @staticmethod
    def normalize_heading(heading: float) -> float:
        """Normalize heading to [0, 360) range."""
        heading = heading % 360
        if heading < 0:
            heading += 360
        # -1e-15 % 360 rounds to 360.0
        if heading >= 360:
            heading -= 360
        return heading

    @staticmethod
    def subtract_headings(h1: float, h2: float) -> float:
        """
        Calculate difference between two headings.

        Returns value in (-180, 180].
        Positive = clockwise from h2 to h1.
        """
        diff = (h1 - h2) % 360
        if diff > 180:
            diff -= 360
        return diff
