from __future__ import annotations

from typing import List

from .geometry_utils import Point, Segment, clamp


INFINITY = 1_000_000.0


class Road:
    """Straight vertical road with lanes.

    Coordinates follow the screen convention:
    - x increases to the right
    - y increases downward, so cars drive "up" toward negative y

    Parameters
    ----------
    x : float
        X coordinate of the road centre line.
    width : float
        Total road width.
    lane_count : int
        Number of lanes between the two borders.
    """

    def __init__(self, x: float, width: float, lane_count: int = 3) -> None:
        if width <= 0.0:
            raise ValueError(f"road width must be > 0, got {width}")
        if lane_count <= 0:
            raise ValueError(f"lane_count must be > 0, got {lane_count}")
        self.x = float(x)
        self.width = float(width)
        self.lane_count = int(lane_count)

        self.left = self.x - self.width / 2.0
        self.right = self.x + self.width / 2.0
        self.top = -INFINITY
        self.bottom = INFINITY

        top_left = Point(self.left, self.top)
        top_right = Point(self.right, self.top)
        bottom_left = Point(self.left, self.bottom)
        bottom_right = Point(self.right, self.bottom)
        self.borders: List[Segment] = [
            (top_left, bottom_left),
            (top_right, bottom_right),
        ]

    # ------------------------------------------------------------------
    # Lanes
    # ------------------------------------------------------------------
    def lane_center(self, lane_index: int) -> float:
        """X coordinate of the centre of a lane; out-of-range indices clamp."""
        lane_width = self.width / self.lane_count
        index = int(clamp(lane_index, 0, self.lane_count - 1))
        return self.left + lane_width / 2.0 + index * lane_width
