"""
Point Geometry Module
======================

2D point type and the coordinate helpers shared by the segmentation passes.
Frame buffers are scanned row-major, so every pixel index maps to exactly
one (x, y) point for a given frame width.
"""

import math
from typing import NamedTuple, Tuple


class Point(NamedTuple):
    """A 2D point in frame pixel coordinates."""
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: "Point") -> "Point":
        """Point halfway between this point and another."""
        return Point((self.x + other.x) / 2, (self.y + other.y) / 2)

    def to_pixel(self) -> Tuple[int, int]:
        """Integer pixel coordinates for drawing."""
        return (int(round(self.x)), int(round(self.y)))


ORIGIN = Point(0.0, 0.0)


def index_to_point(width: int, index: int) -> Point:
    """
    Convert a row-major buffer index to a frame point.

    Args:
        width: Frame width in pixels
        index: Position in the flattened pixel buffer

    Returns:
        Point with x = index mod width, y = index div width

    Example:
        >>> index_to_point(640, 1283)
        Point(x=3, y=2)
    """
    return Point(index % width, index // width)


def point_to_index(width: int, point: Point) -> int:
    """Convert a frame point back to its row-major buffer index."""
    return int(math.floor(point.y * width + point.x))


def flip_vertical(point: Point, height: int) -> Point:
    """Mirror a point between top-down image rows and bottom-up scan rows."""
    return Point(point.x, height - 1 - point.y)


def rolling_average(old_average: Point, new_value: Point, size: int) -> Point:
    """
    Fold one more value into a running mean.

    Args:
        old_average: Mean of the first size - 1 values
        new_value: The size-th value
        size: Number of values including new_value

    Returns:
        Mean of all size values
    """
    keep = (size - 1) / size
    return Point(
        old_average.x * keep + new_value.x / size,
        old_average.y * keep + new_value.y / size,
    )


def angle_between(p1: Point, p2: Point, p3: Point) -> float:
    """Unsigned angle in degrees at p2 between the rays to p1 and p3."""
    ax, ay = p1.x - p2.x, p1.y - p2.y
    bx, by = p3.x - p2.x, p3.y - p2.y
    norm = math.hypot(ax, ay) * math.hypot(bx, by)
    if norm == 0:
        return 0.0
    cosine = max(-1.0, min(1.0, (ax * bx + ay * by) / norm))
    return math.degrees(math.acos(cosine))
