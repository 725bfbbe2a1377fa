"""
Skin Blob Module
=================

Cluster descriptor for skin-colored pixels. A blob grows one point at a
time: a point joins when it lies within the blob's merge radius of the
bounding-box centre, and the radius then stretches with the box.

SkinBlob is an immutable value; every update returns a new blob, so the
segmentation passes can be written as plain folds over the pixel scan.
"""

from dataclasses import dataclass, replace
from typing import Optional, Sequence

import numpy as np

from ..geometry.points import Point, flip_vertical, rolling_average

# Slack (pixels) added to the half-diagonal when testing membership.
SEARCH_RANGE = 2.0


@dataclass(frozen=True)
class SkinBlob:
    """
    Incrementally grown skin cluster.

    Attributes:
        min_point: Corner with the smallest x and y
        max_point: Corner with the largest x and y
        mean_point: Rolling mean of the points passed to add_to_mean()
        size: Number of points merged into the box, seed included
        sample_size: Number of points folded into mean_point
        width: Longest horizontal run reported through test_width()
        search_range: Margin added to the merge radius
    """
    min_point: Point
    max_point: Point
    mean_point: Point
    size: int = 1
    sample_size: int = 0
    width: int = 0
    search_range: float = SEARCH_RANGE

    @classmethod
    def seed(cls, point: Point, search_range: float = SEARCH_RANGE) -> "SkinBlob":
        """Create a one-point blob."""
        point = Point(*point)
        return cls(min_point=point, max_point=point, mean_point=point,
                   search_range=search_range)

    @property
    def median_point(self) -> Point:
        """Centre of the bounding box."""
        return self.min_point.midpoint(self.max_point)

    @property
    def merge_radius(self) -> float:
        """Half-diagonal of the bounding box plus the search range."""
        return self.min_point.distance_to(self.median_point) + self.search_range

    @property
    def area(self) -> float:
        """Bounding-box area; zero for a single row or column."""
        return (self.max_point.x - self.min_point.x) * (self.max_point.y - self.min_point.y)

    def accepts(self, point: Point) -> bool:
        """True if point lies within the merge radius of the box centre."""
        return point.distance_to(self.median_point) <= self.merge_radius

    def merge(self, point: Point) -> "SkinBlob":
        """Blob with the bounding box stretched to cover point and size + 1."""
        return replace(
            self,
            min_point=Point(min(self.min_point.x, point.x), min(self.min_point.y, point.y)),
            max_point=Point(max(self.max_point.x, point.x), max(self.max_point.y, point.y)),
            size=self.size + 1,
        )

    def test_point(self, point: Point) -> Optional["SkinBlob"]:
        """
        Membership test and merge in one step.

        Returns:
            The grown blob if point is accepted, otherwise None
        """
        if self.accepts(point):
            return self.merge(point)
        return None

    def add_to_mean(self, point: Point) -> "SkinBlob":
        """Blob with point folded into the rolling mean."""
        n = self.sample_size + 1
        return replace(self, mean_point=rolling_average(self.mean_point, point, n), sample_size=n)

    def add_points_to_mean(self, xs: Sequence[float], ys: Sequence[float]) -> "SkinBlob":
        """
        Fold a batch of points into the rolling mean.

        Equivalent to calling add_to_mean() once per (x, y) pair in order,
        computed in closed form.
        """
        count = len(xs)
        if count == 0:
            return self
        n = self.sample_size + count
        mean = Point(
            (self.mean_point.x * self.sample_size + float(np.sum(xs))) / n,
            (self.mean_point.y * self.sample_size + float(np.sum(ys))) / n,
        )
        return replace(self, mean_point=mean, sample_size=n)

    def test_width(self, run_length: int) -> "SkinBlob":
        """Blob whose width is the larger of its width and run_length."""
        if run_length > self.width:
            return replace(self, width=run_length)
        return self

    def strictly_contains(self, point: Point) -> bool:
        """True if point is inside the bounding box, edges excluded."""
        return (self.min_point.x < point.x < self.max_point.x and
                self.min_point.y < point.y < self.max_point.y)

    def outranks(self, other: "SkinBlob") -> bool:
        """True if this blob is at least as large as other by both area and size."""
        return self.area >= other.area and self.size >= other.size

    def flipped(self, height: int) -> "SkinBlob":
        """Blob mirrored top to bottom in a frame of the given height."""
        return replace(
            self,
            min_point=flip_vertical(Point(self.min_point.x, self.max_point.y), height),
            max_point=flip_vertical(Point(self.max_point.x, self.min_point.y), height),
            mean_point=flip_vertical(self.mean_point, height),
        )


def merge(blob: SkinBlob, point: Point) -> SkinBlob:
    """Functional form of SkinBlob.merge()."""
    return blob.merge(point)
