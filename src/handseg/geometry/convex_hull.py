"""
Convex Hull Module
===================

Gift-wrapping (Jarvis march) over silhouette contour points, followed by a
single clustering sweep that collapses hull vertices lying close together.
The clustered hull is the candidate set for fingertip filtering.
"""

import logging
from typing import List, Sequence

from .points import Point

logger = logging.getLogger(__name__)

# Hull vertices closer than this (pixels) are treated as one vertex.
DEFAULT_MERGE_DISTANCE = 50.0


def cross(p1: Point, p2: Point, p3: Point) -> float:
    """Z component of (p2 - p1) x (p3 - p1)."""
    return (p2.x - p1.x) * (p3.y - p1.y) - (p3.x - p1.x) * (p2.y - p1.y)


def is_counter_clockwise(p1: Point, p2: Point, p3: Point) -> bool:
    """True if p3 lies strictly to the left of the directed line p1 -> p2."""
    return cross(p1, p2, p3) > 0


def leftmost_point(points: Sequence[Point]) -> Point:
    """Point with the smallest x; ties go to the first one encountered."""
    best = points[0]
    for point in points:
        if point.x < best.x:
            best = point
    return best


def convex_hull(points: Sequence[Point]) -> List[Point]:
    """
    Compute the convex hull of a point set by gift wrapping.

    Starting from the leftmost point, each step picks the candidate that
    leaves no other point strictly counter-clockwise of the edge. Collinear
    candidates resolve to the farthest one, so hull vertices are extreme
    points only.

    Args:
        points: Contour points in any order

    Returns:
        Hull vertices in traversal order, starting at the leftmost point.
        Inputs with fewer than 3 points are returned unchanged.

    Example:
        >>> convex_hull([Point(0, 0), Point(4, 0), Point(2, 1), Point(2, 4)])
        [Point(x=0, y=0), Point(x=2, y=4), Point(x=4, y=0)]
    """
    points = list(points)
    if len(points) < 3:
        return points

    hull: List[Point] = []
    current = leftmost_point(points)

    # A hull can never have more vertices than the input.
    for _ in range(len(points)):
        hull.append(current)

        endpoint = points[0]
        for candidate in points:
            if endpoint == current:
                endpoint = candidate
                continue
            turn = cross(current, endpoint, candidate)
            if turn > 0 or (
                turn == 0
                and current.distance_to(candidate) > current.distance_to(endpoint)
            ):
                endpoint = candidate

        current = endpoint
        if current == hull[0]:
            break
    else:
        logger.warning("Hull march did not close after %d steps", len(points))

    return hull


def cluster_hull(hull: Sequence[Point], merge_distance: float = DEFAULT_MERGE_DISTANCE) -> List[Point]:
    """
    Collapse runs of nearby hull vertices in one left-to-right sweep.

    Whenever hull[i + 1] is within merge_distance of hull[i] it is dropped
    and the new neighbour is compared against the same hull[i]. The last
    and first vertices are never compared with each other.

    Args:
        hull: Hull vertices in traversal order
        merge_distance: Maximum distance (inclusive) for two vertices to merge

    Returns:
        New list of retained vertices
    """
    merged = list(hull)
    i = 0
    while i < len(merged) - 1:
        if merged[i].distance_to(merged[i + 1]) <= merge_distance:
            del merged[i + 1]
        else:
            i += 1
    return merged
