"""
Fingertip filtering over the clustered convex hull.

Points here are in scan coordinates: y counts rows upward from the bottom
of the frame, so a larger y is higher in the image.
"""

from typing import List, Sequence

from ..geometry.points import Point
from .blob import SkinBlob


def find_fingertips(hull: Sequence[Point], hand: SkinBlob) -> List[Point]:
    """
    Keep hull points that look like extended fingers.

    A hull point is kept if it lies above the hand's mean point (larger y)
    and farther from it than half the hand width. Kept points nearer than a
    full hand width are "close"; when every kept point is close the hand is
    read as a closed fist and nothing is returned.

    Args:
        hull: Clustered hull points in scan coordinates
        hand: Dominant blob after pass two, in scan coordinates

    Returns:
        Fingertip candidates in hull order
    """
    palm = hand.mean_point
    palm_radius = hand.width // 2

    fingertips: List[Point] = []
    close_points = 0
    for point in hull:
        distance = palm.distance_to(point)
        if point.y > palm.y and distance > palm_radius:
            fingertips.append(point)
            if distance < hand.width:
                close_points += 1

    if close_points >= len(fingertips):
        return []
    return fingertips
