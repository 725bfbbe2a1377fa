"""
Hand Model Module
==================

Display-ready summary of a segmented hand: where the palm is, how large it
is, and where the fingertips are, in image coordinates.
"""

from dataclasses import dataclass, field
from typing import List

from ..geometry.points import Point
from ..segmentation.engine import SegmentationResult

# Largest finger count reported to the user
MAX_FINGERS = 5


@dataclass
class HandModel:
    """Palm and fingertip positions for one frame."""
    palm_position: Point
    palm_radius: float
    fingertips: List[Point] = field(default_factory=list)

    @classmethod
    def from_result(cls, result: SegmentationResult) -> "HandModel":
        """
        Build a hand model from a segmentation result.

        The palm sits at the dominant blob's mean point with a radius of
        half its tracked width.
        """
        hand = result.hand
        return cls(
            palm_position=hand.mean_point,
            palm_radius=hand.width / 2,
            fingertips=list(result.fingertips),
        )

    @property
    def finger_count(self) -> int:
        """Number of fingertips, capped at five."""
        return min(len(self.fingertips), MAX_FINGERS)

