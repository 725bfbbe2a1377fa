"""
Calibration region sampling.

The user holds a patch of skin inside a fixed rectangle of the camera view;
the pixels inside it become the calibration sample for the color models.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import cv2
import numpy as np

from ..color.hsv import HSV, frame_to_hsv_list, normalize_rgb

logger = logging.getLogger(__name__)


@dataclass
class CalibrationRegion:
    """Sampling rectangle in frame pixel coordinates (top-left origin)."""
    x: int = 300
    y: int = 220
    width: int = 40
    height: int = 40

    @classmethod
    def from_dict(cls, d: dict) -> "CalibrationRegion":
        """Create region from dictionary."""
        return cls(
            x=d.get("x", 300),
            y=d.get("y", 220),
            width=d.get("width", 40),
            height=d.get("height", 40),
        )

    @property
    def top_left(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def bottom_right(self) -> Tuple[int, int]:
        return (self.x + self.width, self.y + self.height)

    def contains(self, frame_shape: Tuple[int, ...]) -> bool:
        """True if the region lies fully inside a frame of this shape."""
        frame_height, frame_width = frame_shape[:2]
        return (self.x >= 0 and self.y >= 0 and self.width > 0 and self.height > 0
                and self.x + self.width <= frame_width
                and self.y + self.height <= frame_height)

    def crop(self, frame: np.ndarray) -> np.ndarray:
        """
        Pixels inside the region.

        Raises:
            ValueError: If the region does not fit inside the frame
        """
        if not self.contains(frame.shape):
            raise ValueError("Calibration region %r outside frame of shape %s" % (self, frame.shape))
        return frame[self.y:self.y + self.height, self.x:self.x + self.width]

    def colors_in_region(self, rgb_frame: np.ndarray) -> List[HSV]:
        """
        HSV colors of every pixel in the region, row-major.

        Args:
            rgb_frame: H x W x 3 RGB frame

        Returns:
            One HSV per pixel; filtering is left to the engine
        """
        patch = self.crop(rgb_frame)
        colors = frame_to_hsv_list(patch)
        logger.info("Sampled %d colors from region at (%d, %d), lighting: %s",
                    len(colors), self.x, self.y, assess_lighting(patch))
        return colors


def assess_lighting(rgb_patch: np.ndarray) -> str:
    """Rough lighting label for a sample patch, for the calibration log."""
    gray = cv2.cvtColor(normalize_rgb(np.ascontiguousarray(rgb_patch)), cv2.COLOR_RGB2GRAY) * 255
    brightness = float(np.mean(gray))
    contrast = float(np.std(gray))

    if brightness < 30:
        return "very_low"
    elif brightness < 60:
        return "low"
    elif brightness > 220:
        return "overexposed"
    elif contrast > 40:
        return "uneven"
    return "good"
