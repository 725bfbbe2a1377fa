"""
HSV Color Module
=================

Immutable HSV color type and vectorised RGB to HSV conversion.
All channels are normalised to [0, 1]; hue wraps at 1.0.
"""

from typing import List, NamedTuple, Tuple

import cv2
import numpy as np


class HSV(NamedTuple):
    """A single color in hue/saturation/value space, each in [0, 1]."""
    h: float
    s: float
    v: float

    @classmethod
    def from_rgb(cls, r: float, g: float, b: float) -> "HSV":
        """
        Convert one RGB color to HSV.

        Args:
            r, g, b: Channel values in [0, 1]

        Returns:
            HSV color computed by the same conversion used for frames
        """
        pixel = np.array([[[r, g, b]]], dtype=np.float32)
        h, s, v = rgb_to_hsv(pixel)[0, 0]
        return cls(float(h), float(s), float(v))

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.h, self.s, self.v)


def normalize_rgb(frame: np.ndarray) -> np.ndarray:
    """
    Bring an RGB frame to float32 in [0, 1].

    uint8 frames are scaled by 1/255; float frames are taken as already
    normalised.
    """
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise ValueError("Expected an H x W x 3 RGB frame, got shape %s" % (frame.shape,))
    if frame.dtype == np.uint8:
        return frame.astype(np.float32) / 255.0
    return frame.astype(np.float32)


def rgb_to_hsv(frame: np.ndarray) -> np.ndarray:
    """
    Convert an RGB frame to normalised HSV.

    Args:
        frame: H x W x 3 RGB array (uint8 or float in [0, 1])

    Returns:
        H x W x 3 float array with hue, saturation and value in [0, 1]
    """
    hsv = cv2.cvtColor(normalize_rgb(frame), cv2.COLOR_RGB2HSV)
    # OpenCV reports float hue in degrees
    hsv[..., 0] /= 360.0
    return hsv


def frame_to_hsv_list(frame: np.ndarray) -> List[HSV]:
    """Row-major list of HSV colors for every pixel of an RGB frame."""
    hsv = rgb_to_hsv(frame).reshape(-1, 3)
    return [HSV(float(h), float(s), float(v)) for h, s, v in hsv]
