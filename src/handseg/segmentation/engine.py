"""
Segmentation Engine
====================

Per-frame skin segmentation and fingertip extraction.

The engine owns three Gaussian channel models (hue, saturation, value)
fitted from a calibration sample. Each call to process_frame() runs the two
segmentation passes, the convex hull, and the fingertip filter over one RGB
frame and returns everything the display layer needs. Nothing is carried
over between frames except the fitted models.

The passes scan rows from the bottom of the frame up and work in scan
coordinates (y grows upward). Results are mirrored back to image
coordinates (row 0 at the top) before they are returned.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Tuple

import numpy as np

from ..color.gaussian import GaussianChannelModel
from ..color.hsv import HSV, rgb_to_hsv
from ..exceptions import CalibrationError, NotCalibratedError
from ..geometry.convex_hull import DEFAULT_MERGE_DISTANCE, cluster_hull, convex_hull
from ..geometry.points import Point, flip_vertical, point_to_index
from .blob import SEARCH_RANGE, SkinBlob
from .fingertips import find_fingertips
from .passes import CLOSE_THRESHOLD, MIN_BLOB_AREA, pass_one, pass_two

logger = logging.getLogger(__name__)

# Overlay colors as normalised RGB
WHITE = (1.0, 1.0, 1.0)
BLACK = (0.0, 0.0, 0.0)
GREY = (0.5, 0.5, 0.5)
GREEN = (0.0, 1.0, 0.0)


@dataclass
class SegmentationConfig:
    """Segmentation tuning parameters."""
    threshold: float = 0.15
    close_threshold: int = CLOSE_THRESHOLD
    search_range: float = SEARCH_RANGE
    hull_merge_distance: float = DEFAULT_MERGE_DISTANCE
    min_blob_area: float = MIN_BLOB_AREA

    # Calibration colors must be brighter and less saturated than these
    min_value: float = 0.1
    max_saturation: float = 0.9

    @classmethod
    def from_dict(cls, d: dict) -> "SegmentationConfig":
        """Create config from dictionary."""
        return cls(
            threshold=d.get("threshold", 0.15),
            close_threshold=d.get("close_threshold", CLOSE_THRESHOLD),
            search_range=d.get("search_range", SEARCH_RANGE),
            hull_merge_distance=d.get("hull_merge_distance", DEFAULT_MERGE_DISTANCE),
            min_blob_area=d.get("min_blob_area", MIN_BLOB_AREA),
            min_value=d.get("min_value", 0.1),
            max_saturation=d.get("max_saturation", 0.9),
        )


@dataclass
class DisplayOptions:
    """Debug recoloring written into the returned frame."""
    show_segmentation_first: bool = False   # pass one skin/non-skin in white/black
    show_segmentation_second: bool = False  # pass two counted pixels in grey/black
    show_contour: bool = False              # contour points in green

    @classmethod
    def from_dict(cls, d: dict) -> "DisplayOptions":
        """Create options from dictionary."""
        return cls(
            show_segmentation_first=d.get("show_segmentation_first", False),
            show_segmentation_second=d.get("show_segmentation_second", False),
            show_contour=d.get("show_contour", False),
        )

    def toggle(self, name: str) -> bool:
        """Flip one option by attribute name and return its new value."""
        value = not getattr(self, name)
        setattr(self, name, value)
        return value


class ChannelModels(NamedTuple):
    """The fitted hue, saturation and value models, swapped as one unit."""
    hue: GaussianChannelModel
    saturation: GaussianChannelModel
    value: GaussianChannelModel


@dataclass
class SegmentationResult:
    """Everything produced from one frame, in image coordinates."""
    image: np.ndarray
    hand: SkinBlob
    blobs: List[SkinBlob] = field(default_factory=list)
    contour: List[Point] = field(default_factory=list)
    hull: List[Point] = field(default_factory=list)
    fingertips: List[Point] = field(default_factory=list)

    @property
    def finger_count(self) -> int:
        return len(self.fingertips)

    @property
    def has_hand(self) -> bool:
        return self.hand.area > 0


def is_calibration_color(color: HSV, min_value: float = 0.1, max_saturation: float = 0.9) -> bool:
    """True for colors usable as calibration samples (not near-black, not over-saturated)."""
    return color.v > min_value and color.s < max_saturation


class SegmentationEngine:
    """
    Skin segmentation over RGB frames.

    Example:
        >>> engine = SegmentationEngine()
        >>> engine.calibrate(region.colors_in_region(frame.rgb))
        >>> result = engine.process_frame(frame.rgb)
        >>> print(result.finger_count, result.hand.mean_point)
    """

    def __init__(self, config: Optional[SegmentationConfig] = None):
        self.config = config or SegmentationConfig()
        self._models: Optional[ChannelModels] = None

    @property
    def is_calibrated(self) -> bool:
        return self._models is not None

    @property
    def models(self) -> Optional[ChannelModels]:
        return self._models

    def calibrate(self, colors: Iterable[HSV]) -> ChannelModels:
        """
        Fit fresh channel models from a calibration sample.

        Near-black and over-saturated colors are discarded first. The new
        models replace the old ones only once all three have been fitted,
        so a failed recalibration leaves the engine unchanged.

        Args:
            colors: HSV colors sampled from the calibration region

        Returns:
            The newly installed models

        Raises:
            CalibrationError: If fewer than two usable colors remain
        """
        colors = list(colors)
        usable = [c for c in colors
                  if is_calibration_color(c, self.config.min_value, self.config.max_saturation)]

        logger.info("Calibrating from %d colors (%d excluded)", len(usable), len(colors) - len(usable))
        if len(usable) < 2:
            raise CalibrationError(
                "Calibration needs at least 2 usable colors, got %d of %d" % (len(usable), len(colors)))

        models = ChannelModels(
            GaussianChannelModel("hue"),
            GaussianChannelModel("saturation"),
            GaussianChannelModel("value"),
        )
        models.hue.add_samples(c.h for c in usable)
        models.saturation.add_samples(c.s for c in usable)
        models.value.add_samples(c.v for c in usable)
        for model in models:
            model.fit()

        self._models = models
        for model in models:
            logger.info("  %-10s mean=%.4f stddev=%.4f", model.name, model.mean, model.stddev)
        return models

    def classify(self, hsv: np.ndarray, threshold: float,
                 models: Optional[ChannelModels] = None) -> np.ndarray:
        """
        H x W mask of pixels whose three channels all pass the threshold.

        Args:
            hsv: H x W x 3 normalised HSV frame
            threshold: Minimum cumulative probability per channel
            models: Models to use (defaults to the installed ones)
        """
        models = models or self._require_models()
        return (models.hue.within_threshold(hsv[..., 0], threshold)
                & models.saturation.within_threshold(hsv[..., 1], threshold)
                & models.value.within_threshold(hsv[..., 2], threshold))

    def process_frame(
        self,
        frame: np.ndarray,
        threshold: Optional[float] = None,
        options: Optional[DisplayOptions] = None,
    ) -> SegmentationResult:
        """
        Segment one frame and extract fingertip candidates.

        Args:
            frame: H x W x 3 RGB frame (uint8 or float in [0, 1])
            threshold: Classification threshold (default from config)
            options: Debug recoloring to apply to the returned image

        Returns:
            SegmentationResult for this frame

        Raises:
            NotCalibratedError: If calibrate() has never succeeded
        """
        # Hold one set of models for the whole frame
        models = self._require_models()
        threshold = self.config.threshold if threshold is None else threshold
        options = options or DisplayOptions()
        height = frame.shape[0]

        # Bottom row first: wrist and palm seed the dominant blob before the fingers
        hsv = rgb_to_hsv(frame)[::-1]
        first = pass_one(
            self.classify(hsv, threshold, models),
            self.classify(hsv, threshold / 2, models),
            close_threshold=self.config.close_threshold,
            min_blob_area=self.config.min_blob_area,
            search_range=self.config.search_range,
        )
        second = pass_two(self.classify(hsv, threshold / 3, models), first.largest)

        hull = cluster_hull(convex_hull(second.contour), self.config.hull_merge_distance)
        fingertips = find_fingertips(hull, second.blob)

        logger.debug("Frame: %d blobs, hand area=%.0f width=%d, %d contour, %d hull, %d fingertips",
                     len(first.blobs), second.blob.area, second.blob.width,
                     len(second.contour), len(hull), len(fingertips))

        def to_image(points: List[Point]) -> List[Point]:
            return [flip_vertical(point, height) for point in points]

        contour = to_image(second.contour)
        return SegmentationResult(
            image=self._render(frame, first.mask[::-1], second.mask[::-1], contour, options),
            hand=second.blob.flipped(height),
            blobs=[blob.flipped(height) for blob in first.blobs],
            contour=contour,
            hull=to_image(hull),
            fingertips=to_image(fingertips),
        )

    def _require_models(self) -> ChannelModels:
        models = self._models
        if models is None:
            raise NotCalibratedError("Segmentation engine has not been calibrated")
        return models

    @staticmethod
    def _render(
        frame: np.ndarray,
        first_mask: np.ndarray,
        second_mask: np.ndarray,
        contour: List[Point],
        options: DisplayOptions,
    ) -> np.ndarray:
        """Copy of the frame with the requested debug recoloring."""
        image = frame.copy()
        scale = 255 if image.dtype == np.uint8 else 1.0

        def color(rgb: Tuple[float, float, float]) -> np.ndarray:
            return (np.array(rgb) * scale).astype(image.dtype)

        if options.show_segmentation_first:
            image[first_mask] = color(WHITE)
            image[~first_mask] = color(BLACK)

        if options.show_segmentation_second:
            image[second_mask] = color(GREY)
            image[~second_mask] = color(BLACK)

        if options.show_contour and contour:
            width = image.shape[1]
            flat = image.reshape(-1, 3)
            indices = [point_to_index(width, point) for point in contour]
            flat[indices] = color(GREEN)

        return image
