"""Exceptions raised by the segmentation core."""


class SegmentationError(RuntimeError):
    """Base class for segmentation failures the caller must handle."""


class CalibrationError(SegmentationError):
    """Calibration sample too small to fit a color model."""


class NotCalibratedError(SegmentationError):
    """A color model or engine was queried before it was fitted."""
