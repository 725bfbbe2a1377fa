"""Skin segmentation, blob clustering and fingertip extraction."""
from .blob import SkinBlob, merge
from .passes import assign_point, pass_one, pass_two, PassOneResult, PassTwoResult
from .fingertips import find_fingertips
from .engine import (
    SegmentationEngine,
    SegmentationConfig,
    SegmentationResult,
    DisplayOptions,
    ChannelModels,
    is_calibration_color,
)
