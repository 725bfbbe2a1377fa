"""Color representation and per-channel skin color models."""
from .hsv import HSV, rgb_to_hsv, normalize_rgb, frame_to_hsv_list
from .gaussian import GaussianChannelModel, erf
