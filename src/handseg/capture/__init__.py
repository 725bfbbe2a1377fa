"""Camera capture and calibration region sampling."""
from .camera import Camera, CameraConfig, Frame
from .calibration import CalibrationRegion, assess_lighting
