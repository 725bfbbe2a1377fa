"""
Visualization Module
=====================

OpenCV overlays for the live view: palm and fingertip markers, the hand's
bounding box, the calibration rectangle and status text.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from ..capture.calibration import CalibrationRegion
from ..recognition.hand_model import HandModel
from ..segmentation.blob import SkinBlob


@dataclass
class VisualizerConfig:
    """Overlay settings; colors are BGR."""
    show_palm: bool = True
    show_fingertips: bool = True
    show_hull: bool = False
    show_bounding_box: bool = False
    show_finger_count: bool = True
    show_fps: bool = True

    palm_color: Tuple[int, int, int] = (255, 128, 0)       # Blue
    fingertip_color: Tuple[int, int, int] = (0, 0, 255)    # Red
    hull_color: Tuple[int, int, int] = (0, 255, 255)       # Yellow
    bbox_color: Tuple[int, int, int] = (255, 0, 255)       # Magenta
    region_color: Tuple[int, int, int] = (0, 255, 0)       # Green
    text_color: Tuple[int, int, int] = (255, 255, 255)     # White
    warning_color: Tuple[int, int, int] = (0, 0, 255)      # Red

    fingertip_radius: int = 8
    font_scale: float = 0.7
    font_thickness: int = 2

    @classmethod
    def from_dict(cls, config: dict) -> "VisualizerConfig":
        """Create config from dictionary."""
        colors = config.get("colors", {})
        return cls(
            show_palm=config.get("show_palm", True),
            show_fingertips=config.get("show_fingertips", True),
            show_hull=config.get("show_hull", False),
            show_bounding_box=config.get("show_bounding_box", False),
            show_finger_count=config.get("show_finger_count", True),
            show_fps=config.get("show_fps", True),
            palm_color=tuple(colors.get("palm", [255, 128, 0])),
            fingertip_color=tuple(colors.get("fingertips", [0, 0, 255])),
            hull_color=tuple(colors.get("hull", [0, 255, 255])),
            bbox_color=tuple(colors.get("bounding_box", [255, 0, 255])),
            region_color=tuple(colors.get("region", [0, 255, 0])),
            text_color=tuple(colors.get("text", [255, 255, 255])),
            fingertip_radius=config.get("fingertip_radius", 8),
            font_scale=config.get("font_scale", 0.7),
            font_thickness=config.get("font_thickness", 2),
        )


class Visualizer:
    """
    Draws segmentation output onto BGR display frames.

    Example:
        >>> viz = Visualizer()
        >>> display = cv2.cvtColor(result.image, cv2.COLOR_RGB2BGR)
        >>> viz.draw_hand(display, HandModel.from_result(result))
        >>> viz.draw_performance(display, fps=monitor.fps)
        >>> cv2.imshow("handseg", display)
    """

    def __init__(self, config: Optional[VisualizerConfig] = None):
        self.config = config or VisualizerConfig()
        self._font = cv2.FONT_HERSHEY_SIMPLEX

    def draw_hand(self, image: np.ndarray, hand: HandModel) -> np.ndarray:
        """
        Draw the palm circle, fingertip dots and finger count.

        Args:
            image: BGR image to draw on
            hand: Hand model in image coordinates

        Returns:
            The same image
        """
        if self.config.show_palm and hand.palm_radius > 0:
            cv2.circle(image, hand.palm_position.to_pixel(),
                       int(hand.palm_radius), self.config.palm_color, 2)

        if self.config.show_fingertips:
            for tip in hand.fingertips:
                cv2.circle(image, tip.to_pixel(), self.config.fingertip_radius,
                           self.config.fingertip_color, -1)
                cv2.line(image, hand.palm_position.to_pixel(), tip.to_pixel(),
                         self.config.fingertip_color, 1)

        if self.config.show_finger_count:
            height = image.shape[0]
            cv2.putText(image, f"Fingers: {hand.finger_count}", (20, height - 20),
                        self._font, self.config.font_scale * 1.2,
                        self.config.text_color, self.config.font_thickness)
        return image

    def draw_blob(self, image: np.ndarray, blob: SkinBlob) -> np.ndarray:
        """Draw the dominant blob's bounding box if enabled."""
        if self.config.show_bounding_box and blob.area > 0:
            cv2.rectangle(image, blob.min_point.to_pixel(), blob.max_point.to_pixel(),
                          self.config.bbox_color, 1)
        return image

    def draw_hull(self, image: np.ndarray, hull: List) -> np.ndarray:
        """Draw the clustered hull as a closed polyline if enabled."""
        if self.config.show_hull and len(hull) >= 2:
            pts = np.array([p.to_pixel() for p in hull], dtype=np.int32).reshape(-1, 1, 2)
            cv2.polylines(image, [pts], True, self.config.hull_color, 1)
        return image

    def draw_calibration_region(
        self,
        image: np.ndarray,
        region: CalibrationRegion,
        calibrated: bool = False,
        failed: bool = False,
    ) -> np.ndarray:
        """
        Outline the calibration rectangle with a prompt above it.

        Args:
            image: BGR image to draw on
            region: Calibration rectangle in image coordinates
            calibrated: Whether the engine already has color models
            failed: Whether the last calibration attempt was rejected
        """
        if failed:
            color, label = self.config.warning_color, "Calibration failed, press c to retry"
        elif calibrated:
            color, label = self.config.region_color, "Recalibrate: c"
        else:
            color, label = self.config.warning_color, "Cover box with skin, press c"
        cv2.rectangle(image, region.top_left, region.bottom_right, color, 2)

        x, y = region.top_left
        cv2.putText(image, label, (x - 60, max(15, y - 10)), self._font, 0.5, color, 1)
        return image

    def draw_performance(
        self,
        image: np.ndarray,
        fps: float = 0.0,
        latency_ms: float = 0.0,
        extra_info: Optional[Dict[str, str]] = None,
        target_fps: float = 15.0,
    ) -> np.ndarray:
        """
        Draw the FPS counter, frame time and extra key/value lines.

        Returns:
            The same image
        """
        x, y = 20, 30

        if self.config.show_fps:
            color = self.config.text_color if fps >= target_fps else self.config.warning_color
            cv2.putText(image, f"FPS: {fps:.1f}  ({latency_ms:.0f}ms)", (x, y),
                        self._font, self.config.font_scale, color, self.config.font_thickness)
            y += 25

        for key, value in (extra_info or {}).items():
            cv2.putText(image, f"{key}: {value}", (x, y), self._font, 0.5, self.config.text_color, 1)
            y += 20

        return image

    def draw_instructions(self, image: np.ndarray, instructions: List[str]) -> np.ndarray:
        """Draw help lines in the bottom-right corner."""
        height, width = image.shape[:2]
        line_height = 18
        x = width - 220
        y = height - len(instructions) * line_height - 10

        for i, line in enumerate(instructions):
            cv2.putText(image, line, (x, y + i * line_height), self._font, 0.45,
                        self.config.text_color, 1)
        return image
