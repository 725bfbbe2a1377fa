"""
Hand Segmentation - Main Application
======================================

Live webcam demo for skin-color hand segmentation. Shows the camera view
with a calibration box; once calibrated, every frame is segmented and the
palm, fingertips and finger count are drawn on top.
"""

import argparse
import logging
import signal
import sys
from dataclasses import dataclass
from typing import Optional

import cv2

from .capture.calibration import CalibrationRegion
from .capture.camera import Camera, CameraConfig
from .exceptions import CalibrationError
from .recognition.finger_test import FingerTest, FingerTestConfig
from .recognition.hand_model import HandModel
from .segmentation.engine import DisplayOptions, SegmentationConfig, SegmentationEngine
from .utils.config import Config
from .utils.logger import log_timing, setup_logging
from .utils.performance import PerformanceMonitor, Timer
from .utils.visualization import Visualizer, VisualizerConfig

logger = logging.getLogger(__name__)

WINDOW_NAME = "Hand Segmentation"
THRESHOLD_STEP = 0.01

INSTRUCTIONS = [
    "c: calibrate   t: finger test",
    "1/2/3: debug overlays",
    "+/-: threshold   p: report",
    "q/ESC: quit",
]

_OPTION_KEYS = {
    ord("1"): "show_segmentation_first",
    ord("2"): "show_segmentation_second",
    ord("3"): "show_contour",
}


@dataclass
class AppConfig:
    """Typed configuration for the whole application."""
    camera: CameraConfig
    segmentation: SegmentationConfig
    calibration: CalibrationRegion
    display: DisplayOptions
    visualization: VisualizerConfig
    finger_test: FingerTestConfig
    performance_target_fps: float = 15.0
    performance_target_latency: float = 66.0
    log_level: str = "INFO"
    log_file: Optional[str] = None


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from a configuration dictionary."""
    performance = config_dict.get("performance", {})
    logging_cfg = config_dict.get("logging", {})
    return AppConfig(
        camera=CameraConfig.from_dict(config_dict.get("camera", {})),
        segmentation=SegmentationConfig.from_dict(config_dict.get("segmentation", {})),
        calibration=CalibrationRegion.from_dict(config_dict.get("calibration", {})),
        display=DisplayOptions.from_dict(config_dict.get("display", {})),
        visualization=VisualizerConfig.from_dict(config_dict.get("visualization", {})),
        finger_test=FingerTestConfig.from_dict(config_dict.get("finger_test", {})),
        performance_target_fps=performance.get("target_fps", 15.0),
        performance_target_latency=performance.get("target_latency_ms", 66.0),
        log_level=logging_cfg.get("level", "INFO"),
        log_file=logging_cfg.get("file"),
    )


class HandSegmentationApp:
    """
    Interactive segmentation loop.

    Stages per frame: capture, segmentation (only once calibrated),
    visualization. Keyboard input drives calibration, overlay toggles,
    threshold tuning and the finger test.
    """

    def __init__(self, config: AppConfig):
        self.config = config

        self.camera = Camera(config.camera)
        self.engine = SegmentationEngine(config.segmentation)
        self.region = config.calibration
        self.options = config.display
        self.visualizer = Visualizer(config.visualization)
        self.finger_test = FingerTest(config.finger_test)
        self.performance = PerformanceMonitor()

        self.performance.target_fps = config.performance_target_fps
        self.performance.target_latency_ms = config.performance_target_latency

        self.threshold = config.segmentation.threshold
        self._running = False
        self._calibrate_requested = False
        self.calibration_error: Optional[str] = None

    def start(self) -> bool:
        if not self.camera.start():
            logger.error("Failed to start camera")
            return False
        self.performance.start()
        self._running = True
        return True

    def stop(self) -> None:
        self._running = False
        self.camera.stop()
        self.performance.stop()
        cv2.destroyAllWindows()

    def run(self) -> None:
        if not self.start():
            return

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        session = Timer("session").start()
        try:
            self._main_loop()
        finally:
            self.stop()
            logger.info("Session ran %.1fs", session.stop())
            print(self.performance.get_report())

    @log_timing
    def calibrate(self, rgb_image) -> bool:
        """
        Recalibrate the engine from the calibration region of a frame.

        On failure the previous models stay active and the reason is kept
        in calibration_error for the view to show.

        Returns:
            True on success
        """
        try:
            self.engine.calibrate(self.region.colors_in_region(rgb_image))
        except (CalibrationError, ValueError) as e:
            logger.warning("Calibration failed: %s", e)
            self.calibration_error = str(e)
            return False
        self.calibration_error = None
        logger.info("Calibrated at threshold %.2f", self.threshold)
        return True

    def _main_loop(self) -> None:
        while self._running:
            self.performance.frame_start()

            with self.performance.measure("capture"):
                frame = self.camera.read()
            if frame is None:
                if (cv2.waitKey(1) & 0xFF) in (ord("q"), 27):
                    break
                continue

            rgb = frame.rgb
            if self._calibrate_requested:
                self._calibrate_requested = False
                self.calibrate(rgb)

            display = frame.image.copy()
            result = None
            if self.engine.is_calibrated:
                with self.performance.measure("segmentation"):
                    result = self.engine.process_frame(rgb, self.threshold, self.options)
                self.finger_test.update(result)
                display = cv2.cvtColor(result.image, cv2.COLOR_RGB2BGR)

            with self.performance.measure("visualization"):
                self._draw(display, result)

            cv2.imshow(WINDOW_NAME, display)
            self.performance.frame_complete()
            self._handle_key(cv2.waitKey(1) & 0xFF)

    def _draw(self, display, result) -> None:
        self.visualizer.draw_calibration_region(
            display, self.region, self.engine.is_calibrated,
            failed=self.calibration_error is not None)

        extra = {"Threshold": f"{self.threshold:.2f}"}
        if result is not None:
            self.visualizer.draw_blob(display, result.hand)
            self.visualizer.draw_hull(display, result.hull)
            self.visualizer.draw_hand(display, HandModel.from_result(result))
        if self.finger_test.is_running:
            extra["Finger test"] = f"{self.finger_test.remaining_s:.0f}s left"

        self.visualizer.draw_performance(
            display,
            fps=self.performance.fps,
            latency_ms=self.performance.frame_time_ms,
            extra_info=extra,
            target_fps=self.performance.target_fps,
        )
        self.visualizer.draw_instructions(display, INSTRUCTIONS)

    def _handle_key(self, key: int) -> None:
        if key in (ord("q"), 27):
            self._running = False
        elif key == ord("c"):
            self._calibrate_requested = True
        elif key in _OPTION_KEYS:
            name = _OPTION_KEYS[key]
            logger.info("%s: %s", name, self.options.toggle(name))
        elif key in (ord("+"), ord("=")):
            self.threshold = min(1.0, self.threshold + THRESHOLD_STEP)
            logger.info("Threshold: %.2f", self.threshold)
        elif key == ord("-"):
            self.threshold = max(0.0, self.threshold - THRESHOLD_STEP)
            logger.info("Threshold: %.2f", self.threshold)
        elif key == ord("t"):
            if self.engine.is_calibrated:
                self.finger_test.start()
            else:
                logger.warning("Calibrate before starting the finger test")
        elif key == ord("p"):
            print(self.performance.get_report())

    def _signal_handler(self, signum, frame) -> None:
        logger.info("Received signal %d, shutting down...", signum)
        self._running = False


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Skin-color hand segmentation with fingertip detection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keyboard Controls:
  c         - Calibrate from the box (cover it with skin first)
  1 / 2 / 3 - Toggle first pass / second pass / contour overlays
  + / -     - Raise / lower the classification threshold
  t         - Start a timed finger count test
  p         - Print performance report
  q/ESC     - Quit

Examples:
  handseg
  handseg --threshold 0.2 --debug
  handseg --config my_config.yaml --log-file logs/handseg.log
        """
    )
    parser.add_argument("--config", "-c", default=None, help="Path to configuration file")
    parser.add_argument("--threshold", "-t", type=float, default=None,
                        help="Override segmentation threshold (0-1)")
    parser.add_argument("--log-file", default=None, help="Write a rotating debug log here")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    config = Config().load(args.config)
    app_config = create_app_config(config.as_dict())

    setup_logging(
        level="DEBUG" if args.debug else app_config.log_level,
        log_file=args.log_file or app_config.log_file,
    )

    if args.threshold is not None:
        if not 0.0 <= args.threshold <= 1.0:
            parser.error("--threshold must be between 0 and 1")
        app_config.segmentation.threshold = args.threshold

    logger.info("Starting with threshold %.2f, camera %d",
                app_config.segmentation.threshold, app_config.camera.device_id)

    HandSegmentationApp(app_config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
