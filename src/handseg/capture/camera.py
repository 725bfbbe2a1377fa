"""
Camera Capture Module
======================

OpenCV webcam source for the segmentation loop. In threaded mode a
background thread keeps replacing a single "latest frame" slot, so the
loop always segments the newest image instead of working through a queue
of stale ones.
"""

import time
import logging
import threading
from collections import deque
from dataclasses import dataclass, fields
from typing import Deque, Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class CameraConfig:
    """Capture device settings."""
    device_id: int = 0
    width: int = 640
    height: int = 480
    fps: int = 30
    buffer_size: int = 1
    threaded: bool = True
    flip_horizontal: bool = True  # mirror view
    warmup_frames: int = 5        # frames dropped after opening

    @classmethod
    def from_dict(cls, config: dict) -> "CameraConfig":
        """Create config from the `camera:` YAML section."""
        return cls(**{f.name: config[f.name] for f in fields(cls) if f.name in config})


@dataclass
class Frame:
    """One captured BGR image with capture metadata."""
    image: np.ndarray
    timestamp: float
    frame_number: int

    @property
    def rgb(self) -> np.ndarray:
        """RGB copy of the image, the layout the segmentation engine expects."""
        return cv2.cvtColor(self.image, cv2.COLOR_BGR2RGB)

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) in pixels."""
        height, width = self.image.shape[:2]
        return (width, height)


class Camera:
    """
    Webcam source with optional threaded capture.

    Example:
        >>> with Camera(CameraConfig(width=320, height=240)) as camera:
        ...     frame = camera.read()
        ...     if frame:
        ...         result = engine.process_frame(frame.rgb)
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()
        self._cap: Optional[cv2.VideoCapture] = None
        self._running = False
        self._frame_number = 0
        self._grab_times: Deque[float] = deque(maxlen=30)

        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._latest: Optional[Frame] = None

    def _open_device(self) -> Optional[cv2.VideoCapture]:
        """Open and configure the device; None unless it delivers a frame."""
        cap = cv2.VideoCapture(self.config.device_id)
        if not cap.isOpened():
            logger.error("Failed to open camera device %d", self.config.device_id)
            return None

        for prop, value in ((cv2.CAP_PROP_FRAME_WIDTH, self.config.width),
                            (cv2.CAP_PROP_FRAME_HEIGHT, self.config.height),
                            (cv2.CAP_PROP_FPS, self.config.fps),
                            (cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)):
            cap.set(prop, value)

        ok, _ = cap.read()
        if not ok:
            logger.error("Camera %d opened but returned no frames", self.config.device_id)
            cap.release()
            return None
        return cap

    def start(self) -> bool:
        """
        Open the device, discard the warmup frames and begin capturing.

        Returns:
            True if a working device was opened
        """
        logger.info("Opening camera %d at %dx%d@%dfps",
                    self.config.device_id, self.config.width, self.config.height, self.config.fps)

        self._cap = self._open_device()
        if self._cap is None:
            return False

        logger.info("Camera ready: %dx%d@%.0ffps",
                    int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
                    int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
                    self._cap.get(cv2.CAP_PROP_FPS))

        # Let auto exposure settle
        for _ in range(self.config.warmup_frames):
            self._cap.read()

        self._frame_number = 0
        self._running = True
        if self.config.threaded:
            self._thread = threading.Thread(target=self._capture_loop, daemon=True)
            self._thread.start()
            logger.debug("Capture thread started")
        return True

    def stop(self) -> None:
        """Stop capturing and release the device."""
        self._running = False

        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None

        logger.info("Camera stopped after %d frames", self._frame_number)

    def read(self) -> Optional[Frame]:
        """
        Newest frame, or None if the camera is not running.

        Threaded mode returns the most recent background capture (None until
        the first one lands); synchronous mode grabs a new frame.
        """
        if not self._running:
            return None
        if not self.config.threaded:
            return self._capture_frame()
        with self._lock:
            return self._latest

    def _capture_frame(self) -> Optional[Frame]:
        if self._cap is None:
            return None

        started = time.perf_counter()
        ok, image = self._cap.read()
        if not ok or image is None:
            logger.warning("Frame grab failed")
            return None
        self._grab_times.append(time.perf_counter() - started)

        if self.config.flip_horizontal:
            image = cv2.flip(image, 1)
        self._frame_number += 1
        return Frame(image=image, timestamp=time.time(), frame_number=self._frame_number)

    def _capture_loop(self) -> None:
        while self._running:
            frame = self._capture_frame()
            if frame is not None:
                with self._lock:
                    self._latest = frame

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def resolution(self) -> Tuple[int, int]:
        """Requested (width, height)."""
        return (self.config.width, self.config.height)

    @property
    def avg_capture_time_ms(self) -> float:
        """Mean grab time over the last 30 frames in milliseconds."""
        if not self._grab_times:
            return 0.0
        return sum(self._grab_times) / len(self._grab_times) * 1000

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
