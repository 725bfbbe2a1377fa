"""
Finger Count Test Harness
==========================

Timed accuracy check for live tuning: the user holds up a known number of
fingers and the harness counts how many processed frames report exactly
that many fingertips.
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..segmentation.engine import SegmentationResult

logger = logging.getLogger(__name__)


@dataclass
class FingerTestConfig:
    """Finger test settings."""
    target_fingers: int = 5
    duration_s: float = 60.0

    @classmethod
    def from_dict(cls, d: dict) -> "FingerTestConfig":
        """Create config from dictionary."""
        return cls(
            target_fingers=d.get("target_fingers", 5),
            duration_s=d.get("duration_s", 60.0),
        )


@dataclass
class FingerTestResult:
    """Outcome of one finger test run."""
    frames: int
    successful_frames: int

    @property
    def percentage(self) -> float:
        """Share of frames with the target count, 0-100."""
        if self.frames == 0:
            return 0.0
        return 100.0 * self.successful_frames / self.frames


class FingerTest:
    """
    Counts frames whose fingertip count matches a target.

    Example:
        >>> test = FingerTest(FingerTestConfig(target_fingers=3, duration_s=10))
        >>> test.start()
        >>> while test.is_running:
        ...     test.update(engine.process_frame(camera.read().rgb))
        >>> print(test.results().percentage)
    """

    def __init__(self, config: Optional[FingerTestConfig] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config or FingerTestConfig()
        if not 0 <= self.config.target_fingers <= 5:
            raise ValueError("target_fingers must be between 0 and 5, got %d"
                             % self.config.target_fingers)
        self._clock = clock
        self._frames = 0
        self._successful_frames = 0
        self._started_at: Optional[float] = None

    def start(self) -> None:
        """Reset counters and start the timer."""
        self._frames = 0
        self._successful_frames = 0
        self._started_at = self._clock()
        logger.info("Finger test started: %d fingers for %.0fs",
                    self.config.target_fingers, self.config.duration_s)

    @property
    def is_running(self) -> bool:
        return self._started_at is not None

    @property
    def remaining_s(self) -> float:
        """Seconds left in the current run (0 when stopped)."""
        if self._started_at is None:
            return 0.0
        return max(0.0, self.config.duration_s - (self._clock() - self._started_at))

    def update(self, result: SegmentationResult) -> None:
        """Record one processed frame; ends the run once time is up."""
        if not self.is_running:
            return

        if self.remaining_s <= 0:
            self._started_at = None
            self.log_results()
            return

        self._frames += 1
        if len(result.fingertips) == self.config.target_fingers:
            self._successful_frames += 1

    def results(self) -> FingerTestResult:
        return FingerTestResult(frames=self._frames, successful_frames=self._successful_frames)

    def log_results(self) -> FingerTestResult:
        """Write the current results to the log and return them."""
        result = self.results()
        logger.info("Finger test results: %d frames, %d successful (%.1f%%)",
                    result.frames, result.successful_frames, result.percentage)
        return result
