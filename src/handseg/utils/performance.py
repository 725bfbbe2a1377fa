"""
Performance Monitoring Module
==============================

Frame rate and per-stage timing for the segmentation loop. The loop has
three stages (capture, segmentation, visualization); the segmentation
stage dominates, since the blob fold walks every skin pixel in scan order.
"""

import time
import logging
import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Deque, Dict, Optional

logger = logging.getLogger(__name__)

STAGES = ("capture", "segmentation", "visualization")


class Timer:
    """
    Wall-clock stopwatch, usable as a context manager.

    Example:
        >>> with Timer("segment") as t:
        ...     engine.process_frame(rgb)
        >>> print(f"{t.name}: {t.elapsed_ms:.1f}ms")
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._started: Optional[float] = None
        self._stopped: Optional[float] = None

    def start(self) -> "Timer":
        self._started = time.perf_counter()
        self._stopped = None
        return self

    def stop(self) -> float:
        """Freeze the timer and return elapsed seconds."""
        self._stopped = time.perf_counter()
        return self.elapsed

    @property
    def elapsed(self) -> float:
        """Seconds since start(); keeps running until stop()."""
        if self._started is None:
            return 0.0
        end = self._stopped if self._stopped is not None else time.perf_counter()
        return end - self._started

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False


@dataclass
class PerformanceMetrics:
    """Snapshot of loop performance; stage times are window averages in ms."""
    fps: float = 0.0
    frame_time_ms: float = 0.0
    stage_times_ms: Dict[str, float] = field(default_factory=dict)
    total_frames: int = 0
    dropped_frames: int = 0

    @property
    def dropped_percent(self) -> float:
        return 100.0 * self.dropped_frames / max(1, self.total_frames)

    @property
    def segmentation_share(self) -> float:
        """Fraction of the frame time spent in segmentation."""
        if self.frame_time_ms <= 0:
            return 0.0
        return self.stage_times_ms.get("segmentation", 0.0) / self.frame_time_ms


class PerformanceMonitor:
    """
    Rolling frame-rate and stage-time statistics over the last frames.

    A frame counts as dropped when it takes longer than one target frame
    period.

    Example:
        >>> monitor = PerformanceMonitor()
        >>> monitor.start()
        >>> monitor.frame_start()
        >>> with monitor.measure("segmentation"):
        ...     result = engine.process_frame(rgb)
        >>> monitor.frame_complete()
    """

    STAGES = STAGES

    def __init__(self, window_size: int = 30):
        """
        Args:
            window_size: Number of recent frames averaged
        """
        self.window_size = window_size
        self.target_fps: float = 15.0
        self.target_latency_ms: float = 66.0

        self._lock = threading.Lock()
        self._frame_times: Deque[float] = deque(maxlen=window_size)
        self._stage_times: Dict[str, Deque[float]] = self._empty_stages()
        self._current_frame: Optional[float] = None
        self._total_frames = 0
        self._dropped_frames = 0

    def _empty_stages(self) -> Dict[str, Deque[float]]:
        return {stage: deque(maxlen=self.window_size) for stage in self.STAGES}

    def start(self) -> None:
        """Clear all statistics."""
        with self._lock:
            self._frame_times.clear()
            self._stage_times = self._empty_stages()
            self._total_frames = 0
            self._dropped_frames = 0
        logger.info("Performance monitor started (target %.0f fps)", self.target_fps)

    def stop(self) -> None:
        logger.info("Performance monitor stopped: %d frames, %d dropped",
                    self._total_frames, self._dropped_frames)

    def frame_start(self) -> None:
        self._current_frame = time.perf_counter()

    def frame_complete(self) -> None:
        """Close the current frame; ignored without a matching frame_start()."""
        if self._current_frame is None:
            return

        duration = time.perf_counter() - self._current_frame
        self._current_frame = None
        with self._lock:
            self._frame_times.append(duration)
            self._total_frames += 1
            if duration * self.target_fps > 1.0:
                self._dropped_frames += 1

    @contextmanager
    def measure(self, stage: str):
        """
        Time a block as one loop stage, even if it raises.

        Args:
            stage: Stage name; names outside STAGES get their own window
        """
        started = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - started
            with self._lock:
                if stage not in self._stage_times:
                    self._stage_times[stage] = deque(maxlen=self.window_size)
                self._stage_times[stage].append(duration)

    @staticmethod
    def _average_ms(values) -> float:
        return sum(values) / len(values) * 1000 if values else 0.0

    @property
    def frame_time_ms(self) -> float:
        with self._lock:
            return self._average_ms(self._frame_times)

    @property
    def fps(self) -> float:
        frame_time = self.frame_time_ms
        return 1000.0 / frame_time if frame_time > 0 else 0.0

    def stage_time_ms(self, stage: str) -> float:
        """Average duration of one stage in ms (0 if never measured)."""
        with self._lock:
            return self._average_ms(self._stage_times.get(stage))

    @property
    def is_meeting_targets(self) -> bool:
        return self.fps >= self.target_fps and self.frame_time_ms <= self.target_latency_ms

    def get_metrics(self) -> PerformanceMetrics:
        with self._lock:
            stages = {name: self._average_ms(times) for name, times in self._stage_times.items()}
            total, dropped = self._total_frames, self._dropped_frames
        return PerformanceMetrics(
            fps=self.fps,
            frame_time_ms=self.frame_time_ms,
            stage_times_ms=stages,
            total_frames=total,
            dropped_frames=dropped,
        )

    def get_report(self) -> str:
        """Multi-line summary for the console."""
        metrics = self.get_metrics()
        lines = [
            "Performance Report [%s]" % ("OK" if self.is_meeting_targets else "SLOW"),
            "=" * 40,
            "FPS: %.1f (target: >=%g)" % (metrics.fps, self.target_fps),
            "Frame time: %.1fms (target: <=%gms)" % (metrics.frame_time_ms, self.target_latency_ms),
            "",
            "Per-Stage Breakdown:",
        ]
        for stage, ms in metrics.stage_times_ms.items():
            lines.append("  %s: %.2fms" % (stage.capitalize(), ms))
        lines += [
            "  Segmentation share: %.0f%%" % (100 * metrics.segmentation_share),
            "",
            "Frames: %d total, %d dropped (%.1f%%)"
            % (metrics.total_frames, metrics.dropped_frames, metrics.dropped_percent),
        ]
        return "\n".join(lines) + "\n"
