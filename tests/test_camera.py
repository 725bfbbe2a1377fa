"""
Tests for Camera Module
========================
"""

import pytest
import numpy as np
import sys
from pathlib import Path
from unittest.mock import patch, MagicMock

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from handseg.capture.camera import Camera, CameraConfig, Frame


class TestCameraConfig:
    """Test suite for CameraConfig."""

    def test_default_values(self):
        """Defaults match a 640x480 mirrored webcam."""
        config = CameraConfig()

        assert config.device_id == 0
        assert config.width == 640
        assert config.height == 480
        assert config.flip_horizontal is True
        assert config.warmup_frames == 5

    def test_from_dict_partial(self):
        """Missing keys fall back to defaults."""
        config = CameraConfig.from_dict({"device_id": 2, "flip_horizontal": False})

        assert config.device_id == 2
        assert config.flip_horizontal is False
        assert config.width == 640


class TestFrame:
    """Test suite for Frame class."""

    def test_rgb_conversion(self):
        """BGR blue becomes RGB blue in the last channel."""
        image = np.zeros((1, 1, 3), dtype=np.uint8)
        image[0, 0] = [255, 0, 0]  # Blue in BGR

        rgb = Frame(image=image, timestamp=0, frame_number=0).rgb

        assert list(rgb[0, 0]) == [0, 0, 255]

    def test_size_is_width_height(self):
        """Frame size is reported as (width, height)."""
        frame = Frame(image=np.zeros((480, 640, 3), dtype=np.uint8), timestamp=0, frame_number=1)
        assert frame.size == (640, 480)


class TestCamera:
    """Test suite for Camera class."""

    @pytest.fixture
    def mock_cv2(self):
        """Mock OpenCV VideoCapture."""
        with patch("handseg.capture.camera.cv2") as mock:
            mock_cap = MagicMock()
            mock_cap.isOpened.return_value = True
            mock_cap.read.return_value = (True, np.zeros((480, 640, 3), dtype=np.uint8))
            mock_cap.get.return_value = 30.0
            mock.VideoCapture.return_value = mock_cap
            mock.flip.side_effect = lambda image, code: image[:, ::-1]
            yield mock

    def test_camera_init(self):
        """A new camera is idle and reads nothing."""
        camera = Camera(CameraConfig(device_id=0))

        assert not camera.is_running
        assert camera.read() is None

    def test_start_success(self, mock_cv2):
        """Start opens the device and runs the warmup reads."""
        camera = Camera(CameraConfig(warmup_frames=3, threaded=False))

        assert camera.start() is True
        assert camera.is_running
        # One test read plus three warmup reads
        assert mock_cv2.VideoCapture.return_value.read.call_count == 4

        camera.stop()
        assert not camera.is_running

    def test_start_fails_when_device_closed(self, mock_cv2):
        """An unopened device makes start() return False."""
        mock_cv2.VideoCapture.return_value.isOpened.return_value = False

        camera = Camera(CameraConfig(warmup_frames=0, threaded=False))

        assert camera.start() is False
        assert not camera.is_running

    def test_start_fails_without_frames(self, mock_cv2):
        """A device that opens but yields no frame is released."""
        mock_cap = mock_cv2.VideoCapture.return_value
        mock_cap.read.return_value = (False, None)

        camera = Camera(CameraConfig(warmup_frames=0, threaded=False))

        assert camera.start() is False
        mock_cap.release.assert_called_once()

    def test_synchronous_read_counts_frames(self, mock_cv2):
        """Synchronous reads grab, flip and number frames."""
        with Camera(CameraConfig(warmup_frames=0, threaded=False)) as camera:
            first = camera.read()
            second = camera.read()

        assert first.frame_number == 1
        assert second.frame_number == 2
        assert first.image.shape == (480, 640, 3)
        assert mock_cv2.flip.call_count == 2

    def test_resolution(self):
        """Resolution is the requested size."""
        camera = Camera(CameraConfig(width=800, height=600))

        assert camera.resolution == (800, 600)

    def test_context_manager(self, mock_cv2):
        """Camera stops when leaving the context."""
        with Camera(CameraConfig(warmup_frames=0, threaded=False)) as camera:
            assert camera.is_running

        assert not camera.is_running


class TestCameraIntegration:
    """Integration tests requiring real camera (marked as slow)."""

    @pytest.mark.skip(reason="Requires physical camera")
    def test_real_camera_capture(self):
        """Capture one frame from a real camera."""
        camera = Camera(CameraConfig(warmup_frames=5, threaded=False))

        try:
            if camera.start():
                frame = camera.read()

                assert frame is not None
                assert frame.rgb.shape[2] == 3
        finally:
            camera.stop()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
