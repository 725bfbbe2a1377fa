"""
Tests for Color Models
=======================
"""

import colorsys
import math
import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from handseg.color.gaussian import GaussianChannelModel, erf
from handseg.color.hsv import HSV, frame_to_hsv_list, normalize_rgb, rgb_to_hsv
from handseg.exceptions import CalibrationError, NotCalibratedError, SegmentationError


class TestErf:
    """Test suite for the error function."""

    def test_zero(self):
        """erf(0) is zero up to the approximation error."""
        assert abs(erf(0.0)) < 1e-7

    def test_known_values(self):
        """Agrees with math.erf within the approximation bound."""
        for x in (-2.5, -1.0, -0.3, 0.2, 0.5, 1.0, 1.7, 3.0):
            assert erf(x) == pytest.approx(math.erf(x), abs=2e-7)

    def test_odd_symmetry(self):
        """erf(-x) == -erf(x)."""
        for x in (0.1, 0.8, 2.0):
            assert erf(-x) == pytest.approx(-erf(x))

    def test_saturates(self):
        """Large arguments approach one."""
        assert erf(5.0) > 0.999999
        assert erf(-5.0) < -0.999999

    def test_array_input(self):
        """Arrays are evaluated element-wise and keep their shape."""
        values = np.array([[0.0, 1.0], [-1.0, 2.0]])
        result = erf(values)

        assert isinstance(result, np.ndarray)
        assert result.shape == (2, 2)
        assert result[0, 1] == pytest.approx(math.erf(1.0), abs=2e-7)

    def test_scalar_returns_float(self):
        """Scalar input gives a plain float."""
        assert isinstance(erf(0.5), float)


class TestGaussianChannelModel:
    """Test suite for GaussianChannelModel."""

    @pytest.fixture
    def model(self):
        """Model fitted to a small spread of hue values."""
        m = GaussianChannelModel("hue")
        m.add_samples([0.03, 0.04, 0.05, 0.06, 0.07])
        m.fit()
        return m

    def test_statistics(self, model):
        """Mean and unbiased variance of the population."""
        assert model.mean == pytest.approx(0.05)
        assert model.variance == pytest.approx(np.var([0.03, 0.04, 0.05, 0.06, 0.07], ddof=1))
        assert model.stddev == pytest.approx(math.sqrt(model.variance))

    def test_probability_at_mean(self, model):
        """CDF at the mean is one half."""
        assert model.probability(0.05) == pytest.approx(0.5, abs=1e-6)

    def test_probability_is_monotone(self, model):
        """CDF never decreases."""
        xs = np.linspace(-0.1, 0.2, 50)
        probs = model.probability(xs)

        assert np.all(np.diff(probs) >= 0)
        assert probs[0] < 0.01
        assert probs[-1] > 0.99

    def test_within_threshold(self, model):
        """within_threshold compares the CDF with >=."""
        assert model.within_threshold(0.05, 0.5)
        assert model.within_threshold(0.2, 0.15)
        assert not model.within_threshold(-0.1, 0.15)

    def test_within_threshold_array(self, model):
        """Array input gives a boolean array."""
        mask = model.within_threshold(np.array([0.0, 0.05, 0.1]), 0.15)

        assert mask.dtype == bool
        assert list(mask) == [False, True, True]

    def test_fit_needs_two_samples(self):
        """Fitting fewer than two values is a calibration error."""
        model = GaussianChannelModel("value")
        with pytest.raises(CalibrationError):
            model.fit()

        model.add_sample(0.5)
        with pytest.raises(CalibrationError):
            model.fit()

    def test_query_before_fit(self):
        """Querying an unfitted model raises."""
        model = GaussianChannelModel("saturation")
        model.add_samples([0.1, 0.2])

        with pytest.raises(NotCalibratedError):
            model.probability(0.1)
        assert not model.is_fitted

    def test_zero_variance_step(self):
        """Identical samples give a step function around the mean."""
        model = GaussianChannelModel("hue")
        model.add_samples([0.3] * 10)
        model.fit()

        assert model.variance == 0.0
        assert model.probability(0.3) == 0.5
        assert model.probability(0.31) == 1.0
        assert model.probability(0.29) == 0.0

    def test_identical_samples_fit_exactly(self):
        """A uniform sample fits to its own value with no spread."""
        model = GaussianChannelModel("value")
        model.add_samples([0.1] * 10)
        model.fit()

        assert model.mean == 0.1
        assert model.variance == 0.0
        assert model.stddev == 0.0

    def test_stale_until_refit(self, model):
        """New samples do not change the fitted statistics until fit()."""
        assert not model.is_stale
        model.add_sample(1.0)

        assert model.is_stale
        assert model.mean == pytest.approx(0.05)
        assert model.size == 6

        model.fit()
        assert model.mean > 0.05

    def test_errors_share_base(self):
        """Both errors are segmentation errors."""
        assert issubclass(CalibrationError, SegmentationError)
        assert issubclass(NotCalibratedError, SegmentationError)


class TestHSV:
    """Test suite for HSV conversion."""

    def test_primary_colors(self):
        """Primary colors map to the expected hues."""
        assert HSV.from_rgb(1.0, 0.0, 0.0).h == pytest.approx(0.0, abs=1e-6)
        assert HSV.from_rgb(0.0, 1.0, 0.0).h == pytest.approx(1 / 3, abs=1e-4)
        assert HSV.from_rgb(0.0, 0.0, 1.0).h == pytest.approx(2 / 3, abs=1e-4)

    def test_matches_colorsys(self):
        """Frame conversion agrees with colorsys."""
        rgb = (0.8, 0.63, 0.56)
        expected = colorsys.rgb_to_hsv(*rgb)
        hsv = HSV.from_rgb(*rgb)

        assert hsv.as_tuple() == pytest.approx(expected, abs=1e-4)

    def test_uint8_frames_are_scaled(self):
        """uint8 and float frames give the same HSV."""
        frame = np.array([[[204, 161, 143]]], dtype=np.uint8)

        from_uint8 = rgb_to_hsv(frame)
        from_float = rgb_to_hsv(frame.astype(np.float64) / 255.0)

        assert np.allclose(from_uint8, from_float, atol=1e-5)
        assert from_uint8[0, 0, 2] == pytest.approx(0.8, abs=1e-5)

    def test_frame_to_hsv_list_row_major(self):
        """Pixels are listed row by row."""
        frame = np.zeros((2, 2, 3), dtype=np.float32)
        frame[0, 1] = (1.0, 1.0, 1.0)

        colors = frame_to_hsv_list(frame)

        assert len(colors) == 4
        assert colors[1].v == pytest.approx(1.0)
        assert colors[2].v == pytest.approx(0.0)

    def test_normalize_rejects_grayscale(self):
        """Frames without three channels are rejected."""
        with pytest.raises(ValueError):
            normalize_rgb(np.zeros((4, 4), dtype=np.uint8))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
