"""
Gaussian Channel Model
=======================

Per-channel normal distribution fitted to a calibration sample. A pixel
channel value is scored by the fitted cumulative distribution function and
compared against a probability threshold.

The error function uses the Abramowitz & Stegun rational approximation
(formula 7.1.26, maximum absolute error about 1.5e-7), evaluated with NumPy
so that whole frames can be scored at once.
"""

import math
import logging
from typing import Iterable, List, Optional, Union

import numpy as np

from ..exceptions import CalibrationError, NotCalibratedError

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]

# A&S 7.1.26 coefficients
_P = 0.3275911
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429


def erf(x: ArrayLike) -> ArrayLike:
    """
    Error function, odd-symmetric, for scalars or arrays.

    Args:
        x: Scalar or NumPy array

    Returns:
        erf(x) with the same shape as the input (float for scalar input)

    Example:
        >>> round(erf(1.0), 6)
        0.842701
    """
    values = np.asarray(x, dtype=np.float64)
    sign = np.where(values < 0, -1.0, 1.0)
    values = np.abs(values)

    t = 1.0 / (1.0 + _P * values)
    poly = ((((_A5 * t + _A4) * t + _A3) * t + _A2) * t + _A1) * t
    result = sign * (1.0 - poly * np.exp(-values * values))

    if result.ndim == 0:
        return float(result)
    return result


class GaussianChannelModel:
    """
    Normal distribution over one color channel.

    Samples are accumulated first and statistics are only computed by
    fit(). Adding samples afterwards leaves the fitted statistics in place
    until the next fit().

    Example:
        >>> model = GaussianChannelModel("hue")
        >>> model.add_samples([0.04, 0.05, 0.06])
        >>> model.fit()
        >>> round(model.probability(0.05), 6)
        0.5
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._population: List[float] = []
        self._mean: Optional[float] = None
        self._variance: Optional[float] = None
        self._stddev: Optional[float] = None
        self._stale = True

    def add_sample(self, x: float) -> None:
        """Append a single value to the population."""
        self._population.append(float(x))
        self._stale = True

    def add_samples(self, xs: Iterable[float]) -> None:
        """Append several values to the population."""
        self._population.extend(float(x) for x in xs)
        self._stale = True

    def fit(self) -> None:
        """
        Recompute mean, unbiased variance and standard deviation.

        Raises:
            CalibrationError: If the population has fewer than two values
        """
        n = len(self._population)
        if n <= 1:
            raise CalibrationError(
                "Cannot fit %s model: need at least 2 samples, got %d" % (self.name or "channel", n))

        values = np.asarray(self._population, dtype=np.float64)
        if values.min() == values.max():
            # Identical samples: a point mass, not a tiny float variance
            mean, variance = values[0], 0.0
        else:
            mean = np.mean(values)
            variance = np.var(values, ddof=1)

        self._mean = float(mean)
        self._variance = float(variance)
        self._stddev = math.sqrt(self._variance)
        self._stale = False

        logger.debug("Fitted %s model: n=%d mean=%.4f stddev=%.4f",
                     self.name or "channel", n, self._mean, self._stddev)

    def probability(self, x: ArrayLike) -> ArrayLike:
        """
        Cumulative probability of x under the fitted distribution.

        A zero-variance model behaves as a point mass: values equal to the
        mean (within floating tolerance) score 0.5, larger values 1.0 and
        smaller values 0.0.

        Raises:
            NotCalibratedError: If fit() has never succeeded
        """
        if self._mean is None:
            raise NotCalibratedError("%s model has not been fitted" % (self.name or "Channel"))

        values = np.asarray(x, dtype=np.float64)
        if self._variance > 0:
            z = (values - self._mean) / math.sqrt(2.0 * self._variance)
            result = 0.5 * (1.0 + erf(z))
        else:
            result = np.where(
                np.isclose(values, self._mean), 0.5,
                np.where(values > self._mean, 1.0, 0.0))

        if np.ndim(result) == 0:
            return float(result)
        return result

    def within_threshold(self, x: ArrayLike, threshold: float):
        """True where probability(x) >= threshold (bool or bool array)."""
        result = np.asarray(self.probability(x)) >= threshold
        if result.ndim == 0:
            return bool(result)
        return result

    @property
    def population(self) -> List[float]:
        return list(self._population)

    @property
    def size(self) -> int:
        return len(self._population)

    @property
    def mean(self) -> Optional[float]:
        return self._mean

    @property
    def variance(self) -> Optional[float]:
        return self._variance

    @property
    def stddev(self) -> Optional[float]:
        return self._stddev

    @property
    def is_fitted(self) -> bool:
        """True once fit() has succeeded at least once."""
        return self._mean is not None

    @property
    def is_stale(self) -> bool:
        """True if samples were added since the last fit()."""
        return self._stale

    def __repr__(self) -> str:
        if not self.is_fitted:
            return "GaussianChannelModel(%r, n=%d, unfitted)" % (self.name, self.size)
        return "GaussianChannelModel(%r, n=%d, mean=%.4f, stddev=%.4f)" % (
            self.name, self.size, self._mean, self._stddev)
