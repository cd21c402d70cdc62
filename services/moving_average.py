from __future__ import annotations

from typing import Sequence

import numpy as np

import config
from services.trend import TrendEstimator


class MovingAverageWithTrend:
    """Trailing simple moving average, extrapolated with a linear trend."""

    def __init__(
        self,
        window_size: int = config.MA_WINDOW,
        trend_points: int = config.MA_TREND_POINTS,
        regularization: float = config.TREND_REGULARIZATION,
    ) -> None:
        self.window_size = window_size
        self.trend_points = trend_points
        self.regularization = regularization

    def moving_averages(self, values: Sequence[float]) -> np.ndarray:
        """SMA at every index from window_size-1 onward."""
        data = np.asarray(values, dtype=np.float64)
        if len(data) < self.window_size:
            return np.empty(0, dtype=np.float64)
        kernel = np.ones(self.window_size) / self.window_size
        return np.convolve(data, kernel, mode="valid")

    def forecast(self, values: Sequence[float], steps: int) -> list[float]:
        """Empty when the series is shorter than the window."""
        averages = self.moving_averages(values)
        if len(averages) == 0:
            return []

        recent = averages[-min(self.trend_points, len(averages)):]
        lr = TrendEstimator(self.regularization).fit(range(len(recent)), recent)

        last_index = len(recent) - 1
        return lr.predict(range(last_index + 1, last_index + steps + 1))
