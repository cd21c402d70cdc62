"""
Least-squares trend line with a regularized denominator.

The closed-form OLS slope divides by ``n·Σx² − (Σx)²``, which is zero when
every x is equal (a single point, or a degenerate index).  A small constant
is added to that denominator so the fit never divides by zero; for ordinary
integer indices the effect on the slope is negligible.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

import config


class TrendEstimator:
    """Slope/intercept fit of y on x."""

    def __init__(self, regularization: float = config.TREND_REGULARIZATION) -> None:
        self.regularization = regularization
        self.slope = 0.0
        self.intercept = 0.0

    def fit(self, xs: Sequence[float], ys: Sequence[float]) -> "TrendEstimator":
        x = np.asarray(xs, dtype=np.float64)
        y = np.asarray(ys, dtype=np.float64)
        n = len(x)
        if n == 0:
            self.slope = 0.0
            self.intercept = 0.0
            return self

        sum_x = x.sum()
        sum_y = y.sum()
        sum_xy = float(np.dot(x, y))
        sum_xx = float(np.dot(x, x))

        denominator = n * sum_xx - sum_x * sum_x + self.regularization
        self.slope = float((n * sum_xy - sum_x * sum_y) / denominator)
        self.intercept = float((sum_y - self.slope * sum_x) / n)
        return self

    def predict(self, xs: Sequence[float]) -> list[float]:
        return [self.slope * float(x) + self.intercept for x in xs]


def recent_slope(values: Sequence[float], regularization: float = config.TREND_REGULARIZATION) -> float:
    """Slope of *values* against their index; 0 for fewer than two points."""
    if len(values) < 2:
        return 0.0
    return TrendEstimator(regularization).fit(range(len(values)), values).slope
