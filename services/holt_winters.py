"""
Additive Holt-Winters smoothing with a level+trend fallback.

Seasonal offsets for the first cycle are seeded as (value − initial level).
Each step reads the offset at slot ``i mod L`` and records its update at
slot ``i``, so the projection reuses the first-cycle offset for each phase
rather than a freshly smoothed one.  Series shorter than two full cycles are
smoothed without a seasonal term.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

import config


class HoltWinters:
    """Triple exponential smoothing (level, trend, additive season)."""

    def __init__(
        self,
        alpha: float = config.HW_ALPHA,
        beta: float = config.HW_BETA,
        gamma: float = config.HW_GAMMA,
        season_length: int = config.HW_SEASON_LENGTH,
    ) -> None:
        self.alpha = alpha
        self.beta = beta
        self.gamma = gamma
        self.season_length = season_length

    def forecast(self, values: Sequence[float], steps: int) -> list[float]:
        data = np.asarray(values, dtype=np.float64)
        if len(data) == 0 or steps <= 0:
            return []
        if len(data) < self.season_length * 2:
            return self.simple_exponential_smoothing(data, steps)

        L = self.season_length
        n = len(data)
        level = np.zeros(n)
        trend = np.zeros(n)
        seasonal = np.zeros(n)

        level[0] = data[0]
        trend[0] = data[1] - data[0]
        seasonal[:L] = data[:L] - level[0]

        for i in range(1, n):
            s = seasonal[i % L]
            level[i] = self.alpha * (data[i] - s) + (1 - self.alpha) * (level[i - 1] + trend[i - 1])
            trend[i] = self.beta * (level[i] - level[i - 1]) + (1 - self.beta) * trend[i - 1]
            seasonal[i] = self.gamma * (data[i] - level[i]) + (1 - self.gamma) * s

        return [
            float(level[-1] + h * trend[-1] + seasonal[(n - 1 + h) % L])
            for h in range(1, steps + 1)
        ]

    def simple_exponential_smoothing(self, values: Sequence[float], steps: int) -> list[float]:
        """Holt's linear smoothing, seeded from the first two points."""
        data = [float(v) for v in values]
        if not data:
            return []
        level = data[0]
        trend = data[1] - data[0] if len(data) > 1 else 0.0

        for x in data[1:]:
            prev_level = level
            level = self.alpha * x + (1 - self.alpha) * (level + trend)
            trend = self.beta * (level - prev_level) + (1 - self.beta) * trend

        return [level + (h + 1) * trend for h in range(steps)]
