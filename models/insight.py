from __future__ import annotations

from dataclasses import dataclass

import config


@dataclass(frozen=True)
class InsightSignal:
    """Structured reading of a free-text narrative about a series."""

    trend_direction: int = 0  # -1 down, 0 stable/unknown, 1 up
    seasonality: bool = False
    volatility: float = config.INSIGHT_DEFAULT_VOLATILITY  # 0-1 scale
    confidence: float = config.INSIGHT_DEFAULT_CONFIDENCE  # 0-1 scale
    detected: tuple[str, ...] = ()  # detector names that matched

    @property
    def is_volatile(self) -> bool:
        return self.volatility > config.VOLATILITY_FLAG_THRESHOLD

    @property
    def has_trend(self) -> bool:
        return self.trend_direction != 0

    def as_dict(self) -> dict[str, object]:
        return {
            "trend_direction": self.trend_direction,
            "seasonality": self.seasonality,
            "volatility": self.volatility,
            "confidence": self.confidence,
            "detected": list(self.detected),
        }
