"""
Forecast records produced by the ensemble.

A forecast is an ordered run of dated points, one per horizon step, each
carrying the blended value and a confidence score that decays with the
step distance.  ``ForecastResult`` wraps the points with the diagnostics of
the run (blend weights, parsed insight, recent trend and volatility) and an
explicit status so callers can tell "not enough history" apart from a
successful forecast.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

import config
from models.insight import InsightSignal
from utils.records import format_date_key

STATUS_OK = "ok"
STATUS_INSUFFICIENT_HISTORY = "insufficient_history"


@dataclass(frozen=True)
class ForecastPoint:
    """A single dated forecast value."""

    date: date
    value: float
    confidence: float

    def to_record(self, field_name: str) -> dict[str, Any]:
        """Output row keyed like the input records: date, <field>, confidence."""
        return {
            "date": format_date_key(self.date),
            field_name: self.value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class BlendWeights:
    """Ensemble weights for the (autoregressive, seasonal, moving-average) models."""

    autoregressive: float
    seasonal: float
    moving_average: float

    @property
    def total(self) -> float:
        return self.autoregressive + self.seasonal + self.moving_average

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.autoregressive, self.seasonal, self.moving_average)

    def normalized(self) -> "BlendWeights":
        """Floor each weight at zero and rescale so the three sum to one."""
        ar, hw, ma = (max(w, 0.0) for w in self.as_tuple())
        total = ar + hw + ma
        if total <= 0.0:
            ar, hw, ma = config.PRIOR_WEIGHTS
            total = ar + hw + ma
        ar, hw = ar / total, hw / total
        # Derive the last weight so the sum is exactly 1
        return BlendWeights(ar, hw, 1.0 - ar - hw)


@dataclass
class ForecastResult:
    """Outcome of a single-field forecast run."""

    field: str
    status: str
    points: list[ForecastPoint] = field(default_factory=list)
    weights: BlendWeights | None = None
    insight: InsightSignal | None = None
    recent_trend: float = 0.0
    volatility: float = 0.0
    history_points: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_OK

    def records(self) -> list[dict[str, Any]]:
        return [p.to_record(self.field) for p in self.points]


@dataclass(frozen=True)
class ForecastSummary:
    """Headline metrics for one field's forecast."""

    field: str
    points: int
    average_confidence: float
    value_range: float

    @property
    def confidence_label(self) -> str:
        if self.average_confidence > config.CONFIDENCE_HIGH:
            return "HIGH"
        if self.average_confidence > config.CONFIDENCE_MEDIUM:
            return "MEDIUM"
        return "LOW"

    @classmethod
    def from_result(cls, result: ForecastResult) -> "ForecastSummary":
        if not result.points:
            return cls(field=result.field, points=0, average_confidence=0.0, value_range=0.0)
        values = [p.value for p in result.points]
        avg_conf = sum(p.confidence for p in result.points) / len(result.points)
        return cls(
            field=result.field,
            points=len(result.points),
            average_confidence=avg_conf,
            value_range=max(values) - min(values),
        )
