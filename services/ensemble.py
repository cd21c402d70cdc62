"""
Ensemble forecaster — blends three simple models into a dated forecast.

Pipeline (per field):
  1. Extract the present values of the field (gaps dropped)
  2. Replace IQR outliers with the median
  3. Parse the free-text insight into an InsightSignal
  4. Run ARIMA-lite, Holt-Winters and moving-average-with-trend
  5. Measure recent trend (last 7 points) and volatility (last 14 points)
  6. Derive blend weights from priors + insight flags, normalized to 1
  7. Blend per step (missing model output falls back to ARIMA-lite)
  8. Nudge each step toward the narrated trend, scaled by volatility
  9. Stamp consecutive dates after the last observation, score confidence

Fewer than MIN_HISTORY_POINTS present values yields an empty forecast.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

import config
from models.forecast import (
    STATUS_INSUFFICIENT_HISTORY,
    STATUS_OK,
    BlendWeights,
    ForecastPoint,
    ForecastResult,
    ForecastSummary,
)
from models.insight import InsightSignal
from models.observation import Observation, as_observations, extract_series
from services.arima_lite import ARIMALite
from services.holt_winters import HoltWinters
from services.insight_parser import parse_insights
from services.moving_average import MovingAverageWithTrend
from services.preprocessing import replace_outliers
from services.trend import recent_slope
from utils.records import following_days

logger = logging.getLogger("climacast.ensemble")

ObservationRows = Iterable[Observation | Mapping[str, Any]]


# ── Weights ──────────────────────────────────────────────────────────────────

def compute_weights(
    insight: InsightSignal,
    priors: tuple[float, float, float] = config.PRIOR_WEIGHTS,
) -> BlendWeights:
    """
    Shift the prior (AR, seasonal, MA) weights according to the insight.

    - seasonality flagged → favour Holt-Winters
    - any trend direction → favour ARIMA-lite
    - volatile narrative  → favour the moving average
    """
    ar, hw, ma = priors

    shifts = []
    if insight.seasonality:
        shifts.append(config.SEASONAL_WEIGHT_SHIFT)
    if insight.has_trend:
        shifts.append(config.TREND_WEIGHT_SHIFT)
    if insight.is_volatile:
        shifts.append(config.VOLATILITY_WEIGHT_SHIFT)

    for d_ar, d_hw, d_ma in shifts:
        ar += d_ar
        hw += d_hw
        ma += d_ma

    return BlendWeights(ar, hw, ma).normalized()


# ── Confidence ───────────────────────────────────────────────────────────────

def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population std / |mean|; 0 for a flat window, inf for a zero-mean one."""
    if len(values) == 0:
        return 0.0
    arr = np.asarray(values, dtype=np.float64)
    std = float(arr.std())
    if std == 0.0:
        return 0.0
    mean = abs(float(arr.mean()))
    if mean == 0.0:
        return float("inf")
    return std / mean


def compute_confidence(
    values: Sequence[float],
    step_index: int,
    insight: InsightSignal,
) -> float:
    """
    Confidence for the forecast at 0-based *step_index*.

    Starts from CONFIDENCE_BASE, pays a penalty for recent relative
    volatility and for distance into the horizon, earns a small bonus for
    history length and for insight language, and never drops below
    CONFIDENCE_FLOOR.  Only the distance term depends on the step, so the
    score is non-increasing along the horizon.
    """
    cv = coefficient_of_variation(values[-config.CV_WINDOW:])
    volatility_penalty = min(cv, config.CONFIDENCE_MAX_CV_PENALTY)
    distance_penalty = step_index * config.CONFIDENCE_STEP_DECAY
    data_bonus = min(
        len(values) / config.CONFIDENCE_DATA_BONUS_POINTS,
        config.CONFIDENCE_MAX_DATA_BONUS,
    )

    insight_adjustment = (insight.confidence - 0.5) * config.CONFIDENCE_INSIGHT_SCALE
    if insight.seasonality:
        insight_adjustment += config.CONFIDENCE_SEASONAL_BONUS
    if insight.has_trend:
        insight_adjustment += config.CONFIDENCE_TREND_BONUS

    score = (
        config.CONFIDENCE_BASE
        + insight_adjustment
        - distance_penalty
        - volatility_penalty
        + data_bonus
    )
    return max(config.CONFIDENCE_FLOOR, score)


# ── Blending ─────────────────────────────────────────────────────────────────

def blend(
    arima: Sequence[float],
    seasonal: Sequence[float],
    moving_average: Sequence[float],
    weights: BlendWeights,
) -> list[float]:
    """Weighted sum per step; a model with no value at a step borrows ARIMA's."""
    blended: list[float] = []
    for i, ar_val in enumerate(arima):
        hw_val = seasonal[i] if i < len(seasonal) else ar_val
        ma_val = moving_average[i] if i < len(moving_average) else ar_val
        blended.append(
            weights.autoregressive * ar_val
            + weights.seasonal * hw_val
            + weights.moving_average * ma_val
        )
    return blended


def summarize(result: ForecastResult) -> ForecastSummary:
    return ForecastSummary.from_result(result)


# ── Main engine ──────────────────────────────────────────────────────────────

class EnsembleForecaster:
    """
    Runs the three component models over a cleaned daily series and blends
    them into a confidence-scored forecast.

    Holds only model configuration; every call refits from scratch, so one
    instance can serve concurrent calls.
    """

    def __init__(
        self,
        arima: ARIMALite | None = None,
        holt_winters: HoltWinters | None = None,
        moving_average: MovingAverageWithTrend | None = None,
        min_history: int = config.MIN_HISTORY_POINTS,
        iqr_factor: float = config.OUTLIER_IQR_FACTOR,
    ) -> None:
        self._arima = arima or ARIMALite()
        self._holt_winters = holt_winters or HoltWinters()
        self._moving_average = moving_average or MovingAverageWithTrend()
        self._min_history = min_history
        self._iqr_factor = iqr_factor

    def forecast(
        self,
        observations: ObservationRows,
        field: str,
        horizon: int = config.DEFAULT_HORIZON,
        insight_text: str = "",
    ) -> list[ForecastPoint]:
        """Dated forecast points for *field*; empty when history is too short."""
        return self.forecast_result(observations, field, horizon, insight_text).points

    def forecast_result(
        self,
        observations: ObservationRows,
        field: str,
        horizon: int = config.DEFAULT_HORIZON,
        insight_text: str = "",
    ) -> ForecastResult:
        """Like forecast(), with an explicit status and the run's diagnostics."""
        if horizon < 1:
            raise ValueError("Horizon must be positive for forecasting.")

        rows = as_observations(observations)
        values = extract_series(rows, field)
        insight = parse_insights(insight_text)

        if len(values) < self._min_history:
            logger.info(
                "Not enough history for %s: %d present values (need %d)",
                field, len(values), self._min_history,
            )
            return ForecastResult(
                field=field,
                status=STATUS_INSUFFICIENT_HISTORY,
                insight=insight,
                history_points=len(values),
            )

        cleaned = replace_outliers(values, self._iqr_factor)

        arima_fc = self._arima.forecast(cleaned, horizon)
        hw_fc = self._holt_winters.forecast(cleaned, horizon)
        ma_fc = self._moving_average.forecast(cleaned, horizon)

        recent_trend = recent_slope(cleaned[-config.TREND_WINDOW:])
        volatility = float(np.std(cleaned[-config.VOLATILITY_WINDOW:]))

        weights = compute_weights(insight)
        blended = blend(arima_fc, hw_fc, ma_fc, weights)

        if insight.has_trend:
            blended = [
                value + insight.trend_direction * volatility * config.INSIGHT_BIAS_SCALE * (i + 1)
                for i, value in enumerate(blended)
            ]

        dates = following_days(rows[-1].date, horizon)
        points = [
            ForecastPoint(
                date=day,
                value=round(value, 3),
                confidence=compute_confidence(cleaned, i, insight),
            )
            for i, (day, value) in enumerate(zip(dates, blended))
        ]

        logger.info(
            "Forecast %s: %d steps from %d points — weights AR=%.2f HW=%.2f MA=%.2f "
            "trend=%+.3f/day vol=%.3f insight=%s",
            field, len(points), len(cleaned),
            weights.autoregressive, weights.seasonal, weights.moving_average,
            recent_trend, volatility, ",".join(insight.detected) or "none",
        )

        return ForecastResult(
            field=field,
            status=STATUS_OK,
            points=points,
            weights=weights,
            insight=insight,
            recent_trend=recent_trend,
            volatility=volatility,
            history_points=len(values),
        )

    async def forecast_fields(
        self,
        observations: ObservationRows,
        fields: Sequence[str],
        horizon: int = config.DEFAULT_HORIZON,
        insight_text: str = "",
    ) -> dict[str, ForecastResult]:
        """Forecast several fields of the same records concurrently."""
        rows = as_observations(observations)
        tasks = [
            asyncio.to_thread(self.forecast_result, rows, field, horizon, insight_text)
            for field in fields
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        forecasts: dict[str, ForecastResult] = {}
        for field, result in zip(fields, results):
            if isinstance(result, Exception):
                logger.error("Failed to forecast %s: %s", field, result)
                continue
            forecasts[field] = result

        logger.info(
            "Ensemble run complete — %d/%d fields forecast",
            sum(1 for r in forecasts.values() if r.succeeded),
            len(fields),
        )
        return forecasts
