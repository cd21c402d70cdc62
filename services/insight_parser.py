"""
Keyword heuristics that turn a narrative about a series into an InsightSignal.

Each detector runs independently over the whole text, so one narrative can
flag a trend, seasonality, volatility and forecast language at once.  This
is deliberately shallow: misses and false hits are expected, and everything
downstream clamps what it takes from the signal.
"""
from __future__ import annotations

import logging
import re

import config
from models.insight import InsightSignal

logger = logging.getLogger("climacast.insight_parser")

# "trend up", "trending downwards", "trends stable"
_TREND_RE = re.compile(
    r"\btrend(?:s|ed|ing)?\s+(up(?:wards?)?|down(?:wards?)?|increasing|decreasing|rising|falling|stable)\b",
    re.IGNORECASE,
)
# Words that carry a trend (or its absence) on their own
_DIRECTION_RE = re.compile(
    r"\b(increasing|decreasing|rising|falling|upwards?|downwards?|stable)\b",
    re.IGNORECASE,
)
_SEASONAL_RE = re.compile(r"seasonal|cycle|pattern|weekly|daily", re.IGNORECASE)
_VOLATILITY_RE = re.compile(r"volatile|unstable|fluctuat|variable|erratic", re.IGNORECASE)
_FORECAST_RE = re.compile(r"forecast|predict|expect|anticipat|likely", re.IGNORECASE)

_UP_WORDS = {"up", "upward", "upwards", "increasing", "rising"}
_DOWN_WORDS = {"down", "downward", "downwards", "decreasing", "falling"}


def _trend_direction(text: str) -> tuple[int, bool]:
    """Return (direction, matched).  Upward language wins over downward."""
    words = [m.group(1).lower() for m in _TREND_RE.finditer(text)]
    words += [m.group(1).lower() for m in _DIRECTION_RE.finditer(text)]
    if not words:
        return 0, False
    if any(w in _UP_WORDS for w in words):
        return 1, True
    if any(w in _DOWN_WORDS for w in words):
        return -1, True
    return 0, True  # explicitly stable


def parse_insights(text: object) -> InsightSignal:
    """Extract trend, seasonality, volatility and confidence hints from *text*."""
    if not text or not isinstance(text, str):
        return InsightSignal()

    detected: list[str] = []

    direction, trend_hit = _trend_direction(text)
    if trend_hit:
        detected.append("trend")

    seasonality = _SEASONAL_RE.search(text) is not None
    if seasonality:
        detected.append("seasonality")

    volatility = config.INSIGHT_DEFAULT_VOLATILITY
    if _VOLATILITY_RE.search(text):
        volatility = config.INSIGHT_VOLATILE
        detected.append("volatility")

    confidence = config.INSIGHT_DEFAULT_CONFIDENCE
    if _FORECAST_RE.search(text):
        confidence = config.INSIGHT_FORECAST_CONFIDENCE
        detected.append("forecast")

    signal = InsightSignal(
        trend_direction=direction,
        seasonality=seasonality,
        volatility=volatility,
        confidence=confidence,
        detected=tuple(detected),
    )
    logger.debug("Parsed insight (%d chars): %s", len(text), signal.as_dict())
    return signal
