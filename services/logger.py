from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import config
from models.forecast import ForecastResult, ForecastSummary

logger = logging.getLogger("climacast.logger")

_DEFAULT_DIR = Path(__file__).resolve().parent.parent / "data" / "logs"


def _base_dir() -> Path:
    return Path(config.LOG_DIR) if config.LOG_DIR else _DEFAULT_DIR


def _ensure_dir(subdir: str) -> Path:
    path = _base_dir() / subdir
    path.mkdir(parents=True, exist_ok=True)
    return path


def _today_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def _append_jsonl(subdir: str, record: dict[str, Any]) -> Path | None:
    """Append a single JSON record to today's JSONL file in the given subdirectory."""
    try:
        dir_path = _ensure_dir(subdir)
    except OSError as exc:
        logger.error("Failed to create log directory for %s: %s", subdir, exc)
        return None
    filepath = dir_path / f"{_today_str()}.jsonl"
    try:
        with open(filepath, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")
    except OSError as exc:
        logger.error("Failed to write log to %s: %s", filepath, exc)
        return None
    return filepath


def log_forecast(
    result: ForecastResult,
    timestamp: datetime | None = None,
) -> Path | None:
    """Log a forecast run to <log dir>/forecasts/."""
    ts = timestamp or datetime.now(timezone.utc)
    summary = ForecastSummary.from_result(result)
    record = {
        "timestamp": ts.isoformat(),
        "field": result.field,
        "status": result.status,
        "history_points": result.history_points,
        "weights": (
            {
                "autoregressive": round(result.weights.autoregressive, 4),
                "seasonal": round(result.weights.seasonal, 4),
                "moving_average": round(result.weights.moving_average, 4),
            }
            if result.weights
            else None
        ),
        "insight": result.insight.as_dict() if result.insight else None,
        "recent_trend": round(result.recent_trend, 4),
        "volatility": round(result.volatility, 4),
        "average_confidence": round(summary.average_confidence, 4),
        "confidence_label": summary.confidence_label,
        "points": result.records(),
    }
    return _append_jsonl("forecasts", record)
