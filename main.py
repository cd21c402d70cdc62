#!/usr/bin/env python3
"""
Climacast — ensemble forecaster for daily point-climate records.

Reads a JSON file of daily records, forecasts each requested field with the
ARIMA-lite / Holt-Winters / moving-average ensemble, appends every run to the
JSONL forecast log and prints the forecasts as JSON.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import config
from services.ensemble import EnsembleForecaster, summarize
from services.logger import log_forecast
from utils.records import load_records

# ── Logging setup ─────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("climacast")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Forecast daily climate fields with a three-model ensemble."
    )
    parser.add_argument("records", help="JSON file of daily records")
    parser.add_argument(
        "--fields",
        default="T2M",
        help="comma-separated field keys to forecast (default: T2M)",
    )
    parser.add_argument(
        "--horizon",
        type=int,
        default=config.DEFAULT_HORIZON,
        help=f"days to forecast (default: {config.DEFAULT_HORIZON})",
    )
    parser.add_argument(
        "--insight",
        default="",
        help="free-text narrative used to bias the ensemble",
    )
    parser.add_argument(
        "--no-log",
        action="store_true",
        help="skip writing the JSONL forecast log",
    )
    return parser.parse_args(argv)


async def run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    fields = [f.strip() for f in args.fields.split(",") if f.strip()]
    if not fields:
        logger.error("No fields requested")
        return 2
    if args.horizon < 1:
        logger.error("Horizon must be at least 1 (got %d)", args.horizon)
        return 2

    try:
        records = load_records(args.records)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1

    forecaster = EnsembleForecaster()
    try:
        results = await forecaster.forecast_fields(
            records, fields, horizon=args.horizon, insight_text=args.insight
        )
    except ValueError as exc:
        logger.error("Invalid records: %s", exc)
        return 1

    output: dict[str, list[dict]] = {}
    for field in fields:
        result = results.get(field)
        if result is None:
            continue
        if not args.no_log:
            log_forecast(result)
        summary = summarize(result)
        if result.succeeded:
            logger.info(
                "%s: %d points, avg confidence %.1f%% (%s), range %.2f",
                config.field_label(field),
                summary.points,
                summary.average_confidence * 100,
                summary.confidence_label,
                summary.value_range,
            )
        else:
            logger.warning(
                "%s: no forecast (%s, %d points of history)",
                config.field_label(field),
                result.status,
                result.history_points,
            )
        output[field] = result.records()

    print(json.dumps(output, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    return asyncio.run(run(argv))


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)
