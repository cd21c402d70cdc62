#!/usr/bin/env python3
"""
Climacast — Integration test.

Runs the full pipeline the way the CLI does:
  load records → forecast several fields concurrently → summarize →
  write the JSONL forecast log → print JSON.

Log output goes to a temporary directory; nothing touches the network.
"""
import asyncio
import contextlib
import io
import json
import math
import sys
import tempfile
import traceback
from datetime import date, timedelta
from pathlib import Path
from unittest.mock import patch

import config
import main
from models.forecast import ForecastResult
from services import logger as log_service
from services.ensemble import EnsembleForecaster, summarize
from utils.records import format_date_key, load_records


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures — three weeks of daily point-climate records
# ═══════════════════════════════════════════════════════════════════════════════

START = date(2024, 6, 1)
DAYS = 21


def _fixture_records():
    """
    T2M: warm ramp with a weekly wobble.  WS2M: steady breeze with one gust
    spike.  RH2M: every other day missing (11 present values).  PRECTOTCORR: dry
    spells of exact zeros.
    """
    rows = []
    for i in range(DAYS):
        day = START + timedelta(days=i)
        rows.append({
            "date": format_date_key(day),
            "T2M": round(18.0 + 0.4 * i + 1.5 * math.sin(2 * math.pi * i / 7), 2),
            "WS2M": 25.0 if i == 9 else 3.0 + 0.1 * (i % 3),
            "RH2M": 60.0 + i if i % 2 == 0 else None,
            "PRECTOTCORR": 0.0 if i % 4 else 2.5,
        })
    return rows


FIXTURE_RECORDS = _fixture_records()
LAST_DATE = START + timedelta(days=DAYS - 1)


# ═══════════════════════════════════════════════════════════════════════════════
# 1. Multi-field concurrent forecast
# ═══════════════════════════════════════════════════════════════════════════════


def test_forecast_fields_concurrently():
    forecaster = EnsembleForecaster()
    results = asyncio.run(
        forecaster.forecast_fields(
            FIXTURE_RECORDS,
            ["T2M", "WS2M", "RH2M", "PRECTOTCORR"],
            horizon=7,
            insight_text="Expect a weekly pattern with temperatures trending up",
        )
    )
    assert set(results) == {"T2M", "WS2M", "RH2M", "PRECTOTCORR"}

    t2m = results["T2M"]
    assert t2m.succeeded
    assert len(t2m.points) == 7
    assert t2m.points[0].date == LAST_DATE + timedelta(days=1)
    assert t2m.insight.seasonality and t2m.insight.trend_direction == 1

    # Gust spike is treated as an outlier; the forecast stays near the breeze
    ws2m = results["WS2M"]
    assert ws2m.succeeded
    assert all(0.0 < p.value < 6.0 for p in ws2m.points), [p.value for p in ws2m.points]

    rh2m = results["RH2M"]
    assert rh2m.status == "insufficient_history"
    assert rh2m.points == []
    assert rh2m.history_points == 11

    precip = results["PRECTOTCORR"]
    assert precip.succeeded
    for p in precip.points:
        assert 0.4 <= p.confidence


def test_forecast_fields_matches_single_field_calls():
    forecaster = EnsembleForecaster()
    batch = asyncio.run(forecaster.forecast_fields(FIXTURE_RECORDS, ["T2M", "WS2M"], horizon=5))
    for field in ("T2M", "WS2M"):
        single = forecaster.forecast(FIXTURE_RECORDS, field, horizon=5)
        assert batch[field].points == single, field


def test_forecast_fields_isolates_failures():
    forecaster = EnsembleForecaster()
    original = EnsembleForecaster.forecast_result

    def flaky(self, observations, field, horizon=7, insight_text=""):
        if field == "WS2M":
            raise RuntimeError("model blew up")
        return original(self, observations, field, horizon, insight_text)

    with patch.object(EnsembleForecaster, "forecast_result", flaky):
        results = asyncio.run(forecaster.forecast_fields(FIXTURE_RECORDS, ["T2M", "WS2M"], horizon=3))

    assert "WS2M" not in results
    assert results["T2M"].succeeded


def test_summary_metrics():
    result = EnsembleForecaster().forecast_result(FIXTURE_RECORDS, "T2M", horizon=7)
    summary = summarize(result)
    assert summary.points == 7
    values = [p.value for p in result.points]
    assert abs(summary.value_range - (max(values) - min(values))) < 1e-9
    assert summary.confidence_label in ("HIGH", "MEDIUM", "LOW")
    assert summary.average_confidence <= result.points[0].confidence


# ═══════════════════════════════════════════════════════════════════════════════
# 2. JSONL forecast log
# ═══════════════════════════════════════════════════════════════════════════════


def test_log_forecast_appends_jsonl():
    result = EnsembleForecaster().forecast_result(FIXTURE_RECORDS, "T2M", horizon=3)
    short = ForecastResult(field="RH2M", status="insufficient_history", history_points=5)

    with tempfile.TemporaryDirectory() as tmp:
        with patch.object(config, "LOG_DIR", tmp):
            first = log_service.log_forecast(result)
            second = log_service.log_forecast(short)

        assert first is not None and first == second
        assert first.parent == Path(tmp) / "forecasts"
        lines = first.read_text().strip().splitlines()
        assert len(lines) == 2

        rec = json.loads(lines[0])
        assert rec["field"] == "T2M"
        assert rec["status"] == "ok"
        assert len(rec["points"]) == 3
        assert set(rec["weights"]) == {"autoregressive", "seasonal", "moving_average"}

        rec2 = json.loads(lines[1])
        assert rec2["status"] == "insufficient_history"
        assert rec2["weights"] is None
        assert rec2["points"] == []


# ═══════════════════════════════════════════════════════════════════════════════
# 3. Record loading and CLI
# ═══════════════════════════════════════════════════════════════════════════════


def test_load_records_formats():
    with tempfile.TemporaryDirectory() as tmp:
        bare = Path(tmp) / "bare.json"
        bare.write_text(json.dumps(FIXTURE_RECORDS))
        wrapped = Path(tmp) / "wrapped.json"
        wrapped.write_text(json.dumps({"records": FIXTURE_RECORDS}))
        assert load_records(bare) == load_records(wrapped) == FIXTURE_RECORDS

        bad = Path(tmp) / "bad.json"
        bad.write_text("{not json")
        try:
            load_records(bad)
        except ValueError:
            pass
        else:
            raise AssertionError("Expected ValueError for malformed JSON")


def test_cli_end_to_end():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "records.json"
        path.write_text(json.dumps(FIXTURE_RECORDS))

        buf = io.StringIO()
        with patch.object(config, "LOG_DIR", tmp), contextlib.redirect_stdout(buf):
            code = main.main([str(path), "--fields", "T2M,RH2M", "--horizon", "4",
                              "--insight", "volatile"])
        assert code == 0

        output = json.loads(buf.getvalue())
        assert len(output["T2M"]) == 4
        assert output["T2M"][0]["date"] == format_date_key(LAST_DATE + timedelta(days=1))
        assert set(output["T2M"][0]) == {"date", "T2M", "confidence"}
        assert output["RH2M"] == []

        log_files = list((Path(tmp) / "forecasts").glob("*.jsonl"))
        assert len(log_files) == 1
        assert len(log_files[0].read_text().strip().splitlines()) == 2


def test_cli_missing_file():
    with tempfile.TemporaryDirectory() as tmp:
        code = main.main([str(Path(tmp) / "nope.json"), "--no-log"])
    assert code == 1


def test_cli_rejects_bad_horizon():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "records.json"
        path.write_text(json.dumps(FIXTURE_RECORDS))
        assert main.main([str(path), "--horizon", "0", "--no-log"]) == 2


# ═══════════════════════════════════════════════════════════════════════════════
# Standalone runner
# ═══════════════════════════════════════════════════════════════════════════════


if __name__ == "__main__":
    passed = failed = 0
    for name, fn in list(globals().items()):
        if not name.startswith("test_") or not callable(fn):
            continue
        try:
            fn()
            print(f"  PASS: {name}")
            passed += 1
        except Exception:
            print(f"  FAIL: {name}")
            traceback.print_exc()
            failed += 1
    print(f"\n  RESULTS: {passed} passed, {failed} failed")
    sys.exit(1 if failed else 0)
