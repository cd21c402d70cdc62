from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

logger = logging.getLogger("climacast.records")

# Daily record dates arrive as 8-digit YYYYMMDD keys (dashes tolerated)
_DATE_KEY_RE = re.compile(r"^(\d{4})-?(\d{2})-?(\d{2})$")


def parse_date_key(raw: Any) -> date:
    """Parse a ``YYYYMMDD`` / ``YYYY-MM-DD`` key or pass a date through."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    match = _DATE_KEY_RE.match(str(raw).strip())
    if not match:
        raise ValueError(f"Unrecognized date key: {raw!r}")
    year, month, day = (int(g) for g in match.groups())
    return date(year, month, day)


def format_date_key(day: date) -> str:
    return day.strftime("%Y%m%d")


def following_days(last: date, count: int) -> list[date]:
    """The *count* consecutive calendar days immediately after *last*."""
    return [last + timedelta(days=i + 1) for i in range(count)]


def load_records(path: Path | str) -> list[dict[str, Any]]:
    """
    Load daily records from a JSON file.

    Accepts either a bare list of ``{"date": ..., <field>: value}`` rows or an
    object wrapping that list under ``"records"``.  Missing-value sentinels
    must already be normalized to null by whoever produced the file.
    """
    filepath = Path(path)
    try:
        with open(filepath, "r") as f:
            payload = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        raise ValueError(f"Could not read records from {filepath}: {exc}") from exc

    if isinstance(payload, dict):
        payload = payload.get("records")
    if not isinstance(payload, list):
        raise ValueError(f"{filepath}: expected a list of records")

    rows = [row for row in payload if isinstance(row, dict)]
    if len(rows) != len(payload):
        logger.warning(
            "Skipped %d non-object entries in %s", len(payload) - len(rows), filepath
        )
    logger.info("Loaded %d records from %s", len(rows), filepath)
    return rows
