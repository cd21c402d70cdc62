from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping

from utils.records import parse_date_key


@dataclass
class Observation:
    """One day of point climate data; a field may be absent."""

    date: date
    values: dict[str, float | None] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Observation":
        """Build from a ``{"date": "YYYYMMDD", <field>: value, ...}`` row."""
        if "date" not in record:
            raise ValueError(f"Record has no date: {record!r}")
        values = {k: v for k, v in record.items() if k != "date"}
        return cls(date=parse_date_key(record["date"]), values=values)

    def value(self, field_name: str) -> float | None:
        """Return the numeric value of *field_name*, or None when absent."""
        raw = self.values.get(field_name)
        if raw is None or isinstance(raw, bool):
            return None
        try:
            val = float(raw)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(val):
            return None
        return val


def as_observations(rows: Iterable[Observation | Mapping[str, Any]]) -> list[Observation]:
    """Normalize a mix of Observation objects and raw record mappings."""
    return [
        row if isinstance(row, Observation) else Observation.from_record(row)
        for row in rows
    ]


def extract_series(observations: Iterable[Observation], field_name: str) -> list[float]:
    """Ordered present values of *field_name*; gaps are dropped."""
    series: list[float] = []
    for obs in observations:
        val = obs.value(field_name)
        if val is not None:
            series.append(val)
    return series
