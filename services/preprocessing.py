from __future__ import annotations

import logging
import math
from typing import Sequence

import config

logger = logging.getLogger("climacast.preprocessing")


def sorted_quantile(sorted_values: Sequence[float], q: float) -> float:
    """Element at index floor(n·q) of an already-sorted sample (no interpolation)."""
    idx = min(int(math.floor(len(sorted_values) * q)), len(sorted_values) - 1)
    return sorted_values[idx]


def replace_outliers(
    values: Sequence[float],
    iqr_factor: float = config.OUTLIER_IQR_FACTOR,
) -> list[float]:
    """
    Replace IQR outliers with the sample median.

    Quartiles and median are index lookups into the sorted sample; for an
    even-length sample the median is the upper-middle element, not the
    average of the two middle elements.  Output has the same length and
    order as the input.
    """
    if len(values) == 0:
        return []

    ordered = sorted(values)
    q1 = sorted_quantile(ordered, 0.25)
    q3 = sorted_quantile(ordered, 0.75)
    iqr = q3 - q1
    lower = q1 - iqr_factor * iqr
    upper = q3 + iqr_factor * iqr
    median = sorted_quantile(ordered, 0.5)

    cleaned = [median if (v < lower or v > upper) else v for v in values]
    replaced = sum(1 for v in values if v < lower or v > upper)
    if replaced:
        logger.debug(
            "Replaced %d outlier(s) outside [%.3f, %.3f] with median %.3f",
            replaced, lower, upper, median,
        )
    return cleaned
