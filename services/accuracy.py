from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

logger = logging.getLogger("climacast.accuracy")


@dataclass(frozen=True)
class AccuracyMetrics:
    """Error metrics between an actual and a predicted series."""

    mse: float
    mae: float
    rmse: float
    mape: float | None  # percent; None when every actual value is zero
    mape_points: int  # points that contributed to MAPE

    def to_dict(self) -> dict[str, float | None]:
        return {"mse": self.mse, "mae": self.mae, "rmse": self.rmse, "mape": self.mape}


def evaluate(actual: Sequence[float], predicted: Sequence[float]) -> AccuracyMetrics:
    """
    Compute MSE, MAE, RMSE and MAPE.

    Raises ValueError for empty or mismatched inputs.  MAPE is averaged over
    the points whose actual value is non-zero; zero actuals are skipped
    rather than producing an infinite percentage.
    """
    if len(actual) == 0 or len(predicted) == 0:
        raise ValueError("Accuracy evaluation needs non-empty series.")
    if len(actual) != len(predicted):
        raise ValueError(
            f"Series length mismatch: {len(actual)} actual vs {len(predicted)} predicted"
        )

    a = np.asarray(actual, dtype=np.float64)
    p = np.asarray(predicted, dtype=np.float64)
    errors = a - p

    mse = float(np.mean(errors ** 2))
    mae = float(np.mean(np.abs(errors)))
    rmse = math.sqrt(mse)

    mask = a != 0
    mape_points = int(mask.sum())
    if mape_points:
        mape = float(np.mean(np.abs(errors[mask] / a[mask])) * 100.0)
    else:
        mape = None
    if mape_points < len(a):
        logger.debug("MAPE skipped %d zero-valued actual(s)", len(a) - mape_points)

    return AccuracyMetrics(mse=mse, mae=mae, rmse=rmse, mape=mape, mape_points=mape_points)
