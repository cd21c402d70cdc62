"""
Fixed-order autoregression on differenced data ("ARIMA-lite").

Fit:
  1. Difference the series d times.
  2. Regress each differenced value on its p predecessors.
  3. Forecast the differenced series step by step, feeding each prediction
     back into the lag window.
  4. Re-integrate by cumulative summation from the last observed value(s).

The default solver estimates each lag coefficient on its own
(Σ xⱼ·y / Σ xⱼ²) rather than solving the joint normal equations.  It is
fast and dependency-light but biased when lags are correlated: on a clean
linear ramp every lag gets coefficient 1, so the differenced forecast grows
geometrically.  ``solver="lstsq"`` solves the lags jointly (minimum-norm
least squares) and tracks such series far more closely.

The moving-average order q is carried for reporting only; no MA terms are
fitted.
"""
from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from scipy import linalg

import config

logger = logging.getLogger("climacast.arima_lite")

SOLVERS = ("per_feature", "lstsq")


def difference(values: Sequence[float], order: int = 1) -> np.ndarray:
    """Apply first-differencing *order* times."""
    result = np.asarray(values, dtype=np.float64)
    for _ in range(order):
        result = np.diff(result)
    return result


class ARIMALite:
    """Autoregressive model of order p on the d-times differenced series."""

    def __init__(
        self,
        p: int = config.AR_ORDER[0],
        d: int = config.AR_ORDER[1],
        q: int = config.AR_ORDER[2],
        solver: str = config.AR_SOLVER,
    ) -> None:
        if solver not in SOLVERS:
            raise ValueError(f"Unknown AR solver {solver!r}; expected one of {SOLVERS}")
        self.p = p
        self.d = d
        self.q = q
        self.solver = solver
        self.ar_coeffs = np.zeros(p, dtype=np.float64)

    @property
    def is_fitted(self) -> bool:
        return bool(np.any(self.ar_coeffs))

    def _design(self, diffed: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Rows of the p preceding values (lag 1 first) and their targets."""
        n = len(diffed)
        rows = [diffed[i - self.p:i][::-1] for i in range(self.p, n)]
        return np.asarray(rows, dtype=np.float64), diffed[self.p:]

    def _coefficients(self, values: Sequence[float]) -> np.ndarray:
        """Lag coefficients for *values*; all zeros when there is too little data."""
        diffed = difference(values, self.d)
        if self.p == 0 or len(diffed) < self.p + 1:
            return np.zeros(self.p, dtype=np.float64)

        X, y = self._design(diffed)
        if self.solver == "lstsq":
            coeffs, _, _, _ = linalg.lstsq(X, y)
            return np.asarray(coeffs, dtype=np.float64)

        num = X.T @ y
        den = np.sum(X * X, axis=0)
        safe_den = np.where(den > 0, den, 1.0)
        return np.where(den > 0, num / safe_den, 0.0)

    def fit(self, values: Sequence[float]) -> "ARIMALite":
        self.ar_coeffs = self._coefficients(values)
        return self

    def forecast(self, values: Sequence[float], steps: int) -> list[float]:
        """
        Fit on *values* and project *steps* points ahead.

        Coefficients are local to the call, so one instance can serve
        concurrent forecasts.
        """
        data = np.asarray(values, dtype=np.float64)
        if len(data) == 0 or steps <= 0:
            return []
        if len(data) <= self.d:
            return [float(data[-1])] * steps

        coeffs = self._coefficients(data)

        # Last value at every differencing level, for re-integration
        anchors = []
        level = data
        for _ in range(self.d):
            anchors.append(float(level[-1]))
            level = np.diff(level)

        window = list(level[-self.p:]) if self.p else []
        if len(window) < self.p:
            window = [0.0] * (self.p - len(window)) + window

        predictions: list[float] = []
        for _ in range(steps):
            pred = sum(coeffs[j] * window[-1 - j] for j in range(self.p))
            predictions.append(float(pred))
            window.append(float(pred))

        out = np.asarray(predictions, dtype=np.float64)
        for anchor in reversed(anchors):
            out = anchor + np.cumsum(out)
        return [float(v) for v in out]
