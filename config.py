import os
from dotenv import load_dotenv

load_dotenv()

# ── Runtime ───────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("CLIMACAST_LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("CLIMACAST_LOG_DIR")  # None → <repo>/data/logs
DEFAULT_HORIZON = int(os.getenv("CLIMACAST_DEFAULT_HORIZON", "7"))

# ── History requirements ──────────────────────────────────────────────────────
MIN_HISTORY_POINTS = 14  # fewer present values → no forecast
TREND_WINDOW = 7  # points used for the recent-trend slope
VOLATILITY_WINDOW = 14  # points used for the recent population std
CV_WINDOW = 21  # points used for the confidence coefficient of variation

# ── Preprocessing ─────────────────────────────────────────────────────────────
OUTLIER_IQR_FACTOR = 1.5

# ── Trend estimator ───────────────────────────────────────────────────────────
TREND_REGULARIZATION = 0.01  # added to the least-squares slope denominator

# ── Autoregressive-difference model ───────────────────────────────────────────
AR_ORDER = (3, 1, 2)  # (p, d, q); q is stored but not fitted
# "per_feature": independent Σxy/Σx² ratio per lag
# "lstsq":       joint least-squares solve across all lags
AR_SOLVER = os.getenv("CLIMACAST_AR_SOLVER", "per_feature")

# ── Moving average with trend ─────────────────────────────────────────────────
MA_WINDOW = 10
MA_TREND_POINTS = 14  # most recent moving-average points fed to the trend fit

# ── Holt-Winters smoothing ────────────────────────────────────────────────────
HW_ALPHA = 0.3  # level
HW_BETA = 0.1  # trend
HW_GAMMA = 0.1  # seasonal
HW_SEASON_LENGTH = 7  # days

# ── Ensemble weights ──────────────────────────────────────────────────────────
# (autoregressive, seasonal, moving_average) before insight adjustments
PRIOR_WEIGHTS = (0.4, 0.4, 0.2)
SEASONAL_WEIGHT_SHIFT = (-0.1, 0.2, -0.1)
TREND_WEIGHT_SHIFT = (0.15, -0.1, -0.05)
VOLATILITY_WEIGHT_SHIFT = (-0.1, -0.05, 0.15)
VOLATILITY_FLAG_THRESHOLD = 0.6
INSIGHT_BIAS_SCALE = 0.1  # per-step nudge = direction * volatility * scale * step

# ── Confidence ────────────────────────────────────────────────────────────────
CONFIDENCE_BASE = 0.98
CONFIDENCE_FLOOR = 0.4
CONFIDENCE_STEP_DECAY = 0.03
CONFIDENCE_MAX_CV_PENALTY = 0.4
CONFIDENCE_MAX_DATA_BONUS = 0.1
CONFIDENCE_DATA_BONUS_POINTS = 30  # bonus = min(n / this, max bonus)
CONFIDENCE_INSIGHT_SCALE = 0.2
CONFIDENCE_SEASONAL_BONUS = 0.05
CONFIDENCE_TREND_BONUS = 0.03

# Summary confidence bands (average confidence of a forecast)
CONFIDENCE_HIGH = 0.8
CONFIDENCE_MEDIUM = 0.6

# ── Insight signal defaults ───────────────────────────────────────────────────
INSIGHT_DEFAULT_VOLATILITY = 0.3
INSIGHT_VOLATILE = 0.8
INSIGHT_DEFAULT_CONFIDENCE = 0.5
INSIGHT_FORECAST_CONFIDENCE = 0.8

# ── Field configuration ───────────────────────────────────────────────────────
# field key (as it appears in daily records) → { name, unit }
FIELDS = {
    "T2M": {
        "name": "Temperature (2m above ground)",
        "unit": "°C",
    },
    "PRECTOTCORR": {
        "name": "Total Precipitation",
        "unit": "mm/day",
    },
    "WS2M": {
        "name": "Wind Speed (2m above ground)",
        "unit": "m/s",
    },
    "RH2M": {
        "name": "Relative Humidity (2m above ground)",
        "unit": "%",
    },
    "SNODP": {
        "name": "Snow Depth",
        "unit": "cm",
    },
}


def field_label(field: str) -> str:
    """Return a display label for *field*, falling back to the raw key."""
    info = FIELDS.get(field)
    if info is None:
        return field
    return f"{info['name']} ({info['unit']})"
