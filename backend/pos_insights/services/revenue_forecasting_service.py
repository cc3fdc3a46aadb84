"""
Revenue Forecasting Service

Fits a linear trend to the store's daily revenue and projects it forward
with a confidence band derived from the historical residuals.

    daily revenue (last N days) -> OLS trend -> dated point forecasts
                                -> lag-7 autocorrelation (weekly seasonality)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, date, timedelta
from typing import Callable, Optional, Sequence

import numpy as np

from pos_insights.domain.analytics import ForecastPoint, ForecastResult, Trend
from pos_insights.repositories.sales_repository import SalesRepository
from pos_insights.services.time_series import (
    aggregate_daily_revenue,
    average,
    detect_seasonality,
    standard_deviation,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Service Configuration
# =============================================================================

@dataclass
class ForecastConfig:
    """Configuration for the revenue forecaster"""
    min_points: int = 7                  # aggregated days needed to fit a trend
    growth_window: int = 7               # days compared for growth rate (first vs last)
    trend_slope_threshold: float = 0.5   # |slope| above this is a trend
    trend_strength_factor: float = 20.0
    z_score: float = 1.96                # 95% confidence band
    confidence_decay_per_day: int = 2


# =============================================================================
# Regression
# =============================================================================

@dataclass(frozen=True)
class TrendLine:
    """y = slope * x + intercept over day indices 0..n-1"""
    slope: float
    intercept: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


def fit_trend(values: Sequence[float]) -> TrendLine:
    """
    Ordinary least squares fit of values against their index.

    A single point (or none) has no slope; the line is flat at its mean.
    """
    n = len(values)
    if n == 0:
        return TrendLine(slope=0.0, intercept=0.0)

    y = np.asarray(values, dtype=float)
    x = np.arange(n, dtype=float)

    sum_x = float(x.sum())
    sum_y = float(y.sum())
    sum_xy = float((x * y).sum())
    sum_xx = float((x * x).sum())

    denominator = n * sum_xx - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator != 0 else 0.0
    intercept = (sum_y - slope * sum_x) / n

    return TrendLine(slope=slope, intercept=intercept)


def classify_trend(slope: float, threshold: float = 0.5) -> Trend:
    if slope > threshold:
        return Trend.UP
    if slope < -threshold:
        return Trend.DOWN
    return Trend.STABLE


def calculate_growth_rate(values: Sequence[float], window: int = 7) -> float:
    """Percent change between the mean of the last and first `window` values"""
    old_avg = average(values[:window])
    recent_avg = average(values[-window:])
    if old_avg <= 0:
        return 0.0
    return (recent_avg - old_avg) / old_avg * 100


def build_forecast(
    values: Sequence[float],
    days: int,
    today: date,
    config: Optional[ForecastConfig] = None,
) -> ForecastResult:
    """
    Forecast `days` future days from a chronological daily revenue series.

    Args:
        values: Daily revenue, oldest first (days without sales omitted)
        days: Horizon in days; point i is dated today + i
        today: Reference date for the generated dates
        config: Thresholds, defaults to ForecastConfig()

    Returns:
        ForecastResult; an empty stable forecast when fewer than
        config.min_points values are available
    """
    config = config or ForecastConfig()

    if len(values) < config.min_points:
        logger.info(f"Only {len(values)} days of revenue, need {config.min_points} to forecast")
        return ForecastResult()

    line = fit_trend(values)
    trend = classify_trend(line.slope, config.trend_slope_threshold)
    trend_strength = min(100.0, abs(line.slope) * config.trend_strength_factor)
    growth_rate = calculate_growth_rate(values, config.growth_window)

    residuals = [value - line.predict(i) for i, value in enumerate(values)]
    margin = config.z_score * standard_deviation(residuals)

    last_x = len(values) - 1
    predictions = []
    for i in range(1, days + 1):
        predicted = max(0.0, line.predict(last_x + i))
        predictions.append(ForecastPoint(
            date=today + timedelta(days=i),
            predicted_revenue=predicted,
            confidence=max(0, 100 - i * config.confidence_decay_per_day),
            lower_bound=max(0.0, predicted - margin),
            upper_bound=predicted + margin,
        ))

    return ForecastResult(
        predictions=predictions,
        trend=trend,
        trend_strength=trend_strength,
        seasonality_detected=detect_seasonality(values),
        growth_rate=growth_rate,
    )


# =============================================================================
# Revenue Forecasting Service
# =============================================================================

class RevenueForecastingService:
    """
    Revenue forecast over the store's sale history.

    Args:
        sales_repository: Source of SaleRecord history
        config: Forecast thresholds
        clock: Returns "now"; the only wall-clock dependency of the forecast
    """

    def __init__(
        self,
        sales_repository: SalesRepository,
        config: Optional[ForecastConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.sales_repository = sales_repository
        self.config = config or ForecastConfig()
        self.clock = clock

    def forecast_revenue(self, days: int = 30, historical_days: int = 90) -> ForecastResult:
        """
        Forecast daily revenue for the next `days` days.

        Args:
            days: Forecast horizon (>= 1)
            historical_days: How far back sales are used to fit the trend (>= 1)

        Raises:
            ValueError: non-positive horizon or history window
            DataAccessError: sales could not be fetched
        """
        if days < 1 or historical_days < 1:
            raise ValueError("days and historical_days must be positive")

        now = self.clock()
        sales = self.sales_repository.fetch_sales(now - timedelta(days=historical_days))
        daily = aggregate_daily_revenue(sales)

        logger.info(f"Forecasting {days} days from {len(daily)} days of revenue ({len(sales)} sales)")

        return build_forecast([p.revenue for p in daily], days, now.date(), self.config)
