"""
Daily revenue series helpers

Aggregation of raw sales into a daily revenue series, plus the weekly
seasonality test run over that series.
"""
import logging
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd

from pos_insights.domain.sales import SaleRecord, DailyRevenuePoint

logger = logging.getLogger(__name__)

WEEKLY_LAG = 7
MIN_POINTS_FOR_SEASONALITY = 28
SEASONALITY_THRESHOLD = 0.5


def aggregate_daily_revenue(sales: Iterable[SaleRecord]) -> List[DailyRevenuePoint]:
    """
    Group sales by calendar day and sum their totals.

    The day is created_at truncated to its date as stored; no timezone
    conversion is applied. Days without sales are absent from the result.

    Returns:
        One DailyRevenuePoint per day with at least one sale, oldest first
    """
    rows = [{'day': sale.created_at.date(), 'total': sale.total} for sale in sales]
    if not rows:
        return []

    df = pd.DataFrame(rows)
    daily = df.groupby('day', sort=True)['total'].sum()

    return [DailyRevenuePoint(date=day, revenue=float(revenue)) for day, revenue in daily.items()]


def average(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence"""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation, 0 for an empty sequence"""
    if len(values) == 0:
        return 0.0
    return float(np.std(values))


def autocorrelation(values: Sequence[float], lag: int) -> float:
    """
    Lag-k autocorrelation around the mean of the whole series

        sum((v[i+k] - mean) * (v[i] - mean)) / sum((v[i] - mean) ** 2)

    with i running over the first n-k values. Returns 0 when the series is
    not longer than the lag or the denominator is 0.
    """
    if len(values) <= lag:
        return 0.0

    series = np.asarray(values, dtype=float)
    mean = series.mean()
    lagged = series[lag:] - mean
    base = series[:-lag] - mean

    denominator = float(np.sum(base ** 2))
    if denominator == 0:
        return 0.0
    return float(np.sum(lagged * base)) / denominator


def detect_seasonality(values: Sequence[float]) -> bool:
    """
    True when the series shows a weekly pattern (|lag-7 autocorrelation| > 0.5).

    Needs at least four weeks of points; shorter series are never seasonal.
    """
    if len(values) < MIN_POINTS_FOR_SEASONALITY:
        return False

    correlation = autocorrelation(values, WEEKLY_LAG)
    logger.debug(f"Weekly autocorrelation over {len(values)} points: {correlation:.3f}")
    return abs(correlation) > SEASONALITY_THRESHOLD
