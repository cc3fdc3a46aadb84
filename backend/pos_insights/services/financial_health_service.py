"""
Financial Health Service

Scores the business 0-100 from four indicators measured over the last 30
days (profit margin, inventory turnover, revenue growth, cash position)
and lists an alert plus recommendations for every poor indicator.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Tuple

from pos_insights.domain.analytics import (
    FinancialHealth,
    HealthIndicator,
    HealthIndicators,
    IndicatorStatus,
)
from pos_insights.repositories.sales_repository import SalesRepository
from pos_insights.services.revenue_forecasting_service import RevenueForecastingService

logger = logging.getLogger(__name__)

WINDOW_DAYS = 30

# (good_above, fair_above) per indicator
PROFIT_MARGIN_THRESHOLDS = (30.0, 15.0)
INVENTORY_TURNOVER_THRESHOLDS = (5.0, 2.0)
GROWTH_RATE_THRESHOLDS = (10.0, 0.0)
CASH_POSITION_THRESHOLDS = (10000.0, 5000.0)

STATUS_SCORES = {
    IndicatorStatus.GOOD: 100,
    IndicatorStatus.FAIR: 60,
    IndicatorStatus.POOR: 30,
}

# Weights sum to 100
WEIGHTS = {
    'profit_margin': 30,
    'inventory_turnover': 25,
    'growth_rate': 25,
    'cash_position': 20,
}

POOR_INDICATOR_ADVICE = {
    'profit_margin': (
        "Low profit margins detected",
        ["Review pricing strategy", "Analyze cost reduction opportunities"],
    ),
    'inventory_turnover': (
        "Slow inventory turnover",
        ["Consider clearance sales for slow-moving items"],
    ),
    'growth_rate': (
        "Negative or stagnant growth",
        ["Increase marketing efforts", "Explore new customer segments"],
    ),
    'cash_position': (
        "Weak cash position",
        ["Reduce discretionary spending", "Follow up on slow-paying accounts"],
    ),
}


def rate(value: float, thresholds: Tuple[float, float]) -> IndicatorStatus:
    good_above, fair_above = thresholds
    if value > good_above:
        return IndicatorStatus.GOOD
    if value > fair_above:
        return IndicatorStatus.FAIR
    return IndicatorStatus.POOR


def weighted_score(indicators: HealthIndicators) -> int:
    """
    Weighted mean of the per-indicator status scores, rounded half-up.

    Status scores and weights are integers, so the rounding is done in
    integer arithmetic.
    """
    total = sum(
        STATUS_SCORES[getattr(indicators, name).status] * weight
        for name, weight in WEIGHTS.items()
    )
    return (total + 50) // 100


def build_financial_health(
    profit_margin: float,
    inventory_turnover: float,
    growth_rate: float,
    cash_position: float,
) -> FinancialHealth:
    """Rate the four raw indicator values and assemble the health report"""
    indicators = HealthIndicators(
        profit_margin=HealthIndicator(
            value=profit_margin, status=rate(profit_margin, PROFIT_MARGIN_THRESHOLDS)),
        inventory_turnover=HealthIndicator(
            value=inventory_turnover, status=rate(inventory_turnover, INVENTORY_TURNOVER_THRESHOLDS)),
        growth_rate=HealthIndicator(
            value=growth_rate, status=rate(growth_rate, GROWTH_RATE_THRESHOLDS)),
        cash_position=HealthIndicator(
            value=cash_position, status=rate(cash_position, CASH_POSITION_THRESHOLDS)),
    )

    alerts: List[str] = []
    recommendations: List[str] = []
    for name in WEIGHTS:
        if getattr(indicators, name).status == IndicatorStatus.POOR:
            alert, advice = POOR_INDICATOR_ADVICE[name]
            alerts.append(alert)
            recommendations.extend(advice)

    return FinancialHealth(
        score=weighted_score(indicators),
        indicators=indicators,
        alerts=alerts,
        recommendations=recommendations,
    )


class FinancialHealthService:
    """Financial health score over the trailing 30 days"""

    def __init__(
        self,
        sales_repository: SalesRepository,
        forecaster: RevenueForecastingService,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.sales_repository = sales_repository
        self.forecaster = forecaster
        self.clock = clock

    def calculate_financial_health(self) -> FinancialHealth:
        """
        Raises:
            DataAccessError: sales or the product count could not be fetched
        """
        sales = self.sales_repository.fetch_sales(self.clock() - timedelta(days=WINDOW_DAYS))

        total_revenue = sum(sale.total for sale in sales)
        total_cost = sum(sale.cost for sale in sales)
        profit_margin = (total_revenue - total_cost) / total_revenue * 100 if total_revenue > 0 else 0.0

        # Sale records per catalog product
        product_count = self.sales_repository.fetch_product_count()
        inventory_turnover = len(sales) / product_count if product_count > 0 else 0.0

        growth_rate = self.forecaster.forecast_revenue(30, 90).growth_rate

        health = build_financial_health(
            profit_margin=profit_margin,
            inventory_turnover=inventory_turnover,
            growth_rate=growth_rate,
            cash_position=total_revenue - total_cost,
        )

        logger.info(f"Financial health score {health.score} ({len(health.alerts)} alerts)")
        return health
