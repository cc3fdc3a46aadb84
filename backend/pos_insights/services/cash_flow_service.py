"""
Cash Flow Service

Projects daily net cash flow as forecasted revenue minus the average daily
cost of goods of the last 30 days, and derives burn rate and runway.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from pos_insights.domain.analytics import CashFlowPoint, CashFlowProjection, ForecastResult
from pos_insights.repositories.sales_repository import SalesRepository
from pos_insights.services.revenue_forecasting_service import RevenueForecastingService
from pos_insights.services.time_series import average

logger = logging.getLogger(__name__)

COST_WINDOW_DAYS = 30
CRITICAL_RUNWAY_DAYS = 30

CRITICAL_RUNWAY_MESSAGE = "Cash runway is critically low ({runway} days). Immediate action required."
NEGATIVE_FLOW_MESSAGE = "Negative cash flow detected. Consider cost reduction or revenue increase strategies."
POSITIVE_FLOW_MESSAGE = "Cash flow is positive. Consider reinvesting in growth."


def build_cash_flow_projection(
    forecast: ForecastResult,
    avg_daily_cost: float,
    opening_balance: float = 0.0,
) -> CashFlowProjection:
    """
    Turn a revenue forecast into a cash flow projection.

    Args:
        forecast: Revenue forecast; one projection row per prediction
        avg_daily_cost: Expected outflow per day
        opening_balance: Cash on hand before the first projected day

    Returns:
        CashFlowProjection with burn_rate, runway and one recommendation
    """
    cumulative_cash = opening_balance
    projections: List[CashFlowPoint] = []

    for prediction in forecast.predictions:
        net_cash_flow = prediction.predicted_revenue - avg_daily_cost
        cumulative_cash += net_cash_flow
        projections.append(CashFlowPoint(
            date=prediction.date,
            expected_inflow=prediction.predicted_revenue,
            expected_outflow=avg_daily_cost,
            net_cash_flow=net_cash_flow,
            cumulative_cash=cumulative_cash,
        ))

    avg_net_cash_flow = average([p.net_cash_flow for p in projections])
    burn_rate = abs(avg_net_cash_flow) if avg_net_cash_flow < 0 else 0.0

    runway = None
    if burn_rate > 0 and cumulative_cash > 0:
        runway = math.floor(cumulative_cash / burn_rate)

    if runway is not None and runway < CRITICAL_RUNWAY_DAYS:
        recommendation = CRITICAL_RUNWAY_MESSAGE.format(runway=runway)
    elif avg_net_cash_flow < 0:
        recommendation = NEGATIVE_FLOW_MESSAGE
    else:
        recommendation = POSITIVE_FLOW_MESSAGE

    return CashFlowProjection(
        projections=projections,
        burn_rate=burn_rate,
        runway=runway,
        recommendation=recommendation,
    )


class CashFlowService:
    """
    Cash flow projection built on the revenue forecaster.

    Args:
        sales_repository: Source of the trailing 30 days of sales (for costs)
        forecaster: Revenue forecaster used for expected inflows
        opening_balance: Default starting cash (0 unless configured)
        clock: Returns "now"
    """

    def __init__(
        self,
        sales_repository: SalesRepository,
        forecaster: RevenueForecastingService,
        opening_balance: float = 0.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.sales_repository = sales_repository
        self.forecaster = forecaster
        self.opening_balance = opening_balance
        self.clock = clock

    def average_daily_cost(self) -> float:
        """Cost of goods sold over the last 30 days, per day"""
        since = self.clock() - timedelta(days=COST_WINDOW_DAYS)
        sales = self.sales_repository.fetch_sales(since)
        total_cost = sum(sale.cost for sale in sales)
        return total_cost / COST_WINDOW_DAYS

    def project_cash_flow(self, days: int = 30, opening_balance: Optional[float] = None) -> CashFlowProjection:
        """
        Project cash flow for the next `days` days.

        Args:
            days: Projection horizon (>= 1)
            opening_balance: Starting cash; defaults to the service's configured balance

        Raises:
            DataAccessError: sales could not be fetched
        """
        forecast = self.forecaster.forecast_revenue(days)
        avg_daily_cost = self.average_daily_cost()

        balance = self.opening_balance if opening_balance is None else opening_balance
        projection = build_cash_flow_projection(forecast, avg_daily_cost, balance)

        logger.info(
            f"Cash flow projection: {len(projection.projections)} days, "
            f"avg daily cost {avg_daily_cost:.2f}, burn rate {projection.burn_rate:.2f}, "
            f"runway {projection.runway}"
        )
        return projection
