"""
Analytics API Endpoints

Revenue forecast, cash flow projection, product insights and financial
health score. All computation happens in the AnalyticsEngine kept on
app.state; these handlers only validate parameters and map errors.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request

from pos_insights.core.database import DataAccessError
from pos_insights.domain.analytics import (
    CashFlowProjection,
    FinancialHealth,
    ForecastResult,
    ProductInsight,
)

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


def get_engine(request: Request):
    return request.app.state.engine


def run_engine_call(call, *args, **kwargs):
    """Invoke an engine operation, mapping storage failures to 503"""
    try:
        return call(*args, **kwargs)
    except DataAccessError as e:
        raise HTTPException(status_code=503, detail=f"Sales data unavailable: {str(e)}")


# =============================================================================
# API Endpoints
# =============================================================================

@router.get("/forecast/revenue", response_model=ForecastResult)
async def get_revenue_forecast(
    request: Request,
    days: int = Query(30, ge=1, le=365, description="Days to forecast"),
    historical_days: int = Query(90, ge=1, le=730, description="Days of history used to fit the trend"),
):
    """
    Forecast daily revenue with a linear trend.

    Returns:
        ForecastResult with:
        - predictions: one point per future day with a 95% band
        - trend / trend_strength: direction and steepness of the fitted line
        - seasonality_detected: weekly pattern in the history
        - growth_rate: last week vs first week, in percent

    Fewer than 7 days with sales yields an empty, stable forecast.
    """
    engine = get_engine(request)
    return run_engine_call(engine.forecast_revenue, days, historical_days)


@router.get("/forecast/cash-flow", response_model=CashFlowProjection)
async def get_cash_flow_projection(
    request: Request,
    days: int = Query(30, ge=1, le=365, description="Days to project"),
    opening_balance: Optional[float] = Query(
        None,
        description="Cash on hand today (defaults to CASH_OPENING_BALANCE)"
    ),
):
    """
    Project daily net cash flow (forecasted revenue minus average daily cost).

    Includes burn rate, runway in days (when cash is being consumed) and a
    single recommendation.
    """
    engine = get_engine(request)
    return run_engine_call(engine.project_cash_flow, days, opening_balance)


@router.get("/insights/products", response_model=List[ProductInsight])
async def get_product_insights(
    request: Request,
    limit: int = Query(10, ge=1, le=100, description="Maximum number of insights to return"),
):
    """
    Per-product insights from the last 30 days vs the 30 before.

    Insights are returned in product order, not ranked.
    """
    engine = get_engine(request)
    return run_engine_call(engine.generate_product_insights, limit)


@router.get("/health/financial", response_model=FinancialHealth)
async def get_financial_health(request: Request):
    """
    Composite financial health score (0-100).

    Weighted from profit margin (30), inventory turnover (25), growth rate (25)
    and cash position (20), with an alert for every poor indicator.
    """
    engine = get_engine(request)
    return run_engine_call(engine.calculate_financial_health)
