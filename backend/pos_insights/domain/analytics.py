"""
Analytics Domain Models

Result structures of the forecasting chain: revenue forecast, cash-flow
projection, product insights and the financial health score. They are
built fresh for each request and returned as-is to the caller.
"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List
import datetime as dt


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class InsightType(str, Enum):
    OPPORTUNITY = "opportunity"
    WARNING = "warning"
    SUCCESS = "success"


class IndicatorStatus(str, Enum):
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


# =============================================================================
# Revenue forecast
# =============================================================================

class ForecastPoint(BaseModel):
    date: dt.date
    predicted_revenue: float
    confidence: int = Field(..., ge=0, le=100)
    lower_bound: float
    upper_bound: float


class ForecastResult(BaseModel):
    predictions: List[ForecastPoint] = Field(default_factory=list)
    trend: Trend = Trend.STABLE
    trend_strength: float = Field(0.0, ge=0, le=100)
    seasonality_detected: bool = False
    growth_rate: float = Field(0.0, description="Percent change, last week vs first week")


# =============================================================================
# Cash flow
# =============================================================================

class CashFlowPoint(BaseModel):
    date: dt.date
    expected_inflow: float
    expected_outflow: float
    net_cash_flow: float
    cumulative_cash: float


class CashFlowProjection(BaseModel):
    projections: List[CashFlowPoint] = Field(default_factory=list)
    burn_rate: float = Field(0.0, description="Average daily net outflow", ge=0)
    runway: Optional[int] = Field(None, description="Days until cumulative cash reaches zero")
    recommendation: str


# =============================================================================
# Product insights
# =============================================================================

class ProductMetric(BaseModel):
    """Per-product accumulator for one insight run (recent = last 30 days)"""

    product_id: str
    product_name: str
    recent_sales: int = 0
    recent_revenue: float = 0.0
    older_sales: int = 0
    older_revenue: float = 0.0
    profit_margin: float = Field(0.0, description="Margin of the latest recent sale, percent")


class InsightMetrics(BaseModel):
    sales: int
    revenue: float
    profit_margin: float
    trend: Trend
    velocity_score: float = Field(..., ge=0, le=100)
    sales_change: float


class ProductInsight(BaseModel):
    product_id: str
    product_name: str
    insight: str
    type: InsightType
    metrics: InsightMetrics
    recommendations: List[str]


# =============================================================================
# Financial health
# =============================================================================

class HealthIndicator(BaseModel):
    value: float
    status: IndicatorStatus


class HealthIndicators(BaseModel):
    profit_margin: HealthIndicator
    inventory_turnover: HealthIndicator
    growth_rate: HealthIndicator
    cash_position: HealthIndicator


class FinancialHealth(BaseModel):
    score: int = Field(..., ge=0, le=100)
    indicators: HealthIndicators
    alerts: List[str]
    recommendations: List[str]
