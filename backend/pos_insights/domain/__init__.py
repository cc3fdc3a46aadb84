"""
Domain Layer - Business Entities

Pydantic models for the records the engine consumes and the results it
produces.
"""
from pos_insights.domain.sales import SaleRecord, DailyRevenuePoint
from pos_insights.domain.inventory import (
    MovementType,
    StockMovement,
    PreferredSupplier,
    VariantSnapshot,
    ReorderPriority,
    SupplierInfo,
    ReorderAlert,
    ReorderSummary,
    ReorderAnalysis,
)
from pos_insights.domain.analytics import (
    Trend,
    InsightType,
    IndicatorStatus,
    ForecastPoint,
    ForecastResult,
    CashFlowPoint,
    CashFlowProjection,
    ProductMetric,
    InsightMetrics,
    ProductInsight,
    HealthIndicator,
    HealthIndicators,
    FinancialHealth,
)

__all__ = [
    'SaleRecord', 'DailyRevenuePoint',
    'MovementType', 'StockMovement', 'PreferredSupplier', 'VariantSnapshot',
    'ReorderPriority', 'SupplierInfo', 'ReorderAlert', 'ReorderSummary', 'ReorderAnalysis',
    'Trend', 'InsightType', 'IndicatorStatus',
    'ForecastPoint', 'ForecastResult', 'CashFlowPoint', 'CashFlowProjection',
    'ProductMetric', 'InsightMetrics', 'ProductInsight',
    'HealthIndicator', 'HealthIndicators', 'FinancialHealth',
]
