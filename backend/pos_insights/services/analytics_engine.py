"""
Analytics Engine

Composition root for the analytics and reorder services. The HTTP layer
builds one engine at startup (see main.py) and keeps it on app.state;
tests build their own with mocked repositories and a fixed clock.

Forecasting-chain operations are wrapped with logging and result caching;
reorder operations with logging only, so alerts always reflect current stock.
"""
from datetime import datetime
from typing import Callable, Optional

from pos_insights.core.config import Settings
from pos_insights.core.middleware import TTLCache, with_cache, with_logging
from pos_insights.repositories.inventory_repository import InventoryRepository
from pos_insights.repositories.sales_repository import SalesRepository
from pos_insights.services.cash_flow_service import CashFlowService
from pos_insights.services.financial_health_service import FinancialHealthService
from pos_insights.services.product_insights_service import ProductInsightService
from pos_insights.services.reorder_analysis_service import ReorderAnalysisService, ReorderConfig
from pos_insights.services.reorder_export_service import ReorderExportService
from pos_insights.services.revenue_forecasting_service import RevenueForecastingService


class AnalyticsEngine:
    """
    One instance of each service, wired to shared repositories and clock.

    Args:
        sales_repository: Sales history source
        inventory_repository: Variant and stock movement source
        settings: Cache TTL, opening cash balance and default lead time
        clock: Returns "now" for every service
    """

    def __init__(
        self,
        sales_repository: SalesRepository,
        inventory_repository: InventoryRepository,
        settings: Settings,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.revenue_forecasting = RevenueForecastingService(sales_repository, clock=clock)
        self.cash_flow = CashFlowService(
            sales_repository,
            self.revenue_forecasting,
            opening_balance=settings.CASH_OPENING_BALANCE,
            clock=clock,
        )
        self.product_insights = ProductInsightService(sales_repository, clock=clock)
        self.financial_health = FinancialHealthService(
            sales_repository, self.revenue_forecasting, clock=clock)
        self.reorder_analysis = ReorderAnalysisService(
            inventory_repository,
            config=ReorderConfig(default_lead_time=settings.DEFAULT_SUPPLIER_LEAD_TIME_DAYS),
            clock=clock,
        )
        self.reorder_export = ReorderExportService()

        ttl = settings.ANALYTICS_CACHE_TTL_SECONDS
        self.cache: Optional[TTLCache] = TTLCache(default_ttl=ttl) if ttl > 0 else None

        self.forecast_revenue = with_logging(
            with_cache(self.revenue_forecasting.forecast_revenue, ttl, self.cache))
        self.project_cash_flow = with_logging(
            with_cache(self.cash_flow.project_cash_flow, ttl, self.cache))
        self.generate_product_insights = with_logging(
            with_cache(self.product_insights.generate_product_insights, ttl, self.cache))
        self.calculate_financial_health = with_logging(
            with_cache(self.financial_health.calculate_financial_health, ttl, self.cache))

        self.analyze_reorder_needs = with_logging(self.reorder_analysis.analyze_reorder_needs)
        self.get_product_reorder_alerts = with_logging(self.reorder_analysis.get_product_reorder_alerts)
        self.get_alerts_by_priority = with_logging(self.reorder_analysis.get_alerts_by_priority)
        self.get_urgent_alerts = with_logging(self.reorder_analysis.get_urgent_alerts)

    def generate_reorder_worksheet(self):
        """Run a fresh reorder analysis and render it as an .xlsx BytesIO"""
        analysis = self.analyze_reorder_needs()
        return self.reorder_export.generate_reorder_worksheet(analysis)

    def invalidate_cache(self, pattern: str = "*") -> int:
        """Drop cached results matching a glob over 'Qualname:args' keys"""
        if self.cache is None:
            return 0
        return self.cache.invalidate_pattern(pattern)


def build_engine(settings: Settings) -> AnalyticsEngine:
    """Engine over the PostgreSQL repositories"""
    return AnalyticsEngine(SalesRepository(), InventoryRepository(), settings)
