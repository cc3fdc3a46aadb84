"""
Reorder Analysis Service

Flags variants at or below their reorder point, estimates when they run
out from the last 90 days of sales, and suggests how much to order from
the preferred supplier.

Priority (first match):
    CRITICAL  stock <= 0 or depletes within 1 day
    HIGH      stock <= 25% of reorder point or depletes within 3 days
    MEDIUM    stock <= 50% of reorder point or depletes within 7 days
    LOW       otherwise
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from pos_insights.domain.inventory import (
    ReorderAlert,
    ReorderAnalysis,
    ReorderPriority,
    ReorderSummary,
    StockMovement,
    SupplierInfo,
    VariantSnapshot,
)
from pos_insights.repositories.inventory_repository import InventoryRepository

logger = logging.getLogger(__name__)


# =============================================================================
# Service Configuration
# =============================================================================

@dataclass
class ReorderConfig:
    """Configuration for reorder analysis"""
    sales_window_days: int = 90          # history used for average daily sales
    depletion_sentinel: int = 999        # days_to_depletion when nothing sells
    default_lead_time: int = 7           # days, when the supplier has none
    safety_stock_ratio: float = 0.2      # of reorder point
    optimal_stock_multiplier: int = 2    # target stock = multiplier * reorder point


# =============================================================================
# Calculations
# =============================================================================

def calculate_avg_daily_sales(movements: Sequence[StockMovement], window_days: int = 90) -> float:
    """Units sold per day over the window; movement signs are ignored"""
    if not movements:
        return 0.0
    total_sold = sum(abs(m.quantity) for m in movements)
    return total_sold / window_days


def calculate_days_to_depletion(stock: int, avg_daily_sales: float, sentinel: int = 999) -> int:
    if avg_daily_sales > 0:
        return math.floor(stock / avg_daily_sales)
    return sentinel


def determine_priority(stock: int, reorder_point: int, days_to_depletion: int) -> ReorderPriority:
    stock_ratio = stock / reorder_point if reorder_point > 0 else 0.0

    if stock <= 0 or days_to_depletion <= 1:
        return ReorderPriority.CRITICAL
    if stock_ratio <= 0.25 or days_to_depletion <= 3:
        return ReorderPriority.HIGH
    if stock_ratio <= 0.5 or days_to_depletion <= 7:
        return ReorderPriority.MEDIUM
    return ReorderPriority.LOW


def resolve_lead_time(variant: VariantSnapshot, default: int = 7) -> int:
    """Preferred supplier's lead time; the default when missing or 0"""
    supplier = variant.preferred_supplier
    if supplier is not None and supplier.lead_time:
        return supplier.lead_time
    return default


def calculate_suggested_order_qty(
    stock: int,
    reorder_point: int,
    avg_daily_sales: float,
    lead_time: int,
    config: Optional[ReorderConfig] = None,
) -> int:
    """
    Quantity that brings stock back to the optimal level.

        optimal - stock + demand during lead time + safety stock

    never less than the reorder point itself.
    """
    config = config or ReorderConfig()

    demand_during_lead_time = math.ceil(avg_daily_sales * lead_time)
    safety_stock = math.ceil(reorder_point * config.safety_stock_ratio)
    optimal_stock = reorder_point * config.optimal_stock_multiplier

    quantity = max(optimal_stock - stock + demand_during_lead_time + safety_stock, reorder_point)
    return math.ceil(quantity)


def analyze_variant(
    variant: VariantSnapshot,
    movements: Sequence[StockMovement],
    config: Optional[ReorderConfig] = None,
) -> Optional[ReorderAlert]:
    """
    Build the reorder alert for one variant.

    Args:
        variant: Stock position
        movements: SALE movements within the sales window, most recent first
        config: Analysis constants

    Returns:
        ReorderAlert, or None when stock is above the reorder point
    """
    config = config or ReorderConfig()

    if variant.stock > variant.reorder_point:
        return None

    avg_daily_sales = calculate_avg_daily_sales(movements, config.sales_window_days)
    days_to_depletion = calculate_days_to_depletion(
        variant.stock, avg_daily_sales, config.depletion_sentinel)
    priority = determine_priority(variant.stock, variant.reorder_point, days_to_depletion)

    lead_time = resolve_lead_time(variant, config.default_lead_time)
    suggested = calculate_suggested_order_qty(
        variant.stock, variant.reorder_point, avg_daily_sales, lead_time, config)

    supplier_info = None
    if variant.preferred_supplier is not None:
        supplier_info = SupplierInfo(
            supplier_name=variant.preferred_supplier.supplier_name,
            cost=variant.preferred_supplier.cost,
            lead_time=lead_time,
        )

    last_sold_date = max((m.created_at for m in movements), default=None)

    return ReorderAlert(
        product_id=variant.product_id,
        variant_id=variant.variant_id,
        product_name=variant.product_name,
        variant_name=variant.variant_name,
        current_stock=variant.stock,
        reorder_point=variant.reorder_point,
        suggested_order_qty=suggested,
        days_to_depletion=days_to_depletion,
        priority=priority,
        last_sold_date=last_sold_date,
        avg_daily_sales=avg_daily_sales,
        supplier_info=supplier_info,
    )


def summarize(alerts: Sequence[ReorderAlert]) -> ReorderSummary:
    def count(priority: ReorderPriority) -> int:
        return sum(1 for a in alerts if a.priority == priority)

    return ReorderSummary(
        total_alerts=len(alerts),
        critical_count=count(ReorderPriority.CRITICAL),
        high_count=count(ReorderPriority.HIGH),
        medium_count=count(ReorderPriority.MEDIUM),
        low_count=count(ReorderPriority.LOW),
    )


# =============================================================================
# Reorder Analysis Service
# =============================================================================

class ReorderAnalysisService:
    """
    Reorder alerts over every variant of a non-archived product.

    Args:
        inventory_repository: Source of variants and their SALE movements
        config: Analysis constants
        clock: Returns "now"; anchors the sales window
    """

    def __init__(
        self,
        inventory_repository: InventoryRepository,
        config: Optional[ReorderConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.inventory_repository = inventory_repository
        self.config = config or ReorderConfig()
        self.clock = clock

    def analyze_reorder_needs(self) -> ReorderAnalysis:
        """
        Analyze all variants and return alerts, most urgent first.

        Alerts of equal priority keep the repository's variant order.

        Raises:
            DataAccessError: variants or movements could not be fetched
        """
        since = self.clock() - timedelta(days=self.config.sales_window_days)
        variants = self.inventory_repository.fetch_variants_needing_review()

        alerts: List[ReorderAlert] = []
        for variant in variants:
            if variant.stock > variant.reorder_point:
                continue
            movements = self.inventory_repository.fetch_stock_movements(variant.variant_id, since)
            alert = analyze_variant(variant, movements, self.config)
            if alert is not None:
                alerts.append(alert)

        alerts.sort(key=lambda a: a.priority.rank, reverse=True)
        summary = summarize(alerts)

        logger.info(
            f"Reorder analysis: {summary.total_alerts} alerts from {len(variants)} variants "
            f"({summary.critical_count} critical, {summary.high_count} high)"
        )
        return ReorderAnalysis(alerts=alerts, summary=summary)

    def get_product_reorder_alerts(self, product_id: str) -> List[ReorderAlert]:
        analysis = self.analyze_reorder_needs()
        return [a for a in analysis.alerts if a.product_id == product_id]

    def get_alerts_by_priority(self, priority: ReorderPriority) -> List[ReorderAlert]:
        analysis = self.analyze_reorder_needs()
        return [a for a in analysis.alerts if a.priority == priority]

    def get_urgent_alerts(self) -> List[ReorderAlert]:
        """CRITICAL and HIGH alerts"""
        analysis = self.analyze_reorder_needs()
        urgent = (ReorderPriority.CRITICAL, ReorderPriority.HIGH)
        return [a for a in analysis.alerts if a.priority in urgent]
