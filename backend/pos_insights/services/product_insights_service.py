"""
Product Insights Service

Compares each product's last 30 days with the 30 days before and turns the
comparison into a short, actionable insight.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from pos_insights.domain.analytics import (
    InsightMetrics,
    InsightType,
    ProductInsight,
    ProductMetric,
    Trend,
)
from pos_insights.domain.sales import SaleRecord
from pos_insights.repositories.sales_repository import SalesRepository

logger = logging.getLogger(__name__)

WINDOW_DAYS = 30
TREND_CHANGE_THRESHOLD = 20.0   # percent
SLOW_VELOCITY_SCORE = 10.0
STRONG_MARGIN = 30.0
HIGH_MARGIN = 40.0


@dataclass(frozen=True)
class InsightRule:
    """What to tell about a product once a condition has matched"""
    type: InsightType
    message: str
    recommendations: tuple


STRONG_PERFORMER = InsightRule(
    InsightType.SUCCESS,
    "Strong performer with {sales_change}% growth and high margins",
    ("Consider increasing inventory levels", "Maintain current pricing strategy"),
)
DECLINING = InsightRule(
    InsightType.WARNING,
    "Sales declining by {abs_sales_change}%. Needs attention.",
    ("Consider promotional pricing", "Review product positioning", "Analyze competitor offerings"),
)
SLOW_MOVING = InsightRule(
    InsightType.WARNING,
    "Slow-moving product. Low turnover detected.",
    ("Consider clearance pricing", "Reduce reorder quantities"),
)
HIGH_MARGIN_OPPORTUNITY = InsightRule(
    InsightType.OPPORTUNITY,
    "High margin opportunity with {profit_margin}% profit",
    ("Increase marketing focus", "Consider bundling with other products"),
)


def format_fixed(value: float, places: int) -> str:
    """
    Fixed-point text with halves rounded away from zero (2.5 -> "3").

    Rounds the exact binary value, so 1.005 with 2 places gives "1.00".
    """
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def sale_margin(sale: SaleRecord) -> float:
    """Profit margin of one sale in percent; 0 when the sale has no revenue"""
    if sale.total == 0:
        return 0.0
    return (sale.total - sale.cost) / sale.total * 100


def collect_product_metrics(
    recent_sales: Iterable[SaleRecord],
    older_sales: Iterable[SaleRecord],
) -> List[ProductMetric]:
    """
    Accumulate per-product sales for the recent and the older window.

    Only products sold in the recent window get a metric; older sales of
    other products are ignored. Products keep the order of their first
    recent sale. profit_margin is the margin of the last recent sale seen,
    so recent_sales must be in chronological order.
    """
    metrics: Dict[str, ProductMetric] = {}

    for sale in recent_sales:
        metric = metrics.get(sale.product_id)
        if metric is None:
            metric = ProductMetric(product_id=sale.product_id, product_name=sale.product_name)
            metrics[sale.product_id] = metric
        metric.recent_sales += sale.quantity
        metric.recent_revenue += sale.total
        metric.profit_margin = sale_margin(sale)

    for sale in older_sales:
        metric = metrics.get(sale.product_id)
        if metric is not None:
            metric.older_sales += sale.quantity
            metric.older_revenue += sale.total

    return list(metrics.values())


def sales_change_percent(recent: float, older: float) -> float:
    """Percent change recent vs older; 100 when there were no older sales"""
    if older == 0:
        return 100.0
    return (recent - older) / older * 100


def classify_sales_trend(sales_change: float) -> Trend:
    if sales_change > TREND_CHANGE_THRESHOLD:
        return Trend.UP
    if sales_change < -TREND_CHANGE_THRESHOLD:
        return Trend.DOWN
    return Trend.STABLE


def velocity_score(recent_sales: float) -> float:
    """Units per day over the window, scaled x10 and capped at 100"""
    return min(100.0, (recent_sales / WINDOW_DAYS) * 10)


def select_rule(trend: Trend, profit_margin: float, velocity: float) -> Optional[InsightRule]:
    """First matching rule wins; None when nothing is worth reporting"""
    if trend == Trend.UP and profit_margin > STRONG_MARGIN:
        return STRONG_PERFORMER
    if trend == Trend.DOWN:
        return DECLINING
    if velocity < SLOW_VELOCITY_SCORE:
        return SLOW_MOVING
    if profit_margin > HIGH_MARGIN:
        return HIGH_MARGIN_OPPORTUNITY
    return None


def build_insight(metric: ProductMetric) -> Optional[ProductInsight]:
    change = sales_change_percent(metric.recent_sales, metric.older_sales)
    trend = classify_sales_trend(change)
    velocity = velocity_score(metric.recent_sales)
    margin = metric.profit_margin

    rule = select_rule(trend, margin, velocity)
    if rule is None:
        return None

    return ProductInsight(
        product_id=metric.product_id,
        product_name=metric.product_name,
        insight=rule.message.format(
            sales_change=format_fixed(change, 0),
            abs_sales_change=format_fixed(abs(change), 0),
            profit_margin=format_fixed(margin, 1),
        ),
        type=rule.type,
        metrics=InsightMetrics(
            sales=metric.recent_sales,
            revenue=metric.recent_revenue,
            profit_margin=margin,
            trend=trend,
            velocity_score=velocity,
            sales_change=change,
        ),
        recommendations=list(rule.recommendations),
    )


class ProductInsightService:
    """
    Per-product insights over the last 60 days of sales.

    Args:
        sales_repository: Source of SaleRecord history
        clock: Returns "now"; splits the recent and older windows
    """

    def __init__(
        self,
        sales_repository: SalesRepository,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.sales_repository = sales_repository
        self.clock = clock

    def generate_product_insights(self, limit: int = 10) -> List[ProductInsight]:
        """
        Generate at most `limit` insights, in product order (not ranked).

        Products matching no rule produce no insight.

        Raises:
            ValueError: limit < 1
            DataAccessError: sales could not be fetched
        """
        if limit < 1:
            raise ValueError("limit must be positive")

        now = self.clock()
        recent_start = now - timedelta(days=WINDOW_DAYS)
        sales = self.sales_repository.fetch_sales(now - timedelta(days=2 * WINDOW_DAYS))

        recent = [s for s in sales if s.created_at >= recent_start]
        older = [s for s in sales if s.created_at < recent_start]
        metrics = collect_product_metrics(recent, older)

        insights = []
        for metric in metrics:
            insight = build_insight(metric)
            if insight is not None:
                insights.append(insight)

        logger.info(f"Generated {len(insights)} insights for {len(metrics)} products")
        return insights[:limit]
