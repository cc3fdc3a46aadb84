"""
Unit tests for ProductInsightService
"""
import pytest
from datetime import timedelta

from pos_insights.domain.analytics import InsightType, ProductMetric, Trend
from pos_insights.services.product_insights_service import (
    ProductInsightService,
    build_insight,
    classify_sales_trend,
    collect_product_metrics,
    format_fixed,
    sale_margin,
    sales_change_percent,
    velocity_score,
)

RECENT = 5    # days ago, inside the last 30 days
OLDER = 45    # days ago, 31-60 days back


class TestInsightCalculations:
    """Test the per-product metrics"""

    def test_sales_change_without_older_sales_is_100(self):
        """Test that a product with no older sales counts as +100%"""
        # Act & Assert
        assert sales_change_percent(12, 0) == 100.0

    def test_sales_change_percent(self):
        """Test percent change in both directions"""
        # Act & Assert
        assert sales_change_percent(15, 10) == pytest.approx(50.0)
        assert sales_change_percent(5, 10) == pytest.approx(-50.0)

    @pytest.mark.parametrize("change,expected", [
        (21.0, Trend.UP),
        (20.0, Trend.STABLE),
        (-20.0, Trend.STABLE),
        (-21.0, Trend.DOWN),
    ])
    def test_trend_thresholds(self, change, expected):
        """Test that only changes beyond +/-20% are a trend"""
        # Act & Assert
        assert classify_sales_trend(change) == expected

    def test_velocity_score_is_capped(self):
        """Test velocity scaling and the 100 cap"""
        # Act & Assert
        assert velocity_score(15) == pytest.approx(5.0)
        assert velocity_score(600) == 100.0

    def test_sale_margin_without_revenue_is_zero(self, make_sale):
        """Test that a zero-total sale has a 0% margin instead of dividing by zero"""
        # Arrange
        sale = make_sale(quantity=3, total=0.0, base_cost=5.0)

        # Act & Assert
        assert sale_margin(sale) == 0.0

    def test_collect_ignores_products_without_recent_sales(self, make_sale):
        """Test that older sales only count for products also sold recently"""
        # Arrange
        recent = [make_sale(product_id="A", days_ago=RECENT)]
        older = [
            make_sale(product_id="A", quantity=4, days_ago=OLDER),
            make_sale(product_id="B", quantity=9, days_ago=OLDER),
        ]

        # Act
        metrics = collect_product_metrics(recent, older)

        # Assert
        assert [m.product_id for m in metrics] == ["A"]
        assert metrics[0].older_sales == 4

    def test_collect_takes_margin_of_latest_recent_sale(self, make_sale):
        """Test that profit_margin reflects the last recent sale, not the window total"""
        # Arrange: 80% margin, then 10% margin
        recent = [
            make_sale(product_id="A", quantity=1, total=100.0, base_cost=20.0, days_ago=5),
            make_sale(product_id="A", quantity=1, total=100.0, base_cost=90.0, days_ago=2),
        ]

        # Act
        metrics = collect_product_metrics(recent, [])

        # Assert
        assert metrics[0].profit_margin == pytest.approx(10.0)
        assert metrics[0].recent_sales == 2
        assert metrics[0].recent_revenue == pytest.approx(200.0)

    def test_collect_latest_zero_total_sale_resets_margin(self, make_sale):
        """Test that a trailing zero-total sale leaves a 0% margin"""
        # Arrange
        recent = [
            make_sale(product_id="A", quantity=1, total=100.0, base_cost=20.0, days_ago=5),
            make_sale(product_id="A", quantity=1, total=0.0, base_cost=20.0, days_ago=2),
        ]

        # Act
        metrics = collect_product_metrics(recent, [])

        # Assert
        assert metrics[0].profit_margin == 0.0


class TestFormatFixed:
    """Test message number formatting (halves round away from zero)"""

    @pytest.mark.parametrize("value,places,expected", [
        (2.5, 0, "3"),
        (-2.5, 0, "-3"),
        (3.5, 0, "4"),
        (62.5, 0, "63"),
        (12.25, 1, "12.3"),
        (50.0, 1, "50.0"),
        (200.0, 0, "200"),
    ])
    def test_format_fixed(self, value, places, expected):
        """Test fixed-point rendering of message values"""
        # Act & Assert
        assert format_fixed(value, places) == expected


class TestInsightRules:
    """Test rule selection (first match wins)"""

    def test_strong_performer(self):
        """Test the strong performer insight for growth with a high margin"""
        # Arrange
        metric = ProductMetric(product_id="A", product_name="Alpha", recent_sales=30,
                               recent_revenue=3000.0, profit_margin=50.0, older_sales=10)

        # Act
        insight = build_insight(metric)

        # Assert
        assert insight.type == InsightType.SUCCESS
        assert insight.insight == "Strong performer with 200% growth and high margins"
        assert insight.recommendations == [
            "Consider increasing inventory levels",
            "Maintain current pricing strategy",
        ]
        assert insight.metrics.trend == Trend.UP
        assert insight.metrics.profit_margin == pytest.approx(50.0)
        assert insight.metrics.sales_change == pytest.approx(200.0)

    def test_declining_takes_precedence_over_margin(self):
        """Test that a downward trend wins over a high margin"""
        # Arrange
        metric = ProductMetric(product_id="A", product_name="Alpha", recent_sales=10,
                               recent_revenue=1000.0, profit_margin=90.0, older_sales=20)

        # Act
        insight = build_insight(metric)

        # Assert
        assert insight.type == InsightType.WARNING
        assert insight.insight == "Sales declining by 50%. Needs attention."
        assert len(insight.recommendations) == 3

    def test_declining_percentage_rounds_half_up(self):
        """Test that a -62.5% change is reported as 63%, not 62%"""
        # Arrange
        metric = ProductMetric(product_id="A", product_name="Alpha", recent_sales=3,
                               recent_revenue=30.0, profit_margin=20.0, older_sales=8)

        # Act
        insight = build_insight(metric)

        # Assert
        assert insight.metrics.sales_change == pytest.approx(-62.5)
        assert insight.insight == "Sales declining by 63%. Needs attention."

    def test_slow_moving(self):
        """Test the slow-moving insight for a stable, low-velocity product"""
        # Arrange
        metric = ProductMetric(product_id="A", product_name="Alpha", recent_sales=20,
                               recent_revenue=200.0, profit_margin=50.0, older_sales=20)

        # Act
        insight = build_insight(metric)

        # Assert
        assert insight.type == InsightType.WARNING
        assert insight.insight == "Slow-moving product. Low turnover detected."
        assert insight.metrics.velocity_score == pytest.approx(20 / 30 * 10)

    def test_high_margin_opportunity(self):
        """Test the high margin insight for a stable, fast-moving product"""
        # Arrange
        metric = ProductMetric(product_id="A", product_name="Alpha", recent_sales=60,
                               recent_revenue=600.0, profit_margin=50.0, older_sales=60)

        # Act
        insight = build_insight(metric)

        # Assert
        assert insight.type == InsightType.OPPORTUNITY
        assert insight.insight == "High margin opportunity with 50.0% profit"

    def test_high_margin_message_rounds_half_up(self):
        """Test that the margin is rendered with one decimal, halves away from zero"""
        # Arrange
        metric = ProductMetric(product_id="A", product_name="Alpha", recent_sales=60,
                               recent_revenue=600.0, profit_margin=42.25, older_sales=60)

        # Act
        insight = build_insight(metric)

        # Assert
        assert insight.insight == "High margin opportunity with 42.3% profit"

    def test_growth_with_low_margin_is_not_strong(self):
        """Test that growth with a 20% margin falls through to the later rules"""
        # Arrange
        metric = ProductMetric(product_id="A", product_name="Alpha", recent_sales=60,
                               recent_revenue=600.0, profit_margin=20.0, older_sales=30)

        # Act & Assert
        assert build_insight(metric) is None

    def test_unremarkable_product_has_no_insight(self):
        """Test that a product matching no rule yields no insight"""
        # Arrange
        metric = ProductMetric(product_id="A", product_name="Alpha", recent_sales=60,
                               recent_revenue=600.0, profit_margin=20.0, older_sales=60)

        # Act & Assert
        assert build_insight(metric) is None


class TestProductInsightService:
    """Test generate_product_insights against a mocked repository"""

    def test_fetches_last_60_days(self, sales_repository, fixed_clock, now):
        """Test that sales are fetched from 60 days before now"""
        # Arrange
        service = ProductInsightService(sales_repository, clock=fixed_clock)

        # Act
        service.generate_product_insights()

        # Assert
        sales_repository.fetch_sales.assert_called_once_with(now - timedelta(days=60))

    def test_splits_windows_and_keeps_product_order(self, sales_repository, fixed_clock, make_sale):
        """Test window split and that insights follow first recent sale order"""
        # Arrange
        sales_repository.fetch_sales.return_value = [
            # B: declining (10 recent vs 40 older)
            make_sale(product_id="B", quantity=40, total=400.0, base_cost=5.0, days_ago=OLDER),
            # A: slow-moving, no older sales -> +100%, but 20% margin
            make_sale(product_id="A", quantity=5, total=50.0, base_cost=8.0, days_ago=RECENT + 2),
            make_sale(product_id="B", quantity=10, total=100.0, base_cost=5.0, days_ago=RECENT),
        ]
        service = ProductInsightService(sales_repository, clock=fixed_clock)

        # Act
        insights = service.generate_product_insights()

        # Assert
        assert [i.product_id for i in insights] == ["A", "B"]
        assert insights[0].insight == "Slow-moving product. Low turnover detected."
        assert insights[1].insight == "Sales declining by 75%. Needs attention."
        assert insights[1].metrics.sales == 10
        assert insights[1].metrics.revenue == pytest.approx(100.0)

    def test_margin_comes_from_latest_recent_sale(self, sales_repository, fixed_clock, make_sale):
        """Test that an 80% then a 10% margin sale reports 10% and is slow-moving"""
        # Arrange
        sales_repository.fetch_sales.return_value = [
            make_sale(product_id="P1", quantity=1, total=100.0, base_cost=20.0, days_ago=5),
            make_sale(product_id="P1", quantity=1, total=100.0, base_cost=90.0, days_ago=2),
        ]
        service = ProductInsightService(sales_repository, clock=fixed_clock)

        # Act
        insights = service.generate_product_insights()

        # Assert
        assert len(insights) == 1
        assert insights[0].type == InsightType.WARNING
        assert insights[0].insight == "Slow-moving product. Low turnover detected."
        assert insights[0].metrics.profit_margin == pytest.approx(10.0)

    def test_sale_exactly_30_days_ago_is_recent(self, sales_repository, fixed_clock, make_sale):
        """Test that the recent window includes its start boundary"""
        # Arrange
        sales_repository.fetch_sales.return_value = [
            make_sale(product_id="A", quantity=1, total=10.0, base_cost=1.0, days_ago=30),
        ]
        service = ProductInsightService(sales_repository, clock=fixed_clock)

        # Act
        insights = service.generate_product_insights()

        # Assert
        assert len(insights) == 1
        assert insights[0].metrics.sales == 1

    def test_limit_caps_the_result(self, sales_repository, fixed_clock, make_sale):
        """Test that limit keeps the first insights in product order"""
        # Arrange
        sales_repository.fetch_sales.return_value = [
            make_sale(product_id=f"P{i}", quantity=1, total=10.0, days_ago=RECENT)
            for i in range(5)
        ]
        service = ProductInsightService(sales_repository, clock=fixed_clock)

        # Act
        insights = service.generate_product_insights(limit=2)

        # Assert
        assert [i.product_id for i in insights] == ["P0", "P1"]

    def test_limit_must_be_positive(self, sales_repository, fixed_clock):
        """Test that a limit below 1 is rejected"""
        # Arrange
        service = ProductInsightService(sales_repository, clock=fixed_clock)

        # Act & Assert
        with pytest.raises(ValueError):
            service.generate_product_insights(limit=0)

    def test_no_sales_no_insights(self, sales_repository, fixed_clock):
        """Test that no sales produce an empty list"""
        # Arrange
        service = ProductInsightService(sales_repository, clock=fixed_clock)

        # Act & Assert
        assert service.generate_product_insights() == []
