"""
Pytest fixtures and configuration for POS Insights backend tests

Services are tested against MagicMock repositories and a fixed clock, so
no database connection is needed.
"""
import pytest
from datetime import datetime, timedelta
from unittest.mock import MagicMock
from dotenv import load_dotenv

from pos_insights.domain.inventory import (
    MovementType,
    PreferredSupplier,
    StockMovement,
    VariantSnapshot,
)
from pos_insights.domain.sales import SaleRecord
from pos_insights.repositories.inventory_repository import InventoryRepository
from pos_insights.repositories.sales_repository import SalesRepository

# Load environment variables for tests
load_dotenv()

NOW = datetime(2025, 6, 15, 12, 0, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def fixed_clock():
    """Clock that always returns NOW"""
    return lambda: NOW


@pytest.fixture
def make_sale():
    """
    Factory for SaleRecord

    days_ago is measured from NOW.
    """
    def _make_sale(product_id="P1", quantity=1, total=10.0, days_ago=1,
                   base_cost=5.0, product_name=None, variant_id=None):
        return SaleRecord(
            product_id=product_id,
            variant_id=variant_id,
            product_name=product_name or f"Product {product_id}",
            quantity=quantity,
            total=total,
            created_at=NOW - timedelta(days=days_ago),
            base_cost=base_cost,
        )
    return _make_sale


@pytest.fixture
def make_variant():
    """Factory for VariantSnapshot; lead_time=None still attaches a supplier"""
    def _make_variant(variant_id="V1", product_id="P1", stock=5, reorder_point=20,
                      color=None, size=None, supplier_name=None, cost=3.5, lead_time=None):
        supplier = None
        if supplier_name:
            supplier = PreferredSupplier(supplier_name=supplier_name, cost=cost, lead_time=lead_time)
        return VariantSnapshot(
            variant_id=variant_id,
            product_id=product_id,
            product_name=f"Product {product_id}",
            color=color,
            size=size,
            stock=stock,
            reorder_point=reorder_point,
            preferred_supplier=supplier,
        )
    return _make_variant


@pytest.fixture
def make_sale_movements():
    """Factory for `count` SALE movements of `quantity` units each, one per day back from NOW"""
    def _make(variant_id="V1", count=1, quantity=-1):
        return [
            StockMovement(
                variant_id=variant_id,
                type=MovementType.SALE,
                quantity=quantity,
                created_at=NOW - timedelta(days=i + 1),
            )
            for i in range(count)
        ]
    return _make


@pytest.fixture
def sales_repository():
    repo = MagicMock(spec=SalesRepository)
    repo.fetch_sales.return_value = []
    repo.fetch_product_count.return_value = 0
    return repo


@pytest.fixture
def inventory_repository():
    repo = MagicMock(spec=InventoryRepository)
    repo.fetch_variants_needing_review.return_value = []
    repo.fetch_stock_movements.return_value = []
    return repo
