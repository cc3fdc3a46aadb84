"""
Inventory Domain Models

Variants under review, their stock movements and the reorder alerts
produced for them.
"""
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime


class MovementType(str, Enum):
    RESTOCK = "RESTOCK"
    SALE = "SALE"
    ADJUSTMENT = "ADJUSTMENT"
    SHRINKAGE = "SHRINKAGE"
    RETURN = "RETURN"


class ReorderPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        """Severity rank, CRITICAL highest"""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    ReorderPriority.LOW: 1,
    ReorderPriority.MEDIUM: 2,
    ReorderPriority.HIGH: 3,
    ReorderPriority.CRITICAL: 4,
}


class StockMovement(BaseModel):
    """
    A single inventory change for a variant

    quantity is signed as stored (sales are usually negative); consumers
    that measure demand use its absolute value.
    """

    variant_id: str
    type: MovementType
    quantity: int
    created_at: datetime

    model_config = ConfigDict(frozen=True, from_attributes=True)


class PreferredSupplier(BaseModel):
    """Preferred supplier link of a product (supplier_products.is_preferred)"""

    supplier_name: str
    cost: float = Field(..., ge=0)
    lead_time: Optional[int] = Field(None, description="Delivery days; None when unknown", ge=0)

    model_config = ConfigDict(frozen=True)


class VariantSnapshot(BaseModel):
    """
    Stock position of one product variant at analysis time

    Fields:
        variant_id: Variant ID
        product_id: Parent product ID
        product_name: Parent product name
        color: Variant color (optional)
        size: Variant size (optional)
        stock: Units on hand (can be negative for back-orders)
        reorder_point: Threshold below which resupply should be triggered
        preferred_supplier: Preferred supplier, if the product has one
    """

    variant_id: str
    product_id: str
    product_name: str
    color: Optional[str] = None
    size: Optional[str] = None
    stock: int = 0
    reorder_point: int = Field(10, ge=0)
    preferred_supplier: Optional[PreferredSupplier] = None

    model_config = ConfigDict(frozen=True)

    @property
    def variant_name(self) -> str:
        """Human-readable name: 'Red / M', 'Red', or 'Default'"""
        parts = [p for p in (self.color, self.size) if p]
        return " / ".join(parts) if parts else "Default"


class SupplierInfo(BaseModel):
    supplier_name: str
    cost: float
    lead_time: int


class ReorderAlert(BaseModel):
    product_id: str
    variant_id: str
    product_name: str
    variant_name: str
    current_stock: int
    reorder_point: int
    suggested_order_qty: int
    days_to_depletion: int
    priority: ReorderPriority
    last_sold_date: Optional[datetime] = None
    avg_daily_sales: float
    supplier_info: Optional[SupplierInfo] = None


class ReorderSummary(BaseModel):
    total_alerts: int = 0
    critical_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0


class ReorderAnalysis(BaseModel):
    alerts: List[ReorderAlert]
    summary: ReorderSummary
