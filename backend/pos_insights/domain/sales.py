"""
Sales Domain Models

Historical sale facts as supplied by the storage layer, and the daily
revenue series derived from them.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
import datetime as dt


class SaleRecord(BaseModel):
    """
    One completed sale line - an immutable historical fact

    Fields:
        product_id: Product sold
        variant_id: Variant sold (None for products without variants)
        product_name: Product name at query time
        quantity: Units sold
        total: Revenue of the line (after discounts)
        created_at: When the sale was recorded (stored calendar, no tz normalization)
        base_cost: Unit cost of the product (product.base_cost)
    """

    product_id: str = Field(..., description="Product ID")
    variant_id: Optional[str] = Field(None, description="Variant ID")
    product_name: str = Field("", description="Product name")
    quantity: int = Field(..., description="Units sold")
    total: float = Field(..., description="Line revenue")
    created_at: datetime = Field(..., description="Sale timestamp")
    base_cost: float = Field(0.0, description="Unit cost of the product", ge=0)

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @property
    def cost(self) -> float:
        """Cost of goods for this line"""
        return self.quantity * self.base_cost


class DailyRevenuePoint(BaseModel):
    """Revenue of one calendar day that had at least one sale"""

    date: dt.date
    revenue: float

    model_config = ConfigDict(frozen=True)
