"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from the analytics services.
"""
from pos_insights.repositories.sales_repository import SalesRepository
from pos_insights.repositories.inventory_repository import InventoryRepository

__all__ = [
    'SalesRepository',
    'InventoryRepository',
]
