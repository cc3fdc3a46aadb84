"""
Sales Repository - Data Access Layer for Sales

Fetches historical sale lines (with product name and base cost) and the
product count used by the analytics services.
"""
from datetime import datetime
from typing import List

import psycopg2

from pos_insights.domain.sales import SaleRecord
from pos_insights.core.database import get_db_connection_dict, DataAccessError


class SalesRepository:
    """
    Repository for sale history

    All SQL queries for sales are centralized here.
    Returns SaleRecord domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_sale(row: dict) -> SaleRecord:
        return SaleRecord(
            product_id=str(row['product_id']),
            variant_id=str(row['variant_id']) if row.get('variant_id') is not None else None,
            product_name=row.get('product_name') or '',
            quantity=int(row['quantity']),
            total=float(row['total'] or 0),
            created_at=row['created_at'],
            base_cost=float(row.get('base_cost') or 0),
        )

    def fetch_sales(self, since: datetime) -> List[SaleRecord]:
        """
        Fetch every sale recorded at or after `since`

        Args:
            since: Inclusive lower bound on sales.created_at

        Returns:
            List of SaleRecord ordered by created_at ascending

        Raises:
            DataAccessError: connection or query failure
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    s.product_id, s.variant_id, s.quantity, s.total, s.created_at,
                    p.name AS product_name,
                    p.base_cost
                FROM sales s
                JOIN products p ON p.id = s.product_id
                WHERE s.created_at >= %s
                ORDER BY s.created_at ASC
            """, (since,))

            return [self._map_row_to_sale(row) for row in cursor.fetchall()]

        except psycopg2.Error as e:
            raise DataAccessError(f"Error fetching sales since {since}: {e}") from e
        finally:
            cursor.close()
            conn.close()

    def fetch_product_count(self) -> int:
        """
        Count catalog products (archived included)

        Returns:
            Number of rows in products
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT COUNT(*) AS total FROM products")
            row = cursor.fetchone()
            return int(row['total']) if row else 0

        except psycopg2.Error as e:
            raise DataAccessError(f"Error counting products: {e}") from e
        finally:
            cursor.close()
            conn.close()
