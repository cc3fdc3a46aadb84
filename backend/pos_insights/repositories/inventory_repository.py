"""
Inventory Repository - Data Access Layer for variants and stock movements

Supplies the reorder analysis with the stock position of every variant of a
non-archived product (including its preferred supplier) and the movement
history of a single variant.
"""
from datetime import datetime
from typing import List, Optional

import psycopg2

from pos_insights.domain.inventory import (
    MovementType,
    PreferredSupplier,
    StockMovement,
    VariantSnapshot,
)
from pos_insights.core.database import get_db_connection_dict, DataAccessError


class InventoryRepository:
    """
    Repository for inventory data access

    Returns VariantSnapshot / StockMovement domain models.
    """

    @staticmethod
    def _map_row_to_variant(row: dict) -> VariantSnapshot:
        """
        Map a variant row (LEFT JOINed with its preferred supplier) to a snapshot.

        supplier_name is NULL when the product has no preferred supplier.
        """
        supplier = None
        if row.get('supplier_name'):
            supplier = PreferredSupplier(
                supplier_name=row['supplier_name'],
                cost=float(row.get('supplier_cost') or 0),
                lead_time=row.get('lead_time'),
            )

        return VariantSnapshot(
            variant_id=str(row['variant_id']),
            product_id=str(row['product_id']),
            product_name=row['product_name'],
            color=row.get('color'),
            size=row.get('size'),
            stock=int(row['stock'] or 0),
            reorder_point=int(row['reorder_point'] or 0),
            preferred_supplier=supplier,
        )

    @staticmethod
    def _map_row_to_movement(row: dict) -> StockMovement:
        return StockMovement(
            variant_id=str(row['variant_id']),
            type=MovementType(row['type']),
            quantity=int(row['quantity']),
            created_at=row['created_at'],
        )

    def fetch_variants_needing_review(self) -> List[VariantSnapshot]:
        """
        Fetch all variants of non-archived products

        Each product contributes at most one preferred supplier
        (DISTINCT ON keeps the most recently linked one).

        Returns:
            List of VariantSnapshot ordered by product name, then variant id
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    v.id AS variant_id,
                    v.product_id,
                    p.name AS product_name,
                    v.color,
                    v.size,
                    v.stock,
                    v.reorder_point,
                    ps.supplier_name,
                    ps.cost AS supplier_cost,
                    ps.lead_time
                FROM product_variants v
                JOIN products p ON p.id = v.product_id
                LEFT JOIN (
                    SELECT DISTINCT ON (sp.product_id)
                        sp.product_id,
                        s.name AS supplier_name,
                        sp.cost,
                        sp.lead_time
                    FROM supplier_products sp
                    JOIN suppliers s ON s.id = sp.supplier_id
                    WHERE sp.is_preferred = TRUE
                    ORDER BY sp.product_id, sp.created_at DESC
                ) ps ON ps.product_id = p.id
                WHERE p.is_archived = FALSE
                ORDER BY p.name, v.id
            """)

            return [self._map_row_to_variant(row) for row in cursor.fetchall()]

        except psycopg2.Error as e:
            raise DataAccessError(f"Error fetching variants: {e}") from e
        finally:
            cursor.close()
            conn.close()

    def fetch_stock_movements(
        self,
        variant_id: str,
        since: datetime,
        movement_type: Optional[MovementType] = MovementType.SALE,
    ) -> List[StockMovement]:
        """
        Fetch movements of one variant since a date

        Args:
            variant_id: Variant to inspect
            since: Inclusive lower bound on created_at
            movement_type: Only this type (None for all types)

        Returns:
            List of StockMovement, most recent first
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        conditions = ["variant_id = %s", "created_at >= %s"]
        params: list = [variant_id, since]
        if movement_type is not None:
            conditions.append("type = %s")
            params.append(movement_type.value)

        try:
            cursor.execute(f"""
                SELECT variant_id, type, quantity, created_at
                FROM stock_movements
                WHERE {" AND ".join(conditions)}
                ORDER BY created_at DESC
            """, params)

            return [self._map_row_to_movement(row) for row in cursor.fetchall()]

        except psycopg2.Error as e:
            raise DataAccessError(f"Error fetching movements for variant {variant_id}: {e}") from e
        finally:
            cursor.close()
            conn.close()
