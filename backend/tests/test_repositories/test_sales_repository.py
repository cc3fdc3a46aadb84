"""
Unit tests for SalesRepository

These tests validate repository logic without requiring a database connection.
"""
import pytest
from unittest.mock import MagicMock, patch
from datetime import datetime
from decimal import Decimal

import psycopg2

from pos_insights.core.database import DataAccessError
from pos_insights.domain.sales import SaleRecord
from pos_insights.repositories.sales_repository import SalesRepository


def _mock_connection(mock_get_conn):
    mock_conn = MagicMock()
    mock_cursor = MagicMock()
    mock_get_conn.return_value = mock_conn
    mock_conn.cursor.return_value = mock_cursor
    return mock_conn, mock_cursor


class TestSalesRepository:
    """Test SalesRepository methods"""

    @patch('pos_insights.repositories.sales_repository.get_db_connection_dict')
    def test_fetch_sales_returns_sale_records(self, mock_get_conn):
        """Test fetch_sales maps rows to SaleRecord domain models"""
        # Arrange: Mock database connection
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [
            {
                'product_id': 7,
                'variant_id': 70,
                'quantity': 3,
                'total': Decimal('45.00'),
                'created_at': datetime(2025, 6, 1, 10, 30),
                'product_name': 'Cotton Tee',
                'base_cost': Decimal('6.50'),
            },
            {
                'product_id': 8,
                'variant_id': None,
                'quantity': 1,
                'total': Decimal('12.00'),
                'created_at': datetime(2025, 6, 2, 9, 0),
                'product_name': 'Mug',
                'base_cost': None,
            },
        ]
        since = datetime(2025, 5, 1)

        # Act: Call repository method
        sales = SalesRepository().fetch_sales(since)

        # Assert: Verify result
        assert len(sales) == 2
        assert isinstance(sales[0], SaleRecord)
        assert sales[0].product_id == '7'
        assert sales[0].variant_id == '70'
        assert sales[0].total == 45.0
        assert sales[0].cost == pytest.approx(19.5)
        assert sales[1].variant_id is None
        assert sales[1].base_cost == 0.0

        # Verify database was called correctly
        args = mock_cursor.execute.call_args[0]
        assert args[1] == (since,)
        assert 'ORDER BY s.created_at ASC' in args[0]
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch('pos_insights.repositories.sales_repository.get_db_connection_dict')
    def test_fetch_sales_wraps_database_errors(self, mock_get_conn):
        """Test psycopg2 errors surface as DataAccessError and the connection is closed"""
        # Arrange
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg2.Error("relation \"sales\" does not exist")

        # Act / Assert
        with pytest.raises(DataAccessError):
            SalesRepository().fetch_sales(datetime(2025, 5, 1))

        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch('pos_insights.repositories.sales_repository.get_db_connection_dict')
    def test_fetch_sales_propagates_connection_failure(self, mock_get_conn):
        """Test a missing DATABASE_URL is not swallowed"""
        mock_get_conn.side_effect = DataAccessError("DATABASE_URL not configured")

        with pytest.raises(DataAccessError, match="DATABASE_URL"):
            SalesRepository().fetch_sales(datetime(2025, 5, 1))

    @patch('pos_insights.repositories.sales_repository.get_db_connection_dict')
    def test_fetch_product_count(self, mock_get_conn):
        """Test fetch_product_count returns the COUNT(*) value"""
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {'total': 42}

        count = SalesRepository().fetch_product_count()

        assert count == 42
        mock_conn.close.assert_called_once()
