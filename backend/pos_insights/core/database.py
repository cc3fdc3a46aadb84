"""
PostgreSQL access for the analytics engine

The engine only reads. Every fetch opens one psycopg2 connection, runs its
query and closes it. Failures are not retried; they surface as
DataAccessError to the caller.
"""
import logging
import time

import psycopg2
from psycopg2.extras import RealDictCursor

from .config import settings

logger = logging.getLogger(__name__)

CONNECTION_TIMEOUT = 10  # seconds


class DataAccessError(Exception):
    """Raised when historical records cannot be fetched from storage"""


def get_db_connection_dict():
    """
    Get a database connection with RealDictCursor (returns dictionaries)

    Returns:
        psycopg2 connection with RealDictCursor

    Raises:
        DataAccessError: DATABASE_URL missing or the server refused the connection

    Example:
        conn = get_db_connection_dict()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM sales")
        results = cursor.fetchall()  # Returns list of dicts
        cursor.close()
        conn.close()
    """
    database_url = settings.DATABASE_URL
    if not database_url:
        raise DataAccessError("DATABASE_URL not configured")

    try:
        return psycopg2.connect(
            database_url,
            cursor_factory=RealDictCursor,
            connect_timeout=CONNECTION_TIMEOUT,
        )
    except psycopg2.OperationalError as e:
        logger.error(f"Database connection failed: {e}")
        raise DataAccessError(str(e)) from e


def check_database_connection() -> dict:
    """
    Ping the database for the /health endpoint

    Returns:
        dict with status ('connected' / 'disconnected'), latency_ms and error
    """
    start = time.time()
    try:
        conn = get_db_connection_dict()
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        finally:
            cursor.close()
            conn.close()
    except (DataAccessError, psycopg2.Error) as e:
        return {"status": "disconnected", "latency_ms": None, "error": str(e)}

    return {
        "status": "connected",
        "latency_ms": round((time.time() - start) * 1000, 2),
        "error": None,
    }
