"""
PostgreSQL connections for the inventory data source

Only the read side lives here: the engine never writes to the store.
Connections are opened per fetch and closed by the caller.

Author: TM3
Updated: 2026-02-12
"""
import logging
import time
from typing import Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from stockcast.core.config import settings
from stockcast.core.exceptions import StockcastError

logger = logging.getLogger(__name__)


def _resolve_database_url(database_url: Optional[str]) -> str:
    url = database_url or settings.DATABASE_URL
    if not url:
        raise StockcastError("DATABASE_URL not configured")
    return url


def get_db_connection_dict(database_url: Optional[str] = None):
    """
    Get a database connection with RealDictCursor (returns dictionaries)

    Returns:
        psycopg2 connection with RealDictCursor
    """
    return psycopg2.connect(_resolve_database_url(database_url), cursor_factory=RealDictCursor)


def get_db_connection_dict_with_retry(
    database_url: Optional[str] = None,
    max_retries: Optional[int] = None,
    retry_delay: Optional[float] = None
):
    """
    Get a psycopg2 connection with RealDictCursor and automatic retry

    Retries OperationalError (dropped SSL sessions, cold poolers) with
    exponential backoff. Any other error fails immediately.

    Args:
        database_url: Overrides settings.DATABASE_URL
        max_retries: Maximum number of connection attempts (default: settings.DB_CONNECT_RETRIES)
        retry_delay: Initial delay between retries in seconds (default: settings.DB_RETRY_DELAY)

    Returns:
        psycopg2 connection with RealDictCursor

    Raises:
        psycopg2.OperationalError: If all retry attempts fail

    Example:
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM produtos")
        rows = cursor.fetchall()  # list of dicts
        cursor.close()
        conn.close()
    """
    url = _resolve_database_url(database_url)
    max_retries = max_retries or settings.DB_CONNECT_RETRIES
    retry_delay = settings.DB_RETRY_DELAY if retry_delay is None else retry_delay

    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection (dict) attempt {attempt}/{max_retries}")
            conn = psycopg2.connect(url, cursor_factory=RealDictCursor)

            # Test connection with a simple query
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()

            logger.debug(f"Database connection (dict) successful on attempt {attempt}")
            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            error_msg = str(e)

            if "SSL connection has been closed unexpectedly" in error_msg:
                logger.warning(f"SSL connection error on attempt {attempt}/{max_retries}: {error_msg}")
            else:
                logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {error_msg}")

            if attempt < max_retries:
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")
                raise

    raise last_error if last_error else StockcastError("Connection failed after all retries")
