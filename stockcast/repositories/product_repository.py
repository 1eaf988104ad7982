"""
Product Repository - Data Access Layer for Products

Reads the `produtos` table and returns Product domain models.

Author: TM3
Date: 2026-02-11
"""
from typing import List, Optional

from stockcast.core.database import get_db_connection_dict_with_retry
from stockcast.domain.product import Product, parse_product, parse_products

# produtos has no category column; the field is kept NULL for callers
# that attach categories from elsewhere
_PRODUCT_COLUMNS = """
    id, codigo, nome, quantidade, quantidade_minima,
    fornecedor, NULL AS categoria, localizacao
"""


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """
        Find product by ID

        Args:
            product_id: Internal product ID

        Returns:
            Product or None if not found
        """
        conn = get_db_connection_dict_with_retry(self.database_url)
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {_PRODUCT_COLUMNS}
                FROM produtos
                WHERE id = %s
            """, (product_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return parse_product(dict(row))

        finally:
            cursor.close()
            conn.close()

    def find_all(self) -> List[Product]:
        """
        Find all products

        Malformed rows are skipped (and logged) rather than failing the read.

        Returns:
            List of products ordered by id
        """
        conn = get_db_connection_dict_with_retry(self.database_url)
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {_PRODUCT_COLUMNS}
                FROM produtos
                ORDER BY id
            """)

            return parse_products(dict(row) for row in cursor.fetchall())

        finally:
            cursor.close()
            conn.close()
