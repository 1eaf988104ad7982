"""
Movement Repository - Data Access Layer for stock movements

Reads the `movimentacoes` table and returns MovementRecord domain models.

Author: TM3
Date: 2026-02-11
"""
from typing import List, Optional

from stockcast.core.database import get_db_connection_dict_with_retry
from stockcast.domain.movement import MovementRecord, parse_movements


class MovementRepository:
    """Repository for movement history (read-only)"""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url

    def find_all(self, product_id: Optional[int] = None) -> List[MovementRecord]:
        """
        Find movements, optionally for a single product

        Rows with a missing timestamp or unknown type are excluded.

        Args:
            product_id: Restrict to one product

        Returns:
            Movements ordered by timestamp
        """
        conn = get_db_connection_dict_with_retry(self.database_url)
        cursor = conn.cursor()

        try:
            where_clause = "WHERE produto_id = %s" if product_id is not None else ""
            params = (product_id,) if product_id is not None else ()

            cursor.execute(f"""
                SELECT id, produto_id, tipo, quantidade, data_movimentacao
                FROM movimentacoes
                {where_clause}
                ORDER BY data_movimentacao, id
            """, params)

            return parse_movements(dict(row) for row in cursor.fetchall())

        finally:
            cursor.close()
            conn.close()
