"""
Unit tests for ProductRepository

These tests validate repository logic without requiring a database connection.

Author: TM3
Date: 2026-02-17
"""
from unittest.mock import MagicMock, patch

import pytest

from stockcast.domain.product import Product
from stockcast.repositories.product_repository import ProductRepository


def product_row(**overrides):
    row = {
        'id': 1,
        'codigo': '7891000100103',
        'nome': 'Caneta azul',
        'quantidade': 40,
        'quantidade_minima': 10,
        'fornecedor': 'Papelaria Central',
        'categoria': None,
        'localizacao': 'A1',
    }
    row.update(overrides)
    return row


class TestProductRepository:
    """Test ProductRepository methods"""

    @patch('stockcast.repositories.product_repository.get_db_connection_dict_with_retry')
    def test_find_by_id_returns_product(self, mock_get_conn):
        """Test find_by_id returns a Product domain model"""
        # Arrange: Mock database connection
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = product_row()

        # Act
        product = ProductRepository("postgresql://test").find_by_id(1)

        # Assert
        assert isinstance(product, Product)
        assert product.code == '7891000100103'
        assert product.min_quantity == 10
        assert product.supplier == 'Papelaria Central'

        # Verify database was called correctly
        mock_get_conn.assert_called_once_with("postgresql://test")
        mock_cursor.execute.assert_called_once()
        assert mock_cursor.execute.call_args[0][1] == (1,)
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    @patch('stockcast.repositories.product_repository.get_db_connection_dict_with_retry')
    def test_find_by_id_returns_none_when_not_found(self, mock_get_conn):
        """Test find_by_id returns None when product doesn't exist"""
        # Arrange
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = None

        # Act
        product = ProductRepository().find_by_id(999)

        # Assert
        assert product is None
        mock_conn.close.assert_called_once()

    @patch('stockcast.repositories.product_repository.get_db_connection_dict_with_retry')
    def test_find_all_skips_malformed_rows(self, mock_get_conn):
        """Test find_all returns valid products and drops rows that fail validation"""
        # Arrange
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchall.return_value = [
            product_row(),
            product_row(id=2, codigo=''),
            product_row(id=3, quantidade_minima=None, fornecedor=None),
        ]

        # Act
        products = ProductRepository().find_all()

        # Assert
        assert [p.id for p in products] == [1, 3]
        assert products[1].min_quantity is None

    @patch('stockcast.repositories.product_repository.get_db_connection_dict_with_retry')
    def test_connection_closed_on_query_error(self, mock_get_conn):
        """Test cursor and connection are closed even when the query fails"""
        # Arrange
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.execute.side_effect = RuntimeError("relation does not exist")

        # Act / Assert
        with pytest.raises(RuntimeError):
            ProductRepository().find_all()

        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()


# Columns of the produtos table as created by the inventory schema
PRODUTOS_COLUMNS = {
    'id', 'codigo', 'nome', 'descricao', 'quantidade', 'quantidade_minima',
    'localizacao', 'fornecedor', 'notas', 'data_criacao', 'data_atualizacao',
}


def selected_columns(sql):
    select_list = sql.split('SELECT', 1)[1].split('FROM', 1)[0]
    return [column.strip() for column in select_list.split(',')]


class TestProductQueries:
    """Test the SQL issued against the produtos table"""

    @pytest.mark.parametrize('method, args', [
        ('find_by_id', (1,)),
        ('find_all', ()),
    ])
    @patch('stockcast.repositories.product_repository.get_db_connection_dict_with_retry')
    def test_selects_only_existing_columns(self, mock_get_conn, method, args):
        """Test every selected column exists in produtos; category is a NULL literal"""
        # Arrange
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = product_row()
        mock_cursor.fetchall.return_value = [product_row()]

        # Act
        getattr(ProductRepository(), method)(*args)

        # Assert
        columns = selected_columns(mock_cursor.execute.call_args[0][0])
        assert 'NULL AS categoria' in columns
        assert set(columns) - {'NULL AS categoria'} <= PRODUTOS_COLUMNS

    @patch('stockcast.repositories.product_repository.get_db_connection_dict_with_retry')
    def test_category_is_none_from_database(self, mock_get_conn):
        """Test products read from the table carry no category"""
        # Arrange
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        mock_cursor.fetchone.return_value = product_row()

        # Act
        product = ProductRepository().find_by_id(1)

        # Assert
        assert product.category is None
