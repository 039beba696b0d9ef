"""
Utility modules for dbarray.
"""

from .sanitization import (
    sanitize_identifier,
    sanitize_table_name,
    sanitize_column_name,
)
from .sql import sql_sort, insert_sql
from .logging import configure_logger, get_logger

__all__ = [
    'sanitize_identifier',
    'sanitize_table_name',
    'sanitize_column_name',
    'sql_sort',
    'insert_sql',
    'configure_logger',
    'get_logger'
]
