"""
SQL text builders.
"""

from typing import List, Optional, Sequence

from ..binds import placeholder
from ..exceptions import SanitizationError, UsageError
from .sanitization import sanitize_column_name, sanitize_table_name


def sql_sort(sql: str, sort: Optional[int] = None, nulls: Optional[str] = None) -> str:
    """
    Append an ORDER BY clause on a column position.

    The sign of ``sort`` picks the direction; zero or None leaves the SQL
    unchanged::

        sql_sort("SELECT 1,'Z' FROM DUAL", -2)
        # "SELECT 1,'Z' FROM DUAL ORDER BY 2 DESC"

    The SQL must not already have an ORDER BY clause.

    Args:
        sql: SQL text without an ORDER BY clause
        sort: Signed 1-based column position
        nulls: Optional "FIRST" or "LAST" null ordering

    Returns:
        The SQL text with the ORDER BY clause appended
    """
    if sort is None:
        return sql
    sort = int(sort)
    if not sort:
        return sql

    direction = "ASC" if sort > 0 else "DESC"
    clause = f"ORDER BY {abs(sort)} {direction}"
    if nulls:
        if nulls.upper() not in ("FIRST", "LAST"):
            raise SanitizationError(f"Invalid null ordering: {nulls}. Must be 'FIRST' or 'LAST'.")
        clause += f" NULLS {nulls.upper()}"
    return f"{sql} {clause}"


def insert_sql(table: str, columns: Sequence[str], paramstyle: str = "qmark",
               quote_char: str = "") -> str:
    """
    Build a positional INSERT statement for ``table``.

    Raises:
        UsageError: If the table name or the column list is missing
    """
    if not table:
        raise UsageError("insert_sql requires a table name")
    if not columns:
        raise UsageError("insert_sql requires at least one column")

    safe_table = sanitize_table_name(table, quote_char)
    safe_columns: List[str] = [sanitize_column_name(c, quote_char) for c in columns]
    markers = [placeholder(paramstyle, i) for i in range(1, len(columns) + 1)]
    return f"INSERT INTO {safe_table} ({', '.join(safe_columns)}) VALUES ({', '.join(markers)})"
