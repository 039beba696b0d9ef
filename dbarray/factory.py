"""
Factory for dbarray connectors.
"""

import logging
from typing import Dict, Type

from .base import DBArray
from .connectors import MSSQLArray, MySQLArray, OracleArray, PostgreSQLArray, SQLiteArray
from .exceptions import DatabaseTypeError

logger = logging.getLogger(__name__)

CONNECTORS: Dict[str, Type[DBArray]] = {
    "sqlite": SQLiteArray,
    "oracle": OracleArray,
    "postgres": PostgreSQLArray,
    "postgresql": PostgreSQLArray,
    "mysql": MySQLArray,
    "mariadb": MySQLArray,
    "percona": MySQLArray,
    "mssql": MSSQLArray,
}


def create_db(db_type: str, **kwargs) -> DBArray:
    """
    Create a connector for ``db_type``.

    Raises:
        DatabaseTypeError: If the database type is not supported
    """
    key = (db_type or "").lower()
    connector = CONNECTORS.get(key)
    if connector is None:
        raise DatabaseTypeError(
            f"Unsupported database type: {db_type}. "
            f"Supported types: {', '.join(sorted(CONNECTORS))}"
        )
    if key in ("mariadb", "percona"):
        kwargs.setdefault("db_variant", key)
    logger.debug(f"Creating {connector.__name__} for {key}")
    return connector(**kwargs)
