"""
dbarray: shape relational query results into plain Python structures.

Runs SQL through any DB-API 2.0 driver and returns flat lists, dicts,
lists of rows or lists of records, optionally headed by the column names,
plus bulk insert/update helpers and CSV/XML/spreadsheet export.

Supported databases:
- SQLite
- Oracle
- PostgreSQL
- MySQL/MariaDB/Percona
- Microsoft SQL Server
- any other DB-API 2.0 connection passed as ``dbh``

License: GPLv2
"""

from .factory import create_db
from .base import DBArray
from .binds import BindCell
from .bulk import BulkResult, RowFailure
from .records import TaggedRecord
from .statement import Statement
from .transaction import TransactionContext
from .exceptions import (
    DBArrayError,
    ConnectionError,
    DatabaseError,
    PrepareError,
    ExecuteError,
    BulkPartialFailure,
    ConfigurationError,
    MissingDependencyError,
    DatabaseTypeError,
    UsageError,
    FeatureNotSupportedError,
    SanitizationError,
    TransactionError,
)
from .export import (
    csv_array_array_name,
    csv_cursor,
    xml_array_hash_name,
    xls_array_array_name,
    SpreadsheetWriter,
)

__version__ = "1.0.0"

from .connectors.sqlite import SQLiteArray
from .connectors.oracle import OracleArray
from .connectors.postgres import PostgreSQLArray
from .connectors.mysql import MySQLArray
from .connectors.mssql import MSSQLArray


def connect(db_type, **kwargs):
    """
    Create a new connected pipeline.

    Args:
        db_type (str): Type of database to connect to. Options are:
                      'sqlite', 'oracle', 'postgres', 'mysql', 'mariadb',
                      'percona', 'mssql'
        **kwargs: Connection parameters specific to the database type

    Returns:
        DBArray: A connected pipeline instance

    Raises:
        DatabaseTypeError: If the database type is not supported
        ConfigurationError: If the configuration is invalid
    """
    return create_db(db_type, **kwargs)
