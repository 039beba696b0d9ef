"""
Database connectors for dbarray.

Driver packages are imported when a connector is instantiated, so only the
drivers actually used need to be installed.
"""

from .sqlite import SQLiteArray
from .oracle import OracleArray
from .postgres import PostgreSQLArray
from .mysql import MySQLArray
from .mssql import MSSQLArray

__all__ = [
    'SQLiteArray',
    'OracleArray',
    'PostgreSQLArray',
    'MySQLArray',
    'MSSQLArray',
]
