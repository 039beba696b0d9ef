"""
SQLite connector for dbarray.
"""

import logging
import os
import sqlite3
from typing import Any

from ..base import DBArray
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SQLiteArray(DBArray):
    """
    Connector for SQLite databases.
    """

    paramstyle = sqlite3.paramstyle
    quote_char = '"'
    backend = "SQLite"

    def __init__(self, **kwargs):
        """
        Initialize the SQLite connector.

        Args:
            database (str): Path to the SQLite database file, or ":memory:"
            timeout (float): Timeout for acquiring a lock
            detect_types (int): How to detect types (sqlite3 constant)
            check_same_thread (bool): Only allow use from the creating thread
            uri (bool): Treat the database parameter as a URI
            foreign_keys (bool): Enable foreign key enforcement
            autocommit (bool): Run without an implicit transaction
            dbh: An already open sqlite3 connection
            **kwargs: DBArray options
        """
        dbh = kwargs.pop("dbh", None)
        super().__init__(**kwargs)

        if dbh is None and 'database' not in kwargs:
            raise ConfigurationError("Required parameter 'database' is missing")

        self.conf['database'] = kwargs.get('database')
        self.conf['timeout'] = kwargs.get('timeout', 5.0)
        self.conf['detect_types'] = kwargs.get('detect_types', 0)
        self.conf['check_same_thread'] = kwargs.get('check_same_thread', True)
        self.conf['uri'] = kwargs.get('uri', False)
        self.conf['foreign_keys'] = kwargs.get('foreign_keys', True)

        if dbh is not None:
            self.dbh = dbh
        else:
            self.connect()

    def _open_connection(self) -> Any:
        database = self.conf['database']
        if database != ":memory:" and not self.conf['uri']:
            db_dir = os.path.dirname(database)
            if db_dir and not os.path.exists(db_dir):
                os.makedirs(db_dir)

        conn = sqlite3.connect(
            database=database,
            timeout=self.conf['timeout'],
            detect_types=self.conf['detect_types'],
            check_same_thread=self.conf['check_same_thread'],
            uri=self.conf['uri'],
        )
        if self.conf['foreign_keys']:
            conn.execute("PRAGMA foreign_keys = ON")
        logger.debug(f"Opened SQLite database: {database}")
        return conn

    @property
    def autocommit(self) -> bool:
        return self._require_dbh().isolation_level is None

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        dbh = self._require_dbh()
        if value:
            if dbh.in_transaction:
                dbh.commit()
            dbh.isolation_level = None
        else:
            dbh.isolation_level = ""
