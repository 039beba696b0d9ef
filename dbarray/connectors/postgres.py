"""
PostgreSQL database connector for dbarray.
"""

import logging
from typing import Any

from ..base import DBArray
from ..exceptions import ConfigurationError, MissingDependencyError

logger = logging.getLogger(__name__)


class PostgreSQLArray(DBArray):
    """
    Connector for PostgreSQL databases using psycopg2.

    Named binds written as ``:name`` are rewritten to ``%(name)s``. A failed
    row aborts the surrounding PostgreSQL transaction, so the rows after it
    in an emulated bulk operation fail too unless autocommit is on.
    """

    paramstyle = "pyformat"
    quote_char = '"'
    backend = "PostgreSQL"

    def __init__(self, **kwargs):
        """
        Initialize the PostgreSQL connector.

        Args:
            host (str): Database host
            port (int): Database port
            dbname (str): Database name (also accepts 'db')
            user (str): Username
            password (str): Password (also accepts 'passwd')
            sslmode (str): SSL mode
            connect_timeout (int): Connection timeout in seconds
            application_name (str): Application name
            autocommit (bool): Whether to autocommit transactions
            dbh: An already open psycopg2 connection
            **kwargs: DBArray options
        """
        dbh = kwargs.pop("dbh", None)
        super().__init__(**kwargs)

        self.conf["host"] = kwargs.get("host", "localhost")
        self.conf["port"] = kwargs.get("port", 5432)
        self.conf["dbname"] = kwargs.get("dbname", kwargs.get("db", None))
        self.conf["user"] = kwargs.get("user", None)
        self.conf["password"] = kwargs.get("password", kwargs.get("passwd", None))
        self.conf["sslmode"] = kwargs.get("sslmode", "prefer")
        self.conf["connect_timeout"] = kwargs.get("connect_timeout", 30)
        self.conf["application_name"] = kwargs.get("application_name", "dbarray")

        try:
            import psycopg2
            self.psycopg2 = psycopg2
        except ImportError:
            raise MissingDependencyError("PostgreSQL connections", "psycopg2-binary") from None

        if dbh is not None:
            self.dbh = dbh
            return

        for param in ("dbname", "user", "password"):
            if not self.conf[param]:
                raise ConfigurationError(f"Required parameter '{param}' is missing for PostgreSQL connection")

        self.connect()

    def _open_connection(self) -> Any:
        conn_params = {
            "host": self.conf["host"],
            "port": self.conf["port"],
            "dbname": self.conf["dbname"],
            "user": self.conf["user"],
            "password": self.conf["password"],
            "sslmode": self.conf["sslmode"],
            "connect_timeout": self.conf["connect_timeout"],
            "application_name": self.conf["application_name"],
        }
        conn_params = {k: v for k, v in conn_params.items() if v is not None}
        conn = self.psycopg2.connect(**conn_params)
        logger.debug(f"Connected to PostgreSQL database: {self.conf['dbname']}")
        return conn
