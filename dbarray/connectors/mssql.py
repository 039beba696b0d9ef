"""
Microsoft SQL Server connector for dbarray.
"""

import logging
from typing import Any

from ..base import DBArray
from ..exceptions import ConfigurationError, MissingDependencyError

logger = logging.getLogger(__name__)


class MSSQLArray(DBArray):
    """
    Connector for Microsoft SQL Server using pyodbc.

    Named binds written as ``:name`` are rewritten to ``?`` placeholders.
    """

    paramstyle = "qmark"
    quote_char = "["
    backend = "MSSQL"

    def __init__(self, **kwargs):
        """
        Initialize the MSSQL connector.

        Args:
            server (str): SQL Server instance name or address (also accepts 'host')
            database (str): Database name (also accepts 'db')
            user (str): Username (also accepts 'uid', 'username')
            password (str): Password (also accepts 'pwd', 'passwd')
            driver (str): ODBC driver name
            port (int): Port number
            trusted_connection (bool): Use Windows authentication
            encrypt (bool): Use encryption for connection
            login_timeout (int): Login timeout in seconds
            app_name (str): Application name
            autocommit (bool): Whether to autocommit transactions
            dbh: An already open pyodbc connection
            **kwargs: DBArray options
        """
        dbh = kwargs.pop("dbh", None)
        super().__init__(**kwargs)

        self.conf["server"] = kwargs.get("server", kwargs.get("host", "localhost"))
        self.conf["database"] = kwargs.get("database", kwargs.get("db", None))
        self.conf["user"] = kwargs.get("user", kwargs.get("uid", kwargs.get("username", None)))
        self.conf["password"] = kwargs.get("password", kwargs.get("pwd", kwargs.get("passwd", None)))
        self.conf["driver"] = kwargs.get("driver", "{ODBC Driver 18 for SQL Server}")
        self.conf["port"] = kwargs.get("port", 1433)
        self.conf["trusted_connection"] = kwargs.get("trusted_connection", False)
        self.conf["encrypt"] = kwargs.get("encrypt", True)
        self.conf["login_timeout"] = kwargs.get("login_timeout", 15)
        self.conf["app_name"] = kwargs.get("app_name", "dbarray")

        try:
            import pyodbc
            self.pyodbc = pyodbc
        except ImportError:
            raise MissingDependencyError("MSSQL connections", "pyodbc") from None

        if dbh is not None:
            self.dbh = dbh
            return

        required_params = ["database"] if self.conf["trusted_connection"] else ["database", "user", "password"]
        for param in required_params:
            if not self.conf[param]:
                raise ConfigurationError(f"Required parameter '{param}' is missing for MSSQL connection")

        self.connect()

    def _open_connection(self) -> Any:
        conn_str_parts = [
            f"DRIVER={self.conf['driver']}",
            f"SERVER={self.conf['server']},{self.conf['port']}",
            f"DATABASE={self.conf['database']}",
        ]
        if self.conf["trusted_connection"]:
            conn_str_parts.append("Trusted_Connection=yes")
        else:
            conn_str_parts.append(f"UID={self.conf['user']}")
            conn_str_parts.append(f"PWD={self.conf['password']}")
        conn_str_parts.append(f"APP={self.conf['app_name']}")
        conn_str_parts.append("Encrypt=yes" if self.conf["encrypt"] else "Encrypt=no")

        conn = self.pyodbc.connect(";".join(conn_str_parts), timeout=self.conf["login_timeout"])
        logger.debug(f"Connected to MSSQL database: {self.conf['database']} at {self.conf['server']}")
        return conn
