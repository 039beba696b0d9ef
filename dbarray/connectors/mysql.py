"""
MySQL/MariaDB/Percona connector for dbarray.
"""

import logging
from typing import Any

from ..base import DBArray
from ..exceptions import ConfigurationError, MissingDependencyError

logger = logging.getLogger(__name__)


class MySQLArray(DBArray):
    """
    Connector for MySQL, MariaDB and Percona databases.

    Uses mysql-connector-python, or the mariadb package for the "mariadb"
    variant when it is installed.
    """

    paramstyle = "pyformat"
    quote_char = "`"
    backend = "MySQL"

    def __init__(self, **kwargs):
        """
        Initialize the MySQL connector.

        Args:
            host (str): Database host
            port (int): Database port
            db (str): Database name
            user (str): Username
            passwd (str): Password (also accepts 'password')
            db_variant (str): 'mysql', 'mariadb', or 'percona'
            charset (str): Character set
            connect_timeout (int): Connection timeout in seconds
            autocommit (bool): Whether to autocommit transactions
            dbh: An already open connection
            **kwargs: DBArray options
        """
        dbh = kwargs.pop("dbh", None)
        super().__init__(**kwargs)

        self.conf["host"] = kwargs.get("host", "localhost")
        self.conf["port"] = kwargs.get("port", 3306)
        self.conf["db"] = kwargs.get("db", kwargs.get("database", None))
        self.conf["user"] = kwargs.get("user", None)
        self.conf["passwd"] = kwargs.get("passwd", kwargs.get("password", None))
        self.conf["charset"] = kwargs.get("charset", "utf8mb4")
        self.conf["db_variant"] = kwargs.get("db_variant", "mysql").lower()
        self.conf["connect_timeout"] = kwargs.get("connect_timeout", 10)

        self._import_db_module()

        if dbh is not None:
            self.dbh = dbh
            return

        for param in ("db", "user", "passwd"):
            if self.conf[param] is None:
                raise ConfigurationError(f"Required parameter '{param}' is missing")

        self.connect()

    def _import_db_module(self) -> None:
        """Import the driver module for the configured variant."""
        variant = self.conf["db_variant"]

        if variant in ("mysql", "percona"):
            try:
                import mysql.connector
                self.db_module = mysql.connector
            except ImportError:
                raise MissingDependencyError(f"{variant} connections", "mysql-connector-python") from None
        elif variant == "mariadb":
            try:
                import mariadb
                self.db_module = mariadb
                # mariadb binds with qmark placeholders
                self.paramstyle = mariadb.paramstyle
            except ImportError:
                try:
                    import mysql.connector
                    self.db_module = mysql.connector
                    logger.warning(
                        "MariaDB connector not available. Falling back to MySQL connector. "
                        "Install MariaDB connector with: pip install mariadb"
                    )
                except ImportError:
                    raise MissingDependencyError("MariaDB connections", "mariadb") from None
        else:
            raise ConfigurationError(f"Unsupported MySQL variant: {variant}")

        logger.debug(f"Using {self.db_module.__name__} for {variant}")

    def _open_connection(self) -> Any:
        connection_args = {
            'database': self.conf['db'],
            'host': self.conf['host'],
            'port': self.conf['port'],
            'user': self.conf['user'],
            'password': self.conf['passwd'],
        }
        if self.db_module.__name__ == 'mariadb':
            connection_args['connect_timeout'] = self.conf['connect_timeout']
        else:
            connection_args['charset'] = self.conf['charset']
            connection_args['connection_timeout'] = self.conf['connect_timeout']

        conn = self.db_module.connect(**connection_args)
        logger.debug(f"Connected to {self.conf['db_variant']} database: {self.conf['db']}")
        return conn
