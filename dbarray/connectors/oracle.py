"""
Oracle database connector for dbarray.
"""

import logging
from typing import Any, List, Optional

from ..base import DBArray
from ..binds import BindCell, Named, render_named
from ..bulk import RowFailure, Status, row_binds
from ..exceptions import ConfigurationError, MissingDependencyError
from ..statement import Statement

logger = logging.getLogger(__name__)

# DBMS_APPLICATION_INFO truncates module to 48 bytes, action to 32 and client_info to 64
_APPLICATION_INFO_SIZE = 64


class OracleArray(DBArray):
    """
    Connector for Oracle databases using python-oracledb.

    Adds native in/out binds (``BindCell``), native batch errors for the bulk
    helpers and the ``DBMS_APPLICATION_INFO`` session tags ``module``,
    ``action`` and ``client_info``::

        db = OracleArray(user="scott", password="tiger", dsn="localhost/orclpdb1")
        db.module = "nightly-load"
        db.action = "stage customers"
    """

    paramstyle = "named"
    backend = "Oracle"

    def __init__(self, **kwargs):
        """
        Initialize the Oracle connector.

        Args:
            dsn (str): Data Source Name (e.g., 'localhost:1521/orclpdb1')
            user (str): Username
            password (str): Password
            host (str): Hostname, used with service_name or sid when no dsn
            port (int): Port number
            service_name (str): Service name
            sid (str): SID
            thick (bool): Initialise thick mode (Oracle Client libraries)
            lib_dir (str): Oracle Client library directory for thick mode
            autocommit (bool): Whether to autocommit transactions
            dbh: An already open oracledb connection
            **kwargs: DBArray options
        """
        dbh = kwargs.pop("dbh", None)
        super().__init__(**kwargs)

        self.conf["user"] = kwargs.get("user", kwargs.get("username", None))
        self.conf["password"] = kwargs.get("password", kwargs.get("passwd", None))
        self.conf["dsn"] = kwargs.get("dsn", None)
        self.conf["host"] = kwargs.get("host", "localhost")
        self.conf["port"] = kwargs.get("port", 1521)
        self.conf["service_name"] = kwargs.get("service_name", None)
        self.conf["sid"] = kwargs.get("sid", None)
        self.conf["thick"] = kwargs.get("thick", False)
        self.conf["lib_dir"] = kwargs.get("lib_dir", None)

        try:
            import oracledb
            self.oracledb = oracledb
        except ImportError:
            raise MissingDependencyError("Oracle connections", "oracledb") from None

        if dbh is not None:
            self.dbh = dbh
            return

        if not self.conf["dsn"] and not (self.conf["host"] and (self.conf["service_name"] or self.conf["sid"])):
            raise ConfigurationError("Either 'dsn' or 'host' and ('service_name' or 'sid') must be provided for Oracle connection")

        for param in ("user", "password"):
            if not self.conf[param]:
                raise ConfigurationError(f"Required parameter '{param}' is missing for Oracle connection")

        self.connect()

    def _open_connection(self) -> Any:
        if self.conf["thick"]:
            self.oracledb.init_oracle_client(lib_dir=self.conf["lib_dir"])

        dsn = self.conf["dsn"]
        if not dsn:
            if self.conf["service_name"]:
                dsn = self.oracledb.makedsn(self.conf["host"], self.conf["port"],
                                            service_name=self.conf["service_name"])
            else:
                dsn = self.oracledb.makedsn(self.conf["host"], self.conf["port"],
                                            sid=self.conf["sid"])

        conn = self.oracledb.connect(user=self.conf["user"], password=self.conf["password"], dsn=dsn)
        logger.debug(f"Connected to Oracle database as {self.conf['user']}@{dsn}")
        return conn

    # -- bulk -------------------------------------------------------------

    def _execute_batch(self, statement: Statement, rows: List[Any], offset: int) -> List[Status]:
        params = []
        for row in rows:
            bind_set = row_binds(statement.sql, row)
            if isinstance(bind_set, Named):
                params.append(render_named(statement.sql, bind_set, self.paramstyle)[1])
            else:
                params.append(list(bind_set.values))

        cursor = statement.cursor
        cursor.executemany(statement.sql, params, batcherrors=True, arraydmlrowcounts=True)
        errors = {error.offset: error.message for error in cursor.getbatcherrors()}
        counts = list(cursor.getarraydmlrowcounts())

        if len(counts) == len(rows):
            per_row = counts
        elif len(counts) == len(rows) - len(errors):
            # Counts only cover the rows that succeeded
            successful = iter(counts)
            per_row = [None if i in errors else next(successful) for i in range(len(rows))]
        else:
            per_row = [-1] * len(rows)

        statuses: List[Status] = []
        for i in range(len(rows)):
            if i in errors:
                statuses.append(RowFailure(offset + i, errors[i]))
            else:
                statuses.append(per_row[i])
        return statuses

    # -- session tags -----------------------------------------------------

    def _read_module(self) -> List[Optional[str]]:
        module = BindCell(None, str, _APPLICATION_INFO_SIZE)
        action = BindCell(None, str, _APPLICATION_INFO_SIZE)
        self.exec_("BEGIN DBMS_APPLICATION_INFO.READ_MODULE(:module, :action); END;",
                   {"module": module, "action": action})
        return [module.value, action.value]

    def set_module(self, module: Optional[str], action: Optional[str] = None) -> None:
        """Set the session module and action (V$SESSION.MODULE / ACTION)."""
        self.exec_("BEGIN DBMS_APPLICATION_INFO.SET_MODULE(module_name => :module, action_name => :action); END;",
                   {"module": module, "action": action})

    @property
    def module(self) -> Optional[str]:
        return self._read_module()[0]

    @module.setter
    def module(self, value: Optional[str]) -> None:
        self.set_module(value, self.action)

    @property
    def action(self) -> Optional[str]:
        return self._read_module()[1]

    @action.setter
    def action(self, value: Optional[str]) -> None:
        self.exec_("BEGIN DBMS_APPLICATION_INFO.SET_ACTION(action_name => :action); END;",
                   {"action": value})

    @property
    def client_info(self) -> Optional[str]:
        info = BindCell(None, str, _APPLICATION_INFO_SIZE)
        self.exec_("BEGIN DBMS_APPLICATION_INFO.READ_CLIENT_INFO(:info); END;", {"info": info})
        return info.value

    @client_info.setter
    def client_info(self, value: Optional[str]) -> None:
        self.exec_("BEGIN DBMS_APPLICATION_INFO.SET_CLIENT_INFO(client_info => :info); END;",
                   {"info": value})
