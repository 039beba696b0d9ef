"""
The dbarray query result pipeline.

``DBArray`` wraps one DB-API 2.0 connection and turns query results into
plain Python structures::

    db = DBArray(dbh=sqlite3.connect(":memory:"))
    db.sql_scalar("SELECT COUNT(*) FROM users")
    db.sql_array("SELECT name FROM users WHERE age > ?", 30)
    db.sql_hash("SELECT id, name FROM users")
    db.sql_array_hash_name("SELECT * FROM users WHERE id = :id", {"id": 4})

Every aggregate method (``sql_*``) has a generator twin (``iter_*``) that
yields the same elements one at a time. Both finish the underlying statement
on every exit path.
"""

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .binds import render_binds, resolve_binds
from .bulk import (
    DEFAULT_BATCH_SIZE,
    BulkResult,
    Status,
    emulate_batch,
    insert_count,
    iter_batches,
    update_count,
)
from .exceptions import (
    BulkPartialFailure,
    ConfigurationError,
    ConnectionError,
    DBArrayError,
    ExecuteError,
    PrepareError,
    TransactionError,
    UsageError,
)
from .records import TaggedRecord
from .statement import Statement, StatementCache, prepare
from .transaction import TransactionContext
from .utils.sql import insert_sql
from .utils.sql import sql_sort as build_sort

logger = logging.getLogger(__name__)

_NAME_CASES = (None, "lower", "upper")


class DBArray:
    """
    Query result pipeline over a DB-API 2.0 connection.

    Subclasses in ``dbarray.connectors`` know how to open a connection for
    one backend; this class works with any connection passed as ``dbh``.

    Args:
        dbh: An open DB-API connection (optional)
        statement_cache (bool): Reuse prepared statements by SQL text
        name_case (str): Force column names to "lower" or "upper" case
        strict_bulk (bool): Raise BulkPartialFailure instead of logging a
            warning when a bulk operation does not apply every row
        autocommit (bool): Autocommit flag applied on connect
    """

    #: DB-API paramstyle of the driver; decides how named binds are rendered
    paramstyle = "named"
    #: Quote character for generated identifiers
    quote_char = ""
    #: Backend name used in log messages
    backend = "DB-API"

    def __init__(self, dbh: Any = None, **kwargs):
        self.conf = kwargs
        self.conf["statement_cache"] = kwargs.get("statement_cache", True)
        self.conf["name_case"] = kwargs.get("name_case", None)
        self.conf["strict_bulk"] = kwargs.get("strict_bulk", False)
        self.conf["autocommit"] = kwargs.get("autocommit", None)

        if self.conf["name_case"] not in _NAME_CASES:
            raise ConfigurationError(
                f"Invalid name_case: {self.conf['name_case']}. Must be 'lower', 'upper' or None."
            )

        self._dbh = None
        self._cache = StatementCache()
        self._last_query = ""

        if dbh is not None:
            self.dbh = dbh

    # -- connection -------------------------------------------------------

    @property
    def dbh(self) -> Any:
        """The DB-API connection handle."""
        return self._dbh

    @dbh.setter
    def dbh(self, dbh: Any) -> None:
        # Prepared statements belong to the old handle
        self._cache.clear()
        self._dbh = dbh

    @property
    def statement_cache(self) -> StatementCache:
        return self._cache

    def connect(self) -> Any:
        """Open a connection with the instance configuration and return the handle."""
        try:
            dbh = self._open_connection()
        except DBArrayError:
            raise
        except Exception as e:
            logger.error(f"{self.backend} connection failed: {e}")
            raise ConnectionError(f"Failed to connect to {self.backend} database: {e}") from e

        self.dbh = dbh
        if self.conf["autocommit"] is not None:
            self.autocommit = self.conf["autocommit"]
        logger.debug(f"Connected to {self.backend} database")
        return dbh

    def _open_connection(self) -> Any:
        raise ConfigurationError(
            "DBArray has no backend to connect with; pass dbh= or use a connector "
            "such as SQLiteArray or OracleArray"
        )

    def disconnect(self) -> None:
        """Close cached statements and the connection."""
        dbh = self._dbh
        self.dbh = None
        if dbh is not None:
            try:
                dbh.close()
            except Exception as e:
                logger.warning(f"Error closing connection: {e}")
        logger.debug(f"{self.backend} connection closed")

    def is_connected(self) -> bool:
        return self._dbh is not None

    def _require_dbh(self) -> Any:
        if self._dbh is None:
            raise ConnectionError("Not connected: call connect() or assign dbh first")
        return self._dbh

    def commit(self) -> None:
        """Commit the current transaction."""
        try:
            self._require_dbh().commit()
        except DBArrayError:
            raise
        except Exception as e:
            raise TransactionError(f"Failed to commit transaction: {e}") from e

    def rollback(self) -> None:
        """Rollback the current transaction."""
        try:
            self._require_dbh().rollback()
        except DBArrayError:
            raise
        except Exception as e:
            raise TransactionError(f"Failed to rollback transaction: {e}") from e

    @property
    def autocommit(self) -> bool:
        return bool(self._require_dbh().autocommit)

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        self._require_dbh().autocommit = bool(value)

    def last_query(self) -> str:
        """Get the last executed SQL text."""
        return self._last_query

    def transaction(self) -> TransactionContext:
        """Return a context manager that commits on success and rolls back on error."""
        return TransactionContext(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._dbh is not None:
            if exc_type is None:
                try:
                    self.commit()
                except Exception as e:
                    logger.warning(f"Failed to commit on context exit: {e}")
            else:
                try:
                    self.rollback()
                except Exception as e:
                    logger.warning(f"Failed to rollback on context exit: {e}")
        self.disconnect()

    # -- statements -------------------------------------------------------

    def _prepare(self, sql: str) -> Statement:
        dbh = self._require_dbh()
        if not self.conf["statement_cache"]:
            self._cache.prepare_count += 1
            return prepare(dbh, sql)

        statement = self._cache.get(sql)
        if statement is not None and statement.finished and not statement.closed:
            return statement

        self._cache.prepare_count += 1
        if statement is not None and not statement.finished:
            # Same SQL is still being drained elsewhere
            return prepare(dbh, sql)

        statement = prepare(dbh, sql, cached=True)
        self._cache.put(statement)
        return statement

    def _sql_cursor(self, sql: str, params: Tuple[Any, ...]) -> Statement:
        bind_set = resolve_binds(sql, params)
        self._require_dbh()
        self._last_query = sql
        logger.debug(f"Executing ({bind_set.mode}): {sql}")
        logger.debug(f"Binds: {render_binds(bind_set)}")

        try:
            statement = self._prepare(sql)
        except DBArrayError:
            raise
        except Exception as e:
            logger.error(f"Statement preparation failed: {e}")
            raise PrepareError(str(e), sql, render_binds(bind_set), bind_set.mode) from e

        try:
            statement.execute(bind_set, self.paramstyle)
        except DBArrayError:
            statement.finish()
            raise
        except Exception as e:
            statement.finish()
            logger.error(f"Query execution failed: {e}")
            raise ExecuteError(str(e), sql, render_binds(bind_set), bind_set.mode) from e

        return statement

    def sql_cursor(self, sql: str, *params: Any) -> Statement:
        """
        Return the executed statement so the caller can drain it.

        The caller must call ``finish()`` on it when done.
        """
        return self._sql_cursor(sql, params)

    def _column_names(self, statement: Statement) -> List[str]:
        case = self.conf["name_case"]
        if case == "lower":
            return [n.lower() for n in statement.column_names]
        if case == "upper":
            return [n.upper() for n in statement.column_names]
        return list(statement.column_names)

    def _iter_shaped(self, sql: str, params: Tuple[Any, ...],
                     shape: Callable[[List[str], Any], Any],
                     header: bool = False, flatten: bool = False) -> Iterator[Any]:
        statement = self._sql_cursor(sql, params)
        try:
            names = self._column_names(statement)
            if header:
                yield list(names)
            for row in statement:
                if flatten:
                    yield from row
                else:
                    yield shape(names, row)
        finally:
            statement.finish()

    # -- shaped results ---------------------------------------------------

    def sql_scalar(self, sql: str, *params: Any) -> Any:
        """
        Return the first column of the first row, or None.

        This works great for selecting one value::

            count = db.sql_scalar("SELECT COUNT(*) FROM users WHERE age > ?", 30)
        """
        statement = self._sql_cursor(sql, params)
        try:
            row = statement.fetchone()
        finally:
            statement.finish()
        return row[0] if row else None

    def iter_array(self, sql: str, *params: Any) -> Iterator[Any]:
        return self._iter_shaped(sql, params, None, flatten=True)

    def sql_array(self, sql: str, *params: Any) -> List[Any]:
        """
        Return every column of every row as one flat list.

        This works great for selecting one column from a table or one row.
        """
        return list(self.iter_array(sql, *params))

    def iter_hash(self, sql: str, *params: Any) -> Iterator[Tuple[Any, Any]]:
        """Yield ordered (first column, second column) pairs."""
        return self._iter_shaped(sql, params, lambda names, row: (row[0], row[1] if len(row) > 1 else None))

    def sql_hash(self, sql: str, *params: Any) -> Dict[Any, Any]:
        """
        Return the first two columns as a dict {key: value}.

        Later rows win on duplicate keys; use ``iter_hash`` to keep them all.
        """
        return dict(self.iter_hash(sql, *params))

    def iter_array_array(self, sql: str, *params: Any) -> Iterator[List[Any]]:
        return self._iter_shaped(sql, params, lambda names, row: list(row))

    def sql_array_array(self, sql: str, *params: Any) -> List[List[Any]]:
        """Return the rows as a list of lists."""
        return list(self.iter_array_array(sql, *params))

    def iter_array_array_name(self, sql: str, *params: Any) -> Iterator[List[Any]]:
        return self._iter_shaped(sql, params, lambda names, row: list(row), header=True)

    def sql_array_array_name(self, sql: str, *params: Any) -> List[List[Any]]:
        """Return the rows as a list of lists whose first element is the column names."""
        return list(self.iter_array_array_name(sql, *params))

    def iter_array_hash(self, sql: str, *params: Any) -> Iterator[Dict[str, Any]]:
        return self._iter_shaped(sql, params, lambda names, row: dict(zip(names, row)))

    def sql_array_hash(self, sql: str, *params: Any) -> List[Dict[str, Any]]:
        """Return the rows as a list of dicts keyed by column name."""
        return list(self.iter_array_hash(sql, *params))

    def iter_array_hash_name(self, sql: str, *params: Any) -> Iterator[Any]:
        return self._iter_shaped(sql, params, lambda names, row: dict(zip(names, row)), header=True)

    def sql_array_hash_name(self, sql: str, *params: Any) -> List[Any]:
        """Return a list whose first element is the column names, followed by one dict per row."""
        return list(self.iter_array_hash_name(sql, *params))

    def iter_array_object(self, tag: Any, sql: str, *params: Any) -> Iterator[TaggedRecord]:
        if tag is None:
            raise UsageError("iter_array_object requires a record tag")
        return self._iter_shaped(sql, params, lambda names, row: TaggedRecord(tag, dict(zip(names, row))))

    def sql_array_object(self, tag: Any, sql: str, *params: Any) -> List[TaggedRecord]:
        """
        Return the rows as named records tagged with ``tag``.

        Call ``build()`` on a record to construct the tagged type from it.
        """
        return list(self.iter_array_object(tag, sql, *params))

    # -- sorting ----------------------------------------------------------

    def sql_sort(self, sql: str, sort: Optional[int] = None, nulls: Optional[str] = None) -> str:
        """Append ``ORDER BY |sort| ASC|DESC``; see ``dbarray.utils.sql.sql_sort``."""
        return build_sort(sql, sort, nulls)

    def sql_array_array_name_sort(self, sql: str, sort: Optional[int], *params: Any) -> List[List[Any]]:
        """
        Return ``sql_array_array_name`` sorted on column ``sort``.

        Positive sorts ascending, negative descending, zero leaves the query
        unsorted. The SQL must not have an ORDER BY clause.
        """
        return self.sql_array_array_name(self.sql_sort(sql, sort), *params)

    # -- statements without results ---------------------------------------

    def _execute_rows(self, sql: str, params: Tuple[Any, ...]) -> int:
        statement = self._sql_cursor(sql, params)
        try:
            return statement.rowcount
        finally:
            statement.finish()

    def update(self, sql: str, *params: Any) -> int:
        """
        Run an UPDATE and return the number of rows affected.

        Remember to commit or use autocommit.
        """
        return self._execute_rows(sql, params)

    def delete(self, sql: str, *params: Any) -> int:
        """Run a DELETE and return the number of rows affected."""
        return self._execute_rows(sql, params)

    def insert(self, sql: str, *params: Any) -> int:
        """Run an INSERT and return the number of rows affected."""
        return self._execute_rows(sql, params)

    def execute(self, sql: str, *params: Any) -> int:
        """Run any statement and return the driver's row count."""
        return self._execute_rows(sql, params)

    def exec_(self, sql: str, *params: Any) -> int:
        """Run a PL/SQL block or other statement; returns the driver's row count."""
        return self._execute_rows(sql, params)

    # -- bulk -------------------------------------------------------------

    def _execute_batch(self, statement: Statement, rows: List[Any], offset: int) -> List[Status]:
        """Run one batch; connectors with native batch errors override this."""
        return emulate_batch(statement, rows, self.paramstyle, offset)

    def _execute_array(self, sql: str, rows: Iterable[Any], batch_size: int,
                       counter: Callable[[List[Status]], int]) -> BulkResult:
        self._require_dbh()
        self._last_query = sql
        logger.debug(f"Executing (array): {sql}")

        try:
            statement = self._prepare(sql)
        except Exception as e:
            if isinstance(rows, Statement):
                rows.finish()
            if isinstance(e, DBArrayError):
                raise
            logger.error(f"Statement preparation failed: {e}")
            raise PrepareError(str(e), sql, "", "array") from e

        statuses: List[Status] = []
        try:
            for batch in iter_batches(rows, batch_size):
                statuses.extend(self._execute_batch(statement, batch, len(statuses)))
        except DBArrayError:
            raise
        except Exception as e:
            logger.error(f"Bulk execution failed after {len(statuses)} rows: {e}")
            raise ExecuteError(str(e), sql, f"{len(statuses)} rows applied", "array") from e
        finally:
            statement.finish()
            if isinstance(rows, Statement):
                rows.finish()

        result = BulkResult(counter(statuses), len(statuses), statuses)
        if insert_count(statuses) != result.attempted:
            if self.conf["strict_bulk"]:
                raise BulkPartialFailure(result)
            logger.warning(
                f"Bulk operation failed on {len(result.failures)} of {result.attempted} rows: "
                f"{[(f.index, f.message) for f in result.failures]}"
            )
        return result

    def sql_insert_array_array(self, sql: str, rows: Iterable[Any],
                               batch_size: int = DEFAULT_BATCH_SIZE) -> BulkResult:
        """
        Execute an INSERT once per parameter row.

        ``rows`` may be a list of rows or an executed statement to stream
        from. The result's ``count`` is the number of rows that did not fail;
        ``statuses`` has one entry per row.
        """
        return self._execute_array(sql, rows, batch_size, insert_count)

    def sql_update_array_array(self, sql: str, rows: Iterable[Any],
                               batch_size: int = DEFAULT_BATCH_SIZE) -> BulkResult:
        """
        Execute an UPDATE or DELETE once per parameter row.

        The result's ``count`` is the sum of the positive per-row counts.
        """
        return self._execute_array(sql, rows, batch_size, update_count)

    def bulk_insert_table(self, table: str, data: Iterable[Any],
                          batch_size: int = DEFAULT_BATCH_SIZE) -> BulkResult:
        """
        Insert a header-prefixed result into ``table``.

        ``data`` is either an ``sql_array_array_name`` style list (first row
        is the column names) or an executed statement, whose column names are
        used::

            source = other_db.sql_cursor("SELECT id, name FROM users")
            db.bulk_insert_table("users_copy", source)
        """
        if not table:
            raise UsageError("bulk_insert_table requires a table name")

        if isinstance(data, Statement):
            rows = data
            try:
                sql = insert_sql(table, self._column_names(data), self.paramstyle, self.quote_char)
            except DBArrayError:
                data.finish()
                raise
        else:
            rows = iter(data)
            columns = next(rows, None)
            if not columns:
                raise UsageError("bulk_insert_table requires a header row of column names")
            sql = insert_sql(table, columns, self.paramstyle, self.quote_char)

        return self.sql_insert_array_array(sql, rows, batch_size)
