"""
Prepared statements and the per-connection statement cache.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .binds import BindCell, BindSet, Named, render_named
from .exceptions import FeatureNotSupportedError

logger = logging.getLogger(__name__)


class Statement:
    """
    A driver cursor prepared for one SQL text.

    A statement is executed with a resolved bind set, drained with
    ``fetchone`` or iteration, and must be finished afterwards. Finishing a
    cached statement keeps its cursor for the next execution of the same SQL;
    finishing an uncached one closes the cursor.
    """

    def __init__(self, sql: str, cursor: Any, cached: bool = False):
        self.sql = sql
        self.cursor = cursor
        self.cached = cached
        self.column_names: List[str] = []
        self.finished = True
        self.closed = False
        self.pending = False

    def execute(self, bind_set: BindSet, paramstyle: str = "named") -> "Statement":
        """
        Bind and execute.

        In/out ``BindCell`` slots are bound as driver variables and written
        back once the driver returns.
        """
        cells = {}
        if isinstance(bind_set, Named):
            sql, params = render_named(self.sql, bind_set, paramstyle)
            if bind_set.has_cells:
                if not hasattr(self.cursor, "var") or not isinstance(params, dict):
                    raise FeatureNotSupportedError(
                        "In/out binds require a driver with named binds and cursor.var()"
                    )
                for name, slot in bind_set.slots.items():
                    if isinstance(slot, BindCell):
                        var = self._make_var(slot)
                        params[name] = var
                        cells[name] = (slot, var)
        else:
            sql, params = self.sql, list(bind_set.values)

        self.finished = False
        if params:
            self.cursor.execute(sql, params)
        else:
            self.cursor.execute(sql)

        for slot, var in cells.values():
            slot.value = var.getvalue()

        # Some drivers only populate the description right after execute
        self.column_names = [d[0] for d in (self.cursor.description or ())]
        self.pending = self.cursor.description is not None
        return self

    def _make_var(self, cell) -> Any:
        var_type = cell.type
        if var_type is None:
            var_type = type(cell.value) if cell.value is not None else str
        if cell.size is not None:
            var = self.cursor.var(var_type, cell.size)
        else:
            var = self.cursor.var(var_type)
        var.setvalue(0, cell.value)
        return var

    @property
    def rowcount(self) -> int:
        return self.cursor.rowcount

    def fetchone(self) -> Optional[Sequence[Any]]:
        row = self.cursor.fetchone()
        if row is None:
            self.pending = False
        return row

    def fetchmany(self, size: int) -> List[Sequence[Any]]:
        rows = self.cursor.fetchmany(size)
        if not rows:
            self.pending = False
        return rows

    def __iter__(self) -> Iterator[Sequence[Any]]:
        while True:
            row = self.fetchone()
            if row is None:
                return
            yield row

    def finish(self) -> None:
        """
        Release the result set; closes the cursor unless the statement is cached.

        A cached cursor with unread rows is drained so the driver lets go of
        the result (SQLite table locks, unbuffered MySQL results).
        """
        self.finished = True
        if not self.cached:
            self.close()
        elif self.pending and not self.closed:
            self.pending = False
            try:
                self.cursor.fetchall()
            except Exception as e:
                logger.warning(f"Error discarding unread rows: {e}")

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.finished = True
        try:
            self.cursor.close()
        except Exception as e:
            logger.warning(f"Error closing cursor: {e}")


def prepare(dbh: Any, sql: str, cached: bool = False) -> Statement:
    """Open a cursor on ``dbh`` and prepare ``sql`` when the driver supports it."""
    cursor = dbh.cursor()
    if hasattr(cursor, "prepare"):
        cursor.prepare(sql)
    return Statement(sql, cursor, cached=cached)


class StatementCache:
    """
    Prepared statements keyed by literal SQL text.

    The cache is unbounded and owned by one connection handle; it is cleared
    whenever that handle is replaced.
    """

    def __init__(self):
        self._statements: Dict[str, Statement] = {}
        self.prepare_count = 0

    def get(self, sql: str) -> Optional[Statement]:
        return self._statements.get(sql)

    def put(self, statement: Statement) -> None:
        self._statements[statement.sql] = statement

    def clear(self) -> None:
        for statement in self._statements.values():
            statement.close()
        self._statements.clear()
        self.prepare_count = 0

    def __len__(self) -> int:
        return len(self._statements)

    def __contains__(self, sql: str) -> bool:
        return sql in self._statements
