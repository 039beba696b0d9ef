"""
Bulk insert/update support.

A bulk operation runs one statement over many parameter rows and records a
status for every row: the driver's row count (``-1`` when the driver does
not know it) or a ``RowFailure``. Failed rows do not stop the batch.
"""

import logging
from dataclasses import dataclass, field
from itertools import islice
from typing import Any, Iterable, Iterator, List, Mapping, Sequence, Union

from .binds import MODE_LIST, BindSet, Positional, resolve_binds
from .exceptions import DBArrayError

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


@dataclass
class RowFailure:
    """The driver rejected the row at ``index`` (0-based, across all batches)."""
    index: int
    message: str


Status = Union[int, RowFailure]


@dataclass
class BulkResult:
    """Outcome of a bulk operation."""
    count: int
    attempted: int
    statuses: List[Status] = field(default_factory=list)

    @property
    def failures(self) -> List[RowFailure]:
        return [s for s in self.statuses if isinstance(s, RowFailure)]

    @property
    def ok(self) -> bool:
        return not self.failures

    def __int__(self) -> int:
        return self.count


def row_binds(sql: str, row: Any) -> BindSet:
    """Resolve one parameter row; a mapping binds by name, anything else by position."""
    if isinstance(row, Mapping):
        return resolve_binds(sql, (row,))
    if isinstance(row, (list, tuple)):
        return Positional(tuple(row), MODE_LIST)
    return Positional((row,), MODE_LIST)


def iter_batches(rows: Iterable[Any], batch_size: int = DEFAULT_BATCH_SIZE) -> Iterator[List[Any]]:
    """
    Split parameter rows into lists of at most ``batch_size``.

    Executed cursors and statements are drained with ``fetchmany`` so a
    large source result never has to be held in memory at once.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    if hasattr(rows, "fetchmany"):
        while True:
            batch = list(rows.fetchmany(batch_size))
            if not batch:
                return
            yield batch
    else:
        iterator = iter(rows)
        while True:
            batch = list(islice(iterator, batch_size))
            if not batch:
                return
            yield batch


def emulate_batch(statement, rows: Sequence[Any], paramstyle: str, offset: int = 0) -> List[Status]:
    """
    Execute ``statement`` once per row, recording a status for each.

    Used for drivers without a batch-error facility.
    """
    statuses: List[Status] = []
    for i, row in enumerate(rows):
        try:
            statement.execute(row_binds(statement.sql, row), paramstyle)
        except DBArrayError:
            raise
        except Exception as e:
            logger.debug(f"Bulk row {offset + i} failed: {e}")
            statuses.append(RowFailure(offset + i, str(e)))
        else:
            rowcount = statement.rowcount
            statuses.append(rowcount if rowcount is not None else -1)
    return statuses


def insert_count(statuses: Sequence[Status]) -> int:
    """Rows that did not fail."""
    return sum(1 for s in statuses if not isinstance(s, RowFailure))


def update_count(statuses: Sequence[Status]) -> int:
    """Sum of the positive row counts; unknown (-1) and zero counts add nothing."""
    return sum(s for s in statuses if not isinstance(s, RowFailure) and s > 0)
