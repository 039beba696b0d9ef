"""
Transaction management for dbarray.
"""

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import TransactionError

if TYPE_CHECKING:
    from .base import DBArray

logger = logging.getLogger(__name__)


class TransactionContext:
    """
    Context manager that commits on success and rolls back on error.

    Bulk helpers are best-effort; wrap them in a transaction and check the
    result to make them all-or-nothing::

        with db.transaction():
            result = db.sql_insert_array_array(sql, rows)
            if not result.ok:
                raise RuntimeError(result.failures)
    """

    def __init__(self, db: 'DBArray'):
        self.db = db
        self._autocommit = None

    def __enter__(self) -> Any:
        try:
            self._autocommit = self.db.autocommit
            if self._autocommit:
                self.db.autocommit = False
            return self
        except Exception as e:
            raise TransactionError(f"Failed to start transaction: {e}") from e

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        try:
            if exc_type is None:
                try:
                    self.db.commit()
                except Exception as e:
                    logger.error(f"Transaction commit failed: {e}")
                    try:
                        self.db.rollback()
                    except Exception as rollback_error:
                        logger.error(f"Rollback after commit failure also failed: {rollback_error}")
                    raise TransactionError(f"Transaction commit failed: {e}") from e
                return False

            try:
                self.db.rollback()
                logger.warning(f"Transaction rolled back due to: {exc_type.__name__}: {exc_val}")
            except Exception as e:
                logger.error(f"Transaction rollback failed: {e}")
                raise TransactionError(f"Transaction rollback failed: {e}") from e
            return False
        finally:
            if self._autocommit:
                self.db.autocommit = True
