"""
Exceptions for dbarray.
"""

class DBArrayError(Exception):
    """Base exception for all dbarray errors."""
    pass


class ConnectionError(DBArrayError):
    """Error raised when the connection handle is absent, dead, or cannot be opened."""
    pass


class DatabaseError(DBArrayError):
    """
    Error raised when the driver rejects a statement.

    Carries the driver's message, the SQL text, a rendering of the bind
    values and the bind mode (``list``, ``positional`` or ``named``).
    """

    def __init__(self, message: str, sql: str = "", binds: str = "", bind_mode: str = ""):
        self.message = message
        self.sql = sql
        self.binds = binds
        self.bind_mode = bind_mode
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [self.message]
        if self.sql:
            parts.append(f"SQL: {self.sql}")
        if self.bind_mode:
            parts.append(f"Bind mode: {self.bind_mode}")
        if self.binds:
            parts.append(f"Binds: {self.binds}")
        return "\n".join(parts)


class PrepareError(DatabaseError):
    """Error raised when a statement cannot be prepared."""
    pass


class ExecuteError(DatabaseError):
    """Error raised when binding or executing a statement fails."""
    pass


class BulkPartialFailure(DBArrayError):
    """Error raised in strict mode when a bulk operation did not apply every row."""

    def __init__(self, result):
        self.result = result
        super().__init__(
            f"Bulk operation failed on {len(result.failures)} of {result.attempted} rows; "
            f"failed positions: {[f.index for f in result.failures]}"
        )


class ConfigurationError(DBArrayError):
    """Error raised when there is an issue with the pipeline configuration."""
    pass


class MissingDependencyError(ConfigurationError):
    """Error raised when an optional driver or serialization library is not installed."""

    def __init__(self, feature: str, package: str):
        self.feature = feature
        self.package = package
        super().__init__(
            f"{package} is required for {feature}. "
            f"Install it with: pip install {package}"
        )


class DatabaseTypeError(DBArrayError):
    """Error raised when an unsupported database type is specified."""
    pass


class UsageError(DBArrayError):
    """Error raised when a required argument is omitted by the caller."""
    pass


class FeatureNotSupportedError(DBArrayError):
    """Error raised when a feature is not supported by the database driver."""
    pass


class SanitizationError(DBArrayError):
    """Error raised when input sanitization fails."""
    pass


class TransactionError(DBArrayError):
    """Error raised when a transaction operation (commit, rollback) fails."""
    pass
