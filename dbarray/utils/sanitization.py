"""
Sanitization utilities for dbarray.
"""

import re

from ..exceptions import SanitizationError

_IDENTIFIER = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_$#]*$')


def sanitize_identifier(identifier: str, quote_char: str = "") -> str:
    """
    Sanitize an SQL identifier (table or column name).

    Identifiers are interpolated into generated SQL, so only plain names are
    accepted. Dotted names (``schema.table``) are checked part by part.

    Args:
        identifier: The table or column name to sanitize
        quote_char: Quote character for the target database; ``"["`` quotes
            as ``[name]``, an empty string leaves the name unquoted

    Returns:
        The identifier, quoted when ``quote_char`` is given

    Raises:
        SanitizationError: If the identifier contains invalid characters
    """
    if not isinstance(identifier, str) or not identifier:
        raise SanitizationError(f"Invalid identifier: {identifier!r}")

    if '.' in identifier:
        return '.'.join(sanitize_identifier(part, quote_char) for part in identifier.split('.'))

    if not _IDENTIFIER.match(identifier):
        raise SanitizationError(f"Invalid identifier: {identifier}. "
                                "Identifiers must start with a letter or underscore and contain "
                                "only letters, numbers, underscores, dollar and hash signs.")

    if quote_char == "[":
        return f"[{identifier}]"
    if quote_char:
        return f"{quote_char}{identifier}{quote_char}"
    return identifier


def sanitize_table_name(table_name: str, quote_char: str = "") -> str:
    """Sanitize a table name."""
    return sanitize_identifier(table_name, quote_char)


def sanitize_column_name(column_name: str, quote_char: str = "") -> str:
    """Sanitize a column name."""
    return sanitize_identifier(column_name, quote_char)
