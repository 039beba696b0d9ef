"""
Bind parameter resolution for dbarray.

Every query method accepts its parameters the same way::

    db.sql_array("SELECT ... WHERE a = ? AND b = ?", 1, 2)       # positional
    db.sql_array("SELECT ... WHERE a = ? AND b = ?", [1, 2])     # list
    db.sql_array("SELECT ... WHERE a = :a", {"a": 1, "z": 9})    # named

The shape is classified once, at the call boundary, into a ``Positional`` or
``Named`` bind set. Named keys that do not appear in the SQL as ``:key`` are
dropped, so a single dict of page parameters can feed several statements.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple, Union

MODE_LIST = "list"
MODE_POSITIONAL = "positional"
MODE_NAMED = "named"


class BindCell:
    """
    A mutable cell that requests an in/out bind.

    The cell's current value is sent to the database and, once the statement
    has executed, ``value`` is replaced with what the database wrote back::

        bar = BindCell(3)
        db.update("BEGIN :bar := :bar * 2; END;", {"bar": bar})
        bar.value  # 6

    Args:
        value: Initial value sent to the database
        type: Driver variable type (defaults to the type of ``value``, or str)
        size: Buffer size for variable-length types
    """

    def __init__(self, value: Any = None, type: Any = None, size: int = None):
        self.value = value
        self.type = type
        self.size = size

    def __repr__(self) -> str:
        return f"BindCell({self.value!r})"


@dataclass
class Positional:
    """Ordered bind values."""
    values: Tuple[Any, ...] = ()
    mode: str = MODE_POSITIONAL


@dataclass
class Named:
    """Bind values keyed by placeholder name; a BindCell slot is an in/out bind."""
    slots: Dict[str, Any] = field(default_factory=dict)
    mode: str = MODE_NAMED

    @property
    def has_cells(self) -> bool:
        return any(isinstance(v, BindCell) for v in self.slots.values())


BindSet = Union[Positional, Named]


def _placeholder_pattern(name: str):
    return re.compile(r"(?<!:):" + re.escape(name) + r"\b")


def placeholder_in_sql(sql: str, name: str) -> bool:
    """Return True when ``:name`` appears in the SQL text as a whole word."""
    return _placeholder_pattern(name).search(sql) is not None


def resolve_binds(sql: str, params: Tuple[Any, ...]) -> BindSet:
    """
    Classify the parameters passed after the SQL text.

    Args:
        sql: SQL text the parameters are meant for
        params: The caller's remaining positional arguments

    Returns:
        A Positional or Named bind set
    """
    if len(params) == 1:
        only = params[0]
        if isinstance(only, (list, tuple)):
            return Positional(tuple(only), MODE_LIST)
        if isinstance(only, Mapping):
            slots = {}
            for key, value in only.items():
                if placeholder_in_sql(sql, str(key)):
                    slots[str(key)] = value
            return Named(slots)
    return Positional(tuple(params), MODE_POSITIONAL)


def render_named(sql: str, named: Named, paramstyle: str) -> Tuple[str, Union[Dict[str, Any], List[Any]]]:
    """
    Rewrite ``:name`` placeholders for a driver's DB-API paramstyle.

    Args:
        sql: SQL text using ``:name`` placeholders
        named: Resolved named bind set
        paramstyle: The driver module's ``paramstyle``

    Returns:
        Tuple of (sql, parameters) ready for ``cursor.execute``
    """
    if paramstyle in ("named", "numeric"):
        return sql, dict(named.slots)

    if paramstyle not in ("pyformat", "qmark", "format"):
        raise ValueError(f"Unsupported paramstyle: {paramstyle}")

    names = "|".join(re.escape(n) for n in sorted(named.slots, key=len, reverse=True))
    if not names:
        # Executed without parameters, so the text is passed through as is
        return sql, {} if paramstyle == "pyformat" else []

    # Format-style drivers read a literal % as a conversion; it must be doubled
    percent = paramstyle in ("pyformat", "format")
    pattern = re.compile(r"(?<!:):(" + names + r")\b" + (r"|%" if percent else ""))
    values = []

    def replace(m):
        name = m.group(1)
        if name is None:
            return "%%"
        if paramstyle == "pyformat":
            return f"%({name})s"
        values.append(named.slots[name])
        return "?" if paramstyle == "qmark" else "%s"

    sql = pattern.sub(replace, sql)
    if paramstyle == "pyformat":
        return sql, dict(named.slots)
    return sql, values


def render_binds(bind_set: BindSet) -> str:
    """Render bind values for error messages and debug logs."""
    if isinstance(bind_set, Named):
        return ", ".join(f"{k}=>{v!r}" for k, v in bind_set.slots.items())
    return ", ".join(repr(v) for v in bind_set.values)


def placeholder(paramstyle: str, position: int) -> str:
    """Return the positional placeholder for the 1-based ``position``."""
    if paramstyle == "qmark":
        return "?"
    if paramstyle in ("format", "pyformat"):
        return "%s"
    return f":{position}"
