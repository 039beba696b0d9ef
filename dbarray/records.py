"""
Tagged records.
"""

from typing import Any, Dict


class TaggedRecord:
    """
    A named record carrying the caller's type tag.

    The pipeline does not interpret ``tag``; ``build()`` is the adapter that
    turns the record into an instance of it.
    """

    __slots__ = ("tag", "fields")

    def __init__(self, tag: Any, fields: Dict[str, Any]):
        self.tag = tag
        self.fields = fields

    def build(self) -> Any:
        """
        Construct the tagged type from the record's fields.

        Uses ``tag.from_record(fields)`` when the tag provides it and
        ``tag(**fields)`` otherwise.
        """
        factory = getattr(self.tag, "from_record", None)
        if factory is not None:
            return factory(dict(self.fields))
        return self.tag(**self.fields)

    def __getitem__(self, key: str) -> Any:
        return self.fields[key]

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TaggedRecord):
            return NotImplemented
        return self.tag == other.tag and self.fields == other.fields

    def __repr__(self) -> str:
        name = getattr(self.tag, "__name__", self.tag)
        return f"TaggedRecord({name}, {self.fields!r})"
