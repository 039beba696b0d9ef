"""
Export shaped results to CSV, XML and spreadsheet formats.

The CSV and XML formatters take the header-prefixed shapes returned by
``sql_array_array_name`` and ``sql_array_hash_name``::

    csv_text = csv_array_array_name(db.sql_array_array_name(sql))
    xml_text = xml_array_hash_name(db.sql_array_hash_name(sql),
                                   comment="Daily totals",
                                   uom={"DURATION": "min"})
"""

import csv
import datetime
import io
import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, Iterable, Mapping, Optional, Sequence, TextIO, Tuple, Union

from .exceptions import MissingDependencyError

logger = logging.getLogger(__name__)

# RFC 4180 line terminator
CSV_LINE_TERMINATOR = "\r\n"

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

_XML_NAME = re.compile(r'^[A-Za-z_][A-Za-z0-9_.\-]*$')


def _csv_writer(fh: TextIO):
    return csv.writer(fh, quoting=csv.QUOTE_MINIMAL, lineterminator=CSV_LINE_TERMINATOR)


def csv_array_array_name(data: Iterable[Sequence[Any]]) -> str:
    """
    Return CSV text for an ``sql_array_array_name`` result.

    Fields are quoted only when needed, embedded quotes are doubled and every
    line ends with CRLF. None is written as an empty field.
    """
    buffer = io.StringIO()
    writer = _csv_writer(buffer)
    for row in data:
        writer.writerow(row)
    return buffer.getvalue()


def csv_cursor(fh: TextIO, statement: Any) -> int:
    """
    Stream an executed statement to ``fh`` as CSV, header line first.

    ``fh`` should be opened with ``newline=""`` so the CRLF terminators are
    written unchanged. The statement is finished afterwards.

    Returns:
        Number of data rows written
    """
    writer = _csv_writer(fh)
    count = 0
    try:
        names = getattr(statement, "column_names", None)
        if names is None:
            names = [d[0] for d in statement.description]
        writer.writerow(names)
        for row in statement:
            writer.writerow(row)
            count += 1
    finally:
        if hasattr(statement, "finish"):
            statement.finish()
    logger.debug(f"Wrote {count} CSV rows")
    return count


def _xml_text(value: Any) -> str:
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def xml_array_hash_name(data: Sequence[Any], comment: Optional[str] = None,
                        uom: Optional[Mapping[str, str]] = None) -> str:
    """
    Return an XML document for an ``sql_array_hash_name`` result.

    The document has a ``head`` (optional comment, the column list with
    optional units of measure, row and column counts) and a ``body`` with one
    ``row`` per record. Fields whose value is None are left out of their row.
    Column names that are not valid XML element names are written as
    ``<field name="...">``.

    Args:
        data: Header row of column names followed by one dict per row
        comment: Free text placed in ``head/comment``
        uom: Unit of measure per column name, added as a ``uom`` attribute

    Returns:
        The XML document as text, with an XML declaration
    """
    data = list(data) if isinstance(data, (list, tuple)) else []
    uom = uom if isinstance(uom, Mapping) else {}
    header = list(data[0]) if data else []
    records = data[1:]

    document = ET.Element("document")

    head = ET.SubElement(document, "head")
    if comment:
        ET.SubElement(head, "comment").text = str(comment)
    columns = ET.SubElement(head, "columns")
    for name in header:
        column = ET.SubElement(columns, "column")
        column.text = str(name)
        if name in uom:
            column.set("uom", str(uom[name]))
    counts = ET.SubElement(head, "counts")
    ET.SubElement(counts, "rows").text = str(len(records))
    ET.SubElement(counts, "columns").text = str(len(header))

    body = ET.SubElement(document, "body")
    rows = ET.SubElement(body, "rows")
    for record in records:
        row = ET.SubElement(rows, "row")
        names = header + [k for k in record if k not in header]
        for name in names:
            value = record.get(name)
            if value is None:
                continue
            if _XML_NAME.match(str(name)) and not str(name).lower().startswith("xml"):
                field = ET.SubElement(row, str(name))
            else:
                field = ET.SubElement(row, "field", name=str(name))
            field.text = _xml_text(value)

    ET.indent(document)
    return XML_DECLARATION + ET.tostring(document, encoding="unicode") + "\n"


class SpreadsheetWriter:
    """
    Build an .xlsx workbook with one tab per shaped result.

    Raises:
        MissingDependencyError: If openpyxl is not installed
    """

    def __init__(self):
        try:
            import openpyxl
            from openpyxl.styles import Font
        except ImportError:
            raise MissingDependencyError("spreadsheet export", "openpyxl") from None

        self._workbook = openpyxl.Workbook()
        self._header_font = Font(bold=True)
        self._tabs = 0

    def add(self, name: str, data: Iterable[Sequence[Any]]) -> None:
        """Add a tab from an ``sql_array_array_name`` result; the header row is bold."""
        if self._tabs == 0:
            sheet = self._workbook.active
            sheet.title = name[:31]
        else:
            sheet = self._workbook.create_sheet(title=name[:31])

        for i, row in enumerate(data):
            sheet.append(list(row))
            if i == 0:
                for cell in sheet[1]:
                    cell.font = self._header_font
        self._tabs += 1

    def content(self) -> bytes:
        """Return the workbook as .xlsx bytes."""
        buffer = io.BytesIO()
        self._workbook.save(buffer)
        return buffer.getvalue()


def xls_array_array_name(tabs: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]) -> bytes:
    """
    Return .xlsx bytes with one tab per (name, data) pair::

        xls_array_array_name({"Tab One": data, "Tab Two": data2})
    """
    writer = SpreadsheetWriter()
    items = tabs.items() if isinstance(tabs, Mapping) else tabs
    for name, data in items:
        writer.add(name, data)
    return writer.content()
