import csv
import datetime
import io
import sys
import xml.etree.ElementTree as ET

import pytest

from dbarray import (
    ConfigurationError,
    MissingDependencyError,
    SpreadsheetWriter,
    csv_array_array_name,
    csv_cursor,
    xls_array_array_name,
    xml_array_hash_name,
)


def test_csv_quotes_only_when_needed():
    text = csv_array_array_name([["id", "note"], [1, 'OK, "Already"'], [2, None], [3, "plain"]])
    assert text == 'id,note\r\n1,"OK, ""Already"""\r\n2,\r\n3,plain\r\n'


def test_csv_round_trip(db):
    data = db.sql_array_array_name("SELECT id, name, note FROM users ORDER BY id")
    text = csv_array_array_name(data)
    rows = list(csv.reader(io.StringIO(text, newline="")))
    assert rows[0] == ["id", "name", "note"]
    assert rows[2] == ["2", "bob", 'OK, "Already"']
    assert len(rows) == 5


def test_csv_header_only():
    assert csv_array_array_name([["a", "b"]]) == "a,b\r\n"


def test_csv_cursor_streams_a_statement(db):
    fh = io.StringIO(newline="")
    statement = db.sql_cursor("SELECT id, name FROM users WHERE id <= 2 ORDER BY id")
    assert csv_cursor(fh, statement) == 2
    assert fh.getvalue() == "id,name\r\n1,alice\r\n2,bob\r\n"
    assert statement.finished


def test_csv_cursor_accepts_a_driver_cursor(db):
    cursor = db.dbh.cursor()
    cursor.execute("SELECT name FROM users WHERE id = 3")
    fh = io.StringIO(newline="")
    assert csv_cursor(fh, cursor) == 1
    assert fh.getvalue() == "name\r\ncarol\r\n"


def test_xml_document(db):
    data = db.sql_array_hash_name("SELECT id, name, note FROM users WHERE id IN (1, 2) ORDER BY id")
    text = xml_array_hash_name(data, comment="Users", uom={"id": "n"})
    assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')

    root = ET.fromstring(text.encode("utf-8"))
    assert root.tag == "document"
    assert root.findtext("head/comment") == "Users"
    columns = root.findall("head/columns/column")
    assert [c.text for c in columns] == ["id", "name", "note"]
    assert columns[0].get("uom") == "n"
    assert columns[1].get("uom") is None
    assert root.findtext("head/counts/rows") == "2"
    assert root.findtext("head/counts/columns") == "3"

    first, second = root.findall("body/rows/row")
    assert first.findtext("name") == "alice"
    assert first.find("note") is None
    assert second.findtext("note") == 'OK, "Already"'


def test_xml_invalid_names_use_field_elements():
    text = xml_array_hash_name([["total count", "xmlish", "ok"], {"total count": 3, "xmlish": 1, "ok": None}])
    row = ET.fromstring(text.encode("utf-8")).find("body/rows/row")
    fields = {f.get("name"): f.text for f in row.findall("field")}
    assert fields == {"total count": "3", "xmlish": "1"}
    assert row.find("ok") is None


def test_xml_formats_dates():
    text = xml_array_hash_name([["day"], {"day": datetime.date(2024, 1, 2)}])
    assert ET.fromstring(text.encode("utf-8")).findtext("body/rows/row/day") == "2024-01-02"


def test_xml_empty_input():
    root = ET.fromstring(xml_array_hash_name([]).encode("utf-8"))
    assert root.findtext("head/counts/rows") == "0"
    assert root.find("head/comment") is None
    assert root.findall("body/rows/row") == []


def test_spreadsheet_tabs(db):
    openpyxl = pytest.importorskip("openpyxl")
    long_name = "A tab name that is far longer than allowed"
    content = xls_array_array_name([
        ("Users", db.sql_array_array_name("SELECT id, name FROM users ORDER BY id")),
        (long_name, [["n"], [1]]),
    ])

    workbook = openpyxl.load_workbook(io.BytesIO(content))
    assert workbook.sheetnames == ["Users", long_name[:31]]
    sheet = workbook["Users"]
    assert sheet["A1"].value == "id"
    assert sheet["A1"].font.bold
    assert not sheet["A2"].font.bold
    assert sheet["B5"].value == "dave"


def test_spreadsheet_requires_openpyxl(monkeypatch):
    monkeypatch.setitem(sys.modules, "openpyxl", None)
    with pytest.raises(MissingDependencyError) as info:
        SpreadsheetWriter()
    assert info.value.package == "openpyxl"
    assert isinstance(info.value, ConfigurationError)
