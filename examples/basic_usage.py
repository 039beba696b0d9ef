#!/usr/bin/env python3
"""
Basic usage examples for dbarray.

Builds a small SQLite database, shapes a few queries and writes the
results out as CSV, XML and (when openpyxl is installed) XLSX.
"""

import logging
import sys

from dbarray import (
    MissingDependencyError,
    connect,
    csv_array_array_name,
    csv_cursor,
    xls_array_array_name,
    xml_array_hash_name,
)
from dbarray.utils.logging import configure_logger

# Configure logging
configure_logger(level=logging.INFO)
logger = logging.getLogger("dbarray.examples")


def load(db):
    db.execute("""
    CREATE TABLE jobs (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        duration INTEGER,
        status TEXT
    )
    """)

    result = db.sql_insert_array_array(
        "INSERT INTO jobs (id, name, duration, status) VALUES (?, ?, ?, ?)",
        [
            (1, "extract", 12, "OK"),
            (2, "transform", 45, None),
            (3, "load", 7, 'OK, "late"'),
            (1, "duplicate", 0, None),
        ],
    )
    logger.info(f"Inserted {result.count} of {result.attempted} rows")
    for failure in result.failures:
        logger.info(f"Row {failure.index} rejected: {failure.message}")
    db.commit()


def shapes(db):
    print("\n===== Shapes =====")
    print("scalar:", db.sql_scalar("SELECT COUNT(*) FROM jobs"))
    print("array:", db.sql_array("SELECT name FROM jobs ORDER BY id"))
    print("hash:", db.sql_hash("SELECT id, name FROM jobs"))
    print("array_hash:", db.sql_array_hash("SELECT * FROM jobs WHERE id = :id", {"id": 2, "page": 1}))
    print("sorted:", db.sql_array_array_name_sort("SELECT name, duration FROM jobs", -2))

    for row in db.iter_array_hash("SELECT name, duration FROM jobs WHERE duration > ?", 10):
        print("long job:", row)


def export(db):
    print("\n===== Export =====")
    print(csv_array_array_name(db.sql_array_array_name("SELECT * FROM jobs ORDER BY id")))
    print(xml_array_hash_name(db.sql_array_hash_name("SELECT * FROM jobs ORDER BY id"),
                              comment="Nightly jobs", uom={"duration": "min"}))

    csv_cursor(sys.stdout, db.sql_cursor("SELECT id, status FROM jobs"))

    try:
        content = xls_array_array_name({"Jobs": db.sql_array_array_name("SELECT * FROM jobs")})
        with open("jobs.xlsx", "wb") as fh:
            fh.write(content)
        print("Wrote jobs.xlsx")
    except MissingDependencyError as e:
        print(e)


def main():
    with connect("sqlite", database=":memory:") as db:
        load(db)
        shapes(db)
        export(db)


if __name__ == "__main__":
    main()
