"""
Shared fixtures for the dbarray tests.
"""

import sys
import types

import pytest

from dbarray import DBArray, SQLiteArray

from .fakes import FakeConnection


@pytest.fixture
def fake_conn():
    return FakeConnection()


@pytest.fixture
def fake_db(fake_conn):
    return DBArray(dbh=fake_conn)


@pytest.fixture
def fake_oracledb(monkeypatch):
    """Install a fake ``oracledb`` module."""
    module = types.ModuleType("oracledb")
    module.connections = []

    def connect(user=None, password=None, dsn=None):
        conn = FakeConnection()
        conn.params = {"user": user, "password": password, "dsn": dsn}
        module.connections.append(conn)
        return conn

    def makedsn(host, port, service_name=None, sid=None):
        return f"{host}:{port}/{service_name or sid}"

    module.connect = connect
    module.makedsn = makedsn
    module.init_oracle_client = lambda lib_dir=None: None
    monkeypatch.setitem(sys.modules, "oracledb", module)
    return module


@pytest.fixture
def db():
    """In-memory SQLite pipeline with a small users table."""
    database = SQLiteArray(database=":memory:")
    database.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, age INTEGER, note TEXT)")
    database.sql_insert_array_array(
        "INSERT INTO users (id, name, age, note) VALUES (?, ?, ?, ?)",
        [
            (1, "alice", 35, None),
            (2, "bob", 28, 'OK, "Already"'),
            (3, "carol", 41, "line"),
            (4, "dave", 28, None),
        ],
    )
    yield database
    database.disconnect()
