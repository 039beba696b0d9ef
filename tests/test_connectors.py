import sys
import types

import pytest

from dbarray import ConfigurationError, MissingDependencyError, MSSQLArray, MySQLArray, PostgreSQLArray
from dbarray import connect as connect_db

from .fakes import FakeConnection


def fake_driver(monkeypatch, name, paramstyle):
    module = types.ModuleType(name)
    module.paramstyle = paramstyle
    module.calls = []

    def connect(*args, **kwargs):
        module.calls.append((args, kwargs))
        return FakeConnection()

    module.connect = connect
    monkeypatch.setitem(sys.modules, name, module)
    return module


@pytest.fixture
def psycopg2(monkeypatch):
    return fake_driver(monkeypatch, "psycopg2", "pyformat")


@pytest.fixture
def pyodbc(monkeypatch):
    return fake_driver(monkeypatch, "pyodbc", "qmark")


@pytest.fixture
def mysql_connector(monkeypatch):
    connector = fake_driver(monkeypatch, "mysql.connector", "pyformat")
    package = types.ModuleType("mysql")
    package.connector = connector
    monkeypatch.setitem(sys.modules, "mysql", package)
    return connector


def test_postgres_connect(psycopg2):
    db = PostgreSQLArray(db="sales", user="app", password="secret", sslmode=None)
    _, kwargs = psycopg2.calls[0]
    assert kwargs["dbname"] == "sales"
    assert kwargs["application_name"] == "dbarray"
    assert "sslmode" not in kwargs
    assert db.is_connected()


def test_postgres_rewrites_named_binds(psycopg2):
    db = PostgreSQLArray(dbname="sales", user="app", password="secret")
    db.sql_scalar("SELECT :id::text WHERE :id > 0", {"id": 5, "other": 1})
    assert db.dbh.executed[-1] == ("SELECT %(id)s::text WHERE %(id)s > 0", {"id": 5})


def test_postgres_bulk_insert_table_uses_format_markers(psycopg2):
    db = PostgreSQLArray(dbname="sales", user="app", password="secret")
    db.bulk_insert_table("public.users", [["id", "name"], [1, "a"]])
    assert db.dbh.executed[-1] == ('INSERT INTO "public"."users" ("id", "name") VALUES (%s, %s)', [1, "a"])


def test_postgres_requires_credentials(psycopg2):
    with pytest.raises(ConfigurationError):
        PostgreSQLArray(dbname="sales", user="app")


def test_postgres_missing_driver(monkeypatch):
    monkeypatch.setitem(sys.modules, "psycopg2", None)
    with pytest.raises(MissingDependencyError) as info:
        PostgreSQLArray(dbname="sales", user="app", password="secret")
    assert info.value.package == "psycopg2-binary"


def test_mssql_connection_string(pyodbc):
    MSSQLArray(server="sql1", database="erp", uid="sa", pwd="pw", encrypt=False)
    args, kwargs = pyodbc.calls[0]
    parts = args[0].split(";")
    assert "SERVER=sql1,1433" in parts
    assert "UID=sa" in parts and "PWD=pw" in parts
    assert "Encrypt=no" in parts
    assert kwargs == {"timeout": 15}


def test_mssql_trusted_connection(pyodbc):
    MSSQLArray(database="erp", trusted_connection=True)
    assert "Trusted_Connection=yes" in pyodbc.calls[0][0][0]


def test_mssql_named_binds_and_identifiers(pyodbc):
    db = MSSQLArray(database="erp", user="sa", password="pw")
    db.sql_array("SELECT * FROM t WHERE b = :b AND a = :a", {"a": 1, "b": 2})
    assert db.dbh.executed[-1] == ("SELECT * FROM t WHERE b = ? AND a = ?", [2, 1])

    db.bulk_insert_table("dbo.users", [["id"], [1]])
    assert db.dbh.executed[-1][0] == "INSERT INTO [dbo].[users] ([id]) VALUES (?)"


def test_mysql_connect(mysql_connector):
    db = MySQLArray(database="shop", user="app", password="pw")
    _, kwargs = mysql_connector.calls[0]
    assert kwargs["database"] == "shop"
    assert kwargs["charset"] == "utf8mb4"
    assert kwargs["connection_timeout"] == 10
    assert db.quote_char == "`"


def test_mysql_requires_credentials(mysql_connector):
    with pytest.raises(ConfigurationError):
        MySQLArray(database="shop", user="app")


def test_mariadb_driver(monkeypatch, mysql_connector):
    mariadb = fake_driver(monkeypatch, "mariadb", "qmark")
    db = connect_db("mariadb", db="shop", user="app", passwd="pw")
    assert db.db_module is mariadb
    assert db.paramstyle == "qmark"
    assert mariadb.calls[0][1]["connect_timeout"] == 10

    db.sql_array("SELECT :a", {"a": 1})
    assert db.dbh.executed[-1] == ("SELECT ?", [1])


def test_mariadb_falls_back_to_mysql_connector(monkeypatch, mysql_connector):
    monkeypatch.setitem(sys.modules, "mariadb", None)
    db = connect_db("mariadb", db="shop", user="app", passwd="pw")
    assert db.db_module is mysql_connector
    assert db.paramstyle == "pyformat"


def test_percona_uses_mysql_connector(mysql_connector):
    db = connect_db("percona", db="shop", user="app", passwd="pw")
    assert db.conf["db_variant"] == "percona"
    assert db.db_module is mysql_connector


def test_unknown_mysql_variant(mysql_connector):
    with pytest.raises(ConfigurationError):
        MySQLArray(db="shop", user="app", passwd="pw", db_variant="tidb")
