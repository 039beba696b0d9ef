import pytest

from dbarray import DBArray, SQLiteArray, TaggedRecord, UsageError


def test_sql_scalar(db):
    assert db.sql_scalar("SELECT COUNT(*) FROM users") == 4
    assert db.sql_scalar("SELECT name FROM users WHERE id = ?", 3) == "carol"


def test_sql_scalar_no_rows(db):
    assert db.sql_scalar("SELECT name FROM users WHERE id = ?", 99) is None


def test_sql_array_is_row_major(db):
    assert db.sql_array("SELECT id, name FROM users WHERE id <= 2 ORDER BY id") == [1, "alice", 2, "bob"]


def test_sql_array_single_column(db):
    assert db.sql_array("SELECT name FROM users ORDER BY id") == ["alice", "bob", "carol", "dave"]


def test_sql_hash_uses_first_two_columns(db):
    result = db.sql_hash("SELECT id, name, age FROM users")
    assert result == {1: "alice", 2: "bob", 3: "carol", 4: "dave"}


def test_sql_hash_last_duplicate_wins(db):
    assert db.sql_hash("SELECT age, name FROM users ORDER BY id") == {35: "alice", 28: "dave", 41: "carol"}


def test_iter_hash_keeps_order_and_duplicates(db):
    pairs = list(db.iter_hash("SELECT age, name FROM users ORDER BY id"))
    assert pairs == [(35, "alice"), (28, "bob"), (41, "carol"), (28, "dave")]


def test_iter_hash_single_column(db):
    assert list(db.iter_hash("SELECT name FROM users WHERE id = 1")) == [("alice", None)]


def test_sql_array_array(db):
    rows = db.sql_array_array("SELECT id, name FROM users WHERE age = ? ORDER BY id", 28)
    assert rows == [[2, "bob"], [4, "dave"]]


def test_sql_array_array_name(db):
    rows = db.sql_array_array_name("SELECT id, name FROM users WHERE age = ? ORDER BY id", 28)
    assert rows == [["id", "name"], [2, "bob"], [4, "dave"]]


def test_sql_array_hash(db):
    rows = db.sql_array_hash("SELECT id, name FROM users WHERE id IN (1, 2) ORDER BY id")
    assert rows == [{"id": 1, "name": "alice"}, {"id": 2, "name": "bob"}]


def test_sql_array_hash_name(db):
    rows = db.sql_array_hash_name("SELECT id, note FROM users WHERE id = 1")
    assert rows == [["id", "note"], {"id": 1, "note": None}]


@pytest.mark.parametrize("method, expected", [
    ("sql_array", []),
    ("sql_array_array", []),
    ("sql_array_hash", []),
    ("sql_array_array_name", [["id", "name"]]),
    ("sql_array_hash_name", [["id", "name"]]),
])
def test_zero_rows_return_only_the_header(db, method, expected):
    assert getattr(db, method)("SELECT id, name FROM users WHERE id > ?", 100) == expected


def test_zero_rows_hash(db):
    assert db.sql_hash("SELECT id, name FROM users WHERE 1 = 0") == {}


@pytest.mark.parametrize("aggregate, sequence", [
    ("sql_array", "iter_array"),
    ("sql_array_array", "iter_array_array"),
    ("sql_array_array_name", "iter_array_array_name"),
    ("sql_array_hash", "iter_array_hash"),
    ("sql_array_hash_name", "iter_array_hash_name"),
])
def test_sequence_twins_yield_the_aggregate_elements(db, aggregate, sequence):
    sql = "SELECT id, name, age FROM users ORDER BY id"
    assert list(getattr(db, sequence)(sql)) == getattr(db, aggregate)(sql)


def test_sql_array_object_tags_records(db):
    class User:
        def __init__(self, id, name):
            self.id = id
            self.name = name

    records = db.sql_array_object(User, "SELECT id, name FROM users WHERE id = ?", 2)
    assert records == [TaggedRecord(User, {"id": 2, "name": "bob"})]
    assert records[0]["name"] == "bob"

    user = records[0].build()
    assert isinstance(user, User)
    assert (user.id, user.name) == (2, "bob")


def test_tagged_record_build_prefers_from_record():
    class Point:
        @classmethod
        def from_record(cls, fields):
            point = cls()
            point.xy = (fields["x"], fields["y"])
            return point

    assert TaggedRecord(Point, {"x": 1, "y": 2}).build().xy == (1, 2)


def test_tagged_record_opaque_tag(db):
    records = db.sql_array_object("user", "SELECT id FROM users WHERE id = 1")
    assert records[0].tag == "user"


def test_sql_array_object_requires_tag(db):
    with pytest.raises(UsageError):
        db.sql_array_object(None, "SELECT id FROM users")


def test_name_case_lower():
    db = SQLiteArray(database=":memory:", name_case="lower")
    assert db.sql_array_hash_name("SELECT 1 AS Foo") == [["foo"], {"foo": 1}]


def test_name_case_upper(fake_conn):
    fake_conn.handler = lambda conn, sql, params: (["one"], [(1,)])
    db = DBArray(dbh=fake_conn, name_case="upper")
    assert db.sql_array_array_name("SELECT 1 AS one FROM dual") == [["ONE"], [1]]


def test_generator_close_finishes_statement(db):
    sql = "SELECT id FROM users ORDER BY id"
    rows = db.iter_array_array(sql)
    assert next(rows) == [1]
    statement = db.statement_cache.get(sql)
    assert statement.finished is False

    rows.close()
    assert statement.finished is True


def test_uncached_statement_closes_cursor_after_drain(fake_conn):
    db = DBArray(dbh=fake_conn, statement_cache=False)
    assert db.sql_array("SELECT 1 FROM dual") == [1]
    assert fake_conn.cursors[-1].closed is True


def test_same_sql_while_draining_uses_a_second_statement(db):
    sql = "SELECT id FROM users ORDER BY id"
    outer = db.iter_array(sql)
    assert next(outer) == 1
    assert db.sql_array(sql) == [1, 2, 3, 4]
    assert list(outer) == [2, 3, 4]


def test_sql_cursor_returns_executed_statement(db):
    statement = db.sql_cursor("SELECT id, name FROM users WHERE id = ?", 1)
    try:
        assert statement.column_names == ["id", "name"]
        assert list(statement) == [(1, "alice")]
    finally:
        statement.finish()


def test_sort_helper_orders_by_column(db):
    rows = db.sql_array_array_name_sort("SELECT id, name FROM users", -2)
    assert rows[0] == ["id", "name"]
    assert [r[1] for r in rows[1:]] == ["dave", "carol", "bob", "alice"]

    rows = db.sql_array_array_name_sort("SELECT id, name FROM users WHERE age = ?", 1, 28)
    assert rows == [["id", "name"], [2, "bob"], [4, "dave"]]


def test_scalar_releases_unread_rows(db):
    db.execute("CREATE TABLE scratch (id INTEGER)")
    db.sql_insert_array_array("INSERT INTO scratch VALUES (?)", [[1], [2], [3]])
    db.commit()

    assert db.sql_scalar("SELECT id FROM scratch ORDER BY id") == 1
    db.execute("DROP TABLE scratch")
    assert db.sql_scalar("SELECT COUNT(*) FROM sqlite_master WHERE name = 'scratch'") == 0


def test_closed_generator_releases_unread_rows(db):
    db.execute("CREATE TABLE scratch (id INTEGER)")
    db.sql_insert_array_array("INSERT INTO scratch VALUES (?)", [[1], [2], [3]])
    db.commit()

    rows = db.iter_array("SELECT id FROM scratch ORDER BY id")
    assert next(rows) == 1
    rows.close()
    db.execute("DROP TABLE scratch")


def test_finish_drains_cached_cursor_once(fake_conn, fake_db):
    fake_conn.handler = lambda conn, sql, params: (["N"], [(1,), (2,), (3,)])
    assert fake_db.sql_scalar("SELECT n FROM t") == 1
    cursor = fake_conn.cursors[0]
    assert cursor.drained == 1

    assert fake_db.sql_array("SELECT n FROM t") == [1, 2, 3]
    assert cursor.drained == 1
