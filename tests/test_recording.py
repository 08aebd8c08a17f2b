import sqlite3

import pytest

from rasvendor.recording import TableSpec, err_severity

SPEC = TableSpec(
    "sample_event",
    (
        ("id", "INTEGER PRIMARY KEY"),
        ("timestamp", "TEXT"),
        ("value", "INTEGER"),
        ("note", "TEXT"),
    ),
)


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


def rows(conn):
    return conn.execute("SELECT timestamp, value, note FROM sample_event ORDER BY id").fetchall()


@pytest.mark.parametrize(
    "code, name",
    [(0, "recoverable"), (1, "fatal"), (2, "corrected"), (3, "none"), (4, "unknown"), (255, "unknown")],
)
def test_err_severity(code, name):
    assert err_severity(code) == name


def test_create_makes_columns(connection):
    SPEC.create(connection)
    columns = [row[1] for row in connection.execute("PRAGMA table_info(sample_event)")]
    assert columns == SPEC.columns


def test_create_is_idempotent(connection):
    SPEC.create(connection)
    record = SPEC.create(connection)
    record.bind(1, "t")
    assert record.step("sample") is True
    assert len(rows(connection)) == 1


def test_bind_and_step_inserts_row(connection):
    record = SPEC.create(connection)
    record.bind(1, "ts")
    record.bind(2, 42)
    record.bind(3, "hello")
    assert record.step("sample") is True
    assert rows(connection) == [("ts", 42, "hello")]


def test_step_clears_bindings(connection):
    record = SPEC.create(connection)
    record.bind(2, 7)
    record.step("sample")
    record.step("sample")
    assert rows(connection) == [(None, 7, None), (None, None, None)]


def test_clear_drops_values(connection):
    record = SPEC.create(connection)
    record.bind(1, "ts")
    record.clear()
    record.step("sample")
    assert rows(connection) == [(None, None, None)]


@pytest.mark.parametrize("index", [0, 4, -1])
def test_bind_out_of_range(connection, index):
    record = SPEC.create(connection)
    with pytest.raises(IndexError):
        record.bind(index, 1)


def test_unsigned_64_bit_value_wraps(connection):
    record = SPEC.create(connection)
    record.bind(2, (1 << 64) - 1)
    record.step("sample")
    assert rows(connection)[0][1] == -1


def test_step_failure_returns_false(connection):
    record = SPEC.create(connection)
    connection.execute("DROP TABLE sample_event")
    record.bind(1, "ts")
    assert record.step("sample") is False
    SPEC.create(connection)
    record.step("sample")
    assert rows(connection) == [(None, None, None)]