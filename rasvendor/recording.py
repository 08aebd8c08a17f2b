"""SQLite recording of vendor-specific error records."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Union

log = logging.getLogger(__name__)

Value = Union[int, str, None]

_SEVERITY_NAMES = {
    0: "recoverable",
    1: "fatal",
    2: "corrected",
    3: "none",
}

_INT64_LIMIT = 1 << 63
_UINT64_SPAN = 1 << 64


def err_severity(code: int) -> str:
    """Return the textual name of a vendor error severity code."""
    return _SEVERITY_NAMES.get(code, "unknown")


@dataclass(frozen=True)
class TableSpec:
    """A vendor table: its name and its (column, SQL type) pairs.

    The first column is the row identifier; values are bound by the
    position of their column, starting from 1 for the second column.
    """

    name: str
    fields: tuple[tuple[str, str], ...]

    @property
    def columns(self) -> list[str]:
        return [name for name, _ in self.fields]

    def create(self, connection: sqlite3.Connection) -> "VendorRecord":
        """Create the table if needed and return a record writer for it."""
        definition = ", ".join(f"{name} {kind}" for name, kind in self.fields)
        connection.execute(f"CREATE TABLE IF NOT EXISTS {self.name} ({definition})")
        connection.commit()
        return VendorRecord(connection, self)


class VendorRecord:
    """Collects values for one row of a vendor table and inserts them."""

    def __init__(self, connection: sqlite3.Connection, table: TableSpec) -> None:
        self.connection = connection
        self.table = table
        self._values: dict[int, Value] = {}
        columns = table.columns[1:]
        placeholders = ", ".join(["?"] * len(columns))
        self._insert = (
            f"INSERT INTO {table.name} ({', '.join(columns)}) VALUES ({placeholders})"
        )

    def bind(self, index: int, value: Value) -> None:
        """Set the value of the column at ``index`` for the next row."""
        if not 1 <= index < len(self.table.fields):
            raise IndexError(f"column index {index} out of range for {self.table.name}")
        if isinstance(value, int) and value >= _INT64_LIMIT:
            value -= _UINT64_SPAN
        self._values[index] = value

    def step(self, name: str) -> bool:
        """Insert the bound row, then clear the bindings.

        Failures are logged; the return value tells whether the row was stored.
        """
        row = [self._values.get(index) for index in range(1, len(self.table.fields))]
        try:
            self.connection.execute(self._insert, row)
            self.connection.commit()
            stored = True
        except sqlite3.Error as exc:
            log.error("Failed to do %s step on sqlite: error = %s", name, exc)
            stored = False
        self.clear()
        return stored

    def clear(self) -> None:
        """Drop every bound value."""
        self._values.clear()