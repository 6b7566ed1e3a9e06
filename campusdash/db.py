# campusdash/db.py

from __future__ import annotations

import re
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from .schema import CREATE_TABLES_SQL, SCHEMA_VERSION

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _ident(name: str) -> str:
    # table/column names are interpolated, values never are
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def _connect(db_path: Union[Path, str]) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), timeout=30)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@dataclass
class Database:
    _conn: sqlite3.Connection
    _depth: int = field(default=0, repr=False)

    @classmethod
    def open(cls, db_path: Union[Path, str]) -> "Database":
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return cls(_connect(db_path))

    @classmethod
    def in_memory(cls) -> "Database":
        return cls.open(":memory:")

    def close(self) -> None:
        self._conn.close()

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """
        All-or-nothing block. Nested blocks join the outermost one, so only
        the outermost commit/rollback touches the connection.
        """
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self._conn.rollback()
            raise
        else:
            self._depth -= 1
            if self._depth == 0:
                self._conn.commit()

    def _autocommit(self) -> None:
        if self._depth == 0:
            self._conn.commit()

    def execute(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        cur = self._conn.execute(sql, tuple(params))
        self._autocommit()
        return cur

    def query_all(self, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
        cur = self._conn.execute(sql, tuple(params))
        return cur.fetchall()

    def query_one(self, sql: str, params: Iterable[Any] = ()) -> Optional[sqlite3.Row]:
        cur = self._conn.execute(sql, tuple(params))
        return cur.fetchone()

    # ---------- Table helpers ----------
    def _write_row(self, verb: str, table: str, row: Mapping[str, Any]) -> sqlite3.Cursor:
        cols = [_ident(c) for c in row.keys()]
        placeholders = ", ".join("?" for _ in cols)
        sql = f"{verb} INTO {_ident(table)}({', '.join(cols)}) VALUES({placeholders});"
        return self.execute(sql, row.values())

    def insert(self, table: str, row: Mapping[str, Any]) -> None:
        self._write_row("INSERT", table, row)

    def insert_if_absent(self, table: str, row: Mapping[str, Any]) -> bool:
        """Returns True when the row was written, False when the key already existed."""
        cur = self._write_row("INSERT OR IGNORE", table, row)
        return cur.rowcount == 1

    def upsert(self, table: str, row: Mapping[str, Any]) -> None:
        self._write_row("INSERT OR REPLACE", table, row)

    def get(self, table: str, key: str, value: Any) -> Optional[sqlite3.Row]:
        return self.query_one(
            f"SELECT * FROM {_ident(table)} WHERE {_ident(key)} = ? LIMIT 1;",
            (value,),
        )

    def all(self, table: str, where: Optional[tuple[str, Any]] = None) -> list[sqlite3.Row]:
        if where is None:
            return self.query_all(f"SELECT * FROM {_ident(table)};")
        column, value = where
        return self.query_all(
            f"SELECT * FROM {_ident(table)} WHERE {_ident(column)} = ?;",
            (value,),
        )

    def count(self, table: str) -> int:
        row = self.query_one(f"SELECT COUNT(*) AS n FROM {_ident(table)};")
        return int(row["n"]) if row else 0


def init_db(db: Database) -> None:
    # Create tables
    with db.transaction():
        for stmt in CREATE_TABLES_SQL:
            db.execute(stmt)

    # Store schema version
    existing = db.get("meta", "key", "schema_version")
    if existing is None:
        db.insert("meta", {"key": "schema_version", "value": str(SCHEMA_VERSION)})
