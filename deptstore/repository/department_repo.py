from __future__ import annotations

from sqlite3 import Connection
from typing import Iterator


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS department (
            code INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            location TEXT NOT NULL
        )
        """
    )


def insert(conn: Connection, name: str, location: str) -> int:
    cur = conn.execute(
        "INSERT INTO department(name, location) VALUES(?, ?)",
        (name, location),
    )
    return int(cur.lastrowid)


def iter_all(conn: Connection) -> Iterator:
    # cursor iteration keeps this lazy
    yield from conn.execute("SELECT code, name, location FROM department ORDER BY code")


def get_one(conn: Connection, code: int):
    return conn.execute(
        "SELECT code, name, location FROM department WHERE code=?",
        (code,),
    ).fetchone()


def update(conn: Connection, code: int, name: str, location: str) -> int:
    cur = conn.execute(
        "UPDATE department SET name=?, location=? WHERE code=?",
        (name, location, code),
    )
    return cur.rowcount


def delete(conn: Connection, code: int) -> int:
    cur = conn.execute("DELETE FROM department WHERE code=?", (code,))
    return cur.rowcount


def count_all(conn: Connection) -> int:
    return int(conn.execute("SELECT COUNT(1) AS c FROM department").fetchone()["c"])
