"""Shared pytest fixtures for fluentQL unit and integration tests."""
from __future__ import annotations

import sqlite3
from collections.abc import Iterator

import pytest

from fluentql import from_
from fluentql.compile.generator import SQLGenerator
from fluentql.compile.paramstyles import QmarkCompiler
from fluentql.query import Query

USERS_DDL = """
CREATE TABLE users (
    id         INTEGER PRIMARY KEY,
    name       TEXT    NOT NULL,
    email      TEXT    NOT NULL,
    age        INTEGER NOT NULL,
    isActive   INTEGER NOT NULL,
    country    TEXT    NOT NULL,
    deletedAt  TEXT
);

CREATE TABLE orders (
    id      INTEGER PRIMARY KEY,
    userId  INTEGER NOT NULL REFERENCES users(id),
    total   REAL    NOT NULL
);
"""

USERS = [
    (1, "Alice", "alice@example.com", 34, 1, "USA", None),
    (2, "Bob", "bob@example.org", 17, 1, "USA", None),
    (3, "Carol", "carol@example.com", 70, 0, "UK", None),
    (4, "Dave", "dave_d@example.com", 25, 1, "UK", "2025-03-01"),
    (5, "Eve", "eve%x@example.net", 41, 1, "FR", None),
    (6, "Alfred", "alfred@example.com", 52, 0, "USA", None),
]

ORDERS = [
    (1, 1, 20.0),
    (2, 1, 35.5),
    (3, 2, 12.0),
    (4, 4, 99.9),
    (5, 5, 5.0),
    (6, 5, 7.5),
    (7, 5, 1.0),
]


@pytest.fixture()
def users() -> Query:
    """Zero-clause descriptor over ``users``."""
    return from_("users")


@pytest.fixture()
def generator() -> SQLGenerator:
    """Generator emitting ``?`` placeholders."""
    return SQLGenerator(QmarkCompiler())


@pytest.fixture()
def db() -> Iterator[sqlite3.Connection]:
    """In-memory SQLite database seeded with users and orders."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.executescript(USERS_DDL)
    conn.executemany("INSERT INTO users VALUES (?,?,?,?,?,?,?)", USERS)
    conn.executemany("INSERT INTO orders VALUES (?,?,?)", ORDERS)
    conn.commit()
    yield conn
    conn.close()
