"""Placeholder compilers for the positional DB-API paramstyles."""

from __future__ import annotations

from fluentql.compile.base import SQLCompiler


class QmarkCompiler(SQLCompiler):
    """Parameter style: ``?`` – ``sqlite3``, ``pyodbc``, ``duckdb``."""

    @property
    def paramstyle(self) -> str:
        return "qmark"

    def param_placeholder(self, position: int) -> str:
        return "?"


class FormatCompiler(SQLCompiler):
    """Parameter style: ``%s`` – ``psycopg`` / ``psycopg2``, ``mysqlclient``, ``PyMySQL``."""

    @property
    def paramstyle(self) -> str:
        return "format"

    def param_placeholder(self, position: int) -> str:
        return "%s"


class NumericCompiler(SQLCompiler):
    """Parameter style: ``:1``, ``:2`` … numbered across the whole statement."""

    @property
    def paramstyle(self) -> str:
        return "numeric"

    def param_placeholder(self, position: int) -> str:
        return f":{position}"
