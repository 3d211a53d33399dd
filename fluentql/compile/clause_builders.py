"""Clause-level SQL builders.

Each class handles exactly one SQL clause.  ``PredicateClauseBuilder``
receives the :class:`RuntimeContext` of the current compile run, so the
WHERE and HAVING parameters land in one vector in emission order.

Classes
-------
SelectClauseBuilder    : ``SELECT <projection | *>``
JoinClauseBuilder      : ``<kind> JOIN <table> ON <raw condition>``
PredicateClauseBuilder : ``WHERE …`` / ``HAVING …``
OrderByClauseBuilder   : ``ORDER BY <field> ASC|DESC, …``
PaginationClauseBuilder: ``LIMIT n`` / ``OFFSET n``
"""
from __future__ import annotations

from collections.abc import Sequence

from fluentql.compile.base import SQLCompiler
from fluentql.compile.generator import RuntimeContext, SQLGenerator
from fluentql.schema.clauses import JoinClause, OrderByItem
from fluentql.schema.nodes import Node


class SelectClauseBuilder:
    """Builds the ``SELECT …`` clause."""

    def build(self, projection: Sequence[str]) -> str:
        if not projection:
            return "SELECT *"
        return f"SELECT {', '.join(projection)}"


class JoinClauseBuilder:
    """Builds a single ``JOIN … ON …`` fragment; the condition is verbatim."""

    def build(self, join: JoinClause) -> str:
        return f"{join.kind.value} JOIN {join.table} ON {join.on}"


class PredicateClauseBuilder:
    """Builds a ``WHERE`` or ``HAVING`` clause from one expression tree.

    Args:
        compiler: Placeholder strategy.
        runtime: Parameter accumulator of the current compile run.
        keyword: ``'WHERE'`` or ``'HAVING'``.
    """

    def __init__(self, compiler: SQLCompiler, runtime: RuntimeContext, keyword: str) -> None:
        self._generator = SQLGenerator(compiler, clause=keyword)
        self._runtime = runtime
        self._keyword = keyword

    def build(self, node: Node) -> str:
        return f"{self._keyword} {self._generator.generate(node, self._runtime)}"


class OrderByClauseBuilder:
    """Builds ``ORDER BY``; entries keep their call order."""

    def build(self, items: Sequence[OrderByItem]) -> str:
        parts = [f"{item.field} {item.direction.value}" for item in items]
        return f"ORDER BY {', '.join(parts)}"


class PaginationClauseBuilder:
    """Builds ``LIMIT`` and ``OFFSET``, always in that order."""

    def build(self, limit: int | None, offset: int | None) -> list[str]:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset is not None:
            parts.append(f"OFFSET {offset}")
        return parts
