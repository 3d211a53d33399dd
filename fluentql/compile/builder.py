"""Core Query → SQL compilation logic.

``QueryBuilder`` is the top-level orchestrator.  It wires together the
clause-level sub-builders and drives the assembly.  Placeholder spelling is
delegated to the injected ``SQLCompiler``.

Sub-builder hierarchy
---------------------
QueryBuilder
  ├── SelectClauseBuilder      (clause_builders.py)
  ├── JoinClauseBuilder        (clause_builders.py)
  ├── PredicateClauseBuilder   (clause_builders.py, WHERE and HAVING)
  ├── OrderByClauseBuilder     (clause_builders.py)
  └── PaginationClauseBuilder  (clause_builders.py)

Runtime context sharing
-----------------------
A single :class:`~fluentql.compile.generator.RuntimeContext` is created per
``build()`` call and shared by the WHERE and HAVING builders, so the
parameter vector is the filter parameters followed by the having
parameters, and numbered placeholders count across both.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fluentql.compile.base import CompiledSQL, SQLCompiler
from fluentql.compile.clause_builders import (
    JoinClauseBuilder,
    OrderByClauseBuilder,
    PaginationClauseBuilder,
    PredicateClauseBuilder,
    SelectClauseBuilder,
)
from fluentql.compile.generator import RuntimeContext

if TYPE_CHECKING:
    from fluentql.query import Query

logger = logging.getLogger(__name__)


class QueryBuilder:
    """Compiles a :class:`~fluentql.query.Query` to parameterized SQL.

    Args:
        compiler: Placeholder strategy instance.
    """

    def __init__(self, compiler: SQLCompiler) -> None:
        self._compiler = compiler

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, query: Query) -> CompiledSQL:
        """Compile ``query`` to a SELECT statement.

        Clause order is fixed: projection, source, joins, filter, group-by,
        having, order-by, limit, offset.  Absent clauses are omitted.

        Raises:
            CompilationError: (or subclass) if a stored tree cannot be
                compiled.  Nothing is returned in that case.
        """
        runtime = RuntimeContext()
        parts = [SelectClauseBuilder().build(query.projection)]
        parts.extend(self._build_body(query, runtime))

        if query.ordering:
            parts.append(OrderByClauseBuilder().build(query.ordering))

        parts.extend(PaginationClauseBuilder().build(query.limit, query.offset))

        return self._finish(parts, runtime)

    def build_count(self, query: Query) -> CompiledSQL:
        """Compile ``query`` to a ``SELECT COUNT(*)`` statement.

        Projection, ordering, limit and offset are ignored; the filter,
        joins, grouping and having clauses are kept.
        """
        runtime = RuntimeContext()
        parts = ["SELECT COUNT(*)"]
        parts.extend(self._build_body(query, runtime))
        return self._finish(parts, runtime)

    # ------------------------------------------------------------------
    # Shared clauses (FROM … HAVING)
    # ------------------------------------------------------------------

    def _build_body(self, query: Query, runtime: RuntimeContext) -> list[str]:
        parts = [f"FROM {query.table}"]

        join_builder = JoinClauseBuilder()
        for join in query.joins:
            parts.append(join_builder.build(join))

        if query.filter_expr is not None:
            parts.append(PredicateClauseBuilder(self._compiler, runtime, "WHERE").build(query.filter_expr))

        if query.group_key is not None:
            parts.append(f"GROUP BY {query.group_key}")

        if query.having_expr is not None:
            parts.append(PredicateClauseBuilder(self._compiler, runtime, "HAVING").build(query.having_expr))

        return parts

    def _finish(self, parts: list[str], runtime: RuntimeContext) -> CompiledSQL:
        sql = " ".join(parts)
        logger.debug("Compiled %s with %d bound parameter(s)", sql, len(runtime.params))
        return CompiledSQL(
            sql=sql,
            params=runtime.params,
            paramstyle=self._compiler.paramstyle,
        )
