"""Expression-tree → SQL fragment generator.

``SQLGenerator`` post-order traverses one expression tree.  Literal values
are pushed onto a :class:`RuntimeContext` and replaced by placeholders, so
no literal data ever reaches the SQL text.

The runtime context is never stored on the generator.  Each
:meth:`SQLGenerator.generate` call either receives one from its caller (the
``QueryBuilder`` threads a single context through the WHERE and HAVING
clauses of one compile run) or allocates a fresh one, so one generator
instance can serve concurrent callers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fluentql.compile.base import SQLCompiler
from fluentql.errors import CompilationError, UnsupportedCallError, UnsupportedOperatorError
from fluentql.schema.expressions import (
    COMPARISON_SQL,
    LIKE_ESCAPE,
    LOGICAL_SQL,
    MEMBERSHIP_CALLS,
    PATTERN_CALLS,
    UNARY_SQL,
    CallName,
    escape_like,
)
from fluentql.schema.nodes import (
    BinaryNode,
    CallNode,
    LiteralNode,
    LogicalNode,
    MemberNode,
    Node,
    UnaryNode,
)


# ---------------------------------------------------------------------------
# Parameter accumulator (one per compile run)
# ---------------------------------------------------------------------------


@dataclass
class RuntimeContext:
    """Accumulates positional parameters during a single compilation run."""

    params: list[Any] = field(default_factory=list)

    def add_value(self, value: Any) -> int:
        """Store a literal value and return its 1-based position."""
        self.params.append(value)
        return len(self.params)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class SQLGenerator:
    """Compiles expression nodes to SQL fragments.

    Args:
        compiler: Placeholder strategy for bound literals.
        clause: Clause name reported on errors (``'WHERE'``, ``'HAVING'``).
    """

    def __init__(self, compiler: SQLCompiler, clause: str | None = None) -> None:
        self._compiler = compiler
        self._clause = clause

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, node: Node, runtime: RuntimeContext | None = None) -> str:
        """Compile ``node`` to an SQL fragment.

        Args:
            node: Root of the expression tree.
            runtime: Parameter accumulator to append to.  A fresh one is
                used when omitted.

        Returns:
            The SQL fragment.

        Raises:
            UnsupportedOperatorError: If a node's operator has no SQL mapping.
            UnsupportedCallError: If a call is outside the fixed vocabulary.
            CompilationError: If the tree is too deep to traverse.
        """
        if runtime is None:
            runtime = RuntimeContext()
        try:
            return self._visit(node, runtime)
        except RecursionError as exc:
            raise CompilationError("Expression tree is nested too deeply.", clause=self._clause) from exc

    def generate_with_params(self, node: Node) -> tuple[str, list[Any]]:
        """Compile ``node`` with a fresh accumulator; return SQL and params."""
        runtime = RuntimeContext()
        sql = self.generate(node, runtime)
        return sql, runtime.params

    # ------------------------------------------------------------------
    # Node dispatch
    # ------------------------------------------------------------------

    def _visit(self, node: Node, runtime: RuntimeContext) -> str:
        if isinstance(node, MemberNode):
            return node.name
        if isinstance(node, LiteralNode):
            return self._bind(node.value, runtime)
        if isinstance(node, BinaryNode):
            return self._visit_binary(node, runtime)
        if isinstance(node, LogicalNode):
            return self._visit_logical(node, runtime)
        if isinstance(node, UnaryNode):
            return self._visit_unary(node, runtime)
        if isinstance(node, CallNode):
            return self._visit_call(node, runtime)
        raise CompilationError(
            f"Unknown expression node: {type(node).__name__}", clause=self._clause
        )

    def _bind(self, value: Any, runtime: RuntimeContext) -> str:
        position = runtime.add_value(value)
        return self._compiler.param_placeholder(position)

    def _visit_binary(self, node: BinaryNode, runtime: RuntimeContext) -> str:
        sql_op = COMPARISON_SQL.get(node.operator)
        if sql_op is None:
            raise UnsupportedOperatorError(node.operator, clause=self._clause)
        left = self._visit(node.left, runtime)
        right = self._visit(node.right, runtime)
        return f"{left} {sql_op} {right}"

    def _visit_logical(self, node: LogicalNode, runtime: RuntimeContext) -> str:
        sql_op = LOGICAL_SQL.get(node.operator)
        if sql_op is None:
            raise UnsupportedOperatorError(node.operator, clause=self._clause)
        left = self._visit(node.left, runtime)
        right = self._visit(node.right, runtime)
        return f"({left} {sql_op} {right})"

    def _visit_unary(self, node: UnaryNode, runtime: RuntimeContext) -> str:
        sql_op = UNARY_SQL.get(node.operator)
        if sql_op is None:
            raise UnsupportedOperatorError(node.operator, clause=self._clause)
        return f"{sql_op} {self._visit(node.operand, runtime)}"

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def _visit_call(self, node: CallNode, runtime: RuntimeContext) -> str:
        if node.callee in MEMBERSHIP_CALLS:
            return self._visit_membership(node, runtime)
        if node.callee in PATTERN_CALLS:
            return self._visit_pattern(node, runtime)
        raise UnsupportedCallError(node.callee, clause=self._clause)

    def _visit_membership(self, node: CallNode, runtime: RuntimeContext) -> str:
        if len(node.arguments) < 2:
            raise CompilationError(
                f"{node.callee}() needs a field and at least one value.", clause=self._clause
            )
        receiver = self._visit(node.arguments[0], runtime)
        values = ", ".join(self._visit(arg, runtime) for arg in node.arguments[1:])
        return f"{receiver} IN ({values})"

    def _visit_pattern(self, node: CallNode, runtime: RuntimeContext) -> str:
        if len(node.arguments) != 2:
            raise CompilationError(
                f"{node.callee}() needs a field and one search term.", clause=self._clause
            )
        receiver, term = node.arguments
        if not (isinstance(term, LiteralNode) and isinstance(term.value, str)):
            raise CompilationError(
                f"{node.callee}() search term must be a string literal.", clause=self._clause
            )
        escaped = escape_like(term.value)
        pattern = f"{escaped}%" if node.callee == CallName.STARTSWITH.value else f"%{escaped}"
        receiver_sql = self._visit(receiver, runtime)
        placeholder = self._bind(pattern, runtime)
        return f"{receiver_sql} LIKE {placeholder} ESCAPE '{LIKE_ESCAPE}'"
