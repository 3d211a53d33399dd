"""The immutable, chainable query descriptor.

A :class:`Query` starts from a table name and is extended by chained calls.
Every call returns a new descriptor; the receiver is never modified, so a
shared base query can be extended by concurrent callers safely::

    from fluentql import from_

    active = from_("users").where(lambda u: u.is_active == True)
    page = active.order_by(lambda u: u.name).take(10)

    sql, params = page.compile()
    # SELECT * FROM users WHERE is_active = ? ORDER BY name ASC LIMIT 10
    # [True]

Repeated ``where`` / ``select`` / ``group_by`` / ``having`` / ``take`` /
``skip`` calls replace the stored value (last write wins).  Use
:meth:`Query.and_where` / :meth:`Query.or_where` to combine filters.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from fluentql.compile.base import CompiledSQL
from fluentql.compile.builder import QueryBuilder
from fluentql.compile.registry import CompilerFactory
from fluentql.errors import ClauseError
from fluentql.parse.parser import ExpressionParser, Fragment
from fluentql.schema.clauses import JoinClause, OrderByItem
from fluentql.schema.expressions import Direction, JoinKind, LogicalOp
from fluentql.schema.nodes import LogicalNode, Node


class Query(BaseModel):
    """Clause state accumulated prior to compilation.

    Attributes:
        table: Source table name.
        filter_expr: The stored WHERE tree, if any.
        projection: Projected field names; empty means ``*``.
        ordering: ORDER BY entries, primary key first.
        joins: JOIN entries in call order.
        group_key: The single GROUP BY field, if any.
        having_expr: The stored HAVING tree, if any.
        limit: Row limit, if any.
        offset: Row offset, if any.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    table: str
    filter_expr: Node | None = None
    projection: tuple[str, ...] = ()
    ordering: tuple[OrderByItem, ...] = ()
    joins: tuple[JoinClause, ...] = ()
    group_key: str | None = None
    having_expr: Node | None = None
    limit: int | None = None
    offset: int | None = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_(cls, table: str) -> Query:
        """Create the zero-clause descriptor over ``table``.

        Raises:
            ClauseError: If ``table`` is not a non-empty string.
        """
        if not isinstance(table, str) or not table.strip():
            raise ClauseError(f"Table name must be a non-empty string, got {table!r}.", clause="FROM")
        return cls(table=table)

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def where(self, predicate: Fragment) -> Query:
        """Filter rows, replacing any previously stored filter.

        Example::

            query.where(lambda u: (u.age > 18) & (u.is_active == True))
            query.where("age > 18 and is_active == True")
        """
        return self.model_copy(update={"filter_expr": ExpressionParser.parse(predicate)})

    def and_where(self, predicate: Fragment) -> Query:
        """AND ``predicate`` with the stored filter (or set it if none)."""
        return self._combine_filter(LogicalOp.AND, predicate)

    def or_where(self, predicate: Fragment) -> Query:
        """OR ``predicate`` with the stored filter (or set it if none)."""
        return self._combine_filter(LogicalOp.OR, predicate)

    def _combine_filter(self, op: LogicalOp, predicate: Fragment) -> Query:
        node = ExpressionParser.parse(predicate)
        if self.filter_expr is not None:
            node = LogicalNode(operator=op.value, left=self.filter_expr, right=node)
        return self.model_copy(update={"filter_expr": node})

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def select(self, *selector: Fragment) -> Query:
        """Project fields, replacing any previous projection.

        Example::

            query.select(lambda u: (u.name, u.email))
            query.select(lambda u: {"name": u.name, "contact": u.email})
            query.select("name", "email")
        """
        fields = ExpressionParser.parse_selector(*selector)
        return self.model_copy(update={"projection": tuple(fields)})

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def order_by(self, key: Fragment) -> Query:
        """Append an ascending sort key; the first call is the primary key."""
        return self._add_order(key, Direction.ASC)

    def order_by_descending(self, key: Fragment) -> Query:
        """Append a descending sort key."""
        return self._add_order(key, Direction.DESC)

    def _add_order(self, key: Fragment, direction: Direction) -> Query:
        item = OrderByItem(field=ExpressionParser.parse_key(key), direction=direction)
        return self.model_copy(update={"ordering": (*self.ordering, item)})

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def take(self, count: int) -> Query:
        """Set the row limit (``LIMIT``); the last call wins."""
        return self.model_copy(update={"limit": _non_negative(count, "LIMIT")})

    def skip(self, count: int) -> Query:
        """Set the row offset (``OFFSET``); the last call wins."""
        return self.model_copy(update={"offset": _non_negative(count, "OFFSET")})

    def page(self, number: int, size: int) -> Query:
        """Select page ``number`` (1-based) of ``size`` rows."""
        if not _is_int(number) or number < 1:
            raise ClauseError(f"Page number must be an integer >= 1, got {number!r}.", clause="OFFSET")
        if not _is_int(size) or size < 1:
            raise ClauseError(f"Page size must be an integer >= 1, got {size!r}.", clause="LIMIT")
        return self.skip((number - 1) * size).take(size)

    # ------------------------------------------------------------------
    # Joins
    # ------------------------------------------------------------------

    def join(self, table: str, on: str) -> Query:
        """Append an ``INNER JOIN``; ``on`` is raw SQL emitted verbatim.

        Example::

            query.join("profiles", "users.id = profiles.user_id")
        """
        return self._add_join(JoinKind.INNER, table, on)

    def left_join(self, table: str, on: str) -> Query:
        """Append a ``LEFT JOIN``."""
        return self._add_join(JoinKind.LEFT, table, on)

    def right_join(self, table: str, on: str) -> Query:
        """Append a ``RIGHT JOIN``."""
        return self._add_join(JoinKind.RIGHT, table, on)

    def full_join(self, table: str, on: str) -> Query:
        """Append a ``FULL JOIN``."""
        return self._add_join(JoinKind.FULL, table, on)

    def _add_join(self, kind: JoinKind, table: str, on: str) -> Query:
        if not isinstance(table, str) or not table.strip():
            raise ClauseError(f"Join table must be a non-empty string, got {table!r}.", clause="JOIN")
        if not isinstance(on, str) or not on.strip():
            raise ClauseError(f"Join condition must be a non-empty string, got {on!r}.", clause="JOIN")
        clause = JoinClause(kind=kind, table=table, on=on)
        return self.model_copy(update={"joins": (*self.joins, clause)})

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------

    def group_by(self, key: Fragment) -> Query:
        """Group by a single field, replacing any previous grouping."""
        return self.model_copy(update={"group_key": ExpressionParser.parse_key(key)})

    def having(self, predicate: Fragment) -> Query:
        """Filter groups, replacing any previous having predicate.

        Example::

            query.group_by(lambda u: u.country).having(lambda g: g.total > 10)
        """
        return self.model_copy(update={"having_expr": ExpressionParser.parse(predicate)})

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def compile(self, paramstyle: str = "qmark") -> CompiledSQL:
        """Compile to SQL text plus the positional parameter vector.

        Args:
            paramstyle: Registered placeholder style (``'qmark'``,
                ``'format'``, ``'numeric'``).

        Returns:
            :class:`~fluentql.compile.base.CompiledSQL`; unpacks as
            ``sql, params``.

        Raises:
            CompilationError: (or subclass) if a stored tree cannot be
                compiled or ``paramstyle`` is unknown.
        """
        return QueryBuilder(CompilerFactory.create(paramstyle)).build(self)

    to_sql = compile

    def count(self, paramstyle: str = "qmark") -> CompiledSQL:
        """Compile a ``SELECT COUNT(*)`` over the same source and filter.

        Projection, ordering, limit and offset are ignored, so the result
        is the total row count behind a paginated :meth:`compile`.
        """
        return QueryBuilder(CompilerFactory.create(paramstyle)).build_count(self)


def from_(table: str) -> Query:
    """Create a :class:`Query` over ``table``.

    Example::

        from_("users").where(lambda u: u.age > 18).select("name", "email")
    """
    return Query.from_(table)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _non_negative(count: int, clause: str) -> int:
    if not _is_int(count) or count < 0:
        raise ClauseError(f"{clause} must be a non-negative integer, got {count!r}.", clause=clause)
    return count
