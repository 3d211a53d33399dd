"""Recording proxies for callable fragments.

A callable fragment such as ``lambda u: (u.age > 18) & (u.is_active == True)``
is called once with a :class:`Record`.  Attribute and item access on the
record yield :class:`FieldRef` objects, and their overloaded operators build
expression nodes instead of evaluating anything::

    pred = (lambda u: u.age > 18)(Record())
    # pred.node == BinaryNode(operator=">", left=MemberNode(name="age"),
    #                         right=LiteralNode(value=18))

Python's ``and`` / ``or`` / ``not``, chained comparisons and conditional
expressions all ask a proxy for its truth value.  That cannot be recorded,
so :meth:`Expr.__bool__` raises :class:`~fluentql.errors.ParseError`; use
``&``, ``|`` and ``~`` instead.
"""
from __future__ import annotations

from typing import Any

from fluentql.errors import ParseError
from fluentql.schema.expressions import (
    LITERAL_TYPES,
    CallName,
    ComparisonOp,
    LogicalOp,
    UnaryOp,
)
from fluentql.schema.nodes import (
    NODE_TYPES,
    BinaryNode,
    CallNode,
    LiteralNode,
    LogicalNode,
    MemberNode,
    Node,
    UnaryNode,
)


def to_node(value: Any) -> Node:
    """Convert a proxy, node, or plain Python value to an expression node.

    Raises:
        ParseError: If ``value`` is not a supported literal type.
    """
    if isinstance(value, Expr):
        return value.node
    if isinstance(value, NODE_TYPES):
        return value  # type: ignore[return-value]
    if isinstance(value, Record):
        raise ParseError("The record itself is not a value; access one of its fields.")
    if not isinstance(value, LITERAL_TYPES):
        raise ParseError(
            f"Unsupported literal of type {type(value).__name__}: {value!r}. "
            "Literals must be str, int, float, bool or None."
        )
    return LiteralNode(value=value)


class Expr:
    """Wraps a node built inside a callable fragment."""

    __slots__ = ("node",)

    def __init__(self, node: Node) -> None:
        self.node = node

    # Python sets __hash__ to None when __eq__ is overridden; keep it that way.
    __hash__ = None  # type: ignore[assignment]

    # ------------------------------------------------------------------
    # Comparisons
    # ------------------------------------------------------------------

    def _compare(self, op: ComparisonOp, other: Any) -> Expr:
        return Expr(BinaryNode(operator=op.value, left=self.node, right=to_node(other)))

    def __eq__(self, other: Any) -> Expr:  # type: ignore[override]
        return self._compare(ComparisonOp.EQ, other)

    def __ne__(self, other: Any) -> Expr:  # type: ignore[override]
        return self._compare(ComparisonOp.NE, other)

    def __gt__(self, other: Any) -> Expr:
        return self._compare(ComparisonOp.GT, other)

    def __lt__(self, other: Any) -> Expr:
        return self._compare(ComparisonOp.LT, other)

    def __ge__(self, other: Any) -> Expr:
        return self._compare(ComparisonOp.GTE, other)

    def __le__(self, other: Any) -> Expr:
        return self._compare(ComparisonOp.LTE, other)

    # ------------------------------------------------------------------
    # Logical combinators
    # ------------------------------------------------------------------

    def __and__(self, other: Any) -> Expr:
        return Expr(LogicalNode(operator=LogicalOp.AND.value, left=self.node, right=to_node(other)))

    def __rand__(self, other: Any) -> Expr:
        return Expr(LogicalNode(operator=LogicalOp.AND.value, left=to_node(other), right=self.node))

    def __or__(self, other: Any) -> Expr:
        return Expr(LogicalNode(operator=LogicalOp.OR.value, left=self.node, right=to_node(other)))

    def __ror__(self, other: Any) -> Expr:
        return Expr(LogicalNode(operator=LogicalOp.OR.value, left=to_node(other), right=self.node))

    def __invert__(self) -> Expr:
        return Expr(UnaryNode(operator=UnaryOp.NOT.value, operand=self.node))

    def __bool__(self) -> bool:
        raise ParseError(
            "A predicate has no truth value while it is being recorded. "
            "Use '&', '|' and '~' instead of 'and', 'or' and 'not', and avoid "
            "chained comparisons and conditional expressions."
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.node!r})"


class FieldRef(Expr):
    """A reference to one field of the record.

    Adds the fixed method vocabulary (``in_``, ``startswith``, ``endswith``)
    on top of :class:`Expr`'s operators.
    """

    __slots__ = ()

    def __init__(self, name: str) -> None:
        super().__init__(MemberNode(name=name))

    @property
    def name(self) -> str:
        return self.node.name  # type: ignore[union-attr]

    def in_(self, values: Any) -> Expr:
        """Membership test: ``<field> IN (<values>)``."""
        if isinstance(values, (str, bytes)) or not hasattr(values, "__iter__"):
            raise ParseError(f"in_() expects a sequence of values, got {values!r}.")
        literals = [to_node(v) for v in values]
        if not literals:
            raise ParseError(f"in_() on '{self.name}' needs at least one value.")
        return Expr(CallNode(callee=CallName.IN.value, arguments=(self.node, *literals)))

    def startswith(self, prefix: str) -> Expr:
        """Prefix match: ``<field> LIKE 'prefix%'``."""
        return self._pattern(CallName.STARTSWITH, prefix)

    def endswith(self, suffix: str) -> Expr:
        """Suffix match: ``<field> LIKE '%suffix'``."""
        return self._pattern(CallName.ENDSWITH, suffix)

    def _pattern(self, callee: CallName, term: Any) -> Expr:
        if not isinstance(term, str):
            raise ParseError(f"{callee.value}() expects a string, got {term!r}.")
        return Expr(CallNode(callee=callee.value, arguments=(self.node, LiteralNode(value=term))))


class Record:
    """Stand-in for the record a callable fragment receives.

    ``record.age`` and ``record["users.id"]`` both return a
    :class:`FieldRef`; item access is the way to name pre-qualified or
    otherwise non-identifier fields.
    """

    __slots__ = ()

    def __getattr__(self, name: str) -> FieldRef:
        if name.startswith("__"):
            raise AttributeError(name)
        return FieldRef(name)

    def __getitem__(self, name: str) -> FieldRef:
        if not isinstance(name, str) or not name:
            raise ParseError(f"Field names must be non-empty strings, got {name!r}.")
        return FieldRef(name)

    def __bool__(self) -> bool:
        raise ParseError("The record itself has no truth value; compare one of its fields.")

    def __repr__(self) -> str:
        return "Record()"


def field(name: str) -> FieldRef:
    """Build a :class:`FieldRef` outside a callable fragment.

    ``field("age") > 18`` is the same predicate as ``lambda u: u.age > 18``.
    """
    return FieldRef(name)
