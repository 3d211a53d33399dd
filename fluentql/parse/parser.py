"""Fragment parsing: predicates, selectors and keys → expression trees.

``ExpressionParser`` is the single entry point used by
:class:`~fluentql.query.Query`.  A fragment may be:

* a **node** (or a proxy :class:`~fluentql.parse.fields.Expr` holding one),
  returned as is;
* a **callable** of one parameter, called once with a recording
  :class:`~fluentql.parse.fields.Record`;
* a **text fragment**, either ``"lambda u: u.age > 18 and u.is_active"`` or a
  bare expression over field names such as ``"age > 18"``.

Text is parsed with the standard library :mod:`ast` module and converted
node by node against a fixed whitelist.  It is never evaluated.  Anything
outside the whitelist raises :class:`~fluentql.errors.ParseError` carrying
the fragment text; there is no partial recovery.

Each call builds a fresh tree.  Nothing is cached.
"""
from __future__ import annotations

import ast
import inspect
import logging
from collections.abc import Callable
from typing import Any, Union

from fluentql.errors import ParseError
from fluentql.parse.fields import Expr, FieldRef, Record, to_node
from fluentql.schema.expressions import (
    ALLOWED_CALLS,
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

logger = logging.getLogger(__name__)

#: Anything accepted where a predicate, selector or key is expected.
Fragment = Union[str, Callable[[Record], Any], Expr, Node]

_CMP_OPS: dict[type[ast.cmpop], ComparisonOp] = {
    ast.Eq: ComparisonOp.EQ,
    ast.NotEq: ComparisonOp.NE,
    ast.Gt: ComparisonOp.GT,
    ast.Lt: ComparisonOp.LT,
    ast.GtE: ComparisonOp.GTE,
    ast.LtE: ComparisonOp.LTE,
}

_BOOL_OPS: dict[type[ast.boolop], LogicalOp] = {
    ast.And: LogicalOp.AND,
    ast.Or: LogicalOp.OR,
}


class ExpressionParser:
    """Turns fragments into expression trees, projection lists and keys."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, fragment: Fragment) -> Node:
        """Parse a predicate fragment into one expression node.

        Args:
            fragment: A node, proxy expression, callable, or text fragment.

        Returns:
            The root node of the predicate tree.

        Raises:
            ParseError: If the fragment uses any unsupported form.
        """
        try:
            if isinstance(fragment, NODE_TYPES):
                return fragment  # type: ignore[return-value]
            if isinstance(fragment, Expr):
                return fragment.node
            if isinstance(fragment, str):
                return _TextParser(fragment).predicate()
            if callable(fragment):
                result = _record_call(fragment)
                node = _to_predicate_node(result, fragment)
                return node
            raise ParseError(
                f"Expected a predicate, got {type(fragment).__name__}.",
                fragment=repr(fragment),
            )
        except ParseError as exc:
            logger.debug("Rejected predicate fragment %r: %s", exc.fragment, exc)
            raise

    @classmethod
    def parse_selector(cls, *fragments: Fragment) -> list[str]:
        """Extract the flat, ordered projection list from selector fragments.

        No general tree is built: each fragment must name fields only.
        ``lambda u: (u.name, u.email)``, ``lambda u: {"name": u.name}``,
        ``"lambda u: u.name"`` and ``"name", "email"`` are all accepted.
        A dict entry whose key differs from the field yields
        ``"<field> AS <key>"``.

        Returns:
            Projected field names in first-seen order, without duplicates.

        Raises:
            ParseError: If the selector is empty or names a non-field.
        """
        names: list[str] = []
        try:
            for fragment in fragments:
                for name in _selector_names(fragment):
                    if name not in names:
                        names.append(name)
            if not names:
                raise ParseError("A selector must name at least one field.", fragment=repr(fragments))
        except ParseError as exc:
            logger.debug("Rejected selector fragment %r: %s", exc.fragment, exc)
            raise
        return names

    @classmethod
    def parse_key(cls, fragment: Fragment) -> str:
        """Resolve an ordering or grouping key to a single field name.

        Raises:
            ParseError: If the fragment does not resolve to exactly one field.
        """
        try:
            if isinstance(fragment, str):
                return _TextParser(fragment).key()
            if isinstance(fragment, (Expr, *NODE_TYPES)) or callable(fragment):
                value = _record_call(fragment) if _is_plain_callable(fragment) else fragment
                name = _field_name(value)
                if name is None:
                    raise ParseError(
                        f"A key must be a single field, got {value!r}.",
                        fragment=_describe(fragment),
                    )
                return name
            raise ParseError(
                f"Expected a key, got {type(fragment).__name__}.",
                fragment=repr(fragment),
            )
        except ParseError as exc:
            logger.debug("Rejected key fragment %r: %s", exc.fragment, exc)
            raise


# ---------------------------------------------------------------------------
# Callable fragments
# ---------------------------------------------------------------------------


def _is_plain_callable(fragment: Any) -> bool:
    return callable(fragment) and not isinstance(fragment, (Expr, *NODE_TYPES))


def _describe(fragment: Any) -> str:
    """Best-effort source text of a fragment, for error messages."""
    if isinstance(fragment, str):
        return fragment
    if callable(fragment) and not isinstance(fragment, (Expr, *NODE_TYPES)):
        try:
            return inspect.getsource(fragment).strip()
        except (OSError, TypeError):
            pass
    return repr(fragment)


def _check_arity(fn: Callable[..., Any]) -> None:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return
    positional = [
        p
        for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
    ]
    if len(positional) != 1:
        raise ParseError(
            f"A fragment must take exactly one parameter, got {len(positional)}.",
            fragment=_describe(fn),
        )


def _record_call(fn: Callable[[Record], Any]) -> Any:
    """Call ``fn`` with a recording proxy and return what it built."""
    _check_arity(fn)
    try:
        return fn(Record())
    except ParseError as exc:
        raise ParseError(str(exc), fragment=_describe(fn)) from exc
    except (TypeError, AttributeError, ValueError) as exc:
        raise ParseError(f"Unsupported construct in fragment: {exc}", fragment=_describe(fn)) from exc


def _to_predicate_node(result: Any, fragment: Any) -> Node:
    try:
        node = to_node(result)
    except ParseError as exc:
        raise ParseError(str(exc), fragment=_describe(fragment)) from exc
    if isinstance(node, LiteralNode):
        raise ParseError(
            f"A predicate must reference at least one field, got the constant {node.value!r}.",
            fragment=_describe(fragment),
        )
    return node


def _field_name(value: Any) -> str | None:
    if isinstance(value, FieldRef):
        return value.name
    if isinstance(value, Expr):
        value = value.node
    if isinstance(value, MemberNode):
        return value.name
    return None


def _selector_names(fragment: Fragment) -> list[str]:
    if isinstance(fragment, str):
        return _TextParser(fragment).selector()
    value = _record_call(fragment) if _is_plain_callable(fragment) else fragment
    return _names_from_value(value, fragment)


def _names_from_value(value: Any, fragment: Any) -> list[str]:
    name = _field_name(value)
    if name is not None:
        return [name]
    if isinstance(value, dict):
        names = []
        for key, item in value.items():
            item_name = _field_name(item)
            if item_name is None:
                raise ParseError(
                    f"Selector entry {key!r} must be a field, got {item!r}.",
                    fragment=_describe(fragment),
                )
            names.append(_aliased(item_name, key, fragment))
        return names
    if isinstance(value, (tuple, list)):
        names = []
        for item in value:
            item_name = _field_name(item)
            if item_name is None:
                raise ParseError(
                    f"Selector entries must be fields, got {item!r}.",
                    fragment=_describe(fragment),
                )
            names.append(item_name)
        return names
    raise ParseError(
        f"A selector must return a field, a tuple of fields or a dict of fields, got {value!r}.",
        fragment=_describe(fragment),
    )


def _aliased(name: str, key: Any, fragment: Any) -> str:
    if not isinstance(key, str) or not key.isidentifier():
        raise ParseError(
            f"Selector keys must be plain identifiers, got {key!r}.",
            fragment=_describe(fragment),
        )
    if key == name or name.endswith(f".{key}"):
        return name
    return f"{name} AS {key}"


# ---------------------------------------------------------------------------
# Text fragments
# ---------------------------------------------------------------------------


class _TextParser:
    """Converts one text fragment's Python AST into fluentQL nodes.

    Args:
        text: The fragment source.  Either a one-parameter lambda or a bare
            expression whose names are field names.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._param: str | None = None

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def predicate(self) -> Node:
        body = self._body()
        try:
            node = self._expr(body)
        except RecursionError as exc:
            raise self._error("Fragment is nested too deeply.") from exc
        if isinstance(node, LiteralNode):
            raise self._error(
                f"A predicate must reference at least one field, got the constant {node.value!r}."
            )
        return node

    def selector(self) -> list[str]:
        body = self._body()
        if isinstance(body, ast.Dict):
            names = []
            for key, value in zip(body.keys, body.values):
                if not isinstance(key, ast.Constant):
                    raise self._error("Selector keys must be string constants.")
                names.append(_aliased(self._member_name(value), key.value, self._text))
            return names
        if isinstance(body, (ast.Tuple, ast.List)):
            return [self._member_name(elt) for elt in body.elts]
        return [self._member_name(body)]

    def key(self) -> str:
        return self._member_name(self._body())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _error(self, message: str) -> ParseError:
        return ParseError(message, fragment=self._text)

    def _body(self) -> ast.expr:
        try:
            tree = ast.parse(self._text.strip(), mode="eval")
        except SyntaxError as exc:
            raise self._error(f"Invalid fragment syntax: {exc.msg}.") from exc
        except (ValueError, RecursionError, MemoryError) as exc:
            raise self._error(f"Fragment cannot be parsed: {exc}.") from exc
        body = tree.body
        if isinstance(body, ast.Lambda):
            args = body.args
            if (
                len(args.args) != 1
                or args.posonlyargs
                or args.kwonlyargs
                or args.vararg
                or args.kwarg
                or args.defaults
            ):
                raise self._error("A lambda fragment must take exactly one parameter.")
            self._param = args.args[0].arg
            body = body.body
        return body

    def _expr(self, node: ast.expr) -> Node:
        if isinstance(node, ast.BoolOp):
            op = _BOOL_OPS[type(node.op)]
            result = self._expr(node.values[0])
            for value in node.values[1:]:
                result = LogicalNode(operator=op.value, left=result, right=self._expr(value))
            return result

        if isinstance(node, ast.UnaryOp):
            return self._unary(node)

        if isinstance(node, ast.Compare):
            return self._compare(node)

        if isinstance(node, ast.Call):
            return self._call(node)

        if isinstance(node, (ast.Name, ast.Attribute, ast.Subscript)):
            return MemberNode(name=self._member_name(node))

        if isinstance(node, ast.Constant):
            return self._literal(node)

        if isinstance(node, ast.IfExp):
            raise self._error("Conditional expressions are not supported.")

        raise self._error(f"Unsupported syntax: {type(node).__name__}.")

    def _unary(self, node: ast.UnaryOp) -> Node:
        if isinstance(node.op, ast.Not):
            return UnaryNode(operator=UnaryOp.NOT.value, operand=self._expr(node.operand))
        if (
            isinstance(node.op, (ast.USub, ast.UAdd))
            and isinstance(node.operand, ast.Constant)
            and isinstance(node.operand.value, (int, float))
            and not isinstance(node.operand.value, bool)
        ):
            value = node.operand.value
            return LiteralNode(value=-value if isinstance(node.op, ast.USub) else value)
        raise self._error(f"Unsupported unary operator: {type(node.op).__name__}.")

    def _compare(self, node: ast.Compare) -> Node:
        if len(node.ops) != 1:
            raise self._error("Chained comparisons are not supported; combine them with 'and'.")
        op = node.ops[0]
        right = node.comparators[0]
        if isinstance(op, (ast.In, ast.NotIn)):
            call = self._membership(node.left, right)
            if isinstance(op, ast.NotIn):
                return UnaryNode(operator=UnaryOp.NOT.value, operand=call)
            return call
        cmp = _CMP_OPS.get(type(op))
        if cmp is None:
            raise self._error(f"Unsupported comparison operator: {type(op).__name__}.")
        return BinaryNode(operator=cmp.value, left=self._expr(node.left), right=self._expr(right))

    def _call(self, node: ast.Call) -> Node:
        if not isinstance(node.func, ast.Attribute):
            raise self._error("Only method calls on a field are supported.")
        method = node.func.attr
        if method not in ALLOWED_CALLS:
            raise self._error(
                f"Unsupported method call '{method}'. Allowed: {sorted(ALLOWED_CALLS)}."
            )
        if node.keywords or len(node.args) != 1:
            raise self._error(f"{method}() takes exactly one positional argument.")
        arg = node.args[0]
        if method == CallName.IN.value:
            return self._membership(node.func.value, arg)
        receiver = MemberNode(name=self._member_name(node.func.value))
        if not (isinstance(arg, ast.Constant) and isinstance(arg.value, str)):
            raise self._error(f"{method}() expects a string constant.")
        return CallNode(callee=method, arguments=(receiver, LiteralNode(value=arg.value)))

    def _membership(self, left: ast.expr, values: ast.expr) -> CallNode:
        receiver = MemberNode(name=self._member_name(left))
        if not isinstance(values, (ast.List, ast.Tuple, ast.Set)):
            raise self._error("Membership tests need a literal list or tuple of values.")
        if not values.elts:
            raise self._error(f"Membership test on '{receiver.name}' needs at least one value.")
        literals = []
        for elt in values.elts:
            literal = self._expr(elt)
            if not isinstance(literal, LiteralNode):
                raise self._error("Membership values must be literals.")
            literals.append(literal)
        return CallNode(callee=CallName.IN.value, arguments=(receiver, *literals))

    def _literal(self, node: ast.Constant) -> LiteralNode:
        if not isinstance(node.value, LITERAL_TYPES):
            raise self._error(f"Unsupported literal: {node.value!r}.")
        return LiteralNode(value=node.value)

    def _member_name(self, node: ast.expr) -> str:
        if isinstance(node, ast.Subscript):
            key = node.slice
            if (
                self._param is not None
                and isinstance(node.value, ast.Name)
                and node.value.id == self._param
                and isinstance(key, ast.Constant)
                and isinstance(key.value, str)
                and key.value
            ):
                return key.value
            raise self._error("Only '<param>[\"field\"]' subscripts are supported.")

        parts: list[str] = []
        current = node
        while isinstance(current, ast.Attribute):
            parts.append(current.attr)
            current = current.value
        if not isinstance(current, ast.Name):
            raise self._error(f"Expected a field, got {type(node).__name__}.")
        parts.reverse()

        if self._param is None:
            return ".".join([current.id, *parts])
        if current.id != self._param:
            raise self._error(
                f"Name '{current.id}' cannot be resolved inside a text fragment; "
                "inline the value or use a callable fragment."
            )
        if not parts:
            raise self._error(f"'{self._param}' alone is not a field.")
        return ".".join(parts)

