"""Operator vocabulary shared by the parser and the SQL generator.

Expression nodes store operators and callees as plain strings.  This module
defines the spellings the parser produces and the fixed tables the generator
maps them through.
"""

from __future__ import annotations

from enum import Enum

# ---------------------------------------------------------------------------
# Node kind enum
# ---------------------------------------------------------------------------


class NodeKind(str, Enum):
    """The discriminator value for each expression node type."""

    BINARY = "binary"
    LOGICAL = "logical"
    MEMBER = "member"
    LITERAL = "literal"
    UNARY = "unary"
    CALL = "call"


# ---------------------------------------------------------------------------
# Operator enums
# ---------------------------------------------------------------------------


class ComparisonOp(str, Enum):
    """Binary comparison operators, in their Python spelling."""

    EQ = "=="
    NE = "!="
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="


class LogicalOp(str, Enum):
    """Logical connectives."""

    AND = "AND"
    OR = "OR"


class UnaryOp(str, Enum):
    """Unary operators."""

    NOT = "not"


class CallName(str, Enum):
    """Method calls allowed inside a predicate."""

    IN = "in_"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"


class Direction(str, Enum):
    """ORDER BY direction."""

    ASC = "ASC"
    DESC = "DESC"


class JoinKind(str, Enum):
    """SQL join types."""

    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL"


# ---------------------------------------------------------------------------
# SQL mapping tables
# ---------------------------------------------------------------------------

#: Comparison spelling -> SQL spelling.  Anything absent is unsupported.
COMPARISON_SQL: dict[str, str] = {
    ComparisonOp.EQ.value: "=",
    ComparisonOp.NE.value: "!=",
    ComparisonOp.GT.value: ">",
    ComparisonOp.LT.value: "<",
    ComparisonOp.GTE.value: ">=",
    ComparisonOp.LTE.value: "<=",
}

#: Unary spelling -> SQL keyword.
UNARY_SQL: dict[str, str] = {
    UnaryOp.NOT.value: "NOT",
}

#: Logical connective -> SQL keyword.
LOGICAL_SQL: dict[str, str] = {
    LogicalOp.AND.value: "AND",
    LogicalOp.OR.value: "OR",
}

#: Membership test callee.
MEMBERSHIP_CALLS: frozenset[str] = frozenset({CallName.IN.value})

#: Prefix / suffix text-match callees.
PATTERN_CALLS: frozenset[str] = frozenset(
    {CallName.STARTSWITH.value, CallName.ENDSWITH.value}
)

#: Complete call vocabulary.
ALLOWED_CALLS: frozenset[str] = MEMBERSHIP_CALLS | PATTERN_CALLS

#: Python types a literal node may carry.
LITERAL_TYPES: tuple[type, ...] = (str, int, float, bool, type(None))

#: Escape character used in LIKE patterns.
LIKE_ESCAPE = "!"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards in ``term`` so it matches literally.

    Args:
        term: The raw search term.

    Returns:
        ``term`` with ``%``, ``_`` and the escape character prefixed by
        :data:`LIKE_ESCAPE`.
    """
    out = []
    for ch in term:
        if ch in ("%", "_", LIKE_ESCAPE):
            out.append(LIKE_ESCAPE)
        out.append(ch)
    return "".join(out)
