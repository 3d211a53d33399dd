"""Typed expression-tree nodes.

Every predicate fragment is parsed into one of six frozen node models,
joined into a Pydantic v2 discriminated union on the ``type`` field::

    from fluentql.schema.nodes import BinaryNode, LiteralNode, MemberNode

    node = BinaryNode(operator=">", left=MemberNode(name="age"), right=LiteralNode(value=18))
    assert node.type == "binary"

Nodes are immutable once built.  Operators and callees are plain strings so
a hand-built tree can name something outside the generator's mapping tables;
that is reported by the generator, not here.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

_FROZEN = ConfigDict(extra="forbid", frozen=True)


class MemberNode(BaseModel):
    """A field access: ``u.age`` / ``age`` / ``users.id``."""

    model_config = _FROZEN

    type: Literal["member"] = "member"
    name: str


class LiteralNode(BaseModel):
    """A literal value bound as a parameter: ``18`` / ``"x"`` / ``True`` / ``None``."""

    model_config = _FROZEN

    type: Literal["literal"] = "literal"
    value: str | bool | int | float | None


class BinaryNode(BaseModel):
    """A comparison: ``<left> <operator> <right>``."""

    model_config = _FROZEN

    type: Literal["binary"] = "binary"
    operator: str
    left: Node
    right: Node


class LogicalNode(BaseModel):
    """A conjunction or disjunction of two sub-expressions."""

    model_config = _FROZEN

    type: Literal["logical"] = "logical"
    operator: str
    left: Node
    right: Node


class UnaryNode(BaseModel):
    """A unary operator applied to one operand (``not`` only, in practice)."""

    model_config = _FROZEN

    type: Literal["unary"] = "unary"
    operator: str
    operand: Node


class CallNode(BaseModel):
    """A method call.

    ``arguments[0]`` is the receiver (the field the method is called on);
    the remaining entries are the call's literal arguments.
    """

    model_config = _FROZEN

    type: Literal["call"] = "call"
    callee: str
    arguments: tuple[Node, ...] = Field(default_factory=tuple)


Node = Annotated[
    Union[BinaryNode, LogicalNode, MemberNode, LiteralNode, UnaryNode, CallNode],
    Field(discriminator="type"),
]

#: Concrete node classes, for ``isinstance`` checks.
NODE_TYPES: tuple[type[BaseModel], ...] = (
    BinaryNode,
    LogicalNode,
    MemberNode,
    LiteralNode,
    UnaryNode,
    CallNode,
)

# Resolve forward references in recursive types.
BinaryNode.model_rebuild()
LogicalNode.model_rebuild()
UnaryNode.model_rebuild()
CallNode.model_rebuild()
