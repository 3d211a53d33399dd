"""fluentQL schema models: expression nodes, clause entries, operator tables."""
from fluentql.schema.clauses import JoinClause, OrderByItem
from fluentql.schema.expressions import (
    CallName,
    ComparisonOp,
    Direction,
    JoinKind,
    LogicalOp,
    NodeKind,
    UnaryOp,
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

__all__ = [
    "JoinClause",
    "OrderByItem",
    "CallName",
    "ComparisonOp",
    "Direction",
    "JoinKind",
    "LogicalOp",
    "NodeKind",
    "UnaryOp",
    "BinaryNode",
    "CallNode",
    "LiteralNode",
    "LogicalNode",
    "MemberNode",
    "Node",
    "UnaryNode",
]
