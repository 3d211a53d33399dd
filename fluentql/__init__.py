"""fluentQL – a chainable query compiler for CRUD data-access layers.

Describe a query with predicate, selector and key fragments; get back
parameterized SQL and a positional parameter vector.  Literal data never
reaches the SQL text.

Public API
----------
``from_``
    Start a :class:`Query` over a table name.

``from_sqlalchemy``
    Start a :class:`Query` over a SQLAlchemy ``Table`` or mapped class.

``field``
    Build a field reference outside a callable fragment.

Example::

    from fluentql import from_

    sql, params = (
        from_("users")
        .where(lambda u: (u.age > 18) & (u.is_active == True))
        .order_by(lambda u: u.name)
        .take(10)
        .compile()
    )
    # SELECT * FROM users WHERE (age > ? AND is_active = ?) ORDER BY name ASC LIMIT 10
    # [18, True]

Extensibility
-------------
New placeholder styles can be registered via::

    from fluentql.compile.registry import CompilerFactory

    @CompilerFactory.register("dollar")
    class DollarCompiler(SQLCompiler):
        ...

After registration, ``Query.compile(paramstyle="dollar")`` picks it up.
"""

from __future__ import annotations

from fluentql.compile.base import CompiledSQL, SQLCompiler
from fluentql.compile.builder import QueryBuilder
from fluentql.compile.generator import RuntimeContext, SQLGenerator
from fluentql.compile.paramstyles import FormatCompiler, NumericCompiler, QmarkCompiler
from fluentql.compile.registry import CompilerFactory
from fluentql.errors import (
    ClauseError,
    CompilationError,
    FluentQLError,
    ParseError,
    UnsupportedCallError,
    UnsupportedOperatorError,
)
from fluentql.parse.fields import Expr, FieldRef, Record, field
from fluentql.parse.parser import ExpressionParser
from fluentql.query import Query, from_
from fluentql.schema.clauses import JoinClause, OrderByItem
from fluentql.schema.converters import from_sqlalchemy, table_name_from_sqlalchemy
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
# Register built-in placeholder styles with CompilerFactory
# ---------------------------------------------------------------------------

CompilerFactory.register_class("qmark", QmarkCompiler)
CompilerFactory.register_class("format", FormatCompiler)
CompilerFactory.register_class("numeric", NumericCompiler)

__all__ = [
    # Entry points
    "from_",
    "from_sqlalchemy",
    "table_name_from_sqlalchemy",
    "field",
    "Query",
    # Parsing
    "ExpressionParser",
    "Expr",
    "FieldRef",
    "Record",
    # Expression nodes
    "Node",
    "BinaryNode",
    "CallNode",
    "LiteralNode",
    "LogicalNode",
    "MemberNode",
    "UnaryNode",
    # Clause entries
    "JoinClause",
    "OrderByItem",
    # Compilation
    "CompiledSQL",
    "CompilerFactory",
    "QueryBuilder",
    "RuntimeContext",
    "SQLCompiler",
    "SQLGenerator",
    "FormatCompiler",
    "NumericCompiler",
    "QmarkCompiler",
    # Errors
    "FluentQLError",
    "ParseError",
    "CompilationError",
    "UnsupportedOperatorError",
    "UnsupportedCallError",
    "ClauseError",
]
