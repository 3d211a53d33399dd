"""fluentQL compilation layer: Query → parameterized SQL."""
from fluentql.compile.base import CompiledSQL, SQLCompiler
from fluentql.compile.builder import QueryBuilder
from fluentql.compile.generator import RuntimeContext, SQLGenerator
from fluentql.compile.paramstyles import FormatCompiler, NumericCompiler, QmarkCompiler
from fluentql.compile.registry import CompilerFactory

__all__ = [
    "CompiledSQL",
    "SQLCompiler",
    "QueryBuilder",
    "RuntimeContext",
    "SQLGenerator",
    "FormatCompiler",
    "NumericCompiler",
    "QmarkCompiler",
    "CompilerFactory",
]
