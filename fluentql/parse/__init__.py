"""fluentQL parsing layer: fragments → expression trees."""
from fluentql.parse.fields import Expr, FieldRef, Record, field
from fluentql.parse.parser import ExpressionParser, Fragment

__all__ = [
    "Expr",
    "FieldRef",
    "Record",
    "field",
    "ExpressionParser",
    "Fragment",
]
