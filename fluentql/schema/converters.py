"""Utilities for resolving a query source from external sources.

SQLAlchemy converter
--------------------
:func:`table_name_from_sqlalchemy` resolves the table name of a SQLAlchemy
``Table`` or a mapped (declarative) class, so repositories that already
declare their entities with SQLAlchemy do not repeat the table name.

Install the optional dependency before using this module::

    pip install "fluentql[sqlalchemy]"

Example::

    from fluentql import from_sqlalchemy

    query = from_sqlalchemy(User).where(lambda u: u.age > 18)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fluentql.errors import ClauseError

if TYPE_CHECKING:
    from fluentql.query import Query


def table_name_from_sqlalchemy(source: Any) -> str:
    """Return the SQL source name for a SQLAlchemy table or mapped class.

    Accepted sources, checked in order:

    * a plain ``str`` (returned unchanged);
    * a :class:`sqlalchemy.Table` (``schema.name`` when it has a schema);
    * a mapped class or instance, resolved through :func:`sqlalchemy.inspect`
      to its persisted table.

    Args:
        source: The object to resolve.

    Returns:
        The table name, schema-qualified when the table declares a schema.

    Raises:
        ClauseError: If ``source`` is not a table, not mapped, or is mapped
            to something other than a single table.
    """
    if isinstance(source, str):
        return source

    try:
        from sqlalchemy import Table, inspect
        from sqlalchemy.exc import NoInspectionAvailable
    except ImportError as exc:
        raise ImportError(
            "SQLAlchemy is required for table_name_from_sqlalchemy(). "
            'Install it with: pip install "fluentql[sqlalchemy]"'
        ) from exc

    if isinstance(source, Table):
        return _qualified_name(source)

    try:
        mapper = inspect(source)
    except NoInspectionAvailable as exc:
        raise ClauseError(
            f"Cannot resolve a table from {source!r}: not a SQLAlchemy table or mapped class.",
            clause="FROM",
        ) from exc

    # Instances inspect to an InstanceState; hop to the mapper.
    mapper = getattr(mapper, "mapper", mapper)
    table = getattr(mapper, "persist_selectable", None)
    if not isinstance(table, Table):
        raise ClauseError(
            f"Mapped class {source!r} is not mapped to a single table.",
            clause="FROM",
        )
    return _qualified_name(table)


def from_sqlalchemy(source: Any) -> Query:
    """Start a :class:`~fluentql.query.Query` over a SQLAlchemy table or model."""
    from fluentql.query import Query

    return Query.from_(table_name_from_sqlalchemy(source))


def _qualified_name(table: Any) -> str:
    if table.schema:
        return f"{table.schema}.{table.name}"
    return table.name
