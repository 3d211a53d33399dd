"""Compiler abstractions: CompiledSQL and the SQLCompiler ABC.

The Strategy pattern is used: ``QueryBuilder`` and ``SQLGenerator`` never
spell a placeholder themselves; they ask the injected ``SQLCompiler``.
Concrete compilers differ only in their DB-API paramstyle.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CompiledSQL:
    """The output of a successful compilation.

    Unpacks as ``sql, params = compiled`` for direct use with a DB-API
    cursor.

    Attributes:
        sql: The compiled SQL string with positional placeholders.
        params: Bound values, aligned 1:1 with the placeholders in ``sql``.
        paramstyle: The DB-API paramstyle of the placeholders.
    """

    sql: str
    params: list[Any] = field(default_factory=list)
    paramstyle: str = "qmark"

    def __iter__(self) -> Iterator[Any]:
        yield self.sql
        yield self.params


class SQLCompiler(ABC):
    """Abstract base for placeholder strategies.

    Subclasses implement :meth:`param_placeholder`; the generator calls it
    once per bound literal, in emission order.
    """

    @abstractmethod
    def param_placeholder(self, position: int) -> str:
        """Return the placeholder for the bound value at ``position``.

        Args:
            position: 1-based index of the value in the statement's
                parameter vector.

        Returns:
            Placeholder text (e.g. ``'?'``, ``'%s'``, ``':3'``).
        """

    @property
    @abstractmethod
    def paramstyle(self) -> str:
        """Return the DB-API paramstyle name (``'qmark'``, ``'format'``, ...)."""
