"""Compiler registry (Open/Closed Principle).

``CompilerFactory`` maps DB-API paramstyle names to
:class:`~fluentql.compile.base.SQLCompiler` classes.  Register a new
placeholder style once and ``Query.compile(paramstyle=...)`` picks it up::

    from fluentql.compile.registry import CompilerFactory

    @CompilerFactory.register("dollar")
    class DollarCompiler(SQLCompiler):
        paramstyle = "dollar"

        def param_placeholder(self, position):
            return f"${position}"
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from fluentql.compile.base import SQLCompiler
from fluentql.errors import CompilationError


class CompilerFactory:
    """Registry mapping paramstyle names to :class:`SQLCompiler` classes."""

    _compilers: ClassVar[dict[str, type[SQLCompiler]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[SQLCompiler]], type[SQLCompiler]]:
        """Decorator that registers a compiler class under ``name``.

        Args:
            name: The paramstyle name (e.g. ``"qmark"``).

        Returns:
            A decorator that registers and returns the compiler class.
        """

        def decorator(compiler_cls: type[SQLCompiler]) -> type[SQLCompiler]:
            cls._compilers[name] = compiler_cls
            return compiler_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, compiler_cls: type[SQLCompiler]) -> None:
        """Register a compiler class without using the decorator form."""
        cls._compilers[name] = compiler_cls

    @classmethod
    def create(cls, name: str) -> SQLCompiler:
        """Instantiate the compiler registered for ``name``.

        Raises:
            CompilationError: If no compiler is registered for ``name``.
        """
        compiler_cls = cls._compilers.get(name)
        if compiler_cls is None:
            registered = sorted(cls._compilers)
            raise CompilationError(
                f"Unsupported paramstyle: '{name}'. Registered paramstyles: {registered}."
            )
        return compiler_cls()

    @classmethod
    def registered_paramstyles(cls) -> list[str]:
        """Return the sorted list of registered paramstyle names."""
        return sorted(cls._compilers)
