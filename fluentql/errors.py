"""Custom exception hierarchy for fluentQL.

All public errors inherit from FluentQLError so callers can catch the base
class for any fluentQL-specific failure.  Every error is raised
synchronously from the parse, generate, or compile call that detected it;
nothing is retried and no partial SQL is ever returned.
"""
from __future__ import annotations


class FluentQLError(Exception):
    """Base exception for all fluentQL errors."""


class ParseError(FluentQLError):
    """Raised when a predicate, selector, or key fragment cannot be parsed.

    Args:
        message: Human-readable description.
        fragment: The offending fragment text (or ``repr`` of a callable).
    """

    def __init__(self, message: str, fragment: str | None = None) -> None:
        super().__init__(message)
        self.fragment = fragment


class CompilationError(FluentQLError):
    """Raised when an expression tree or descriptor cannot be compiled.

    Args:
        message: Human-readable description.
        clause: The clause being compiled when the error occurred.
    """

    def __init__(self, message: str, clause: str | None = None) -> None:
        super().__init__(message)
        self.clause = clause


class UnsupportedOperatorError(CompilationError):
    """Raised when a tree carries an operator absent from the SQL mapping.

    Args:
        operator: The operator spelling found in the tree.
        clause: The clause being compiled, if known.
    """

    def __init__(self, operator: str, clause: str | None = None) -> None:
        super().__init__(f"Unsupported operator '{operator}'.", clause=clause)
        self.operator = operator


class UnsupportedCallError(CompilationError):
    """Raised when a tree carries a method call outside the fixed vocabulary.

    Args:
        callee: The method name found in the tree.
        clause: The clause being compiled, if known.
    """

    def __init__(self, callee: str, clause: str | None = None) -> None:
        super().__init__(f"Unsupported method call '{callee}'.", clause=clause)
        self.callee = callee


class ClauseError(FluentQLError, ValueError):
    """Raised when a builder method receives an invalid argument.

    Args:
        message: Human-readable description.
        clause: The clause the argument was meant for (e.g. ``'LIMIT'``).
    """

    def __init__(self, message: str, clause: str | None = None) -> None:
        super().__init__(message)
        self.clause = clause
