"""Pydantic models for the clause entries a Query accumulates."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from fluentql.schema.expressions import Direction, JoinKind


class OrderByItem(BaseModel):
    """A single ORDER BY key.

    Attributes:
        field: Field name to sort on.
        direction: Sort direction.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str
    direction: Direction = Direction.ASC


class JoinClause(BaseModel):
    """A single JOIN entry.

    The condition is raw SQL supplied by the caller and emitted verbatim.

    Attributes:
        kind: SQL join type.
        table: Joined table name.
        on: Raw join condition text.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: JoinKind = JoinKind.INNER
    table: str
    on: str
