"""Extra predicates and ordering terms for keyword searches.

Filters are parameterized SQL fragments evaluated against the ``m``
(``conversation_messages``) and ``c`` (``conversations``) aliases of the
search query. Ordering is restricted to a fixed set of columns.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from mailbox_search.exceptions import ValidationError

ORDER_COLUMNS: dict[str, str] = {
    "id": "m.id",
    "created_at": "m.created_at_iso",
    "conversation_id": "m.conversation_id",
    "conversation_created_at": "c.created_at_iso",
}


@dataclass(frozen=True)
class SqlFilter:
    """A SQL predicate ANDed into the search query."""

    clause: str
    params: tuple[Any, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class OrderBy:
    """One ordering term of a search query."""

    column: str
    descending: bool = False

    def __post_init__(self) -> None:
        if self.column not in ORDER_COLUMNS:
            raise ValidationError(
                f"Unsupported order column {self.column!r}; expected one of {sorted(ORDER_COLUMNS)}"
            )

    def to_sql(self) -> str:
        return f"{ORDER_COLUMNS[self.column]} {'DESC' if self.descending else 'ASC'}"


NEWEST_FIRST: tuple[OrderBy, ...] = (OrderBy("id", descending=True),)


def created_after(value: datetime) -> SqlFilter:
    return SqlFilter("m.created_at_iso >= ?", (value.isoformat(),))


def created_before(value: datetime) -> SqlFilter:
    return SqlFilter("m.created_at_iso < ?", (value.isoformat(),))


def in_conversations(conversation_ids: Iterable[int]) -> SqlFilter:
    ids = tuple(conversation_ids)
    if not ids:
        return SqlFilter("0")
    placeholders = ", ".join("?" for _ in ids)
    return SqlFilter(f"m.conversation_id IN ({placeholders})", ids)


def exclude_conversations(conversation_ids: Iterable[int]) -> SqlFilter:
    ids = tuple(conversation_ids)
    if not ids:
        return SqlFilter("1")
    placeholders = ", ".join("?" for _ in ids)
    return SqlFilter(f"m.conversation_id NOT IN ({placeholders})", ids)
