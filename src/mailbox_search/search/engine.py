"""Keyword search scoped to a mailbox."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from mailbox_search.config import Settings, get_settings
from mailbox_search.models import SearchResult
from mailbox_search.search.filters import NEWEST_FIRST, OrderBy, SqlFilter
from mailbox_search.search.hashing import SemanticHasher, get_hasher
from mailbox_search.search.query import keywords_to_search_index

if TYPE_CHECKING:
    from mailbox_search.store import MailStoreRepository

logger = structlog.get_logger()


def search_emails_by_keywords(
    repository: MailStoreRepository,
    keywords: str,
    mailbox_id: int,
    filters: Sequence[SqlFilter] = (),
    order_by: Sequence[OrderBy] = NEWEST_FIRST,
    *,
    hasher: SemanticHasher | None = None,
    settings: Settings | None = None,
    max_results: int | None = None,
) -> list[SearchResult]:
    """Search a mailbox's messages by free-text keywords.

    Rows match on exact containment of every query token or on any stored
    token starting with a query token. At most ``max_results`` rows are
    fetched in the requested order, then only the first row of each
    conversation is kept.

    Args:
        repository: Mail store to query.
        keywords: Free-text search input. Empty input matches every indexed
            message of the mailbox.
        mailbox_id: Tenant the search is restricted to.
        filters: Extra predicates ANDed into the query.
        order_by: Ordering terms; newest message first by default.
        hasher: Semantic hasher. If None, uses the one named in settings, as
            indexing does.
        settings: Application settings. If None, uses default settings.
        max_results: Row cap applied before deduplication. If None, uses
            ``settings.max_search_results``.

    Returns:
        At most one result per conversation; an empty list when nothing matches.
    """

    settings = settings or get_settings()
    hasher = hasher or get_hasher(settings)
    if max_results is None:
        max_results = settings.max_search_results
    query_index = keywords_to_search_index(hasher, keywords)

    rows = repository.search_messages(
        query_index,
        mailbox_id,
        filters=filters,
        order_by=order_by,
        limit=max_results,
    )

    seen: set[int] = set()
    results: list[SearchResult] = []
    for row in rows:
        if row.conversation_id in seen:
            continue
        seen.add(row.conversation_id)
        results.append(row)

    logger.debug(
        "keyword_search_complete",
        mailbox_id=mailbox_id,
        query_tokens=len(query_index.split()) if query_index else 0,
        matched_rows=len(rows),
        conversations=len(results),
    )
    return results
