"""Relational mail store.

This package holds the SQLite repository for mailboxes, conversations and
messages, including the keyword match predicate used by search.
"""

from .repository import MailStoreRepository, search_index_matches

__all__ = ["MailStoreRepository", "search_index_matches"]
