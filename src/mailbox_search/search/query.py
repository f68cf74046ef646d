"""Translation of free-text keywords into query tokens."""

from __future__ import annotations

from mailbox_search.search.hashing import SemanticHasher


def keywords_to_search_index(hasher: SemanticHasher, keywords: str) -> str:
    """Encode keywords the way message bodies are encoded at index time.

    An empty or punctuation-only input yields an empty string, i.e. an empty
    query token set.
    """

    return " ".join(hasher.hash_email(body=keywords))
