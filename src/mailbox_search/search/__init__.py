"""Keyword search over message search indexes.

Indexing and querying share one tokenizer and one semantic hasher so that
query tokens compare directly against stored tokens.
"""

from .engine import search_emails_by_keywords
from .filters import NEWEST_FIRST, OrderBy, SqlFilter
from .hashing import DigestHasher, NormalizingHasher, SemanticHasher, get_hasher
from .index_builder import (
    MAX_SEARCH_INDEX_LENGTH,
    build_search_index,
    extract_raw_words,
    pack_tokens,
)
from .query import keywords_to_search_index
from .tokenizer import extract_words

__all__ = [
    "DigestHasher",
    "MAX_SEARCH_INDEX_LENGTH",
    "NEWEST_FIRST",
    "NormalizingHasher",
    "OrderBy",
    "SemanticHasher",
    "SqlFilter",
    "build_search_index",
    "extract_raw_words",
    "extract_words",
    "get_hasher",
    "keywords_to_search_index",
    "pack_tokens",
    "search_emails_by_keywords",
]
