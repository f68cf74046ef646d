"""Construction of the packed, length-bounded search index of a message."""

from __future__ import annotations

from collections.abc import Iterable

from mailbox_search.search.hashing import SemanticHasher
from mailbox_search.search.tokenizer import extract_words

MAX_SEARCH_INDEX_LENGTH = 5000


def extract_raw_words(
    email_from: str | None = None,
    subject: str | None = None,
    body: str | None = None,
) -> list[str]:
    """Collect raw words for prefix matching.

    The sender is kept verbatim as a single token; subject and body are
    tokenized. Duplicates are dropped keeping the first occurrence.
    """

    words: list[str] = []
    if email_from:
        words.append(email_from)
    if subject:
        words.extend(extract_words(subject))
    if body:
        words.extend(extract_words(body))

    return list(dict.fromkeys(words))


def pack_tokens(tokens: Iterable[str], max_length: int = MAX_SEARCH_INDEX_LENGTH) -> str:
    """Join tokens with spaces, stopping at the first one that overflows.

    Each token costs ``len(token) + 1`` toward ``max_length``. Tokens after the
    first overflowing one are dropped even if they would fit.
    """

    total_length = 0
    packed: list[str] = []

    for token in tokens:
        # +1 accounts for the separating space
        if total_length + len(token) + 1 > max_length:
            break
        packed.append(token)
        total_length += len(token) + 1

    return " ".join(packed)


def build_search_index(
    hasher: SemanticHasher,
    *,
    email_from: str | None = None,
    subject: str | None = None,
    body: str | None = None,
    max_length: int = MAX_SEARCH_INDEX_LENGTH,
) -> str:
    """Build the search index: hashed tokens first, then raw tokens."""

    hashed_words = hasher.hash_email(email_from=email_from, subject=subject, body=body)
    raw_words = extract_raw_words(email_from=email_from, subject=subject, body=body)

    return pack_tokens([*hashed_words, *raw_words], max_length=max_length)
