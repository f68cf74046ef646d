"""Semantic hashers producing the exact-match tokens of a search index.

A hasher maps an email's ``(email_from, subject, body)`` to a deduplicated,
sorted list of tokens. The same hasher is applied to stored messages and to
query text, so two calls with equal normalized content always yield equal
token sets. This symmetry is what makes containment matching correct.
"""

from __future__ import annotations

import hashlib
from email.utils import parseaddr
from typing import Protocol

from mailbox_search.config import Settings
from mailbox_search.exceptions import ConfigurationError
from mailbox_search.search.tokenizer import extract_words


class SemanticHasher(Protocol):
    """Deterministic, order-independent token extractor."""

    name: str

    def hash_email(
        self,
        *,
        email_from: str | None = None,
        subject: str | None = None,
        body: str | None = None,
    ) -> list[str]: ...


def _normalized_words(email_from: str | None, subject: str | None, body: str | None) -> set[str]:
    words: set[str] = set()

    if email_from:
        _, address = parseaddr(email_from)
        address = address.strip().lower()
        if "@" in address and not any(ch.isspace() for ch in address):
            words.add(address)
            _, at, domain = address.rpartition("@")
            if at and domain:
                words.add(domain)
        else:
            words.update(extract_words(email_from))
    if subject:
        words.update(extract_words(subject))
    if body:
        words.update(extract_words(body))

    return words


class NormalizingHasher:
    """Hasher whose tokens are the normalized words themselves.

    The sender contributes its lowercased address and domain; subject and body
    contribute their tokenized words. Prefix relationships survive, so a
    query prefix can match tokens in the hashed segment too.
    """

    name = "normalize"

    def hash_email(
        self,
        *,
        email_from: str | None = None,
        subject: str | None = None,
        body: str | None = None,
    ) -> list[str]:
        return sorted(_normalized_words(email_from, subject, body))


class DigestHasher:
    """Hasher that replaces every normalized word with a keyed digest.

    Digests destroy prefix structure: only whole words can match the hashed
    segment, and a hashed query token never prefixes a raw token.
    """

    name = "digest"
    digest_size = 8

    def __init__(self, key: str) -> None:
        if not key:
            raise ConfigurationError("DigestHasher requires a non-empty key")
        encoded = key.encode("utf-8")
        if len(encoded) > 64:
            raise ConfigurationError("DigestHasher key must be at most 64 bytes")
        self._key = encoded

    def hash_email(
        self,
        *,
        email_from: str | None = None,
        subject: str | None = None,
        body: str | None = None,
    ) -> list[str]:
        return sorted(
            {self._digest(word) for word in _normalized_words(email_from, subject, body)}
        )

    def _digest(self, word: str) -> str:
        return hashlib.blake2b(
            word.encode("utf-8"), key=self._key, digest_size=self.digest_size
        ).hexdigest()


def get_hasher(settings: Settings) -> SemanticHasher:
    """Return the hasher named by ``settings.hasher``."""

    if settings.hasher == NormalizingHasher.name:
        return NormalizingHasher()
    if settings.hasher == DigestHasher.name:
        return DigestHasher(settings.hasher_key)
    raise ConfigurationError(f"Unknown hasher: {settings.hasher!r}")
