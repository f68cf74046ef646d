"""Free-text tokenization shared by indexing and querying."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")
_EDGE_PUNCTUATION = re.compile(r"^[^a-z0-9]+|[^a-z0-9]+$")


def extract_words(text: str) -> list[str]:
    """Split text into lowercase word tokens.

    Pieces are split on whitespace runs and stripped of leading and trailing
    characters outside ``[a-z0-9]``; empty pieces are dropped. Order is kept
    and duplicates are not removed.
    """

    words = (_EDGE_PUNCTUATION.sub("", piece) for piece in _WHITESPACE.split(text.lower()))
    return [word for word in words if word]
