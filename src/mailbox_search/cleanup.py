"""Message body cleanup.

Produces the text a message is indexed and displayed with: markup, quoted
replies and forwarding noise removed, whitespace normalized.
"""

from __future__ import annotations

import html
import re
from typing import TYPE_CHECKING

import structlog

from mailbox_search.models import ConversationMessage

if TYPE_CHECKING:
    from mailbox_search.store import MailStoreRepository

logger = structlog.get_logger()

_BLOCK_ELEMENTS = re.compile(r"(?i)<\s*/?\s*(br|p|div|li|tr|h[1-6])\b[^>]*>")
_INVISIBLE_ELEMENTS = re.compile(r"(?is)<\s*(script|style|head)\b.*?<\s*/\s*\1\s*>")
_HTML_COMMENT = re.compile(r"(?s)<!--.*?-->")
_HTML_TAG = re.compile(r"<[^>]+>")
_QUOTED_REPLY = re.compile(r"(?m)^\s*>.*$")
_REPLY_ATTRIBUTION = re.compile(r"(?m)^\s*On .{1,200} wrote:\s*$")
_FORWARDING_PATTERNS = [
    re.compile(p)
    for p in [
        r"(?m)^-{3,}\s*Original Message\s*-{3,}.*?$",
        r"(?m)^-{3,}\s*Forwarded Message\s*-{3,}.*?$",
        r"(?m)^_{10,}.*?$",
    ]
]
_MULTIPLE_SPACES = re.compile(r"[ \t\xa0]+")
_MULTIPLE_NEWLINES = re.compile(r"\n{3,}")


def clean_up_text(body: str | None) -> str:
    """Clean a message body for indexing and display."""

    if not body:
        return ""

    text = body.replace("\r\n", "\n").replace("\r", "\n")
    if text.startswith("\ufeff"):
        text = text[1:]

    text = _HTML_COMMENT.sub("", text)
    text = _INVISIBLE_ELEMENTS.sub("", text)
    text = _BLOCK_ELEMENTS.sub("\n", text)
    text = _HTML_TAG.sub("", text)
    text = html.unescape(text)

    text = _REPLY_ATTRIBUTION.sub("", text)
    text = _QUOTED_REPLY.sub("", text)
    for pattern in _FORWARDING_PATTERNS:
        text = pattern.sub("", text)

    text = _MULTIPLE_SPACES.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _MULTIPLE_NEWLINES.sub("\n\n", text)
    return text.strip()


def ensure_cleaned_up_text(
    repository: MailStoreRepository, message: ConversationMessage
) -> str:
    """Return a message's cleaned text, computing and storing it if missing."""

    if message.cleaned_up_text is not None:
        return message.cleaned_up_text

    cleaned = clean_up_text(message.body)
    repository.set_cleaned_up_text(message.id, cleaned)
    logger.debug("message_text_cleaned", message_id=message.id, length=len(cleaned))
    return cleaned
