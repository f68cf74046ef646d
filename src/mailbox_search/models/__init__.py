"""Data models for Mailbox Search.

This module contains Pydantic models for the rows of the mail store.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from mailbox_search.models.search_result import SearchResult


class Mailbox(BaseModel):
    """A mailbox, the tenant boundary for every search."""

    id: int = Field(description="Mailbox ID")
    name: str = Field(description="Display name")
    slug: str = Field(description="URL-safe unique identifier")
    created_at: datetime = Field(description="Creation timestamp")


class Conversation(BaseModel):
    """A thread of messages belonging to one mailbox."""

    id: int = Field(description="Conversation ID")
    mailbox_id: int = Field(description="Owning mailbox ID")
    email_from: Optional[str] = Field(default=None, description="Sender email address")
    subject: Optional[str] = Field(default=None, description="Conversation subject")
    created_at: datetime = Field(description="Creation timestamp")


class ConversationMessage(BaseModel):
    """A stored message and its derived search fields."""

    id: int = Field(description="Message ID")
    conversation_id: int = Field(description="Owning conversation ID")
    body: Optional[str] = Field(default=None, description="Original message body")
    cleaned_up_text: Optional[str] = Field(
        default=None,
        description="Body with markup, quoted replies and noise removed",
    )
    search_index: Optional[str] = Field(
        default=None,
        description="Space-separated token string; unset until the message is indexed",
    )
    created_at: datetime = Field(description="Creation timestamp")


__all__ = ["Conversation", "ConversationMessage", "Mailbox", "SearchResult"]
