"""Keyword search result model."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """One message matched by a keyword search."""

    id: int = Field(description="Matched message ID")
    conversation_id: int = Field(description="Conversation the message belongs to")
    cleaned_up_text: str | None = Field(default=None, description="Cleaned message body")
