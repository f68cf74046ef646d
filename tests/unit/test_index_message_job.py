"""Unit tests for the message indexing job."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from mailbox_search.exceptions import (
    ConversationNotFoundError,
    MessageNotFoundError,
    NonRetriableError,
    StoreError,
)
from mailbox_search.jobs import index_conversation_message
from mailbox_search.models import Conversation, ConversationMessage
from mailbox_search.search import DigestHasher


class RecordingRepository:
    """In-memory stand-in recording every write."""

    def __init__(
        self,
        message: ConversationMessage | None = None,
        conversation: Conversation | None = None,
        fail_writes: bool = False,
    ) -> None:
        self.message = message
        self.conversation = conversation
        self.fail_writes = fail_writes
        self.writes: list[tuple[str, int, str]] = []

    def get_message(self, message_id: int) -> ConversationMessage | None:
        if self.message is not None and self.message.id == message_id:
            return self.message
        return None

    def get_conversation(self, conversation_id: int) -> Conversation | None:
        if self.conversation is not None and self.conversation.id == conversation_id:
            return self.conversation
        return None

    def set_cleaned_up_text(self, message_id: int, cleaned_up_text: str) -> None:
        self.writes.append(("cleaned_up_text", message_id, cleaned_up_text))

    def update_search_index(self, message_id: int, search_index: str) -> None:
        if self.fail_writes:
            raise StoreError("database is locked")
        self.writes.append(("search_index", message_id, search_index))


def _now() -> datetime:
    return datetime.now(timezone.utc)


def test_indexes_stored_message(repository, mailbox, settings, sample_body) -> None:
    conversation = repository.create_conversation(
        mailbox.id, email_from="alice@example.com", subject="Greetings"
    )
    message = repository.add_message(conversation.id, f"<p>{sample_body}</p>")

    search_index = index_conversation_message(message.id, repository, settings=settings)

    stored = repository.get_message(message.id)
    assert stored is not None
    assert stored.cleaned_up_text == sample_body
    assert stored.search_index == search_index
    assert search_index.startswith("a alice@example.com example.com greetings hello")
    assert search_index.endswith("alice@example.com greetings hello world this is a test")


def test_reindexing_is_idempotent(repository, mailbox, settings) -> None:
    conversation = repository.create_conversation(mailbox.id, email_from="bob@example.com")
    message = repository.add_message(conversation.id, "Same words every time")

    first = index_conversation_message(message.id, repository, settings=settings)
    second = index_conversation_message(message.id, repository, settings=settings)

    assert first == second
    assert repository.get_message(message.id).search_index == first


def test_index_respects_length_budget(repository, mailbox, settings) -> None:
    conversation = repository.create_conversation(mailbox.id, subject="Long")
    body = " ".join(f"token{i:06d}" for i in range(5000))
    message = repository.add_message(conversation.id, body)

    search_index = index_conversation_message(message.id, repository, settings=settings)

    assert 0 < len(search_index) <= 5000


def test_uses_configured_hasher(repository, mailbox, settings) -> None:
    conversation = repository.create_conversation(mailbox.id)
    message = repository.add_message(conversation.id, "hello")
    hasher = DigestHasher("secret")

    search_index = index_conversation_message(
        message.id, repository, hasher=hasher, settings=settings
    )

    assert search_index == f"{hasher.hash_email(body='hello')[0]} hello"


def test_missing_message_is_permanent_and_writes_nothing(settings) -> None:
    repo = RecordingRepository()

    with pytest.raises(MessageNotFoundError) as exc_info:
        index_conversation_message(404, repo, settings=settings)

    assert isinstance(exc_info.value, NonRetriableError)
    assert not isinstance(exc_info.value, StoreError)
    assert repo.writes == []


def test_missing_conversation_is_permanent_and_writes_nothing(settings) -> None:
    message = ConversationMessage(id=1, conversation_id=7, body="hi", created_at=_now())
    repo = RecordingRepository(message=message)

    with pytest.raises(ConversationNotFoundError):
        index_conversation_message(1, repo, settings=settings)

    assert repo.writes == []


def test_write_failure_is_transient(settings) -> None:
    message = ConversationMessage(
        id=1, conversation_id=7, body="hi", cleaned_up_text="hi", created_at=_now()
    )
    conversation = Conversation(id=7, mailbox_id=1, created_at=_now())
    repo = RecordingRepository(message=message, conversation=conversation, fail_writes=True)

    with pytest.raises(StoreError) as exc_info:
        index_conversation_message(1, repo, settings=settings)

    assert not isinstance(exc_info.value, NonRetriableError)


def test_existing_cleaned_text_is_reused(settings) -> None:
    message = ConversationMessage(
        id=1, conversation_id=7, body="<i>ignored</i>", cleaned_up_text="kept", created_at=_now()
    )
    conversation = Conversation(id=7, mailbox_id=1, created_at=_now())
    repo = RecordingRepository(message=message, conversation=conversation)

    index_conversation_message(1, repo, settings=settings)

    assert repo.writes == [("search_index", 1, "kept kept")]
