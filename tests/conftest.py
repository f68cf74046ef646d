"""Pytest configuration and shared fixtures."""

from collections.abc import Callable

import pytest

from mailbox_search.config import Settings
from mailbox_search.models import ConversationMessage, Mailbox
from mailbox_search.store import MailStoreRepository


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Provide settings pointing at a temporary store, with instant retries."""
    return Settings(
        db_path=tmp_path / "store.sqlite3",
        max_retries=2,
        retry_delay=0.0,
        index_workers=1,
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def repository(settings: Settings) -> MailStoreRepository:
    """Provide an initialized mail store."""
    repo = MailStoreRepository(settings.db_path)
    repo.initialize()
    return repo


@pytest.fixture
def mailbox(repository: MailStoreRepository) -> Mailbox:
    return repository.create_mailbox("Support")


@pytest.fixture
def store_message(
    repository: MailStoreRepository, settings: Settings
) -> Callable[..., ConversationMessage]:
    """Return a helper storing a message and running its indexing job."""
    from mailbox_search.jobs import index_conversation_message

    def _store(
        mailbox_id: int,
        body: str,
        *,
        email_from: str | None = "alice@example.com",
        subject: str | None = "Question",
        conversation_id: int | None = None,
        index: bool = True,
    ) -> ConversationMessage:
        if conversation_id is None:
            conversation_id = repository.create_conversation(
                mailbox_id, email_from=email_from, subject=subject
            ).id
        message = repository.add_message(conversation_id, body)
        if index:
            index_conversation_message(message.id, repository, settings=settings)
        return message

    return _store


@pytest.fixture
def sample_body() -> str:
    """Provide the message body used by round-trip search tests."""
    return "Hello World, this is a test."
