"""Background job building the search index of one stored message."""

from __future__ import annotations

import structlog

from mailbox_search.cleanup import ensure_cleaned_up_text
from mailbox_search.config import Settings, get_settings
from mailbox_search.exceptions import ConversationNotFoundError, MessageNotFoundError
from mailbox_search.search.hashing import SemanticHasher, get_hasher
from mailbox_search.search.index_builder import build_search_index
from mailbox_search.store import MailStoreRepository

logger = structlog.get_logger()


def index_conversation_message(
    message_id: int,
    repository: MailStoreRepository,
    *,
    hasher: SemanticHasher | None = None,
    settings: Settings | None = None,
) -> str:
    """Build and store the search index of a message.

    The index combines the conversation sender and subject with the message's
    cleaned body and replaces the stored value in one update. Running the job
    again for unchanged content writes the same string.

    Args:
        message_id: Message to index.
        repository: Mail store holding the message.
        hasher: Semantic hasher. If None, uses the one named in settings.
        settings: Application settings. If None, uses default settings.

    Returns:
        The stored search index.

    Raises:
        MessageNotFoundError: If the message does not exist.
        ConversationNotFoundError: If the message's conversation does not exist.
        StoreError: If reading or writing the store fails; safe to retry.
    """

    settings = settings or get_settings()
    hasher = hasher or get_hasher(settings)

    message = repository.get_message(message_id)
    if message is None:
        raise MessageNotFoundError(f"Message {message_id} not found")

    conversation = repository.get_conversation(message.conversation_id)
    if conversation is None:
        raise ConversationNotFoundError(f"Conversation {message.conversation_id} not found")

    message_body = ensure_cleaned_up_text(repository, message)

    search_index = build_search_index(
        hasher,
        email_from=conversation.email_from,
        subject=conversation.subject,
        body=message_body,
        max_length=settings.search_index_max_length,
    )

    repository.update_search_index(message.id, search_index)
    logger.info(
        "message_indexed",
        message_id=message.id,
        conversation_id=conversation.id,
        hasher=hasher.name,
        index_length=len(search_index),
    )
    return search_index
