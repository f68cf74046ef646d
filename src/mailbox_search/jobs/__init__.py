"""Background jobs.

Indexing runs as a job per stored message. The job runner owns the retry
policy: transient failures are retried, non-retriable ones are not.
"""

from __future__ import annotations

from functools import partial

from mailbox_search.config import Settings
from mailbox_search.search.hashing import get_hasher
from mailbox_search.store import MailStoreRepository

from .index_message import index_conversation_message
from .runner import JobRecord, JobRunner

INDEX_MESSAGE_JOB = "index_conversation_message"


def build_job_runner(repository: MailStoreRepository, settings: Settings) -> JobRunner:
    """Create a job runner with the indexing job registered."""

    runner = JobRunner(
        max_retries=settings.max_retries,
        retry_delay=settings.retry_delay,
        retry_backoff=settings.retry_backoff,
        max_workers=settings.index_workers,
    )
    runner.register(
        INDEX_MESSAGE_JOB,
        partial(
            index_conversation_message,
            repository=repository,
            hasher=get_hasher(settings),
            settings=settings,
        ),
    )
    return runner


__all__ = [
    "INDEX_MESSAGE_JOB",
    "JobRecord",
    "JobRunner",
    "build_job_runner",
    "index_conversation_message",
]
