"""In-process job runner with retry policy.

Jobs are queued by name with keyword payloads and executed on demand.
Transient failures are retried with exponential backoff; a
``NonRetriableError`` ends the job immediately in the ``dead`` state.
"""

from __future__ import annotations

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from mailbox_search.exceptions import NonRetriableError, ValidationError
from mailbox_search.utils import retry_on_failure

logger = structlog.get_logger()

JobHandler = Callable[..., Any]


@dataclass
class JobRecord:
    job_id: str
    name: str
    payload: dict[str, Any]
    state: str
    attempts: int
    enqueued_at: datetime
    updated_at: datetime
    error: str | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _make_job_id(name: str) -> str:
    stamp = _now().strftime("%Y%m%d-%H%M%S")
    return f"job-{stamp}-{name}-{uuid.uuid4().hex[:6]}"


class JobRunner:
    """Queue and execute named jobs."""

    def __init__(
        self,
        *,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        retry_backoff: float = 2.0,
        max_workers: int = 1,
    ) -> None:
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._retry_backoff = retry_backoff
        self._max_workers = max_workers
        self._handlers: dict[str, JobHandler] = {}
        self._jobs: dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    def register(self, name: str, handler: JobHandler) -> None:
        self._handlers[name] = handler

    def enqueue(self, name: str, **payload: Any) -> str:
        """Queue a job and return its id."""

        if name not in self._handlers:
            raise ValidationError(f"Unknown job: {name!r}")

        now = _now()
        job = JobRecord(
            job_id=_make_job_id(name),
            name=name,
            payload=payload,
            state="queued",
            attempts=0,
            enqueued_at=now,
            updated_at=now,
        )
        with self._lock:
            self._jobs[job.job_id] = job
        logger.debug("job_enqueued", job_id=job.job_id, job=name)
        return job.job_id

    def get(self, job_id: str) -> JobRecord | None:
        with self._lock:
            return self._jobs.get(job_id)

    def run_pending(self) -> list[JobRecord]:
        """Execute every queued job and return their records."""

        with self._lock:
            pending = [job for job in self._jobs.values() if job.state == "queued"]
            for job in pending:
                job.state = "running"
                job.updated_at = _now()

        if self._max_workers > 1 and len(pending) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                list(pool.map(self._execute, pending))
        else:
            for job in pending:
                self._execute(job)

        return pending

    def _execute(self, job: JobRecord) -> None:
        handler = self._handlers[job.name]

        @retry_on_failure(
            max_retries=self._max_retries,
            delay=self._retry_delay,
            backoff=self._retry_backoff,
            give_up_on=(NonRetriableError,),
        )
        def attempt() -> Any:
            with self._lock:
                job.attempts += 1
            return handler(**job.payload)

        try:
            attempt()
        except NonRetriableError as exc:
            self._finish(job, "dead", str(exc))
            logger.warning("job_dead", job_id=job.job_id, job=job.name, error=str(exc))
            return
        except Exception as exc:  # noqa: BLE001
            self._finish(job, "failed", str(exc))
            logger.error(
                "job_failed",
                job_id=job.job_id,
                job=job.name,
                attempts=job.attempts,
                error=str(exc),
            )
            return

        self._finish(job, "succeeded", None)
        logger.info("job_succeeded", job_id=job.job_id, job=job.name, attempts=job.attempts)

    def _finish(self, job: JobRecord, state: str, error: str | None) -> None:
        with self._lock:
            job.state = state
            job.error = error
            job.updated_at = _now()
