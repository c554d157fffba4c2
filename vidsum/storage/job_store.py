"""Job state persistence, in-memory or Redis-backed.

Every write replaces the whole record for one job id; there is no
cross-key transaction.
"""

from __future__ import annotations

import abc
from typing import Optional

import structlog

from vidsum.config import Settings
from vidsum.schemas.common import Job

logger = structlog.get_logger(__name__)


class JobStore(abc.ABC):
    """Mapping from job id to the latest Job record."""

    @abc.abstractmethod
    def put(self, job_id: str, job: Job) -> None:
        """Insert or replace the record stored under ``job_id``."""

    @abc.abstractmethod
    def get(self, job_id: str) -> Optional[Job]:
        """Return the record for ``job_id``, or None if it was never stored."""


class MemoryJobStore(JobStore):
    """Process-local store; records live as long as the process."""

    def __init__(self) -> None:
        self._records: dict[str, Job] = {}

    def put(self, job_id: str, job: Job) -> None:
        # Copy so later mutation of the caller's object cannot leak in
        self._records[job_id] = job.model_copy(deep=True)

    def get(self, job_id: str) -> Optional[Job]:
        job = self._records.get(job_id)
        return job.model_copy(deep=True) if job is not None else None

    def __len__(self) -> int:
        return len(self._records)


class RedisJobStore(JobStore):
    """Store records as JSON strings under ``job:{job_id}``."""

    def __init__(self, client, ttl_seconds: int | None = None) -> None:
        self._client = client
        self._ttl_seconds = ttl_seconds

    @staticmethod
    def _key(job_id: str) -> str:
        return f"job:{job_id}"

    def put(self, job_id: str, job: Job) -> None:
        self._client.set(self._key(job_id), job.model_dump_json(), ex=self._ttl_seconds)

    def get(self, job_id: str) -> Optional[Job]:
        raw = self._client.get(self._key(job_id))
        if not raw:
            return None
        return Job.model_validate_json(raw)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def build_job_store(settings: Settings) -> JobStore:
    """Create the configured store, falling back to memory if Redis is down."""
    if settings.job_store_backend == "redis":
        try:
            import redis as redis_lib

            client = redis_lib.from_url(settings.redis_url, decode_responses=True)
            client.ping()
            logger.info("redis_connected", url=settings.redis_url)
            return RedisJobStore(client, ttl_seconds=settings.job_ttl_seconds)
        except Exception as exc:
            logger.warning(
                "redis_unavailable",
                error=str(exc),
                msg="Falling back to in-memory job store",
            )

    return MemoryJobStore()
